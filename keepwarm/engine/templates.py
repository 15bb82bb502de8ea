"""Template-based message drafts using Jinja2.

Deterministic fallback (and sole tier without an API key) for message
suggestions. Rules are keyed by (language, energy):

    - low:    light check-ins
    - medium: asks about what they are working on / offers value
    - high:   proposes a call or a proper catch-up

Medium energy has conditional drafts that only render when the
contact's working_on or how_i_can_add_value field is filled in; they
come before the generic draft. Results are padded with a casual
catch-all and cut to exactly three.

Usage:
    from keepwarm.engine.templates import render_drafts

    drafts = render_drafts(contact, Energy.MEDIUM, Language.FR)
"""

from dataclasses import dataclass
from typing import Optional

import jinja2

from keepwarm.core.logging import get_logger
from keepwarm.db.models import Contact, Energy, Language, MessageDraft, Tone

logger = get_logger(__name__)

DRAFT_COUNT = 3


@dataclass(frozen=True)
class TemplateRule:
    """One draft in the rule table.

    Attributes:
        source: Jinja2 template text
        tone: Tone label for the rendered draft
        requires: Contact field that must be non-empty for this rule to apply
    """

    source: str
    tone: Tone
    requires: Optional[str] = None


TEMPLATE_RULES: dict[tuple[Language, Energy], tuple[TemplateRule, ...]] = {
    # English
    (Language.EN, Energy.LOW): (
        TemplateRule(
            "Hey {{ name }}! Hope you're doing well. Just thinking of you and wanted "
            "to check in. How are things going?",
            Tone.WARM,
        ),
        TemplateRule(
            "Hi {{ name }}, hope all is well with you! Would love to catch up soon.",
            Tone.CASUAL,
        ),
        TemplateRule(
            "{{ name }}, hope you're having a great week! Sending good vibes your way.",
            Tone.WARM,
        ),
    ),
    (Language.EN, Energy.MEDIUM): (
        TemplateRule(
            "Hey {{ name }}! How's the {{ working_on }} project going? Would love to hear "
            "an update when you have a moment.",
            Tone.PROFESSIONAL,
            requires="working_on",
        ),
        TemplateRule(
            "Hi {{ name }}! I saw something interesting about {{ how_i_can_add_value }} and "
            "thought of you. Want to share it over coffee sometime?",
            Tone.WARM,
            requires="how_i_can_add_value",
        ),
        TemplateRule(
            "{{ name }}, been thinking about our last conversation. How have things been progressing?",
            Tone.PROFESSIONAL,
        ),
    ),
    (Language.EN, Energy.HIGH): (
        TemplateRule(
            "{{ name }}! Would love to catch up properly. Are you free for a 15-min call this "
            "week? I have some ideas I'd love to bounce off you.",
            Tone.PROFESSIONAL,
        ),
        TemplateRule(
            "Hey {{ name }}, I've been working on something that could be really relevant to "
            "you. Mind if I give you a quick call to share?",
            Tone.PROFESSIONAL,
        ),
        TemplateRule(
            "{{ name }}, hope you're crushing it! I'd love to schedule a proper catch-up call. "
            "When works best for you?",
            Tone.WARM,
        ),
    ),
    # French (informal "tu")
    (Language.FR, Energy.LOW): (
        TemplateRule(
            "Salut {{ name }} ! J'espère que tu vas bien. Je pensais à toi et voulais prendre "
            "de tes nouvelles. Comment ça se passe ?",
            Tone.WARM,
        ),
        TemplateRule(
            "Coucou {{ name }}, j'espère que tout va bien pour toi ! J'aimerais qu'on se "
            "rattrape bientôt.",
            Tone.CASUAL,
        ),
        TemplateRule(
            "{{ name }}, j'espère que tu passes une excellente semaine ! Je t'envoie de bonnes ondes.",
            Tone.WARM,
        ),
    ),
    (Language.FR, Energy.MEDIUM): (
        TemplateRule(
            "Salut {{ name }} ! Comment avance le projet {{ working_on }} ? J'aimerais avoir "
            "des nouvelles quand tu auras un moment.",
            Tone.PROFESSIONAL,
            requires="working_on",
        ),
        TemplateRule(
            "Salut {{ name }} ! J'ai vu quelque chose d'intéressant sur {{ how_i_can_add_value }} "
            "et j'ai pensé à toi. Ça te dit qu'on en parle autour d'un café ?",
            Tone.WARM,
            requires="how_i_can_add_value",
        ),
        TemplateRule(
            "{{ name }}, je repensais à notre dernière conversation. Comment les choses "
            "ont-elles évolué ?",
            Tone.PROFESSIONAL,
        ),
    ),
    (Language.FR, Energy.HIGH): (
        TemplateRule(
            "{{ name }} ! J'aimerais vraiment qu'on se rattrape comme il faut. Tu es libre pour "
            "un appel de 15 min cette semaine ? J'ai des idées à partager avec toi.",
            Tone.PROFESSIONAL,
        ),
        TemplateRule(
            "Salut {{ name }}, je travaille sur quelque chose qui pourrait vraiment "
            "t'intéresser. Ça te dérange si je t'appelle rapidement pour t'en parler ?",
            Tone.PROFESSIONAL,
        ),
        TemplateRule(
            "{{ name }}, j'espère que tu déchires tout ! J'aimerais qu'on programme un vrai "
            "rattrapage. Quand est-ce qui t'arrange le mieux ?",
            Tone.WARM,
        ),
    ),
}

# Padding draft when a rule set yields fewer than three
CATCH_ALL_RULES: dict[Language, TemplateRule] = {
    Language.EN: TemplateRule(
        "Hey {{ name }}! How are things going? Would love to catch up soon.", Tone.CASUAL
    ),
    Language.FR: TemplateRule(
        "Salut {{ name }} ! Comment ça va ? J'aimerais qu'on se rattrape bientôt.", Tone.CASUAL
    ),
}

# Jinja2 environment (created once, reused)
_env: Optional[jinja2.Environment] = None
_compiled: dict[str, jinja2.Template] = {}


def _get_env() -> jinja2.Environment:
    """Get or create the Jinja2 environment.

    Plain-text messages: no autoescaping, and a missing variable is an
    error rather than silently blank.
    """
    global _env
    if _env is None:
        _env = jinja2.Environment(
            autoescape=False,
            undefined=jinja2.StrictUndefined,
        )
    return _env


def _render(rule: TemplateRule, context: dict[str, str]) -> str:
    template = _compiled.get(rule.source)
    if template is None:
        template = _get_env().from_string(rule.source)
        _compiled[rule.source] = template
    return template.render(**context)


def _field_text(contact: Contact, name: str) -> str:
    value = getattr(contact, name, None)
    return value.strip() if value else ""


def render_drafts(contact: Contact, energy: Energy, language: Language) -> list[MessageDraft]:
    """Render exactly three drafts for a contact.

    Args:
        contact: Recipient
        energy: Effort level
        language: Output language

    Returns:
        Three MessageDraft objects, deterministic for the same input
    """
    context = {
        "name": contact.display_name,
        "working_on": _field_text(contact, "working_on"),
        "how_i_can_add_value": _field_text(contact, "how_i_can_add_value"),
    }

    applicable = [
        rule
        for rule in TEMPLATE_RULES[(language, energy)]
        if rule.requires is None or context[rule.requires]
    ]
    while len(applicable) < DRAFT_COUNT:
        applicable.append(CATCH_ALL_RULES[language])

    drafts = [MessageDraft(text=_render(rule, context), tone=rule.tone) for rule in applicable]
    logger.debug(
        "Template drafts rendered",
        extra={
            "context": {
                "contact_id": contact.id,
                "energy": energy.value,
                "language": language.value,
                "candidates": len(drafts),
            }
        },
    )
    return drafts[:DRAFT_COUNT]
