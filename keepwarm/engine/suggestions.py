"""Message suggestion engine.

Produces exactly three tone-labeled drafts for a contact. Drafting
strategies are tried in order; a strategy that raises (GenerationFailure
for expected backend problems, anything else for bugs) or returns the
wrong number of drafts is logged and skipped:

    1. Generative (Claude), only when CLAUDE_API_KEY is configured
    2. Templates, deterministic, never fails

suggest() never raises for backend problems. Only invalid energy or
language values (caller errors) raise ValidationError.

Usage:
    from keepwarm.engine.suggestions import MessageSuggestionEngine

    engine = MessageSuggestionEngine()
    drafts = engine.suggest(contact, energy="high", language="fr")
"""

from typing import Optional, Protocol, Sequence, Union

from keepwarm.ai.drafts import GenerativeDrafter
from keepwarm.core.config import Config
from keepwarm.core.exceptions import GenerationFailure
from keepwarm.core.logging import get_logger
from keepwarm.db.models import (
    Contact,
    Energy,
    Language,
    MessageDraft,
    parse_energy,
    parse_language,
)
from keepwarm.engine.templates import DRAFT_COUNT, render_drafts

logger = get_logger(__name__)


class DraftStrategy(Protocol):
    """One tier of the suggestion pipeline."""

    name: str

    def is_enabled(self) -> bool: ...

    def generate(
        self, contact: Contact, energy: Energy, language: Language
    ) -> list[MessageDraft]: ...


class GenerativeStrategy:
    """Claude-backed drafts. Enabled only with an API key."""

    name = "generative"

    def __init__(self, drafter: GenerativeDrafter) -> None:
        self._drafter = drafter

    def is_enabled(self) -> bool:
        return self._drafter.is_available()

    def generate(self, contact: Contact, energy: Energy, language: Language) -> list[MessageDraft]:
        return self._drafter.draft(contact, energy, language)


class TemplateStrategy:
    """Rule-table drafts rendered with Jinja2."""

    name = "template"

    def is_enabled(self) -> bool:
        return True

    def generate(self, contact: Contact, energy: Energy, language: Language) -> list[MessageDraft]:
        return render_drafts(contact, energy, language)


class MessageSuggestionEngine:
    """Ordered strategy list with silent fallback."""

    def __init__(
        self,
        strategies: Optional[Sequence[DraftStrategy]] = None,
        config: Optional[Config] = None,
    ) -> None:
        """Initialize engine.

        Args:
            strategies: Tiers to try in order. Defaults to generative then template.
            config: Configuration for the default generative tier
        """
        if strategies is None:
            strategies = [GenerativeStrategy(GenerativeDrafter(config)), TemplateStrategy()]
        self._strategies = list(strategies)

    def suggest(
        self,
        contact: Contact,
        energy: Union[Energy, str] = Energy.MEDIUM,
        language: Union[Language, str] = Language.EN,
    ) -> list[MessageDraft]:
        """Draft three messages for a contact.

        Args:
            contact: Recipient
            energy: low / medium / high
            language: en / fr

        Returns:
            Exactly three MessageDraft objects

        Raises:
            ValidationError: If energy or language is unknown
        """
        energy = parse_energy(energy)
        language = parse_language(language)

        for strategy in self._strategies:
            if not strategy.is_enabled():
                continue
            try:
                drafts = strategy.generate(contact, energy, language)
            except GenerationFailure as e:
                logger.warning(
                    "Draft strategy failed, falling back",
                    extra={
                        "context": {
                            "strategy": strategy.name,
                            "contact_id": contact.id,
                            "error": str(e),
                        }
                    },
                )
                continue
            except Exception as e:
                # Bugs in a tier must not cost the user their suggestions
                logger.warning(
                    "Draft strategy crashed, falling back",
                    exc_info=True,
                    extra={
                        "context": {
                            "strategy": strategy.name,
                            "contact_id": contact.id,
                            "error": f"{type(e).__name__}: {e}",
                        }
                    },
                )
                continue

            if len(drafts) != DRAFT_COUNT:
                logger.warning(
                    "Draft strategy returned wrong count, falling back",
                    extra={"context": {"strategy": strategy.name, "count": len(drafts)}},
                )
                continue

            logger.debug(
                "Suggestions ready",
                extra={"context": {"strategy": strategy.name, "contact_id": contact.id}},
            )
            return drafts

        # Every configured tier failed; templates are the floor
        return render_drafts(contact, energy, language)
