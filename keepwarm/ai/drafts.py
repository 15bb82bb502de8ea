"""AI-powered message drafting using Claude.

Generative tier of the message suggestion engine. Builds a prompt from
the contact's context, the requested energy and language, makes one
bounded API call, and turns the numbered reply into three drafts.

Any problem (no key, network error, timeout, error status, unusable
reply) is raised as GenerationFailure so the engine can fall
back to templates.

Usage:
    from keepwarm.ai.drafts import GenerativeDrafter

    drafter = GenerativeDrafter()
    if drafter.is_available():
        drafts = drafter.draft(contact, Energy.HIGH, Language.EN)
"""

import re
from typing import Optional

import anthropic

from keepwarm.ai.claude_client import ClaudeClientMixin
from keepwarm.core.config import Config, get_config
from keepwarm.core.exceptions import GenerationFailure
from keepwarm.core.logging import get_logger
from keepwarm.db.models import Contact, Energy, Language, MessageDraft, Tone

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful assistant that generates personalized, natural WhatsApp messages "
    "for staying in touch with contacts. Keep messages concise, warm, and authentic."
)

ENERGY_INSTRUCTIONS: dict[Energy, str] = {
    Energy.LOW: (
        "Generate a short, friendly check-in message (1-2 sentences). Keep it light and caring."
    ),
    Energy.MEDIUM: (
        "Generate a message that offers value or asks about their current projects. "
        "Show genuine interest."
    ),
    Energy.HIGH: (
        "Generate a message proposing a specific action like a call or meeting. "
        "Be direct but warm."
    ),
}

LANGUAGE_INSTRUCTIONS: dict[Language, str] = {
    Language.EN: "Generate messages in English.",
    Language.FR: (
        'Generate messages in French. Use informal "tu" form and natural French expressions.'
    ),
}

# Tones assigned to parsed lines, in order
TONE_CYCLE = (Tone.WARM, Tone.PROFESSIONAL, Tone.CASUAL)

MAX_TOKENS = 300
TEMPERATURE = 0.8

_ENUMERATION = re.compile(r"^\s*\d+\s*[.)]\s*")
_QUOTES = ('"', "“", "”")


class GenerativeDrafter(ClaudeClientMixin):
    """Drafts outreach messages with the Claude API."""

    def __init__(self, config: Optional[Config] = None) -> None:
        """Initialize drafter.

        Args:
            config: Configuration to use (defaults to the app config)
        """
        self._config = config or get_config()
        self._client: Optional[object] = None

    def _get_claude_config(self) -> Config:
        return self._config

    def draft(self, contact: Contact, energy: Energy, language: Language) -> list[MessageDraft]:
        """Generate three drafts for a contact.

        Raises:
            GenerationFailure: If no usable drafts could be produced
        """
        prompt = self.build_prompt(contact, energy, language)
        text = self._call_api(prompt)
        return self.parse_response(text)

    def _call_api(self, prompt: str) -> str:
        """Make the single bounded API call and return its text."""
        try:
            client = self._get_client()
        except RuntimeError as e:
            raise GenerationFailure(f"Claude not available: {e}") from e

        model = self._config.claude_model
        try:
            response = client.messages.create(
                model=model,
                max_tokens=MAX_TOKENS,
                temperature=TEMPERATURE,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APITimeoutError as e:
            raise GenerationFailure(
                f"Claude call timed out after {self._config.generation_timeout}s"
            ) from e
        except anthropic.APIStatusError as e:
            raise GenerationFailure(f"Claude returned HTTP {e.status_code}") from e
        except anthropic.APIError as e:
            raise GenerationFailure(f"Claude call failed: {e}") from e

        try:
            text = "".join(
                block.text for block in response.content if getattr(block, "type", "") == "text"
            )
            self._log_usage(
                "drafts", model, response.usage.input_tokens, response.usage.output_tokens
            )
        except (AttributeError, TypeError) as e:
            raise GenerationFailure(f"Malformed Claude response: {e}") from e

        return text

    def parse_response(self, text: str) -> list[MessageDraft]:
        """Turn a numbered reply into three tone-labeled drafts.

        Blank lines are dropped and leading "1." / "2)" markers stripped.
        When the reply numbers its messages, anything before the first
        numbered line is a preamble and skipped. The first three remaining
        lines become the drafts, numbered or not, so a model that numbers
        only its first message still yields three.

        Raises:
            GenerationFailure: If fewer than three messages are found
        """
        lines = [line.strip() for line in text.splitlines() if line.strip()]
        for index, line in enumerate(lines):
            if _ENUMERATION.match(line):
                lines = lines[index:]
                break

        messages = []
        for line in lines:
            message = _ENUMERATION.sub("", line).strip()
            if len(message) >= 2 and message[0] in _QUOTES and message[-1] in _QUOTES:
                message = message[1:-1].strip()
            if message:
                messages.append(message)

        if len(messages) < len(TONE_CYCLE):
            raise GenerationFailure(
                f"Expected {len(TONE_CYCLE)} messages, got {len(messages)}"
            )

        return [
            MessageDraft(text=message, tone=tone)
            for message, tone in zip(messages[: len(TONE_CYCLE)], TONE_CYCLE)
        ]

    def build_prompt(self, contact: Contact, energy: Energy, language: Language) -> str:
        """Build the user prompt from contact context."""
        parts = [f"Name: {contact.display_name}"]
        if contact.working_on:
            parts.append(f"Working on: {contact.working_on}")
        if contact.current_situation:
            parts.append(f"Current situation: {contact.current_situation}")
        if contact.how_i_can_add_value:
            parts.append(f"How I can add value: {contact.how_i_can_add_value}")
        if contact.company:
            parts.append(f"Company: {contact.company}")
        if contact.role:
            parts.append(f"Role: {contact.role}")

        context = "\n".join(parts)

        return "\n".join(
            [
                "Generate 3 personalized WhatsApp messages for staying in touch "
                "with this contact:",
                "",
                context,
                "",
                f"Energy level: {energy.value}",
                f"Instructions: {ENERGY_INSTRUCTIONS[energy]}",
                "",
                "Requirements:",
                f"- {LANGUAGE_INSTRUCTIONS[language]}",
                "- Keep messages natural and conversational",
                "- Avoid being salesy or overly formal",
                "- Make it sound like it's from a friend who genuinely cares",
                "- Each message should be different in approach",
                "- Number each message (1, 2, 3), one message per line",
            ]
        )
