"""Shared Claude API client mixin.

Keeps lazy client construction and the availability check in one place
for anything that talks to the Anthropic API.
"""

from typing import Any, Optional

import anthropic

from keepwarm.core.config import Config, get_config
from keepwarm.core.logging import get_logger

logger = get_logger(__name__)


class ClaudeClientMixin:
    """Mixin providing lazy Anthropic client initialization.

    Classes using this mixin should set ``self._client = None`` in
    their own ``__init__``.
    """

    _client: Optional[Any] = None

    def _get_claude_config(self) -> Config:
        """Return the app config (override if config is stored differently)."""
        return get_config()

    def is_available(self) -> bool:
        """Check if the Claude API key is configured."""
        return bool(self._get_claude_config().claude_api_key)

    def _get_client(self) -> Any:
        """Get or create the Anthropic client (lazy singleton).

        The client carries the configured timeout and makes no retries of
        its own; callers decide what to do on failure.

        Raises:
            RuntimeError: If no API key is configured
        """
        if self._client is None:
            config = self._get_claude_config()
            if not config.claude_api_key:
                raise RuntimeError("CLAUDE_API_KEY not configured")
            self._client = anthropic.Anthropic(
                api_key=config.claude_api_key,
                timeout=config.generation_timeout,
                max_retries=0,
            )
        return self._client

    def _log_usage(self, caller: str, model: str, input_tokens: int, output_tokens: int) -> None:
        """Record API token usage in the log."""
        logger.debug(
            "Claude usage",
            extra={
                "context": {
                    "caller": caller,
                    "model": model,
                    "input_tokens": input_tokens,
                    "output_tokens": output_tokens,
                }
            },
        )
