"""Tests for Claude-backed message drafting.

The Anthropic client is always mocked; no network calls are made.
"""

from unittest.mock import MagicMock, patch

import anthropic
import httpx
import pytest

from keepwarm.ai.drafts import (
    MAX_TOKENS,
    SYSTEM_PROMPT,
    GenerativeDrafter,
)
from keepwarm.core.exceptions import GenerationFailure
from keepwarm.db.models import Energy, Language, Tone

API_URL = "https://api.anthropic.com/v1/messages"


@pytest.fixture
def keyed_config(mock_config):
    mock_config.claude_api_key = "sk-test"
    mock_config.generation_timeout = 4.0
    return mock_config


@pytest.fixture
def drafter(keyed_config):
    return GenerativeDrafter(keyed_config)


def _response(text: str) -> MagicMock:
    block = MagicMock()
    block.type = "text"
    block.text = text
    response = MagicMock()
    response.content = [block]
    response.usage.input_tokens = 120
    response.usage.output_tokens = 80
    return response


def _client(response=None, error=None) -> MagicMock:
    client = MagicMock()
    if error is not None:
        client.messages.create.side_effect = error
    else:
        client.messages.create.return_value = response
    return client


# =============================================================================
# AVAILABILITY / CLIENT
# =============================================================================


class TestAvailability:
    def test_unavailable_without_key(self, mock_config):
        assert not GenerativeDrafter(mock_config).is_available()

    def test_available_with_key(self, drafter):
        assert drafter.is_available()

    def test_no_key_is_generation_failure(self, mock_config, sample_contact):
        with pytest.raises(GenerationFailure, match="not available"):
            GenerativeDrafter(mock_config).draft(sample_contact, Energy.LOW, Language.EN)

    def test_client_has_timeout_and_no_retries(self, drafter):
        with patch("anthropic.Anthropic") as mock_cls:
            drafter._get_client()
        mock_cls.assert_called_once_with(api_key="sk-test", timeout=4.0, max_retries=0)


# =============================================================================
# PROMPT
# =============================================================================


class TestBuildPrompt:
    def test_includes_context(self, drafter, sample_contact):
        prompt = drafter.build_prompt(sample_contact, Energy.MEDIUM, Language.EN)
        assert "Name: Mike" in prompt
        assert "Working on: Q1 marketing campaign" in prompt
        assert "How I can add value: growth experiments" in prompt
        assert "Company: GrowthCorp" in prompt
        assert "Energy level: medium" in prompt
        assert "Generate messages in English." in prompt

    def test_omits_empty_fields(self, drafter, bare_contact):
        prompt = drafter.build_prompt(bare_contact, Energy.HIGH, Language.FR)
        assert "Working on" not in prompt
        assert "Company" not in prompt
        assert "call or meeting" in prompt
        assert '"tu" form' in prompt


# =============================================================================
# RESPONSE PARSING
# =============================================================================


class TestParseResponse:
    def test_numbered_lines(self, drafter):
        drafts = drafter.parse_response("1. Hi there\n2) How's it going?\n3. Coffee soon?")
        assert [d.text for d in drafts] == ["Hi there", "How's it going?", "Coffee soon?"]
        assert [d.tone for d in drafts] == [Tone.WARM, Tone.PROFESSIONAL, Tone.CASUAL]

    def test_ignores_preamble_when_numbered(self, drafter):
        text = "Here are three messages:\n\n1. One\n2. Two\n3. Three\n\nHope these help!"
        assert [d.text for d in drafter.parse_response(text)] == ["One", "Two", "Three"]

    def test_partly_numbered_reply_keeps_unnumbered_messages(self, drafter):
        text = "Here you go:\n1. Hey Sam!\nHope all is well\nLet's grab coffee"
        drafts = drafter.parse_response(text)
        assert [d.text for d in drafts] == ["Hey Sam!", "Hope all is well", "Let's grab coffee"]

    def test_unnumbered_lines_accepted(self, drafter):
        drafts = drafter.parse_response("One\n\nTwo\nThree\nFour")
        assert [d.text for d in drafts] == ["One", "Two", "Three"]

    def test_strips_quotes(self, drafter):
        drafts = drafter.parse_response('1. "Hey!"\n2. “Salut !”\n3. Plain')
        assert [d.text for d in drafts] == ["Hey!", "Salut !", "Plain"]

    @pytest.mark.parametrize("text", ["", "1. Only one", "1. One\n2. Two"])
    def test_too_few_messages(self, drafter, text):
        with pytest.raises(GenerationFailure):
            drafter.parse_response(text)


# =============================================================================
# API CALL
# =============================================================================


class TestDraft:
    def test_success(self, drafter, sample_contact, keyed_config):
        client = _client(_response("1. A\n2. B\n3. C"))
        drafter._client = client

        drafts = drafter.draft(sample_contact, Energy.HIGH, Language.EN)

        assert [d.text for d in drafts] == ["A", "B", "C"]
        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["model"] == keyed_config.claude_model
        assert kwargs["max_tokens"] == MAX_TOKENS
        assert kwargs["system"] == SYSTEM_PROMPT
        assert kwargs["messages"][0]["role"] == "user"
        assert "Energy level: high" in kwargs["messages"][0]["content"]

    def test_timeout(self, drafter, sample_contact):
        drafter._client = _client(
            error=anthropic.APITimeoutError(request=httpx.Request("POST", API_URL))
        )
        with pytest.raises(GenerationFailure, match="timed out"):
            drafter.draft(sample_contact, Energy.LOW, Language.EN)

    def test_error_status(self, drafter, sample_contact):
        request = httpx.Request("POST", API_URL)
        error = anthropic.APIStatusError(
            "overloaded",
            response=httpx.Response(529, request=request),
            body=None,
        )
        drafter._client = _client(error=error)
        with pytest.raises(GenerationFailure, match="529"):
            drafter.draft(sample_contact, Energy.LOW, Language.EN)

    def test_connection_error(self, drafter, sample_contact):
        drafter._client = _client(
            error=anthropic.APIConnectionError(request=httpx.Request("POST", API_URL))
        )
        with pytest.raises(GenerationFailure):
            drafter.draft(sample_contact, Energy.LOW, Language.EN)

    def test_malformed_response(self, drafter, sample_contact):
        response = MagicMock()
        response.content = None
        drafter._client = _client(response)
        with pytest.raises(GenerationFailure, match="Malformed"):
            drafter.draft(sample_contact, Energy.LOW, Language.EN)

    def test_unparseable_reply(self, drafter, sample_contact):
        drafter._client = _client(_response("Sorry, I can't help with that."))
        with pytest.raises(GenerationFailure):
            drafter.draft(sample_contact, Energy.LOW, Language.EN)
