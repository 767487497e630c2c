import json
import sys
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pydantic import ValidationError

from receiptstore.extraction.base import FallbackStrategy
from receiptstore.extraction.claude import ClaudeExtractor, _parse_response
from receiptstore.extraction.factory import create_extractor
from receiptstore.extraction.ollama import OllamaExtractor
from receiptstore.extraction.selector import select_strategy
from receiptstore.http_client import HttpRequestError, get_json
from receiptstore.settings import Settings


CANDIDATE_JSON = json.dumps(
    {
        "store_name": "Joe's Diner",
        "date": "2024-03-15",
        "total": 18.5,
        "payment_method": "Credit Card",
        "items": [{"name": "Pancakes", "quantity": 2, "price": 7.25}],
    }
)


def test_create_extractor_by_name() -> None:
    assert isinstance(create_extractor(Settings()), OllamaExtractor)
    assert isinstance(create_extractor(Settings(extractor="claude")), ClaudeExtractor)
    assert create_extractor(Settings(extractor="none")) is None


def test_create_extractor_rejects_unknown_backend() -> None:
    with pytest.raises(ValueError, match="Unknown extractor backend"):
        create_extractor(Settings(extractor="gpt"))


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RECEIPTSTORE_EXTRACTOR", " Claude ")
    monkeypatch.setenv("OLLAMA_TIMEOUT_S", "12.5")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")

    settings = Settings.from_env()

    assert settings.extractor == "claude"
    assert settings.ollama_timeout_s == 12.5
    assert settings.anthropic_api_key == "sk-test"


@pytest.mark.asyncio
async def test_ollama_available_when_model_is_pulled() -> None:
    tags = {"models": [{"name": "llama3.2:latest"}, {"name": "mistral:7b"}]}
    with patch("receiptstore.extraction.ollama.get_json", return_value=tags) as tags_call:
        assert await OllamaExtractor("http://ollama:11434/", "llama3.2").available() is True

    assert tags_call.call_args.args[0] == "http://ollama:11434/api/tags"


@pytest.mark.asyncio
async def test_ollama_unavailable_when_model_missing_or_server_down() -> None:
    with patch("receiptstore.extraction.ollama.get_json", return_value={"models": []}):
        assert await OllamaExtractor().available() is False

    with patch("receiptstore.extraction.ollama.get_json", side_effect=HttpRequestError("refused")):
        assert await OllamaExtractor().available() is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "get_json_kwargs",
    [
        {"side_effect": ConnectionResetError("Remote end closed connection")},
        {"return_value": ["not", "a", "dict"]},
        {"return_value": {"models": "llama3.2"}},
    ],
)
async def test_ollama_tag_lookup_failures_route_to_fallback(get_json_kwargs: dict) -> None:
    with patch("receiptstore.extraction.ollama.get_json", **get_json_kwargs):
        extractor = OllamaExtractor()
        assert await extractor.available() is False
        assert isinstance(await select_strategy(extractor), FallbackStrategy)


@pytest.mark.asyncio
async def test_ollama_extract_sends_schema_and_parses_response() -> None:
    with patch(
        "receiptstore.extraction.ollama.post_json", return_value={"response": CANDIDATE_JSON}
    ) as post_json:
        record = await OllamaExtractor(model="llama3.2").extract("PROMPT")

    url, payload = post_json.call_args.args
    assert url.endswith("/api/generate")
    assert payload["prompt"] == "PROMPT"
    assert payload["stream"] is False
    assert "store_name" in payload["format"]["properties"]
    assert record.store_name == "Joe's Diner"
    assert record.items[0].quantity == 2


@pytest.mark.asyncio
async def test_ollama_extract_rejects_empty_response() -> None:
    with patch("receiptstore.extraction.ollama.post_json", return_value={"response": ""}):
        with pytest.raises(ValueError, match="no response"):
            await OllamaExtractor().extract("PROMPT")


def test_claude_parse_response_strips_markdown_fences() -> None:
    record = _parse_response(f"```json\n{CANDIDATE_JSON}\n```")

    assert record.total == 18.5
    assert record.payment_method == "Credit Card"


def test_claude_parse_response_rejects_malformed_json() -> None:
    with pytest.raises(ValidationError):
        _parse_response("I could not read this receipt.")


@pytest.mark.asyncio
async def test_claude_unavailable_without_api_key() -> None:
    assert await ClaudeExtractor(api_key="").available() is False


@pytest.mark.asyncio
async def test_claude_extract_requires_api_key() -> None:
    with pytest.raises(ValueError, match="API key"):
        await ClaudeExtractor(api_key="").extract("PROMPT")


@pytest.mark.asyncio
async def test_claude_extract_mocked() -> None:
    mock_response = MagicMock()
    mock_response.content = [MagicMock(text=CANDIDATE_JSON)]

    mock_client = AsyncMock()
    mock_client.messages.create = AsyncMock(return_value=mock_response)

    mock_anthropic = MagicMock()
    mock_anthropic.AsyncAnthropic.return_value = mock_client

    with patch.dict(sys.modules, {"anthropic": mock_anthropic}):
        record = await ClaudeExtractor(api_key="test-key").extract("PROMPT")

    kwargs = mock_client.messages.create.call_args.kwargs
    assert kwargs["messages"] == [{"role": "user", "content": "PROMPT"}]
    assert "store_name" in kwargs["system"]
    assert record.store_name == "Joe's Diner"


def test_http_client_wraps_dropped_connections() -> None:
    with patch("receiptstore.http_client.urllib.request.urlopen", side_effect=ConnectionResetError("reset")):
        with pytest.raises(HttpRequestError, match="ConnectionResetError"):
            get_json("http://ollama:11434/api/tags")
