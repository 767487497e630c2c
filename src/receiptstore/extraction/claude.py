"""Claude API extraction backend."""

from __future__ import annotations

import importlib.util
import json
import logging

from ..receipt.candidate import CandidateRecord
from .base import GenerativeExtractor


logger = logging.getLogger(__name__)

_INSTRUCTIONS = """\
Reply with a single JSON object (no other text) matching this JSON schema.
Use null for anything that is not on the receipt.
"""


class ClaudeExtractor(GenerativeExtractor):
    """Extract receipt fields with Claude's Messages API."""

    name = "claude"

    def __init__(self, api_key: str = "", model: str = "claude-sonnet-4-5-20250929") -> None:
        self._api_key = api_key
        self._model = model

    async def available(self) -> bool:
        if not self._api_key:
            logger.info("ANTHROPIC_API_KEY is not set")
            return False
        if importlib.util.find_spec("anthropic") is None:
            logger.warning("anthropic SDK is not installed: pip install 'receiptstore[claude]'")
            return False
        return True

    async def extract(self, prompt: str) -> CandidateRecord:
        if not self._api_key:
            raise ValueError("Anthropic API key is not configured. Set ANTHROPIC_API_KEY.")

        try:
            import anthropic
        except ImportError:
            raise ImportError("anthropic SDK is required: pip install anthropic") from None

        schema = json.dumps(CandidateRecord.model_json_schema(), ensure_ascii=False)
        client = anthropic.AsyncAnthropic(api_key=self._api_key)
        response = await client.messages.create(
            model=self._model,
            max_tokens=4096,
            system=f"{_INSTRUCTIONS}\n{schema}",
            messages=[{"role": "user", "content": prompt}],
        )

        text = response.content[0].text
        return _parse_response(text)


def _parse_response(text: str) -> CandidateRecord:
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = cleaned.split("\n")
        lines = [ln for ln in lines[1:] if not ln.strip().startswith("```")]
        cleaned = "\n".join(lines)
    return CandidateRecord.model_validate_json(cleaned)
