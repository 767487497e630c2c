"""Local language model extraction through an Ollama server."""

from __future__ import annotations

import asyncio
import logging

from ..http_client import get_json, post_json
from ..receipt.candidate import CandidateRecord
from .base import GenerativeExtractor


logger = logging.getLogger(__name__)


class OllamaExtractor(GenerativeExtractor):
    name = "ollama"

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:11434",
        model: str = "llama3.2",
        *,
        timeout_s: float = 60.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._timeout_s = timeout_s

    async def available(self) -> bool:
        try:
            tags = await asyncio.to_thread(get_json, f"{self._base_url}/api/tags", timeout_s=2.0)
        except Exception as exc:
            logger.info("Ollama not reachable at %s: %s", self._base_url, exc)
            return False

        models = tags.get("models") if isinstance(tags, dict) else None
        if not isinstance(models, list):
            logger.warning("Unexpected /api/tags response from %s", self._base_url)
            return False

        names = {str(m.get("name") or "") for m in models if isinstance(m, dict)}
        # "llama3.2" is served as "llama3.2:latest".
        found = self._model in names or f"{self._model}:latest" in names
        if not found:
            logger.info("Ollama model %s is not pulled on %s", self._model, self._base_url)
        return found

    async def extract(self, prompt: str) -> CandidateRecord:
        payload = {
            "model": self._model,
            "prompt": prompt,
            "stream": False,
            "format": CandidateRecord.model_json_schema(),
            "options": {"temperature": 0},
        }
        result = await asyncio.to_thread(
            post_json, f"{self._base_url}/api/generate", payload, timeout_s=self._timeout_s
        )
        response = result.get("response")
        if not isinstance(response, str) or not response.strip():
            raise ValueError(f"Ollama returned no response for model {self._model}")
        return CandidateRecord.model_validate_json(response)
