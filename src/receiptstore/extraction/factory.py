from __future__ import annotations

from ..settings import Settings
from .base import GenerativeExtractor


def create_extractor(settings: Settings) -> GenerativeExtractor | None:
    match settings.extractor:
        case "ollama":
            from .ollama import OllamaExtractor

            return OllamaExtractor(
                settings.ollama_url,
                settings.ollama_model,
                timeout_s=settings.ollama_timeout_s,
            )
        case "claude":
            from .claude import ClaudeExtractor

            return ClaudeExtractor(
                api_key=settings.anthropic_api_key,
                model=settings.claude_model,
            )
        case "none" | "":
            return None
        case _:
            raise ValueError(
                f"Unknown extractor backend: {settings.extractor!r} (choose ollama, claude or none)"
            )
