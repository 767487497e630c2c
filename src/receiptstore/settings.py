from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Settings:
    extractor: str = "ollama"
    ollama_url: str = "http://127.0.0.1:11434"
    ollama_model: str = "llama3.2"
    ollama_timeout_s: float = 60.0
    anthropic_api_key: str = ""
    claude_model: str = "claude-sonnet-4-5-20250929"
    ocr_lang: str = "en"

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        return cls(
            extractor=os.getenv("RECEIPTSTORE_EXTRACTOR", defaults.extractor).strip().lower(),
            ollama_url=os.getenv("OLLAMA_URL", defaults.ollama_url),
            ollama_model=os.getenv("OLLAMA_MODEL", defaults.ollama_model),
            ollama_timeout_s=float(os.getenv("OLLAMA_TIMEOUT_S", str(defaults.ollama_timeout_s))),
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY", defaults.anthropic_api_key),
            claude_model=os.getenv("CLAUDE_MODEL", defaults.claude_model),
            ocr_lang=os.getenv("RECEIPTSTORE_OCR_LANG", defaults.ocr_lang),
        )
