"""Extraction strategies shared by the generative and fallback paths."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..errors import ParsingFailedError
from ..receipt.candidate import CandidateRecord
from ..receipt.fallback_parser import parse_receipt_text


PROMPT_TEMPLATE = """\
Parse the following receipt text and extract structured information.

Receipt text:
{text}

Extract the store name, transaction date, total amount, and list of purchased items with their prices.
"""


def build_prompt(text: str) -> str:
    return PROMPT_TEMPLATE.format(text=text)


class GenerativeExtractor(ABC):
    """A language model that fills a ``CandidateRecord`` from a prompt."""

    name: str = "generative"

    @abstractmethod
    async def available(self) -> bool:
        """Whether the model can be used right now. Must not raise."""
        ...

    @abstractmethod
    async def extract(self, prompt: str) -> CandidateRecord:
        ...


class ExtractionStrategy(ABC):
    name: str

    @abstractmethod
    async def extract(self, text: str) -> CandidateRecord:
        ...


class GenerativeStrategy(ExtractionStrategy):
    def __init__(self, extractor: GenerativeExtractor) -> None:
        self.extractor = extractor
        self.name = extractor.name

    async def extract(self, text: str) -> CandidateRecord:
        try:
            return await self.extractor.extract(build_prompt(text))
        except Exception as exc:
            raise ParsingFailedError(f"Failed to parse receipt: {exc}") from exc


class FallbackStrategy(ExtractionStrategy):
    name = "fallback"

    async def extract(self, text: str) -> CandidateRecord:
        return parse_receipt_text(text)
