"""Text recognizer interface used by the receipt pipeline."""

from __future__ import annotations

from abc import ABC, abstractmethod


class TextRecognizer(ABC):
    """Turns one captured page image into text."""

    @abstractmethod
    async def recognize_text(self, image: bytes) -> str:
        """Return the recognized text of a single page.

        An empty string means nothing was recognized. Failures raise
        ``TextRecognitionError``.
        """
        ...
