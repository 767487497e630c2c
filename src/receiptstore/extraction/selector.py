from __future__ import annotations

import logging

from .base import ExtractionStrategy, FallbackStrategy, GenerativeExtractor, GenerativeStrategy


logger = logging.getLogger(__name__)


async def select_strategy(extractor: GenerativeExtractor | None) -> ExtractionStrategy:
    if extractor is not None and await extractor.available():
        logger.debug("Using generative extractor %s", extractor.name)
        return GenerativeStrategy(extractor)
    logger.info("Generative extractor unavailable, using basic parsing")
    return FallbackStrategy()
