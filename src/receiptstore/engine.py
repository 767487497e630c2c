from __future__ import annotations

import logging
from collections.abc import Sequence

from .errors import NoTextError, TextRecognitionError
from .extraction.base import GenerativeExtractor
from .extraction.factory import create_extractor
from .extraction.selector import select_strategy
from .models import CapturedImage, ProcessedReceipt, Receipt
from .ocr.aggregator import aggregate_pages
from .ocr.paddleocr_backend import PaddleOcrConfig, PaddleOcrRecognizer
from .ocr.recognizer import TextRecognizer
from .project_paths import ProjectPaths
from .receipt.normalizer import normalize_candidate
from .rules.loader import RuleSet
from .settings import Settings
from .storage import ReceiptStore


logger = logging.getLogger(__name__)


class ReceiptPipeline:
    def __init__(
        self,
        recognizer: TextRecognizer,
        extractor: GenerativeExtractor | None,
        ruleset: RuleSet,
    ) -> None:
        self.recognizer = recognizer
        self.extractor = extractor
        self.ruleset = ruleset

    @classmethod
    def from_settings(cls, settings: Settings, paths: ProjectPaths) -> "ReceiptPipeline":
        return cls(
            recognizer=PaddleOcrRecognizer(PaddleOcrConfig(lang=settings.ocr_lang)),
            extractor=create_extractor(settings),
            ruleset=RuleSet.load_from_dir(paths.rules_dir),
        )

    async def recognize_pages(self, images: Sequence[bytes]) -> list[str]:
        # One page at a time; page order decides the page markers.
        pages: list[str] = []
        for index, image in enumerate(images):
            if len(images) > 1:
                logger.info("Reading page %d of %d", index + 1, len(images))
            try:
                pages.append(await self.recognizer.recognize_text(image))
            except TextRecognitionError:
                raise
            except Exception as exc:
                raise TextRecognitionError(f"Text recognition failed on page {index + 1}: {exc}") from exc
        return pages

    async def process(self, images: Sequence[bytes]) -> ProcessedReceipt:
        if not images:
            raise ValueError("At least one image is required.")

        pages = await self.recognize_pages(images)
        raw_text = aggregate_pages(pages)
        if not raw_text:
            raise NoTextError(len(images))

        return await self.process_text(raw_text)

    async def process_text(self, raw_text: str) -> ProcessedReceipt:
        if not raw_text:
            raise NoTextError(1)

        strategy = await select_strategy(self.extractor)
        logger.info("Analyzing receipt with %s extraction", strategy.name)
        candidate = await strategy.extract(raw_text)

        receipt = normalize_candidate(candidate, self.ruleset)
        return ProcessedReceipt(receipt=receipt, raw_text=raw_text, strategy=strategy.name)


class ReceiptIngestService:
    def __init__(self, pipeline: ReceiptPipeline, store: ReceiptStore) -> None:
        self.pipeline = pipeline
        self.store = store

    async def ingest(self, images: Sequence[CapturedImage], *, folder_id: str | None = None) -> Receipt:
        if folder_id is not None:
            self.store.get_folder(folder_id)

        processed = await self.pipeline.process([image.data for image in images])

        # Nothing is written before the whole pipeline has succeeded. The folder
        # may have been deleted while OCR or extraction was running.
        if folder_id is not None:
            self.store.get_folder(folder_id)

        image_files = self.store.save_images(images)
        try:
            return self.store.save_receipt(
                processed.receipt,
                image_files=image_files,
                raw_text=processed.raw_text,
                folder_id=folder_id,
            )
        except BaseException:
            self.store.delete_images(image_files)
            raise
