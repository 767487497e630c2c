from __future__ import annotations

import asyncio
import logging
import sys
import tempfile
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from ..errors import TextRecognitionError
from .recognizer import TextRecognizer


logger = logging.getLogger(__name__)


class OcrNotAvailableError(TextRecognitionError):
    pass


@dataclass(frozen=True, slots=True)
class PaddleOcrConfig:
    lang: str = "en"
    use_angle_cls: bool = True


@dataclass(frozen=True, slots=True)
class PaddleOcrRecognizer(TextRecognizer):
    config: PaddleOcrConfig = field(default_factory=PaddleOcrConfig)

    async def recognize_text(self, image: bytes) -> str:
        return await asyncio.to_thread(self._recognize_bytes, image)

    def _recognize_bytes(self, image: bytes) -> str:
        with tempfile.TemporaryDirectory(prefix="receiptstore-ocr-") as tmp:
            image_path = Path(tmp) / "page.jpg"
            image_path.write_bytes(image)
            return ocr_image_path(image_path, config=self.config)


def ocr_image_path(image_path: Path, *, config: PaddleOcrConfig | None = None) -> str:
    if not image_path.exists():
        raise FileNotFoundError(str(image_path))

    cfg = config or PaddleOcrConfig()
    ocr = _get_ocr(cfg.lang, cfg.use_angle_cls)

    try:
        result = _predict(ocr, str(image_path), use_angle_cls=cfg.use_angle_cls)
    except Exception as exc:
        raise TextRecognitionError(f"Text recognition failed: {exc}") from exc

    lines = ordered_lines(result)
    logger.debug("PaddleOCR recognized %d lines in %s", len(lines), image_path.name)
    return "\n".join(lines).strip()


def ordered_lines(result: object) -> list[str]:
    """Flatten a PaddleOCR result into text lines in reading order (top to bottom, left to right)."""
    if not isinstance(result, list) or not result:
        return []

    entries: list[tuple[float, float, str]] = []
    if isinstance(result[0], Mapping):
        for page in result:
            entries.extend(_entries_from_page_dict(page))
    elif _looks_like_item(result[0]):
        entries.extend(_entries_from_items(result))
    else:
        for page in result:
            if isinstance(page, list):
                entries.extend(_entries_from_items(page))

    entries.sort(key=lambda t: (t[0], t[1]))
    return [text for _, _, text in entries]


def _entries_from_page_dict(page: object) -> list[tuple[float, float, str]]:
    # PaddleX-style pages: {"rec_texts": [...], "rec_boxes": [...]} (or "dt_polys").
    if not isinstance(page, Mapping):
        return []
    texts = page.get("rec_texts")
    if not isinstance(texts, list):
        return []
    boxes = page.get("rec_boxes")
    if boxes is None:
        boxes = page.get("dt_polys")

    out = []
    for idx, raw in enumerate(texts):
        text = str(raw).strip()
        if not text:
            continue
        box = boxes[idx] if _indexable(boxes) and idx < len(boxes) else None
        x, y = _top_left_xy(box)
        out.append((y, x, text))
    return out


def _entries_from_items(items: list) -> list[tuple[float, float, str]]:
    # Classic items: [box, (text, score)].
    out = []
    for item in items:
        if not _looks_like_item(item):
            continue
        text = item[1][0].strip()
        if not text:
            continue
        x, y = _top_left_xy(item[0])
        out.append((y, x, text))
    return out


def _indexable(value: object) -> bool:
    return (
        value is not None
        and not isinstance(value, (str, bytes))
        and hasattr(value, "__len__")
        and hasattr(value, "__getitem__")
    )


def _looks_like_item(value: object) -> bool:
    if not (isinstance(value, list) and len(value) >= 2 and isinstance(value[0], (list, tuple))):
        return False
    text_tuple = value[1]
    return isinstance(text_tuple, (list, tuple)) and bool(text_tuple) and isinstance(text_tuple[0], str)


def _top_left_xy(box: object) -> tuple[float, float]:
    if not isinstance(box, Sequence) or isinstance(box, (str, bytes)) or not box:
        return 0.0, 0.0
    # [x1, y1, x2, y2]
    if len(box) == 4 and all(isinstance(v, (int, float)) for v in box):
        return float(box[0]), float(box[1])
    # [[x1, y1], [x2, y2], [x3, y3], [x4, y4]]
    first = box[0]
    if isinstance(first, (list, tuple)) and len(first) >= 2:
        try:
            return float(first[0]), float(first[1])
        except (TypeError, ValueError):
            return 0.0, 0.0
    return 0.0, 0.0


@lru_cache(maxsize=4)
def _get_ocr(lang: str, use_angle_cls: bool):
    try:
        from paddleocr import PaddleOCR  # type: ignore
    except ImportError as exc:
        raise OcrNotAvailableError(
            "PaddleOCR is not installed. Install the 'ocr' extra: pip install 'receiptstore[ocr]'"
        ) from exc

    try:
        import paddle  # type: ignore  # noqa: F401
    except ImportError as exc:
        raise OcrNotAvailableError(
            "PaddleOCR requires PaddlePaddle (`paddle`). "
            f"Current Python is {sys.version.split()[0]}; install `paddlepaddle` for this interpreter."
        ) from exc

    logger.info("Loading PaddleOCR (lang=%s)", lang)
    # Constructor arguments differ between PaddleOCR releases.
    try:
        return PaddleOCR(lang=lang, use_textline_orientation=use_angle_cls)
    except (TypeError, ValueError):
        pass
    try:
        return PaddleOCR(lang=lang, use_angle_cls=use_angle_cls)
    except (TypeError, ValueError):
        pass
    return PaddleOCR(lang=lang)


def _predict(ocr, image_path: str, *, use_angle_cls: bool) -> object:
    if hasattr(ocr, "predict"):
        return ocr.predict(image_path)

    if hasattr(ocr, "ocr"):
        try:
            return ocr.ocr(image_path, cls=use_angle_cls)
        except TypeError:
            return ocr.ocr(image_path)

    raise TextRecognitionError("Unsupported PaddleOCR object: missing predict/ocr methods")
