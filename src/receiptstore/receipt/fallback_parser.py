from __future__ import annotations

import re

from .candidate import CandidateRecord


_TOTAL_PATTERNS = [
    re.compile(r"total[:\s]+\$?([0-9]+\.?[0-9]*)", re.IGNORECASE),
    re.compile(r"grand total[:\s]+\$?([0-9]+\.?[0-9]*)", re.IGNORECASE),
    re.compile(r"amount[:\s]+\$?([0-9]+\.?[0-9]*)", re.IGNORECASE),
]

_MONTHS = r"(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\.?"

_DATE_PATTERNS = [
    re.compile(r"\d{1,2}/\d{1,2}/\d{2,4}"),
    re.compile(r"\d{4}-\d{2}-\d{2}"),
    re.compile(rf"\b{_MONTHS}\s+\d{{1,2}},?\s+\d{{4}}", re.IGNORECASE),
]

FALLBACK_CURRENCY = "USD"


def parse_receipt_text(text: str) -> CandidateRecord:
    return CandidateRecord(
        store_name=_find_store_name(text),
        date=_find_date(text),
        total=_find_total(text),
        currency=FALLBACK_CURRENCY,
    )


def _find_store_name(text: str) -> str | None:
    for line in text.splitlines():
        stripped = line.strip()
        if stripped:
            return stripped
    return None


def _find_total(text: str) -> float | None:
    # Pattern order decides, not match position.
    for pattern in _TOTAL_PATTERNS:
        m = pattern.search(text)
        if not m:
            continue
        return float(m.group(1))
    return None


def _find_date(text: str) -> str | None:
    for pattern in _DATE_PATTERNS:
        m = pattern.search(text)
        if m:
            return m.group(0)
    return None
