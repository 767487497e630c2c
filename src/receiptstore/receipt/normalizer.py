from __future__ import annotations

import math
from datetime import date, datetime
from decimal import Decimal

from ..models import Receipt, ReceiptItem
from ..rules.loader import RuleSet
from ..rules.resolution import resolve_category, resolve_payment_method
from .candidate import CandidateItem, CandidateRecord


DATE_FORMATS = [
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%d/%m/%Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%m-%d-%Y",
    # Month-name dates as the fallback parser finds them ("January 5 2024").
    "%b %d %Y",
    "%B %d %Y",
    # Two-digit years ("3/15/24"), month first like the four-digit forms.
    "%m/%d/%y",
    "%d/%m/%y",
]


def normalize_candidate(candidate: CandidateRecord, ruleset: RuleSet) -> Receipt:
    return Receipt(
        store_name=candidate.store_name,
        store_address=candidate.store_address,
        store_phone=candidate.store_phone,
        transaction_date=parse_date(candidate.date),
        transaction_number=candidate.transaction_number,
        subtotal=to_decimal(candidate.subtotal),
        tax=to_decimal(candidate.tax),
        tips=to_decimal(candidate.tips),
        total=to_decimal(candidate.total),
        currency=candidate.currency,
        payment_method=resolve_payment_method(candidate.payment_method, ruleset),
        card_last_four=candidate.card_last_four,
        category=resolve_category(candidate.suggested_category, ruleset),
        items=[_item(it) for it in (candidate.items or [])],
    )


def parse_date(value: str | None) -> date | None:
    if value is None:
        return None
    value = " ".join(value.split())
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def to_decimal(value: float | None) -> Decimal | None:
    if value is None or not math.isfinite(value):
        return None
    # Built from the repr: 12.34 -> Decimal("12.34").
    return Decimal(str(value))


def _item(item: CandidateItem) -> ReceiptItem:
    return ReceiptItem(name=item.name, quantity=item.quantity, price=to_decimal(item.price))
