from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field


def _new_id() -> str:
    return str(uuid.uuid4())


def _now_iso() -> str:
    return datetime.now().astimezone().isoformat()


class PaymentMethod(str, Enum):
    UNKNOWN = "unknown"
    CASH = "cash"
    CREDIT_CARD = "creditCard"
    DEBIT_CARD = "debitCard"
    APPLE_PAY = "applePay"
    GIFT_CARD = "giftCard"
    OTHER = "other"


class ReceiptCategory(str, Enum):
    UNCATEGORIZED = "uncategorized"
    GROCERIES = "groceries"
    RESTAURANT = "restaurant"
    GAS = "gas"
    SHOPPING = "shopping"
    ENTERTAINMENT = "entertainment"
    TRAVEL = "travel"
    HEALTHCARE = "healthcare"
    UTILITIES = "utilities"
    OTHER = "other"


class ReceiptItem(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str
    quantity: int | None = None
    price: Decimal | None = None

    @property
    def display_quantity(self) -> str:
        if self.quantity is None or self.quantity <= 1:
            return ""
        return f"x{self.quantity}"


class Receipt(BaseModel):
    id: str = Field(default_factory=_new_id)
    created_at: str = Field(default_factory=_now_iso)

    store_name: str | None = None
    store_address: str | None = None
    store_phone: str | None = None

    transaction_date: date | None = None
    transaction_number: str | None = None

    subtotal: Decimal | None = None
    tax: Decimal | None = None
    tips: Decimal | None = None
    total: Decimal | None = None
    currency: str | None = None

    payment_method: PaymentMethod = PaymentMethod.UNKNOWN
    card_last_four: str | None = None
    category: ReceiptCategory = ReceiptCategory.UNCATEGORIZED

    items: list[ReceiptItem] = Field(default_factory=list)

    raw_text: str | None = None
    image_files: list[str] = Field(default_factory=list)
    folder_id: str | None = None
    notes: str | None = None

    @property
    def display_name(self) -> str:
        return self.store_name or "Unknown Store"


class Folder(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str = Field(min_length=1)
    created_at: str = Field(default_factory=_now_iso)
    sort_order: int = 0


class ProcessedReceipt(BaseModel):
    receipt: Receipt
    raw_text: str
    strategy: str


class CapturedImage(BaseModel):
    filename: str | None = None
    data: bytes
