from __future__ import annotations

from pydantic import BaseModel, Field


class CandidateItem(BaseModel):
    name: str = Field(min_length=1, description="Name or description of the item purchased")
    quantity: int | None = Field(default=None, description="Quantity of items, defaults to 1 if not specified")
    price: float | None = Field(default=None, description="Price of the item in decimal format")


class CandidateRecord(BaseModel):
    store_name: str | None = Field(
        default=None, description="Name of the store or merchant where the purchase was made"
    )
    store_address: str | None = Field(default=None, description="Full street address of the store if available")
    store_phone: str | None = Field(default=None, description="Store phone number if available")

    date: str | None = Field(default=None, description="Transaction date in YYYY-MM-DD format if available")
    transaction_number: str | None = Field(default=None, description="Transaction or receipt number for reference")

    subtotal: float | None = Field(default=None, description="Subtotal amount before tax and tips")
    tax: float | None = Field(default=None, description="Tax amount charged")
    tips: float | None = Field(default=None, description="Tip or gratuity amount if applicable")
    total: float | None = Field(default=None, description="Total amount paid including tax and tips")
    currency: str | None = Field(
        default=None, description="Currency code like USD, EUR, CAD. Default to USD if not clear"
    )

    payment_method: str | None = Field(
        default=None,
        description="Payment method: Cash, Credit Card, Debit Card, Apple Pay, Gift Card, or Other",
    )
    card_last_four: str | None = Field(default=None, description="Last 4 digits of the card used if visible")

    suggested_category: str | None = Field(
        default=None,
        description=(
            "Suggested category: Groceries, Restaurant, Gas & Fuel, Shopping, Entertainment, "
            "Travel, Healthcare, Utilities, or Other"
        ),
    )

    items: list[CandidateItem] | None = Field(
        default=None, description="List of individual items purchased with their prices"
    )
