from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any
from sqlalchemy import Column, DateTime
from sqlmodel import Field

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_money(value) -> Decimal:
    """Quantizes to cents the way decimal(18,2) columns store it."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def created_at_field() -> Any:
    return Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )


def updated_at_field() -> Any:
    # Stays NULL until the first update
    return Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True)
    )
