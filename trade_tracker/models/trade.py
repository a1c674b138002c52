"""Trade record: one logged position with entry, stop-loss and partial sales.

Records are not a table of their own: the whole collection is serialized
under a single local-storage key (see services/trade_store.py).
"""

import datetime as dt
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class TradeStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def normalize_ticker(value):
    """Trim and upper-case a ticker before the length checks run."""
    if isinstance(value, str):
        return value.strip().upper()
    return value


class Sale(BaseModel):
    """A partial exit, e.g. a third of the position sold at 160."""

    portion: str | None = None
    price: float | None = Field(default=None, gt=0, allow_inf_nan=False)
    date: dt.date | None = None

    @property
    def is_filled(self) -> bool:
        return bool(self.portion) and self.price is not None


class TradeRecord(BaseModel):
    id: str
    ticker: str = Field(min_length=1, max_length=16)
    entry_price: float = Field(gt=0, allow_inf_nan=False)
    entry_date: dt.date | None = None
    initial_sl: float = Field(allow_inf_nan=False)
    current_sl: float = Field(allow_inf_nan=False)
    status: TradeStatus = TradeStatus.OPEN
    sale1: Sale = Field(default_factory=Sale)
    sale2: Sale = Field(default_factory=Sale)
    sale3: Sale = Field(default_factory=Sale)
    created_at: dt.datetime = Field(default_factory=_utcnow)
    updated_at: dt.datetime = Field(default_factory=_utcnow)

    @field_validator("ticker", mode="before")
    @classmethod
    def _normalize_ticker(cls, value):
        return normalize_ticker(value)

    @field_validator("sale1", "sale2", "sale3", mode="before")
    @classmethod
    def _empty_sale(cls, value):
        # Older exports store missing sales as null
        return Sale() if value is None else value
