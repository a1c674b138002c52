"""Pydantic schemas for the Trade API and form."""

import datetime as dt
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from trade_tracker.models.trade import Sale, TradeStatus, normalize_ticker


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class SaleIn(BaseModel):
    portion: str | None = None
    price: float | None = Field(default=None, gt=0, allow_inf_nan=False)
    date: dt.date | None = None

    @field_validator("portion", "price", "date", mode="before")
    @classmethod
    def _blank_optional(cls, value):
        return _blank_to_none(value)


class TradeCreate(BaseModel):
    ticker: str = Field(min_length=1, max_length=16)
    entry_price: float = Field(gt=0, allow_inf_nan=False)
    entry_date: dt.date | None = None
    initial_sl: float = Field(allow_inf_nan=False)
    current_sl: float = Field(allow_inf_nan=False)
    status: TradeStatus = TradeStatus.OPEN
    sale1: SaleIn = Field(default_factory=SaleIn)
    sale2: SaleIn = Field(default_factory=SaleIn)
    sale3: SaleIn = Field(default_factory=SaleIn)

    @field_validator("ticker", mode="before")
    @classmethod
    def _trim_ticker(cls, value):
        return normalize_ticker(value)

    @field_validator("entry_date", mode="before")
    @classmethod
    def _blank_entry_date(cls, value):
        return _blank_to_none(value)


class TradeUpdate(BaseModel):
    ticker: str | None = Field(default=None, min_length=1, max_length=16)
    entry_price: float | None = Field(default=None, gt=0, allow_inf_nan=False)
    entry_date: dt.date | None = None
    initial_sl: float | None = Field(default=None, allow_inf_nan=False)
    current_sl: float | None = Field(default=None, allow_inf_nan=False)
    status: TradeStatus | None = None
    sale1: SaleIn | None = None
    sale2: SaleIn | None = None
    sale3: SaleIn | None = None

    @field_validator("ticker", mode="before")
    @classmethod
    def _trim_optional_ticker(cls, value):
        return normalize_ticker(value)


class TradeRead(BaseModel):
    id: str
    ticker: str
    entry_price: float
    entry_date: dt.date | None
    initial_sl: float
    current_sl: float
    status: TradeStatus
    sale1: Sale
    sale2: Sale
    sale3: Sale
    created_at: dt.datetime
    updated_at: dt.datetime

    model_config = {"from_attributes": True}


class TradeRowRead(BaseModel):
    id: str
    ticker: str
    entry_price: str
    entry_date: str
    initial_sl: str
    current_sl: str
    sales: list[str]
    status: TradeStatus
    status_label: str


class TradeTableRead(BaseModel):
    status_filter: str
    rows: list[TradeRowRead]
    empty_message: str | None = None


StatusQuery = Literal["all", "open", "closed"]


class TradeFormSubmit(BaseModel):
    """Flat form values, as posted by the add/edit form."""

    trade_id: str | None = None
    values: dict[str, str | None] = Field(default_factory=dict)


class TradeFormRead(BaseModel):
    title: str
    trade_id: str | None = None
    values: dict[str, str]
