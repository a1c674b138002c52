"""Display formatting for trade table cells."""

import datetime as dt

from trade_tracker.models.trade import Sale, TradeStatus
from trade_tracker.utils.constants import STATUS_LABELS


def format_price(value: float | None) -> str:
    return "" if value is None else f"{value:.2f}"


def format_date(value: dt.date | None) -> str:
    """Long date, e.g. "25 Nov 2025"."""
    if value is None:
        return ""
    return f"{value.day} {value.strftime('%b')} {value.year}"


def _ordinal_suffix(day: int) -> str:
    if day in (1, 21, 31):
        return "st"
    if day in (2, 22):
        return "nd"
    if day in (3, 23):
        return "rd"
    return "th"


def format_short_date(value: dt.date | None) -> str:
    """Short sale date, e.g. "Nov 25th"."""
    if value is None:
        return ""
    return f"{value.strftime('%b')} {value.day}{_ordinal_suffix(value.day)}"


def format_sale(sale: Sale) -> str:
    """"1/3 @ 160.00 Nov 25th", or "-" for an unfilled sale."""
    if not sale.is_filled:
        return "-"
    text = f"{sale.portion} @ {format_price(sale.price)}"
    if sale.date is not None:
        text += f" {format_short_date(sale.date)}"
    return text


def format_status(status: TradeStatus | str) -> str:
    value = status.value if isinstance(status, TradeStatus) else status
    return STATUS_LABELS.get(value, value)
