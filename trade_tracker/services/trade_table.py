"""Trade table view: filtered, sorted display rows for the journal."""

import datetime as dt
from dataclasses import dataclass, field

from trade_tracker.models.trade import TradeRecord, TradeStatus
from trade_tracker.services.formatting import format_date, format_price, format_sale, format_status
from trade_tracker.services.status_filter import filter_trades
from trade_tracker.services.trade_store import TradeStore
from trade_tracker.utils.constants import EMPTY_JOURNAL_MESSAGE, SALE_SLOTS, STATUS_ALL


@dataclass
class TradeRow:
    id: str
    ticker: str
    entry_price: str
    entry_date: str
    initial_sl: str
    current_sl: str
    sales: list[str]
    status: TradeStatus
    status_label: str


@dataclass
class TradeTable:
    status_filter: str
    rows: list[TradeRow] = field(default_factory=list)
    empty_message: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.rows


def _row(record: TradeRecord) -> TradeRow:
    return TradeRow(
        id=record.id,
        ticker=record.ticker,
        entry_price=format_price(record.entry_price),
        entry_date=format_date(record.entry_date),
        initial_sl=format_price(record.initial_sl),
        current_sl=format_price(record.current_sl),
        sales=[format_sale(getattr(record, slot)) for slot in SALE_SLOTS],
        status=record.status,
        status_label=format_status(record.status),
    )


def _empty_message(status: str) -> str:
    if status == STATUS_ALL:
        return EMPTY_JOURNAL_MESSAGE
    return f"No {status.replace('_', ' ')} trades found."


def render_table(records: list[TradeRecord], status: str = STATUS_ALL) -> TradeTable:
    """Filter by status, newest entry date first; undated trades go last."""
    filtered = filter_trades(records, status)
    # Stable even when reversed: equal dates keep insertion order
    filtered.sort(key=lambda r: r.entry_date or dt.date.min, reverse=True)

    if not filtered:
        return TradeTable(status_filter=status, empty_message=_empty_message(status))
    return TradeTable(status_filter=status, rows=[_row(r) for r in filtered])


class TradeTableView:
    """Keeps a rendered table in step with a store."""

    def __init__(self, status: str = STATUS_ALL):
        self.status = status
        self.table = TradeTable(status_filter=status, empty_message=_empty_message(status))
        self._records: list[TradeRecord] = []

    def attach(self, store: TradeStore) -> TradeTable:
        store.subscribe(self.refresh)
        return self.refresh(store.all())

    def set_filter(self, status: str) -> TradeTable:
        self.status = status
        return self.refresh(self._records)

    def refresh(self, records: list[TradeRecord]) -> TradeTable:
        self._records = list(records)
        self.table = render_table(self._records, self.status)
        return self.table
