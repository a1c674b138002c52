"""Status filter for the trade table."""

from collections.abc import Iterable

from trade_tracker.models.trade import TradeRecord
from trade_tracker.utils.constants import STATUS_ALL


def filter_trades(records: Iterable[TradeRecord], status: str) -> list[TradeRecord]:
    """Return all records for "all", otherwise those whose status matches. Order is kept."""
    if status == STATUS_ALL:
        return list(records)
    return [r for r in records if r.status.value == status]
