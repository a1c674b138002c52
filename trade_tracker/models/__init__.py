"""Database and domain models."""

from trade_tracker.models.storage_entry import StorageEntry
from trade_tracker.models.trade import Sale, TradeRecord, TradeStatus

__all__ = [
    "StorageEntry",
    "Sale",
    "TradeRecord",
    "TradeStatus",
]
