"""Trade store — the ordered trade collection persisted under one storage key.

The whole collection is written back on every mutation as a JSON array using
the camelCase field names of the browser app, so exports from either side
load unchanged.
"""

import json
import logging
import threading
import uuid
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

from pydantic import TypeAdapter, ValidationError

from trade_tracker.config import settings
from trade_tracker.models.trade import TradeRecord
from trade_tracker.services.local_storage import LocalStorage

logger = logging.getLogger(__name__)

# Python field name -> persisted key
_PERSISTED_KEYS = {
    "entry_price": "entryPrice",
    "entry_date": "entryDate",
    "initial_sl": "initialSL",
    "current_sl": "currentSL",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
}
_FIELD_NAMES = {v: k for k, v in _PERSISTED_KEYS.items()}

_records_adapter = TypeAdapter(list[TradeRecord])

Listener = Callable[[list[TradeRecord]], None]

# One read-modify-write at a time across every store in the process
_write_lock = threading.Lock()


class TradeNotFound(LookupError):
    def __init__(self, trade_id: str):
        super().__init__(f"Trade {trade_id} not found")
        self.trade_id = trade_id


def encode_trades(records: Iterable[TradeRecord], indent: int | None = None) -> str:
    """Serialize records to the persisted JSON array."""
    payload = []
    for record in records:
        data = record.model_dump(mode="json")
        payload.append({_PERSISTED_KEYS.get(k, k): v for k, v in data.items()})
    return json.dumps(payload, indent=indent)


def decode_trades(raw: str) -> list[TradeRecord]:
    """Parse a persisted JSON array. Accepts camelCase or snake_case keys.

    Raises ValueError (including pydantic's ValidationError) on bad input.
    """
    try:
        data = json.loads(raw)
    except RecursionError as e:
        raise ValueError("trade data is nested too deeply") from e
    if not isinstance(data, list):
        raise ValueError("expected a JSON array of trades")
    items = []
    for item in data:
        if not isinstance(item, dict):
            raise ValueError("expected each trade to be a JSON object")
        items.append({_FIELD_NAMES.get(k, k): v for k, v in item.items()})
    records = _records_adapter.validate_python(items)
    ids = [r.id for r in records]
    if len(ids) != len(set(ids)):
        raise ValueError("duplicate trade ids")
    return records


class TradeStore:
    """CRUD over the trade collection held in local storage."""

    def __init__(self, storage: LocalStorage, key: str | None = None):
        self.storage = storage
        self.key = key or settings.storage_key
        self._records: list[TradeRecord] = []
        self._listeners: list[Listener] = []

    def load(self) -> list[TradeRecord]:
        """Read the collection from storage. Missing or corrupt data loads as empty."""
        raw = self.storage.get_item(self.key)
        if raw is None:
            self._records = []
            return self.all()
        try:
            self._records = decode_trades(raw)
        except (ValueError, ValidationError) as e:
            logger.warning(f"Ignoring corrupt trade data under '{self.key}': {e}")
            self._records = []
        return self.all()

    def all(self) -> list[TradeRecord]:
        return list(self._records)

    def get(self, trade_id: str) -> TradeRecord:
        return self._records[self._index(trade_id)]

    def add(self, fields: Mapping[str, Any]) -> TradeRecord:
        now = datetime.now(timezone.utc)
        data = {k: v for k, v in fields.items() if k not in ("id", "created_at", "updated_at")}
        with _write_lock:
            self.load()
            record = TradeRecord.model_validate(
                {**data, "id": self._new_id(), "created_at": now, "updated_at": now}
            )
            self._records.append(record)
            self._persist()
        self._notify()
        logger.info(f"Added trade {record.id} ({record.ticker})")
        return record

    def update(self, trade_id: str, fields: Mapping[str, Any]) -> TradeRecord:
        changes = {k: v for k, v in fields.items() if k not in ("id", "created_at", "updated_at")}
        with _write_lock:
            self.load()
            index = self._index(trade_id)
            current = self._records[index]
            # Re-validate the merged record so partial updates cannot break invariants
            record = TradeRecord.model_validate(
                {**current.model_dump(), **changes, "updated_at": datetime.now(timezone.utc)}
            )
            self._records[index] = record
            self._persist()
        self._notify()
        logger.info(f"Updated trade {trade_id} ({', '.join(sorted(changes)) or 'no fields'})")
        return record

    def remove(self, trade_id: str):
        with _write_lock:
            self.load()
            del self._records[self._index(trade_id)]
            self._persist()
        self._notify()
        logger.info(f"Removed trade {trade_id}")

    def replace_all(self, records: Iterable[TradeRecord]):
        """Swap the whole collection, e.g. after pulling a remote copy."""
        with _write_lock:
            self._records = list(records)
            self._persist()
        self._notify()

    def subscribe(self, listener: Listener):
        """Call listener(records) after every persisted mutation."""
        self._listeners.append(listener)

    def _index(self, trade_id: str) -> int:
        for i, record in enumerate(self._records):
            if record.id == trade_id:
                return i
        raise TradeNotFound(trade_id)

    def _new_id(self) -> str:
        existing = {r.id for r in self._records}
        while True:
            trade_id = uuid.uuid4().hex
            if trade_id not in existing:
                return trade_id

    def _persist(self):
        self.storage.set_item(self.key, encode_trades(self._records))

    def _notify(self):
        records = self.all()
        for listener in self._listeners:
            listener(records)
