"""Tests for the trade store: CRUD, persistence and the storage format."""

import json
from concurrent.futures import ThreadPoolExecutor

import pytest
from pydantic import ValidationError
from sqlmodel import Session, SQLModel, create_engine

from trade_tracker.models.trade import TradeStatus
from trade_tracker.services.local_storage import LocalStorage
from trade_tracker.services.status_filter import filter_trades
from trade_tracker.services.trade_store import TradeNotFound, TradeStore, decode_trades, encode_trades


def make_fields(**kwargs) -> dict:
    """Valid trade fields with sensible defaults."""
    defaults = {
        "ticker": "AAPL",
        "entry_price": 150.50,
        "initial_sl": 145.00,
        "current_sl": 145.00,
        "status": "open",
    }
    defaults.update(kwargs)
    return defaults


def reloaded(storage: LocalStorage) -> TradeStore:
    store = TradeStore(storage)
    store.load()
    return store


# ---------------------------------------------------------------------------
# 1. CRUD
# ---------------------------------------------------------------------------

class TestAdd:
    def test_aapl_scenario(self, store):
        store.add(make_fields())
        records = store.all()
        assert len(records) == 1
        assert records[0].ticker == "AAPL"
        assert filter_trades(records, "closed") == []

    def test_assigns_unique_ids(self, store):
        a = store.add(make_fields(ticker="AAPL"))
        b = store.add(make_fields(ticker="MSFT"))
        assert a.id and b.id
        assert a.id != b.id

    def test_ignores_caller_supplied_id(self, store):
        record = store.add(make_fields(id="mine"))
        assert record.id != "mine"

    def test_timestamps_set(self, store):
        record = store.add(make_fields())
        assert record.created_at == record.updated_at
        assert record.created_at.tzinfo is not None

    def test_ticker_uppercased(self, store):
        assert store.add(make_fields(ticker=" tsla ")).ticker == "TSLA"

    def test_padding_not_counted_toward_ticker_length(self, store):
        assert store.add(make_fields(ticker="   brk.b" + " " * 20)).ticker == "BRK.B"

    @pytest.mark.parametrize("field", ["entry_price", "initial_sl", "current_sl"])
    def test_non_finite_price_rejected(self, store, field):
        with pytest.raises(ValidationError):
            store.add(make_fields(**{field: float("inf")}))
        assert store.all() == []

    def test_non_finite_sale_price_rejected(self, store):
        with pytest.raises(ValidationError):
            store.add(make_fields(sale1={"portion": "1/3", "price": float("inf")}))

    def test_invalid_fields_not_stored(self, store, storage):
        with pytest.raises(ValidationError):
            store.add(make_fields(ticker=""))
        with pytest.raises(ValidationError):
            store.add(make_fields(status="stopped_out"))
        assert store.all() == []
        assert storage.get_item(store.key) is None

    def test_insertion_order(self, store):
        for ticker in ("C", "A", "B"):
            store.add(make_fields(ticker=ticker))
        assert [r.ticker for r in store.all()] == ["C", "A", "B"]


class TestUpdate:
    def test_preserves_id_and_changes_only_submitted_fields(self, store):
        original = store.add(make_fields(ticker="TSLA", entry_price=200.0))
        updated = store.update(original.id, {"ticker": "GOOG"})

        assert updated.id == original.id
        assert updated.ticker == "GOOG"
        assert updated.entry_price == 200.0
        assert updated.initial_sl == original.initial_sl
        assert updated.created_at == original.created_at
        assert updated.updated_at >= original.updated_at

    def test_cannot_overwrite_id(self, store):
        original = store.add(make_fields())
        updated = store.update(original.id, {"id": "other", "current_sl": 148.0})
        assert updated.id == original.id
        assert updated.current_sl == 148.0

    def test_unknown_id(self, store):
        with pytest.raises(TradeNotFound):
            store.update("missing", {"ticker": "X"})

    def test_invalid_merge_leaves_record(self, store):
        original = store.add(make_fields())
        with pytest.raises(ValidationError):
            store.update(original.id, {"entry_price": -1})
        assert store.get(original.id).entry_price == 150.50

    def test_persisted(self, store, storage):
        record = store.add(make_fields())
        store.update(record.id, {"status": "closed"})
        assert reloaded(storage).get(record.id).status == TradeStatus.CLOSED


class TestRemove:
    def test_only_record_leaves_empty_store(self, store, storage):
        record = store.add(make_fields())
        store.remove(record.id)
        assert store.all() == []
        assert reloaded(storage).all() == []

    def test_unknown_id(self, store):
        store.add(make_fields())
        with pytest.raises(TradeNotFound):
            store.remove("missing")
        assert len(store.all()) == 1

    def test_get_after_remove(self, store):
        record = store.add(make_fields())
        store.remove(record.id)
        with pytest.raises(TradeNotFound):
            store.get(record.id)


# ---------------------------------------------------------------------------
# 2. Persistence
# ---------------------------------------------------------------------------

class TestLoad:
    def test_round_trip(self, store, storage):
        store.add(make_fields(ticker="AAPL", entry_date="2025-11-25"))
        store.add(make_fields(
            ticker="MSFT",
            status="closed",
            sale1={"portion": "1/3", "price": 310.0, "date": "2025-12-01"},
        ))
        assert reloaded(storage).all() == store.all()

    def test_missing_key_is_empty(self, storage):
        assert TradeStore(storage).load() == []

    @pytest.mark.parametrize("raw", [
        "not json",
        '{"ticker": "AAPL"}',
        "[1, 2]",
        '[{"id": "1", "ticker": ""}]',
    ])
    def test_corrupt_data_is_empty(self, storage, raw):
        storage.set_item("tradeTracker_trades", raw)
        assert TradeStore(storage).load() == []

    def test_deeply_nested_data_is_empty(self, storage):
        storage.set_item("tradeTracker_trades", "[" * 100000 + "]" * 100000)
        assert TradeStore(storage).load() == []

    def test_corrupt_data_is_not_overwritten_by_load(self, storage):
        storage.set_item("tradeTracker_trades", "not json")
        TradeStore(storage).load()
        assert storage.get_item("tradeTracker_trades") == "not json"

    def test_duplicate_ids_rejected(self, storage):
        item = {"id": "1", "ticker": "A", "entryPrice": 1, "initialSL": 1, "currentSL": 1, "status": "open"}
        storage.set_item("tradeTracker_trades", json.dumps([item, item]))
        assert TradeStore(storage).load() == []

    def test_custom_key(self, storage):
        store = TradeStore(storage, key="other")
        store.load()
        store.add(make_fields())
        assert storage.get_item("tradeTracker_trades") is None
        assert storage.get_item("other") is not None

    def test_replace_all(self, store, storage):
        store.add(make_fields(ticker="OLD"))
        incoming = TradeStore(storage, key="scratch")
        incoming.load()
        new = incoming.add(make_fields(ticker="NEW"))
        store.replace_all([new])
        assert [r.ticker for r in reloaded(storage).all()] == ["NEW"]


class TestStorageFormat:
    def test_camel_case_keys(self, store, storage):
        store.add(make_fields(entry_date="2025-11-25"))
        data = json.loads(storage.get_item("tradeTracker_trades"))
        assert isinstance(data, list)
        item = data[0]
        assert item["entryPrice"] == 150.50
        assert item["initialSL"] == 145.00
        assert item["currentSL"] == 145.00
        assert item["entryDate"] == "2025-11-25"
        assert "createdAt" in item and "updatedAt" in item
        assert "entry_price" not in item

    def test_decodes_browser_export(self):
        raw = json.dumps([{
            "id": "1732512000000",
            "ticker": "NVDA",
            "entryPrice": 140.5,
            "entryDate": "2025-11-25",
            "initialSL": 130,
            "currentSL": 135,
            "status": "open",
            "sale1": {"portion": "1/3", "price": 150, "date": "2025-11-28"},
            "sale2": {"portion": "", "price": None, "date": None},
            "sale3": None,
        }])
        [record] = decode_trades(raw)
        assert record.id == "1732512000000"
        assert record.sale1.is_filled
        assert not record.sale2.is_filled
        assert not record.sale3.is_filled

    def test_decodes_snake_case(self, store):
        store.add(make_fields())
        raw = json.dumps([r.model_dump(mode="json") for r in store.all()])
        assert decode_trades(raw) == store.all()

    def test_encode_indent(self, store):
        store.add(make_fields())
        assert "\n  " in encode_trades(store.all(), indent=2)


# ---------------------------------------------------------------------------
# 3. Listeners
# ---------------------------------------------------------------------------

def test_listeners_called_after_each_mutation(store):
    seen = []
    store.subscribe(lambda records: seen.append([r.ticker for r in records]))

    record = store.add(make_fields(ticker="A"))
    store.update(record.id, {"ticker": "B"})
    store.remove(record.id)

    assert seen == [["A"], ["B"], []]


def test_listener_not_called_on_failed_mutation(store):
    seen = []
    store.subscribe(seen.append)
    with pytest.raises(TradeNotFound):
        store.remove("missing")
    assert seen == []


# ---------------------------------------------------------------------------
# 4. Several stores over one journal
# ---------------------------------------------------------------------------

def test_stale_store_does_not_drop_other_writes(storage):
    first = reloaded(storage)
    second = reloaded(storage)

    first.add(make_fields(ticker="A"))
    second.add(make_fields(ticker="B"))

    assert [r.ticker for r in reloaded(storage).all()] == ["A", "B"]


def test_writes_from_another_session_are_seen(engine, storage):
    stale = reloaded(storage)
    with Session(engine) as other_session:
        reloaded(LocalStorage(other_session)).add(make_fields(ticker="A"))

    stale.add(make_fields(ticker="B"))

    assert [r.ticker for r in reloaded(storage).all()] == ["A", "B"]


def test_update_of_record_removed_elsewhere(storage):
    first = reloaded(storage)
    record = first.add(make_fields())
    second = reloaded(storage)
    second.remove(record.id)

    with pytest.raises(TradeNotFound):
        first.update(record.id, {"ticker": "X"})
    assert reloaded(storage).all() == []


def test_concurrent_adds_all_persist(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'journal.db'}", connect_args={"check_same_thread": False})
    SQLModel.metadata.create_all(engine)

    def add_one(ticker):
        with Session(engine) as session:
            reloaded(LocalStorage(session)).add(make_fields(ticker=ticker))

    tickers = [f"T{i}" for i in range(8)]
    with ThreadPoolExecutor(max_workers=4) as pool:
        list(pool.map(add_one, tickers))

    with Session(engine) as session:
        stored = reloaded(LocalStorage(session)).all()
    assert sorted(r.ticker for r in stored) == sorted(tickers)
    engine.dispose()
