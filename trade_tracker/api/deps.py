"""Shared API dependencies."""

from fastapi import Depends
from sqlmodel import Session

from trade_tracker.database import get_session
from trade_tracker.services.gist_sync import schedule_push
from trade_tracker.services.local_storage import LocalStorage
from trade_tracker.services.trade_store import TradeStore


def get_storage(session: Session = Depends(get_session)) -> LocalStorage:
    return LocalStorage(session)


def get_store(storage: LocalStorage = Depends(get_storage)) -> TradeStore:
    """Load the journal for this request; changes queue a Gist push."""
    store = TradeStore(storage)
    store.load()
    store.subscribe(lambda _records: schedule_push(storage))
    return store
