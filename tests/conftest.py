"""Shared test fixtures."""

import pytest
from cryptography.fernet import Fernet
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from trade_tracker.config import settings
from trade_tracker.database import get_session
from trade_tracker.engine.scheduler import cancel_gist_push
from trade_tracker.models import StorageEntry  # noqa: F401
from trade_tracker.services.gist_sync import update_sync_status
from trade_tracker.services.local_storage import LocalStorage
from trade_tracker.services.trade_store import TradeStore


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def storage(session) -> LocalStorage:
    return LocalStorage(session)


@pytest.fixture
def store(storage) -> TradeStore:
    """Empty, loaded store."""
    store = TradeStore(storage)
    store.load()
    return store


@pytest.fixture(autouse=True)
def encryption_key(monkeypatch):
    monkeypatch.setattr(settings, "encryption_key", Fernet.generate_key().decode())


@pytest.fixture(autouse=True)
def reset_sync_state():
    yield
    cancel_gist_push()
    update_sync_status("", "")


@pytest.fixture
def client(engine):
    from trade_tracker.main import app

    def _session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _session_override
    # No context manager: skip lifespan (startup sync, scheduler start)
    yield TestClient(app)
    app.dependency_overrides.clear()

