"""StorageEntry model, one key/value pair of the local storage."""

from datetime import datetime, timezone
from sqlmodel import SQLModel, Field


class StorageEntry(SQLModel, table=True):
    __tablename__ = "storage_entry"

    key: str = Field(primary_key=True, max_length=255)
    value: str  # serialized payload, usually JSON
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
