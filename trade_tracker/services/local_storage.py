"""Key-value local storage backed by the storage_entry table.

Mirrors the browser localStorage API: string keys, string values.
"""

from datetime import datetime, timezone

from sqlmodel import Session, select

from trade_tracker.models.storage_entry import StorageEntry


class LocalStorage:
    def __init__(self, session: Session):
        self.session = session

    def get_item(self, key: str) -> str | None:
        # Re-read the row: another session may have written since this one cached it
        entry = self.session.get(StorageEntry, key, populate_existing=True)
        return entry.value if entry else None

    def set_item(self, key: str, value: str):
        entry = self.session.get(StorageEntry, key)
        if entry is None:
            entry = StorageEntry(key=key, value=value)
        else:
            entry.value = value
            entry.updated_at = datetime.now(timezone.utc)
        self.session.add(entry)
        self.session.commit()

    def remove_item(self, key: str):
        entry = self.session.get(StorageEntry, key)
        if entry is not None:
            self.session.delete(entry)
            self.session.commit()

    def clear(self):
        for entry in self.session.exec(select(StorageEntry)).all():
            self.session.delete(entry)
        self.session.commit()

    def keys(self) -> list[str]:
        return list(self.session.exec(select(StorageEntry.key).order_by(StorageEntry.key)).all())
