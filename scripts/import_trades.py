#!/usr/bin/env python3
"""Import a trades.json export into the local journal.

Accepts the browser app's localStorage dump or the Gist trades.json file.

Usage:
    python scripts/import_trades.py <trades.json> [--merge]

By default the journal is replaced. With --merge, trades whose id is not
already present are appended.
"""

import sys
from pathlib import Path

from sqlmodel import Session

from trade_tracker.database import engine, create_db_and_tables
from trade_tracker.services.local_storage import LocalStorage
from trade_tracker.services.trade_store import TradeStore, decode_trades


def import_trades(path: str, merge: bool = False):
    source = Path(path)
    if not source.exists():
        print(f"ERROR: file not found: {path}")
        sys.exit(1)

    try:
        incoming = decode_trades(source.read_text(encoding="utf-8"))
    except ValueError as e:
        print(f"ERROR: {path} is not a valid trade list: {e}")
        sys.exit(1)

    create_db_and_tables()
    with Session(engine) as session:
        store = TradeStore(LocalStorage(session))
        existing = store.load()

        if merge:
            known = {r.id for r in existing}
            added = [r for r in incoming if r.id not in known]
            skipped = len(incoming) - len(added)
            store.replace_all(existing + added)
            print(f"  {len(added)} trades appended, {skipped} already present")
        else:
            store.replace_all(incoming)
            print(f"  {len(existing)} trades replaced by {len(incoming)}")

    print("\nImport complete!")


if __name__ == "__main__":
    args = [a for a in sys.argv[1:] if a != "--merge"]
    if len(args) != 1:
        print(__doc__)
        sys.exit(1)
    import_trades(args[0], merge="--merge" in sys.argv[1:])
