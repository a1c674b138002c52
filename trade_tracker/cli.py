"""CLI for journaling trades from the terminal.

Usage:
    python -m trade_tracker.cli add
    python -m trade_tracker.cli list [all|open|closed]
    python -m trade_tracker.cli edit <trade_id>
    python -m trade_tracker.cli delete <trade_id>
"""

import asyncio
import sys

from sqlmodel import Session

from trade_tracker.database import engine, create_db_and_tables
from trade_tracker.services.gist_sync import GistSync, GistSyncError
from trade_tracker.services.local_storage import LocalStorage
from trade_tracker.services.trade_form import FormValidationError, TradeForm
from trade_tracker.services.trade_store import TradeNotFound, TradeStore
from trade_tracker.services.trade_table import render_table
from trade_tracker.utils.constants import SALE_SLOTS, STATUS_ALL, STATUS_LABELS
from trade_tracker.utils.logging import setup_logging

PROMPTS = [
    ("ticker", "Ticker"),
    ("entry_price", "Entry price"),
    ("entry_date", "Entry date (YYYY-MM-DD)"),
    ("initial_sl", "Initial SL"),
    ("current_sl", "Current SL (blank = initial SL)"),
    ("status", "Status (open/closed)"),
]


def _ask(label: str, current: str) -> str:
    suffix = f" [{current}]" if current else ""
    answer = input(f"{label}{suffix}: ").strip()
    return answer or current


def _fill_form(form: TradeForm, with_sales: bool):
    for name, label in PROMPTS:
        form.values[name] = _ask(label, form.values.get(name, ""))
        if name == "initial_sl" and not form.values.get("current_sl"):
            form.copy_initial_sl()
    if not with_sales:
        return
    for n, slot in enumerate(SALE_SLOTS, start=1):
        portion = _ask(f"Sale {n} portion (e.g. 1/3, blank to skip)", form.values[f"{slot}_portion"])
        form.values[f"{slot}_portion"] = portion
        if not portion:
            continue
        form.values[f"{slot}_price"] = _ask(f"Sale {n} price", form.values[f"{slot}_price"])
        form.values[f"{slot}_date"] = _ask(f"Sale {n} date (YYYY-MM-DD)", form.values[f"{slot}_date"])


def _submit(form: TradeForm):
    try:
        record = form.submit()
    except FormValidationError as e:
        for name, message in e.errors.items():
            print(f"  {name}: {message}")
        print("Trade not saved.")
        sys.exit(1)
    print(f"Saved {record.ticker} ({record.id}).")


def _push(storage: LocalStorage):
    """Push straight away; the CLI has no scheduler to debounce with."""
    sync = GistSync(storage)
    if not sync.is_configured:
        return
    try:
        asyncio.run(sync.push())
        print("Synced to Gist.")
    except (GistSyncError, ValueError) as e:
        print(f"Gist sync failed: {e}")


def add_trade(session: Session):
    storage = LocalStorage(session)
    store = TradeStore(storage)
    store.load()
    form = TradeForm(store)
    _fill_form(form, with_sales=False)
    _submit(form)
    _push(storage)


def edit_trade(session: Session, trade_id: str):
    storage = LocalStorage(session)
    store = TradeStore(storage)
    store.load()
    form = TradeForm(store)
    try:
        form.begin_edit(trade_id)
    except TradeNotFound as e:
        print(e)
        sys.exit(1)
    _fill_form(form, with_sales=True)
    _submit(form)
    _push(storage)


def delete_trade(session: Session, trade_id: str):
    storage = LocalStorage(session)
    store = TradeStore(storage)
    store.load()
    answer = input("Are you sure you want to delete this trade? [y/N]: ").strip().lower()
    if answer not in ("y", "yes"):
        print("Cancelled.")
        return
    try:
        store.remove(trade_id)
    except TradeNotFound as e:
        print(e)
        sys.exit(1)
    print(f"Deleted {trade_id}.")
    _push(storage)


def list_trades(session: Session, status: str):
    store = TradeStore(LocalStorage(session))
    table = render_table(store.load(), status)
    if table.is_empty:
        print(table.empty_message)
        return

    header = ["ID", "Ticker", "Entry", "Date", "Init SL", "Cur SL", "Sale 1", "Sale 2", "Sale 3", "Status"]
    lines = [header] + [
        [
            row.id[:8],
            row.ticker,
            row.entry_price,
            row.entry_date,
            row.initial_sl,
            row.current_sl,
            *row.sales,
            row.status_label,
        ]
        for row in table.rows
    ]
    widths = [max(len(line[i]) for line in lines) for i in range(len(header))]
    for line in lines:
        print("  ".join(cell.ljust(w) for cell, w in zip(line, widths)))


def _resolve_id(session: Session, prefix: str) -> str:
    """Accept the short id shown by `list`."""
    matches = [r.id for r in TradeStore(LocalStorage(session)).load() if r.id.startswith(prefix)]
    if len(matches) == 1:
        return matches[0]
    return prefix


def main():
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    setup_logging()
    create_db_and_tables()

    command = sys.argv[1]
    with Session(engine) as session:
        if command == "add":
            add_trade(session)
        elif command == "list":
            status = sys.argv[2] if len(sys.argv) > 2 else STATUS_ALL
            if status != STATUS_ALL and status not in STATUS_LABELS:
                print(f"Unknown status: {status}")
                sys.exit(1)
            list_trades(session, status)
        elif command in ("edit", "delete"):
            if len(sys.argv) < 3:
                print(f"Usage: python -m trade_tracker.cli {command} <trade_id>")
                sys.exit(1)
            trade_id = _resolve_id(session, sys.argv[2])
            if command == "edit":
                edit_trade(session, trade_id)
            else:
                delete_trade(session, trade_id)
        else:
            print(f"Unknown command: {command}")
            sys.exit(1)


if __name__ == "__main__":
    main()
