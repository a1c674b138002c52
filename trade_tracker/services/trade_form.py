"""Trade form: flat, string-valued inputs validated into a store add or update.

Values are kept the way an HTML form holds them, so the same form backs the
CLI prompts and prefilled edit views.
"""

import logging
from collections.abc import Mapping
from datetime import date
from typing import Any

from pydantic import ValidationError

from trade_tracker.models.trade import TradeRecord, TradeStatus
from trade_tracker.schemas.trade import TradeCreate
from trade_tracker.services.trade_store import TradeStore
from trade_tracker.utils.constants import FORM_TITLE_ADD, FORM_TITLE_EDIT, SALE_SLOTS

logger = logging.getLogger(__name__)

SALE_FIELDS = ("portion", "price", "date")
FORM_FIELDS = (
    "ticker",
    "entry_price",
    "entry_date",
    "initial_sl",
    "current_sl",
    "status",
    *(f"{slot}_{name}" for slot in SALE_SLOTS for name in SALE_FIELDS),
)
REQUIRED_FIELDS = ("ticker", "entry_price", "initial_sl", "current_sl")


class FormValidationError(ValueError):
    """Submission blocked; errors maps form field -> message."""

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        summary = "; ".join(f"{k}: {v}" for k, v in errors.items())
        super().__init__(f"Invalid trade: {summary}")


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, TradeStatus):
        return value.value
    return str(value).strip()


class TradeForm:
    def __init__(self, store: TradeStore):
        self.store = store
        self.values: dict[str, str] = {}
        self.editing_id: str | None = None
        self.title = FORM_TITLE_ADD
        self.reset()

    @property
    def is_editing(self) -> bool:
        return self.editing_id is not None

    def reset(self):
        """Blank form for a new trade; entry date defaults to today."""
        self.values = {name: "" for name in FORM_FIELDS}
        self.values["entry_date"] = date.today().isoformat()
        self.values["status"] = TradeStatus.OPEN.value
        self.editing_id = None
        self.title = FORM_TITLE_ADD

    def begin_edit(self, trade_id: str) -> dict[str, str]:
        """Prefill the form from an existing trade. Raises TradeNotFound."""
        record = self.store.get(trade_id)
        self.values = {
            "ticker": record.ticker,
            "entry_price": _text(record.entry_price),
            "entry_date": _text(record.entry_date),
            "initial_sl": _text(record.initial_sl),
            "current_sl": _text(record.current_sl),
            "status": record.status.value,
        }
        for slot in SALE_SLOTS:
            sale = getattr(record, slot)
            for name in SALE_FIELDS:
                self.values[f"{slot}_{name}"] = _text(getattr(sale, name))
        self.editing_id = trade_id
        self.title = FORM_TITLE_EDIT
        return dict(self.values)

    def copy_initial_sl(self):
        """Copy the initial stop-loss into the current stop-loss field."""
        if self.values.get("initial_sl"):
            self.values["current_sl"] = self.values["initial_sl"]

    def submit(self, changes: Mapping[str, Any] | None = None) -> TradeRecord:
        """Validate and save. Raises FormValidationError and leaves the store untouched."""
        changes = changes or {}
        unknown = sorted(set(changes) - set(FORM_FIELDS))
        if unknown:
            raise FormValidationError({name: "unknown field" for name in unknown})

        self.values.update({k: _text(v) for k, v in changes.items()})

        errors = {name: "required" for name in REQUIRED_FIELDS if not self.values.get(name)}
        if errors:
            raise FormValidationError(errors)

        try:
            data = TradeCreate.model_validate(self._payload())
        except ValidationError as e:
            raise FormValidationError(_field_errors(e)) from e

        fields = data.model_dump()
        try:
            if self.editing_id is not None:
                record = self.store.update(self.editing_id, fields)
            else:
                record = self.store.add(fields)
        except ValidationError as e:
            raise FormValidationError(_field_errors(e)) from e
        self.reset()
        return record

    def _payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "ticker": self.values["ticker"],
            "entry_price": self.values["entry_price"],
            "entry_date": self.values["entry_date"],
            "initial_sl": self.values["initial_sl"],
            "current_sl": self.values["current_sl"],
            "status": self.values["status"] or TradeStatus.OPEN.value,
        }
        for slot in SALE_SLOTS:
            payload[slot] = {name: self.values[f"{slot}_{name}"] for name in SALE_FIELDS}
        return payload


def _field_errors(error: ValidationError) -> dict[str, str]:
    """Flatten pydantic locations such as ("sale1", "price") to form names."""
    errors: dict[str, str] = {}
    for item in error.errors():
        name = "_".join(str(part) for part in item["loc"])
        errors.setdefault(name, item["msg"])
    return errors
