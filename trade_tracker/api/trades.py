"""CRUD API for journal trades."""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError

from trade_tracker.api.deps import get_store
from trade_tracker.schemas.trade import (
    StatusQuery,
    TradeCreate,
    TradeFormRead,
    TradeFormSubmit,
    TradeRead,
    TradeTableRead,
    TradeUpdate,
)
from trade_tracker.services.status_filter import filter_trades
from trade_tracker.services.trade_form import FormValidationError, TradeForm
from trade_tracker.services.trade_store import TradeNotFound, TradeStore
from trade_tracker.services.trade_table import render_table

router = APIRouter(prefix="/api/trades", tags=["trades"])


def _validation_detail(error: ValidationError) -> list[dict]:
    return [{"loc": err["loc"], "msg": err["msg"], "type": err["type"]} for err in error.errors()]


@router.get("", response_model=list[TradeRead])
def list_trades(status: StatusQuery = "all", store: TradeStore = Depends(get_store)):
    return filter_trades(store.all(), status)


@router.get("/table", response_model=TradeTableRead)
def trade_table(status: StatusQuery = "all", store: TradeStore = Depends(get_store)):
    """Display rows for the journal table, newest entry first."""
    return render_table(store.all(), status)


@router.post("", response_model=TradeRead, status_code=201)
def create_trade(data: TradeCreate, store: TradeStore = Depends(get_store)):
    try:
        return store.add(data.model_dump())
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=_validation_detail(e))


@router.post("/form", response_model=TradeRead)
def submit_trade_form(body: TradeFormSubmit, store: TradeStore = Depends(get_store)):
    """Submit raw form values; adds, or updates when trade_id is given."""
    form = TradeForm(store)
    try:
        if body.trade_id:
            form.begin_edit(body.trade_id)
        return form.submit(body.values)
    except TradeNotFound:
        raise HTTPException(status_code=404, detail="Trade not found")
    except FormValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors)


@router.get("/{trade_id}", response_model=TradeRead)
def get_trade(trade_id: str, store: TradeStore = Depends(get_store)):
    try:
        return store.get(trade_id)
    except TradeNotFound:
        raise HTTPException(status_code=404, detail="Trade not found")


@router.get("/{trade_id}/form", response_model=TradeFormRead)
def edit_trade_form(trade_id: str, store: TradeStore = Depends(get_store)):
    """Form values prefilled from an existing trade."""
    form = TradeForm(store)
    try:
        values = form.begin_edit(trade_id)
    except TradeNotFound:
        raise HTTPException(status_code=404, detail="Trade not found")
    return TradeFormRead(title=form.title, trade_id=trade_id, values=values)


@router.put("/{trade_id}", response_model=TradeRead)
def update_trade(trade_id: str, data: TradeUpdate, store: TradeStore = Depends(get_store)):
    update_data = data.model_dump(exclude_unset=True)
    try:
        return store.update(trade_id, update_data)
    except TradeNotFound:
        raise HTTPException(status_code=404, detail="Trade not found")
    except ValidationError as e:
        # Merged record failed, e.g. an explicit null for a required field
        raise HTTPException(status_code=422, detail=_validation_detail(e))


@router.delete("/{trade_id}", status_code=204)
def delete_trade(trade_id: str, store: TradeStore = Depends(get_store)):
    try:
        store.remove(trade_id)
    except TradeNotFound:
        raise HTTPException(status_code=404, detail="Trade not found")
