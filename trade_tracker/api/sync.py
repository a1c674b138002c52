"""Gist sync API: connect, force pull, disconnect, status."""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, field_validator

from trade_tracker.api.deps import get_storage
from trade_tracker.config import settings
from trade_tracker.engine.scheduler import cancel_gist_push
from trade_tracker.services.gist_sync import GistSync, GistSyncError, get_sync_status, update_sync_status
from trade_tracker.services.local_storage import LocalStorage

router = APIRouter(prefix="/api/sync", tags=["sync"])


class GistConnectRequest(BaseModel):
    token: str = Field(min_length=1)
    gist_id: str | None = None  # create a new private gist when omitted

    @field_validator("token")
    @classmethod
    def _trim_token(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("must not be empty")
        return text

    @field_validator("gist_id")
    @classmethod
    def _trim_gist_id(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


@router.get("/status")
def sync_status(storage: LocalStorage = Depends(get_storage)):
    sync = GistSync(storage)
    return {
        **get_sync_status(),
        "configured": sync.is_configured,
        "gist_id": storage.get_item(settings.gist_id_key),
    }


@router.post("/gist")
async def connect_gist(body: GistConnectRequest, storage: LocalStorage = Depends(get_storage)):
    """Create or verify a gist, store the credentials and pull its trades."""
    try:
        gist_id = await GistSync(storage).connect(body.token, body.gist_id)
    except GistSyncError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {"status": "connected", "gist_id": gist_id}


@router.post("/gist/pull")
async def force_sync(storage: LocalStorage = Depends(get_storage)):
    """Replace local trades with the gist copy."""
    sync = GistSync(storage)
    if not sync.is_configured:
        raise HTTPException(status_code=409, detail="Gist sync is not configured")
    try:
        records = await sync.pull()
    except (GistSyncError, ValueError) as e:
        update_sync_status("error", "Sync error")
        raise HTTPException(status_code=502, detail=str(e))
    update_sync_status("synced", "Synced")
    return {"status": "synced", "trade_count": len(records)}


@router.delete("/gist", status_code=204)
def disconnect_gist(storage: LocalStorage = Depends(get_storage)):
    cancel_gist_push()
    GistSync(storage).disconnect()
