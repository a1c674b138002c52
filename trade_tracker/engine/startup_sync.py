"""Startup sync — refresh the local journal from the Gist before serving.

On server restart the gist may hold changes made from another browser or
machine. When sync is configured the remote copy wins; if it cannot be
fetched the local data is kept and the sync status shows the error.
"""

import logging

from sqlmodel import Session

from trade_tracker.database import engine
from trade_tracker.services.gist_sync import GistSync, GistSyncError, update_sync_status
from trade_tracker.services.local_storage import LocalStorage

logger = logging.getLogger(__name__)


async def sync_trades_on_startup():
    """Pull trades from the gist if credentials are stored.

    Called once during app startup before the scheduler starts.
    """
    with Session(engine) as session:
        sync = GistSync(LocalStorage(session))
        if not sync.is_configured:
            logger.info("Startup sync: Gist not configured, using local trades")
            update_sync_status("", "")
            return

        update_sync_status("syncing", "Syncing...")
        try:
            records = await sync.pull()
        except (GistSyncError, ValueError) as e:
            # Local storage is untouched, keep serving it
            logger.error(f"Startup sync: failed to load from Gist: {e}")
            update_sync_status("error", "Sync error")
            return

    update_sync_status("synced", "Synced")
    logger.info(f"Startup sync complete ({len(records)} trades)")
