"""GitHub Gist sync — optional remote copy of the journal in a trades.json file.

The token is kept Fernet-encrypted in local storage next to the gist id.
Pushes are debounced through the scheduler; pulls replace the local
collection wholesale.
"""

import logging

import httpx
from sqlmodel import Session

from trade_tracker.config import settings
from trade_tracker.models.trade import TradeRecord
from trade_tracker.services.encryption import decrypt_token, encrypt_token
from trade_tracker.services.local_storage import LocalStorage
from trade_tracker.services.trade_store import TradeStore, decode_trades, encode_trades

logger = logging.getLogger(__name__)

GIST_DESCRIPTION = "Trade Tracker Data"

# (state, text) shown next to the sync button
_sync_status: dict[str, str] = {"state": "", "text": ""}


class GistSyncError(Exception):
    pass


def update_sync_status(state: str, text: str):
    _sync_status["state"] = state
    _sync_status["text"] = text


def get_sync_status() -> dict[str, str]:
    return dict(_sync_status)


class GistClient:
    """Thin async client for the GitHub Gist REST API."""

    def __init__(
        self,
        token: str,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.gist_api_url,
            timeout=settings.gist_timeout_seconds,
            headers={
                "Authorization": f"token {token}",
                "Accept": "application/vnd.github.v3+json",
            },
            transport=transport,
        )

    async def close(self):
        await self._client.aclose()

    async def _request(self, method: str, url: str, action: str, **kwargs) -> dict:
        try:
            resp = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise GistSyncError(f"Failed to {action} Gist: {e}") from e
        if resp.status_code >= 400:
            raise GistSyncError(f"Failed to {action} Gist: {resp.status_code}")
        return resp.json()

    async def get_gist(self, gist_id: str) -> dict:
        return await self._request("GET", f"/gists/{gist_id}", "fetch")

    async def update_file(self, gist_id: str, filename: str, content: str):
        await self._request(
            "PATCH",
            f"/gists/{gist_id}",
            "update",
            json={"files": {filename: {"content": content}}},
        )

    async def create_gist(self, filename: str, content: str) -> str:
        gist = await self._request(
            "POST",
            "/gists",
            "create",
            json={
                "description": GIST_DESCRIPTION,
                "public": False,
                "files": {filename: {"content": content}},
            },
        )
        return gist["id"]


class GistSync:
    def __init__(self, storage: LocalStorage, transport: httpx.AsyncBaseTransport | None = None):
        self.storage = storage
        self.transport = transport
        self.filename = settings.gist_filename

    def credentials(self) -> tuple[str, str] | None:
        """(token, gist_id) when both are stored, else None."""
        token = self.storage.get_item(settings.gist_token_key)
        gist_id = self.storage.get_item(settings.gist_id_key)
        if not token or not gist_id:
            return None
        return decrypt_token(token), gist_id

    @property
    def is_configured(self) -> bool:
        return bool(
            self.storage.get_item(settings.gist_token_key)
            and self.storage.get_item(settings.gist_id_key)
        )

    def _client(self, token: str) -> GistClient:
        return GistClient(token, transport=self.transport)

    async def pull(self) -> list[TradeRecord]:
        """Replace local trades with the gist copy. A gist without the file means no trades."""
        creds = self.credentials()
        if creds is None:
            return TradeStore(self.storage).load()
        token, gist_id = creds

        client = self._client(token)
        try:
            gist = await client.get_gist(gist_id)
        finally:
            await client.close()

        content = ((gist.get("files") or {}).get(self.filename) or {}).get("content")
        records: list[TradeRecord] = []
        if content:
            try:
                records = decode_trades(content)
            except ValueError as e:
                raise GistSyncError(f"Gist {self.filename} is not a valid trade list: {e}") from e

        TradeStore(self.storage).replace_all(records)
        logger.info(f"Pulled {len(records)} trades from Gist {gist_id}")
        return records

    async def push(self):
        """Write the local trades to the gist file."""
        creds = self.credentials()
        if creds is None:
            return
        token, gist_id = creds

        records = TradeStore(self.storage).load()
        client = self._client(token)
        try:
            await client.update_file(gist_id, self.filename, encode_trades(records, indent=2))
        finally:
            await client.close()
        logger.info(f"Pushed {len(records)} trades to Gist {gist_id}")

    async def connect(self, token: str, gist_id: str | None = None) -> str:
        """Create (no id) or verify a gist, store the credentials, then pull."""
        client = self._client(token)
        try:
            if not gist_id:
                content = encode_trades(TradeStore(self.storage).load(), indent=2)
                gist_id = await client.create_gist(self.filename, content)
                logger.info(f"Created Gist {gist_id}")
            else:
                await client.get_gist(gist_id)
        finally:
            await client.close()

        self.storage.set_item(settings.gist_token_key, encrypt_token(token))
        self.storage.set_item(settings.gist_id_key, gist_id)
        await self.pull()
        update_sync_status("synced", "Synced")
        return gist_id

    def disconnect(self):
        """Forget the credentials; local trades are kept."""
        self.storage.remove_item(settings.gist_token_key)
        self.storage.remove_item(settings.gist_id_key)
        update_sync_status("", "")
        logger.info("Disconnected from Gist")


def schedule_push(storage: LocalStorage):
    """Store listener hook: queue a debounced push when sync is configured."""
    if not GistSync(storage).is_configured:
        return
    from trade_tracker.engine.scheduler import schedule_gist_push

    update_sync_status("syncing", "Saving...")
    schedule_gist_push()


async def run_scheduled_push():
    """Scheduler job: push the current journal to the gist."""
    from trade_tracker.database import engine

    with Session(engine) as session:
        sync = GistSync(LocalStorage(session))
        try:
            await sync.push()
            update_sync_status("synced", "Synced")
        except (GistSyncError, ValueError) as e:
            logger.error(f"Failed to sync to Gist: {e}")
            update_sync_status("error", "Sync error")
