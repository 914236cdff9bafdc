"""Persistence of computation log entries (local files or Vercel Blob)."""
import asyncio
import json
import logging
import secrets
import string
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import httpx

from ..config import get_settings

logger = logging.getLogger(__name__)

ENTRY_PREFIX = "entries/"
_BASE36 = string.digits + string.ascii_lowercase


class EntryStoreError(Exception):
    """Raised when the backing store cannot be reached or rejects a request."""


@dataclass
class StoredEntry:
    """Listing information for one stored entry."""
    url: str
    key: str
    uploaded_at: str
    size: int


@dataclass
class EntryPage:
    """One page of a listing."""
    entries: list[StoredEntry] = field(default_factory=list)
    cursor: Optional[str] = None
    has_more: bool = False


def make_entry_key(now_ms: Optional[int] = None) -> str:
    """Build a key like ``entries/1718000000000-k3j9za.json``."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(6))
    return f"{ENTRY_PREFIX}{now_ms}-{suffix}.json"


class LocalEntryStore:
    """Stores entries as JSON files below a directory. File I/O runs in worker threads."""

    def __init__(self, root: str):
        self.root = Path(root)

    async def close(self):
        """Nothing to release for the file store."""

    async def put(self, entry: dict[str, Any]) -> str:
        key = make_entry_key()
        await asyncio.to_thread(self._write, key, json.dumps(entry))
        logger.info(f"Stored entry {key}")
        return key

    async def list(self, cursor: Optional[str] = None, limit: int = 100) -> EntryPage:
        return await asyncio.to_thread(self._scan, cursor, limit)

    def _write(self, key: str, content: str) -> None:
        path = self.root / key
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")

    def _scan(self, cursor: Optional[str], limit: int) -> EntryPage:
        directory = self.root / ENTRY_PREFIX
        if not directory.exists():
            return EntryPage()

        keys = sorted(f"{ENTRY_PREFIX}{p.name}" for p in directory.glob("*.json"))
        if cursor:
            keys = [k for k in keys if k > cursor]

        page_keys = keys[:limit]
        has_more = len(keys) > limit
        entries = []
        for key in page_keys:
            path = self.root / key
            stat = path.stat()
            entries.append(StoredEntry(
                url=path.resolve().as_uri(),
                key=key,
                uploaded_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc).isoformat(),
                size=stat.st_size,
            ))

        return EntryPage(
            entries=entries,
            cursor=page_keys[-1] if has_more else None,
            has_more=has_more,
        )


class BlobEntryStore:
    """Stores entries through the Vercel Blob REST API."""

    API_VERSION = "7"

    def __init__(self, base_url: str, token: str, timeout: float = 30.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout, connect=10.0),
            transport=transport,
        )

    async def close(self):
        """Close the shared HTTP client."""
        if self.http_client:
            await self.http_client.aclose()

    def _headers(self) -> dict[str, str]:
        return {
            "authorization": f"Bearer {self.token}",
            "x-api-version": self.API_VERSION,
        }

    async def put(self, entry: dict[str, Any]) -> str:
        key = make_entry_key()
        headers = self._headers()
        headers.update({
            "x-add-random-suffix": "0",
            "x-content-type": "application/json",
        })
        try:
            response = await self.http_client.put(
                f"{self.base_url}/{key}",
                content=json.dumps(entry).encode("utf-8"),
                headers=headers,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"Blob upload failed for {key}: {e}")
            raise EntryStoreError(f"Blob upload failed: {e}") from e

        logger.info(f"Stored entry {key} in blob store")
        return key

    async def list(self, cursor: Optional[str] = None, limit: int = 100) -> EntryPage:
        params = {"prefix": ENTRY_PREFIX, "limit": str(limit)}
        if cursor:
            params["cursor"] = cursor
        try:
            response = await self.http_client.get(self.base_url, params=params, headers=self._headers())
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Blob listing failed: {e}")
            raise EntryStoreError(f"Blob listing failed: {e}") from e

        return EntryPage(
            entries=[
                StoredEntry(
                    url=b.get("url", ""),
                    key=b.get("pathname", ""),
                    uploaded_at=b.get("uploadedAt", ""),
                    size=b.get("size", 0),
                )
                for b in data.get("blobs", [])
            ],
            cursor=data.get("cursor"),
            has_more=bool(data.get("hasMore", False)),
        )


_entry_store = None


def get_entry_store():
    """Get singleton instance of the configured entry store."""
    global _entry_store
    if _entry_store is None:
        settings = get_settings()
        if settings.entry_store == "blob":
            if not settings.blob_token:
                raise EntryStoreError("Blob store selected but BLOB_READ_WRITE_TOKEN is not set")
            _entry_store = BlobEntryStore(settings.blob_api_url, settings.blob_token, settings.blob_timeout)
        else:
            _entry_store = LocalEntryStore(settings.entries_dir)
    return _entry_store


async def close_entry_store():
    """Release the singleton store, if one was created."""
    global _entry_store
    if _entry_store is not None:
        await _entry_store.close()
        _entry_store = None
