"""Request pipeline for register, store, retrieve and delete operations.

Validation runs on the event loop and fails fast in a fixed order; only
requests that pass every check reach storage. Storage work is dispatched to a
bounded thread pool and is never abandoned once started, so a disconnecting
client cannot leave a half-applied transaction behind.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

import anyio
import anyio.to_thread

from dailyreps_backup.core.errors import ERR_USER_ID_MUST_BE_SHA256, NotFoundError
from dailyreps_backup.core.logging import short_id
from dailyreps_backup.core.settings import Settings
from dailyreps_backup.services.envelope import EnvelopePolicy, inspect_envelope
from dailyreps_backup.services.identifiers import require_storage_key, require_user_id
from dailyreps_backup.services.rate_limiter import RateLimiter
from dailyreps_backup.services.record_store import Clock, RecordStore, StoredBlob, StoreStats
from dailyreps_backup.services.signing import (
    delete_message,
    store_message,
    verify_signed_request,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BackupService:
    """Orchestrates validators, the rate limiter and the record store."""

    def __init__(self, store: RecordStore, settings: Settings, clock: Clock | None = None) -> None:
        self.store = store
        self.settings = settings
        self.clock = clock or store.clock
        self.rate_limiter = RateLimiter(settings.rate_limit_policy)
        self.envelope_policy = EnvelopePolicy.from_settings(settings)
        self._limiter: anyio.CapacityLimiter | None = None

    async def _run_storage(self, func: Callable[..., T], *args: object, **kwargs: object) -> T:
        # Created lazily so the limiter belongs to the running event loop.
        if self._limiter is None:
            self._limiter = anyio.CapacityLimiter(self.settings.storage_workers)
        call = functools.partial(func, *args, **kwargs)
        return await anyio.to_thread.run_sync(call, limiter=self._limiter)

    def _verify(self, message: bytes, signature: str, timestamp: int) -> None:
        verify_signed_request(
            message,
            signature,
            timestamp,
            secret=self.settings.app_secret_key,
            max_age_seconds=self.settings.max_timestamp_age_seconds,
            now=self.clock(),
        )

    async def register(self, user_id: str) -> int:
        """Register a new identity and return its creation time."""
        identity_id = require_user_id(user_id, ERR_USER_ID_MUST_BE_SHA256)
        return await self._run_storage(self.store.register_identity, identity_id)

    async def store_backup(
        self,
        user_id: str,
        storage_key: str,
        data: str,
        signature: str,
        timestamp: int,
    ) -> int:
        """Validate and persist one backup upload; return its `updated_at`.

        Order: identifiers, signature, timestamp, size, envelope and entropy,
        then owner check, rate limit and upsert in one write transaction.
        """
        owner_id = require_user_id(user_id)
        key = require_storage_key(storage_key)
        self._verify(store_message(timestamp, user_id, storage_key, data), signature, timestamp)
        inspect_envelope(data, self.envelope_policy)

        return await self._run_storage(
            self.store.upsert_blob,
            key,
            owner_id,
            data,
            rate_limiter=self.rate_limiter,
        )

    async def retrieve_backup(self, user_id: str, storage_key: str) -> StoredBlob:
        """Return the caller's blob; a blob owned by someone else is reported as missing."""
        owner_id = require_user_id(user_id)
        key = require_storage_key(storage_key)

        blob = await self._run_storage(self.store.fetch_blob, key)
        if blob.owner_id != owner_id:
            logger.warning("Retrieve attempt for %s with foreign storage key", short_id(owner_id))
            raise NotFoundError("Backup not found")
        logger.info("Backup retrieved: %d bytes", len(blob.data))
        return blob

    async def delete_user(
        self,
        user_id: str,
        storage_key: str,
        signature: str,
        timestamp: int,
    ) -> list[str]:
        """Cascade-delete an identity after verifying signature and key ownership."""
        owner_id = require_user_id(user_id)
        key = require_storage_key(storage_key)
        self._verify(delete_message(timestamp, user_id, storage_key), signature, timestamp)

        return await self._run_storage(self.store.delete_owner_cascade, owner_id, key)

    async def stats(self) -> StoreStats:
        return await self._run_storage(self.store.stats)

    async def healthy(self) -> bool:
        return await self._run_storage(self.store.ping)

    async def database_size(self) -> int:
        """Return the database size in bytes, read on the storage pool."""
        return await self._run_storage(self.database_size_bytes)

    def database_size_bytes(self) -> int:
        """Return the on-disk size of a file-backed SQLite database and its WAL.

        Other engines and in-memory databases report 0.
        """
        url = self.store.engine.url
        if url.get_backend_name() != "sqlite" or not url.database or url.database == ":memory:":
            return 0
        path = Path(url.database)
        files = (path, path.with_name(f"{path.name}-wal"))
        return sum(file.stat().st_size for file in files if file.exists())
