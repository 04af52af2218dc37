"""Transactional access to identities, blobs, rate counters and the owner index.

Every public operation runs in exactly one transaction. Write operations hold
the engine write lock from BEGIN to COMMIT, so referential checks (owner exists
before a blob write, cascade before identity removal) and the rate-limit
read-modify-write cannot interleave with another writer. Any exception inside
a transaction rolls back the whole unit; there are no partial cascades.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from sqlalchemy import delete, func, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from dailyreps_backup.core.errors import (
    ConflictError,
    NotFoundError,
    StorageFailureError,
    UnauthorizedError,
)
from dailyreps_backup.core.logging import short_id
from dailyreps_backup.db.session import build_sessionmaker
from dailyreps_backup.db.time import epoch_seconds
from dailyreps_backup.models import Blob, Identity, OwnerBlobIndex, RateLimitCounter
from dailyreps_backup.services.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


@dataclass(frozen=True)
class StoredBlob:
    """Detached copy of a blob row."""

    storage_key: str
    owner_id: str
    data: str
    created_at: int
    updated_at: int


@dataclass(frozen=True)
class StoreStats:
    """Record counts used by the admin statistics endpoint."""

    identity_count: int
    blob_count: int


class RecordStore:
    """Atomic operations over the four backup tables."""

    def __init__(self, engine: Engine, clock: Clock = epoch_seconds) -> None:
        self.engine = engine
        self.clock = clock
        self._reader = build_sessionmaker(engine)
        self._writer = build_sessionmaker(engine, write=True)

    @contextmanager
    def write_transaction(self) -> Iterator[Session]:
        """Open a write transaction that commits on success and rolls back on error.

        Engine errors are logged in full and re-raised as `StorageFailureError`.
        """
        try:
            with self._writer.begin() as session:
                yield session
        except SQLAlchemyError as err:
            logger.error("Write transaction failed", exc_info=True)
            raise StorageFailureError(str(err)) from err

    @contextmanager
    def read_transaction(self) -> Iterator[Session]:
        """Open a read-only transaction against a consistent snapshot."""
        try:
            with self._reader.begin() as session:
                yield session
        except SQLAlchemyError as err:
            logger.error("Read transaction failed", exc_info=True)
            raise StorageFailureError(str(err)) from err

    @staticmethod
    def _lock_identity(session: Session, owner_id: str) -> Identity | None:
        # Row lock on engines that support it; SQLite already holds the database lock.
        return session.get(Identity, owner_id, with_for_update=True)

    def register_identity(self, identity_id: str) -> int:
        """Insert a new identity and return its creation time.

        Raises:
            ConflictError: If the identity is already registered.
        """
        with self.write_transaction() as session:
            if session.get(Identity, identity_id) is not None:
                logger.info("Registration rejected: %s already exists", short_id(identity_id))
                raise ConflictError()
            created_at = self.clock()
            session.add(Identity(id=identity_id, created_at=created_at))
            try:
                session.flush()
            except IntegrityError as err:
                raise ConflictError() from err

        logger.info("New user registered: %s", short_id(identity_id))
        return created_at

    def upsert_blob(
        self,
        storage_key: str,
        owner_id: str,
        payload: str,
        *,
        rate_limiter: RateLimiter | None = None,
    ) -> int:
        """Create or overwrite a blob for an existing owner; return `updated_at`.

        When `rate_limiter` is given the owner's quota is consumed in the same
        transaction, so a rejected write leaves the counter untouched and an
        accepted write is never recorded without its counter increment.

        Raises:
            NotFoundError: If the owner is not registered.
            UnauthorizedError: If the storage key already belongs to another owner.
            RateLimitedError: If the owner's quota is exhausted.
        """
        with self.write_transaction() as session:
            if self._lock_identity(session, owner_id) is None:
                logger.warning("Backup attempt for non-existent user %s", short_id(owner_id))
                raise NotFoundError("User not found")

            now = self.clock()
            blob = session.get(Blob, storage_key)
            if blob is not None and blob.owner_id != owner_id:
                logger.warning("Backup attempt with storage key owned by another user")
                raise UnauthorizedError("storage key owned by another identity")

            if rate_limiter is not None:
                rate_limiter.consume(session, owner_id, now)

            encoded = payload.encode("utf-8")
            if blob is None:
                session.add(
                    Blob(
                        storage_key=storage_key,
                        owner_id=owner_id,
                        payload=encoded,
                        created_at=now,
                        updated_at=now,
                    )
                )
            else:
                blob.payload = encoded
                blob.updated_at = now

            if session.get(OwnerBlobIndex, (owner_id, storage_key)) is None:
                session.add(OwnerBlobIndex(owner_id=owner_id, storage_key=storage_key))

        logger.info("Backup stored: %d bytes", len(encoded))
        return now

    def fetch_blob(self, storage_key: str) -> StoredBlob:
        """Return the blob stored under `storage_key`.

        Raises:
            NotFoundError: If no blob exists for the key.
        """
        with self.read_transaction() as session:
            blob = session.get(Blob, storage_key)
            if blob is None:
                raise NotFoundError("Backup not found")
            return StoredBlob(
                storage_key=blob.storage_key,
                owner_id=blob.owner_id,
                data=blob.data,
                created_at=blob.created_at,
                updated_at=blob.updated_at,
            )

    def delete_owner_cascade(self, owner_id: str, proof_storage_key: str | None = None) -> list[str]:
        """Remove an identity and everything that references it.

        Deletes the identity, every blob listed in its index, its rate counter
        and the index rows in one transaction. When `proof_storage_key` is
        given, it must name a blob owned by `owner_id`; this proves the caller
        knows the client secret the key is derived from.

        Returns:
            The storage keys of the deleted blobs.

        Raises:
            NotFoundError: If the identity does not exist (nothing is changed).
            UnauthorizedError: If `proof_storage_key` does not belong to the owner.
        """
        with self.write_transaction() as session:
            identity = self._lock_identity(session, owner_id)
            if identity is None:
                logger.warning("Delete attempt for non-existent user %s", short_id(owner_id))
                raise NotFoundError("User not found")

            if proof_storage_key is not None:
                proof = session.get(Blob, proof_storage_key)
                if proof is None or proof.owner_id != owner_id:
                    logger.warning("Delete attempt with mismatched storage key")
                    raise UnauthorizedError("storage key does not match user")

            keys = list(
                session.scalars(
                    select(OwnerBlobIndex.storage_key).where(OwnerBlobIndex.owner_id == owner_id)
                )
            )
            if keys:
                session.execute(
                    delete(Blob).where(Blob.storage_key.in_(keys), Blob.owner_id == owner_id)
                )
            session.execute(delete(RateLimitCounter).where(RateLimitCounter.owner_id == owner_id))
            session.execute(delete(OwnerBlobIndex).where(OwnerBlobIndex.owner_id == owner_id))
            session.delete(identity)

        logger.info("User %s and %d backups deleted", short_id(owner_id), len(keys))
        return keys

    def identity_exists(self, identity_id: str) -> bool:
        with self.read_transaction() as session:
            return session.get(Identity, identity_id) is not None

    def rate_counter(self, owner_id: str) -> RateLimitCounter | None:
        """Return a detached snapshot of the owner's rate counter, if any."""
        with self.read_transaction() as session:
            counter = session.get(RateLimitCounter, owner_id)
            if counter is not None:
                session.expunge(counter)
            return counter

    def indexed_keys(self, owner_id: str) -> set[str]:
        with self.read_transaction() as session:
            return set(
                session.scalars(
                    select(OwnerBlobIndex.storage_key).where(OwnerBlobIndex.owner_id == owner_id)
                )
            )

    def stats(self) -> StoreStats:
        """Count identities and blobs in a single snapshot."""
        with self.read_transaction() as session:
            identity_count = session.scalar(select(func.count()).select_from(Identity)) or 0
            blob_count = session.scalar(select(func.count()).select_from(Blob)) or 0
        return StoreStats(identity_count=int(identity_count), blob_count=int(blob_count))

    def ping(self) -> bool:
        """Return True if the engine answers a trivial query."""
        try:
            with self.read_transaction() as session:
                session.execute(text("SELECT 1"))
        except StorageFailureError:
            return False
        return True
