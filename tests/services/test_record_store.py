"""Tests for transactional record store operations."""

import pytest
from sqlalchemy import select

from dailyreps_backup.core.errors import (
    ConflictError,
    NotFoundError,
    RateLimitedError,
    UnauthorizedError,
)
from dailyreps_backup.models import Blob, Identity, OwnerBlobIndex, RateLimitCounter
from dailyreps_backup.services.rate_limiter import RateLimiter
from dailyreps_backup.services.record_store import RecordStore
from tests.conftest import START_TIME, FakeClock, hashed, make_envelope


def _table_counts(store: RecordStore) -> dict[str, int]:
    with store.read_transaction() as session:
        return {
            model.__tablename__: len(list(session.scalars(select(model))))
            for model in (Identity, Blob, RateLimitCounter, OwnerBlobIndex)
        }


class TestRegisterIdentity:
    def test_register_returns_creation_time(self, store: RecordStore, alice: str) -> None:
        assert store.register_identity(alice) == START_TIME
        assert store.identity_exists(alice)

    def test_duplicate_registration_conflicts(self, store: RecordStore, alice: str) -> None:
        store.register_identity(alice)
        with pytest.raises(ConflictError):
            store.register_identity(alice)
        assert store.stats().identity_count == 1


class TestUpsertBlob:
    def test_unknown_owner_is_rejected(self, store: RecordStore, alice: str, alice_key: str) -> None:
        with pytest.raises(NotFoundError):
            store.upsert_blob(alice_key, alice, make_envelope())
        assert store.stats().blob_count == 0

    def test_round_trip(
        self, store: RecordStore, clock: FakeClock, alice: str, alice_key: str
    ) -> None:
        store.register_identity(alice)
        payload = make_envelope()
        clock.advance(5)

        updated_at = store.upsert_blob(alice_key, alice, payload)

        blob = store.fetch_blob(alice_key)
        assert blob.data == payload
        assert blob.owner_id == alice
        assert blob.updated_at == updated_at >= START_TIME + 5
        assert store.indexed_keys(alice) == {alice_key}

    def test_overwrite_refreshes_updated_at_only(
        self, store: RecordStore, clock: FakeClock, alice: str, alice_key: str
    ) -> None:
        store.register_identity(alice)
        store.upsert_blob(alice_key, alice, make_envelope())
        clock.advance(60)
        second = make_envelope()

        store.upsert_blob(alice_key, alice, second)

        blob = store.fetch_blob(alice_key)
        assert blob.data == second
        assert blob.created_at == START_TIME
        assert blob.updated_at == START_TIME + 60
        assert store.indexed_keys(alice) == {alice_key}

    def test_key_owned_by_another_identity_is_rejected(
        self, store: RecordStore, alice: str, alice_key: str
    ) -> None:
        bob = hashed("bob")
        store.register_identity(alice)
        store.register_identity(bob)
        original = make_envelope()
        store.upsert_blob(alice_key, alice, original)

        with pytest.raises(UnauthorizedError):
            store.upsert_blob(alice_key, bob, make_envelope())

        assert store.fetch_blob(alice_key).data == original
        assert store.indexed_keys(bob) == set()

    def test_rate_limit_is_consumed_in_the_same_transaction(
        self, store: RecordStore, rate_limiter: RateLimiter, alice: str
    ) -> None:
        store.register_identity(alice)
        for index in range(5):
            store.upsert_blob(hashed(f"k{index}"), alice, make_envelope(), rate_limiter=rate_limiter)

        with pytest.raises(RateLimitedError):
            store.upsert_blob(hashed("k5"), alice, make_envelope(), rate_limiter=rate_limiter)

        counter = store.rate_counter(alice)
        assert counter is not None
        assert counter.count_this_hour == 5
        assert counter.last_write_at == START_TIME
        assert len(store.indexed_keys(alice)) == 5
        with pytest.raises(NotFoundError):
            store.fetch_blob(hashed("k5"))


class TestFetchBlob:
    def test_missing_blob(self, store: RecordStore, alice_key: str) -> None:
        with pytest.raises(NotFoundError):
            store.fetch_blob(alice_key)


class TestDeleteOwnerCascade:
    """Cascade removes identity, blobs, counter and index rows together."""

    def test_cascade_removes_everything_for_owner(
        self, store: RecordStore, rate_limiter: RateLimiter, alice: str
    ) -> None:
        bob = hashed("bob")
        store.register_identity(alice)
        store.register_identity(bob)
        keys = [hashed(f"alice:{index}") for index in range(3)]
        for key in keys:
            store.upsert_blob(key, alice, make_envelope(), rate_limiter=rate_limiter)
        bob_key = hashed("bob:0")
        store.upsert_blob(bob_key, bob, make_envelope(), rate_limiter=rate_limiter)

        deleted = store.delete_owner_cascade(alice, keys[0])

        assert sorted(deleted) == sorted(keys)
        assert not store.identity_exists(alice)
        assert store.rate_counter(alice) is None
        assert store.indexed_keys(alice) == set()
        for key in keys:
            with pytest.raises(NotFoundError):
                store.fetch_blob(key)

        assert store.identity_exists(bob)
        assert store.fetch_blob(bob_key).owner_id == bob
        assert _table_counts(store) == {
            "identities": 1,
            "blobs": 1,
            "rate_limits": 1,
            "owner_blob_index": 1,
        }

    def test_unknown_owner_changes_nothing(self, store: RecordStore, alice: str) -> None:
        store.register_identity(alice)
        store.upsert_blob(hashed("k"), alice, make_envelope())
        before = _table_counts(store)

        with pytest.raises(NotFoundError):
            store.delete_owner_cascade(hashed("nobody"))

        assert _table_counts(store) == before

    def test_foreign_proof_key_is_rejected(self, store: RecordStore, alice: str) -> None:
        bob = hashed("bob")
        store.register_identity(alice)
        store.register_identity(bob)
        bob_key = hashed("bob:0")
        store.upsert_blob(bob_key, bob, make_envelope())
        before = _table_counts(store)

        with pytest.raises(UnauthorizedError):
            store.delete_owner_cascade(alice, bob_key)
        with pytest.raises(UnauthorizedError):
            store.delete_owner_cascade(alice, hashed("never-stored"))

        assert _table_counts(store) == before

    def test_owner_without_blobs_can_be_deleted(self, store: RecordStore, alice: str) -> None:
        store.register_identity(alice)
        assert store.delete_owner_cascade(alice) == []
        assert not store.identity_exists(alice)


class TestHousekeeping:
    def test_stats_and_ping(self, store: RecordStore, alice: str) -> None:
        store.register_identity(alice)
        store.upsert_blob(hashed("k"), alice, make_envelope())
        stats = store.stats()
        assert (stats.identity_count, stats.blob_count) == (1, 1)
        assert store.ping() is True
