# tests/conftest.py
from __future__ import annotations

import base64
import hashlib
import json
import os
from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

os.environ.setdefault("APP_SECRET_KEY", "test-app-secret")
os.environ.setdefault("ADMIN_SECRET_KEY", "test-admin-secret")

from dailyreps_backup.core.security import sign_request
from dailyreps_backup.core.settings import Settings
from dailyreps_backup.db.session import build_engine, create_tables, drop_tables
from dailyreps_backup.main import create_app
from dailyreps_backup.services.backup_service import BackupService
from dailyreps_backup.services.rate_limiter import RateLimiter
from dailyreps_backup.services.record_store import RecordStore

TEST_APP_SECRET = "test-app-secret"
TEST_ADMIN_SECRET = "test-admin-secret"
START_TIME = 1_760_000_000


class FakeClock:
    """Manually advanced Unix clock shared by the store and the service."""

    def __init__(self, now: int = START_TIME) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


def hashed(name: str) -> str:
    """Return the identifier a client derives from `name`."""
    return hashlib.sha256(name.encode("utf-8")).hexdigest()


def make_envelope(ciphertext: bytes | None = None, app: str = "dailyreps") -> str:
    """Build an upload envelope; random ciphertext unless one is given."""
    raw = os.urandom(512) if ciphertext is None else ciphertext
    return json.dumps({"app": app, "ciphertext": base64.b64encode(raw).decode("ascii")})


def store_payload(
    user_id: str,
    storage_key: str,
    data: str,
    timestamp: int,
    secret: str = TEST_APP_SECRET,
) -> dict[str, object]:
    """Return a signed `POST /api/backup` body."""
    return {
        "userId": user_id,
        "storageKey": storage_key,
        "data": data,
        "timestamp": timestamp,
        "signature": sign_request(secret, timestamp, user_id, storage_key, data),
    }


def delete_payload(
    user_id: str,
    storage_key: str,
    timestamp: int,
    secret: str = TEST_APP_SECRET,
) -> dict[str, object]:
    """Return a signed `DELETE /api/user` body."""
    return {
        "userId": user_id,
        "storageKey": storage_key,
        "timestamp": timestamp,
        "signature": sign_request(secret, timestamp, user_id, storage_key),
    }


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def test_settings(tmp_path: Path) -> Settings:
    """Provide settings pointing at a throwaway file database."""
    return Settings(
        app_secret_key=TEST_APP_SECRET,
        admin_secret_key=TEST_ADMIN_SECRET,
        database_url=f"sqlite:///{tmp_path / 'backups.db'}",
        storage_workers=4,
    )


@pytest.fixture()
def engine(test_settings: Settings) -> Iterator[Engine]:
    engine = build_engine(test_settings.effective_database_url)
    create_tables(engine)
    try:
        yield engine
    finally:
        drop_tables(engine)
        engine.dispose()


@pytest.fixture()
def store(engine: Engine, clock: FakeClock) -> RecordStore:
    return RecordStore(engine, clock=clock)


@pytest.fixture()
def rate_limiter(test_settings: Settings) -> RateLimiter:
    return RateLimiter(test_settings.rate_limit_policy)


@pytest.fixture()
def service(store: RecordStore, test_settings: Settings) -> BackupService:
    return BackupService(store, test_settings)


@pytest.fixture()
def app(test_settings: Settings, store: RecordStore) -> FastAPI:
    return create_app(test_settings, store)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def alice() -> str:
    return hashed("alice")


@pytest.fixture()
def alice_key() -> str:
    return hashed("alice:storage:0")
