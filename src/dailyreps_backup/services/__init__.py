# src/dailyreps_backup/services/__init__.py
"""Business logic services for the backup server."""

from .backup_service import BackupService
from .rate_limiter import RateLimiter
from .record_store import RecordStore, StoredBlob, StoreStats

__all__ = [
    "BackupService",
    "RateLimiter",
    "RecordStore",
    "StoredBlob",
    "StoreStats",
]
