# src/dailyreps_backup/models/__init__.py
"""SQLAlchemy models for the backup store."""

from .blob import Blob
from .identity import Identity
from .owner_blob_index import OwnerBlobIndex
from .rate_limit import RateLimitCounter

__all__ = [
    "Blob",
    "Identity",
    "OwnerBlobIndex",
    "RateLimitCounter",
]
