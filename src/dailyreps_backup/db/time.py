# src/dailyreps_backup/db/time.py
"""Time utilities for persisted records."""

import time
from datetime import UTC, datetime


def epoch_seconds() -> int:
    """Return the current Unix time in whole seconds."""
    return int(time.time())


def to_rfc3339(timestamp: int) -> str:
    """Render a stored Unix timestamp as an RFC 3339 UTC string."""
    return datetime.fromtimestamp(timestamp, UTC).isoformat()
