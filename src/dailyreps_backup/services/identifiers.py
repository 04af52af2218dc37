"""Format checks for hashed identifiers (user IDs and storage keys)."""
from __future__ import annotations

import string

from dailyreps_backup.core.errors import (
    ERR_INVALID_STORAGE_KEY,
    ERR_INVALID_USER_ID,
    MalformedInputError,
)

IDENTIFIER_HEX_LENGTH = 64  # SHA-256 digest
_HEX_DIGITS = frozenset(string.hexdigits)


def is_valid_identifier(value: str) -> bool:
    """Return True if `value` is exactly 64 ASCII hex digits (any case)."""
    return len(value) == IDENTIFIER_HEX_LENGTH and all(char in _HEX_DIGITS for char in value)


def normalize_identifier(value: str, message: str) -> str:
    """Validate `value` and return its lowercase form.

    Raises:
        MalformedInputError: If `value` is not a well-formed identifier.
    """
    if not is_valid_identifier(value):
        raise MalformedInputError(message)
    return value.lower()


def require_user_id(value: str, message: str = ERR_INVALID_USER_ID) -> str:
    return normalize_identifier(value, message)


def require_storage_key(value: str) -> str:
    return normalize_identifier(value, ERR_INVALID_STORAGE_KEY)
