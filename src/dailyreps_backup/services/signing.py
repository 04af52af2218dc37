"""High-level signed-request checks used by the request pipeline."""
from __future__ import annotations

from dailyreps_backup.core.errors import UnauthorizedError
from dailyreps_backup.core.security import canonical_message, validate_timestamp, verify_hmac


def store_message(timestamp: int, user_id: str, storage_key: str, data: str) -> bytes:
    """Canonical bytes a client signs when storing a backup."""
    return canonical_message(timestamp, user_id, storage_key, data)


def delete_message(timestamp: int, user_id: str, storage_key: str) -> bytes:
    """Canonical bytes a client signs when deleting its account."""
    return canonical_message(timestamp, user_id, storage_key)


def verify_signed_request(
    message: bytes,
    signature_hex: str,
    timestamp: int,
    *,
    secret: str,
    max_age_seconds: int,
    now: int,
) -> None:
    """Validate that a request was signed by the official app and is recent.

    The signature is checked first and the timestamp second; the timestamp is
    part of `message`, so a replayed request cannot be refreshed without the
    secret. Either failure raises the same `UnauthorizedError` so callers
    cannot tell which check rejected them.

    Raises:
        UnauthorizedError: If the signature or the timestamp is invalid.
    """
    if not verify_hmac(message, signature_hex, secret):
        raise UnauthorizedError("invalid signature")
    if not validate_timestamp(timestamp, max_age_seconds, now=now):
        raise UnauthorizedError("timestamp outside replay window")
