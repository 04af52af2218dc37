"""HMAC request signatures and replay-window checks."""
from __future__ import annotations

import binascii
import hashlib
import hmac
import logging
import time

logger = logging.getLogger(__name__)

MAC_DIGEST = hashlib.sha256
MAC_HEX_LENGTH = 64  # 32 bytes


def canonical_message(*fields: str | int) -> bytes:
    """Join signed request fields into the exact bytes the client MACs.

    Fields are newline-separated in a fixed order. Identifiers are fixed-length
    hex and timestamps are decimal integers, so only the final field may carry
    arbitrary text; the encoding is therefore unambiguous.
    """
    return "\n".join(str(field) for field in fields).encode("utf-8")


def compute_signature(secret: str, message: bytes) -> str:
    """Return the hex-encoded HMAC-SHA256 of `message` under `secret`."""
    return hmac.new(secret.encode("utf-8"), message, MAC_DIGEST).hexdigest()


def sign_request(secret: str, *fields: str | int) -> str:
    """Produce the signature a legitimate client attaches to a request."""
    return compute_signature(secret, canonical_message(*fields))


def verify_hmac(message: bytes, signature_hex: str, secret: str) -> bool:
    """Verify a client-supplied HMAC-SHA256 signature.

    Args:
        message: Canonical bytes that were allegedly signed.
        signature_hex: Hex-encoded signature supplied by the client.
        secret: Shared application secret.

    Returns:
        True if the signature matches; False otherwise. The comparison runs in
        time independent of the position of the first mismatching byte.
    """
    if len(signature_hex) != MAC_HEX_LENGTH:
        logger.warning("Rejected signature with unexpected length")
        return False
    try:
        supplied = binascii.unhexlify(signature_hex)
    except (binascii.Error, ValueError):
        logger.warning("Rejected signature with invalid hex encoding")
        return False

    expected = hmac.new(secret.encode("utf-8"), message, MAC_DIGEST).digest()
    if not hmac.compare_digest(supplied, expected):
        logger.warning("HMAC signature mismatch")
        return False
    return True


def validate_timestamp(timestamp: int, max_age_seconds: int, now: int | None = None) -> bool:
    """Return True if `timestamp` lies within `max_age_seconds` of the server clock.

    The window is symmetric and inclusive, so stale replays and clock-skewed
    future timestamps are rejected alike.
    """
    current = int(time.time()) if now is None else now
    age_seconds = abs(current - timestamp)
    if age_seconds > max_age_seconds:
        logger.warning("Timestamp outside window: %d seconds (max: %d)", age_seconds, max_age_seconds)
        return False
    return True
