"""Upload envelope parsing and ciphertext randomness estimation.

The entropy check is a soft anti-abuse signal: it flags uploads that are
probably not genuine ciphertext (plain JSON, repeated filler) so the store is
not used as free general-purpose storage. It proves nothing cryptographically
and the threshold is a tunable policy parameter.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import math
from collections import Counter
from dataclasses import dataclass

from dailyreps_backup.core.errors import (
    ERR_INVALID_ENVELOPE,
    MalformedInputError,
    PayloadTooLargeError,
)
from dailyreps_backup.core.settings import Settings

logger = logging.getLogger(__name__)

APP_TAG_FIELD = "app"
CIPHERTEXT_FIELD = "ciphertext"
_MAX_BITS_PER_BYTE = math.log2(256)


@dataclass(frozen=True)
class EnvelopePolicy:
    """Limits applied to every uploaded envelope."""

    app_tag: str
    max_size_bytes: int
    warn_size_bytes: int
    entropy_threshold: float

    @classmethod
    def from_settings(cls, settings: Settings) -> EnvelopePolicy:
        return cls(
            app_tag=settings.envelope_app_tag,
            max_size_bytes=settings.max_backup_size_bytes,
            warn_size_bytes=settings.warn_backup_size_bytes,
            entropy_threshold=settings.entropy_threshold,
        )


@dataclass(frozen=True)
class InspectedEnvelope:
    """Facts established about an accepted upload."""

    size_bytes: int
    ciphertext_bytes: int
    entropy: float


def shannon_entropy(data: bytes) -> float:
    """Return the Shannon entropy of `data`, normalised to [0, 1].

    The value in bits per byte is divided by 8 (`log2(256)`), the entropy of
    a uniform byte distribution. Inputs of zero or one byte carry no
    information and score 0.
    """
    length = len(data)
    if length <= 1:
        return 0.0

    bits = 0.0
    for count in Counter(data).values():
        probability = count / length
        bits -= probability * math.log2(probability)

    return min(1.0, bits / _MAX_BITS_PER_BYTE)


def check_payload_size(raw: str, policy: EnvelopePolicy) -> int:
    """Return the UTF-8 size of `raw`, rejecting anything over the ceiling."""
    size = len(raw.encode("utf-8"))
    if size > policy.max_size_bytes:
        logger.warning("Payload too large: %d bytes (max: %d)", size, policy.max_size_bytes)
        raise PayloadTooLargeError()
    if size > policy.warn_size_bytes:
        logger.info("Large backup: %d bytes", size)
    return size


def _decode_ciphertext(envelope: object, policy: EnvelopePolicy) -> bytes:
    if not isinstance(envelope, dict):
        raise MalformedInputError(ERR_INVALID_ENVELOPE)
    if envelope.get(APP_TAG_FIELD) != policy.app_tag:
        logger.warning("Envelope rejected: application tag mismatch")
        raise MalformedInputError(ERR_INVALID_ENVELOPE)

    encoded = envelope.get(CIPHERTEXT_FIELD)
    if not isinstance(encoded, str) or not encoded:
        raise MalformedInputError(ERR_INVALID_ENVELOPE)
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as err:
        raise MalformedInputError(ERR_INVALID_ENVELOPE) from err


def inspect_envelope(raw: str, policy: EnvelopePolicy) -> InspectedEnvelope:
    """Validate an upload before it reaches the rate limiter and the store.

    Checks run in order: size ceiling, envelope structure and application
    tag, then ciphertext entropy.

    Raises:
        PayloadTooLargeError: If `raw` exceeds the configured ceiling.
        MalformedInputError: If parsing, the tag check or the entropy check fails.
    """
    size = check_payload_size(raw, policy)

    try:
        envelope = json.loads(raw)
    except ValueError as err:
        raise MalformedInputError(ERR_INVALID_ENVELOPE) from err

    ciphertext = _decode_ciphertext(envelope, policy)
    entropy = shannon_entropy(ciphertext)
    if entropy < policy.entropy_threshold:
        logger.warning(
            "Envelope rejected: ciphertext entropy %.3f below threshold %.3f",
            entropy,
            policy.entropy_threshold,
        )
        raise MalformedInputError(ERR_INVALID_ENVELOPE)

    return InspectedEnvelope(size_bytes=size, ciphertext_bytes=len(ciphertext), entropy=entropy)
