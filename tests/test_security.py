"""Tests for HMAC signatures and the replay window."""

import pytest

from dailyreps_backup.core.errors import UnauthorizedError
from dailyreps_backup.core.security import (
    canonical_message,
    compute_signature,
    sign_request,
    validate_timestamp,
    verify_hmac,
)
from dailyreps_backup.services.signing import (
    delete_message,
    store_message,
    verify_signed_request,
)

SECRET = "shared-app-secret"
NOW = 1_760_000_000
MAX_AGE = 300


class TestVerifyHmac:
    """HMAC-SHA256 verification."""

    def test_signature_is_deterministic(self) -> None:
        message = canonical_message(NOW, "user", "key", "data")
        assert compute_signature(SECRET, message) == compute_signature(SECRET, message)
        assert len(compute_signature(SECRET, message)) == 64

    def test_valid_signature_is_accepted(self) -> None:
        message = b"hello"
        assert verify_hmac(message, compute_signature(SECRET, message), SECRET) is True

    def test_uppercase_hex_is_accepted(self) -> None:
        message = b"hello"
        assert verify_hmac(message, compute_signature(SECRET, message).upper(), SECRET) is True

    def test_one_byte_change_in_message_is_rejected(self) -> None:
        signature = compute_signature(SECRET, b"hello")
        assert verify_hmac(b"hellp", signature, SECRET) is False

    def test_one_nibble_change_in_signature_is_rejected(self) -> None:
        signature = compute_signature(SECRET, b"hello")
        flipped = ("0" if signature[0] != "0" else "1") + signature[1:]
        assert verify_hmac(b"hello", flipped, SECRET) is False

    def test_wrong_secret_is_rejected(self) -> None:
        signature = compute_signature("other-secret", b"hello")
        assert verify_hmac(b"hello", signature, SECRET) is False

    @pytest.mark.parametrize("signature", ["", "zz" * 32, "ab" * 31, "ab" * 33, "not hex at all"])
    def test_malformed_signature_is_rejected(self, signature: str) -> None:
        assert verify_hmac(b"hello", signature, SECRET) is False


class TestValidateTimestamp:
    """Symmetric, inclusive replay window."""

    @pytest.mark.parametrize("offset", [0, MAX_AGE, -MAX_AGE, 1, -1])
    def test_within_window(self, offset: int) -> None:
        assert validate_timestamp(NOW + offset, MAX_AGE, now=NOW) is True

    @pytest.mark.parametrize("offset", [MAX_AGE + 1, -(MAX_AGE + 1), 10_000, -10_000])
    def test_outside_window(self, offset: int) -> None:
        assert validate_timestamp(NOW + offset, MAX_AGE, now=NOW) is False

    def test_defaults_to_wall_clock(self) -> None:
        assert validate_timestamp(0, MAX_AGE) is False


class TestSignedRequests:
    def test_store_message_layout(self) -> None:
        assert store_message(NOW, "u", "k", "d") == f"{NOW}\nu\nk\nd".encode()

    def test_delete_message_layout(self) -> None:
        assert delete_message(NOW, "u", "k") == f"{NOW}\nu\nk".encode()

    def test_signed_recent_request_passes(self) -> None:
        signature = sign_request(SECRET, NOW, "u", "k")
        verify_signed_request(
            delete_message(NOW, "u", "k"),
            signature,
            NOW,
            secret=SECRET,
            max_age_seconds=MAX_AGE,
            now=NOW + MAX_AGE,
        )

    def test_stale_request_is_unauthorized(self) -> None:
        signature = sign_request(SECRET, NOW, "u", "k")
        with pytest.raises(UnauthorizedError):
            verify_signed_request(
                delete_message(NOW, "u", "k"),
                signature,
                NOW,
                secret=SECRET,
                max_age_seconds=MAX_AGE,
                now=NOW + MAX_AGE + 1,
            )

    def test_refreshed_timestamp_breaks_signature(self) -> None:
        signature = sign_request(SECRET, NOW, "u", "k")
        later = NOW + 1000
        with pytest.raises(UnauthorizedError) as exc_info:
            verify_signed_request(
                delete_message(later, "u", "k"),
                signature,
                later,
                secret=SECRET,
                max_age_seconds=MAX_AGE,
                now=later,
            )
        assert exc_info.value.public_message == UnauthorizedError.default_message
