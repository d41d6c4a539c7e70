"""
Tests for timestamp-window + signature admin authentication.
"""

import pytest

from vigils.core.admin_auth import (
    ExpiredTimestampError,
    InvalidSignatureError,
    MissingCredentialsError,
    verify_admin_request,
)
from vigils.core.identity import generate_keys, sign_message

NOW_MS = 1_736_964_000_000


@pytest.fixture
def keys():
    return generate_keys()


def _signed(private_hex, timestamp_ms):
    timestamp = str(timestamp_ms)
    return timestamp, sign_message(private_hex, timestamp)


class TestVerifyAdminRequest:

    def test_fresh_valid_signature_passes(self, keys):
        timestamp, signature = _signed(keys[0], NOW_MS - 5_000)
        verify_admin_request(timestamp, signature, keys[1], now_ms=NOW_MS)

    def test_window_edge_passes(self, keys):
        timestamp, signature = _signed(keys[0], NOW_MS - 120_000)
        verify_admin_request(timestamp, signature, keys[1], now_ms=NOW_MS)

    def test_121_seconds_old_is_expired_even_with_valid_signature(self, keys):
        timestamp, signature = _signed(keys[0], NOW_MS - 121_000)
        with pytest.raises(ExpiredTimestampError) as exc_info:
            verify_admin_request(timestamp, signature, keys[1], now_ms=NOW_MS)
        assert exc_info.value.status_code == 401

    def test_future_timestamp_outside_window_is_expired(self, keys):
        timestamp, signature = _signed(keys[0], NOW_MS + 121_000)
        with pytest.raises(ExpiredTimestampError):
            verify_admin_request(timestamp, signature, keys[1], now_ms=NOW_MS)

    def test_expiry_checked_before_signature(self, keys):
        with pytest.raises(ExpiredTimestampError):
            verify_admin_request(str(NOW_MS - 121_000), "00" * 64, keys[1], now_ms=NOW_MS)

    def test_wrong_key_is_forbidden(self, keys):
        other_private, _ = generate_keys()
        timestamp, signature = _signed(other_private, NOW_MS)
        with pytest.raises(InvalidSignatureError) as exc_info:
            verify_admin_request(timestamp, signature, keys[1], now_ms=NOW_MS)
        assert exc_info.value.status_code == 403

    def test_signature_over_other_timestamp_is_forbidden(self, keys):
        _, signature = _signed(keys[0], NOW_MS - 1)
        with pytest.raises(InvalidSignatureError):
            verify_admin_request(str(NOW_MS), signature, keys[1], now_ms=NOW_MS)

    @pytest.mark.parametrize("timestamp,signature", [
        (None, "abc"),
        ("123", None),
        ("", ""),
    ])
    def test_missing_parameters(self, keys, timestamp, signature):
        with pytest.raises(MissingCredentialsError) as exc_info:
            verify_admin_request(timestamp, signature, keys[1], now_ms=NOW_MS)
        assert exc_info.value.status_code == 400

    def test_non_numeric_timestamp(self, keys):
        with pytest.raises(MissingCredentialsError):
            verify_admin_request("yesterday", "00" * 64, keys[1], now_ms=NOW_MS)

    def test_custom_window(self, keys):
        timestamp, signature = _signed(keys[0], NOW_MS - 2_000)
        with pytest.raises(ExpiredTimestampError):
            verify_admin_request(timestamp, signature, keys[1], now_ms=NOW_MS, window_ms=1_000)
