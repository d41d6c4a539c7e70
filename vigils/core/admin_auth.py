"""
Stateless admin authentication.

The administrator signs the current timestamp (ms since epoch) with the
private key matching the configured public key. A request is accepted when
the timestamp is within the window and the signature verifies. No sessions.
"""

import time

from . import config
from .identity import verify_signature
from util.logging import logger


class AdminAuthError(Exception):
    """Base class for admin authentication failures."""
    status_code = 403
    reason = "Forbidden"


class MissingCredentialsError(AdminAuthError):
    status_code = 400
    reason = "Missing timestamp or signature"


class ExpiredTimestampError(AdminAuthError):
    status_code = 401
    reason = "Timestamp expired"


class InvalidSignatureError(AdminAuthError):
    status_code = 403
    reason = "Invalid signature"


def verify_admin_request(timestamp: str, signature: str, public_key: str = None,
                         now_ms: int = None, window_ms: int = None, action: str = "admin") -> None:
    """
    Check an admin request's timestamp window, then its signature.

    An expired timestamp is rejected before the signature is looked at.

    Raises:
        MissingCredentialsError: timestamp or signature absent, or timestamp not an integer.
        ExpiredTimestampError: |now - timestamp| exceeds the window.
        InvalidSignatureError: signature does not verify against the public key.
    """
    if public_key is None:
        public_key = config.ADMIN_PUBKEY
    if window_ms is None:
        window_ms = config.ADMIN_SIGNATURE_WINDOW_MS
    if now_ms is None:
        now_ms = int(time.time() * 1000)

    if not timestamp or not signature:
        logger.log_admin_access(action, False, "missing credentials")
        raise MissingCredentialsError(MissingCredentialsError.reason)

    try:
        request_time = int(timestamp)
    except ValueError:
        logger.log_admin_access(action, False, "non-numeric timestamp")
        raise MissingCredentialsError("Invalid timestamp")

    if abs(now_ms - request_time) > window_ms:
        logger.log_admin_access(action, False, "timestamp expired")
        raise ExpiredTimestampError(ExpiredTimestampError.reason)

    if not verify_signature(signature, timestamp, public_key):
        logger.log_admin_access(action, False, "invalid signature")
        raise InvalidSignatureError(InvalidSignatureError.reason)

    logger.log_admin_access(action, True)
