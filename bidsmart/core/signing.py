"""HMAC signing and verification for MindPal callbacks.

MindPal signs ``"<pdf_upload_id>:<timestamp>"`` with the shared callback
secret (HMAC-SHA256, base64 encoded) and echoes the timestamp it was given.
A callback is accepted only when the signature matches and the timestamp is
no older than ``MAX_CALLBACK_AGE``.
"""

import base64
import hashlib
import hmac
from datetime import datetime, timedelta, timezone
from typing import Optional

from bidsmart.core.exceptions import (
    ConfigurationError,
    ExpiredRequestError,
    InvalidSignatureError,
    MissingCallbackFieldsError,
)
from bidsmart.utils.logging import get_logger

LOGGER = get_logger(__name__)

MAX_CALLBACK_AGE = timedelta(hours=1)


def create_callback_payload(pdf_upload_id: str, timestamp: str) -> str:
    """Build the string that is signed for a callback."""
    return f"{pdf_upload_id}:{timestamp}"


def generate_signature(payload: str, secret: str) -> str:
    """Compute the base64 HMAC-SHA256 signature of ``payload``."""
    digest = hmac.new(
        secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256
    ).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_signature(payload: str, signature: str, secret: str) -> bool:
    """Check ``signature`` against the expected one in constant time."""
    expected = generate_signature(payload, secret)
    return hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8"))


def parse_timestamp(timestamp: str) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp, treating naive values as UTC.

    Returns:
        The aware datetime, or None if the value cannot be parsed
    """
    try:
        parsed = datetime.fromisoformat(timestamp.strip().replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def verify_callback(
    request_id: Optional[str],
    timestamp: Optional[str],
    signature: Optional[str],
    secret: Optional[str],
    now: Optional[datetime] = None,
) -> None:
    """Authenticate a MindPal callback.

    Args:
        request_id: The pdf upload id echoed by MindPal
        timestamp: ISO timestamp that was signed
        signature: Base64 HMAC signature from the payload
        secret: Shared callback secret
        now: Reference time, defaults to the current UTC time

    Raises:
        ConfigurationError: If no secret is configured
        MissingCallbackFieldsError: If any of the signed fields is missing
        InvalidSignatureError: If the signature does not match
        ExpiredRequestError: If the timestamp is too old or unparseable
    """
    if not secret:
        LOGGER.error("MINDPAL_CALLBACK_SECRET not configured")
        raise ConfigurationError("Server configuration error")

    if not request_id or not signature or not timestamp:
        raise MissingCallbackFieldsError(
            "Missing required fields: request_id, signature, or timestamp"
        )

    payload = create_callback_payload(str(request_id), str(timestamp))
    if not verify_signature(payload, str(signature), secret):
        LOGGER.error(f"Invalid HMAC signature for request: {request_id}")
        raise InvalidSignatureError("Invalid signature")

    signed_at = parse_timestamp(str(timestamp))
    if signed_at is None:
        LOGGER.error(f"Unparseable timestamp for request: {request_id}")
        raise ExpiredRequestError("Expired request")

    reference = now or datetime.now(timezone.utc)
    if reference - signed_at > MAX_CALLBACK_AGE:
        LOGGER.error(f"Expired timestamp for request: {request_id}")
        raise ExpiredRequestError("Expired request")
