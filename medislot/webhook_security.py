"""
Webhook Security Module

Signature verification for the payment gateway callback:
- Constant-time signature comparison
- Timestamp validation against replays
"""

import hashlib
import hmac
import logging
import time
from typing import Optional

from fastapi import HTTPException, Request

logger = logging.getLogger(__name__)

# Maximum age of webhook in seconds (5 minutes)
MAX_WEBHOOK_AGE_SECONDS = 300

SIGNATURE_HEADER = "X-Signature"
TIMESTAMP_HEADER = "X-Timestamp"


def constant_time_compare(a: str, b: str) -> bool:
    """
    Compare two strings in constant time to prevent timing attacks.
    Uses hmac.compare_digest which is designed for this purpose.
    """
    if not a or not b:
        return False
    return hmac.compare_digest(a, b)


def compute_hmac_sha256(secret: str, payload: bytes) -> str:
    """Compute HMAC-SHA256 signature of payload"""
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def verify_timestamp(timestamp: Optional[str], max_age: int = MAX_WEBHOOK_AGE_SECONDS) -> bool:
    """
    Verify webhook timestamp is within acceptable range.

    Args:
        timestamp: Unix timestamp string from webhook header
        max_age: Maximum allowed age in seconds

    Returns:
        True if timestamp is valid and recent
    """
    if not timestamp:
        logger.warning("⚠️ Webhook missing timestamp")
        return False

    try:
        webhook_time = int(timestamp)
    except (ValueError, TypeError):
        logger.warning(f"⚠️ Invalid webhook timestamp format: {timestamp}")
        return False

    age = abs(int(time.time()) - webhook_time)
    if age > max_age:
        logger.warning(f"⚠️ Webhook timestamp too old: {age}s (max: {max_age}s)")
        return False
    return True


def create_webhook_signature(secret: str, payload: bytes, timestamp: str) -> str:
    """Signature the gateway sends for a payload (also used by tests)"""
    return compute_hmac_sha256(secret, timestamp.encode("utf-8") + b"." + payload)


async def verify_payment_webhook(request: Request, secret: str) -> bytes:
    """
    Verify a payment gateway callback and return its raw body.

    The signature is HMAC-SHA256 over "<timestamp>.<raw body>".

    Raises:
        HTTPException: 401 when the signature or timestamp is invalid
    """
    raw_body = await request.body()
    signature = request.headers.get(SIGNATURE_HEADER, "")
    timestamp = request.headers.get(TIMESTAMP_HEADER)

    logger.debug("📥 Payment webhook received")

    if not secret:
        logger.error("❌ PAYMENT_WEBHOOK_SECRET not configured")
        raise HTTPException(status_code=500, detail="Payment webhook not configured")

    if not signature:
        logger.warning("🚫 Payment webhook missing signature header")
        raise HTTPException(status_code=401, detail="Missing webhook signature")

    if not verify_timestamp(timestamp):
        raise HTTPException(status_code=401, detail="Webhook timestamp expired")

    expected = create_webhook_signature(secret, raw_body, timestamp)
    if not constant_time_compare(expected, signature):
        logger.warning("🚫 Payment webhook signature mismatch")
        raise HTTPException(status_code=401, detail="Invalid webhook signature")

    logger.debug("✅ Payment webhook signature verified")
    return raw_body
