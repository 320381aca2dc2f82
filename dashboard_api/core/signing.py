"""HMAC signing for payment-portal iframe query strings."""

import hashlib
import hmac


def hmac_sha256_hex(message: str, key: str) -> str:
    """HMAC-SHA256 of ``message`` keyed with ``key``, hex encoded."""
    return hmac.new(key.encode(), message.encode(), hashlib.sha256).hexdigest()
