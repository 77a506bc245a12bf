"""
Token hashing helpers.

One-time codes and reset tokens are stored as SHA-256 digests so the
plaintext never reaches the database.
"""

from __future__ import annotations

import hashlib
import hmac


def hash_token(token: str) -> str:
    """Return the hex-encoded SHA-256 digest of *token*.

    Args:
        token: The plaintext token string to hash.

    Returns:
        64-character lowercase hex string.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def token_matches(token: str, token_hash: str) -> bool:
    """Constant-time comparison of *token* against a stored digest."""
    return hmac.compare_digest(hash_token(token), token_hash)
