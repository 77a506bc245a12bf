"""
Random code and token generators. Pure functions without side effects.

All generators use the ``secrets`` module.
"""

from __future__ import annotations

import secrets


def generate_otp_code(length: int = 6) -> str:
    """Generate a numeric OTP drawn uniformly from ``10**(length-1)`` to ``10**length - 1``.

    The first digit is never zero, so a 6-digit code is always in
    100000–999999.

    Args:
        length: Number of digits (default 6).

    Returns:
        String of decimal digits.
    """
    low = 10 ** (length - 1)
    return str(low + secrets.randbelow(9 * low))


def generate_secure_token(length: int = 32) -> str:
    """Generate a cryptographically secure URL-safe random token.

    Args:
        length: Number of random bytes before base64 encoding (default 32).
            The resulting string will be longer than *length* characters.

    Returns:
        URL-safe base64-encoded token string.
    """
    return secrets.token_urlsafe(length)
