"""
Verification token document model.

Maps to the `verification-tokens` MongoDB collection.

Used for both email verification OTPs and password reset OTPs. There is at
most one document per (user_id, purpose); issuing a new code replaces it.

code_hash stores SHA-256(otp_code); the plain OTP is never stored.
attempts tracks failed verification tries (max_attempts before the token is dead).
resend_count counts codes issued inside the current resend window.
reset_token_hash / reset_token_expires_at are only set on a password reset
record after its code was verified.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field

from schemas.models.base import MongoBaseModel, PyObjectId
from shared.datetime_utils import OptionalUtcDatetime, UtcDatetime


PURPOSE_EMAIL_VERIFY = "email_verify"
PURPOSE_PASSWORD_RESET = "password_reset"

Purpose = Literal["email_verify", "password_reset"]


class VerificationTokenDoc(MongoBaseModel):
    """Document model for the `verification-tokens` collection."""

    user_id: PyObjectId
    email: str
    purpose: Purpose
    code_hash: str
    attempts: int = Field(default=0, ge=0)
    max_attempts: int = Field(default=5, ge=1)
    resend_count: int = Field(default=0, ge=0)
    last_resend_at: UtcDatetime
    expires_at: UtcDatetime
    reset_token_hash: Optional[str] = None
    reset_token_expires_at: OptionalUtcDatetime = None
    created_at: OptionalUtcDatetime = None
