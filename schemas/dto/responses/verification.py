"""
Result DTOs for the one-time code flows.

VerificationResult  outcome of a successful OtpService.verify()
ResendStatus        OtpService.can_resend()
CodeDelivery        account verification flow after a code was issued
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class VerificationResult(BaseModel):
    """A code matched.

    reset_token is only present for the password reset purpose, where the
    record stays alive until the token is consumed.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: str
    purpose: str
    reset_token: Optional[str] = None
    reset_token_expires_at: Optional[datetime] = None


class ResendStatus(BaseModel):
    """Whether a new code may be requested right now."""

    model_config = ConfigDict(populate_by_name=True)

    allowed: bool
    resend_count: int = 0
    wait_seconds: Optional[int] = None  # only set when allowed is False


class CodeDelivery(BaseModel):
    """A code was issued and handed to the email provider."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str
    email: str
    purpose: str
    sent: bool
