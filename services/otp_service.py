"""
One-time code engine for email verification and password reset.

Lifecycle of the single record kept per (user, purpose):

    NONE ──create_code──▶ ISSUED ──verify ok (email_verify)──▶ deleted
                           │  ▲
                           │  └── wrong code (attempts += 1)
                           │
                           ├──expired / attempts used up──▶ deleted
                           │
                           └──verify ok (password_reset)──▶ PENDING_RESET
                                                              │
                                       consume_reset_token ───┴──▶ deleted

Expiry is only ever detected when a record is read; the TTL index on
expires_at reaps abandoned records eventually but nothing here relies on it.
Codes and reset tokens are stored as SHA-256 digests, the plaintext is
returned to the caller for delivery.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Callable, Optional, Union

from bson import ObjectId

from config import OtpSettings
from errors import (
    AttemptsExhaustedError,
    CodeExpiredError,
    CodeMismatchError,
    CodeNotFoundError,
    InvalidResetTokenError,
    ResendRateLimitedError,
    ValidationError,
)
from repositories.verification_token_repository import VerificationTokenRepository
from schemas.dto.responses.verification import ResendStatus, VerificationResult
from schemas.models.token import (
    PURPOSE_EMAIL_VERIFY,
    PURPOSE_PASSWORD_RESET,
    VerificationTokenDoc,
)
from shared.crypto import hash_token, token_matches
from shared.datetime_utils import utc_now
from shared.generators import generate_otp_code, generate_secure_token
from shared.logging import get_logger, log_with_context

log = get_logger(__name__)

PURPOSES = (PURPOSE_EMAIL_VERIFY, PURPOSE_PASSWORD_RESET)


class OtpService:
    def __init__(
        self,
        tokens: VerificationTokenRepository,
        settings: Optional[OtpSettings] = None,
        *,
        now: Callable[[], datetime] = utc_now,
        code_generator: Callable[[int], str] = generate_otp_code,
        token_generator: Callable[[int], str] = generate_secure_token,
    ) -> None:
        self._tokens = tokens
        self._settings = settings or OtpSettings()
        self._now = now
        self._generate_code = code_generator
        self._generate_token = token_generator

    # ── internals ────────────────────────────────────────────────────────────

    @staticmethod
    def _check_purpose(purpose: str) -> None:
        if purpose not in PURPOSES:
            raise ValidationError(f"Unknown verification purpose: {purpose}", field="purpose")

    def _recent(
        self, token: Optional[VerificationTokenDoc], now: datetime
    ) -> Optional[VerificationTokenDoc]:
        """Return *token* if it was issued inside the resend window."""
        if token is None:
            return None
        if token.last_resend_at < now - self._settings.resend_window:
            return None
        return token

    def _window_remaining_seconds(self, token: VerificationTokenDoc, now: datetime) -> float:
        window_end = token.last_resend_at + self._settings.resend_window
        return (window_end - now).total_seconds()

    # ── public API ───────────────────────────────────────────────────────────

    def create_code(self, user_id: Union[str, ObjectId], email: str, purpose: str) -> str:
        """Issue a fresh code for (user_id, purpose) and return it in plaintext.

        Raises:
            ResendRateLimitedError: max_resends codes were already issued
                inside the current window.
        """
        self._check_purpose(purpose)
        now = self._now()
        settings = self._settings

        recent = self._recent(self._tokens.find(user_id, purpose), now)
        if recent is not None and recent.resend_count >= settings.otp_max_resends:
            wait_minutes = math.ceil(self._window_remaining_seconds(recent, now) / 60)
            log.warning(
                "otp_rate_limited",
                user_id=str(user_id),
                purpose=purpose,
                resend_count=recent.resend_count,
                wait_minutes=wait_minutes,
            )
            raise ResendRateLimitedError(wait_minutes)

        self._tokens.delete_for_user(user_id, purpose)

        plain_code = self._generate_code(settings.otp_code_length)
        token = VerificationTokenDoc(
            user_id=user_id,
            email=email.strip().lower(),
            purpose=purpose,
            code_hash=hash_token(plain_code),
            max_attempts=settings.otp_max_attempts,
            resend_count=recent.resend_count + 1 if recent is not None else 1,
            last_resend_at=now,
            expires_at=now + settings.code_ttl,
            created_at=now,
        )
        token_id = self._tokens.create(token)

        log.info(
            "otp_issued",
            user_id=str(user_id),
            record_id=str(token_id),
            purpose=purpose,
            resend_count=token.resend_count,
        )
        return plain_code

    def verify(
        self, user_id: Union[str, ObjectId], code: str, purpose: str
    ) -> VerificationResult:
        """Check *code* against the record for (user_id, purpose).

        An email code is consumed on success. A password reset code keeps
        its record and gains a short-lived reset token instead, which
        consume_reset_token() later trades for the password change.
        """
        self._check_purpose(purpose)
        now = self._now()
        vlog = log_with_context(log, user_id=str(user_id), purpose=purpose)

        token = self._tokens.find(user_id, purpose)
        if token is None:
            vlog.warning("otp_verify_failed", reason="not_found")
            raise CodeNotFoundError()

        if token.expires_at < now:
            self._tokens.delete(token.id)
            vlog.warning("otp_verify_failed", reason="expired")
            raise CodeExpiredError()

        if token.attempts >= token.max_attempts:
            self._tokens.delete(token.id)
            vlog.warning("otp_verify_failed", reason="max_attempts")
            raise AttemptsExhaustedError()

        if not token_matches(code, token.code_hash):
            attempts = self._tokens.increment_attempts(token.id)
            if attempts is None:
                raise CodeNotFoundError()
            remaining = max(0, token.max_attempts - attempts)
            if remaining == 0:
                self._tokens.delete(token.id)
                vlog.warning("otp_verify_failed", reason="max_attempts")
                raise AttemptsExhaustedError()
            vlog.warning(
                "otp_verify_failed",
                reason="mismatch",
                remaining_attempts=remaining,
            )
            raise CodeMismatchError(remaining)

        if purpose == PURPOSE_PASSWORD_RESET:
            return self._start_reset_handoff(token, now)

        self._tokens.delete(token.id)
        vlog.info("otp_verified")
        return VerificationResult(user_id=str(token.user_id), purpose=purpose)

    def _start_reset_handoff(
        self, token: VerificationTokenDoc, now: datetime
    ) -> VerificationResult:
        reset_token = self._generate_token(self._settings.otp_reset_token_bytes)
        reset_expires_at = now + self._settings.reset_token_ttl
        self._tokens.update(
            token.id,
            {
                "reset_token_hash": hash_token(reset_token),
                "reset_token_expires_at": reset_expires_at,
                # keep the TTL reaper away from a live handoff
                "expires_at": max(token.expires_at, reset_expires_at),
            },
        )
        log.info("otp_verified", user_id=str(token.user_id), purpose=PURPOSE_PASSWORD_RESET)
        return VerificationResult(
            user_id=str(token.user_id),
            purpose=PURPOSE_PASSWORD_RESET,
            reset_token=reset_token,
            reset_token_expires_at=reset_expires_at,
        )

    def can_resend(self, user_id: Union[str, ObjectId], purpose: str) -> ResendStatus:
        """Report whether create_code() would currently be allowed. Read-only."""
        self._check_purpose(purpose)
        now = self._now()

        recent = self._recent(self._tokens.find(user_id, purpose), now)
        if recent is None:
            return ResendStatus(allowed=True, resend_count=0)

        if recent.resend_count >= self._settings.otp_max_resends:
            return ResendStatus(
                allowed=False,
                resend_count=recent.resend_count,
                wait_seconds=math.ceil(self._window_remaining_seconds(recent, now)),
            )
        return ResendStatus(allowed=True, resend_count=recent.resend_count)

    def consume_reset_token(self, user_id: Union[str, ObjectId], reset_token: str) -> ObjectId:
        """Trade a verified reset token for permission to change the password.

        Returns the user id; the record is gone afterwards either way.
        """
        now = self._now()
        token = self._tokens.find_by_reset_token(user_id, hash_token(reset_token))
        if token is None or token.reset_token_expires_at is None:
            log.warning("reset_token_rejected", user_id=str(user_id), reason="not_found")
            raise InvalidResetTokenError()

        if token.reset_token_expires_at < now:
            self._tokens.delete(token.id)
            log.warning("reset_token_rejected", user_id=str(user_id), reason="expired")
            raise InvalidResetTokenError("Reset token has expired. Please start over.")

        self._tokens.delete(token.id)
        log.info("reset_token_consumed", user_id=str(token.user_id))
        return token.user_id
