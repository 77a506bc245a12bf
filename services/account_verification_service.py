"""
Account verification and password reset flows.

Sits between the request handlers and OtpService: looks users up, asks
the OTP engine for codes, hands them to the email provider and applies
the account change once a code or reset token checks out.
"""

from __future__ import annotations

from typing import Union

from bson import ObjectId

from errors import ConflictError, NotFoundError
from infrastructure.email.protocol import EmailProvider
from repositories.user_repository import UserRepository
from schemas.dto.responses.verification import CodeDelivery, VerificationResult
from schemas.models.token import PURPOSE_EMAIL_VERIFY, PURPOSE_PASSWORD_RESET
from schemas.models.user import UserDoc
from services.otp_service import OtpService
from shared.logging import get_logger

log = get_logger(__name__)


class AccountVerificationService:
    def __init__(
        self,
        users: UserRepository,
        otp: OtpService,
        email_provider: EmailProvider,
    ) -> None:
        self._users = users
        self._otp = otp
        self._email = email_provider

    def _load(self, user_id: Union[str, ObjectId]) -> UserDoc:
        user = self._users.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def send_email_verification(self, user_id: Union[str, ObjectId]) -> CodeDelivery:
        """Issue an email verification code and send it.

        A failed send is logged and reported; the issued code stays valid
        so a later resend is subject to the normal rate limit.
        """
        user = self._load(user_id)
        if user.email_verified:
            raise ConflictError("Email is already verified")

        code = self._otp.create_code(user.id, user.email, PURPOSE_EMAIL_VERIFY)
        sent = self._email.send_verification_email(user.email, user.user_name, code)
        if not sent:
            log.error("verification_email_send_failed", user_id=str(user.id))
        return CodeDelivery(
            user_id=str(user.id), email=user.email, purpose=PURPOSE_EMAIL_VERIFY, sent=sent
        )

    def confirm_email(self, user_id: Union[str, ObjectId], code: str) -> UserDoc:
        user = self._load(user_id)
        if user.email_verified:
            raise ConflictError("Email is already verified")

        self._otp.verify(user.id, code, PURPOSE_EMAIL_VERIFY)
        self._users.update(user.id, {"email_verified": True})
        user.email_verified = True
        log.info("email_verified", user_id=str(user.id))
        return user

    def request_password_reset(self, email: str) -> CodeDelivery:
        user = self._users.find_by_email(email)
        if user is None:
            raise NotFoundError("No account found with that email", field="email")

        code = self._otp.create_code(user.id, user.email, PURPOSE_PASSWORD_RESET)
        sent = self._email.send_password_reset_email(user.email, user.user_name, code)
        if not sent:
            log.error("password_reset_email_send_failed", user_id=str(user.id))
        return CodeDelivery(
            user_id=str(user.id), email=user.email, purpose=PURPOSE_PASSWORD_RESET, sent=sent
        )

    def verify_password_reset(self, user_id: Union[str, ObjectId], code: str) -> VerificationResult:
        """Check a reset code; the result carries the reset token for the next step."""
        user = self._load(user_id)
        return self._otp.verify(user.id, code, PURPOSE_PASSWORD_RESET)

    def complete_password_reset(
        self, user_id: Union[str, ObjectId], reset_token: str, password_hash: str
    ) -> None:
        """Store *password_hash* once the reset token is consumed.

        Hashing the new password is the caller's job.
        """
        user = self._load(user_id)
        self._otp.consume_reset_token(user.id, reset_token)
        self._users.update(user.id, {"password_hash": password_hash})
        log.info("password_reset_completed", user_id=str(user.id))
