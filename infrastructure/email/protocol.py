"""EmailProvider protocol. Services depend on this, not on a concrete provider."""

from typing import Optional, Protocol


class EmailProvider(Protocol):
    def send_verification_email(
        self, email: str, user_name: Optional[str], otp_code: str
    ) -> bool: ...

    def send_password_reset_email(
        self, email: str, user_name: Optional[str], otp_code: str
    ) -> bool: ...
