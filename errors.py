"""
Application error hierarchy and FastAPI exception handlers.

AppError is the base for all typed errors. The global exception handler
converts AppError subclasses to consistent JSON responses.

The verification errors are all user-facing and recoverable: callers show
the message and let the user retry or request a new code.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class AppError(Exception):
    """Base application error. All typed errors inherit from this."""

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.details = details

    def to_dict(self) -> dict:
        payload: dict = {"error": self.message, "code": self.error_code}
        if self.field is not None:
            payload["field"] = self.field
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(AppError):
    status_code = 400
    error_code = "validation_error"


class ForbiddenError(AppError):
    status_code = 403
    error_code = "forbidden"


class NotFoundError(AppError):
    status_code = 404
    error_code = "not_found"


class ConflictError(AppError):
    status_code = 409
    error_code = "conflict"


class RateLimitError(AppError):
    status_code = 429
    error_code = "rate_limit_exceeded"


# ── One-time code errors ──────────────────────────────────────────────────────


class ResendRateLimitedError(RateLimitError):
    error_code = "otp_rate_limited"

    def __init__(self, wait_minutes: int) -> None:
        super().__init__(
            f"Too many requests. Please wait {wait_minutes} minute(s) "
            "before requesting a new code.",
            details={"wait_minutes": wait_minutes},
        )
        self.wait_minutes = wait_minutes


class VerificationError(AppError):
    status_code = 400
    error_code = "verification_failed"


class CodeNotFoundError(VerificationError):
    error_code = "code_not_found"

    def __init__(self, message: str = "No verification code found. Please request a new one.") -> None:
        super().__init__(message)


class CodeExpiredError(VerificationError):
    error_code = "code_expired"

    def __init__(self, message: str = "Verification code has expired. Please request a new one.") -> None:
        super().__init__(message)


class AttemptsExhaustedError(VerificationError):
    error_code = "attempts_exhausted"

    def __init__(self, message: str = "Too many failed attempts. Please request a new code.") -> None:
        super().__init__(message)


class CodeMismatchError(VerificationError):
    error_code = "code_mismatch"

    def __init__(self, remaining_attempts: int) -> None:
        plural = "" if remaining_attempts == 1 else "s"
        super().__init__(
            f"Invalid code. {remaining_attempts} attempt{plural} remaining.",
            details={"remaining_attempts": remaining_attempts},
        )
        self.remaining_attempts = remaining_attempts


class InvalidResetTokenError(VerificationError):
    error_code = "invalid_reset_token"

    def __init__(self, message: str = "Invalid or expired reset token.") -> None:
        super().__init__(message)


# ── Progress errors ───────────────────────────────────────────────────────────


class InsufficientKibbleError(ValidationError):
    error_code = "insufficient_kibble"

    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            "Not enough kibble! Complete focus sessions to earn more.",
            details={"required": required, "available": available},
        )
        self.required = required
        self.available = available


class BreedLockedError(ForbiddenError):
    error_code = "breed_locked"

    def __init__(self, breed_id: str, requirement: int, kibble_needed: int) -> None:
        super().__init__(
            "Breed is locked",
            field="breed_id",
            details={
                "breed_id": breed_id,
                "requirement": requirement,
                "kibble_needed": kibble_needed,
            },
        )
        self.kibble_needed = kibble_needed


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        return JSONResponse(
            status_code=500,
            content={"error": "An internal server error occurred.", "code": "internal_error"},
        )
