"""
Application error hierarchy and FastAPI exception handlers.

AppError is the base for all typed errors. The global exception handler
converts AppError subclasses to consistent JSON responses.

Domain errors (OTP, subscription, payment) subclass the HTTP-level classes
so route handlers never translate them by hand.

Non-AppError exceptions bubble up as 500s (with Sentry reporting in production).
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shared.logging import get_logger

log = get_logger(__name__)


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


class AuthenticationError(AppError):
    status_code = 401
    error_code = "authentication_error"


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


class PaymentGatewayError(AppError):
    error_code = "payment_gateway_error"


# ── OTP / reset credentials ──────────────────────────────────────────────────
# Messages stay generic so callers cannot distinguish the failure cause.


class InvalidOtpError(ValidationError):
    error_code = "invalid_otp"

    def __init__(self, message: str = "Invalid or expired code", **kwargs) -> None:
        super().__init__(message, **kwargs)


class OtpNotFoundError(InvalidOtpError):
    pass


class OtpExpiredError(InvalidOtpError):
    pass


class OtpMismatchError(InvalidOtpError):
    def __init__(self, message: str = "Invalid code", **kwargs) -> None:
        super().__init__(message, **kwargs)


class TooManyAttemptsError(RateLimitError):
    error_code = "too_many_attempts"

    def __init__(
        self, message: str = "Too many attempts. Request a new code.", **kwargs
    ) -> None:
        super().__init__(message, **kwargs)


class InvalidResetTokenError(ValidationError):
    error_code = "invalid_token"

    def __init__(
        self, message: str = "Invalid or expired reset token", **kwargs
    ) -> None:
        super().__init__(message, **kwargs)


# ── Subscriptions / payments ─────────────────────────────────────────────────


class InvalidUpgradePathError(ValidationError):
    error_code = "invalid_upgrade_path"


class AlreadySubscribedError(ForbiddenError):
    error_code = "already_subscribed"


class InvalidSignatureError(ValidationError):
    error_code = "invalid_signature"

    def __init__(self, message: str = "Invalid signature", **kwargs) -> None:
        super().__init__(message, **kwargs)


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if exc.status_code >= 500:
            log.error(
                "request_failed",
                path=request.url.path,
                error=exc.message,
                error_type=type(exc).__name__,
            )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        first = errors[0] if errors else {}
        loc = [str(part) for part in first.get("loc", ()) if part != "body"]
        error = ValidationError(
            first.get("msg", "Invalid request"),
            field=".".join(loc) or None,
        )
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        # Sentry integration: if sentry_sdk is initialized it will auto-capture
        # unhandled exceptions before this handler fires.
        log.error(
            "unhandled_exception",
            path=request.url.path,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=500,
            content={"error": "An internal server error occurred.", "code": "internal_error"},
        )
