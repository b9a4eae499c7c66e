"""
Request DTOs for authentication endpoints.

SendEmailOtpRequest    — POST /api/send-email-otp
VerifyEmailOtpRequest  — POST /api/verify-email-otp
LoginRequest           — POST /api/login
ForgotPasswordRequest  — POST /api/auth/forgot-password
VerifyResetOtpRequest  — POST /api/auth/verify-otp
ResetPasswordRequest   — POST /api/auth/reset-password
ChangePasswordRequest  — POST /api/change-password

Email format and password length are checked by the service layer so the
error messages match the rest of the API.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SendEmailOtpRequest(BaseModel):
    """Request body for POST /api/send-email-otp."""

    model_config = ConfigDict(populate_by_name=True)

    email: str


class VerifyEmailOtpRequest(BaseModel):
    """Request body for POST /api/verify-email-otp."""

    model_config = ConfigDict(populate_by_name=True)

    email: str
    otp: str


class LoginRequest(BaseModel):
    """Request body for POST /api/login."""

    model_config = ConfigDict(populate_by_name=True)

    email: str
    password: str


class ForgotPasswordRequest(BaseModel):
    """Request body for POST /api/auth/forgot-password."""

    model_config = ConfigDict(populate_by_name=True)

    email: str


class VerifyResetOtpRequest(BaseModel):
    """Request body for POST /api/auth/verify-otp.

    ``otp`` is the 6-digit code from the password reset email.
    """

    model_config = ConfigDict(populate_by_name=True)

    email: str
    otp: str


class ResetPasswordRequest(BaseModel):
    """Request body for POST /api/auth/reset-password.

    Either ``resetToken`` (from verify-otp) or the ``email`` + ``otp`` pair
    must be supplied.
    """

    model_config = ConfigDict(populate_by_name=True)

    reset_token: Optional[str] = Field(default=None, alias="resetToken")
    email: Optional[str] = None
    otp: Optional[str] = None
    password: str

    @model_validator(mode="after")
    def _require_credential(self) -> "ResetPasswordRequest":
        if not self.reset_token and not (self.email and self.otp):
            raise ValueError("resetToken or email and otp are required")
        return self


class ChangePasswordRequest(BaseModel):
    """Request body for POST /api/change-password (session token required)."""

    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(alias="currentPassword")
    new_password: str = Field(alias="newPassword")
    confirm_password: str = Field(alias="confirmPassword")
