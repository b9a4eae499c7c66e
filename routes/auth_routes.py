"""
Authentication routes.

POST /api/send-email-otp         — registration code
POST /api/verify-email-otp       — confirm registration code
POST /api/login                  — session JWT
POST /api/auth/forgot-password   — always 200 with a generic message; rate limited per IP
POST /api/auth/verify-otp        — reset code → single-use reset token
POST /api/auth/reset-password    — reset token (or email + code) → new password
POST /api/change-password        — signed-in user, current password required
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from dependencies import (
    forgot_password_rate_limit,
    get_account_service,
    get_current_claims,
)
from schemas.dto.requests.auth import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    ResetPasswordRequest,
    SendEmailOtpRequest,
    VerifyEmailOtpRequest,
    VerifyResetOtpRequest,
)
from schemas.dto.responses.auth import LoginResponse, SessionUser, VerifyOtpResponse
from schemas.dto.responses.common import MessageResponse, error_responses
from services.account_service import AccountService

router = APIRouter(
    prefix="/api", tags=["auth"], responses=error_responses(400, 401, 403, 404, 429)
)


@router.post("/send-email-otp", response_model=MessageResponse)
async def send_email_otp(
    body: SendEmailOtpRequest,
    accounts: AccountService = Depends(get_account_service),
) -> MessageResponse:
    await accounts.send_registration_otp(body.email)
    return MessageResponse(message="OTP sent successfully")


@router.post("/verify-email-otp", response_model=MessageResponse)
async def verify_email_otp(
    body: VerifyEmailOtpRequest,
    accounts: AccountService = Depends(get_account_service),
) -> MessageResponse:
    await accounts.verify_registration_otp(body.email, body.otp)
    return MessageResponse(message="OTP verified successfully")


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    accounts: AccountService = Depends(get_account_service),
) -> LoginResponse:
    token, user = await accounts.login(body.email, body.password)
    return LoginResponse(token=token, user=SessionUser.from_user(user))


@router.post(
    "/auth/forgot-password",
    response_model=MessageResponse,
    dependencies=[Depends(forgot_password_rate_limit)],
)
async def forgot_password(
    body: ForgotPasswordRequest,
    accounts: AccountService = Depends(get_account_service),
) -> MessageResponse:
    message = await accounts.forgot_password(body.email)
    return MessageResponse(message=message)


@router.post("/auth/verify-otp", response_model=VerifyOtpResponse)
async def verify_reset_otp(
    body: VerifyResetOtpRequest,
    accounts: AccountService = Depends(get_account_service),
) -> VerifyOtpResponse:
    token = await accounts.verify_reset_otp(body.email, body.otp)
    return VerifyOtpResponse(reset_token=token)


@router.post("/auth/reset-password", response_model=MessageResponse)
async def reset_password(
    body: ResetPasswordRequest,
    accounts: AccountService = Depends(get_account_service),
) -> MessageResponse:
    await accounts.reset_password(body)
    return MessageResponse(message="Password has been reset")


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    claims: dict[str, Any] = Depends(get_current_claims),
    accounts: AccountService = Depends(get_account_service),
) -> MessageResponse:
    await accounts.change_password(claims.get("profile_id", ""), body)
    return MessageResponse(message="Password changed successfully")
