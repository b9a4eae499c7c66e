"""
Response DTOs for authentication and account endpoints.

SessionUser          — user shape inside LoginResponse
LoginResponse        — POST /api/login  (200)
VerifyOtpResponse    — POST /api/auth/verify-otp  (200)
CreateProfileResponse — POST /api/create-profile  (201)
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.models.user import UserDoc


class SessionUser(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    profile_id: str = Field(alias="profileId")
    role: str
    name: str
    email: str
    gender: Optional[str] = None
    email_verified: bool = Field(alias="emailVerified")
    subscription: str
    expiry_date: Optional[str] = Field(default=None, alias="expiryDate")

    @classmethod
    def from_user(cls, user: UserDoc) -> "SessionUser":
        expiry = user.subscription.details.expiry_date
        return cls(
            profile_id=user.profile_id,
            role=user.role,
            name=user.personal_info.name,
            email=user.email,
            gender=user.personal_info.gender,
            email_verified=user.email_verified,
            subscription=user.subscription.current,
            expiry_date=expiry.isoformat() if expiry else None,
        )


class LoginResponse(BaseModel):
    """Response body for POST /api/login (200)."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = "Login successful"
    token: str
    user: SessionUser


class VerifyOtpResponse(BaseModel):
    """Response body for POST /api/auth/verify-otp (200)."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = "OTP verified"
    reset_token: str = Field(alias="resetToken")


class CreateProfileResponse(BaseModel):
    """Response body for POST /api/create-profile (201)."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = "Profile created successfully"
    profile_id: str = Field(alias="profileId")
    email: str
    subscription: str
