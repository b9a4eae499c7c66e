"""
OTP challenge document model.

Maps to the `verification-tokens` MongoDB collection, one document per
(email, purpose) pair.

Used for both registration OTPs (purpose email_verify) and password reset
OTPs (purpose password_reset). code_hash stores SHA-256(otp_code) — the plain
OTP is never stored. attempts tracks failed verification tries (max 5 before
the challenge is dead); issuing a new code resets it to 0.

reset_token_hash is only set on password_reset challenges once the OTP has
been verified: it binds the signed reset JWT to this user and is cleared
when the token is redeemed.
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from schemas.models.base import MongoBaseModel, PyObjectId, UtcDatetime


PURPOSE_EMAIL_VERIFY = "email_verify"
PURPOSE_PASSWORD_RESET = "password_reset"


class OtpChallengeDoc(MongoBaseModel):
    """Document model for the `verification-tokens` collection."""

    email: str
    purpose: str
    user_id: Optional[PyObjectId] = None
    code_hash: Optional[str] = None
    expires_at: Optional[UtcDatetime] = None
    verified: bool = False
    attempts: int = Field(default=0, ge=0)
    reset_token_hash: Optional[str] = None
    created_at: Optional[UtcDatetime] = None
