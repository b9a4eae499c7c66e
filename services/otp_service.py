"""
OtpService — one-time codes and short-lived password-reset credentials.

Codes are 6 digits, stored only as SHA-256 hashes in the
`verification-tokens` collection and valid for 10 minutes. A challenge
dies after MAX_ATTEMPTS wrong guesses; issuing a new code revives it.

Reset tokens are HS256 JWTs (sub=user id, type=pwd_reset, unique jti).
Only the token's hash is stored, on the user's password-reset challenge,
and redeeming deletes that challenge so each token works exactly once.
"""

from __future__ import annotations

import uuid
from datetime import timedelta
from typing import Optional

import jwt
from bson import ObjectId

from config import JWTSettings
from errors import (
    InvalidResetTokenError,
    OtpExpiredError,
    OtpMismatchError,
    OtpNotFoundError,
    TooManyAttemptsError,
)
from repositories.token_repository import OtpChallengeRepository
from schemas.models.token import PURPOSE_PASSWORD_RESET, OtpChallengeDoc
from shared.crypto import hash_token, tokens_match
from shared.datetime_utils import utc_now
from shared.generators import generate_otp_code
from shared.logging import get_logger

log = get_logger(__name__)

OTP_TTL = timedelta(minutes=10)
MAX_ATTEMPTS = 5
RESET_TOKEN_TYPE = "pwd_reset"
_RESET_ALGORITHM = "HS256"


class OtpService:
    def __init__(
        self,
        challenge_repo: OtpChallengeRepository,
        jwt_settings: JWTSettings,
    ) -> None:
        self._challenges = challenge_repo
        self._jwt = jwt_settings

    async def issue_code(
        self, email: str, purpose: str, user_id: Optional[ObjectId] = None
    ) -> str:
        """Create a fresh challenge for (*email*, *purpose*) and return the plaintext code.

        Replaces any pending challenge: attempts go back to 0 and a reset
        token bound to the previous code stops being redeemable.
        """
        code = generate_otp_code()
        await self._challenges.replace_challenge(
            email,
            purpose,
            code_hash=hash_token(code),
            expires_at=utc_now() + OTP_TTL,
            user_id=user_id,
        )
        log.info("otp_issued", purpose=purpose, user_id=str(user_id) if user_id else None)
        return code

    async def verify_code(
        self, email: str, purpose: str, candidate: str
    ) -> OtpChallengeDoc:
        """Check *candidate* against the pending challenge.

        Raises:
            OtpNotFoundError: no challenge, or it was already consumed.
            OtpExpiredError: the code is past its expiry.
            TooManyAttemptsError: the attempt ceiling was reached.
            OtpMismatchError: wrong code (the attempt is recorded).
        """
        challenge = await self._challenges.find(email, purpose)
        if challenge is None or challenge.code_hash is None:
            raise OtpNotFoundError()

        if challenge.expires_at is None or utc_now() > challenge.expires_at:
            raise OtpExpiredError()

        if challenge.attempts >= MAX_ATTEMPTS:
            raise TooManyAttemptsError()

        if not tokens_match(hash_token(candidate), challenge.code_hash):
            attempts = await self._challenges.record_failed_attempt(
                challenge.id, MAX_ATTEMPTS
            )
            log.warning("otp_mismatch", purpose=purpose, attempts=attempts)
            if attempts is None:
                # Another request used up the last attempt first
                raise TooManyAttemptsError()
            raise OtpMismatchError()

        await self._challenges.mark_verified(challenge.id)
        log.info("otp_verified", purpose=purpose)
        return challenge.model_copy(update={"verified": True, "attempts": 0})

    async def is_verified(self, email: str, purpose: str) -> bool:
        challenge = await self._challenges.find(email, purpose)
        return challenge is not None and challenge.verified

    async def discard(self, email: str, purpose: str) -> None:
        await self._challenges.delete(email, purpose)

    # ── Reset tokens ─────────────────────────────────────────────────────────

    async def issue_reset_token(self, user_id: ObjectId) -> str:
        now = utc_now()
        claims = {
            "sub": str(user_id),
            "type": RESET_TOKEN_TYPE,
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": now + timedelta(seconds=self._jwt.reset_token_ttl_seconds),
        }
        token = jwt.encode(claims, self._jwt.reset_secret, algorithm=_RESET_ALGORITHM)
        bound = await self._challenges.set_reset_token_hash(user_id, hash_token(token))
        if not bound:
            log.error("reset_token_bind_failed", user_id=str(user_id))
            raise InvalidResetTokenError()
        log.info("reset_token_issued", user_id=str(user_id))
        return token

    async def redeem_reset_token(self, token: str) -> ObjectId:
        """Validate *token* and consume it; returns the bound user id."""
        try:
            claims = jwt.decode(
                token,
                self._jwt.reset_secret,
                algorithms=[_RESET_ALGORITHM],
                options={"require": ["sub", "exp", "jti"]},
            )
        except jwt.PyJWTError as e:
            log.warning("reset_token_rejected", reason=type(e).__name__)
            raise InvalidResetTokenError() from e

        if claims.get("type") != RESET_TOKEN_TYPE or not ObjectId.is_valid(
            claims["sub"]
        ):
            log.warning("reset_token_rejected", reason="wrong_type")
            raise InvalidResetTokenError()

        user_id = ObjectId(claims["sub"])
        consumed = await self._challenges.consume_reset_token(user_id, hash_token(token))
        if consumed is None:
            log.warning("reset_token_rejected", reason="not_bound", user_id=str(user_id))
            raise InvalidResetTokenError()

        log.info("reset_token_redeemed", user_id=str(user_id))
        return user_id

    async def consume_reset_code(self, email: str, candidate: str) -> OtpChallengeDoc:
        """Verify a reset OTP and delete the challenge in one step (reset without a token)."""
        challenge = await self.verify_code(email, PURPOSE_PASSWORD_RESET, candidate)
        await self._challenges.delete(email, PURPOSE_PASSWORD_RESET)
        return challenge
