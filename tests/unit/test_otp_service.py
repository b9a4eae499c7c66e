"""Unit tests for OtpService — codes, attempt limits and reset tokens."""

from datetime import timedelta

import jwt
import pytest
from bson import ObjectId

from errors import (
    InvalidResetTokenError,
    OtpExpiredError,
    OtpMismatchError,
    OtpNotFoundError,
    TooManyAttemptsError,
)
from schemas.models.token import PURPOSE_EMAIL_VERIFY, PURPOSE_PASSWORD_RESET
from services.otp_service import MAX_ATTEMPTS, OtpService
from shared.datetime_utils import utc_now

EMAIL = "asha@example.com"


def _wrong(code: str) -> str:
    return str((int(code[0]) + 1) % 10) + code[1:]


@pytest.fixture
def otp(challenge_repo, jwt_settings) -> OtpService:
    return OtpService(challenge_repo, jwt_settings)


# ── Codes ────────────────────────────────────────────────────────────────────


class TestIssueAndVerify:
    async def test_code_is_six_digits(self, otp):
        code = await otp.issue_code(EMAIL, PURPOSE_EMAIL_VERIFY)
        assert len(code) == 6 and code.isdigit()

    async def test_plain_code_never_stored(self, otp, challenge_repo):
        code = await otp.issue_code(EMAIL, PURPOSE_EMAIL_VERIFY)
        stored = await challenge_repo.find(EMAIL, PURPOSE_EMAIL_VERIFY)
        assert stored.code_hash != code
        assert len(stored.code_hash) == 64

    async def test_correct_code_verifies(self, otp):
        code = await otp.issue_code(EMAIL, PURPOSE_EMAIL_VERIFY)
        challenge = await otp.verify_code(EMAIL, PURPOSE_EMAIL_VERIFY, code)
        assert challenge.verified is True
        assert await otp.is_verified(EMAIL, PURPOSE_EMAIL_VERIFY)

    async def test_no_challenge(self, otp):
        with pytest.raises(OtpNotFoundError):
            await otp.verify_code(EMAIL, PURPOSE_EMAIL_VERIFY, "123456")

    async def test_purposes_are_separate(self, otp):
        code = await otp.issue_code(EMAIL, PURPOSE_EMAIL_VERIFY)
        with pytest.raises(OtpNotFoundError):
            await otp.verify_code(EMAIL, PURPOSE_PASSWORD_RESET, code)

    async def test_expired_code(self, otp, mocker):
        code = await otp.issue_code(EMAIL, PURPOSE_EMAIL_VERIFY)
        mocker.patch(
            "services.otp_service.utc_now",
            return_value=utc_now() + timedelta(minutes=11),
        )
        with pytest.raises(OtpExpiredError):
            await otp.verify_code(EMAIL, PURPOSE_EMAIL_VERIFY, code)

    async def test_discard_removes_challenge(self, otp):
        await otp.issue_code(EMAIL, PURPOSE_EMAIL_VERIFY)
        await otp.discard(EMAIL, PURPOSE_EMAIL_VERIFY)
        assert not await otp.is_verified(EMAIL, PURPOSE_EMAIL_VERIFY)


class TestAttemptCeiling:
    async def test_wrong_code_counts_attempt(self, otp, challenge_repo):
        code = await otp.issue_code(EMAIL, PURPOSE_EMAIL_VERIFY)
        with pytest.raises(OtpMismatchError):
            await otp.verify_code(EMAIL, PURPOSE_EMAIL_VERIFY, _wrong(code))
        stored = await challenge_repo.find(EMAIL, PURPOSE_EMAIL_VERIFY)
        assert stored.attempts == 1

    async def test_sixth_attempt_is_refused_even_with_right_code(self, otp):
        code = await otp.issue_code(EMAIL, PURPOSE_EMAIL_VERIFY)
        for _ in range(MAX_ATTEMPTS):
            with pytest.raises(OtpMismatchError):
                await otp.verify_code(EMAIL, PURPOSE_EMAIL_VERIFY, _wrong(code))
        with pytest.raises(TooManyAttemptsError):
            await otp.verify_code(EMAIL, PURPOSE_EMAIL_VERIFY, code)

    async def test_reissue_resets_attempts(self, otp, challenge_repo):
        code = await otp.issue_code(EMAIL, PURPOSE_EMAIL_VERIFY)
        for _ in range(MAX_ATTEMPTS):
            with pytest.raises(OtpMismatchError):
                await otp.verify_code(EMAIL, PURPOSE_EMAIL_VERIFY, _wrong(code))

        fresh = await otp.issue_code(EMAIL, PURPOSE_EMAIL_VERIFY)
        stored = await challenge_repo.find(EMAIL, PURPOSE_EMAIL_VERIFY)
        assert stored.attempts == 0
        await otp.verify_code(EMAIL, PURPOSE_EMAIL_VERIFY, fresh)

    async def test_old_code_dies_on_reissue(self, otp):
        old = await otp.issue_code(EMAIL, PURPOSE_EMAIL_VERIFY)
        new = await otp.issue_code(EMAIL, PURPOSE_EMAIL_VERIFY)
        if old != new:
            with pytest.raises(OtpMismatchError):
                await otp.verify_code(EMAIL, PURPOSE_EMAIL_VERIFY, old)


# ── Reset tokens ─────────────────────────────────────────────────────────────


class TestResetToken:
    async def _verified_reset(self, otp) -> ObjectId:
        user_id = ObjectId()
        code = await otp.issue_code(EMAIL, PURPOSE_PASSWORD_RESET, user_id=user_id)
        await otp.verify_code(EMAIL, PURPOSE_PASSWORD_RESET, code)
        return user_id

    async def test_token_claims(self, otp, jwt_settings):
        user_id = await self._verified_reset(otp)
        token = await otp.issue_reset_token(user_id)
        claims = jwt.decode(token, jwt_settings.reset_secret, algorithms=["HS256"])
        assert claims["sub"] == str(user_id)
        assert claims["type"] == "pwd_reset"
        assert claims["jti"]

    async def test_token_is_single_use(self, otp):
        user_id = await self._verified_reset(otp)
        token = await otp.issue_reset_token(user_id)

        assert await otp.redeem_reset_token(token) == user_id
        with pytest.raises(InvalidResetTokenError):
            await otp.redeem_reset_token(token)

    async def test_reissued_code_invalidates_token(self, otp):
        user_id = await self._verified_reset(otp)
        token = await otp.issue_reset_token(user_id)
        await otp.issue_code(EMAIL, PURPOSE_PASSWORD_RESET, user_id=user_id)
        with pytest.raises(InvalidResetTokenError):
            await otp.redeem_reset_token(token)

    async def test_cannot_issue_without_challenge(self, otp):
        with pytest.raises(InvalidResetTokenError):
            await otp.issue_reset_token(ObjectId())

    async def test_token_signed_with_other_key_rejected(self, otp):
        user_id = await self._verified_reset(otp)
        await otp.issue_reset_token(user_id)
        forged = jwt.encode(
            {"sub": str(user_id), "type": "pwd_reset", "jti": "x", "exp": utc_now() + timedelta(minutes=5)},
            "not-the-secret",
            algorithm="HS256",
        )
        with pytest.raises(InvalidResetTokenError):
            await otp.redeem_reset_token(forged)

    async def test_wrong_token_type_rejected(self, otp, jwt_settings):
        user_id = await self._verified_reset(otp)
        token = jwt.encode(
            {"sub": str(user_id), "type": "session", "jti": "x", "exp": utc_now() + timedelta(minutes=5)},
            jwt_settings.reset_secret,
            algorithm="HS256",
        )
        with pytest.raises(InvalidResetTokenError):
            await otp.redeem_reset_token(token)

    async def test_garbage_token_rejected(self, otp):
        with pytest.raises(InvalidResetTokenError):
            await otp.redeem_reset_token("not-a-jwt")


class TestConsumeResetCode:
    async def test_code_works_once(self, otp):
        user_id = ObjectId()
        code = await otp.issue_code(EMAIL, PURPOSE_PASSWORD_RESET, user_id=user_id)

        challenge = await otp.consume_reset_code(EMAIL, code)
        assert challenge.user_id == user_id
        with pytest.raises(OtpNotFoundError):
            await otp.consume_reset_code(EMAIL, code)
