"""
AccountService — registration, login, password reset and profile edits.

Registration: send-email-otp issues an `email_verify` challenge; a verified
challenge is the only way to create a profile, and creating the profile
consumes it. The user document then carries email_verified=True.

Password reset: forgot-password answers with the same generic message for
every outcome; verify-otp trades a correct code for a single-use reset
token; reset-password accepts either that token or the email + code pair.
A signed-in user can also change the password by proving the current one.

Session tokens are HS256 JWTs with issuer and audience claims.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Optional

import jwt
from pymongo.errors import DuplicateKeyError

from config import JWTSettings
from errors import (
    AppError,
    AuthenticationError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    OtpNotFoundError,
    ValidationError,
)
from infrastructure.email.protocol import EmailProvider
from repositories.user_repository import UserRepository
from schemas.dto.requests.auth import ChangePasswordRequest, ResetPasswordRequest
from schemas.dto.requests.profile import CreateProfileRequest, UpdateProfileRequest
from schemas.models.token import PURPOSE_EMAIL_VERIFY, PURPOSE_PASSWORD_RESET
from schemas.models.user import (
    PROFILE_FLAGGED,
    Credentials,
    Demographics,
    FamilyInfo,
    Location,
    PersonalInfo,
    ProfessionalInfo,
    Subscription,
    SubscriptionDetails,
    UserDoc,
)
from services.otp_service import OtpService
from services.profile_views import profile_detail
from shared.crypto import hash_password, verify_password
from shared.datetime_utils import utc_now
from shared.generators import generate_profile_id
from shared.logging import get_logger
from shared.validators import (
    MIN_PASSWORD_LENGTH,
    normalize_email,
    validate_email,
    validate_otp_format,
    validate_password,
)

log = get_logger(__name__)

GENERIC_RESET_MESSAGE = "If that email exists, a reset code has been sent."
_SESSION_ALGORITHM = "HS256"


def _require_email(email: Optional[str]) -> str:
    if not email or not validate_email(email):
        raise ValidationError("Invalid email", field="email")
    return normalize_email(email)


def _require_password(password: Optional[str]) -> None:
    if not validate_password(password):
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            field="password",
        )


def _require_otp(otp: Optional[str]) -> str:
    if not otp or not validate_otp_format(otp):
        raise ValidationError("OTP must be 6 digits", field="otp")
    return otp


class AccountService:
    def __init__(
        self,
        user_repo: UserRepository,
        otp_service: OtpService,
        email_provider: EmailProvider,
        jwt_settings: JWTSettings,
        base_url: str,
    ) -> None:
        self._users = user_repo
        self._otp = otp_service
        self._email = email_provider
        self._jwt = jwt_settings
        self._base_url = base_url

    # ── Registration ─────────────────────────────────────────────────────────

    async def send_registration_otp(self, email: str) -> None:
        email = _require_email(email)
        if await self._users.find_by_email(email) is not None:
            raise ConflictError("Email already exists", field="email")
        code = await self._otp.issue_code(email, PURPOSE_EMAIL_VERIFY)
        if not await self._email.send_registration_otp_email(email, code):
            raise AppError("Failed to send OTP")

    async def verify_registration_otp(self, email: str, otp: str) -> None:
        email = _require_email(email)
        await self._otp.verify_code(email, PURPOSE_EMAIL_VERIFY, _require_otp(otp))

    async def create_profile(self, req: CreateProfileRequest) -> UserDoc:
        email = _require_email(req.personal_info.email)
        _require_password(req.credentials.password)

        if not await self._otp.is_verified(email, PURPOSE_EMAIL_VERIFY):
            raise ValidationError("Email not verified", field="email")
        if await self._users.find_by_email(email) is not None:
            raise ConflictError("Email already exists", field="email")

        now = utc_now()
        personal = req.personal_info.model_dump(exclude={"email"})
        personal["gender"] = personal["gender"].strip().lower()
        user = UserDoc(
            profile_id=generate_profile_id(),
            personal_info=PersonalInfo(email=email, **personal),
            demographics=Demographics(**req.demographics.model_dump()),
            professional_info=ProfessionalInfo(**req.professional_info.model_dump()),
            location=Location(**req.location.model_dump()),
            family_info=FamilyInfo(
                **(req.family_info.model_dump() if req.family_info else {})
            ),
            hobbies=req.hobbies or "Not specified",
            credentials=Credentials(
                password_hash=hash_password(req.credentials.password),
                remember_me=req.credentials.remember_me,
            ),
            email_verified=True,
            subscription=Subscription(details=SubscriptionDetails(start_date=now)),
            app_version=req.app_version,
            created_at=now,
            last_active=now,
        )
        try:
            user_id = await self._users.insert(user)
        except DuplicateKeyError as e:
            raise ConflictError("Email already exists", field="email") from e

        await self._otp.discard(email, PURPOSE_EMAIL_VERIFY)
        log.info("profile_created", profile_id=user.profile_id, user_id=str(user_id))
        return user.model_copy(update={"id": user_id})

    # ── Sessions ─────────────────────────────────────────────────────────────

    def issue_access_token(self, user: UserDoc) -> str:
        now = utc_now()
        ttl = (
            self._jwt.admin_token_ttl_seconds
            if user.is_admin
            else self._jwt.access_token_ttl_seconds
        )
        claims = {
            "sub": str(user.id),
            "profile_id": user.profile_id,
            "email": user.email,
            "role": user.role,
            "iss": self._jwt.jwt_issuer,
            "aud": self._jwt.jwt_audience,
            "iat": now,
            "exp": now + timedelta(seconds=ttl),
        }
        return jwt.encode(claims, self._jwt.jwt_secret, algorithm=_SESSION_ALGORITHM)

    def verify_access_token(self, token: str) -> dict[str, Any]:
        try:
            return jwt.decode(
                token,
                self._jwt.jwt_secret,
                algorithms=[_SESSION_ALGORITHM],
                issuer=self._jwt.jwt_issuer,
                audience=self._jwt.jwt_audience,
                options={"require": ["sub", "exp", "iss", "aud"]},
            )
        except jwt.PyJWTError as e:
            raise AuthenticationError("Invalid or expired token") from e

    async def login(self, email: str, password: str) -> tuple[str, UserDoc]:
        email = _require_email(email)
        if not password:
            raise ValidationError("Password is required", field="password")

        user = await self._users.find_by_email(email)
        if user is None or not verify_password(password, user.credentials.password_hash):
            log.warning("login_failed", reason="bad_credentials")
            raise AuthenticationError("Invalid email or password")

        if not user.is_admin:
            if not user.email_verified:
                raise ValidationError("Email not verified", field="email")
            if user.profile_status == PROFILE_FLAGGED:
                raise ForbiddenError(
                    "Access Denied: Your account has been flagged. Please contact support."
                )

        token = self.issue_access_token(user)
        await self._users.touch_last_active(user.id)
        log.info("login_success", profile_id=user.profile_id, role=user.role)
        return token, user

    # ── Password reset ───────────────────────────────────────────────────────

    async def forgot_password(self, email: str) -> str:
        """Start a reset for *email*. The return value never reveals whether it exists."""
        email = _require_email(email)
        user = await self._users.find_by_email(email)
        if user is None:
            log.info("password_reset_requested", known=False)
            return GENERIC_RESET_MESSAGE

        code = await self._otp.issue_code(email, PURPOSE_PASSWORD_RESET, user_id=user.id)
        sent = await self._email.send_password_reset_email(
            email, user.personal_info.name, code
        )
        log.info("password_reset_requested", known=True, delivered=sent)
        return GENERIC_RESET_MESSAGE

    async def verify_reset_otp(self, email: str, otp: str) -> str:
        """Check the reset code and return a single-use reset token."""
        email = _require_email(email)
        challenge = await self._otp.verify_code(
            email, PURPOSE_PASSWORD_RESET, _require_otp(otp)
        )
        if challenge.user_id is None:
            raise OtpNotFoundError()
        return await self._otp.issue_reset_token(challenge.user_id)

    async def reset_password(self, req: ResetPasswordRequest) -> None:
        _require_password(req.password)

        if req.reset_token:
            user_id = await self._otp.redeem_reset_token(req.reset_token)
        else:
            email = _require_email(req.email)
            challenge = await self._otp.consume_reset_code(email, _require_otp(req.otp))
            if challenge.user_id is None:
                raise OtpNotFoundError()
            user_id = challenge.user_id

        if not await self._users.set_password_hash(user_id, hash_password(req.password)):
            raise NotFoundError("User not found")
        log.info("password_reset_completed", user_id=str(user_id))

    async def change_password(self, profile_id: str, req: ChangePasswordRequest) -> None:
        """Replace the password of a signed-in user who knows the current one."""
        if req.new_password != req.confirm_password:
            raise ValidationError("New passwords do not match", field="confirmPassword")
        if not validate_password(req.new_password):
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
                field="newPassword",
            )

        user = await self._users.find_by_profile_id(profile_id)
        if user is None:
            raise NotFoundError("User not found")
        if not verify_password(req.current_password, user.credentials.password_hash):
            log.warning("password_change_failed", profile_id=profile_id)
            raise AuthenticationError("Current password is incorrect")

        await self._users.set_password_hash(user.id, hash_password(req.new_password))
        log.info("password_changed", profile_id=profile_id)

    # ── Profiles ─────────────────────────────────────────────────────────────

    async def get_profile(self, profile_id: str) -> dict[str, Any]:
        user = await self._users.find_by_profile_id(profile_id)
        if user is None:
            raise NotFoundError("Profile not found")
        return self.render_profile(user)

    def render_profile(self, user: UserDoc) -> dict[str, Any]:
        return profile_detail(user, self._base_url)

    async def update_profile(self, req: UpdateProfileRequest) -> UserDoc:
        user = await self._users.find_by_profile_id(req.profile_id)
        if user is None:
            raise NotFoundError("Profile not found")

        fields: dict[str, Any] = {}
        for section in (
            "personal_info",
            "demographics",
            "professional_info",
            "location",
            "family_info",
        ):
            patch = getattr(req, section)
            if patch is None:
                continue
            for key, value in patch.model_dump(exclude_none=True).items():
                if section == "personal_info" and key == "gender":
                    value = value.strip().lower()
                fields[f"{section}.{key}"] = value
        if req.hobbies is not None:
            fields["hobbies"] = req.hobbies
        if not fields:
            raise ValidationError("No profile fields to update")

        await self._users.snapshot(user)
        fields["last_active"] = utc_now()
        await self._users.update_fields(user.id, fields)
        log.info("profile_updated", profile_id=user.profile_id, fields=sorted(fields))

        updated = await self._users.find_by_profile_id(req.profile_id)
        if updated is None:
            raise NotFoundError("Profile not found")
        return updated
