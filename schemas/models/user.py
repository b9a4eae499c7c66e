"""
User / profile document model.

Maps to the `users` MongoDB collection.

profile_id is the stable external identifier ("KM<epoch-ms>") that every
other collection references; _id stays internal. email_verified is the
persistent verification flag — the one-time challenges that set it live in
the `verification-tokens` collection (see schemas.models.token).

The embedded subscription carries a `version` counter used as an optimistic
concurrency token by the subscription commit.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from schemas.models.base import MongoBaseModel, PyObjectId, UtcDatetime

PLAN_FREE = "free"
PLAN_PREMIUM = "premium"
PLAN_PREMIUM_PLUS = "premium_plus"

HISTORY_ACTIVE = "active"
HISTORY_EXPIRED = "expired"
HISTORY_CANCELLED = "cancelled"
HISTORY_UPGRADED = "upgraded"

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLE_MODERATOR = "moderator"

PROFILE_ACTIVE = "active"
PROFILE_INACTIVE = "inactive"
PROFILE_FLAGGED = "flagged"
PROFILE_UNDER_REVIEW = "under_review"
PROFILE_STATUSES = (
    PROFILE_ACTIVE,
    PROFILE_INACTIVE,
    PROFILE_FLAGGED,
    PROFILE_UNDER_REVIEW,
)
ROLES = (ROLE_USER, ROLE_ADMIN, ROLE_MODERATOR)


class PersonalInfo(BaseModel):
    name: str
    email: str
    gender: Optional[str] = None
    mobile: Optional[str] = None
    looking_for: Optional[str] = None
    profile_image: Optional[str] = None


class Demographics(BaseModel):
    date_of_birth: Optional[str] = None
    height: Optional[str] = None
    marital_status: Optional[str] = None
    religion: Optional[str] = None
    community: Optional[str] = None
    mother_tongue: Optional[str] = None
    place_of_birth: Optional[str] = None


class ProfessionalInfo(BaseModel):
    education: Optional[str] = None
    field_of_study: Optional[str] = None
    occupation: Optional[str] = None
    income: Optional[str] = None


class Location(BaseModel):
    city: Optional[str] = None
    state: Optional[str] = None


class FamilyInfo(BaseModel):
    father: Optional[str] = None
    mother: Optional[str] = None


class Credentials(BaseModel):
    password_hash: str
    remember_me: bool = False


class SubscriptionDetails(BaseModel):
    start_date: Optional[UtcDatetime] = None
    expiry_date: Optional[UtcDatetime] = None
    payment_id: Optional[PyObjectId] = None
    auto_renew: bool = False


class SubscriptionHistoryEntry(BaseModel):
    """One plan period. At most one entry per user is `active`."""

    plan: str
    start_date: UtcDatetime
    expiry_date: UtcDatetime
    payment_id: Optional[PyObjectId] = None
    status: str = HISTORY_ACTIVE
    upgraded_at: Optional[UtcDatetime] = None
    is_upgrade: bool = False
    original_plan: Optional[str] = None
    prorated_amount: Optional[int] = None


class Subscription(BaseModel):
    current: str = PLAN_FREE
    details: SubscriptionDetails = Field(default_factory=SubscriptionDetails)
    history: list[SubscriptionHistoryEntry] = []
    version: int = 0

    def active_entry(self) -> Optional[SubscriptionHistoryEntry]:
        for entry in self.history:
            if entry.status == HISTORY_ACTIVE:
                return entry
        return None


class UserDoc(MongoBaseModel):
    """Document model for the `users` collection."""

    profile_id: str
    role: str = ROLE_USER
    personal_info: PersonalInfo
    demographics: Demographics = Field(default_factory=Demographics)
    professional_info: ProfessionalInfo = Field(default_factory=ProfessionalInfo)
    location: Location = Field(default_factory=Location)
    family_info: FamilyInfo = Field(default_factory=FamilyInfo)
    hobbies: str = "Not specified"
    credentials: Credentials
    email_verified: bool = False
    subscription: Subscription = Field(default_factory=Subscription)
    chat_contacts: list[str] = []
    registered_events: list[PyObjectId] = []
    profile_status: str = PROFILE_ACTIVE
    app_version: Optional[str] = None
    created_at: Optional[UtcDatetime] = None
    last_active: Optional[UtcDatetime] = None

    @property
    def email(self) -> str:
        return self.personal_info.email

    @property
    def is_admin(self) -> bool:
        return self.role in (ROLE_ADMIN, ROLE_MODERATOR)
