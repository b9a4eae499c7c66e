"""Document builders shared by the unit tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from schemas.models.user import (
    Credentials,
    PersonalInfo,
    Subscription,
    SubscriptionDetails,
    UserDoc,
)
from shared.crypto import hash_password

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
PASSWORD = "correct-horse"

_PASSWORD_HASH = hash_password(PASSWORD)


def build_user(profile_id: str, **overrides: Any) -> UserDoc:
    """A verified user; ``plan``/``expiry`` set up a paid subscription."""
    fields: dict[str, Any] = dict(
        profile_id=profile_id,
        personal_info=PersonalInfo(
            name=overrides.pop("name", f"User {profile_id}"),
            email=overrides.pop("email", f"{profile_id.lower()}@example.com"),
            gender=overrides.pop("gender", "female"),
        ),
        credentials=Credentials(password_hash=_PASSWORD_HASH),
        email_verified=True,
        created_at=NOW,
        last_active=NOW,
    )
    plan = overrides.pop("plan", None)
    if plan is not None:
        expiry = overrides.pop("expiry", NOW + timedelta(days=30))
        fields["subscription"] = Subscription(
            current=plan,
            details=SubscriptionDetails(start_date=NOW, expiry_date=expiry),
        )
    fields.update(overrides)
    return UserDoc(**fields)
