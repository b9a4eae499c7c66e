"""
Read-only projections of UserDoc for listings, matches, contacts and the
public profile page. Ages are computed at read time; images become
absolute URLs against the configured base URL.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from schemas.models.user import UserDoc
from shared.datetime_utils import compute_age

PLACEHOLDER_IMAGE = "https://via.placeholder.com/150"
PLACEHOLDER_AVATAR = "https://via.placeholder.com/100"
NOT_SPECIFIED = "Not specified"


def resolve_image_url(
    path: Optional[str], base_url: str, placeholder: str = PLACEHOLDER_IMAGE
) -> str:
    if not path:
        return placeholder
    if path.startswith(("http://", "https://")):
        return path
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def profile_summary(
    user: UserDoc, base_url: str, today: Optional[date] = None
) -> dict[str, Any]:
    """Card shown in interested / received / passed listings."""
    return {
        "id": user.profile_id,
        "name": user.personal_info.name,
        "age": compute_age(user.demographics.date_of_birth, today),
        "profession": user.professional_info.occupation,
        "location": user.location.city,
        "education": user.professional_info.education,
        "community": user.demographics.community,
        "income": user.professional_info.income,
        "image": resolve_image_url(user.personal_info.profile_image, base_url),
    }


def match_summary(
    user: UserDoc, base_url: str, today: Optional[date] = None
) -> dict[str, Any]:
    city, state = user.location.city, user.location.state
    return {
        "id": user.profile_id,
        "name": user.personal_info.name or NOT_SPECIFIED,
        "age": compute_age(user.demographics.date_of_birth, today),
        "profession": user.professional_info.occupation or NOT_SPECIFIED,
        "location": f"{city}, {state}" if city and state else NOT_SPECIFIED,
        "image": resolve_image_url(user.personal_info.profile_image, base_url),
    }


def contact_summary(user: UserDoc, base_url: str, online: bool = False) -> dict[str, Any]:
    return {
        "id": user.profile_id,
        "name": user.personal_info.name or "Unknown",
        "avatar": resolve_image_url(
            user.personal_info.profile_image, base_url, PLACEHOLDER_AVATAR
        ),
        "online": online,
    }


def profile_detail(
    user: UserDoc, base_url: str, today: Optional[date] = None
) -> dict[str, Any]:
    """Full public profile (GET /api/profiles/{id})."""
    location = ", ".join(
        part for part in (user.location.city, user.location.state) if part
    )
    return {
        "id": user.profile_id,
        "name": user.personal_info.name or "Unknown",
        "age": compute_age(user.demographics.date_of_birth, today),
        "gender": user.personal_info.gender,
        "profession": user.professional_info.occupation or "Unknown",
        "location": location or "Unknown",
        "education": user.professional_info.education or "Unknown",
        "fieldOfStudy": user.professional_info.field_of_study or NOT_SPECIFIED,
        "salary": user.professional_info.income or NOT_SPECIFIED,
        "height": user.demographics.height or "Unknown",
        "maritalStatus": user.demographics.marital_status or NOT_SPECIFIED,
        "community": user.demographics.community or "Unknown",
        "motherTongue": user.demographics.mother_tongue or "Unknown",
        "religion": user.demographics.religion or NOT_SPECIFIED,
        "dateOfBirth": user.demographics.date_of_birth or NOT_SPECIFIED,
        "placeOfBirth": user.demographics.place_of_birth or NOT_SPECIFIED,
        "hobbies": user.hobbies or NOT_SPECIFIED,
        "images": [resolve_image_url(user.personal_info.profile_image, base_url)],
        "family": {
            "father": user.family_info.father or NOT_SPECIFIED,
            "mother": user.family_info.mother or NOT_SPECIFIED,
        },
        "subscription": user.subscription.current,
    }
