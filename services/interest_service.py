"""
InterestService — the interest / pass graph between profiles.

Adds are idempotent: expressing interest twice leaves one entry. Listings
only ever show email-verified users, in the order the ids were recorded.
"""

from __future__ import annotations

from typing import Any

from errors import NotFoundError, ValidationError
from repositories.interest_repository import INTERESTED, PASSED, InterestRepository
from repositories.user_repository import UserRepository
from schemas.models.user import UserDoc
from services.profile_views import match_summary, profile_summary
from shared.logging import get_logger

log = get_logger(__name__)

RECENT_MATCH_LIMIT = 3
_OPPOSITE_GENDER = {"male": "female", "female": "male"}


class InterestService:
    def __init__(
        self,
        interest_repo: InterestRepository,
        user_repo: UserRepository,
        base_url: str,
    ) -> None:
        self._interests = interest_repo
        self._users = user_repo
        self._base_url = base_url

    async def _require_target(self, target: str, label: str) -> None:
        if not await self._users.exists(target):
            log.warning("interest_target_missing", target=target)
            raise NotFoundError(f"{label} profile not found")

    async def express_interest(self, source: str, target: str) -> bool:
        """Record that *source* is interested in *target*.

        Returns True when a new entry was added, False if it already existed.
        """
        await self._require_target(target, "Interested")
        added = await self._interests.add_entry(source, INTERESTED, target)
        log.info("interest_expressed", source=source, target=target, added=added)
        return added

    async def withdraw_interest(self, source: str, target: str) -> None:
        removed = await self._interests.remove_entry(source, INTERESTED, target)
        if not removed:
            raise NotFoundError("Interest not found")
        log.info("interest_withdrawn", source=source, target=target)

    async def remove_all_interests(self, source: str) -> int:
        modified = await self._interests.clear(source, INTERESTED)
        log.info("interests_cleared", source=source, modified=modified)
        return modified

    async def pass_profile(self, source: str, target: str) -> bool:
        await self._require_target(target, "Passed")
        added = await self._interests.add_entry(source, PASSED, target)
        log.info("profile_passed", source=source, target=target, added=added)
        return added

    # ── Listings ─────────────────────────────────────────────────────────────

    async def _summaries(self, profile_ids: list[str]) -> list[dict[str, Any]]:
        users = await self._users.find_verified_by_profile_ids(profile_ids)
        by_id: dict[str, UserDoc] = {user.profile_id: user for user in users}
        return [
            profile_summary(by_id[pid], self._base_url)
            for pid in profile_ids
            if pid in by_id
        ]

    async def list_interested(self, source: str) -> list[dict[str, Any]]:
        record = await self._interests.find(source)
        if record is None:
            return []
        return await self._summaries([e.profile_id for e in record.interested_profiles])

    async def list_passed(self, source: str) -> list[dict[str, Any]]:
        record = await self._interests.find(source)
        if record is None:
            return []
        return await self._summaries([e.profile_id for e in record.passed_profiles])

    async def list_received(self, target: str) -> list[dict[str, Any]]:
        sources = await self._interests.find_sources_targeting(target)
        return await self._summaries(sources)

    async def recent_matches(self, profile_id: str, gender: str) -> list[dict[str, Any]]:
        """Newest verified profiles of the opposite gender, excluding the caller."""
        target_gender = _OPPOSITE_GENDER.get(gender.strip().lower())
        if target_gender is None:
            raise ValidationError("gender must be male or female", field="gender")
        users = await self._users.find_recent_verified(
            profile_id, target_gender, limit=RECENT_MATCH_LIMIT
        )
        return [match_summary(user, self._base_url) for user in users]
