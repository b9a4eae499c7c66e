"""Unit tests for InterestService — the interest / pass graph and match feed."""

from datetime import timedelta

import pytest

from errors import NotFoundError, ValidationError
from repositories.interest_repository import INTERESTED, PASSED
from services.interest_service import RECENT_MATCH_LIMIT, InterestService
from tests.unit.factories import NOW

BASE_URL = "https://api.example.com"


@pytest.fixture
def interests(interest_repo, user_repo) -> InterestService:
    return InterestService(interest_repo, user_repo, BASE_URL)


@pytest.fixture
async def people(seed_user):
    await seed_user("KM1", gender="male")
    await seed_user("KM2", gender="female")
    await seed_user("KM3", gender="female")


# ── Writes ───────────────────────────────────────────────────────────────────


class TestExpressInterest:
    async def test_adds_entry(self, interests, interest_repo, people):
        assert await interests.express_interest("KM1", "KM2") is True
        record = await interest_repo.find("KM1")
        assert [e.profile_id for e in record.interested_profiles] == ["KM2"]

    async def test_is_idempotent(self, interests, interest_repo, people):
        await interests.express_interest("KM1", "KM2")
        assert await interests.express_interest("KM1", "KM2") is False
        record = await interest_repo.find("KM1")
        assert len(record.interested_profiles) == 1

    async def test_unknown_target(self, interests, people):
        with pytest.raises(NotFoundError, match="Interested profile not found"):
            await interests.express_interest("KM1", "KM404")


class TestWithdraw:
    async def test_removes_entry(self, interests, interest_repo, people):
        await interests.express_interest("KM1", "KM2")
        await interests.express_interest("KM1", "KM3")

        await interests.withdraw_interest("KM1", "KM2")

        record = await interest_repo.find("KM1")
        assert [e.profile_id for e in record.interested_profiles] == ["KM3"]

    async def test_missing_entry(self, interests, people):
        with pytest.raises(NotFoundError):
            await interests.withdraw_interest("KM1", "KM2")

    async def test_remove_all(self, interests, interest_repo, people):
        await interests.express_interest("KM1", "KM2")
        await interests.express_interest("KM1", "KM3")
        await interests.pass_profile("KM1", "KM2")

        await interests.remove_all_interests("KM1")

        record = await interest_repo.find("KM1")
        assert record.interested_profiles == []
        assert len(record.passed_profiles) == 1


class TestPass:
    async def test_pass_is_a_separate_set(self, interests, interest_repo, people):
        await interests.express_interest("KM1", "KM2")
        assert await interests.pass_profile("KM1", "KM2") is True
        assert await interests.pass_profile("KM1", "KM2") is False

        record = await interest_repo.find("KM1")
        assert len(record.interested_profiles) == 1
        assert len(record.passed_profiles) == 1

    async def test_unknown_target(self, interests, people):
        with pytest.raises(NotFoundError, match="Passed profile not found"):
            await interests.pass_profile("KM1", "KM404")


class TestRepositorySets:
    async def test_add_entry_directly_is_idempotent(self, interest_repo):
        assert await interest_repo.add_entry("KM1", PASSED, "KM2") is True
        assert await interest_repo.add_entry("KM1", PASSED, "KM2") is False

    async def test_remove_unknown_source(self, interest_repo):
        assert await interest_repo.remove_entry("KM9", INTERESTED, "KM2") is False


# ── Listings ─────────────────────────────────────────────────────────────────


class TestListings:
    async def test_interested_profiles(self, interests, people):
        await interests.express_interest("KM1", "KM3")
        await interests.express_interest("KM1", "KM2")

        listed = await interests.list_interested("KM1")

        assert [p["id"] for p in listed] == ["KM3", "KM2"]
        assert listed[0]["image"].startswith("https://")

    async def test_empty_when_no_record(self, interests):
        assert await interests.list_interested("KM1") == []
        assert await interests.list_passed("KM1") == []

    async def test_received_interests(self, interests, people):
        await interests.express_interest("KM2", "KM1")
        await interests.express_interest("KM3", "KM1")
        await interests.express_interest("KM3", "KM2")

        received = await interests.list_received("KM1")

        assert sorted(p["id"] for p in received) == ["KM2", "KM3"]

    async def test_unverified_profiles_hidden(self, interests, seed_user):
        await seed_user("KM1")
        await seed_user("KM2", email_verified=False)
        await interests.express_interest("KM1", "KM2")
        assert await interests.list_interested("KM1") == []

    async def test_passed_profiles(self, interests, people):
        await interests.pass_profile("KM1", "KM3")
        assert [p["id"] for p in await interests.list_passed("KM1")] == ["KM3"]


class TestRecentMatches:
    async def test_newest_opposite_gender_first(self, interests, seed_user):
        await seed_user("KM1", gender="male")
        for i in range(5):
            await seed_user(f"KMF{i}", gender="female", created_at=NOW + timedelta(hours=i))
        await seed_user("KMM", gender="male", created_at=NOW + timedelta(days=1))

        matches = await interests.recent_matches("KM1", "Male")

        assert len(matches) == RECENT_MATCH_LIMIT
        assert [m["id"] for m in matches] == ["KMF4", "KMF3", "KMF2"]
        assert matches[0]["location"] == "Not specified"

    async def test_caller_excluded(self, interests, seed_user):
        await seed_user("KM1", gender="female")
        await seed_user("KM2", gender="female")
        matches = await interests.recent_matches("KM1", "male")
        assert [m["id"] for m in matches] == ["KM2"]

    async def test_invalid_gender(self, interests):
        with pytest.raises(ValidationError):
            await interests.recent_matches("KM1", "other")
