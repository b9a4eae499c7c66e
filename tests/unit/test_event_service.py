"""Unit tests for the event registry and the status scheduler."""

from datetime import datetime, timedelta, timezone

import pytest
from bson import ObjectId

from errors import NotFoundError, ValidationError
from schemas.dto.requests.event import EventRequest
from schemas.models.event import (
    EVENT_COMPLETED,
    EVENT_ONGOING,
    EVENT_UPCOMING,
    EventDoc,
)
from services.event_service import (
    EventService,
    EventStatusScheduler,
    next_event_status,
    serialize_event,
)
from tests.unit.factories import NOW

START = datetime(2026, 3, 1, 10, 0, tzinfo=timezone.utc)


def _event(**overrides) -> EventDoc:
    fields = dict(
        title="Kannada Sammilana",
        description="Community meetup",
        date=datetime(2026, 3, 1, tzinfo=timezone.utc),
        time="10:00",
        location="Bengaluru",
        type="meetup",
        max_attendees=50,
    )
    fields.update(overrides)
    return EventDoc(**fields)


def _request(**overrides) -> EventRequest:
    fields = dict(
        title="Ugadi Meetup",
        description="Spring gathering",
        date="2026-03-10",
        time="18:00",
        location="Mysuru",
        type="meetup",
        maxAttendees=2,
    )
    fields.update(overrides)
    return EventRequest(**fields)


@pytest.fixture
def events(event_repo, user_repo) -> EventService:
    return EventService(event_repo, user_repo)


# ── Status rule ──────────────────────────────────────────────────────────────


class TestNextEventStatus:
    def test_before_start_unchanged(self):
        assert next_event_status(_event(), START - timedelta(minutes=1)) is None

    def test_one_hour_in_is_ongoing(self):
        assert next_event_status(_event(), START + timedelta(hours=1)) == EVENT_ONGOING

    def test_already_ongoing_unchanged(self):
        event = _event(status=EVENT_ONGOING)
        assert next_event_status(event, START + timedelta(hours=1)) is None

    def test_five_hours_in_is_completed(self):
        event = _event(status=EVENT_ONGOING)
        assert next_event_status(event, START + timedelta(hours=5)) == EVENT_COMPLETED

    def test_exactly_four_hours_is_completed(self):
        assert next_event_status(_event(), START + timedelta(hours=4)) == EVENT_COMPLETED

    def test_yesterdays_upcoming_event_is_completed(self):
        now = START + timedelta(days=1)
        assert next_event_status(_event(), now) == EVENT_COMPLETED

    def test_ongoing_event_from_before_midnight_completes(self):
        event = _event(time="23:00", status=EVENT_ONGOING)
        now = datetime(2026, 3, 2, 0, 30, tzinfo=timezone.utc)
        assert next_event_status(event, now) == EVENT_COMPLETED


class TestScheduler:
    async def test_sweep_moves_statuses(self, event_repo):
        event = await event_repo.insert(_event())
        scheduler = EventStatusScheduler(event_repo)

        assert await scheduler.update_event_statuses(START + timedelta(hours=1)) == 1
        assert (await event_repo.find_by_id(event.id)).status == EVENT_ONGOING

        assert await scheduler.update_event_statuses(START + timedelta(hours=5)) == 1
        assert (await event_repo.find_by_id(event.id)).status == EVENT_COMPLETED

    async def test_completed_events_are_not_revisited(self, event_repo):
        await event_repo.insert(_event(status=EVENT_COMPLETED))
        scheduler = EventStatusScheduler(event_repo)
        assert await scheduler.update_event_statuses(START + timedelta(hours=5)) == 0

    async def test_one_failure_does_not_block_others(self, event_repo, mocker):
        await event_repo.insert(_event(title="first"))
        await event_repo.insert(_event(title="second"))
        mocker.patch.object(
            event_repo, "set_status", side_effect=[RuntimeError("write failed"), True]
        )

        changed = await EventStatusScheduler(event_repo).update_event_statuses(
            START + timedelta(hours=1)
        )

        assert changed == 1

    async def test_tick_runs_subscription_sweep(self, event_repo, mocker):
        subscriptions = mocker.AsyncMock()
        subscriptions.expire_lapsed.return_value = 0
        await EventStatusScheduler(event_repo, subscriptions).tick(NOW)
        subscriptions.expire_lapsed.assert_awaited_once_with(NOW)


# ── EventService ─────────────────────────────────────────────────────────────


class TestCreateUpdateDelete:
    async def test_create(self, events):
        event = await events.create(_request(), now=NOW)
        assert event.id is not None
        assert event.status == EVENT_UPCOMING
        assert event.date == datetime(2026, 3, 10, tzinfo=timezone.utc)
        assert event.organizer == "Admin"

    async def test_past_start_rejected(self, events):
        with pytest.raises(ValidationError):
            await events.create(_request(date="2026-02-01"), now=NOW)

    async def test_update_replaces_fields(self, events):
        event = await events.create(_request(), now=NOW)
        updated = await events.update(str(event.id), _request(title="Renamed"), now=NOW)
        assert updated.title == "Renamed"

    async def test_update_below_attendance_rejected(self, events, seed_user):
        await seed_user("KM1")
        await seed_user("KM2")
        event = await events.create(_request(maxAttendees=5), now=NOW)
        await events.toggle_registration(str(event.id), "KM1")
        await events.toggle_registration(str(event.id), "KM2")

        with pytest.raises(ValidationError):
            await events.update(str(event.id), _request(maxAttendees=1), now=NOW)

    async def test_delete(self, events):
        event = await events.create(_request(), now=NOW)
        await events.delete(str(event.id))
        with pytest.raises(NotFoundError):
            await events.delete(str(event.id))

    async def test_malformed_id(self, events):
        with pytest.raises(ValidationError):
            await events.get("nope")


class TestQueries:
    async def test_filters(self, events, event_repo):
        await event_repo.insert(_event(type="webinar"))
        await event_repo.insert(_event(status=EVENT_COMPLETED))

        assert len(await events.list_events()) == 2
        assert len(await events.list_events("all", "all")) == 2
        assert len(await events.list_events(status=EVENT_COMPLETED)) == 1
        assert len(await events.list_events(event_type="webinar")) == 1

    async def test_get_reports_registration(self, events, seed_user):
        await seed_user("KM1")
        event = await events.create(_request(), now=NOW)
        await events.toggle_registration(str(event.id), "KM1")

        assert (await events.get(str(event.id), "KM1"))["isRegistered"] is True
        assert (await events.get(str(event.id), "KM2"))["isRegistered"] is False
        assert (await events.get(str(event.id)))["isRegistered"] is False

    def test_serialize_uses_wire_names(self):
        data = serialize_event(_event(_id=ObjectId()))
        assert data["maxAttendees"] == 50
        assert data["date"] == "2026-03-01"
        assert "isRegistered" not in data


class TestRegistration:
    async def test_toggle_on_and_off(self, events, user_repo, seed_user):
        await seed_user("KM1")
        event = await events.create(_request(), now=NOW)

        on = await events.toggle_registration(str(event.id), "KM1")
        assert on["isRegistered"] is True
        assert on["currentAttendees"] == 1
        user = await user_repo.find_by_profile_id("KM1")
        assert user.registered_events == [event.id]

        off = await events.toggle_registration(str(event.id), "KM1")
        assert off["isRegistered"] is False
        assert off["currentAttendees"] == 0
        assert off["registeredUsers"] == []
        user = await user_repo.find_by_profile_id("KM1")
        assert user.registered_events == []

    async def test_full_event(self, events, seed_user):
        for pid in ("KM1", "KM2", "KM3"):
            await seed_user(pid)
        event = await events.create(_request(maxAttendees=2), now=NOW)
        await events.toggle_registration(str(event.id), "KM1")
        await events.toggle_registration(str(event.id), "KM2")

        with pytest.raises(ValidationError, match="Event is full"):
            await events.toggle_registration(str(event.id), "KM3")

    async def test_unknown_user(self, events):
        event = await events.create(_request(), now=NOW)
        with pytest.raises(NotFoundError):
            await events.toggle_registration(str(event.id), "KM404")
