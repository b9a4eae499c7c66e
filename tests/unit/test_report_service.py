"""Unit tests for ReportService."""

import pytest

from errors import ValidationError
from schemas.dto.requests.report import ReportProfileRequest
from services.report_service import ALREADY_REPORTED, ReportService


class FakeWebhook:
    def __init__(self) -> None:
        self.payloads: list[dict] = []

    async def send(self, payload: dict) -> bool:
        self.payloads.append(payload)
        return True


def _request(reported: str = "KM2") -> ReportProfileRequest:
    return ReportProfileRequest.model_validate(
        {
            "reportingUserId": "KM1",
            "reportedProfileId": reported,
            "reason": "Fake profile",
            "category": "fraud",
            "message": "Photos are taken from a model's page",
            "name": "Ravi",
            "location": "Mangaluru",
            "profession": "Engineer",
            "education": "MBA",
        }
    )


class TestSubmit:
    async def test_stores_named_fields(self, report_repo):
        report = await ReportService(report_repo).submit(_request())

        [stored] = await report_repo.list_recent()
        assert stored.id == report.id
        assert stored.reason == "Fake profile"
        assert stored.education == "MBA"
        assert stored.status == "open"
        assert stored.priority == "Medium"

    async def test_second_report_rejected(self, report_repo):
        service = ReportService(report_repo)
        await service.submit(_request())
        with pytest.raises(ValidationError, match=ALREADY_REPORTED):
            await service.submit(_request())

    async def test_other_profile_allowed(self, report_repo):
        service = ReportService(report_repo)
        await service.submit(_request("KM2"))
        await service.submit(_request("KM3"))
        assert len(await service.list_reports()) == 2

    async def test_moderators_notified(self, report_repo):
        webhook = FakeWebhook()
        await ReportService(report_repo, webhook).submit(_request())

        [payload] = webhook.payloads
        fields = {f["name"]: f["value"] for f in payload["embeds"][0]["fields"]}
        assert fields["Reported profile"] == "KM2"
        assert fields["Category"] == "fraud"

    async def test_has_reported(self, report_repo):
        service = ReportService(report_repo)
        assert not await service.has_reported("KM1", "KM2")
        await service.submit(_request())
        assert await service.has_reported("KM1", "KM2")


class TestRequestShape:
    def test_every_detail_required(self):
        with pytest.raises(ValueError):
            ReportProfileRequest.model_validate(
                {"reportingUserId": "KM1", "reportedProfileId": "KM2", "reason": "x"}
            )
