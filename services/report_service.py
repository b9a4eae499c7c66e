"""ReportService — profile reports and moderator notification."""

from __future__ import annotations

from typing import Optional

from pymongo.errors import DuplicateKeyError

from errors import ValidationError
from infrastructure.webhook.discord import build_report_embed
from infrastructure.webhook.protocol import WebhookProvider
from repositories.report_repository import ReportRepository
from schemas.dto.requests.report import ReportProfileRequest
from schemas.models.report import ReportDoc
from shared.datetime_utils import utc_now
from shared.logging import get_logger

log = get_logger(__name__)

ALREADY_REPORTED = "You have already reported this profile"


class ReportService:
    def __init__(
        self,
        report_repo: ReportRepository,
        webhook: Optional[WebhookProvider] = None,
    ) -> None:
        self._reports = report_repo
        self._webhook = webhook

    async def submit(self, req: ReportProfileRequest) -> ReportDoc:
        if await self._reports.exists(req.reporting_user_id, req.reported_profile_id):
            raise ValidationError(ALREADY_REPORTED)

        report = ReportDoc(**req.model_dump(), created_at=utc_now())
        try:
            report_id = await self._reports.insert(report)
        except DuplicateKeyError as e:
            raise ValidationError(ALREADY_REPORTED) from e
        report = report.model_copy(update={"id": report_id})

        log.info(
            "profile_reported",
            report_id=str(report_id),
            reported_profile_id=report.reported_profile_id,
            category=report.category,
        )
        if self._webhook is not None:
            await self._webhook.send(build_report_embed(report.model_dump()))
        return report

    async def has_reported(self, reporting_user_id: str, reported_profile_id: str) -> bool:
        return await self._reports.exists(reporting_user_id, reported_profile_id)

    async def list_reports(self, limit: int = 100) -> list[ReportDoc]:
        return await self._reports.list_recent(limit)
