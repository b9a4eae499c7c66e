"""
Report routes.

POST /api/report-profile  — one report per (reporter, reported) pair
GET  /api/report-status   — has this user already reported that profile?
GET  /api/reports         — moderator queue (admin)
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from dependencies import get_report_service, require_admin
from schemas.dto.requests.report import ReportProfileRequest
from schemas.dto.responses.common import error_responses
from services.report_service import ReportService

router = APIRouter(prefix="/api", tags=["reports"], responses=error_responses(400, 401, 403))


@router.post("/report-profile", status_code=201)
async def report_profile(
    body: ReportProfileRequest,
    reports: ReportService = Depends(get_report_service),
) -> dict[str, Any]:
    report = await reports.submit(body)
    return {
        "message": "Report submitted successfully",
        "report": report.model_dump(mode="json", by_alias=False),
    }


@router.get("/report-status")
async def report_status(
    reporting_user_id: str = Query(alias="reportingUserId", min_length=1),
    reported_profile_id: str = Query(alias="reportedProfileId", min_length=1),
    reports: ReportService = Depends(get_report_service),
) -> dict[str, Any]:
    return {"hasReported": await reports.has_reported(reporting_user_id, reported_profile_id)}


@router.get("/reports", dependencies=[Depends(require_admin)])
async def list_reports(
    limit: int = Query(default=100, ge=1, le=500),
    reports: ReportService = Depends(get_report_service),
) -> list[dict[str, Any]]:
    return [r.model_dump(mode="json", by_alias=False) for r in await reports.list_reports(limit)]
