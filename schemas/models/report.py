"""
Profile report document model.

Maps to the `reports` MongoDB collection, unique on
(reporting_user_id, reported_profile_id). Report details are named fields
rather than a positional array.
"""

from __future__ import annotations

from typing import Optional

from schemas.models.base import MongoBaseModel, UtcDatetime

REPORT_OPEN = "open"


class ReportDoc(MongoBaseModel):
    """Document model for the `reports` collection."""

    reporting_user_id: str
    reported_profile_id: str
    reason: str
    category: str
    message: str
    name: str
    location: str
    profession: str
    education: str
    priority: str = "Medium"
    status: str = REPORT_OPEN
    assigned_to: Optional[str] = None
    resolution_notes: Optional[str] = None
    created_at: Optional[UtcDatetime] = None
