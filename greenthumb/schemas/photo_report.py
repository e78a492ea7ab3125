"""
GreenThumb Backend - Photo Report Schemas
==========================================

Request bodies for /photoReports/* and the PhotoReport JSON projection.
"""

from typing import List, Optional

from pydantic import Field, model_validator

from greenthumb.schemas.common import (
    CamelModel,
    EntityId,
    PaginatedRequest,
    RequestModel,
    UtcDatetime,
)
from greenthumb.schemas.user import BanResponse


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class PhotoReportAddRequest(RequestModel):
    user_id: EntityId
    photo_id: EntityId
    report_text: str = Field(min_length=1, description="Why the photo is being reported")


class PhotoReportIdRequest(RequestModel):
    photo_report_id: EntityId


class PhotoReportHandleRequest(RequestModel):
    """
    adminAction: 0 dismiss, 1 remove the photo, 2 remove the photo and ban
    its uploader. banExpirationDate only applies to action 2; omitted means
    a permanent ban.
    """

    photo_report_id: EntityId
    admin_id: EntityId
    admin_action: int = Field(ge=0, le=2, strict=True)
    ban_expiration_date: Optional[UtcDatetime] = None


class PhotoReportListRequest(PaginatedRequest):
    """Reports oldest-first; either unhandled-only or handled-by one admin."""

    admin_id: EntityId
    handled_by: Optional[EntityId] = None
    unhandled_only: bool = False

    @model_validator(mode="after")
    def check_exclusive_filters(self) -> "PhotoReportListRequest":
        if self.handled_by is not None and self.unhandled_only:
            raise ValueError(
                "Parameter 'unhandledOnly' must be false if parameter 'handledBy' "
                "is not undefined."
            )
        return self


class PhotoReportRemoveRequest(RequestModel):
    photo_report_id: EntityId
    admin_id: EntityId


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class PhotoReportResponse(CamelModel):
    id: int
    photo_id: int
    user_id: int
    report_text: str
    report_date: UtcDatetime
    admin_action: Optional[int] = None
    admin_id: Optional[int] = None
    handle_date: Optional[UtcDatetime] = None


class PhotoReportEnvelope(CamelModel):
    photo_report: PhotoReportResponse


class PhotoReportHandleResponse(CamelModel):
    """The handled report, plus the ban when the action issued one."""

    photo_report: PhotoReportResponse
    ban: Optional[BanResponse] = None


class PhotoReportListResponse(CamelModel):
    photo_reports: List[PhotoReportResponse]
