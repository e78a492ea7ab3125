"""
GreenThumb Backend - Photo Report Service
==========================================

What:  Filing, lookup, moderation and listing of photo reports.
How:   Stateless; every call receives the request's AsyncSession, so all
       steps of a moderation action commit or roll back together.
Who:   Called by the /photoReports/* route handlers.

Moderation Flow (POST /photoReports/handle):
    ┌──────────────┐    ┌───────────────┐    ┌──────────────────────────┐
    │  Admin check │───▶│ Report must   │───▶│ 0: mark handled          │
    │  (401)       │    │ be unhandled  │    │ 1: + remove photo        │
    └──────────────┘    │ (404 / 400)   │    │ 2: + ban photo uploader  │
                        └───────────────┘    └──────────────────────────┘

    The report is marked handled and flushed before the photo goes, so the
    photo removal (which drops unhandled reports) keeps it as audit trail.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from greenthumb.exceptions import ValidationError
from greenthumb.models import AdminAction, Ban, PhotoReport
from greenthumb.schemas.common import EmptyResponse
from greenthumb.schemas.photo_report import (
    PhotoReportAddRequest,
    PhotoReportEnvelope,
    PhotoReportHandleRequest,
    PhotoReportHandleResponse,
    PhotoReportIdRequest,
    PhotoReportListRequest,
    PhotoReportListResponse,
    PhotoReportRemoveRequest,
    PhotoReportResponse,
)
from greenthumb.schemas.user import BanResponse
from greenthumb.services.access import require_admin, require_not_banned
from greenthumb.services.database_interface import DatabaseInterface

logger = logging.getLogger(__name__)


class ReportService:
    """Business logic for photo report operations."""

    async def add_report(
        self, db: AsyncSession, body: PhotoReportAddRequest
    ) -> PhotoReportEnvelope:
        dbi = DatabaseInterface(db)
        await dbi.get_user(body.user_id)
        await dbi.get_photo(body.photo_id)
        await require_not_banned(dbi, body.user_id, "photo report")

        report = await dbi.add_photo_report(
            PhotoReport(
                user_id=body.user_id,
                photo_id=body.photo_id,
                report_text=body.report_text,
            )
        )
        return PhotoReportEnvelope(photo_report=PhotoReportResponse.model_validate(report))

    async def get_report(
        self, db: AsyncSession, body: PhotoReportIdRequest
    ) -> PhotoReportEnvelope:
        report = await DatabaseInterface(db).get_photo_report(body.photo_report_id)
        return PhotoReportEnvelope(photo_report=PhotoReportResponse.model_validate(report))

    async def handle_report(
        self, db: AsyncSession, body: PhotoReportHandleRequest
    ) -> PhotoReportHandleResponse:
        """
        Apply an admin's decision to an unhandled report.

        Raises:
            UnauthorizedError: adminId is not an admin
            NotFoundError: the report (or, for actions 1 and 2, its photo) is gone
            ValidationError: the report was already handled
        """
        dbi = DatabaseInterface(db)
        await require_admin(dbi, body.admin_id, "photo report handling")

        report = await dbi.get_photo_report(body.photo_report_id)
        if report.is_handled:
            raise ValidationError(
                message=f"Photo report {report.id} has already been handled.",
                field="photoReportId",
            )

        action = AdminAction(body.admin_action)
        ban: Optional[Ban] = None

        if action == AdminAction.DISMISS:
            report.mark_handled(action, body.admin_id)
            await dbi.update_photo_report(report)
        else:
            photo = await dbi.get_photo(report.photo_id)
            uploader_id = photo.user_id

            report.mark_handled(action, body.admin_id)
            await dbi.update_photo_report(report)
            await dbi.remove_photo(photo.id)

            if action == AdminAction.REMOVE_PHOTO_AND_BAN:
                ban = await dbi.add_ban(
                    Ban(
                        user_id=uploader_id,
                        admin_id=body.admin_id,
                        expiration_date=body.ban_expiration_date,
                    )
                )

        logger.info(
            "Photo report %s handled by admin %s: %s",
            report.id,
            body.admin_id,
            action.name,
        )
        return PhotoReportHandleResponse(
            photo_report=PhotoReportResponse.model_validate(report),
            ban=BanResponse.model_validate(ban) if ban is not None else None,
        )

    async def list_by_date(
        self, db: AsyncSession, body: PhotoReportListRequest
    ) -> PhotoReportListResponse:
        """Oldest first: all reports, only unhandled ones, or those one admin handled."""
        dbi = DatabaseInterface(db)
        await require_admin(dbi, body.admin_id, "photo report listing")

        if body.handled_by is not None:
            reports = await dbi.get_admin_photo_reports_by_date(
                body.handled_by, body.start_index, body.max_results
            )
        elif body.unhandled_only:
            reports = await dbi.get_unhandled_photo_reports_by_date(
                body.start_index, body.max_results
            )
        else:
            reports = await dbi.get_photo_reports_by_date(body.start_index, body.max_results)

        return PhotoReportListResponse(
            photo_reports=[PhotoReportResponse.model_validate(r) for r in reports]
        )

    async def remove_report(
        self, db: AsyncSession, body: PhotoReportRemoveRequest
    ) -> EmptyResponse:
        dbi = DatabaseInterface(db)
        await require_admin(dbi, body.admin_id, "photo report removal")
        await dbi.remove_photo_report(body.photo_report_id)
        logger.info("Photo report %s removed by admin %s", body.photo_report_id, body.admin_id)
        return EmptyResponse()


# Singleton instance
report_service = ReportService()
