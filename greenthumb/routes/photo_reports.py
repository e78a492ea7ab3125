"""
GreenThumb Backend - Photo Report Route Handlers
=================================================

What:  POST /photoReports/add, /byId, /handle, /list/byDate, /remove.
How:   Thin handlers over ReportService. /handle, /list/byDate and
       /remove are admin-only; the service performs the check.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from greenthumb.database import get_db_session
from greenthumb.schemas.common import EmptyResponse, ErrorResponse
from greenthumb.schemas.photo_report import (
    PhotoReportAddRequest,
    PhotoReportEnvelope,
    PhotoReportHandleRequest,
    PhotoReportHandleResponse,
    PhotoReportIdRequest,
    PhotoReportListRequest,
    PhotoReportListResponse,
    PhotoReportRemoveRequest,
)
from greenthumb.services.report_service import report_service

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/photoReports", tags=["Photo Reports"])

_errors = {
    400: {"description": "Invalid request body", "model": ErrorResponse},
    401: {"description": "Not an admin, or reporter is banned", "model": ErrorResponse},
    404: {"description": "Referenced record not found", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}


@router.post(
    "/add",
    response_model=PhotoReportEnvelope,
    responses=_errors,
    summary="Report a photo for moderation",
)
async def add_report(
    body: PhotoReportAddRequest,
    db: AsyncSession = Depends(get_db_session),
) -> PhotoReportEnvelope:
    return await report_service.add_report(db, body)


@router.post(
    "/byId",
    response_model=PhotoReportEnvelope,
    responses=_errors,
    summary="Get a photo report",
)
async def get_report(
    body: PhotoReportIdRequest,
    db: AsyncSession = Depends(get_db_session),
) -> PhotoReportEnvelope:
    return await report_service.get_report(db, body)


@router.post(
    "/handle",
    response_model=PhotoReportHandleResponse,
    responses=_errors,
    summary="Dismiss a report, remove the photo, or remove it and ban the uploader",
)
async def handle_report(
    body: PhotoReportHandleRequest,
    db: AsyncSession = Depends(get_db_session),
) -> PhotoReportHandleResponse:
    return await report_service.handle_report(db, body)


@router.post(
    "/list/byDate",
    response_model=PhotoReportListResponse,
    responses=_errors,
    summary="List photo reports, oldest first",
)
async def list_reports_by_date(
    body: PhotoReportListRequest,
    db: AsyncSession = Depends(get_db_session),
) -> PhotoReportListResponse:
    return await report_service.list_by_date(db, body)


@router.post(
    "/remove",
    response_model=EmptyResponse,
    responses=_errors,
    summary="Delete a photo report",
)
async def remove_report(
    body: PhotoReportRemoveRequest,
    db: AsyncSession = Depends(get_db_session),
) -> EmptyResponse:
    return await report_service.remove_report(db, body)
