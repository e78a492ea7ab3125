"""
GreenThumb Backend - Photo Route Handlers
==========================================

What:  POST /photos/add, /byId, /remove, /list/byDate, /list/byRating, /vote.
How:   Parses the JSON body into its request model, delegates to
       PhotoService, returns the envelope it builds.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from greenthumb.database import get_db_session
from greenthumb.schemas.common import EmptyResponse, ErrorResponse
from greenthumb.schemas.photo import (
    PhotoAddRequest,
    PhotoEnvelope,
    PhotoIdRequest,
    PhotoListRequest,
    PhotoListResponse,
    PhotoVoteRequest,
)
from greenthumb.services.photo_service import photo_service

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/photos", tags=["Photos"])

_errors = {
    400: {"description": "Invalid request body", "model": ErrorResponse},
    404: {"description": "Referenced record not found", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}


@router.post(
    "/add",
    response_model=PhotoEnvelope,
    responses={**_errors, 401: {"description": "Uploader is banned", "model": ErrorResponse}},
    summary="Upload a photo of a plant",
)
async def add_photo(
    body: PhotoAddRequest,
    db: AsyncSession = Depends(get_db_session),
) -> PhotoEnvelope:
    return await photo_service.add_photo(db, body)


@router.post("/byId", response_model=PhotoEnvelope, responses=_errors, summary="Get a photo")
async def get_photo(
    body: PhotoIdRequest,
    db: AsyncSession = Depends(get_db_session),
) -> PhotoEnvelope:
    return await photo_service.get_photo(db, body)


@router.post("/remove", response_model=EmptyResponse, responses=_errors, summary="Remove a photo")
async def remove_photo(
    body: PhotoIdRequest,
    db: AsyncSession = Depends(get_db_session),
) -> EmptyResponse:
    """Removes the photo, its votes and the reports against it still awaiting review."""
    return await photo_service.remove_photo(db, body)


@router.post(
    "/list/byDate",
    response_model=PhotoListResponse,
    responses=_errors,
    summary="List photos, newest first",
)
async def list_photos_by_date(
    body: PhotoListRequest,
    db: AsyncSession = Depends(get_db_session),
) -> PhotoListResponse:
    return await photo_service.list_by_date(db, body)


@router.post(
    "/list/byRating",
    response_model=PhotoListResponse,
    responses=_errors,
    summary="List photos, highest rated first",
)
async def list_photos_by_rating(
    body: PhotoListRequest,
    db: AsyncSession = Depends(get_db_session),
) -> PhotoListResponse:
    return await photo_service.list_by_rating(db, body)


@router.post(
    "/vote",
    response_model=PhotoEnvelope,
    responses={**_errors, 401: {"description": "Voter is banned", "model": ErrorResponse}},
    summary="Upvote, downvote or withdraw a vote",
)
async def vote_photo(
    body: PhotoVoteRequest,
    db: AsyncSession = Depends(get_db_session),
) -> PhotoEnvelope:
    return await photo_service.vote(db, body)
