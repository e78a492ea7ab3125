"""
GreenThumb Backend - User Route Handlers
=========================================

What:  POST /users/add, /byId, /ban, /makeAdmin, /remove.
How:   Thin handlers over UserService. /ban, /makeAdmin and /remove take
       an adminId and are rejected with 401 unless it names an admin.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from greenthumb.database import get_db_session
from greenthumb.schemas.common import EmptyResponse, ErrorResponse
from greenthumb.schemas.user import (
    BanEnvelope,
    UserAdminActionRequest,
    UserBanRequest,
    UserEnvelope,
    UserIdRequest,
)
from greenthumb.services.user_service import user_service

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/users", tags=["Users"])

_errors = {
    400: {"description": "Invalid request body", "model": ErrorResponse},
    404: {"description": "User not found", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}
_admin_errors = {**_errors, 401: {"description": "Not an admin", "model": ErrorResponse}}


@router.post(
    "/add",
    response_model=UserEnvelope,
    responses=_errors,
    summary="Register a user id",
)
async def add_user(
    body: UserIdRequest,
    db: AsyncSession = Depends(get_db_session),
) -> UserEnvelope:
    return await user_service.add_user(db, body)


@router.post(
    "/byId",
    response_model=UserEnvelope,
    responses=_errors,
    summary="Get a user with their ban history",
)
async def get_user(
    body: UserIdRequest,
    db: AsyncSession = Depends(get_db_session),
) -> UserEnvelope:
    return await user_service.get_user(db, body)


@router.post(
    "/ban",
    response_model=BanEnvelope,
    responses=_admin_errors,
    summary="Ban a user, permanently or until expirationDate",
)
async def ban_user(
    body: UserBanRequest,
    db: AsyncSession = Depends(get_db_session),
) -> BanEnvelope:
    return await user_service.ban_user(db, body)


@router.post(
    "/makeAdmin",
    response_model=UserEnvelope,
    responses=_admin_errors,
    summary="Promote a user to admin",
)
async def make_admin(
    body: UserAdminActionRequest,
    db: AsyncSession = Depends(get_db_session),
) -> UserEnvelope:
    return await user_service.make_admin(db, body)


@router.post(
    "/remove",
    response_model=EmptyResponse,
    responses=_admin_errors,
    summary="Delete a user and everything they posted",
)
async def remove_user(
    body: UserAdminActionRequest,
    db: AsyncSession = Depends(get_db_session),
) -> EmptyResponse:
    return await user_service.remove_user(db, body)
