"""
GreenThumb Backend - User Service
==================================

What:  Account registration and lookup, bans, admin promotion and account
       removal.
How:   Stateless; every call receives the request's AsyncSession. Every
       operation that names an adminId checks it first.
Who:   Called by the /users/* route handlers.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from greenthumb.exceptions import ValidationError
from greenthumb.models import Account, Ban
from greenthumb.schemas.common import EmptyResponse
from greenthumb.schemas.user import (
    BanEnvelope,
    BanResponse,
    UserAdminActionRequest,
    UserBanRequest,
    UserEnvelope,
    UserIdRequest,
    UserResponse,
)
from greenthumb.services.access import require_admin
from greenthumb.services.database_interface import DatabaseInterface

logger = logging.getLogger(__name__)


class UserService:
    """Business logic for user and admin operations."""

    async def add_user(self, db: AsyncSession, body: UserIdRequest) -> UserEnvelope:
        """Register an id issued by the identity provider; duplicates are a 400."""
        dbi = DatabaseInterface(db)
        if await dbi.user_exists(body.user_id):
            raise ValidationError(
                message=f"User {body.user_id} already exists.",
                field="userId",
            )
        account = await dbi.add_user(Account(id=body.user_id))
        return UserEnvelope(user=UserResponse.from_account(account))

    async def get_user(self, db: AsyncSession, body: UserIdRequest) -> UserEnvelope:
        account = await DatabaseInterface(db).get_user(body.user_id)
        return UserEnvelope(user=UserResponse.from_account(account))

    async def ban_user(self, db: AsyncSession, body: UserBanRequest) -> BanEnvelope:
        dbi = DatabaseInterface(db)
        await require_admin(dbi, body.admin_id, "user ban")
        await dbi.get_user(body.user_id)
        ban = await dbi.add_ban(
            Ban(
                user_id=body.user_id,
                admin_id=body.admin_id,
                expiration_date=body.expiration_date,
            )
        )
        return BanEnvelope(ban=BanResponse.model_validate(ban))

    async def make_admin(self, db: AsyncSession, body: UserAdminActionRequest) -> UserEnvelope:
        """Promote a user; promoting an admin again changes nothing."""
        dbi = DatabaseInterface(db)
        await require_admin(dbi, body.admin_id, "admin promotion")
        account = await dbi.get_user(body.user_id)
        if not account.is_admin:
            account = await dbi.add_admin(account)
        return UserEnvelope(user=UserResponse.from_account(account))

    async def remove_user(
        self, db: AsyncSession, body: UserAdminActionRequest
    ) -> EmptyResponse:
        dbi = DatabaseInterface(db)
        await require_admin(dbi, body.admin_id, "user removal")
        await dbi.remove_user(body.user_id)
        logger.info("User %s removed by admin %s", body.user_id, body.admin_id)
        return EmptyResponse()


# Singleton instance
user_service = UserService()
