"""
GreenThumb Backend - User and Ban Schemas
==========================================

Request bodies for /users/* and the User / Ban JSON projections.
"""

from typing import List, Optional

from greenthumb.models import Account
from greenthumb.schemas.common import CamelModel, EntityId, RequestModel, UtcDatetime


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class UserIdRequest(RequestModel):
    """Body of /users/add and /users/byId."""

    user_id: EntityId


class UserBanRequest(RequestModel):
    """expirationDate omitted means a permanent ban."""

    admin_id: EntityId
    user_id: EntityId
    expiration_date: Optional[UtcDatetime] = None


class UserAdminActionRequest(RequestModel):
    """Body of /users/makeAdmin and /users/remove."""

    admin_id: EntityId
    user_id: EntityId


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class BanResponse(CamelModel):
    id: int
    user_id: int
    admin_id: Optional[int] = None
    expiration_date: Optional[UtcDatetime] = None


class UserResponse(CamelModel):
    id: int
    admin: bool
    bans: List[BanResponse]

    @classmethod
    def from_account(cls, account: Account) -> "UserResponse":
        return cls(
            id=account.id,
            admin=account.is_admin,
            bans=[BanResponse.model_validate(ban) for ban in account.bans],
        )


class UserEnvelope(CamelModel):
    user: UserResponse


class BanEnvelope(CamelModel):
    ban: BanResponse
