"""
GreenThumb Backend - Access Checks
===================================

Authorization guards shared by the resource services. Both raise
UnauthorizedError (HTTP 401) and log the rejection at WARNING.
"""

import logging

from greenthumb.exceptions import UnauthorizedError
from greenthumb.services.database_interface import DatabaseInterface

logger = logging.getLogger(__name__)


async def require_admin(dbi: DatabaseInterface, admin_id: int, action: str) -> None:
    """Reject the request unless `admin_id` names an admin account."""
    if not await dbi.check_admin(admin_id):
        logger.warning("Rejected %s: user %s is not an admin", action, admin_id)
        raise UnauthorizedError(user_id=admin_id, context={"action": action})


async def require_not_banned(dbi: DatabaseInterface, user_id: int, action: str) -> None:
    """Reject the request if `user_id` is under a permanent or unexpired ban."""
    ban = await dbi.get_active_ban(user_id)
    if ban is not None:
        logger.warning(
            "Rejected %s: user %s is banned (ban %s, expires: %s)",
            action,
            user_id,
            ban.id,
            ban.expiration_date or "never",
        )
        raise UnauthorizedError(
            message="User is banned and may not perform this action.",
            user_id=user_id,
            context={"action": action, "ban_id": ban.id},
        )
