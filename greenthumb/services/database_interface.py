"""
GreenThumb Backend - Database Interface
========================================

What:  The named persistence operations every service calls: add / get /
       remove / list for photos, reports, plants, accounts and bans, plus
       the admin privilege check.
How:   A thin object bound to one AsyncSession. Methods flush (never
       commit): the request dependency owns the transaction, so a handler
       that calls several operations commits or rolls back all of them.
Who:   Constructed per request by the services.

Pagination contract (all list operations):
    start_index >= 0 and max_results > 0 are enforced by the request
    schemas before any call lands here. When start_index + max_results runs
    past the end, the remainder is returned (possibly empty). Offsets and
    limits beyond the INTEGER range are clamped to it.

Error contract:
    get_* raise NotFoundError for a missing id.
    remove_* raise NotFoundError when nothing was removed.
    SQLAlchemy failures surface as DatabaseError (details logged only).
"""

import functools
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from greenthumb.exceptions import DatabaseError, NotFoundError
from greenthumb.schemas.common import MAX_DB_INT
from greenthumb.models import (
    Account,
    AccountRole,
    Ban,
    Photo,
    PhotoReport,
    PhotoVote,
    Plant,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def db_operation(func_: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """Translate SQLAlchemy failures into DatabaseError, keeping app errors as-is."""

    @functools.wraps(func_)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return await func_(*args, **kwargs)
        except SQLAlchemyError as e:
            logger.error("Database error in %s: %s", func_.__name__, str(e), exc_info=True)
            raise DatabaseError(
                context={"operation": func_.__name__, "error_type": type(e).__name__},
            ) from e

    return wrapper


def _page(query, start_index: int, max_results: int):
    """Apply OFFSET/LIMIT, clamped to what the driver can bind."""
    return query.offset(min(start_index, MAX_DB_INT)).limit(min(max_results, MAX_DB_INT))


def _like_pattern(query: str) -> str:
    """Wrap a user query in %...% with LIKE metacharacters escaped."""
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class DatabaseInterface:
    """Persistence operations for one request-scoped session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    # ══════════════════════════════════════════════════════════════════════
    # Photos
    # ══════════════════════════════════════════════════════════════════════

    @staticmethod
    def _rating_expression():
        """SUM of vote values for the photo in the enclosing query (0 if unvoted)."""
        vote_sum = (
            select(func.sum(PhotoVote.value))
            .where(PhotoVote.photo_id == Photo.id)
            .correlate(Photo)
            .scalar_subquery()
        )
        return func.coalesce(vote_sum, 0)

    async def _list_photos(self, query, start_index: int, max_results: int) -> List[Photo]:
        result = await self.session.execute(_page(query, start_index, max_results))
        return list(result.scalars().all())

    @db_operation
    async def add_photo(self, photo: Photo) -> Photo:
        self.session.add(photo)
        await self.session.flush()
        logger.info("Photo %s added (plant=%s, user=%s)", photo.id, photo.plant_id, photo.user_id)
        return await self.get_photo(photo.id)

    @db_operation
    async def get_photo(self, photo_id: int) -> Photo:
        # populate_existing refreshes the vote collection of an already-loaded photo
        result = await self.session.execute(
            select(Photo)
            .where(Photo.id == photo_id)
            .execution_options(populate_existing=True)
        )
        photo = result.scalar_one_or_none()
        if photo is None:
            raise NotFoundError(resource="photo", resource_id=photo_id)
        return photo

    @db_operation
    async def remove_photo(self, photo_id: int) -> None:
        """Delete a photo, its votes, and any reports against it still awaiting review."""
        await self.session.execute(delete(PhotoVote).where(PhotoVote.photo_id == photo_id))
        await self.session.execute(
            delete(PhotoReport).where(
                PhotoReport.photo_id == photo_id,
                PhotoReport.admin_action.is_(None),
            )
        )
        result = await self.session.execute(delete(Photo).where(Photo.id == photo_id))
        if result.rowcount == 0:
            raise NotFoundError(resource="photo", resource_id=photo_id)
        logger.info("Photo %s removed", photo_id)

    @db_operation
    async def get_newest_photos(self, start_index: int, max_results: int) -> List[Photo]:
        query = select(Photo).order_by(Photo.upload_date.desc(), Photo.id.desc())
        return await self._list_photos(query, start_index, max_results)

    @db_operation
    async def get_newest_plant_photos(
        self, plant_id: int, start_index: int, max_results: int
    ) -> List[Photo]:
        query = (
            select(Photo)
            .where(Photo.plant_id == plant_id)
            .order_by(Photo.upload_date.desc(), Photo.id.desc())
        )
        return await self._list_photos(query, start_index, max_results)

    @db_operation
    async def get_newest_user_photos(
        self, user_id: int, start_index: int, max_results: int
    ) -> List[Photo]:
        query = (
            select(Photo)
            .where(Photo.user_id == user_id)
            .order_by(Photo.upload_date.desc(), Photo.id.desc())
        )
        return await self._list_photos(query, start_index, max_results)

    @db_operation
    async def get_top_photos(self, start_index: int, max_results: int) -> List[Photo]:
        query = select(Photo).order_by(
            self._rating_expression().desc(), Photo.upload_date.desc(), Photo.id.desc()
        )
        return await self._list_photos(query, start_index, max_results)

    @db_operation
    async def get_top_plant_photos(
        self, plant_id: int, start_index: int, max_results: int
    ) -> List[Photo]:
        query = (
            select(Photo)
            .where(Photo.plant_id == plant_id)
            .order_by(self._rating_expression().desc(), Photo.upload_date.desc(), Photo.id.desc())
        )
        return await self._list_photos(query, start_index, max_results)

    @db_operation
    async def get_top_user_photos(
        self, user_id: int, start_index: int, max_results: int
    ) -> List[Photo]:
        query = (
            select(Photo)
            .where(Photo.user_id == user_id)
            .order_by(self._rating_expression().desc(), Photo.upload_date.desc(), Photo.id.desc())
        )
        return await self._list_photos(query, start_index, max_results)

    @db_operation
    async def set_vote(self, photo_id: int, user_id: int, value: int) -> Photo:
        """
        Record a user's vote on a photo.

        value +1 / -1 puts the user in the up / down set (moving them out of
        the other one); 0 withdraws the vote. Repeating a vote changes nothing.
        """
        existing = await self.session.get(PhotoVote, (photo_id, user_id))
        if value == 0:
            if existing is not None:
                await self.session.delete(existing)
        elif existing is None:
            self.session.add(PhotoVote(photo_id=photo_id, user_id=user_id, value=value))
        elif existing.value != value:
            existing.value = value
        await self.session.flush()
        return await self.get_photo(photo_id)

    # ══════════════════════════════════════════════════════════════════════
    # Photo reports
    # ══════════════════════════════════════════════════════════════════════

    @db_operation
    async def add_photo_report(self, report: PhotoReport) -> PhotoReport:
        self.session.add(report)
        await self.session.flush()
        logger.info("Photo report %s filed against photo %s", report.id, report.photo_id)
        return report

    @db_operation
    async def get_photo_report(self, photo_report_id: int) -> PhotoReport:
        report = await self.session.get(PhotoReport, photo_report_id)
        if report is None:
            raise NotFoundError(resource="photo report", resource_id=photo_report_id)
        return report

    @db_operation
    async def update_photo_report(self, report: PhotoReport) -> PhotoReport:
        await self.session.flush()
        return report

    @db_operation
    async def remove_photo_report(self, photo_report_id: int) -> None:
        result = await self.session.execute(
            delete(PhotoReport).where(PhotoReport.id == photo_report_id)
        )
        if result.rowcount == 0:
            raise NotFoundError(resource="photo report", resource_id=photo_report_id)

    async def _list_reports(self, query, start_index: int, max_results: int) -> List[PhotoReport]:
        query = query.order_by(PhotoReport.report_date.asc(), PhotoReport.id.asc())
        result = await self.session.execute(_page(query, start_index, max_results))
        return list(result.scalars().all())

    @db_operation
    async def get_photo_reports_by_date(
        self, start_index: int, max_results: int
    ) -> List[PhotoReport]:
        return await self._list_reports(select(PhotoReport), start_index, max_results)

    @db_operation
    async def get_unhandled_photo_reports_by_date(
        self, start_index: int, max_results: int
    ) -> List[PhotoReport]:
        query = select(PhotoReport).where(PhotoReport.admin_action.is_(None))
        return await self._list_reports(query, start_index, max_results)

    @db_operation
    async def get_admin_photo_reports_by_date(
        self, admin_id: int, start_index: int, max_results: int
    ) -> List[PhotoReport]:
        """Reports handled by the given admin."""
        query = select(PhotoReport).where(
            PhotoReport.admin_id == admin_id,
            PhotoReport.admin_action.is_not(None),
        )
        return await self._list_reports(query, start_index, max_results)

    # ══════════════════════════════════════════════════════════════════════
    # Plants
    # ══════════════════════════════════════════════════════════════════════

    @db_operation
    async def add_plant(self, plant: Plant) -> Plant:
        self.session.add(plant)
        await self.session.flush()
        logger.info("Plant %s added: %s", plant.id, plant.name)
        return plant

    @db_operation
    async def get_plant(self, plant_id: int) -> Plant:
        plant = await self.session.get(Plant, plant_id)
        if plant is None:
            raise NotFoundError(resource="plant", resource_id=plant_id)
        return plant

    @db_operation
    async def update_plant(self, plant: Plant) -> Plant:
        await self.session.flush()
        logger.info("Plant %s updated", plant.id)
        return plant

    @db_operation
    async def remove_plant(self, plant_id: int) -> None:
        """Delete a plant together with every photo of it."""
        photo_ids = (
            await self.session.execute(select(Photo.id).where(Photo.plant_id == plant_id))
        ).scalars().all()
        for photo_id in photo_ids:
            await self.remove_photo(photo_id)
        result = await self.session.execute(delete(Plant).where(Plant.id == plant_id))
        if result.rowcount == 0:
            raise NotFoundError(resource="plant", resource_id=plant_id)
        logger.info("Plant %s removed along with %d photos", plant_id, len(photo_ids))

    @db_operation
    async def get_plants_by_query(self, query: str) -> List[Plant]:
        """Case-insensitive substring match over plant name and bio."""
        pattern = _like_pattern(query)
        result = await self.session.execute(
            select(Plant)
            .where(
                or_(
                    Plant.name.ilike(pattern, escape="\\"),
                    Plant.bio.ilike(pattern, escape="\\"),
                )
            )
            .order_by(Plant.name.asc(), Plant.id.asc())
        )
        return list(result.scalars().all())

    # ══════════════════════════════════════════════════════════════════════
    # Accounts & bans
    # ══════════════════════════════════════════════════════════════════════

    @db_operation
    async def add_user(self, account: Account) -> Account:
        self.session.add(account)
        await self.session.flush()
        logger.info("Account %s registered (role=%s)", account.id, account.role)
        return await self.get_user(account.id)

    @db_operation
    async def user_exists(self, user_id: int) -> bool:
        result = await self.session.execute(select(Account.id).where(Account.id == user_id))
        return result.scalar_one_or_none() is not None

    @db_operation
    async def get_user(self, user_id: int) -> Account:
        result = await self.session.execute(
            select(Account)
            .where(Account.id == user_id)
            .execution_options(populate_existing=True)
        )
        account = result.scalar_one_or_none()
        if account is None:
            raise NotFoundError(resource="user", resource_id=user_id)
        return account

    @db_operation
    async def add_admin(self, account: Account) -> Account:
        """Promote an existing account to admin; its row and bans are untouched."""
        account.role = AccountRole.ADMIN.value
        await self.session.flush()
        logger.info("Account %s promoted to admin", account.id)
        return await self.get_user(account.id)

    @db_operation
    async def remove_user(self, user_id: int) -> None:
        """Delete an account with its photos, votes, reports and the bans against it."""
        photo_ids = (
            await self.session.execute(select(Photo.id).where(Photo.user_id == user_id))
        ).scalars().all()
        for photo_id in photo_ids:
            await self.remove_photo(photo_id)
        await self.session.execute(delete(PhotoVote).where(PhotoVote.user_id == user_id))
        await self.session.execute(delete(PhotoReport).where(PhotoReport.user_id == user_id))
        await self.session.execute(delete(Ban).where(Ban.user_id == user_id))
        result = await self.session.execute(delete(Account).where(Account.id == user_id))
        if result.rowcount == 0:
            raise NotFoundError(resource="user", resource_id=user_id)
        logger.info("Account %s removed", user_id)

    @db_operation
    async def add_ban(self, ban: Ban) -> Ban:
        self.session.add(ban)
        await self.session.flush()
        logger.info(
            "Ban %s issued against user %s by admin %s (expires: %s)",
            ban.id,
            ban.user_id,
            ban.admin_id,
            ban.expiration_date or "never",
        )
        return ban

    @db_operation
    async def get_active_ban(self, user_id: int) -> Optional[Ban]:
        """The first ban on the user that is permanent or not yet expired."""
        now = datetime.now(timezone.utc)
        result = await self.session.execute(
            select(Ban)
            .where(
                Ban.user_id == user_id,
                or_(Ban.expiration_date.is_(None), Ban.expiration_date > now),
            )
            .order_by(Ban.id.asc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    @db_operation
    async def check_admin(self, user_id: int) -> bool:
        result = await self.session.execute(select(Account.role).where(Account.id == user_id))
        role = result.scalar_one_or_none()
        return role == AccountRole.ADMIN.value
