"""
GreenThumb Backend - Photo Service
===================================

What:  Upload, lookup, removal, listing and voting for photos.
How:   Stateless; every call receives the request's AsyncSession and works
       through a DatabaseInterface bound to it.
Who:   Called by the /photos/* route handlers.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from greenthumb.models import Photo
from greenthumb.schemas.common import EmptyResponse
from greenthumb.schemas.photo import (
    PhotoAddRequest,
    PhotoEnvelope,
    PhotoIdRequest,
    PhotoListRequest,
    PhotoListResponse,
    PhotoResponse,
    PhotoVoteRequest,
)
from greenthumb.services.access import require_not_banned
from greenthumb.services.database_interface import DatabaseInterface

logger = logging.getLogger(__name__)


class PhotoService:
    """
    Business logic for photo operations.

    Listing filters:
        userId → that user's photos, plantId → that plant's photos,
        neither → every photo. The request schema rejects both at once.
    """

    async def add_photo(self, db: AsyncSession, body: PhotoAddRequest) -> PhotoEnvelope:
        """
        Store a new photo of a plant.

        The uploader and plant must exist (404 otherwise); an uploader under
        an active ban is rejected with 401.
        """
        dbi = DatabaseInterface(db)
        await dbi.get_user(body.user_id)
        await dbi.get_plant(body.plant_id)
        await require_not_banned(dbi, body.user_id, "photo upload")

        photo = await dbi.add_photo(
            Photo(user_id=body.user_id, plant_id=body.plant_id, image=body.image)
        )
        return PhotoEnvelope(photo=PhotoResponse.model_validate(photo))

    async def get_photo(self, db: AsyncSession, body: PhotoIdRequest) -> PhotoEnvelope:
        photo = await DatabaseInterface(db).get_photo(body.photo_id)
        return PhotoEnvelope(photo=PhotoResponse.model_validate(photo))

    async def remove_photo(self, db: AsyncSession, body: PhotoIdRequest) -> EmptyResponse:
        await DatabaseInterface(db).remove_photo(body.photo_id)
        return EmptyResponse()

    async def list_by_date(self, db: AsyncSession, body: PhotoListRequest) -> PhotoListResponse:
        """Newest first."""
        dbi = DatabaseInterface(db)
        if body.user_id is not None:
            photos = await dbi.get_newest_user_photos(
                body.user_id, body.start_index, body.max_results
            )
        elif body.plant_id is not None:
            photos = await dbi.get_newest_plant_photos(
                body.plant_id, body.start_index, body.max_results
            )
        else:
            photos = await dbi.get_newest_photos(body.start_index, body.max_results)
        return PhotoListResponse(photos=[PhotoResponse.model_validate(p) for p in photos])

    async def list_by_rating(self, db: AsyncSession, body: PhotoListRequest) -> PhotoListResponse:
        """Highest (upvotes - downvotes) first, newest first among ties."""
        dbi = DatabaseInterface(db)
        if body.user_id is not None:
            photos = await dbi.get_top_user_photos(
                body.user_id, body.start_index, body.max_results
            )
        elif body.plant_id is not None:
            photos = await dbi.get_top_plant_photos(
                body.plant_id, body.start_index, body.max_results
            )
        else:
            photos = await dbi.get_top_photos(body.start_index, body.max_results)
        return PhotoListResponse(photos=[PhotoResponse.model_validate(p) for p in photos])

    async def vote(self, db: AsyncSession, body: PhotoVoteRequest) -> PhotoEnvelope:
        dbi = DatabaseInterface(db)
        await dbi.get_photo(body.photo_id)
        await dbi.get_user(body.user_id)
        await require_not_banned(dbi, body.user_id, "photo vote")

        photo = await dbi.set_vote(body.photo_id, body.user_id, body.vote)
        logger.info("User %s voted %+d on photo %s", body.user_id, body.vote, body.photo_id)
        return PhotoEnvelope(photo=PhotoResponse.model_validate(photo))


# Singleton instance
photo_service = PhotoService()
