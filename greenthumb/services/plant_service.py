"""
GreenThumb Backend - Plant Service
===================================

What:  The plant catalogue: admin-managed records, lookup by id, by free-text
       query and by image (through the classifier).
How:   Stateless; every call receives the request's AsyncSession. Plant
       lookups attach the plant's top-rated photos, `maxPhotos` of them.
Who:   Called by the /plants/* route handlers.

Identification Flow (POST /plants/byImage):
    ┌──────────────┐    ┌──────────────────┐    ┌──────────────────────┐
    │  Classifier  │───▶│ class id → Plant │───▶│ scale box fractions  │
    │  predict()   │    │ (unknown: skip)  │    │ by height / width    │
    └──────────────┘    └──────────────────┘    └──────────────────────┘
"""

import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from greenthumb.exceptions import NotFoundError
from greenthumb.models import Plant
from greenthumb.schemas.common import EmptyResponse
from greenthumb.schemas.photo import PhotoResponse
from greenthumb.schemas.plant import (
    ImageMatch,
    PlantAddRequest,
    PlantByIdRequest,
    PlantByImageRequest,
    PlantByQueryRequest,
    PlantEnvelope,
    PlantImageResponse,
    PlantQueryResponse,
    PlantRemoveRequest,
    PlantResponse,
    PlantUpdateRequest,
    PlantWithPhotos,
    Point,
)
from greenthumb.services.access import require_admin
from greenthumb.services.classifier_base import PlantClassifier
from greenthumb.services.database_interface import DatabaseInterface

logger = logging.getLogger(__name__)


class PlantService:
    """Business logic for plant operations."""

    @staticmethod
    async def _top_photos(
        dbi: DatabaseInterface, plant_id: int, max_photos: int
    ) -> List[PhotoResponse]:
        if max_photos == 0:
            return []
        photos = await dbi.get_top_plant_photos(plant_id, 0, max_photos)
        return [PhotoResponse.model_validate(p) for p in photos]

    async def _with_photos(
        self, dbi: DatabaseInterface, plant: Plant, max_photos: int
    ) -> PlantWithPhotos:
        return PlantWithPhotos(
            plant=PlantResponse.model_validate(plant),
            photos=await self._top_photos(dbi, plant.id, max_photos),
        )

    async def add_plant(self, db: AsyncSession, body: PlantAddRequest) -> PlantWithPhotos:
        dbi = DatabaseInterface(db)
        await require_admin(dbi, body.admin_id, "plant creation")
        plant = await dbi.add_plant(Plant(name=body.name, bio=body.bio))
        return PlantWithPhotos(plant=PlantResponse.model_validate(plant), photos=[])

    async def get_plant(self, db: AsyncSession, body: PlantByIdRequest) -> PlantWithPhotos:
        dbi = DatabaseInterface(db)
        plant = await dbi.get_plant(body.plant_id)
        return await self._with_photos(dbi, plant, body.max_photos)

    async def identify(
        self,
        db: AsyncSession,
        classifier: PlantClassifier,
        body: PlantByImageRequest,
    ) -> PlantImageResponse:
        """
        Match the plants the classifier finds in an image.

        Each detection's box arrives as (min_y, min_x, max_y, max_x)
        fractions; the response carries pixel coordinates. Detections whose
        class id is not a catalogued plant are skipped.
        """
        dbi = DatabaseInterface(db)
        prediction = await classifier.predict(body.image.model_dump())
        height, width = body.image.height, body.image.width

        results: List[ImageMatch] = []
        for plant_id, score, box in zip(prediction.classes, prediction.scores, prediction.boxes):
            try:
                plant = await dbi.get_plant(plant_id)
            except NotFoundError:
                logger.warning("Classifier returned unknown plant class %s, skipping", plant_id)
                continue

            min_y, min_x, max_y, max_x = box
            results.append(
                ImageMatch(
                    plant=PlantResponse.model_validate(plant),
                    photos=await self._top_photos(dbi, plant.id, body.max_photos),
                    score=score,
                    top_left=Point(x=min_x * width, y=min_y * height),
                    bottom_right=Point(x=max_x * width, y=max_y * height),
                )
            )

        logger.info(
            "Image identification: %d detections, %d matched plants",
            prediction.num_results,
            len(results),
        )
        return PlantImageResponse(results=results)

    async def search(self, db: AsyncSession, body: PlantByQueryRequest) -> PlantQueryResponse:
        dbi = DatabaseInterface(db)
        plants = await dbi.get_plants_by_query(body.query)
        return PlantQueryResponse(
            results=[await self._with_photos(dbi, plant, body.max_photos) for plant in plants]
        )

    async def update_plant(self, db: AsyncSession, body: PlantUpdateRequest) -> PlantEnvelope:
        """Replace a plant's bio; the name is fixed at creation."""
        dbi = DatabaseInterface(db)
        await require_admin(dbi, body.admin_id, "plant update")
        plant = await dbi.get_plant(body.plant_id)
        plant.bio = body.bio
        plant = await dbi.update_plant(plant)
        return PlantEnvelope(plant=PlantResponse.model_validate(plant))

    async def remove_plant(self, db: AsyncSession, body: PlantRemoveRequest) -> EmptyResponse:
        dbi = DatabaseInterface(db)
        await require_admin(dbi, body.admin_id, "plant removal")
        await dbi.remove_plant(body.plant_id)
        return EmptyResponse()


# Singleton instance
plant_service = PlantService()
