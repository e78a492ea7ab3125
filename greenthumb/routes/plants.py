"""
GreenThumb Backend - Plant Route Handlers
==========================================

What:  POST /plants/add, /byId, /byImage, /byQuery, /update, /remove.
How:   Thin handlers over PlantService. /byImage also receives the
       classifier through the `get_classifier` dependency.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from greenthumb.database import get_db_session
from greenthumb.schemas.common import EmptyResponse, ErrorResponse
from greenthumb.schemas.plant import (
    PlantAddRequest,
    PlantByIdRequest,
    PlantByImageRequest,
    PlantByQueryRequest,
    PlantEnvelope,
    PlantImageResponse,
    PlantQueryResponse,
    PlantRemoveRequest,
    PlantUpdateRequest,
    PlantWithPhotos,
)
from greenthumb.services.classifier_base import PlantClassifier
from greenthumb.services.classifier_service import get_classifier
from greenthumb.services.plant_service import plant_service

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/plants", tags=["Plants"])

_errors = {
    400: {"description": "Invalid request body", "model": ErrorResponse},
    404: {"description": "Plant not found", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}
_admin_errors = {**_errors, 401: {"description": "Not an admin", "model": ErrorResponse}}


@router.post(
    "/add",
    response_model=PlantWithPhotos,
    responses=_admin_errors,
    summary="Add a plant to the catalogue",
)
async def add_plant(
    body: PlantAddRequest,
    db: AsyncSession = Depends(get_db_session),
) -> PlantWithPhotos:
    return await plant_service.add_plant(db, body)


@router.post(
    "/byId",
    response_model=PlantWithPhotos,
    responses=_errors,
    summary="Get a plant with its top-rated photos",
)
async def get_plant(
    body: PlantByIdRequest,
    db: AsyncSession = Depends(get_db_session),
) -> PlantWithPhotos:
    return await plant_service.get_plant(db, body)


@router.post(
    "/byImage",
    response_model=PlantImageResponse,
    responses=_errors,
    summary="Identify the plants in an image",
)
async def identify_plants(
    body: PlantByImageRequest,
    db: AsyncSession = Depends(get_db_session),
    classifier: PlantClassifier = Depends(get_classifier),
) -> PlantImageResponse:
    """
    Runs the image through the classifier. Bounding boxes in the response
    are pixel coordinates within the submitted image.
    """
    return await plant_service.identify(db, classifier, body)


@router.post(
    "/byQuery",
    response_model=PlantQueryResponse,
    responses=_errors,
    summary="Search plants by name or bio",
)
async def search_plants(
    body: PlantByQueryRequest,
    db: AsyncSession = Depends(get_db_session),
) -> PlantQueryResponse:
    return await plant_service.search(db, body)


@router.post(
    "/update",
    response_model=PlantEnvelope,
    responses=_admin_errors,
    summary="Replace a plant's bio",
)
async def update_plant(
    body: PlantUpdateRequest,
    db: AsyncSession = Depends(get_db_session),
) -> PlantEnvelope:
    return await plant_service.update_plant(db, body)


@router.post(
    "/remove",
    response_model=EmptyResponse,
    responses=_admin_errors,
    summary="Remove a plant and all of its photos",
)
async def remove_plant(
    body: PlantRemoveRequest,
    db: AsyncSession = Depends(get_db_session),
) -> EmptyResponse:
    return await plant_service.remove_plant(db, body)
