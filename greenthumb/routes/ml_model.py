"""
GreenThumb Backend - ML Model Route Handlers
=============================================

What:  POST /mlModel/training/immediate (admin only).
"""

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from greenthumb.database import get_db_session
from greenthumb.schemas.common import EmptyResponse, ErrorResponse
from greenthumb.schemas.ml_model import RetrainRequest
from greenthumb.services.classifier_base import PlantClassifier
from greenthumb.services.classifier_service import get_classifier
from greenthumb.services.ml_model_service import ml_model_service

router = APIRouter(prefix="/mlModel", tags=["ML Model"])


@router.post(
    "/training/immediate",
    response_model=EmptyResponse,
    responses={
        400: {"description": "Invalid request body", "model": ErrorResponse},
        401: {"description": "Not an admin", "model": ErrorResponse},
    },
    summary="Retrain the plant classifier now",
)
async def retrain_now(
    body: RetrainRequest,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db_session),
    classifier: PlantClassifier = Depends(get_classifier),
) -> EmptyResponse:
    """Returns as soon as the retrain is scheduled; it runs after the response."""
    return await ml_model_service.schedule_retrain(db, classifier, background_tasks, body)
