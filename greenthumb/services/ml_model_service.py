"""
GreenThumb Backend - ML Model Service
======================================

What:  Admin-triggered retraining of the plant classifier.
How:   The admin check runs inside the request; the retrain call itself is
       handed to FastAPI's BackgroundTasks so the response returns at once.
       Failures of the background call are logged, never surfaced.
"""

import logging

from fastapi import BackgroundTasks
from sqlalchemy.ext.asyncio import AsyncSession

from greenthumb.exceptions import GreenThumbError
from greenthumb.schemas.common import EmptyResponse
from greenthumb.schemas.ml_model import RetrainRequest
from greenthumb.services.access import require_admin
from greenthumb.services.classifier_base import PlantClassifier
from greenthumb.services.database_interface import DatabaseInterface

logger = logging.getLogger(__name__)


async def run_retrain(classifier: PlantClassifier) -> None:
    """Background task body; runs after the response, so nothing is raised."""
    try:
        await classifier.retrain()
    except GreenThumbError as e:
        logger.error("Background model retrain failed: %s", e.message, exc_info=True)
    except Exception:
        logger.exception("Unexpected error during background model retrain")


class MLModelService:
    """Admin gate and scheduling for classifier retraining."""

    async def schedule_retrain(
        self,
        db: AsyncSession,
        classifier: PlantClassifier,
        background_tasks: BackgroundTasks,
        body: RetrainRequest,
    ) -> EmptyResponse:
        await require_admin(DatabaseInterface(db), body.admin_id, "model retrain")
        background_tasks.add_task(run_retrain, classifier)
        logger.info("Model retrain scheduled by admin %s", body.admin_id)
        return EmptyResponse()


# Singleton instance
ml_model_service = MLModelService()
