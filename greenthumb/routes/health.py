"""
GreenThumb Backend - Health Check Route
========================================

What:  GET /health for container probes and load balancers.
How:   Runs `SELECT 1` against the database and asks the classifier whether
       it is reachable (unless its circuit is already open).

Status levels:
    - healthy:   database and classifier both up
    - degraded:  database up, classifier down or circuit open
    - unhealthy: database down
"""

import logging
import time

from fastapi import APIRouter, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from greenthumb import __version__
from greenthumb.schemas.common import HealthResponse
from greenthumb.services.classifier_service import CircuitBreaker

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    db_status = "connected"
    classifier_status = "available"
    overall = "healthy"

    # ── Check Database ────────────────────────────────────────────────────
    try:
        async with request.app.state.database.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    # ── Check Classifier ──────────────────────────────────────────────────
    classifier = request.app.state.classifier
    breaker = getattr(classifier, "circuit_breaker", None)
    if breaker is not None and breaker.state == CircuitBreaker.OPEN:
        classifier_status = "circuit_open"
    elif not await classifier.health_check():
        classifier_status = "unavailable"

    if classifier_status != "available" and overall == "healthy":
        overall = "degraded"

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        classifier=classifier_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
