"""
GreenThumb Backend - Remote Plant Classifier
=============================================

What:  PlantClassifier implementation that talks to the model-serving
       process over HTTP.
How:   httpx AsyncClient against `settings.ml_service_url`:
           POST /predict {image}  -> {numResults, classes, scores, boxes}
           POST /retrain          -> body ignored
           GET  /health           -> any 2xx means reachable
       Wrapped in a circuit breaker, with tenacity retrying connection
       failures only.
Who:   Created once by the app factory, closed in the lifespan shutdown.

Resilience Strategy:
    1. Connection failures (the request never reached the server) are
       retried with exponential backoff and jitter
    2. Timeouts, HTTP error statuses and malformed bodies are not retried:
       the server may already have acted on the request
    3. After `cb_failure_threshold` consecutive failures the circuit opens
       and calls fail instantly until `cb_recovery_timeout` elapses
"""

import logging
import time
import uuid
from typing import Any, Dict, Optional

import httpx
from fastapi import Request
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from greenthumb.config import Settings, settings
from greenthumb.exceptions import CircuitBreakerOpenError, MLServiceError
from greenthumb.services.classifier_base import PlantClassifier, Prediction

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Circuit Breaker Implementation
# ══════════════════════════════════════════════════════════════════════════

class CircuitBreaker:
    """
    Circuit breaker guarding calls to the model server.

    State Machine:
        CLOSED (normal operation)
            → On failure: increment failure_count
            → When failure_count >= threshold: transition to OPEN

        OPEN (rejecting all requests)
            → All calls raise CircuitBreakerOpenError immediately
            → After recovery_timeout seconds: transition to HALF_OPEN

        HALF_OPEN (testing recovery)
            → Allow the next request through
            → On success: transition to CLOSED (reset failure_count)
            → On failure: transition back to OPEN (reset timer)

    Not shared across worker processes; each uvicorn worker keeps its own.
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(self, failure_threshold: int = 5, recovery_timeout: int = 60):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.failure_count = 0
        self.state = self.CLOSED
        self.last_failure_time: Optional[float] = None

    def can_execute(self) -> bool:
        """
        Check if a request is allowed through.

        Raises:
            CircuitBreakerOpenError if OPEN and the recovery timeout hasn't elapsed.
        """
        if self.state == self.OPEN:
            elapsed = time.monotonic() - (self.last_failure_time or 0)
            if elapsed < self.recovery_timeout:
                raise CircuitBreakerOpenError(
                    recovery_time=int(self.recovery_timeout - elapsed)
                )
            logger.info("Classifier circuit HALF_OPEN after %.1fs", elapsed)
            self.state = self.HALF_OPEN
        return True

    def record_success(self) -> None:
        if self.state == self.HALF_OPEN:
            logger.info("Classifier circuit CLOSED (service recovered)")
        self.failure_count = 0
        self.state = self.CLOSED
        self.last_failure_time = None

    def record_failure(self) -> None:
        self.failure_count += 1
        self.last_failure_time = time.monotonic()

        if self.state == self.HALF_OPEN:
            logger.warning("Classifier circuit back to OPEN (test request failed)")
            self.state = self.OPEN
        elif self.failure_count >= self.failure_threshold:
            logger.warning(
                "Classifier circuit OPENING after %d consecutive failures",
                self.failure_count,
            )
            self.state = self.OPEN


# ══════════════════════════════════════════════════════════════════════════
# Remote Classifier
# ══════════════════════════════════════════════════════════════════════════

class RemoteClassifier(PlantClassifier):
    """
    HTTP client for the plant identification model server.

    Error Handling Chain:
        ConnectError → tenacity retries (retry_max_attempts, backoff)
        → still failing, or timeout / 4xx / 5xx / bad body
        → circuit breaker failure recorded → MLServiceError
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or settings
        self.client = httpx.AsyncClient(
            base_url=self.config.ml_service_url,
            timeout=self.config.ml_timeout_seconds,
            transport=transport,
        )
        self.circuit_breaker = CircuitBreaker(
            failure_threshold=self.config.cb_failure_threshold,
            recovery_timeout=self.config.cb_recovery_timeout,
        )
        logger.info(
            "RemoteClassifier initialized for %s, circuit_breaker(threshold=%d, recovery=%ds)",
            self.config.ml_service_url,
            self.config.cb_failure_threshold,
            self.config.cb_recovery_timeout,
        )

    async def predict(self, image: Dict[str, Any]) -> Prediction:
        request_id = str(uuid.uuid4())[:8]
        response = await self._call("/predict", {"image": image}, request_id)
        try:
            prediction = Prediction.from_payload(response.json())
        except (ValueError, KeyError, TypeError) as e:
            self.circuit_breaker.record_failure()
            logger.error("[%s] Unusable prediction payload: %s", request_id, str(e))
            raise MLServiceError(
                message="Plant classification service returned an invalid response.",
                context={"request_id": request_id, "error_type": type(e).__name__},
            ) from e
        self.circuit_breaker.record_success()
        logger.info("[%s] Prediction returned %d results", request_id, prediction.num_results)
        return prediction

    async def retrain(self) -> None:
        request_id = str(uuid.uuid4())[:8]
        await self._call("/retrain", {}, request_id)
        self.circuit_breaker.record_success()
        logger.info("[%s] Model retrain requested", request_id)

    async def health_check(self) -> bool:
        try:
            response = await self.client.get("/health", timeout=5.0)
        except httpx.HTTPError as e:
            logger.warning("Classifier health check failed: %s", str(e))
            return False
        return response.is_success

    async def close(self) -> None:
        await self.client.aclose()

    async def _call(self, path: str, body: Dict[str, Any], request_id: str) -> httpx.Response:
        """POST to the model server; errors become MLServiceError after breaker bookkeeping."""
        self.circuit_breaker.can_execute()
        start_time = time.time()

        try:
            response = await self._post_with_retry(path, body)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            self.circuit_breaker.record_failure()
            logger.error(
                "[%s] Model server answered %s %d",
                request_id,
                path,
                e.response.status_code,
            )
            raise MLServiceError(
                context={"request_id": request_id, "status_code": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            self.circuit_breaker.record_failure()
            logger.error(
                "[%s] Model server call %s failed after %.0fms: %s",
                request_id,
                path,
                (time.time() - start_time) * 1000,
                str(e),
            )
            raise MLServiceError(
                context={"request_id": request_id, "error_type": type(e).__name__},
            ) from e

        logger.debug(
            "[%s] %s completed in %.0fms", request_id, path, (time.time() - start_time) * 1000
        )
        return response

    async def _post_with_retry(self, path: str, body: Dict[str, Any]) -> httpx.Response:
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(httpx.ConnectError),
            stop=stop_after_attempt(self.config.retry_max_attempts),
            wait=wait_exponential_jitter(
                initial=self.config.retry_min_wait,
                max=self.config.retry_max_wait,
                jitter=1,
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self.client.post(path, json=body)
        raise AssertionError("unreachable")  # AsyncRetrying either returns or reraises


def get_classifier(request: Request) -> PlantClassifier:
    """FastAPI dependency: the classifier installed by the app factory."""
    return request.app.state.classifier
