"""
Tests for RemoteClassifier, its circuit breaker and prediction parsing.

The model server is replaced by httpx.MockTransport, so no network is used.
"""

import json

import httpx
import pytest

from greenthumb.config import Settings
from greenthumb.exceptions import CircuitBreakerOpenError, MLServiceError
from greenthumb.services.classifier_base import Prediction
from greenthumb.services.classifier_service import CircuitBreaker, RemoteClassifier


def _config(**overrides) -> Settings:
    values = {
        "ml_service_url": "http://ml.test",
        "retry_max_attempts": 2,
        "retry_min_wait": 0,
        "retry_max_wait": 1,
        "cb_failure_threshold": 3,
        "cb_recovery_timeout": 60,
    }
    values.update(overrides)
    return Settings(**values)


class TestPredictionParsing:

    def test_flat_boxes_grouped_in_fours(self):
        prediction = Prediction.from_payload({
            "numResults": 2,
            "classes": [4, 7],
            "scores": [0.9, 0.5],
            "boxes": [0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8],
        })

        assert prediction.classes == [4, 7]
        assert prediction.boxes == [(0.1, 0.2, 0.3, 0.4), (0.5, 0.6, 0.7, 0.8)]

    def test_nested_boxes_and_extra_entries_trimmed(self):
        prediction = Prediction.from_payload({
            "numResults": 1,
            "classes": [4, 7],
            "scores": [0.9, 0.5],
            "boxes": [[0.1, 0.2, 0.3, 0.4], [0.5, 0.6, 0.7, 0.8]],
        })

        assert prediction.num_results == 1
        assert prediction.classes == [4]
        assert prediction.boxes == [(0.1, 0.2, 0.3, 0.4)]

    def test_short_arrays_rejected(self):
        with pytest.raises(ValueError):
            Prediction.from_payload({"numResults": 2, "classes": [1], "scores": [0.3], "boxes": []})


class TestCircuitBreaker:

    def test_opens_after_threshold(self):
        breaker = CircuitBreaker(failure_threshold=2, recovery_timeout=60)

        breaker.record_failure()
        assert breaker.can_execute() is True
        breaker.record_failure()

        assert breaker.state == CircuitBreaker.OPEN
        with pytest.raises(CircuitBreakerOpenError):
            breaker.can_execute()

    def test_half_open_then_closed_on_success(self):
        breaker = CircuitBreaker(failure_threshold=1, recovery_timeout=0)
        breaker.record_failure()

        assert breaker.can_execute() is True
        assert breaker.state == CircuitBreaker.HALF_OPEN

        breaker.record_success()
        assert breaker.state == CircuitBreaker.CLOSED
        assert breaker.failure_count == 0

    def test_half_open_failure_reopens(self):
        breaker = CircuitBreaker(failure_threshold=1, recovery_timeout=0)
        breaker.record_failure()
        breaker.can_execute()

        breaker.record_failure()

        assert breaker.state == CircuitBreaker.OPEN


class TestRemoteClassifier:

    @pytest.mark.asyncio
    async def test_predict_posts_image_and_parses_result(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append((request.url.path, json.loads(request.content)))
            return httpx.Response(200, json={
                "numResults": 1,
                "classes": [3],
                "scores": [0.8],
                "boxes": [0.0, 0.0, 0.5, 0.5],
            })

        classifier = RemoteClassifier(config=_config(), transport=httpx.MockTransport(handler))
        try:
            prediction = await classifier.predict({"data": "abc", "height": 4, "width": 4})
        finally:
            await classifier.close()

        assert seen == [("/predict", {"image": {"data": "abc", "height": 4, "width": 4}})]
        assert prediction.classes == [3]
        assert prediction.boxes == [(0.0, 0.0, 0.5, 0.5)]

    @pytest.mark.asyncio
    async def test_server_error_not_retried(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(503)

        classifier = RemoteClassifier(config=_config(), transport=httpx.MockTransport(handler))
        try:
            with pytest.raises(MLServiceError):
                await classifier.predict({"data": "abc", "height": 4, "width": 4})
        finally:
            await classifier.close()

        assert len(calls) == 1
        assert classifier.circuit_breaker.failure_count == 1

    @pytest.mark.asyncio
    async def test_connect_error_retried_then_wrapped(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        classifier = RemoteClassifier(config=_config(), transport=httpx.MockTransport(handler))
        try:
            with pytest.raises(MLServiceError):
                await classifier.retrain()
        finally:
            await classifier.close()

        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_garbage_payload_is_ml_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"unexpected": True})

        classifier = RemoteClassifier(config=_config(), transport=httpx.MockTransport(handler))
        try:
            with pytest.raises(MLServiceError):
                await classifier.predict({"data": "abc", "height": 4, "width": 4})
        finally:
            await classifier.close()

    @pytest.mark.asyncio
    async def test_open_circuit_skips_the_server(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(500)

        classifier = RemoteClassifier(
            config=_config(cb_failure_threshold=2),
            transport=httpx.MockTransport(handler),
        )
        try:
            for _ in range(2):
                with pytest.raises(MLServiceError):
                    await classifier.retrain()
            with pytest.raises(CircuitBreakerOpenError):
                await classifier.retrain()
        finally:
            await classifier.close()

        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_health_check(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200 if request.url.path == "/health" else 404)

        classifier = RemoteClassifier(config=_config(), transport=httpx.MockTransport(handler))
        try:
            assert await classifier.health_check() is True
        finally:
            await classifier.close()
