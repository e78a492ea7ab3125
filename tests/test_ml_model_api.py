"""
Tests for /mlModel/training/immediate and GET /health.
"""

import logging

import pytest

from greenthumb.exceptions import MLServiceError
from greenthumb.services.ml_model_service import run_retrain


class TestRetrainTrigger:

    @pytest.mark.asyncio
    async def test_admin_triggers_retrain(self, test_client, seed, classifier):
        await seed.admin(1)

        response = await test_client.post("/mlModel/training/immediate", json={"adminId": 1})

        assert response.status_code == 200
        assert response.json() == {}
        assert classifier.retrain_calls == 1

    @pytest.mark.asyncio
    async def test_non_admin_rejected(self, test_client, seed, classifier):
        await seed.user(1)

        response = await test_client.post("/mlModel/training/immediate", json={"adminId": 1})

        assert response.status_code == 401
        assert classifier.retrain_calls == 0

    @pytest.mark.asyncio
    async def test_retrain_failure_does_not_fail_request(self, test_client, seed, classifier):
        await seed.admin(1)
        classifier.retrain_error = MLServiceError()

        response = await test_client.post("/mlModel/training/immediate", json={"adminId": 1})

        assert response.status_code == 200
        assert classifier.retrain_calls == 1

    @pytest.mark.asyncio
    async def test_unexpected_retrain_error_does_not_fail_request(
        self, test_client, seed, classifier
    ):
        await seed.admin(1)
        classifier.retrain_error = RuntimeError("model file missing")

        response = await test_client.post("/mlModel/training/immediate", json={"adminId": 1})

        assert response.status_code == 200
        assert classifier.retrain_calls == 1

    @pytest.mark.asyncio
    async def test_run_retrain_logs_instead_of_raising(self, classifier, caplog):
        classifier.retrain_error = RuntimeError("model file missing")

        with caplog.at_level(logging.ERROR, logger="greenthumb.services.ml_model_service"):
            await run_retrain(classifier)

        assert "background model retrain" in caplog.text
        assert "model file missing" in caplog.text


class TestHealthEndpoint:

    @pytest.mark.asyncio
    async def test_healthy(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["classifier"] == "available"
        assert body["version"] == "1.0.0"
        assert body["uptimeSeconds"] >= 0

    @pytest.mark.asyncio
    async def test_degraded_when_classifier_down(self, test_client, classifier):
        classifier.healthy = False

        response = await test_client.get("/health")

        assert response.json()["status"] == "degraded"
        assert response.json()["classifier"] == "unavailable"
