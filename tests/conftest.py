"""
GreenThumb Backend - Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets a fresh SQLite database file, a fresh app built by
       create_app() around it, and a FakeClassifier in place of the remote
       model server.

Fixture Hierarchy (all function-scoped):
    ├── database:   Database on a temporary sqlite+aiosqlite file, tables created
    ├── classifier: FakeClassifier with a configurable prediction
    ├── app:        create_app(database=..., classifier=...)
    ├── test_client: HTTPX AsyncClient over ASGITransport
    └── seed:       Direct-to-database helpers for arranging test data
"""

import os
from datetime import datetime, timedelta, timezone
from typing import List, Optional

# Override settings for testing BEFORE any greenthumb imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./greenthumb_test.db"
os.environ["ML_SERVICE_URL"] = "http://ml.test"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from greenthumb.database import Database
from greenthumb.exceptions import MLServiceError
from greenthumb.models import Account, AccountRole, Ban, Photo, PhotoReport, PhotoVote, Plant
from greenthumb.services.classifier_base import PlantClassifier, Prediction

BASE_TIME = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


# ══════════════════════════════════════════════════════════════════════════
# Test Doubles
# ══════════════════════════════════════════════════════════════════════════

class FakeClassifier(PlantClassifier):
    """In-memory classifier: returns `prediction`, counts retrains."""

    def __init__(self):
        self.prediction = Prediction(num_results=0)
        self.predict_error: Optional[Exception] = None
        self.retrain_error: Optional[Exception] = None
        self.images: List[dict] = []
        self.retrain_calls = 0
        self.healthy = True

    async def predict(self, image):
        self.images.append(image)
        if self.predict_error is not None:
            raise self.predict_error
        return self.prediction

    async def retrain(self):
        self.retrain_calls += 1
        if self.retrain_error is not None:
            raise self.retrain_error

    async def health_check(self):
        return self.healthy


class Seeder:
    """Writes fixture rows straight through a session, bypassing the API."""

    def __init__(self, database: Database):
        self.database = database

    async def user(self, user_id: int, admin: bool = False) -> int:
        role = AccountRole.ADMIN.value if admin else AccountRole.USER.value
        async with self.database.session() as session:
            session.add(Account(id=user_id, role=role))
            await session.commit()
        return user_id

    async def admin(self, user_id: int) -> int:
        return await self.user(user_id, admin=True)

    async def plant(self, name: str = "Monstera", bio: str = "Swiss cheese plant") -> int:
        async with self.database.session() as session:
            plant = Plant(name=name, bio=bio)
            session.add(plant)
            await session.commit()
            return plant.id

    async def photo(
        self,
        plant_id: int,
        user_id: int,
        minutes: int = 0,
        image: str = "https://img.example/p.jpg",
    ) -> int:
        """A photo uploaded `minutes` after BASE_TIME."""
        async with self.database.session() as session:
            photo = Photo(
                plant_id=plant_id,
                user_id=user_id,
                image=image,
                upload_date=BASE_TIME + timedelta(minutes=minutes),
            )
            session.add(photo)
            await session.commit()
            return photo.id

    async def vote(self, photo_id: int, user_id: int, value: int) -> None:
        async with self.database.session() as session:
            session.add(PhotoVote(photo_id=photo_id, user_id=user_id, value=value))
            await session.commit()

    async def report(
        self, photo_id: int, user_id: int, minutes: int = 0, text: str = "Not a plant"
    ) -> int:
        async with self.database.session() as session:
            report = PhotoReport(
                photo_id=photo_id,
                user_id=user_id,
                report_text=text,
                report_date=BASE_TIME + timedelta(minutes=minutes),
            )
            session.add(report)
            await session.commit()
            return report.id

    async def ban(
        self, user_id: int, admin_id: int, expiration_date: Optional[datetime] = None
    ) -> int:
        async with self.database.session() as session:
            ban = Ban(user_id=user_id, admin_id=admin_id, expiration_date=expiration_date)
            session.add(ban)
            await session.commit()
            return ban.id


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def database(tmp_path):
    """A Database on a throwaway SQLite file with every table created."""
    db = Database(url=f"sqlite+aiosqlite:///{tmp_path / 'greenthumb.db'}")
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def classifier():
    return FakeClassifier()


@pytest.fixture
def app(database, classifier):
    from greenthumb.main import create_app

    return create_app(database=database, classifier=classifier)


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed straight into the app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def seed(database):
    return Seeder(database)


@pytest.fixture
def failing_classifier(classifier):
    classifier.predict_error = MLServiceError(context={"reason": "test"})
    return classifier
