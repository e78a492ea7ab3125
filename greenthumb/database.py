"""
GreenThumb Backend - Database Session Management
=================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   A `Database` object owns the engine and session factory. The app
       factory builds one, stores it on `app.state.database`, and disposes
       it at shutdown. The request dependency opens one session per request
       that commits on success and rolls back on any error.
Who:   Used by route handlers via FastAPI's dependency injection system.
When:  Database is created with the app; sessions are created per-request.

Connection Pooling Strategy (PostgreSQL):
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for traffic spikes
    pool_pre_ping:     Validates connections before use
    pool_recycle=3600: Recycles connections every hour

    SQLite URLs (local runs, tests) use SQLAlchemy's default pool and skip
    these arguments.
"""

import logging
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from greenthumb.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class to register with the shared metadata
    used by Alembic and by `Database.create_all()`.
    """
    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    """SQLite ships with foreign key enforcement off; turn it on per connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Storage engine handle: one async engine plus its session factory.

    Lifecycle:
        db = Database(url)        # engine created, no connection yet
        await db.create_all()     # optional, local/dev/test only
        async with db.session() as s: ...
        await db.dispose()        # close pooled connections
    """

    def __init__(self, url: Optional[str] = None, config: Optional[Settings] = None):
        config = config or default_settings
        self.url = url or config.database_url

        engine_kwargs: Dict[str, Any] = {
            "echo": config.log_level == "DEBUG",
        }
        is_sqlite = self.url.startswith("sqlite")
        if not is_sqlite:
            engine_kwargs.update(
                pool_size=config.db_pool_size,
                max_overflow=config.db_max_overflow,
                pool_pre_ping=config.db_pool_pre_ping,
                pool_recycle=3600,
            )

        self.engine: AsyncEngine = create_async_engine(self.url, **engine_kwargs)
        if is_sqlite:
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        # expire_on_commit=False: attributes stay readable after commit,
        # responses are built from them outside the transaction.
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    def session(self) -> AsyncSession:
        """Open a new session (use as `async with db.session() as s`)."""
        return self.session_factory()

    async def create_all(self) -> None:
        """Create every table registered on Base.metadata (skips existing ones)."""
        # Register all models with the metadata before creating tables
        import greenthumb.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured")

    async def dispose(self) -> None:
        """Gracefully close all connections in the pool."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Opens a session on the app's Database
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back, so a multi-step handler (remove photo, then
           ban its uploader) never leaves partial state behind
        5. Always: closes the session

    Example usage in a route:
        @router.post("/plants/byId")
        async def get_plant(body: ..., db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
