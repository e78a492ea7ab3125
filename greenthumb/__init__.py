"""
GreenThumb Backend - Application Package
=========================================

What: Server-side API for the GreenThumb plant identification and photo
      sharing application.
Who:  Imported by uvicorn (`greenthumb.main:app`), Alembic and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │    Services (validation, authz)     │  ← Orchestration, response shaping
    ├─────────────────────────────────────┤
    │   DatabaseInterface (persistence)   │  ← Named add/get/remove/list operations
    ├─────────────────────────────────────┤
    │   Models & Schemas (Data)           │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (engine, sessions)  │  ← One session per request
    └─────────────────────────────────────┘

    The ML classifier sits beside the persistence layer as an external
    service reached over HTTP.
"""

__version__ = "1.0.0"
