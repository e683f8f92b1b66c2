"""
ScanPlant Backend — Application Package Initializer
=====================================================

What:  Marks the `app` directory as a Python package.
Who:   Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    This backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, caller identity
    ├─────────────────────────────────────┤
    │         Services (Domain Core)      │  ← Ownership, proximity, lifecycles
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    External collaborators (blob store, notification sender) sit beside the
    services and are injected into them, so tests can swap them out.
"""

__version__ = "1.0.0"
