"""
Library Store Backend - Application Package
============================================

What:  REST backend for the library catalog store: auth, books, genres and checkout.
Who:   Imported by uvicorn (`library_api.main:app`), Alembic, and the test suite.

Architecture Note:
    The backend is layered:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← validation, orchestration
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes parse requests and shape responses; services own every business
    rule and can be exercised with nothing but an AsyncSession.
"""

__version__ = "1.0.0"
