"""
ProductHub Backend — Application Package Initializer
=====================================================

What: Marks the `producthub` directory as a Python package.
Who:  Imported by uvicorn (`producthub.main:app`), Alembic, and pytest.

Architecture Note:
    The backend follows a layered layout:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Auth guard + Validators           │  ← token checks, input shape
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← users, products, tokens, files
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Request path:
    HTTP request → require_auth (protected routes) → validators
    → service → single keyed/conditional statement → JSON envelope
"""

__version__ = "1.0.0"
