"""
Card Activation Backend — Application Package Initializer
==========================================================

What: Marks the `cardactivation` directory as a Python package.
Who:  Imported by uvicorn, Alembic, the CLI and pytest.

Architecture Note:
    The backend is layered the same way top to bottom:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Dependencies (auth, db, client IP)│  ← FastAPI Depends()
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Validation, hashing, tokens
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Explicit Database client object
    └─────────────────────────────────────┘

    Routes never talk to SQLAlchemy directly; services never see a Request.
"""

__version__ = "1.0.0"
