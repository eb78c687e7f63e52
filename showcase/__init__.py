"""
Showcase Backend — Application Package Initializer
====================================================

What: Authenticated item catalogue API (login tokens, admin-only item CRUD,
      image uploads kept in step with their rows).
Who:  Imported by uvicorn (showcase.main:app), Alembic, the admin CLI and pytest.

Architecture Note:

    ┌─────────────────────────────────────┐
    │     Routes + Role Gate (API Layer)  │  ← HTTP concerns, bearer auth
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← auth, tokens, items, files
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Database + File Store (Storage)   │  ← async sessions, local disk
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
