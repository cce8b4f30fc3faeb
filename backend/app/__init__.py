"""
Notekeeper Backend: Application Package Initializer
====================================================

Architecture Note:
    This backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP wiring only
    ├─────────────────────────────────────┤
    │     Services (Notes Controller)     │  ← Existence checks, envelopes
    ├─────────────────────────────────────┤
    │     Repositories (Note Repository)  │  ← SQL statements, query builder
    ├─────────────────────────────────────┤
    │    Database (Persistence Gateway)   │  ← Pooled async engine, transactions
    └─────────────────────────────────────┘

    Models (SQLAlchemy) describe the table; Schemas (Pydantic) describe the
    API contract. Failures are mapped to responses in app.error_handlers.
"""

__version__ = "1.0.0"
