"""
SyncMe - Application Package
============================

What: Notes service (FastAPI + async SQLAlchemy) and the client-side state
      layer that mirrors notes locally and pushes them to the service.
Who:  Imported by uvicorn (`syncme.main:app`), Alembic, pytest and client code.

Layout:
    ┌─────────────────────────────────────┐
    │      Routes (HTTP API layer)        │  syncme.routes
    ├─────────────────────────────────────┤
    │      Services (business rules)      │  syncme.services
    ├─────────────────────────────────────┤
    │   Repositories (data access port)   │  syncme.repositories
    ├─────────────────────────────────────┤
    │   Models & Schemas / Database       │  syncme.models, syncme.schemas
    └─────────────────────────────────────┘

    Client (local mirror + sync)           syncme.client
"""

__version__ = "1.0.0"
