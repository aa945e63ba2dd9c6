"""
SyncMe - Repositories Package
=============================

What:  Data-access layer between services and the database.

Inventory:
    - base.py: NoteRepository / UserRepository abstract interfaces
    - sql.py:  Async SQLAlchemy implementations and FastAPI providers
"""
