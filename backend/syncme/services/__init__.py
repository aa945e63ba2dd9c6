# Services package init
"""
SyncMe - Services Layer
=======================

What:  Business rules between routes (HTTP) and repositories (persistence).

Service Inventory:
    - NoteService: visibility, timestamps and soft delete for notes
    - AuthService: signup, login, X-User-Email resolution

Both are stateless singletons; the repository for the current request is
passed into every call.
"""
