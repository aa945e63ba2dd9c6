"""
SyncMe - Client Package
=======================

What:  Client-side application state: a local mirror of users and notes,
       optimistic edits, a rich-text editor contract, and debounced
       synchronization with the notes service.

Inventory:
    - models.py:      LocalNote / LocalUser (camelCase JSON in local storage)
    - persistence.py: PersistencePort + memory and JSON-file backends
    - store.py:       NotesStore (auth, note CRUD, change listeners)
    - editor.py:      EditorSurface and list-preview helpers
    - sync.py:        SyncPort, HttpSyncPort, Synchronizer, Debouncer
    - app.py:         ClientApp wiring the pieces together
"""
