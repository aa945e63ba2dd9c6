# Routes package init
"""
SyncMe - API Routes Package
===========================

What:  HTTP route handlers. Each module handles one resource.

Route Inventory:
    - notes.py:   GET/POST /notes, GET/PUT/DELETE /notes/{id}
    - auth.py:    POST /signup, POST /login
    - health.py:  GET /health

Routes stay thin: extract request data, call a service, set status codes
and headers. Rules live in the services.
"""
