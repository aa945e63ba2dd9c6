# Middleware package init
"""
SyncMe - Middleware Package
===========================

Middleware Chain:
    Request → [Request ID] → [Logging] → Route Handler

    Request ID runs first so the logging middleware and every exception
    handler can read the correlation ID from request_id_var.
"""
