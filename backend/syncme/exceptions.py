"""
SyncMe - Exception Hierarchy
============================

What:  Application-specific exceptions for the notes service and the client.
How:   Each exception carries a user-facing message and an optional context
       dict. Global handlers registered in main.py turn them into JSON error
       responses; the client store raises the same types to its callers.
Who:   Raised by services, repositories and the client store.

Exception Hierarchy:
    SyncMeError (base)
    ├── ValidationError     → 400 Bad Request
    ├── ConflictError       → 400 Bad Request (email already registered)
    ├── UnauthorizedError   → 401 Unauthorized
    ├── NotFoundError       → 404 Not Found (missing OR soft-deleted)
    ├── DatabaseError       → 500 Internal Server Error
    └── SyncError           → client side only (push to the service failed)

All of these are terminal outcomes. Nothing in the request path retries them.
"""

from typing import Any, Dict, Optional


class SyncMeError(Exception):
    """
    Base exception for all SyncMe application errors.

    Attributes:
        message:  User-facing error description (safe to return in an API response)
        context:  Additional debug info (logged, NOT returned to the client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SyncMeError):
    """
    Raised when input cannot be accepted.

    The service performs no field validation of its own; this is raised by
    the client store when a signup/login form is submitted with empty fields.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class ConflictError(SyncMeError):
    """
    Raised when signing up with an email that is already registered.

    Uniqueness is an application-level existence check; the users table has
    no unique constraint on email.
    """

    def __init__(
        self,
        message: str = "Email already registered.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UnauthorizedError(SyncMeError):
    """
    Raised when credentials do not match a stored user, or when a request
    names a user (X-User-Email) that does not exist.

    The message never says whether the email or the password was wrong.
    """

    def __init__(
        self,
        message: str = "Invalid email or password.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(SyncMeError):
    """
    Raised when a requested resource does not exist or is soft-deleted.

    Soft-deleted notes are indistinguishable from notes that never existed.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(SyncMeError):
    """
    Raised when a database operation fails unexpectedly.

    The message returned to the client is always generic; the underlying
    error type is kept in context for the server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class SyncError(SyncMeError):
    """
    Raised by a sync port when local changes could not be pushed.

    When:  The service answered with an unexpected status, or transport
           retries were exhausted.
    """

    def __init__(
        self,
        message: str = "Could not synchronize notes with the server",
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if status_code is not None:
            ctx["status_code"] = status_code
        super().__init__(message=message, context=ctx)
        self.status_code = status_code
