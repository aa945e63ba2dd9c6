"""
SyncMe - Auth Request/Response Schemas
======================================

What:  Bodies for POST /signup and POST /login.

Email and password are taken verbatim: no format check, no trimming,
no hashing.
"""

from pydantic import BaseModel, Field


class Credentials(BaseModel):
    """Body of both POST /signup and POST /login."""
    email: str = Field(description="User email, compared by exact equality")
    password: str = Field(description="Plain-text password, compared by exact equality")


class LoginResponse(BaseModel):
    """The email doubles as the session identifier (send it as X-User-Email)."""
    email: str


class SignupResponse(BaseModel):
    message: str = Field(default="User registered successfully")
