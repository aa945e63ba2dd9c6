"""
SyncMe - Note Request/Response Schemas
======================================

What:  Pydantic models defining the notes API contract.
How:   FastAPI validates request bodies and serializes responses with these
       models. Field names are snake_case in Python and camelCase on the wire
       (createdAt, updatedAt, isDeleted, ownerId).
Who:   Used by the notes routes and by the client's HTTP sync port.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from syncme.clock import as_utc

CAMEL_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    from_attributes=True,
)


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class NoteWrite(BaseModel):
    """
    Body of POST /notes and PUT /notes/{id}.

    Only title and content are read. Any id, timestamps or isDeleted sent by
    the client are ignored (extra fields are dropped by Pydantic). Missing or
    null fields become empty strings.
    """
    model_config = CAMEL_CONFIG

    title: str = Field(default="", description="Note title (plain text)")
    content: str = Field(default="", description="Note body as raw HTML markup")

    @field_validator("title", "content", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class NoteResponse(BaseModel):
    """
    Full representation of a note.

    Returned by GET /notes (as an array), GET /notes/{id}, POST /notes
    and PUT /notes/{id}.
    """
    model_config = CAMEL_CONFIG

    id: int = Field(description="Server-assigned note identifier")
    title: str = Field(description="Note title")
    content: str = Field(description="Note body as raw HTML markup")
    created_at: datetime = Field(description="Creation time (UTC ISO 8601)")
    updated_at: datetime = Field(description="Last modification time (UTC ISO 8601)")
    is_deleted: bool = Field(description="Soft-delete flag (always false in responses)")
    owner_id: Optional[int] = Field(default=None, description="Owning user id, if any")

    @field_validator("created_at", "updated_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        return as_utc(v)


# ══════════════════════════════════════════════════════════════════════════
# Shared Response Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Error body returned by every exception handler.

    Example:
        {
            "error": "not_found",
            "message": "note with ID '42' was not found",
            "request_id": "1f2e3d4c"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
