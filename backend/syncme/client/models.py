"""
Local data model kept by the client.

Serialized with camelCase keys (userId, createdAt, updatedAt, isDeleted,
serverId) so the stored JSON matches the service's wire format.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from syncme.clock import as_utc, utc_now

LOCAL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LocalUser(BaseModel):
    model_config = LOCAL_CONFIG

    email: str
    password: str


class LocalNote(BaseModel):
    """
    A note as the client stores it.

    id is a client-generated UUID; server_id is filled in once the note has
    been created on the service.
    """
    model_config = LOCAL_CONFIG

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: Optional[str] = None
    title: str = ""
    content: str = ""
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    is_deleted: bool = False
    server_id: Optional[int] = None

    @field_validator("created_at", "updated_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        return as_utc(v)
