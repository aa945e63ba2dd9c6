"""
SyncMe - Note SQLAlchemy Model
==============================

What:  ORM model representing the `notes` table.
How:   Inherits from the shared DeclarativeBase; Alembic reads it for migrations.
Who:   Used by SqlNoteRepository for all note reads and writes.

Table Design:
    - Integer primary key assigned by the database
    - content holds raw HTML from the rich-text editor, stored unsanitized
    - created_at / updated_at are UTC, timezone-aware
    - is_deleted is the soft-delete flag; rows are never physically removed
    - owner_id optionally links a note to the user that created it

    Index on updated_at DESC:
        The list endpoint always orders by most recently modified first.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, Text, false
from sqlalchemy.orm import Mapped, mapped_column

from syncme.clock import utc_now
from syncme.database import Base
from syncme.models.user import User  # noqa: F401  (registers the owner_id FK target)


class Note(Base):
    """
    A rich-text note.

    Lifecycle:
        1. Created by POST /notes (timestamps stamped, is_deleted = False)
        2. Title/content overwritten by PUT /notes/{id}, updated_at refreshed
        3. DELETE /notes/{id} flips is_deleted and refreshes updated_at
        4. Never removed from the table

    Query Patterns:
        - List: WHERE is_deleted = false ORDER BY updated_at DESC
        - Get:  WHERE id = :id (then the soft-delete flag is checked)
    """

    __tablename__ = "notes"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    title: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
    )

    # Raw editor markup; no length limit, no sanitization
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    is_deleted: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    # NULL for notes created without an X-User-Email header
    owner_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=True,
        default=None,
        index=True,
    )

    __table_args__ = (
        Index("idx_notes_updated_at", updated_at.desc()),
    )

    def __repr__(self) -> str:
        return (
            f"<Note(id={self.id}, is_deleted={self.is_deleted}, "
            f"updated_at='{self.updated_at}')>"
        )
