"""
SyncMe - Repository Interfaces
==============================

What:  Abstract data-access contracts for notes and users.
How:   Services depend only on these classes; SqlNoteRepository and
       SqlUserRepository (repositories/sql.py) implement them on async
       SQLAlchemy, and tests substitute in-memory implementations.
Who:   NoteService and AuthService.

Contract shared by all implementations:
    - Repositories never decide visibility. get_by_id() returns soft-deleted
      rows too; the service turns "missing or deleted" into NotFoundError.
    - Writes are flushed, not committed. The session dependency commits once
      per request.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from syncme.models.note import Note
from syncme.models.user import User


class NoteRepository(ABC):
    """Data access for the notes table."""

    @abstractmethod
    async def list_active(self, owner_id: Optional[int] = None) -> List[Note]:
        """
        Return notes with is_deleted = False, most recently updated first.

        Args:
            owner_id: When given, only notes owned by this user are returned.
                      None means no owner filter.
        """
        ...

    @abstractmethod
    async def get_by_id(self, note_id: int) -> Optional[Note]:
        """Return the note with this primary key, deleted or not, or None."""
        ...

    @abstractmethod
    async def insert(self, note: Note) -> Note:
        """Persist a new note; the returned instance has its id assigned."""
        ...

    @abstractmethod
    async def update(
        self,
        note: Note,
        title: str,
        content: str,
        updated_at: datetime,
    ) -> Note:
        """Overwrite title and content and set updated_at. Nothing else changes."""
        ...

    @abstractmethod
    async def soft_delete(self, note: Note, updated_at: datetime) -> Note:
        """Set is_deleted = True and updated_at. The row stays in the table."""
        ...


class UserRepository(ABC):
    """Data access for the users table."""

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """First user with exactly this email, or None."""
        ...

    @abstractmethod
    async def find_by_credentials(self, email: str, password: str) -> Optional[User]:
        """User whose email AND password both match exactly, or None."""
        ...

    @abstractmethod
    async def insert(self, user: User) -> User:
        """Persist a new user; the returned instance has its id assigned."""
        ...
