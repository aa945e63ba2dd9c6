"""
SyncMe - SQLAlchemy Repositories
================================

What:  Async SQLAlchemy implementations of NoteRepository and UserRepository,
       plus the FastAPI dependency providers that build them per request.
How:   Each repository wraps the request's AsyncSession. Writes are flushed
       so ids are assigned immediately; get_db_session commits at the end.

Query plans:
    list_active:  SELECT ... FROM notes WHERE is_deleted = false
                  [AND owner_id = :owner] ORDER BY updated_at DESC, id DESC
                  → idx_notes_updated_at
    get_by_id:    primary key lookup (identity map first)
"""

from datetime import datetime
from typing import List, Optional

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from syncme.database import get_db_session
from syncme.models.note import Note
from syncme.models.user import User
from syncme.repositories.base import NoteRepository, UserRepository


class SqlNoteRepository(NoteRepository):

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_active(self, owner_id: Optional[int] = None) -> List[Note]:
        query = select(Note).where(Note.is_deleted.is_(False))
        if owner_id is not None:
            query = query.where(Note.owner_id == owner_id)
        # id breaks ties so equal timestamps still list in a stable order
        query = query.order_by(Note.updated_at.desc(), Note.id.desc())

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_by_id(self, note_id: int) -> Optional[Note]:
        return await self.session.get(Note, note_id)

    async def insert(self, note: Note) -> Note:
        self.session.add(note)
        await self.session.flush()
        return note

    async def update(
        self,
        note: Note,
        title: str,
        content: str,
        updated_at: datetime,
    ) -> Note:
        note.title = title
        note.content = content
        note.updated_at = updated_at
        await self.session.flush()
        return note

    async def soft_delete(self, note: Note, updated_at: datetime) -> Note:
        note.is_deleted = True
        note.updated_at = updated_at
        await self.session.flush()
        return note


class SqlUserRepository(UserRepository):

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(
            select(User).where(User.email == email).order_by(User.id).limit(1)
        )
        return result.scalar_one_or_none()

    async def find_by_credentials(self, email: str, password: str) -> Optional[User]:
        result = await self.session.execute(
            select(User)
            .where(User.email == email, User.password == password)
            .order_by(User.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def insert(self, user: User) -> User:
        self.session.add(user)
        await self.session.flush()
        return user


# ── Dependency Providers ──────────────────────────────────────────────────
# Both providers depend on get_db_session; FastAPI resolves it once per
# request, so note and user repositories share a session and a transaction.

def get_note_repository(db: AsyncSession = Depends(get_db_session)) -> NoteRepository:
    return SqlNoteRepository(db)


def get_user_repository(db: AsyncSession = Depends(get_db_session)) -> UserRepository:
    return SqlUserRepository(db)
