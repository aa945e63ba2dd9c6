"""
SyncMe - Note Service
=====================

What:  Business rules for notes: listing, lookup, create, update, soft delete.
How:   Works against the NoteRepository interface; routes pass the repository
       built for the current request.
Who:   Called by the notes route handlers.

Rules enforced here:
    - A note that is missing, soft-deleted, or owned by someone other than
      the requesting user is NotFound. The three cases are indistinguishable.
    - Create stamps created_at == updated_at == now and is_deleted = False,
      whatever the client sent.
    - Update touches title and content only; created_at and is_deleted never
      change on this path.
    - Every mutation (including soft delete) moves updated_at strictly forward.

NoteService is stateless. It receives the repository (and the optional owner)
on every call.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from syncme.clock import next_timestamp, utc_now
from syncme.exceptions import DatabaseError, NotFoundError
from syncme.models.note import Note
from syncme.models.user import User
from syncme.repositories.base import NoteRepository
from syncme.schemas.note import NoteResponse, NoteWrite

logger = logging.getLogger(__name__)


class NoteService:
    """
    Business logic layer for note operations.

    Error Handling Strategy:
        NotFoundError propagates unchanged (→ 404). SQLAlchemy failures are
        wrapped in DatabaseError so no SQL detail reaches the client.
    """

    async def list_notes(
        self,
        repo: NoteRepository,
        owner: Optional[User] = None,
    ) -> List[NoteResponse]:
        """
        All non-deleted notes, most recently updated first. No pagination.

        Repeated calls with no writes in between return the same list.
        """
        try:
            notes = await repo.list_active(owner_id=owner.id if owner else None)
        except SQLAlchemyError as e:
            logger.error("Database error listing notes: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve notes. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return [NoteResponse.model_validate(note) for note in notes]

    async def get_note(
        self,
        repo: NoteRepository,
        note_id: int,
        owner: Optional[User] = None,
    ) -> NoteResponse:
        """
        Retrieve a single visible note.

        Raises:
            NotFoundError: Note is absent, soft-deleted, or not owned by `owner` (→ 404)
            DatabaseError: Query execution failed (→ 500)
        """
        note = await self._get_visible(repo, note_id, owner)
        return NoteResponse.model_validate(note)

    async def create_note(
        self,
        repo: NoteRepository,
        data: NoteWrite,
        owner: Optional[User] = None,
    ) -> NoteResponse:
        """
        Create a note from a title/content payload.

        Timestamps and the deleted flag are always server-assigned; a single
        clock reading is used so created_at == updated_at on the new note.
        """
        now = utc_now()
        note = Note(
            title=data.title,
            content=data.content,
            created_at=now,
            updated_at=now,
            is_deleted=False,
            owner_id=owner.id if owner else None,
        )
        try:
            note = await repo.insert(note)
        except SQLAlchemyError as e:
            logger.error("Database error creating note: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the note. Please try again.",
                context={"error_type": type(e).__name__},
            )
        logger.info("Note %s created (owner=%s)", note.id, note.owner_id)
        return NoteResponse.model_validate(note)

    async def update_note(
        self,
        repo: NoteRepository,
        note_id: int,
        data: NoteWrite,
        owner: Optional[User] = None,
    ) -> NoteResponse:
        """
        Overwrite title and content of a visible note and refresh updated_at.

        Raises:
            NotFoundError: Note is absent, soft-deleted, or not owned by `owner`
        """
        note = await self._get_visible(repo, note_id, owner)
        try:
            note = await repo.update(
                note,
                title=data.title,
                content=data.content,
                updated_at=next_timestamp(note.updated_at),
            )
        except SQLAlchemyError as e:
            logger.error("Database error updating note %s: %s", note_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the note. Please try again.",
                context={"note_id": note_id},
            )
        logger.info("Note %s updated", note_id)
        return NoteResponse.model_validate(note)

    async def delete_note(
        self,
        repo: NoteRepository,
        note_id: int,
        owner: Optional[User] = None,
    ) -> None:
        """
        Soft-delete a visible note. Deleting twice yields NotFound the second time.

        Raises:
            NotFoundError: Note is absent, already deleted, or not owned by `owner`
        """
        note = await self._get_visible(repo, note_id, owner)
        try:
            await repo.soft_delete(note, updated_at=next_timestamp(note.updated_at))
        except SQLAlchemyError as e:
            logger.error("Database error deleting note %s: %s", note_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the note. Please try again.",
                context={"note_id": note_id},
            )
        logger.info("Note %s soft-deleted", note_id)

    async def _get_visible(
        self,
        repo: NoteRepository,
        note_id: int,
        owner: Optional[User],
    ) -> Note:
        try:
            note = await repo.get_by_id(note_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the note. Please try again.",
                context={"note_id": note_id},
            )

        if note is None or note.is_deleted:
            raise NotFoundError(resource="note", resource_id=str(note_id))
        if owner is not None and note.owner_id != owner.id:
            raise NotFoundError(resource="note", resource_id=str(note_id))
        return note


# ── Singleton Instance ────────────────────────────────────────────────────
note_service = NoteService()
