"""
SyncMe - Client Notes Store
===========================

What:  The client's single source of truth: users, notes, the logged-in user
       and the active note.
How:   Reads both lists from the injected PersistencePort at construction
       and writes a list back after every change to it. Listeners registered
       with subscribe() are called after every state change (note list,
       login, logout, selection).
Who:   EditorSurface, the autosync wiring in ClientApp, and UI code.

Rules:
    - Authentication is a local lookup/insert against `users`.
    - A note belongs to the user who created it (user_id); every note
      operation only sees the current user's notes.
    - update_note() changes exactly one field of the active note and
      restamps updated_at, once per input event.
    - Delete is a soft flag flip plus an updated_at restamp.
"""

import logging
from typing import Callable, List, Optional

from syncme.client.models import LocalNote, LocalUser
from syncme.client.persistence import PersistencePort
from syncme.clock import next_timestamp, utc_now
from syncme.exceptions import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

NOTES_KEY = "syncme-notes"
USERS_KEY = "syncme-users"

EDITABLE_FIELDS = frozenset({"title", "content"})

Listener = Callable[[], None]


class NotesStore:

    def __init__(self, persistence: PersistencePort) -> None:
        self._persistence = persistence
        self.users: List[LocalUser] = [
            LocalUser.model_validate(u) for u in persistence.load(USERS_KEY) or []
        ]
        self.notes: List[LocalNote] = [
            LocalNote.model_validate(n) for n in persistence.load(NOTES_KEY) or []
        ]
        self.current_user: Optional[str] = None
        self.active_note_id: Optional[str] = None
        self._listeners: List[Listener] = []

    # ── Listeners ─────────────────────────────────────────────────────────

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    def _save_notes(self) -> None:
        self._persistence.save(
            NOTES_KEY, [n.model_dump(mode="json", by_alias=True) for n in self.notes]
        )

    def _save_users(self) -> None:
        self._persistence.save(
            USERS_KEY, [u.model_dump(mode="json", by_alias=True) for u in self.users]
        )

    # ── Authentication ────────────────────────────────────────────────────

    @property
    def is_logged_in(self) -> bool:
        return self.current_user is not None

    def signup(self, email: str, password: str) -> LocalUser:
        """
        Raises:
            ValidationError: email or password is empty
            ConflictError: email already registered
        """
        if not email or not password:
            raise ValidationError("Please fill in all fields.")
        if any(u.email == email for u in self.users):
            raise ConflictError("Email already registered.")

        user = LocalUser(email=email, password=password)
        self.users.append(user)
        self._save_users()
        logger.info("Local user registered")
        return user

    def login(self, email: str, password: str) -> str:
        """
        Exact match on both fields sets the current user.

        Raises:
            ValidationError: email or password is empty
            UnauthorizedError: no user matches both fields
        """
        if not email or not password:
            raise ValidationError("Please fill in all fields.")
        if not any(u.email == email and u.password == password for u in self.users):
            raise UnauthorizedError("Invalid email or password.")

        self.current_user = email
        self._notify()
        return email

    def logout(self) -> None:
        self.current_user = None
        self.active_note_id = None
        self._notify()

    # ── Queries ───────────────────────────────────────────────────────────

    @property
    def user_notes(self) -> List[LocalNote]:
        """The current user's non-deleted notes, in list order (newest created first)."""
        if self.current_user is None:
            return []
        return [
            n for n in self.notes
            if n.user_id == self.current_user and not n.is_deleted
        ]

    @property
    def active_note(self) -> Optional[LocalNote]:
        if self.active_note_id is None or self.current_user is None:
            return None
        return self._find_owned(self.active_note_id)

    def _find_owned(self, note_id: str) -> Optional[LocalNote]:
        for note in self.notes:
            if note.id == note_id and note.user_id == self.current_user:
                return note
        return None

    # ── Mutations ─────────────────────────────────────────────────────────

    def create_note(self) -> LocalNote:
        """
        Prepend an empty note for the current user and select it.

        Raises:
            UnauthorizedError: nobody is logged in
        """
        if self.current_user is None:
            raise UnauthorizedError("Log in to create notes.")

        now = utc_now()
        note = LocalNote(
            user_id=self.current_user,
            title="",
            content="",
            created_at=now,
            updated_at=now,
        )
        self.notes.insert(0, note)
        self.active_note_id = note.id
        self._save_notes()
        self._notify()
        return note

    def select_note(self, note_id: Optional[str]) -> None:
        """
        Make a visible note active (None clears the selection).

        Raises:
            NotFoundError: not one of the current user's visible notes
        """
        if note_id is not None:
            note = self._find_owned(note_id)
            if note is None or note.is_deleted:
                raise NotFoundError(resource="note", resource_id=note_id)
        self.active_note_id = note_id
        self._notify()

    def update_note(self, field: str, value: str) -> LocalNote:
        """
        Set `title` or `content` on the active note and restamp updated_at.

        Raises:
            ValidationError: field is not title/content
            NotFoundError: there is no active note
        """
        if field not in EDITABLE_FIELDS:
            raise ValidationError(f"Field '{field}' cannot be edited", field=field)
        note = self.active_note
        if note is None:
            raise NotFoundError(resource="active note")

        setattr(note, field, value)
        note.updated_at = next_timestamp(note.updated_at)
        self._save_notes()
        self._notify()
        return note

    def delete_note(self, note_id: str) -> LocalNote:
        """
        Soft-delete one of the current user's notes; clears the selection if
        it was the active note.

        Raises:
            NotFoundError: not one of the current user's visible notes
        """
        note = self._find_owned(note_id)
        if note is None or note.is_deleted:
            raise NotFoundError(resource="note", resource_id=note_id)

        note.is_deleted = True
        note.updated_at = next_timestamp(note.updated_at)
        if self.active_note_id == note_id:
            self.active_note_id = None
        self._save_notes()
        self._notify()
        return note

    def mark_synced(self, note_id: str, server_id: Optional[int]) -> None:
        """
        Record the server id assigned to a local note.

        Persisted, but listeners are not notified: this is bookkeeping, not
        a user change, and must not schedule another sync.
        """
        for note in self.notes:
            if note.id == note_id:
                if note.server_id != server_id:
                    note.server_id = server_id
                    self._save_notes()
                return
