"""
SyncMe - Rich-Text Editor Surface
=================================

What:  The editable content area bound to the store's active note, plus the
       list-rendering helpers (preview and display title).
How:   EditorSurface holds the markup it is showing. It reloads that markup
       from the store only when the active note *identity* changes; while
       the same note stays active, its own edits are the source of truth and
       every input() pushes the full markup to the store.

Formatting commands wrap a range of the current markup in an inline tag:
    bold      → <b>…</b>
    italic    → <i>…</i>
    underline → <u>…</u>
"""

import logging
import re
from typing import Optional

from syncme.client.store import NotesStore
from syncme.exceptions import ValidationError

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 35
EMPTY_PREVIEW = "No content..."
UNTITLED = "Untitled Note"

STYLE_TAGS = {
    "bold": "b",
    "italic": "i",
    "underline": "u",
}

_TAG_RE = re.compile(r"<[^>]*>")


def note_preview(content: Optional[str]) -> str:
    """Markup stripped of tags, cut to the first 35 characters."""
    text = _TAG_RE.sub("", content or "")
    if not text:
        return EMPTY_PREVIEW
    return text[:PREVIEW_LENGTH]


def display_title(title: Optional[str]) -> str:
    return title or UNTITLED


class EditorSurface:

    def __init__(self, store: NotesStore) -> None:
        self.store = store
        self.markup = ""
        self.note_id: Optional[str] = None
        self._unsubscribe = store.subscribe(self._on_store_change)
        self._on_store_change()

    def _on_store_change(self) -> None:
        note = self.store.active_note
        new_id = note.id if note is not None else None
        if new_id == self.note_id:
            return
        self.note_id = new_id
        self.markup = note.content if note is not None else ""
        logger.debug("Editor loaded note %s", new_id)

    def input(self, markup: str) -> None:
        """A user edit: the surface now shows `markup`; push it to the store."""
        if self.note_id is None:
            return
        self.markup = markup
        self.store.update_note("content", markup)

    def apply_style(self, command: str, start: int = 0, end: Optional[int] = None) -> str:
        """
        Wrap markup[start:end] in the tag for `command` and push the result.

        Raises:
            ValidationError: unknown command or range outside the markup
        """
        tag = STYLE_TAGS.get(command)
        if tag is None:
            raise ValidationError(f"Unknown formatting command '{command}'", field="command")

        if end is None:
            end = len(self.markup)
        if not 0 <= start <= end <= len(self.markup):
            raise ValidationError(
                f"Selection {start}:{end} is outside the editor content",
                field="selection",
            )

        styled = (
            self.markup[:start]
            + f"<{tag}>{self.markup[start:end]}</{tag}>"
            + self.markup[end:]
        )
        self.input(styled)
        return styled

    def close(self) -> None:
        self._unsubscribe()
