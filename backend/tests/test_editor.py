"""
SyncMe Client — Editor Surface Tests
====================================

What we test:
    ✅ Markup reloads only when the active note identity changes
    ✅ Input pushes the full markup to the active note
    ✅ bold / italic / underline wrap the selection
    ✅ List preview and title fallbacks
"""

import pytest

from syncme.client.editor import EditorSurface, display_title, note_preview
from syncme.exceptions import ValidationError


@pytest.fixture
def editor(logged_in_store):
    return EditorSurface(logged_in_store)


class TestEditorResync:

    def test_loads_content_when_note_becomes_active(self, logged_in_store, editor):
        first = logged_in_store.create_note()
        logged_in_store.update_note("content", "first body")
        logged_in_store.create_note()

        logged_in_store.select_note(first.id)

        assert editor.note_id == first.id
        assert editor.markup == "first body"

    def test_same_note_changes_do_not_resync(self, logged_in_store, editor):
        logged_in_store.create_note()
        editor.input("typed")

        # Title edits notify the store, but the editor keeps its own markup
        editor.markup = "typed, caret state here"
        logged_in_store.update_note("title", "t")

        assert editor.markup == "typed, caret state here"

    def test_clears_when_selection_goes_away(self, logged_in_store, editor):
        note = logged_in_store.create_note()
        editor.input("text")

        logged_in_store.delete_note(note.id)

        assert editor.note_id is None
        assert editor.markup == ""


class TestEditorInput:

    def test_input_updates_active_note(self, logged_in_store, editor):
        note = logged_in_store.create_note()

        editor.input("<b>hello</b>")

        assert note.content == "<b>hello</b>"

    def test_input_without_active_note_is_ignored(self, logged_in_store, editor):
        editor.input("lost")

        assert logged_in_store.notes == []

    @pytest.mark.parametrize("command,tag", [
        ("bold", "b"),
        ("italic", "i"),
        ("underline", "u"),
    ])
    def test_apply_style_wraps_selection(self, logged_in_store, editor, command, tag):
        note = logged_in_store.create_note()
        editor.input("hello world")

        editor.apply_style(command, 6, 11)

        assert note.content == f"hello <{tag}>world</{tag}>"

    def test_apply_style_defaults_to_whole_content(self, logged_in_store, editor):
        note = logged_in_store.create_note()
        editor.input("all")

        editor.apply_style("bold")

        assert note.content == "<b>all</b>"

    def test_unknown_command_is_rejected(self, logged_in_store, editor):
        logged_in_store.create_note()

        with pytest.raises(ValidationError):
            editor.apply_style("strikethrough")

    def test_out_of_range_selection_is_rejected(self, logged_in_store, editor):
        logged_in_store.create_note()
        editor.input("abc")

        with pytest.raises(ValidationError):
            editor.apply_style("bold", 2, 10)


class TestListHelpers:

    def test_preview_strips_tags_and_truncates(self):
        content = "<b>" + "x" * 50 + "</b>"

        assert note_preview(content) == "x" * 35

    @pytest.mark.parametrize("content", ["", None, "<br><b></b>"])
    def test_preview_placeholder(self, content):
        assert note_preview(content) == "No content..."

    def test_display_title_fallback(self):
        assert display_title("") == "Untitled Note"
        assert display_title("Groceries") == "Groceries"
