"""
SyncMe Client — Synchronization Tests
=====================================

What we test:
    ✅ HttpSyncPort maps local changes onto POST / PUT / DELETE
    ✅ Conflict policies when the server no longer has a note
    ✅ Transport errors are retried; HTTP errors are not
    ✅ Synchronizer only pushes what changed and records server ids
    ✅ Debouncer fires once per burst; autosync follows login/note state
"""

import asyncio
import json
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx
import pytest

from syncme.client.app import ClientApp
from syncme.client.models import LocalNote
from syncme.client.persistence import MemoryPersistence
from syncme.client.sync import (
    ConflictPolicy,
    Debouncer,
    HttpSyncPort,
    SyncReport,
    Synchronizer,
)
from syncme.exceptions import SyncError


class FakeNotesServer:
    """Just enough of the notes API for httpx.MockTransport."""

    def __init__(self):
        self.notes = {}
        self.requests = []
        self._next_id = 100

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append((request.method, request.url.path, request.headers.get("x-user-email")))
        if request.method == "POST" and request.url.path == "/notes":
            note_id = self._next_id
            self._next_id += 1
            self.notes[note_id] = json.loads(request.content)
            return httpx.Response(201, json={"id": note_id, **self.notes[note_id]})

        note_id = int(request.url.path.rsplit("/", 1)[-1])
        if note_id not in self.notes:
            return httpx.Response(404, json={"error": "not_found"})
        if request.method == "PUT":
            self.notes[note_id] = json.loads(request.content)
            return httpx.Response(200, json={"id": note_id, **self.notes[note_id]})
        if request.method == "DELETE":
            del self.notes[note_id]
            return httpx.Response(204)
        return httpx.Response(405)


def _port(handler, policy=ConflictPolicy.LAST_WRITE_WINS):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test")
    return HttpSyncPort(client=client, policy=policy)


def _note(**kwargs):
    return LocalNote(user_id="alice@example.com", **kwargs)


class TestHttpSyncPort:

    @pytest.mark.asyncio
    async def test_new_note_is_posted_with_session_header(self):
        server = FakeNotesServer()
        note = _note(title="A", content="x")

        report = await _port(server).push("alice@example.com", [note])

        assert report.pushed == {note.id: 100}
        assert server.requests == [("POST", "/notes", "alice@example.com")]
        assert server.notes[100] == {"title": "A", "content": "x"}

    @pytest.mark.asyncio
    async def test_known_note_is_put(self):
        server = FakeNotesServer()
        server.notes[7] = {"title": "old", "content": ""}
        note = _note(title="new", server_id=7)

        report = await _port(server).push("alice@example.com", [note])

        assert report.pushed == {note.id: 7}
        assert server.notes[7]["title"] == "new"

    @pytest.mark.asyncio
    async def test_deleted_note_is_deleted_and_unsynced_one_skipped(self):
        server = FakeNotesServer()
        server.notes[7] = {"title": "gone", "content": ""}
        synced = _note(server_id=7, is_deleted=True)
        never_synced = _note(is_deleted=True)

        report = await _port(server).push("alice@example.com", [synced, never_synced])

        assert 7 not in server.notes
        assert [r[0] for r in server.requests] == ["DELETE"]
        assert never_synced.id not in report.pushed

    @pytest.mark.asyncio
    async def test_delete_of_missing_server_note_counts_as_done(self):
        server = FakeNotesServer()
        note = _note(server_id=9, is_deleted=True)

        report = await _port(server).push("alice@example.com", [note])

        assert report.pushed == {note.id: 9}

    @pytest.mark.asyncio
    async def test_last_write_wins_recreates_missing_note(self):
        server = FakeNotesServer()
        note = _note(title="mine", server_id=9)

        report = await _port(server).push("alice@example.com", [note])

        assert report.pushed == {note.id: 100}
        assert report.conflicts == []
        assert [r[0] for r in server.requests] == ["PUT", "POST"]

    @pytest.mark.asyncio
    async def test_reject_policy_reports_conflict(self):
        server = FakeNotesServer()
        note = _note(title="mine", server_id=9)

        report = await _port(server, ConflictPolicy.REJECT).push("alice@example.com", [note])

        assert report.pushed == {}
        assert report.conflicts == [note.id]
        assert server.notes == {}

    @pytest.mark.asyncio
    async def test_unexpected_status_raises_without_retry(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500, json={"error": "server_error"})

        with pytest.raises(SyncError) as exc_info:
            await _port(handler).push("alice@example.com", [_note(title="A")])

        assert exc_info.value.status_code == 500
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_partial_progress_is_reported_on_failure(self):
        server = FakeNotesServer()
        first = _note(title="ok")
        second = _note(title="boom", server_id=5)
        server.notes[5] = {}

        def handler(request):
            if request.method == "PUT":
                return httpx.Response(400, json={"error": "validation_error"})
            return server(request)

        with pytest.raises(SyncError) as exc_info:
            await _port(handler).push("alice@example.com", [first, second])

        assert exc_info.value.context["pushed"] == {first.id: 100}

    @pytest.mark.asyncio
    async def test_transport_errors_are_retried(self):
        server = FakeNotesServer()
        attempts = []

        def flaky(request):
            attempts.append(request)
            if len(attempts) < 3:
                raise httpx.ConnectError("connection refused", request=request)
            return server(request)

        report = await _port(flaky).push("alice@example.com", [_note(title="A")])

        assert len(attempts) == 3
        assert list(report.pushed.values()) == [100]

    @pytest.mark.asyncio
    async def test_exhausted_retries_raise_sync_error(self):
        def down(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(SyncError) as exc_info:
            await _port(down).push("alice@example.com", [_note(title="A")])

        assert exc_info.value.status_code is None

    def test_backoff_follows_retry_settings(self):
        # Test settings pin both waits to zero
        wait = HttpSyncPort._send.retry.wait

        assert wait(SimpleNamespace(attempt_number=1)) == 0
        assert wait(SimpleNamespace(attempt_number=3)) == 0


class TestSynchronizer:

    @pytest.mark.asyncio
    async def test_sync_pushes_pending_and_records_server_ids(self, logged_in_store):
        server = FakeNotesServer()
        note = logged_in_store.create_note()
        logged_in_store.update_note("title", "A")
        synchronizer = Synchronizer(logged_in_store, _port(server))

        report = await synchronizer.sync()

        assert report.pushed == {note.id: 100}
        assert note.server_id == 100
        assert synchronizer.last_synced_at is not None
        assert synchronizer.is_syncing is False
        assert synchronizer.pending_changes() == []

    @pytest.mark.asyncio
    async def test_second_sync_only_sends_new_changes(self, logged_in_store):
        server = FakeNotesServer()
        first = logged_in_store.create_note()
        synchronizer = Synchronizer(logged_in_store, _port(server))
        await synchronizer.sync()

        logged_in_store.create_note()
        logged_in_store.select_note(first.id)
        logged_in_store.update_note("title", "edited")
        server.requests.clear()
        await synchronizer.sync()

        assert sorted(r[0] for r in server.requests) == ["POST", "PUT"]
        assert server.notes[first.server_id]["title"] == "edited"

    @pytest.mark.asyncio
    async def test_only_current_user_notes_are_pending(self, logged_in_store):
        logged_in_store.create_note()
        logged_in_store.logout()
        logged_in_store.signup("bob@example.com", "pw")
        logged_in_store.login("bob@example.com", "pw")
        synchronizer = Synchronizer(logged_in_store, AsyncMock())

        assert synchronizer.pending_changes() == []

    @pytest.mark.asyncio
    async def test_other_users_sync_does_not_skip_offline_edits(self, store):
        server = FakeNotesServer()
        store.signup("alice@example.com", "pw")
        store.signup("bob@example.com", "pw")
        synchronizer = Synchronizer(store, _port(server))

        store.login("bob@example.com", "pw")
        bob_note = store.create_note()
        store.update_note("title", "offline edit")
        store.logout()

        store.login("alice@example.com", "pw")
        store.create_note()
        await synchronizer.sync()
        store.logout()

        store.login("bob@example.com", "pw")
        assert synchronizer.last_synced_at is None
        assert [n.id for n in synchronizer.pending_changes()] == [bob_note.id]

        report = await synchronizer.sync()

        assert report.pushed == {bob_note.id: 101}
        assert bob_note.server_id == 101
        assert server.notes[101]["title"] == "offline edit"
        assert ("POST", "/notes", "bob@example.com") in server.requests

    @pytest.mark.asyncio
    async def test_logged_out_sync_is_noop(self, store):
        port = AsyncMock()
        synchronizer = Synchronizer(store, port)

        assert await synchronizer.sync() is None
        port.push.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failure_keeps_changes_pending(self, logged_in_store):
        logged_in_store.create_note()
        port = AsyncMock()
        port.push.side_effect = SyncError("offline", context={"pushed": {}})
        synchronizer = Synchronizer(logged_in_store, port)

        with pytest.raises(SyncError):
            await synchronizer.sync()

        assert synchronizer.last_synced_at is None
        assert synchronizer.last_error is not None
        assert len(synchronizer.pending_changes()) == 1

    @pytest.mark.asyncio
    async def test_pushes_are_serialized(self, logged_in_store):
        logged_in_store.create_note()
        active = 0
        peak = 0

        async def slow_push(user, changes):
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1
            return SyncReport(synced_at=datetime.now(timezone.utc))

        port = AsyncMock()
        port.push.side_effect = slow_push
        synchronizer = Synchronizer(logged_in_store, port)

        await asyncio.gather(synchronizer.sync(), synchronizer.sync())

        assert peak == 1
        assert port.push.await_count == 2


class TestDebouncer:

    @pytest.mark.asyncio
    async def test_burst_fires_once_after_quiet_period(self):
        action = AsyncMock()
        debouncer = Debouncer(action, delay=0.05)

        for _ in range(5):
            debouncer.trigger()
            await asyncio.sleep(0.01)
        assert action.await_count == 0

        await asyncio.sleep(0.1)
        await debouncer.drain()

        assert action.await_count == 1
        assert debouncer.pending is False

    @pytest.mark.asyncio
    async def test_cancel_prevents_firing(self):
        action = AsyncMock()
        debouncer = Debouncer(action, delay=0.02)

        debouncer.trigger()
        debouncer.cancel()
        await asyncio.sleep(0.05)

        action.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_sync_errors_are_logged_not_raised(self, caplog):
        action = AsyncMock(side_effect=SyncError("offline"))
        debouncer = Debouncer(action, delay=0.01)

        debouncer.trigger()
        await asyncio.sleep(0.03)
        await debouncer.drain()

        assert "Background sync failed" in caplog.text


class TestAutosync:

    @pytest.mark.asyncio
    async def test_editing_schedules_one_sync(self):
        port = AsyncMock()
        port.push.return_value = SyncReport()
        app = ClientApp(MemoryPersistence(), port=port, debounce_seconds=0.05)
        app.store.signup("a@b.c", "pw")
        app.store.login("a@b.c", "pw")

        app.store.create_note()
        for ch in "hello":
            app.editor.input(app.editor.markup + ch)
        assert app.debouncer.pending is True

        await asyncio.sleep(0.1)
        await app.debouncer.drain()

        assert port.push.await_count == 1
        _, changes = port.push.await_args.args
        assert changes[0].content == "hello"
        await app.aclose()

    @pytest.mark.asyncio
    async def test_no_sync_without_visible_notes(self):
        port = AsyncMock()
        app = ClientApp(MemoryPersistence(), port=port, debounce_seconds=0.01)
        app.store.signup("a@b.c", "pw")
        app.store.login("a@b.c", "pw")

        assert app.debouncer.pending is False

        note = app.store.create_note()
        app.store.logout()
        assert app.debouncer.pending is False

        app.store.login("a@b.c", "pw")
        app.store.delete_note(note.id)
        await asyncio.sleep(0.03)

        port.push.assert_not_awaited()
        await app.aclose()
