"""
SyncMe - Client Synchronization
===============================

What:  Pushes the current user's locally changed notes to the Notes Service.
How:   Three pieces:
       - SyncPort / HttpSyncPort: the transport. One HTTP call per changed note.
       - Synchronizer: picks the notes changed since the last successful push,
         runs one push at a time and writes returned server ids back to the
         store.
       - Debouncer: trailing-edge timer on the asyncio loop; every trigger
         restarts the quiet period, the action runs once it elapses.

Push mapping (HttpSyncPort):
    not yet on server, live      → POST   /notes
    not yet on server, deleted   → skipped (nothing to remove)
    on server, live              → PUT    /notes/{serverId}
    on server, deleted           → DELETE /notes/{serverId}   (404 counts as done)

    PUT answered with 404 (deleted or gone on the server):
    - last_write_wins → POST the note again and adopt the new server id
    - reject          → record a conflict, leave the local note untouched

Retry policy:
    httpx.TransportError (connect/read failures, timeouts) is retried with
    exponential backoff + jitter. HTTP responses are never retried; an
    unexpected status raises SyncError immediately.
"""

import asyncio
import enum
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Awaitable, Callable, Dict, List, Optional

import httpx
from pydantic import BaseModel, Field
from tenacity import (
    RetryError,
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from syncme.client.models import LocalNote
from syncme.client.store import NotesStore
from syncme.clock import utc_now
from syncme.config import settings
from syncme.exceptions import SyncError

logger = logging.getLogger(__name__)


class ConflictPolicy(str, enum.Enum):
    LAST_WRITE_WINS = "last_write_wins"
    REJECT = "reject"


class SyncReport(BaseModel):
    """Outcome of one push: local id → server id, plus conflicted local ids."""

    pushed: Dict[str, Optional[int]] = Field(default_factory=dict)
    conflicts: List[str] = Field(default_factory=list)
    synced_at: datetime = Field(default_factory=utc_now)


class SyncPort(ABC):

    @abstractmethod
    async def push(self, user: str, changes: List[LocalNote]) -> SyncReport:
        """
        Push `changes` made by `user`.

        Raises:
            SyncError: the push could not complete. context["pushed"] holds
                       the local → server ids that did go through.
        """
        ...

    async def aclose(self) -> None:
        return None


# ══════════════════════════════════════════════════════════════════════════
# HTTP Sync Port
# ══════════════════════════════════════════════════════════════════════════

class HttpSyncPort(SyncPort):

    def __init__(
        self,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        policy: Optional[ConflictPolicy] = None,
    ) -> None:
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            base_url=base_url or settings.sync_api_url,
            timeout=10.0,
        )
        self.policy = policy or ConflictPolicy(settings.sync_conflict_policy)

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(settings.retry_max_attempts),
        wait=wait_exponential(
            multiplier=settings.retry_min_wait,
            max=settings.retry_max_wait,
        ) + wait_random(0, settings.retry_min_wait),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _send(self, method: str, url: str, user: str, payload: Optional[dict] = None) -> httpx.Response:
        return await self.client.request(
            method,
            url,
            json=payload,
            headers={"X-User-Email": user},
        )

    async def _request(self, method: str, url: str, user: str, payload: Optional[dict] = None) -> httpx.Response:
        try:
            return await self._send(method, url, user, payload)
        except (httpx.TransportError, RetryError) as e:
            raise SyncError(
                message=f"Could not reach the notes service: {e}",
                context={"method": method, "url": url},
            ) from e

    async def _create(self, user: str, note: LocalNote) -> int:
        response = await self._request(
            "POST", "/notes", user, {"title": note.title, "content": note.content}
        )
        if response.status_code != 201:
            raise SyncError(
                message="Notes service rejected a new note",
                status_code=response.status_code,
                context={"note": note.id},
            )
        return response.json()["id"]

    async def push(self, user: str, changes: List[LocalNote]) -> SyncReport:
        report = SyncReport()
        try:
            for note in changes:
                await self._push_one(user, note, report)
        except SyncError as e:
            e.context["pushed"] = dict(report.pushed)
            raise
        return report

    async def _push_one(self, user: str, note: LocalNote, report: SyncReport) -> None:
        if note.server_id is None:
            if note.is_deleted:
                return
            report.pushed[note.id] = await self._create(user, note)
            return

        url = f"/notes/{note.server_id}"

        if note.is_deleted:
            response = await self._request("DELETE", url, user)
            if response.status_code not in (204, 404):
                raise SyncError(
                    message="Notes service rejected a delete",
                    status_code=response.status_code,
                    context={"note": note.id},
                )
            report.pushed[note.id] = note.server_id
            return

        response = await self._request(
            "PUT", url, user, {"title": note.title, "content": note.content}
        )
        if response.status_code == 200:
            report.pushed[note.id] = note.server_id
        elif response.status_code == 404:
            if self.policy is ConflictPolicy.LAST_WRITE_WINS:
                logger.info("Note %s missing on server, re-creating", note.id)
                report.pushed[note.id] = await self._create(user, note)
            else:
                logger.warning("Note %s conflicts with server state, not pushed", note.id)
                report.conflicts.append(note.id)
        else:
            raise SyncError(
                message="Notes service rejected an update",
                status_code=response.status_code,
                context={"note": note.id},
            )


# ══════════════════════════════════════════════════════════════════════════
# Synchronizer
# ══════════════════════════════════════════════════════════════════════════

class Synchronizer:

    def __init__(self, store: NotesStore, port: SyncPort) -> None:
        self.store = store
        self.port = port
        # Per-user: one client can hold several accounts' offline edits
        self._synced_at: Dict[str, datetime] = {}
        self.is_syncing = False
        self.last_report: Optional[SyncReport] = None
        self.last_error: Optional[SyncError] = None
        self._lock = asyncio.Lock()

    @property
    def last_synced_at(self) -> Optional[datetime]:
        """Start time of the current user's last successful push, or None."""
        user = self.store.current_user
        if user is None:
            return None
        return self._synced_at.get(user)

    def pending_changes(self) -> List[LocalNote]:
        """The current user's notes (deleted ones included) changed since the last sync."""
        user = self.store.current_user
        if user is None:
            return []
        baseline = self._synced_at.get(user)
        return [
            n for n in self.store.notes
            if n.user_id == user
            and (baseline is None or n.updated_at > baseline)
        ]

    async def sync(self) -> Optional[SyncReport]:
        """
        Push pending changes. Returns None when nobody is logged in.

        Edits made while a push is in flight carry a later updated_at than
        the push's start time and are picked up by the next sync.

        Raises:
            SyncError: propagated from the port; server ids that were
                       assigned before the failure are still recorded.
        """
        async with self._lock:
            user = self.store.current_user
            if user is None:
                return None

            started_at = utc_now()
            changes = [n.model_copy() for n in self.pending_changes()]
            self.is_syncing = True
            logger.info("Syncing %d note(s) for current user", len(changes))
            try:
                report = await self.port.push(user, changes)
            except SyncError as e:
                for local_id, server_id in e.context.get("pushed", {}).items():
                    self.store.mark_synced(local_id, server_id)
                self.last_error = e
                raise
            finally:
                self.is_syncing = False

            for local_id, server_id in report.pushed.items():
                self.store.mark_synced(local_id, server_id)
            self._synced_at[user] = started_at
            self.last_report = report
            self.last_error = None
            logger.info(
                "Sync complete: %d pushed, %d conflict(s)",
                len(report.pushed), len(report.conflicts),
            )
            return report


# ══════════════════════════════════════════════════════════════════════════
# Debouncer
# ══════════════════════════════════════════════════════════════════════════

class Debouncer:
    """
    Trailing-edge debounce of an async action.

    trigger() (re)arms a timer for `delay` seconds; only the last trigger in
    a burst runs the action. Must be used from inside a running event loop.
    """

    def __init__(self, action: Callable[[], Awaitable[object]], delay: Optional[float] = None) -> None:
        self.action = action
        self.delay = settings.sync_debounce_seconds if delay is None else delay
        self._handle: Optional[asyncio.TimerHandle] = None
        self._tasks: set = set()

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        task = asyncio.get_running_loop().create_task(self._run())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self) -> None:
        try:
            await self.action()
        except SyncError as e:
            logger.warning("Background sync failed: %s | Context: %s", e.message, e.context)

    async def drain(self) -> None:
        """Wait for actions that have already started."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks))
