"""
SyncMe - Client Application Wiring
==================================

Builds the client object graph around one NotesStore:

    PersistencePort ──► NotesStore ──► EditorSurface
                           │
                           └─ listener ─► Debouncer ─► Synchronizer ─► SyncPort

Autosync: after every store change, if a user is logged in and has at least
one visible note the debouncer is (re)armed; otherwise any pending sync is
cancelled.
"""

import logging
from typing import Optional

from syncme.client.editor import EditorSurface
from syncme.client.persistence import JsonFilePersistence, PersistencePort
from syncme.client.store import NotesStore
from syncme.client.sync import Debouncer, HttpSyncPort, SyncPort, Synchronizer

logger = logging.getLogger(__name__)


class ClientApp:

    def __init__(
        self,
        persistence: Optional[PersistencePort] = None,
        port: Optional[SyncPort] = None,
        debounce_seconds: Optional[float] = None,
    ) -> None:
        self.store = NotesStore(persistence or JsonFilePersistence())
        self.editor = EditorSurface(self.store)
        self.port = port or HttpSyncPort()
        self.synchronizer = Synchronizer(self.store, self.port)
        self.debouncer = Debouncer(self.synchronizer.sync, debounce_seconds)
        self._unsubscribe = self.store.subscribe(self._schedule_sync)

    def _schedule_sync(self) -> None:
        if self.store.is_logged_in and self.store.user_notes:
            self.debouncer.trigger()
        else:
            self.debouncer.cancel()

    @property
    def is_syncing(self) -> bool:
        return self.synchronizer.is_syncing

    async def aclose(self) -> None:
        self._unsubscribe()
        self.debouncer.cancel()
        await self.debouncer.drain()
        self.editor.close()
        await self.port.aclose()
        logger.info("Client closed")
