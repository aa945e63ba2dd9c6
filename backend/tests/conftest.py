"""
SyncMe Backend — Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── note_repo / user_repo: In-memory repositories (no database at all)
    ├── db_engine: In-memory SQLite engine with the schema created
    ├── test_client: HTTPX AsyncClient bound to the app, DB session overridden
    ├── memory_persistence: Client-side storage kept in a dict
    └── store: NotesStore over memory_persistence
"""

import os
import tempfile
from typing import AsyncGenerator, Dict, List, Optional

# Override settings for testing BEFORE any syncme imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RUN_MIGRATIONS_ON_STARTUP"] = "false"
os.environ["LOCAL_STORAGE_PATH"] = tempfile.mkdtemp(prefix="syncme_test_")
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RETRY_MIN_WAIT"] = "0"
os.environ["RETRY_MAX_WAIT"] = "0"

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from syncme.client.persistence import MemoryPersistence
from syncme.client.store import NotesStore
from syncme.database import Base, get_db_session
from syncme.models.note import Note
from syncme.models.user import User
from syncme.repositories.base import NoteRepository, UserRepository


# ══════════════════════════════════════════════════════════════════════════
# In-Memory Repositories
# ══════════════════════════════════════════════════════════════════════════

class InMemoryNoteRepository(NoteRepository):
    """Dict-backed NoteRepository for service unit tests."""

    def __init__(self) -> None:
        self.rows: Dict[int, Note] = {}
        self._next_id = 1

    async def list_active(self, owner_id: Optional[int] = None) -> List[Note]:
        notes = [
            n for n in self.rows.values()
            if not n.is_deleted and (owner_id is None or n.owner_id == owner_id)
        ]
        return sorted(notes, key=lambda n: (n.updated_at, n.id), reverse=True)

    async def get_by_id(self, note_id: int) -> Optional[Note]:
        return self.rows.get(note_id)

    async def insert(self, note: Note) -> Note:
        note.id = self._next_id
        self._next_id += 1
        self.rows[note.id] = note
        return note

    async def update(self, note, title, content, updated_at):
        note.title = title
        note.content = content
        note.updated_at = updated_at
        return note

    async def soft_delete(self, note, updated_at):
        note.is_deleted = True
        note.updated_at = updated_at
        return note


class InMemoryUserRepository(UserRepository):
    """List-backed UserRepository for service unit tests."""

    def __init__(self) -> None:
        self.rows: List[User] = []

    async def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.rows if u.email == email), None)

    async def find_by_credentials(self, email: str, password: str) -> Optional[User]:
        return next(
            (u for u in self.rows if u.email == email and u.password == password),
            None,
        )

    async def insert(self, user: User) -> User:
        user.id = len(self.rows) + 1
        self.rows.append(user)
        return user


@pytest.fixture
def note_repo():
    return InMemoryNoteRepository()


@pytest.fixture
def user_repo():
    return InMemoryUserRepository()


# ══════════════════════════════════════════════════════════════════════════
# Database and API Client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    """
    In-memory SQLite shared by every session in the test.

    StaticPool keeps a single connection, so the schema created here is the
    one the request sessions see.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def test_client(db_session_factory) -> AsyncGenerator[AsyncClient, None]:
    """
    Provides an async HTTP test client for endpoint testing.

    How:     ASGITransport routes requests straight into the app; the
             get_db_session dependency is replaced with one bound to the
             in-memory engine (same commit/rollback behavior).

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from syncme.main import create_app

    app = create_app()

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with db_session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# ══════════════════════════════════════════════════════════════════════════
# Client Store
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def memory_persistence():
    return MemoryPersistence()


@pytest.fixture
def store(memory_persistence):
    return NotesStore(memory_persistence)


@pytest.fixture
def logged_in_store(store):
    """Store with alice@example.com registered and logged in."""
    store.signup("alice@example.com", "secret")
    store.login("alice@example.com", "secret")
    return store
