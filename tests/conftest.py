"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory SQLite engine, fake model/embedding/OCR/object-store
seams, a fully wired service container, and row factories.
Dependencies: pytest, pytest-asyncio, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

import pytest

from ragengine.application.container import ModelServices, assemble_container
from ragengine.boundary.db.connection import get_async_engine, get_async_session_factory
from ragengine.boundary.db.create_tables import create_all_tables
from ragengine.boundary.db.CRUD.document_crud import document_crud
from ragengine.boundary.db.CRUD.session_crud import session_crud
from ragengine.boundary.vdb.memory_vector_store import InMemoryVectorStore
from ragengine.configs import Settings
from ragengine.configs.database import DatabaseSettings
from ragengine.models.document import DocumentStatus
from fakes import (
    SQLITE_URL,
    FakeEmbeddingBackend,
    FakeModelService,
    FakeObjectStore,
    FakeOcr,
    make_settings,
)


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
async def engine():
    """
    Create in-memory SQLite async engine with all tables.

    Yields:
        AsyncEngine: StaticPool-backed engine disposed after the test
    """
    test_engine = get_async_engine(DatabaseSettings(url=SQLITE_URL))
    await create_all_tables(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return get_async_session_factory(engine)


@pytest.fixture
async def test_async_db(session_factory):
    """Provide an AsyncSession on the test database."""
    async with session_factory() as session:
        yield session
        await session.rollback()


# ---------------------------------------------------------------------------
# Seams and container
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_model() -> FakeModelService:
    return FakeModelService()


@pytest.fixture
def fake_embeddings() -> FakeEmbeddingBackend:
    return FakeEmbeddingBackend()


@pytest.fixture
def fake_object_store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
def fake_ocr() -> FakeOcr:
    return FakeOcr(pages=[])


@pytest.fixture
def vector_store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def container(settings, engine, fake_model, fake_embeddings, fake_object_store, fake_ocr, vector_store):
    """Fully wired services over the test database and fakes."""
    models = ModelServices(chat=fake_model, summary=fake_model, planner=fake_model, ocr=fake_ocr)
    return assemble_container(
        settings,
        engine=engine,
        models=models,
        embedding_backend=fake_embeddings,
        object_store=fake_object_store,
        vector_store=vector_store,
    )


# ---------------------------------------------------------------------------
# Row factories
# ---------------------------------------------------------------------------


@pytest.fixture
def create_document(session_factory):
    """Insert a document in ``uploaded`` state and return its id."""

    async def _create(
        owner_id: str = "user-1",
        source_uri: str = "file:///docs/notes.txt",
        name: str = "notes.txt",
        mime_type: str = "text/plain",
    ) -> str:
        async with session_factory() as db:
            document = await document_crud.create(
                db,
                owner_id=owner_id,
                source_uri=source_uri,
                name=name,
                mime_type=mime_type,
                status=DocumentStatus.UPLOADED,
            )
            await db.commit()
            return document.id

    return _create


@pytest.fixture
def create_session(session_factory):
    """Insert a chat session and return its id."""

    async def _create(user_id: str = "user-1") -> str:
        async with session_factory() as db:
            session = await session_crud.create(db, user_id=user_id)
            await db.commit()
            return session.id

    return _create
