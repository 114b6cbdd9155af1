"""
Shared test fixtures and configuration for entire test suite.

Provides: In-memory SQLite database, in-memory vector store with hashing
embeddings, scripted generation provider, document factory
Dependencies: pytest, pytest-asyncio, sqlalchemy, aiosqlite, langchain-core
System role: Test infrastructure and fixture management
"""

from collections.abc import Sequence

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.messages import BaseMessage
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from compliance_portal.boundary.db.base import Base
from compliance_portal.boundary.db.CRUD.document_crud import document_crud
from compliance_portal.boundary.db.models.document_model import DocumentModel, SourceKind  # noqa: F401
from compliance_portal.boundary.llm.generation_provider import (
    GenerationOptions,
    LangChainGenerationProvider,
)
from compliance_portal.boundary.vdb.embeddings import HashingEmbeddings
from compliance_portal.boundary.vdb.vector_backend import InMemoryVectorBackend
from compliance_portal.boundary.vdb.vector_store_client import VectorStoreClient
from compliance_portal.configs.vector_store import RetrySettings


@pytest.fixture
def fast_retry() -> RetrySettings:
    """Two attempts, no waiting."""
    return RetrySettings(max_attempts=2, initial_wait=0, max_wait=0, jitter=0)


@pytest.fixture
async def engine():
    """
    Create in-memory SQLite async engine with all tables.

    Yields:
        AsyncEngine: Engine shared by every session in the test
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, autoflush=False, expire_on_commit=False)


@pytest.fixture
def embeddings() -> HashingEmbeddings:
    return HashingEmbeddings(dimension=256)


@pytest.fixture
def vector_backend() -> InMemoryVectorBackend:
    return InMemoryVectorBackend()


@pytest.fixture
def vector_client(embeddings, vector_backend, fast_retry) -> VectorStoreClient:
    return VectorStoreClient(
        embeddings=embeddings,
        backend=vector_backend,
        namespace="test-docs",
        retry_settings=fast_retry,
        batch_size=3,
    )


class ScriptedGenerationProvider(LangChainGenerationProvider):
    """LangChain fake chat model returning canned answers in order; records messages."""

    def __init__(self, responses: list[str], retry_settings: RetrySettings) -> None:
        self.calls: list[list[BaseMessage]] = []
        model = FakeListChatModel(responses=responses)
        super().__init__(
            model_factory=lambda options: model,
            provider_name="fake",
            retry_settings=retry_settings,
        )

    async def generate(self, messages: Sequence[BaseMessage], options: GenerationOptions) -> str:
        self.calls.append(list(messages))
        return await super().generate(messages, options)

    @property
    def prompts(self) -> list[str]:
        """Each call's messages joined into one text."""
        return ["\n\n".join(str(m.content) for m in call) for call in self.calls]

    @property
    def call_count(self) -> int:
        return len(self.calls)


@pytest.fixture
def make_generator(fast_retry):
    """Factory for a scripted provider answering with the given texts."""

    def factory(*responses: str) -> ScriptedGenerationProvider:
        return ScriptedGenerationProvider(list(responses) or ["No answer."], fast_retry)

    return factory


@pytest.fixture
def create_document(session_factory):
    """Insert a document row (UPLOADED) and return it."""

    async def factory(
        title: str = "Sports Wagering Rules",
        state: str | None = "CO",
        source_kind: SourceKind = SourceKind.UPLOADED_FILE,
        source_uri: str | None = "rules.pdf",
        verticals: list[str] | None = None,
        document_types: list[str] | None = None,
    ) -> DocumentModel:
        async with session_factory() as session:
            document = await document_crud.create_document(
                session,
                title=title,
                source_kind=source_kind,
                source_uri=source_uri,
                state=state,
                verticals=verticals or ["sports-online"],
                document_types=document_types or ["regulation"],
            )
            await session.commit()
            return document

    return factory
