"""
Shared test fixtures and configuration for entire test suite.

Provides: in-process Qdrant client, deterministic embeddings, a controllable
clock, stub chat models and a fully wired collection manager / pipeline.
Dependencies: pytest, pytest-asyncio, qdrant_client, langchain_core
System role: Test infrastructure and fixture management
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding
from langchain_core.messages import AIMessage
from qdrant_client import AsyncQdrantClient

from askdocs.boundary.vdb.embeddings_wrapper import FixedDimensionEmbeddings
from askdocs.configs.generation import GenerationSettings
from askdocs.configs.ingestion import IngestionSettings
from askdocs.configs.vector_store import VectorStoreSettings
from askdocs.core.document_processing.pipeline import IngestionPipeline
from askdocs.core.rag_query.retrieval_engine import RetrievalEngine
from askdocs.core.session.collection_manager import CollectionManager

EMBEDDING_DIMENSION = 32


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class StubChatModel:
    """
    Chat model double.

    Replies with a fixed text, raises a configured error, or sleeps first.
    Records every call and whether an in-flight call was cancelled.
    """

    def __init__(self, reply: str = "", error: Exception | None = None, delay: float = 0.0):
        self.reply = reply
        self.error = error
        self.delay = delay
        self.calls = 0
        self.cancelled = False
        self.last_messages = None

    async def ainvoke(self, messages):
        self.calls += 1
        self.last_messages = messages
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        if self.error is not None:
            raise self.error
        return AIMessage(content=self.reply)


class ServerError(Exception):
    """Upstream error carrying an HTTP status code."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


@pytest.fixture
def clock() -> FrozenClock:
    """Provide a controllable clock."""
    return FrozenClock()


@pytest.fixture
def vector_settings() -> VectorStoreSettings:
    """Vector store settings sized for the fake embeddings."""
    return VectorStoreSettings(
        qdrant_url=None,
        collection_base_name="test_rag",
        embedding_dimension=EMBEDDING_DIMENSION,
        distance="Cosine",
        default_top_k=4,
        stale_max_age_hours=24.0,
    )


@pytest.fixture
def ingestion_settings() -> IngestionSettings:
    """Default chunking settings."""
    return IngestionSettings(chunk_size=1000, chunk_overlap=200)


@pytest.fixture
def generation_settings() -> GenerationSettings:
    """Short deadline and a three-model chain."""
    return GenerationSettings(
        primary_model="primary-model",
        fallback_models=["primary-model", "fallback-a", "fallback-b"],
        request_timeout_seconds=0.2,
        temperature=0.0,
    )


@pytest.fixture
def embeddings() -> FixedDimensionEmbeddings:
    """Deterministic embeddings with retries that never sleep."""
    return FixedDimensionEmbeddings(
        DeterministicFakeEmbedding(size=EMBEDDING_DIMENSION),
        dimension=EMBEDDING_DIMENSION,
        max_attempts=3,
        initial_wait=0,
        max_wait=0,
    )


@pytest.fixture
def qdrant_client() -> AsyncQdrantClient:
    """
    Create in-process Qdrant client for testing.

    Returns:
        AsyncQdrantClient: Empty :memory: store, discarded after the test
    """
    return AsyncQdrantClient(location=":memory:")


@pytest.fixture
def collection_manager(qdrant_client, embeddings, vector_settings, clock) -> CollectionManager:
    """Collection manager over the in-process store."""
    return CollectionManager(
        client=qdrant_client,
        embeddings=embeddings,
        settings=vector_settings,
        clock=clock,
    )


@pytest.fixture
def pipeline(collection_manager, ingestion_settings) -> IngestionPipeline:
    """Ingestion pipeline writing through the collection manager."""
    return IngestionPipeline(collection_manager=collection_manager, settings=ingestion_settings)


@pytest.fixture
def retrieval_engine(collection_manager) -> RetrievalEngine:
    """Retrieval engine with k defaulting to 4."""
    return RetrievalEngine(collection_manager, default_k=4)


@pytest.fixture
def stub_chat_model() -> type[StubChatModel]:
    """Provide the StubChatModel class for building model chains."""
    return StubChatModel


@pytest.fixture
def server_error() -> type[ServerError]:
    """Provide the ServerError class for simulating 5xx responses."""
    return ServerError
