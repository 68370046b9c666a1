"""
Test suite for CollectionManager.

Runs against an in-process Qdrant store. Covers naming, isolation between
sessions, idempotent creation, deletion, listing, the stale sweep and
backing store failures.

System role: Verification of session collection lifecycle
"""

import asyncio
import uuid
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from qdrant_client import models
from qdrant_client.http.exceptions import ResponseHandlingException

from askdocs.core.exceptions import (
    BackingStoreUnavailable,
    ClientInputError,
    NamespaceConfigurationError,
)
from askdocs.core.session.collection_manager import CollectionManager
from askdocs.models.chunk import Chunk, ChunkMetadata, SourceType

REGISTRY_NAME = "test_rag-registry"


def make_chunks(source: str, texts: list[str]) -> list[Chunk]:
    return [
        Chunk(
            id=str(uuid.uuid5(uuid.NAMESPACE_URL, f"{source}:{i}")),
            content=text,
            metadata=ChunkMetadata(
                source=source,
                source_type=SourceType.TEXT,
                chunk_index=i,
                total_chunks=len(texts),
            ),
        )
        for i, text in enumerate(texts)
    ]


class TestNamespaceName:
    """Test deterministic collection naming."""

    def test_name_is_deterministic(self, collection_manager):
        assert collection_manager.namespace_name("abc-123") == collection_manager.namespace_name("abc-123")

    def test_name_strips_non_alphanumerics(self, collection_manager):
        name = collection_manager.namespace_name("user@example.com")

        assert name.startswith("test_rag_userexamplecom_")

    def test_sanitized_collisions_get_distinct_names(self, collection_manager):
        assert collection_manager.namespace_name("a-b") != collection_manager.namespace_name("ab")

    def test_token_length_is_capped(self, collection_manager, vector_settings):
        name = collection_manager.namespace_name("x" * 500)
        token = name[len("test_rag_"):].rsplit("_", 1)[0]

        assert len(token) == vector_settings.session_token_max_length

    def test_symbol_only_session_still_gets_a_name(self, collection_manager):
        name = collection_manager.namespace_name("!!!")

        assert name.startswith("test_rag_")
        assert collection_manager.owns(name)

    @pytest.mark.parametrize("session_id", ["", "   ", None])
    def test_blank_session_is_rejected(self, collection_manager, session_id):
        with pytest.raises(ClientInputError):
            collection_manager.namespace_name(session_id)


class TestEnsureAndResolve:
    """Test namespace creation and lookup."""

    async def test_resolve_missing_namespace_returns_none(self, collection_manager):
        assert await collection_manager.resolve_namespace("nobody") is None

    async def test_empty_namespace_resolves_as_missing(self, collection_manager):
        await collection_manager.ensure_namespace("s1")

        assert await collection_manager.resolve_namespace("s1") is None

    async def test_ensure_is_idempotent(self, collection_manager, qdrant_client):
        first = await collection_manager.ensure_namespace("s1")
        await collection_manager.write_chunks("s1", make_chunks("a.txt", ["alpha"]))
        second = await collection_manager.ensure_namespace("s1")

        assert first.name == second.name
        assert second.points_count == 1
        names = [c.name for c in (await qdrant_client.get_collections()).collections]
        assert names.count(first.name) == 1

    async def test_ensure_records_creation_time(self, collection_manager, clock):
        handle = await collection_manager.ensure_namespace("s1")

        assert handle.created_at == clock.now
        assert handle.dimension == 32

    async def test_dimension_mismatch_is_fatal(self, collection_manager, qdrant_client):
        await qdrant_client.create_collection(
            collection_name=collection_manager.namespace_name("s1"),
            vectors_config=models.VectorParams(size=8, distance=models.Distance.COSINE),
        )

        with pytest.raises(NamespaceConfigurationError) as exc_info:
            await collection_manager.ensure_namespace("s1")
        assert exc_info.value.details["actual_dimension"] == 8

    async def test_concurrent_ensure_yields_one_namespace(self, collection_manager, qdrant_client):
        handles = await asyncio.gather(*(collection_manager.ensure_namespace("s1") for _ in range(8)))

        assert {handle.name for handle in handles} == {collection_manager.namespace_name("s1")}
        names = [c.name for c in (await qdrant_client.get_collections()).collections]
        assert names.count(collection_manager.namespace_name("s1")) == 1
        registry = await qdrant_client.count(collection_name=REGISTRY_NAME, exact=True)
        assert registry.count == 1

    async def test_namespace_locks_are_released(self, collection_manager):
        await asyncio.gather(*(collection_manager.ensure_namespace("s1") for _ in range(4)))
        await collection_manager.delete_namespace("s1")

        assert collection_manager._locks == {}
        assert collection_manager._lock_users == {}


class TestMissingCreationRecord:
    """Test that every collection ends up with a creation record."""

    async def test_failed_registry_write_rolls_back_the_collection(
        self, collection_manager, qdrant_client, clock
    ):
        real_upsert = qdrant_client.upsert
        failures = []

        async def registry_down_once(collection_name, points, **kwargs):
            if collection_name == REGISTRY_NAME and not failures:
                failures.append(collection_name)
                raise httpx.ConnectError("registry unreachable")
            return await real_upsert(collection_name=collection_name, points=points, **kwargs)

        qdrant_client.upsert = registry_down_once

        with pytest.raises(BackingStoreUnavailable):
            await collection_manager.write_chunks("s1", make_chunks("a.txt", ["alpha"]))
        assert not await qdrant_client.collection_exists(collection_manager.namespace_name("s1"))

        await collection_manager.write_chunks("s1", make_chunks("a.txt", ["alpha"]))
        clock.advance(hours=25)

        deleted = await collection_manager.sweep_stale(timedelta(hours=24))

        assert deleted == [collection_manager.namespace_name("s1")]

    async def test_ensure_records_unrecorded_collection(self, collection_manager, qdrant_client, clock):
        name = collection_manager.namespace_name("s1")
        await qdrant_client.create_collection(
            collection_name=name,
            vectors_config=models.VectorParams(size=32, distance=models.Distance.COSINE),
        )

        handle = await collection_manager.ensure_namespace("s1")
        assert handle.created_at == clock.now

        clock.advance(hours=25)
        assert await collection_manager.sweep_stale(timedelta(hours=24)) == [name]


class TestWriteAndSearch:
    """Test writes, isolation and search ordering."""

    async def test_write_stamps_session_and_time(self, collection_manager, clock):
        await collection_manager.write_chunks("s1", make_chunks("a.txt", ["alpha", "beta"]))

        handle = await collection_manager.resolve_namespace("s1")
        results = await collection_manager.search(handle, "alpha", k=2)

        assert len(results) == 2
        for scored in results:
            assert scored.chunk.metadata.session_id == "s1"
            assert scored.chunk.metadata.created_at == clock.now

    async def test_write_empty_list_creates_nothing(self, collection_manager, qdrant_client):
        assert await collection_manager.write_chunks("s1", []) == 0
        assert not await qdrant_client.collection_exists(collection_manager.namespace_name("s1"))

    async def test_sessions_are_isolated(self, collection_manager):
        await collection_manager.write_chunks("A", make_chunks("a.txt", ["apples are red", "apples grow"]))
        await collection_manager.write_chunks("B", make_chunks("b.txt", ["bananas are yellow"]))

        handle_b = await collection_manager.resolve_namespace("B")
        results = await collection_manager.search(handle_b, "apples are red", k=10)

        assert [r.chunk.metadata.source for r in results] == ["b.txt"]
        assert all(r.chunk.metadata.session_id == "B" for r in results)

    async def test_search_ranks_from_one(self, collection_manager):
        await collection_manager.write_chunks("s1", make_chunks("a.txt", ["one", "two", "three"]))

        handle = await collection_manager.resolve_namespace("s1")
        results = await collection_manager.search(handle, "two", k=2)

        assert [r.rank for r in results] == [1, 2]
        assert results[0].score >= results[1].score

    async def test_write_marks_session_active(self, collection_manager):
        await collection_manager.write_chunks("s1", make_chunks("a.txt", ["alpha"]))

        assert "s1" in collection_manager.active_sessions


class TestDeleteAndList:
    """Test deletion and the debug listing."""

    async def test_delete_twice_reports_true_then_false(self, collection_manager):
        await collection_manager.write_chunks("s1", make_chunks("a.txt", ["alpha"]))

        assert await collection_manager.delete_namespace("s1") is True
        assert await collection_manager.delete_namespace("s1") is False
        assert await collection_manager.resolve_namespace("s1") is None
        assert "s1" not in collection_manager.active_sessions

    async def test_delete_leaves_other_sessions(self, collection_manager):
        await collection_manager.write_chunks("s1", make_chunks("a.txt", ["alpha"]))
        await collection_manager.write_chunks("s2", make_chunks("b.txt", ["beta"]))

        await collection_manager.delete_namespace("s1")

        assert await collection_manager.resolve_namespace("s2") is not None

    async def test_list_namespaces_describes_collections(self, collection_manager, clock):
        await collection_manager.write_chunks("s1", make_chunks("a.txt", ["alpha", "beta"]))

        infos = await collection_manager.list_namespaces()

        assert len(infos) == 1
        assert infos[0].name == collection_manager.namespace_name("s1")
        assert infos[0].session_id == "s1"
        assert infos[0].points_count == 2
        assert infos[0].created_at == clock.now
        assert infos[0].active is True

    async def test_list_skips_registry_and_foreign_collections(self, collection_manager, qdrant_client):
        await qdrant_client.create_collection(
            collection_name="unrelated",
            vectors_config=models.VectorParams(size=4, distance=models.Distance.COSINE),
        )
        await collection_manager.ensure_namespace("s1")

        names = [info.name for info in await collection_manager.list_namespaces()]

        assert names == [collection_manager.namespace_name("s1")]


class TestSweepStale:
    """Test the stale collection sweep."""

    async def test_sweep_deletes_only_old_namespaces(self, collection_manager, clock):
        await collection_manager.write_chunks("old", make_chunks("a.txt", ["alpha"]))
        clock.advance(hours=24)
        await collection_manager.write_chunks("new", make_chunks("b.txt", ["beta"]))
        clock.advance(hours=1)

        deleted = await collection_manager.sweep_stale(timedelta(hours=24))

        assert deleted == [collection_manager.namespace_name("old")]
        assert await collection_manager.resolve_namespace("old") is None
        assert await collection_manager.resolve_namespace("new") is not None
        assert "old" not in collection_manager.active_sessions

    async def test_sweep_uses_configured_default(self, collection_manager, clock):
        await collection_manager.write_chunks("s1", make_chunks("a.txt", ["alpha"]))
        clock.advance(hours=23)

        assert await collection_manager.sweep_stale() == []

        clock.advance(hours=2)
        assert await collection_manager.sweep_stale() == [collection_manager.namespace_name("s1")]

    async def test_sweep_skips_namespaces_without_registry_record(
        self, collection_manager, qdrant_client, clock
    ):
        orphan = collection_manager.namespace_name("orphan")
        await qdrant_client.create_collection(
            collection_name=orphan,
            vectors_config=models.VectorParams(size=32, distance=models.Distance.COSINE),
        )
        clock.advance(hours=100)

        assert await collection_manager.sweep_stale(timedelta(hours=1)) == []
        assert await qdrant_client.collection_exists(orphan)

    async def test_zero_max_age_sweeps_everything_older_than_now(self, collection_manager, clock):
        await collection_manager.write_chunks("s1", make_chunks("a.txt", ["alpha"]))
        clock.advance(hours=1)

        assert await collection_manager.sweep_stale(timedelta(0)) == [collection_manager.namespace_name("s1")]

    async def test_sweep_continues_after_a_failure(self, collection_manager, qdrant_client, clock):
        await collection_manager.write_chunks("s1", make_chunks("a.txt", ["alpha"]))
        await collection_manager.write_chunks("s2", make_chunks("b.txt", ["beta"]))
        clock.advance(hours=48)

        failing_name = collection_manager.namespace_name("s1")
        real_delete = qdrant_client.delete_collection

        async def flaky_delete(collection_name, *args, **kwargs):
            if collection_name == failing_name:
                raise ResponseHandlingException(httpx.ConnectError("refused"))
            return await real_delete(collection_name, *args, **kwargs)

        qdrant_client.delete_collection = flaky_delete

        deleted = await collection_manager.sweep_stale(timedelta(hours=24))

        assert deleted == [collection_manager.namespace_name("s2")]


class TestBackingStoreFailures:
    """Test translation of Qdrant failures."""

    @pytest.fixture
    def unreachable_manager(self, embeddings, vector_settings) -> CollectionManager:
        client = MagicMock()
        error = ResponseHandlingException(httpx.ConnectError("connection refused"))
        client.get_collections = AsyncMock(side_effect=error)
        client.get_collection = AsyncMock(side_effect=error)
        client.collection_exists = AsyncMock(side_effect=error)
        return CollectionManager(client=client, embeddings=embeddings, settings=vector_settings)

    async def test_resolve_raises_backing_store_unavailable(self, unreachable_manager):
        with pytest.raises(BackingStoreUnavailable) as exc_info:
            await unreachable_manager.resolve_namespace("s1")
        assert exc_info.value.operation == "list"

    async def test_delete_raises_backing_store_unavailable(self, unreachable_manager):
        with pytest.raises(BackingStoreUnavailable):
            await unreachable_manager.delete_namespace("s1")

    async def test_write_raises_backing_store_unavailable(self, unreachable_manager):
        with pytest.raises(BackingStoreUnavailable):
            await unreachable_manager.write_chunks("s1", make_chunks("a.txt", ["alpha"]))
