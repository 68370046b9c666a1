"""
Session-scoped collection lifecycle manager.

Maps every session to its own Qdrant collection and is the only component
allowed to create, inspect, write to, search or delete those collections.
Collection creation times live in a companion registry collection so the
stale sweep never has to parse them out of a name.

Collection naming: "<base>_<token>_<digest>" where token is the session ID
with non-alphanumerics stripped (length-capped) and digest is a SHA-256
prefix of the raw session ID.

Dependencies: qdrant_client, httpx, langchain_core, askdocs.boundary.vdb
System role: Session namespace ownership for ingestion and retrieval
"""

import asyncio
import hashlib
import logging
import re
import uuid
from collections.abc import Callable
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx
from langchain_core.embeddings import Embeddings
from qdrant_client import AsyncQdrantClient, models
from qdrant_client.http.exceptions import ResponseHandlingException, UnexpectedResponse

from askdocs.boundary.vdb.vector_schemas import NamespaceHandle, NamespaceInfo, ScoredChunk
from askdocs.configs.vector_store import VectorStoreSettings
from askdocs.core.exceptions import (
    BackingStoreUnavailable,
    ClientInputError,
    NamespaceConfigurationError,
)
from askdocs.core.session.active_sessions import ActiveSessionRegistry
from askdocs.models.chunk import Chunk, ChunkMetadata
from askdocs.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

_NON_ALPHANUMERIC = re.compile(r"[^A-Za-z0-9]")
_DIGEST_LENGTH = 12
_BACKING_STORE_ERRORS = (
    UnexpectedResponse,
    ResponseHandlingException,
    httpx.TransportError,
    ConnectionError,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _registry_point_id(namespace: str) -> str:
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"askdocs-registry:{namespace}"))


def _parse_timestamp(value: Any) -> datetime | None:
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _vector_size(info: models.CollectionInfo) -> int | None:
    vectors = info.config.params.vectors
    if isinstance(vectors, models.VectorParams):
        return vectors.size
    if isinstance(vectors, dict) and len(vectors) == 1:
        return next(iter(vectors.values())).size
    return None


class CollectionManager:
    """
    Owner of per-session Qdrant collections.

    Creates collections lazily on first write, treats empty collections as
    missing on the read path, and reclaims collections older than the
    configured age.
    """

    def __init__(
        self,
        client: AsyncQdrantClient,
        embeddings: Embeddings,
        settings: VectorStoreSettings,
        active_sessions: ActiveSessionRegistry | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        Initialize the manager.

        Args:
            client: Async Qdrant client (remote or :memory:)
            embeddings: Embedding model used for writes and queries
            settings: Naming, dimension, distance and sweep settings
            active_sessions: Registry of sessions with live collections
            clock: Returns the current UTC time (injectable for tests)
        """
        self._client = client
        self._embeddings = embeddings
        self._settings = settings
        self.active_sessions = active_sessions or ActiveSessionRegistry()
        self._clock = clock or _utcnow
        self._prefix = f"{settings.collection_base_name}_"
        self._registry_name = f"{settings.collection_base_name}-registry"
        self._registry_ready = False
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    # ------------------------------------------------------------------
    # Naming
    # ------------------------------------------------------------------

    def namespace_name(self, session_id: str) -> str:
        """
        Deterministic collection name for a session.

        Raises:
            ClientInputError: Session ID missing or blank
        """
        if not isinstance(session_id, str) or not session_id.strip():
            raise ClientInputError("Session ID is required", field="session_id")
        token = _NON_ALPHANUMERIC.sub("", session_id)[: self._settings.session_token_max_length]
        digest = hashlib.sha256(session_id.encode("utf-8")).hexdigest()[:_DIGEST_LENGTH]
        if token:
            return f"{self._prefix}{token}_{digest}"
        return f"{self._prefix}{digest}"

    def owns(self, collection_name: str) -> bool:
        """Whether a collection name belongs to this manager's session namespaces."""
        return collection_name.startswith(self._prefix)

    # ------------------------------------------------------------------
    # Backing store helpers
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _backing_store(self, operation: str, **details: Any):
        """Translate Qdrant transport and server failures into BackingStoreUnavailable."""
        try:
            yield
        except _BACKING_STORE_ERRORS as e:
            logger.error(
                f"{__name__}:{operation} - Qdrant unavailable: {type(e).__name__}: {e}",
                extra={"operation": operation, **details},
            )
            raise BackingStoreUnavailable(
                message=f"Vector store unavailable during {operation}",
                operation=operation,
                details={**details, "error": str(e)},
            ) from e

    async def _get_collection_or_none(self, name: str) -> models.CollectionInfo | None:
        try:
            return await self._client.get_collection(name)
        except UnexpectedResponse as e:
            if e.status_code == 404:
                return None
            raise
        except ValueError:
            # The in-process store reports unknown collections with ValueError
            return None

    async def _list_owned(self) -> list[str]:
        async with self._backing_store("list"):
            response = await self._client.get_collections()
        return sorted(c.name for c in response.collections if self.owns(c.name))

    @asynccontextmanager
    async def _namespace_lock(self, name: str):
        """Serialize work on one collection; the lock is dropped once nobody holds or awaits it."""
        lock = self._locks.setdefault(name, asyncio.Lock())
        self._lock_users[name] = self._lock_users.get(name, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[name] -= 1
            if not self._lock_users[name]:
                del self._lock_users[name]
                del self._locks[name]

    # ------------------------------------------------------------------
    # Creation-time registry
    # ------------------------------------------------------------------

    async def _ensure_registry(self) -> None:
        if self._registry_ready:
            return
        async with self._backing_store("registry"):
            if not await self._client.collection_exists(self._registry_name):
                try:
                    await self._client.create_collection(
                        collection_name=self._registry_name,
                        vectors_config=models.VectorParams(size=1, distance=models.Distance.DOT),
                    )
                except (UnexpectedResponse, ValueError):
                    if not await self._client.collection_exists(self._registry_name):
                        raise
        self._registry_ready = True

    async def _write_registry(self, name: str, session_id: str, created_at: datetime) -> None:
        await self._ensure_registry()
        async with self._backing_store("registry", namespace=name):
            await self._client.upsert(
                collection_name=self._registry_name,
                points=[
                    models.PointStruct(
                        id=_registry_point_id(name),
                        vector=[1.0],
                        payload={
                            "namespace": name,
                            "session_id": session_id,
                            "created_at": created_at.isoformat(),
                        },
                    )
                ],
                wait=True,
            )

    async def _read_registry(self, names: list[str]) -> dict[str, dict[str, Any]]:
        if not names:
            return {}
        await self._ensure_registry()
        async with self._backing_store("registry", count=len(names)):
            points = await self._client.retrieve(
                collection_name=self._registry_name,
                ids=[_registry_point_id(name) for name in names],
                with_payload=True,
                with_vectors=False,
            )
        return {
            point.payload["namespace"]: point.payload
            for point in points
            if point.payload and "namespace" in point.payload
        }

    async def _delete_registry(self, name: str) -> None:
        await self._ensure_registry()
        async with self._backing_store("registry", namespace=name):
            await self._client.delete(
                collection_name=self._registry_name,
                points_selector=models.PointIdsList(points=[_registry_point_id(name)]),
                wait=True,
            )

    async def _created_at(self, name: str) -> datetime | None:
        record = (await self._read_registry([name])).get(name)
        return _parse_timestamp(record.get("created_at")) if record else None

    # ------------------------------------------------------------------
    # Namespace lifecycle
    # ------------------------------------------------------------------

    async def resolve_namespace(self, session_id: str) -> NamespaceHandle | None:
        """
        Find the session's collection for reading.

        Args:
            session_id: Caller session token

        Returns:
            NamespaceHandle | None: None when the collection is absent or holds no points

        Raises:
            BackingStoreUnavailable: Qdrant unreachable
        """
        name = self.namespace_name(session_id)
        if name not in await self._list_owned():
            logger.info(f"{__name__}:resolve_namespace - No collection for session", extra={"namespace": name})
            return None

        async with self._backing_store("inspect", namespace=name):
            info = await self._get_collection_or_none(name)
        points_count = (info.points_count or 0) if info else 0
        if points_count == 0:
            logger.info(f"{__name__}:resolve_namespace - Collection empty, treating as missing", extra={"namespace": name})
            return None

        return NamespaceHandle(
            name=name,
            session_id=session_id,
            dimension=_vector_size(info) or self._settings.embedding_dimension,
            points_count=points_count,
            created_at=await self._created_at(name),
        )

    async def _create_collection(self, name: str, session_id: str) -> models.CollectionInfo:
        created_at = self._clock()
        try:
            await self._client.create_collection(
                collection_name=name,
                vectors_config=models.VectorParams(
                    size=self._settings.embedding_dimension,
                    distance=models.Distance(self._settings.distance),
                ),
            )
        except (UnexpectedResponse, ValueError):
            # Lost a create race: use whatever the other writer created
            existing = await self._get_collection_or_none(name)
            if existing is None:
                raise
            return existing

        try:
            await self._write_registry(name, session_id, created_at)
        except BackingStoreUnavailable:
            # The sweep cannot see a collection without a creation record
            try:
                await self._client.delete_collection(name)
            except _BACKING_STORE_ERRORS as e:
                log_exception_with_context(
                    logger,
                    f"{__name__}:ensure_namespace - Rollback of unrecorded collection failed",
                    e,
                    namespace=name,
                )
            raise

        logger.info(
            f"{__name__}:ensure_namespace - Created collection",
            extra={"namespace": name, "dimension": self._settings.embedding_dimension},
        )
        return await self._client.get_collection(name)

    async def ensure_namespace(self, session_id: str) -> NamespaceHandle:
        """
        Create the session's collection if needed and return it.

        Idempotent: an existing collection is returned unchanged, apart from
        a creation record being written if it has none.

        Args:
            session_id: Caller session token

        Returns:
            NamespaceHandle: The session's collection

        Raises:
            NamespaceConfigurationError: Existing collection has a different vector size
            BackingStoreUnavailable: Qdrant unreachable
        """
        name = self.namespace_name(session_id)
        async with self._namespace_lock(name):
            await self._ensure_registry()
            async with self._backing_store("ensure", namespace=name):
                info = await self._get_collection_or_none(name)
                if info is None:
                    info = await self._create_collection(name, session_id)

            size = _vector_size(info)
            if size != self._settings.embedding_dimension:
                raise NamespaceConfigurationError(name, self._settings.embedding_dimension, size)

            created_at = await self._created_at(name)
            if created_at is None:
                created_at = self._clock()
                logger.warning(
                    f"{__name__}:ensure_namespace - Collection had no creation record, recording now",
                    extra={"namespace": name},
                )
                await self._write_registry(name, session_id, created_at)

            return NamespaceHandle(
                name=name,
                session_id=session_id,
                dimension=size,
                points_count=info.points_count or 0,
                created_at=created_at,
            )

    async def write_chunks(self, session_id: str, chunks: list[Chunk]) -> int:
        """
        Stamp chunks with the session and write time, then upsert them.

        Args:
            session_id: Caller session token
            chunks: Chunks produced by the ingestion pipeline

        Returns:
            int: Number of points written

        Raises:
            EmbeddingError: Embedding model failed after retries
            BackingStoreUnavailable: Qdrant unreachable
        """
        if not chunks:
            return 0

        created_at = self._clock()
        stamped = [
            chunk.model_copy(
                update={
                    "metadata": chunk.metadata.model_copy(
                        update={"session_id": session_id, "created_at": created_at}
                    )
                }
            )
            for chunk in chunks
        ]

        handle = await self.ensure_namespace(session_id)
        vectors = await self._embeddings.aembed_documents([chunk.content for chunk in stamped])

        points = [
            models.PointStruct(
                id=chunk.id,
                vector=vector,
                payload={
                    "page_content": chunk.content,
                    "metadata": chunk.metadata.model_dump(mode="json"),
                },
            )
            for chunk, vector in zip(stamped, vectors)
        ]
        async with self._backing_store("upsert", namespace=handle.name, point_count=len(points)):
            await self._client.upsert(collection_name=handle.name, points=points, wait=True)

        self.active_sessions.add(session_id)
        logger.info(
            f"{__name__}:write_chunks - Upserted {len(points)} chunks",
            extra={"namespace": handle.name},
        )
        return len(points)

    async def search(self, handle: NamespaceHandle, query: str, k: int) -> list[ScoredChunk]:
        """
        Similarity search inside one session collection.

        Args:
            handle: Resolved collection
            query: Query text
            k: Maximum number of results

        Returns:
            list[ScoredChunk]: Results in the order Qdrant ranked them
        """
        vector = await self._embeddings.aembed_query(query)
        async with self._backing_store("query", namespace=handle.name, k=k):
            response = await self._client.query_points(
                collection_name=handle.name,
                query=vector,
                limit=k,
                with_payload=True,
            )

        results = []
        for rank, point in enumerate(response.points, start=1):
            payload = point.payload or {}
            results.append(
                ScoredChunk(
                    chunk=Chunk(
                        id=str(point.id),
                        content=payload.get("page_content", ""),
                        metadata=ChunkMetadata.model_validate(payload.get("metadata", {})),
                    ),
                    score=point.score,
                    rank=rank,
                )
            )
        return results

    async def delete_namespace(self, session_id: str) -> bool:
        """
        Delete the session's collection.

        Args:
            session_id: Caller session token

        Returns:
            bool: True when a collection was deleted, False when there was nothing to delete
        """
        name = self.namespace_name(session_id)
        async with self._namespace_lock(name):
            async with self._backing_store("delete", namespace=name):
                existed = await self._client.collection_exists(name)
                if existed:
                    await self._client.delete_collection(name)
            if existed:
                await self._delete_registry(name)

        self.active_sessions.discard(session_id)
        logger.info(
            f"{__name__}:delete_namespace - {'Deleted' if existed else 'Nothing to delete'}",
            extra={"namespace": name},
        )
        return existed

    async def list_namespaces(self) -> list[NamespaceInfo]:
        """
        Describe every session collection under the base prefix.

        Returns:
            list[NamespaceInfo]: Name, owner, point count, creation time and activity
        """
        names = await self._list_owned()
        records = await self._read_registry(names)

        infos = []
        for name in names:
            async with self._backing_store("inspect", namespace=name):
                info = await self._get_collection_or_none(name)
            if info is None:
                continue
            record = records.get(name, {})
            session_id = record.get("session_id")
            infos.append(
                NamespaceInfo(
                    name=name,
                    session_id=session_id,
                    points_count=info.points_count or 0,
                    created_at=_parse_timestamp(record.get("created_at")),
                    active=bool(session_id) and session_id in self.active_sessions,
                )
            )
        return infos

    async def sweep_stale(self, max_age: timedelta | None = None) -> list[str]:
        """
        Delete session collections older than max_age.

        Creation times come from the registry. Collections without a record are
        skipped. A failure on one collection is logged and the sweep moves on.

        Args:
            max_age: Age limit (defaults to stale_max_age_hours)

        Returns:
            list[str]: Names of deleted collections
        """
        if max_age is None:
            max_age = timedelta(hours=self._settings.stale_max_age_hours)
        now = self._clock()
        names = await self._list_owned()
        records = await self._read_registry(names)

        deleted = []
        for name in names:
            record = records.get(name)
            created_at = _parse_timestamp(record.get("created_at")) if record else None
            if created_at is None:
                logger.warning(
                    f"{__name__}:sweep_stale - No creation record, skipping",
                    extra={"namespace": name},
                )
                continue
            if now - created_at <= max_age:
                continue

            try:
                async with self._namespace_lock(name):
                    async with self._backing_store("sweep", namespace=name):
                        await self._client.delete_collection(name)
                    await self._delete_registry(name)
            except Exception as e:
                log_exception_with_context(
                    logger,
                    f"{__name__}:sweep_stale - Failed to delete stale collection",
                    e,
                    namespace=name,
                )
                continue

            session_id = record.get("session_id")
            if session_id:
                self.active_sessions.discard(session_id)
            deleted.append(name)

        logger.info(
            f"{__name__}:sweep_stale - Deleted {len(deleted)} of {len(names)} collections",
            extra={"max_age_hours": max_age.total_seconds() / 3600},
        )
        return deleted
