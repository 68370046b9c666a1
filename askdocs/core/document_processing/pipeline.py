"""
Ingestion pipeline orchestrator.

Coordinates loading, chunking and the session collection write.
Embedding happens inside CollectionManager.write_chunks.

Dependencies: chunker, loaders, askdocs.core.session
System role: Pipeline orchestration (coordinates only)
"""

import logging
import time
import uuid

from fastapi.concurrency import run_in_threadpool

from askdocs.configs.ingestion import IngestionSettings
from askdocs.core.document_processing.chunker import Chunker
from askdocs.core.document_processing.loaders import DocumentLoader
from askdocs.core.session.collection_manager import CollectionManager
from askdocs.models.chunk import Chunk, ChunkMetadata, Provenance
from askdocs.models.ingest import RawInput

logger = logging.getLogger(__name__)


def chunk_id(session_id: str, source: str, chunk_index: int, content: str) -> str:
    """Deterministic UUIDv5 so re-ingesting identical content overwrites instead of duplicating."""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"{session_id}:{source}:{chunk_index}:{content}"))


class IngestionPipeline:
    """Orchestrate ingestion: load -> chunk -> embed+upsert into the session collection."""

    def __init__(
        self,
        collection_manager: CollectionManager,
        settings: IngestionSettings | None = None,
        loader: DocumentLoader | None = None,
    ) -> None:
        """
        Initialize pipeline with configuration.

        Args:
            collection_manager: Owner of session collections
            settings: Chunking settings (uses defaults if None)
            loader: Raw input loader (uses DocumentLoader if None)
        """
        self._settings = settings or IngestionSettings()
        self._collection_manager = collection_manager
        self._loader = loader or DocumentLoader()
        self._chunker = Chunker(
            chunk_size=self._settings.chunk_size,
            chunk_overlap=self._settings.chunk_overlap,
        )

    async def ingest(self, session_id: str, raw_input: RawInput, provenance: Provenance) -> int:
        """
        Ingest one item into the session's collection.

        The collection is only created when the item yields at least one chunk.

        Args:
            session_id: Caller session token
            raw_input: Bytes plus declared type
            provenance: Source description

        Returns:
            int: Number of chunks written (0 for blank input)

        Raises:
            ParsingError: Input could not be turned into text
            EmbeddingError: Embedding failed after retries
            BackingStoreUnavailable: Qdrant unreachable
        """
        start_time = time.perf_counter()

        documents = await run_in_threadpool(self._loader.load, raw_input, provenance)
        pieces = self._chunker.chunk(documents)
        if not pieces:
            logger.info(
                f"{__name__}:ingest - No content to index",
                extra={"source": provenance.source},
            )
            return 0

        chunks = [
            Chunk(
                id=chunk_id(session_id, provenance.source, piece.metadata["chunk_index"], piece.page_content),
                content=piece.page_content,
                metadata=ChunkMetadata(
                    source=provenance.source,
                    source_type=provenance.source_type,
                    chunk_index=piece.metadata["chunk_index"],
                    total_chunks=piece.metadata["total_chunks"],
                    title=provenance.title,
                    domain=provenance.domain,
                    page=piece.metadata.get("page"),
                    original_filename=piece.metadata.get("original_filename"),
                    start_index=piece.metadata.get("start_index"),
                ),
            )
            for piece in pieces
        ]

        written = await self._collection_manager.write_chunks(session_id, chunks)

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"{__name__}:ingest - Ingested {written} chunks in {elapsed_ms:.0f}ms",
            extra={"source": provenance.source, "source_type": provenance.source_type.value},
        )
        return written
