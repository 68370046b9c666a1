"""
Session-scoped retrieval.

Resolves the session's collection and runs a top-k similarity search in it.
Never reads another session's collection and never creates one.

Dependencies: askdocs.core.session
System role: Read path of the RAG pipeline
"""

import logging

from askdocs.core.exceptions import ClientInputError
from askdocs.core.rag_query.schemas import RetrievalResult
from askdocs.core.session.collection_manager import CollectionManager

logger = logging.getLogger(__name__)


class RetrievalEngine:
    """Top-k similarity search within one session's collection."""

    def __init__(self, collection_manager: CollectionManager, default_k: int = 4) -> None:
        self._collection_manager = collection_manager
        self.default_k = default_k

    async def retrieve(self, session_id: str, query: str, k: int | None = None) -> RetrievalResult:
        """
        Retrieve up to k chunks for a query, ordered by non-increasing score.

        Args:
            session_id: Caller session token
            query: Question text
            k: Result limit (defaults to default_k)

        Returns:
            RetrievalResult: NO_KNOWLEDGE_BASE when the session has no populated
            collection, otherwise FOUND with zero or more chunks

        Raises:
            ClientInputError: k is not a positive integer
            BackingStoreUnavailable: Qdrant unreachable
            EmbeddingError: Query embedding failed
        """
        if k is None:
            k = self.default_k
        if isinstance(k, bool) or not isinstance(k, int) or k <= 0:
            raise ClientInputError("k must be a positive integer", field="k")

        handle = await self._collection_manager.resolve_namespace(session_id)
        if handle is None:
            return RetrievalResult.no_knowledge_base()

        chunks = await self._collection_manager.search(handle, query, k)
        chunks = sorted(chunks, key=lambda scored: scored.score, reverse=True)[:k]

        logger.info(
            f"{__name__}:retrieve - Retrieved {len(chunks)} chunks",
            extra={"namespace": handle.name, "k": k},
        )
        return RetrievalResult.found(chunks)
