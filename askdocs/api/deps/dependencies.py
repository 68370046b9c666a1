"""
Dependency injection container.

Factory functions for FastAPI dependencies.

Dependencies: askdocs.configs, askdocs.application, askdocs.core, askdocs.boundary
System role: DI container for service injection
"""

from askdocs.configs import Settings, get_settings
from askdocs.application.services import ChatService, IngestionService, SessionService


class ServiceCache:
    """Container for cached service instances."""

    def __init__(self, settings: Settings | None = None):
        self._settings = settings
        self._vector_client = None
        self._embeddings = None
        self._collection_manager = None
        self._pipeline = None
        self._generator = None

    @property
    def settings(self) -> Settings:
        """Get settings (global singleton unless injected)."""
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def vector_client(self):
        """Get cached Qdrant client."""
        if self._vector_client is None:
            from askdocs.boundary.vdb.vector_store_factory import get_vector_client
            self._vector_client = get_vector_client(self.settings.vector_store)
        return self._vector_client

    @property
    def embeddings(self):
        """Get cached embeddings."""
        if self._embeddings is None:
            from askdocs.boundary.vdb.embeddings_wrapper import build_embeddings
            self._embeddings = build_embeddings(self.settings.vector_store, self.settings.ingestion)
        return self._embeddings

    @property
    def collection_manager(self):
        """Get cached collection manager."""
        if self._collection_manager is None:
            from askdocs.core.session.collection_manager import CollectionManager
            self._collection_manager = CollectionManager(
                client=self.vector_client,
                embeddings=self.embeddings,
                settings=self.settings.vector_store,
            )
        return self._collection_manager

    @property
    def pipeline(self):
        """Get cached ingestion pipeline."""
        if self._pipeline is None:
            from askdocs.core.document_processing.pipeline import IngestionPipeline
            self._pipeline = IngestionPipeline(
                collection_manager=self.collection_manager,
                settings=self.settings.ingestion,
            )
        return self._pipeline

    @property
    def generator(self):
        """Get cached answer generator."""
        if self._generator is None:
            from askdocs.core.rag_query.chat_models import make_chat_model_factory
            from askdocs.core.rag_query.generator import ResilientGenerator
            from askdocs.core.rag_query.retrieval_engine import RetrievalEngine

            self._generator = ResilientGenerator(
                retrieval_engine=RetrievalEngine(
                    self.collection_manager,
                    default_k=self.settings.vector_store.default_top_k,
                ),
                model_factory=make_chat_model_factory(self.settings.generation),
                settings=self.settings.generation,
            )
        return self._generator

    async def aclose(self) -> None:
        """Close the Qdrant client and clear all cached instances."""
        if self._vector_client is not None:
            await self._vector_client.close()
        self.clear()

    def clear(self) -> None:
        """Clear all cached instances."""
        self._vector_client = None
        self._embeddings = None
        self._collection_manager = None
        self._pipeline = None
        self._generator = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


def get_ingestion_service() -> IngestionService:
    """
    Get ingestion service instance.

    Returns:
        IngestionService: Service using the cached pipeline
    """
    cache = get_service_cache()
    return IngestionService(
        pipeline=cache.pipeline,
        max_file_size_bytes=cache.settings.ingestion.max_file_size_bytes,
    )


def get_chat_service() -> ChatService:
    """
    Get chat service instance.

    Returns:
        ChatService: Service using the cached generator
    """
    return ChatService(generator=get_service_cache().generator)


def get_session_service() -> SessionService:
    """
    Get session service instance.

    Returns:
        SessionService: Service using the cached collection manager
    """
    return SessionService(collection_manager=get_service_cache().collection_manager)
