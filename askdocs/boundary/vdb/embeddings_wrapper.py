"""
Embeddings wrapper with retries and a fixed output dimension.

Wraps any LangChain Embeddings so that transient embedding API failures are
retried with exponential backoff and every returned vector is checked against
the dimension the session collections were created with.

Dependencies: langchain_core, langchain_google_genai, tenacity
System role: Embedding access for the collection manager
"""

import logging

from langchain_core.embeddings import Embeddings
from langchain_google_genai import GoogleGenerativeAIEmbeddings
from tenacity import (
    AsyncRetrying,
    Retrying,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from askdocs.configs.ingestion import IngestionSettings
from askdocs.configs.vector_store import VectorStoreSettings
from askdocs.core.exceptions import EmbeddingError

logger = logging.getLogger(__name__)


class FixedDimensionEmbeddings(Embeddings):
    """
    Embeddings wrapper enforcing a fixed vector size.

    Delegates to an inner model, retrying failed calls, and raises
    EmbeddingError when the model answers with vectors of the wrong size.
    """

    def __init__(
        self,
        inner: Embeddings,
        dimension: int,
        max_attempts: int = 3,
        initial_wait: float = 1.0,
        max_wait: float = 10.0,
    ) -> None:
        """
        Initialize the wrapper.

        Args:
            inner: Embedding model that does the actual work
            dimension: Expected vector size
            max_attempts: Attempts per call before giving up
            initial_wait: First backoff delay in seconds
            max_wait: Backoff ceiling in seconds
        """
        self._inner = inner
        self.dimension = dimension
        self._max_attempts = max_attempts
        self._initial_wait = initial_wait
        self._max_wait = max_wait

    def _retry_kwargs(self, operation: str) -> dict:
        return {
            "retry": retry_if_not_exception_type(EmbeddingError),
            "stop": stop_after_attempt(self._max_attempts),
            "wait": wait_exponential_jitter(
                initial=self._initial_wait,
                max=self._max_wait,
                jitter=self._initial_wait,
            ),
            "before_sleep": lambda retry_state: logger.warning(
                f"{__name__}:{operation} - Retry {retry_state.attempt_number}/"
                f"{self._max_attempts} after {type(retry_state.outcome.exception()).__name__}"
            ),
            "reraise": True,
        }

    def _check(self, vectors: list[list[float]], expected_count: int) -> list[list[float]]:
        if len(vectors) != expected_count:
            raise EmbeddingError(
                f"Embedding model returned {len(vectors)} vectors for {expected_count} texts",
            )
        for vector in vectors:
            if len(vector) != self.dimension:
                raise EmbeddingError(
                    f"Embedding model returned {len(vector)} dimensions, expected {self.dimension}",
                )
        return vectors

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        """Embed documents with retries."""
        try:
            for attempt in Retrying(**self._retry_kwargs("embed_documents")):
                with attempt:
                    return self._check(self._inner.embed_documents(texts), len(texts))
        except EmbeddingError:
            raise
        except Exception as e:
            raise EmbeddingError(f"Embedding request failed: {e}") from e

    def embed_query(self, text: str) -> list[float]:
        """Embed a query with retries."""
        return self.embed_documents([text])[0]

    async def aembed_documents(self, texts: list[str]) -> list[list[float]]:
        """Async version of embed_documents."""
        try:
            async for attempt in AsyncRetrying(**self._retry_kwargs("aembed_documents")):
                with attempt:
                    return self._check(await self._inner.aembed_documents(texts), len(texts))
        except EmbeddingError:
            raise
        except Exception as e:
            raise EmbeddingError(f"Embedding request failed: {e}") from e

    async def aembed_query(self, text: str) -> list[float]:
        """Async version of embed_query."""
        try:
            async for attempt in AsyncRetrying(**self._retry_kwargs("aembed_query")):
                with attempt:
                    return self._check([await self._inner.aembed_query(text)], 1)[0]
        except EmbeddingError:
            raise
        except Exception as e:
            raise EmbeddingError(f"Embedding request failed: {e}") from e


def build_embeddings(
    vector_settings: VectorStoreSettings,
    ingestion_settings: IngestionSettings,
) -> FixedDimensionEmbeddings:
    """
    Create the production embeddings (Google Gemini) wrapped with retries.

    Args:
        vector_settings: Embedding model and dimension
        ingestion_settings: Retry attempts

    Returns:
        FixedDimensionEmbeddings: Ready-to-use embeddings
    """
    logger.info(
        f"{__name__}:build_embeddings - Creating GoogleGenerativeAIEmbeddings with "
        f"model={vector_settings.embedding_model}, dimension={vector_settings.embedding_dimension}"
    )
    return FixedDimensionEmbeddings(
        GoogleGenerativeAIEmbeddings(model=vector_settings.embedding_model),
        dimension=vector_settings.embedding_dimension,
        max_attempts=ingestion_settings.embedding_max_attempts,
    )
