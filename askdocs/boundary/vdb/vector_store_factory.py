"""
Qdrant client factory.

Selects a remote Qdrant server when VECTOR_STORE_QDRANT_URL is set and an
in-process :memory: store otherwise (local development and tests).

Dependencies: qdrant_client, askdocs.configs
System role: Vector store client instantiation
"""

import logging

from qdrant_client import AsyncQdrantClient

from askdocs.configs.vector_store import VectorStoreSettings

logger = logging.getLogger(__name__)


def get_vector_client(settings: VectorStoreSettings) -> AsyncQdrantClient:
    """
    Create an async Qdrant client from configuration.

    Args:
        settings: Vector store settings

    Returns:
        AsyncQdrantClient: Remote or in-process client
    """
    if settings.qdrant_url:
        logger.info(f"{__name__}:get_vector_client - Connecting to Qdrant at {settings.qdrant_url}")
        return AsyncQdrantClient(
            url=settings.qdrant_url,
            api_key=settings.qdrant_api_key,
            timeout=settings.timeout_seconds,
        )

    logger.info(f"{__name__}:get_vector_client - Using in-process Qdrant (:memory:)")
    return AsyncQdrantClient(location=":memory:")
