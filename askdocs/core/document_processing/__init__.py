"""
Document processing: loading, chunking and the ingestion pipeline.
"""

from askdocs.core.document_processing.chunker import Chunker
from askdocs.core.document_processing.loaders import DocumentLoader
from askdocs.core.document_processing.pipeline import IngestionPipeline, chunk_id

__all__ = ["Chunker", "DocumentLoader", "IngestionPipeline", "chunk_id"]
