"""
Raw input loading.

Turns uploaded bytes (plain text, markdown or PDF) into LangChain Documents
carrying provenance metadata.

Dependencies: langchain_community.document_loaders, langchain_core
System role: First stage of document ingestion pipeline
"""

import logging
import os
import tempfile

from langchain_community.document_loaders import PyPDFLoader
from langchain_core.documents import Document

from askdocs.core.exceptions import ParsingError
from askdocs.models.chunk import Provenance
from askdocs.models.ingest import ContentType, RawInput

logger = logging.getLogger(__name__)


class DocumentLoader:
    """Load raw inputs into LangChain Documents."""

    def load(self, raw_input: RawInput, provenance: Provenance) -> list[Document]:
        """
        Load raw input bytes into Documents.

        Args:
            raw_input: Bytes plus declared or inferred type
            provenance: Source description copied into every Document

        Returns:
            list[Document]: One Document for text, one per page for PDF

        Raises:
            ParsingError: Unsupported type, undecodable text or unreadable PDF
        """
        content_type = raw_input.resolved_type()
        base_metadata = {
            "source": provenance.source,
            "source_type": provenance.source_type.value,
            "title": provenance.title,
            "domain": provenance.domain,
            "original_filename": raw_input.filename,
        }

        if content_type in (ContentType.TEXT, ContentType.MARKDOWN):
            return [Document(page_content=self._decode(raw_input), metadata=base_metadata)]
        if content_type == ContentType.PDF:
            return self._load_pdf(raw_input, base_metadata)

        raise ParsingError(
            f"Unsupported file type: {raw_input.filename}. Supported types are .txt, .md and .pdf",
            source=raw_input.filename,
        )

    def _decode(self, raw_input: RawInput) -> str:
        try:
            return raw_input.data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParsingError(
                "File is not valid UTF-8 text",
                source=raw_input.filename,
                content_type=raw_input.resolved_type().value,
            ) from e

    def _load_pdf(self, raw_input: RawInput, base_metadata: dict) -> list[Document]:
        # PyPDFLoader reads from a path
        fd, path = tempfile.mkstemp(suffix=".pdf")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(raw_input.data)
            pages = PyPDFLoader(path).load()
        except Exception as e:
            raise ParsingError(
                f"Failed to parse PDF: {e}",
                source=raw_input.filename,
                content_type=ContentType.PDF.value,
            ) from e
        finally:
            os.unlink(path)

        documents = []
        for page in pages:
            page_number = page.metadata.get("page")
            documents.append(
                Document(
                    page_content=page.page_content,
                    metadata={
                        **base_metadata,
                        "page": page_number + 1 if isinstance(page_number, int) else None,
                    },
                )
            )
        logger.info(
            f"{__name__}:load - Parsed PDF into {len(documents)} pages",
            extra={"original_filename": raw_input.filename},
        )
        return documents
