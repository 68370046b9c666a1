"""
Ingestion service orchestrator.

Validates caller input and feeds uploaded files, pasted text and scraped
pages through the ingestion pipeline. File batches are processed item by
item: a bad file is reported and skipped, the rest still go in.

Dependencies: askdocs.core.document_processing
System role: Ingestion use case orchestration
"""

import logging
import time
from urllib.parse import urlparse

from askdocs.application.services.validation import require_text
from askdocs.core.document_processing.pipeline import IngestionPipeline
from askdocs.core.exceptions import ClientInputError, DocumentProcessingError
from askdocs.models.chunk import Provenance, SourceType
from askdocs.models.ingest import (
    ContentType,
    IngestionFailure,
    IngestionReport,
    RawInput,
)

logger = logging.getLogger(__name__)


class IngestionService:
    """Ingestion service orchestrator."""

    def __init__(self, pipeline: IngestionPipeline, max_file_size_bytes: int = 5 * 1024 * 1024) -> None:
        """
        Initialize ingestion service.

        Args:
            pipeline: Load/chunk/write pipeline
            max_file_size_bytes: Per-file upload cap
        """
        self.pipeline = pipeline
        self.max_file_size_bytes = max_file_size_bytes

    async def ingest_files(self, session_id: str | None, files: list[RawInput]) -> IngestionReport:
        """
        Ingest uploaded files one by one.

        Args:
            session_id: Caller session token
            files: Uploaded files

        Returns:
            IngestionReport: Counts plus one failure entry per skipped file

        Raises:
            ClientInputError: Session missing or no files supplied
            BackingStoreUnavailable: Qdrant unreachable (aborts the whole batch)
        """
        session_id = require_text(session_id, "session_id", "Session ID")
        if not files:
            raise ClientInputError("No files uploaded", field="files")

        report = IngestionReport()
        for raw_input in files:
            if len(raw_input.data) > self.max_file_size_bytes:
                limit_mb = self.max_file_size_bytes / (1024 * 1024)
                report.failures.append(
                    IngestionFailure(
                        source=raw_input.filename,
                        reason=f"File exceeds the {limit_mb:g}MB size limit",
                    )
                )
                continue

            try:
                written = await self.pipeline.ingest(
                    session_id,
                    raw_input,
                    Provenance(source=raw_input.filename, source_type=SourceType.FILE),
                )
            except DocumentProcessingError as e:
                logger.warning(
                    f"{__name__}:ingest_files - Skipping file: {e.message}",
                    extra={"original_filename": raw_input.filename},
                )
                report.failures.append(IngestionFailure(source=raw_input.filename, reason=e.message))
                continue

            report.documents_processed += 1
            report.total_chunks += written

        logger.info(
            f"{__name__}:ingest_files - Processed {report.documents_processed}/{len(files)} files",
            extra={"total_chunks": report.total_chunks},
        )
        return report

    async def ingest_text(
        self,
        session_id: str | None,
        text_content: str | None,
        filename: str | None = None,
    ) -> IngestionReport:
        """
        Ingest pasted text.

        Args:
            session_id: Caller session token
            text_content: Text to ingest
            filename: Display name (defaults to text_<epoch-ms>.txt)

        Returns:
            IngestionReport: One processed document and its chunk count
        """
        session_id = require_text(session_id, "session_id", "Session ID")
        text_content = require_text(text_content, "text_content", "Text content")
        source = (filename or "").strip() or f"text_{int(time.time() * 1000)}.txt"

        written = await self.pipeline.ingest(
            session_id,
            RawInput(data=text_content.encode("utf-8"), filename=source, content_type=ContentType.TEXT),
            Provenance(source=source, source_type=SourceType.TEXT),
        )
        return IngestionReport(documents_processed=1, total_chunks=written)

    async def ingest_website(
        self,
        session_id: str | None,
        url: str | None,
        content: str | None,
        title: str | None = None,
    ) -> IngestionReport:
        """
        Ingest the text of an already scraped web page.

        Args:
            session_id: Caller session token
            url: Page URL, used as the chunk source
            content: Cleaned page text
            title: Page title

        Returns:
            IngestionReport: One processed document and its chunk count
        """
        session_id = require_text(session_id, "session_id", "Session ID")
        url = require_text(url, "url", "URL")
        content = require_text(content, "content", "Content")

        written = await self.pipeline.ingest(
            session_id,
            RawInput(data=content.encode("utf-8"), filename=url, content_type=ContentType.TEXT),
            Provenance(
                source=url,
                source_type=SourceType.WEBSITE,
                title=title,
                domain=urlparse(url).netloc or None,
            ),
        )
        return IngestionReport(documents_processed=1, total_chunks=written)
