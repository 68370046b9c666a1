"""
Ingestion API endpoints.

Routes:
- POST /ingest/files - Upload .txt/.md/.pdf files (multipart)
- POST /ingest/text - Ingest pasted text
- POST /ingest/website - Ingest already scraped page content

Dependencies: askdocs.application.services.ingestion_service, askdocs.models.ingest
System role: Ingestion HTTP API
"""

import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from askdocs.api.deps import get_ingestion_service
from askdocs.api.routers.router_utils import handle_service_errors
from askdocs.application.services.ingestion_service import IngestionService
from askdocs.models.ingest import (
    IngestionReport,
    IngestResponse,
    RawInput,
    TextIngestRequest,
    WebsiteIngestRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ingest", tags=["ingest"])


def _warnings(report: IngestionReport) -> list[str]:
    return [f"{failure.source}: {failure.reason}" for failure in report.failures]


@router.post("/files", response_model=IngestResponse)
@handle_service_errors
async def ingest_files(
    session_id: str | None = Form(default=None),
    files: list[UploadFile] = File(default=[]),
    ingestion_service: IngestionService = Depends(get_ingestion_service),
) -> IngestResponse:
    """
    Upload and ingest files into the session's knowledge base.

    Files that are too large or cannot be parsed are skipped and reported as warnings.

    Raises:
        HTTPException(400): Session missing, no files, or no file could be processed
        HTTPException(503): Vector store unavailable
    """
    raw_inputs = [
        RawInput(data=await upload.read(), filename=upload.filename or "upload")
        for upload in files
    ]
    report = await ingestion_service.ingest_files(session_id, raw_inputs)

    if report.documents_processed == 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "No files could be processed", "warnings": _warnings(report)},
        )

    return IngestResponse(
        message=f"Successfully processed {report.documents_processed} file(s)",
        documents_processed=report.documents_processed,
        total_chunks=report.total_chunks,
        warnings=_warnings(report),
    )


@router.post("/text", response_model=IngestResponse)
@handle_service_errors
async def ingest_text(
    request: TextIngestRequest,
    ingestion_service: IngestionService = Depends(get_ingestion_service),
) -> IngestResponse:
    """Ingest pasted text into the session's knowledge base."""
    report = await ingestion_service.ingest_text(
        request.session_id,
        request.text_content,
        request.filename,
    )
    return IngestResponse(
        message="Text content processed successfully",
        documents_processed=report.documents_processed,
        total_chunks=report.total_chunks,
    )


@router.post("/website", response_model=IngestResponse)
@handle_service_errors
async def ingest_website(
    request: WebsiteIngestRequest,
    ingestion_service: IngestionService = Depends(get_ingestion_service),
) -> IngestResponse:
    """Ingest scraped website content into the session's knowledge base."""
    report = await ingestion_service.ingest_website(
        request.session_id,
        request.url,
        request.content,
        request.title,
    )
    return IngestResponse(
        message="Website content processed successfully",
        documents_processed=report.documents_processed,
        total_chunks=report.total_chunks,
    )
