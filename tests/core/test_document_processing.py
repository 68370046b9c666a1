"""Tests for the document processing stages.

Tests all components:
- Chunker (determinism, losslessness, numbering, blank input)
- DocumentLoader (text, markdown, unsupported and broken input)
- IngestionPipeline (chunk ids, metadata, zero-chunk inputs)
"""

from langchain_core.documents import Document
import pytest

from askdocs.core.document_processing.chunker import Chunker
from askdocs.core.document_processing.loaders import DocumentLoader
from askdocs.core.document_processing.pipeline import IngestionPipeline, chunk_id
from askdocs.core.exceptions import ParsingError
from askdocs.models.chunk import Provenance, SourceType
from askdocs.models.ingest import ContentType, RawInput


def _long_text() -> str:
    paragraphs = []
    for i in range(12):
        sentences = " ".join(
            f"Sentence {j} of paragraph {i} talks about topic {i * j}." for j in range(8)
        )
        paragraphs.append(sentences)
    return "\n\n".join(paragraphs)


# ============================================================================
# Chunker Tests
# ============================================================================


class TestChunker:
    """Test Chunker splitting behaviour."""

    def test_chunking_is_deterministic(self):
        text = _long_text()
        first = Chunker().chunk([Document(page_content=text, metadata={"source": "a.txt"})])
        second = Chunker().chunk([Document(page_content=text, metadata={"source": "a.txt"})])

        assert [c.page_content for c in first] == [c.page_content for c in second]
        assert [c.metadata for c in first] == [c.metadata for c in second]

    def test_chunks_are_lossless_slices_of_the_source(self):
        text = _long_text()
        chunks = Chunker(chunk_size=300, chunk_overlap=50).chunk([Document(page_content=text)])

        assert len(chunks) > 1
        covered = set()
        for chunk in chunks:
            start = chunk.metadata["start_index"]
            assert text[start:start + len(chunk.page_content)] == chunk.page_content
            covered.update(range(start, start + len(chunk.page_content)))

        uncovered = [i for i, ch in enumerate(text) if not ch.isspace() and i not in covered]
        assert uncovered == []

    def test_chunks_respect_size_limit(self):
        chunks = Chunker(chunk_size=200, chunk_overlap=20).chunk([Document(page_content=_long_text())])

        assert all(len(c.page_content) <= 200 for c in chunks)

    def test_indices_are_contiguous_across_pages(self):
        pages = [
            Document(page_content=_long_text(), metadata={"page": 1}),
            Document(page_content=_long_text(), metadata={"page": 2}),
        ]
        chunks = Chunker(chunk_size=400, chunk_overlap=40).chunk(pages)

        assert [c.metadata["chunk_index"] for c in chunks] == list(range(len(chunks)))
        assert {c.metadata["total_chunks"] for c in chunks} == {len(chunks)}
        assert {c.metadata["page"] for c in chunks} == {1, 2}

    def test_prefers_paragraph_boundaries(self):
        text = ("a" * 80) + "\n\n" + ("b" * 80)
        chunks = Chunker(chunk_size=100, chunk_overlap=0).chunk([Document(page_content=text)])

        assert [c.page_content for c in chunks] == ["a" * 80, "b" * 80]

    def test_blank_input_yields_no_chunks(self):
        assert Chunker().chunk([Document(page_content="   \n\n  ")]) == []

    def test_empty_document_list_yields_no_chunks(self):
        assert Chunker().chunk([]) == []


# ============================================================================
# Loader Tests
# ============================================================================


class TestDocumentLoader:
    """Test DocumentLoader."""

    def test_loads_plain_text_with_provenance(self):
        documents = DocumentLoader().load(
            RawInput(data=b"hello world", filename="notes.txt"),
            Provenance(source="notes.txt", source_type=SourceType.FILE),
        )

        assert len(documents) == 1
        assert documents[0].page_content == "hello world"
        assert documents[0].metadata["source"] == "notes.txt"
        assert documents[0].metadata["source_type"] == "file"
        assert documents[0].metadata["original_filename"] == "notes.txt"

    def test_infers_markdown_from_extension(self):
        raw = RawInput(data="# Title\n\nBody".encode("utf-8"), filename="README.MD")

        assert raw.resolved_type() == ContentType.MARKDOWN
        documents = DocumentLoader().load(raw, Provenance(source="README.MD", source_type=SourceType.FILE))
        assert documents[0].page_content.startswith("# Title")

    def test_declared_type_overrides_extension(self):
        raw = RawInput(data=b"plain", filename="page", content_type=ContentType.TEXT)

        documents = DocumentLoader().load(raw, Provenance(source="page", source_type=SourceType.TEXT))
        assert documents[0].page_content == "plain"

    def test_unsupported_type_raises_parsing_error(self):
        with pytest.raises(ParsingError) as exc_info:
            DocumentLoader().load(
                RawInput(data=b"\x00\x01", filename="image.png"),
                Provenance(source="image.png", source_type=SourceType.FILE),
            )
        assert exc_info.value.source == "image.png"

    def test_invalid_utf8_raises_parsing_error(self):
        with pytest.raises(ParsingError, match="UTF-8"):
            DocumentLoader().load(
                RawInput(data=b"\xff\xfe\xfa", filename="broken.txt"),
                Provenance(source="broken.txt", source_type=SourceType.FILE),
            )

    def test_corrupt_pdf_raises_parsing_error(self):
        with pytest.raises(ParsingError, match="PDF"):
            DocumentLoader().load(
                RawInput(data=b"this is not a pdf", filename="fake.pdf"),
                Provenance(source="fake.pdf", source_type=SourceType.FILE),
            )


# ============================================================================
# Pipeline Tests
# ============================================================================


class TestIngestionPipeline:
    """Test IngestionPipeline orchestration."""

    async def test_ingest_writes_chunks_to_session(self, pipeline, collection_manager):
        written = await pipeline.ingest(
            "session-1",
            RawInput(data=_long_text().encode("utf-8"), filename="long.txt"),
            Provenance(source="long.txt", source_type=SourceType.FILE),
        )

        assert written > 1
        handle = await collection_manager.resolve_namespace("session-1")
        assert handle is not None
        assert handle.points_count == written

    async def test_blank_input_writes_nothing(self, pipeline, collection_manager, qdrant_client):
        written = await pipeline.ingest(
            "session-1",
            RawInput(data=b"   ", filename="blank.txt"),
            Provenance(source="blank.txt", source_type=SourceType.TEXT),
        )

        assert written == 0
        name = collection_manager.namespace_name("session-1")
        assert not await qdrant_client.collection_exists(name)

    async def test_reingesting_identical_content_does_not_duplicate(self, pipeline, collection_manager):
        raw = RawInput(data=b"Paris is the capital of France.", filename="fr.txt")
        provenance = Provenance(source="fr.txt", source_type=SourceType.FILE)

        await pipeline.ingest("session-1", raw, provenance)
        await pipeline.ingest("session-1", raw, provenance)

        handle = await collection_manager.resolve_namespace("session-1")
        assert handle.points_count == 1

    async def test_parsing_error_propagates(self, pipeline):
        with pytest.raises(ParsingError):
            await pipeline.ingest(
                "session-1",
                RawInput(data=b"x", filename="data.xlsx"),
                Provenance(source="data.xlsx", source_type=SourceType.FILE),
            )

    def test_chunk_id_is_deterministic_and_session_scoped(self):
        first = chunk_id("s1", "a.txt", 0, "content")

        assert first == chunk_id("s1", "a.txt", 0, "content")
        assert first != chunk_id("s2", "a.txt", 0, "content")
        assert first != chunk_id("s1", "a.txt", 1, "content")

    async def test_uses_injected_loader(self, collection_manager, ingestion_settings):
        class StaticLoader:
            def load(self, raw_input, provenance):
                return [Document(page_content="static text", metadata={"page": 3})]

        pipeline = IngestionPipeline(collection_manager, ingestion_settings, loader=StaticLoader())
        written = await pipeline.ingest(
            "session-1",
            RawInput(data=b"ignored", filename="x.pdf"),
            Provenance(source="x.pdf", source_type=SourceType.FILE),
        )

        assert written == 1
        handle = await collection_manager.resolve_namespace("session-1")
        results = await collection_manager.search(handle, "static", k=1)
        assert results[0].chunk.metadata.page == 3
        assert results[0].chunk.metadata.original_filename is None
