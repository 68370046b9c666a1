"""
Text chunking using RecursiveCharacterTextSplitter.

Splits loaded documents into overlapping chunks and numbers them across the
whole input, so chunk_index/total_chunks describe the item rather than a page.

Dependencies: langchain_text_splitters
System role: Second stage of document ingestion pipeline
"""

from langchain_core.documents import Document
from langchain_text_splitters import RecursiveCharacterTextSplitter

SEPARATORS = ["\n\n", "\n", ". ", " ", ""]


class Chunker:
    """Split documents into chunks using RecursiveCharacterTextSplitter."""

    def __init__(
        self,
        chunk_size: int = 1000,
        chunk_overlap: int = 200,
    ) -> None:
        """
        Initialize chunker with splitter configuration.

        Args:
            chunk_size: Maximum chunk size in characters
            chunk_overlap: Overlap between consecutive chunks
        """
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self._splitter = RecursiveCharacterTextSplitter(
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
            separators=SEPARATORS,
            add_start_index=True,
            length_function=len,
        )

    def chunk(self, documents: list[Document]) -> list[Document]:
        """
        Split documents into chunks.

        Blank chunks are dropped. Every returned chunk carries chunk_index,
        total_chunks and start_index (offset within its source document).

        Args:
            documents: LangChain Documents to split

        Returns:
            list[Document]: Chunked documents with preserved metadata, empty for blank input
        """
        pieces = [
            piece
            for piece in self._splitter.split_documents(documents)
            if piece.page_content.strip()
        ]
        total = len(pieces)
        for index, piece in enumerate(pieces):
            piece.metadata["chunk_index"] = index
            piece.metadata["total_chunks"] = total
        return pieces
