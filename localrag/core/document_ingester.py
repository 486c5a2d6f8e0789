# core/document_ingester.py

"""
INGEST stage: Document processing and indexing pipeline.

This module handles the complete ingestion workflow:
1. Extract text segments (one per page) from raw PDF bytes
2. Wrap each segment in a Document with page provenance
3. Split every Document into overlapping chunks
4. Embed and append all chunks to the vector index in one all-or-nothing batch
"""

import logging
import time
from typing import List, Optional, Sequence
from ..abstractions.pdf_extractor import PdfExtractor
from ..abstractions.vector_store_provider import VectorStoreProvider
from ..models import (
    Chunk,
    ChunkingConfig,
    Document,
    ExtractedSegment,
    IngestionError,
    IngestionResult,
)
from ..utils import chunk_document


class DocumentIngester:
    """
    INGEST stage: Process and store documents in the vector index.

    The ingestion pipeline follows these steps:
    1. EXTRACT: Raw bytes -> page segments (see PypdfExtractor)
    2. SHAPE: Segments -> Documents with ids "{name}-p{page}"
    3. CHUNK: Split each Document with the configured ChunkingConfig
    4. INDEX: Embed and append through the VectorStoreProvider

    Dependencies:
    - PdfExtractor: For turning PDF bytes into text
    - VectorStoreProvider: For embedding and storing chunks

    Example:
        >>> ingester = DocumentIngester(extractor, index)
        >>> result = await ingester.ingest_pdf(pdf_bytes, name="handbook")
        >>> print(result)
        Ingestion succeeded: 12 documents processed, 40 chunks created, 40 chunks indexed in 3.10s.
    """

    def __init__(
        self,
        extractor: PdfExtractor,
        index: VectorStoreProvider,
        chunking_config: Optional[ChunkingConfig] = None,
    ):
        """
        Initialize the document ingester.

        Args:
            extractor: PDF extraction capability
            index: Vector index receiving the chunks
            chunking_config: Chunk size / overlap (default: ChunkingConfig())
        """
        self.extractor = extractor
        self.index = index
        self.chunking_config = chunking_config or ChunkingConfig()

    @staticmethod
    def to_documents(segments: Sequence[ExtractedSegment], name: str) -> List[Document]:
        documents = []
        for position, segment in enumerate(segments, start=1):
            page = segment.metadata.get("page", position)
            documents.append(
                Document(
                    id=f"{name}-p{page}",
                    text=segment.text,
                    metadata={**segment.metadata, "source": name},
                )
            )
        return documents

    async def ingest_pdf(self, data: bytes, name: str = "document") -> IngestionResult:
        """
        EXTRACT -> CHUNK -> INDEX for one PDF.

        Raises:
            ExtractionError: If the PDF cannot be read at all

        Returns:
            IngestionResult; success=False when no text could be extracted or
            the index rejected the batch (the index is then unchanged)
        """
        start_time = time.time()
        segments = await self.extractor.extract(data)
        if not segments:
            return IngestionResult(
                success=False,
                errors=["No text could be extracted from the document."],
                duration_seconds=time.time() - start_time,
            )
        documents = self.to_documents(segments, name)
        return await self.ingest_documents(documents, started_at=start_time)

    async def ingest_text(self, text: str, name: str = "document") -> IngestionResult:
        """Index already-extracted text as a single Document."""
        return await self.ingest_documents([Document(id=name, text=text, metadata={"source": name})])

    async def ingest_documents(
        self,
        documents: Sequence[Document],
        *,
        started_at: Optional[float] = None,
    ) -> IngestionResult:
        """
        Chunk and index documents.

        Returns:
            IngestionResult with success status, counts, errors, and duration
        """
        start_time = started_at or time.time()

        all_chunks: List[Chunk] = []
        for document in documents:
            all_chunks.extend(chunk_document(document, self.chunking_config))

        logging.info(
            f"Split {len(documents)} documents into {len(all_chunks)} chunks"
        )

        if not all_chunks:
            return IngestionResult(
                success=False,
                documents_processed=len(documents),
                errors=["No chunks generated from input documents. Check text extraction."],
                duration_seconds=time.time() - start_time,
            )

        try:
            indexed = await self.index.add_documents(all_chunks)
        except IngestionError as e:
            logging.error(f"Indexing failed: {e}")
            return IngestionResult(
                success=False,
                documents_processed=len(documents),
                chunks_created=len(all_chunks),
                errors=[str(e)],
                duration_seconds=time.time() - start_time,
            )

        return IngestionResult(
            success=True,
            documents_processed=len(documents),
            chunks_created=len(all_chunks),
            chunks_indexed=indexed,
            duration_seconds=time.time() - start_time,
        )
