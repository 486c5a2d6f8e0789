# implementations/pypdf_extractor.py

"""
pypdf-based PDF text extraction.

Parsing is CPU-bound, so it runs in a worker thread to keep the event loop
free for other pipeline invocations.
"""

import asyncio
import io
import logging
from typing import List

from pypdf import PdfReader

from ..abstractions.pdf_extractor import PdfExtractor
from ..models.exceptions import ExtractionError
from ..models.types import ExtractedSegment


class PypdfExtractor(PdfExtractor):
    """
    Extract one text segment per page with pypdf.

    Pages without extractable text (scans, blank pages) are skipped; a page
    whose text extraction crashes is logged and skipped as well, as long as
    the document itself can be opened.
    """

    def _extract_sync(self, data: bytes) -> List[ExtractedSegment]:
        try:
            reader = PdfReader(io.BytesIO(data))
            total = len(reader.pages)
        except Exception as e:
            raise ExtractionError(f"Could not read PDF: {e}") from e

        segments: List[ExtractedSegment] = []
        for number, page in enumerate(reader.pages, start=1):
            try:
                text = page.extract_text() or ""
            except Exception as e:
                logging.warning(f"Text extraction failed on page {number}/{total}: {e}")
                continue
            text = text.replace("\r\n", "\n")
            if text.strip():
                segments.append(
                    ExtractedSegment(
                        text=text,
                        metadata={"page": number, "total_pages": total},
                    )
                )

        logging.info(f"Extracted text from {len(segments)}/{total} pages")
        return segments

    async def extract(self, data: bytes) -> List[ExtractedSegment]:
        if not data:
            raise ExtractionError("Empty PDF payload")
        return await asyncio.to_thread(self._extract_sync, data)
