# abstractions/pdf_extractor.py

"""Abstract interface for PDF text extraction."""

from abc import ABC, abstractmethod
from typing import List

from ..models.types import ExtractedSegment


class PdfExtractor(ABC):
    """
    Turns raw PDF bytes into text segments with page metadata.

    Implementations return one segment per page that carries text, in page
    order, and raise ExtractionError when the payload cannot be read.
    """

    @abstractmethod
    async def extract(self, data: bytes) -> List[ExtractedSegment]:
        pass

    async def close(self) -> None:
        pass
