"""
PDF extractor.
Delegates decoding to pypdf and only selects the requested page range.
"""

import io
import logging

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from speedreader.errors import MalformedDocument

from .abstract import ExtractorInterface, Source

logger = logging.getLogger(__name__)


class PdfExtractor(ExtractorInterface):
    """
    Page-range aware PDF text extractor.

    Usage:
        extractor = PdfExtractor(ExtractConfig(start_page=3, end_page=10))
        with open("paper.pdf", "rb") as f:
            text = extractor.extract(f)
    """

    @property
    def format_name(self) -> str:
        return "pdf"

    def page_range(self, page_count: int) -> range:
        """0-based page indices selected by the configured 1-based bounds."""
        first = self.config.start_page - 1 if self.config.start_page else 0
        last = min(self.config.end_page, page_count) if self.config.end_page else page_count
        return range(first, last)

    def extract(self, source: Source) -> str:
        data = self.as_stream(source).read()

        try:
            reader = PdfReader(io.BytesIO(data))
            pages = self.page_range(len(reader.pages))
            texts = [reader.pages[i].extract_text() or "" for i in pages]
        except PyPdfError as e:
            logger.error(f"PDF could not be read: {e}")
            raise MalformedDocument(f"Unreadable PDF: {e}") from e

        logger.info(f"Extracted {len(texts)} PDF page(s)")
        return "\n".join(texts)
