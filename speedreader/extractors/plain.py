"""
Plain text extractor.
"""

import logging

from .abstract import ExtractorInterface, Source

logger = logging.getLogger(__name__)


class PlainTextExtractor(ExtractorInterface):
    """Decodes the input verbatim; no transformation is applied."""

    @property
    def format_name(self) -> str:
        return "txt"

    def extract(self, source: Source) -> str:
        if isinstance(source, str):
            return source

        data = self.as_stream(source).read()
        if isinstance(data, str):
            return data

        text = data.decode(self.config.encoding, errors="replace")
        logger.debug(f"Decoded {len(data):,} bytes of plain text")
        return text
