"""
EPUB extractor.
"""

from speedreader.modules.ebook_parsing import EpubParser

from .abstract import ExtractorInterface, Source


class EpubExtractor(ExtractorInterface):
    """Adapter exposing EpubParser through the extractor interface."""

    def __init__(self, config=None, parser=None):
        super().__init__(config)
        self.parser = parser or EpubParser()

    @property
    def format_name(self) -> str:
        return "epub"

    def extract(self, source: Source) -> str:
        return self.parser.extract_text(self.as_stream(source))
