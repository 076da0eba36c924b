"""
Abstract base class for document text extractors.
Defines the interface that every format adapter must follow.
"""

import io
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import BinaryIO, Optional, Union


@dataclass
class ExtractConfig:
    """Configuration for text extraction."""
    # PDF page range, 1-based inclusive. None or <= 0 means unbounded.
    start_page: Optional[int] = None
    end_page: Optional[int] = None

    # Text decoding
    encoding: str = "utf-8"

    def __post_init__(self):
        if self.start_page is not None and self.start_page <= 0:
            self.start_page = None
        if self.end_page is not None and self.end_page <= 0:
            self.end_page = None


Source = Union[bytes, str, BinaryIO]


class ExtractorInterface(ABC):
    """
    Abstract interface for document text extractors.

    Implementations turn a byte stream into raw text; they do not tokenize.
    """

    def __init__(self, config: Optional[ExtractConfig] = None):
        self.config = config or ExtractConfig()

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Short name of the handled format."""
        pass

    @abstractmethod
    def extract(self, source: Source) -> str:
        """
        Extract raw text from a document.

        Args:
            source: Document bytes, text, or a readable stream

        Returns:
            Extracted text (may be blank)

        Raises:
            MalformedDocument: if the document cannot be read
        """
        pass

    @staticmethod
    def as_stream(source: Source) -> BinaryIO:
        """Wrap raw bytes in a stream; streams are returned unchanged."""
        if isinstance(source, (bytes, bytearray)):
            return io.BytesIO(source)
        if isinstance(source, str):
            return io.BytesIO(source.encode("utf-8"))
        return source

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.config!r})"
