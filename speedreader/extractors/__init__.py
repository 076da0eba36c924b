"""
Extractor module for speedreader.
Turns TXT, PDF and EPUB documents into raw text.
"""

import logging
from enum import Enum
from typing import Optional

from speedreader.errors import EmptyResult, InvalidConfiguration

from .abstract import ExtractorInterface, ExtractConfig, Source
from .plain import PlainTextExtractor
from .pdf import PdfExtractor
from .epub import EpubExtractor

__all__ = [
    "ExtractorInterface",
    "ExtractConfig",
    "PlainTextExtractor",
    "PdfExtractor",
    "EpubExtractor",
    "DocumentFormat",
    "detect_format",
    "get_extractor",
    "extract_text",
]

logger = logging.getLogger(__name__)


class DocumentFormat(Enum):
    TXT = "txt"
    PDF = "pdf"
    EPUB = "epub"


def detect_format(filename: Optional[str] = None, mime_type: Optional[str] = None) -> DocumentFormat:
    """
    Pick a document format from the declared MIME type, falling back to the extension.

    Anything that is neither PDF nor EPUB is treated as plain text.
    """
    mime = (mime_type or "").lower()
    name = (filename or "").lower()

    if "pdf" in mime or name.endswith(".pdf"):
        return DocumentFormat.PDF
    if "epub" in mime or name.endswith(".epub"):
        return DocumentFormat.EPUB
    return DocumentFormat.TXT


def get_extractor(fmt=DocumentFormat.TXT, config: Optional[ExtractConfig] = None) -> ExtractorInterface:
    """
    Factory function to get the extractor for a document format.

    Args:
        fmt: DocumentFormat or its string value ('txt', 'pdf', 'epub')
        config: Extraction settings

    Returns:
        ExtractorInterface implementation
    """
    try:
        fmt = DocumentFormat(fmt)
    except ValueError:
        raise InvalidConfiguration(f"Unknown document format: {fmt}")

    if fmt is DocumentFormat.PDF:
        return PdfExtractor(config)
    elif fmt is DocumentFormat.EPUB:
        return EpubExtractor(config)
    else:
        return PlainTextExtractor(config)


def extract_text(
    source: Source,
    filename: Optional[str] = None,
    mime_type: Optional[str] = None,
    start_page: Optional[int] = None,
    end_page: Optional[int] = None
) -> str:
    """
    Extract text from a document, detecting its format.

    Raises:
        MalformedDocument: the document could not be read
        EmptyResult: the document was read but contained no text
    """
    fmt = detect_format(filename, mime_type)
    extractor = get_extractor(fmt, ExtractConfig(start_page=start_page, end_page=end_page))

    logger.info(f"Extracting {filename or 'document'} as {fmt.value}")
    text = extractor.extract(source)

    if not text.strip():
        raise EmptyResult(f"No text extracted from {filename or 'document'}")
    return text
