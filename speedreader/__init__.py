"""
speedreader - RSVP speed reading for text, PDF and EPUB documents.
"""

from speedreader.conf import prog_version as __version__, configure_logging
from speedreader.errors import SpeedReaderError, MalformedDocument, EmptyResult, InvalidConfiguration
from speedreader.modules import Word, WordTokenizer, EpubParser
from speedreader.extractors import DocumentFormat, detect_format, extract_text, get_extractor
from speedreader.playback import PlaybackEngine, PlaybackConfig, SessionState, SessionStatus
from speedreader.pipeline import ReadingPipeline, LoadConfig, load_document

__all__ = [
    "__version__",
    "configure_logging",
    "SpeedReaderError",
    "MalformedDocument",
    "EmptyResult",
    "InvalidConfiguration",
    "Word",
    "WordTokenizer",
    "EpubParser",
    "DocumentFormat",
    "detect_format",
    "extract_text",
    "get_extractor",
    "PlaybackEngine",
    "PlaybackConfig",
    "SessionState",
    "SessionStatus",
    "ReadingPipeline",
    "LoadConfig",
    "load_document",
]
