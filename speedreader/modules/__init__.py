"""
speedreader modules package.
Tokenization and ebook structure parsing.
"""

from .text_processing import Word, WordTokenizer, parse_text, compute_fixation_index
from .ebook_parsing import EpubParser, HTMLCleaner, Chapter, EbookMetadata, ParseResult

__all__ = [
    "Word",
    "WordTokenizer",
    "parse_text",
    "compute_fixation_index",
    "EpubParser",
    "HTMLCleaner",
    "Chapter",
    "EbookMetadata",
    "ParseResult",
]
