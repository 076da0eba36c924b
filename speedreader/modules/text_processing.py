"""
Text processing module for speedreader.
Splits raw text into display tokens and computes each token's fixation point.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence

from speedreader.conf import DEFAULT_AVG_WORD_LENGTH

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Word:
    """
    A single token shown in the RSVP view.

    Attributes:
        text: The token exactly as split from the source, punctuation included.
        fixation_index: 0-based offset into text of the letter to highlight.
    """
    text: str
    fixation_index: int

    def __len__(self) -> int:
        return len(self.text)

    def __str__(self) -> str:
        return self.text

    @property
    def before(self) -> str:
        return self.text[:self.fixation_index]

    @property
    def focus(self) -> str:
        return self.text[self.fixation_index:self.fixation_index + 1]

    @property
    def after(self) -> str:
        return self.text[self.fixation_index + 1:]


class WordTokenizer:
    """Whitespace tokenizer producing Word tokens for RSVP playback."""

    @classmethod
    def compute_fixation_index(cls, token: str) -> int:
        """
        Find the offset of the center letter of a token.

        Only alphabetic characters are counted, then the middle one is mapped
        back to its offset in the original token, so leading punctuation shifts
        the fixation point. Tokens without letters fixate on index 0.
        """
        alpha_positions = [i for i, char in enumerate(token) if char.isalpha()]
        if not alpha_positions:
            return 0
        return alpha_positions[len(alpha_positions) // 2]

    @classmethod
    def parse(cls, text: str) -> List[Word]:
        """Split text on runs of whitespace into Word tokens."""
        if not text or not text.strip():
            return []

        words = [Word(token, cls.compute_fixation_index(token)) for token in text.split()]
        logger.debug(f"Tokenized {len(text):,} chars into {len(words):,} words")
        return words

    @classmethod
    def average_word_length(cls, words: Sequence[Word]) -> float:
        """Mean character length of the tokens, or the default when there are none."""
        if not words:
            return DEFAULT_AVG_WORD_LENGTH
        return sum(len(word.text) for word in words) / len(words)


def parse_text(text: str) -> List[Word]:
    return WordTokenizer.parse(text)


def compute_fixation_index(token: str) -> int:
    return WordTokenizer.compute_fixation_index(token)
