"""
Reading session state.
An immutable snapshot of playback configuration, position and derived metrics.
"""

import math
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Optional, Tuple

from speedreader.conf import (
    DEFAULT_SPEED_WPM, DEFAULT_FONT_SIZE, DEFAULT_AVG_WORD_LENGTH,
    MIN_FONT_SIZE, MAX_FONT_SIZE
)
from speedreader.modules.text_processing import Word, WordTokenizer

from .timing import clamp_speed, next_ramp_speed


class SessionStatus(Enum):
    IDLE = auto()
    READING = auto()
    PAUSED = auto()
    COMPLETED = auto()


@dataclass(frozen=True)
class SessionState:
    """
    Snapshot of a reading session.

    Never mutated in place; every change produces a new instance, so a reader
    holding a reference always sees a consistent whole.
    """
    status: SessionStatus = SessionStatus.IDLE
    words: Tuple[Word, ...] = ()
    current_index: int = 0
    speed_wpm: int = DEFAULT_SPEED_WPM
    target_speed_wpm: int = DEFAULT_SPEED_WPM
    is_ramp_enabled: bool = False
    is_variable_timing_enabled: bool = False
    is_zen_mode_enabled: bool = False
    font_size: float = DEFAULT_FONT_SIZE
    avg_word_length: float = DEFAULT_AVG_WORD_LENGTH
    countdown_value: Optional[int] = None

    @property
    def total_words(self) -> int:
        return len(self.words)

    @property
    def current_word(self) -> Optional[Word]:
        if 0 <= self.current_index < len(self.words):
            return self.words[self.current_index]
        return None

    @property
    def progress(self) -> float:
        if self.total_words == 0:
            return 0.0
        return self.current_index / self.total_words

    @property
    def words_remaining(self) -> int:
        if self.total_words == 0:
            return 0
        return max(0, self.total_words - self.current_index - 1)

    @property
    def time_remaining_seconds(self) -> int:
        if self.speed_wpm <= 0:
            return 0
        return math.ceil(self.words_remaining * 60 / self.speed_wpm)

    @property
    def can_advance(self) -> bool:
        return self.current_index < self.total_words

    # Pure transitions. The engine applies these under its lock.

    def loaded(self, words) -> "SessionState":
        words = tuple(words)
        return replace(
            self,
            words=words,
            current_index=0,
            status=SessionStatus.IDLE,
            avg_word_length=WordTokenizer.average_word_length(words)
        )

    def started(self, ramp_start_wpm: int) -> "SessionState":
        speed = self.speed_wpm
        if self.is_ramp_enabled and self.status is SessionStatus.IDLE:
            speed = min(ramp_start_wpm, self.target_speed_wpm)
        return replace(self, status=SessionStatus.READING, speed_wpm=speed)

    def advanced(self) -> "SessionState":
        """Move to the next word, completing the session at the end of the stream."""
        if self.status is not SessionStatus.READING:
            return self
        next_index = min(self.current_index + 1, self.total_words)
        if next_index >= self.total_words:
            return replace(self, current_index=next_index, status=SessionStatus.COMPLETED)
        return replace(self, current_index=next_index)

    def completed(self) -> "SessionState":
        return replace(self, current_index=self.total_words, status=SessionStatus.COMPLETED)

    def ramped(self, step: int) -> "SessionState":
        """Apply one ramp tick; reaching the target pins the speed and disables ramping."""
        if not self.is_ramp_enabled:
            return self
        speed, finished = next_ramp_speed(self.speed_wpm, self.target_speed_wpm, step)
        if finished:
            return replace(self, speed_wpm=speed, is_ramp_enabled=False)
        return replace(self, speed_wpm=speed)

    def with_speed(self, wpm: int) -> "SessionState":
        wpm = clamp_speed(wpm)
        return replace(self, speed_wpm=wpm, target_speed_wpm=wpm, is_ramp_enabled=False)

    def with_font_size(self, size: float) -> "SessionState":
        return replace(self, font_size=max(MIN_FONT_SIZE, min(MAX_FONT_SIZE, float(size))))

    def to_dict(self) -> dict:
        word = self.current_word
        return {
            "status": self.status.name.lower(),
            "current_word": word.text if word else None,
            "fixation_index": word.fixation_index if word else None,
            "current_index": self.current_index,
            "total_words": self.total_words,
            "progress": f"{self.progress:.1%}",
            "speed_wpm": self.speed_wpm,
            "target_speed_wpm": self.target_speed_wpm,
            "ramp": self.is_ramp_enabled,
            "variable_timing": self.is_variable_timing_enabled,
            "zen_mode": self.is_zen_mode_enabled,
            "font_size": self.font_size,
            "time_remaining": f"{self.time_remaining_seconds}s",
            "countdown": self.countdown_value,
        }
