"""
Playback module for speedreader.
Session state, timing rules and the RSVP playback engine.
"""

from .session import SessionState, SessionStatus
from .timing import calculate_word_duration_ms, next_ramp_speed, clamp_speed
from .engine import PlaybackEngine, PlaybackConfig

__all__ = [
    "SessionState",
    "SessionStatus",
    "calculate_word_duration_ms",
    "next_ramp_speed",
    "clamp_speed",
    "PlaybackEngine",
    "PlaybackConfig",
]
