"""
Timing rules for RSVP playback.
"""

from speedreader.conf import (
    DEFAULT_AVG_WORD_LENGTH, FALLBACK_WORD_DURATION_MS,
    VARIABLE_TIMING_MIN_MULTIPLIER, VARIABLE_TIMING_MAX_MULTIPLIER,
    MIN_SPEED_WPM, MAX_SPEED_WPM
)


def clamp_speed(wpm: int) -> int:
    return max(MIN_SPEED_WPM, min(MAX_SPEED_WPM, int(wpm)))


def calculate_word_duration_ms(
    word_length: int,
    avg_word_length: float,
    speed_wpm: int,
    variable_timing: bool
) -> int:
    """
    Milliseconds a word stays on screen.

    Args:
        word_length: Length of the displayed token
        avg_word_length: Mean token length of the document
        speed_wpm: Current speed
        variable_timing: Scale the duration by relative word length

    Returns:
        Duration in whole milliseconds (truncated)
    """
    if speed_wpm <= 0:
        return FALLBACK_WORD_DURATION_MS

    base_ms = 60000 / speed_wpm
    if not variable_timing:
        return int(base_ms)

    avg = avg_word_length if avg_word_length > 0 else DEFAULT_AVG_WORD_LENGTH
    multiplier = word_length / avg
    multiplier = max(VARIABLE_TIMING_MIN_MULTIPLIER, min(VARIABLE_TIMING_MAX_MULTIPLIER, multiplier))

    return int(base_ms * multiplier)


def next_ramp_speed(speed_wpm: int, target_wpm: int, step: int):
    """
    Speed after one ramp tick.

    Returns:
        (new_speed, finished). The speed never overshoots the target;
        finished is True once the target is reached.
    """
    new_speed = speed_wpm + step
    if new_speed >= target_wpm:
        return target_wpm, True
    return new_speed, False
