"""
Playback engine for RSVP sessions.
Owns the current SessionState and runs the advance and ramp workers.
"""

import logging
import threading
from dataclasses import dataclass, replace
from typing import Callable, Iterable, List, Optional

from speedreader.conf import (
    RAMP_INTERVAL_MS, RAMP_STEP_WPM, RAMP_START_WPM, DEMO_RAMP_TARGET_WPM
)
from speedreader.errors import InvalidConfiguration
from speedreader.modules.text_processing import Word, WordTokenizer

from .session import SessionState, SessionStatus
from .timing import calculate_word_duration_ms, clamp_speed

logger = logging.getLogger(__name__)

Listener = Callable[[SessionState], None]


@dataclass
class PlaybackConfig:
    """Configuration for the playback engine."""
    ramp_interval_ms: int = RAMP_INTERVAL_MS
    ramp_step_wpm: int = RAMP_STEP_WPM
    ramp_start_wpm: int = RAMP_START_WPM

    # Seconds close() waits for each worker thread
    join_timeout: float = 1.0

    def __post_init__(self):
        if self.ramp_interval_ms <= 0:
            raise InvalidConfiguration(f"ramp_interval_ms must be positive, got {self.ramp_interval_ms}")
        if self.ramp_step_wpm <= 0:
            raise InvalidConfiguration(f"ramp_step_wpm must be positive, got {self.ramp_step_wpm}")
        self.ramp_start_wpm = clamp_speed(self.ramp_start_wpm)


class PlaybackEngine:
    """
    State machine driving an RSVP reading session.

    States: IDLE -> READING <-> PAUSED, READING -> COMPLETED.

    Every change is a pure transform of the current snapshot applied under a
    single lock. Background workers hold a cancellation token and a transform
    is refused once its token is set, so a cancelled worker never writes.

    Usage:
        engine = PlaybackEngine()
        engine.subscribe(lambda state: render(state.current_word))
        engine.load("Some text to read")
        engine.set_speed(350)
        engine.start()
        ...
        engine.close()
    """

    def __init__(self, config: Optional[PlaybackConfig] = None, state: Optional[SessionState] = None):
        self.config = config or PlaybackConfig()
        self._state = state or SessionState()
        self._lock = threading.RLock()
        self._listeners: List[Listener] = []
        self._cancel_event: Optional[threading.Event] = None
        self._workers: List[threading.Thread] = []

    @property
    def state(self) -> SessionState:
        """Current snapshot."""
        return self._state

    @property
    def is_running(self) -> bool:
        return any(worker.is_alive() for worker in self._workers)

    def subscribe(self, callback: Listener) -> Callable[[], None]:
        """
        Register a callback receiving every new snapshot.

        Callbacks may run on worker threads.

        Returns:
            Function removing the callback
        """
        with self._lock:
            self._listeners.append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return unsubscribe

    # Commands

    def load(self, text: str) -> SessionState:
        """Tokenize text and reset the session to its first word."""
        return self.load_words(WordTokenizer.parse(text))

    def load_words(self, words: Iterable[Word]) -> SessionState:
        words = tuple(words)
        state = self._update(lambda s: s.loaded(words), cancel=True)
        logger.info(f"Loaded {state.total_words:,} words (avg length {state.avg_word_length:.2f})")
        return state

    def start(self):
        """Begin or resume playback. No-op when there is nothing left to read."""
        with self._lock:
            if not self._state.can_advance:
                logger.debug("Start ignored: no words left to read")
                return
            self._cancel_workers()
            token = threading.Event()
            self._cancel_event = token
            state = self._commit(self._state.started(self.config.ramp_start_wpm))

        self._notify(state)
        logger.info(f"Reading from word {state.current_index} at {state.speed_wpm} WPM")

        self._spawn(self._advance_loop, token, "speedreader-advance")
        if state.is_ramp_enabled:
            self._spawn(self._ramp_loop, token, "speedreader-ramp")

    def pause(self):
        """Pause playback; the pending word advance is discarded."""
        def transform(s: SessionState) -> SessionState:
            if s.status is SessionStatus.READING:
                return replace(s, status=SessionStatus.PAUSED)
            return s

        state = self._update(transform, cancel=True)
        logger.info(f"Paused at word {state.current_index}")

    def stop(self):
        """Stop playback and rewind to the first word."""
        self._update(lambda s: replace(s, status=SessionStatus.IDLE, current_index=0), cancel=True)
        logger.info("Session stopped")

    def set_speed(self, wpm: int):
        """Set an explicit speed, overriding any ramp in progress."""
        self._update(lambda s: s.with_speed(wpm))

    def adjust_speed(self, delta: int):
        self._update(lambda s: s.with_speed(s.target_speed_wpm + delta))

    def set_font_size(self, size: float):
        self._update(lambda s: s.with_font_size(size))

    def toggle_variable_timing(self, enabled: bool):
        self._update(lambda s: replace(s, is_variable_timing_enabled=bool(enabled)))

    def toggle_zen_mode(self, enabled: bool):
        self._update(lambda s: replace(s, is_zen_mode_enabled=bool(enabled)))

    def toggle_ramp(self, enabled: bool):
        self._update(lambda s: replace(s, is_ramp_enabled=bool(enabled)))

    def set_ramp_target(self, enabled: bool, target_wpm: int):
        """Configure ramping. Takes effect on the next start()."""
        self._update(lambda s: replace(
            s, is_ramp_enabled=bool(enabled), target_speed_wpm=clamp_speed(target_wpm)
        ))

    def hold_current_speed(self):
        """Stop further acceleration while keeping the current speed."""
        self._update(lambda s: replace(s, is_ramp_enabled=False, target_speed_wpm=s.speed_wpm))

    def set_countdown(self, value: Optional[int]):
        """Store a pre-roll countdown value for display. The engine does not schedule it."""
        self._update(lambda s: replace(s, countdown_value=value))

    def configure_demo_defaults(self):
        self.set_ramp_target(True, DEMO_RAMP_TARGET_WPM)
        self.toggle_variable_timing(True)

    def close(self):
        """Cancel background work and wait for the workers to exit."""
        with self._lock:
            self._cancel_workers()
            workers = list(self._workers)

        current = threading.current_thread()
        for worker in workers:
            if worker is not current:
                worker.join(self.config.join_timeout)
        logger.debug("Playback engine closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    # Internals

    def _update(
        self,
        transform: Callable[[SessionState], SessionState],
        token: Optional[threading.Event] = None,
        cancel: bool = False
    ) -> Optional[SessionState]:
        """
        Apply a snapshot transform atomically.

        Returns:
            The resulting snapshot, or None if token was already cancelled
        """
        with self._lock:
            if token is not None and token.is_set():
                return None
            if cancel:
                self._cancel_workers()
            previous = self._state
            state = self._commit(transform(previous))

        if state is not previous:
            self._notify(state)
        return state

    def _commit(self, state: SessionState) -> SessionState:
        self._state = state
        return state

    def _cancel_workers(self):
        if self._cancel_event is not None:
            self._cancel_event.set()
            self._cancel_event = None
        self._workers = [worker for worker in self._workers if worker.is_alive()]

    def _finish(self, token: threading.Event):
        with self._lock:
            token.set()
            if self._cancel_event is token:
                self._cancel_event = None

    def _spawn(self, target: Callable[[threading.Event], None], token: threading.Event, name: str):
        worker = threading.Thread(target=target, args=(token,), name=name, daemon=True)
        with self._lock:
            worker.start()
            self._workers.append(worker)

    def _notify(self, state: SessionState):
        with self._lock:
            listeners = list(self._listeners)
        for callback in listeners:
            try:
                callback(state)
            except Exception:
                logger.exception("State listener failed")

    def _advance_loop(self, token: threading.Event):
        """Show each word for its computed duration, then move on."""
        while not token.is_set():
            state = self._state
            if state.status is not SessionStatus.READING:
                return

            word = state.current_word
            if word is None:
                self._update(
                    lambda s: s.completed() if s.status is SessionStatus.READING else s,
                    token
                )
                self._finish(token)
                return

            duration_ms = calculate_word_duration_ms(
                word_length=len(word.text),
                avg_word_length=state.avg_word_length,
                speed_wpm=state.speed_wpm,
                variable_timing=state.is_variable_timing_enabled
            )

            if token.wait(duration_ms / 1000):
                return

            state = self._update(SessionState.advanced, token)
            if state is None:
                return
            if state.status is SessionStatus.COMPLETED:
                logger.info(f"Session completed after {state.total_words:,} words")
                self._finish(token)
                return
            if state.status is not SessionStatus.READING:
                return

    def _ramp_loop(self, token: threading.Event):
        """Raise the speed every ramp interval until the target is reached."""
        interval = self.config.ramp_interval_ms / 1000
        step = self.config.ramp_step_wpm

        while not token.wait(interval):
            state = self._update(
                lambda s: s.ramped(step) if s.status is SessionStatus.READING else s,
                token
            )
            if state is None or state.status is not SessionStatus.READING:
                return
            if not state.is_ramp_enabled:
                logger.info(f"Ramp finished at {state.speed_wpm} WPM")
                return
