import threading
import time

import pytest

from conftest import wait_for
from speedreader.errors import InvalidConfiguration
from speedreader.playback import PlaybackConfig, PlaybackEngine, SessionStatus

LONG_TEXT = " ".join(f"word{i}" for i in range(200))


def test_start_on_empty_document_is_noop(fast_engine):
    fast_engine.start()
    assert fast_engine.state.status is SessionStatus.IDLE
    assert not fast_engine.is_running


def test_plays_to_completion(fast_engine):
    seen = []
    fast_engine.subscribe(seen.append)
    fast_engine.load("alpha beta gamma")
    fast_engine.set_speed(1000)
    fast_engine.start()

    state = wait_for(fast_engine, lambda s: s.status is SessionStatus.COMPLETED)

    assert state.current_index == 3
    assert state.current_word is None
    indices = [s.current_index for s in seen]
    assert indices == sorted(indices)
    for s in seen:
        assert 0 <= s.current_index <= s.total_words
        if s.status is SessionStatus.COMPLETED:
            assert s.current_index == s.total_words


def test_start_after_completion_is_noop(fast_engine):
    fast_engine.load("one")
    fast_engine.set_speed(1000)
    fast_engine.start()
    wait_for(fast_engine, lambda s: s.status is SessionStatus.COMPLETED)

    fast_engine.start()
    assert fast_engine.state.status is SessionStatus.COMPLETED


def test_pause_discards_pending_advance(fast_engine):
    fast_engine.load(LONG_TEXT)
    fast_engine.set_speed(1000)
    fast_engine.start()
    wait_for(fast_engine, lambda s: s.current_index >= 2)

    fast_engine.pause()
    paused_at = fast_engine.state.current_index
    assert fast_engine.state.status is SessionStatus.PAUSED

    time.sleep(0.3)
    assert fast_engine.state.current_index == paused_at
    assert fast_engine.state.status is SessionStatus.PAUSED


def test_pause_stops_ramp(fast_engine):
    fast_engine.load(LONG_TEXT)
    fast_engine.set_ramp_target(True, 1000)
    fast_engine.start()
    wait_for(fast_engine, lambda s: s.speed_wpm >= 130)

    fast_engine.pause()
    paused_speed = fast_engine.state.speed_wpm
    time.sleep(0.2)

    assert fast_engine.state.speed_wpm == paused_speed
    assert fast_engine.state.is_ramp_enabled
    assert fast_engine.state.status is SessionStatus.PAUSED


def test_speed_change_applies_from_next_word(fast_engine):
    fast_engine.load("slow word here")
    fast_engine.set_speed(60)
    fast_engine.start()
    fast_engine.set_speed(1000)

    # First word was scheduled for a full second at 60 WPM
    time.sleep(0.2)
    assert fast_engine.state.current_index == 0
    assert fast_engine.state.speed_wpm == 1000

    wait_for(fast_engine, lambda s: s.status is SessionStatus.COMPLETED)


def test_resume_after_pause_continues(fast_engine):
    fast_engine.load(LONG_TEXT)
    fast_engine.set_speed(1000)
    fast_engine.start()
    wait_for(fast_engine, lambda s: s.current_index >= 1)
    fast_engine.pause()
    paused_at = fast_engine.state.current_index

    fast_engine.start()
    assert fast_engine.state.status is SessionStatus.READING
    wait_for(fast_engine, lambda s: s.current_index > paused_at)


def test_pause_when_idle_is_noop(fast_engine):
    fast_engine.load("a b c")
    fast_engine.pause()
    assert fast_engine.state.status is SessionStatus.IDLE


def test_stop_then_start_restarts_from_beginning(fast_engine):
    fast_engine.load(LONG_TEXT)
    fast_engine.set_speed(1000)
    fast_engine.start()
    wait_for(fast_engine, lambda s: s.current_index >= 3)

    fast_engine.stop()
    assert fast_engine.state.status is SessionStatus.IDLE
    assert fast_engine.state.current_index == 0

    fast_engine.set_speed(60)
    fast_engine.start()
    assert fast_engine.state.status is SessionStatus.READING
    assert fast_engine.state.current_index == 0


def test_load_cancels_running_session(fast_engine):
    fast_engine.load(LONG_TEXT)
    fast_engine.set_speed(1000)
    fast_engine.start()
    wait_for(fast_engine, lambda s: s.current_index >= 1)

    fast_engine.load("fresh text here")
    time.sleep(0.3)

    state = fast_engine.state
    assert state.status is SessionStatus.IDLE
    assert state.current_index == 0
    assert [w.text for w in state.words] == ["fresh", "text", "here"]


def test_ramp_accelerates_to_target(fast_engine):
    fast_engine.load(LONG_TEXT)
    fast_engine.set_ramp_target(True, 160)
    speeds = []
    fast_engine.subscribe(lambda s: speeds.append(s.speed_wpm))
    fast_engine.start()

    state = wait_for(fast_engine, lambda s: not s.is_ramp_enabled)

    assert state.speed_wpm == 160
    assert state.target_speed_wpm == 160
    ramp_speeds = sorted(set(speeds))
    assert ramp_speeds == [100, 115, 130, 145, 160]


def test_ramp_start_never_exceeds_target(fast_engine):
    fast_engine.load(LONG_TEXT)
    fast_engine.set_ramp_target(True, 60)
    fast_engine.start()
    assert fast_engine.state.speed_wpm == 60


def test_set_speed_overrides_ramp(fast_engine):
    fast_engine.load(LONG_TEXT)
    fast_engine.set_ramp_target(True, 1000)
    fast_engine.start()
    fast_engine.set_speed(250)

    time.sleep(0.2)
    state = fast_engine.state
    assert state.speed_wpm == 250
    assert state.target_speed_wpm == 250
    assert not state.is_ramp_enabled


def test_hold_current_speed_stops_ramp(fast_engine):
    fast_engine.load(LONG_TEXT)
    fast_engine.set_ramp_target(True, 1000)
    fast_engine.start()
    wait_for(fast_engine, lambda s: s.speed_wpm >= 130)

    fast_engine.hold_current_speed()
    held = fast_engine.state.speed_wpm
    time.sleep(0.2)

    assert fast_engine.state.speed_wpm == held
    assert fast_engine.state.target_speed_wpm == held
    assert not fast_engine.state.is_ramp_enabled


def test_set_ramp_target_does_not_start_playback():
    engine = PlaybackEngine()
    engine.load("a b c")
    engine.set_ramp_target(True, 300)

    assert engine.state.is_ramp_enabled
    assert engine.state.target_speed_wpm == 300
    assert engine.state.status is SessionStatus.IDLE
    assert not engine.is_running


def test_speed_and_font_commands_clamp():
    engine = PlaybackEngine()
    engine.set_speed(5000)
    assert engine.state.speed_wpm == 1000

    engine.adjust_speed(-50)
    assert engine.state.speed_wpm == 950
    assert engine.state.target_speed_wpm == 950

    engine.adjust_speed(-5000)
    assert engine.state.speed_wpm == 1

    engine.set_font_size(10)
    assert engine.state.font_size == 20.0
    engine.set_font_size(72.5)
    assert engine.state.font_size == 72.5


def test_toggles_are_independent():
    engine = PlaybackEngine()
    engine.toggle_variable_timing(True)
    engine.toggle_zen_mode(True)
    state = engine.state

    assert state.is_variable_timing_enabled
    assert state.is_zen_mode_enabled
    assert not state.is_ramp_enabled
    assert state.speed_wpm == 200

    engine.toggle_ramp(True)
    assert engine.state.is_ramp_enabled
    engine.toggle_zen_mode(False)
    assert not engine.state.is_zen_mode_enabled


def test_countdown_hook():
    engine = PlaybackEngine()
    engine.set_countdown(3)
    assert engine.state.countdown_value == 3
    engine.set_countdown(None)
    assert engine.state.countdown_value is None


def test_demo_defaults():
    engine = PlaybackEngine()
    engine.configure_demo_defaults()
    assert engine.state.is_ramp_enabled
    assert engine.state.target_speed_wpm == 300
    assert engine.state.is_variable_timing_enabled


def test_unsubscribe_stops_notifications():
    engine = PlaybackEngine()
    seen = []
    unsubscribe = engine.subscribe(seen.append)

    engine.set_speed(300)
    unsubscribe()
    engine.set_speed(400)

    assert [s.speed_wpm for s in seen] == [300]


def test_failing_listener_does_not_break_engine():
    engine = PlaybackEngine()
    seen = []

    def broken(state):
        raise RuntimeError("boom")

    engine.subscribe(broken)
    engine.subscribe(seen.append)
    engine.set_speed(321)

    assert engine.state.speed_wpm == 321
    assert seen[-1].speed_wpm == 321


def test_snapshots_are_not_aliased():
    engine = PlaybackEngine()
    before = engine.state
    engine.set_speed(500)
    assert before.speed_wpm == 200
    assert engine.state is not before


def test_close_joins_workers():
    engine = PlaybackEngine(PlaybackConfig(ramp_interval_ms=20))
    engine.load(LONG_TEXT)
    engine.set_ramp_target(True, 1000)
    engine.start()
    assert engine.is_running

    engine.close()
    assert not engine.is_running


def test_context_manager_closes():
    with PlaybackEngine() as engine:
        engine.load(LONG_TEXT)
        engine.start()
    assert not engine.is_running


def test_concurrent_commands_keep_state_consistent(fast_engine):
    fast_engine.load(LONG_TEXT)
    fast_engine.set_ramp_target(True, 1000)
    fast_engine.start()

    def hammer():
        for _ in range(50):
            fast_engine.toggle_zen_mode(True)
            fast_engine.set_font_size(30)

    threads = [threading.Thread(target=hammer) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    state = wait_for(fast_engine, lambda s: s.speed_wpm >= 130)
    assert state.is_zen_mode_enabled
    assert state.font_size == 30.0
    assert 0 <= state.current_index <= state.total_words


@pytest.mark.parametrize("kwargs", [
    {"ramp_interval_ms": 0},
    {"ramp_step_wpm": -5},
])
def test_invalid_playback_config(kwargs):
    with pytest.raises(InvalidConfiguration):
        PlaybackConfig(**kwargs)
