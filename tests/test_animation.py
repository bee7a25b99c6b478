from catmatch.constants import ANIMATION_DURATION
from catmatch.events.bus import (
    EVENT_ANIMATION_COMPLETE,
    EVENT_ANIMATION_START,
    EVENT_CASCADE_STAGE,
)
from tests.helpers import EventRecorder, base_rows, start_session, with_cells

NEAR_MATCH = with_cells(base_rows(), {(3, 2): 'B', (3, 3): 'B', (2, 4): 'B'})


def drive_ticks(session, count=60, dt=0.02):
    for _ in range(count):
        session.tick(dt)


def test_cascade_keeps_session_busy_until_frames_play_out():
    session = start_session(NEAR_MATCH, animation_duration=ANIMATION_DURATION)
    recorder = EventRecorder(session.event_bus, EVENT_CASCADE_STAGE, EVENT_ANIMATION_COMPLETE)

    session.swap((2, 4), (3, 4))

    assert session.moves_left == 19
    assert session.busy
    frame = session.animation_system.current_frame()
    assert frame is not None and frame.kind == 'pre_match'

    # Input is gated while frames are pending.
    session.select_tile((0, 0))
    assert session.selected is None

    session.tick(0.1)
    assert session.busy
    assert 0.0 < session.animation_system.current_frame().progress < 1.0

    session.tick(1000.0)
    assert not session.busy
    assert session.animation_system.current_frame() is None
    assert len(recorder.of(EVENT_ANIMATION_COMPLETE)) == len(recorder.of(EVENT_CASCADE_STAGE))

    session.select_tile((0, 0))
    assert session.selected == (0, 0)


def test_rejected_swap_plays_attempt_and_revert():
    session = start_session(base_rows(), animation_duration=0.2)
    recorder = EventRecorder(session.event_bus, EVENT_ANIMATION_START, EVENT_ANIMATION_COMPLETE)

    session.swap((0, 0), (0, 1))
    assert session.busy
    drive_ticks(session, count=30, dt=0.02)

    assert not session.busy
    assert [e['kind'] for e in recorder.of(EVENT_ANIMATION_START)] == ['swap_attempt', 'swap_revert']
    assert [e['kind'] for e in recorder.of(EVENT_ANIMATION_COMPLETE)] == ['swap_attempt', 'swap_revert']
    assert session.moves_left == 20


def test_headless_session_queues_nothing():
    session = start_session(NEAR_MATCH)
    session.swap((2, 4), (3, 4))
    assert not session.busy
    assert session.animation_system.current_frame() is None


def test_restart_drops_pending_frames():
    session = start_session(NEAR_MATCH, animation_duration=ANIMATION_DURATION)
    session.swap((2, 4), (3, 4))
    assert session.busy
    session.restart_level()
    assert not session.busy
    assert session.animation_system.current_frame() is None
