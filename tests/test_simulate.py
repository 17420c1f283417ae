"""Tests for scripted sessions and the bundled scenarios."""

import numpy as np
import pytest

from controller_gestures import ControllerGestures
from controller_gestures.events import EventKind, SwipeDirection
from controller_gestures.simulate import (
    SCENARIOS,
    Frame,
    ScriptedSession,
    apply_frame,
    scenario,
)


def run(name):
    return scenario(name).run(ControllerGestures())


class TestScriptedSession:
    def test_idle_advances_time(self):
        session = ScriptedSession(fps=10).idle(0.5)
        assert len(session.frames) == 5
        assert session.time == pytest.approx(0.5)

    def test_signals_attach_to_next_frame(self):
        session = ScriptedSession(fps=10).idle(0.1).activate(0).idle(0.2)
        assert session.frames[0].signals == []
        assert session.frames[1].signals == [("activate", 0)]
        assert session.frames[2].signals == []

    def test_move(self):
        session = ScriptedSession(fps=10, primary=(0, 0, 0)).move(1.0, velocity0=(0.1, 0, 0))
        assert np.allclose(session.position(0), [0.1, 0.0, 0.0])

    def test_place(self):
        session = ScriptedSession().place(1, (1, 2, 3)).step()
        assert np.allclose(session.frames[0].positions[1], [1, 2, 3])

    def test_trailing_signal_flushed_on_run(self):
        session = ScriptedSession().activate(0)
        engine = ControllerGestures()
        session.run(engine)
        assert engine.sources[0].active

    def test_run_leaves_session_unchanged(self):
        session = ScriptedSession().tap(1).finish().activate(0)
        before = len(session.frames)

        first = session.run(ControllerGestures())
        second = session.run(ControllerGestures())
        assert len(session.frames) == before
        assert [e.kind for e in first] == [e.kind for e in second] == [EventKind.TAP]

    def test_pending_signals_in_frames(self):
        session = ScriptedSession().idle(0.1).activate(0)
        assert session.frames[-1].signals == [("activate", 0)]

    def test_run_unsubscribes(self):
        engine = ControllerGestures()
        scenario("tap").run(engine)
        assert engine.events.handler_count() == 0


class TestApplyFrame:
    def test_unknown_signal(self):
        frame = Frame(timestamp=0.0, positions=[np.zeros(3), None], signals=[("wiggle", 0)])
        with pytest.raises(ValueError):
            apply_frame(ControllerGestures(), frame)

    def test_poses_before_signals(self):
        engine = ControllerGestures()
        frame = Frame(
            timestamp=0.0,
            positions=[np.array([0.0, 1.0, 0.0]), None],
            signals=[("activate", 0)],
        )
        apply_frame(engine, frame)
        assert engine.sources[0].active
        assert np.allclose(engine.sources[0].position, [0.0, 1.0, 0.0])
        assert engine.sources[1].position is None


class TestScenarios:
    @pytest.mark.parametrize("name,kind", [
        ("tap", EventKind.TAP),
        ("doubletap", EventKind.DOUBLETAP),
        ("tripletap", EventKind.TRIPLETAP),
        ("quadtap", EventKind.QUADTAP),
        ("press", EventKind.PRESS),
    ])
    def test_discrete(self, name, kind):
        events = run(name)
        assert [e.kind for e in events] == [kind]

    def test_swipe(self):
        events = run("swipe")
        assert [e.kind for e in events] == [EventKind.SWIPE]
        assert events[0].direction is SwipeDirection.UP

    @pytest.mark.parametrize("name,kind", [
        ("pan", EventKind.PAN),
        ("pinch", EventKind.PINCH),
        ("rotate", EventKind.ROTATE),
    ])
    def test_continuous_bracketed(self, name, kind):
        events = run(name)
        assert len(events) > 2
        assert all(e.kind is kind for e in events)
        assert events[0].initialise
        assert events[-1].finalise
        assert not any(e.initialise for e in events[1:])
        assert not any(e.finalise for e in events[:-1])

    def test_pinch_scale_grows(self):
        events = run("pinch")
        assert events[-1].scale > 1.0

    def test_every_scenario_builds(self):
        for name in SCENARIOS:
            assert scenario(name).frames

    def test_unknown_scenario(self):
        with pytest.raises(ValueError):
            scenario("moonwalk")
