from fakes import FakeClock, FakeViewportObserver

from modeldex.controllers.visibility_tracker import VisibilityTracker
from modeldex.models.viewer_state import ViewerInstanceState


class Element:
    pass


class Hooks:
    def __init__(self):
        self.events = []

    def enter(self):
        self.events.append("enter")

    def exit(self):
        self.events.append("exit")

    def visibility(self):
        self.events.append("visibility")


def make_tracker(**kwargs):
    clock = FakeClock()
    observer = FakeViewportObserver()
    element = Element()
    state = ViewerInstanceState(instance_id="0001")
    hooks = Hooks()
    tracker = VisibilityTracker(
        state, observer, element,
        timer_factory=clock.single_shot,
        on_preload_enter=hooks.enter,
        on_preload_exit=hooks.exit,
        on_visibility_changed=hooks.visibility,
        **kwargs,
    )
    tracker.start()
    return tracker, state, observer, element, clock, hooks


def test_start_observes_two_zones_with_configured_margin_and_threshold():
    _, _, observer, element, _, _ = make_tracker(preload_margin_px=300, strict_threshold=0.1)

    configs = sorted((c.root_margin_px, c.threshold) for _, c, _ in observer.observed(element))

    assert configs == [(0, 0.1), (300, 0.0)]


def test_entering_preload_zone_triggers_load_hook_once():
    _, state, observer, element, _, hooks = make_tracker()

    observer.emit_preload(element, True)
    observer.emit_preload(element, True)

    assert state.in_preload_zone is True
    assert hooks.events == ["enter"]


def test_exit_only_takes_effect_after_delay():
    _, state, observer, element, clock, hooks = make_tracker(unload_delay_ms=1000)
    observer.emit_preload(element, True)

    observer.emit_preload(element, False)
    clock.advance(999)
    assert state.in_preload_zone is True

    clock.advance(1)
    assert state.in_preload_zone is False
    assert hooks.events == ["enter", "exit"]


def test_reentry_before_delay_cancels_unload_without_flicker():
    tracker, state, observer, element, clock, hooks = make_tracker(unload_delay_ms=1000)
    observer.emit_preload(element, True)

    seen = []
    for _ in range(5):
        observer.emit_preload(element, False)
        clock.advance(600)
        seen.append(state.in_preload_zone)
        observer.emit_preload(element, True)
        assert tracker.unload_pending is False
        clock.advance(600)
        seen.append(state.in_preload_zone)

    assert all(seen)
    assert hooks.events == ["enter"]


def test_strict_visibility_uses_threshold():
    _, state, observer, element, _, hooks = make_tracker(strict_threshold=0.1)

    observer.emit_strict(element, 0.05)
    assert state.is_strictly_visible is False
    assert hooks.events == []

    observer.emit_strict(element, 0.1)
    assert state.is_strictly_visible is True

    observer.emit_strict(element, 0.0)
    assert state.is_strictly_visible is False
    assert hooks.events == ["visibility", "visibility"]


def test_zones_are_independent():
    _, state, observer, element, _, _ = make_tracker()

    observer.emit_preload(element, True)

    assert state.in_preload_zone is True
    assert state.is_strictly_visible is False


def test_stop_unobserves_and_clears_pending_unload():
    tracker, state, observer, element, clock, hooks = make_tracker()
    observer.emit_preload(element, True)
    observer.emit_preload(element, False)
    assert tracker.unload_pending

    tracker.stop()
    clock.advance(5000)

    assert observer.subscriptions == {}
    assert clock.active_timers() == []
    assert hooks.events == ["enter"]
