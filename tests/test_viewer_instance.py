from fakes import FakeClock, FakeLoader, FakeViewportObserver

from modeldex.controllers.scroll_budget_controller import ScrollBudgetController
from modeldex.controllers.viewer_instance import ViewerInstance
from modeldex.models.asset_cache import AssetCache
from modeldex.models.viewer_state import FrameMode, LoadState, ViewerProps
from modeldex.utils.asset_paths import FALLBACK_ASSET_PATH, build_asset_path
from modeldex.utils.lighting import TYPE_LIGHTING
from modeldex.utils.settings import ViewerConfig


class Element:
    def __init__(self, index):
        self.index = index


class Harness:
    def __init__(self, count=1, *, config=None, with_budget=False, **props):
        self.clock = FakeClock()
        self.cache = AssetCache(max_size=100)
        self.loader = FakeLoader(self.cache)
        self.observer = FakeViewportObserver()
        self.config = config or ViewerConfig()
        self.budget = None
        if with_budget:
            self.budget = ScrollBudgetController(
                debounce_ms=self.config.scroll_debounce_ms,
                active_limit=self.config.scroll_budget_limit,
                timer_factory=self.clock.single_shot,
            )
        self.elements = []
        self.instances = []
        self.renders = []
        for index in range(count):
            element = Element(index)
            instance = ViewerInstance(
                f"{index + 1:04d}",
                ViewerProps(asset_path=build_asset_path(index + 1), **props),
                loader=self.loader,
                observer=self.observer,
                element=element,
                config=self.config,
                budget=self.budget,
                index=index,
                timer_factory=self.clock.single_shot,
                on_render=lambda request, i=index: self.renders.append((i, request)),
            )
            instance.mount()
            self.elements.append(element)
            self.instances.append(instance)

    @property
    def instance(self):
        return self.instances[0]

    def continuous_count(self):
        return sum(1 for instance in self.instances if instance.evaluate().is_continuous)


def test_entering_preload_zone_starts_load_and_publishes_scene():
    h = Harness()

    h.observer.emit_preload(h.elements[0], True)
    assert h.loader.paths == ["/glbs/0001.glb"]
    assert h.instance.render_request().loading is True

    h.loader.succeed(scene="bulbasaur")
    request = h.instance.render_request()
    assert request.scene == "bulbasaur"
    assert request.loading is False
    assert h.renders[-1][1].scene == "bulbasaur"


def test_cached_path_is_served_without_new_load():
    h = Harness()
    h.cache.put("/glbs/0001.glb", "cached")

    h.observer.emit_preload(h.elements[0], True)

    assert h.loader.requests == []
    assert h.instance.state.load_state is LoadState.LOADED
    assert h.instance.render_request().scene == "cached"


def test_leaving_preload_zone_releases_scene_after_delay():
    h = Harness()
    h.observer.emit_preload(h.elements[0], True)
    h.loader.succeed(scene="scene")

    h.observer.emit_preload(h.elements[0], False)
    h.clock.advance(999)
    assert h.instance.render_request().scene == "scene"

    h.clock.advance(1)
    assert h.instance.state.in_preload_zone is False
    assert h.instance.render_request().scene is None

    # Coming back hits the cache.
    h.observer.emit_preload(h.elements[0], True)
    assert h.instance.render_request().scene == "scene"
    assert h.loader.paths == ["/glbs/0001.glb"]


def test_unmount_discards_late_results_and_clears_everything():
    h = Harness(with_budget=True)
    h.observer.emit_preload(h.elements[0], True)
    h.instance.pointer_down()
    h.instance.pointer_up()
    h.observer.emit_preload(h.elements[0], False)

    h.instance.unmount()
    renders_before = len(h.renders)
    h.loader.succeed(scene="late")
    h.budget.notify_scroll()
    h.clock.advance(10_000)

    assert h.instance.state.load_state is LoadState.LOADING
    assert h.instance.fallback.scene is None
    assert len(h.renders) == renders_before
    assert h.observer.subscriptions == {}
    assert h.clock.active_timers() == []


def test_failed_primary_and_fallback_shows_unavailable():
    h = Harness()
    h.observer.emit_preload(h.elements[0], True)

    h.loader.fail()
    assert h.loader.paths[-1] == FALLBACK_ASSET_PATH
    h.loader.fail()

    request = h.instance.render_request()
    assert request.unavailable is True
    assert request.scene is None
    assert len(h.loader.requests) == 2


def test_fallback_uses_configured_base_path():
    h = Harness(config=ViewerConfig(asset_base_path="/static"))
    h.observer.emit_preload(h.elements[0], True)

    h.loader.fail()

    assert h.loader.paths[-1] == "/static/glbs/0000.glb"


def test_lighting_comes_from_primary_type_tag():
    h = Harness(type_tags=("fire", "flying"))

    assert h.instance.render_request().lighting == TYPE_LIGHTING["fire"]


def test_interaction_keeps_full_quality_off_screen():
    h = Harness(lower_detail_when_idle=True, auto_rotate=True)

    assert h.instance.evaluate().frame_mode is FrameMode.ON_DEMAND
    h.instance.pointer_down()
    profile = h.instance.evaluate()

    assert profile.frame_mode is FrameMode.CONTINUOUS
    assert profile.rotation_enabled is False


def test_no_more_than_budget_continuous_while_scrolling():
    h = Harness(60, with_budget=True, lower_detail_when_idle=True, auto_rotate=True)
    window_size = 16

    def show_window(start):
        for index, element in enumerate(h.elements):
            h.observer.emit_preload(element, start - 2 <= index < start + window_size + 2)
            h.observer.emit_strict(element, 1.0 if start <= index < start + window_size else 0.0)
        h.budget.update_visible_range(start, start + window_size - 1)

    show_window(0)
    assert h.continuous_count() == window_size

    start = 0
    for _ in range(10):
        h.budget.notify_scroll()
        start += 1
        show_window(start)
        assert h.budget.is_scrolling is True
        assert h.continuous_count() <= 8
        h.clock.advance(50)
        assert h.continuous_count() <= 8

    eligible = [i.index for i in h.instances if i.evaluate().is_continuous]
    assert eligible == list(range(start, start + 8))

    h.clock.advance(150)
    assert h.budget.is_scrolling is False
    assert h.continuous_count() == window_size


def test_budget_change_republishes_render_request():
    h = Harness(3, with_budget=True, lower_detail_when_idle=True)
    for element in h.elements:
        h.observer.show(element)
    h.budget.update_visible_range(0, 2)
    h.renders.clear()

    h.budget.notify_scroll()

    assert {index for index, _ in h.renders} == {0, 1, 2}


def test_remount_after_discarded_load_issues_a_new_request():
    h = Harness()
    h.observer.emit_preload(h.elements[0], True)
    h.instance.unmount()

    h.instance.mount()
    assert h.instance.state.load_state is LoadState.IDLE
    assert h.instance.state.in_preload_zone is False
    h.observer.emit_preload(h.elements[0], True)

    assert h.loader.paths == ["/glbs/0001.glb", "/glbs/0001.glb"]
    assert h.instance.fallback.attempts == 1
    h.loader.succeed(index=0, scene="stale")
    assert h.instance.render_request().loading is True

    h.loader.succeed(scene="fresh")
    request = h.instance.render_request()
    assert request.scene == "fresh"
    assert request.loading is False


def test_remount_after_late_success_is_served_from_cache():
    h = Harness()
    h.observer.emit_preload(h.elements[0], True)
    h.instance.unmount()
    h.loader.succeed(scene="late")
    assert h.instance.fallback.scene is None

    h.instance.mount()
    h.observer.emit_preload(h.elements[0], True)

    request = h.instance.render_request()
    assert request.scene == "late"
    assert request.loading is False
    assert h.instance.state.load_state is LoadState.LOADED


def test_remount_clears_fallback_flags_and_reconnects_budget_once():
    h = Harness(with_budget=True)
    h.observer.emit_preload(h.elements[0], True)
    h.loader.fail()
    h.loader.fail()
    assert h.instance.render_request().unavailable is True

    h.instance.unmount()
    h.instance.mount()

    assert h.instance.render_request().unavailable is False
    assert h.instance.fallback.current_path == "/glbs/0001.glb"
    h.renders.clear()
    h.budget.notify_scroll()
    assert len(h.renders) == 1


def test_unmount_twice_and_without_budget_is_harmless():
    h = Harness()
    h.instance.unmount()
    h.instance.unmount()
    h.instance.mount()

    assert h.instance.is_mounted is True
    assert len(h.observer.observed(h.elements[0])) == 2
