"""One on-screen model viewer: visibility, loading, quality and budget wired together."""

from modeldex.controllers.fallback_controller import FallbackController
from modeldex.controllers.quality_scheduler import QualityScheduler
from modeldex.controllers.scroll_budget_controller import ScrollBudgetController
from modeldex.controllers.visibility_tracker import VisibilityTracker
from modeldex.models.viewer_state import (
    LoadState,
    QualityProfile,
    RenderRequest,
    ViewerInstanceState,
    ViewerProps,
)
from modeldex.utils.asset_paths import fallback_asset_path
from modeldex.utils.lighting import get_type_lighting
from modeldex.utils.settings import ViewerConfig
from modeldex.utils.timers import create_single_shot_timer


class ViewerInstance:
    """Owns the per-instance controllers between `mount` and `unmount`.

    Whenever an input changes, the current `RenderRequest` is pushed to
    `on_render` (the renderer, or a placeholder that stands in for it).
    """

    def __init__(self, instance_id: str, props: ViewerProps, *, loader, observer, element,
                 config: ViewerConfig | None = None,
                 budget: ScrollBudgetController | None = None, index: int | None = None,
                 timer_factory=create_single_shot_timer, on_render=None):
        config = config or ViewerConfig()
        self.props = props
        self.index = index
        self.state = ViewerInstanceState(instance_id=instance_id)
        self._budget = budget
        self._on_render = on_render
        self._mounted = False
        self._budget_connected = False
        self._lighting = get_type_lighting(props.type_tags)

        self.fallback = FallbackController(
            self.state,
            loader,
            props.asset_path,
            fallback_path=fallback_asset_path(config.asset_base_path),
            timeout_ms=config.load_timeout_ms,
            timer_factory=timer_factory,
            on_change=self._publish,
        )
        self.scheduler = QualityScheduler(
            self.state,
            auto_rotate=props.auto_rotate,
            lower_detail_when_idle=props.lower_detail_when_idle,
            release_delay_ms=config.interaction_release_ms,
            timer_factory=timer_factory,
            on_change=self._publish,
        )
        self.tracker = VisibilityTracker(
            self.state,
            observer,
            element,
            preload_margin_px=config.preload_margin_px,
            unload_delay_ms=config.preload_exit_delay_ms,
            strict_threshold=config.strict_visibility_threshold,
            timer_factory=timer_factory,
            on_preload_enter=self._on_preload_enter,
            on_preload_exit=self._on_preload_exit,
            on_visibility_changed=self._publish,
        )

    @property
    def is_mounted(self) -> bool:
        return self._mounted

    def mount(self):
        if self._mounted:
            return
        self._mounted = True
        # a remount starts from scratch; the previous mount's load was discarded
        self.state.reset()
        self.fallback.reset()
        if self._budget is not None and not self._budget_connected:
            self._budget.window_changed.connect(self._on_budget_changed)
            self._budget_connected = True
        self.tracker.start()
        self._publish()

    def unmount(self):
        """Stop every timer and subscription; late load results become no-ops."""
        if not self._mounted:
            return
        self._mounted = False
        self.fallback.invalidate()
        self.tracker.stop()
        self.scheduler.stop()
        if self._budget_connected:
            self._budget.window_changed.disconnect(self._on_budget_changed)
            self._budget_connected = False

    def set_index(self, index: int | None):
        if index == self.index:
            return
        self.index = index
        self._publish()

    def pointer_down(self):
        if self._mounted:
            self.scheduler.pointer_down()

    def pointer_up(self):
        if self._mounted:
            self.scheduler.pointer_up()

    def budget_eligible(self) -> bool:
        if self._budget is None:
            return True
        return self._budget.is_full_detail_eligible(self.index)

    def evaluate(self) -> QualityProfile:
        return self.scheduler.evaluate(budget_eligible=self.budget_eligible())

    def render_request(self) -> RenderRequest:
        profile = self.evaluate()
        state = self.state
        return RenderRequest(
            scene=self.fallback.scene if state.in_preload_zone else None,
            frame_mode=profile.frame_mode,
            resolution_scale_range=profile.resolution_scale_range,
            rotation_enabled=profile.rotation_enabled,
            lighting=self._lighting,
            container_height=self.props.container_height,
            loading=state.in_preload_zone and state.load_state is LoadState.LOADING,
            unavailable=state.fallback_failed,
        )

    def _on_preload_enter(self):
        self.fallback.ensure_loaded()
        self._publish()

    def _on_preload_exit(self):
        self.fallback.release()

    def _on_budget_changed(self, _window):
        self._publish()

    def _publish(self):
        if not self._mounted or self._on_render is None:
            return
        self._on_render(self.render_request())
