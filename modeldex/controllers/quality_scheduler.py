"""Per-instance render quality: frame pacing, resolution scale and auto-rotation."""

from modeldex.models.viewer_state import (
    FULL_RESOLUTION_RANGE,
    REDUCED_RESOLUTION_RANGE,
    FrameMode,
    QualityProfile,
    ViewerInstanceState,
)
from modeldex.utils.timers import create_single_shot_timer

BUDGET_EXCLUDED_PROFILE = QualityProfile(
    frame_mode=FrameMode.ON_DEMAND,
    resolution_scale_range=REDUCED_RESOLUTION_RANGE,
    rotation_enabled=False,
)


def compute_quality_profile(*, is_strictly_visible: bool, is_interacting: bool,
                            lower_detail_when_idle: bool, auto_rotate: bool = False,
                            budget_eligible: bool = True) -> QualityProfile:
    """Map visibility, interaction and the idle flag to a `QualityProfile`.

    Instances outside the scroll budget always get the reduced profile.
    """
    if not budget_eligible:
        return BUDGET_EXCLUDED_PROFILE

    idle_lowering = lower_detail_when_idle and not is_interacting
    on_demand = idle_lowering and not is_strictly_visible
    return QualityProfile(
        frame_mode=FrameMode.ON_DEMAND if on_demand else FrameMode.CONTINUOUS,
        resolution_scale_range=REDUCED_RESOLUTION_RANGE if idle_lowering else FULL_RESOLUTION_RANGE,
        rotation_enabled=bool(auto_rotate and is_strictly_visible),
    )


class QualityScheduler:
    """Tracks pointer interaction and evaluates the instance's profile.

    A pointer release keeps `is_interacting` set for `release_delay_ms`, so
    a brief gesture keeps full quality a little longer.
    """

    def __init__(self, state: ViewerInstanceState, *, auto_rotate: bool = False,
                 lower_detail_when_idle: bool = False, release_delay_ms: int = 1500,
                 timer_factory=create_single_shot_timer, on_change=None):
        self._state = state
        self.auto_rotate = auto_rotate
        self.lower_detail_when_idle = lower_detail_when_idle
        self._on_change = on_change
        self._release_timer = timer_factory(release_delay_ms, self._on_release)

    def pointer_down(self):
        self._release_timer.stop()
        if not self._state.is_interacting:
            self._state.is_interacting = True
            self._notify()

    def pointer_up(self):
        self._release_timer.stop()
        self._release_timer.start()

    def stop(self):
        self._release_timer.stop()

    def evaluate(self, budget_eligible: bool = True) -> QualityProfile:
        return compute_quality_profile(
            is_strictly_visible=self._state.is_strictly_visible,
            is_interacting=self._state.is_interacting,
            lower_detail_when_idle=self.lower_detail_when_idle,
            auto_rotate=self.auto_rotate,
            budget_eligible=budget_eligible,
        )

    def _on_release(self):
        if self._state.is_interacting:
            self._state.is_interacting = False
            self._notify()

    def _notify(self):
        if self._on_change is not None:
            self._on_change()
