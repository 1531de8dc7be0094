from dataclasses import dataclass, field
from enum import Enum

from modeldex.utils.lighting import TypeLighting


class LoadState(str, Enum):
    IDLE = 'idle'
    LOADING = 'loading'
    LOADED = 'loaded'
    ERROR = 'error'


class FrameMode(str, Enum):
    CONTINUOUS = 'always'
    ON_DEMAND = 'demand'


FULL_RESOLUTION_RANGE = (1.0, 2.0)
REDUCED_RESOLUTION_RANGE = (0.5, 1.5)


@dataclass(frozen=True)
class QualityProfile:
    """Derived render settings; recomputed on every evaluation."""

    frame_mode: FrameMode = FrameMode.CONTINUOUS
    resolution_scale_range: tuple[float, float] = FULL_RESOLUTION_RANGE
    rotation_enabled: bool = False

    @property
    def is_continuous(self) -> bool:
        return self.frame_mode is FrameMode.CONTINUOUS


@dataclass
class ViewerInstanceState:
    """Mutable per-instance state, owned by a single mounted instance."""

    instance_id: str
    load_state: LoadState = LoadState.IDLE
    in_preload_zone: bool = False
    is_strictly_visible: bool = False
    is_interacting: bool = False
    using_fallback: bool = False
    fallback_failed: bool = False

    def reset(self):
        """Back to the state of a freshly mounted instance."""
        self.load_state = LoadState.IDLE
        self.in_preload_zone = False
        self.is_strictly_visible = False
        self.is_interacting = False
        self.using_fallback = False
        self.fallback_failed = False


@dataclass(frozen=True)
class ScrollWindow:
    """Rendered index window of the list, replaced on every update."""

    start_index: int = 0
    end_index: int = -1
    is_scrolling: bool = False

    def __len__(self):
        return max(0, self.end_index - self.start_index + 1)

    def contains(self, index: int) -> bool:
        return self.start_index <= index <= self.end_index


@dataclass(frozen=True)
class ViewerProps:
    """Inbound props supplied by the list for one instance."""

    asset_path: str
    auto_rotate: bool = False
    lower_detail_when_idle: bool = False
    container_height: int = 250
    type_tags: tuple[str, ...] = field(default_factory=lambda: ('normal',))


@dataclass(frozen=True)
class RenderRequest:
    """Everything a renderer needs to draw one instance."""

    scene: object
    frame_mode: FrameMode
    resolution_scale_range: tuple[float, float]
    rotation_enabled: bool
    lighting: TypeLighting
    container_height: int
    loading: bool = False
    unavailable: bool = False
