"""Scrolling gallery host: one placeholder card per model, each driven by a `ViewerInstance`."""

from dataclasses import dataclass, field

from PySide6.QtCore import QEvent, QRectF, Qt, Signal
from PySide6.QtGui import QColor, QLinearGradient, QPainter
from PySide6.QtWidgets import QFrame, QScrollArea, QVBoxLayout, QWidget

from modeldex.controllers.scroll_budget_controller import ScrollBudgetController
from modeldex.controllers.viewer_instance import ViewerInstance
from modeldex.models.viewer_state import FrameMode, RenderRequest, ViewerProps
from modeldex.utils.asset_paths import asset_paths_for, format_asset_id
from modeldex.utils.flow_log import log_flow
from modeldex.utils.lighting import type_background_stops
from modeldex.utils.settings import ViewerConfig
from modeldex.widgets.viewport_observer import QtViewportObserver


@dataclass(frozen=True)
class GalleryEntry:
    entry_id: str
    name: str
    asset_path: str
    type_tags: tuple[str, ...] = field(default_factory=lambda: ('normal',))


def build_gallery_entries(count: int, base: str = '', names: dict | None = None,
                          types: dict | None = None) -> list[GalleryEntry]:
    """Entries for ids 1..count, with one entry per known variant.

    `names` and `types` map a numeric id to display name / type tags when a
    data source provides them.
    """
    names = names or {}
    types = types or {}
    entries = []
    for asset_id in range(1, count + 1):
        padded = format_asset_id(asset_id)
        name = names.get(asset_id, f"#{asset_id}")
        type_tags = tuple(types.get(asset_id, ('normal',)))
        for path, variant in asset_paths_for(asset_id, base):
            if variant:
                label = 'Male' if variant == 'M' else 'Female'
                entries.append(GalleryEntry(f"{padded}-{variant}", f"{name} ({label})", path, type_tags))
            else:
                entries.append(GalleryEntry(padded, name, path, type_tags))
    return entries


class ModelCard(QFrame):
    """Stands in for a renderer: paints the type background and the render state."""

    pointer_pressed = Signal()
    pointer_released = Signal()

    def __init__(self, entry: GalleryEntry, height: int = 250, parent=None):
        super().__init__(parent)
        self.entry = entry
        self._request: RenderRequest | None = None
        self._stops = type_background_stops(entry.type_tags, soft=True)
        self.setFixedHeight(height)
        self.setFrameShape(QFrame.Shape.StyledPanel)

    @property
    def render_request(self) -> RenderRequest | None:
        return self._request

    def set_render_request(self, request: RenderRequest):
        self._request = request
        self.update()

    def status_text(self) -> str:
        request = self._request
        if request is None or (request.scene is None and not request.loading and not request.unavailable):
            return "…"
        if request.unavailable:
            return "Model not available"
        if request.loading or request.scene is None:
            return "Loading…"
        low, high = request.resolution_scale_range
        mode = "live" if request.frame_mode is FrameMode.CONTINUOUS else "on demand"
        spin = ", rotating" if request.rotation_enabled else ""
        return f"{self.entry.name}\n{mode} · dpr {low:g}-{high:g}{spin}"

    def paintEvent(self, event):
        painter = QPainter(self)
        rect = QRectF(self.rect())
        gradient = QLinearGradient(rect.topLeft(), rect.bottomRight())
        for position, color in self._stops:
            gradient.setColorAt(position, QColor(color))
        painter.fillRect(rect, gradient)
        painter.setPen(QColor('#202020'))
        painter.drawText(rect, Qt.AlignmentFlag.AlignCenter, self.status_text())
        painter.end()
        super().paintEvent(event)

    def mousePressEvent(self, event):
        self.pointer_pressed.emit()
        super().mousePressEvent(event)

    def mouseReleaseEvent(self, event):
        self.pointer_released.emit()
        super().mouseReleaseEvent(event)


class ModelGallery(QScrollArea):
    """Vertical list of model cards sharing one loader and one scroll budget."""

    def __init__(self, entries: list[GalleryEntry], loader, config: ViewerConfig | None = None,
                 card_height: int = 250, parent=None):
        super().__init__(parent)
        self.config = config or ViewerConfig()
        self.setWidgetResizable(True)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)

        content = QWidget()
        layout = QVBoxLayout(content)
        layout.setSpacing(8)
        self.setWidget(content)

        self.budget = ScrollBudgetController(
            debounce_ms=self.config.scroll_debounce_ms,
            active_limit=self.config.scroll_budget_limit,
            parent=self,
        )
        self.observer = QtViewportObserver(self, refresh_on_scroll=False, parent=self)
        self.cards: list[ModelCard] = []
        self.instances: list[ViewerInstance] = []

        for index, entry in enumerate(entries):
            card = ModelCard(entry, height=card_height)
            layout.addWidget(card)
            instance = ViewerInstance(
                entry.entry_id,
                ViewerProps(
                    asset_path=entry.asset_path,
                    auto_rotate=True,
                    lower_detail_when_idle=True,
                    container_height=card_height,
                    type_tags=entry.type_tags,
                ),
                loader=loader,
                observer=self.observer,
                element=card,
                config=self.config,
                budget=self.budget,
                index=index,
                on_render=card.set_render_request,
            )
            card.pointer_pressed.connect(instance.pointer_down)
            card.pointer_released.connect(instance.pointer_up)
            self.cards.append(card)
            self.instances.append(instance)
        layout.addStretch(1)

        self.verticalScrollBar().valueChanged.connect(self._on_scrolled)
        self.viewport().installEventFilter(self)

        for instance in self.instances:
            instance.mount()
        log_flow("GALLERY", f"Mounted {len(self.instances)} viewer instances")

    def visible_index_range(self) -> tuple[int, int]:
        """First and last index of strictly visible instances, `(0, -1)` if none."""
        visible = [i.index for i in self.instances if i.state.is_strictly_visible]
        if not visible:
            return 0, -1
        return min(visible), max(visible)

    def eventFilter(self, watched, event):
        if watched is self.viewport() and event.type() in (QEvent.Type.Resize, QEvent.Type.Show):
            # Filters run newest first, so refresh the observer before reading flags.
            self.observer.refresh()
            self.budget.update_visible_range(*self.visible_index_range())
        return super().eventFilter(watched, event)

    def _on_scrolled(self, _value):
        # scrolling is flagged before any card sees its new visibility
        self.budget.notify_scroll()
        self.observer.refresh()
        self.budget.update_visible_range(*self.visible_index_range())

    def shutdown(self):
        """Unmount every instance and stop list-level timers."""
        for instance in self.instances:
            instance.unmount()
        self.budget.stop()

    def closeEvent(self, event):
        self.shutdown()
        super().closeEvent(event)
