"""`ViewportObserver` implementation over a Qt scroll area."""

import itertools
from dataclasses import dataclass

from PySide6.QtCore import QEvent, QObject, QPoint, QRect

from modeldex.controllers.visibility_tracker import IntersectionCallback, ObserveConfig


def intersection_state(element_rect: QRect, viewport_rect: QRect, margin_px: int = 0) -> tuple[bool, float]:
    """Return `(is_intersecting, ratio)` of an element against a viewport.

    The margin grows the viewport vertically only. The ratio is the visible
    fraction of the element's own area.
    """
    if element_rect.isEmpty():
        return False, 0.0
    root = viewport_rect.adjusted(0, -margin_px, 0, margin_px)
    overlap = element_rect.intersected(root)
    if overlap.isEmpty():
        return False, 0.0
    element_area = element_rect.width() * element_rect.height()
    ratio = (overlap.width() * overlap.height()) / element_area
    return True, min(1.0, ratio)


@dataclass
class _Subscription:
    element: object
    config: ObserveConfig
    callback: IntersectionCallback
    last_key: tuple | None = None


class QtViewportObserver(QObject):
    """Reports element/viewport intersections for widgets inside a scroll area.

    Like a browser intersection observer, each callback fires once when
    observation starts and afterwards only when the element crosses its
    threshold.
    """

    def __init__(self, scroll_area, *, refresh_on_scroll: bool = True, parent=None):
        super().__init__(parent)
        self._scroll_area = scroll_area
        self._subscriptions: dict[int, _Subscription] = {}
        self._handles = itertools.count(1)
        # with refresh_on_scroll off the owner calls refresh() from its own scroll slot
        if refresh_on_scroll:
            scroll_area.verticalScrollBar().valueChanged.connect(self.refresh)
            scroll_area.horizontalScrollBar().valueChanged.connect(self.refresh)
        scroll_area.viewport().installEventFilter(self)

    def observe(self, element, config: ObserveConfig, callback: IntersectionCallback) -> int:
        handle = next(self._handles)
        subscription = _Subscription(element, config, callback)
        self._subscriptions[handle] = subscription
        self._check(subscription)
        return handle

    def unobserve(self, handle) -> None:
        self._subscriptions.pop(handle, None)

    def refresh(self, *_args):
        for handle, subscription in list(self._subscriptions.items()):
            # a callback may unobserve other subscriptions
            if handle in self._subscriptions:
                self._check(subscription)

    def eventFilter(self, watched, event):
        if event.type() in (QEvent.Type.Resize, QEvent.Type.Show, QEvent.Type.LayoutRequest):
            self.refresh()
        return False

    def _element_rect(self, element) -> QRect:
        viewport = self._scroll_area.viewport()
        if not element.isVisible():
            return QRect()
        top_left = element.mapTo(viewport, QPoint(0, 0))
        return QRect(top_left, element.size())

    def _check(self, subscription: _Subscription):
        viewport_rect = self._scroll_area.viewport().rect()
        intersecting, ratio = intersection_state(
            self._element_rect(subscription.element),
            viewport_rect,
            subscription.config.root_margin_px,
        )
        key = (intersecting, intersecting and ratio >= subscription.config.threshold)
        if key == subscription.last_key:
            return
        subscription.last_key = key
        subscription.callback(intersecting, ratio)
