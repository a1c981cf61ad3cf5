# tweenr/ui/timeline/view.py
from __future__ import annotations
from typing import List, Optional, Tuple

from tweenr.qt import QtCore, QtGui, QtWidgets
from tweenr.core.model import AnimationDocument
from tweenr.ui.theme import Theme
from tweenr.ui.timeline.controller import InteractionState, TimelineController, TrackGeometry
from tweenr.ui.timeline.layer_track import KeyframeItem, LayerTrackItem
from tweenr.ui.timeline.ruler import RulerItem
from app_config import DEFAULTS

MARKER_HIT_PX = float(DEFAULTS["editor"]["marker_hit_px"])


class TimelineScene(QtWidgets.QGraphicsScene):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setBackgroundBrush(Theme.bg)


class TimelineView(QtWidgets.QGraphicsView):
    """
    Ruler on top, one row per layer, keyframe diamonds and a playhead.
    The scene is `viewport width * zoom` wide, so scene x equals content x and the
    horizontal scroll bar value is the scroll offset the controller works with.
    Pointer events are translated into controller calls; items never take the mouse.
    """
    def __init__(self, document: AnimationDocument, controller: TimelineController, parent=None):
        super().__init__(parent)
        self.document = document
        self.controller = controller
        self.setScene(TimelineScene(self))
        self.setRenderHints(QtGui.QPainter.RenderHint.Antialiasing | QtGui.QPainter.RenderHint.TextAntialiasing)
        self.setViewportUpdateMode(QtWidgets.QGraphicsView.ViewportUpdateMode.BoundingRectViewportUpdate)
        self.setAlignment(QtCore.Qt.AlignmentFlag.AlignLeft | QtCore.Qt.AlignmentFlag.AlignTop)
        self.setHorizontalScrollBarPolicy(QtCore.Qt.ScrollBarPolicy.ScrollBarAsNeeded)
        self.setVerticalScrollBarPolicy(QtCore.Qt.ScrollBarPolicy.ScrollBarAsNeeded)
        self.setFocusPolicy(QtCore.Qt.FocusPolicy.StrongFocus)
        self.setMinimumHeight(120)

        self.row_height: int = 36
        self.header_h: int = 24

        self._ruler = RulerItem(document.duration, 1.0, height=self.header_h)
        self.scene().addItem(self._ruler)
        self._tracks: List[LayerTrackItem] = []
        self._markers: List[KeyframeItem] = []
        self._playhead = self.scene().addLine(0, 0, 0, 1, QtGui.QPen(Theme.playhead, 1.5))
        self._playhead.setZValue(900)

        document.changed.connect(self.rebuild)
        document.settingsChanged.connect(self.rebuild)
        document.timeChanged.connect(self.set_playhead_time)
        controller.selectionChanged.connect(lambda _ref: self.rebuild())

    # ──────────────────────────────────────────────────────────────────────────
    # Geometry
    # ──────────────────────────────────────────────────────────────────────────
    def content_width(self) -> float:
        return max(1.0, self.viewport().width() * self.document.timeline.zoom)

    def time_to_x(self, t: float) -> float:
        return float(t) / max(1, self.document.duration) * self.content_width()

    def row_center(self, index: int) -> float:
        return self.header_h + index * self.row_height + self.row_height / 2.0

    def geometry_snapshot(self) -> TrackGeometry:
        return TrackGeometry(left=0.0, width=float(self.viewport().width()), zoom=self.document.timeline.zoom)

    def rebuild(self) -> None:
        sc = self.scene()
        sc.setBackgroundBrush(Theme.bg)
        self._playhead.setPen(QtGui.QPen(Theme.playhead, 1.5))
        for it in self._tracks + self._markers:
            sc.removeItem(it)
        self._tracks.clear()
        self._markers.clear()

        width = self.content_width()
        height = self.header_h + max(1, len(self.document.layers)) * self.row_height
        sc.setSceneRect(0, 0, width, height)
        self._ruler.set_extent(self.document.duration, width)

        sel = self.controller.selection
        for i, layer in enumerate(self.document.layers):
            track = LayerTrackItem(self.header_h + i * self.row_height, self.row_height, i, width, layer.visible)
            sc.addItem(track)
            self._tracks.append(track)
            for kf in layer.keyframes:
                selected = sel is not None and sel.layer_id == layer.id and sel.keyframe_id == kf.id
                item = KeyframeItem(layer.id, kf.id, self.time_to_x(kf.time), self.row_center(i),
                                    selected=selected, eased=kf.bezier is not None or kf.easing != "linear")
                item.setToolTip(f"{layer.label} @ {kf.time}ms")
                sc.addItem(item)
                self._markers.append(item)
        self.set_playhead_time(self.document.current_time)

    @QtCore.Slot(float)
    def set_playhead_time(self, t: float) -> None:
        x = self.time_to_x(t)
        h = self.scene().sceneRect().height()
        self._playhead.setLine(x, 0, x, h)

    def marker_at(self, pos: QtCore.QPointF) -> Optional[Tuple[str, str]]:
        """(layer_id, keyframe_id) of the closest marker within reach of a viewport point."""
        sp = self.mapToScene(pos.toPoint())
        row = int((sp.y() - self.header_h) // self.row_height)
        if sp.y() < self.header_h or not 0 <= row < len(self.document.layers):
            return None
        layer = self.document.layers[row]
        best: Optional[Tuple[float, str]] = None
        for kf in layer.keyframes:
            d = abs(self.time_to_x(kf.time) - sp.x())
            if d <= MARKER_HIT_PX and (best is None or d < best[0]):
                best = (d, kf.id)
        return (layer.id, best[1]) if best else None

    # ──────────────────────────────────────────────────────────────────────────
    # Qt events
    # ──────────────────────────────────────────────────────────────────────────
    def resizeEvent(self, e: QtGui.QResizeEvent) -> None:
        super().resizeEvent(e)
        self.rebuild()

    def mousePressEvent(self, e: QtGui.QMouseEvent) -> None:
        if e.button() != QtCore.Qt.MouseButton.LeftButton:
            super().mousePressEvent(e)
            return
        self.setFocus(QtCore.Qt.FocusReason.MouseFocusReason)
        pos = e.position()
        hit = self.marker_at(pos)
        geo = self.geometry_snapshot()
        hbar = self.horizontalScrollBar()
        if hit is not None:
            self.controller.begin_keyframe_drag(hit[0], hit[1], geo, pos.x(), hbar)
            self.viewport().setCursor(QtCore.Qt.CursorShape.SizeHorCursor)
        else:
            if pos.y() >= self.header_h:
                self.controller.clear_selection()
            self.controller.begin_scrub(geo, pos.x(), hbar)
        e.accept()

    def mouseMoveEvent(self, e: QtGui.QMouseEvent) -> None:
        if self.controller.state is InteractionState.IDLE:
            hover = self.marker_at(e.position())
            self.viewport().setCursor(QtCore.Qt.CursorShape.PointingHandCursor if hover
                                      else QtCore.Qt.CursorShape.ArrowCursor)
            super().mouseMoveEvent(e)
            return
        if not e.buttons() & QtCore.Qt.MouseButton.LeftButton:
            # Release happened somewhere we never heard about
            self.controller.pointer_release()
            return
        self.controller.pointer_move(e.position().x())
        e.accept()

    def mouseReleaseEvent(self, e: QtGui.QMouseEvent) -> None:
        if e.button() == QtCore.Qt.MouseButton.LeftButton and self.controller.state is not InteractionState.IDLE:
            self.controller.pointer_move(e.position().x())
            self.controller.pointer_release()
            self.viewport().unsetCursor()
            e.accept()
            return
        super().mouseReleaseEvent(e)

    def focusOutEvent(self, e: QtGui.QFocusEvent) -> None:
        if e.reason() in (QtCore.Qt.FocusReason.ActiveWindowFocusReason, QtCore.Qt.FocusReason.PopupFocusReason):
            self.controller.pointer_cancel()
        super().focusOutEvent(e)

    def keyPressEvent(self, e: QtGui.QKeyEvent) -> None:
        shift = bool(e.modifiers() & QtCore.Qt.KeyboardModifier.ShiftModifier)
        if self.controller.handle_key(e.key(), shift):
            e.accept()
            return
        super().keyPressEvent(e)

    def wheelEvent(self, e: QtGui.QWheelEvent) -> None:
        if e.modifiers() & QtCore.Qt.KeyboardModifier.ControlModifier:
            # Zoom horizontally, keeping the time under the cursor in place
            delta = e.angleDelta().y()
            factor = 1.0 + (0.0015 * delta)
            view_x = e.position().x()
            anchor_t = (view_x + self.horizontalScrollBar().value()) / self.content_width() * self.document.duration
            self.document.set_zoom(self.document.timeline.zoom * factor)
            self.horizontalScrollBar().setValue(int(self.time_to_x(anchor_t) - view_x))
            e.accept()
            return
        super().wheelEvent(e)


class LayerLabels(QtWidgets.QWidget):
    """Fixed column of layer names aligned with the view's rows."""
    def __init__(self, document: AnimationDocument, view: TimelineView, parent=None):
        super().__init__(parent)
        self.document = document
        self.view = view
        self.setFixedWidth(120)
        document.changed.connect(self.update)
        view.verticalScrollBar().valueChanged.connect(lambda _v: self.update())

    def paintEvent(self, e: QtGui.QPaintEvent) -> None:
        p = QtGui.QPainter(self)
        p.fillRect(self.rect(), Theme.panel)
        offset = self.view.verticalScrollBar().value() - self.view.frameWidth()
        p.setPen(Theme.text)
        for i, layer in enumerate(self.document.layers):
            top = self.view.header_h + i * self.view.row_height - offset
            r = QtCore.QRectF(8, top, self.width() - 12, self.view.row_height)
            p.setPen(Theme.text if layer.visible else Theme.text_dim)
            text = layer.label if layer.visible else f"{layer.label} (hidden)"
            p.drawText(r, int(QtCore.Qt.AlignmentFlag.AlignVCenter | QtCore.Qt.AlignmentFlag.AlignLeft),
                       p.fontMetrics().elidedText(text, QtCore.Qt.TextElideMode.ElideRight, int(r.width())))
        p.end()


class TimelinePanel(QtWidgets.QWidget):
    def __init__(self, document: AnimationDocument, controller: TimelineController, parent=None):
        super().__init__(parent)
        self.view = TimelineView(document, controller, self)
        self.labels = LayerLabels(document, self.view, self)
        lay = QtWidgets.QHBoxLayout(self)
        lay.setContentsMargins(0, 0, 0, 0)
        lay.setSpacing(0)
        lay.addWidget(self.labels)
        lay.addWidget(self.view, 1)
