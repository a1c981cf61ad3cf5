# tweenr/ui/scroll_preview.py
from __future__ import annotations
from typing import Optional

from tweenr.qt import Property, QtCore, QtGui, QtWidgets
from tweenr.core.logging import get_logger
from tweenr.core.model import AnimationDocument
from tweenr.core.playback import PlaybackController
from tweenr.core.scroll_effect import (
    is_intersecting, layer_opacity, layer_translate, scroll_to_time, section_progress,
)
from tweenr.ui.theme import Theme, qcolor_hex
from app_config import DEFAULTS

_PX = DEFAULTS["parallax"]


class ParallaxSection(QtWidgets.QWidget):
    """
    Section that drifts and fades with its position inside a QScrollArea viewport.
    Children of `stage` that carry a `parallaxDepth` property (0..1) move by the
    depth-scaled amount. Updates are coalesced and skipped while off screen.
    """
    progressChanged = QtCore.Signal(float)

    def __init__(self, max_translate: float = _PX["max_translate_px"], fade: bool = _PX["fade"],
                 parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self.max_translate = float(max_translate)
        self.fade = bool(fade)
        self._progress = 0.0
        self._pending = False
        self._area: Optional[QtWidgets.QScrollArea] = None

        self.stage = QtWidgets.QWidget(self)
        self.stage_layout = QtWidgets.QHBoxLayout(self.stage)
        self.stage_layout.setContentsMargins(24, 24, 24, 24)
        self.stage_layout.setSpacing(16)
        self._stage_fx = QtWidgets.QGraphicsOpacityEffect(self.stage)
        self.stage.setGraphicsEffect(self._stage_fx)

    def get_progress(self) -> float:
        return self._progress

    parallaxProgress = Property(float, get_progress, notify=progressChanged)

    def attach(self, area: QtWidgets.QScrollArea) -> None:
        self._area = area
        area.verticalScrollBar().valueChanged.connect(lambda _v: self.schedule_update())
        self.schedule_update()

    def add_layer_widget(self, w: QtWidgets.QWidget, depth: float) -> None:
        w.setProperty("parallaxDepth", float(depth))
        w.setGraphicsEffect(QtWidgets.QGraphicsOpacityEffect(w))
        self.stage_layout.addWidget(w)

    def resizeEvent(self, e: QtGui.QResizeEvent) -> None:
        super().resizeEvent(e)
        self.stage.resize(self.size())
        self.schedule_update()

    def schedule_update(self) -> None:
        if self._pending:
            return
        self._pending = True
        QtCore.QTimer.singleShot(0, self._flush)

    def _flush(self) -> None:
        self._pending = False
        self.update_effect()

    def update_effect(self) -> bool:
        """Recompute and apply; returns False when skipped for being off screen."""
        if self._area is None:
            return False
        vp = self._area.viewport()
        top = self.mapTo(vp, QtCore.QPoint(0, 0)).y()
        vh = vp.height()
        if not is_intersecting(top, self.height(), vh):
            return False
        p = section_progress(top, self.height(), vh)
        self.stage.move(0, int(round(layer_translate(p, self.max_translate))))
        self._stage_fx.setOpacity(p if self.fade else 1.0)

        self.stage_layout.activate()
        for i in range(self.stage_layout.count()):
            item = self.stage_layout.itemAt(i)
            w = item.widget() if item else None
            depth = w.property("parallaxDepth") if w else None
            if depth is None:
                continue
            base = item.geometry()
            w.move(base.x(), base.y() + int(round(layer_translate(p, self.max_translate, float(depth)))))
            fx = w.graphicsEffect()
            if self.fade and isinstance(fx, QtWidgets.QGraphicsOpacityEffect):
                fx.setOpacity(layer_opacity(p, float(depth)))

        if p != self._progress:
            self._progress = p
            self.progressChanged.emit(p)
        return True


class ScrollPreviewDialog(QtWidgets.QDialog):
    """
    Scroll playground: the document's layers as parallax tiles (by depth) and,
    optionally, the page scroll position driving the timeline.
    """
    def __init__(self, document: AnimationDocument, playback: PlaybackController,
                 parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self._log = get_logger(__name__)
        self.document = document
        self.playback = playback
        self.setWindowTitle("Preview as scroll")
        self.resize(720, 520)

        self.drive_check = QtWidgets.QCheckBox("Drive timeline from scroll position")
        self.area = QtWidgets.QScrollArea()
        self.area.setWidgetResizable(True)

        page = QtWidgets.QWidget()
        col = QtWidgets.QVBoxLayout(page)
        col.setContentsMargins(0, 0, 0, 0)
        col.addSpacing(480)
        self.section = ParallaxSection()
        self.section.setMinimumHeight(240)
        col.addWidget(self.section)
        col.addSpacing(900)
        self.area.setWidget(page)

        l = QtWidgets.QVBoxLayout(self)
        l.addWidget(self.drive_check)
        l.addWidget(self.area, 1)

        self._build_tiles()
        self.section.attach(self.area)
        self.area.verticalScrollBar().valueChanged.connect(self._on_scroll)
        self.drive_check.toggled.connect(self._on_drive_toggled)

    def _build_tiles(self) -> None:
        for layer in self.document.layers:
            if not layer.visible:
                continue
            tile = QtWidgets.QLabel(layer.label)
            tile.setAlignment(QtCore.Qt.AlignmentFlag.AlignCenter)
            tile.setMinimumSize(96, 96)
            fg = "#111827" if QtGui.QColor(layer.color).lightnessF() > 0.55 else "#f9fafb"
            tile.setStyleSheet(f"background-color: {layer.color}; color: {fg}; "
                               f"border: 1px solid {qcolor_hex(Theme.stroke)}; border-radius: 6px;")
            self.section.add_layer_widget(tile, layer.depth)

    def _on_drive_toggled(self, on: bool) -> None:
        if on:
            self.playback.pause()
            self._on_scroll(self.area.verticalScrollBar().value())

    def _on_scroll(self, value: int) -> None:
        if not self.drive_check.isChecked():
            return
        bar = self.area.verticalScrollBar()
        self.playback.seek(scroll_to_time(value, bar.maximum(), self.document.duration))
