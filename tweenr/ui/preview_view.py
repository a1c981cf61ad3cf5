# tweenr/ui/preview_view.py
from __future__ import annotations
from typing import Optional

from tweenr.qt import QtCore, QtGui, QtWidgets
from tweenr.core.interpolation import sample_layer
from tweenr.core.model import AnimationDocument
from tweenr.ui.compositor import Compositor, layer_at, layer_box
from tweenr.ui.image_cache import ImageCache
from tweenr.ui.placement import PlacementDrag
from tweenr.ui.theme import Theme


class PreviewCanvas(QtWidgets.QWidget):
    """
    Live raster preview. Every paint asks the compositor for a fresh frame at the
    widget's current size and device pixel ratio, then draws placement overlays.
    Dragging a layer box moves the layer's centre.
    """
    layerPicked = QtCore.Signal(str)

    def __init__(self, document: AnimationDocument, images: ImageCache,
                 parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self.setMinimumSize(320, 180)
        self.setMouseTracking(True)
        self.document = document
        self.images = images
        self.compositor = Compositor()
        self.placement = PlacementDrag(document)
        self.show_overlays = True
        self.selected_layer_id: Optional[str] = None

        document.changed.connect(self._on_document_changed)
        document.timeChanged.connect(lambda _t: self.update())
        images.imageReady.connect(lambda _id: self.update())
        images.sync(document)

    def _on_document_changed(self) -> None:
        self.images.sync(self.document)
        self.update()

    def set_selected_layer(self, layer_id: Optional[str]) -> None:
        self.selected_layer_id = layer_id
        self.update()

    def set_show_overlays(self, on: bool) -> None:
        self.show_overlays = bool(on)
        self.update()

    def render_frame(self) -> QtGui.QImage:
        return self.compositor.render(
            self.document, self.document.current_time,
            (self.width(), self.height()), self.devicePixelRatioF(), self.images.images(),
        )

    # ──────────────────────────────────────────────────────────────────────────
    # Painting
    # ──────────────────────────────────────────────────────────────────────────
    def paintEvent(self, e: QtGui.QPaintEvent) -> None:
        p = QtGui.QPainter(self)
        p.fillRect(self.rect(), Theme.stage)
        p.drawImage(QtCore.QPointF(0, 0), self.render_frame())
        if self.show_overlays:
            self._paint_overlays(p)
        p.end()

    def _paint_overlays(self, p: QtGui.QPainter) -> None:
        t = self.document.current_time
        for layer in self.document.layers:
            if not layer.visible:
                continue
            box = layer_box(layer, sample_layer(layer, t), self.width(), self.height())
            selected = layer.id == self.selected_layer_id
            pen = QtGui.QPen(Theme.accent if selected else Theme.text_dim, 1.5 if selected else 1.0)
            pen.setStyle(QtCore.Qt.PenStyle.DashLine)
            p.setPen(pen)
            p.setBrush(QtCore.Qt.BrushStyle.NoBrush)
            p.drawRect(box)

    # ──────────────────────────────────────────────────────────────────────────
    # Placement drag
    # ──────────────────────────────────────────────────────────────────────────
    def mousePressEvent(self, e: QtGui.QMouseEvent) -> None:
        if e.button() != QtCore.Qt.MouseButton.LeftButton:
            super().mousePressEvent(e)
            return
        pos = e.position()
        lid = layer_at(self.document, self.document.current_time, (pos.x(), pos.y()),
                       self.width(), self.height())
        if lid is None:
            super().mousePressEvent(e)
            return
        self.placement.begin(lid, (pos.x(), pos.y()), (self.width(), self.height()))
        self.set_selected_layer(lid)
        self.layerPicked.emit(lid)
        self.setCursor(QtCore.Qt.CursorShape.ClosedHandCursor)
        e.accept()

    def mouseMoveEvent(self, e: QtGui.QMouseEvent) -> None:
        pos = e.position()
        if self.placement.active and not (e.buttons() & QtCore.Qt.MouseButton.LeftButton):
            # Release happened outside the widget
            self.placement.end()
            self.unsetCursor()
        if self.placement.active:
            self.placement.move((pos.x(), pos.y()))
            e.accept()
            return
        hover = layer_at(self.document, self.document.current_time, (pos.x(), pos.y()),
                         self.width(), self.height())
        self.setCursor(QtCore.Qt.CursorShape.OpenHandCursor if hover else QtCore.Qt.CursorShape.ArrowCursor)
        super().mouseMoveEvent(e)

    def mouseReleaseEvent(self, e: QtGui.QMouseEvent) -> None:
        if self.placement.active:
            self.placement.end()
            self.setCursor(QtCore.Qt.CursorShape.OpenHandCursor)
            e.accept()
            return
        super().mouseReleaseEvent(e)

    def leaveEvent(self, e: QtCore.QEvent) -> None:
        if not self.placement.active:
            self.unsetCursor()
        super().leaveEvent(e)

    def focusOutEvent(self, e: QtGui.QFocusEvent) -> None:
        if self.placement.active:
            self.placement.end()
            self.unsetCursor()
        super().focusOutEvent(e)
