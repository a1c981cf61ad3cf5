# tweenr/ui/timeline/layer_track.py
from __future__ import annotations
from tweenr.qt import QtCore, QtGui, QtWidgets
from tweenr.ui.theme import Theme

MARKER_HALF = 6.0


class LayerTrackItem(QtWidgets.QGraphicsRectItem):
    def __init__(self, y: float, height: int, index: int, width: float, visible: bool = True):
        super().__init__(0, y, width, height)
        self.setBrush(Theme.track if index % 2 == 0 else Theme.track_alt)
        self.setPen(QtGui.QPen(QtCore.Qt.PenStyle.NoPen))
        self.setOpacity(1.0 if visible else 0.55)
        self.setZValue(-10)


class KeyframeItem(QtWidgets.QGraphicsItem):
    """Diamond marker for one keyframe. Pointer handling lives in the view."""
    def __init__(self, layer_id: str, keyframe_id: str, x: float, y: float,
                 selected: bool = False, eased: bool = False):
        super().__init__()
        self.layer_id = layer_id
        self.keyframe_id = keyframe_id
        self.selected = selected
        self.eased = eased
        self.setPos(x, y)
        self.setZValue(100 if selected else 50)

    def boundingRect(self) -> QtCore.QRectF:
        r = MARKER_HALF + 2
        return QtCore.QRectF(-r, -r, 2 * r, 2 * r)

    def paint(self, p: QtGui.QPainter, opt: QtWidgets.QStyleOptionGraphicsItem, widget=None) -> None:
        p.setRenderHint(QtGui.QPainter.RenderHint.Antialiasing, True)
        h = MARKER_HALF
        diamond = QtGui.QPolygonF([
            QtCore.QPointF(0, -h), QtCore.QPointF(h, 0),
            QtCore.QPointF(0, h), QtCore.QPointF(-h, 0),
        ])
        fill = Theme.accent if self.selected else Theme.marker
        p.setBrush(fill)
        p.setPen(QtGui.QPen(Theme.text if self.selected else Theme.stroke, 1.5 if self.selected else 1.0))
        p.drawPolygon(diamond)
        if self.eased:
            # Hollow centre marks a non-linear arrival
            p.setBrush(Theme.panel)
            p.setPen(QtCore.Qt.PenStyle.NoPen)
            p.drawEllipse(QtCore.QPointF(0, 0), h * 0.35, h * 0.35)
