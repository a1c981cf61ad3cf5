# tweenr/ui/timeline/ruler.py
from __future__ import annotations
from typing import List, NamedTuple

from tweenr.qt import QtCore, QtGui, QtWidgets
from tweenr.ui.theme import Theme

TICK_CANDIDATES_MS = (50, 100, 200, 250, 500, 1000, 2000, 5000, 10000)
MAX_MAJORS = 12
MAX_LABELS = 10


class Ticks(NamedTuple):
    major: int
    minor: int
    majors: List[int]
    minors: List[int]


def compute_ticks(duration_ms: int) -> Ticks:
    """Smallest candidate spacing giving at most 12 majors; minors halve it."""
    major = next((c for c in TICK_CANDIDATES_MS if duration_ms / c <= MAX_MAJORS), 1000)
    minor = max(1, round(major / 2))
    majors = list(range(0, int(duration_ms) + 1, major))
    minors = [t for t in range(0, int(duration_ms) + 1, minor) if t % major]
    return Ticks(major, minor, majors, minors)


def labelled(majors: List[int]) -> List[int]:
    if len(majors) <= MAX_LABELS:
        return majors
    step = -(-len(majors) // MAX_LABELS)
    return majors[::step]


def fmt_time(ms: int) -> str:
    if ms >= 1000:
        return f"{ms / 1000:.0f}s" if ms % 1000 == 0 else f"{ms / 1000:.1f}s"
    return f"{ms}ms"


class RulerItem(QtWidgets.QGraphicsItem):
    def __init__(self, duration_ms: int, width: float, height: int = 24):
        super().__init__()
        self._duration = max(1, int(duration_ms))
        self._width = float(width)
        self._height = height
        self.setZValue(1000)  # on top

    def set_extent(self, duration_ms: int, width: float) -> None:
        self.prepareGeometryChange()
        self._duration = max(1, int(duration_ms))
        self._width = max(1.0, float(width))
        self.update()

    def boundingRect(self) -> QtCore.QRectF:
        return QtCore.QRectF(0, 0, self._width, self._height)

    def paint(self, p: QtGui.QPainter, opt: QtWidgets.QStyleOptionGraphicsItem, widget=None) -> None:
        p.fillRect(self.boundingRect(), Theme.ruler)
        px_per_ms = self._width / self._duration
        ticks = compute_ticks(self._duration)

        p.setPen(QtGui.QPen(Theme.stroke))
        for t in ticks.minors:
            x = t * px_per_ms
            p.drawLine(QtCore.QPointF(x, self._height * 0.6), QtCore.QPointF(x, self._height))

        p.setPen(QtGui.QPen(Theme.text_dim))
        font = p.font()
        font.setPointSizeF(8.0)
        p.setFont(font)
        labels = set(labelled(ticks.majors))
        for t in ticks.majors:
            x = t * px_per_ms
            p.drawLine(QtCore.QPointF(x, self._height * 0.3), QtCore.QPointF(x, self._height))
            if t in labels:
                p.drawText(QtCore.QPointF(x + 3, self._height - 6), fmt_time(t))
