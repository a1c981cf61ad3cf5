# tweenr/ui/compositor.py
from __future__ import annotations
from typing import Mapping, Optional, Tuple

from tweenr.qt import QtCore, QtGui
from tweenr.core.interpolation import Sample, sample_layer
from tweenr.core.model import AnimationDocument, Layer


def fit_inside(iw: float, ih: float, bw: float, bh: float) -> Tuple[float, float]:
    """Largest (w, h) with the image's aspect ratio that fits in the box."""
    if iw <= 0 or ih <= 0 or bw <= 0 or bh <= 0:
        return 0.0, 0.0
    s = min(bw / iw, bh / ih)
    return iw * s, ih * s


def layer_box(layer: Layer, sample: Optional[Sample], width: float, height: float) -> QtCore.QRectF:
    """Layer rectangle in surface pixels, centred on (x%, y%) and shifted down by translate."""
    bw = layer.w / 100.0 * width
    bh = layer.h / 100.0 * height
    cx = layer.x / 100.0 * width
    cy = layer.y / 100.0 * height + (sample.translate if sample else 0.0)
    return QtCore.QRectF(cx - bw / 2.0, cy - bh / 2.0, bw, bh)


def _label_color(fill: QtGui.QColor) -> QtGui.QColor:
    return QtGui.QColor("#111827") if fill.lightnessF() > 0.55 else QtGui.QColor("#f9fafb")


class Compositor:
    """
    Paints the document at one instant. Stateless: a fresh surface is allocated on
    every call and samples are recomputed, so nothing can go stale across frames.
    """
    def __init__(self) -> None:
        self.label_font = QtGui.QFont()
        self.label_font.setPointSizeF(11.0)

    def render(self, document: AnimationDocument, time: float, size: Tuple[int, int],
               device_pixel_ratio: float = 1.0,
               images: Optional[Mapping[str, QtGui.QImage]] = None) -> QtGui.QImage:
        w, h = max(1, int(size[0])), max(1, int(size[1]))
        dpr = max(1.0, float(device_pixel_ratio))
        img = QtGui.QImage(int(round(w * dpr)), int(round(h * dpr)),
                           QtGui.QImage.Format.Format_ARGB32_Premultiplied)
        img.setDevicePixelRatio(dpr)
        img.fill(QtCore.Qt.GlobalColor.transparent)

        p = QtGui.QPainter(img)
        try:
            p.setRenderHints(QtGui.QPainter.RenderHint.Antialiasing
                             | QtGui.QPainter.RenderHint.SmoothPixmapTransform
                             | QtGui.QPainter.RenderHint.TextAntialiasing)
            self.paint(p, document, time, w, h, images or {})
        finally:
            p.end()
        return img

    def paint(self, p: QtGui.QPainter, document: AnimationDocument, time: float,
              width: float, height: float, images: Mapping[str, QtGui.QImage]) -> None:
        for layer in document.layers:
            if not layer.visible:
                continue
            s = sample_layer(layer, time)
            if s is None:
                continue
            box = layer_box(layer, s, width, height)
            p.save()
            p.setOpacity(s.opacity)
            ready = images.get(layer.id) if layer.image else None
            if ready is not None and not ready.isNull():
                dw, dh = fit_inside(ready.width(), ready.height(), box.width(), box.height())
                target = QtCore.QRectF(box.center().x() - dw / 2.0, box.center().y() - dh / 2.0, dw, dh)
                p.drawImage(target, ready)
            else:
                fill = QtGui.QColor(layer.color)
                if not fill.isValid():
                    fill = QtGui.QColor("#ffffff")
                p.fillRect(box, fill)
                if not layer.image:
                    p.setFont(self.label_font)
                    p.setPen(_label_color(fill))
                    p.drawText(box, int(QtCore.Qt.AlignmentFlag.AlignCenter), layer.label)
            p.restore()


def layer_at(document: AnimationDocument, time: float, point: Tuple[float, float],
             width: float, height: float) -> Optional[str]:
    """Topmost visible layer whose box contains point, as drawn at `time`."""
    pt = QtCore.QPointF(point[0], point[1])
    for layer in reversed(document.layers):
        if not layer.visible:
            continue
        s = sample_layer(layer, time)
        if s is not None and layer_box(layer, s, width, height).contains(pt):
            return layer.id
    return None
