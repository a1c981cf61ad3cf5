# tweenr/ui/image_cache.py
from __future__ import annotations
import base64
import threading
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Tuple
from urllib.parse import unquote, urlparse

import cv2
import numpy as np

from tweenr.qt import QtCore, QtGui
from tweenr.core.logging import get_logger
from tweenr.core.model import AnimationDocument

log = get_logger(__name__)


class ImageState(Enum):
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


def read_source_bytes(source: str) -> bytes:
    """Raw encoded bytes for a file path, file:// URI or base64 data: URL."""
    if source.startswith("data:"):
        header, _, body = source.partition(",")
        if ";base64" in header:
            return base64.b64decode(body)
        return unquote(body).encode("latin-1")
    if source.startswith("file:"):
        source = unquote(urlparse(source).path)
    return Path(source).read_bytes()


def decode_image(data: bytes) -> Optional[np.ndarray]:
    """Decode to a contiguous uint8 RGBA array (h, w, 4), or None if OpenCV can't read it."""
    buf = np.frombuffer(data, dtype=np.uint8)
    arr = cv2.imdecode(buf, cv2.IMREAD_UNCHANGED)
    if arr is None:
        return None
    if arr.dtype == np.uint16:
        arr = (arr / 257).astype(np.uint8)
    if arr.ndim == 2:
        rgba = cv2.cvtColor(arr, cv2.COLOR_GRAY2RGBA)
    elif arr.shape[2] == 3:
        rgba = cv2.cvtColor(arr, cv2.COLOR_BGR2RGBA)
    else:
        rgba = cv2.cvtColor(arr, cv2.COLOR_BGRA2RGBA)
    return np.ascontiguousarray(rgba)


def rgba_to_qimage(rgba: np.ndarray) -> QtGui.QImage:
    h, w, ch = rgba.shape
    assert ch == 4
    # copy() detaches from the numpy buffer
    return QtGui.QImage(rgba.data, w, h, 4 * w, QtGui.QImage.Format.Format_RGBA8888).copy()


class ImageCache(QtCore.QObject):
    """
    Decoded layer images keyed by layer id. Decoding runs on worker threads; results
    come back through a queued signal. A failed decode stays FAILED (the compositor
    keeps drawing the colour placeholder) until the layer's image source changes.
    """
    imageReady = QtCore.Signal(str)               # layer id
    _decoded = QtCore.Signal(str, str, object)    # (layer id, source, rgba or None)

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self._log = get_logger(__name__)
        self._entries: Dict[str, Tuple[str, ImageState, Optional[QtGui.QImage]]] = {}
        self._decoded.connect(self._on_decoded, QtCore.Qt.ConnectionType.QueuedConnection)

    def state(self, layer_id: str) -> Optional[ImageState]:
        entry = self._entries.get(layer_id)
        return entry[1] if entry else None

    def images(self) -> Dict[str, QtGui.QImage]:
        """READY images only; everything else renders as a placeholder."""
        return {lid: img for lid, (_, st, img) in self._entries.items()
                if st is ImageState.READY and img is not None}

    def sync(self, document: AnimationDocument) -> None:
        """Start decodes for new or changed layer images and drop entries that went away."""
        wanted = {l.id: l.image for l in document.layers if l.image}
        for lid in list(self._entries):
            if lid not in wanted:
                del self._entries[lid]
        for lid, source in wanted.items():
            entry = self._entries.get(lid)
            if entry is None or entry[0] != source:
                self.request(lid, source)

    def request(self, layer_id: str, source: str) -> None:
        self._entries[layer_id] = (source, ImageState.PENDING, None)
        t = threading.Thread(target=self._decode_worker, args=(layer_id, source),
                             daemon=True, name="TweenrImageDecode")
        t.start()

    def _decode_worker(self, layer_id: str, source: str) -> None:
        rgba: Optional[np.ndarray] = None
        try:
            rgba = decode_image(read_source_bytes(source))
        except Exception as ex:
            log.warning("Image load failed for layer %s: %s", layer_id, ex)
        self._decoded.emit(layer_id, source, rgba)

    @QtCore.Slot(str, str, object)
    def _on_decoded(self, layer_id: str, source: str, rgba: object) -> None:
        entry = self._entries.get(layer_id)
        if entry is None or entry[0] != source:
            return  # superseded while decoding
        if rgba is None:
            self._log.warning("Could not decode image for layer %s", layer_id)
            self._entries[layer_id] = (source, ImageState.FAILED, None)
            return
        img = rgba_to_qimage(rgba)
        self._entries[layer_id] = (source, ImageState.READY, img)
        self._log.debug("Image ready for layer %s (%dx%d)", layer_id, img.width(), img.height())
        self.imageReady.emit(layer_id)
