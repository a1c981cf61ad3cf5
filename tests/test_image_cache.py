import base64
import time

import cv2
import numpy as np
import pytest

from tweenr.qt import QtCore
from tweenr.core.model import AnimationDocument, Layer
from tweenr.ui.image_cache import (
    ImageCache, ImageState, decode_image, read_source_bytes, rgba_to_qimage,
)


def _png(arr) -> bytes:
    ok, buf = cv2.imencode(".png", arr)
    assert ok
    return buf.tobytes()


@pytest.fixture
def red_png():
    bgr = np.zeros((4, 6, 3), dtype=np.uint8)
    bgr[:, :] = (0, 0, 255)
    return _png(bgr)


@pytest.fixture
def cache(monkeypatch):
    c = ImageCache()
    # Decodes are driven by hand through _on_decoded
    monkeypatch.setattr(c, "_decode_worker", lambda *_a: None)
    return c


class TestDecode:
    def test_bgr_becomes_rgba(self, red_png):
        rgba = decode_image(red_png)
        assert rgba.shape == (4, 6, 4)
        assert tuple(rgba[0, 0]) == (255, 0, 0, 255)

    def test_grayscale(self):
        rgba = decode_image(_png(np.full((3, 3), 128, dtype=np.uint8)))
        assert tuple(rgba[1, 1]) == (128, 128, 128, 255)

    def test_alpha_kept(self):
        bgra = np.zeros((2, 2, 4), dtype=np.uint8)
        bgra[:, :] = (255, 0, 0, 64)
        assert tuple(decode_image(_png(bgra))[0, 0]) == (0, 0, 255, 64)

    def test_garbage(self):
        assert decode_image(b"definitely not an image") is None

    def test_qimage_conversion(self, red_png):
        img = rgba_to_qimage(decode_image(red_png))
        assert (img.width(), img.height()) == (6, 4)
        c = img.pixelColor(0, 0)
        assert (c.red(), c.green(), c.blue(), c.alpha()) == (255, 0, 0, 255)


class TestSources:
    def test_base64_data_url(self, red_png):
        url = "data:image/png;base64," + base64.b64encode(red_png).decode("ascii")
        assert read_source_bytes(url) == red_png

    def test_file_path_and_uri(self, tmp_path, red_png):
        pic = tmp_path / "red.png"
        pic.write_bytes(red_png)
        assert read_source_bytes(str(pic)) == red_png
        assert read_source_bytes(pic.as_uri()) == red_png

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(OSError):
            read_source_bytes(str(tmp_path / "nope.png"))


class TestCacheStates:
    def test_request_is_pending(self, cache):
        cache.request("a", "pic.png")
        assert cache.state("a") is ImageState.PENDING
        assert cache.images() == {}

    def test_decoded_becomes_ready(self, cache, red_png):
        ready = []
        cache.imageReady.connect(ready.append)
        cache.request("a", "pic.png")
        cache._on_decoded("a", "pic.png", decode_image(red_png))
        assert cache.state("a") is ImageState.READY
        assert ready == ["a"]
        assert cache.images()["a"].width() == 6

    def test_failed_decode(self, cache):
        cache.request("a", "pic.png")
        cache._on_decoded("a", "pic.png", None)
        assert cache.state("a") is ImageState.FAILED
        assert cache.images() == {}

    def test_superseded_result_ignored(self, cache, red_png):
        cache.request("a", "old.png")
        cache.request("a", "new.png")
        cache._on_decoded("a", "old.png", decode_image(red_png))
        assert cache.state("a") is ImageState.PENDING

    def test_sync_follows_document(self, cache):
        doc = AnimationDocument(layers=[Layer(id="a", image="a.png"), Layer(id="b")])
        cache.sync(doc)
        assert cache.state("a") is ImageState.PENDING
        assert cache.state("b") is None
        doc.update_layer("a", image=None)
        cache.sync(doc)
        assert cache.state("a") is None


def test_worker_thread_delivers_image(tmp_path, red_png):
    pic = tmp_path / "red.png"
    pic.write_bytes(red_png)
    cache = ImageCache()
    cache.request("a", str(pic))
    deadline = time.monotonic() + 5.0
    while cache.state("a") is ImageState.PENDING and time.monotonic() < deadline:
        QtCore.QCoreApplication.processEvents(QtCore.QEventLoop.ProcessEventsFlag.AllEvents, 50)
        time.sleep(0.01)
    assert cache.state("a") is ImageState.READY
