import pytest

from tweenr.qt import QtGui
from tweenr.core.model import AnimationDocument, Keyframe, Layer
from tweenr.ui.compositor import Compositor, fit_inside, layer_at


def _layer(lid, color, translate=0.0, opacity=1.0, **kw):
    # Empty label keeps text pixels out of the colour checks
    return Layer(id=lid, label="", color=color, w=50.0, h=50.0,
                 keyframes=[Keyframe(time=0, translate=translate, opacity=opacity)], **kw)


def _rgba(img, x, y):
    c = img.pixelColor(x, y)
    return c.red(), c.green(), c.blue(), c.alpha()


class TestFitInside:
    def test_wide_image_in_square_box(self):
        assert fit_inside(200, 100, 50, 50) == (50, 25)

    def test_tall_image(self):
        assert fit_inside(100, 400, 80, 80) == (20, 80)

    def test_degenerate_sizes(self):
        assert fit_inside(0, 10, 50, 50) == (0, 0)
        assert fit_inside(10, 10, 0, 50) == (0, 0)


class TestRender:
    def test_surface_size_follows_device_pixel_ratio(self):
        img = Compositor().render(AnimationDocument(layers=[]), 0, (100, 60), device_pixel_ratio=2.0)
        assert (img.width(), img.height()) == (200, 120)
        assert img.devicePixelRatio() == 2.0

    def test_colour_placeholder(self):
        doc = AnimationDocument(layers=[_layer("a", "#ff0000")])
        img = Compositor().render(doc, 0, (100, 100))
        assert _rgba(img, 50, 50) == (255, 0, 0, 255)
        assert _rgba(img, 10, 10)[3] == 0

    def test_hidden_and_empty_layers_are_skipped(self):
        hidden = _layer("a", "#ff0000", visible=False)
        empty = Layer(id="b", label="", color="#00ff00", keyframes=[])
        img = Compositor().render(AnimationDocument(layers=[hidden, empty]), 0, (100, 100))
        assert _rgba(img, 50, 50)[3] == 0

    def test_later_layers_paint_on_top(self):
        doc = AnimationDocument(layers=[_layer("a", "#ff0000"), _layer("b", "#0000ff")])
        img = Compositor().render(doc, 0, (100, 100))
        assert _rgba(img, 50, 50) == (0, 0, 255, 255)

    def test_translate_moves_layer_down(self):
        doc = AnimationDocument(layers=[_layer("a", "#ff0000", translate=20.0)])
        img = Compositor().render(doc, 0, (100, 100))
        assert _rgba(img, 50, 30)[3] == 0
        assert _rgba(img, 50, 90) == (255, 0, 0, 255)

    def test_opacity(self):
        doc = AnimationDocument(layers=[_layer("a", "#ff0000", opacity=0.5)])
        img = Compositor().render(doc, 0, (100, 100))
        assert _rgba(img, 50, 50)[3] == pytest.approx(128, abs=2)

    def test_ready_image_replaces_placeholder(self):
        doc = AnimationDocument(layers=[_layer("a", "#ff0000", image="pic.png")])
        pic = QtGui.QImage(10, 10, QtGui.QImage.Format.Format_ARGB32)
        pic.fill(QtGui.QColor("#0000ff"))
        img = Compositor().render(doc, 0, (100, 100), images={"a": pic})
        assert _rgba(img, 50, 50) == (0, 0, 255, 255)

    def test_pending_image_draws_colour(self):
        doc = AnimationDocument(layers=[_layer("a", "#00ff00", image="pic.png")])
        img = Compositor().render(doc, 0, (100, 100), images={})
        assert _rgba(img, 50, 50) == (0, 255, 0, 255)

    def test_fresh_surface_every_call(self):
        doc = AnimationDocument(layers=[_layer("a", "#ff0000")])
        comp = Compositor()
        comp.render(doc, 0, (100, 100))
        doc.update_layer("a", visible=False)
        assert _rgba(comp.render(doc, 0, (100, 100)), 50, 50)[3] == 0


class TestHitTest:
    def test_topmost_wins(self):
        doc = AnimationDocument(layers=[_layer("a", "#ff0000"), _layer("b", "#0000ff")])
        assert layer_at(doc, 0, (50, 50), 100, 100) == "b"

    def test_miss_and_hidden(self):
        doc = AnimationDocument(layers=[_layer("a", "#ff0000"), _layer("b", "#0000ff", visible=False)])
        assert layer_at(doc, 0, (50, 50), 100, 100) == "a"
        assert layer_at(doc, 0, (5, 5), 100, 100) is None

    def test_uses_translated_box(self):
        doc = AnimationDocument(layers=[_layer("a", "#ff0000", translate=40.0)])
        assert layer_at(doc, 0, (50, 30), 100, 100) is None
        assert layer_at(doc, 0, (50, 95), 100, 100) == "a"
