import pytest

from tweenr.qt import QtCore, QtGui
from tweenr.ui.image_cache import ImageCache
from tweenr.ui.preview_view import PreviewCanvas


@pytest.fixture
def canvas(document):
    c = PreviewCanvas(document, ImageCache())
    c.resize(400, 200)
    yield c
    c.close()


def _move(x, y, buttons=QtCore.Qt.MouseButton.NoButton):
    pos = QtCore.QPointF(x, y)
    return QtGui.QMouseEvent(QtCore.QEvent.Type.MouseMove, pos, pos, QtCore.Qt.MouseButton.NoButton,
                             buttons, QtCore.Qt.KeyboardModifier.NoModifier)


class TestLostCapture:
    def test_focus_out_ends_placement(self, canvas):
        assert canvas.placement.begin("a", (200, 100), (400, 200))
        canvas.focusOutEvent(QtGui.QFocusEvent(QtCore.QEvent.Type.FocusOut))
        assert not canvas.placement.active

    def test_move_without_button_ends_placement(self, canvas, document):
        before = (document.layer("a").x, document.layer("a").y)
        canvas.placement.begin("a", (200, 100), (400, 200))
        canvas.mouseMoveEvent(_move(300, 150))
        assert not canvas.placement.active
        assert (document.layer("a").x, document.layer("a").y) == before

    def test_move_with_button_drags(self, canvas, document):
        before = document.layer("a").x
        canvas.placement.begin("a", (200, 100), (400, 200))
        canvas.mouseMoveEvent(_move(240, 100, QtCore.Qt.MouseButton.LeftButton))
        assert canvas.placement.active
        assert document.layer("a").x != before
