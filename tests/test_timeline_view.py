import pytest

from tweenr.qt import QtWidgets
from tweenr.ui.timeline.controller import TimelineController
from tweenr.ui.timeline.view import TimelinePanel


@pytest.fixture
def panel(document, playback, scheduler):
    ctl = TimelineController(document, playback, scheduler=scheduler)
    p = TimelinePanel(document, ctl)
    p.resize(640, 240)
    p.show()
    QtWidgets.QApplication.processEvents()
    p.view.rebuild()
    yield p
    p.close()


def test_one_marker_per_keyframe(panel):
    assert len(panel.view._markers) == 3
    assert len(panel.view._tracks) == 2


def test_markers_follow_document(panel, document):
    document.add_keyframe("b", time=1500)
    assert len(panel.view._markers) == 4


def test_time_to_x_scales_with_zoom(panel, document):
    x1 = panel.view.time_to_x(1000)
    document.set_zoom(2.0)
    assert panel.view.time_to_x(1000) == pytest.approx(2 * x1)


def test_geometry_snapshot_matches_viewport(panel, document):
    geo = panel.view.geometry_snapshot()
    assert geo.width == panel.view.viewport().width()
    assert geo.zoom == document.timeline.zoom
