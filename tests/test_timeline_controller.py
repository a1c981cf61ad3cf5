import pytest

from tweenr.qt import QtCore
from tweenr.ui.timeline.controller import (
    AUTOSCROLL_STEP_PX, InteractionState, KeyframeRef, TimelineController, TrackGeometry,
)

from conftest import FakeScrollBar

Key = QtCore.Qt.Key

# 400px wide track over the default 2000ms timeline: 5ms per pixel
GEO = TrackGeometry(left=0.0, width=400.0)


@pytest.fixture
def ctl(document, playback, scheduler):
    return TimelineController(document, playback, scheduler=scheduler)


def _times(document, layer_id="a"):
    return [k.time for k in document.layer(layer_id).keyframes]


class TestKeyframeDrag:
    def test_begin_selects_and_enters_dragging(self, ctl):
        seen = []
        ctl.selectionChanged.connect(seen.append)
        assert ctl.begin_keyframe_drag("a", "k1", GEO, 200)
        assert ctl.state is InteractionState.DRAGGING
        assert ctl.selection == KeyframeRef("a", "k1")
        assert seen == [KeyframeRef("a", "k1")]

    def test_unknown_keyframe_is_refused(self, ctl):
        assert not ctl.begin_keyframe_drag("a", "nope", GEO, 200)
        assert ctl.state is InteractionState.IDLE

    def test_small_moves_are_still_a_click(self, ctl, document):
        ctl.begin_keyframe_drag("a", "k1", GEO, 200)
        ctl.pointer_move(202)
        assert document.keyframe("a", "k1").time == 1000

    def test_drag_maps_and_snaps(self, ctl, document):
        ctl.begin_keyframe_drag("a", "k1", GEO, 200)
        ctl.pointer_move(251)
        assert document.keyframe("a", "k1").time == 1250

    def test_drag_without_snap(self, ctl, document):
        document.set_snap(False)
        ctl.begin_keyframe_drag("a", "k1", GEO, 200)
        ctl.pointer_move(251)
        assert document.keyframe("a", "k1").time == 1255

    def test_drag_past_neighbour_resorts(self, ctl, document):
        ctl.begin_keyframe_drag("a", "k0", GEO, 0)
        ctl.pointer_move(300)
        assert _times(document) == [1000, 1500]
        assert [k.id for k in document.layer("a").keyframes] == ["k1", "k0"]

    def test_drag_is_clamped_to_timeline(self, ctl, document):
        ctl.begin_keyframe_drag("a", "k1", GEO, 200)
        ctl.pointer_move(900)
        assert document.keyframe("a", "k1").time == 2000
        ctl.pointer_move(-50)
        assert document.keyframe("a", "k1").time == 0

    def test_repeated_moves_do_not_drift(self, ctl, document):
        ctl.begin_keyframe_drag("a", "k1", GEO, 200)
        for _ in range(5):
            ctl.pointer_move(251)
        assert document.keyframe("a", "k1").time == 1250

    def test_release_reports_and_returns_to_idle(self, ctl):
        msgs = []
        ctl.message.connect(msgs.append)
        ctl.begin_keyframe_drag("a", "k1", GEO, 200)
        ctl.pointer_move(251)
        ctl.pointer_release()
        assert ctl.state is InteractionState.IDLE
        assert msgs[-1] == "Keyframe moved to 1250ms"

    def test_cancel_keeps_written_time(self, ctl, document):
        ctl.begin_keyframe_drag("a", "k1", GEO, 200)
        ctl.pointer_move(300)
        ctl.pointer_cancel()
        assert ctl.state is InteractionState.IDLE
        assert document.keyframe("a", "k1").time == 1500
        ctl.pointer_move(10)
        assert document.keyframe("a", "k1").time == 1500


class TestScrub:
    def test_scrub_sets_unsnapped_time(self, ctl, document):
        ctl.begin_scrub(GEO, 101)
        assert ctl.state is InteractionState.SCRUBBING
        assert document.current_time == pytest.approx(505)

    def test_scrub_follows_pointer_and_releases(self, ctl, document):
        msgs = []
        ctl.message.connect(msgs.append)
        ctl.begin_scrub(GEO, 0)
        ctl.pointer_move(80)
        ctl.pointer_release()
        assert document.current_time == pytest.approx(400)
        assert msgs[-1] == "Time set to 400ms"
        assert ctl.state is InteractionState.IDLE

    def test_scrub_while_playing_moves_the_clock(self, ctl, playback, document, clock, scheduler):
        playback.play()
        ctl.begin_scrub(GEO, 200)
        clock.advance(10)
        scheduler.run_pending()
        assert document.current_time == pytest.approx(1010)

    def test_zoom_and_scroll_offset(self, ctl, document):
        bar = FakeScrollBar(value=100, maximum=400)
        ctl.begin_scrub(TrackGeometry(0.0, 400.0, zoom=2.0), 100, bar)
        assert document.current_time == pytest.approx(500)

    def test_scrub_does_not_touch_keyframes(self, ctl, document):
        ctl.begin_scrub(GEO, 251)
        assert _times(document) == [0, 1000]


class TestAutoScroll:
    def _drag_near_right_edge(self, ctl, document, bar):
        document.set_snap(False)
        ctl.begin_keyframe_drag("a", "k1", TrackGeometry(0.0, 400.0, zoom=2.0), 200, bar)
        ctl.pointer_move(390)

    def test_poll_scrolls_and_keyframe_follows(self, ctl, document, scheduler):
        bar = FakeScrollBar(value=0, maximum=400)
        self._drag_near_right_edge(ctl, document, bar)
        assert document.keyframe("a", "k1").time == 975
        seen = []
        for _ in range(5):
            scheduler.run_pending()
            seen.append((bar.value(), document.keyframe("a", "k1").time))
        assert [v for v, _ in seen] == [AUTOSCROLL_STEP_PX * i for i in range(1, 6)]
        times = [t for _, t in seen]
        assert times == sorted(times)
        assert times[-1] == 1125

    def test_poll_idles_away_from_edges(self, ctl, document, scheduler):
        bar = FakeScrollBar(value=0, maximum=400)
        self._drag_near_right_edge(ctl, document, bar)
        scheduler.run_pending()
        ctl.pointer_move(200)
        before = bar.value()
        scheduler.run_pending()
        scheduler.run_pending()
        assert bar.value() == before

    def test_scroll_clamped_at_maximum(self, ctl, document, scheduler):
        bar = FakeScrollBar(value=0, maximum=30)
        self._drag_near_right_edge(ctl, document, bar)
        for _ in range(10):
            scheduler.run_pending()
        assert bar.value() == 30

    def test_left_edge_scrolls_back(self, ctl, document, scheduler):
        bar = FakeScrollBar(value=100, maximum=400)
        ctl.begin_keyframe_drag("a", "k1", TrackGeometry(0.0, 400.0, zoom=2.0), 200, bar)
        ctl.pointer_move(10)
        scheduler.run_pending()
        assert bar.value() == 100 - AUTOSCROLL_STEP_PX

    def test_release_stops_the_poll(self, ctl, document, scheduler):
        bar = FakeScrollBar(value=0, maximum=400)
        self._drag_near_right_edge(ctl, document, bar)
        assert scheduler.pending == 1
        ctl.pointer_release()
        assert scheduler.pending == 0

    def test_no_poll_without_scroller(self, ctl, scheduler):
        ctl.begin_keyframe_drag("a", "k1", GEO, 200)
        assert scheduler.pending == 0


class TestKeyboard:
    def test_nothing_selected(self, ctl):
        assert not ctl.handle_key(Key.Key_Right)

    def test_nudges(self, ctl, document):
        ctl.select("a", "k1")
        assert ctl.handle_key(Key.Key_Right)
        assert document.keyframe("a", "k1").time == 1010
        ctl.handle_key(Key.Key_Left, shift=True)
        assert document.keyframe("a", "k1").time == 910
        ctl.handle_key(Key.Key_Plus)
        ctl.handle_key(Key.Key_Minus)
        assert document.keyframe("a", "k1").time == 910

    def test_nudge_clamps_at_zero(self, ctl, document):
        ctl.select("a", "k0")
        ctl.handle_key(Key.Key_Left, shift=True)
        assert document.keyframe("a", "k0").time == 0

    def test_delete_clears_selection(self, ctl, document):
        msgs = []
        ctl.message.connect(msgs.append)
        ctl.select("a", "k1")
        assert ctl.handle_key(Key.Key_Delete)
        assert document.keyframe("a", "k1") is None
        assert ctl.selection is None
        assert msgs[-1] == "Keyframe deleted"

    def test_add_at_playhead(self, ctl, document):
        document.set_current_time(733.4)
        ctl.select("b", "k2")
        assert ctl.handle_key(Key.Key_A)
        assert _times(document, "b") == [500, 733]

    def test_unhandled_key(self, ctl):
        ctl.select("a", "k1")
        assert not ctl.handle_key(Key.Key_Q)

    def test_selection_pruned_when_keyframe_disappears(self, ctl, document):
        ctl.select("a", "k0")
        document.remove_keyframe("a", "k0")
        assert ctl.selection is None
