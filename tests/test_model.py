import pytest

from tweenr.core.model import AnimationDocument, Keyframe, Layer, PlaybackState


class TestDefaults:
    def test_new_document(self):
        doc = AnimationDocument()
        assert doc.duration == 2000
        assert doc.current_time == 0.0
        assert doc.timeline.snap_enabled is True
        assert doc.timeline.snap_interval == 50
        assert doc.timeline.playback_state is PlaybackState.STOPPED
        assert [l.label for l in doc.layers] == ["Layer", "Foreground"]

    def test_default_layer_keyframes(self):
        layer = Layer()
        assert [k.time for k in layer.keyframes] == [0, 1000]
        assert layer.keyframes[0].opacity == 0.0
        assert layer.keyframes[0].translate == 40.0

    def test_reset_restores_default_layers(self, document):
        document.reset()
        assert len(document.layers) == 2
        assert document.layers[0].label == "Layer"


class TestKeyframeEdits:
    def test_add_keyframe_defaults_to_half_duration(self, document):
        kf = document.add_keyframe("b")
        assert kf.time == 1000
        assert [k.time for k in document.layer("b").keyframes] == [500, 1000]

    def test_add_keyframe_unknown_layer(self, document):
        assert document.add_keyframe("nope") is None

    def test_set_keyframe_time_clamps_and_sorts(self, document):
        assert document.set_keyframe_time("a", "k0", 5000) == 2000
        assert [k.id for k in document.layer("a").keyframes] == ["k1", "k0"]
        assert document.set_keyframe_time("a", "k0", -40) == 0
        assert [k.id for k in document.layer("a").keyframes] == ["k0", "k1"]

    def test_set_keyframe_time_emits_only_on_change(self, document):
        seen = []
        document.changed.connect(lambda: seen.append(1))
        document.set_keyframe_time("a", "k1", 1000)
        assert seen == []
        document.set_keyframe_time("a", "k1", 1200)
        assert seen == [1]

    def test_update_keyframe_clamps_opacity(self, document):
        document.update_keyframe("a", "k1", opacity=3.0, bezier=[0.1, 0.2, 0.3, 0.4])
        kf = document.keyframe("a", "k1")
        assert kf.opacity == 1.0
        assert kf.bezier == (0.1, 0.2, 0.3, 0.4)

    def test_update_keyframe_rejects_unknown_field(self, document):
        with pytest.raises(AttributeError):
            document.update_keyframe("a", "k1", speed=2)

    def test_remove_keyframe(self, document):
        document.remove_keyframe("a", "k0")
        assert [k.id for k in document.layer("a").keyframes] == ["k1"]


class TestLayerEdits:
    def test_layer_lookup_raises(self, document):
        with pytest.raises(KeyError):
            document.layer("missing")
        assert document.find_layer("missing") is None

    def test_position_is_clamped_to_percent(self, document):
        document.set_layer_position("a", 120, -5)
        layer = document.layer("a")
        assert (layer.x, layer.y) == (100.0, 0.0)

    def test_update_layer_rejects_keyframes(self, document):
        with pytest.raises(AttributeError):
            document.update_layer("a", keyframes=[])

    def test_move_layer(self, document):
        document.move_layer("b", 0)
        assert [l.id for l in document.layers] == ["b", "a"]


class TestTimeline:
    def test_set_current_time_always_emits(self, document):
        seen = []
        document.timeChanged.connect(seen.append)
        document.set_current_time(0)
        document.set_current_time(0)
        assert seen == [0.0, 0.0]

    def test_current_time_clamped(self, document):
        document.set_current_time(9999)
        assert document.current_time == 2000

    def test_shorter_duration_pulls_current_time(self, document):
        document.set_current_time(1800)
        document.set_duration(1000)
        assert document.duration == 1000
        assert document.current_time == 1000

    def test_duration_minimum(self, document):
        document.set_duration(0)
        assert document.duration == 1

    def test_zoom_clamped(self, document):
        document.set_zoom(10)
        assert document.timeline.zoom == 4.0
        document.set_zoom(0.1)
        assert document.timeline.zoom == 0.5


class TestPayload:
    def test_round_trip(self, document):
        payload = document.to_payload()
        assert payload["timelineDuration"] == 2000
        restored = AnimationDocument.from_payload(payload)
        assert restored.to_payload() == payload

    def test_load_sorts_and_sanitises(self):
        doc = AnimationDocument.from_payload({
            "timelineDuration": 3000,
            "layers": [{
                "id": "x",
                "keyframes": [
                    {"id": "late", "time": 900, "easing": "wobble"},
                    {"id": "early", "time": 100, "opacity": 4},
                ],
            }, "not-a-layer"],
        })
        assert doc.duration == 3000
        layer = doc.layer("x")
        assert [k.id for k in layer.keyframes] == ["early", "late"]
        assert layer.keyframes[1].easing == "linear"
        assert layer.keyframes[0].opacity == 1.0

    def test_keyframe_bezier_serialised_as_list(self):
        d = Keyframe(time=10, bezier=(0.25, 0.1, 0.25, 1.0)).to_dict()
        assert d["bezier"] == [0.25, 0.1, 0.25, 1.0]
        assert "bezier" not in Keyframe(time=10).to_dict()

    def test_bad_layer_leaves_document_untouched(self, document):
        with pytest.raises(ValueError):
            document.load_payload({"timelineDuration": 5000, "layers": [{"x": "abc"}]})
        assert document.duration == 2000
        assert [l.id for l in document.layers] == ["a", "b"]
