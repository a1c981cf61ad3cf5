import json

import pytest
from PySide6.QtCore import QSettings

from tweenr.core.config import (
    MemoryStore, PanelPreference, PresetStore, QSettingsStore, Settings, ThemePreference,
)
from tweenr.core.model import Layer
from app_config import LEFT_WIDTH_KEY, PRESETS_KEY, THEME_KEY, UI_COLLAPSED_KEY


class BrokenStore:
    def get(self, key):
        raise OSError("backend gone")

    def set(self, key, value):
        raise OSError("read-only")


class TestPresets:
    def test_empty_store(self):
        assert PresetStore(MemoryStore()).load() == []

    @pytest.mark.parametrize("raw", ["{not json", '{"name": "x"}', "42", '[{"name": "x", "config": 3}]'])
    def test_malformed_content_is_ignored(self, raw):
        assert PresetStore(MemoryStore({PRESETS_KEY: raw})).load() == []

    def test_save_appends(self):
        store = MemoryStore()
        presets = PresetStore(store)
        assert presets.save("Intro", [Layer(label="A")])
        assert presets.save("Outro", [Layer(label="B"), Layer(label="C")])
        data = json.loads(store.data[PRESETS_KEY])
        assert [p["name"] for p in data] == ["Intro", "Outro"]
        assert presets.names() == ["Intro", "Outro"]

    def test_layers_are_fresh_copies(self):
        presets = PresetStore(MemoryStore())
        original = Layer(label="Hero", x=12.0)
        presets.save("p", [original])
        first = presets.layers(0)
        second = presets.layers(0)
        assert first[0].label == "Hero"
        assert first[0].x == 12.0
        assert first[0] is not second[0]
        first[0].label = "changed"
        assert presets.layers(0)[0].label == "Hero"

    def test_out_of_range(self):
        assert PresetStore(MemoryStore()).layers(3) == []

    @pytest.mark.parametrize("config", [{"x": "abc"}, {"keyframes": [{"time": "soon"}]}])
    def test_unparseable_layer_yields_nothing(self, config):
        raw = json.dumps([{"name": "bad", "config": [config]}])
        assert PresetStore(MemoryStore({PRESETS_KEY: raw})).layers(0) == []

    def test_non_dict_keyframes_are_skipped(self):
        raw = json.dumps([{"name": "odd", "config": [{"label": "Hero", "keyframes": ["oops"]}]}])
        layers = PresetStore(MemoryStore({PRESETS_KEY: raw})).layers(0)
        assert [l.label for l in layers] == ["Hero"]
        assert layers[0].keyframes == []

    def test_failing_backend(self):
        presets = PresetStore(BrokenStore())
        assert presets.load() == []
        assert presets.save("x", [Layer()]) is False


class TestPreferences:
    def test_theme_fallback(self):
        assert ThemePreference(MemoryStore()).load() == "light"
        assert ThemePreference(MemoryStore({THEME_KEY: "neon"})).load() == "light"
        assert ThemePreference(BrokenStore()).load() == "light"

    def test_theme_round_trip(self):
        store = MemoryStore()
        pref = ThemePreference(store)
        assert pref.save("crimson")
        assert pref.load() == "crimson"
        assert ThemePreference(BrokenStore()).save("dark") is False

    def test_panel_defaults(self):
        pref = PanelPreference(MemoryStore())
        assert pref.left_width() == 640
        assert pref.collapsed() is False

    def test_panel_round_trip(self):
        store = MemoryStore()
        pref = PanelPreference(store)
        assert pref.save(left_width=512, collapsed=True)
        assert store.data[LEFT_WIDTH_KEY] == "512"
        assert store.data[UI_COLLAPSED_KEY] == "true"
        assert pref.left_width() == 512
        assert pref.collapsed() is True

    def test_panel_garbage_width(self):
        assert PanelPreference(MemoryStore({LEFT_WIDTH_KEY: "wide"})).left_width() == 640


def test_qsettings_store_persists(tmp_path):
    path = str(tmp_path / "tweenr.ini")
    store = QSettingsStore(Settings(QSettings(path, QSettings.Format.IniFormat)))
    ThemePreference(store).save("dark")
    reopened = QSettingsStore(Settings(QSettings(path, QSettings.Format.IniFormat)))
    assert ThemePreference(reopened).load() == "dark"
    assert reopened.get("missing") is None
