import json

import pytest
from PySide6.QtCore import QSettings
from PySide6 import QtWidgets

from tweenr.core.config import MemoryStore, Settings
from tweenr.ui.main_window import MainWindow
from app_config import THEME_KEY, UI_COLLAPSED_KEY


@pytest.fixture
def window(tmp_path):
    settings = Settings(QSettings(str(tmp_path / "ui.ini"), QSettings.Format.IniFormat))
    store = MemoryStore({THEME_KEY: "dark"})
    w = MainWindow(store=store, settings=settings)
    yield w
    w.close()


def test_restores_saved_theme(window):
    assert window.theme_pref.load() == "dark"
    assert window._theme_actions["dark"].isChecked()


def test_theme_switch_is_persisted(window):
    window.set_theme("crimson")
    assert window.store.data[THEME_KEY] == "crimson"


def test_collapse_inspector(window):
    window._collapse_act.setChecked(True)
    assert window.inspector.isHidden()
    assert window.store.data[UI_COLLAPSED_KEY] == "true"


def test_new_document_resets_session(window):
    window.document.add_layer(label="Extra")
    window.playback.seek(900)
    window._new_document()
    assert len(window.document.layers) == 2
    assert window.document.current_time == 0.0


def test_malformed_file_is_reported(window, tmp_path, monkeypatch):
    path = tmp_path / "broken.json"
    path.write_text(json.dumps({"timelineDuration": 5000, "layers": [{"x": "abc"}]}), encoding="utf-8")
    monkeypatch.setattr(QtWidgets.QFileDialog, "getOpenFileName", lambda *a, **k: (str(path), ""))
    window._open_dialog()
    assert window.statusBar().currentMessage() == "Could not open broken.json: malformed animation"
    assert window.document.duration == 2000
    assert len(window.document.layers) == 2


def test_open_payload_replaces_document(window):
    assert window.open_payload({"timelineDuration": 3000, "layers": [{"id": "z", "label": "Solo"}]}, "solo.json")
    assert window.document.duration == 3000
    assert [l.label for l in window.document.layers] == ["Solo"]
