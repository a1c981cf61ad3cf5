import json

from tweenr.core.config import MemoryStore, PresetStore
from tweenr.ui.inspector_tabs import ExportTab, PresetsTab
from app_config import PRESETS_KEY


def test_preset_save_and_load(document):
    tab = PresetsTab(document, PresetStore(MemoryStore()))
    msgs = []
    tab.message.connect(msgs.append)
    tab.name_edit.setText("Two layers")
    tab._save()
    assert tab.list.count() == 1
    assert msgs[-1] == "Preset saved: Two layers"

    document.remove_layer("b")
    tab.list.setCurrentRow(0)
    tab._load()
    assert [l.label for l in document.layers] == ["Back", "Front"]
    assert msgs[-1] == "Preset loaded: Two layers"


def test_blank_preset_name_ignored(document):
    tab = PresetsTab(document, PresetStore(MemoryStore()))
    tab._save()
    assert tab.list.count() == 0


def test_export_tab_uses_size_hint_and_loop(document):
    tab = ExportTab(document, size_hint=lambda: (321, 123))
    tab.loop_check.setChecked(True)
    src = tab._component()
    assert "width = 321, height = 123" in src
    assert "loop = true" in src


def test_malformed_preset_leaves_layers(document):
    raw = json.dumps([{"name": "bad", "config": [{"x": "abc"}]}])
    tab = PresetsTab(document, PresetStore(MemoryStore({PRESETS_KEY: raw})))
    msgs = []
    tab.message.connect(msgs.append)
    tab.list.setCurrentRow(0)
    tab._load()
    assert msgs[-1] == "Preset is empty or unreadable"
    assert [l.label for l in document.layers] == ["Back", "Front"]
