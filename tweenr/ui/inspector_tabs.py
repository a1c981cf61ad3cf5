# tweenr/ui/inspector_tabs.py
from __future__ import annotations
from pathlib import Path
from typing import Callable, Optional

from tweenr.qt import QtCore, QtWidgets
from tweenr.core import export
from tweenr.core.config import PresetStore
from tweenr.core.model import AnimationDocument
from tweenr.ui.layer_panel import LayerPanel
from app_config import (
    DEFAULTS, EXPORT_COMPONENT_FILENAME, EXPORT_HTML_FILENAME, EXPORT_JSON_FILENAME,
)


class PresetsTab(QtWidgets.QWidget):
    message = QtCore.Signal(str)

    def __init__(self, document: AnimationDocument, presets: PresetStore,
                 parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self.document = document
        self.presets = presets

        self.name_edit = QtWidgets.QLineEdit()
        self.name_edit.setPlaceholderText("Preset name")
        self.save_btn = QtWidgets.QPushButton("Save")
        self.list = QtWidgets.QListWidget()
        self.load_btn = QtWidgets.QPushButton("Load selected")

        row = QtWidgets.QHBoxLayout()
        row.addWidget(self.name_edit, 1)
        row.addWidget(self.save_btn)
        l = QtWidgets.QVBoxLayout(self)
        l.setContentsMargins(8, 8, 8, 8)
        l.addLayout(row)
        l.addWidget(self.list, 1)
        l.addWidget(self.load_btn)

        self.save_btn.clicked.connect(self._save)
        self.name_edit.returnPressed.connect(self._save)
        self.load_btn.clicked.connect(self._load)
        self.list.itemDoubleClicked.connect(lambda _it: self._load())
        self.reload()

    def reload(self) -> None:
        self.list.clear()
        self.list.addItems(self.presets.names())
        self.load_btn.setEnabled(self.list.count() > 0)

    def _save(self) -> None:
        name = self.name_edit.text().strip()
        if not name:
            return
        if self.presets.save(name, self.document.layers):
            self.name_edit.clear()
            self.reload()
            self.message.emit(f"Preset saved: {name}")
        else:
            self.message.emit(f"Could not save preset {name}")

    def _load(self) -> None:
        row = self.list.currentRow()
        layers = self.presets.layers(row)
        if not layers:
            self.message.emit("Preset is empty or unreadable")
            return
        self.document.replace_layers(layers)
        self.message.emit(f"Preset loaded: {self.list.item(row).text()}")


class ExportTab(QtWidgets.QWidget):
    """Clipboard and file exports. Outcomes are reported through `message`."""
    message = QtCore.Signal(str)

    def __init__(self, document: AnimationDocument, size_hint: Callable[[], tuple] = lambda: export.DEFAULT_EXPORT_SIZE,
                 parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self.document = document
        self._size_hint = size_hint
        self.export_dir = Path(DEFAULTS["paths"]["export_dir"])

        self.loop_check = QtWidgets.QCheckBox("Loop in exported players")
        copy_box = QtWidgets.QGroupBox("Copy to clipboard")
        cl = QtWidgets.QVBoxLayout(copy_box)
        file_box = QtWidgets.QGroupBox("Save to file")
        fl = QtWidgets.QVBoxLayout(file_box)

        def _button(text: str, slot, layout) -> None:
            b = QtWidgets.QPushButton(text)
            b.clicked.connect(slot)
            layout.addWidget(b)

        _button("JSON", lambda: self._copy("JSON", export.payload_json(document)), cl)
        _button("Snippet", lambda: self._copy("Snippet", export.snippet(document)), cl)
        _button("React component", lambda: self._copy("React component", self._component()), cl)
        _button(f"{EXPORT_JSON_FILENAME}…", lambda: self._save(EXPORT_JSON_FILENAME, "JSON (*.json)", export.payload_json(document)), fl)
        _button(f"{EXPORT_COMPONENT_FILENAME}…", lambda: self._save(EXPORT_COMPONENT_FILENAME, "TSX (*.tsx)", self._component()), fl)
        _button(f"{EXPORT_HTML_FILENAME}…", lambda: self._save(EXPORT_HTML_FILENAME, "HTML (*.html)", self._html()), fl)

        l = QtWidgets.QVBoxLayout(self)
        l.setContentsMargins(8, 8, 8, 8)
        l.addWidget(self.loop_check)
        l.addWidget(copy_box)
        l.addWidget(file_box)
        l.addStretch(1)

    def _component(self) -> str:
        w, h = self._size_hint()
        return export.react_component(self.document, w, h, loop=self.loop_check.isChecked())

    def _html(self) -> str:
        w, h = self._size_hint()
        return export.html_preview(self.document, w, h, loop=self.loop_check.isChecked())

    def _copy(self, what: str, text: str) -> None:
        if export.copy_to_clipboard(text):
            self.message.emit(f"{what} copied")
        else:
            self.message.emit(f"Could not copy {what}")

    def _save(self, filename: str, filt: str, text: str) -> None:
        path, _ = QtWidgets.QFileDialog.getSaveFileName(self, "Export", str(self.export_dir / filename), filt)
        if not path:
            return
        self.export_dir = Path(path).parent
        if export.write_export(path, text):
            self.message.emit(f"Exported {Path(path).name}")
        else:
            self.message.emit(f"Could not write {Path(path).name}")


class InspectorTabs(QtWidgets.QTabWidget):
    message = QtCore.Signal(str)

    def __init__(self, document: AnimationDocument, presets: PresetStore,
                 size_hint: Callable[[], tuple] = lambda: export.DEFAULT_EXPORT_SIZE,
                 parent: QtWidgets.QWidget | None = None) -> None:
        super().__init__(parent)
        self.setMinimumWidth(300)
        self.setTabPosition(QtWidgets.QTabWidget.TabPosition.North)
        self.layers = LayerPanel(document, self)
        self.presets = PresetsTab(document, presets, self)
        self.exports = ExportTab(document, size_hint, self)
        self.addTab(self.layers, "Layers")
        self.addTab(self.presets, "Presets")
        self.addTab(self.exports, "Export")
        for tab in (self.layers, self.presets, self.exports):
            tab.message.connect(self.message)
