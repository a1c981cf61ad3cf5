# tweenr/ui/main_window.py
from __future__ import annotations
import json
from pathlib import Path
from typing import Optional

from tweenr.qt import QtCore, QtGui, QtWidgets
from tweenr.core import export
from tweenr.core.config import (
    KeyValueStore, PanelPreference, PresetStore, QSettingsStore, Settings, ThemePreference, get_settings,
)
from tweenr.core.logging import get_logger
from tweenr.core.model import AnimationDocument
from tweenr.core.playback import PlaybackController
from tweenr.ui.image_cache import ImageCache
from tweenr.ui.inspector_tabs import InspectorTabs
from tweenr.ui.preview_view import PreviewCanvas
from tweenr.ui.scroll_preview import ScrollPreviewDialog
from tweenr.ui.theme import apply_theme
from tweenr.ui.timeline.controller import TimelineController
from tweenr.ui.timeline.view import TimelinePanel
from tweenr.ui.transport import TransportBar
from app_config import APP_NAME, THEMES, version_string

STATUS_TIMEOUT_MS = 4000


class MainWindow(QtWidgets.QMainWindow):
    """
    One editing session: the document, its controllers and every view of it.
    Left column: preview, transport, timeline. Right: inspector tabs.
    """
    def __init__(self, store: Optional[KeyValueStore] = None, settings: Optional[Settings] = None):
        super().__init__()
        self._log = get_logger(__name__)
        self.setWindowTitle(APP_NAME)
        self.resize(1280, 800)
        self.settings = settings or get_settings()
        self.store = store or QSettingsStore(self.settings)
        self.theme_pref = ThemePreference(self.store)
        self.panel_pref = PanelPreference(self.store)
        self.presets = PresetStore(self.store)
        self._scroll_dialog: Optional[ScrollPreviewDialog] = None

        # Session
        self.document = AnimationDocument(parent=self)
        self.playback = PlaybackController(self.document, parent=self)
        self.timeline_ctl = TimelineController(self.document, self.playback, parent=self)
        self.images = ImageCache(self)

        # Views
        self.preview = PreviewCanvas(self.document, self.images, self)
        self.transport = TransportBar(self.document, self.playback, self)
        self.timeline = TimelinePanel(self.document, self.timeline_ctl, self)
        self.inspector = InspectorTabs(self.document, self.presets, self._export_size, self)

        left_col = QtWidgets.QWidget()
        left_layout = QtWidgets.QVBoxLayout(left_col)
        left_layout.setContentsMargins(0, 0, 0, 0)
        left_layout.setSpacing(0)
        vsplit = QtWidgets.QSplitter(QtCore.Qt.Orientation.Vertical)
        vsplit.addWidget(self.preview)
        bottom = QtWidgets.QWidget()
        bl = QtWidgets.QVBoxLayout(bottom)
        bl.setContentsMargins(0, 0, 0, 0)
        bl.setSpacing(0)
        bl.addWidget(self.transport)
        bl.addWidget(self.timeline, 1)
        vsplit.addWidget(bottom)
        vsplit.setStretchFactor(0, 3)
        vsplit.setStretchFactor(1, 2)
        left_layout.addWidget(vsplit)

        self.splitter = QtWidgets.QSplitter()
        self.splitter.addWidget(left_col)
        self.splitter.addWidget(self.inspector)
        self.splitter.setStretchFactor(0, 1)
        self.setCentralWidget(self.splitter)

        self.statusBar().showMessage(f"{APP_NAME} {version_string()}", STATUS_TIMEOUT_MS)

        self._wire()
        self._build_menu()
        self._restore_state()

    # ──────────────────────────────────────────────────────────────────────────
    # Wiring
    # ──────────────────────────────────────────────────────────────────────────
    def _wire(self) -> None:
        self.timeline_ctl.message.connect(self.announce)
        self.inspector.message.connect(self.announce)

        # Keyframe selection follows into the inspector and preview overlays
        def _on_kf_selected(ref) -> None:
            if ref is None:
                return
            self.inspector.layers.select_keyframe(ref.layer_id, ref.keyframe_id)
            self.preview.set_selected_layer(ref.layer_id)

        self.timeline_ctl.selectionChanged.connect(_on_kf_selected)
        self.inspector.layers.layerSelected.connect(self.preview.set_selected_layer)
        self.preview.layerPicked.connect(self.inspector.layers.select_layer)

    def announce(self, text: str) -> None:
        self._log.debug("status: %s", text)
        self.statusBar().showMessage(text, STATUS_TIMEOUT_MS)

    def _export_size(self) -> tuple:
        return max(1, self.preview.width()), max(1, self.preview.height())

    def _build_menu(self) -> None:
        bar = self.menuBar()

        file_menu = bar.addMenu("&File")
        new_act = QtGui.QAction("&New", self)
        new_act.setShortcut(QtGui.QKeySequence.StandardKey.New)
        new_act.triggered.connect(self._new_document)
        file_menu.addAction(new_act)
        open_act = QtGui.QAction("&Open JSON...", self)
        open_act.setShortcut(QtGui.QKeySequence.StandardKey.Open)
        open_act.triggered.connect(self._open_dialog)
        file_menu.addAction(open_act)
        save_act = QtGui.QAction("&Save JSON...", self)
        save_act.setShortcut(QtGui.QKeySequence.StandardKey.Save)
        save_act.triggered.connect(self._save_dialog)
        file_menu.addAction(save_act)
        file_menu.addSeparator()
        exit_act = QtGui.QAction("E&xit", self)
        exit_act.triggered.connect(self.close)
        file_menu.addAction(exit_act)

        play_menu = bar.addMenu("&Playback")
        toggle_act = QtGui.QAction("Play / Pause", self)
        toggle_act.setShortcut(QtGui.QKeySequence(QtCore.Qt.Key.Key_Space))
        toggle_act.triggered.connect(self.playback.toggle)
        play_menu.addAction(toggle_act)
        stop_act = QtGui.QAction("Stop", self)
        stop_act.triggered.connect(self.playback.stop)
        play_menu.addAction(stop_act)

        view_menu = bar.addMenu("&View")
        theme_menu = view_menu.addMenu("Theme")
        self._theme_group = QtGui.QActionGroup(self)
        self._theme_actions = {}
        for name in THEMES:
            act = QtGui.QAction(name.capitalize(), self, checkable=True)
            act.triggered.connect(lambda _=False, n=name: self.set_theme(n))
            self._theme_group.addAction(act)
            theme_menu.addAction(act)
            self._theme_actions[name] = act
        overlay_act = QtGui.QAction("Placement overlays", self, checkable=True)
        overlay_act.setChecked(True)
        overlay_act.toggled.connect(self.preview.set_show_overlays)
        view_menu.addAction(overlay_act)
        self._collapse_act = QtGui.QAction("Hide inspector", self, checkable=True)
        self._collapse_act.toggled.connect(self._set_collapsed)
        view_menu.addAction(self._collapse_act)
        view_menu.addSeparator()
        scroll_act = QtGui.QAction("Preview as scroll...", self)
        scroll_act.triggered.connect(self._open_scroll_preview)
        view_menu.addAction(scroll_act)

    # ──────────────────────────────────────────────────────────────────────────
    # Actions
    # ──────────────────────────────────────────────────────────────────────────
    def set_theme(self, name: str) -> None:
        app = QtWidgets.QApplication.instance()
        applied = apply_theme(app, name) if app is not None else name
        self._theme_actions[applied].setChecked(True)
        self.theme_pref.save(applied)
        self.timeline.view.rebuild()
        self.preview.update()
        self.announce(f"Theme: {applied}")

    def _set_collapsed(self, collapsed: bool) -> None:
        self.inspector.setVisible(not collapsed)
        self.panel_pref.save(collapsed=collapsed)

    def _new_document(self) -> None:
        self.playback.stop()
        self.timeline_ctl.clear_selection()
        self.document.reset()
        self.announce("New animation")

    def _open_dialog(self) -> None:
        path, _ = QtWidgets.QFileDialog.getOpenFileName(
            self, "Open animation", self.settings.get("paths/last_open_dir", ""), "JSON (*.json)")
        if not path:
            return
        self.settings.set("paths/last_open_dir", QtCore.QFileInfo(path).absolutePath())
        try:
            payload = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as ex:
            self._log.warning("Open failed for %s: %s", path, ex)
            self.announce(f"Could not open {Path(path).name}")
            return
        self.open_payload(payload, Path(path).name)

    def open_payload(self, payload: object, name: str) -> bool:
        if not isinstance(payload, dict):
            self.announce(f"{name} is not an animation")
            return False
        self.playback.stop()
        self.timeline_ctl.clear_selection()
        try:
            self.document.load_payload(payload)
        except (TypeError, ValueError, AttributeError) as ex:
            self._log.warning("Rejected animation %s: %s", name, ex)
            self.announce(f"Could not open {name}: malformed animation")
            return False
        self.announce(f"Opened {name}")
        return True

    def _save_dialog(self) -> None:
        start = self.settings.get("paths/last_open_dir", "")
        path, _ = QtWidgets.QFileDialog.getSaveFileName(self, "Save animation", start, "JSON (*.json)")
        if not path:
            return
        if export.write_export(path, export.payload_json(self.document)):
            self.announce(f"Saved {Path(path).name}")
        else:
            self.announce(f"Could not save {Path(path).name}")

    def _open_scroll_preview(self) -> None:
        if self._scroll_dialog is not None:
            self._scroll_dialog.close()
        self._scroll_dialog = ScrollPreviewDialog(self.document, self.playback, self)
        self._scroll_dialog.show()

    # ──────────────────────────────────────────────────────────────────────────
    # State
    # ──────────────────────────────────────────────────────────────────────────
    def _restore_state(self) -> None:
        g = self.settings.get("ui/main_geometry")
        if isinstance(g, QtCore.QByteArray):
            self.restoreGeometry(g)
        self.set_theme(self.theme_pref.load())
        left = self.panel_pref.left_width()
        self.splitter.setSizes([left, max(300, self.width() - left)])
        self._collapse_act.setChecked(self.panel_pref.collapsed())

    def closeEvent(self, e: QtGui.QCloseEvent) -> None:
        self.playback.shutdown()
        self.timeline_ctl.shutdown()
        sizes = self.splitter.sizes()
        if sizes and sizes[0] > 0:
            self.panel_pref.save(left_width=sizes[0])
        self.settings.set("ui/main_geometry", self.saveGeometry())
        return super().closeEvent(e)
