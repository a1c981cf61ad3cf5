# tweenr/ui/transport.py
from __future__ import annotations
from typing import Optional

from tweenr.qt import QtCore, QtWidgets
from tweenr.core.model import AnimationDocument, PlaybackState
from tweenr.core.playback import PlaybackController
from tweenr.ui.theme import set_icon
from app_config import DEFAULTS

_TL = DEFAULTS["timeline"]


class TransportBar(QtWidgets.QWidget):
    """
    Play / pause / stop plus the timeline settings:
    duration, snap toggle and interval, zoom, and the current time readout.
    """
    def __init__(self, document: AnimationDocument, playback: PlaybackController,
                 parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self.document = document
        self.playback = playback

        self.play_btn = QtWidgets.QToolButton()
        self.play_btn.setToolTip("Play (Space)")
        self.pause_btn = QtWidgets.QToolButton()
        self.pause_btn.setToolTip("Pause (Space)")
        self.stop_btn = QtWidgets.QToolButton()
        self.stop_btn.setToolTip("Stop and rewind")
        set_icon(self.play_btn, "fa5s.play", "▶")
        set_icon(self.pause_btn, "fa5s.pause", "⏸")
        set_icon(self.stop_btn, "fa5s.stop", "■")

        self.duration_spin = QtWidgets.QSpinBox()
        self.duration_spin.setRange(100, 600_000)
        self.duration_spin.setSingleStep(100)
        self.duration_spin.setSuffix(" ms")
        self.duration_spin.setKeyboardTracking(False)

        self.snap_check = QtWidgets.QCheckBox("Snap")
        self.snap_spin = QtWidgets.QSpinBox()
        self.snap_spin.setRange(1, 10_000)
        self.snap_spin.setSuffix(" ms")
        self.snap_spin.setKeyboardTracking(False)

        self.zoom_slider = QtWidgets.QSlider(QtCore.Qt.Orientation.Horizontal)
        self.zoom_slider.setRange(int(_TL["zoom_min"] * 10), int(_TL["zoom_max"] * 10))
        self.zoom_slider.setFixedWidth(110)
        self.zoom_slider.setToolTip("Timeline zoom (Ctrl + wheel)")

        self.time_label = QtWidgets.QLabel()
        self.time_label.setMinimumWidth(110)
        self.time_label.setAlignment(QtCore.Qt.AlignmentFlag.AlignRight | QtCore.Qt.AlignmentFlag.AlignVCenter)

        lay = QtWidgets.QHBoxLayout(self)
        lay.setContentsMargins(6, 6, 6, 6)
        lay.setSpacing(8)
        lay.addWidget(self.play_btn)
        lay.addWidget(self.pause_btn)
        lay.addWidget(self.stop_btn)
        lay.addSpacing(12)
        lay.addWidget(QtWidgets.QLabel("Duration"))
        lay.addWidget(self.duration_spin)
        lay.addWidget(self.snap_check)
        lay.addWidget(self.snap_spin)
        lay.addWidget(QtWidgets.QLabel("Zoom"))
        lay.addWidget(self.zoom_slider)
        lay.addStretch()
        lay.addWidget(self.time_label)

        self.play_btn.clicked.connect(playback.play)
        self.pause_btn.clicked.connect(playback.pause)
        self.stop_btn.clicked.connect(playback.stop)
        self.duration_spin.valueChanged.connect(document.set_duration)
        self.snap_check.toggled.connect(lambda on: document.set_snap(on))
        self.snap_spin.valueChanged.connect(lambda v: document.set_snap(document.timeline.snap_enabled, v))
        self.zoom_slider.valueChanged.connect(lambda v: document.set_zoom(v / 10.0))

        document.settingsChanged.connect(self.refresh)
        document.timeChanged.connect(self._on_time)
        playback.stateChanged.connect(self._on_state)
        self.refresh()
        self._on_state(playback.state)
        self._on_time(document.current_time)

    def refresh(self) -> None:
        tl = self.document.timeline
        for w in (self.duration_spin, self.snap_check, self.snap_spin, self.zoom_slider):
            w.blockSignals(True)
        self.duration_spin.setValue(tl.duration)
        self.snap_check.setChecked(tl.snap_enabled)
        self.snap_spin.setValue(max(1, tl.snap_interval))
        self.snap_spin.setEnabled(tl.snap_enabled)
        self.zoom_slider.setValue(int(round(tl.zoom * 10)))
        for w in (self.duration_spin, self.snap_check, self.snap_spin, self.zoom_slider):
            w.blockSignals(False)

    @QtCore.Slot(float)
    def _on_time(self, t: float) -> None:
        self.time_label.setText(f"Time: {int(round(t))} ms")

    @QtCore.Slot(object)
    def _on_state(self, state: PlaybackState) -> None:
        playing = state is PlaybackState.PLAYING
        self.play_btn.setEnabled(not playing)
        self.pause_btn.setEnabled(playing)
