# tweenr/ui/theme.py
from __future__ import annotations
from typing import Dict

import qtawesome as qta

from tweenr.qt import QtGui, QtWidgets

# name -> role -> hex
PALETTES: Dict[str, Dict[str, str]] = {
    "light": {
        "bg": "#f6f7fb",
        "panel": "#ffffff",
        "panel_alt": "#eef0f5",
        "stroke": "#d5d9e0",
        "text": "#1f2328",
        "text_dim": "#5f6875",
        "accent": "#2563eb",
        "track": "#f1f3f7",
        "track_alt": "#e9ecf2",
        "ruler": "#e4e7ee",
        "marker": "#475569",
        "playhead": "#ef4444",
        "stage": "#ffffff",
    },
    "dark": {
        "bg": "#1f2124",
        "panel": "#26292e",
        "panel_alt": "#2c3036",
        "stroke": "#3a3f46",
        "text": "#d6d7d9",
        "text_dim": "#aab0b7",
        "accent": "#3fb6ff",
        "track": "#262626",
        "track_alt": "#2d2d2d",
        "ruler": "#2a2a2a",
        "marker": "#bfc5cc",
        "playhead": "#ff5252",
        "stage": "#0b1220",
    },
    "crimson": {
        "bg": "#1b0b0e",
        "panel": "#2a1216",
        "panel_alt": "#34171c",
        "stroke": "#4a232a",
        "text": "#f3e6e8",
        "text_dim": "#c9a9ae",
        "accent": "#e11d48",
        "track": "#2a1216",
        "track_alt": "#311519",
        "ruler": "#3a1a20",
        "marker": "#f0c3cb",
        "playhead": "#fb7185",
        "stage": "#12070a",
    },
}


class Theme:
    """Active colours, read by painters. apply_theme() swaps them in place."""
    name = "light"
    bg = QtGui.QColor(PALETTES["light"]["bg"])
    panel = QtGui.QColor(PALETTES["light"]["panel"])
    panel_alt = QtGui.QColor(PALETTES["light"]["panel_alt"])
    stroke = QtGui.QColor(PALETTES["light"]["stroke"])
    text = QtGui.QColor(PALETTES["light"]["text"])
    text_dim = QtGui.QColor(PALETTES["light"]["text_dim"])
    accent = QtGui.QColor(PALETTES["light"]["accent"])
    track = QtGui.QColor(PALETTES["light"]["track"])
    track_alt = QtGui.QColor(PALETTES["light"]["track_alt"])
    ruler = QtGui.QColor(PALETTES["light"]["ruler"])
    marker = QtGui.QColor(PALETTES["light"]["marker"])
    playhead = QtGui.QColor(PALETTES["light"]["playhead"])
    stage = QtGui.QColor(PALETTES["light"]["stage"])

    @classmethod
    def load(cls, name: str) -> str:
        if name not in PALETTES:
            name = "light"
        for role, value in PALETTES[name].items():
            setattr(cls, role, QtGui.QColor(value))
        cls.name = name
        return name


def qcolor_hex(c: QtGui.QColor) -> str:
    return c.name(QtGui.QColor.NameFormat.HexRgb)


def apply_theme(app: QtWidgets.QApplication, name: str) -> str:
    """Load a palette into Theme and onto the Fusion style. Returns the applied name."""
    name = Theme.load(name)
    app.setStyle("Fusion")
    pal = QtGui.QPalette()
    pal.setColor(QtGui.QPalette.ColorRole.Window, Theme.bg)
    pal.setColor(QtGui.QPalette.ColorRole.Base, Theme.panel)
    pal.setColor(QtGui.QPalette.ColorRole.AlternateBase, Theme.panel_alt)
    pal.setColor(QtGui.QPalette.ColorRole.Text, Theme.text)
    pal.setColor(QtGui.QPalette.ColorRole.WindowText, Theme.text)
    pal.setColor(QtGui.QPalette.ColorRole.ButtonText, Theme.text)
    pal.setColor(QtGui.QPalette.ColorRole.Button, Theme.panel)
    pal.setColor(QtGui.QPalette.ColorRole.ToolTipBase, Theme.panel)
    pal.setColor(QtGui.QPalette.ColorRole.ToolTipText, Theme.text)
    pal.setColor(QtGui.QPalette.ColorRole.PlaceholderText, Theme.text_dim)
    pal.setColor(QtGui.QPalette.ColorRole.Highlight, Theme.accent)
    pal.setColor(QtGui.QPalette.ColorRole.HighlightedText, QtGui.QColor("#ffffff"))
    app.setPalette(pal)
    app.setStyleSheet(f"""
        QSplitter::handle {{ background-color: {qcolor_hex(Theme.stroke)}; }}
        QStatusBar {{ color: {qcolor_hex(Theme.text_dim)}; }}
    """)
    return name


def set_icon(button: QtWidgets.QAbstractButton, fa_name: str, fallback: str,
             color: QtGui.QColor | None = None) -> None:
    """Font Awesome 5 (solid) icon via QtAwesome. Falls back to text if the font can't load."""
    try:
        button.setIcon(qta.icon(fa_name, color=(color or Theme.text_dim).name()))
        button.setText("")
    except Exception:
        button.setIcon(QtGui.QIcon())
        button.setText(fallback)
