"""
Application configuration settings
Do not modify these values once your application has been distributed to users.
This file centralises brand, paths, storage keys and runtime defaults.
"""

from __future__ import annotations
import os
import sys
import platform
from pathlib import Path

DEV_MODE = False

# ───────────────────────────────────────────────────────────────────────────────
# Core identity
# ───────────────────────────────────────────────────────────────────────────────
# Application name (used for window titles, logs and QSettings)
APP_NAME = "Tweenr"

# Application version in format x.y.z
APP_VERSION = "0.1.0"

# Company or developer name
COMPANY_NAME = "Digi Monsters"

# Reverse-DNS App ID (used in About/QSettings/diagnostics)
APP_ID = "uk.digimonsters.tweenr"

# Organization identifiers (for QSettings, folders, About box)
ORG_NAME = "Digi Monsters"       # human readable
ORG_DIRNAME = "DigiMonsters"     # filesystem safe (no spaces)
ORG_DOMAIN = "digimonsters.uk"

# Code & distribution naming
PACKAGE_NAME = "tweenr"          # Python import package
DIST_NAME = "dm-tweenr"          # pip/dist name

TAGLINE = "Layered keyframe animation, drawn by hand."

# Build metadata (optional, stamped by CI)
BUILD_COMMIT = os.getenv("TWEENR_BUILD_COMMIT", "")[:7]
BUILD_CHANNEL = os.getenv("TWEENR_BUILD_CHANNEL", "dev")  # dev/beta/stable


def version_string() -> str:
    """Human-friendly version string for About dialogs and logs."""
    meta = f"+{BUILD_COMMIT}" if BUILD_COMMIT else ""
    chan = f" ({BUILD_CHANNEL})" if BUILD_CHANNEL and BUILD_CHANNEL != "stable" else ""
    return f"{APP_VERSION}{meta}{chan}"


# ───────────────────────────────────────────────────────────────────────────────
# Supported formats
# ───────────────────────────────────────────────────────────────────────────────
IMAGE_EXTS = {
    ".png", ".jpg", ".jpeg", ".bmp", ".gif", ".webp", ".tif", ".tiff"
}


# ───────────────────────────────────────────────────────────────────────────────
# Runtime helpers
# ───────────────────────────────────────────────────────────────────────────────
def is_frozen() -> bool:
    """True when running from a PyInstaller bundle."""
    return bool(getattr(sys, "frozen", False)) and hasattr(sys, "_MEIPASS")


def resource_path(*parts: str) -> Path:
    """
    Path to bundled/static files. In PyInstaller mode, resolves under sys._MEIPASS;
    otherwise relative to this file’s directory.
    """
    base = Path(getattr(sys, "_MEIPASS", Path(__file__).resolve().parent))
    return base.joinpath(*parts)


# ───────────────────────────────────────────────────────────────────────────────
# User data locations (settings, logs, exports)
# ───────────────────────────────────────────────────────────────────────────────
def _appdata_base() -> Path:
    system = platform.system()
    if system == "Windows":
        base = os.getenv("APPDATA") or (Path.home() / "AppData" / "Roaming")
    elif system == "Darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.getenv("XDG_CONFIG_HOME", Path.home() / ".config"))
    return Path(base) / ORG_DIRNAME / APP_NAME


APPDATA_DIR = _appdata_base()
LOG_DIR = APPDATA_DIR / "logs"
DEFAULT_EXPORT_DIR = Path.home() / "TweenrExports"


def ensure_app_dirs() -> None:
    """Create required folders if they don't exist."""
    for p in (APPDATA_DIR, LOG_DIR, DEFAULT_EXPORT_DIR):
        p.mkdir(parents=True, exist_ok=True)


# ───────────────────────────────────────────────────────────────────────────────
# QSettings bootstrap (call once during startup)
# ───────────────────────────────────────────────────────────────────────────────
def apply_qsettings_org() -> None:
    """
    Apply org/app metadata for QSettings. Call early during startup,
    before constructing your first QSettings instance.
    """
    try:
        from PySide6.QtCore import QCoreApplication
        QCoreApplication.setOrganizationName(ORG_NAME)
        QCoreApplication.setOrganizationDomain(ORG_DOMAIN)
        QCoreApplication.setApplicationName(APP_NAME)
    except Exception:
        # Safe to import this module in non-Qt contexts (e.g., tests, CLI tools)
        pass


# ───────────────────────────────────────────────────────────────────────────────
# Persisted preference keys (one string value per key)
# ───────────────────────────────────────────────────────────────────────────────
PRESETS_KEY = "animation-builder-presets"
THEME_KEY = "animation-builder-theme"
LEFT_WIDTH_KEY = "animation-leftWidth"
UI_COLLAPSED_KEY = "animation-uiCollapsed"
THEMES = ("light", "dark", "crimson")


# ───────────────────────────────────────────────────────────────────────────────
# Exports
# ───────────────────────────────────────────────────────────────────────────────
EXPORT_JSON_FILENAME = "animation.json"
EXPORT_HTML_FILENAME = "animation-preview.html"
EXPORT_COMPONENT_FILENAME = "ExportedAnimation.tsx"


# ───────────────────────────────────────────────────────────────────────────────
# Defaults / UI hints (read by the document, controllers and settings wrapper)
# ───────────────────────────────────────────────────────────────────────────────
DEFAULTS = {
    "timeline": {
        "duration_ms": 2000,
        "snap_enabled": True,
        "snap_interval_ms": 50,
        "zoom": 1.0,
        "zoom_min": 0.5,
        "zoom_max": 4.0,
        "frame_interval_ms": 16,        # ~60 Hz playback / autoscroll poll
    },
    "editor": {
        "nudge_ms": 10,
        "nudge_coarse_ms": 100,         # with Shift held
        "autoscroll_edge_px": 48,
        "autoscroll_step_px": 12,       # per frame
        "marker_hit_px": 7,
        "theme": "light",
        "left_width": 640,
    },
    "layer": {
        "label": "Layer",
        "depth": 0.5,
        "color": "#ffffff",
        "x": 50.0,
        "y": 50.0,
        "w": 60.0,
        "h": 30.0,
    },
    "parallax": {
        "max_translate_px": 80.0,
        "fade": True,
    },
    "paths": {
        "export_dir": str(DEFAULT_EXPORT_DIR),
        "logs_dir": str(LOG_DIR),
    },
}


# ───────────────────────────────────────────────────────────────────────────────
# Convenience banner for logs / about dialog
# ───────────────────────────────────────────────────────────────────────────────
def banner() -> str:
    return (
        f"{APP_NAME} {version_string()}  •  {APP_ID}\n"
        f"Vendor: {COMPANY_NAME}\n"
        f"Data: {APPDATA_DIR}"
    )


if __name__ == "__main__":
    # Quick sanity check when run directly
    ensure_app_dirs()
    print(banner())
    print("Exports:", DEFAULT_EXPORT_DIR)
