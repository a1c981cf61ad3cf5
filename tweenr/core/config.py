# tweenr/core/config.py
from __future__ import annotations
import json
from typing import Any, Dict, List, Optional, Protocol, Sequence

from PySide6.QtCore import QSettings
from tweenr.core.logging import get_logger
from tweenr.core.model import Layer
from app_config import (
    apply_qsettings_org, DEFAULTS, PRESETS_KEY, THEME_KEY, LEFT_WIDTH_KEY,
    UI_COLLAPSED_KEY, THEMES,
)

log = get_logger(__name__)


class Settings:
    """
    Thin wrapper over QSettings with defaults and simple dict-like get/set.
    Uses Native format (registry/plist/ini depending on platform).
    """
    def __init__(self, qsettings: Optional[QSettings] = None):
        if qsettings is None:
            apply_qsettings_org()
            qsettings = QSettings()
        self._qs = qsettings

    def get(self, key: str, default: Any = None) -> Any:
        val = self._qs.value(key, default)
        return val if val is not None else default

    def set(self, key: str, value: Any) -> None:
        self._qs.setValue(key, value)
        self._qs.sync()

    def remove(self, key: str) -> None:
        self._qs.remove(key)

    def status_ok(self) -> bool:
        return self._qs.status() == QSettings.Status.NoError


def get_settings() -> Settings:
    return Settings()


# ───────────────────────────────────────────────────────────────────────────────
# Persistence port: one string per key
# ───────────────────────────────────────────────────────────────────────────────
class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...
    def set(self, key: str, value: str) -> None: ...


class QSettingsStore:
    """KeyValueStore over the app's QSettings. set() raises OSError when the backend refuses the write."""
    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()

    def get(self, key: str) -> Optional[str]:
        val = self._settings.get(key)
        return None if val is None else str(val)

    def set(self, key: str, value: str) -> None:
        self._settings.set(key, value)
        if not self._settings.status_ok():
            raise OSError(f"settings write failed for {key!r}")


class MemoryStore:
    """Dict backed store for tests and throwaway sessions."""
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


# ───────────────────────────────────────────────────────────────────────────────
# Presets
# ───────────────────────────────────────────────────────────────────────────────
class PresetStore:
    """
    Named snapshots of the layer list, stored as a JSON array of {name, config}.
    Reads tolerate a missing key or malformed content; writes never raise.
    """
    def __init__(self, store: KeyValueStore, key: str = PRESETS_KEY) -> None:
        self._store = store
        self._key = key

    def load(self) -> List[Dict[str, Any]]:
        try:
            raw = self._store.get(self._key)
        except Exception:
            log.warning("Preset read failed", exc_info=True)
            return []
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            log.warning("Ignoring malformed presets under %s", self._key)
            return []
        if not isinstance(data, list):
            log.warning("Ignoring presets under %s: expected a list", self._key)
            return []
        return [p for p in data if isinstance(p, dict) and isinstance(p.get("config"), list)]

    def names(self) -> List[str]:
        return [str(p.get("name") or f"Preset {i + 1}") for i, p in enumerate(self.load())]

    def save(self, name: str, layers: Sequence[Layer]) -> bool:
        presets = self.load()
        presets.append({"name": name, "config": [l.to_dict() for l in layers]})
        try:
            self._store.set(self._key, json.dumps(presets))
        except Exception:
            log.warning("Preset save failed (%s)", name, exc_info=True)
            return False
        log.info("Saved preset %r (%d layers)", name, len(layers))
        return True

    def layers(self, index: int) -> List[Layer]:
        """Fresh Layer objects rebuilt from snapshot `index`; [] when out of range."""
        presets = self.load()
        if not 0 <= index < len(presets):
            return []
        try:
            return [Layer.from_dict(d) for d in presets[index]["config"] if isinstance(d, dict)]
        except (TypeError, ValueError, AttributeError) as ex:
            log.warning("Ignoring malformed preset %d: %s", index, ex)
            return []


# ───────────────────────────────────────────────────────────────────────────────
# UI preferences
# ───────────────────────────────────────────────────────────────────────────────
class ThemePreference:
    def __init__(self, store: KeyValueStore, key: str = THEME_KEY) -> None:
        self._store = store
        self._key = key

    def load(self) -> str:
        try:
            value = self._store.get(self._key)
        except Exception:
            log.warning("Theme read failed", exc_info=True)
            return THEMES[0]
        return value if value in THEMES else THEMES[0]

    def save(self, theme: str) -> bool:
        if theme not in THEMES:
            theme = THEMES[0]
        try:
            self._store.set(self._key, theme)
        except Exception:
            log.warning("Theme save failed", exc_info=True)
            return False
        return True


class PanelPreference:
    """Left panel width and the collapsed flag of the inspector."""
    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def left_width(self) -> int:
        default = int(DEFAULTS["editor"]["left_width"])
        try:
            raw = self._store.get(LEFT_WIDTH_KEY)
            return max(0, int(float(raw))) if raw else default
        except Exception:
            log.warning("Ignoring stored panel width")
            return default

    def collapsed(self) -> bool:
        try:
            return (self._store.get(UI_COLLAPSED_KEY) or "").lower() in ("1", "true")
        except Exception:
            log.warning("Ignoring stored collapsed flag")
            return False

    def save(self, left_width: Optional[int] = None, collapsed: Optional[bool] = None) -> bool:
        try:
            if left_width is not None:
                self._store.set(LEFT_WIDTH_KEY, str(int(left_width)))
            if collapsed is not None:
                self._store.set(UI_COLLAPSED_KEY, "true" if collapsed else "false")
        except Exception:
            log.warning("Panel preference save failed", exc_info=True)
            return False
        return True
