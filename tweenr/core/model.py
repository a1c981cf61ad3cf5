# tweenr/core/model.py
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from operator import attrgetter
from typing import Any, Dict, Iterable, List, Optional, Tuple
import uuid

from tweenr.qt import QtCore
from tweenr.core.easing import clamp, EASING_NAMES
from tweenr.core.logging import get_logger
from app_config import DEFAULTS

_TL = DEFAULTS["timeline"]
_LAYER = DEFAULTS["layer"]


def new_id() -> str:
    return uuid.uuid4().hex


class PlaybackState(Enum):
    STOPPED = "stopped"
    PLAYING = "playing"
    PAUSED = "paused"


@dataclass
class Keyframe:
    time: int
    translate: float = 0.0
    opacity: float = 1.0
    easing: str = "linear"
    bezier: Optional[Tuple[float, float, float, float]] = None
    id: str = field(default_factory=new_id)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "id": self.id,
            "time": int(self.time),
            "translate": float(self.translate),
            "opacity": float(self.opacity),
            "easing": self.easing,
        }
        if self.bezier is not None:
            d["bezier"] = [float(v) for v in self.bezier]
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Keyframe":
        bz = d.get("bezier")
        bezier = tuple(float(v) for v in bz) if isinstance(bz, (list, tuple)) and len(bz) == 4 else None
        easing = str(d.get("easing") or "linear")
        return cls(
            id=str(d.get("id") or new_id()),
            time=max(0, int(round(float(d.get("time", 0))))),
            translate=float(d.get("translate", 0.0)),
            opacity=clamp(float(d.get("opacity", 1.0))),
            easing=easing if easing in EASING_NAMES else "linear",
            bezier=bezier,
        )


def default_keyframes() -> List[Keyframe]:
    return [
        Keyframe(time=0, translate=40.0, opacity=0.0, easing="linear"),
        Keyframe(time=1000, translate=0.0, opacity=1.0, easing="linear"),
    ]


@dataclass
class Layer:
    label: str = _LAYER["label"]
    depth: float = _LAYER["depth"]            # 0..1, consumed by the parallax helper only
    color: str = _LAYER["color"]              # "#rrggbb"
    image: Optional[str] = None               # file path or data: URL
    visible: bool = True
    x: float = _LAYER["x"]                    # placement, percent of the preview surface
    y: float = _LAYER["y"]
    w: float = _LAYER["w"]
    h: float = _LAYER["h"]
    keyframes: List[Keyframe] = field(default_factory=default_keyframes)
    id: str = field(default_factory=new_id)

    def sort_keyframes(self) -> None:
        self.keyframes.sort(key=attrgetter("time"))

    def find_keyframe(self, kf_id: str) -> Optional[Keyframe]:
        for k in self.keyframes:
            if k.id == kf_id:
                return k
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "depth": float(self.depth),
            "color": self.color,
            "image": self.image,
            "visible": bool(self.visible),
            "x": float(self.x),
            "y": float(self.y),
            "w": float(self.w),
            "h": float(self.h),
            "keyframes": [k.to_dict() for k in self.keyframes],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Layer":
        kfs = d.get("keyframes")
        keyframes = [Keyframe.from_dict(k) for k in kfs if isinstance(k, dict)] if isinstance(kfs, list) else default_keyframes()
        layer = cls(
            id=str(d.get("id") or new_id()),
            label=str(d.get("label", _LAYER["label"])),
            depth=float(d.get("depth", _LAYER["depth"])),
            color=str(d.get("color") or _LAYER["color"]),
            image=d.get("image") or None,
            visible=bool(d.get("visible", True)),
            x=float(d.get("x", _LAYER["x"])),
            y=float(d.get("y", _LAYER["y"])),
            w=float(d.get("w", _LAYER["w"])),
            h=float(d.get("h", _LAYER["h"])),
            keyframes=keyframes,
        )
        layer.sort_keyframes()
        return layer


def default_layers() -> List[Layer]:
    return [Layer(), Layer(label="Foreground", depth=0.9, color="#f1f5f9")]


@dataclass
class TimelineState:
    duration: int = _TL["duration_ms"]
    current_time: float = 0.0
    playback_state: PlaybackState = PlaybackState.STOPPED
    snap_enabled: bool = _TL["snap_enabled"]
    snap_interval: int = _TL["snap_interval_ms"]
    zoom: float = _TL["zoom"]


class AnimationDocument(QtCore.QObject):
    """
    Owns the layers and the timeline state of one editing session.
    Every mutation goes through here so the sort/clamp rules hold and listeners
    (compositor, timeline view, inspector) are told to refresh.
    """
    changed = QtCore.Signal()                 # layers/keyframes edited
    timeChanged = QtCore.Signal(float)        # current_time
    settingsChanged = QtCore.Signal()         # duration / snap / zoom
    playbackStateChanged = QtCore.Signal(object)

    def __init__(self, layers: Optional[Iterable[Layer]] = None, parent=None) -> None:
        super().__init__(parent)
        self._log = get_logger(__name__)
        self.layers: List[Layer] = list(layers) if layers is not None else default_layers()
        for layer in self.layers:
            layer.sort_keyframes()
        self.timeline = TimelineState()

    # ──────────────────────────────────────────────────────────────────────────
    # Lookups
    # ──────────────────────────────────────────────────────────────────────────
    def layer(self, layer_id: str) -> Layer:
        for layer in self.layers:
            if layer.id == layer_id:
                return layer
        raise KeyError(layer_id)

    def find_layer(self, layer_id: str) -> Optional[Layer]:
        try:
            return self.layer(layer_id)
        except KeyError:
            return None

    def keyframe(self, layer_id: str, kf_id: str) -> Optional[Keyframe]:
        layer = self.find_layer(layer_id)
        return layer.find_keyframe(kf_id) if layer else None

    @property
    def duration(self) -> int:
        return self.timeline.duration

    @property
    def current_time(self) -> float:
        return self.timeline.current_time

    def clamp_time(self, t: float) -> int:
        return int(clamp(round(float(t)), 0, self.timeline.duration))

    # ──────────────────────────────────────────────────────────────────────────
    # Layers
    # ──────────────────────────────────────────────────────────────────────────
    def add_layer(self, **fields: Any) -> Layer:
        layer = Layer(**fields)
        layer.sort_keyframes()
        self.layers.append(layer)
        self._log.debug("add_layer(%s) %s", layer.label, layer.id)
        self.changed.emit()
        return layer

    def remove_layer(self, layer_id: str) -> None:
        before = len(self.layers)
        self.layers = [l for l in self.layers if l.id != layer_id]
        if len(self.layers) != before:
            self.changed.emit()

    def move_layer(self, layer_id: str, index: int) -> None:
        layer = self.find_layer(layer_id)
        if layer is None:
            return
        self.layers.remove(layer)
        index = max(0, min(len(self.layers), int(index)))
        self.layers.insert(index, layer)
        self.changed.emit()

    def update_layer(self, layer_id: str, **patch: Any) -> None:
        layer = self.find_layer(layer_id)
        if layer is None:
            self._log.debug("update_layer: stale id %s", layer_id)
            return
        for key, value in patch.items():
            if key in ("id", "keyframes") or not hasattr(layer, key):
                raise AttributeError(f"Layer has no editable field {key!r}")
            setattr(layer, key, value)
        self.changed.emit()

    def set_layer_position(self, layer_id: str, x: float, y: float) -> None:
        layer = self.find_layer(layer_id)
        if layer is None:
            return
        nx = clamp(float(x), 0.0, 100.0)
        ny = clamp(float(y), 0.0, 100.0)
        if nx == layer.x and ny == layer.y:
            return
        layer.x, layer.y = nx, ny
        self.changed.emit()

    def replace_layers(self, layers: Iterable[Layer]) -> None:
        self.layers = list(layers)
        for layer in self.layers:
            layer.sort_keyframes()
        self.changed.emit()

    def reset(self) -> None:
        self.replace_layers(default_layers())

    # ──────────────────────────────────────────────────────────────────────────
    # Keyframes
    # ──────────────────────────────────────────────────────────────────────────
    def add_keyframe(self, layer_id: str, time: Optional[float] = None, translate: float = 0.0,
                     opacity: float = 1.0, easing: str = "linear") -> Optional[Keyframe]:
        layer = self.find_layer(layer_id)
        if layer is None:
            return None
        if time is None:
            time = self.timeline.duration / 2
        kf = Keyframe(time=self.clamp_time(time), translate=float(translate),
                      opacity=clamp(float(opacity)), easing=easing)
        layer.keyframes.append(kf)
        layer.sort_keyframes()
        self.changed.emit()
        return kf

    def remove_keyframe(self, layer_id: str, kf_id: str) -> None:
        layer = self.find_layer(layer_id)
        if layer is None:
            return
        before = len(layer.keyframes)
        layer.keyframes = [k for k in layer.keyframes if k.id != kf_id]
        if len(layer.keyframes) != before:
            self.changed.emit()

    def update_keyframe(self, layer_id: str, kf_id: str, **patch: Any) -> None:
        kf = self.keyframe(layer_id, kf_id)
        if kf is None:
            self._log.debug("update_keyframe: stale id %s/%s", layer_id, kf_id)
            return
        for key, value in patch.items():
            if key == "time":
                value = self.clamp_time(value)
            elif key == "opacity":
                value = clamp(float(value))
            elif key == "bezier" and value is not None:
                value = tuple(float(v) for v in value)
            elif key not in ("translate", "easing"):
                raise AttributeError(f"Keyframe has no editable field {key!r}")
            setattr(kf, key, value)
        self.layer(layer_id).sort_keyframes()
        self.changed.emit()

    def set_keyframe_time(self, layer_id: str, kf_id: str, time: float) -> Optional[int]:
        """Write a clamped time and keep the layer sorted. Returns the stored time."""
        kf = self.keyframe(layer_id, kf_id)
        if kf is None:
            return None
        t = self.clamp_time(time)
        if t != kf.time:
            kf.time = t
            self.layer(layer_id).sort_keyframes()
            self.changed.emit()
        return t

    # ──────────────────────────────────────────────────────────────────────────
    # Timeline state
    # ──────────────────────────────────────────────────────────────────────────
    def set_current_time(self, t: float) -> None:
        t = clamp(float(t), 0.0, float(self.timeline.duration))
        self.timeline.current_time = t
        # Always notify: a forced redraw at an unchanged time is legitimate (stop())
        self.timeChanged.emit(t)

    def set_duration(self, duration_ms: int) -> None:
        d = max(1, int(duration_ms))
        if d == self.timeline.duration:
            return
        self.timeline.duration = d
        self.settingsChanged.emit()
        if self.timeline.current_time > d:
            self.set_current_time(d)

    def set_snap(self, enabled: bool, interval: Optional[int] = None) -> None:
        self.timeline.snap_enabled = bool(enabled)
        if interval is not None:
            self.timeline.snap_interval = max(0, int(interval))
        self.settingsChanged.emit()

    def set_zoom(self, zoom: float) -> None:
        z = clamp(float(zoom), _TL["zoom_min"], _TL["zoom_max"])
        if z != self.timeline.zoom:
            self.timeline.zoom = z
            self.settingsChanged.emit()

    def set_playback_state(self, state: PlaybackState) -> None:
        if state is not self.timeline.playback_state:
            self.timeline.playback_state = state
            self.playbackStateChanged.emit(state)

    # ──────────────────────────────────────────────────────────────────────────
    # Exchange format
    # ──────────────────────────────────────────────────────────────────────────
    def to_payload(self) -> Dict[str, Any]:
        return {
            "timelineDuration": int(self.timeline.duration),
            "layers": [l.to_dict() for l in self.layers],
        }

    def load_payload(self, payload: Dict[str, Any]) -> None:
        """Replace duration and layers. Parsed up front: a bad entry raises before anything changes."""
        duration = int(payload.get("timelineDuration") or self.timeline.duration)
        layers = [Layer.from_dict(d) for d in payload.get("layers") or [] if isinstance(d, dict)]
        self.set_duration(duration)
        self.replace_layers(layers)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], parent=None) -> "AnimationDocument":
        doc = cls(layers=[], parent=parent)
        doc.load_payload(payload)
        return doc
