# tweenr/ui/timeline/controller.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional, Protocol

from tweenr.qt import QtCore
from tweenr.core.easing import clamp, snap
from tweenr.core.logging import get_logger
from tweenr.core.model import AnimationDocument
from tweenr.core.playback import FrameScheduler, PlaybackController, QtFrameScheduler
from app_config import DEFAULTS

_ED = DEFAULTS["editor"]
AUTOSCROLL_EDGE_PX = int(_ED["autoscroll_edge_px"])
AUTOSCROLL_STEP_PX = int(_ED["autoscroll_step_px"])
NUDGE_MS = int(_ED["nudge_ms"])
NUDGE_COARSE_MS = int(_ED["nudge_coarse_ms"])
DRAG_THRESHOLD_PX = 3.0

Key = QtCore.Qt.Key


def _key_code(key) -> int:
    return int(getattr(key, "value", key))


_NUDGE_BACK = {_key_code(Key.Key_Left), _key_code(Key.Key_Minus)}
_NUDGE_FWD = {_key_code(Key.Key_Right), _key_code(Key.Key_Plus), _key_code(Key.Key_Equal)}
_DELETE = {_key_code(Key.Key_Delete), _key_code(Key.Key_Backspace)}
_ADD = _key_code(Key.Key_A)


class InteractionState(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    SCRUBBING = "scrubbing"


class KeyframeRef(NamedTuple):
    layer_id: str
    keyframe_id: str


@dataclass(frozen=True)
class TrackGeometry:
    """Visible track area in pointer coordinates, captured at pointer-down."""
    left: float
    width: float
    zoom: float = 1.0

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def content_width(self) -> float:
        return max(1.0, self.width * max(self.zoom, 1e-6))


class ScrollTarget(Protocol):
    """The subset of QScrollBar the auto-scroll poll drives."""
    def value(self) -> int: ...
    def setValue(self, value: int) -> None: ...
    def minimum(self) -> int: ...
    def maximum(self) -> int: ...


class TimelineController(QtCore.QObject):
    """
    Pointer and keyboard editing of the timeline.

    Two pointer state machines share one state field, so only one can be active:
      IDLE ──press on marker──▶ DRAGGING ──release/cancel──▶ IDLE
      IDLE ──press on track───▶ SCRUBBING ─release/cancel──▶ IDLE
    While DRAGGING a per-frame poll scrolls the track when the last known pointer
    position sits inside the edge margin, independently of pointer-move events.
    """
    selectionChanged = QtCore.Signal(object)      # Optional[KeyframeRef]
    interactionChanged = QtCore.Signal(object)    # InteractionState
    message = QtCore.Signal(str)

    def __init__(self, document: AnimationDocument, playback: PlaybackController,
                 scheduler: Optional[FrameScheduler] = None, parent=None) -> None:
        super().__init__(parent)
        self._log = get_logger(__name__)
        self.document = document
        self.playback = playback
        self._scheduler = scheduler or QtFrameScheduler(parent=self)

        self._state = InteractionState.IDLE
        self._selection: Optional[KeyframeRef] = None

        self._geometry: Optional[TrackGeometry] = None
        self._scroller: Optional[ScrollTarget] = None
        self._drag_target: Optional[KeyframeRef] = None
        self._press_x: float = 0.0
        self._drag_moved = False
        self._pointer_x: float = 0.0
        self._autoscroll_handle: Optional[object] = None

        self.document.changed.connect(self._prune_selection)

    @property
    def state(self) -> InteractionState:
        return self._state

    @property
    def selection(self) -> Optional[KeyframeRef]:
        return self._selection

    # ──────────────────────────────────────────────────────────────────────────
    # Selection
    # ──────────────────────────────────────────────────────────────────────────
    def select(self, layer_id: str, keyframe_id: str) -> None:
        ref = KeyframeRef(layer_id, keyframe_id)
        if ref == self._selection:
            return
        self._selection = ref
        self.selectionChanged.emit(ref)
        kf = self.document.keyframe(layer_id, keyframe_id)
        layer = self.document.find_layer(layer_id)
        if kf is not None and layer is not None:
            self.message.emit(f"Keyframe selected: {layer.label} @ {kf.time}ms")

    def clear_selection(self) -> None:
        if self._selection is None:
            return
        self._selection = None
        self.selectionChanged.emit(None)

    def _prune_selection(self) -> None:
        sel = self._selection
        if sel is not None and self.document.keyframe(sel.layer_id, sel.keyframe_id) is None:
            self.clear_selection()

    # ──────────────────────────────────────────────────────────────────────────
    # Pointer: keyframe drag
    # ──────────────────────────────────────────────────────────────────────────
    def begin_keyframe_drag(self, layer_id: str, keyframe_id: str, geometry: TrackGeometry,
                            pointer_x: float, scroller: Optional[ScrollTarget] = None) -> bool:
        if self._state is not InteractionState.IDLE:
            self.pointer_cancel()
        if self.document.keyframe(layer_id, keyframe_id) is None:
            return False
        self.select(layer_id, keyframe_id)
        self._geometry = geometry
        self._scroller = scroller
        self._drag_target = KeyframeRef(layer_id, keyframe_id)
        self._press_x = float(pointer_x)
        self._pointer_x = float(pointer_x)
        self._drag_moved = False
        self._set_state(InteractionState.DRAGGING)
        self._start_autoscroll()
        return True

    # ──────────────────────────────────────────────────────────────────────────
    # Pointer: scrubbing
    # ──────────────────────────────────────────────────────────────────────────
    def begin_scrub(self, geometry: TrackGeometry, pointer_x: float,
                    scroller: Optional[ScrollTarget] = None) -> None:
        if self._state is not InteractionState.IDLE:
            self.pointer_cancel()
        self._geometry = geometry
        self._scroller = scroller
        self._pointer_x = float(pointer_x)
        self._set_state(InteractionState.SCRUBBING)
        self._apply_scrub()

    # ──────────────────────────────────────────────────────────────────────────
    # Pointer: shared move / release
    # ──────────────────────────────────────────────────────────────────────────
    def pointer_move(self, pointer_x: float) -> None:
        self._pointer_x = float(pointer_x)
        if self._state is InteractionState.DRAGGING:
            if not self._drag_moved and abs(self._pointer_x - self._press_x) < DRAG_THRESHOLD_PX:
                return  # still a click
            self._drag_moved = True
            self._apply_drag()
        elif self._state is InteractionState.SCRUBBING:
            self._apply_scrub()

    def pointer_release(self) -> None:
        if self._state is InteractionState.DRAGGING:
            target = self._drag_target
            kf = self.document.keyframe(*target) if target else None
            if self._drag_moved and kf is not None:
                self.message.emit(f"Keyframe moved to {kf.time}ms")
        elif self._state is InteractionState.SCRUBBING:
            self.message.emit(f"Time set to {int(round(self.document.current_time))}ms")
        self._finish()

    def pointer_cancel(self) -> None:
        """Capture lost: leave whatever was written so far and return to IDLE."""
        self._finish()

    def _finish(self) -> None:
        self._stop_autoscroll()
        self._geometry = None
        self._scroller = None
        self._drag_target = None
        self._drag_moved = False
        self._set_state(InteractionState.IDLE)

    def time_at(self, pointer_x: float) -> float:
        """Map a pointer x to timeline ms using the captured geometry and scroll offset."""
        geo = self._geometry
        if geo is None:
            return 0.0
        offset = float(self._scroller.value()) if self._scroller is not None else 0.0
        ratio = clamp((pointer_x - geo.left + offset) / geo.content_width, 0.0, 1.0)
        return ratio * self.document.duration

    def _apply_drag(self) -> None:
        target = self._drag_target
        if target is None:
            return
        t = self.time_at(self._pointer_x)
        tl = self.document.timeline
        if tl.snap_enabled and tl.snap_interval > 0:
            t = snap(t, tl.snap_interval)
        self.document.set_keyframe_time(target.layer_id, target.keyframe_id, t)

    def _apply_scrub(self) -> None:
        # Not snapped; goes through playback so a running clock follows the playhead
        self.playback.seek(self.time_at(self._pointer_x))

    # ──────────────────────────────────────────────────────────────────────────
    # Auto-scroll poll
    # ──────────────────────────────────────────────────────────────────────────
    def _start_autoscroll(self) -> None:
        if self._autoscroll_handle is None and self._scroller is not None:
            self._autoscroll_handle = self._scheduler.request(self._autoscroll_tick)

    def _stop_autoscroll(self) -> None:
        if self._autoscroll_handle is not None:
            self._scheduler.cancel(self._autoscroll_handle)
            self._autoscroll_handle = None

    def autoscroll_step(self) -> int:
        """Scroll delta the poll would apply for the last pointer position."""
        geo = self._geometry
        if geo is None:
            return 0
        if self._pointer_x - geo.left < AUTOSCROLL_EDGE_PX:
            return -AUTOSCROLL_STEP_PX
        if geo.right - self._pointer_x < AUTOSCROLL_EDGE_PX:
            return AUTOSCROLL_STEP_PX
        return 0

    def _autoscroll_tick(self) -> None:
        self._autoscroll_handle = None
        if self._state is not InteractionState.DRAGGING or self._scroller is None:
            return
        step = self.autoscroll_step()
        if step:
            sc = self._scroller
            before = sc.value()
            sc.setValue(int(clamp(before + step, sc.minimum(), sc.maximum())))
            if sc.value() != before and self._drag_moved:
                # Content moved under a still pointer: keep the marker under it
                self._apply_drag()
        self._autoscroll_handle = self._scheduler.request(self._autoscroll_tick)

    # ──────────────────────────────────────────────────────────────────────────
    # Keyboard
    # ──────────────────────────────────────────────────────────────────────────
    def handle_key(self, key, shift: bool = False) -> bool:
        """Apply an editing key to the selected keyframe. Returns True when consumed."""
        code = _key_code(key)
        sel = self._selection
        if sel is None:
            return False
        kf = self.document.keyframe(sel.layer_id, sel.keyframe_id)
        if kf is None:
            self.clear_selection()
            return False

        step = NUDGE_COARSE_MS if shift else NUDGE_MS
        if code in _NUDGE_BACK:
            self._nudge(sel, kf.time - step)
            return True
        if code in _NUDGE_FWD:
            self._nudge(sel, kf.time + step)
            return True
        if code in _DELETE:
            self.document.remove_keyframe(sel.layer_id, sel.keyframe_id)
            self.clear_selection()
            self.message.emit("Keyframe deleted")
            return True
        if code == _ADD:
            added = self.document.add_keyframe(sel.layer_id, time=round(self.document.current_time))
            if added is not None:
                self.message.emit(f"Keyframe added @ {added.time}ms")
            return True
        return False

    def _nudge(self, sel: KeyframeRef, time_ms: float) -> None:
        t = self.document.set_keyframe_time(sel.layer_id, sel.keyframe_id, time_ms)
        if t is not None:
            self.message.emit(f"Keyframe moved to {t}ms")

    # ──────────────────────────────────────────────────────────────────────────
    def shutdown(self) -> None:
        self._finish()

    def _set_state(self, state: InteractionState) -> None:
        if state is self._state:
            return
        self._log.debug("interaction %s -> %s", self._state.value, state.value)
        self._state = state
        self.interactionChanged.emit(state)
