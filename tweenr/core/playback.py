# tweenr/core/playback.py
from __future__ import annotations
from typing import Callable, Optional, Set

from tweenr.qt import QtCore
from tweenr.core.logging import get_logger
from tweenr.core.model import AnimationDocument, PlaybackState
from app_config import DEFAULTS

FRAME_INTERVAL_MS = int(DEFAULTS["timeline"]["frame_interval_ms"])

Clock = Callable[[], float]


class ElapsedClock:
    """Monotonic wall clock in milliseconds."""
    def __init__(self) -> None:
        self._timer = QtCore.QElapsedTimer()
        self._timer.start()

    def __call__(self) -> float:
        return self._timer.nsecsElapsed() / 1_000_000.0


class FrameScheduler:
    """
    Per-frame callback source. request() arms one callback for the next frame and
    returns a handle; cancel(handle) guarantees that callback never runs.
    """
    def request(self, callback: Callable[[], None]) -> object:
        raise NotImplementedError

    def cancel(self, handle: object) -> None:
        raise NotImplementedError


class QtFrameScheduler(FrameScheduler):
    """Single-shot QTimer per request, fired from the Qt event loop."""
    def __init__(self, interval_ms: int = FRAME_INTERVAL_MS, parent: Optional[QtCore.QObject] = None) -> None:
        self._interval = max(1, int(interval_ms))
        self._parent = parent
        self._live: Set[QtCore.QTimer] = set()

    def request(self, callback: Callable[[], None]) -> object:
        timer = QtCore.QTimer(self._parent)
        timer.setSingleShot(True)
        timer.setInterval(self._interval)
        timer.setTimerType(QtCore.Qt.TimerType.PreciseTimer)

        def _fire() -> None:
            self._live.discard(timer)
            timer.deleteLater()
            callback()

        timer.timeout.connect(_fire)
        self._live.add(timer)
        timer.start()
        return timer

    def cancel(self, handle: object) -> None:
        if isinstance(handle, QtCore.QTimer) and handle in self._live:
            handle.stop()
            self._live.discard(handle)
            handle.deleteLater()


class PlaybackController(QtCore.QObject):
    """
    Owns the play/pause/stop clock. While PLAYING it is the only writer of the
    document's current time: each frame sets time = now - reference_start.
    Reaching the end clamps to duration and stops; there is no looping here.
    """
    stateChanged = QtCore.Signal(object)      # PlaybackState
    frameRendered = QtCore.Signal(float)      # time written by a frame callback

    def __init__(self, document: AnimationDocument, clock: Optional[Clock] = None,
                 scheduler: Optional[FrameScheduler] = None, parent=None) -> None:
        super().__init__(parent)
        self._log = get_logger(__name__)
        self.document = document
        self._clock: Clock = clock or ElapsedClock()
        self._scheduler = scheduler or QtFrameScheduler(parent=self)
        self._state = PlaybackState.STOPPED
        self._reference_start: float = 0.0
        self._pending: Optional[object] = None

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def is_playing(self) -> bool:
        return self._state is PlaybackState.PLAYING

    # Core controls
    def play(self) -> None:
        if self._state is PlaybackState.PLAYING:
            return
        doc = self.document
        if self._state is PlaybackState.STOPPED and doc.current_time >= doc.duration:
            # Finished run: start over instead of stopping again on the first frame
            doc.set_current_time(0.0)
        self._reference_start = self._clock() - doc.current_time
        self._log.info("play() from %.1f ms", doc.current_time)
        self._set_state(PlaybackState.PLAYING)
        self._schedule()

    def pause(self) -> None:
        if self._state is not PlaybackState.PLAYING:
            return
        self._cancel_pending()
        self._log.info("pause() at %.1f ms", self.document.current_time)
        self._set_state(PlaybackState.PAUSED)

    def stop(self) -> None:
        self._cancel_pending()
        self._log.info("stop()")
        self._set_state(PlaybackState.STOPPED)
        # Forced redraw at t=0 even if time was already 0
        self.document.set_current_time(0.0)

    def toggle(self) -> None:
        if self.is_playing:
            self.pause()
        else:
            self.play()

    def seek(self, time_ms: float) -> None:
        """Move the playhead; while playing, playback continues from the new time."""
        self.document.set_current_time(time_ms)
        if self._state is PlaybackState.PLAYING:
            self._reference_start = self._clock() - self.document.current_time

    def shutdown(self) -> None:
        """Drop any pending frame; call before the owner is torn down."""
        self._cancel_pending()

    # Internals
    def _schedule(self) -> None:
        self._pending = self._scheduler.request(self._on_frame)

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._scheduler.cancel(self._pending)
            self._pending = None

    def _on_frame(self) -> None:
        self._pending = None
        if self._state is not PlaybackState.PLAYING:
            return
        doc = self.document
        elapsed = self._clock() - self._reference_start
        if elapsed >= doc.duration:
            self._set_state(PlaybackState.STOPPED)
            doc.set_current_time(doc.duration)
            self._log.debug("reached end (%d ms)", doc.duration)
            return
        doc.set_current_time(elapsed)
        self.frameRendered.emit(doc.current_time)
        self._schedule()

    def _set_state(self, state: PlaybackState) -> None:
        if state is self._state:
            return
        self._state = state
        self.document.set_playback_state(state)
        self.stateChanged.emit(state)
