"""
Shared fixtures: an offscreen QApplication plus deterministic stand-ins for the
wall clock, the per-frame scheduler and a scroll bar.
"""
import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from tweenr.qt import QtWidgets
from tweenr.core.model import AnimationDocument, Keyframe, Layer
from tweenr.core.playback import FrameScheduler, PlaybackController


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QtWidgets.QApplication.instance() or QtWidgets.QApplication([])
    yield app


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = float(now)

    def advance(self, ms: float) -> None:
        self.now += ms

    def __call__(self) -> float:
        return self.now


class ManualScheduler(FrameScheduler):
    """Callbacks run only when the test calls run_pending()."""
    def __init__(self):
        self._next = 0
        self._callbacks = {}

    def request(self, callback):
        self._next += 1
        self._callbacks[self._next] = callback
        return self._next

    def cancel(self, handle):
        self._callbacks.pop(handle, None)

    @property
    def pending(self) -> int:
        return len(self._callbacks)

    def run_pending(self) -> int:
        due = list(self._callbacks.items())
        self._callbacks.clear()
        for _, cb in due:
            cb()
        return len(due)


class FakeScrollBar:
    def __init__(self, value: int = 0, minimum: int = 0, maximum: int = 1000):
        self._value = value
        self._min = minimum
        self._max = maximum

    def value(self) -> int:
        return self._value

    def setValue(self, value: int) -> None:
        self._value = max(self._min, min(self._max, int(value)))

    def minimum(self) -> int:
        return self._min

    def maximum(self) -> int:
        return self._max


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def document():
    """Two layers with fixed ids; 'a' has keyframes at 0 and 1000 ms."""
    a = Layer(id="a", label="Back", keyframes=[
        Keyframe(id="k0", time=0, translate=40.0, opacity=0.0),
        Keyframe(id="k1", time=1000, translate=0.0, opacity=1.0),
    ])
    b = Layer(id="b", label="Front", keyframes=[Keyframe(id="k2", time=500)])
    return AnimationDocument(layers=[a, b])


@pytest.fixture
def playback(document, clock, scheduler):
    return PlaybackController(document, clock=clock, scheduler=scheduler)
