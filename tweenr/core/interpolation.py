# tweenr/core/interpolation.py
from __future__ import annotations
from typing import NamedTuple, Optional, Sequence, Tuple

from tweenr.core.easing import clamp, lerp, resolve_easing
from tweenr.core.model import Keyframe, Layer


class Sample(NamedTuple):
    translate: float
    opacity: float


def bounding_keyframes(keyframes: Sequence[Keyframe], t: float) -> Optional[Tuple[Keyframe, Keyframe]]:
    """
    Pick (prev, next) around t from a time-sorted sequence.

    prev is the last keyframe at or before t, next the first at or after it. Before the
    first keyframe both are the first one, past the last both are the last one.
    """
    if not keyframes:
        return None
    prev = keyframes[0]
    nxt = keyframes[-1]
    for kf in keyframes:
        if kf.time <= t:
            prev = kf
        if kf.time >= t:
            nxt = kf
            break
    return prev, nxt


def local_progress(prev: Keyframe, nxt: Keyframe, t: float) -> float:
    span = max(1, nxt.time - prev.time)
    return clamp((t - prev.time) / span, 0.0, 1.0)


def sample_keyframes(keyframes: Sequence[Keyframe], t: float) -> Optional[Sample]:
    pair = bounding_keyframes(keyframes, t)
    if pair is None:
        return None
    prev, nxt = pair
    # The easing stored on a keyframe shapes the segment that arrives at it
    eased = resolve_easing(nxt.easing, nxt.bezier)(local_progress(prev, nxt, t))
    return Sample(
        translate=lerp(prev.translate, nxt.translate, eased),
        opacity=clamp(lerp(prev.opacity, nxt.opacity, eased), 0.0, 1.0),
    )


def sample_layer(layer: Layer, t: float) -> Optional[Sample]:
    """Interpolated (translate, opacity) of a layer at t, or None without keyframes."""
    return sample_keyframes(layer.keyframes, t)
