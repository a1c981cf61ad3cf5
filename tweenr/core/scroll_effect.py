# tweenr/core/scroll_effect.py
"""
Scroll-driven section parallax. Independent of the keyframe engine: progress is 1
when a section's centre sits on the viewport centre and falls to 0 as it leaves.
"""
from __future__ import annotations
from typing import NamedTuple

from tweenr.core.easing import clamp

DEPTH_OPACITY_BIAS = 0.2


class ParallaxFrame(NamedTuple):
    progress: float
    translate: float
    opacity: float


def is_intersecting(top: float, height: float, viewport_height: float) -> bool:
    """True while any part of [top, top + height) is inside [0, viewport_height)."""
    return top < viewport_height and top + height > 0


def section_progress(top: float, height: float, viewport_height: float) -> float:
    centre = top + height / 2.0
    distance = abs(viewport_height / 2.0 - centre)
    max_distance = viewport_height / 2.0 + height / 2.0
    if max_distance <= 0:
        return 0.0
    return 1.0 - clamp(distance / max_distance, 0.0, 1.0)


def layer_translate(progress: float, max_translate: float, depth: float = 1.0) -> float:
    """Deeper layers (smaller depth) move less; depth 1 moves like the section."""
    return (1.0 - progress) * max_translate * clamp(depth, 0.0, 1.0)


def layer_opacity(progress: float, depth: float) -> float:
    return clamp(progress + (clamp(depth, 0.0, 1.0) - 0.5) * DEPTH_OPACITY_BIAS, 0.0, 1.0)


def section_frame(top: float, height: float, viewport_height: float, max_translate: float) -> ParallaxFrame:
    p = section_progress(top, height, viewport_height)
    return ParallaxFrame(progress=p, translate=layer_translate(p, max_translate), opacity=p)


def scroll_to_time(scroll: float, max_scroll: float, duration: float) -> float:
    """Preview-as-scroll: map a scroll position onto [0, duration]."""
    return clamp(scroll / max(1.0, max_scroll), 0.0, 1.0) * duration
