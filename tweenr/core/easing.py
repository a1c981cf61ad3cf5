# tweenr/core/easing.py
"""
Numeric helpers shared by the interpolation engine, the timeline editor and the
exporters. Everything here is pure; callers clamp explicitly where they need to.
"""
from __future__ import annotations
import math
from typing import Callable, Dict, Optional, Sequence

EasingFn = Callable[[float], float]

BEZIER_ITERATIONS = 25
BEZIER_EPSILON = 1e-6


def clamp(v: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, v))


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def _round_half_up(v: float) -> float:
    # .5 always goes towards +inf; round() would use banker's rounding
    return float(math.floor(v + 0.5))


def snap(value: float, interval: float = 50) -> float:
    """Quantise value to the nearest multiple of interval; interval <= 0 disables."""
    if interval > 0:
        return _round_half_up(value / interval) * interval
    return value


def cubic_bezier_easing(x1: float, y1: float, x2: float, y2: float) -> EasingFn:
    """
    Build an easing function for the CSS-style curve (0,0)-(x1,y1)-(x2,y2)-(1,1).

    The returned function inverts X(t) by bisection (25 steps, or until the estimate is
    within 1e-6 of x) and returns Y(t). Control points are not validated; curves whose
    x coordinates leave [0, 1] may be non-monotonic.
    """
    cx = 3.0 * x1
    bx = 3.0 * (x2 - x1) - cx
    ax = 1.0 - cx - bx

    cy = 3.0 * y1
    by = 3.0 * (y2 - y1) - cy
    ay = 1.0 - cy - by

    def sample_x(t: float) -> float:
        return ((ax * t + bx) * t + cx) * t

    def sample_y(t: float) -> float:
        return ((ay * t + by) * t + cy) * t

    def ease(x: float) -> float:
        low, high, mid = 0.0, 1.0, 0.0
        for _ in range(BEZIER_ITERATIONS):
            mid = (low + high) / 2.0
            x_est = sample_x(mid)
            if abs(x_est - x) < BEZIER_EPSILON:
                break
            if x_est > x:
                high = mid
            else:
                low = mid
        return sample_y(mid)

    return ease


def linear(t: float) -> float:
    return t


def ease_in(t: float) -> float:
    return t * t


def ease_out(t: float) -> float:
    return t * (2.0 - t)


def ease(t: float) -> float:
    return 2.0 * t * t if t < 0.5 else -1.0 + (4.0 - 2.0 * t) * t


NAMED_EASINGS: Dict[str, EasingFn] = {
    "linear": linear,
    "ease": ease,
    "ease-in": ease_in,
    "ease-out": ease_out,
}
EASING_NAMES = tuple(NAMED_EASINGS.keys())


def named_easing(name: Optional[str]) -> EasingFn:
    """Unknown or empty names fall back to linear."""
    return NAMED_EASINGS.get(name or "linear", linear)


def resolve_easing(easing: Optional[str], bezier: Optional[Sequence[float]] = None) -> EasingFn:
    """Explicit bezier control points win over the named curve."""
    if bezier is not None and len(bezier) == 4:
        return cubic_bezier_easing(*(float(v) for v in bezier))
    return named_easing(easing)
