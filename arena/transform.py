# arena/transform.py
import math
from typing import Tuple

from .constants import WORLD_MAX, WORLD_MIN

Bounds = Tuple[float, float]

# ---- Angles ---------------------------------------------------------------
# Orientation 0 points "up" (towards -y on screen) and grows clockwise, so
# the heading is the trig angle shifted by a quarter turn.

def wrap_pi(a: float) -> float:
    """Wrap radians into [-pi, pi]."""
    return ((a + math.pi) % (2 * math.pi)) - math.pi

def heading_vector(direction: float, magnitude: float = 1.0) -> Tuple[float, float]:
    """Velocity components for an orientation in radians."""
    return (magnitude * math.cos(direction - math.pi / 2),
            magnitude * math.sin(direction - math.pi / 2))

def direction_to(x0: float, y0: float, x1: float, y1: float) -> float:
    """Orientation that points from (x0, y0) towards (x1, y1)."""
    return wrap_pi(math.atan2(y1 - y0, x1 - x0) + math.pi / 2)

# ---- World space ----------------------------------------------------------

def in_world(x: float, y: float, bounds: Bounds = (WORLD_MIN, WORLD_MAX)) -> bool:
    lo, hi = bounds
    return lo <= x <= hi and lo <= y <= hi

def clamp_to_world(x: float, y: float, bounds: Bounds = (WORLD_MIN, WORLD_MAX)) -> Tuple[float, float]:
    lo, hi = bounds
    return min(max(x, lo), hi), min(max(y, lo), hi)

def normalized(x: float, y: float, eps: float = 1e-8) -> Tuple[float, float]:
    """Unit vector along (x, y), or (0, 0) for a null vector."""
    length = math.hypot(x, y)
    if length < eps:
        return 0.0, 0.0
    return x / length, y / length
