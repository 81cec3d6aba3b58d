from __future__ import annotations

import math

_TWO_PI = 2.0 * math.pi


def add(ax: float, ay: float, bx: float, by: float) -> tuple[float, float]:
    return ax + bx, ay + by


def scale(vector: tuple[float, float], scalar: float) -> tuple[float, float]:
    return vector[0] * scalar, vector[1] * scalar


def magnitude(x: float, y: float) -> float:
    return math.sqrt(x * x + y * y)


def distance(ax: float, ay: float, bx: float, by: float) -> float:
    dx = ax - bx
    dy = ay - by
    return math.sqrt(dx * dx + dy * dy)


def normalize(x: float, y: float) -> tuple[float, float]:
    mag = magnitude(x, y)
    if mag > 0.0:
        return x / mag, y / mag
    return x, y


def clamp_magnitude(x: float, y: float, limit: float) -> tuple[float, float]:
    """Rescale ``(x, y)`` to ``limit`` when it is longer, otherwise return it untouched."""
    mag = magnitude(x, y)
    if mag <= 0.0:
        return x, y
    if limit <= 0.0:
        return 0.0, 0.0
    if mag > limit:
        factor = limit / mag
        return x * factor, y * factor
    return x, y


def angle_between(ax: float, ay: float, bx: float, by: float) -> float:
    """Signed angle from direction ``b`` to direction ``a``, in ``(-pi, pi]``."""
    angle = math.atan2(ay, ax) - math.atan2(by, bx)
    if angle > math.pi:
        angle -= _TWO_PI
    elif angle <= -math.pi:
        angle += _TWO_PI
    return angle


def heading_from_velocity(x: float, y: float) -> float:
    if x * x + y * y < 1e-12:
        return 0.0
    return math.atan2(y, x)
