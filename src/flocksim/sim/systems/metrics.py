from __future__ import annotations

import math
from typing import TYPE_CHECKING

from ..types.metrics import TickMetrics

if TYPE_CHECKING:
    from ..core.flock import Flock


def create_metrics(tick: int, flock: Flock, duration_ms: float) -> TickMetrics:
    count = flock.count
    velocities = flock._velocities
    speed_sum = 0.0
    max_speed = 0.0
    for i in range(0, 2 * count, 2):
        speed = math.hypot(velocities[i], velocities[i + 1])
        speed_sum += speed
        if speed > max_speed:
            max_speed = speed
    return TickMetrics(
        tick=tick,
        count=count,
        neighbor_checks=flock.last_neighbor_checks,
        average_neighbors=flock.last_neighbor_total / count if count else 0.0,
        average_speed=speed_sum / count if count else 0.0,
        max_speed=max_speed,
        tick_duration_ms=duration_ms,
    )
