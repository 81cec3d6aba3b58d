from __future__ import annotations

from typing import TYPE_CHECKING, List

from ..utils.math2d import angle_between, distance

if TYPE_CHECKING:
    from ..core.flock import Flock


def collect_neighbors(flock: Flock, idx: int, out: List[int]) -> int:
    """
    Fill ``out`` with the indices of the boids that ``idx`` can see.

    Brute force over every other boid. A candidate inside the neighborhood
    radius is dropped when it sits behind the boid's heading; the "behind"
    test only runs when both the line of sight and the velocity have a
    component sum above 0.01. Returns the number of distance checks made.
    """

    out.clear()
    config = flock.config
    radius = config.neighborhood_radius
    fov_limit = config.field_of_view_limit
    positions = flock._positions
    velocities = flock._velocities
    x = positions[2 * idx]
    y = positions[2 * idx + 1]
    vx = velocities[2 * idx]
    vy = velocities[2 * idx + 1]
    moving = vx + vy > 0.01
    checks = 0

    for other in range(flock.count):
        if other == idx:
            continue
        ox = positions[2 * other]
        oy = positions[2 * other + 1]
        checks += 1
        if distance(x, y, ox, oy) >= radius:
            continue
        line_x = x - ox
        line_y = y - oy
        if moving and line_x + line_y > 0.01 and abs(angle_between(vx, vy, line_x, line_y)) > fov_limit:
            # Out of the field of view.
            continue
        out.append(other)
    return checks
