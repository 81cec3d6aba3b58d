from __future__ import annotations

from typing import TYPE_CHECKING, List

from ..utils.math2d import add, clamp_magnitude, distance, normalize, scale

if TYPE_CHECKING:
    from ..core.flock import Flock

ZERO = (0.0, 0.0)


def steer_towards(x: float, y: float, target_x: float, target_y: float) -> tuple[float, float]:
    """Unit vector from ``(x, y)`` to the target; zero when they coincide."""
    dist = distance(x, y, target_x, target_y)
    if dist > 0.0:
        return (target_x - x) / dist, (target_y - y) / dist
    return ZERO


def steer_away(x: float, y: float, other_x: float, other_y: float) -> tuple[float, float]:
    """Push away from ``other`` with inverse-square falloff; zero when they coincide."""
    dist = distance(x, y, other_x, other_y)
    if dist > 0.0:
        dist_sq = dist * dist
        return (x - other_x) / dist_sq, (y - other_y) / dist_sq
    return ZERO


def compute_acceleration(flock: Flock, idx: int, neighbors: List[int]) -> tuple[float, float]:
    config = flock.config
    alignment = scale(align(flock, neighbors), config.align_force)
    cohesion = scale(cohere(flock, idx, neighbors), config.cohesion_force)
    separation = scale(separate(flock, idx, neighbors), config.separation_force)

    target_x, target_y = flock.effective_attractor()
    attraction = scale(attract(flock, idx, target_x, target_y), config.attraction_force)

    repulsion = ZERO
    repulsor = flock.repulsor
    if repulsor is not None:
        repulsion = scale(repel(flock, idx, repulsor[0], repulsor[1]), config.repulsion_force)

    avoidance = scale(avoid_walls(flock, idx, flock.width, flock.height), config.avoidance_force)

    ax, ay = 0.0, 0.0
    for force in (alignment, cohesion, separation, attraction, avoidance, repulsion):
        ax, ay = add(ax, ay, force[0], force[1])
    return ax, ay


def align(flock: Flock, neighbors: List[int]) -> tuple[float, float]:
    """Steer towards the average heading of the neighbors."""
    velocities = flock._velocities
    steer_x, steer_y = 0.0, 0.0
    for other in neighbors:
        steer_x, steer_y = add(steer_x, steer_y, velocities[2 * other], velocities[2 * other + 1])
    if neighbors:
        divisor = len(neighbors) / flock.config.max_steer_force
        steer_x /= divisor
        steer_y /= divisor
    return steer_x, steer_y


def cohere(flock: Flock, idx: int, neighbors: List[int]) -> tuple[float, float]:
    """Steer towards the centre of the neighborhood."""
    if not neighbors:
        return ZERO
    positions = flock._positions
    sum_x, sum_y = 0.0, 0.0
    for other in neighbors:
        sum_x, sum_y = add(sum_x, sum_y, positions[2 * other], positions[2 * other + 1])
    count = len(neighbors)
    steer_x = sum_x / count - positions[2 * idx]
    steer_y = sum_y / count - positions[2 * idx + 1]
    return clamp_magnitude(steer_x, steer_y, flock.config.max_steer_force)


def separate(flock: Flock, idx: int, neighbors: List[int]) -> tuple[float, float]:
    """Steer away from encroaching neighbors, harder the closer they are."""
    positions = flock._positions
    desired = flock.config.desired_separation
    x = positions[2 * idx]
    y = positions[2 * idx + 1]
    steer_x, steer_y = 0.0, 0.0
    for other in neighbors:
        ox = positions[2 * other]
        oy = positions[2 * other + 1]
        dist = distance(x, y, ox, oy)
        if 0.0 < dist < desired:
            dir_x, dir_y = normalize(x - ox, y - oy)
            steer_x += dir_x / dist
            steer_y += dir_y / dist
    return steer_x, steer_y


def attract(flock: Flock, idx: int, target_x: float, target_y: float) -> tuple[float, float]:
    positions = flock._positions
    return steer_towards(positions[2 * idx], positions[2 * idx + 1], target_x, target_y)


def repel(flock: Flock, idx: int, repulsor_x: float, repulsor_y: float) -> tuple[float, float]:
    positions = flock._positions
    return steer_away(positions[2 * idx], positions[2 * idx + 1], repulsor_x, repulsor_y)


def avoid_walls(flock: Flock, idx: int, width: float, height: float) -> tuple[float, float]:
    positions = flock._positions
    x = positions[2 * idx]
    y = positions[2 * idx + 1]
    steer_x, steer_y = 0.0, 0.0
    # Perpendicular wall points only; corners are not avoided.
    for wall_x, wall_y in ((0.0, y), (width, y), (x, 0.0), (x, height)):
        push_x, push_y = steer_away(x, y, wall_x, wall_y)
        steer_x += push_x
        steer_y += push_y
    return steer_x, steer_y
