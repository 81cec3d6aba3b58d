from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from pygame.math import Vector2

from .boid import Boid
from .buffers import BufferView, check_length
from .config import FlockConfig
from ..systems import neighbors as neighbors_system, steering
from ..utils.math2d import clamp_magnitude

logger = logging.getLogger(__name__)


class Flock:
    """
    Boid flock stored as three flat ``[x0, y0, x1, y1, ...]`` buffers.

    ``update()`` advances one tick in two passes: every acceleration is
    computed from the same unmodified positions and velocities, then every
    boid is integrated. Mixing the two would make the result depend on
    iteration order.
    """

    def __init__(self, count: int, config: FlockConfig | None = None):
        if count < 0:
            raise ValueError(f"boid count must be non-negative, got {count}")
        self._count = int(count)
        self._config = config if config is not None else FlockConfig()
        self._positions: List[float] = [0.0] * (2 * self._count)
        # Non-zero so heading-dependent math is defined on the first tick.
        self._velocities: List[float] = [1.0] * (2 * self._count)
        self._accelerations: List[float] = [0.0] * (2 * self._count)
        self._width = 0.0
        self._height = 0.0
        self._attractor: Optional[tuple[float, float]] = None
        self._repulsor: Optional[tuple[float, float]] = None
        self._generation = 0
        self._neighbor_scratch: List[int] = []
        self.last_neighbor_checks = 0
        self.last_neighbor_total = 0
        logger.debug("created flock with %d boids", self._count)

    @property
    def count(self) -> int:
        return self._count

    @property
    def config(self) -> FlockConfig:
        return self._config

    @property
    def generation(self) -> int:
        """Advances on every ``update()`` and ``reset()``; buffer views are tied to one generation."""
        return self._generation

    @property
    def width(self) -> float:
        return self._width

    @property
    def height(self) -> float:
        return self._height

    @property
    def attractor(self) -> Optional[tuple[float, float]]:
        return self._attractor

    @property
    def repulsor(self) -> Optional[tuple[float, float]]:
        return self._repulsor

    def set_width(self, width: float) -> None:
        self._width = float(width)

    def set_height(self, height: float) -> None:
        self._height = float(height)

    def set_attractor(self, x: float, y: float) -> None:
        self._attractor = (float(x), float(y))
        logger.debug("attractor set to %s", self._attractor)

    def clear_attractor(self) -> None:
        self._attractor = None

    def set_repulsor(self, x: float, y: float) -> None:
        self._repulsor = (float(x), float(y))

    def clear_repulsor(self) -> None:
        self._repulsor = None

    def effective_attractor(self) -> tuple[float, float]:
        if self._attractor is not None:
            return self._attractor
        return self._width / 2.0, self._height / 2.0

    def positions(self) -> BufferView:
        return BufferView(self, self._positions, "positions")

    def velocities(self) -> BufferView:
        return BufferView(self, self._velocities, "velocities")

    def seed_positions(self, values: Iterable[float]) -> None:
        self._seed(self._positions, "positions", values)

    def seed_velocities(self, values: Iterable[float]) -> None:
        self._seed(self._velocities, "velocities", values)

    def _seed(self, buffer: List[float], name: str, values: Iterable[float]) -> None:
        new_values = [float(v) for v in values]
        check_length(name, new_values, self._count)
        buffer[:] = new_values

    def boid(self, idx: int) -> Boid:
        if not 0 <= idx < self._count:
            raise IndexError(f"boid index {idx} out of range for {self._count} boids")
        i = 2 * idx
        return Boid(
            id=idx,
            position=Vector2(self._positions[i], self._positions[i + 1]),
            velocity=Vector2(self._velocities[i], self._velocities[i + 1]),
            acceleration=Vector2(self._accelerations[i], self._accelerations[i + 1]),
        )

    def reset(self) -> None:
        """Restore construction-time buffers in place. Arena and targets are kept; open views go stale."""
        self._positions[:] = [0.0] * (2 * self._count)
        self._velocities[:] = [1.0] * (2 * self._count)
        self._accelerations[:] = [0.0] * (2 * self._count)
        self.last_neighbor_checks = 0
        self.last_neighbor_total = 0
        self._generation += 1
        logger.debug("reset flock of %d boids", self._count)

    def update(self) -> None:
        checks = 0
        neighbor_total = 0
        scratch = self._neighbor_scratch
        for idx in range(self._count):
            checks += neighbors_system.collect_neighbors(self, idx, scratch)
            neighbor_total += len(scratch)
            self._flock(idx, scratch)
        for idx in range(self._count):
            self._integrate(idx)
        self.last_neighbor_checks = checks
        self.last_neighbor_total = neighbor_total
        self._generation += 1

    def _flock(self, idx: int, neighbors: List[int]) -> None:
        ax, ay = steering.compute_acceleration(self, idx, neighbors)
        self._accelerations[2 * idx] = ax
        self._accelerations[2 * idx + 1] = ay

    def _integrate(self, idx: int) -> None:
        """Apply this tick's acceleration to one boid. ``_flock`` must have run for every boid first."""
        i = 2 * idx
        vx, vy = clamp_magnitude(
            self._velocities[i] + self._accelerations[i],
            self._velocities[i + 1] + self._accelerations[i + 1],
            self._config.max_speed,
        )
        x = self._positions[i] + vx
        y = self._positions[i + 1] + vy

        # Warp to the opposite side when out of bounds.
        if x < 0.0:
            x = self._width - 1.0
        elif x > self._width:
            x = 1.0
        if y < 0.0:
            y = self._height - 1.0
        elif y > self._height:
            y = 1.0

        self._velocities[i] = vx
        self._velocities[i + 1] = vy
        self._positions[i] = x
        self._positions[i + 1] = y


def create(count: int, config: FlockConfig | None = None) -> Flock:
    return Flock(count, config)
