from __future__ import annotations

import logging
from time import perf_counter
from typing import Any, Dict, List

from .boid import Boid
from .config import SimulationConfig
from .flock import Flock
from .rng import DeterministicRng
from ..systems import metrics as metrics_system
from ..types.metrics import TickMetrics
from ..types.snapshot import Snapshot, SnapshotArena, SnapshotMetadata
from ..utils.math2d import heading_from_velocity, magnitude

logger = logging.getLogger(__name__)


class Simulation:
    """Seeded flock plus the bookkeeping a host needs: metrics, snapshots, reset."""

    def __init__(self, config: SimulationConfig):
        self._config = config
        self._rng = DeterministicRng(config.seed)
        self._flock = Flock(config.count, config.flock)
        self._metrics: TickMetrics | None = None
        self._bootstrap_flock()

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def flock(self) -> Flock:
        return self._flock

    @property
    def metrics(self) -> TickMetrics | None:
        return self._metrics

    def reset(self) -> None:
        # Same Flock object, so host references survive and old views go stale.
        self._rng.reset()
        self._flock.reset()
        self._metrics = None
        self._bootstrap_flock(self._flock.width, self._flock.height)

    def _bootstrap_flock(self, width: float | None = None, height: float | None = None) -> None:
        width = self._config.width if width is None else width
        height = self._config.height if height is None else height
        flock = self._flock
        flock.set_width(width)
        flock.set_height(height)
        spread = self._config.initial_speed
        positions: List[float] = []
        velocities: List[float] = []
        for _ in range(flock.count):
            positions.append(self._rng.next_float() * width)
            positions.append(self._rng.next_float() * height)
            velocities.append(self._rng.next_range(-spread, spread))
            velocities.append(self._rng.next_range(-spread, spread))
        flock.seed_positions(positions)
        flock.seed_velocities(velocities)
        logger.debug("seeded %d boids in %.0fx%.0f arena (seed=%s)", flock.count, width, height, self._rng.seed)

    def resize(self, width: float, height: float) -> None:
        self._flock.set_width(width)
        self._flock.set_height(height)

    def step(self, tick: int) -> TickMetrics:
        start = perf_counter()
        self._flock.update()
        duration_ms = (perf_counter() - start) * 1000.0
        self._metrics = metrics_system.create_metrics(tick, self._flock, duration_ms)
        return self._metrics

    def boids(self) -> List[Boid]:
        return [self._flock.boid(idx) for idx in range(self._flock.count)]

    def snapshot(self, tick: int) -> Snapshot:
        flock = self._flock
        metrics = self._metrics
        if metrics is None:
            metrics = metrics_system.create_metrics(tick, flock, 0.0)
        positions = flock._positions
        velocities = flock._velocities
        boids: List[Dict[str, Any]] = []
        for idx in range(flock.count):
            i = 2 * idx
            vx = velocities[i]
            vy = velocities[i + 1]
            boids.append(
                {
                    "id": idx,
                    "x": positions[i],
                    "y": positions[i + 1],
                    "vx": vx,
                    "vy": vy,
                    "heading": heading_from_velocity(vx, vy),
                    "speed": magnitude(vx, vy),
                }
            )
        time_step = self._config.time_step
        return Snapshot(
            tick=tick,
            metrics=metrics,
            boids=boids,
            arena=SnapshotArena(
                width=flock.width,
                height=flock.height,
                attractor=flock.attractor,
                repulsor=flock.repulsor,
            ),
            metadata=SnapshotMetadata(
                count=flock.count,
                sim_dt=time_step,
                tick_rate=1.0 / time_step if time_step > 0 else 0.0,
                seed=self._config.seed,
                config_version=self._config.config_version,
            ),
        )
