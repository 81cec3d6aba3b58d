from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .metrics import TickMetrics


@dataclass(slots=True)
class Snapshot:
    tick: int
    metrics: TickMetrics
    boids: List[Dict[str, Any]]
    arena: "SnapshotArena"
    metadata: "SnapshotMetadata"


@dataclass(slots=True)
class SnapshotArena:
    width: float
    height: float
    attractor: Optional[Tuple[float, float]]
    repulsor: Optional[Tuple[float, float]]


@dataclass(slots=True)
class SnapshotMetadata:
    count: int
    sim_dt: float
    tick_rate: float
    seed: int
    config_version: str
