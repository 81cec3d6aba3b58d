from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path

import yaml

# Inter-boid forces.
ALIGN_FORCE = 0.2
COHESION_FORCE = 0.05
SEPARATION_FORCE = 2.0

# Obstacle forces.
ATTRACTION_FORCE = 0.05
AVOIDANCE_FORCE = 7.5
REPULSION_FORCE = 8.0

# Limits.
MAX_SPEED = 3.0
MAX_STEER_FORCE = 0.35
NEIGHBORHOOD_RADIUS = 50.0
DESIRED_SEPARATION = 15.0
FIELD_OF_VIEW_LIMIT = 3.0 * math.pi / 4.0


@dataclass
class FlockConfig:
    align_force: float = ALIGN_FORCE
    cohesion_force: float = COHESION_FORCE
    separation_force: float = SEPARATION_FORCE
    attraction_force: float = ATTRACTION_FORCE
    avoidance_force: float = AVOIDANCE_FORCE
    repulsion_force: float = REPULSION_FORCE
    max_speed: float = MAX_SPEED
    max_steer_force: float = MAX_STEER_FORCE
    neighborhood_radius: float = NEIGHBORHOOD_RADIUS
    desired_separation: float = DESIRED_SEPARATION
    field_of_view_limit: float = FIELD_OF_VIEW_LIMIT


@dataclass
class SimulationConfig:
    count: int = 25
    width: float = 600.0
    height: float = 600.0
    seed: int = 42
    time_step: float = 1.0 / 60.0
    # Initial velocity components are drawn from [-initial_speed, initial_speed].
    initial_speed: float = 1.0
    config_version: str = "v1"
    flock: FlockConfig = field(default_factory=FlockConfig)

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return load_config(data)


@dataclass
class AppConfig:
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    broadcast_interval: int = 1
    snapshot_backlog: int = 120


def load_config(raw: dict) -> SimulationConfig:
    flock = FlockConfig(**raw.get("flock", {}))
    sim_values = {k: v for k, v in raw.items() if k != "flock"}
    return SimulationConfig(flock=flock, **sim_values)
