from __future__ import annotations

import pytest
from pygame.math import Vector2
from pytest import approx

from flocksim.sim.core.buffers import StaleViewError
from flocksim.sim.core.config import SimulationConfig
from flocksim.sim.core.simulation import Simulation


def run_steps(config: SimulationConfig, steps: int):
    simulation = Simulation(config)
    for tick in range(steps):
        simulation.step(tick)
    return simulation.flock.positions().copy(), simulation.flock.velocities().copy()


def test_deterministic_steps():
    result_a = run_steps(SimulationConfig(seed=1234, count=30, width=200, height=200), 40)
    # recreate config to ensure RNG resets
    result_b = run_steps(SimulationConfig(seed=1234, count=30, width=200, height=200), 40)
    assert result_a == result_b


def test_different_seeds_diverge():
    result_a = run_steps(SimulationConfig(seed=1, count=5), 1)
    result_b = run_steps(SimulationConfig(seed=2, count=5), 1)
    assert result_a != result_b


def test_bootstrap_places_boids_inside_arena():
    config = SimulationConfig(seed=3, count=50, width=120, height=80, initial_speed=0.5)
    simulation = Simulation(config)
    flock = simulation.flock
    assert flock.width == 120.0
    assert flock.height == 80.0
    for x, y in flock.positions().pairs():
        assert 0.0 <= x <= 120.0
        assert 0.0 <= y <= 80.0
    for vx, vy in flock.velocities().pairs():
        assert -0.5 <= vx <= 0.5
        assert -0.5 <= vy <= 0.5


def test_step_reports_metrics():
    simulation = Simulation(SimulationConfig(seed=5, count=10, width=100, height=100))
    metrics = simulation.step(0)
    assert metrics.tick == 0
    assert metrics.count == 10
    assert metrics.neighbor_checks == 90
    assert 0.0 <= metrics.average_speed <= metrics.max_speed <= 3.0 + 1e-9
    assert metrics.tick_duration_ms >= 0.0
    assert simulation.metrics is metrics


def test_snapshot_contains_metadata_and_boid_signals():
    config = SimulationConfig(seed=7, count=3, width=42.0, height=24.0, time_step=0.5)
    simulation = Simulation(config)
    simulation.flock.set_repulsor(1.0, 2.0)
    simulation.step(0)
    snapshot = simulation.snapshot(1)

    assert snapshot.tick == 1
    assert snapshot.arena.width == approx(42.0)
    assert snapshot.arena.height == approx(24.0)
    assert snapshot.arena.attractor is None
    assert snapshot.arena.repulsor == (1.0, 2.0)
    assert snapshot.metadata.count == 3
    assert snapshot.metadata.sim_dt == approx(0.5)
    assert snapshot.metadata.tick_rate == approx(2.0)
    assert snapshot.metadata.seed == 7
    assert snapshot.metrics.count == 3

    payload = snapshot.boids[0]
    for key in ["id", "x", "y", "vx", "vy", "heading", "speed"]:
        assert key in payload
    assert payload["speed"] == approx(Vector2(payload["vx"], payload["vy"]).length())
    assert payload["x"] == simulation.flock.positions()[0]


def test_snapshot_before_first_step():
    simulation = Simulation(SimulationConfig(count=2))
    snapshot = simulation.snapshot(0)
    assert snapshot.metrics.neighbor_checks == 0
    assert len(snapshot.boids) == 2


def test_boids_are_vector_records():
    simulation = Simulation(SimulationConfig(seed=11, count=4))
    boids = simulation.boids()
    assert [boid.id for boid in boids] == [0, 1, 2, 3]
    positions = simulation.flock.positions().pairs()
    assert all(isinstance(boid.position, Vector2) for boid in boids)
    assert [(b.position.x, b.position.y) for b in boids] == positions


def test_reset_reseeds_and_keeps_arena_and_targets():
    config = SimulationConfig(seed=9, count=6, width=100, height=100)
    simulation = Simulation(config)
    initial = simulation.flock.positions().copy()
    simulation.resize(150, 90)
    simulation.flock.set_attractor(10.0, 10.0)
    for tick in range(5):
        simulation.step(tick)

    simulation.reset()

    flock = simulation.flock
    assert flock.width == 150.0
    assert flock.height == 90.0
    assert flock.attractor == (10.0, 10.0)
    assert simulation.metrics is None
    assert len(flock.positions()) == len(initial)


def test_reset_keeps_flock_object_and_invalidates_views():
    simulation = Simulation(SimulationConfig(seed=4, count=3, width=100, height=100))
    flock = simulation.flock
    simulation.step(0)
    after_step = flock.positions().copy()
    view = flock.positions()

    simulation.reset()

    assert simulation.flock is flock
    assert not view.is_valid
    with pytest.raises(StaleViewError):
        view[0]
    assert flock.last_neighbor_checks == 0
    assert flock.positions().copy() != after_step
    # Same seed, same starting state as a fresh simulation.
    fresh = Simulation(SimulationConfig(seed=4, count=3, width=100, height=100))
    assert flock.positions().copy() == fresh.flock.positions().copy()
    assert flock.velocities().copy() == fresh.flock.velocities().copy()
