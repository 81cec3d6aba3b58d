from __future__ import annotations

import argparse
import logging
import math
from pathlib import Path
from typing import Optional

import pygame
from pygame.math import Vector2

from ..sim.core.config import SimulationConfig
from ..sim.core.simulation import Simulation

logger = logging.getLogger(__name__)

BACKGROUND = (255, 255, 255)
BOID_COLOR = (128, 128, 128)
BOID_HALF_WIDTH = 2.0
BOID_LENGTH = 8.0
FADE_IN_FRAMES = 300


def boid_triangle(position: Vector2, velocity: Vector2) -> list[Vector2]:
    """Three corners of a triangle at ``position`` pointing along ``velocity``."""
    angle = math.atan2(velocity.y, velocity.x)
    cos = math.cos(angle)
    sin = math.sin(angle)
    return [
        Vector2(-sin * BOID_HALF_WIDTH + position.x, cos * BOID_HALF_WIDTH + position.y),
        Vector2(sin * BOID_HALF_WIDTH + position.x, -cos * BOID_HALF_WIDTH + position.y),
        Vector2(cos * BOID_LENGTH + position.x, sin * BOID_LENGTH + position.y),
    ]


def _fade_color(frame: int) -> tuple[int, int, int]:
    if frame >= FADE_IN_FRAMES:
        return BOID_COLOR
    alpha = frame / FADE_IN_FRAMES
    return tuple(round(bg + (fg - bg) * alpha) for fg, bg in zip(BOID_COLOR, BACKGROUND))


def run_viewer(config: SimulationConfig, fps: int = 60, max_frames: Optional[int] = None) -> Simulation:
    pygame.init()
    try:
        screen = pygame.display.set_mode((int(config.width), int(config.height)), pygame.RESIZABLE)
        pygame.display.set_caption("Flock")
        clock = pygame.time.Clock()
        simulation = Simulation(config)
        flock = simulation.flock
        logger.info("viewer started with %d boids", flock.count)

        frame = 0
        running = True
        while running and (max_frames is None or frame < max_frames):
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.VIDEORESIZE:
                    simulation.resize(event.w, event.h)
                elif event.type == pygame.MOUSEMOTION:
                    flock.set_repulsor(*event.pos)
                elif event.type == pygame.WINDOWLEAVE:
                    flock.clear_repulsor()

            simulation.step(frame)

            screen.fill(BACKGROUND)
            color = _fade_color(frame)
            positions = flock.positions()
            velocities = flock.velocities()
            for i in range(0, len(positions), 2):
                corners = boid_triangle(
                    Vector2(positions[i], positions[i + 1]),
                    Vector2(velocities[i], velocities[i + 1]),
                )
                pygame.draw.polygon(screen, color, corners)
            pygame.display.flip()
            clock.tick(fps)
            frame += 1
        logger.info("viewer stopped after %d frames", frame)
        return simulation
    finally:
        pygame.quit()


def main() -> None:
    parser = argparse.ArgumentParser(description="Desktop flock viewer")
    parser.add_argument("--config", type=Path, default=None, help="YAML simulation config")
    parser.add_argument("--count", type=int, default=None)
    parser.add_argument("--fps", type=int, default=60)
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config = SimulationConfig.from_yaml(args.config) if args.config else SimulationConfig()
    if args.count is not None:
        config.count = args.count
    run_viewer(config, fps=args.fps)


if __name__ == "__main__":
    main()
