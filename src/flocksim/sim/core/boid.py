from __future__ import annotations

from dataclasses import dataclass, field

from pygame.math import Vector2

from ..utils.math2d import heading_from_velocity


@dataclass(slots=True)
class Boid:
    """Detached copy of one boid's state; edits do not flow back into the flock."""

    id: int
    position: Vector2
    velocity: Vector2
    acceleration: Vector2 = field(default_factory=Vector2)

    @property
    def heading(self) -> float:
        return heading_from_velocity(self.velocity.x, self.velocity.y)

    @property
    def speed(self) -> float:
        return self.velocity.length()
