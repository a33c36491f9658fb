"""A flocking particle system and the description of an external force on it."""

from __future__ import annotations

import random
from typing import Optional

from nimp.particle import Clock, Particle, Vec2


class ParticleForce:
    """An adjustable point force: position, reach, strength and direction."""

    RADIUS_RANGE = (0, 100)
    SCALE_RANGE = (1, 20)

    def __init__(self, name: str = "force", width: int = 640, height: int = 480) -> None:
        self.name = name
        self.is_attracting = False
        self.pos = Vec2(width * 0.5, height * 0.5)
        self.pos_range = (Vec2(0, 0), Vec2(width, height))
        self.radius = 10
        self.scale = 2.0
        self.id = 0
        self.time_stamp = 0

    def apply_to(self, system: ParticleSystem) -> None:
        """Apply this force to every particle of ``system``."""
        if self.is_attracting:
            system.add_attraction_force(self.pos.x, self.pos.y, self.radius, self.scale)
        else:
            system.add_repulsion_force(self.pos.x, self.pos.y, self.radius, self.scale)


class ParticleSystem:
    """A set of flocking particles inside a rectangular area."""

    def __init__(
        self,
        initial_amount: int,
        width: int = 1024,
        height: int = 768,
        min_size: int = 4,
        max_size: int = 4,
        min_lifetime: int = 0,
        max_lifetime: int = 0,
        fade_out: float = 0.0,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.width = width
        self.height = height
        self.repel = True
        self.radius = 100.0
        self.strength = 0.5
        self.clock = clock
        self.rng = rng if rng is not None else random.Random()
        self.particles: list[Particle] = []
        self.add_particles(initial_amount, min_size, max_size, min_lifetime, max_lifetime, fade_out)

    def __len__(self) -> int:
        return len(self.particles)

    def update(self) -> None:
        """Drop dead particles, then flock, damp, bounce and move the rest."""
        self.particles = [p for p in self.particles if p.alive]
        for p in self.particles:
            p.reset_force()
        for p in self.particles:
            for other in self.particles:
                if other is not p:
                    p.add_for_flocking(other)
        for p in self.particles:
            p.add_flocking_force()
            p.add_damping_force()
            p.bounce_off_walls()
            p.update()

    def reset_force(self) -> None:
        """Clear every particle's force and move it on."""
        for p in self.particles:
            p.reset_force()
            p.update()

    def add_force(self, x: float, y: float) -> None:
        """Push every particle by (x, y) and move it on."""
        for p in self.particles:
            p.add_force(x, y)
            p.update()

    def add_repulsion_force(self, x: float, y: float, radius: float, scale: float) -> None:
        """Push every particle away from (x, y) and move it on."""
        for p in self.particles:
            p.add_repulsion_force(x, y, radius, scale)
            p.update()

    def add_attraction_force(self, x: float, y: float, radius: float, scale: float) -> None:
        """Pull every particle towards (x, y) and move it on."""
        for p in self.particles:
            p.add_attraction_force(x, y, radius, scale)
            p.update()

    def add_particles(
        self,
        amount: int,
        min_size: int = 4,
        max_size: int = 4,
        min_lifetime: int = 0,
        max_lifetime: int = 0,
        fade_out: float = 0.0,
    ) -> None:
        """Add ``amount`` particles at rest at random places with random size and lifetime."""
        for _ in range(amount):
            life_time = int(self.rng.uniform(min_lifetime, max_lifetime))
            radius = int(self.rng.uniform(min_size, max_size))
            particle = Particle(self.width, self.height, life_time, radius, fade_out, self.clock, self.rng)
            particle.set_initial_condition(self.rng.uniform(0, self.width), self.rng.uniform(0, self.height), 0, 0)
            self.particles.append(particle)

    def remove_particles(self, amount: int) -> None:
        """Remove up to ``amount`` particles from the end."""
        for _ in range(amount):
            if not self.particles:
                break
            self.particles.pop()

    def num_particles(self) -> int:
        """Number of particles in the system."""
        return len(self.particles)

    def draw(self) -> list[tuple[float, float, int, float]]:
        """Circles to draw, as (x, y, radius, alpha) for every particle."""
        return [(p.pos.x, p.pos.y, p.radius, p.alpha()) for p in self.particles]