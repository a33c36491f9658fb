"""Two-dimensional particles with point forces, pair forces and flocking."""

from __future__ import annotations

import math
import random
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from nimp.params import map_range

Clock = Callable[[], float]

_START = time.monotonic()


def elapsed_millis() -> int:
    """Milliseconds elapsed since this module was loaded."""
    return int((time.monotonic() - _START) * 1000)


@dataclass
class Vec2:
    """A mutable two-dimensional vector."""

    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Vec2) -> Vec2:
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vec2) -> Vec2:
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> Vec2:
        return Vec2(self.x * scalar, self.y * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> Vec2:
        return Vec2(self.x / scalar, self.y / scalar)

    def __neg__(self) -> Vec2:
        return Vec2(-self.x, -self.y)

    def length(self) -> float:
        """Euclidean length."""
        return math.hypot(self.x, self.y)

    def normalized(self) -> Vec2:
        """Unit vector in the same direction; the zero vector stays zero."""
        length = self.length()
        if length > 0:
            return Vec2(self.x / length, self.y / length)
        return Vec2(self.x, self.y)


@dataclass
class FlockingForce:
    """Accumulator for one flocking rule (separation, alignment or cohesion)."""

    distance: float
    strength: float
    count: int = 0
    sum: Vec2 = field(default_factory=Vec2)

    def reset(self) -> None:
        """Forget everything accumulated this frame."""
        self.count = 0
        self.sum = Vec2()


class Particle:
    """A particle that accumulates forces each frame and integrates them on update."""

    def __init__(
        self,
        width: int = 1024,
        height: int = 768,
        life_time: int = 20000,
        radius: int = 10,
        fade_out: float = 0.0,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.clock: Clock = clock if clock is not None else elapsed_millis
        rng = rng if rng is not None else random.Random()
        self.pos = Vec2()
        self.vel = Vec2()
        self.frc = Vec2()
        self.set_initial_condition(0, 0, 0, 0)

        self.width = width
        self.height = height
        self.alive = True
        self.life_time = life_time
        self.radius = radius
        self.fade_out = fade_out
        self.creation_time = self.clock()

        self.damping = 0.03
        self.separation = FlockingForce(distance=rng.uniform(5, 50), strength=0.03)
        self.alignment = FlockingForce(distance=80, strength=0.015)
        self.cohesion = FlockingForce(distance=90, strength=0.015)

    def reset_force(self) -> None:
        """Clear the accumulated force and the flocking accumulators."""
        self.frc = Vec2()
        self.cohesion.reset()
        self.separation.reset()
        self.alignment.reset()

    def add_force(self, x: Union[float, Vec2], y: Optional[float] = None) -> None:
        """Add a force, given as components or as a vector."""
        if isinstance(x, Vec2):
            x, y = x.x, x.y
        if y is None:
            raise TypeError("add_force needs a vector or both components")
        self.frc = Vec2(self.frc.x + x, self.frc.y + y)

    def _falloff(self, source: Vec2, radius: float) -> Optional[tuple[Vec2, float]]:
        """Direction away from ``source`` and strength, or None when out of reach."""
        if radius == 0:
            raise ValueError("radius must not be zero")
        diff = self.pos - source
        length = diff.length()
        if radius > 0 and length > radius:
            return None
        return diff.normalized(), 1 - length / radius

    def add_repulsion_force(self, x: float, y: float, radius: float, scale: float) -> None:
        """Push away from the point (x, y), stronger closer in."""
        hit = self._falloff(Vec2(x, y), radius)
        if hit:
            direction, pct = hit
            self.frc = self.frc + direction * (scale * pct)

    def add_attraction_force(self, x: float, y: float, radius: float, scale: float) -> None:
        """Pull towards the point (x, y), stronger closer in."""
        hit = self._falloff(Vec2(x, y), radius)
        if hit:
            direction, pct = hit
            self.frc = self.frc - direction * (scale * pct)

    def add_repulsion_from(self, other: Particle, radius: float, scale: float) -> None:
        """Push this particle and ``other`` apart."""
        hit = self._falloff(other.pos, radius)
        if hit:
            direction, pct = hit
            push = direction * (scale * pct)
            self.frc = self.frc + push
            other.frc = other.frc - push

    def add_attraction_to(self, other: Particle, radius: float, scale: float) -> None:
        """Pull this particle and ``other`` together."""
        hit = self._falloff(other.pos, radius)
        if hit:
            direction, pct = hit
            pull = direction * (scale * pct)
            self.frc = self.frc - pull
            other.frc = other.frc + pull

    def add_clockwise_force(self, other: Particle, radius: float, scale: float) -> None:
        """Make this particle and ``other`` circle each other clockwise."""
        hit = self._falloff(other.pos, radius)
        if hit:
            direction, pct = hit
            turn = Vec2(-direction.y, direction.x) * (scale * pct)
            self.frc = self.frc + turn
            other.frc = other.frc - turn

    def add_counter_clockwise_force(self, other: Particle, radius: float, scale: float) -> None:
        """Make this particle and ``other`` circle each other counter-clockwise."""
        hit = self._falloff(other.pos, radius)
        if hit:
            direction, pct = hit
            turn = Vec2(direction.y, -direction.x) * (scale * pct)
            self.frc = self.frc + turn
            other.frc = other.frc - turn

    def add_damping_force(self) -> None:
        """Add a force against the current velocity."""
        self.frc = self.frc - self.vel * self.damping

    def add_for_flocking(self, other: Particle) -> None:
        """Take ``other`` into account for this frame's flocking rules."""
        diff = other.pos - self.pos
        distance = diff.length()
        if distance <= 0:
            return
        if distance < self.separation.distance:
            self.separation.sum = self.separation.sum + diff.normalized()
            self.separation.count += 1
        if distance < self.alignment.distance:
            self.alignment.sum = self.alignment.sum + other.vel.normalized()
            self.alignment.count += 1
        if distance < self.cohesion.distance:
            self.cohesion.sum = self.cohesion.sum + other.pos
            self.cohesion.count += 1

    def add_flocking_force(self) -> None:
        """Turn the accumulated neighbour information into a steering force."""
        if self.separation.count > 0:
            self.separation.sum = self.separation.sum / self.separation.count
        if self.alignment.count > 0:
            self.alignment.sum = self.alignment.sum / self.alignment.count
        if self.cohesion.count > 0:
            self.cohesion.sum = self.cohesion.sum / self.cohesion.count - self.pos

        self.frc = (
            self.frc
            - self.separation.sum.normalized() * self.separation.strength
            + self.alignment.sum.normalized() * self.alignment.strength
            + self.cohesion.sum.normalized() * self.cohesion.strength
        )

    def set_initial_condition(self, px: float, py: float, vx: float, vy: float) -> None:
        """Place the particle and set its velocity."""
        self.pos = Vec2(px, py)
        self.vel = Vec2(vx, vy)

    def update(self) -> None:
        """Integrate force into velocity and velocity into position; age the particle."""
        self.vel = self.vel + self.frc
        self.pos = self.pos + self.vel
        if self.life_time != 0 and self.life_time < self.clock() - self.creation_time:
            self.alive = False

    def alpha(self) -> float:
        """Opacity to draw with: fades from 255 to 0 over the last part of the lifetime."""
        if self.fade_out > 0:
            fade_start = self.creation_time + self.life_time * (1.0 - self.fade_out)
            fade_end = self.creation_time + self.life_time
            return map_range(self.clock(), fade_start, fade_end, 255, 0)
        return 255.0

    def bounce_off_walls(self) -> None:
        """Keep the particle inside its area, reflecting and damping on collision."""
        collided = False
        x, y = self.pos.x, self.pos.y
        vx, vy = self.vel.x, self.vel.y

        if x > self.width:
            x, vx, collided = self.width, -vx, True
        elif x < 0:
            x, vx, collided = 0, -vx, True

        if y > self.height:
            y, vy, collided = self.height, -vy, True
        elif y < 0:
            y, vy, collided = 0, -vy, True

        self.pos = Vec2(x, y)
        self.vel = Vec2(vx, vy)
        if collided:
            self.vel = self.vel * 0.3