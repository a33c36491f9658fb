import random

import pytest

from nimp.particle import Vec2
from nimp.particle_system import ParticleForce, ParticleSystem


class FakeClock:
    def __init__(self, now=0):
        self.now = now

    def __call__(self):
        return self.now


def make(amount=5, clock=None, seed=3, **kwargs):
    return ParticleSystem(amount, clock=clock or FakeClock(), rng=random.Random(seed), **kwargs)


def test_initial_particles_are_placed_inside_area():
    system = make(20, width=200, height=100, min_size=2, max_size=8)
    assert len(system) == 20
    assert system.num_particles() == 20
    for p in system.particles:
        assert 0 <= p.pos.x <= 200
        assert 0 <= p.pos.y <= 100
        assert 2 <= p.radius <= 8
        assert p.vel == Vec2(0, 0)


def test_same_seed_gives_same_layout():
    a = make(10, seed=7)
    b = make(10, seed=7)
    assert [p.pos for p in a.particles] == [p.pos for p in b.particles]


def test_add_and_remove_particles():
    system = make(3)
    system.add_particles(4)
    assert system.num_particles() == 7
    system.remove_particles(2)
    assert system.num_particles() == 5
    system.remove_particles(100)
    assert system.num_particles() == 0


def test_dead_particles_are_removed_on_update():
    clock = FakeClock(0)
    system = make(4, clock=clock, min_lifetime=100, max_lifetime=100)
    system.update()
    assert system.num_particles() == 4
    clock.now = 1000
    system.update()
    assert system.num_particles() == 4
    system.update()
    assert system.num_particles() == 0


def test_immortal_particles_survive():
    clock = FakeClock(0)
    system = make(4, clock=clock)
    clock.now = 10**9
    system.update()
    system.update()
    assert system.num_particles() == 4


def test_update_keeps_particles_near_area():
    system = make(15, width=100, height=100)
    for _ in range(50):
        system.update()
    for p in system.particles:
        assert -5 <= p.pos.x <= 105
        assert -5 <= p.pos.y <= 105


def test_add_force_moves_every_particle():
    system = make(5)
    before = [p.pos for p in system.particles]
    system.add_force(1, 0)
    for p, start in zip(system.particles, before):
        assert p.vel == Vec2(1, 0)
        assert p.pos.x == pytest.approx(start.x + 1)
        assert p.pos.y == pytest.approx(start.y)


def test_reset_force_keeps_particles_at_rest():
    system = make(5)
    before = [p.pos for p in system.particles]
    system.reset_force()
    assert [p.pos for p in system.particles] == before


def test_attraction_and_repulsion_move_in_opposite_directions():
    a = make(6, seed=11)
    b = make(6, seed=11)
    a.add_attraction_force(500, 400, 0.0001 - 1, 1)
    b.add_repulsion_force(500, 400, 0.0001 - 1, 1)
    for pa, pb in zip(a.particles, b.particles):
        assert pa.vel.x == pytest.approx(-pb.vel.x)
        assert pa.vel.y == pytest.approx(-pb.vel.y)


def test_draw_describes_every_particle():
    system = make(3, min_size=6, max_size=6)
    circles = system.draw()
    assert len(circles) == 3
    for (x, y, radius, alpha), p in zip(circles, system.particles):
        assert (x, y) == (p.pos.x, p.pos.y)
        assert radius == 6
        assert alpha == 255


def test_particle_force_defaults():
    force = ParticleForce()
    assert force.name == "force"
    assert force.is_attracting is False
    assert force.pos == Vec2(320, 240)
    assert force.radius == 10
    assert force.scale == 2
    assert force.pos_range == (Vec2(0, 0), Vec2(640, 480))


def test_particle_force_applies_repulsion_or_attraction():
    repelled = make(4, seed=5)
    attracted = make(4, seed=5)
    force = ParticleForce(width=1024, height=768)
    force.radius = 2000
    force.apply_to(repelled)
    force.is_attracting = True
    force.apply_to(attracted)
    for pr, pa in zip(repelled.particles, attracted.particles):
        assert pr.vel.x == pytest.approx(-pa.vel.x)
        assert pr.vel.y == pytest.approx(-pa.vel.y)