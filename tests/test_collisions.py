"""Unit tests for collision resolution."""

import math

from numpy.testing import assert_allclose

from gravsim.bodies import create_body
from gravsim.collisions import CollisionKind, resolve_collisions


class ParticleRecorder:
    """Collects particle spawn requests."""

    def __init__(self):
        self.calls = []

    def __call__(self, x, y, color, count, speed):
        self.calls.append((x, y, color, count, speed))


class TestMerging:
    """Test inelastic merges between ordinary bodies."""

    def test_heavier_absorbs_lighter(self):
        """Momentum-weighted velocity, summed mass, recomputed radius."""
        big = create_body(0, 0, 1.0, 0, 100, "#aaaaaa")
        small = create_body(10, 0, -2.0, 0.5, 50, "#bbbbbb")
        bodies = [small, big]

        events = resolve_collisions(bodies)

        assert bodies == [big]
        assert_allclose(big.mass, 150.0)
        assert_allclose(big.vx, (100 * 1.0 + 50 * -2.0) / 150)
        assert_allclose(big.vy, (50 * 0.5) / 150)
        assert_allclose(big.radius, math.sqrt(150) * 2)
        assert len(events) == 1
        assert events[0].kind is CollisionKind.MERGE
        assert events[0].winner_id == big.id
        assert events[0].victim_id == small.id

    def test_star_radius_law(self):
        """Stars keep their own radius formula after a merge."""
        star = create_body(0, 0, 0, 0, 1000, kind="star")
        rock = create_body(5, 0, 0, 0, 21, kind="asteroid")

        resolve_collisions([star, rock])

        assert_allclose(star.radius, math.sqrt(1021) * 1.2)

    def test_black_hole_radius_fixed(self):
        """Black holes gain mass without growing."""
        hole = create_body(0, 0, 0, 0, 400, kind="blackhole")
        radius = hole.radius
        rock = create_body(1, 0, 0, 0, 100)

        resolve_collisions([hole, rock])

        assert_allclose(hole.mass, 500.0)
        assert hole.radius == radius

    def test_static_winner_unchanged(self):
        """A static winner destroys the victim but absorbs nothing."""
        anchor = create_body(0, 0, 0, 0, 5000, kind="blackhole", is_static=True)
        rock = create_body(10, 0, 3.0, 0, 20)
        bodies = [anchor, rock]

        resolve_collisions(bodies)

        assert bodies == [anchor]
        assert anchor.mass == 5000
        assert anchor.vx == 0.0

    def test_separated_bodies_untouched(self):
        """Bodies farther apart than their radii sum do not interact."""
        a = create_body(0, 0, 0, 0, 100)
        b = create_body(100, 0, 0, 0, 100)
        bodies = [a, b]

        assert resolve_collisions(bodies) == []
        assert bodies == [a, b]

    def test_debris_burst(self):
        """Victim emits 15 particles at speed 2 in its color."""
        recorder = ParticleRecorder()
        big = create_body(0, 0, 0, 0, 100)
        small = create_body(3, 4, 0, 0, 10, "#123456")

        resolve_collisions([big, small], recorder)

        assert recorder.calls == [(3.0, 4.0, "#123456", 15, 2.0)]

    def test_chain_purged_in_one_pass(self):
        """Several victims in one pass are all removed."""
        hub = create_body(0, 0, 0, 0, 1000)
        rocks = [create_body(dx, 0, 0, 0, 1) for dx in (-5, 5, 10)]
        bodies = [hub, *rocks]

        events = resolve_collisions(bodies)

        assert bodies == [hub]
        assert len(events) == 3
        assert_allclose(hub.mass, 1003.0)


class TestRocketImpacts:
    """Test rocket-specific collision rules."""

    def test_rocket_is_always_victim(self):
        """Even a heavier rocket loses against a pebble."""
        rocket = create_body(0, 0, 0, 0, 20, kind="rocket")
        rocket.controller.grace_period = 0
        pebble = create_body(3, 0, 0, 0, 5)
        bodies = [rocket, pebble]

        events = resolve_collisions(bodies)

        assert bodies == [pebble]
        assert_allclose(pebble.mass, 25.0)
        assert events[0].kind is CollisionKind.IMPACT
        assert events[0].victim_id == rocket.id

    def test_grace_period_immunity(self):
        """Freshly spawned rockets cannot collide."""
        rocket = create_body(0, 0, 0, 0, 20, kind="rocket")
        planet = create_body(5, 0, 0, 0, 100, kind="planet")
        bodies = [rocket, planet]

        assert rocket.controller.grace_period > 0
        assert resolve_collisions(bodies) == []
        assert bodies == [rocket, planet]

    def test_rocket_winner_mass_follows_fuel(self):
        """A rocket that absorbs another keeps mass equal to its fuel model."""
        first = create_body(0, 0, 0, 0, 20, kind="rocket")
        second = create_body(3, 0, 1, 0, 20, kind="rocket")
        first.controller.grace_period = 0
        second.controller.grace_period = 0
        bodies = [first, second]

        events = resolve_collisions(bodies)

        assert bodies == [second]
        assert events[0].winner_id == second.id
        assert_allclose(second.mass, second.controller.current_mass)
        assert_allclose(second.vx, 0.5)
        assert second.radius == 2.0
