"""Integration tests for the simulation facade."""

import math

import numpy as np
import pytest
from numpy.testing import assert_allclose

from flight.mission_control import MissionPhase
from gravsim.bodies import create_body
from gravsim.config import PhysicsConstants, SimConfig
from gravsim.kinds import BodyKind
from gravsim.orbital import lagrange_points
from gravsim.simulation import LAUNCH_CLEARANCE, TOOL_PRESETS, Simulation
from gravsim.telemetry import RocketTelemetry


def _two_planets():
    sun = create_body(0, 0, 0, 0, 5000, "#fbbf24", "star", name="Sol")
    home = create_body(1000, 0, 0, 2.0, 100, "#3b82f6", "planet", name="Terra")
    target = create_body(-2000, 0, 0, -1.41, 100, "#ef4444", "planet", name="Ares")
    return Simulation([sun, home, target])


# =============================================================================
# Time Tests
# =============================================================================


class TestTicking:
    """Test clock integration."""

    def test_forward_and_rewind(self):
        """Rewinding restores an earlier recorded state."""
        sim = Simulation([create_body(0, 0, 1, 0, 10)])
        for _ in range(3):
            sim.tick()
        assert_allclose(sim.bodies[0].x, 3.0)

        sim.time_scale = -1.0
        sim.tick()

        assert_allclose(sim.bodies[0].x, 2.0)
        assert sim.clock.history.cursor == 1

    def test_pause(self):
        sim = Simulation([create_body(0, 0, 1, 0, 10)])
        sim.time_scale = 0.0
        sim.tick()
        assert sim.bodies[0].x == 0.0
        assert len(sim.clock.history) == 0

    def test_camera_lock_cleared_when_target_destroyed(self):
        sim = Simulation([create_body(0, 0, 0, 0, 10)])
        sim.lock_camera(sim.bodies[0].id)
        sim.bodies[0].mass = 0.0

        sim.tick()

        assert sim.camera_target_id is None
        assert sim.body_count == 0

    def test_load_scenario_resets(self):
        sim = Simulation.from_scenario("three_body")
        sim.tick()
        sim.lock_camera(sim.bodies[0].id)

        sim.load_scenario("eclipse")

        assert sim.body_count == 3
        assert sim.camera_target_id is None
        assert len(sim.clock.history) == 0


# =============================================================================
# Spawning Tests
# =============================================================================


class TestSpawning:
    """Test tool intents."""

    @pytest.mark.parametrize("tool", sorted(TOOL_PRESETS))
    def test_spawn_from_drag(self, tool):
        sim = Simulation()
        body = sim.spawn_from_drag(tool, (100, 100), (80, 140))
        preset = TOOL_PRESETS[tool]

        assert body.kind is preset.kind
        assert body.mass == preset.mass
        assert body.is_static == preset.is_static
        assert (body.x, body.y) == (100.0, 100.0)
        assert_allclose(body.velocity, (1.0, -2.0))

    def test_unknown_tool(self):
        with pytest.raises(ValueError, match="Unknown spawn tool"):
            Simulation().spawn_from_drag("comet", (0, 0), (1, 1))

    def test_remove_clears_camera(self):
        sim = Simulation()
        body = sim.spawn(0, 0)
        sim.lock_camera(body.id)

        assert sim.remove(body.id)
        assert sim.camera_target_id is None
        assert not sim.remove(body.id)

    def test_binary_stars(self):
        """Equal stars with opposite circular velocities."""
        sim = Simulation()
        first, second = sim.spawn_binary_stars((0, 0))
        v = math.sqrt(0.8 * 800 / (4 * 50))

        assert (first.x, second.x) == (-50.0, 50.0)
        assert_allclose(first.velocity, (0.0, v))
        assert_allclose(second.velocity, (0.0, -v))
        # Center of mass at rest
        assert_allclose(first.vy * first.mass + second.vy * second.mass, 0.0, atol=1e-12)

    def test_binary_stars_with_drift(self):
        sim = Simulation()
        first, second = sim.spawn_binary_stars((0, 0), drag_end=(-20, 0))
        assert_allclose((first.vx, second.vx), (1.0, 1.0))


class TestLagrangeSatellite:
    """Test L-point snapping."""

    def _system(self):
        sim = Simulation()
        sun = sim.spawn(0, 0, mass=5000, kind="star", name="Sol")
        planet = sim.spawn(1000, 0, 0, 2.0, mass=100, kind="planet", name="Terra")
        return sim, sun, planet

    def test_snaps_to_l4(self):
        sim, sun, planet = self._system()
        l4 = lagrange_points(5000, 100, sun.position, planet.position)[3]

        (satellite,) = sim.spawn_lagrange_satellite((0, 0), (l4.x + 5, l4.y - 5))

        assert satellite.kind is BodyKind.SATELLITE
        assert satellite.name == "Terra L4"
        assert_allclose(satellite.position, (l4.x, l4.y))
        assert_allclose(satellite.velocity, (l4.vx, l4.vy))

    def test_no_snap_throws_from_start(self):
        sim, _, _ = self._system()

        (satellite,) = sim.spawn_lagrange_satellite((300, 300), (280, 300))

        assert (satellite.x, satellite.y) == (300.0, 300.0)
        assert_allclose(satellite.velocity, (1.0, 0.0))

    def test_no_star(self):
        sim = Simulation()
        sim.spawn(0, 0, mass=100, kind="planet")
        assert sim.spawn_lagrange_satellite((0, 0), (10, 10)) == []
        assert sim.body_count == 1


# =============================================================================
# Mission Tests
# =============================================================================


class TestLaunchMission:
    """Test rocket launches."""

    def test_launch(self):
        sim = _two_planets()
        home, target = sim.bodies[1], sim.bodies[2]

        rocket = sim.launch_mission(home.id, target.id, rng=np.random.default_rng(0))

        assert rocket.kind is BodyKind.ROCKET
        assert_allclose(rocket.distance_to(home), home.radius + LAUNCH_CLEARANCE)
        assert rocket.velocity == home.velocity
        assert rocket.controller.home_body_id == home.id
        assert rocket.controller.target_body_id == target.id
        assert rocket.controller.phase is MissionPhase.LAUNCH
        assert sim.camera_target_id == rocket.id
        assert sim.active_rocket() is rocket

        bearing = math.atan2(rocket.y - home.y, rocket.x - home.x)
        assert_allclose(math.cos(rocket.angle), math.cos(bearing + math.pi / 2), atol=1e-12)
        assert_allclose(math.sin(rocket.angle), math.sin(bearing + math.pi / 2), atol=1e-12)

    def test_missing_body(self):
        sim = _two_planets()
        with pytest.raises(ValueError, match="not found"):
            sim.launch_mission(sim.bodies[1].id, "nope")

    def test_same_body(self):
        sim = _two_planets()
        with pytest.raises(ValueError, match="differ"):
            sim.launch_mission(sim.bodies[1].id, sim.bodies[1].id)

    def test_telemetry(self):
        sim = _two_planets()
        assert sim.telemetry() is None

        sim.launch_mission(sim.bodies[1].id, sim.bodies[2].id)
        telemetry = sim.telemetry()

        assert isinstance(telemetry, RocketTelemetry)
        assert telemetry.locked
        assert telemetry.phase == "launch"

    def test_flight_leaves_pad(self):
        """The autopilot climbs away from the home body."""
        sim = _two_planets()
        home = sim.bodies[1]
        rocket = sim.launch_mission(home.id, sim.bodies[2].id, rng=np.random.default_rng(1))
        start = rocket.distance_to(home)

        for _ in range(30):
            sim.tick()

        rocket = sim.get(rocket.id)
        assert rocket is not None
        assert rocket.distance_to(sim.get(home.id)) > start
        assert rocket.controller.fuel < 100.0

    def test_rocket_uses_session_constants(self):
        """Launched rockets fly under the session's physics constants."""
        sim = _two_planets()
        sim.config = SimConfig(constants=PhysicsConstants(gravitational_constant=2.0))

        rocket = sim.launch_mission(sim.bodies[1].id, sim.bodies[2].id)
        assert rocket.controller.constants is sim.config.constants

        sim.tick()
        rocket = sim.get(rocket.id)
        assert rocket.controller.constants.gravitational_constant == 2.0
