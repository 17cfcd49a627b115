"""Unit tests for rocket telemetry."""

import math

import pytest
from numpy.testing import assert_allclose

from gravsim.bodies import create_body
from gravsim.orbital import circular_velocity
from gravsim.telemetry import compute_rocket_telemetry, surface_altitude


@pytest.fixture
def planet():
    """Mass-400 planet (radius 40) at the origin."""
    return create_body(0, 0, 0, 0, 400, "#3b82f6", "planet")


def _rocket(x, y, vx, vy):
    return create_body(x, y, vx, vy, 20, "#facc15", "rocket")


class TestTelemetry:
    """Test the HUD readout."""

    def test_requires_controller(self, planet):
        """Passive bodies have no telemetry."""
        with pytest.raises(ValueError, match="no flight controller"):
            compute_rocket_telemetry(planet, [planet])

    def test_circular_orbit(self, planet):
        """Circular orbit: equal apsides at orbit altitude."""
        v = circular_velocity(400, 100)
        rocket = _rocket(0, 100, -v, 0)

        telemetry = compute_rocket_telemetry(rocket, [planet, rocket])

        assert not telemetry.escaping
        assert_allclose(telemetry.apoapsis, 60.0, rtol=1e-6)
        assert_allclose(telemetry.periapsis, 60.0, rtol=1e-6)
        assert_allclose(telemetry.period, 2 * math.pi * 100 / v, rtol=1e-6)
        assert_allclose(telemetry.altitude, 60.0)
        assert_allclose(telemetry.speed, v)

    def test_escaping(self, planet):
        """Hyperbolic speed reports escaping with no apsides."""
        rocket = _rocket(0, 100, 10, 0)

        telemetry = compute_rocket_telemetry(rocket, [planet, rocket])

        assert telemetry.escaping
        assert telemetry.apoapsis is None
        assert telemetry.periapsis is None
        assert telemetry.period is None

    def test_relative_to_moving_primary(self):
        """A co-moving circular orbit is still bound."""
        planet = create_body(0, 0, 3, 0, 400, "#3b82f6", "planet")
        v = circular_velocity(400, 100)
        rocket = _rocket(0, 100, 3 - v, 0)

        telemetry = compute_rocket_telemetry(rocket, [planet, rocket])

        assert not telemetry.escaping
        assert_allclose(telemetry.apoapsis, 60.0, rtol=1e-6)

    def test_no_primary(self):
        """Without a planet or star only speed and fuel are reported."""
        rock = create_body(50, 0, 0, 0, 50)
        rocket = _rocket(0, 0, 1, 0)

        telemetry = compute_rocket_telemetry(rocket, [rock, rocket])

        assert telemetry.altitude is None
        assert telemetry.apoapsis is None
        assert telemetry.escaping is False

    def test_mirrors_controller(self, planet):
        """Fuel, phase, log and delta-v come from the controller."""
        rocket = _rocket(0, 100, 0, 0)
        rocket.controller.fuel = 40.0
        rocket.controller.log("Test entry")

        telemetry = compute_rocket_telemetry(rocket, [planet, rocket], locked=True)

        assert telemetry.fuel == 40.0
        assert telemetry.phase == "launch"
        assert telemetry.mission_log == ("Test entry",)
        assert telemetry.delta_v == pytest.approx(rocket.controller.delta_v)
        assert telemetry.locked is True


class TestSurfaceAltitude:
    """Test the altitude readout."""

    def test_nearest_surface(self, planet):
        far = create_body(1000, 0, 0, 0, 400, kind="planet")
        rocket = _rocket(0, 50, 0, 0)
        assert_allclose(surface_altitude(rocket, [planet, far, rocket]), 10.0)

    def test_light_bodies_ignored(self):
        """Bodies of mass 100 or less do not count."""
        moon = create_body(0, 0, 0, 0, 100, kind="planet")
        rocket = _rocket(0, 50, 0, 0)
        assert surface_altitude(rocket, [moon, rocket]) is None
