"""Unit tests for orbital mechanics utilities.

Tests the numba-optimized orbital mechanics functions for accuracy.
"""

import math

import numpy as np
import pytest
from numpy.testing import assert_allclose

from gravsim.config import G
from gravsim.orbital import (
    circular_velocity,
    compute_orbital_elements,
    escape_velocity,
    hill_sphere_radius,
    hohmann_transfer_time,
    lagrange_distances,
    lagrange_points,
    normalize_angle,
    orbital_period,
    phase_angle,
    required_phase_angle,
)

# =============================================================================
# Velocity Tests
# =============================================================================


class TestVelocities:
    """Test circular and escape velocity."""

    def test_circular_velocity(self):
        """v = sqrt(G*M/r)."""
        assert_allclose(circular_velocity(5000, 100), math.sqrt(G * 5000 / 100))

    def test_escape_is_sqrt2_circular(self):
        """Escape velocity is sqrt(2) times circular velocity."""
        v_circ = circular_velocity(150, 80)
        v_esc = escape_velocity(150, 80)
        assert_allclose(v_esc, math.sqrt(2) * v_circ)

    def test_degenerate_inputs(self):
        """Zero radius or mass give zero speed rather than an error."""
        assert circular_velocity(5000, 0) == 0.0
        assert escape_velocity(0, 100) == 0.0

    def test_custom_gravitational_constant(self):
        """G is a parameter, not a hidden global."""
        assert_allclose(circular_velocity(100, 1, gravitational_constant=1.0), 10.0)


# =============================================================================
# Orbital Elements Tests
# =============================================================================


class TestOrbitalElements:
    """Test planar orbital element computation."""

    def test_circular_orbit(self):
        """Circular speed gives e = 0 and equal apsides."""
        r = 400.0
        v = circular_velocity(5000, r)

        elements = compute_orbital_elements((r, 0.0), (0.0, v), 5000, body_radius=85.0)

        assert_allclose(elements.semi_major_axis, r, rtol=1e-9)
        assert elements.eccentricity < 1e-6
        assert_allclose(elements.apoapsis_alt, r - 85.0, rtol=1e-6)
        assert_allclose(elements.periapsis_alt, r - 85.0, rtol=1e-6)
        assert_allclose(elements.period, orbital_period(r, 5000), rtol=1e-9)
        assert not elements.escaping

    def test_elliptical_orbit(self):
        """Periapsis state reproduces the known apsides."""
        mu = G * 5000
        r_p, r_a = 300.0, 900.0
        sma = (r_p + r_a) / 2
        v_p = math.sqrt(mu * (2 / r_p - 1 / sma))

        elements = compute_orbital_elements((0.0, r_p), (-v_p, 0.0), 5000)

        assert_allclose(elements.semi_major_axis, sma, rtol=1e-9)
        assert_allclose(elements.eccentricity, (r_a - r_p) / (r_a + r_p), rtol=1e-6)
        assert_allclose(elements.apoapsis_alt, r_a, rtol=1e-6)
        assert_allclose(elements.periapsis_alt, r_p, rtol=1e-6)

    def test_escape_trajectory(self):
        """Positive energy marks the orbit as escaping with no period."""
        v = escape_velocity(5000, 200) * 1.1

        elements = compute_orbital_elements((200.0, 0.0), (0.0, v), 5000)

        assert elements.escaping
        assert elements.specific_energy > 0
        assert math.isinf(elements.apoapsis_alt)
        assert math.isinf(elements.period)

    def test_massless_center_rejected(self):
        """Elements need a positive central mass."""
        with pytest.raises(ValueError):
            compute_orbital_elements((1.0, 0.0), (0.0, 1.0), 0)


# =============================================================================
# Transfer Tests
# =============================================================================


class TestHohmannTransfer:
    """Test Hohmann transfer timing and phasing."""

    def test_transfer_time_is_half_period(self):
        """t = pi * sqrt(a^3 / GM) with a the mean radius."""
        t = hohmann_transfer_time(1000, 2000, 5000)
        expected = math.pi * math.sqrt(1500**3 / (G * 5000))
        assert_allclose(t, expected)

    def test_required_phase_angle_outer_target(self):
        """alpha = pi - n_target * t_transfer."""
        r1, r2, m = 1000.0, 2000.0, 5000.0
        n_target = math.sqrt(G * m / r2**3)
        expected = math.pi - n_target * hohmann_transfer_time(r1, r2, m)

        assert_allclose(required_phase_angle(r1, r2, m), expected)
        assert 0 < required_phase_angle(r1, r2, m) < math.pi

    def test_required_phase_angle_wrapped(self):
        """Result always lies in [-pi, pi]."""
        for r2 in (50.0, 300.0, 900.0, 5000.0, 40000.0):
            alpha = required_phase_angle(1000.0, r2, 5000.0)
            assert -math.pi <= alpha <= math.pi

    def test_required_phase_angle_degenerate_radius(self):
        """A zero orbit radius yields no phase offset instead of dividing by zero."""
        assert required_phase_angle(1000.0, 0.0, 5000.0) == 0.0
        assert required_phase_angle(0.0, 2000.0, 5000.0) == 0.0

    def test_phase_angle(self):
        """Signed separation of target ahead of start."""
        assert_allclose(phase_angle((0, 0), (100, 0), (0, 100)), math.pi / 2)
        assert_allclose(phase_angle((0, 0), (0, 100), (100, 0)), -math.pi / 2)

    @pytest.mark.parametrize("angle,expected", [
        (3 * math.pi, math.pi),
        (-3 * math.pi / 2, math.pi / 2),
        (0.25, 0.25),
    ])
    def test_normalize_angle(self, angle, expected):
        """Angles wrap into [-pi, pi]."""
        assert_allclose(abs(normalize_angle(angle)), abs(expected), atol=1e-12)


# =============================================================================
# Hill Sphere and Lagrange Tests
# =============================================================================


class TestHillSphere:
    """Test Hill sphere radius."""

    def test_formula(self):
        """r = d * cbrt(m / 3M)."""
        assert_allclose(hill_sphere_radius(5000, 100, 500), 500 * (100 / 15000) ** (1 / 3))

    def test_massless_primary(self):
        """No primary means no limit."""
        assert math.isinf(hill_sphere_radius(0, 100, 500))


class TestLagrangePoints:
    """Test Lagrange point placement and velocities."""

    def test_collinear_distances(self):
        """L1/L2 straddle the secondary, L3 sits just inside d on the far side."""
        r1, r2, r3 = lagrange_distances(5000, 100, 1000)
        alpha = (100 / 15000) ** (1 / 3)
        assert_allclose(r1, 1000 * (1 - alpha))
        assert_allclose(r2, 1000 * (1 + alpha))
        assert_allclose(r3, 1000 * (1 - 7 * 0.02 / 12))

    def test_positions(self):
        """Points for a secondary on the +x axis."""
        points = {p.label: p for p in lagrange_points(5000, 100, (0, 0), (1000, 0))}
        r1, r2, r3 = lagrange_distances(5000, 100, 1000)

        assert_allclose((points["L1"].x, points["L1"].y), (r1, 0), atol=1e-9)
        assert_allclose((points["L2"].x, points["L2"].y), (r2, 0), atol=1e-9)
        assert_allclose((points["L3"].x, points["L3"].y), (-r3, 0), atol=1e-9)
        assert_allclose((points["L4"].x, points["L4"].y), (500, 1000 * math.sin(math.pi / 3)), atol=1e-9)
        assert_allclose((points["L5"].x, points["L5"].y), (500, -1000 * math.sin(math.pi / 3)), atol=1e-9)

    def test_corotating_velocity(self):
        """Velocity is omega * r, perpendicular to the radius, plus primary drift."""
        drift = (0.3, -0.1)
        points = lagrange_points(5000, 100, (0, 0), (1000, 0), primary_velocity=drift)
        omega = math.sqrt(G * 5100 / 1000**3)

        for p in points:
            rel = np.array([p.vx - drift[0], p.vy - drift[1]])
            radius = np.array([p.x, p.y])
            assert_allclose(np.dot(rel, radius), 0.0, atol=1e-9)
            assert_allclose(np.linalg.norm(rel), omega * np.linalg.norm(radius), rtol=1e-9)
            # Counter-clockwise
            assert radius[0] * rel[1] - radius[1] * rel[0] > 0

    def test_coincident_pair_rejected(self):
        """The pair must be separated."""
        with pytest.raises(ValueError):
            lagrange_points(5000, 100, (0, 0), (0, 0))
