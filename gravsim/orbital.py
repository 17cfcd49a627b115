"""Orbital mechanics utilities with numba optimization.

Stateless two-body math used live by the HUD and by the rocket autopilot.
Core functions are numba-compiled; the Python API wraps them with the
gravitational constant passed explicitly.

Key functions:
- compute_orbital_elements: Apsides, period and energy from relative state
- hohmann_transfer_time / required_phase_angle: Transfer window planning
- hill_sphere_radius: Region dominated by a secondary body
- lagrange_points: L1..L5 positions and co-rotating velocities

Example:
    >>> from gravsim.orbital import circular_velocity, hohmann_transfer_time
    >>>
    >>> v = circular_velocity(central_mass=5000.0, radius=900.0)
    >>> t = hohmann_transfer_time(900.0, 1500.0, central_mass=5000.0)
"""

import math
from typing import NamedTuple

import numpy as np
from numba import njit

from gravsim.config import G, checked

# =============================================================================
# Data Classes
# =============================================================================


class OrbitalElements(NamedTuple):
    """Planar orbital elements relative to a central body.

    Attributes:
        semi_major_axis: Semi-major axis (negative when hyperbolic)
        eccentricity: Orbital eccentricity [-]
        apoapsis_alt: Apoapsis altitude above the central surface (inf if escaping)
        periapsis_alt: Periapsis altitude above the central surface
        period: Orbital period (inf if escaping)
        specific_energy: Specific orbital energy
        escaping: True when specific energy >= 0
    """
    semi_major_axis: float
    eccentricity: float
    apoapsis_alt: float
    periapsis_alt: float
    period: float
    specific_energy: float
    escaping: bool


class LagrangePoint(NamedTuple):
    """A Lagrange point with the velocity that co-rotates with the pair."""
    label: str
    x: float
    y: float
    vx: float
    vy: float


# =============================================================================
# Core Numba Functions
# =============================================================================


@njit(cache=True, fastmath=True)
def _normalize_angle(angle: float) -> float:
    """Wrap angle to [-pi, pi]."""
    two_pi = 2.0 * np.pi
    while angle < -np.pi:
        angle += two_pi
    while angle > np.pi:
        angle -= two_pi
    return angle


@njit(cache=True, fastmath=True)
def _circular_velocity(central_mass: float, radius: float, g: float) -> float:
    """Circular orbital velocity at radius."""
    if radius <= 0.0 or central_mass <= 0.0:
        return 0.0
    return np.sqrt(g * central_mass / radius)


@njit(cache=True, fastmath=True)
def _escape_velocity(central_mass: float, radius: float, g: float) -> float:
    """Escape velocity at radius."""
    if radius <= 0.0 or central_mass <= 0.0:
        return 0.0
    return np.sqrt(2.0 * g * central_mass / radius)


@njit(cache=True, fastmath=True)
def _orbital_period(semi_major_axis: float, central_mass: float, g: float) -> float:
    """Keplerian period from semi-major axis."""
    if semi_major_axis <= 0.0 or central_mass <= 0.0:
        return 0.0
    return 2.0 * np.pi * np.sqrt(semi_major_axis**3 / (g * central_mass))


@njit(cache=True, fastmath=True)
def _hohmann_transfer_time(r_start: float, r_target: float, central_mass: float, g: float) -> float:
    """Half the period of the transfer ellipse."""
    a_transfer = 0.5 * (r_start + r_target)
    return 0.5 * _orbital_period(a_transfer, central_mass, g)


@njit(cache=True, fastmath=True)
def _required_phase_angle(r_start: float, r_target: float, central_mass: float, g: float) -> float:
    """Target lead angle at departure for a Hohmann transfer."""
    if r_start <= 0.0 or r_target <= 0.0 or central_mass <= 0.0:
        return 0.0
    t_transfer = _hohmann_transfer_time(r_start, r_target, central_mass, g)
    n_target = np.sqrt(g * central_mass / r_target**3)
    return _normalize_angle(np.pi - n_target * t_transfer)


@njit(cache=True)
def _orbital_elements_core(
    rx: float, ry: float,
    vx: float, vy: float,
    mu: float,
    r_body: float,
) -> tuple[float, float, float, float, float, float]:
    """Numba-optimized planar orbital elements.

    Returns tuple of:
        (sma, ecc, apoapsis_alt, periapsis_alt, period, energy)
    """
    r = np.sqrt(rx*rx + ry*ry)
    v_sq = vx*vx + vy*vy
    if r < 1e-9:
        r = 1e-9

    energy = v_sq / 2.0 - mu / r

    if abs(energy) < 1e-12:
        sma = np.inf
    else:
        sma = -mu / (2.0 * energy)

    # 2D angular momentum (z component of r x v)
    h = abs(rx * vy - ry * vx)

    e_term = 1.0 + 2.0 * energy * h * h / (mu * mu)
    ecc = np.sqrt(e_term) if e_term > 0.0 else 0.0

    if energy < 0.0:
        apo = sma * (1.0 + ecc) - r_body
        peri = sma * (1.0 - ecc) - r_body
        period = 2.0 * np.pi * np.sqrt(sma**3 / mu)
    else:
        apo = np.inf
        if ecc > 1.0 and np.isfinite(sma):
            peri = -sma * (ecc - 1.0) - r_body
        else:
            peri = h * h / (2.0 * mu) - r_body
        period = np.inf

    return (sma, ecc, apo, peri, period, energy)


# =============================================================================
# Python API Functions
# =============================================================================


@checked
def normalize_angle(angle: float) -> float:
    """Wrap an angle to [-pi, pi] [rad]."""
    return float(_normalize_angle(float(angle)))


@checked
def circular_velocity(central_mass: float, radius: float, gravitational_constant: float = G) -> float:
    """Get circular orbital velocity sqrt(G*M/r).

    Args:
        central_mass: Mass of the attracting body
        radius: Distance from its center
        gravitational_constant: G

    Returns:
        Circular speed (0 for degenerate inputs)
    """
    return float(_circular_velocity(central_mass, radius, gravitational_constant))


@checked
def escape_velocity(central_mass: float, radius: float, gravitational_constant: float = G) -> float:
    """Get escape velocity sqrt(2*G*M/r).

    Args:
        central_mass: Mass of the attracting body
        radius: Distance from its center
        gravitational_constant: G

    Returns:
        Escape speed (0 for degenerate inputs)
    """
    return float(_escape_velocity(central_mass, radius, gravitational_constant))


@checked
def orbital_period(semi_major_axis: float, central_mass: float, gravitational_constant: float = G) -> float:
    """Get Keplerian orbital period 2*pi*sqrt(a^3 / (G*M))."""
    return float(_orbital_period(semi_major_axis, central_mass, gravitational_constant))


@checked
def hill_sphere_radius(primary_mass: float, secondary_mass: float, separation: float) -> float:
    """Radius within which the secondary's gravity dominates.

    r_Hill = d * cbrt(m / 3M)

    Args:
        primary_mass: Mass of the dominant body (e.g. star)
        secondary_mass: Mass of the orbiting body (e.g. planet)
        separation: Distance between them

    Returns:
        Hill radius (inf when the primary has no mass)
    """
    if primary_mass <= 0:
        return math.inf
    return separation * (secondary_mass / (3.0 * primary_mass)) ** (1.0 / 3.0)


@checked
def hohmann_transfer_time(
    r_start: float,
    r_target: float,
    central_mass: float,
    gravitational_constant: float = G,
) -> float:
    """Coast time of a Hohmann transfer between two circular orbits.

    The transfer ellipse has a = (r_start + r_target) / 2; the coast is
    half its period.
    """
    return float(_hohmann_transfer_time(r_start, r_target, central_mass, gravitational_constant))


@checked
def required_phase_angle(
    r_start: float,
    r_target: float,
    central_mass: float,
    gravitational_constant: float = G,
) -> float:
    """Angle the target must lead the departure body by at departure.

    alpha = pi - n_target * t_transfer, wrapped to [-pi, pi].
    """
    return float(_required_phase_angle(r_start, r_target, central_mass, gravitational_constant))


@checked
def phase_angle(
    center: tuple[float, float],
    start: tuple[float, float],
    target: tuple[float, float],
) -> float:
    """Current angular separation of target ahead of start, seen from center [rad]."""
    angle_start = math.atan2(start[1] - center[1], start[0] - center[0])
    angle_target = math.atan2(target[1] - center[1], target[0] - center[0])
    return normalize_angle(angle_target - angle_start)


@checked
def compute_orbital_elements(
    position: tuple[float, float],
    velocity: tuple[float, float],
    central_mass: float,
    body_radius: float = 0.0,
    gravitational_constant: float = G,
) -> OrbitalElements:
    """Compute planar orbital elements from a relative state.

    Args:
        position: Position relative to the central body
        velocity: Velocity relative to the central body
        central_mass: Mass of the central body
        body_radius: Central body radius (altitudes are above its surface)
        gravitational_constant: G

    Returns:
        OrbitalElements named tuple

    Example:
        >>> el = compute_orbital_elements((100.0, 0.0), (0.0, 6.32), 5000.0)
        >>> el.escaping
        False
    """
    mu = gravitational_constant * central_mass
    if mu <= 0:
        raise ValueError(f"central_mass must be positive, got {central_mass}")
    sma, ecc, apo, peri, period, energy = _orbital_elements_core(
        float(position[0]), float(position[1]), float(velocity[0]), float(velocity[1]),
        float(mu), float(body_radius),
    )
    return OrbitalElements(
        semi_major_axis=float(sma),
        eccentricity=float(ecc),
        apoapsis_alt=float(apo),
        periapsis_alt=float(peri),
        period=float(period),
        specific_energy=float(energy),
        escaping=bool(energy >= 0.0),
    )


@checked
def lagrange_distances(primary_mass: float, secondary_mass: float, separation: float) -> tuple[float, float, float]:
    """Distances of L1, L2, L3 from the primary.

    Uses the restricted three-body approximations with q = m / M:
    L1 = d(1 - cbrt(q/3)), L2 = d(1 + cbrt(q/3)), L3 = d(1 - 7q/12).
    L4 and L5 sit at distance d.
    """
    if primary_mass <= 0:
        raise ValueError(f"primary_mass must be positive, got {primary_mass}")
    q = secondary_mass / primary_mass
    alpha = (q / 3.0) ** (1.0 / 3.0)
    return (
        separation * (1.0 - alpha),
        separation * (1.0 + alpha),
        separation * (1.0 - 7.0 * q / 12.0),
    )


@checked
def lagrange_points(
    primary_mass: float,
    secondary_mass: float,
    primary_position: tuple[float, float],
    secondary_position: tuple[float, float],
    primary_velocity: tuple[float, float] = (0.0, 0.0),
    gravitational_constant: float = G,
) -> list[LagrangePoint]:
    """Positions and co-rotating velocities of L1..L5.

    Velocities are omega * r perpendicular (counter-clockwise) to the
    radius from the primary, offset by the primary's own velocity.

    Args:
        primary_mass: Mass of the primary (e.g. star)
        secondary_mass: Mass of the secondary (e.g. planet)
        primary_position: (x, y) of the primary
        secondary_position: (x, y) of the secondary
        primary_velocity: (vx, vy) of the primary
        gravitational_constant: G

    Returns:
        Five LagrangePoint tuples labelled "L1".."L5"
    """
    px, py = primary_position
    dx = secondary_position[0] - px
    dy = secondary_position[1] - py
    dist = math.hypot(dx, dy)
    if dist <= 0:
        raise ValueError("primary and secondary must not coincide")
    angle = math.atan2(dy, dx)
    omega = math.sqrt(gravitational_constant * (primary_mass + secondary_mass) / dist**3)

    r_l1, r_l2, r_l3 = lagrange_distances(primary_mass, secondary_mass, dist)
    placements = [
        ("L1", r_l1, angle),
        ("L2", r_l2, angle),
        ("L3", r_l3, angle + math.pi),
        ("L4", dist, angle + math.pi / 3),
        ("L5", dist, angle - math.pi / 3),
    ]

    points = []
    for label, r, theta in placements:
        speed = omega * r
        points.append(LagrangePoint(
            label=label,
            x=px + math.cos(theta) * r,
            y=py + math.sin(theta) * r,
            vx=primary_velocity[0] + math.cos(theta + math.pi / 2) * speed,
            vy=primary_velocity[1] + math.sin(theta + math.pi / 2) * speed,
        ))
    return points
