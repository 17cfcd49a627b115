"""Exponential planetary atmosphere and quadratic drag.

Every planet carries an atmosphere extending to 40% of its radius above
the surface. Density decays exponentially with altitude and drag opposes
velocity with magnitude 0.5 * Cd * A * rho * v^2.

The same rule slows rockets (via their flight controller) and plain
asteroids (via ``Body.update``).

Example:
    >>> from gravsim.environment import ExponentialAtmosphere
    >>>
    >>> atm = ExponentialAtmosphere()
    >>> result = atm.at_altitude(2.0, planet_radius=20.0)
    >>> print(f"Density: {result.density:.3f}")
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import numpy as np

from gravsim.config import ParticleSpawner, checked
from gravsim.kinds import BodyKind

# =============================================================================
# Constants
# =============================================================================

ATMOSPHERE_FRACTION = 0.4  # Atmosphere height / planet radius
SCALE_HEIGHT_FRACTION = 0.2  # Scale height / atmosphere height
DRAG_COEFFICIENT = 0.5
FRONTAL_AREA = 0.01
MIN_DRAG_SPEED = 0.1
SPARK_SPEED = 3.0
SPARK_COLOR = "#f97316"

_rng = np.random.default_rng()


# =============================================================================
# Result Classes
# =============================================================================


@checked
@dataclass(frozen=True)
class AtmosphereResult:
    """Atmospheric conditions at an altitude.

    Attributes:
        altitude: Height above the planet surface
        atmosphere_height: Top of the atmosphere above the surface
        density: Relative density (1 at the surface, 0 outside)
    """
    altitude: float
    atmosphere_height: float
    density: float

    @property
    def is_vacuum(self) -> bool:
        """Check if altitude is outside the atmosphere."""
        return self.density == 0.0


# =============================================================================
# Atmosphere Model
# =============================================================================


@checked
class ExponentialAtmosphere:
    """Exponential density profile scaled to the planet radius."""

    def __init__(
        self,
        drag_coefficient: float = DRAG_COEFFICIENT,
        frontal_area: float = FRONTAL_AREA,
    ) -> None:
        self.drag_coefficient = drag_coefficient
        self.frontal_area = frontal_area

    def at_altitude(self, altitude: float, planet_radius: float) -> AtmosphereResult:
        """Get atmospheric conditions above a planet of the given radius."""
        height = planet_radius * ATMOSPHERE_FRACTION
        if altitude <= 0.0 or altitude >= height or height <= 0.0:
            return AtmosphereResult(altitude=altitude, atmosphere_height=height, density=0.0)
        rho = math.exp(-altitude / (height * SCALE_HEIGHT_FRACTION))
        return AtmosphereResult(altitude=altitude, atmosphere_height=height, density=rho)

    def drag_force(self, density: float, speed: float) -> float:
        """Drag force magnitude 0.5 * Cd * A * rho * v^2."""
        return 0.5 * self.drag_coefficient * self.frontal_area * density * speed * speed


DEFAULT_ATMOSPHERE = ExponentialAtmosphere()


# =============================================================================
# Drag Application
# =============================================================================


def nearest_body(body: Any, bodies: Iterable[Any], kinds: tuple[BodyKind, ...]) -> tuple[Any | None, float]:
    """Find the nearest other body whose kind is in ``kinds``.

    Returns:
        (nearest, center distance), or (None, inf) when there is none
    """
    nearest = None
    min_dist = math.inf
    for other in bodies:
        if other is body or other.kind not in kinds:
            continue
        d = math.hypot(other.x - body.x, other.y - body.y)
        if d < min_dist:
            min_dist = d
            nearest = other
    return nearest, min_dist


def apply_atmospheric_drag(
    body: Any,
    bodies: Iterable[Any],
    dt: float,
    spawn_particles: ParticleSpawner,
    atmosphere: ExponentialAtmosphere = DEFAULT_ATMOSPHERE,
    rng: np.random.Generator | None = None,
) -> float:
    """Slow ``body`` inside the atmosphere of the nearest planet.

    Args:
        body: Body to decelerate (mutated in place)
        bodies: All live bodies
        dt: Time step
        spawn_particles: Effect callback for re-entry sparks
        atmosphere: Density and drag model
        rng: Random source for spark emission

    Returns:
        Drag deceleration applied (0 outside any atmosphere)
    """
    planet, dist = nearest_body(body, bodies, (BodyKind.PLANET,))
    if planet is None or body.mass <= 0:
        return 0.0

    conditions = atmosphere.at_altitude(dist - planet.radius, planet.radius)
    if conditions.is_vacuum:
        return 0.0

    speed = math.hypot(body.vx, body.vy)
    if speed <= MIN_DRAG_SPEED:
        return 0.0

    decel = atmosphere.drag_force(conditions.density, speed) / body.mass
    body.vx -= (body.vx / speed) * decel * dt
    body.vy -= (body.vy / speed) * decel * dt

    rng = rng if rng is not None else _rng
    if speed > SPARK_SPEED and rng.random() > 0.5:
        spawn_particles(body.x, body.y, SPARK_COLOR, 1, 1.0)

    return decel
