"""Rocket telemetry for the HUD.

Example:
    >>> from gravsim.telemetry import compute_rocket_telemetry
    >>>
    >>> telemetry = compute_rocket_telemetry(rocket, bodies)
    >>> telemetry.escaping, telemetry.apoapsis
    (False, 143.2)
"""

import math
from collections.abc import Sequence
from typing import NamedTuple

from gravsim.bodies import Body
from gravsim.config import DEFAULT_CONSTANTS, PhysicsConstants
from gravsim.environment.atmosphere import nearest_body
from gravsim.kinds import BodyKind
from gravsim.orbital import compute_orbital_elements

# Bodies lighter than this are ignored for the altitude readout
ALTITUDE_REFERENCE_MASS = 100.0
PRIMARY_KINDS = tuple(kind for kind in BodyKind if kind.is_gravity_well)


class RocketTelemetry(NamedTuple):
    """Per-tick rocket readout.

    Attributes:
        speed: Absolute speed
        fuel: Propellant remaining [%]
        altitude: Surface distance to the nearest body heavier than 100 (None if none)
        apoapsis: Apoapsis altitude over the primary (None if escaping or no primary)
        periapsis: Periapsis altitude over the primary (None if escaping or no primary)
        period: Orbital period (None if escaping or no primary)
        escaping: Specific orbital energy >= 0 relative to the primary
        phase: Mission phase name
        mission_log: Copy of the mission log
        delta_v: Remaining delta-v
        locked: Camera is locked on this rocket
    """
    speed: float
    fuel: float
    altitude: float | None
    apoapsis: float | None
    periapsis: float | None
    period: float | None
    escaping: bool
    phase: str
    mission_log: tuple[str, ...]
    delta_v: float
    locked: bool = False


def surface_altitude(body: Body, bodies: Sequence[Body]) -> float | None:
    """Smallest surface distance to any other body heavier than 100."""
    best = math.inf
    for other in bodies:
        if other is body or other.mass <= ALTITUDE_REFERENCE_MASS:
            continue
        best = min(best, body.distance_to(other) - other.radius)
    return None if best == math.inf else best


def compute_rocket_telemetry(
    rocket: Body,
    bodies: Sequence[Body],
    constants: PhysicsConstants = DEFAULT_CONSTANTS,
    locked: bool = False,
) -> RocketTelemetry:
    """Build the HUD readout for ``rocket``.

    Apsides and period are taken relative to the nearest planet or star,
    using the rocket's position and velocity relative to that body.

    Raises:
        ValueError: If ``rocket`` has no flight controller
    """
    controller = rocket.controller
    if controller is None:
        raise ValueError(f"Body {rocket.id} ({rocket.kind.value}) has no flight controller")

    apoapsis = periapsis = period = None
    escaping = False
    primary, _ = nearest_body(rocket, bodies, PRIMARY_KINDS)
    if primary is not None and primary.mass > 0:
        elements = compute_orbital_elements(
            (rocket.x - primary.x, rocket.y - primary.y),
            (rocket.vx - primary.vx, rocket.vy - primary.vy),
            primary.mass,
            primary.radius,
            constants.gravitational_constant,
        )
        escaping = elements.escaping
        if not escaping:
            apoapsis = elements.apoapsis_alt
            periapsis = elements.periapsis_alt
            period = elements.period

    return RocketTelemetry(
        speed=rocket.speed,
        fuel=controller.fuel,
        altitude=surface_altitude(rocket, bodies),
        apoapsis=apoapsis,
        periapsis=periapsis,
        period=period,
        escaping=escaping,
        phase=controller.phase.value,
        mission_log=tuple(controller.mission_log),
        delta_v=controller.delta_v,
        locked=locked,
    )
