"""Interplanetary transfer guidance.

Plans a Hohmann transfer between the orbits of two bodies around the
dominant star. The profile holds the gates that end the escape burn and
start and end the capture.

Example:
    >>> from flight.guidance import plan_hohmann_transfer, window_error
    >>>
    >>> plan = plan_hohmann_transfer(star, home, target, computed_at_age=rocket.age)
    >>> if window_error(plan, star, home, target) < 0.1:
    ...     ...  # ignite
"""

import math
from dataclasses import dataclass
from typing import Any, NamedTuple

from gravsim.config import G
from gravsim.orbital import (
    circular_velocity,
    escape_velocity,
    hohmann_transfer_time,
    normalize_angle,
    phase_angle,
    required_phase_angle,
)

# =============================================================================
# Transfer Plan
# =============================================================================


class TransferPlan(NamedTuple):
    """Hohmann transfer computed once per transfer.

    Attributes:
        r_start: Departure body's distance from the star
        r_target: Target body's distance from the star
        transfer_time: Half-period of the transfer ellipse
        required_angle: Target lead angle at departure [rad]
        computed_at_age: Rocket age (frames) when planned
    """
    r_start: float
    r_target: float
    transfer_time: float
    required_angle: float
    computed_at_age: int = 0


def plan_hohmann_transfer(
    star: Any,
    start: Any,
    target: Any,
    computed_at_age: int = 0,
    gravitational_constant: float = G,
) -> TransferPlan:
    """Plan a transfer from ``start``'s orbit to ``target``'s around ``star``."""
    r_start = math.hypot(start.x - star.x, start.y - star.y)
    r_target = math.hypot(target.x - star.x, target.y - star.y)
    return TransferPlan(
        r_start=r_start,
        r_target=r_target,
        transfer_time=hohmann_transfer_time(r_start, r_target, star.mass, gravitational_constant),
        required_angle=required_phase_angle(r_start, r_target, star.mass, gravitational_constant),
        computed_at_age=computed_at_age,
    )


def window_error(plan: TransferPlan, star: Any, start: Any, target: Any) -> float:
    """Absolute wrapped difference between current and required phase [rad]."""
    current = phase_angle((star.x, star.y), (start.x, start.y), (target.x, target.y))
    return abs(normalize_angle(current - plan.required_angle))


# =============================================================================
# Transfer Profile
# =============================================================================


@dataclass
class TransferProfile:
    """Thrust levels and gates for the transfer sequence.

    Attributes:
        burn_thrust: Prograde thrust during the departure burn
        capture_thrust: Retrograde thrust during capture
        escape_margin: Departure burn ends above this multiple of escape speed
        encounter_radii: Capture starts within this many target radii
        capture_margin: Capture ends below this multiple of circular speed
    """
    burn_thrust: float = 0.15
    capture_thrust: float = 0.3
    escape_margin: float = 1.2
    encounter_radii: float = 4.0
    capture_margin: float = 1.1

    def escape_reached(
        self, speed: float, central_mass: float, distance: float,
        gravitational_constant: float = G,
    ) -> bool:
        v_escape = escape_velocity(central_mass, distance, gravitational_constant)
        return speed > v_escape * self.escape_margin

    def encounter(self, distance: float, target_radius: float) -> bool:
        return distance < target_radius * self.encounter_radii

    def captured(
        self, relative_speed: float, target_mass: float, distance: float,
        gravitational_constant: float = G,
    ) -> bool:
        v_circ = circular_velocity(target_mass, distance, gravitational_constant)
        return relative_speed < v_circ * self.capture_margin
