"""Heading control for rockets.

Rockets have no rigid-body rotation model; heading is a single angle that
the flight computer slews toward a target with a turn rate proportional to
the wrapped angular error. This stands in for vehicle inertia, so the
heading never snaps to its target.

This is flight software - designed to run on the vehicle.

Example:
    >>> from flight.control import HeadingController
    >>>
    >>> controller = HeadingController(gain=0.02)
    >>> rocket.angle = controller.compute(rocket.angle, target_heading)
"""

import math
from dataclasses import dataclass

from gravsim.orbital import normalize_angle

# =============================================================================
# Heading Controller
# =============================================================================


@dataclass
class HeadingController:
    """Proportional heading slew.

    Attributes:
        gain: Fraction of the wrapped heading error removed per update
        manual_rate: Heading rate for manual rotation [rad per unit time]
    """
    gain: float = 0.02
    manual_rate: float = 0.05

    def error(self, heading: float, target: float) -> float:
        """Shortest signed rotation from ``heading`` to ``target`` [rad]."""
        return normalize_angle(target - heading)

    def compute(self, heading: float, target: float) -> float:
        """Return the new heading one update closer to ``target``."""
        return heading + self.error(heading, target) * self.gain

    def rotate(self, heading: float, direction: int, dt: float) -> float:
        """Manual rotation; direction is -1 (counter-clockwise key) or +1."""
        return heading + direction * self.manual_rate * dt


def prograde(vx: float, vy: float) -> float:
    """Heading along the velocity vector [rad]."""
    return math.atan2(vy, vx)


def retrograde(vx: float, vy: float) -> float:
    """Heading against the velocity vector [rad]."""
    return math.atan2(vy, vx) + math.pi
