"""Body classification.

Each kind carries its derived properties (radius law, controller
presence, whether it can anchor an orbit) so callers never compare raw
type strings.
"""

import math
from enum import Enum


class BodyKind(str, Enum):
    """Kinds of bodies that can populate the sandbox."""

    STAR = "star"
    PLANET = "planet"
    ASTEROID = "asteroid"
    BLACKHOLE = "blackhole"
    WHITE_DWARF = "whitedwarf"
    ROCKET = "rocket"
    SATELLITE = "satellite"
    STATION = "station"

    @property
    def has_controller(self) -> bool:
        """Whether bodies of this kind own a flight controller."""
        return self is BodyKind.ROCKET

    @property
    def fixed_radius(self) -> bool:
        """Whether radius stays put when the body absorbs mass."""
        return self in (BodyKind.BLACKHOLE, BodyKind.ROCKET)

    @property
    def is_gravity_well(self) -> bool:
        """Whether the autopilot may launch from / orbit this kind."""
        return self in (BodyKind.PLANET, BodyKind.STAR)

    def radius_for(self, mass: float) -> float:
        """Radius as a monotonic function of mass.

        Rockets have a fixed hull radius of 2.
        """
        if self is BodyKind.ROCKET:
            return 2.0
        root = math.sqrt(max(mass, 0.0))
        if self is BodyKind.BLACKHOLE:
            return root
        if self is BodyKind.WHITE_DWARF:
            return root * 0.6
        if self is BodyKind.STAR:
            return root * 1.2
        return root * 2.0
