"""Control algorithms for rockets.

Control turns guidance heading targets into heading updates.

Available controllers:
    HeadingController: Proportional heading slew with manual rotation
"""

from flight.control.attitude import HeadingController, prograde, retrograde

__all__ = [
    "HeadingController",
    "prograde",
    "retrograde",
]
