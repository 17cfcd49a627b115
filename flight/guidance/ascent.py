"""Ascent guidance: vertical launch, gravity turn, coast, circularization.

The ascent is flown relative to the nearest gravity well:

1. Launch: point radially outward until clear of the surface
2. Gravity turn: ease the heading from radial to tangential between the
   turn-start altitude and 80% of the target altitude
3. Coast: engine off, follow the velocity vector up to apoapsis
4. Circularize: burn tangentially until at local circular speed

Angles are measured counter-clockwise from +x. "Tangential" is the radial
angle plus pi/2, i.e. a counter-clockwise orbit.

This is flight software - designed to run on the vehicle.

Example:
    >>> from flight.guidance import AscentProfile, local_frame
    >>>
    >>> profile = AscentProfile()
    >>> frame = local_frame(rocket, planet)
    >>> heading = profile.turn_heading(frame, target_altitude=130.0)
"""

import math
from dataclasses import dataclass
from typing import Any, NamedTuple

# =============================================================================
# Local Frame
# =============================================================================


class LocalFrame(NamedTuple):
    """Rocket state relative to a central body.

    Attributes:
        distance: Center-to-center distance
        altitude: Distance above the surface
        radial_angle: Heading pointing away from the center [rad]
        tangential_angle: Prograde orbit direction [rad]
        radial_velocity: Velocity component along the radial direction
    """
    distance: float
    altitude: float
    radial_angle: float
    tangential_angle: float
    radial_velocity: float


def local_frame(body: Any, center: Any) -> LocalFrame:
    """Resolve ``body`` position and velocity against ``center``.

    Radial velocity uses the rocket's absolute velocity, which matches the
    apoapsis test used during coast for slowly moving planets.
    """
    dx = body.x - center.x
    dy = body.y - center.y
    distance = math.hypot(dx, dy)
    radial = math.atan2(dy, dx)
    v_radial = body.vx * math.cos(radial) + body.vy * math.sin(radial)
    return LocalFrame(
        distance=distance,
        altitude=distance - center.radius,
        radial_angle=radial,
        tangential_angle=radial + math.pi / 2,
        radial_velocity=v_radial,
    )


# =============================================================================
# Ascent Profile
# =============================================================================


@dataclass
class AscentProfile:
    """Thrust levels and altitude gates of the ascent.

    Attributes:
        launch_thrust: Thrust during vertical ascent
        staging_thrust: Thrust on the staging tick
        turn_thrust: Thrust during the gravity turn
        circularize_thrust: Thrust during circularization
        staging_altitude: Altitude at which the booster separates
        turn_start_altitude: Altitude where the pitch-over begins
        turn_end_fraction: Fraction of target altitude where the turn completes
        meco_fraction: Fraction of target altitude for main engine cutoff
        apoapsis_fraction: Minimum fraction of target altitude to circularize
        apoapsis_radial_speed: Radial speed below which apoapsis is declared
    """
    launch_thrust: float = 0.15
    staging_thrust: float = 0.1
    turn_thrust: float = 0.08
    circularize_thrust: float = 0.1
    staging_altitude: float = 40.0
    turn_start_altitude: float = 40.0
    turn_end_fraction: float = 0.8
    meco_fraction: float = 0.95
    apoapsis_fraction: float = 0.9
    apoapsis_radial_speed: float = 0.05

    def turn_progress(self, altitude: float, target_altitude: float) -> float:
        """Fraction of the pitch-over completed, in [0, 1]."""
        turn_end = target_altitude * self.turn_end_fraction
        span = turn_end - self.turn_start_altitude
        if span <= 0:
            return 1.0
        return min(1.0, max(0.0, (altitude - self.turn_start_altitude) / span))

    def turn_heading(self, frame: LocalFrame, target_altitude: float) -> float:
        """Ease-out blend from radial to tangential heading [rad]."""
        progress = self.turn_progress(frame.altitude, target_altitude)
        ease = 1.0 - (1.0 - progress) ** 2
        return frame.radial_angle + ease * math.pi / 2

    def past_staging(self, frame: LocalFrame) -> bool:
        return frame.altitude > self.staging_altitude

    def at_meco(self, frame: LocalFrame, target_altitude: float) -> bool:
        return frame.altitude >= target_altitude * self.meco_fraction

    def near_apoapsis(self, frame: LocalFrame, target_altitude: float) -> bool:
        """Vertical speed has died out high enough to circularize."""
        return (
            frame.radial_velocity < self.apoapsis_radial_speed
            and frame.altitude > target_altitude * self.apoapsis_fraction
        )
