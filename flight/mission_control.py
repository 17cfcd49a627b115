"""Rocket flight computer: fuel model, manual control and autopilot.

A ``FlightController`` is owned by exactly one rocket body and flies it
through a linear mission with an optional transfer branch::

    launch -> staging -> gravity_turn -> coast -> circularize -> orbit
    orbit -> transfer_calc -> waiting_for_window -> transfer_burn
          -> transfer_coast -> capture -> orbit

The controller receives the sibling bodies on every call and refers to
other bodies (home, target) only by id, resolving them each tick. A target
that disappears mid-transfer aborts the transfer back to ``orbit``.

Every phase transition is appended to ``mission_log``, the human-readable
record shown by the HUD. The log is append-only.

This is flight software - designed to run on the vehicle.

Example:
    >>> from gravsim.bodies import create_body
    >>> from gravsim.config import StepContext
    >>>
    >>> planet = create_body(0, 0, 0, 0, 100, "#3b82f6", "planet")
    >>> rocket = create_body(0, 25, 0, 0, 20, "#facc15", "rocket")
    >>> bodies = [planet, rocket]
    >>> rocket.controller.configure_mission_profile(bodies)
    True
    >>> rocket.controller.update(0.125, bodies, StepContext())
    >>> rocket.controller.phase
    <MissionPhase.LAUNCH: 'launch'>
"""

import logging
import math
from collections.abc import Iterable, Sequence
from enum import Enum
from typing import Any

from flight.control.attitude import HeadingController, prograde, retrograde
from flight.guidance.ascent import AscentProfile, LocalFrame, local_frame
from flight.guidance.transfer import (
    TransferPlan,
    TransferProfile,
    plan_hohmann_transfer,
    window_error,
)
from gravsim.config import DEFAULT_CONSTANTS, ParticleSpawner, PhysicsConstants, StepContext
from gravsim.environment.atmosphere import apply_atmospheric_drag, nearest_body
from gravsim.kinds import BodyKind
from gravsim.orbital import circular_velocity, hill_sphere_radius

logger = logging.getLogger(__name__)

GRAVITY_WELLS = tuple(kind for kind in BodyKind if kind.is_gravity_well)
EXHAUST_COLOR = "#fbbf24"
STAGING_COLOR = "#ffffff"


# =============================================================================
# Mission Phases
# =============================================================================


class MissionPhase(str, Enum):
    """Autopilot mission phases, in flight order."""
    LAUNCH = "launch"
    STAGING = "staging"
    GRAVITY_TURN = "gravity_turn"
    COAST = "coast"
    CIRCULARIZE = "circularize"
    ORBIT = "orbit"
    TRANSFER_CALC = "transfer_calc"
    WAITING_FOR_WINDOW = "waiting_for_window"
    TRANSFER_BURN = "transfer_burn"
    TRANSFER_COAST = "transfer_coast"
    CAPTURE = "capture"

    @property
    def is_transfer(self) -> bool:
        return self in _TRANSFER_PHASES


_TRANSFER_PHASES = frozenset({
    MissionPhase.TRANSFER_CALC,
    MissionPhase.WAITING_FOR_WINDOW,
    MissionPhase.TRANSFER_BURN,
    MissionPhase.TRANSFER_COAST,
    MissionPhase.CAPTURE,
})


def _lookup(bodies: Iterable[Any], body_id: str | None) -> Any | None:
    if body_id is None:
        return None
    for body in bodies:
        if body.id == body_id and body.mass > 0:
            return body
    return None


def _dominant_star(bodies: Iterable[Any]) -> Any | None:
    stars = [b for b in bodies if b.kind is BodyKind.STAR and b.mass > 0]
    if not stars:
        return None
    return max(stars, key=lambda b: b.mass)


# =============================================================================
# Flight Controller
# =============================================================================


class FlightController:
    """Autopilot, manual control and propellant model for one rocket.

    Attributes:
        body: Owning rocket (non-owning back-reference)
        phase: Current mission phase
        stage: Active stage (1 booster, 2 upper stage)
        target_altitude: Planned orbit altitude above the home body's surface
        fuel: Propellant remaining [%]
        dry_mass: Mass with empty tanks
        fuel_capacity: Propellant mass when full
        isp: Specific impulse [s]
        g0: Standard gravity used in the rocket equation
        grace_period: Remaining collision immunity after spawn
        home_body_id: Launch body chosen by mission planning
        target_body_id: Transfer destination, if any
        transfer_plan: Hohmann plan for the current transfer
        window_error: Last phase error while waiting for a window [rad]
        thrusting: Whether the engine fired on the last update
        mission_log: Append-only HUD log
    """

    def __init__(
        self,
        body: Any,
        constants: PhysicsConstants = DEFAULT_CONSTANTS,
        ascent: AscentProfile | None = None,
        transfer: TransferProfile | None = None,
        heading: HeadingController | None = None,
    ) -> None:
        self.body = body
        self.constants = constants
        self.ascent = ascent if ascent is not None else AscentProfile()
        self.transfer = transfer if transfer is not None else TransferProfile()
        self.heading = heading if heading is not None else HeadingController()

        self.phase = MissionPhase.LAUNCH
        self.stage = 1
        self.target_altitude = 200.0
        self.mission_log: list[str] = []
        self.home_body_id: str | None = None
        self.target_body_id: str | None = None
        self.transfer_plan: TransferPlan | None = None
        self.window_error: float | None = None
        self.thrusting = False

        self.fuel = 100.0
        self.dry_mass = 10.0
        self.fuel_capacity = 10.0
        self.isp = 300.0
        self.g0 = 9.81
        self.grace_period = 120.0

        self.manual_thrust = 0.2
        self.burn_rate = 0.5  # fuel % per unit thrust per unit time

    # -------------------------------------------------------------------------
    # Propellant
    # -------------------------------------------------------------------------

    @property
    def current_mass(self) -> float:
        """Dry mass plus the mass of the remaining propellant."""
        return self.dry_mass + (self.fuel / 100.0) * self.fuel_capacity

    @property
    def delta_v(self) -> float:
        """Remaining delta-v from the rocket equation: Isp * g0 * ln(m0 / m_dry)."""
        if self.fuel <= 0:
            return 0.0
        return self.isp * self.g0 * math.log(self.current_mass / self.dry_mass)

    def consume_fuel(self, amount: float) -> None:
        """Burn ``amount`` percent of propellant and sync the body's mass."""
        if self.fuel <= 0:
            return
        self.fuel = max(0.0, self.fuel - amount)
        self.body.mass = self.current_mass

    def apply_thrust(
        self,
        thrust: float,
        dt: float,
        spawn_particles: ParticleSpawner | None = None,
    ) -> bool:
        """Accelerate along the current heading if propellant remains.

        Args:
            thrust: Acceleration magnitude
            dt: Time step
            spawn_particles: Effect callback for exhaust

        Returns:
            True if the engine fired
        """
        if thrust <= 0 or self.fuel <= 0:
            self.thrusting = False
            return False

        self.thrusting = True
        cos_a = math.cos(self.body.angle)
        sin_a = math.sin(self.body.angle)
        self.body.vx += cos_a * thrust * dt
        self.body.vy += sin_a * thrust * dt
        self.consume_fuel(thrust * self.burn_rate * dt)

        if spawn_particles is not None:
            spawn_particles(self.body.x - cos_a * 2, self.body.y - sin_a * 2, EXHAUST_COLOR, 2, 0.5)
        return True

    # -------------------------------------------------------------------------
    # Mission Planning
    # -------------------------------------------------------------------------

    def log(self, message: str, level: int = logging.INFO) -> None:
        """Append to the mission log and mirror to the module logger."""
        self.mission_log.append(message)
        logger.log(level, "[%s] %s", self.body.id, message)

    def configure_mission_profile(self, bodies: Sequence[Any]) -> bool:
        """Choose the home body and a stable target orbit altitude.

        The home body is the nearest planet or star. The orbit is kept above
        1.5 home radii and, when the home body orbits a heavier body, inside
        40% of its Hill sphere.

        Returns:
            False (with an error logged) if there is no planet or star
        """
        home, _ = nearest_body(self.body, bodies, GRAVITY_WELLS)
        if home is None:
            self.log("ERR: No Planet Found", logging.ERROR)
            return False

        sun = max(bodies, key=lambda b: b.mass)
        if sun is self.body:
            sun = home

        hill = math.inf
        if home is not sun:
            separation = math.hypot(home.x - sun.x, home.y - sun.y)
            hill = hill_sphere_radius(sun.mass, home.mass, separation)

        min_safe = home.radius * 1.5
        max_stable = hill * 0.4
        if max_stable < min_safe:
            self.log("WARN: Unstable Orbit! Hill Sphere too small.", logging.WARNING)
            planned = (home.radius + hill) / 2
        else:
            planned = min(min_safe + 100.0, max_stable)
            self.log(f"Orbit Planned: {round(planned)}km")
            self.log("Stability: Optimal")

        self.target_altitude = planned
        self.home_body_id = home.id
        return True

    def assign_target(self, target: Any | None) -> None:
        """Set (or clear with None) the transfer destination."""
        self.target_body_id = None if target is None else target.id
        self.transfer_plan = None

    def _abort_transfer(self, message: str, context: StepContext) -> None:
        if self.phase is MissionPhase.WAITING_FOR_WINDOW:
            context.time_scale.current = self.constants.normal_time_scale
        self.target_body_id = None
        self.transfer_plan = None
        self.window_error = None
        self._enter(MissionPhase.ORBIT, message, level=logging.WARNING)

    def _enter(self, phase: MissionPhase, *messages: str, level: int = logging.INFO) -> None:
        self.phase = phase
        for message in messages:
            self.log(message, level)

    # -------------------------------------------------------------------------
    # Update
    # -------------------------------------------------------------------------

    def update(
        self,
        dt: float,
        bodies: Sequence[Any] | None,
        context: StepContext | None = None,
        constants: PhysicsConstants | None = None,
    ) -> None:
        """Run one control tick.

        Order: grace countdown, atmospheric drag, then either manual control
        (if any of w/a/d is held) or the autopilot. An empty or missing body
        list logs an error and does nothing else. When ``constants`` is given
        the controller adopts it for this and later ticks.
        """
        if constants is not None:
            self.constants = constants
        if not bodies:
            self.log("ERR: No bodies to update", logging.ERROR)
            return
        context = context if context is not None else StepContext()

        if self.grace_period > 0:
            self.grace_period -= dt

        apply_atmospheric_drag(self.body, bodies, dt, context.spawn_particles)

        if context.key("w") or context.key("a") or context.key("d"):
            self._manual_control(dt, context)
        else:
            self._autopilot(dt, bodies, context)

    def _manual_control(self, dt: float, context: StepContext) -> None:
        if context.key("w"):
            self.apply_thrust(self.manual_thrust, dt, context.spawn_particles)
        else:
            self.thrusting = False
        if context.key("a"):
            self.body.angle = self.heading.rotate(self.body.angle, -1, dt)
        if context.key("d"):
            self.body.angle = self.heading.rotate(self.body.angle, 1, dt)

    def _autopilot(self, dt: float, bodies: Sequence[Any], context: StepContext) -> None:
        center, _ = nearest_body(self.body, bodies, GRAVITY_WELLS)
        if center is None:
            self.thrusting = False
            return

        frame = local_frame(self.body, center)
        target_heading, thrust = self._guide(frame, center, bodies, context)
        self.body.angle = self.heading.compute(self.body.angle, target_heading)

        if thrust > 0:
            self.apply_thrust(thrust, dt, context.spawn_particles)
        else:
            self.thrusting = False

    def _guide(
        self,
        frame: LocalFrame,
        center: Any,
        bodies: Sequence[Any],
        context: StepContext,
    ) -> tuple[float, float]:
        """Advance the phase machine; returns (target heading, thrust)."""
        body = self.body
        g = self.constants.gravitational_constant
        heading = body.angle
        thrust = 0.0

        target = _lookup(bodies, self.target_body_id)
        if self.phase.is_transfer and target is None:
            self._abort_transfer("Target Lost: Returning to Orbit", context)
            return prograde(body.vx, body.vy), 0.0

        if self.phase is MissionPhase.LAUNCH:
            heading = frame.radial_angle
            thrust = self.ascent.launch_thrust
            if self.ascent.past_staging(frame):
                self._enter(MissionPhase.STAGING, "Staging: Booster Sep")

        elif self.phase is MissionPhase.STAGING:
            if self.stage == 1:
                self.stage = 2
                context.spawn_particles(body.x, body.y, STAGING_COLOR, 20, 3.0)
            thrust = self.ascent.staging_thrust
            self._enter(MissionPhase.GRAVITY_TURN, "Upper Stage Ignition: Gravity Turn")

        elif self.phase is MissionPhase.GRAVITY_TURN:
            heading = self.ascent.turn_heading(frame, self.target_altitude)
            thrust = self.ascent.turn_thrust
            if self.ascent.at_meco(frame, self.target_altitude):
                thrust = 0.0
                self._enter(MissionPhase.COAST, "MECO: Coasting to Apoapsis")

        elif self.phase is MissionPhase.COAST:
            heading = prograde(body.vx, body.vy)
            if self.ascent.near_apoapsis(frame, self.target_altitude):
                self._enter(MissionPhase.CIRCULARIZE, "Circularization Burn")

        elif self.phase is MissionPhase.CIRCULARIZE:
            heading = frame.tangential_angle
            thrust = self.ascent.circularize_thrust
            if body.speed >= circular_velocity(center.mass, frame.distance, g):
                thrust = 0.0
                self._enter(MissionPhase.ORBIT, "Orbit Achieved", "Ready for Transfer")

        elif self.phase is MissionPhase.ORBIT:
            heading = prograde(body.vx, body.vy)
            if target is not None:
                label = target.name or target.kind.value
                self._enter(MissionPhase.TRANSFER_CALC, f"Mission: Transfer to {label}")

        elif self.phase is MissionPhase.TRANSFER_CALC:
            star = _dominant_star(bodies)
            if star is None:
                self._abort_transfer("Transfer Aborted: No Star", context)
            elif target is star or center is star:
                self._abort_transfer("Transfer Aborted: Invalid Target", context)
            else:
                plan = plan_hohmann_transfer(star, center, target, body.age, g)
                if plan.r_start <= 0 or plan.r_target <= 0:
                    self._abort_transfer("Transfer Aborted: Invalid Target", context)
                else:
                    self.transfer_plan = plan
                    self._enter(MissionPhase.WAITING_FOR_WINDOW, "Calculating Launch Window...")

        elif self.phase is MissionPhase.WAITING_FOR_WINDOW:
            star = _dominant_star(bodies)
            if star is None:
                self._abort_transfer("Transfer Aborted: No Star", context)
            elif self.transfer_plan is None:
                self.phase = MissionPhase.TRANSFER_CALC
            else:
                self.window_error = window_error(self.transfer_plan, star, center, target)
                if self.window_error > self.constants.window_tolerance:
                    context.time_scale.current = self.constants.fast_forward_scale
                else:
                    context.time_scale.current = self.constants.normal_time_scale
                    self._enter(MissionPhase.TRANSFER_BURN, "Window Open! Igniting...")

        elif self.phase is MissionPhase.TRANSFER_BURN:
            heading = frame.tangential_angle
            thrust = self.transfer.burn_thrust
            if self.transfer.escape_reached(body.speed, center.mass, frame.distance, g):
                thrust = 0.0
                self._enter(MissionPhase.TRANSFER_COAST, "Escape Velocity Reached", "Coasting to Target")

        elif self.phase is MissionPhase.TRANSFER_COAST:
            heading = prograde(body.vx, body.vy)
            if self.transfer.encounter(body.distance_to(target), target.radius):
                self._enter(MissionPhase.CAPTURE, "Target Encounter - Braking")

        elif self.phase is MissionPhase.CAPTURE:
            heading = retrograde(body.vx, body.vy)
            thrust = self.transfer.capture_thrust
            relative_speed = math.hypot(body.vx - target.vx, body.vy - target.vy)
            if self.transfer.captured(relative_speed, target.mass, body.distance_to(target), g):
                thrust = 0.0
                self.target_body_id = None
                self.transfer_plan = None
                self.window_error = None
                self._enter(MissionPhase.ORBIT, "Orbit Capture Successful")

        return heading, thrust
