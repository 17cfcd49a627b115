"""Point-mass bodies populating the sandbox.

A body is a mutable point mass with a kind-derived radius, a bounded
trail for rendering and, for rockets, an owned flight controller.

Example:
    >>> from gravsim.bodies import create_body
    >>>
    >>> sun = create_body(0, 0, 0, 0, 5000, "#fbbf24", "star", name="Sol")
    >>> rocket = create_body(120, 0, 0, 6, 20, "#facc15", "rocket")
    >>> rocket.controller.configure_mission_profile([sun, rocket])
"""

import math
import uuid
from collections import deque
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from gravsim.config import DEFAULT_CONSTANTS, PhysicsConstants, StepContext
from gravsim.environment.atmosphere import apply_atmospheric_drag
from gravsim.kinds import BodyKind

if TYPE_CHECKING:
    from flight.mission_control import FlightController

# Kinds slowed by planetary atmospheres without a controller
DRAG_KINDS = (BodyKind.ASTEROID, BodyKind.SATELLITE, BodyKind.STATION)


def new_body_id() -> str:
    """Short random identifier, stable across snapshots."""
    return uuid.uuid4().hex[:9]


# =============================================================================
# Body
# =============================================================================


@dataclass(eq=False)
class Body:
    """A point mass in the 2D universe.

    Attributes:
        x, y: Position
        vx, vy: Velocity
        mass: Mass (0 marks the body destroyed)
        color: Display color
        kind: Body classification
        is_static: Exert gravity but never move
        name: Optional display name
        id: Stable identifier
        radius: Derived from mass and kind
        angle: Heading [rad] (rockets only)
        trail: Recent sampled positions
        age: Frames alive
        controller: Flight controller (rockets only)
    """
    x: float
    y: float
    vx: float
    vy: float
    mass: float
    color: str = "#ffffff"
    kind: BodyKind = BodyKind.ASTEROID
    is_static: bool = False
    name: str | None = None
    id: str = field(default_factory=new_body_id)
    radius: float = field(init=False)
    angle: float = 0.0
    trail: deque[tuple[float, float]] = field(init=False, repr=False)
    age: int = field(default=0, repr=False)
    controller: "FlightController | None" = field(default=None, repr=False)

    def __post_init__(self) -> None:
        """Derive radius, trail capacity and controller from the kind."""
        self.kind = BodyKind(self.kind)
        if self.mass < 0:
            raise ValueError(f"Mass must be >= 0, got {self.mass}")
        self.radius = self.kind.radius_for(self.mass)
        self.trail = deque(maxlen=self._trail_capacity(DEFAULT_CONSTANTS))
        if self.kind.has_controller and self.controller is None:
            # flight imports gravsim leaf modules, so resolve at call time
            from flight.mission_control import FlightController

            self.controller = FlightController(self)

    def _trail_capacity(self, constants: PhysicsConstants) -> int:
        if self.kind is BodyKind.ROCKET:
            return constants.rocket_trail_length
        return constants.trail_length

    @property
    def position(self) -> tuple[float, float]:
        """Position (x, y)."""
        return (self.x, self.y)

    @property
    def velocity(self) -> tuple[float, float]:
        """Velocity (vx, vy)."""
        return (self.vx, self.vy)

    @property
    def speed(self) -> float:
        """Speed magnitude."""
        return math.hypot(self.vx, self.vy)

    @property
    def is_destroyed(self) -> bool:
        """Destroyed bodies carry zero mass until purged."""
        return self.mass == 0

    def distance_to(self, other: "Body") -> float:
        """Center-to-center distance."""
        return math.hypot(other.x - self.x, other.y - self.y)

    def recompute_radius(self) -> None:
        """Re-derive radius from mass unless this kind keeps a fixed radius."""
        if not self.kind.fixed_radius:
            self.radius = self.kind.radius_for(self.mass)

    def configure_mission_profile(self, bodies: Sequence["Body"]) -> bool:
        """Plan the autopilot's orbit; False if no controller or no home body."""
        if self.controller is None:
            return False
        return self.controller.configure_mission_profile(bodies)

    def update(
        self,
        dt: float,
        bodies: Sequence["Body"],
        context: StepContext,
        constants: PhysicsConstants = DEFAULT_CONSTANTS,
    ) -> None:
        """Advance position, then run the controller tick or passive drag."""
        if not self.is_static:
            self.x += self.vx * dt
            self.y += self.vy * dt

        if self.controller is not None:
            self.controller.update(dt, bodies, context, constants)
        elif not self.is_static and self.kind in DRAG_KINDS:
            apply_atmospheric_drag(self, bodies, dt, context.spawn_particles)

        self.update_trail(constants)

    def update_trail(self, constants: PhysicsConstants = DEFAULT_CONSTANTS) -> None:
        """Age one frame and sample the trail on its interval.

        Light static bodies (mass <= 500) never leave a trail.
        """
        self.age += 1
        if self.kind is BodyKind.ROCKET:
            interval = constants.rocket_trail_interval
        elif not self.is_static or self.mass > 500:
            interval = constants.trail_interval
        else:
            return

        capacity = self._trail_capacity(constants)
        if self.trail.maxlen != capacity:
            self.trail = deque(self.trail, maxlen=capacity)
        if self.age % interval == 0:
            self.trail.append((self.x, self.y))


# =============================================================================
# Factory and Lookup
# =============================================================================


def create_body(
    x: float,
    y: float,
    vx: float,
    vy: float,
    mass: float,
    color: str = "#ffffff",
    kind: BodyKind | str = BodyKind.ASTEROID,
    is_static: bool = False,
    name: str | None = None,
) -> Body:
    """Create a fully initialized body.

    Rockets receive a flight controller; call
    ``body.configure_mission_profile(bodies)`` before the first physics
    tick if autopilot behaviour is desired.

    Raises:
        ValueError: Unknown kind or negative mass
    """
    return Body(
        x=float(x), y=float(y), vx=float(vx), vy=float(vy),
        mass=float(mass), color=color, kind=BodyKind(kind),
        is_static=is_static, name=name,
    )


def find_body(bodies: Iterable[Body], body_id: str | None) -> Body | None:
    """Resolve an id to a live body, or None if it is gone."""
    if body_id is None:
        return None
    for body in bodies:
        if body.id == body_id and body.mass > 0:
            return body
    return None
