"""Simulation facade: live bodies, clock, camera lock and tool intents.

``Simulation`` owns the live body list and everything that refers into
it. External collaborators (renderer, HUD, input tools) read its state and
forward intents through its methods; references to bodies are kept as ids
and revalidated every tick.

Example:
    >>> from gravsim import Simulation
    >>>
    >>> sim = Simulation.from_scenario("solar_system", seed=7)
    >>> home, target = sim.bodies[1], sim.bodies[2]
    >>> rocket = sim.launch_mission(home.id, target.id)
    >>> for _ in range(600):
    ...     sim.tick()
    >>> telemetry = sim.telemetry()
"""

import logging
import math
from collections.abc import Sequence
from typing import NamedTuple

import numpy as np

from gravsim.bodies import Body, create_body, find_body
from gravsim.clock import SimulationClock
from gravsim.config import SimConfig, StepContext
from gravsim.kinds import BodyKind
from gravsim.orbital import lagrange_points
from gravsim.preview import launch_velocity_from_drag
from gravsim.scenarios import load_scenario
from gravsim.telemetry import RocketTelemetry, compute_rocket_telemetry

logger = logging.getLogger(__name__)

ROCKET_COLOR = "#facc15"
SATELLITE_COLOR = "#ffffff"
LAUNCH_CLEARANCE = 25.0
ROCKET_MASS = 20.0  # Dry mass plus full tanks


class ToolPreset(NamedTuple):
    """Body created by a drag-to-spawn tool."""
    kind: BodyKind
    mass: float
    color: str
    is_static: bool = False


TOOL_PRESETS: dict[str, ToolPreset] = {
    "asteroid": ToolPreset(BodyKind.ASTEROID, 20.0, "#ffffff"),
    "planet": ToolPreset(BodyKind.PLANET, 150.0, "#10b981"),
    "sun_system": ToolPreset(BodyKind.STAR, 1500.0, "#fbbf24"),
    "blackhole": ToolPreset(BodyKind.BLACKHOLE, 5000.0, "#000000", is_static=True),
    "whitedwarf": ToolPreset(BodyKind.WHITE_DWARF, 800.0, "#e2e8f0"),
}


class Simulation:
    """The live universe.

    Attributes:
        bodies: Active bodies (replaced wholesale on rewind)
        config: Precision flag, display toggles and constants
        context: Particle callback, key state and time-scale cell
        clock: Frame accumulator and history
        camera_target_id: Id of the body the camera follows, if any
    """

    def __init__(
        self,
        bodies: Sequence[Body] | None = None,
        config: SimConfig | None = None,
        context: StepContext | None = None,
    ) -> None:
        self.bodies: list[Body] = list(bodies) if bodies is not None else []
        self.config = config if config is not None else SimConfig()
        self.context = context if context is not None else StepContext()
        self.clock = SimulationClock(self.config.constants.history_capacity)
        self.camera_target_id: str | None = None

    @classmethod
    def from_scenario(
        cls,
        scenario_id: str,
        seed: int | None = None,
        config: SimConfig | None = None,
        context: StepContext | None = None,
    ) -> "Simulation":
        """Create a simulation populated from a scenario."""
        return cls(load_scenario(scenario_id, seed), config, context)

    def load_scenario(self, scenario_id: str, seed: int | None = None) -> None:
        """Replace the universe with a scenario; history and camera reset."""
        self.bodies = load_scenario(scenario_id, seed)
        self.clock = SimulationClock(self.config.constants.history_capacity)
        self.camera_target_id = None
        logger.info("Loaded scenario '%s' with %d bodies", scenario_id, len(self.bodies))

    # -------------------------------------------------------------------------
    # Time
    # -------------------------------------------------------------------------

    @property
    def time_scale(self) -> float:
        return self.context.time_scale.current

    @time_scale.setter
    def time_scale(self, value: float) -> None:
        self.context.time_scale.current = float(value)

    def tick(self) -> list[Body]:
        """Advance one animation tick and revalidate the camera lock."""
        self.bodies = self.clock.tick(self.bodies, self.config, self.context)
        if self.camera_target_id is not None and self.camera_target is None:
            logger.debug("Camera target %s is gone, clearing lock", self.camera_target_id)
            self.camera_target_id = None
        return self.bodies

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    @property
    def body_count(self) -> int:
        return len(self.bodies)

    @property
    def camera_target(self) -> Body | None:
        return find_body(self.bodies, self.camera_target_id)

    def lock_camera(self, body_id: str | None) -> None:
        self.camera_target_id = body_id

    def get(self, body_id: str) -> Body | None:
        return find_body(self.bodies, body_id)

    def rockets(self) -> list[Body]:
        return [b for b in self.bodies if b.kind is BodyKind.ROCKET]

    def active_rocket(self) -> Body | None:
        """Most recently added live rocket."""
        rockets = self.rockets()
        return rockets[-1] if rockets else None

    def telemetry(self) -> RocketTelemetry | None:
        """HUD readout for the active rocket, or None without one."""
        rocket = self.active_rocket()
        if rocket is None:
            return None
        return compute_rocket_telemetry(
            rocket, self.bodies, self.config.constants,
            locked=self.camera_target_id is not None,
        )

    # -------------------------------------------------------------------------
    # Spawning
    # -------------------------------------------------------------------------

    def add(self, body: Body) -> Body:
        self.bodies.append(body)
        return body

    def spawn(
        self,
        x: float,
        y: float,
        vx: float = 0.0,
        vy: float = 0.0,
        mass: float = 20.0,
        color: str = "#ffffff",
        kind: BodyKind | str = BodyKind.ASTEROID,
        is_static: bool = False,
        name: str | None = None,
    ) -> Body:
        """Create a body and add it to the universe."""
        return self.add(create_body(x, y, vx, vy, mass, color, kind, is_static, name))

    def spawn_from_drag(self, tool: str, start: tuple[float, float], end: tuple[float, float]) -> Body:
        """Spawn a tool preset at ``start`` flung away from ``end``.

        Raises:
            ValueError: If ``tool`` has no preset
        """
        try:
            preset = TOOL_PRESETS[tool]
        except KeyError:
            raise ValueError(f"Unknown spawn tool '{tool}'. Available: {', '.join(TOOL_PRESETS)}") from None
        vx, vy = launch_velocity_from_drag(start, end)
        return self.spawn(start[0], start[1], vx, vy, preset.mass, preset.color, preset.kind, preset.is_static)

    def remove(self, body_id: str) -> bool:
        """Delete a body; clears the camera lock if it pointed there."""
        before = len(self.bodies)
        self.bodies[:] = [b for b in self.bodies if b.id != body_id]
        if self.camera_target_id == body_id:
            self.camera_target_id = None
        return len(self.bodies) < before

    def spawn_binary_stars(
        self,
        center: tuple[float, float],
        drag_end: tuple[float, float] | None = None,
        mass: float = 800.0,
        separation: float = 100.0,
    ) -> tuple[Body, Body]:
        """Two equal stars on a shared circular orbit around ``center``.

        Each star moves at sqrt(G*M / 4r) with r = separation / 2; the pair
        as a whole gets the drag launch velocity.
        """
        g = self.config.constants.gravitational_constant
        r = separation / 2
        v = math.sqrt(g * mass / (4 * r))
        drift = launch_velocity_from_drag(center, drag_end) if drag_end is not None else (0.0, 0.0)

        cx, cy = center
        first = self.spawn(cx - r, cy, drift[0], v + drift[1], mass, "#fbbf24", BodyKind.STAR)
        second = self.spawn(cx + r, cy, drift[0], -v + drift[1], mass, "#fbbf24", BodyKind.STAR)
        return first, second

    def spawn_lagrange_satellite(
        self,
        start: tuple[float, float],
        end: tuple[float, float],
        snap_radius: float = 30.0,
        mass: float = 10.0,
    ) -> list[Body]:
        """Place satellites at Lagrange points near ``end``.

        Every L-point of every planet (paired with the dominant star) within
        ``snap_radius`` of ``end`` receives a satellite with the co-rotating
        velocity. Without a snap, one satellite is thrown from ``start``.
        Returns an empty list when there is no star.
        """
        stars = [b for b in self.bodies if b.kind is BodyKind.STAR]
        if not stars:
            return []
        sun = max(stars, key=lambda b: b.mass)
        g = self.config.constants.gravitational_constant

        spawned = []
        for planet in [b for b in self.bodies if b.kind is BodyKind.PLANET]:
            if planet.distance_to(sun) <= 0:
                continue
            for point in lagrange_points(sun.mass, planet.mass, sun.position, planet.position, sun.velocity, g):
                if math.hypot(end[0] - point.x, end[1] - point.y) < snap_radius:
                    spawned.append(self.spawn(
                        point.x, point.y, point.vx, point.vy, mass, SATELLITE_COLOR, BodyKind.SATELLITE,
                        name=f"{planet.name or planet.id} {point.label}",
                    ))

        if not spawned:
            vx, vy = launch_velocity_from_drag(start, end)
            spawned.append(self.spawn(start[0], start[1], vx, vy, mass, SATELLITE_COLOR, BodyKind.SATELLITE))
        return spawned

    def launch_mission(
        self,
        start_id: str,
        target_id: str,
        rng: np.random.Generator | None = None,
    ) -> Body:
        """Launch an autopilot rocket from one body toward another.

        The rocket appears 25 units above the start body's surface at a
        random angle, co-moving with it and pointing prograde. The camera
        locks on it.

        Raises:
            ValueError: If either body is missing or they are the same
        """
        start = self.get(start_id)
        target = self.get(target_id)
        if start is None or target is None:
            raise ValueError(f"Mission bodies not found: start={start_id}, target={target_id}")
        if start is target:
            raise ValueError("Mission start and target must differ")

        rng = rng if rng is not None else np.random.default_rng()
        angle = float(rng.random()) * 2 * math.pi
        distance = start.radius + LAUNCH_CLEARANCE

        rocket = create_body(
            start.x + math.cos(angle) * distance,
            start.y + math.sin(angle) * distance,
            start.vx, start.vy, ROCKET_MASS, ROCKET_COLOR, BodyKind.ROCKET,
        )
        rocket.angle = angle + math.pi / 2
        rocket.controller.constants = self.config.constants
        self.add(rocket)

        rocket.configure_mission_profile(self.bodies)
        rocket.controller.assign_target(target)
        self.camera_target_id = rocket.id
        logger.info(
            "Launched rocket %s from %s to %s",
            rocket.id, start.name or start.id, target.name or target.id,
        )
        return rocket
