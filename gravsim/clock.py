"""Frame clock with bounded record/rewind history.

The clock turns a signed time scale into whole simulation frames. Running
forward integrates and records one snapshot per tick; running backward
walks a cursor through recorded snapshots and rebuilds the live body
list from them rather than re-simulating.

Example:
    >>> from gravsim.clock import SimulationClock
    >>> from gravsim.config import SimConfig, StepContext
    >>>
    >>> clock = SimulationClock()
    >>> context = StepContext()
    >>> bodies = clock.tick(bodies, SimConfig(), context)
    >>> context.time_scale.current = -2.0
    >>> bodies = clock.tick(bodies, SimConfig(), context)  # two frames back
"""

import logging
import math
from collections import deque
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from gravsim.bodies import Body
from gravsim.collisions import resolve_collisions
from gravsim.config import DEFAULT_CONSTANTS, SimConfig, StepContext, checked
from gravsim.integrator import physics_step
from gravsim.kinds import BodyKind

if TYPE_CHECKING:
    from flight.guidance.transfer import TransferPlan
    from flight.mission_control import FlightController

logger = logging.getLogger(__name__)

# =============================================================================
# Snapshot Records
# =============================================================================


@dataclass(frozen=True)
class ControllerRecord:
    """Flight controller state captured with its rocket."""
    fuel: float
    phase: str
    stage: int
    target_altitude: float
    grace_period: float
    home_body_id: str | None
    target_body_id: str | None
    transfer_plan: "TransferPlan | None"
    mission_log: tuple[str, ...]

    @classmethod
    def capture(cls, controller: "FlightController") -> "ControllerRecord":
        return cls(
            fuel=controller.fuel,
            phase=controller.phase.value,
            stage=controller.stage,
            target_altitude=controller.target_altitude,
            grace_period=controller.grace_period,
            home_body_id=controller.home_body_id,
            target_body_id=controller.target_body_id,
            transfer_plan=controller.transfer_plan,
            mission_log=tuple(controller.mission_log),
        )

    def restore_into(self, controller: "FlightController") -> None:
        controller.fuel = self.fuel
        controller.phase = type(controller.phase)(self.phase)
        controller.stage = self.stage
        controller.target_altitude = self.target_altitude
        controller.grace_period = self.grace_period
        controller.home_body_id = self.home_body_id
        controller.target_body_id = self.target_body_id
        controller.transfer_plan = self.transfer_plan
        controller.mission_log = list(self.mission_log)
        controller.thrusting = False


@dataclass(frozen=True)
class BodyRecord:
    """Immutable point-in-time state of one body."""
    id: str
    x: float
    y: float
    vx: float
    vy: float
    mass: float
    radius: float
    color: str
    kind: BodyKind
    is_static: bool
    name: str | None
    angle: float
    age: int
    trail: tuple[tuple[float, float], ...]
    controller: ControllerRecord | None = None

    @classmethod
    def capture(cls, body: Body) -> "BodyRecord":
        controller = None
        if body.controller is not None:
            controller = ControllerRecord.capture(body.controller)
        return cls(
            id=body.id, x=body.x, y=body.y, vx=body.vx, vy=body.vy,
            mass=body.mass, radius=body.radius, color=body.color,
            kind=body.kind, is_static=body.is_static, name=body.name,
            angle=body.angle, age=body.age, trail=tuple(body.trail),
            controller=controller,
        )

    def to_body(self) -> Body:
        """Build a fresh live body from this record."""
        body = Body(
            x=self.x, y=self.y, vx=self.vx, vy=self.vy, mass=self.mass,
            color=self.color, kind=self.kind, is_static=self.is_static,
            name=self.name, id=self.id, angle=self.angle, age=self.age,
        )
        # Merged bodies may carry a radius their mass alone would not give
        body.radius = self.radius
        body.trail.extend(self.trail)
        if self.controller is not None and body.controller is not None:
            self.controller.restore_into(body.controller)
        return body


Snapshot = tuple[BodyRecord, ...]


def snapshot_bodies(bodies: Sequence[Body]) -> Snapshot:
    """Capture every body, in list order."""
    return tuple(BodyRecord.capture(b) for b in bodies)


def restore_bodies(snapshot: Snapshot) -> list[Body]:
    """Rebuild a live body list from a snapshot."""
    return [record.to_body() for record in snapshot]


# =============================================================================
# History Ring Buffer
# =============================================================================


@checked
class History:
    """Bounded snapshot sequence with a cursor.

    Recording while the cursor is behind the tail discards the frames
    after it first. Once full, every new frame evicts the oldest one.
    """

    def __init__(self, capacity: int = DEFAULT_CONSTANTS.history_capacity) -> None:
        if capacity < 1:
            raise ValueError(f"History capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._frames: deque[Snapshot] = deque(maxlen=capacity)
        self.cursor = 0

    def __len__(self) -> int:
        return len(self._frames)

    def __getitem__(self, index: int) -> Snapshot:
        return self._frames[index]

    @property
    def current(self) -> Snapshot | None:
        """Snapshot under the cursor, if any."""
        if not self._frames:
            return None
        return self._frames[self.cursor]

    @property
    def at_tail(self) -> bool:
        return not self._frames or self.cursor == len(self._frames) - 1

    def record(self, snapshot: Snapshot) -> None:
        """Append a snapshot after the cursor, dropping any future frames."""
        while len(self._frames) > self.cursor + 1:
            self._frames.pop()
        if len(self._frames) == self.capacity:
            logger.debug("History full, evicting oldest frame")
        self._frames.append(snapshot)
        self.cursor = len(self._frames) - 1

    def rewind(self, frames: int) -> Snapshot | None:
        """Move the cursor back by ``frames`` (clamped at 0)."""
        if not self._frames:
            return None
        self.cursor = max(0, self.cursor - frames)
        return self._frames[self.cursor]

    def clear(self) -> None:
        self._frames.clear()
        self.cursor = 0

    def to_dataframe(self):
        """Convert to a Polars DataFrame, one row per body per frame."""
        import polars as pl

        rows: dict[str, list[Any]] = {
            "frame": [], "id": [], "kind": [], "x": [], "y": [],
            "vx": [], "vy": [], "mass": [], "fuel": [],
        }
        for frame, snapshot in enumerate(self._frames):
            for record in snapshot:
                rows["frame"].append(frame)
                rows["id"].append(record.id)
                rows["kind"].append(record.kind.value)
                rows["x"].append(record.x)
                rows["y"].append(record.y)
                rows["vx"].append(record.vx)
                rows["vy"].append(record.vy)
                rows["mass"].append(record.mass)
                rows["fuel"].append(record.controller.fuel if record.controller else None)

        return pl.DataFrame(rows, schema={
            "frame": pl.Int64, "id": pl.Utf8, "kind": pl.Utf8,
            "x": pl.Float64, "y": pl.Float64, "vx": pl.Float64, "vy": pl.Float64,
            "mass": pl.Float64, "fuel": pl.Float64,
        })


# =============================================================================
# Clock
# =============================================================================


class SimulationClock:
    """Accumulates scaled time into frames and drives forward/rewind.

    Attributes:
        history: Recorded snapshots
        accumulator: Fractional frames carried between ticks
    """

    def __init__(self, capacity: int = DEFAULT_CONSTANTS.history_capacity) -> None:
        self.history = History(capacity)
        self.accumulator = 0.0

    def _take_frames(self, time_scale: float) -> int:
        self.accumulator += abs(time_scale)
        frames = math.floor(self.accumulator)
        self.accumulator -= frames
        return frames

    def tick(
        self,
        bodies: list[Body],
        config: SimConfig | None = None,
        context: StepContext | None = None,
    ) -> list[Body]:
        """Process one animation tick.

        Forward ticks mutate ``bodies`` in place and return it. Rewind ticks
        return a new list rebuilt from history; callers must adopt it.
        """
        config = config if config is not None else SimConfig()
        context = context if context is not None else StepContext()
        time_scale = context.time_scale.current

        if time_scale == 0:
            return bodies

        frames = self._take_frames(time_scale)

        if time_scale < 0:
            if frames == 0:
                return bodies
            snapshot = self.history.rewind(frames)
            if snapshot is None:
                return bodies
            logger.debug("Rewound %d frames to index %d", frames, self.history.cursor)
            return restore_bodies(snapshot)

        if frames > 0:
            substeps = config.substeps
            dt = 1.0 / substeps
            for _ in range(frames):
                for _ in range(substeps):
                    physics_step(dt, bodies, config, context)
            resolve_collisions(bodies, context.spawn_particles)

        self.history.record(snapshot_bodies(bodies))
        return bodies
