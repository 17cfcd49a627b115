"""Read-only trajectory previews.

Projects where every body will go over the next few hundred steps by
integrating a private copy of the system. The live simulation is never
touched; input is an immutable snapshot, output is only path points.
``PathProjector`` runs projections on a background thread, so results may
lag the live state slightly.

Example:
    >>> from gravsim.clock import snapshot_bodies
    >>> from gravsim.preview import PathProjector, project_paths
    >>>
    >>> paths = project_paths(snapshot_bodies(bodies), steps=500)
    >>> with PathProjector() as projector:
    ...     future = projector.submit(bodies)
    ...     paths = future.result()
"""

from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from typing import NamedTuple

import numpy as np
from numba import njit
from numpy.typing import NDArray

from gravsim.bodies import Body
from gravsim.clock import BodyRecord, snapshot_bodies
from gravsim.config import DEFAULT_CONSTANTS, PhysicsConstants

# Slingshot gesture: launch velocity per unit of drag distance
DRAG_VELOCITY_SCALE = 0.05


class ProjectedPath(NamedTuple):
    """Predicted track of one body; static bodies have a single point."""
    id: str
    color: str
    points: tuple[tuple[float, float], ...]


# =============================================================================
# Core Numba Function
# =============================================================================


@njit(cache=True)
def _project_core(
    xs: NDArray[np.float64],
    ys: NDArray[np.float64],
    vxs: NDArray[np.float64],
    vys: NDArray[np.float64],
    masses: NDArray[np.float64],
    radii: NDArray[np.float64],
    static: NDArray[np.bool_],
    steps: int,
    dt: float,
    g: float,
    softening: float,
    sample_every: int,
) -> NDArray[np.float64]:
    """Brute-force softened integration on private arrays.

    Returns:
        Array of shape (n_bodies, n_samples, 2); sample 0 is the start.
    """
    n = xs.shape[0]
    n_samples = 1 + (steps + sample_every - 1) // sample_every
    out = np.empty((n, n_samples, 2))
    for i in range(n):
        out[i, 0, 0] = xs[i]
        out[i, 0, 1] = ys[i]

    sample = 1
    for step in range(steps):
        for i in range(n):
            if static[i]:
                continue
            fx = 0.0
            fy = 0.0
            for j in range(n):
                if i == j:
                    continue
                dx = xs[j] - xs[i]
                dy = ys[j] - ys[i]
                dist_sq = dx * dx + dy * dy
                dist = np.sqrt(dist_sq)
                if dist > radii[i] + radii[j]:
                    f = g * masses[i] * masses[j] / (dist_sq + softening)
                    fx += f * dx / dist
                    fy += f * dy / dist
            vxs[i] += fx / masses[i] * dt
            vys[i] += fy / masses[i] * dt

        for i in range(n):
            if not static[i]:
                xs[i] += vxs[i] * dt
                ys[i] += vys[i] * dt

        if step % sample_every == 0:
            for i in range(n):
                out[i, sample, 0] = xs[i]
                out[i, sample, 1] = ys[i]
            sample += 1

    return out


# =============================================================================
# Python API
# =============================================================================


def project_paths(
    records: Sequence[BodyRecord],
    steps: int = 500,
    dt: float = 1.0,
    sample_every: int = 10,
    constants: PhysicsConstants = DEFAULT_CONSTANTS,
) -> list[ProjectedPath]:
    """Integrate a private copy of ``records`` and return sampled paths.

    Destroyed (zero-mass) records are ignored.

    Raises:
        ValueError: If steps < 0, dt <= 0 or sample_every < 1
    """
    if steps < 0 or dt <= 0 or sample_every < 1:
        raise ValueError(f"Invalid projection: steps={steps}, dt={dt}, sample_every={sample_every}")
    live = [r for r in records if r.mass > 0]
    if not live:
        return []

    out = _project_core(
        np.array([r.x for r in live], dtype=np.float64),
        np.array([r.y for r in live], dtype=np.float64),
        np.array([r.vx for r in live], dtype=np.float64),
        np.array([r.vy for r in live], dtype=np.float64),
        np.array([r.mass for r in live], dtype=np.float64),
        np.array([r.radius for r in live], dtype=np.float64),
        np.array([r.is_static for r in live], dtype=np.bool_),
        steps, float(dt),
        constants.gravitational_constant, constants.softening, sample_every,
    )

    paths = []
    for i, record in enumerate(live):
        track = out[i, :1] if record.is_static else out[i]
        points = tuple((float(x), float(y)) for x, y in track)
        paths.append(ProjectedPath(record.id, record.color, points))
    return paths


def launch_velocity_from_drag(
    start: tuple[float, float],
    end: tuple[float, float],
    scale: float = DRAG_VELOCITY_SCALE,
) -> tuple[float, float]:
    """Slingshot launch velocity for a drag from ``start`` to ``end``.

    The body is placed at ``start`` and flies away from the drag direction.
    """
    return ((start[0] - end[0]) * scale, (start[1] - end[1]) * scale)


class PathProjector:
    """Runs ``project_paths`` on a background thread.

    Each submission captures an immutable snapshot first, so the live list
    may keep changing while the projection runs.
    """

    def __init__(
        self,
        steps: int = 500,
        sample_every: int = 10,
        constants: PhysicsConstants = DEFAULT_CONSTANTS,
        max_workers: int = 1,
    ) -> None:
        self.steps = steps
        self.sample_every = sample_every
        self.constants = constants
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="path-projector")

    def submit(self, bodies: Sequence[Body], dt: float = 1.0) -> Future:
        """Schedule a projection of the current ``bodies``."""
        return self._executor.submit(
            project_paths, snapshot_bodies(bodies), self.steps, dt,
            self.sample_every, self.constants,
        )

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "PathProjector":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
