"""Semi-implicit Euler N-body integrator.

One call to ``physics_step`` advances every body by one timestep:

1. Purge destroyed (zero-mass) and non-finite bodies
2. Kick velocities with softened gravity, either exact O(n^2) pairwise
   summation or a Barnes-Hut quadtree in low-precision mode with many bodies
3. Drift positions and run each body's self-update (controller, drag, trail)
4. Enforce numerical safety: damp runaway speeds, remove diverged bodies

Static bodies exert gravity but never receive velocity updates.

Example:
    >>> from gravsim.config import SimConfig, StepContext
    >>> from gravsim.integrator import physics_step
    >>>
    >>> physics_step(1.0, bodies, SimConfig(high_precision=True), StepContext())
"""

import logging
import math

import numpy as np
from numba import njit
from numpy.typing import NDArray

from gravsim.bodies import Body
from gravsim.config import PhysicsConstants, SimConfig, StepContext
from gravsim.quadtree import QuadTree

logger = logging.getLogger(__name__)

# =============================================================================
# Numba-Optimized Force Kernel
# =============================================================================


@njit(cache=True)
def _pairwise_velocity_kicks(
    xs: NDArray[np.float64],
    ys: NDArray[np.float64],
    masses: NDArray[np.float64],
    radii: NDArray[np.float64],
    static: NDArray[np.bool_],
    dt: float,
    g: float,
    softening: float,
    epsilon: float,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Exact pairwise gravity as velocity increments.

    Pairs closer than the sum of their radii, or within epsilon, are
    skipped.
    """
    n = xs.shape[0]
    dvx = np.zeros(n)
    dvy = np.zeros(n)

    for i in range(n):
        for j in range(i + 1, n):
            dx = xs[j] - xs[i]
            dy = ys[j] - ys[i]
            dist_sq = dx * dx + dy * dy
            dist = np.sqrt(dist_sq)

            if dist <= epsilon or dist <= radii[i] + radii[j]:
                continue

            f = g * masses[i] * masses[j] / (dist_sq + softening)
            fx = f * dx / dist
            fy = f * dy / dist

            if not static[i]:
                dvx[i] += fx / masses[i] * dt
                dvy[i] += fy / masses[i] * dt
            if not static[j]:
                dvx[j] -= fx / masses[j] * dt
                dvy[j] -= fy / masses[j] * dt

    return dvx, dvy


# =============================================================================
# Force Paths
# =============================================================================


def apply_exact_gravity(bodies: list[Body], dt: float, constants: PhysicsConstants) -> None:
    """Kick velocities with exact O(n^2) softened gravity."""
    if len(bodies) < 2:
        return
    xs = np.array([b.x for b in bodies], dtype=np.float64)
    ys = np.array([b.y for b in bodies], dtype=np.float64)
    masses = np.array([b.mass for b in bodies], dtype=np.float64)
    radii = np.array([b.radius for b in bodies], dtype=np.float64)
    static = np.array([b.is_static for b in bodies], dtype=np.bool_)

    dvx, dvy = _pairwise_velocity_kicks(
        xs, ys, masses, radii, static, float(dt),
        constants.gravitational_constant, constants.softening, constants.contact_epsilon,
    )
    for body, ax, ay in zip(bodies, dvx, dvy):
        body.vx += float(ax)
        body.vy += float(ay)


def apply_barnes_hut_gravity(bodies: list[Body], dt: float, constants: PhysicsConstants) -> None:
    """Kick velocities with quadtree-approximated softened gravity."""
    tree = QuadTree.build(bodies, constants.quadtree_padding, constants.quadtree_min_extent)
    kicks = []
    for body in bodies:
        if body.is_static:
            continue
        fx, fy = tree.force_on(
            body, constants.barnes_hut_theta,
            constants.gravitational_constant, constants.softening,
        )
        kicks.append((body, fx, fy))
    # Forces are evaluated against the same tree before any velocity changes
    for body, fx, fy in kicks:
        body.vx += fx / body.mass * dt
        body.vy += fy / body.mass * dt


def uses_barnes_hut(body_count: int, config: SimConfig) -> bool:
    """Whether a step with ``body_count`` bodies takes the approximate path."""
    return not config.high_precision and body_count > config.constants.barnes_hut_threshold


# =============================================================================
# Numerical Safety
# =============================================================================


def _is_diverged(body: Body, constants: PhysicsConstants) -> bool:
    if not all(math.isfinite(v) for v in (body.x, body.y, body.vx, body.vy)):
        return True
    return math.hypot(body.x, body.y) > constants.max_position


def damp_speed(body: Body, constants: PhysicsConstants) -> bool:
    """Pull a runaway speed back under ``max_speed``.

    The clamped speed is max_speed * (1 - damping * (1 - max_speed / speed)),
    which is max_speed at the bound and decreases toward
    max_speed * (1 - damping) for extreme overshoots.

    Returns:
        True if the body was damped
    """
    speed = body.speed
    limit = constants.max_speed
    if speed <= limit:
        return False
    ratio = limit / speed
    scale = ratio * (1.0 - constants.velocity_damping * (1.0 - ratio))
    body.vx *= scale
    body.vy *= scale
    return True


def sanitize_bodies(bodies: list[Body], constants: PhysicsConstants) -> list[Body]:
    """Remove diverged bodies in place and damp excessive speeds.

    Returns:
        Bodies removed from the list
    """
    removed = []
    kept = []
    for body in bodies:
        if _is_diverged(body, constants):
            removed.append(body)
            continue
        if damp_speed(body, constants):
            logger.debug("Damped runaway speed of body %s", body.id)
        kept.append(body)

    if removed:
        for body in removed:
            logger.warning(
                "Removed diverged body %s (%s) at (%s, %s)",
                body.id, body.kind.value, body.x, body.y,
            )
        bodies[:] = kept
    return removed


def purge_destroyed(bodies: list[Body]) -> list[Body]:
    """Drop zero-mass bodies in a single pass; returns those removed."""
    removed = [b for b in bodies if b.mass == 0]
    if removed:
        bodies[:] = [b for b in bodies if b.mass != 0]
    return removed


# =============================================================================
# Physics Step
# =============================================================================


def physics_step(
    dt: float,
    bodies: list[Body],
    config: SimConfig | None = None,
    context: StepContext | None = None,
) -> list[Body]:
    """Advance all bodies by one timestep, mutating ``bodies`` in place.

    Args:
        dt: Timestep (> 0)
        bodies: Live body list
        config: Precision flag and constants
        context: Particle callback, key snapshot and time-scale cell

    Returns:
        Bodies removed during the step (destroyed or diverged)

    Raises:
        ValueError: If dt is not positive
    """
    if not dt > 0:
        raise ValueError(f"dt must be positive, got {dt}")
    config = config if config is not None else SimConfig()
    context = context if context is not None else StepContext()
    constants = config.constants

    removed = purge_destroyed(bodies)
    # Keep NaN out of everyone else's force sums
    non_finite = [b for b in bodies if not all(math.isfinite(v) for v in (b.x, b.y, b.vx, b.vy))]
    if non_finite:
        for body in non_finite:
            logger.warning("Removed non-finite body %s (%s)", body.id, body.kind.value)
        bodies[:] = [b for b in bodies if b not in non_finite]
        removed += non_finite

    if uses_barnes_hut(len(bodies), config):
        logger.debug("Barnes-Hut step with %d bodies", len(bodies))
        apply_barnes_hut_gravity(bodies, dt, constants)
    else:
        apply_exact_gravity(bodies, dt, constants)

    for body in list(bodies):
        body.update(dt, bodies, context, constants)

    removed += sanitize_bodies(bodies, constants)
    return removed
