"""Collision detection and inelastic merging.

Every unordered pair of live bodies whose centers are closer than the sum
of their radii collides once per pass:

- If either body is a rocket, the rocket is the victim (an impact)
- Otherwise the more massive body wins (a merge)

A non-static winner absorbs the victim with a momentum-conserving
inelastic merge and re-derives its radius from the merged mass (black
holes and rockets keep theirs). Each victim is zeroed and emits a particle
burst in its color; victims are purged in one pass at the end.

Rockets inside their post-spawn grace period are immune.
"""

import logging
import math
from enum import Enum
from typing import NamedTuple

from gravsim.bodies import Body
from gravsim.config import ParticleSpawner, no_particles
from gravsim.integrator import purge_destroyed
from gravsim.kinds import BodyKind

logger = logging.getLogger(__name__)

BURST_COUNT = 15
BURST_SPEED = 2.0


class CollisionKind(Enum):
    """Outcome of a collision."""

    MERGE = "merge"    # Ordinary bodies, heavier absorbs lighter
    IMPACT = "impact"  # A rocket landed on or hit something


class CollisionEvent(NamedTuple):
    """A resolved collision.

    Attributes:
        kind: Merge or impact
        winner_id: Id of the surviving body
        victim_id: Id of the destroyed body
        x, y: Victim position at impact
    """
    kind: CollisionKind
    winner_id: str
    victim_id: str
    x: float
    y: float


def _is_immune(body: Body) -> bool:
    return body.controller is not None and body.controller.grace_period > 0


def _pick_winner(b1: Body, b2: Body) -> tuple[Body, Body, CollisionKind]:
    """Return (winner, victim, kind) for a colliding pair."""
    if b1.kind is BodyKind.ROCKET or b2.kind is BodyKind.ROCKET:
        if b1.kind is BodyKind.ROCKET:
            return b2, b1, CollisionKind.IMPACT
        return b1, b2, CollisionKind.IMPACT
    if b1.mass >= b2.mass:
        return b1, b2, CollisionKind.MERGE
    return b2, b1, CollisionKind.MERGE


def merge_into(winner: Body, victim: Body) -> None:
    """Absorb ``victim`` into ``winner`` conserving momentum.

    Static winners are unaffected. A winner with a flight controller keeps
    its mass tied to its remaining fuel.
    """
    if winner.is_static:
        return
    total = winner.mass + victim.mass
    if total <= 0:
        return
    winner.vx = (winner.vx * winner.mass + victim.vx * victim.mass) / total
    winner.vy = (winner.vy * winner.mass + victim.vy * victim.mass) / total
    winner.mass = total
    if winner.controller is not None:
        winner.mass = winner.controller.current_mass
    winner.recompute_radius()


def resolve_collisions(
    bodies: list[Body],
    spawn_particles: ParticleSpawner = no_particles,
) -> list[CollisionEvent]:
    """Detect and resolve all overlaps, purging victims from ``bodies``.

    Args:
        bodies: Live body list (mutated in place)
        spawn_particles: Effect callback for the debris burst

    Returns:
        Collision events in resolution order
    """
    events = []
    n = len(bodies)
    for i in range(n):
        b1 = bodies[i]
        for j in range(i + 1, n):
            if b1.mass == 0:
                break
            b2 = bodies[j]
            if b2.mass == 0:
                continue
            if _is_immune(b1) or _is_immune(b2):
                continue

            dist = math.hypot(b2.x - b1.x, b2.y - b1.y)
            if dist >= b1.radius + b2.radius:
                continue

            winner, victim, kind = _pick_winner(b1, b2)
            merge_into(winner, victim)
            spawn_particles(victim.x, victim.y, victim.color, BURST_COUNT, BURST_SPEED)
            victim.mass = 0.0
            events.append(CollisionEvent(kind, winner.id, victim.id, victim.x, victim.y))
            logger.info(
                "Collision (%s): %s absorbed %s",
                kind.value, winner.name or winner.id, victim.name or victim.id,
            )

    purge_destroyed(bodies)
    return events
