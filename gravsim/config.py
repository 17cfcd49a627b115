"""Simulation constants and per-step context.

All physics and orbital-math entry points receive their constants
explicitly. The defaults below reproduce the sandbox tuning: units are
arbitrary "world units" and one integration frame is one unit of time.

Example:
    >>> from gravsim.config import PhysicsConstants, SimConfig
    >>>
    >>> constants = PhysicsConstants(gravitational_constant=1.0)
    >>> config = SimConfig(high_precision=True, constants=constants)
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

from beartype import BeartypeConf, beartype

# Accept ints wherever a float is annotated (PEP 484 numeric tower).
checked = beartype(conf=BeartypeConf(is_pep484_tower=True))

# =============================================================================
# Constants
# =============================================================================


@checked
@dataclass(frozen=True)
class PhysicsConstants:
    """Immutable physics tuning shared by every force computation.

    Attributes:
        gravitational_constant: G in world units
        softening: Additive term in the inverse-square denominator
        trail_length: Maximum trail points for ordinary bodies
        rocket_trail_length: Maximum trail points for rockets
        trail_interval: Frames between trail samples for ordinary bodies
        rocket_trail_interval: Frames between trail samples for rockets
        physics_substeps: Substeps per frame in high-precision mode
        max_speed: Speed above which velocity is damped back to the bound
        max_position: Distance from origin beyond which a body is removed
        velocity_damping: Fraction of the overshoot ratio removed on clamp
        barnes_hut_threshold: Body count above which the quadtree is used
        barnes_hut_theta: Opening-angle threshold for aggregate nodes
        quadtree_padding: Padding added around the body bounding box
        quadtree_min_extent: Minimum edge length of the root node
        contact_epsilon: Pairs closer than this exert no force
        history_capacity: Maximum number of recorded snapshots
        fast_forward_scale: Time scale used while waiting for a window
        normal_time_scale: Time scale restored once a window opens
        window_tolerance: Phase-angle tolerance for a transfer window [rad]
    """
    gravitational_constant: float = 0.8
    softening: float = 5.0
    trail_length: int = 120
    rocket_trail_length: int = 100
    trail_interval: int = 4
    rocket_trail_interval: int = 3
    physics_substeps: int = 8
    max_speed: float = 1000.0
    max_position: float = 1_000_000.0
    velocity_damping: float = 0.1
    barnes_hut_threshold: int = 50
    barnes_hut_theta: float = 0.5
    quadtree_padding: float = 1000.0
    quadtree_min_extent: float = 1000.0
    contact_epsilon: float = 0.1
    history_capacity: int = 3600
    fast_forward_scale: float = 5.0
    normal_time_scale: float = 1.0
    window_tolerance: float = 0.1

    def __post_init__(self) -> None:
        """Validate inputs."""
        if self.softening < 0:
            raise ValueError(f"softening must be >= 0, got {self.softening}")
        if self.physics_substeps < 1:
            raise ValueError(f"physics_substeps must be >= 1, got {self.physics_substeps}")
        if self.history_capacity < 1:
            raise ValueError(f"history_capacity must be >= 1, got {self.history_capacity}")
        if self.max_speed <= 0 or self.max_position <= 0:
            raise ValueError("max_speed and max_position must be positive")
        if not 0.0 <= self.velocity_damping < 1.0:
            raise ValueError(f"velocity_damping must be in [0, 1), got {self.velocity_damping}")


DEFAULT_CONSTANTS = PhysicsConstants()
G: float = DEFAULT_CONSTANTS.gravitational_constant
SOFTENING: float = DEFAULT_CONSTANTS.softening


@checked
@dataclass
class SimConfig:
    """Per-session simulation configuration.

    Only ``high_precision`` and ``constants`` affect physics; the display
    toggles are carried for the renderer and ignored here.

    Attributes:
        high_precision: Exact O(n^2) gravity with sub-stepping
        constants: Physics constants
        show_orbit_preview: Draw projected paths
        show_vectors: Draw velocity vectors
        show_hill_spheres: Draw Hill spheres
        show_orbit_paths: Draw orbit ellipses
        show_lagrange: Draw Lagrange points
    """
    high_precision: bool = False
    constants: PhysicsConstants = field(default_factory=PhysicsConstants)
    show_orbit_preview: bool = False
    show_vectors: bool = False
    show_hill_spheres: bool = False
    show_orbit_paths: bool = False
    show_lagrange: bool = False

    @property
    def substeps(self) -> int:
        """Integration substeps per frame."""
        return self.constants.physics_substeps if self.high_precision else 1


# =============================================================================
# Step Context
# =============================================================================

# (x, y, color, count, speed)
ParticleSpawner = Callable[[float, float, str, int, float], None]


def no_particles(x: float, y: float, color: str, count: int, speed: float) -> None:
    """Particle spawner that discards every request."""


@dataclass
class TimeScaleRef:
    """Mutable time-scale cell shared between the clock and autopilots.

    Negative values rewind, zero pauses.
    """
    current: float = 1.0


@dataclass
class StepContext:
    """Collaborators threaded through every integration step.

    Attributes:
        spawn_particles: Visual effect callback (x, y, color, count, speed)
        keys: Snapshot of held keys, e.g. ``{"w": True}``
        time_scale: Shared time-scale cell (autopilot may warp it)
    """
    spawn_particles: ParticleSpawner = no_particles
    keys: Mapping[str, bool] = field(default_factory=dict)
    time_scale: TimeScaleRef = field(default_factory=TimeScaleRef)

    def key(self, name: str) -> bool:
        """Whether key ``name`` is held."""
        return bool(self.keys.get(name, False))
