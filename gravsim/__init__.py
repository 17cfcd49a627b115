"""Gravsim - 2D N-body gravity sandbox core.

This package provides the simulation "plant" of an interactive gravity
sandbox: softened N-body integration (exact or Barnes-Hut), collision
merging, a rewindable frame clock, orbital mechanics utilities and rocket
telemetry. Rocket autopilots live in the companion ``flight`` package.

Example:
    >>> from gravsim import Simulation, SimConfig
    >>>
    >>> sim = Simulation.from_scenario("three_body", config=SimConfig(high_precision=True))
    >>> for _ in range(120):
    ...     sim.tick()
    >>> sim.time_scale = -1.0  # rewind
    >>> for _ in range(60):
    ...     sim.tick()
"""

__version__ = "0.3.0"

# Bodies
from gravsim.bodies import Body, create_body, find_body

# Time and history
from gravsim.clock import BodyRecord, History, SimulationClock, restore_bodies, snapshot_bodies

# Collisions
from gravsim.collisions import CollisionEvent, CollisionKind, resolve_collisions

# Configuration
from gravsim.config import (
    DEFAULT_CONSTANTS,
    PhysicsConstants,
    SimConfig,
    StepContext,
    TimeScaleRef,
)

# Integration
from gravsim.integrator import physics_step
from gravsim.kinds import BodyKind

# Orbital mechanics
from gravsim.orbital import (
    LagrangePoint,
    OrbitalElements,
    circular_velocity,
    compute_orbital_elements,
    escape_velocity,
    hill_sphere_radius,
    hohmann_transfer_time,
    lagrange_points,
    orbital_period,
    required_phase_angle,
)

# Previews
from gravsim.preview import PathProjector, ProjectedPath, launch_velocity_from_drag, project_paths
from gravsim.quadtree import QuadTree

# Scenarios
from gravsim.scenarios import SCENARIOS, Scenario, generate_star_system, load_scenario

# Facade
from gravsim.simulation import Simulation

# Telemetry
from gravsim.telemetry import RocketTelemetry, compute_rocket_telemetry

__all__ = [
    "__version__",
    # Configuration
    "DEFAULT_CONSTANTS",
    "PhysicsConstants",
    "SimConfig",
    "StepContext",
    "TimeScaleRef",
    # Bodies
    "Body",
    "BodyKind",
    "create_body",
    "find_body",
    # Integration
    "physics_step",
    "QuadTree",
    # Collisions
    "CollisionEvent",
    "CollisionKind",
    "resolve_collisions",
    # Time and history
    "BodyRecord",
    "History",
    "SimulationClock",
    "restore_bodies",
    "snapshot_bodies",
    # Orbital mechanics
    "LagrangePoint",
    "OrbitalElements",
    "circular_velocity",
    "compute_orbital_elements",
    "escape_velocity",
    "hill_sphere_radius",
    "hohmann_transfer_time",
    "lagrange_points",
    "orbital_period",
    "required_phase_angle",
    # Previews
    "PathProjector",
    "ProjectedPath",
    "launch_velocity_from_drag",
    "project_paths",
    # Telemetry
    "RocketTelemetry",
    "compute_rocket_telemetry",
    # Scenarios
    "SCENARIOS",
    "Scenario",
    "generate_star_system",
    "load_scenario",
    # Facade
    "Simulation",
]
