"""Flight software package - autopilot and control for rockets.

This package contains the guidance and control logic that runs "on" a
rocket. It is developed and tested against the simulation in gravsim/.

Architecture:
    The simulation (gravsim/) provides the "plant" - bodies, gravity,
    collisions and time. Flight software (flight/) commands the rocket.

    Each physics step:
        body.update(dt, bodies, context)      # drift, then...
        controller.update(dt, bodies, context)  # drag, phase logic, thrust

    The controller never imports gravsim.bodies; it reads the sibling
    bodies passed to each call and refers to other bodies by id.

Subpackages:
    guidance: Ascent and transfer gates and heading profiles
    control: Heading slew

Example:
    >>> from flight import FlightController, MissionPhase
    >>> from gravsim import Simulation
    >>>
    >>> sim = Simulation.from_scenario("solar_system", seed=7)
    >>> rocket = sim.launch_mission(start_id=home.id, target_id=dest.id)
    >>> while rocket.controller.phase is not MissionPhase.ORBIT:
    ...     sim.tick()
"""

from flight.control import HeadingController
from flight.guidance import AscentProfile, TransferPlan, TransferProfile
from flight.mission_control import FlightController, MissionPhase

__all__ = [
    "AscentProfile",
    "FlightController",
    "HeadingController",
    "MissionPhase",
    "TransferPlan",
    "TransferProfile",
]
