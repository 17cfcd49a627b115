#!/usr/bin/env python
"""Example: Interplanetary transfer in the procedural star system.

This script demonstrates the split between:
- Simulation infrastructure (gravsim/) - the "plant" / truth model
- Flight software (flight/) - the rocket autopilot

Each tick follows the same loop an interactive front end would run:
1. Advance the clock (physics, controllers, collisions, history)
2. Read telemetry for the HUD
3. Apply time-scale changes requested by the autopilot

Usage:
    uv run python scripts/run_mission.py
"""

import logging

import numpy as np

from gravsim import SimConfig, Simulation
from gravsim.kinds import BodyKind

SEED = 7
MAX_TICKS = 20000
REPORT_EVERY = 500


def run_mission():
    """Launch from the innermost planet toward the next one out."""
    print("=" * 60)
    print("INTERPLANETARY TRANSFER")
    print("=" * 60)

    # =========================================================================
    # Universe Setup
    # =========================================================================
    sim = Simulation.from_scenario("solar_system", seed=SEED, config=SimConfig(high_precision=True))
    star = sim.bodies[0]
    planets = sorted(
        (b for b in sim.bodies if b.kind is BodyKind.PLANET),
        key=lambda b: b.distance_to(star),
    )
    home, target = planets[0], planets[1]

    print(f"\nSystem (seed {SEED}): {sim.body_count} bodies")
    print(f"  Home:   {home.name} at r = {home.distance_to(star):.0f}")
    print(f"  Target: {target.name} at r = {target.distance_to(star):.0f}")

    # =========================================================================
    # Launch
    # =========================================================================
    rocket = sim.launch_mission(home.id, target.id, rng=np.random.default_rng(SEED))
    print(f"\nLaunched rocket {rocket.id}")
    print(f"  Delta-V budget: {rocket.controller.delta_v:.0f}")

    # =========================================================================
    # Flight Loop
    # =========================================================================
    seen = 0
    for tick in range(MAX_TICKS):
        sim.tick()
        telemetry = sim.telemetry()
        if telemetry is None:
            print(f"\n[{tick:6d}] Rocket lost")
            break

        for line in telemetry.mission_log[seen:]:
            print(f"[{tick:6d}] {line}")
        seen = len(telemetry.mission_log)

        if tick % REPORT_EVERY == 0:
            apo = f"{telemetry.apoapsis:.0f}" if telemetry.apoapsis is not None else "-"
            print(
                f"[{tick:6d}] phase={telemetry.phase:<18} speed={telemetry.speed:6.2f} "
                f"fuel={telemetry.fuel:5.1f}% apo={apo} x{sim.time_scale:g}"
            )

        if "Orbit Capture Successful" in telemetry.mission_log:
            print(f"\n[{tick:6d}] Mission complete")
            break

    # =========================================================================
    # History
    # =========================================================================
    df = sim.clock.history.to_dataframe()
    print(f"\nRecorded {len(sim.clock.history)} frames ({df.height} rows)")
    print(df.filter(df["kind"] == "rocket").tail(5))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    run_mission()
