"""Preset systems and the procedural default star system.

Example:
    >>> from gravsim.scenarios import SCENARIOS, load_scenario
    >>>
    >>> [s.id for s in SCENARIOS]
    ['solar_system', 'asteroid_flyby', 'three_body', 'eclipse']
    >>> bodies = load_scenario("three_body")
    >>> bodies = load_scenario("solar_system", seed=42)  # procedural
"""

import math
from dataclasses import dataclass, field
from typing import NamedTuple

import numpy as np

from gravsim.bodies import Body, create_body
from gravsim.config import G
from gravsim.kinds import BodyKind


class BodySpec(NamedTuple):
    """Initial conditions of one preset body."""
    kind: BodyKind
    x: float
    y: float
    vx: float
    vy: float
    mass: float
    color: str
    name: str | None = None

    def create(self) -> Body:
        return create_body(self.x, self.y, self.vx, self.vy, self.mass, self.color, self.kind, name=self.name)


@dataclass(frozen=True)
class Scenario:
    """A loadable starting configuration.

    An empty ``bodies`` tuple means the procedural star system.

    Attributes:
        id: Stable identifier
        name: Display name
        description: One-line description
        zoom: Suggested initial view zoom
        pan: Suggested initial view offset
        bodies: Preset bodies
    """
    id: str
    name: str
    description: str
    zoom: float = 1.0
    pan: tuple[float, float] = (0.0, 0.0)
    bodies: tuple[BodySpec, ...] = field(default_factory=tuple)


SCENARIOS: tuple[Scenario, ...] = (
    Scenario(
        id="solar_system",
        name="Solar System (Default)",
        description="A star with planets and moons.",
        zoom=0.15,
    ),
    Scenario(
        id="asteroid_flyby",
        name="Asteroid Flyby",
        description="An asteroid on a collision course with an Earth-Moon system.",
        zoom=0.8,
        bodies=(
            BodySpec(BodyKind.STAR, -2000, 0, 0, 0, 1500, "#fbbf24", "Sun"),
            BodySpec(BodyKind.PLANET, 0, 0, 0, 0.77, 150, "#3b82f6", "Earth"),
            BodySpec(BodyKind.ASTEROID, 100, 0, 0, 1.86, 10, "#94a3b8", "Moon"),
            BodySpec(BodyKind.ASTEROID, -300, 100, 2.0, 0.5, 5, "#ef4444", "Apophis"),
        ),
    ),
    Scenario(
        id="three_body",
        name="Three-Body Chaos",
        description="Three equal stars in an unstable configuration.",
        zoom=0.4,
        bodies=(
            BodySpec(BodyKind.STAR, 200, 0, 0, 1, 800, "#fbbf24", "Alpha"),
            BodySpec(BodyKind.STAR, -100, 173, -0.866, -0.5, 800, "#fbbf24", "Beta"),
            BodySpec(BodyKind.STAR, -100, -173, 0.866, -0.5, 800, "#fbbf24", "Gamma"),
        ),
    ),
    Scenario(
        id="eclipse",
        name="Eclipse",
        description="Sun, Moon and Earth in perfect alignment.",
        zoom=1.5,
        pan=(500.0, 0.0),
        bodies=(
            BodySpec(BodyKind.STAR, -1000, 0, 0, 0, 2000, "#fbbf24", "Sun"),
            BodySpec(BodyKind.PLANET, 500, 0, 0, 1.26, 100, "#3b82f6", "Earth"),
            BodySpec(BodyKind.ASTEROID, 450, 0, 0, 2.52, 5, "#94a3b8", "Moon"),
        ),
    ),
)

PLANET_COLORS = ("#ef4444", "#3b82f6", "#22c55e", "#f97316", "#a855f7", "#64748b", "#06b6d4", "#eab308")
PLANET_NAMES = (
    "Aether", "Boreas", "Chronos", "Demeter", "Erebus", "Gaia", "Hemera",
    "Iris", "Nyx", "Oceanus", "Pontus", "Tartarus", "Thalassa", "Uranus",
)
MOON_COLOR = "#94a3b8"


def get_scenario(scenario_id: str) -> Scenario:
    """Look up a scenario by id.

    Raises:
        ValueError: If no scenario has this id
    """
    for scenario in SCENARIOS:
        if scenario.id == scenario_id:
            return scenario
    known = ", ".join(s.id for s in SCENARIOS)
    raise ValueError(f"Unknown scenario '{scenario_id}'. Available: {known}")


def generate_star_system(
    seed: int | None = None,
    star_mass: float = 5000.0,
    gravitational_constant: float = G,
) -> list[Body]:
    """Procedural system: one star, 6-9 planets on circular orbits, moons.

    Planets start beyond 600 units with 300-600 unit spacing and masses in
    [50, 400). Planets heavier than 150 get 1-2 moons with probability 0.7.
    Moons are asteroid-kind bodies orbiting their planet.
    """
    rng = np.random.default_rng(seed)
    bodies = [create_body(0, 0, 0, 0, star_mass, "#fbbf24", BodyKind.STAR, name="Sol")]

    planet_count = int(rng.integers(6, 10))
    distance = 600.0
    for i in range(planet_count):
        distance += 300.0 + rng.random() * 300.0
        angle = rng.random() * 2 * math.pi
        mass = 50.0 + rng.random() * 350.0
        name = PLANET_NAMES[i % len(PLANET_NAMES)]

        px = math.cos(angle) * distance
        py = math.sin(angle) * distance
        v = math.sqrt(gravitational_constant * star_mass / distance)
        vx = math.cos(angle + math.pi / 2) * v
        vy = math.sin(angle + math.pi / 2) * v
        planet = create_body(px, py, vx, vy, mass, PLANET_COLORS[i % len(PLANET_COLORS)], BodyKind.PLANET, name=name)
        bodies.append(planet)

        if mass > 150 and rng.random() > 0.3:
            for j in range(int(rng.integers(1, 3))):
                m_dist = planet.radius + 30 + rng.random() * 40 + j * 40
                m_angle = rng.random() * 2 * math.pi
                m_mass = 5 + rng.random() * 15
                m_v = math.sqrt(gravitational_constant * mass / m_dist)
                bodies.append(create_body(
                    px + math.cos(m_angle) * m_dist,
                    py + math.sin(m_angle) * m_dist,
                    vx + math.cos(m_angle + math.pi / 2) * m_v,
                    vy + math.sin(m_angle + math.pi / 2) * m_v,
                    m_mass, MOON_COLOR, BodyKind.ASTEROID, name=f"{name} {j + 1}",
                ))

    return bodies


def load_scenario(scenario_id: str, seed: int | None = None) -> list[Body]:
    """Fresh bodies for a scenario; ``seed`` only affects procedural ones."""
    scenario = get_scenario(scenario_id)
    if not scenario.bodies:
        return generate_star_system(seed)
    return [spec.create() for spec in scenario.bodies]
