#!/usr/bin/env python3
"""
Outbound signals produced by the engines.

Every engine call returns a list of these records. The core never knows who consumes
them; renderers, logs and audio subscribe on the host side. Payloads carry ids and plain
values, never live Body references, so a consumer cannot mutate the store by accident.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

Point = Tuple[float, float]


class CollisionKind(str, Enum):
    ABSORB = "absorb"
    REDIRECT = "redirect"
    EJECT = "eject"
    MICROIMPACT = "microimpact"


@dataclass(frozen=True)
class SimEvent:
    """Base class for every signal."""


@dataclass(frozen=True)
class BodyState:
    id: str
    body_type: str
    position: Point
    mass: float


@dataclass(frozen=True)
class StateSnapshot(SimEvent):
    """Positions of every body after a tick."""
    star: Optional[BodyState]
    bodies: Tuple[BodyState, ...]


@dataclass(frozen=True)
class CollisionOccurred(SimEvent):
    """
    Outcome of a collision.

    `grade` is "major" for the planet/planet path, "minor" or "micro" for small-body
    impacts that only transfer mass; for those `mass` is the accreted mass.
    `winner_life` and `loser_life` are the life scores before impact, so a participant
    destroyed by the collision can still be reported.
    """
    winner_id: str
    loser_id: str
    kind: CollisionKind
    location: Point
    winner_type: str = "planet"
    loser_type: str = "planet"
    grade: str = "major"
    mass: float = 0.0
    winner_life: float = 0.0
    loser_life: float = 0.0

    @property
    def is_planetary(self) -> bool:
        return self.grade == "major" and self.kind is not CollisionKind.MICROIMPACT


@dataclass(frozen=True)
class PlanetEjected(SimEvent):
    body_id: str
    name: str


@dataclass(frozen=True)
class BodyRemoved(SimEvent):
    """A body dropped without a collision, e.g. a moon whose parent is gone."""
    body_id: str
    reason: str


@dataclass(frozen=True)
class StabilityChanged(SimEvent):
    """Orbital stability changed on a batch of planets."""
    planet_ids: Tuple[str, ...]


@dataclass(frozen=True)
class ParticleState:
    id: int
    mass: float
    position: Point


@dataclass(frozen=True)
class DiskSnapshot(SimEvent):
    particles: Tuple[ParticleState, ...]


@dataclass(frozen=True)
class ParticleAbsorbed(SimEvent):
    planet_id: str
    particle_id: int


@dataclass(frozen=True)
class NewPlanetProposal(SimEvent):
    """A disk cluster reached promotion mass; the host materialises the planet."""
    a: float
    e: float
    mass: float


@dataclass(frozen=True)
class DebrisSpawnProposal(SimEvent):
    """A deflection collision threw off a fragment; the host materialises it."""
    a: float
    e: float
    omega: float
    period: float
    mean_anomaly: float
    mass: float
    composition: Dict[str, float] = field(default_factory=dict)
    location: Point = (0.0, 0.0)


@dataclass(frozen=True)
class LifeEmerged(SimEvent):
    planet_id: str


@dataclass(frozen=True)
class LifeStage:
    name: str
    min_score: float
    max_score: float


@dataclass(frozen=True)
class LifeEvolved(SimEvent):
    planet_id: str
    stage: LifeStage


@dataclass(frozen=True)
class LifeExtinct(SimEvent):
    planet_id: str
    reason: str


@dataclass(frozen=True)
class LifeUpdated(SimEvent):
    planet_id: str
    life_score: float


@dataclass(frozen=True)
class DiskPhaseChanged(SimEvent):
    old_phase: str
    new_phase: str
    game_time: float


@dataclass(frozen=True)
class BodiesCleared(SimEvent):
    body_ids: Tuple[str, ...]


@dataclass(frozen=True)
class SystemStabilityChanged(SimEvent):
    score: int
    trend: str
    planet_count: int
