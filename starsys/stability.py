#!/usr/bin/env python3
"""
System-wide stability score (0-100).

Recomputed every tick from four parts of the planet population:

    planet count   max(0, 30 - 7 * |n - 4|)
    eccentricity   max(0, 30 * (1 - mean_e / 0.7))
    habitable zone min(20, 8 * planets inside the HZ)
    separation     20 - 5 per neighbouring pair closer than 0.2 AU, floored at 0

Collisions, ejections and new planets add one-off penalties (or a bonus) that fade to 20%
after every recalculation. The reported score is smoothed toward the raw value.
"""
import logging
from typing import Iterable, List

from .constants import (
    COLLISION_PENALTY,
    EJECTION_PENALTY,
    HZ_BONUS_PER_PLANET,
    IDEAL_PLANET_COUNT,
    NEW_PLANET_BONUS,
)
from .data_models import Body
from .entity_store import EntityStore
from .events import (
    CollisionKind,
    CollisionOccurred,
    NewPlanetProposal,
    PlanetEjected,
    SimEvent,
    SystemStabilityChanged,
)
from .vector_utils import clamp

logger = logging.getLogger(__name__)

PENALTY_RETENTION = 0.20
SMOOTHING = 0.15
CLOSE_PAIR_AU = 0.2


def base_score(planets: List[Body], star: Body) -> float:
    count_score = max(0.0, 30.0 - abs(len(planets) - IDEAL_PLANET_COUNT) * 7.0)

    mean_e = sum(p.orbit.e for p in planets) / len(planets)
    ecc_score = max(0.0, 30.0 * (1.0 - mean_e / 0.7))

    in_hz = 0
    if star.star is not None:
        in_hz = sum(1 for p in planets if star.star.in_habitable_zone(p.orbit.a))
    hz_score = min(20.0, in_hz * HZ_BONUS_PER_PLANET)

    ordered = sorted(p.orbit.a for p in planets)
    close_pairs = sum(1 for lo, hi in zip(ordered, ordered[1:]) if hi - lo < CLOSE_PAIR_AU)
    sep_score = max(0.0, 20.0 - 5.0 * close_pairs)

    return count_score + ecc_score + hz_score + sep_score


class SystemStabilityTracker:
    def __init__(self, initial_score: int = 50):
        self.score = initial_score
        self.prev_score = initial_score
        self._penalties = 0.0

    def observe(self, events: Iterable[SimEvent]) -> None:
        """Accumulate penalties from this tick's events."""
        for event in events:
            if isinstance(event, CollisionOccurred):
                if event.kind is CollisionKind.EJECT:
                    self._penalties += COLLISION_PENALTY
                else:
                    self._penalties += COLLISION_PENALTY * 0.5
            elif isinstance(event, PlanetEjected):
                self._penalties += EJECTION_PENALTY
            elif isinstance(event, NewPlanetProposal):
                self._penalties -= NEW_PLANET_BONUS

    def update(self, store: EntityStore) -> List[SimEvent]:
        planets = store.planets()
        star = store.primary_star()
        if not planets or star is None:
            self.score = 0
        else:
            raw = base_score(planets, star) - self._penalties
            self._penalties *= PENALTY_RETENTION
            self.score = int(round(self.score * (1.0 - SMOOTHING) + clamp(raw, 0.0, 100.0) * SMOOTHING))

        delta = self.score - self.prev_score
        trend = "up" if delta > 1 else "down" if delta < -1 else "stable"
        self.prev_score = self.score
        return [SystemStabilityChanged(score=self.score, trend=trend, planet_count=len(planets))]
