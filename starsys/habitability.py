#!/usr/bin/env python3
"""
Life emergence and evolution on rocky planets.

Every `check_interval` simulated years each planet is re-scored:

1. Equilibrium temperature from the current orbit:
       T = 278 * (1 - albedo)^0.25 * L^0.25 / sqrt(a)  + greenhouse(atmosphere)   [K]
2. Life potential in [0, 1]: weighted sum of temperature band, orbital stability,
   habitable-zone proximity and atmosphere fit, plus the composition bonus.
3. The life score decays while the potential is zero and grows by
   `growth_rate(score) * potential` otherwise.

Planetary collisions wipe life on both participants immediately (`handle_collision`).
"""
import logging
from typing import Dict, List, Optional, Tuple

from .composition import life_bonus
from .constants import KELVIN_OFFSET, LIFE_CHECK_INTERVAL, LIFE_DECAY_STEP, MAX_LIFE_SCORE
from .data_models import Body, BodyType, StarTraits
from .entity_store import EntityStore
from .events import (
    CollisionOccurred,
    LifeEmerged,
    LifeEvolved,
    LifeExtinct,
    LifeStage,
    LifeUpdated,
    SimEvent,
)

logger = logging.getLogger(__name__)

LIFE_STAGES: Tuple[LifeStage, ...] = (
    LifeStage("barren", 0, 0),
    LifeStage("prebiotic chemistry", 1, 20),
    LifeStage("microorganisms", 21, 50),
    LifeStage("complex life", 51, 80),
    LifeStage("civilization", 81, 100),
)

GREENHOUSE_BONUS_K: Dict[str, float] = {"none": 0.0, "thin": 15.0, "thick": 35.0, "dense": 60.0}
ATMOSPHERE_FIT: Dict[str, float] = {"none": 0.05, "thin": 0.55, "thick": 1.0, "dense": 0.7}
UNKNOWN_ATMOSPHERE_FIT = 0.1

# (upper score bound, growth per check)
GROWTH_STEPS = ((20.0, 3.5), (50.0, 1.8), (80.0, 0.9))
LATE_GROWTH = 0.35


def stage_for(score: float) -> LifeStage:
    """
    Stage for a life score.

    Bands are matched on their upper bound, so fractional scores such as 20.4 fall into
    the next band instead of a gap.
    """
    if score <= 0:
        return LIFE_STAGES[0]
    for stage in LIFE_STAGES[1:]:
        if score <= stage.max_score:
            return stage
    return LIFE_STAGES[-1]


def growth_rate(score: float) -> float:
    for bound, rate in GROWTH_STEPS:
        if score < bound:
            return rate
    return LATE_GROWTH


class HabitabilitySettings:
    """Tuning for the life checks."""
    def __init__(self,
                 check_interval: float = LIFE_CHECK_INTERVAL,
                 decay_step: float = LIFE_DECAY_STEP,
                 min_temp_c: float = -35.0,
                 optimum_low_c: float = 0.0,
                 optimum_high_c: float = 50.0,
                 max_temp_c: float = 85.0,
                 min_stability: float = 0.3,
                 stability_span: float = 0.5,
                 hz_falloff_au: float = 0.6,
                 weights: Tuple[float, float, float, float] = (0.30, 0.20, 0.30, 0.20)):
        self.check_interval = max(0.0, float(check_interval))
        self.decay_step = max(0.0, float(decay_step))
        self.min_temp_c = float(min_temp_c)
        self.optimum_low_c = float(optimum_low_c)
        self.optimum_high_c = float(optimum_high_c)
        self.max_temp_c = float(max_temp_c)
        self.min_stability = float(min_stability)
        self.stability_span = max(1e-6, float(stability_span))
        self.hz_falloff_au = max(1e-6, float(hz_falloff_au))
        self.weights = tuple(float(w) for w in weights)


class HabitabilityEngine:
    """Periodic life scoring for every planet in the store."""

    def __init__(self, settings: Optional[HabitabilitySettings] = None):
        self.settings = settings or HabitabilitySettings()
        self._accum_years = 0.0

    def update(self, store: EntityStore, delta_years: float) -> List[SimEvent]:
        self._accum_years += delta_years
        if self._accum_years < self.settings.check_interval:
            return []
        self._accum_years = 0.0

        star = store.primary_star()
        if star is None:
            return []
        events: List[SimEvent] = []
        for planet in store.planets():
            events.extend(self.evaluate(planet, star))
        return events

    def recalc_temperature(self, planet: Body, star: Body) -> float:
        """Update the planet's equilibrium temperature (K) and surface temperature (C)."""
        traits = planet.planet
        luminosity = star.star.luminosity if star.star is not None else 1.0
        a = max(planet.orbit.a, 1e-6)
        t_rad = 278.0 * (1.0 - traits.albedo) ** 0.25 * max(luminosity, 0.0) ** 0.25 / a ** 0.5
        traits.temperature_k = t_rad + GREENHOUSE_BONUS_K.get(traits.atmosphere.value, 0.0)
        traits.surface_temperature_c = traits.temperature_k - KELVIN_OFFSET
        return traits.temperature_k

    def temperature_score(self, temp_c: float) -> float:
        cfg = self.settings
        if temp_c < cfg.min_temp_c or temp_c > cfg.max_temp_c:
            return 0.0
        if temp_c < cfg.optimum_low_c:
            return (temp_c - cfg.min_temp_c) / (cfg.optimum_low_c - cfg.min_temp_c)
        if temp_c > cfg.optimum_high_c:
            return 1.0 - (temp_c - cfg.optimum_high_c) / (cfg.max_temp_c - cfg.optimum_high_c)
        return 1.0

    def potential(self, planet: Body, star: Body) -> float:
        """Life potential in [0, 1]; zero for gas and ice planets or outside the hard limits."""
        cfg = self.settings
        traits = planet.planet
        if traits is None or not traits.can_host_life:
            return 0.0

        temp_c = traits.surface_temperature_c
        if temp_c < cfg.min_temp_c or temp_c > cfg.max_temp_c:
            return 0.0
        temp_score = self.temperature_score(temp_c)

        if planet.orbital_stability < cfg.min_stability:
            return 0.0
        stab_score = min(1.0, (planet.orbital_stability - cfg.min_stability) / cfg.stability_span)

        hz = star.star or StarTraits()
        hz_dist = hz.distance_to_habitable_zone(planet.orbit.a)
        hz_score = max(0.0, 1.0 - hz_dist / cfg.hz_falloff_au)

        atm_score = ATMOSPHERE_FIT.get(traits.atmosphere.value, UNKNOWN_ATMOSPHERE_FIT)

        w_temp, w_stab, w_hz, w_atm = cfg.weights
        base = temp_score * w_temp + stab_score * w_stab + hz_score * w_hz + atm_score * w_atm
        return min(1.0, base + life_bonus(planet.composition))

    def evaluate(self, planet: Body, star: Body) -> List[SimEvent]:
        """One life check for one planet."""
        if planet.planet is None or planet.orbit is None:
            return []
        self.recalc_temperature(planet, star)
        prev_score = planet.life_score
        prev_stage = stage_for(prev_score)
        potential = self.potential(planet, star)
        events: List[SimEvent] = []

        if potential <= 0:
            if prev_score > 0:
                planet.set_life_score(prev_score - self.settings.decay_step)
                if planet.life_score == 0:
                    logger.info("life on %s died out", planet.name)
                    events.append(LifeExtinct(planet_id=planet.id, reason="unfavourable conditions"))
                events.append(LifeUpdated(planet_id=planet.id, life_score=planet.life_score))
            return events

        grown = round((prev_score + growth_rate(prev_score) * potential) * 10) / 10
        planet.set_life_score(min(MAX_LIFE_SCORE, grown))
        new_stage = stage_for(planet.life_score)

        if prev_score == 0 and planet.life_score > 0:
            logger.info("life emerged on %s", planet.name)
            events.append(LifeEmerged(planet_id=planet.id))
        elif new_stage != prev_stage and planet.life_score > 0:
            logger.info("life on %s evolved to %s", planet.name, new_stage.name)
            events.append(LifeEvolved(planet_id=planet.id, stage=new_stage))

        if planet.life_score != prev_score:
            events.append(LifeUpdated(planet_id=planet.id, life_score=planet.life_score))
        return events

    def handle_collision(self, store: EntityStore, event: CollisionOccurred) -> List[SimEvent]:
        """
        Wipe life on both planet participants of a planetary collision.

        A participant already removed from the store (absorbed or ejected) is reported from
        the life score it carried into the impact.
        """
        if not event.is_planetary:
            return []
        events: List[SimEvent] = []
        participants = (
            (event.winner_id, event.winner_type, event.winner_life),
            (event.loser_id, event.loser_type, event.loser_life),
        )
        for body_id, body_type, prior_life in participants:
            body = store.get(body_id)
            if body is not None:
                if not body.is_planet:
                    continue
                had_life = body.life_score > 0 or prior_life > 0
                body.set_life_score(0.0)
            else:
                if body_type != BodyType.PLANET.value:
                    continue
                had_life = prior_life > 0
            if had_life:
                logger.info("life on %s wiped out by a collision", body_id)
                events.append(LifeExtinct(planet_id=body_id, reason="planetary collision"))
                events.append(LifeUpdated(planet_id=body_id, life_score=0.0))
        return events
