#!/usr/bin/env python3
"""
Per-frame tick engine.

Responsibilities
- Advance every orbiting body along its Kepler ellipse (mean anomaly -> eccentric anomaly ->
  true anomaly -> radius -> world position).
- Detect and resolve at most one planet/planet and at most one planet/small-body collision
  per tick.
- Trigger the Hill-sphere perturbation pass every `perturb_interval` simulated years.
- Report a state snapshot after each tick.

Ordering
- Planets are positioned before moons, because a moon's focus is its parent's current
  position. Small bodies orbit the star.
- Collision scans run only after every position has been updated for the tick.
- Resolving a single collision per scan keeps the store consistent while scanning; any other
  overlap is picked up on a later tick.

Units and conventions
- Orbits are in AU / years; positions in world units (`au_to_world` per AU).
- Moons use their parent's mass (converted to solar masses) only through their period,
  which is fixed at creation.
"""
import logging
import math
from typing import List, Optional

import numpy as np

from .collisions import (
    CollisionSettings,
    find_planet_collision,
    find_small_body_collision,
    resolve_collision,
    resolve_small_body_collision,
)
from .constants import PERTURB_INTERVAL
from .data_models import Body
from .entity_store import EntityStore
from .events import BodyRemoved, BodyState, SimEvent, StateSnapshot
from .orbit_math import advance_mean_anomaly, anomalies_at, orbital_radius

logger = logging.getLogger(__name__)


def update_orbital_position(body, delta_years: float, focus: tuple, au_to_world: float) -> None:
    """
    Advance one body (or disk particle) along its orbit and set its world position.

    The radius depends on the true anomaly only; the direction is the true anomaly
    plus the orbit's rotation.
    """
    orb = body.orbit
    orb.mean_anomaly = advance_mean_anomaly(orb.mean_anomaly, delta_years, orb.period)
    _, orb.theta = anomalies_at(orb.mean_anomaly, orb.e)
    r = orbital_radius(orb.a, orb.e, orb.theta)
    angle = orb.theta + orb.inclination_offset
    body.position = (focus[0] + r * math.cos(angle) * au_to_world,
                     focus[1] + r * math.sin(angle) * au_to_world)


def body_state(body: Body) -> BodyState:
    return BodyState(id=body.id, body_type=body.body_type.value, position=body.position, mass=body.mass)


class TickEngine:
    """
    Kepler motion and collisions, run once per frame.

    The Hill-sphere pass of the perturbation engine is rate-limited here by a year
    accumulator, so its cost does not depend on the frame rate.
    """

    def __init__(self, perturbation=None, collision_settings: Optional[CollisionSettings] = None,
                 perturb_interval: float = PERTURB_INTERVAL):
        """
        Args:
            perturbation: PerturbationEngine providing `apply_hill_perturbations`; None disables it.
            collision_settings: Collision tuning; defaults to CollisionSettings().
            perturb_interval: Simulated years between Hill-sphere passes.
        """
        self.perturbation = perturbation
        self.settings = collision_settings or CollisionSettings()
        self.perturb_interval = max(0.0, float(perturb_interval))
        self._perturb_accum = 0.0

    def update(self, store: EntityStore, delta_years: float, rng: np.random.Generator) -> List[SimEvent]:
        """
        Run one tick.

        Args:
            store: The entity store (mutated in place).
            delta_years: Simulated years elapsed this frame (> 0).
            rng: Random generator for collision outcomes and perturbation kicks.

        Returns:
            Events produced this tick, ending with a StateSnapshot.
        """
        star = store.primary_star()
        if star is None:
            return []

        events: List[SimEvent] = []
        self.update_positions(store, star, delta_years, events)

        pair = find_planet_collision(store.planets(), self.settings)
        if pair is not None:
            events.extend(resolve_collision(store, pair[0], pair[1], star, rng, self.settings))

        # Re-read the store: the planet collision may have removed a body
        hit = find_small_body_collision(store.planets(), store.small_bodies(), self.settings)
        if hit is not None:
            events.extend(resolve_small_body_collision(store, hit[0], hit[1], star, rng, self.settings))

        self._perturb_accum += delta_years
        if self.perturb_interval and self._perturb_accum >= self.perturb_interval:
            self._perturb_accum = 0.0
            if self.perturbation is not None:
                events.extend(self.perturbation.apply_hill_perturbations(store, star, rng))

        events.append(StateSnapshot(
            star=body_state(star),
            bodies=tuple(body_state(b) for b in store.all() if not b.is_star),
        ))
        return events

    def update_positions(self, store: EntityStore, star: Body, delta_years: float,
                         events: List[SimEvent]) -> None:
        """Planets first, then moons around their parents, then small bodies."""
        scale = self.settings.au_to_world
        for planet in store.planets():
            update_orbital_position(planet, delta_years, star.position, scale)

        for moon in store.moons():
            parent = store.get(moon.parent_id)
            if parent is None:
                store.remove(moon.id)
                logger.info("moon %s lost its parent %s", moon.id, moon.parent_id)
                events.append(BodyRemoved(body_id=moon.id, reason="parent missing"))
                continue
            update_orbital_position(moon, delta_years, parent.position, scale)

        for body in store.small_bodies():
            update_orbital_position(body, delta_years, star.position, scale)
