#!/usr/bin/env python3
"""
Collision handling for the star system core.

Two detection scans and three resolution paths:
- Planet/planet (and planet/substantial small body), by mass ratio of smaller to larger:
  - Absorption (< absorb_ratio): the larger body takes the centre-of-mass orbit, the summed
    mass and the mass-weighted composition; the smaller body is destroyed.
  - Deflection (>= absorb_ratio): both bodies get new orbits from the centre-of-mass velocity
    plus a recoil / scatter term. The larger keeps 82% of the total mass; the smaller survives
    with 55% of its mass when its new orbit is bound, otherwise it is ejected. Sometimes a
    debris fragment is proposed to the host.
- Planet/small body, graded by mass ratio: microimpact (mass and composition only), minor
  impact (plus a rare eccentricity nudge), or the planet/planet path above.

Detection uses world-unit proximity scaled by the bodies' visual radii. Callers resolve at
most one collision per scan per tick.

This module raises no exceptions for numeric trouble: unbound or out-of-range orbits are
rejected (the body keeps its previous orbit) or, on the deflection path, treated as ejection.
"""
import logging
import math
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .constants import (
    ABSORB_RATIO,
    AU_TO_WORLD,
    COMPOSITION_TRANSFER,
    DEBRIS_CHANCE,
    DEBRIS_MAX_ECCENTRICITY,
    DEBRIS_MIN_MASS,
    DEFLECT_MIN,
    DEFLECT_SPAN,
    MAX_ECCENTRICITY,
    MAX_ORBIT_AU,
    MAX_VISUAL_RADIUS,
    MICROIMPACT_RATIO,
    MIN_REL_SPEED,
    MINOR_IMPACT_RATIO,
    MINOR_NUDGE_CHANCE,
    MINOR_NUDGE_SPAN,
    PLANET_COLLISION_FACTOR,
    RECOIL_COEFF,
    RETAINED_MASS_FRACTION,
    SCATTER_COEFF,
    SMALL_BODY_COLLISION_FACTOR,
    STATE_MAX_ECCENTRICITY,
    STATE_MIN_SEMI_MAJOR,
    SURVIVOR_MASS_FRACTION,
)
from .composition import merge_compositions
from .data_models import Body
from .entity_store import EntityStore
from .events import CollisionKind, CollisionOccurred, DebrisSpawnProposal, SimEvent
from .orbit_math import OrbitElements, orbital_velocity, state_to_orbit
from .vector_utils import Vec2, clamp, vec_add, vec_lerp_weighted, vec_norm, vec_perp, vec_scale, vec_sub

logger = logging.getLogger(__name__)


class CollisionSettings:
    """Container for collision-related tuning. Coefficients are tuned for pacing, not derived."""
    def __init__(self,
                 planet_factor: float = PLANET_COLLISION_FACTOR,
                 small_body_factor: float = SMALL_BODY_COLLISION_FACTOR,
                 absorb_ratio: float = ABSORB_RATIO,
                 microimpact_ratio: float = MICROIMPACT_RATIO,
                 minor_ratio: float = MINOR_IMPACT_RATIO,
                 recoil: float = RECOIL_COEFF,
                 deflect_min: float = DEFLECT_MIN,
                 deflect_span: float = DEFLECT_SPAN,
                 scatter: float = SCATTER_COEFF,
                 retained_fraction: float = RETAINED_MASS_FRACTION,
                 survivor_fraction: float = SURVIVOR_MASS_FRACTION,
                 composition_transfer: float = COMPOSITION_TRANSFER,
                 debris_chance: float = DEBRIS_CHANCE,
                 min_orbit_au: float = STATE_MIN_SEMI_MAJOR,
                 max_orbit_au: float = MAX_ORBIT_AU,
                 max_eccentricity: float = MAX_ECCENTRICITY,
                 au_to_world: float = AU_TO_WORLD):
        self.planet_factor = max(0.01, float(planet_factor))
        self.small_body_factor = max(0.01, float(small_body_factor))
        self.absorb_ratio = float(absorb_ratio)
        self.microimpact_ratio = float(microimpact_ratio)
        self.minor_ratio = float(minor_ratio)
        self.recoil = float(recoil)
        self.deflect_min = float(deflect_min)
        self.deflect_span = float(deflect_span)
        self.scatter = float(scatter)
        self.retained_fraction = clamp(float(retained_fraction), 0.0, 1.0)
        self.survivor_fraction = clamp(float(survivor_fraction), 0.0, 1.0)
        self.composition_transfer = clamp(float(composition_transfer), 0.0, 1.0)
        self.debris_chance = clamp(float(debris_chance), 0.0, 1.0)
        self.min_orbit_au = float(min_orbit_au)
        self.max_orbit_au = float(max_orbit_au)
        self.max_eccentricity = float(max_eccentricity)
        self.au_to_world = float(au_to_world)


# ============================================================
# Detection
# ============================================================

def _overlapping(b1: Body, b2: Body, factor: float) -> bool:
    dx = b1.position[0] - b2.position[0]
    dy = b1.position[1] - b2.position[1]
    return math.hypot(dx, dy) < (b1.visual_radius + b2.visual_radius) * factor


def find_planet_collision(planets: Sequence[Body],
                          settings: CollisionSettings) -> Optional[Tuple[Body, Body]]:
    """Return the first overlapping planet pair in scan order, or None."""
    n = len(planets)
    for i in range(n):
        for j in range(i + 1, n):
            if _overlapping(planets[i], planets[j], settings.planet_factor):
                return planets[i], planets[j]
    return None


def find_small_body_collision(planets: Sequence[Body], small_bodies: Sequence[Body],
                              settings: CollisionSettings) -> Optional[Tuple[Body, Body]]:
    """Return the first overlapping (planet, small body) pair, or None."""
    if not small_bodies:
        return None
    for planet in planets:
        for small in small_bodies:
            if _overlapping(planet, small, settings.small_body_factor):
                return planet, small
    return None


# ============================================================
# Resolution
# ============================================================

def _relative_au(body: Body, star: Body, settings: CollisionSettings) -> Vec2:
    return ((body.position[0] - star.position[0]) / settings.au_to_world,
            (body.position[1] - star.position[1]) / settings.au_to_world)


def _to_world(point_au: Vec2, star: Body, settings: CollisionSettings) -> Vec2:
    return (star.position[0] + point_au[0] * settings.au_to_world,
            star.position[1] + point_au[1] * settings.au_to_world)


def _body_velocity(body: Body, star: Body) -> Vec2:
    orb = body.orbit
    return orbital_velocity(orb.a, orb.e, orb.theta, orb.inclination_offset, star.mass)


def _grow_visual(body: Body, step: float = 1.0) -> None:
    body.visual_radius = min(body.visual_radius + step, MAX_VISUAL_RADIUS)


def _accept(elements: Optional[OrbitElements], lo: float, hi: float, settings: CollisionSettings) -> bool:
    return (elements is not None
            and lo < elements.a < hi
            and elements.e <= settings.max_eccentricity)


def _apply_orbit(body: Body, elements: OrbitElements) -> None:
    body.orbit.apply_elements(elements)
    body.refresh_stability()


def _collision_event(winner: Body, loser: Body, kind: CollisionKind, location: Vec2,
                     grade: str = "major", mass: float = 0.0) -> CollisionOccurred:
    return CollisionOccurred(
        winner_id=winner.id,
        loser_id=loser.id,
        kind=kind,
        location=location,
        winner_type=winner.body_type.value,
        loser_type=loser.body_type.value,
        grade=grade,
        mass=mass,
        winner_life=winner.life_score,
        loser_life=loser.life_score,
    )


def resolve_collision(store: EntityStore, b1: Body, b2: Body, star: Body,
                      rng: np.random.Generator,
                      settings: CollisionSettings) -> List[SimEvent]:
    """
    Resolve a collision between two orbiting bodies by momentum conservation.

    Returns the events produced; the store is mutated in place.
    """
    bigger, smaller = (b1, b2) if b1.mass >= b2.mass else (b2, b1)
    total_mass = bigger.mass + smaller.mass
    if total_mass <= 0 or bigger.mass <= 0:
        return []
    mass_ratio = smaller.mass / bigger.mass
    m_star = star.mass

    bpos = _relative_au(bigger, star, settings)
    spos = _relative_au(smaller, star, settings)
    bvel = _body_velocity(bigger, star)
    svel = _body_velocity(smaller, star)
    cm_vel = vec_lerp_weighted(bvel, bigger.mass, svel, smaller.mass)

    col_au = ((bpos[0] + spos[0]) / 2.0, (bpos[1] + spos[1]) / 2.0)
    location = _to_world(col_au, star, settings)

    if mass_ratio < settings.absorb_ratio:
        return _absorb(store, bigger, smaller, bpos, cm_vel, m_star, total_mass, location, settings)

    events: List[SimEvent] = []

    rel_dir, rel_speed = vec_norm(vec_sub(svel, bvel), MIN_REL_SPEED)
    if rel_dir == (0.0, 0.0):
        # Identical velocities: pick the radial direction so the scatter has an axis
        rel_dir, _ = vec_norm(vec_sub(spos, bpos), MIN_REL_SPEED)

    recoil = settings.recoil * (smaller.mass / total_mass)
    big_vel = vec_sub(cm_vel, vec_scale(rel_dir, rel_speed * recoil))

    deflect = settings.deflect_min + rng.random() * settings.deflect_span
    scatter = (rng.random() - 0.5) * rel_speed * settings.scatter
    small_vel = vec_add(
        vec_add(cm_vel, vec_scale(rel_dir, rel_speed * deflect)),
        vec_scale(vec_perp(rel_dir), scatter),
    )

    big_orbit = state_to_orbit(bpos[0], bpos[1], big_vel[0], big_vel[1], m_star)
    small_orbit = state_to_orbit(spos[0], spos[1], small_vel[0], small_vel[1], m_star)

    hi = settings.max_orbit_au * 2.0
    if _accept(big_orbit, settings.min_orbit_au, hi, settings):
        _apply_orbit(bigger, big_orbit)
    else:
        logger.debug("deflection orbit for %s rejected; keeping previous orbit", bigger.id)

    transfer = settings.composition_transfer * (smaller.mass / total_mass)
    bigger.set_composition(merge_compositions(bigger.composition, smaller.composition, 1.0 - transfer))
    bigger.mass = total_mass * settings.retained_fraction
    _grow_visual(bigger)

    survives = (_accept(small_orbit, settings.min_orbit_au, hi, settings)
                and small_orbit.e < STATE_MAX_ECCENTRICITY)
    if survives:
        _apply_orbit(smaller, small_orbit)
        smaller.mass *= settings.survivor_fraction
        smaller.set_composition(smaller.composition)
        smaller.visual_radius = max(3.0, smaller.visual_radius - 1.0)
    else:
        store.remove(smaller.id)

    debris = _maybe_debris(bigger, smaller, col_au, cm_vel, rel_dir, rel_speed, total_mass,
                           m_star, location, rng, settings)
    if debris is not None:
        events.append(debris)

    kind = CollisionKind.REDIRECT if survives else CollisionKind.EJECT
    logger.info("collision %s: %s hit %s (ratio %.3f)", kind.value, bigger.name, smaller.name, mass_ratio)
    events.insert(0, _collision_event(bigger, smaller, kind, location))
    return events


def _absorb(store: EntityStore, bigger: Body, smaller: Body, bpos: Vec2, cm_vel: Vec2,
            m_star: float, total_mass: float, location: Vec2,
            settings: CollisionSettings) -> List[SimEvent]:
    new_orbit = state_to_orbit(bpos[0], bpos[1], cm_vel[0], cm_vel[1], m_star)
    if (new_orbit is not None
            and new_orbit.a < settings.max_orbit_au * 1.5
            and new_orbit.e <= settings.max_eccentricity):
        _apply_orbit(bigger, new_orbit)
    else:
        logger.debug("absorption orbit for %s rejected; keeping previous orbit", bigger.id)

    bigger.set_composition(merge_compositions(bigger.composition, smaller.composition,
                                              bigger.mass / total_mass))
    bigger.mass = total_mass
    _grow_visual(bigger)
    store.remove(smaller.id)

    logger.info("collision absorb: %s absorbed %s", bigger.name, smaller.name)
    return [_collision_event(bigger, smaller, CollisionKind.ABSORB, location)]


def _maybe_debris(bigger: Body, smaller: Body, col_au: Vec2, cm_vel: Vec2, rel_dir: Vec2,
                  rel_speed: float, total_mass: float, m_star: float, location: Vec2,
                  rng: np.random.Generator,
                  settings: CollisionSettings) -> Optional[DebrisSpawnProposal]:
    """Roll for a debris fragment thrown perpendicular to the impact direction."""
    debris_mass = total_mass * (1.0 - settings.retained_fraction) * (0.4 + rng.random() * 0.6)
    if rng.random() >= settings.debris_chance or debris_mass <= DEBRIS_MIN_MASS:
        return None

    speed = rel_speed * (0.3 + rng.random() * 0.4)
    side = 1.0 if rng.random() < 0.5 else -1.0
    vel = vec_add(cm_vel, vec_scale(vec_perp(rel_dir), speed * side))
    orbit = state_to_orbit(col_au[0], col_au[1], vel[0], vel[1], m_star)
    if (orbit is None
            or not settings.min_orbit_au < orbit.a < settings.max_orbit_au
            or orbit.e >= DEBRIS_MAX_ECCENTRICITY):
        return None

    return DebrisSpawnProposal(
        a=orbit.a,
        e=orbit.e,
        omega=orbit.omega,
        period=orbit.period,
        mean_anomaly=orbit.mean_anomaly,
        mass=debris_mass,
        composition=merge_compositions(bigger.composition, smaller.composition, 0.5),
        location=location,
    )


def resolve_small_body_collision(store: EntityStore, planet: Body, small: Body, star: Body,
                                 rng: np.random.Generator,
                                 settings: CollisionSettings) -> List[SimEvent]:
    """
    Resolve a planet / small-body impact, graded by mass ratio small/planet.

    Microimpacts and minor impacts transfer mass and composition and destroy the small
    body; anything heavier goes through `resolve_collision`.
    """
    if planet.mass <= 0:
        return resolve_collision(store, planet, small, star, rng, settings)
    mass_ratio = small.mass / planet.mass

    if mass_ratio >= settings.minor_ratio:
        return resolve_collision(store, planet, small, star, rng, settings)

    total_mass = planet.mass + small.mass
    planet.set_composition(merge_compositions(planet.composition, small.composition,
                                              planet.mass / total_mass))
    planet.mass = total_mass
    planet.impact_count += 1
    planet.mass_accreted += small.mass
    store.remove(small.id)

    if mass_ratio < settings.microimpact_ratio:
        logger.debug("microimpact on %s (%.2e M_earth)", planet.id, small.mass)
        return [_collision_event(planet, small, CollisionKind.MICROIMPACT, planet.position,
                                 grade="micro", mass=small.mass)]

    if rng.random() < MINOR_NUDGE_CHANCE:
        nudged = planet.orbit.e + (rng.random() - 0.5) * MINOR_NUDGE_SPAN
        planet.orbit.e = clamp(nudged, 0.0, settings.max_eccentricity)
        planet.refresh_stability()

    new_radius = float(round(4 + min(planet.mass * 1.8, 10)))
    if new_radius > planet.visual_radius:
        planet.visual_radius = min(new_radius, MAX_VISUAL_RADIUS)

    logger.info("minor impact: %s absorbed %s %s", planet.name, small.body_type.value, small.name)
    return [_collision_event(planet, small, CollisionKind.ABSORB, planet.position,
                             grade="minor", mass=small.mass)]
