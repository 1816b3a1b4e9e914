#!/usr/bin/env python3
"""
Gravitational perturbations between planets.

Orbits stay Keplerian; every `gravity_step` simulated years the engine sums the Newtonian
pull of nearby planets on each planet over the aggregated interval, adds that velocity
change to the current Kepler velocity, and converts the new state back into elements with
`state_to_orbit` (vis-viva + Laplace-Runge-Lenz).

    a_i = sum_j G * m_j_eff / r_ij^2  (towards j),   dv_i = a_i * dt

m_j_eff is the planet mass in solar masses times `mass_scale`. With the real mass, close
planets would collide within a few thousand years; the attenuation spreads encounters over
hundreds of thousands of years.

A separate Hill-sphere pass, driven by the tick engine, kicks the smaller member of any pair
orbiting within 1.5 Hill radii of the heavier one and ejects it once its eccentricity passes
the ejection threshold.
"""
import logging
import math
from typing import List, Optional

import numpy as np

from .constants import (
    AU_TO_WORLD,
    EARTH_TO_SOLAR,
    EJECTION_ECCENTRICITY,
    G_AU,
    GRAVITY_CUTOFF_AU,
    GRAVITY_MASS_SCALE,
    GRAVITY_STEP,
    HILL_A_JITTER,
    HILL_E_KICK_MIN,
    HILL_E_KICK_SPAN,
    HILL_FACTOR,
    MAX_DELTA_V,
    MAX_ECCENTRICITY,
    MAX_ORBIT_AU,
    MIN_ORBIT_AU,
    MIN_PAIR_DIST_SQ,
    PERTURB_MAX_A_FACTOR,
    PERTURB_MAX_E,
    PERTURB_MIN_A,
)
from .data_models import Body
from .entity_store import EntityStore
from .events import PlanetEjected, SimEvent, StabilityChanged
from .orbit_math import hill_radius, orbital_velocity, state_to_orbit

logger = logging.getLogger(__name__)


class PerturbationSettings:
    """Tuning for both perturbation passes."""
    def __init__(self,
                 gravity_step: float = GRAVITY_STEP,
                 cutoff_au: float = GRAVITY_CUTOFF_AU,
                 mass_scale: float = GRAVITY_MASS_SCALE,
                 max_delta_v: float = MAX_DELTA_V,
                 min_a: float = PERTURB_MIN_A,
                 max_a: float = MAX_ORBIT_AU * PERTURB_MAX_A_FACTOR,
                 max_e: float = PERTURB_MAX_E,
                 hill_factor: float = HILL_FACTOR,
                 ejection_e: float = EJECTION_ECCENTRICITY,
                 min_hill_a: float = MIN_ORBIT_AU * 0.5,
                 au_to_world: float = AU_TO_WORLD):
        self.gravity_step = max(0.0, float(gravity_step))
        self.cutoff_au = float(cutoff_au)
        self.mass_scale = max(0.0, float(mass_scale))
        self.max_delta_v = max(0.0, float(max_delta_v))
        self.min_a = float(min_a)
        self.max_a = float(max_a)
        self.max_e = float(max_e)
        self.hill_factor = float(hill_factor)
        self.ejection_e = float(ejection_e)
        self.min_hill_a = float(min_hill_a)
        self.au_to_world = float(au_to_world)


class PerturbationEngine:
    """Periodic N-body-like drift applied on top of analytic orbits."""

    def __init__(self, settings: Optional[PerturbationSettings] = None):
        self.settings = settings or PerturbationSettings()
        self._accum_years = 0.0

    def update(self, store: EntityStore, delta_years: float) -> List[SimEvent]:
        """Accumulate time and run the gravity pass once `gravity_step` years have passed."""
        self._accum_years += delta_years
        if self._accum_years < self.settings.gravity_step:
            return []
        dt = self._accum_years
        self._accum_years = 0.0
        star = store.primary_star()
        if star is None:
            return []
        return self.apply_gravity(store.planets(), star, dt)

    def apply_gravity(self, planets: List[Body], star: Body, dt: float) -> List[SimEvent]:
        """
        Apply one aggregated gravity step of length dt (years) to every planet.

        Velocity changes are computed from the positions at the start of the pass. Rejected
        results (unbound or out of bounds) leave the orbit untouched.
        """
        if len(planets) < 2:
            return []
        cfg = self.settings
        m_star = star.mass
        positions = [((p.position[0] - star.position[0]) / cfg.au_to_world,
                      (p.position[1] - star.position[1]) / cfg.au_to_world) for p in planets]
        deltas = []

        for i, (pix, piy) in enumerate(positions):
            dvx = dvy = 0.0
            for j, bj in enumerate(planets):
                if i == j:
                    continue
                dx = positions[j][0] - pix
                dy = positions[j][1] - piy
                r2 = dx * dx + dy * dy
                if r2 < MIN_PAIR_DIST_SQ:
                    continue
                r = math.sqrt(r2)
                if r > cfg.cutoff_au:
                    continue
                m_eff = bj.mass * EARTH_TO_SOLAR * cfg.mass_scale
                accel = G_AU * m_eff / r2
                dvx += accel * (dx / r) * dt
                dvy += accel * (dy / r) * dt
            deltas.append((dvx, dvy))

        changed: List[str] = []
        for bi, (pix, piy), (dvx, dvy) in zip(planets, positions, deltas):
            if abs(dvx) < 1e-12 and abs(dvy) < 1e-12:
                continue
            dv = math.hypot(dvx, dvy)
            if dv > cfg.max_delta_v:
                dvx *= cfg.max_delta_v / dv
                dvy *= cfg.max_delta_v / dv

            orb = bi.orbit
            vx, vy = orbital_velocity(orb.a, orb.e, orb.theta, orb.inclination_offset, m_star)
            elements = state_to_orbit(pix, piy, vx + dvx, vy + dvy, m_star)
            if elements is None:
                logger.debug("perturbation of %s gave an unbound orbit; skipped", bi.id)
                continue
            if not cfg.min_a <= elements.a <= cfg.max_a or elements.e > cfg.max_e:
                logger.debug("perturbation of %s out of bounds (a=%.3f e=%.3f); skipped",
                             bi.id, elements.a, elements.e)
                continue

            orb.apply_elements(elements)
            bi.refresh_stability()
            changed.append(bi.id)

        logger.debug("gravity pass over %d planets, dt=%.0f yr, %d orbits changed",
                     len(planets), dt, len(changed))
        if changed:
            return [StabilityChanged(planet_ids=tuple(changed))]
        return []

    def apply_hill_perturbations(self, store: EntityStore, star: Body,
                                 rng: np.random.Generator) -> List[SimEvent]:
        """
        Kick bodies that orbit inside another planet's Hill sphere.

        For each ordered pair, the Hill radius of the heavier planet is compared with the
        difference of semi-major axes. The lighter planet's eccentricity grows a little and
        its semi-major axis jitters. The pass stops at the first ejection.
        """
        cfg = self.settings
        planets = store.planets()
        any_change = False

        for i, pa in enumerate(planets):
            for j, pb in enumerate(planets):
                if i == j:
                    continue
                heavier, smaller = (pa, pb) if pa.mass >= pb.mass else (pb, pa)
                r_h = hill_radius(heavier.orbit.a, heavier.mass * EARTH_TO_SOLAR, star.mass)
                separation = abs(pa.orbit.a - pb.orbit.a)
                if separation >= r_h * cfg.hill_factor:
                    continue

                orb = smaller.orbit
                orb.e = min(orb.e + HILL_E_KICK_MIN + rng.random() * HILL_E_KICK_SPAN, MAX_ECCENTRICITY)
                new_a = max(orb.a + (rng.random() - 0.5) * HILL_A_JITTER, cfg.min_hill_a)
                orb.set_semi_major_axis(new_a, star.mass)
                smaller.refresh_stability()
                any_change = True

                if orb.e > cfg.ejection_e:
                    store.remove(smaller.id)
                    logger.info("planet %s ejected (e=%.3f)", smaller.name, orb.e)
                    return [PlanetEjected(body_id=smaller.id, name=smaller.name)]

        if any_change:
            return [StabilityChanged(planet_ids=tuple(p.id for p in store.planets()))]
        return []
