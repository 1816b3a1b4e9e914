#!/usr/bin/env python3
"""
Protoplanetary disk accretion.

The engine owns the disk particle population; particles never enter the entity store.
Each tick every particle moves along its Kepler orbit around the star. Every
`check_interval` simulated years two checks run:

1. Absorption: a particle closer than `radius_au` to a planet is swallowed by it. The
   planet gains the particle's mass and its orbit is pulled toward the particle's by
   mass-weighted blending of `a` and `e`.
2. Promotion: remaining particles are binned by semi-major axis. A bin whose total mass
   reaches `promotion_mass` is removed and reported as a NewPlanetProposal; the host
   decides whether to register the planet.

Masses are in Earth masses throughout.
"""
import logging
import math
from typing import Dict, Iterable, List, Optional

from .constants import (
    ACCRETION_CHECK_INTERVAL,
    ACCRETION_RADIUS_AU,
    AU_TO_WORLD,
    BIN_SIZE_AU,
    MAX_VISUAL_RADIUS,
    NEW_PLANET_MAX_E,
    PROMOTION_MASS,
)
from .data_models import Body, DiskParticle
from .entity_store import EntityStore
from .events import DiskSnapshot, NewPlanetProposal, ParticleAbsorbed, ParticleState, SimEvent
from .tick_engine import update_orbital_position

logger = logging.getLogger(__name__)


class AccretionSettings:
    """Tuning for the disk checks."""
    def __init__(self,
                 check_interval: float = ACCRETION_CHECK_INTERVAL,
                 radius_au: float = ACCRETION_RADIUS_AU,
                 bin_size_au: float = BIN_SIZE_AU,
                 promotion_mass: float = PROMOTION_MASS,
                 new_planet_max_e: float = NEW_PLANET_MAX_E,
                 au_to_world: float = AU_TO_WORLD):
        self.check_interval = max(0.0, float(check_interval))
        self.radius_au = max(0.0, float(radius_au))
        self.bin_size_au = max(1e-6, float(bin_size_au))
        self.promotion_mass = float(promotion_mass)
        self.new_planet_max_e = float(new_planet_max_e)
        self.au_to_world = float(au_to_world)


def absorbed_visual_radius(mass: float) -> float:
    """Visual radius a planet of `mass` Earth masses grows toward."""
    return float(round(4 + min(mass * 1.8, 10)))


class AccretionEngine:
    """Kepler motion, absorption and cluster promotion for disk particles."""

    def __init__(self, particles: Optional[Iterable[DiskParticle]] = None,
                 settings: Optional[AccretionSettings] = None):
        self.settings = settings or AccretionSettings()
        self._particles: List[DiskParticle] = list(particles or [])
        self._accum_years = 0.0

    @property
    def particles(self) -> List[DiskParticle]:
        return list(self._particles)

    def add_particles(self, particles: Iterable[DiskParticle]) -> None:
        self._particles.extend(particles)

    def update(self, store: EntityStore, delta_years: float) -> List[SimEvent]:
        """
        Advance the disk by `delta_years`.

        Returns absorption and promotion events (on check ticks) followed by a DiskSnapshot.
        """
        star = store.primary_star()
        if star is None:
            return []

        for particle in self._particles:
            update_orbital_position(particle, delta_years, star.position, self.settings.au_to_world)

        events: List[SimEvent] = []
        self._accum_years += delta_years
        if self._accum_years >= self.settings.check_interval:
            self._accum_years = 0.0
            events.extend(self.absorb_into_planets(store.planets(), star))
            events.extend(self.promote_clusters())

        events.append(DiskSnapshot(particles=tuple(
            ParticleState(id=p.id, mass=p.mass, position=p.position) for p in self._particles
        )))
        return events

    def absorb_into_planets(self, planets: List[Body], star: Body) -> List[SimEvent]:
        """Let every planet swallow the particles inside its accretion radius."""
        cfg = self.settings
        reach = cfg.radius_au * cfg.au_to_world
        absorbed = set()
        events: List[SimEvent] = []

        for planet in planets:
            for particle in self._particles:
                if particle.id in absorbed:
                    continue
                dist = math.hypot(particle.position[0] - planet.position[0],
                                  particle.position[1] - planet.position[1])
                if dist >= reach:
                    continue

                total = planet.mass + particle.mass
                if total > 0:
                    orb = planet.orbit
                    new_a = (orb.a * planet.mass + particle.orbit.a * particle.mass) / total
                    orb.e = (orb.e * planet.mass + particle.orbit.e * particle.mass) / total
                    orb.set_semi_major_axis(new_a, star.mass)
                    planet.refresh_stability()
                planet.mass = total
                planet.mass_accreted += particle.mass

                new_radius = absorbed_visual_radius(planet.mass)
                if new_radius > planet.visual_radius:
                    planet.visual_radius = min(new_radius, MAX_VISUAL_RADIUS)

                absorbed.add(particle.id)
                events.append(ParticleAbsorbed(planet_id=planet.id, particle_id=particle.id))

        if absorbed:
            self._particles = [p for p in self._particles if p.id not in absorbed]
            logger.debug("accretion check: %d particles absorbed, %d left",
                         len(absorbed), len(self._particles))
        return events

    def promote_clusters(self) -> List[SimEvent]:
        """Turn every semi-major-axis bin at or above promotion mass into a planet proposal."""
        cfg = self.settings
        bins: Dict[int, List[DiskParticle]] = {}
        for particle in self._particles:
            bins.setdefault(math.floor(particle.orbit.a / cfg.bin_size_au), []).append(particle)

        events: List[SimEvent] = []
        promoted = set()
        for cluster in bins.values():
            total = sum(p.mass for p in cluster)
            if total < cfg.promotion_mass or total <= 0:
                continue
            avg_a = sum(p.orbit.a * p.mass for p in cluster) / total
            avg_e = sum(p.orbit.e for p in cluster) / len(cluster)
            promoted.update(p.id for p in cluster)
            events.append(NewPlanetProposal(a=avg_a, e=min(avg_e, cfg.new_planet_max_e), mass=total))
            logger.info("disk cluster at %.2f AU promoted (%.2f M_earth, %d particles)",
                        avg_a, total, len(cluster))

        if promoted:
            self._particles = [p for p in self._particles if p.id not in promoted]
        return events
