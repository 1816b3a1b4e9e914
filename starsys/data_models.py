#!/usr/bin/env python3
"""
Data models for the star system core.

This module defines the Orbit record, the Body dataclass shared by every engine,
and the lightweight DiskParticle owned by the accretion engine.

Units and usage
- Orbit: semi-major axis in AU, period in years, angles in radians.
- Body.mass is in Earth masses for every non-stellar body and in solar masses for stars.
- Body.position is in world units (AU_TO_WORLD per AU). It is derived from the orbit every
  tick and is not authoritative.
- Body.visual_radius is in world units and sets the collision proximity scale.
- Every body kind shares one shape; `body_type` is the tag and `star` / `planet` hold the
  per-type fields. Engines branch on the tag.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

from .composition import (
    ASTEROID_COMPOSITION,
    COMET_COMPOSITION,
    Composition,
    composition_template,
    has_water,
    normalize_composition,
)
from .constants import EARTH_TO_SOLAR, MAX_LIFE_SCORE, STABILITY_E_SCALE, WATER_THRESHOLD
from .orbit_math import orbital_period


class BodyType(str, Enum):
    STAR = "star"
    PLANET = "planet"
    MOON = "moon"
    ASTEROID = "asteroid"
    COMET = "comet"
    PLANETOID = "planetoid"


SMALL_BODY_TYPES = (BodyType.ASTEROID, BodyType.COMET, BodyType.PLANETOID)


class Atmosphere(str, Enum):
    NONE = "none"
    THIN = "thin"
    THICK = "thick"
    DENSE = "dense"


@dataclass
class Orbit:
    """
    Keplerian orbital record.

    Fields:
    - a: semi-major axis [AU]
    - e: eccentricity [0, ~0.98)
    - period: orbital period [yr]; always derived from `a` and the central mass
    - mean_anomaly: M [rad], unbounded; normalised when solved
    - theta: true anomaly [rad], recomputed each tick
    - inclination_offset: rotation of the ellipse in the plane (argument of periapsis) [rad]
    """
    a: float
    e: float
    period: float
    mean_anomaly: float = 0.0
    theta: float = 0.0
    inclination_offset: float = 0.0

    def set_semi_major_axis(self, a: float, central_mass: float) -> None:
        """Change `a` and keep the period consistent with Kepler's third law."""
        self.a = a
        self.period = orbital_period(a, central_mass)

    def apply_elements(self, elements) -> None:
        """Copy an OrbitElements result into this record."""
        self.a = elements.a
        self.e = elements.e
        self.inclination_offset = elements.omega
        self.period = elements.period
        self.mean_anomaly = elements.mean_anomaly


@dataclass
class StarTraits:
    spectral_type: str = "G"
    luminosity: float = 1.0  # L_sun
    hz_min: float = 0.95  # AU
    hz_max: float = 1.4  # AU

    def in_habitable_zone(self, a: float) -> bool:
        return self.hz_min <= a <= self.hz_max

    def distance_to_habitable_zone(self, a: float) -> float:
        """Zero inside the zone, otherwise distance to the nearest edge (AU)."""
        if self.in_habitable_zone(a):
            return 0.0
        return min(abs(a - self.hz_min), abs(a - self.hz_max))


@dataclass
class PlanetTraits:
    planet_type: str = "rocky"  # hot_rocky | rocky | gas | ice
    albedo: float = 0.15
    atmosphere: Atmosphere = Atmosphere.NONE
    temperature_k: float = 0.0
    surface_temperature_c: float = -273.0
    has_water: bool = False

    @property
    def can_host_life(self) -> bool:
        return self.planet_type not in ("gas", "ice")


@dataclass
class Body:
    """
    A simulated body of any kind.

    Fields:
    - id: store identity
    - name: display name
    - body_type: discriminating tag
    - mass: Earth masses (solar masses for stars)
    - position: world units, derived from `orbit` each tick
    - orbit: None only for stars
    - parent_id: the planet a moon orbits; None for every other body
    - composition: element id -> percentage
    - life_score: 0..100, meaningful for planets
    - orbital_stability: 1.0 stable, falls toward 0 as eccentricity grows
    """
    id: str
    name: str
    body_type: BodyType
    mass: float
    position: Tuple[float, float] = (0.0, 0.0)
    orbit: Optional[Orbit] = None
    parent_id: Optional[str] = None
    composition: Composition = field(default_factory=dict)
    life_score: float = 0.0
    orbital_stability: float = 1.0
    visual_radius: float = 6.0
    impact_count: int = 0
    mass_accreted: float = 0.0
    star: Optional[StarTraits] = None
    planet: Optional[PlanetTraits] = None

    @property
    def is_star(self) -> bool:
        return self.body_type is BodyType.STAR

    @property
    def is_planet(self) -> bool:
        return self.body_type is BodyType.PLANET

    @property
    def is_small_body(self) -> bool:
        return self.body_type in SMALL_BODY_TYPES

    def set_life_score(self, score: float) -> None:
        self.life_score = min(MAX_LIFE_SCORE, max(0.0, score))

    def refresh_stability(self) -> None:
        if self.orbit is not None:
            self.orbital_stability = max(0.0, 1.0 - self.orbit.e / STABILITY_E_SCALE)

    def set_composition(self, comp: Composition) -> None:
        """Store a renormalised composition and refresh derived surface water."""
        self.composition = normalize_composition(comp)
        if self.planet is not None:
            self.planet.has_water = has_water(self.composition, WATER_THRESHOLD)


@dataclass
class DiskParticle:
    """
    Planetesimal in the protoplanetary disk.

    Not an entity: it lives only in the accretion engine's population and is never
    a collision target for the tick engine.
    """
    id: int
    mass: float  # Earth masses
    orbit: Orbit
    position: Tuple[float, float] = (0.0, 0.0)


# ============================================================
# Factories
# ============================================================

STAR_TYPES: Dict[str, dict] = {
    "M": {"mass": 0.3, "luminosity": 0.04, "hz": (0.1, 0.4)},
    "K": {"mass": 0.7, "luminosity": 0.4, "hz": (0.5, 0.9)},
    "G": {"mass": 1.0, "luminosity": 1.0, "hz": (0.95, 1.4)},
    "F": {"mass": 1.4, "luminosity": 3.0, "hz": (1.5, 2.2)},
}

PLANET_ALBEDO = {"hot_rocky": 0.05, "rocky": 0.15, "gas": 0.35, "ice": 0.50}


def make_star(body_id: str, name: str = "Star", spectral_type: str = "G",
              mass: Optional[float] = None, luminosity: Optional[float] = None,
              position: Tuple[float, float] = (0.0, 0.0)) -> Body:
    data = STAR_TYPES.get(spectral_type, STAR_TYPES["G"])
    hz_min, hz_max = data["hz"]
    return Body(
        id=body_id,
        name=name,
        body_type=BodyType.STAR,
        mass=mass if mass is not None else data["mass"],
        position=position,
        visual_radius=22.0,
        star=StarTraits(
            spectral_type=spectral_type,
            luminosity=luminosity if luminosity is not None else data["luminosity"],
            hz_min=hz_min,
            hz_max=hz_max,
        ),
    )


def make_planet(body_id: str, star: Body, a: float, mass: float = 1.0, e: float = 0.0,
                name: Optional[str] = None, planet_type: str = "rocky",
                atmosphere: Atmosphere = Atmosphere.NONE, albedo: Optional[float] = None,
                mean_anomaly: float = 0.0, inclination_offset: float = 0.0,
                composition: Optional[Composition] = None,
                visual_radius: float = 6.0) -> Body:
    """Build a planet around `star`; the period follows from `a` and the star mass."""
    traits = star.star or StarTraits()
    comp = composition if composition is not None else composition_template(planet_type, a, traits.hz_max)
    body = Body(
        id=body_id,
        name=name or body_id,
        body_type=BodyType.PLANET,
        mass=mass,
        orbit=Orbit(
            a=a,
            e=e,
            period=orbital_period(a, star.mass),
            mean_anomaly=mean_anomaly,
            inclination_offset=inclination_offset,
        ),
        visual_radius=visual_radius,
        planet=PlanetTraits(
            planet_type=planet_type,
            albedo=albedo if albedo is not None else PLANET_ALBEDO.get(planet_type, 0.15),
            atmosphere=Atmosphere(atmosphere),
        ),
    )
    body.set_composition(comp)
    body.refresh_stability()
    return body


def make_moon(body_id: str, parent: Body, a: float, mass: float = 0.01, e: float = 0.0,
              name: Optional[str] = None, mean_anomaly: float = 0.0,
              inclination_offset: float = 0.0) -> Body:
    """Build a moon orbiting `parent`; parent mass is converted to solar masses for the period."""
    return Body(
        id=body_id,
        name=name or body_id,
        body_type=BodyType.MOON,
        mass=mass,
        orbit=Orbit(
            a=a,
            e=e,
            period=orbital_period(a, parent.mass * EARTH_TO_SOLAR),
            mean_anomaly=mean_anomaly,
            inclination_offset=inclination_offset,
        ),
        parent_id=parent.id,
        visual_radius=2.0,
        composition=normalize_composition(ASTEROID_COMPOSITION),
    )


def make_small_body(body_id: str, star: Body, body_type: BodyType, a: float,
                    mass: float = 0.001, e: float = 0.1, name: Optional[str] = None,
                    mean_anomaly: float = 0.0, inclination_offset: float = 0.0,
                    composition: Optional[Composition] = None,
                    visual_radius: Optional[float] = None) -> Body:
    """Build an asteroid, comet or planetoid around `star`."""
    body_type = BodyType(body_type)
    if body_type not in SMALL_BODY_TYPES:
        raise ValueError(f"not a small body type: {body_type.value}")
    if composition is None:
        composition = COMET_COMPOSITION if body_type is BodyType.COMET else ASTEROID_COMPOSITION
    if visual_radius is None:
        visual_radius = {BodyType.ASTEROID: 2.0, BodyType.COMET: 1.0, BodyType.PLANETOID: 3.0}[body_type]
    return Body(
        id=body_id,
        name=name or body_id,
        body_type=body_type,
        mass=mass,
        orbit=Orbit(
            a=a,
            e=e,
            period=orbital_period(a, star.mass),
            mean_anomaly=mean_anomaly,
            inclination_offset=inclination_offset,
        ),
        visual_radius=visual_radius,
        composition=normalize_composition(composition),
    )


def make_disk_particle(particle_id: int, star: Body, a: float, mass: float, e: float = 0.0,
                       mean_anomaly: float = 0.0, inclination_offset: float = 0.0) -> DiskParticle:
    return DiskParticle(
        id=particle_id,
        mass=mass,
        orbit=Orbit(
            a=a,
            e=e,
            period=orbital_period(a, star.mass),
            mean_anomaly=mean_anomaly,
            inclination_offset=inclination_offset,
        ),
    )
