#!/usr/bin/env python3
"""
Chemical composition of bodies.

A composition is a dict mapping an element id from ELEMENTS to a non-negative
percentage. After any mutation a composition is renormalised so the percentages
sum to 100; an all-zero composition is left untouched.
"""
from typing import Dict, Mapping

Composition = Dict[str, float]

# Element id -> life relevance (0 none, 1 indirect, 2 important, 3 key)
ELEMENTS: Dict[str, int] = {
    "Fe": 0, "Si": 0, "O": 2, "Mg": 0, "S": 1,
    "Ni": 0, "Ca": 1, "Al": 0, "C": 3, "H": 2,
    "N": 2, "P": 3, "H2O": 3, "K": 1, "Na": 1,
    "Ti": 0, "U": 0, "Au": 0, "Pt": 0, "He": 0,
}

PLANET_COMPOSITIONS: Dict[str, Composition] = {
    "hot_rocky": {
        "Fe": 35, "Si": 22, "O": 18, "Ni": 10, "S": 6, "Mg": 5, "Ti": 2,
        "Au": 0.8, "Pt": 0.5, "Ca": 0.7,
    },
    "rocky": {
        "Fe": 24, "Si": 24, "O": 27, "Mg": 8, "Ca": 3, "Al": 3,
        "H2O": 2.5, "C": 1.5, "N": 0.8, "P": 0.3, "H": 1.0, "S": 0.9,
        "K": 0.3, "Na": 0.4, "Ni": 0.5, "U": 0.1, "Ti": 0.2, "Au": 0.1, "Pt": 0.05,
    },
    "rocky_cold": {
        "Fe": 14, "Si": 14, "O": 14, "Mg": 6, "H2O": 28, "C": 8, "N": 7, "H": 5,
        "Ca": 1.5, "S": 1.2, "P": 0.5, "Al": 0.3, "K": 0.1, "Na": 0.1, "Ni": 0.1,
        "U": 0.05, "Ti": 0.05,
    },
    "gas": {
        "H": 62, "He": 28, "C": 4, "N": 3, "O": 2, "S": 0.6,
        "Fe": 0.15, "Si": 0.15, "Mg": 0.05, "Ni": 0.05,
    },
    "ice": {
        "H2O": 50, "N": 17, "C": 12, "H": 9, "Si": 4, "Fe": 3.5, "Mg": 2,
        "S": 1.2, "P": 0.5, "O": 0.5, "Ca": 0.1, "Al": 0.1, "Ni": 0.05, "Ti": 0.05,
    },
}

COMET_COMPOSITION: Composition = {
    "H2O": 40, "C": 22, "N": 14, "O": 10, "Si": 4, "Fe": 3, "S": 3, "P": 2.5, "H": 1.5,
}

ASTEROID_COMPOSITION: Composition = {"Fe": 40, "Si": 35, "O": 20, "Ni": 5}


def empty_composition() -> Composition:
    return {element: 0.0 for element in ELEMENTS}


def normalize_composition(comp: Mapping[str, float]) -> Composition:
    """
    Scale a composition so its (non-negative) percentages sum to 100.

    Negative entries are treated as zero. If the total is zero the input is
    returned as a plain copy.
    """
    total = sum(max(0.0, v) for v in comp.values())
    if total <= 0:
        return dict(comp)
    factor = 100.0 / total
    return {k: max(0.0, v) * factor for k, v in comp.items()}


def merge_compositions(comp1: Mapping[str, float], comp2: Mapping[str, float],
                       weight1: float) -> Composition:
    """
    Convex combination weight1*comp1 + (1 - weight1)*comp2 over the union of keys.

    weight1 is usually mass1 / (mass1 + mass2). The result is renormalised.
    """
    weight2 = 1.0 - weight1
    keys = set(comp1) | set(comp2)
    mixed = {k: comp1.get(k, 0.0) * weight1 + comp2.get(k, 0.0) * weight2 for k in keys}
    return normalize_composition(mixed)


def composition_template(planet_type: str, a: float, hz_max: float) -> Composition:
    """Default composition for a planet type; rocky planets beyond 1.3x the HZ edge are cold."""
    if planet_type == "rocky" and a > hz_max * 1.3:
        planet_type = "rocky_cold"
    base = empty_composition()
    base.update(PLANET_COMPOSITIONS.get(planet_type, PLANET_COMPOSITIONS["rocky"]))
    return normalize_composition(base)


def life_bonus(comp: Mapping[str, float]) -> float:
    """
    Additive life-potential bonus in [0, 0.15] from water, carbon and phosphorus.

    Zero unless water >= 5%, carbon >= 2% and phosphorus >= 0.1%.
    """
    if not comp:
        return 0.0
    water = comp.get("H2O", 0.0)
    carbon = comp.get("C", 0.0)
    phosphorus = comp.get("P", 0.0)
    if water < 5 or carbon < 2 or phosphorus < 0.1:
        return 0.0
    water_bonus = min(water / 50.0, 0.5)
    carbon_bonus = min(carbon / 20.0, 0.5)
    phos_bonus = min(phosphorus / 5.0, 1.0)
    return (water_bonus + carbon_bonus + phos_bonus) / 3.0 * 0.15


def has_water(comp: Mapping[str, float], threshold: float) -> bool:
    return comp.get("H2O", 0.0) >= threshold
