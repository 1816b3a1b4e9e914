#!/usr/bin/env python3
"""
Keplerian orbit mathematics.

Responsibilities
- Solve Kepler's equation and convert between mean, eccentric and true anomaly.
- Evaluate the polar conic equation and Kepler's third law.
- Convert orbital elements to a velocity vector and a state vector back to elements.

Units and conventions
- Distances in astronomical units [AU], time in years [yr], central masses in solar masses.
- The gravitational parameter is GM = 4*pi^2 * M_central [AU^3/yr^2].
- Orbits live in a 2D plane. `omega` (the body's `inclination_offset`) is the angle of
  periapsis measured from the world x axis; the true anomaly is measured from periapsis.

Numerical notes
- Orbits stay analytic between discrete perturbation events, so there is no integration
  error to accumulate over millions of simulated years.
- Degenerate inputs are guarded locally (mass floor, 1 - e floor). `state_to_orbit` returns
  None for unbound trajectories; callers decide whether that means "reject" or "eject".

All functions are pure.
"""
import math
from typing import NamedTuple, Optional, Tuple

from .constants import (
    G_AU,
    KEPLER_MAX_ITER,
    KEPLER_TOLERANCE,
    MIN_CENTRAL_MASS,
    MIN_ONE_MINUS_E,
    STATE_MAX_ECCENTRICITY,
    STATE_MIN_SEMI_MAJOR,
    TWO_PI,
)
from .vector_utils import Vec2, vec_rotate, wrap_angle


class OrbitElements(NamedTuple):
    """Result of `state_to_orbit`."""
    a: float
    e: float
    omega: float
    period: float
    mean_anomaly: float


def solve_kepler(mean_anomaly: float, e: float) -> float:
    """
    Solve Kepler's equation M = E - e*sin(E) for the eccentric anomaly E.

    Newton-Raphson seeded at E0 = M after normalising M into [0, 2*pi). Stops when the
    correction drops below KEPLER_TOLERANCE or after KEPLER_MAX_ITER iterations; on
    non-convergence the best estimate is returned.

    Args:
        mean_anomaly: Mean anomaly in radians (any value).
        e: Eccentricity in [0, 1).

    Returns:
        Eccentric anomaly in radians.
    """
    m = wrap_angle(mean_anomaly)
    ecc_anomaly = m
    for _ in range(KEPLER_MAX_ITER):
        delta = (m - ecc_anomaly + e * math.sin(ecc_anomaly)) / (1.0 - e * math.cos(ecc_anomaly))
        ecc_anomaly += delta
        if abs(delta) < KEPLER_TOLERANCE:
            break
    return ecc_anomaly


def true_anomaly(ecc_anomaly: float, e: float) -> float:
    """
    Convert eccentric anomaly to true anomaly with the half-angle formula:

        tan(theta/2) = sqrt((1+e)/(1-e)) * tan(E/2)
    """
    tan_half = math.sqrt((1.0 + e) / max(1.0 - e, MIN_ONE_MINUS_E)) * math.tan(ecc_anomaly / 2.0)
    return 2.0 * math.atan(tan_half)


def orbital_radius(a: float, e: float, theta: float) -> float:
    """Distance from the focus: r = a(1 - e^2) / (1 + e*cos(theta))."""
    return (a * (1.0 - e * e)) / (1.0 + e * math.cos(theta))


def orbit_position(a: float, e: float, theta: float, omega: float) -> Vec2:
    """
    Position relative to the focus (AU). The radius depends on theta alone; the direction
    is theta + omega.
    """
    r = orbital_radius(a, e, theta)
    angle = theta + omega
    return (r * math.cos(angle), r * math.sin(angle))


def orbital_period(a: float, central_mass: float) -> float:
    """
    Kepler's third law in solar units: T = sqrt(a^3 / M).

    Args:
        a: Semi-major axis in AU.
        central_mass: Mass of the focus body in solar masses (floored at MIN_CENTRAL_MASS).

    Returns:
        Period in years.
    """
    return math.sqrt((a * a * a) / max(central_mass, MIN_CENTRAL_MASS))


def advance_mean_anomaly(mean_anomaly: float, dt: float, period: float) -> float:
    """Linear phase advance M + 2*pi*dt/T. Normalisation is left to `solve_kepler`."""
    return mean_anomaly + (TWO_PI * dt) / period


def orbital_velocity(a: float, e: float, theta: float, omega: float, central_mass: float) -> Vec2:
    """
    Velocity (AU/yr, world frame) at true anomaly theta.

    The velocity is built in the orbit frame (periapsis along +x) from the specific angular
    momentum h = sqrt(GM * p), p = a(1 - e^2), then rotated by omega:

        vx = -(h/p) * sin(theta)
        vy =  (h/p) * (e + cos(theta))
    """
    gm = G_AU * central_mass
    p = a * (1.0 - e * e)
    if p <= 0:
        return (0.0, 0.0)
    h = math.sqrt(max(gm * p, 0.0))
    local = (-h / p * math.sin(theta), h / p * (e + math.cos(theta)))
    return vec_rotate(local, omega)


def state_to_orbit(x: float, y: float, vx: float, vy: float,
                   central_mass: float) -> Optional[OrbitElements]:
    """
    Invert a state vector (position relative to the focus, velocity) into orbital elements.

    Semi-major axis from vis-viva, 1/a = 2/r - v^2/GM; eccentricity vector from
    Laplace-Runge-Lenz, e = (v x h)/GM - r_hat; periapsis angle omega = atan2(e_y, e_x).
    The mean anomaly is recovered from the new true anomaly via the eccentric anomaly.

    Eccentricity is capped at STATE_MAX_ECCENTRICITY and the semi-major axis floored at
    STATE_MIN_SEMI_MAJOR.

    Returns:
        OrbitElements, or None when the trajectory is unbound (1/a <= 0) or r == 0.
    """
    gm = G_AU * max(central_mass, MIN_CENTRAL_MASS)
    r = math.hypot(x, y)
    if r <= 0:
        return None
    v2 = vx * vx + vy * vy

    inv_a = 2.0 / r - v2 / gm
    if inv_a <= 0:
        return None
    a = 1.0 / inv_a

    # z component of r x v; positive means counter-clockwise motion
    h = x * vy - y * vx

    ex = vy * h / gm - x / r
    ey = -vx * h / gm - y / r
    e = min(math.hypot(ex, ey), STATE_MAX_ECCENTRICITY)
    omega = math.atan2(ey, ex)

    theta = wrap_angle(math.atan2(y, x) - omega)
    e_c = min(e, 1.0 - MIN_ONE_MINUS_E)
    ecc_anomaly = 2.0 * math.atan(math.sqrt((1.0 - e_c) / (1.0 + e_c)) * math.tan(theta / 2.0))
    if ecc_anomaly < 0:
        ecc_anomaly += TWO_PI
    mean_anomaly = ecc_anomaly - e * math.sin(ecc_anomaly)

    a = max(a, STATE_MIN_SEMI_MAJOR)
    return OrbitElements(
        a=a,
        e=e,
        omega=omega,
        period=orbital_period(a, central_mass),
        mean_anomaly=mean_anomaly,
    )


def hill_radius(a: float, mass_solar: float, star_mass: float) -> float:
    """Hill radius r_H = a * (m / (3*M))^(1/3), masses in solar units."""
    return a * (mass_solar / (3.0 * max(star_mass, MIN_CENTRAL_MASS))) ** (1.0 / 3.0)


def anomalies_at(mean_anomaly: float, e: float) -> Tuple[float, float]:
    """Return (E, theta) for a mean anomaly."""
    ecc_anomaly = solve_kepler(mean_anomaly, e)
    return ecc_anomaly, true_anomaly(ecc_anomaly, e)
