#!/usr/bin/env python3
"""
Shared constants for the star system core (AU / years / solar masses unless stated otherwise).

Keeping constants in one place helps ensure values are consistent across the
codebase and makes tuning easier. Engines copy these into their settings objects,
so a caller can override any of them per instance.
"""
import math

# Physical constants
TWO_PI = 2.0 * math.pi
G_AU = 4.0 * math.pi * math.pi  # AU^3 / (M_sun * yr^2)
EARTH_TO_SOLAR = 3e-6  # 1 Earth mass in solar masses (rounded)

# Numeric guards
MIN_CENTRAL_MASS = 1e-3  # solar masses; floor for period computation
MIN_ONE_MINUS_E = 1e-4  # keeps the half-angle formula away from e == 1
KEPLER_TOLERANCE = 1e-8
KEPLER_MAX_ITER = 50
MIN_REL_SPEED = 1e-3  # AU/yr; floor before normalising a relative velocity
MIN_PAIR_DIST_SQ = 1e-8  # AU^2; gravity singularity guard

# State -> elements conversion
STATE_MAX_ECCENTRICITY = 0.97
STATE_MIN_SEMI_MAJOR = 0.05  # AU

# World scale: positions are stored in world units, AU_TO_WORLD per AU
AU_TO_WORLD = 110.0

# System bounds
MIN_ORBIT_AU = 0.3
MAX_ORBIT_AU = 25.0
MAX_VISUAL_RADIUS = 22.0

# Orbital stability: 1 - e / STABILITY_E_SCALE
STABILITY_E_SCALE = 0.95

# Tick engine
PLANET_COLLISION_FACTOR = 0.65  # fraction of summed visual radii
SMALL_BODY_COLLISION_FACTOR = 1.3
PERTURB_INTERVAL = 20000.0  # years between Hill-sphere passes

# Collision outcomes
ABSORB_RATIO = 0.1
MICROIMPACT_RATIO = 0.001
MINOR_IMPACT_RATIO = 0.05
RECOIL_COEFF = 0.15
DEFLECT_MIN = 0.4
DEFLECT_SPAN = 0.35
SCATTER_COEFF = 0.3
RETAINED_MASS_FRACTION = 0.82
SURVIVOR_MASS_FRACTION = 0.55
COMPOSITION_TRANSFER = 0.18
DEBRIS_CHANCE = 0.35
DEBRIS_MIN_MASS = 0.05  # Earth masses
DEBRIS_MAX_ECCENTRICITY = 0.90
MINOR_NUDGE_CHANCE = 0.05
MINOR_NUDGE_SPAN = 0.015
MAX_ECCENTRICITY = 0.98
WATER_THRESHOLD = 3.0  # % H2O for has_water

# Perturbation engine
GRAVITY_STEP = 3000.0  # years between gravity passes
GRAVITY_CUTOFF_AU = 5.0
GRAVITY_MASS_SCALE = 0.003  # attenuation of planet masses for pacing
MAX_DELTA_V = 0.05  # AU/yr per pass
PERTURB_MIN_A = 0.01
PERTURB_MAX_A_FACTOR = 2.5
PERTURB_MAX_E = 0.95
HILL_FACTOR = 1.5
HILL_E_KICK_MIN = 0.00005
HILL_E_KICK_SPAN = 0.0003
HILL_A_JITTER = 0.002
EJECTION_ECCENTRICITY = 0.92

# Accretion engine
ACCRETION_CHECK_INTERVAL = 500.0  # years
ACCRETION_RADIUS_AU = 0.12
BIN_SIZE_AU = 0.15
PROMOTION_MASS = 0.3  # Earth masses
NEW_PLANET_MAX_E = 0.5

# Habitability engine
LIFE_CHECK_INTERVAL = 1000.0  # years
LIFE_DECAY_STEP = 8.0
MAX_LIFE_SCORE = 100.0
KELVIN_OFFSET = 273.0

# Disk phases
DISK_PHASE_END = 1_000_000.0  # years
CLEARING_PHASE_END = 5_000_000.0
CLEARING_CHECK_INTERVAL = 50_000.0
CLEARING_E_THRESHOLD = 0.70
CLEARING_E_KICK = 0.03
CLEARING_E_CAP = 0.99
CLEARING_EJECT_E = 0.97

# System stability score
IDEAL_PLANET_COUNT = 4
COLLISION_PENALTY = 12.0
EJECTION_PENALTY = 18.0
NEW_PLANET_BONUS = 6.0
HZ_BONUS_PER_PLANET = 8.0

# Clock
DEFAULT_TIME_SCALE = 1.0 / 365.25  # simulated years per real second (one day per second)
