"""Tests for the Kepler solver and element/state conversion."""
import math

import pytest

from starsys.constants import STATE_MAX_ECCENTRICITY
from starsys.orbit_math import (
    advance_mean_anomaly,
    anomalies_at,
    hill_radius,
    orbit_position,
    orbital_period,
    orbital_radius,
    orbital_velocity,
    solve_kepler,
    state_to_orbit,
    true_anomaly,
)


def _angle_diff(a, b):
    return (a - b + math.pi) % (2.0 * math.pi) - math.pi


class TestSolveKepler:

    @pytest.mark.parametrize("e", [0.0, 0.1, 0.3, 0.6, 0.9, 0.95])
    @pytest.mark.parametrize("m", [0.0, 0.4, 1.5, 3.1, 4.7, 6.2])
    def test_satisfies_kepler_equation(self, e, m):
        ecc = solve_kepler(m, e)
        assert ecc - e * math.sin(ecc) == pytest.approx(m, abs=1e-6)

    def test_normalises_mean_anomaly(self):
        ecc = solve_kepler(1.0 + 4.0 * math.pi, 0.3)
        assert ecc - 0.3 * math.sin(ecc) == pytest.approx(1.0, abs=1e-6)

    def test_circular_orbit_is_identity(self):
        assert solve_kepler(2.0, 0.0) == pytest.approx(2.0)


class TestAnomalies:

    def test_true_anomaly_equals_eccentric_for_circle(self):
        assert true_anomaly(1.2, 0.0) == pytest.approx(1.2)

    def test_true_anomaly_leads_eccentric_on_ellipse(self):
        # Between periapsis and apoapsis the body is ahead of the auxiliary circle
        assert true_anomaly(1.0, 0.5) > 1.0

    def test_true_anomaly_survives_e_equal_one(self):
        assert math.isfinite(true_anomaly(1.0, 1.0))

    def test_anomalies_at(self):
        ecc, theta = anomalies_at(0.0, 0.4)
        assert ecc == pytest.approx(0.0)
        assert theta == pytest.approx(0.0)


class TestRadiusAndPosition:

    def test_periapsis_and_apoapsis(self):
        assert orbital_radius(2.0, 0.5, 0.0) == pytest.approx(1.0)
        assert orbital_radius(2.0, 0.5, math.pi) == pytest.approx(3.0)

    def test_position_rotated_by_omega(self):
        x, y = orbit_position(1.0, 0.0, 0.0, math.pi / 2)
        assert x == pytest.approx(0.0, abs=1e-12)
        assert y == pytest.approx(1.0)


class TestPeriod:

    def test_earth_year(self):
        assert orbital_period(1.0, 1.0) == pytest.approx(1.0, abs=1e-6)

    def test_third_law(self):
        assert orbital_period(4.0, 1.0) == pytest.approx(8.0)

    def test_massless_central_body_is_floored(self):
        assert orbital_period(1.0, 0.0) == pytest.approx(math.sqrt(1.0 / 1e-3))

    def test_advance_mean_anomaly_not_normalised(self):
        assert advance_mean_anomaly(0.0, 0.5, 1.0) == pytest.approx(math.pi)
        assert advance_mean_anomaly(6.0, 1.0, 1.0) > 2.0 * math.pi


class TestVelocity:

    def test_circular_speed(self):
        vx, vy = orbital_velocity(1.0, 0.0, 0.0, 0.0, 1.0)
        assert vx == pytest.approx(0.0, abs=1e-12)
        assert vy == pytest.approx(2.0 * math.pi)

    def test_vis_viva(self):
        a, e, theta = 2.0, 0.4, 1.1
        r = orbital_radius(a, e, theta)
        vx, vy = orbital_velocity(a, e, theta, 0.7, 1.0)
        gm = 4.0 * math.pi ** 2
        assert vx * vx + vy * vy == pytest.approx(gm * (2.0 / r - 1.0 / a))


class TestStateToOrbit:

    @pytest.mark.parametrize("a", [0.5, 1.0, 3.0, 10.0])
    @pytest.mark.parametrize("e", [0.1, 0.3, 0.6, 0.9])
    @pytest.mark.parametrize("omega", [0.3, 2.0, -1.0])
    @pytest.mark.parametrize("theta", [0.7, 2.5, 4.0])
    def test_recovers_elements(self, a, e, omega, theta):
        x, y = orbit_position(a, e, theta, omega)
        vx, vy = orbital_velocity(a, e, theta, omega, 1.0)
        elements = state_to_orbit(x, y, vx, vy, 1.0)

        assert elements is not None
        assert elements.a == pytest.approx(a, rel=1e-3)
        assert elements.e == pytest.approx(e, rel=1e-3)
        assert _angle_diff(elements.omega, omega) == pytest.approx(0.0, abs=1e-3)
        assert elements.period == pytest.approx(orbital_period(a, 1.0), rel=1e-3)

        _, recovered_theta = anomalies_at(elements.mean_anomaly, elements.e)
        assert _angle_diff(recovered_theta, theta) == pytest.approx(0.0, abs=1e-3)

    def test_unbound_returns_none(self):
        assert state_to_orbit(1.0, 0.0, 0.0, 10.0, 1.0) is None

    def test_zero_radius_returns_none(self):
        assert state_to_orbit(0.0, 0.0, 1.0, 1.0, 1.0) is None

    def test_eccentricity_capped(self):
        elements = state_to_orbit(1.0, 0.0, 0.0, 0.01, 1.0)
        assert elements is not None
        assert elements.e == pytest.approx(STATE_MAX_ECCENTRICITY)

    def test_semi_major_axis_floored(self):
        elements = state_to_orbit(0.001, 0.0, 0.0, 0.01, 1.0)
        assert elements is not None
        assert elements.a == pytest.approx(0.05)


class TestHillRadius:

    def test_earth_like(self):
        assert hill_radius(1.0, 3e-6, 1.0) == pytest.approx(0.01)
