import pytest

from starsys.data_models import make_planet
from starsys.events import (
    CollisionKind,
    CollisionOccurred,
    NewPlanetProposal,
    PlanetEjected,
    SystemStabilityChanged,
)
from starsys.stability import SystemStabilityTracker, base_score


def _four_planets(store, star, e=0.0):
    for i, a in enumerate((0.5, 1.0, 2.0, 4.0)):
        store.add(make_planet(f"p{i}", star, a, e=e))


class TestBaseScore:

    def test_ideal_system(self, store, star):
        _four_planets(store, star)
        # 30 count + 30 eccentricity + 8 (one planet in the HZ) + 20 separation
        assert base_score(store.planets(), star) == pytest.approx(88.0)

    def test_crowded_and_eccentric(self, store, star):
        for i, a in enumerate((1.0, 1.1, 1.2)):
            store.add(make_planet(f"p{i}", star, a, e=0.35))
        # count 23, eccentricity 15, HZ 20 (capped), separation 10
        assert base_score(store.planets(), star) == pytest.approx(68.0)


class TestTracker:

    def test_smoothed_toward_raw(self, store, star):
        _four_planets(store, star)
        tracker = SystemStabilityTracker()
        events = tracker.update(store)
        assert events == [SystemStabilityChanged(score=56, trend="up", planet_count=4)]

    def test_no_planets(self, store):
        tracker = SystemStabilityTracker()
        assert tracker.update(store) == [SystemStabilityChanged(score=0, trend="down", planet_count=0)]

    def test_collision_penalty(self, store, star):
        _four_planets(store, star)
        tracker = SystemStabilityTracker()
        tracker.observe([CollisionOccurred("p0", "p1", CollisionKind.EJECT, (0.0, 0.0))])
        tracker.update(store)
        # raw 88 - 12 = 76 -> round(42.5 + 11.4)
        assert tracker.score == 54

    def test_penalties_fade(self, store, star):
        _four_planets(store, star)
        tracker = SystemStabilityTracker()
        tracker.observe([PlanetEjected("p9", "gone")])
        tracker.update(store)
        first = tracker.score
        tracker.update(store)
        assert tracker.score > first

    def test_new_planet_is_a_bonus(self, store, star):
        _four_planets(store, star)
        plain = SystemStabilityTracker()
        plain.update(store)
        boosted = SystemStabilityTracker()
        boosted.observe([NewPlanetProposal(a=3.0, e=0.1, mass=0.4)])
        boosted.update(store)
        assert boosted.score >= plain.score

    def test_trend_stable_when_flat(self, store, star):
        _four_planets(store, star)
        tracker = SystemStabilityTracker(initial_score=88)
        assert tracker.update(store)[0].trend == "stable"
