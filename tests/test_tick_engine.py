"""Per-tick motion, collision scheduling and the Hill-pass cadence."""
import math

import pytest

from starsys.constants import AU_TO_WORLD
from starsys.data_models import BodyType, make_moon, make_planet, make_small_body
from starsys.entity_store import EntityStore
from starsys.events import BodyRemoved, CollisionOccurred, StateSnapshot
from starsys.tick_engine import TickEngine


class RecordingPerturbation:
    def __init__(self):
        self.calls = 0

    def apply_hill_perturbations(self, store, star, rng):
        self.calls += 1
        return []


def _collisions(events):
    return [e for e in events if isinstance(e, CollisionOccurred)]


class TestMotion:

    def test_half_period_moves_to_opposite_side(self, store, star, rng):
        planet = store.add(make_planet("p1", star, 1.0))
        TickEngine().update(store, 0.5, rng)
        assert planet.position[0] == pytest.approx(-AU_TO_WORLD)
        assert planet.position[1] == pytest.approx(0.0, abs=1e-9)

    def test_eccentric_orbit_starts_at_periapsis(self, store, star, rng):
        planet = store.add(make_planet("p1", star, 2.0, e=0.5, inclination_offset=math.pi / 2))
        TickEngine().update(store, 1e-9, rng)
        assert planet.position[0] == pytest.approx(0.0, abs=1e-4)
        assert planet.position[1] == pytest.approx(1.0 * AU_TO_WORLD, rel=1e-6)

    def test_moon_follows_parent_current_position(self, store, star, rng):
        planet = store.add(make_planet("p1", star, 1.0, mass=300.0))
        moon = store.add(make_moon("m1", planet, 0.01))
        TickEngine().update(store, 0.25, rng)

        dx = moon.position[0] - planet.position[0]
        dy = moon.position[1] - planet.position[1]
        assert math.hypot(dx, dy) == pytest.approx(0.01 * AU_TO_WORLD)
        assert planet.position[1] == pytest.approx(AU_TO_WORLD)

    def test_orphan_moon_removed(self, store, star, rng):
        planet = make_planet("ghost", star, 1.0)
        store.add(make_moon("m1", planet, 0.01))
        events = TickEngine().update(store, 0.1, rng)

        assert "m1" not in store
        removed = [e for e in events if isinstance(e, BodyRemoved)]
        assert removed == [BodyRemoved(body_id="m1", reason="parent missing")]

    def test_no_star_is_a_no_op(self, rng):
        assert TickEngine().update(EntityStore(), 1.0, rng) == []

    def test_snapshot_last(self, store, star, rng):
        store.add(make_planet("p1", star, 1.0))
        store.add(make_small_body("a1", star, BodyType.ASTEROID, 2.5))
        events = TickEngine().update(store, 0.1, rng)

        snapshot = events[-1]
        assert isinstance(snapshot, StateSnapshot)
        assert snapshot.star.id == "star"
        assert {b.id for b in snapshot.bodies} == {"p1", "a1"}


class TestCollisionScheduling:

    def test_at_most_one_planet_collision_per_tick(self, store, star, rng):
        for i in range(3):
            store.add(make_planet(f"p{i}", star, 1.0, mean_anomaly=0.001 * i))
        events = TickEngine().update(store, 1e-6, rng)
        assert len(_collisions(events)) == 1

    def test_planet_and_small_body_collisions_independent(self, store, star, rng):
        store.add(make_planet("p1", star, 1.0, mass=1.0))
        store.add(make_planet("p2", star, 1.0, mass=0.05, mean_anomaly=0.001))
        store.add(make_planet("p3", star, 3.0, mass=1.0))
        store.add(make_small_body("a1", star, BodyType.ASTEROID, 3.0, mass=0.0001, e=0.0,
                                  mean_anomaly=0.001))
        store.add(make_small_body("a2", star, BodyType.ASTEROID, 3.0, mass=0.0001, e=0.0,
                                  mean_anomaly=0.002))
        events = TickEngine().update(store, 1e-6, rng)

        collisions = _collisions(events)
        assert len(collisions) == 2
        assert collisions[0].loser_id == "p2"
        assert collisions[1].winner_id == "p3"
        assert len(store.small_bodies()) == 1


class TestHillCadence:

    def test_hill_pass_runs_every_interval(self, store, star, rng):
        store.add(make_planet("p1", star, 1.0))
        hill = RecordingPerturbation()
        engine = TickEngine(perturbation=hill, perturb_interval=100.0)

        engine.update(store, 60.0, rng)
        assert hill.calls == 0
        engine.update(store, 60.0, rng)
        assert hill.calls == 1
        engine.update(store, 60.0, rng)
        assert hill.calls == 1
