import pytest

from starsys.accretion import AccretionEngine, AccretionSettings, absorbed_visual_radius
from starsys.constants import AU_TO_WORLD
from starsys.data_models import make_disk_particle, make_planet
from starsys.entity_store import EntityStore
from starsys.events import DiskSnapshot, NewPlanetProposal, ParticleAbsorbed
from starsys.tick_engine import update_orbital_position


def _particles(star, specs):
    return [make_disk_particle(i, star, a, mass, e=e) for i, (a, mass, e) in enumerate(specs)]


def _placed_planet(store, star, body_id, a, **kwargs):
    planet = make_planet(body_id, star, a, **kwargs)
    update_orbital_position(planet, 0.0, star.position, AU_TO_WORLD)
    return store.add(planet)


class TestMotionAndSnapshot:

    def test_snapshot_every_tick(self, store, star):
        engine = AccretionEngine(_particles(star, [(3.0, 0.01, 0.0), (4.0, 0.01, 0.0)]))
        events = engine.update(store, 1.0)
        assert len(events) == 1
        snapshot = events[0]
        assert isinstance(snapshot, DiskSnapshot)
        assert [p.id for p in snapshot.particles] == [0, 1]

    def test_particles_move_around_star(self, store, star):
        engine = AccretionEngine(_particles(star, [(1.0, 0.01, 0.0)]))
        engine.update(store, 0.5)
        x, y = engine.particles[0].position
        assert x == pytest.approx(-110.0)
        assert y == pytest.approx(0.0, abs=1e-9)

    def test_no_star(self, star):
        engine = AccretionEngine(_particles(star, [(1.0, 0.01, 0.0)]))
        assert engine.update(EntityStore(), 1.0) == []


class TestAbsorption:

    def test_nearby_particle_absorbed_on_check(self, store, star):
        planet = _placed_planet(store, star, "p1", 1.0, mass=1.0)
        engine = AccretionEngine(_particles(star, [(1.0, 0.1, 0.1), (3.0, 0.01, 0.0)]))

        events = engine.update(store, 500.0)

        assert ParticleAbsorbed(planet_id="p1", particle_id=0) in events
        assert [p.id for p in engine.particles] == [1]
        assert planet.mass == pytest.approx(1.1)
        assert planet.mass_accreted == pytest.approx(0.1)
        assert planet.orbit.a == pytest.approx(1.0)
        assert planet.orbit.e == pytest.approx(0.1 * 0.1 / 1.1)
        assert planet.orbit.period == pytest.approx(1.0)
        assert isinstance(events[-1], DiskSnapshot)
        assert len(events[-1].particles) == 1

    def test_no_check_before_interval(self, store, star):
        planet = _placed_planet(store, star, "p1", 1.0, mass=1.0)
        engine = AccretionEngine(_particles(star, [(1.0, 0.1, 0.0)]))
        events = engine.update(store, 100.0)
        assert not any(isinstance(e, ParticleAbsorbed) for e in events)
        assert planet.mass == 1.0

    def test_visual_radius_grows(self, store, star):
        planet = _placed_planet(store, star, "p1", 1.0, mass=2.0, visual_radius=4.0)
        engine = AccretionEngine(_particles(star, [(1.0, 0.5, 0.0)]))
        engine.update(store, 500.0)
        assert planet.visual_radius == absorbed_visual_radius(2.5)

    def test_absorbed_visual_radius(self):
        assert absorbed_visual_radius(1.0) == 6.0
        assert absorbed_visual_radius(100.0) == 14.0


class TestPromotion:

    def test_dense_bin_promoted(self, star):
        engine = AccretionEngine(_particles(star, [
            (2.00, 0.1, 0.6), (2.02, 0.1, 0.6), (2.04, 0.1, 0.6), (2.06, 0.1, 0.6),
            (5.00, 0.1, 0.0),
        ]))
        events = engine.promote_clusters()

        assert len(events) == 1
        proposal = events[0]
        assert isinstance(proposal, NewPlanetProposal)
        assert proposal.a == pytest.approx(2.03)
        assert proposal.e == pytest.approx(0.5)
        assert proposal.mass == pytest.approx(0.4)
        assert [p.id for p in engine.particles] == [4]

    def test_mass_weighted_semi_major_axis(self, star):
        engine = AccretionEngine(_particles(star, [(2.00, 0.3, 0.1), (2.09, 0.1, 0.1)]))
        proposal = engine.promote_clusters()[0]
        assert proposal.a == pytest.approx((2.00 * 0.3 + 2.09 * 0.1) / 0.4)
        assert proposal.e == pytest.approx(0.1)

    def test_light_bins_stay(self, star):
        engine = AccretionEngine(_particles(star, [(2.0, 0.1, 0.0), (3.0, 0.1, 0.0)]))
        assert engine.promote_clusters() == []
        assert len(engine.particles) == 2

    def test_custom_threshold(self, star):
        engine = AccretionEngine(_particles(star, [(2.0, 0.1, 0.0)]),
                                 AccretionSettings(promotion_mass=0.05))
        assert len(engine.promote_clusters()) == 1
