import pytest

from starsys.data_models import BodyType, make_planet, make_small_body
from starsys.disk_phase import DiskPhase, DiskPhaseTracker, phase_for_time
from starsys.events import BodiesCleared, DiskPhaseChanged


class TestPhaseForTime:

    @pytest.mark.parametrize("t, phase", [
        (0.0, DiskPhase.DISK),
        (999_999.0, DiskPhase.DISK),
        (1_000_000.0, DiskPhase.CLEARING),
        (4_999_999.0, DiskPhase.CLEARING),
        (5_000_000.0, DiskPhase.MATURE),
    ])
    def test_boundaries(self, t, phase):
        assert phase_for_time(t) is phase


class TestDiskPhaseTracker:

    def test_phase_change_reported_once(self, store):
        tracker = DiskPhaseTracker(game_time=999_000.0)
        events = tracker.update(store, 2000.0, 1_001_000.0)
        assert events == [DiskPhaseChanged(old_phase="DISK", new_phase="CLEARING", game_time=1_001_000.0)]
        assert tracker.update(store, 10.0, 1_001_010.0) == []

    def test_clearing_pumps_and_removes_eccentric_small_bodies(self, store, star):
        doomed = store.add(make_small_body("c1", star, BodyType.COMET, 10.0, e=0.95))
        pumped = store.add(make_small_body("a1", star, BodyType.ASTEROID, 3.0, e=0.8))
        calm = store.add(make_small_body("a2", star, BodyType.ASTEROID, 3.0, e=0.5))
        planet = store.add(make_planet("p1", star, 1.0, e=0.9))
        tracker = DiskPhaseTracker(game_time=2_000_000.0)

        events = tracker.update(store, 50_000.0, 2_050_000.0)

        assert events == [BodiesCleared(body_ids=("c1",))]
        assert doomed.id not in store
        assert pumped.orbit.e == pytest.approx(0.83)
        assert calm.orbit.e == 0.5
        assert planet.orbit.e == 0.9

    def test_clearing_waits_for_interval(self, store, star):
        body = store.add(make_small_body("a1", star, BodyType.ASTEROID, 3.0, e=0.8))
        tracker = DiskPhaseTracker(game_time=2_000_000.0)
        assert tracker.update(store, 10_000.0, 2_010_000.0) == []
        assert body.orbit.e == 0.8

    def test_no_clearing_while_disk_active(self, store, star):
        body = store.add(make_small_body("a1", star, BodyType.ASTEROID, 3.0, e=0.8))
        tracker = DiskPhaseTracker()
        assert tracker.update(store, 100_000.0, 100_000.0) == []
        assert body.orbit.e == 0.8

    def test_nothing_removed_reports_nothing(self, store, star):
        store.add(make_small_body("a1", star, BodyType.ASTEROID, 3.0, e=0.8))
        tracker = DiskPhaseTracker(game_time=2_000_000.0)
        assert tracker.clear_orbits(store) == []
