#!/usr/bin/env python3
"""
Simulation controller: the external clock adapter.

What this module does
- Owns the entity store, the disk particle population (through the accretion engine),
  every engine and the seeded random generator.
- Converts real elapsed seconds into simulated years with `time_scale` and runs one
  ordered update per frame.

Engine order within `advance`
1) Tick engine (positions, collisions, Hill-sphere pass)
2) Perturbation engine (gravity pass)
3) Accretion engine
4) Habitability engine: collision hook first, then the periodic check
5) Disk phase tracker
6) System stability score, which observes everything emitted above

Threading model
- All access is guarded by a re-entrant lock, so a renderer thread and a UI thread can
  share one controller. Engines themselves never lock.
"""
import logging
import math
import threading
from typing import Iterable, List, Optional

import numpy as np

from .accretion import AccretionEngine, AccretionSettings
from .collisions import CollisionSettings
from .constants import DEFAULT_TIME_SCALE
from .data_models import Body, DiskParticle
from .disk_phase import DiskPhaseTracker
from .entity_store import EntityStore
from .events import CollisionOccurred, SimEvent, StateSnapshot
from .habitability import HabitabilityEngine, HabitabilitySettings
from .perturbation import PerturbationEngine, PerturbationSettings
from .stability import SystemStabilityTracker
from .tick_engine import TickEngine, body_state

logger = logging.getLogger(__name__)


class SimulationController:
    """
    Shared simulation state for host threads.
    Every public operation takes the lock.
    """
    def __init__(self, seed: Optional[int] = None,
                 particles: Optional[Iterable[DiskParticle]] = None,
                 time_scale: float = DEFAULT_TIME_SCALE,
                 game_time: float = 0.0,
                 collision_settings: Optional[CollisionSettings] = None,
                 perturbation_settings: Optional[PerturbationSettings] = None,
                 accretion_settings: Optional[AccretionSettings] = None,
                 habitability_settings: Optional[HabitabilitySettings] = None):
        self.lock = threading.RLock()
        self.store = EntityStore()
        self.rng = np.random.default_rng(seed)
        self.time_scale = float(time_scale)
        self.paused = False
        self._game_time = float(game_time)

        self.perturbation = PerturbationEngine(perturbation_settings)
        self.tick_engine = TickEngine(perturbation=self.perturbation, collision_settings=collision_settings)
        self.accretion = AccretionEngine(particles, accretion_settings)
        self.habitability = HabitabilityEngine(habitability_settings)
        self.disk_phase = DiskPhaseTracker(self._game_time)
        self.stability = SystemStabilityTracker()

    @property
    def game_time(self) -> float:
        with self.lock:
            return self._game_time

    def set_time_scale(self, s: float):
        with self.lock:
            self.time_scale = float(s)

    def set_paused(self, paused: bool):
        with self.lock:
            self.paused = bool(paused)

    def add_body(self, body: Body) -> Body:
        with self.lock:
            return self.store.add(body)

    def remove_body(self, body_id: str) -> Optional[Body]:
        with self.lock:
            return self.store.remove(body_id)

    def snapshot(self) -> StateSnapshot:
        with self.lock:
            star = self.store.primary_star()
            return StateSnapshot(
                star=body_state(star) if star is not None else None,
                bodies=tuple(body_state(b) for b in self.store.all() if not b.is_star),
            )

    def step(self, dt_real_seconds: float) -> List[SimEvent]:
        """Advance by real elapsed seconds scaled to simulated years; no-op while paused."""
        with self.lock:
            if self.paused or self.time_scale <= 0 or dt_real_seconds <= 0:
                return []
            return self.advance(dt_real_seconds * self.time_scale)

    def advance(self, delta_years: float) -> List[SimEvent]:
        """
        Run every engine once for `delta_years` simulated years.

        Returns all events in the order they were produced. Zero, negative and non-finite
        deltas are ignored.
        """
        with self.lock:
            if not math.isfinite(delta_years):
                logger.warning("ignoring non-finite time step %r", delta_years)
                return []
            if delta_years <= 0:
                return []
            self._game_time += delta_years

            events: List[SimEvent] = []
            tick_events = self.tick_engine.update(self.store, delta_years, self.rng)
            events.extend(tick_events)
            events.extend(self.perturbation.update(self.store, delta_years))
            events.extend(self.accretion.update(self.store, delta_years))

            for event in tick_events:
                if isinstance(event, CollisionOccurred):
                    events.extend(self.habitability.handle_collision(self.store, event))
            events.extend(self.habitability.update(self.store, delta_years))

            events.extend(self.disk_phase.update(self.store, delta_years, self._game_time))

            self.stability.observe(events)
            events.extend(self.stability.update(self.store))
            return events
