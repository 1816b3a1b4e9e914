#!/usr/bin/env python3
"""
Protoplanetary disk phases.

    DISK      game time < 1 Myr
    CLEARING  game time < 5 Myr
    MATURE    afterwards

While the disk is clearing, small bodies on eccentric orbits are pumped toward ejection
every `check_interval` years and removed once they pass `eject_e`.
"""
import logging
from enum import Enum
from typing import List

from .constants import (
    CLEARING_CHECK_INTERVAL,
    CLEARING_E_CAP,
    CLEARING_E_KICK,
    CLEARING_E_THRESHOLD,
    CLEARING_EJECT_E,
    CLEARING_PHASE_END,
    DISK_PHASE_END,
)
from .entity_store import EntityStore
from .events import BodiesCleared, DiskPhaseChanged, SimEvent

logger = logging.getLogger(__name__)


class DiskPhase(str, Enum):
    DISK = "DISK"
    CLEARING = "CLEARING"
    MATURE = "MATURE"


def phase_for_time(game_time: float) -> DiskPhase:
    if game_time < DISK_PHASE_END:
        return DiskPhase.DISK
    if game_time < CLEARING_PHASE_END:
        return DiskPhase.CLEARING
    return DiskPhase.MATURE


class DiskPhaseTracker:
    def __init__(self, game_time: float = 0.0, check_interval: float = CLEARING_CHECK_INTERVAL):
        self.phase = phase_for_time(game_time)
        self.check_interval = max(0.0, float(check_interval))
        self._clearing_accum = 0.0

    def update(self, store: EntityStore, delta_years: float, game_time: float) -> List[SimEvent]:
        events: List[SimEvent] = []
        new_phase = phase_for_time(game_time)
        if new_phase is not self.phase:
            old_phase, self.phase = self.phase, new_phase
            logger.info("disk phase %s -> %s at %.0f yr", old_phase.value, new_phase.value, game_time)
            events.append(DiskPhaseChanged(old_phase=old_phase.value, new_phase=new_phase.value,
                                           game_time=game_time))

        if self.phase is DiskPhase.CLEARING:
            self._clearing_accum += delta_years
            if self._clearing_accum >= self.check_interval:
                self._clearing_accum = 0.0
                events.extend(self.clear_orbits(store))
        return events

    def clear_orbits(self, store: EntityStore) -> List[SimEvent]:
        """Pump eccentric small bodies; remove those that reach the ejection eccentricity."""
        removed = []
        for body in store.small_bodies():
            orb = body.orbit
            if orb is None or orb.e <= CLEARING_E_THRESHOLD:
                continue
            orb.e = min(CLEARING_E_CAP, orb.e + CLEARING_E_KICK)
            if orb.e >= CLEARING_EJECT_E:
                store.remove(body.id)
                removed.append(body.id)

        if not removed:
            return []
        logger.info("orbit clearing removed %d small bodies", len(removed))
        return [BodiesCleared(body_ids=tuple(removed))]
