#!/usr/bin/env python3
"""
Entity store: the live set of simulated bodies.

The store is an explicit object handed to each engine call; there is no module-level
registry. Bodies are indexed by id and by type so category queries do not scan the
whole population. Per-type insertion order is preserved, which keeps collision scans
deterministic.
"""
import logging
from typing import Dict, Iterator, List, Optional

from .data_models import SMALL_BODY_TYPES, Body, BodyType

logger = logging.getLogger(__name__)


class EntityStore:
    """Bodies keyed by id, with a type index."""

    def __init__(self):
        self._bodies: Dict[str, Body] = {}
        self._by_type: Dict[BodyType, Dict[str, None]] = {t: {} for t in BodyType}
        self._next_id = 1

    def next_id(self) -> str:
        """Return a fresh id not yet used in this store."""
        while True:
            candidate = f"entity_{self._next_id}"
            self._next_id += 1
            if candidate not in self._bodies:
                return candidate

    def add(self, body: Body) -> Body:
        if body.id in self._bodies:
            raise ValueError(f"duplicate body id: {body.id}")
        self._bodies[body.id] = body
        self._by_type[body.body_type][body.id] = None
        logger.debug("registered %s %s", body.body_type.value, body.id)
        return body

    def remove(self, body_id: str) -> Optional[Body]:
        """Remove and return a body; missing ids are ignored."""
        body = self._bodies.pop(body_id, None)
        if body is None:
            return None
        self._by_type[body.body_type].pop(body_id, None)
        logger.debug("removed %s %s", body.body_type.value, body_id)
        return body

    def get(self, body_id: Optional[str]) -> Optional[Body]:
        if body_id is None:
            return None
        return self._bodies.get(body_id)

    def all(self) -> List[Body]:
        return list(self._bodies.values())

    def by_type(self, body_type: BodyType) -> List[Body]:
        return [self._bodies[i] for i in self._by_type[BodyType(body_type)]]

    def stars(self) -> List[Body]:
        return self.by_type(BodyType.STAR)

    def planets(self) -> List[Body]:
        return self.by_type(BodyType.PLANET)

    def moons(self) -> List[Body]:
        return self.by_type(BodyType.MOON)

    def small_bodies(self) -> List[Body]:
        bodies: List[Body] = []
        for t in SMALL_BODY_TYPES:
            bodies.extend(self.by_type(t))
        return bodies

    def primary_star(self) -> Optional[Body]:
        """The system's central star (the first registered one)."""
        for body_id in self._by_type[BodyType.STAR]:
            return self._bodies[body_id]
        return None

    def clear(self) -> None:
        self._bodies.clear()
        for index in self._by_type.values():
            index.clear()
        self._next_id = 1

    def __contains__(self, body_id: object) -> bool:
        return body_id in self._bodies

    def __len__(self) -> int:
        return len(self._bodies)

    def __iter__(self) -> Iterator[Body]:
        return iter(list(self._bodies.values()))
