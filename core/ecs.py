"""
core/ecs.py — Entity-Component-System

Entities are ints. Components are any object, stored by type.
Query by component types to get matching entities.

    w = World()
    e = w.spawn()
    w.add(e, Position(120.0, 80.0))
    w.add(e, Health(3, 3))

    for eid, pos, hp in w.query(Position, Health):
        pos.x += 1
        hp.current -= 1

Units and landmarks are both plain entities.  A dead unit is *not*
killed here — it keeps every component and lies on the field as a
corpse until it respawns.  ``kill()`` is for entities that leave the
battle for good.
"""

from __future__ import annotations
from typing import Any, Iterator


class World:
    def __init__(self):
        self._next_id = 0
        self._stores: dict[type, dict[int, Any]] = {}
        self._dead: set[int] = set()
        self._unpurged: set[int] = set()

    # -- Spatial queries --

    def nearby(self, x: float, y: float, radius: float,
               *types: type) -> Iterator[tuple]:
        """Yield ``(eid, comp1, comp2, ..., dist_sq)`` within *radius*.

        The first type must be Position-like (``.x`` / ``.y``).  The
        last element of each tuple is the squared distance so callers
        can sort/compare without an extra sqrt.

            for eid, pos, health, dsq in world.nearby(400, 300, 50, Position, Health):
                ...
        """
        r_sq = radius * radius
        for result in self.query(*types):
            pos = result[1]
            dx = pos.x - x
            dy = pos.y - y
            dsq = dx * dx + dy * dy
            if dsq <= r_sq:
                yield (*result, dsq)

    # -- Entities --

    def spawn(self) -> int:
        self._next_id += 1
        return self._next_id

    def kill(self, eid: int):
        self._dead.add(eid)
        self._unpurged.add(eid)

    def alive(self, eid: int) -> bool:
        """True while the entity exists (says nothing about its HP)."""
        return 0 < eid <= self._next_id and eid not in self._dead

    def purge(self) -> list[int]:
        """Remove killed entities from all stores. Call once per frame.

        Returns the ids removed since the last purge.  Ids are never
        reused, so a removed entity stays dead.
        """
        removed = sorted(self._unpurged)
        for store in self._stores.values():
            for eid in removed:
                store.pop(eid, None)
        self._unpurged.clear()
        return removed

    # -- Components --

    def add(self, eid: int, comp: Any):
        t = type(comp)
        if t not in self._stores:
            self._stores[t] = {}
        self._stores[t][eid] = comp

    def get(self, eid: int, comp_type: type) -> Any | None:
        if eid is None:
            return None
        return self._stores.get(comp_type, {}).get(eid)

    def has(self, eid: int, comp_type: type) -> bool:
        return eid in self._stores.get(comp_type, {})

    # -- Queries --

    def query(self, *types: type) -> Iterator[tuple]:
        """Yield (eid, comp1, comp2, ...) for entities that have ALL types.

        Entities come out in spawn order so every scan (targeting,
        per-unit ticks) is stable from frame to frame.
        """
        if not types:
            return
        buckets = [self._stores.get(t, {}) for t in types]
        smallest = min(buckets, key=len)
        for eid in sorted(smallest):
            if eid in self._dead or eid < 0:
                continue
            if all(eid in b for b in buckets):
                yield (eid, *(self._stores[t][eid] for t in types))

    # -- Resources (singletons, not tied to entities) --

    def set_res(self, resource: Any):
        t = type(resource)
        if t not in self._stores:
            self._stores[t] = {}
        self._stores[t][-1] = resource

    def res(self, res_type: type) -> Any | None:
        return self._stores.get(res_type, {}).get(-1)

