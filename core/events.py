"""core/events.py — Lightweight event bus.

Decouples the simulation from whatever draws it.  The bus lives as an
ECS resource::

    from core.events import EventBus
    bus = world.res(EventBus)
    bus.emit(UnitDied(eid=42, killer_eid=7))

A renderer subscribes with a callable::

    bus.subscribe("WeaponThrust", play_thrust_tween)

And the orchestrator drains once per frame::

    bus.drain()          # calls all handlers for pending events

Design rules:
  - Events are plain dataclasses — no behaviour.
  - ``emit()`` is O(1) (just appends).
  - ``drain()`` processes all queued events in FIFO order.
  - Handlers may emit new events; those are processed next drain.
  - No game state waits on a handler.  Events only *report* changes
    the simulation has already committed.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable
from collections import defaultdict


# ═══════════════════════════════════════════════════════════════════
#  Event definitions
# ═══════════════════════════════════════════════════════════════════

@dataclass
class StanceEntered:
    """A unit switched stance; ``face`` is the visual tag to show."""
    eid: int
    stance: str = ""
    face: str | None = None


@dataclass
class UnitDied:
    """A unit's HP dropped to zero."""
    eid: int
    killer_eid: int | None = None


@dataclass
class UnitRespawned:
    """A dead unit came back at full HP."""
    eid: int


@dataclass
class WeaponThrust:
    """A unit started swinging its current weapon (play the tween)."""
    eid: int
    weapon: str = ""
    target_eid: int | None = None
    duration: float = 0.0     # ms, wind-up + recovery


@dataclass
class AttackParried:
    """An offensive interaction was parried (flash the shield)."""
    eid: int
    attacker_eid: int | None = None
    item: str = ""


# ═══════════════════════════════════════════════════════════════════
#  Event Bus
# ═══════════════════════════════════════════════════════════════════

class EventBus:
    """Fire-and-forget event bus stored as an ECS resource."""

    def __init__(self):
        self._queue: list[Any] = []
        self._subs: dict[str, list[Callable]] = defaultdict(list)
        self._stats: dict[str, int] = defaultdict(int)

    # ── Public API ───────────────────────────────────────────────────

    def emit(self, event) -> None:
        """Queue an event for processing on next ``drain()``."""
        self._queue.append(event)

    def subscribe(self, event_type: str, handler: Callable) -> None:
        """Register *handler* to receive events of *event_type*.

        *event_type* is the class name, e.g. ``"UnitDied"``.
        """
        self._subs[event_type].append(handler)

    def drain(self) -> int:
        """Process all queued events.  Returns number processed.

        Handlers may emit new events — those are processed in the
        same drain pass (breadth-first).
        """
        processed = 0
        safety = 1000  # prevent infinite loops
        while self._queue and safety > 0:
            batch = self._queue[:]
            self._queue.clear()
            for event in batch:
                name = type(event).__name__
                self._stats[name] += 1
                for handler in self._subs.get(name, []):
                    try:
                        handler(event)
                    except Exception as exc:
                        print(f"[EVENT] handler error for {name}: {exc}")
                        import traceback; traceback.print_exc()
            processed += len(batch)
            safety -= 1
        return processed

    def pending(self, event_type: str | None = None) -> list[Any]:
        """Events waiting to be drained, optionally filtered by class name."""
        if event_type is None:
            return list(self._queue)
        return [e for e in self._queue if type(e).__name__ == event_type]

    def clear(self) -> None:
        """Discard all pending events."""
        self._queue.clear()

    def stats(self) -> dict[str, int]:
        """Return cumulative event counts by type."""
        return dict(self._stats)

    def pending_count(self) -> int:
        """Number of events waiting to be drained."""
        return len(self._queue)

    def __repr__(self) -> str:
        return f"EventBus(pending={len(self._queue)}, subs={len(self._subs)})"
