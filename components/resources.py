"""components.resources — World-level singletons (not per-entity)."""

from __future__ import annotations
from dataclasses import dataclass


@dataclass
class GameClock:
    """Monotonic battle time in milliseconds.

    Single source of truth for status expiry and scheduled events.
    Advanced once per frame by ``tick_systems``.
    """
    time: float = 0.0        # ms


@dataclass
class Arena:
    """Battlefield bounds.  Units are clamped inside ``[0, width] × [0, height]``.

    ``debug`` is the host's debug-draw flag; the simulation only passes
    it through.
    """
    width: float = 800.0     # px
    height: float = 600.0    # px
    debug: bool = False
