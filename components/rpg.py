"""components.rpg — Health, limbs, and statuses."""

from __future__ import annotations
from dataclasses import dataclass, field

from core.constants import LIMB_OK


@dataclass
class Health:
    """Hit points.  ``current == 0`` if and only if ``alive`` is False."""
    current: float = 3.0       # HP
    maximum: float = 3.0       # HP
    alive: bool = True


@dataclass
class Limbs:
    """Per-limb condition: ``ok``, ``ruined`` or ``missing``."""
    left_arm: str = LIMB_OK
    right_arm: str = LIMB_OK
    left_leg: str = LIMB_OK
    right_leg: str = LIMB_OK


@dataclass
class Statuses:
    """Active statuses → absolute expiry time (ms), ``None`` = until cleared."""
    active: dict[str, float | None] = field(default_factory=dict)

    def add(self, status: str, until: float | None = None) -> None:
        self.active[status] = until

    def clear(self, status: str) -> None:
        self.active.pop(status, None)

    def has(self, status: str) -> bool:
        return status in self.active

    def expire(self, now: float) -> list[str]:
        """Drop statuses whose expiry has passed.  Returns what was dropped."""
        gone = [s for s, t in self.active.items() if t is not None and now >= t]
        for s in gone:
            del self.active[s]
        return gone
