"""components.combat — Parry, weapons, shields, and armour."""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from core.events import EventBus, AttackParried


@dataclass
class Parry:
    """Chance to deflect an incoming offensive interaction.

    ``current`` always sits inside ``[minimum, maximum]``.  It recovers at
    ``recovery`` per second, drops by ``damage`` on every hit received
    (parried or not), and ``maximum`` is halved from ``base_maximum``
    while the unit is mid-swing.
    """
    current: float = 0.5
    minimum: float = 0.05
    maximum: float = 0.5
    base_maximum: float = 0.5
    recovery: float = 0.05        # rate/s
    damage: float = 0.1           # decrement per hit taken


# ── Capabilities ─────────────────────────────────────────────────────

class Parryable(ABC):
    """Equipment that reacts when its bearer parries a blow."""

    @abstractmethod
    def parry(self, world: Any, eid: int, damage: float,
              attacker_eid: int | None = None) -> None:
        """Absorb a parried blow of strength *damage* (0–1)."""


# ── Items ────────────────────────────────────────────────────────────

@dataclass
class Weapon:
    """A melee weapon.

    ``reach`` is already scaled to the wielder's size.  The swing is two
    phases: ``attack_time_start`` ends in contact, ``attack_time_end``
    brings the weapon back.  ``attacking`` blocks overlapping thrusts.
    """
    kind: str = "one_handed"
    reach: float = 24.0               # px
    attack_time_start: float = 160.0  # ms
    attack_time_end: float = 240.0    # ms
    attacking: bool = False


@dataclass
class Shield(Parryable):
    """Parry-capable off-hand item.

    ``active_level`` drops by the parried blow's strength and recovers at
    ``recovery_rate`` per second; the renderer tints by it.
    """
    active_level: float = 1.0
    recovery_rate: float = 0.3        # level/s
    kind: str = "shield"

    def parry(self, world, eid, damage, attacker_eid=None):
        if damage < 0 or damage > 1:
            raise ValueError(f"parry damage must be between 0 and 1, got {damage}")
        self.active_level = max(0.0, self.active_level - damage)
        bus = world.res(EventBus)
        if bus:
            bus.emit(AttackParried(eid=eid, attacker_eid=attacker_eid,
                                   item=self.kind))

    def recover(self, delta: float) -> None:
        """Regain active level over *delta* ms."""
        if self.active_level < 1.0:
            self.active_level = min(1.0, self.active_level
                                    + self.recovery_rate * (delta / 1000.0))


@dataclass
class Armour:
    """Worn armour: bonus HP (applied at spawn) and calls it shrugs off."""
    hp: float = 0.0
    resist_calls: tuple[str, ...] = ()
    kind: str = "armour"

    def resists(self, call) -> bool:
        return call is not None and call.name in self.resist_calls


@dataclass
class Equipment:
    """Everything a unit carries.

    Exactly one weapon is current at a time: ``weapons[current]``.
    """
    weapons: list[Weapon] = field(default_factory=list)
    current: int = 0
    shield: Shield | None = None
    armour: Armour | None = None

    def __post_init__(self):
        if not self.weapons:
            raise ValueError("equipment needs at least one weapon")
        if not 0 <= self.current < len(self.weapons):
            raise ValueError(f"current weapon index {self.current} out of range "
                             f"(0..{len(self.weapons) - 1})")

    @property
    def current_weapon(self) -> Weapon | None:
        if 0 <= self.current < len(self.weapons):
            return self.weapons[self.current]
        return None

    def items(self) -> list[Any]:
        """All carried items, weapons first."""
        out: list[Any] = list(self.weapons)
        if self.shield is not None:
            out.append(self.shield)
        if self.armour is not None:
            out.append(self.armour)
        return out

    def parryables(self) -> list[Parryable]:
        return [it for it in self.items() if isinstance(it, Parryable)]
