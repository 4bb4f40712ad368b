"""logic/calls.py — The catalog of combat calls.

A *call* is a named effect shouted with a blow or a spell: extra damage,
a limb break, a status.  The catalog is fixed and immutable; a Rulebook
gets its own reference to every entry via ``default_rulebook()``.

``CALL_STATUSES`` maps the calls that put a status on their victim.
"""

from __future__ import annotations
from dataclasses import dataclass
from types import MappingProxyType

from core.constants import STATUS_ENTANGLED, STATUS_PARALYSED

HEROIC = "Heroic"
MAGICAL = "Magical"

INSTANT = 0          # duration: no lasting effect
UNTIL_CLEARED = -1   # duration: lasts until something clears it


@dataclass(frozen=True)
class Call:
    name: str
    description: str
    category: str
    casting_time: float      # s
    duration: float          # s, or INSTANT / UNTIL_CLEARED
    value: float = 0.0

    @property
    def lasting(self) -> bool:
        return self.duration != INSTANT


CALLS = MappingProxyType({
    "CLEAVE": Call(
        "Cleave",
        "Powerful strike that breaks limbs and insta-downs foes with light armour or less.",
        HEROIC, 1, UNTIL_CLEARED, 1),
    "IMPALE": Call(
        "Impale",
        "Very powerful strike that breaks limbs and insta-downs foes with medium armour or less.",
        HEROIC, 1, UNTIL_CLEARED, 1),
    "STRIKEDOWN": Call(
        "Strike-Down",
        "Un-parryable heavy strike that knocks the target to the ground.",
        HEROIC, 1, INSTANT, 1),
    "EXECUTE": Call(
        "Execute",
        "Finish off a dying opponent.",
        HEROIC, 5, UNTIL_CLEARED, 0),
    "CURSE": Call(
        "Curse",
        "Lasting bad luck until a referee lifts it.",
        MAGICAL, 30, UNTIL_CLEARED, 0),
    "ENTANGLE": Call(
        "Entangle",
        "Rooted to the spot and cannot move.",
        MAGICAL, 30, 10, 0),
    "PARALYSE": Call(
        "Paralyse",
        "Cannot move at all.",
        MAGICAL, 30, 10, 0),
    "REPEL": Call(
        "Repel",
        "Pushed back for a short time.",
        MAGICAL, 30, 10, 0),
    "SHATTER": Call(
        "Shatter",
        "A magical force that breaks armour or weapons.",
        MAGICAL, 30, UNTIL_CLEARED, 0),
    "VENOM": Call(
        "Venom",
        "Poisoned: a very short count-down to death while dying.",
        MAGICAL, 30, UNTIL_CLEARED, 0),
    "WEAKNESS": Call(
        "Weakness",
        "Weakened and unable to use any calls.",
        MAGICAL, 30, UNTIL_CLEARED, 0),
})

CALL_STATUSES = MappingProxyType({
    "ENTANGLE": STATUS_ENTANGLED,
    "PARALYSE": STATUS_PARALYSED,
})


def call_key(call: Call) -> str | None:
    """Catalog id of *call* (``"ENTANGLE"`` for the Entangle call), or None."""
    for key, c in CALLS.items():
        if c is call or c == call:
            return key
    return None
