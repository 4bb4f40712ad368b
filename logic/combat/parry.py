"""logic/combat/parry.py — Keeping the parry rate inside its bounds.

Every write to ``Parry.current`` goes through here so it always stays
within ``[minimum, maximum]``.
"""

from __future__ import annotations

from components import Parry


def check_bounds(parry: Parry) -> None:
    """Raise ``ValueError`` unless ``0 <= minimum <= maximum <= 1``."""
    if not 0.0 <= parry.minimum <= parry.maximum <= 1.0:
        raise ValueError(f"parry bounds must satisfy 0 <= minimum <= maximum <= 1, "
                         f"got minimum={parry.minimum} maximum={parry.maximum}")


def clamp(parry: Parry) -> None:
    parry.current = min(max(parry.current, parry.minimum), parry.maximum)


def recover(parry: Parry, delta: float) -> None:
    """Regain parry rate over *delta* ms, up to the current maximum."""
    if parry.current < parry.maximum:
        parry.current += parry.recovery * (delta / 1000.0)
    clamp(parry)


def take_hit(parry: Parry) -> None:
    """Getting hit is stressful, parried or not."""
    parry.current -= parry.damage
    clamp(parry)


def lower_guard(parry: Parry) -> None:
    """Mid-swing: the maximum halves and the current rate follows it down."""
    parry.maximum = max(parry.minimum, parry.base_maximum / 2.0)
    clamp(parry)


def restore_guard(parry: Parry) -> None:
    parry.maximum = parry.base_maximum
    clamp(parry)
