"""logic/entity_factory.py — Building units and landmarks.

``spawn_unit`` assembles the full component set of a fighting unit
from keyword arguments, falling back to ``data/tuning.toml`` for every
number.  ``spawn_from_descriptor`` does the same from a scenario-file
dict, casting fields through a small schema table.

Weapon reach scales with the wielder's size:

    kind         reach factor
    one_handed   0.6
    two_handed   0.8
    spear        1.0
"""

from __future__ import annotations
from typing import Any, Callable

from core.ecs import World
from core.tuning import get as _tun
from core.constants import LANDMARK_RESPAWN, LANDMARK_RALLY
from components import (
    Position, Velocity, Facing, Collider, Mover, Identity, Appearance,
    Health, Limbs, Statuses, Parry, Weapon, Shield, Armour, Equipment,
    Mind, Teams, Landmark, WaitingArea,
)
from logic.calls import CALLS
from logic.combat import parry as _parry
from logic.rules import Rulebook
from logic.teams import set_team, team_of
from logic.decision import enter_stance

WEAPON_KINDS = ("one_handed", "two_handed", "spear")
_REACH_FACTORS = {"one_handed": 0.6, "two_handed": 0.8, "spear": 1.0}


# ── Field-schema helpers ─────────────────────────────────────────────

def _float(v: Any, default: float = 0.0) -> float:
    try:
        return float(v)
    except (TypeError, ValueError):
        return default


def _bool(v: Any, default: bool = False) -> bool:
    return bool(v) if v is not None else default


def _str(v: Any, default: str = "") -> str:
    return str(v) if v is not None else default


# ── Equipment ────────────────────────────────────────────────────────

def make_weapon(kind: str, size: float | None = None) -> Weapon:
    """A weapon of *kind* sized for a unit of *size* px."""
    if kind not in WEAPON_KINDS:
        raise ValueError(f"unknown weapon kind {kind!r}; expected one of {', '.join(WEAPON_KINDS)}")
    if size is None:
        size = _tun("unit", "size", 40.0)
    sec = f"equipment.{kind}"
    return Weapon(
        kind=kind,
        reach=size * _tun(sec, "reach_factor", _REACH_FACTORS[kind]),
        attack_time_start=_tun(sec, "attack_time_start", 160.0),
        attack_time_end=_tun(sec, "attack_time_end", 240.0),
    )


def make_armour(hp: float = 0.0, resist: list[str] | tuple[str, ...] = ()) -> Armour:
    """Armour granting *hp* bonus HP and resisting the calls keyed in *resist*."""
    names = []
    for key in resist:
        call = CALLS.get(key)
        if call is None:
            raise ValueError(f"unknown call {key!r}")
        names.append(call.name)
    return Armour(hp=hp, resist_calls=tuple(names))


# ── Units ────────────────────────────────────────────────────────────

def spawn_unit(world: World, x: float, y: float, team: str | None = None, *,
               name: str = "",
               size: float | None = None,
               hp: float | None = None,
               move_speed: float | None = None,
               weapons: list[str] | tuple[str, ...] = ("one_handed",),
               shield: bool = False,
               armour: Armour | None = None,
               parry: dict | None = None) -> int:
    """Create a living unit at (x, y) in the RELAXED stance.

    The unit thinks on its first tick.  Returns the new entity id.
    Raises ``ValueError`` for an empty weapon list or parry overrides
    outside ``0 <= minimum <= maximum <= 1``; ``current`` is clamped.
    """
    if size is None:
        size = _tun("unit", "size", 40.0)
    if hp is None:
        hp = _tun("unit", "hp", 3.0)
    if move_speed is None:
        move_speed = _tun("unit", "move_speed", 150.0)
    parry = parry or {}
    if not weapons:
        raise ValueError("a unit needs at least one weapon")
    kit = [make_weapon(k, size) for k in weapons]

    p_max = _float(parry.get("maximum"), _tun("combat.parry", "max_rate", 0.5))
    guard = Parry(
        current=_float(parry.get("current"), p_max),
        minimum=_float(parry.get("minimum"), _tun("combat.parry", "min_rate", 0.05)),
        maximum=p_max,
        base_maximum=p_max,
        recovery=_float(parry.get("recovery"), _tun("combat.parry", "recovery", 0.05)),
        damage=_float(parry.get("damage"), _tun("combat.parry", "damage", 0.1)),
    )
    _parry.check_bounds(guard)
    _parry.clamp(guard)

    eid = world.spawn()
    world.add(eid, Identity(name=name or f"unit_{eid}", kind="unit"))
    world.add(eid, Position(x, y))
    world.add(eid, Velocity())
    world.add(eid, Facing())
    world.add(eid, Collider(radius=size / 2.0))
    world.add(eid, Mover(move_speed=move_speed,
                         acceleration=_tun("unit", "acceleration", 800.0)))
    world.add(eid, Appearance())
    world.add(eid, Limbs())
    world.add(eid, Statuses())
    world.add(eid, guard)

    equip = Equipment(weapons=kit)
    if shield:
        equip.shield = Shield(recovery_rate=_tun("equipment.shield", "recovery_rate", 0.3))
    equip.armour = armour
    world.add(eid, equip)

    total = hp + (armour.hp if armour else 0.0)
    world.add(eid, Health(current=total, maximum=total, alive=True))

    rules = world.res(Rulebook)
    mind = Mind()
    world.add(eid, mind)
    if team is not None:
        set_team(world, eid, team)
    if rules is not None:
        relaxed = rules.stance("RELAXED")
        if relaxed is not None:
            enter_stance(world, eid, relaxed)
    return eid


# ── Landmarks ────────────────────────────────────────────────────────

def _spawn_landmark(world: World, kind: str, x: float, y: float, team: str,
                    size: float | None) -> int:
    teams = world.res(Teams)
    owner = teams.get(team) if teams else None
    if owner is None:
        raise ValueError(f"unknown team {team!r}")
    if size is None:
        size = _tun("landmarks", "size", 100.0)
    eid = world.spawn()
    world.add(eid, Identity(name=f"{team}_{kind}_{eid}", kind="landmark"))
    world.add(eid, Position(x, y))
    world.add(eid, Landmark(kind=kind, team=team, size=size))
    if kind == LANDMARK_RESPAWN:
        world.add(eid, WaitingArea(capacity=int(_tun("landmarks", "waiting_area_size", 2))))
        owner.respawn_points.append(eid)
    else:
        owner.rally_points.append(eid)
    print(f"[TEAM] {team} {kind} point at ({x:.0f}, {y:.0f})")
    return eid


def spawn_respawn_point(world: World, x: float, y: float, team: str,
                        size: float | None = None) -> int:
    return _spawn_landmark(world, LANDMARK_RESPAWN, x, y, team, size)


def spawn_rally_point(world: World, x: float, y: float, team: str,
                      size: float | None = None) -> int:
    return _spawn_landmark(world, LANDMARK_RALLY, x, y, team, size)


# ── Scenario descriptors ─────────────────────────────────────────────
# field → (cast, default); ``None`` defaults defer to tuning.

_UNIT_SCHEMA: dict[str, tuple[Callable, Any]] = {
    "x":          (_float, 0.0),
    "y":          (_float, 0.0),
    "team":       (lambda v, d: _str(v, d) or None, None),
    "name":       (_str, ""),
    "size":       (lambda v, d: _float(v, d) if v is not None else d, None),
    "hp":         (lambda v, d: _float(v, d) if v is not None else d, None),
    "move_speed": (lambda v, d: _float(v, d) if v is not None else d, None),
    "shield":     (_bool, False),
}


def spawn_from_descriptor(world: World, desc: dict) -> list[int]:
    """Spawn the unit(s) a scenario ``[[units]]`` block describes.

    ``count`` repeats the unit, spaced ``spacing`` px apart vertically.
    Unknown weapon kinds, unknown call ids, an empty ``weapons`` list
    and bad parry bounds raise ``ValueError``.
    """
    kwargs = {}
    for key, (cast, default) in _UNIT_SCHEMA.items():
        kwargs[key] = cast(desc.get(key), default)

    weapons = desc.get("weapons")
    if weapons is None:
        weapons = [desc.get("weapon", "one_handed")]
    arm = desc.get("armour")

    count = int(desc.get("count", 1))
    spacing = _float(desc.get("spacing"), 50.0)
    out = []
    for i in range(count):
        name = kwargs["name"]
        if name and count > 1:
            name = f"{name}_{i + 1}"
        out.append(spawn_unit(
            world, kwargs["x"], kwargs["y"] + i * spacing, kwargs["team"],
            name=name, size=kwargs["size"], hp=kwargs["hp"],
            move_speed=kwargs["move_speed"], weapons=weapons,
            shield=kwargs["shield"], parry=desc.get("parry"),
            armour=make_armour(_float(arm.get("hp"), 0.0), arm.get("resist", ())) if arm else None,
        ))
    return out


def describe_unit(world: World, eid: int) -> dict:
    """Snapshot of a unit for summaries and debugging."""
    ident = world.get(eid, Identity)
    health = world.get(eid, Health)
    pos = world.get(eid, Position)
    mind = world.get(eid, Mind)
    team = team_of(world, eid)
    return {
        "eid": eid,
        "name": ident.name if ident else "",
        "team": team.name if team else None,
        "hp": health.current if health else None,
        "alive": health.alive if health else None,
        "x": round(pos.x, 1) if pos else None,
        "y": round(pos.y, 1) if pos else None,
        "state": mind.describe() if mind else "",
    }
