"""logic/combat/targeting.py — Target acquisition and landmark lookup.

Pure queries against the World — no mutations, no side effects.
Every lookup is a linear nearest-by-distance scan; ties go to the
first candidate encountered (spawn order), so results never depend on
randomness.
"""

from __future__ import annotations
import math
from typing import Iterable

from core.ecs import World
from core.constants import ENEMY
from core.tuning import get as _tun
from components import Position, Health, TeamMember
from logic.teams import team_of, relationship


def distance(world: World, a: int, b: int) -> float:
    """Centre-to-centre distance between two entities (inf if either has no Position)."""
    pa = world.get(a, Position)
    pb = world.get(b, Position)
    if pa is None or pb is None:
        return math.inf
    return math.hypot(pb.x - pa.x, pb.y - pa.y)


def choose_closest_unit(world: World, eid: int,
                        candidates: Iterable[int]) -> int | None:
    """Return the candidate nearest to *eid*, or None if there are none."""
    pos = world.get(eid, Position)
    if pos is None:
        return None
    best: int | None = None
    best_dsq = math.inf
    for cid in candidates:
        cpos = world.get(cid, Position)
        if cpos is None:
            continue
        dx = cpos.x - pos.x
        dy = cpos.y - pos.y
        dsq = dx * dx + dy * dy
        if dsq < best_dsq:
            best = cid
            best_dsq = dsq
    return best


def enemy_units(world: World, eid: int,
                radius: float | None = None) -> list[int]:
    """Living units *eid*'s team regards as enemies, within *radius*.

    *radius* defaults to ``decision.engagement_radius``.
    """
    if radius is None:
        radius = _tun("decision", "engagement_radius", 1000.0)
    pos = world.get(eid, Position)
    if pos is None:
        return []
    out = []
    for oid, opos, ohp, _member, dsq in world.nearby(pos.x, pos.y, radius,
                                                    Position, Health, TeamMember):
        if oid == eid or not ohp.alive:
            continue
        if relationship(world, eid, oid) == ENEMY:
            out.append(oid)
    return out


def choose_closest_enemy_unit(world: World, eid: int,
                              radius: float | None = None) -> int | None:
    return choose_closest_unit(world, eid, enemy_units(world, eid, radius))


def get_closest_respawn_point(world: World, eid: int) -> int | None:
    team = team_of(world, eid)
    if team is None or not team.respawn_points:
        return None
    return choose_closest_unit(world, eid, team.respawn_points)


def get_closest_rally_point(world: World, eid: int) -> int | None:
    team = team_of(world, eid)
    if team is None or not team.rally_points:
        return None
    return choose_closest_unit(world, eid, team.rally_points)
