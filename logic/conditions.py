"""logic/conditions.py — Condition handlers.

Each handler answers one yes/no question about a unit and has the
signature ``handler(world, eid) -> bool``.  Handlers are pure: they
read components and never write them.  Composite handlers call the
simpler ones directly.

``default_rulebook()`` wraps these in ``Condition`` objects.
"""

from __future__ import annotations

from core.ecs import World
from core.constants import (
    LIMB_OK, LANDMARK_RESPAWN,
    STATUS_PARALYSED, STATUS_ENTANGLED, STATUS_DYING,
)
from components import (
    Mind, Position, Health, Limbs, Statuses, Equipment, Landmark,
)
from logic.teams import team_of
from logic.combat.attacks import target_in_reach


def _limbs(world: World, eid: int) -> Limbs:
    return world.get(eid, Limbs) or Limbs()


def target_exists(world: World, eid: int) -> bool:
    mind = world.get(eid, Mind)
    if mind is None or mind.target is None:
        return False
    return world.alive(mind.target) and world.has(mind.target, Position)


def target_in_los(world: World, eid: int) -> bool:
    # Open field: nothing blocks sight.
    return target_exists(world, eid)


def in_range(world: World, eid: int) -> bool:
    if not target_exists(world, eid):
        return False
    return target_in_reach(world, eid, world.get(eid, Mind).target)


def have_weapon(world: World, eid: int) -> bool:
    equip = world.get(eid, Equipment)
    return equip is not None and equip.current_weapon is not None


def have_2_arms(world: World, eid: int) -> bool:
    limbs = _limbs(world, eid)
    return limbs.left_arm == LIMB_OK and limbs.right_arm == LIMB_OK


def have_1_arm(world: World, eid: int) -> bool:
    limbs = _limbs(world, eid)
    return limbs.left_arm == LIMB_OK or limbs.right_arm == LIMB_OK


def have_2_legs(world: World, eid: int) -> bool:
    limbs = _limbs(world, eid)
    return limbs.left_leg == LIMB_OK and limbs.right_leg == LIMB_OK


def have_1_leg(world: World, eid: int) -> bool:
    limbs = _limbs(world, eid)
    return limbs.left_leg == LIMB_OK or limbs.right_leg == LIMB_OK


def can_move(world: World, eid: int) -> bool:
    # Not gated on death: the dead walk to their respawn point.
    if not have_2_legs(world, eid):
        return False
    statuses = world.get(eid, Statuses)
    if statuses is None:
        return True
    return not (statuses.has(STATUS_PARALYSED)
                or statuses.has(STATUS_ENTANGLED)
                or statuses.has(STATUS_DYING))


def can_attack(world: World, eid: int) -> bool:
    return have_weapon(world, eid) and have_1_arm(world, eid)


def is_dead(world: World, eid: int) -> bool:
    health = world.get(eid, Health)
    return health is not None and not health.alive


def near_respawn_point(world: World, eid: int) -> bool:
    """Closer than a respawn point's size to any of the team's respawn points."""
    team = team_of(world, eid)
    pos = world.get(eid, Position)
    if team is None or pos is None:
        return False
    for lid in team.respawn_points:
        lpos = world.get(lid, Position)
        mark = world.get(lid, Landmark)
        if lpos is None or mark is None or mark.kind != LANDMARK_RESPAWN:
            continue
        dx = lpos.x - pos.x
        dy = lpos.y - pos.y
        if dx * dx + dy * dy < mark.size * mark.size:
            return True
    return False


def target_is_alive(world: World, eid: int) -> bool:
    mind = world.get(eid, Mind)
    if mind is None or mind.target is None or not world.alive(mind.target):
        return False
    health = world.get(mind.target, Health)
    return health is not None and health.alive
