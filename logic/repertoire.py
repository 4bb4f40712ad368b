"""logic/repertoire.py — The built-in behaviour catalog.

``default_rulebook()`` assembles every call, condition, motion, action
and stance the battle uses into a fresh ``Rulebook``.  Tests build
variants by calling it and then replacing entries.

Motion executors have the signature ``execute(world, eid, time, delta)``
and run once, when the motion becomes current.
"""

from __future__ import annotations
import math

from core.ecs import World
from core.constants import LANDMARK_RESPAWN
from core.tuning import get as _tun
from components import Mind, Position, Health, Landmark, WaitingArea
from logic import conditions as cond
from logic.calls import CALLS
from logic.rules import Rulebook, Condition, Motion, Action, Stance
from logic.movement import move_to, stand_still
from logic.landmarks import enter_waiting_area
from logic.teams import entity_display_name
from logic.combat.attacks import strike
from logic.combat.targeting import choose_closest_enemy_unit
from logic.decision import choose_stance


# ── Motion executors ─────────────────────────────────────────────────

def do_choose_target(world: World, eid: int, time: float, delta: float) -> None:
    """Swap a dead unit target for the nearest living enemy.

    With no enemy left the charge is over and the unit re-plans.
    """
    mind = world.get(eid, Mind)
    target_hp = world.get(mind.target, Health)
    if target_hp is None or target_hp.alive:
        return
    enemy = choose_closest_enemy_unit(world, eid)
    if enemy is not None:
        mind.target = enemy
    else:
        mind.target = None
        choose_stance(world, eid)


def do_move_to(world: World, eid: int, time: float, delta: float) -> None:
    mind = world.get(eid, Mind)
    tpos = world.get(mind.target, Position)
    pos = world.get(eid, Position)
    if tpos is None or pos is None:
        stand_still(world, eid)
        return
    if math.hypot(tpos.x - pos.x, tpos.y - pos.y) <= _tun("unit", "arrive_radius", 4.0):
        stand_still(world, eid)
        return
    move_to(world, eid, tpos.x, tpos.y)


def do_step_backward(world: World, eid: int, time: float, delta: float) -> None:
    """Back away from the target along the facing line."""
    mind = world.get(eid, Mind)
    tpos = world.get(mind.target, Position)
    pos = world.get(eid, Position)
    if tpos is None or pos is None:
        stand_still(world, eid)
        return
    move_to(world, eid, 2 * pos.x - tpos.x, 2 * pos.y - tpos.y)


def do_strike(world: World, eid: int, time: float, delta: float) -> None:
    strike(world, eid)


def do_stand_still(world: World, eid: int, time: float, delta: float) -> None:
    stand_still(world, eid)


def do_touch_respawn(world: World, eid: int, time: float, delta: float) -> None:
    """Join the queue at the respawn point being targeted."""
    stand_still(world, eid)
    mind = world.get(eid, Mind)
    mark = world.get(mind.target, Landmark)
    if mark is None or mark.kind != LANDMARK_RESPAWN or not world.has(mind.target, WaitingArea):
        print(f"[RESPAWN] {entity_display_name(world, eid)}: target is not a respawn point")
        return
    enter_waiting_area(world, mind.target, eid)


# ── Catalog ──────────────────────────────────────────────────────────

def default_rulebook() -> Rulebook:
    """Build the standard rulebook: the call catalog and all behaviour."""
    rb = Rulebook()

    for key, call in CALLS.items():
        rb.add_call(key, call)

    # Conditions
    C = rb.add_condition
    C("RANGE", Condition("Range", "Target is within weapon reach", cond.in_range))
    C("TARGET_EXISTS", Condition("Target exists", "Has a target with a position",
                                 cond.target_exists))
    C("TARGET_IN_LOS", Condition("Target in LOS", "Target is in line of sight",
                                 cond.target_in_los))
    C("CAN_MOVE", Condition("Can move", "Two legs, not paralysed, entangled or dying",
                            cond.can_move))
    C("CAN_ATTACK", Condition("Can attack", "Has a weapon and an arm to swing it",
                              cond.can_attack))
    C("IS_DEAD", Condition("Is dead", "Unit is dead", cond.is_dead))
    C("HAVE_WEAPON", Condition("Have weapon", "Holds a current weapon", cond.have_weapon))
    C("HAVE_2_ARMS", Condition("Have 2 arms", "Both arms OK", cond.have_2_arms))
    C("HAVE_1_ARM", Condition("Have 1 arm", "At least one arm OK", cond.have_1_arm))
    C("HAVE_2_LEGS", Condition("Have 2 legs", "Both legs OK", cond.have_2_legs))
    C("HAVE_1_LEG", Condition("Have 1 leg", "At least one leg OK", cond.have_1_leg))
    C("NEAR_RESPAWN_POINT", Condition("Near respawn point",
                                      "Inside one of the team's respawn points",
                                      cond.near_respawn_point))
    C("TARGET_IS_ALIVE", Condition("Target is alive", "Target is a living unit",
                                   cond.target_is_alive))
    c = rb.conditions

    # Motions (ms)
    M = rb.add_motion
    M("CHOOSE_TARGET", Motion("Choose Target", "Pick who to engage", 1, do_choose_target))
    M("MOVE_TO", Motion("Move To", "Head for the target", 50, do_move_to))
    M("STEP_FORWARD", Motion("Step Forward", "Close the distance", 50, do_move_to))
    M("STEP_BACKWARD", Motion("Step Backward", "Open the distance", 50, do_step_backward))
    M("STRIKE", Motion("Strike", "Swing the melee weapon", 1000, do_strike))
    M("IDLE", Motion("Idle", "Stand relaxed", 2000, do_stand_still))
    M("IDLE_IMPATIENT", Motion("Idle Impatiently", "Stand, ready to act", 100, do_stand_still))
    M("IDLE_FOREVER", Motion("Idle Forever", "Wait until something happens",
                             math.inf, do_stand_still))
    M("DEAD", Motion("Dead", "Lie on the field", 10_000, do_stand_still))
    M("TOUCH_RESPAWN", Motion("Respawn", "Report at the respawn point", 1, do_touch_respawn))
    m = rb.motions

    # Actions
    A = rb.add_action
    A("MOVE_TO_TARGET", Action("Move To Target", "Walk toward the target",
                               [m["CHOOSE_TARGET"], m["MOVE_TO"]],
                               [c["TARGET_EXISTS"], c["CAN_MOVE"]]))
    A("ATTACK", Action("Attack", "Melee the target",
                       [m["CHOOSE_TARGET"], m["STRIKE"]],
                       [c["TARGET_EXISTS"], c["TARGET_IN_LOS"], c["HAVE_WEAPON"],
                        c["CAN_ATTACK"], c["RANGE"], c["TARGET_IS_ALIVE"]]))
    A("RELAX", Action("Relax", "Take a moment", [m["IDLE"]]))
    A("STAND", Action("Stand", "Wait for something to do", [m["IDLE_IMPATIENT"]]))
    A("STAY_DEAD", Action("Stay Dead", "Lie dead a while",
                          [m["DEAD"]], [c["IS_DEAD"]]))
    A("RESPAWN", Action("Respawn", "Queue at the respawn point",
                        [m["TOUCH_RESPAWN"], m["IDLE_FOREVER"]],
                        [c["IS_DEAD"], c["NEAR_RESPAWN_POINT"]]))
    a = rb.actions
    rb.set_idle_action("STAND")

    # Stances
    S = rb.add_stance
    S("CHARGE", Stance("Charge", "Close in and fight the nearest enemy",
                       [a["ATTACK"]], False, [a["MOVE_TO_TARGET"]], "angry_shout"))
    S("RELAXED", Stance("Relaxed", "Nothing to do", [a["RELAX"]], face="smile"))
    S("DEAD", Stance("Dead", "Lying on the field", [a["STAY_DEAD"]], face="dead"))
    S("RESPAWN", Stance("Respawn", "Walk to the respawn point and wait",
                        [a["RESPAWN"]], True, [a["MOVE_TO_TARGET"]], "dead"))
    S("RALLY", Stance("Rally", "Gather at the rally point",
                      [a["MOVE_TO_TARGET"]], face="smile"))
    return rb
