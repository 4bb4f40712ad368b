"""logic/decision.py — The Stance → Action → Motion decision engine.

Each unit runs a three-level state machine whose definitions come from
the ``Rulebook`` resource and whose progress lives in its ``Mind``:

    choose_stance        what the unit wants       (CHARGE, RALLY, …)
    choose_next_action   the next step toward it   (ATTACK, MOVE_TO_TARGET, …)
    choose_next_motion   the next timed move       (CHOOSE_TARGET, STRIKE, …)

A stance is done once all of its primary actions have completed; the
engine then picks a fresh stance.  When nothing is eligible the unit
falls back to the rulebook's idle action.  The motion/action retries
are loops bounded by ``decision.max_rethink_depth``, so a misconfigured
rulebook can stall a unit but never hang the battle.
"""

from __future__ import annotations

from core.ecs import World
from core.events import EventBus, StanceEntered
from core.tuning import get as _tun
from components import Mind, Health, Appearance, GameClock, DevLog
from logic.rules import Rulebook, Action, Motion, Stance
from logic.teams import entity_display_name
from logic.movement import stand_still
from logic.combat.targeting import (
    choose_closest_enemy_unit, get_closest_respawn_point, get_closest_rally_point,
)


def _log(world: World, eid: int, cat: str, msg: str, details: dict | None = None) -> None:
    log = world.res(DevLog)
    if log:
        clock = world.res(GameClock)
        log.record(eid, cat, msg, name=entity_display_name(world, eid),
                   t=clock.time if clock else 0.0, details=details)


def _max_depth() -> int:
    return int(_tun("decision", "max_rethink_depth", 8))


# ── Stance ───────────────────────────────────────────────────────────

def enter_stance(world: World, eid: int, stance: Stance) -> None:
    """Switch stance and forget all progress made in the old one."""
    mind = world.get(eid, Mind)
    mind.stance = stance
    mind.action = None
    mind.completed_actions.clear()
    mind.motion_index = None
    mind.completed_motions.clear()

    app = world.get(eid, Appearance)
    if app is not None:
        app.face = stance.face

    bus = world.res(EventBus)
    if bus:
        bus.emit(StanceEntered(eid=eid, stance=stance.name, face=stance.face))
    _log(world, eid, "stance", f"→ {stance.name}", details={"target": mind.target})


def choose_stance(world: World, eid: int) -> Stance | None:
    """Pick the stance that fits the unit's situation and enter it.

    Priority: dead (respawn point → RESPAWN, else DEAD) → enemy in
    range (CHARGE) → team rally point (RALLY) → RELAXED.
    """
    mind = world.get(eid, Mind)
    rules = world.res(Rulebook)
    health = world.get(eid, Health)

    if health is not None and not health.alive:
        point = get_closest_respawn_point(world, eid)
        if point is not None:
            mind.target = point
            key = "RESPAWN"
        else:
            key = "DEAD"
    else:
        enemy = choose_closest_enemy_unit(world, eid)
        rally = get_closest_rally_point(world, eid) if enemy is None else None
        if enemy is not None:
            mind.target = enemy
            key = "CHARGE"
        elif rally is not None:
            mind.target = rally
            key = "RALLY"
        else:
            key = "RELAXED"

    stance = rules.stance(key) if rules else None
    if stance is None:
        print(f"[DECISION] {entity_display_name(world, eid)}: no {key} stance in rulebook")
        _log(world, eid, "fallback", f"missing stance {key}")
        return None
    enter_stance(world, eid, stance)
    return stance


# ── Action ───────────────────────────────────────────────────────────

def check_action_conditions(world: World, eid: int, action: Action) -> bool:
    """Is *action* eligible right now in the unit's current stance?

    Primary actions are capped at the number of times the stance lists
    them; with an enforced order the entries before this one must
    already be completed, in order.  Then every condition must hold.
    """
    mind = world.get(eid, Mind)
    rules = world.res(Rulebook)
    stance = mind.stance

    if stance is not None and stance.is_primary(action):
        done = sum(1 for a in mind.completed_actions if a is action)
        if done >= stance.occurrences(action):
            return False
        if stance.enforce_primary_action_order:
            positions = [i for i, a in enumerate(stance.primary_actions) if a is action]
            i = positions[done]
            if list(mind.completed_actions[:i]) != list(stance.primary_actions[:i]):
                return False

    if rules is None:
        return not action.conditions
    return all(rules.evaluate(c, world, eid) for c in action.conditions)


def _select_action(world: World, eid: int, stance: Stance) -> Action | None:
    for action in stance.primary_actions:
        if check_action_conditions(world, eid, action):
            return action
    for action in stance.supporting_actions:
        if check_action_conditions(world, eid, action):
            return action
    return None


def choose_next_action(world: World, eid: int) -> Action:
    """Close out the current action and pick the next one.

    A finished primary action is recorded; supporting actions are not.
    A fulfilled stance triggers ``choose_stance`` before picking.
    Always returns an action (the idle action if nothing else fits).
    """
    mind = world.get(eid, Mind)
    rules = world.res(Rulebook)

    finished = mind.action
    mind.completed_motions.clear()
    mind.motion_index = None
    mind.action = None

    stance = mind.stance
    if finished is not None and stance is not None and stance.is_primary(finished):
        done = sum(1 for a in mind.completed_actions if a is finished)
        if done < stance.occurrences(finished):
            mind.completed_actions.append(finished)

    chosen: Action | None = None
    for _ in range(_max_depth()):
        stance = mind.stance
        if stance is None or len(mind.completed_actions) >= len(stance.primary_actions):
            if choose_stance(world, eid) is None:
                break
            continue
        chosen = _select_action(world, eid, stance)
        break
    else:
        print(f"[DECISION] {entity_display_name(world, eid)}: "
              f"no progress after {_max_depth()} stance changes")

    if chosen is None:
        chosen = rules.idle_action
        _log(world, eid, "fallback", f"idle ({chosen.name})",
             details={"stance": getattr(mind.stance, "name", None)})
    else:
        _log(world, eid, "action", chosen.name)

    mind.action = chosen
    return chosen


# ── Motion ───────────────────────────────────────────────────────────

def choose_next_motion(world: World, eid: int) -> Motion:
    """Close out the current motion and make the next one current.

    The next motion is the first one of the current action not yet
    completed; its duration becomes the rethink timer.  An exhausted
    action rolls over into ``choose_next_action``.
    """
    mind = world.get(eid, Mind)
    rules = world.res(Rulebook)

    for _ in range(_max_depth()):
        if mind.motion_index is not None and mind.motion_index not in mind.completed_motions:
            mind.completed_motions.append(mind.motion_index)
        mind.motion_index = None

        action = mind.action
        if action is not None:
            for i, motion in enumerate(action.motions):
                if i not in mind.completed_motions:
                    mind.motion_index = i
                    mind.rethink_timer = motion.duration
                    return motion
        choose_next_action(world, eid)

    print(f"[DECISION] {entity_display_name(world, eid)}: "
          f"no motion after {_max_depth()} actions, idling")
    idle = rules.idle_action
    mind.action = idle
    mind.completed_motions.clear()
    mind.motion_index = 0
    mind.rethink_timer = idle.motions[0].duration
    _log(world, eid, "fallback", f"idle motion ({idle.motions[0].name})")
    return idle.motions[0]


def execute_motion(world: World, eid: int, motion: Motion,
                   time: float, delta: float) -> None:
    """Run *motion*'s executor.  A failing executor leaves the unit standing."""
    try:
        motion.execute(world, eid, time, delta)
    except Exception as exc:
        print(f"[DECISION] {entity_display_name(world, eid)}: "
              f"motion {motion.name} failed: {exc!r}")
        _log(world, eid, "fallback", f"{motion.name} failed", details={"error": repr(exc)})
        stand_still(world, eid)


def think(world: World, eid: int, time: float, delta: float) -> None:
    """Count the rethink timer down and act when it runs out."""
    mind = world.get(eid, Mind)
    if mind is None:
        return
    mind.rethink_timer -= delta
    if mind.rethink_timer <= 0 or mind.motion is None:
        motion = choose_next_motion(world, eid)
        execute_motion(world, eid, motion, time, delta)
