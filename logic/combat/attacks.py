"""logic/combat/attacks.py — The melee strike and its scheduled phases.

A strike is telegraphed: ``strike()`` starts the swing and posts three
deferred events to the ``WorldScheduler``.

    t0                    wind-up ends           recovery ends
    |--- attack_time_start ---|---- attack_time_end ----|
    strike()           STRIKE_CONTACT             WEAPON_RECOVERED
                       GUARD_RESTORE

The blow lands (through the interaction system) at the end of the
wind-up, and the striker's guard is lowered for the same span.
"""

from __future__ import annotations
import math

from core.ecs import World
from core.events import EventBus, WeaponThrust
from core.tuning import get as _tun
from components import (
    Position, Collider, Equipment, Parry, Mind, Health, GameClock, DevLog,
)
from logic.combat import parry as _parry
from logic.combat.interaction import InteractionPayload, interact
from logic.movement import stand_still, face_toward
from logic.teams import entity_display_name
from simulation.scheduler import WorldScheduler

STRIKE_CONTACT = "STRIKE_CONTACT"
GUARD_RESTORE = "GUARD_RESTORE"
WEAPON_RECOVERED = "WEAPON_RECOVERED"


def target_in_reach(world: World, eid: int, target: int | None) -> bool:
    """Centre distance minus the target's radius is within weapon reach."""
    equip = world.get(eid, Equipment)
    weapon = equip.current_weapon if equip else None
    pos = world.get(eid, Position)
    tpos = world.get(target, Position)
    if weapon is None or pos is None or tpos is None:
        return False
    col = world.get(target, Collider)
    gap = math.hypot(tpos.x - pos.x, tpos.y - pos.y) - (col.radius if col else 0.0)
    return gap <= weapon.reach


def strike(world: World, eid: int, target: int | None = None) -> bool:
    """Swing the current weapon at *target* (default: the unit's target).

    Out of reach, or still recovering from the last swing: warn and
    return False without touching anything.
    """
    mind = world.get(eid, Mind)
    if target is None and mind is not None:
        target = mind.target
    name = entity_display_name(world, eid)

    if target is None or not target_in_reach(world, eid, target):
        print(f"[COMBAT] {name}: strike aborted, target out of reach")
        return False
    equip = world.get(eid, Equipment)
    weapon = equip.current_weapon
    if weapon.attacking:
        print(f"[COMBAT] {name}: strike aborted, {weapon.kind} still recovering")
        return False

    stand_still(world, eid)
    tpos = world.get(target, Position)
    face_toward(world, eid, tpos.x, tpos.y)

    clock = world.res(GameClock)
    now = clock.time if clock else 0.0
    sched = world.res(WorldScheduler)
    wind_up = weapon.attack_time_start
    recovery = weapon.attack_time_end

    weapon.attacking = True
    bus = world.res(EventBus)
    if bus:
        bus.emit(WeaponThrust(eid=eid, weapon=weapon.kind, target_eid=target,
                              duration=wind_up + recovery))

    parry = world.get(eid, Parry)
    if parry:
        _parry.lower_guard(parry)

    value = _tun("combat.strike", "value", 1.0)
    if sched:
        sched.post(now + wind_up, eid, GUARD_RESTORE)
        sched.post(now + wind_up, eid, STRIKE_CONTACT,
                   {"target": target, "value": value})
        sched.post(now + wind_up + recovery, eid, WEAPON_RECOVERED,
                   {"weapon": equip.current})

    if mind is not None:
        mind.rethink_timer = _tun("combat.strike", "cooldown", 1000.0)
        if mind.motion_index is not None and mind.motion_index not in mind.completed_motions:
            mind.completed_motions.append(mind.motion_index)

    log = world.res(DevLog)
    if log:
        log.record(eid, "combat", f"strikes at {entity_display_name(world, target)}",
                   name=name, t=now, details={"weapon": weapon.kind})
    return True


# ── Scheduler handlers ───────────────────────────────────────────────

def on_strike_contact(world, eid, event_type, data, scheduler, game_time):
    """End of wind-up: deliver the blow."""
    health = world.get(eid, Health)
    if (health is not None and not health.alive
            and _tun("combat.strike", "cancel_on_attacker_death", False)):
        print(f"[COMBAT] {entity_display_name(world, eid)}: strike dropped, attacker died")
        return
    target = data.get("target")
    if target is None or not world.alive(target) or not world.has(target, Health):
        return
    payload = InteractionPayload(call=data.get("call"),
                                 value=data.get("value", 1.0),
                                 offensive=True)
    interact(world, eid, target, payload)


def on_guard_restore(world, eid, event_type, data, scheduler, game_time):
    parry = world.get(eid, Parry)
    if parry:
        _parry.restore_guard(parry)


def on_weapon_recovered(world, eid, event_type, data, scheduler, game_time):
    equip = world.get(eid, Equipment)
    if equip is None:
        return
    idx = data.get("weapon", equip.current)
    if 0 <= idx < len(equip.weapons):
        equip.weapons[idx].attacking = False


def register_strike_handlers(scheduler: WorldScheduler) -> None:
    scheduler.register_handler(STRIKE_CONTACT, on_strike_contact)
    scheduler.register_handler(GUARD_RESTORE, on_guard_restore)
    scheduler.register_handler(WEAPON_RECOVERED, on_weapon_recovered)
