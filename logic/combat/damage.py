"""logic/combat/damage.py — Combat resolution, death and respawn.

Every code-path that changes a unit's HP funnels through
``receive_interaction()`` so the parry roll, parry wear, status calls,
the death sequence and logging stay consistent.

``die()`` centralises the death pipeline (stop → corpse → DEAD stance)
and ``respawn()`` is its exact inverse.
"""

from __future__ import annotations
import random

from core.ecs import World
from core.events import EventBus, UnitDied, UnitRespawned
from core.tuning import get as _tun
from components import (
    Health, Parry, Mind, Equipment, Statuses, Collider, Appearance,
    GameClock, DevLog,
)
from logic.calls import CALL_STATUSES, UNTIL_CLEARED, call_key
from logic.combat import parry as _parry
from logic.combat.interaction import InteractionPayload, InteractionResult
from logic.movement import halt
from logic.teams import entity_display_name, team_colour
from logic.rules import Rulebook
from logic.decision import enter_stance, choose_stance


def _now(world: World) -> float:
    clock = world.res(GameClock)
    return clock.time if clock else 0.0


def _log(world: World, eid: int, cat: str, msg: str, details: dict | None = None) -> None:
    log = world.res(DevLog)
    if log:
        log.record(eid, cat, msg, name=entity_display_name(world, eid),
                   t=_now(world), details=details)


# ── Resolution ───────────────────────────────────────────────────────

def receive_interaction(world: World, eid: int, payload: InteractionPayload,
                        source: int | None = None) -> InteractionResult:
    """Resolve *payload* landing on unit *eid*.

    Offensive payloads roll against the parry rate: above it the blow
    lands for ``payload.value`` HP, otherwise every parry-capable item
    soaks it.  Both outcomes wear the parry rate down.  Non-offensive
    payloads heal.  A call the armour does not resist is taken; calls
    with a status apply it.  A corpse ignores everything and answers
    with an empty result.
    """
    health = world.get(eid, Health)
    parry = world.get(eid, Parry)
    equip = world.get(eid, Equipment)
    name = entity_display_name(world, eid)
    if not health.alive:
        health.current = 0.0
        _log(world, eid, "combat", "ignored: already dead", details={"source": source})
        return InteractionResult(0.0, False)
    applied = 0.0
    landed = True

    if payload.offensive:
        roll = random.random()
        rate = parry.current if parry else 0.0
        if roll > rate:
            health.current = min(health.maximum, health.current - payload.value)
            applied = payload.value
            _log(world, eid, "combat", f"hit for {payload.value:g}",
                 details={"source": source, "roll": round(roll, 3),
                          "parry": round(rate, 3), "hp": health.current})
        else:
            landed = False
            wear = min(1.0, max(0.0, payload.value * _tun("combat.parry", "shield_wear", 0.5)))
            if equip:
                for item in equip.parryables():
                    item.parry(world, eid, wear, source)
            _log(world, eid, "combat", "parried",
                 details={"source": source, "roll": round(roll, 3),
                          "parry": round(rate, 3)})
        if parry:
            _parry.take_hit(parry)
    else:
        before = health.current
        health.current = min(health.maximum, health.current + payload.value)
        applied = health.current - before

    call_taken = landed and _take_call(world, eid, payload.call, equip)

    if health.current <= 0:
        health.current = 0.0
        die(world, eid, killer=source)
    else:
        mind = world.get(eid, Mind)
        if mind:
            bound = _tun("decision", "reaction_bound", 1000.0)
            mind.rethink_timer = min(mind.rethink_timer, bound)

    if applied and payload.offensive and health.alive:
        print(f"[COMBAT] {name} takes {applied:g} ({health.current:g}/{health.maximum:g} HP)")
    return InteractionResult(float(applied), call_taken)


def _take_call(world: World, eid: int, call, equip: Equipment | None) -> bool:
    if call is None:
        return True
    if equip and equip.armour and equip.armour.resists(call):
        _log(world, eid, "combat", f"armour resists {call.name}")
        return False
    status = CALL_STATUSES.get(call_key(call))
    statuses = world.get(eid, Statuses)
    if status and statuses is not None:
        if call.duration == UNTIL_CLEARED:
            until = None
        else:
            until = _now(world) + call.duration * 1000.0
        statuses.add(status, until)
        _log(world, eid, "status", f"{status} ({call.name})", details={"until": until})
    return True


# ── Death / respawn ──────────────────────────────────────────────────

def die(world: World, eid: int, killer: int | None = None) -> None:
    """Turn a unit into a corpse and put it in the DEAD stance."""
    health = world.get(eid, Health)
    health.current = 0.0
    health.alive = False

    halt(world, eid)
    col = world.get(eid, Collider)
    if col:
        col.solid = False
        col.corpse = True
    app = world.get(eid, Appearance)
    if app:
        app.colour = _tun("unit", "corpse_colour", "#444444")

    mind = world.get(eid, Mind)
    rules = world.res(Rulebook)
    if mind is not None and rules is not None:
        dead = rules.stance("DEAD")
        if dead is not None:
            enter_stance(world, eid, dead)
        mind.target = None
        mind.rethink_timer = 0.0

    name = entity_display_name(world, eid)
    print(f"[COMBAT] {name} dies"
          + (f" (killed by {entity_display_name(world, killer)})" if killer else ""))
    _log(world, eid, "death", "died", details={"killer": killer})
    bus = world.res(EventBus)
    if bus:
        bus.emit(UnitDied(eid=eid, killer_eid=killer))


def respawn(world: World, eid: int) -> bool:
    """Bring a dead unit back at full HP.  Returns False for the living."""
    health = world.get(eid, Health)
    name = entity_display_name(world, eid)
    if health is None:
        print(f"[RESPAWN] {name} cannot respawn: not a combat unit")
        return False
    if health.alive:
        print(f"[RESPAWN] {name} is already alive")
        return False

    health.current = health.maximum
    health.alive = True

    col = world.get(eid, Collider)
    if col:
        col.solid = True
        col.corpse = False
    app = world.get(eid, Appearance)
    if app:
        app.colour = team_colour(world, eid)
    statuses = world.get(eid, Statuses)
    if statuses:
        statuses.active.clear()
    parry = world.get(eid, Parry)
    if parry:
        parry.maximum = parry.base_maximum
        parry.current = parry.base_maximum

    halt(world, eid)
    mind = world.get(eid, Mind)
    if mind:
        mind.target = None
        mind.rethink_timer = 0.0
        choose_stance(world, eid)

    print(f"[RESPAWN] {name} is back ({health.current:g} HP)")
    _log(world, eid, "respawn", "respawned")
    bus = world.res(EventBus)
    if bus:
        bus.emit(UnitRespawned(eid=eid))
    return True
