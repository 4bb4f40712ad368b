"""logic/tick.py — System tick orchestration.

One call to ``tick_systems`` advances the whole battle by one frame:

    clock → scheduled events → every unit's tick → movement → event bus

Units tick in spawn order.  Each unit's turn runs to completion before
the next begins; interactions resolve synchronously inside the
attacker's turn.

Usage::

    from logic.tick import tick_systems
    tick_systems(world, 16.0)
"""

from __future__ import annotations
from typing import TYPE_CHECKING

from components import (
    GameClock, Mind, Parry, Equipment, Statuses, DevLog, Teams,
)
from core.events import EventBus
from logic.movement import movement_system
from logic.decision import think, choose_stance
from logic.combat import parry as _parry
from logic.teams import entity_display_name
from simulation.scheduler import WorldScheduler

if TYPE_CHECKING:
    from core.ecs import World


def tick_unit(world: "World", eid: int, time: float, delta: float) -> None:
    """Advance one unit by *delta* ms: recover, expire statuses, think."""
    parry = world.get(eid, Parry)
    if parry is not None:
        _parry.recover(parry, delta)

    equip = world.get(eid, Equipment)
    if equip is not None and equip.shield is not None:
        equip.shield.recover(delta)

    statuses = world.get(eid, Statuses)
    if statuses is not None:
        gone = statuses.expire(time)
        if gone:
            log = world.res(DevLog)
            if log:
                log.record(eid, "status", f"cleared {', '.join(gone)}",
                           name=entity_display_name(world, eid), t=time)

    think(world, eid, time, delta)


def tick_systems(world: "World", delta: float) -> None:
    """Run all battle systems for one frame of *delta* ms."""
    # Advance game clock
    clock = world.res(GameClock)
    if clock is None:
        clock = GameClock()
        world.set_res(clock)
    clock.time += delta
    now = clock.time

    # Deferred events (strike contact, guard restore, …)
    sched = world.res(WorldScheduler)
    if sched:
        sched.tick(world, now)

    # Decision engine
    for eid, _mind in world.query(Mind):
        tick_unit(world, eid, now, delta)

    # Physics
    movement_system(world, delta)

    # Entities removed for good leave the queue, their team and every mind
    removed = world.purge()
    if removed:
        _forget(world, removed, sched)

    # Event bus drain
    bus = world.res(EventBus)
    if bus:
        bus.drain()


def _forget(world: "World", removed: list[int], sched: WorldScheduler | None) -> None:
    gone = set(removed)
    for eid in removed:
        if sched:
            sched.cancel_entity(eid)
    teams = world.res(Teams)
    if teams:
        for team in teams:
            team.units -= gone
            team.respawn_points[:] = [p for p in team.respawn_points if p not in gone]
            team.rally_points[:] = [p for p in team.rally_points if p not in gone]
    for eid, mind in world.query(Mind):
        if mind.target in gone:
            mind.target = None
            choose_stance(world, eid)
    print(f"[SIM] removed {len(removed)} entities: {removed}")
