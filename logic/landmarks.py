"""logic/landmarks.py — Respawn-point waiting areas."""

from __future__ import annotations

from core.ecs import World
from components import WaitingArea, Landmark, GameClock, DevLog
from logic.teams import entity_display_name
from logic.combat.damage import respawn


def enter_waiting_area(world: World, point: int, eid: int) -> list[int]:
    """Queue dead unit *eid* at respawn point *point*.

    A unit already queued is not added twice.  Once the queue reaches
    capacity every queued unit respawns and the queue empties.  Returns
    the units that respawned (empty while still waiting).
    """
    area = world.get(point, WaitingArea)
    if area is None:
        raise TypeError(f"entity {point} has no waiting area")
    if eid not in area.queue:
        area.queue.append(eid)

    log = world.res(DevLog)
    if log:
        clock = world.res(GameClock)
        log.record(eid, "respawn", f"waiting ({len(area.queue)}/{area.capacity})",
                   name=entity_display_name(world, eid),
                   t=clock.time if clock else 0.0, details={"point": point})

    if not area.full:
        return []

    mark = world.get(point, Landmark)
    team = mark.team if mark else "?"
    print(f"[RESPAWN] {team} waiting area full, respawning {len(area.queue)} units")
    batch = list(area.queue)
    area.queue.clear()
    return [u for u in batch if respawn(world, u)]
