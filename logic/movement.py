"""logic/movement.py — Locomotion intents and the physics step.

Units never set their own position.  Motions express *intent* through
``move_to`` / ``stand_still`` / ``halt``; ``movement_system`` turns
intent into velocity, nudges overlapping bodies apart and keeps
everyone inside the arena.
"""

from __future__ import annotations
import math

from core.ecs import World
from core.tuning import get as _tun
from components import Position, Velocity, Facing, Collider, Mover, Arena


# ── Intents ──────────────────────────────────────────────────────────

def face_toward(world: World, eid: int, x: float, y: float) -> float | None:
    """Turn *eid* to face (x, y).  Returns the new angle (rad)."""
    pos = world.get(eid, Position)
    facing = world.get(eid, Facing)
    if pos is None or facing is None:
        return None
    if abs(x - pos.x) > 1e-9 or abs(y - pos.y) > 1e-9:
        facing.angle = math.atan2(y - pos.y, x - pos.x)
    return facing.angle


def move_to(world: World, eid: int, x: float, y: float) -> None:
    """Accelerate toward (x, y) along the new facing.

    Bodies without a ``Facing`` steer straight at the point.
    """
    mover = world.get(eid, Mover)
    if mover is None:
        return
    angle = face_toward(world, eid, x, y)
    if angle is None:
        pos = world.get(eid, Position)
        if pos is None:
            return
        angle = math.atan2(y - pos.y, x - pos.x)
    mover.ax = math.cos(angle) * mover.acceleration
    mover.ay = math.sin(angle) * mover.acceleration
    mover.trying_to_move = True


def stand_still(world: World, eid: int) -> None:
    """Stop accelerating; drag brings the body to rest."""
    mover = world.get(eid, Mover)
    if mover is None:
        return
    mover.ax = 0.0
    mover.ay = 0.0
    mover.trying_to_move = False


def halt(world: World, eid: int) -> None:
    """Stop dead: no acceleration, no velocity."""
    stand_still(world, eid)
    vel = world.get(eid, Velocity)
    if vel is not None:
        vel.x = 0.0
        vel.y = 0.0


# ── System ───────────────────────────────────────────────────────────

def movement_system(world: World, delta: float) -> None:
    """Integrate every Mover over *delta* ms.

    - Trying units accelerate, capped at ``move_speed``.
    - The rest lose speed by ``unit.drag`` each frame and snap to rest
      below ``unit.stop_speed``.
    - Solid colliders are softly pushed apart; corpses are stepped over.
    - Positions are clamped to the ``Arena``.
    """
    dt = delta / 1000.0
    drag = _tun("unit", "drag", 0.8)
    stop_speed = _tun("unit", "stop_speed", 20.0)
    push_frac = _tun("unit", "separation_push", 0.4)
    arena = world.res(Arena)

    solids = [(oid, opos, oc) for oid, opos, oc in world.query(Position, Collider)
              if oc.solid]

    for eid, pos, vel, mover in world.query(Position, Velocity, Mover):
        if mover.trying_to_move:
            vel.x += mover.ax * dt
            vel.y += mover.ay * dt
            speed = math.hypot(vel.x, vel.y)
            if speed > mover.move_speed > 0:
                scale = mover.move_speed / speed
                vel.x *= scale
                vel.y *= scale
        else:
            vel.x *= drag
            vel.y *= drag
            if math.hypot(vel.x, vel.y) < stop_speed:
                vel.x = 0.0
                vel.y = 0.0

        nx = pos.x + vel.x * dt
        ny = pos.y + vel.y * dt

        # Soft separation (nudge apart)
        mycol = world.get(eid, Collider)
        if mycol is not None and mycol.solid:
            for oid, opos, oc in solids:
                if oid == eid:
                    continue
                ddx = nx - opos.x
                ddy = ny - opos.y
                min_dist = mycol.radius + oc.radius
                dist_sq = ddx * ddx + ddy * ddy
                if 0.0001 < dist_sq < min_dist * min_dist:
                    dist = dist_sq ** 0.5
                    push = (min_dist - dist) * push_frac
                    nx += ddx / dist * push
                    ny += ddy / dist * push

        if arena is not None:
            r = mycol.radius if mycol is not None else 0.0
            nx = min(max(nx, r), max(r, arena.width - r))
            ny = min(max(ny, r), max(r, arena.height - r))

        pos.x = nx
        pos.y = ny
