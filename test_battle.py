"""test_battle.py — Scheduler, movement and whole-battle runs.

The last sections play full battles frame by frame and check the
invariants that must hold for every unit at every moment:

  - HP 0 exactly when dead
  - parry rate inside its bounds
  - primary-action progress never exceeds the stance's list

Run:  python test_battle.py   (or: pytest test_battle.py)
"""
from __future__ import annotations
import sys, math, traceback
from pathlib import Path

# ── Bootstrap ────────────────────────────────────────────────────────
from core.tuning import load as _load_tuning
_load_tuning()

from core.ecs import World
from core.constants import ENEMY
from components import (
    Position, Velocity, Facing, Mover, Collider, Health, Parry, Mind, Arena, GameClock,
)
from logic.movement import move_to, stand_still, halt, movement_system
from simulation.scheduler import WorldScheduler
from simulation.battle import Battle
import main

ROOT = Path(__file__).resolve().parent
SKIRMISH = ROOT / "data" / "scenarios" / "skirmish.toml"
DT = 16.0


# ── Test harness ─────────────────────────────────────────────────────

_passed = 0
_failed = 0

def ok(label: str):
    global _passed
    _passed += 1
    print(f"  [PASS] {label}")

def fail(label: str, detail: str = ""):
    global _failed
    _failed += 1
    msg = f"  [FAIL] {label}"
    if detail:
        msg += f" — {detail}"
    print(msg)

def check(cond: bool, label: str, detail: str = ""):
    if cond:
        ok(label)
    else:
        fail(label, detail)
    assert cond, f"{label} {detail}".strip()


def _invariant_errors(b: Battle) -> list[str]:
    errors = []
    w = b.world
    for eid, health, parry, mind in w.query(Health, Parry, Mind):
        if (health.current == 0) != (not health.alive):
            errors.append(f"#{eid}: hp={health.current} alive={health.alive}")
        if not (parry.minimum - 1e-9 <= parry.current <= parry.maximum + 1e-9):
            errors.append(f"#{eid}: parry {parry.current} outside "
                          f"[{parry.minimum}, {parry.maximum}]")
        if mind.stance is not None and \
                len(mind.completed_actions) > len(mind.stance.primary_actions):
            errors.append(f"#{eid}: {len(mind.completed_actions)} actions done in "
                          f"{mind.stance.name}")
    return errors


# ── Scheduler ────────────────────────────────────────────────────────

def test_scheduler_order():
    print("\n── Scheduler order ──")
    w = World()
    a, c = w.spawn(), w.spawn()
    seen = []
    sched = WorldScheduler()
    sched.register_handler("PING", lambda world, eid, et, data, s, t: seen.append(data["n"]))
    sched.post(200, a, "PING", {"n": 3})
    sched.post(100, a, "PING", {"n": 1})
    sched.post(100, c, "PING", {"n": 2})
    sched.post(500, a, "PING", {"n": 4})

    check(sched.peek_time() == 100, "earliest first")
    check(sched.tick(w, 200) == 3 and seen == [1, 2, 3],
          "due events by time, then posting order", str(seen))
    check(sched.pending_count() == 1, "later event still pending")

    check(sched.cancel_entity(a) == 1 and sched.tick(w, 1000) == 0, "cancelled events never fire")
    check(seen == [1, 2, 3], "nothing new delivered")


def test_scheduler_chaining():
    print("\n── Scheduler chaining ──")
    w = World()
    a = w.spawn()
    seen = []
    sched = WorldScheduler()

    def first(world, eid, et, data, s, t):
        seen.append("first")
        s.post_delta(t, 0, eid, "SECOND")
    sched.register_handler("FIRST", first)
    sched.register_handler("SECOND", lambda *args: seen.append("second"))
    sched.post(50, a, "FIRST")
    sched.post(60, a, "ORPHAN")
    sched.tick(w, 100)
    check(seen == ["first", "second"], "a handler's due event runs in the same pass")
    check(sched.pending_count() == 0, "event without a handler is consumed")
    check(sched.cancel_entity_type(a, "FIRST") == 0, "nothing left to cancel")


# ── Movement ─────────────────────────────────────────────────────────

def _mover_world():
    w = World()
    w.set_res(Arena(width=800, height=600))
    eid = w.spawn()
    w.add(eid, Position(100, 300))
    w.add(eid, Velocity())
    w.add(eid, Collider(radius=20))
    w.add(eid, Mover(move_speed=150, acceleration=800))
    return w, eid


def test_acceleration_and_cap():
    print("\n── Acceleration ──")
    w, eid = _mover_world()
    check(not w.has(eid, Facing), "fixture body has no Facing")
    move_to(w, eid, 700, 300)
    movement_system(w, 100)
    vel = w.get(eid, Velocity)
    check(abs(vel.x - 80) < 1e-6 and abs(vel.y) < 1e-6, "800 px/s² for 0.1 s → 80 px/s",
          f"{vel.x}, {vel.y}")
    check(abs(w.get(eid, Position).x - 108) < 1e-6, "moved 8 px")
    for _ in range(20):
        movement_system(w, 100)
    check(abs(vel.x - 150) < 1e-6, "capped at move speed", str(vel.x))

    w.add(eid, Facing())
    move_to(w, eid, w.get(eid, Position).x, 0)
    mover = w.get(eid, Mover)
    check(abs(w.get(eid, Facing).angle + math.pi / 2) < 1e-9 and abs(mover.ay + 800) < 1e-6,
          "with a Facing the body turns toward the point first")


def test_drag_and_stop():
    print("\n── Drag ──")
    w, eid = _mover_world()
    vel = w.get(eid, Velocity)
    vel.x = 100.0
    stand_still(w, eid)
    movement_system(w, DT)
    check(abs(vel.x - 80) < 1e-6, "drag 0.8 per frame")
    for _ in range(10):
        movement_system(w, DT)
    check(vel.x == 0.0, "stops below 20 px/s")

    vel.x = 100.0
    halt(w, eid)
    check(vel.x == 0.0 and not w.get(eid, Mover).trying_to_move, "halt stops dead")


def test_arena_clamp():
    print("\n── Arena clamp ──")
    w, eid = _mover_world()
    pos = w.get(eid, Position)
    pos.x = 790.0
    move_to(w, eid, 2000, 300)
    for _ in range(10):
        movement_system(w, DT)
    check(pos.x == 780.0, "kept a radius inside the right edge", str(pos.x))


def test_separation():
    print("\n── Separation ──")
    w, a = _mover_world()
    b = w.spawn()
    w.add(b, Position(110, 300))
    w.add(b, Collider(radius=20))
    movement_system(w, DT)
    check(w.get(a, Position).x < 100, "overlapping bodies pushed apart")

    w2, a2 = _mover_world()
    corpse = w2.spawn()
    w2.add(corpse, Position(110, 300))
    w2.add(corpse, Collider(radius=20, solid=False, corpse=True))
    movement_system(w2, DT)
    check(w2.get(a2, Position).x == 100, "corpses are stepped over")


# ── Battles ──────────────────────────────────────────────────────────

def test_battle_setup():
    print("\n── Battle setup ──")
    b = Battle(seed=3)
    for res in (b.scheduler, b.rulebook, b.teams, b.bus, b.log, b.clock, b.arena):
        assert b.world.res(type(res)) is res
    ok("every resource installed")
    b.add_team("red")
    b.add_team("blue")
    b.set_relationship("red", "blue", ENEMY)
    b.spawn_unit(100, 300, "red")
    b.spawn_unit(700, 300, "blue")
    check(b.run(160, DT) == 10 and b.time == 160, "run counts frames and advances time")
    check(b.run(10, DT) == 1 and b.time == 170, "last frame is shortened to the duration")
    summary = b.summary()
    check(summary["teams"]["red"] == {"units": 1, "alive": 1, "dead": 0}, "team head count")
    check(len(summary["units"]) == 2 and summary["units"][0]["state"] == "Relaxed/Relax/Idle",
          "fresh units take a moment first", summary["units"][0]["state"])

    b.run(2200, DT)
    summary = b.summary()
    check(summary["units"][0]["state"].startswith("Charge/"),
          "then charge the enemy", summary["units"][0]["state"])
    check(summary["events"].get("StanceEntered", 0) >= 4, "stance changes counted")
    info = b.debug_info()
    check(info["time"] == 2370 and "pending_events" in info, "debug info")


def test_duel_to_the_death():
    print("\n── Duel ──")
    b = Battle(seed=11)
    b.add_team("red", "#cc3333")
    b.add_team("blue", "#3355cc")
    b.set_relationship("red", "blue", ENEMY)
    r = b.spawn_unit(200, 300, "red", name="red")
    u = b.spawn_unit(600, 300, "blue", name="blue")

    errors = []
    for _ in range(int(60_000 / DT)):
        b.step(DT)
        errors.extend(_invariant_errors(b))
        if b.alive_count() < 2:
            break
    check(not errors, "invariants hold every frame", "; ".join(errors[:3]))
    stats = b.bus.stats()
    check(stats.get("WeaponThrust", 0) > 0, "blows were exchanged")
    check(stats.get("UnitDied", 0) >= 1 and b.alive_count() <= 1, "someone fell",
          str(stats))

    b.run(3000, DT)
    for eid in (r, u):
        health, mind = b.world.get(eid, Health), b.world.get(eid, Mind)
        if health.alive:
            check(mind.stance is b.rulebook.stance("RELAXED"), "the winner relaxes",
                  mind.describe())
        else:
            check(mind.stance is b.rulebook.stance("DEAD"), "the loser stays dead",
                  mind.describe())


def test_skirmish_scenario():
    print("\n── Skirmish scenario ──")
    b = Battle.from_toml(SKIRMISH)
    check(b.seed == 7, "seed read from the file")
    check(b.teams.names() == ["lions", "eagles"], "two teams")
    check(len(b.units("lions")) == 4 and len(b.units("eagles")) == 4, "four units a side")
    eagle = b.units("eagles")[0]
    check(b.world.get(eagle, Health).maximum == 4, "armour adds a hit point")
    check(len(b.teams.get("lions").respawn_points) == 1
          and len(b.teams.get("lions").rally_points) == 1, "landmarks registered")

    errors = []
    for _ in range(int(20_000 / DT)):
        b.step(DT)
        errors.extend(_invariant_errors(b))
    check(not errors, "invariants hold every frame", "; ".join(errors[:3]))
    stats = b.bus.stats()
    check(stats.get("WeaponThrust", 0) > 0, "the lines met")
    arena = b.world.res(Arena)
    inside = all(0 <= p.x <= arena.width and 0 <= p.y <= arena.height
                 for _, p, _m in b.world.query(Position, Mind))
    check(inside, "everyone stays in the arena")


def test_missing_scenario():
    print("\n── Missing scenario ──")
    b = Battle.from_toml(ROOT / "data" / "scenarios" / "nope.toml", seed=2)
    check(len(b.teams) == 0 and b.units() == [], "empty battle")
    check(b.run(100, DT) == 7 and b.world.res(GameClock).time == 100, "still steps")


def test_headless_runner():
    print("\n── Headless runner ──")
    summary = main.main([str(SKIRMISH), "--duration", "2000", "--log", "5"])
    check(summary["time"] == 2000, "ran for the requested time")
    check(set(summary["teams"]) == {"lions", "eagles"}, "summary per team")


def test_removed_entities():
    print("\n── Removed entities ──")
    b = Battle(seed=5)
    b.add_team("red")
    b.add_team("blue")
    b.set_relationship("red", "blue", ENEMY)
    r = b.spawn_unit(100, 300, "red", name="r")
    u = b.spawn_unit(600, 300, "blue", name="u")
    point = b.add_respawn_point(50, 300, "red")
    b.run(2200, DT)
    mind = b.world.get(r, Mind)
    check(mind.target == u, "r is charging u", mind.describe())

    b.remove(u)
    b.remove(point)
    check(not b.world.alive(u) and b.world.get(u, Health) is not None,
          "gone at once, components kept until the frame ends")
    b.step(DT)
    check(b.world.get(u, Health) is None and b.world.get(point, Position) is None,
          "components dropped")
    check(not b.world.alive(u), "a purged entity stays dead")
    check(u not in b.teams.get("blue").units and b.teams.get("red").respawn_points == [],
          "rosters and landmark lists forget it")
    check(b.scheduler.entity_pending(u) == [], "no queued events")
    check(mind.target is None and mind.stance is b.rulebook.stance("RELAXED"),
          "r re-plans without a target", mind.describe())


if __name__ == "__main__":
    sections = [
        ("Scheduler order", test_scheduler_order),
        ("Scheduler chaining", test_scheduler_chaining),
        ("Acceleration", test_acceleration_and_cap),
        ("Drag", test_drag_and_stop),
        ("Arena clamp", test_arena_clamp),
        ("Separation", test_separation),
        ("Battle setup", test_battle_setup),
        ("Duel", test_duel_to_the_death),
        ("Skirmish scenario", test_skirmish_scenario),
        ("Missing scenario", test_missing_scenario),
        ("Headless runner", test_headless_runner),
        ("Removed entities", test_removed_entities),
    ]

    for name, fn in sections:
        try:
            fn()
        except AssertionError:
            pass
        except Exception:
            _failed += 1
            print(f"\n  [CRASH] {name} — unhandled exception:")
            traceback.print_exc()

    total = _passed + _failed
    print(f"\n{'=' * 60}")
    print(f"  Battle Tests: {_passed} passed, {_failed} failed  (total {total})")
    print(f"{'=' * 60}")
    sys.exit(1 if _failed else 0)
