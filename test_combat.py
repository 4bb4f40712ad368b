"""test_combat.py — Strikes, parries, damage, calls, death and respawn.

The parry roll uses the module-level ``random.random``; tests pin it
with ``mock.patch`` so every outcome is decided up front:

    roll 0.99  → above any parry rate, the blow lands
    roll 0.01  → below the rate, the blow is parried

Run:  python test_combat.py   (or: pytest test_combat.py)
"""
from __future__ import annotations
import sys, traceback
from unittest import mock

# ── Bootstrap ────────────────────────────────────────────────────────
from core.tuning import load as _load_tuning
_load_tuning()

from core import tuning
from core.constants import ENEMY, STATUS_ENTANGLED, STATUS_PARALYSED
from core.events import EventBus
from components import (
    Health, Parry, Mind, Equipment, Statuses, Collider, Appearance,
    Weapon, DevLog,
)
from logic.calls import CALLS
from logic.combat import parry as P
from logic.combat.attacks import (
    strike, target_in_reach, STRIKE_CONTACT, GUARD_RESTORE, WEAPON_RECOVERED,
)
from logic.combat.damage import receive_interaction, die, respawn
from logic.combat.interaction import InteractionPayload, InteractionResult, interact
from logic.entity_factory import make_armour, make_weapon, spawn_from_descriptor
from logic.tick import tick_unit
from simulation.battle import Battle


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

def raises(exc_type: type, fn, label: str):
    try:
        fn()
    except exc_type:
        ok(label)
        return
    except Exception as exc:
        fail(label, f"raised {type(exc).__name__}: {exc}")
        raise AssertionError(label)
    fail(label, "did not raise")
    raise AssertionError(label)


HIT = 0.99
PARRY = 0.01
BLOW = InteractionPayload(call=None, value=1.0, offensive=True)


def _roll(value: float):
    return mock.patch("random.random", return_value=value)


def _duel(gap: float = 40.0, **defender):
    """Attacker *a* at (100, 300) and defender *d* *gap* px to its right."""
    b = Battle(seed=1)
    b.add_team("red", "#cc3333")
    b.add_team("blue", "#3355cc")
    b.set_relationship("red", "blue", ENEMY)
    a = b.spawn_unit(100, 300, "red", name="attacker")
    d = b.spawn_unit(100 + gap, 300, "blue", name="defender", **defender)
    return b, a, d


def _advance(b: Battle, to: float):
    """Move the clock and deliver due scheduled events, without any thinking."""
    b.clock.time = to
    b.scheduler.tick(b.world, to)


# ── Parry bounds ─────────────────────────────────────────────────────

def test_parry_bounds():
    print("\n── Parry bounds ──")
    p = Parry(current=0.12, minimum=0.05, maximum=0.5, base_maximum=0.5,
              recovery=0.05, damage=0.1)
    P.take_hit(p)
    check(abs(p.current - 0.05) < 1e-9, "hit floors at the minimum", str(p.current))
    P.take_hit(p)
    check(abs(p.current - 0.05) < 1e-9, "stays at the minimum")

    P.recover(p, 2000)
    check(abs(p.current - 0.15) < 1e-9, "recovers 0.05/s", str(p.current))
    P.recover(p, 60_000)
    check(p.current == 0.5, "recovery stops at the maximum")

    P.lower_guard(p)
    check(p.maximum == 0.25 and p.current == 0.25, "mid-swing: maximum halves, current follows")
    P.recover(p, 10_000)
    check(p.current == 0.25, "no recovery past the lowered maximum")
    P.restore_guard(p)
    check(p.maximum == 0.5 and p.current == 0.25, "guard restored, current unchanged")

    low = Parry(current=0.06, minimum=0.05, maximum=0.08, base_maximum=0.08)
    P.lower_guard(low)
    check(low.maximum == 0.05, "lowered maximum never drops below the minimum")


# ── Interaction contract ─────────────────────────────────────────────

def test_payload_validation():
    print("\n── Payload validation ──")
    raises(TypeError, lambda: InteractionPayload(call="ENTANGLE"), "call must be a Call")
    raises(TypeError, lambda: InteractionPayload(value="1"), "value must be a number")
    raises(TypeError, lambda: InteractionPayload(offensive=1), "offensive must be a bool")
    raises(ValueError, lambda: InteractionPayload(value=-5.0), "negative value rejected")
    raises(ValueError, lambda: InteractionPayload(value=float("nan"), offensive=False),
           "NaN value rejected")
    check(InteractionPayload(value=0).value == 0, "zero is a valid value")
    raises(TypeError, lambda: InteractionResult(value_received=None), "result value checked")
    raises(TypeError, lambda: InteractionResult(call_taken="yes"), "result call_taken checked")

    b, a, d = _duel()
    w = b.world
    raises(TypeError, lambda: interact(w, a, d, {"value": 1}), "dict is not a payload")
    point = b.add_respawn_point(700, 300, "blue")
    raises(TypeError, lambda: interact(w, a, point, BLOW), "landmark is not a combat entity")
    raises(TypeError, lambda: interact(w, a, 999, BLOW), "unknown entity rejected")


# ── Scenario A: out of reach ─────────────────────────────────────────

def test_strike_out_of_reach():
    print("\n── Strike out of reach ──")
    b, a, d = _duel(gap=300)
    w = b.world
    hp_before = w.get(d, Health).current
    parry_before = w.get(a, Parry).maximum

    check(not target_in_reach(w, a, d), "300 px is out of reach")
    check(strike(w, a, d) is False, "strike refuses")
    check(w.get(d, Health).current == hp_before, "no damage")
    check(b.scheduler.pending_count() == 0, "nothing scheduled")
    check(not w.get(a, Equipment).current_weapon.attacking, "weapon not swinging")
    check(w.get(a, Parry).maximum == parry_before, "guard untouched")
    check(not b.bus.pending("WeaponThrust"), "no thrust emitted")


# ── Scenario B: in reach ─────────────────────────────────────────────

def test_strike_lands():
    print("\n── Strike lands ──")
    b, a, d = _duel()
    w = b.world
    w.get(a, Mind).target = d
    w.get(a, Mind).rethink_timer = 0.0

    check(strike(w, a) is True, "strike starts")
    weapon = w.get(a, Equipment).current_weapon
    check(weapon.attacking, "weapon swinging")
    thrusts = b.bus.pending("WeaponThrust")
    check(len(thrusts) == 1 and thrusts[0].target_eid == d and thrusts[0].duration == 400,
          "WeaponThrust emitted with the full swing time")
    check(w.get(a, Parry).maximum == 0.25 and w.get(a, Parry).current <= 0.25,
          "attacker guard lowered")
    check(w.get(a, Mind).rethink_timer == 1000, "cooldown becomes the rethink delay")
    types = sorted(e.event_type for e in b.scheduler.entity_pending(a))
    check(types == sorted([STRIKE_CONTACT, GUARD_RESTORE, WEAPON_RECOVERED]),
          "three phases scheduled", str(types))
    check(strike(w, a) is False, "no second swing while recovering")

    _advance(b, 100)
    check(w.get(d, Health).current == 3, "no damage before the wind-up ends")

    with _roll(HIT):
        _advance(b, 160)
    check(w.get(d, Health).current == 2, "contact: 1 HP", str(w.get(d, Health).current))
    check(abs(w.get(d, Parry).current - 0.4) < 1e-9, "defender parry worn by 0.1")
    check(w.get(a, Parry).maximum == 0.5, "attacker guard restored at contact")
    check(weapon.attacking, "still recovering after contact")

    _advance(b, 400)
    check(not weapon.attacking, "weapon recovered after wind-up + recovery")
    check(b.scheduler.pending_count() == 0, "queue drained")


def test_parried_blow():
    print("\n── Parried blow ──")
    b, a, d = _duel(shield=True)
    w = b.world
    bus = w.res(EventBus)
    with _roll(PARRY):
        result = receive_interaction(w, d, BLOW, source=a)
    check(result.value_received == 0 and not result.call_taken, "parried: nothing received")
    check(w.get(d, Health).current == 3, "no HP lost")
    check(abs(w.get(d, Parry).current - 0.4) < 1e-9, "parry still wears on a parry")
    shield = w.get(d, Equipment).shield
    check(abs(shield.active_level - 0.5) < 1e-9, "shield soaks half the blow",
          str(shield.active_level))
    parried = bus.pending("AttackParried")
    check(len(parried) == 1 and parried[0].attacker_eid == a and parried[0].item == "shield",
          "AttackParried emitted")

    shield.recover(1000)
    check(abs(shield.active_level - 0.8) < 1e-9, "shield recovers 0.3/s")
    raises(ValueError, lambda: shield.parry(w, d, 1.5), "shield rejects damage above 1")
    raises(ValueError, lambda: shield.parry(w, d, -0.1), "shield rejects negative damage")


def test_hit_forces_rethink():
    print("\n── Reaction bound ──")
    b, a, d = _duel()
    w = b.world
    w.get(d, Mind).rethink_timer = 5000.0
    with _roll(HIT):
        receive_interaction(w, d, BLOW, source=a)
    check(w.get(d, Mind).rethink_timer == 1000, "hit caps the rethink timer")
    w.get(d, Mind).rethink_timer = 200.0
    with _roll(HIT):
        receive_interaction(w, d, BLOW, source=a)
    check(w.get(d, Mind).rethink_timer == 200, "a shorter timer is kept")


# ── Scenario C: death ────────────────────────────────────────────────

def test_lethal_blow():
    print("\n── Lethal blow ──")
    b, a, d = _duel(hp=1)
    w = b.world
    with _roll(HIT):
        result = interact(w, a, d, BLOW)
    hp = w.get(d, Health)
    check(result.value_received == 1, "blow received")
    check(hp.current == 0 and not hp.alive, "HP 0 and dead")
    check(w.get(d, Mind).stance is b.rulebook.stance("DEAD"), "DEAD stance")
    col = w.get(d, Collider)
    check(not col.solid and col.corpse, "corpse does not block")
    check(w.get(d, Appearance).colour == "#444444", "corpse colour")
    died = b.bus.pending("UnitDied")
    check(len(died) == 1 and died[0].eid == d and died[0].killer_eid == a, "UnitDied once")

    with _roll(HIT):
        again = interact(w, a, d, BLOW)
    check(again == InteractionResult(0.0, False), "dead target: empty result")
    check(hp.current == 0 and len(b.bus.pending("UnitDied")) == 1, "no second death")

    with _roll(HIT):
        receive_interaction(w, d, InteractionPayload(value=5.0), source=a)
    check(hp.current == 0 and len(b.bus.pending("UnitDied")) == 1,
          "direct overkill stays clamped at 0")

    receive_interaction(w, d, InteractionPayload(value=2.0, offensive=False))
    check(hp.current == 0 and not hp.alive, "the dead are not healed")

    parry_before = w.get(d, Parry).current
    with _roll(HIT):
        result = receive_interaction(w, d, InteractionPayload(call=CALLS["ENTANGLE"]), source=a)
    check(result == InteractionResult(0.0, False), "a corpse answers with an empty result")
    check(w.get(d, Parry).current == parry_before, "a corpse's parry does not wear")
    check(not w.get(d, Statuses).has(STATUS_ENTANGLED), "a corpse takes no status")


def test_overkill_clamps():
    print("\n── Overkill ──")
    b, a, d = _duel()
    w = b.world
    with _roll(HIT):
        receive_interaction(w, d, InteractionPayload(value=10.0), source=a)
    hp = w.get(d, Health)
    check(hp.current == 0 and not hp.alive, "10 damage on 3 HP clamps to 0")


def test_healing():
    print("\n── Healing ──")
    b, a, d = _duel()
    w = b.world
    hp = w.get(d, Health)
    hp.current = 1.0
    parry_before = w.get(d, Parry).current
    result = receive_interaction(w, d, InteractionPayload(value=1.0, offensive=False), source=a)
    check(hp.current == 2 and result.value_received == 1, "heal 1 HP")
    check(w.get(d, Parry).current == parry_before, "healing does not wear parry")
    result = receive_interaction(w, d, InteractionPayload(value=5.0, offensive=False))
    check(hp.current == 3 and result.value_received == 1, "heal capped at maximum")


# ── Respawn ──────────────────────────────────────────────────────────

def test_respawn_restores():
    print("\n── Respawn ──")
    b, a, d = _duel(hp=1)
    w = b.world
    check(respawn(w, d) is False, "the living cannot respawn")

    w.get(d, Statuses).add(STATUS_PARALYSED)
    w.get(d, Parry).current = 0.05
    die(w, d, killer=a)
    check(respawn(w, d) is True, "dead unit respawns")
    hp = w.get(d, Health)
    check(hp.current == hp.maximum == 1 and hp.alive, "full HP")
    col = w.get(d, Collider)
    check(col.solid and not col.corpse, "solid again")
    check(w.get(d, Appearance).colour == "#3355cc", "team colour again")
    check(not w.get(d, Statuses).active, "statuses cleared")
    check(w.get(d, Parry).current == 0.5, "parry reset")
    mind = w.get(d, Mind)
    check(mind.stance is b.rulebook.stance("CHARGE") and mind.target == a,
          "respawned unit picks a fresh stance")
    check(len(b.bus.pending("UnitRespawned")) == 1, "UnitRespawned emitted")
    check(respawn(w, d) is False, "second respawn refused")


# ── Calls ────────────────────────────────────────────────────────────

def test_status_calls():
    print("\n── Status calls ──")
    b, a, d = _duel()
    w = b.world
    b.clock.time = 1000.0
    ent = InteractionPayload(call=CALLS["ENTANGLE"], value=1.0, offensive=True)
    with _roll(HIT):
        result = receive_interaction(w, d, ent, source=a)
    statuses = w.get(d, Statuses)
    check(result.call_taken and statuses.active.get(STATUS_ENTANGLED) == 11_000,
          "ENTANGLE: entangled for 10 s", str(statuses.active))
    check(not b.rulebook.evaluate("CAN_MOVE", w, d), "entangled unit cannot move")

    tick_unit(w, d, 10_999.0, 16.0)
    check(statuses.has(STATUS_ENTANGLED), "still entangled just before expiry")
    tick_unit(w, d, 11_000.0, 16.0)
    check(not statuses.has(STATUS_ENTANGLED), "expired at 11 s")
    check(any("cleared" in e["msg"] for e in w.res(DevLog).for_cat("status")),
          "expiry is logged")

    with _roll(PARRY):
        result = receive_interaction(w, d, ent, source=a)
    check(not result.call_taken and not statuses.has(STATUS_ENTANGLED),
          "a parried blow carries no call")

    with _roll(HIT):
        result = receive_interaction(w, d, InteractionPayload(call=CALLS["CURSE"]), source=a)
    check(result.call_taken and not statuses.active, "a call without a status is still taken")


def test_armour_resists():
    print("\n── Armour ──")
    armour = make_armour(1, ["ENTANGLE"])
    b, a, d = _duel(armour=armour)
    w = b.world
    check(w.get(d, Health).maximum == 4, "armour HP adds to the pool")
    with _roll(HIT):
        result = receive_interaction(
            w, d, InteractionPayload(call=CALLS["ENTANGLE"]), source=a)
    check(not result.call_taken and not w.get(d, Statuses).active,
          "resisted call is not taken")
    check(result.value_received == 1, "resisted call still deals damage")
    with _roll(HIT):
        result = receive_interaction(
            w, d, InteractionPayload(call=CALLS["PARALYSE"]), source=a)
    check(result.call_taken and w.get(d, Statuses).has(STATUS_PARALYSED),
          "unresisted call is taken")
    raises(ValueError, lambda: make_armour(0, ["FIREBALL"]), "unknown call key rejected")


def test_weapons():
    print("\n── Weapons ──")
    check(make_weapon("spear", 40).reach == 40, "spear reach = size")
    check(abs(make_weapon("two_handed", 40).reach - 32) < 1e-9, "two-handed reach 0.8 × size")
    raises(ValueError, lambda: make_weapon("trebuchet"), "unknown weapon kind")

    b, a, d = _duel(gap=60)
    w = b.world
    check(not target_in_reach(w, a, d), "one-handed: 40 px gap too far")
    w.get(a, Equipment).weapons[0] = make_weapon("spear", 40)
    check(target_in_reach(w, a, d), "spear: 40 px gap in reach")
    w.get(a, Equipment).weapons.clear()
    check(not target_in_reach(w, a, d), "no weapon: nothing in reach")
    assert isinstance(make_weapon("spear"), Weapon)

    count = len(list(w.query(Health)))
    raises(ValueError, lambda: b.spawn_unit(300, 300, "red", weapons=()),
           "a unit without weapons is rejected")
    raises(ValueError, lambda: spawn_from_descriptor(w, {"team": "red", "weapons": []}),
           "a scenario unit with an empty weapons list is rejected")
    raises(ValueError, lambda: Equipment(weapons=[]), "equipment without weapons rejected")
    raises(ValueError, lambda: Equipment(weapons=[make_weapon("spear")], current=1),
           "current weapon index must exist")
    check(len(list(w.query(Health))) == count, "rejected spawns leave no entity behind")
    two = b.spawn_unit(300, 300, "red", weapons=("spear", "one_handed"))
    check(w.get(two, Equipment).current_weapon.kind == "spear", "first weapon is current")


def test_spawn_parry_overrides():
    print("\n── Parry overrides ──")
    b, a, d = _duel()
    w = b.world
    high = b.spawn_unit(300, 300, "red", parry={"current": 0.9})
    p = w.get(high, Parry)
    check(p.current == 0.5 and p.maximum == 0.5, "current above the maximum is clamped",
          str(p.current))
    low = b.spawn_unit(300, 400, "red", parry={"current": 0.0, "minimum": 0.1})
    check(w.get(low, Parry).current == 0.1, "current below the minimum is clamped")
    raises(ValueError, lambda: b.spawn_unit(300, 500, "red",
                                            parry={"minimum": 0.6, "maximum": 0.4}),
           "minimum above maximum rejected")
    raises(ValueError, lambda: b.spawn_unit(300, 500, "red", parry={"maximum": 1.5}),
           "maximum above 1 rejected")
    raises(ValueError, lambda: b.spawn_unit(300, 500, "red", parry={"minimum": -0.1}),
           "negative minimum rejected")


# ── Attacker death during the wind-up ────────────────────────────────

def test_attacker_dies_mid_swing():
    print("\n── Attacker dies mid-swing ──")
    b, a, d = _duel()
    w = b.world
    strike(w, a, d)
    die(w, a, killer=d)
    with _roll(HIT):
        _advance(b, 160)
    check(w.get(d, Health).current == 2, "by default the swing still lands")

    b, a, d = _duel()
    w = b.world
    tuning.override("combat.strike", "cancel_on_attacker_death", True)
    try:
        strike(w, a, d)
        die(w, a, killer=d)
        with _roll(HIT):
            _advance(b, 160)
        check(w.get(d, Health).current == 3, "with cancellation the swing is dropped")
        _advance(b, 400)
        check(not w.get(a, Equipment).current_weapon.attacking,
              "weapon still recovers")
    finally:
        tuning.override("combat.strike", "cancel_on_attacker_death", False)


def test_removed_entities_skip_events():
    print("\n── Removed attacker ──")
    b, a, d = _duel()
    w = b.world
    strike(w, a, d)
    w.kill(a)
    with _roll(HIT):
        _advance(b, 160)
    check(w.get(d, Health).current == 3, "events of a removed entity are dropped")


if __name__ == "__main__":
    sections = [
        ("Parry bounds", test_parry_bounds),
        ("Payload validation", test_payload_validation),
        ("Strike out of reach", test_strike_out_of_reach),
        ("Strike lands", test_strike_lands),
        ("Parried blow", test_parried_blow),
        ("Reaction bound", test_hit_forces_rethink),
        ("Lethal blow", test_lethal_blow),
        ("Overkill", test_overkill_clamps),
        ("Healing", test_healing),
        ("Respawn", test_respawn_restores),
        ("Status calls", test_status_calls),
        ("Armour", test_armour_resists),
        ("Weapons", test_weapons),
        ("Parry overrides", test_spawn_parry_overrides),
        ("Attacker dies mid-swing", test_attacker_dies_mid_swing),
        ("Removed attacker", test_removed_entities_skip_events),
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
    print(f"  Combat Tests: {_passed} passed, {_failed} failed  (total {total})")
    print(f"{'=' * 60}")
    sys.exit(1 if _failed else 0)
