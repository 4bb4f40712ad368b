"""logic/rules.py — Behaviour definitions and the Rulebook that holds them.

Four kinds of shared, read-only value objects make up a unit's
behaviour, from smallest to largest:

    Condition   named yes/no question about a unit  (``handler(world, eid)``)
    Motion      smallest timed behaviour             (``execute(world, eid, time, delta)``)
    Action      ordered motions + gating conditions
    Stance      primary actions (the goal) + supporting actions

They are built once, stored in a ``Rulebook`` resource, and referenced
(never copied) by every unit's ``Mind``.  Equality is identity, so a
``Mind`` can match "the same ATTACK" with ``in`` and ``==``.

    rules = world.res(Rulebook)
    charge = rules.stance("CHARGE")
    ok = rules.evaluate("RANGE", world, eid)

Bad definitions fail at construction (``ValueError`` / ``TypeError``);
bad lookups during play fail closed (logged, treated as ``False``).
"""

from __future__ import annotations
import inspect
import math
from dataclasses import dataclass
from numbers import Real
from typing import Any, Callable

from components import DevLog, GameClock


# ── Value objects ────────────────────────────────────────────────────

@dataclass(frozen=True, eq=False)
class Condition:
    """Pure predicate over unit state; never mutates anything."""
    name: str
    description: str = ""
    handler: Callable[[Any, int], bool] | None = None

    def __repr__(self) -> str:
        return f"Condition({self.name})"


@dataclass(frozen=True, eq=False)
class Motion:
    """Atomic timed behaviour.

    ``duration`` (ms) must be positive; ``math.inf`` means "until
    something else interrupts".  It becomes the unit's rethink delay
    once the motion starts.
    """
    name: str
    description: str = ""
    duration: float = 1.0
    execute: Callable[[Any, int, float, float], Any] | None = None

    def __post_init__(self):
        d = self.duration
        if isinstance(d, bool) or not isinstance(d, Real) or math.isnan(d):
            raise ValueError(f"motion {self.name!r}: duration must be a number, got {d!r}")
        if d <= 0:
            raise ValueError(f"motion {self.name!r}: duration must be positive, got {d}")
        if not callable(self.execute):
            raise TypeError(f"motion {self.name!r}: executor must be callable")
        try:
            inspect.signature(self.execute).bind(None, 0, 0.0, 0.0)
        except TypeError:
            raise TypeError(
                f"motion {self.name!r}: executor must accept (world, eid, time, delta)"
            ) from None
        except ValueError:
            pass    # builtins without an introspectable signature

    def __repr__(self) -> str:
        return f"Motion({self.name}, {self.duration}ms)"


@dataclass(frozen=True, eq=False)
class Action:
    """Ordered motions, only eligible while every condition holds."""
    name: str
    description: str = ""
    motions: tuple[Motion, ...] = ()
    conditions: tuple[Condition, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "motions", tuple(self.motions))
        object.__setattr__(self, "conditions", tuple(self.conditions))
        for m in self.motions:
            if not isinstance(m, Motion):
                raise TypeError(f"action {self.name!r}: {m!r} is not a Motion")
        for c in self.conditions:
            if not isinstance(c, Condition):
                raise TypeError(f"action {self.name!r}: {c!r} is not a Condition")

    def __repr__(self) -> str:
        return f"Action({self.name})"


@dataclass(frozen=True, eq=False)
class Stance:
    """A behavioural goal.

    The stance is fulfilled once every entry of ``primary_actions`` has
    been completed (an action listed twice must complete twice).  With
    ``enforce_primary_action_order`` the entries must complete in list
    order.  ``supporting_actions`` fill the gaps and may repeat freely.
    ``face`` is the visual tag handed to the presentation layer.
    """
    name: str
    description: str = ""
    primary_actions: tuple[Action, ...] = ()
    enforce_primary_action_order: bool = False
    supporting_actions: tuple[Action, ...] = ()
    face: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "primary_actions", tuple(self.primary_actions))
        object.__setattr__(self, "supporting_actions", tuple(self.supporting_actions))
        for a in self.primary_actions + self.supporting_actions:
            if not isinstance(a, Action):
                raise TypeError(f"stance {self.name!r}: {a!r} is not an Action")

    def is_primary(self, action: Action) -> bool:
        return any(a is action for a in self.primary_actions)

    def occurrences(self, action: Action) -> int:
        return sum(1 for a in self.primary_actions if a is action)

    def __repr__(self) -> str:
        return f"Stance({self.name})"


# ── Rulebook ─────────────────────────────────────────────────────────

class Rulebook:
    """Catalogs of calls, conditions, motions, actions and stances by id.

    Stored as a world resource.  ``idle_action`` names the action a unit
    falls back to when nothing else is eligible; it must exist and have
    at least one motion.
    """

    def __init__(self):
        self.calls: dict[str, Any] = {}
        self.conditions: dict[str, Condition] = {}
        self.motions: dict[str, Motion] = {}
        self.actions: dict[str, Action] = {}
        self.stances: dict[str, Stance] = {}
        self._idle_action: str | None = None

    # ── Registration ─────────────────────────────────────────────────

    def add_call(self, key: str, call) -> Any:
        self.calls[key] = call
        return call

    def add_condition(self, key: str, condition: Condition) -> Condition:
        if not isinstance(condition, Condition):
            raise TypeError(f"{key}: expected Condition, got {type(condition).__name__}")
        self.conditions[key] = condition
        return condition

    def add_motion(self, key: str, motion: Motion) -> Motion:
        if not isinstance(motion, Motion):
            raise TypeError(f"{key}: expected Motion, got {type(motion).__name__}")
        self.motions[key] = motion
        return motion

    def add_action(self, key: str, action: Action) -> Action:
        if not isinstance(action, Action):
            raise TypeError(f"{key}: expected Action, got {type(action).__name__}")
        self.actions[key] = action
        return action

    def add_stance(self, key: str, stance: Stance) -> Stance:
        if not isinstance(stance, Stance):
            raise TypeError(f"{key}: expected Stance, got {type(stance).__name__}")
        self.stances[key] = stance
        return stance

    def set_idle_action(self, key: str) -> None:
        action = self.actions.get(key)
        if action is None:
            raise ValueError(f"idle action {key!r} is not registered")
        if not action.motions:
            raise ValueError(f"idle action {key!r} has no motions")
        self._idle_action = key

    # ── Lookup ───────────────────────────────────────────────────────

    def call(self, key: str):
        return self.calls.get(key)

    def condition(self, key: str) -> Condition | None:
        return self.conditions.get(key)

    def motion(self, key: str) -> Motion | None:
        return self.motions.get(key)

    def action(self, key: str) -> Action | None:
        return self.actions.get(key)

    def stance(self, key: str) -> Stance | None:
        return self.stances.get(key)

    @property
    def idle_action(self) -> Action:
        if self._idle_action is None:
            raise LookupError("rulebook has no idle action")
        return self.actions[self._idle_action]

    # ── Evaluation ───────────────────────────────────────────────────

    def evaluate(self, condition: Condition | str, world: Any, eid: int) -> bool:
        """Evaluate *condition* (object or id) for unit *eid*.

        Never raises: an unknown id, a missing handler or a handler that
        blows up is logged and counts as ``False``.
        """
        if isinstance(condition, str):
            found = self.conditions.get(condition)
            if found is None:
                _warn(world, eid, f"unknown condition {condition!r}")
                return False
            condition = found
        handler = getattr(condition, "handler", None)
        if not callable(handler):
            _warn(world, eid, f"condition {getattr(condition, 'name', condition)!r} has no handler")
            return False
        try:
            return bool(handler(world, eid))
        except Exception as exc:
            _warn(world, eid, f"condition {condition.name} raised {exc!r}")
            return False

    def __repr__(self) -> str:
        return (f"Rulebook({len(self.conditions)} conditions, {len(self.motions)} motions, "
                f"{len(self.actions)} actions, {len(self.stances)} stances)")


def _warn(world: Any, eid: int, msg: str) -> None:
    print(f"[DECISION] #{eid}: {msg}")
    log = world.res(DevLog) if world is not None else None
    if log:
        clock = world.res(GameClock)
        log.record(eid, "rules", msg, t=clock.time if clock else 0.0)
