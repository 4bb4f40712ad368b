"""logic/combat/interaction.py — Delivering one combat exchange.

An *interaction* is a synchronous request/response between two units:
the source builds an ``InteractionPayload``, ``interact()`` hands it to
the target's ``receive_interaction()``, and the target answers with an
``InteractionResult`` before the source carries on.

    payload = InteractionPayload(call=None, value=1, offensive=True)
    result = interact(world, attacker, defender, payload)
    if result.value_received: ...
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from numbers import Real

from core.ecs import World
from components import Health
from logic.calls import Call
from logic.teams import entity_display_name


@dataclass(frozen=True)
class InteractionPayload:
    """What the source sends.  ``offensive`` payloads can be parried;
    the rest heal."""
    call: Call | None = None
    value: float = 1.0
    offensive: bool = True

    def __post_init__(self):
        if self.call is not None and not isinstance(self.call, Call):
            raise TypeError(f"payload call must be a Call or None, got {type(self.call).__name__}")
        if isinstance(self.value, bool) or not isinstance(self.value, Real):
            raise TypeError(f"payload value must be a number, got {self.value!r}")
        if math.isnan(self.value) or self.value < 0:
            raise ValueError(f"payload value must be >= 0, got {self.value!r}")
        if not isinstance(self.offensive, bool):
            raise TypeError(f"payload offensive must be a bool, got {self.offensive!r}")


@dataclass(frozen=True)
class InteractionResult:
    """What the target answers: HP actually changed and whether the call took."""
    value_received: float = 0.0
    call_taken: bool = False

    def __post_init__(self):
        if isinstance(self.value_received, bool) or not isinstance(self.value_received, Real):
            raise TypeError(f"result value must be a number, got {self.value_received!r}")
        if not isinstance(self.call_taken, bool):
            raise TypeError(f"result call_taken must be a bool, got {self.call_taken!r}")


def interact(world: World, source: int | None, target: int,
             payload: InteractionPayload) -> InteractionResult:
    """Deliver *payload* from *source* to *target* and return the answer.

    Raises ``TypeError`` for a malformed payload or a target that is not
    a combat entity.  A dead target is not an error: the exchange is
    dropped with a warning and an empty result.
    """
    from logic.combat.damage import receive_interaction

    if not isinstance(payload, InteractionPayload):
        raise TypeError(f"expected InteractionPayload, got {type(payload).__name__}")
    if target is None or not world.alive(target) or not world.has(target, Health):
        raise TypeError(f"target {target!r} is not a combat entity")

    if not world.get(target, Health).alive:
        print(f"[COMBAT] {entity_display_name(world, source)} → "
              f"{entity_display_name(world, target)}: target already dead")
        return InteractionResult(0.0, False)

    result = receive_interaction(world, target, payload, source=source)
    if not isinstance(result, InteractionResult):
        raise TypeError(f"expected InteractionResult, got {type(result).__name__}")
    return result
