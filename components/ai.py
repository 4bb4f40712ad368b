"""components.ai — Per-unit decision progress."""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any


@dataclass
class Mind:
    """Where a unit is in its Stance → Action → Motion cycle.

    The stance, action and motions it points at are shared rulebook
    objects; ``Mind`` only records progress through them.

    ``rethink_timer``     — ms until the next re-evaluation.
    ``completed_actions`` — primary actions finished in the current stance.
    ``motion_index``      — index of the current motion in ``action.motions``.
    ``completed_motions`` — indices finished within the current action.
    ``target``            — entity id of a unit or landmark, or None.
    """
    rethink_timer: float = 0.0
    stance: Any = None
    action: Any = None
    completed_actions: list[Any] = field(default_factory=list)
    motion_index: int | None = None
    completed_motions: list[int] = field(default_factory=list)
    target: int | None = None

    @property
    def motion(self) -> Any:
        """The current Motion, or None."""
        if self.action is None or self.motion_index is None:
            return None
        if 0 <= self.motion_index < len(self.action.motions):
            return self.action.motions[self.motion_index]
        return None

    def describe(self) -> str:
        """``STANCE/ACTION/MOTION`` for logs and summaries."""
        parts = [getattr(x, "name", "-") if x is not None else "-"
                 for x in (self.stance, self.action, self.motion)]
        return "/".join(parts)
