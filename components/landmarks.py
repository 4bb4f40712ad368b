"""components.landmarks — Static places units can walk to."""

from __future__ import annotations
from dataclasses import dataclass, field

from core.constants import LANDMARK_RESPAWN


@dataclass
class Landmark:
    """A respawn or rally point affiliated with a team.

    ``size`` is the landmark's width; a unit closer than that to a
    respawn point counts as having reached it.
    """
    kind: str = LANDMARK_RESPAWN      # respawn | rally
    team: str | None = None
    size: float = 100.0               # px


@dataclass
class WaitingArea:
    """Queue of dead units waiting at a respawn point.

    When ``queue`` reaches ``capacity`` every queued unit respawns at
    once and the queue empties.
    """
    capacity: int = 2
    queue: list[int] = field(default_factory=list)

    @property
    def full(self) -> bool:
        return len(self.queue) >= self.capacity
