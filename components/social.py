"""components.social — Team allegiance and the relationship matrix."""

from __future__ import annotations
from dataclasses import dataclass, field

from core.constants import ALLY, UNKNOWN, RELATIONSHIPS, DEFAULT_COLOUR


@dataclass
class TeamMember:
    """Which team this unit fights for.

    Holds the team's *name* only; the ``Teams`` resource owns the
    ``Team`` objects and each ``Team`` owns its roster of unit ids.
    """
    team: str | None = None


@dataclass
class Team:
    """A side in the battle.

    ``units`` is the roster (entity ids).  ``relationships`` maps other
    team names to ``ally`` / ``enemy`` / ``neutral`` / ``unknown``; a
    team is its own ally unless told otherwise, and any pair never set
    reads as ``unknown``.  ``respawn_points`` and ``rally_points`` are
    landmark entity ids; the team lists them but does not own them.
    """
    name: str
    colour: str = DEFAULT_COLOUR
    units: set[int] = field(default_factory=set)
    relationships: dict[str, str] = field(default_factory=dict)
    respawn_points: list[int] = field(default_factory=list)
    rally_points: list[int] = field(default_factory=list)

    def __post_init__(self):
        self.relationships.setdefault(self.name, ALLY)

    # ── Roster ───────────────────────────────────────────────────────

    def add_unit(self, eid: int) -> None:
        self.units.add(eid)

    def remove_unit(self, eid: int) -> None:
        self.units.discard(eid)

    # ── Relationships ────────────────────────────────────────────────

    def set_relationship(self, team_name: str, relationship: str) -> None:
        if relationship not in RELATIONSHIPS:
            raise ValueError(
                f"invalid relationship {relationship!r} for team {self.name!r}; "
                f"expected one of {', '.join(RELATIONSHIPS)}")
        self.relationships[team_name] = relationship

    def get_relationship(self, team_name: str | None) -> str:
        if team_name is None:
            return UNKNOWN
        return self.relationships.get(team_name, UNKNOWN)


class Teams:
    """Registry of every team in the battle, stored as a world resource."""

    def __init__(self):
        self._teams: dict[str, Team] = {}

    def add(self, team: Team) -> Team:
        if team.name in self._teams:
            raise ValueError(f"team {team.name!r} already registered")
        self._teams[team.name] = team
        return team

    def get(self, name: str | None) -> Team | None:
        if name is None:
            return None
        return self._teams.get(name)

    def names(self) -> list[str]:
        return list(self._teams)

    def __iter__(self):
        return iter(self._teams.values())

    def __len__(self) -> int:
        return len(self._teams)

    def __contains__(self, name: str) -> bool:
        return name in self._teams

    def __repr__(self) -> str:
        return f"Teams({', '.join(self._teams)})"
