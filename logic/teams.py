"""logic/teams.py — Canonical team membership helpers.

Every call-site that moves a unit between teams or asks "are these two
on opposite sides?" should come through here so the roster, the
``TeamMember`` tag and the unit's colour never drift apart.

Public API
----------
``set_team``             — move a unit onto a team (roster + tag + colour)
``team_of``              — the unit's ``Team`` object, or None
``relationship``         — how *eid*'s team regards *other*'s team
``team_colour``          — colour a living unit of *eid*'s team wears
``entity_display_name``  — consistent name for logging
"""

from __future__ import annotations
from typing import Any

from components import Identity, TeamMember, Teams, Team, Appearance, Health
from core.constants import UNKNOWN, DEFAULT_COLOUR


def entity_display_name(world: Any, eid: int | None) -> str:
    """Return display name of an entity, or ``'?'`` if unknown."""
    ident = world.get(eid, Identity)
    if ident and ident.name:
        return ident.name
    return f"#{eid}" if eid is not None else "?"


def team_of(world: Any, eid: int | None) -> Team | None:
    member = world.get(eid, TeamMember)
    teams = world.res(Teams)
    if member is None or teams is None:
        return None
    return teams.get(member.team)


def relationship(world: Any, eid: int, other: int) -> str:
    """Relationship of *eid*'s team toward *other*'s team."""
    mine = team_of(world, eid)
    theirs = world.get(other, TeamMember)
    if mine is None or theirs is None:
        return UNKNOWN
    return mine.get_relationship(theirs.team)


def team_colour(world: Any, eid: int) -> str:
    team = team_of(world, eid)
    return team.colour if team else DEFAULT_COLOUR


def set_team(world: Any, eid: int, team: Team | str | None) -> None:
    """Put *eid* on *team* (object or name), leaving any previous team.

    ``None`` leaves the unit teamless.  A living unit takes the new
    team's colour straight away; a corpse keeps the corpse colour.
    """
    teams = world.res(Teams)
    if isinstance(team, str):
        found = teams.get(team) if teams else None
        if found is None:
            raise ValueError(f"unknown team {team!r}")
        team = found

    old = team_of(world, eid)
    if old is not None:
        old.remove_unit(eid)

    member = world.get(eid, TeamMember)
    if member is None:
        member = TeamMember()
        world.add(eid, member)
    member.team = team.name if team else None

    if team is not None:
        team.add_unit(eid)

    health = world.get(eid, Health)
    app = world.get(eid, Appearance)
    if app is not None and (health is None or health.alive):
        app.colour = team.colour if team else DEFAULT_COLOUR

    if old is not team:
        name = entity_display_name(world, eid)
        print(f"[TEAM] {name} joins {team.name if team else 'no team'}")
