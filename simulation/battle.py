"""simulation/battle.py — Top-level battle manager.

Provides the ``Battle`` class that builds a world with every resource
the simulation needs and exposes ``step()`` / ``run()`` for the host
loop (or a test).

Usage::

    battle = Battle(seed=1)
    battle.add_team("red", "#cc3333")
    battle.add_team("blue", "#3355cc")
    battle.set_relationship("red", "blue", "enemy")
    battle.spawn_unit(100, 300, "red")
    battle.spawn_unit(700, 300, "blue")
    battle.run(10_000)
    print(battle.summary())

Or from a scenario file::

    battle = Battle.from_toml("data/scenarios/skirmish.toml")
"""

from __future__ import annotations
import random
from pathlib import Path
from typing import Any

try:
    import tomllib                         # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib                # pip install tomli

from core.ecs import World
from core.events import EventBus
from core.tuning import get as _tun
from core.constants import DEFAULT_COLOUR, ENEMY, ALLY, NEUTRAL
from components import (
    GameClock, Arena, DevLog, Teams, Team, Health, Mind, Identity,
)
from logic.repertoire import default_rulebook
from logic.rules import Rulebook
from logic.tick import tick_systems
from logic.entity_factory import (
    spawn_unit, spawn_respawn_point, spawn_rally_point,
    spawn_from_descriptor, describe_unit,
)
from logic.combat.attacks import register_strike_handlers
from simulation.scheduler import WorldScheduler


class Battle:
    """Owns one battlefield: the world, its resources and the frame loop."""

    def __init__(self, world: World | None = None, *,
                 rulebook: Rulebook | None = None,
                 width: float | None = None, height: float | None = None,
                 seed: int | None = None) -> None:
        self.world = world if world is not None else World()
        self.seed = seed
        if seed is not None:
            random.seed(seed)

        self.scheduler = WorldScheduler()
        register_strike_handlers(self.scheduler)
        self.rulebook = rulebook or default_rulebook()
        self.teams = Teams()
        self.bus = EventBus()
        self.log = DevLog(max_entries=int(_tun("log", "dev_log_size", 500)))
        self.clock = GameClock()
        self.arena = Arena(
            width=width if width is not None else _tun("arena", "width", 800.0),
            height=height if height is not None else _tun("arena", "height", 600.0),
            debug=bool(_tun("arena", "debug", False)),
        )

        w = self.world
        w.set_res(self.scheduler)
        w.set_res(self.rulebook)
        w.set_res(self.teams)
        w.set_res(self.bus)
        w.set_res(self.log)
        w.set_res(self.clock)
        w.set_res(self.arena)

    # ── Setup ────────────────────────────────────────────────────────

    def add_team(self, name: str, colour: str = DEFAULT_COLOUR) -> Team:
        team = self.teams.add(Team(name=name, colour=colour))
        print(f"[TEAM] {name} ({colour})")
        return team

    def set_relationship(self, a: str, b: str, relationship: str,
                         mutual: bool = True) -> None:
        """Set how team *a* regards *b* (and *b* regards *a* if *mutual*)."""
        ta, tb = self.teams.get(a), self.teams.get(b)
        if ta is None or tb is None:
            raise ValueError(f"unknown team in relationship {a!r} → {b!r}")
        ta.set_relationship(b, relationship)
        if mutual:
            tb.set_relationship(a, relationship)

    def spawn_unit(self, x: float, y: float, team: str | None = None,
                   **kwargs: Any) -> int:
        return spawn_unit(self.world, x, y, team, **kwargs)

    def add_respawn_point(self, x: float, y: float, team: str,
                          size: float | None = None) -> int:
        return spawn_respawn_point(self.world, x, y, team, size)

    def add_rally_point(self, x: float, y: float, team: str,
                        size: float | None = None) -> int:
        return spawn_rally_point(self.world, x, y, team, size)

    def remove(self, eid: int) -> None:
        """Take *eid* out of the battle for good.

        It stops existing at once; its components, queued events and
        roster places are dropped at the end of the next frame.
        """
        self.world.kill(eid)

    # ── Per-frame tick ───────────────────────────────────────────────

    def step(self, delta: float | None = None) -> None:
        """Advance one frame of *delta* ms (default ``battle.frame_ms``)."""
        if delta is None:
            delta = _tun("battle", "frame_ms", 16.0)
        tick_systems(self.world, delta)

    def run(self, duration_ms: float, delta: float | None = None) -> int:
        """Step until *duration_ms* of battle time has passed.  Returns frames run."""
        if delta is None:
            delta = _tun("battle", "frame_ms", 16.0)
        end = self.clock.time + duration_ms
        frames = 0
        while self.clock.time < end:
            self.step(min(delta, end - self.clock.time))
            frames += 1
        return frames

    # ── Queries ──────────────────────────────────────────────────────

    @property
    def time(self) -> float:
        return self.clock.time

    def units(self, team: str | None = None) -> list[int]:
        if team is None:
            return [eid for eid, _ in self.world.query(Mind)]
        t = self.teams.get(team)
        return sorted(t.units) if t else []

    def alive_count(self, team: str | None = None) -> int:
        count = 0
        for eid in self.units(team):
            health = self.world.get(eid, Health)
            if health is not None and health.alive:
                count += 1
        return count

    def summary(self) -> dict:
        """Time, per-team head count and a snapshot of every unit."""
        teams = {}
        for team in self.teams:
            alive = self.alive_count(team.name)
            teams[team.name] = {
                "units": len(team.units),
                "alive": alive,
                "dead": len(team.units) - alive,
            }
        return {
            "time": self.clock.time,
            "teams": teams,
            "units": [describe_unit(self.world, eid) for eid in self.units()],
            "events": self.bus.stats(),
        }

    def debug_info(self) -> dict:
        return {
            "time": self.clock.time,
            "pending_events": self.scheduler.pending_count(),
            "events_processed": self.scheduler.events_processed,
            "next_event_time": self.scheduler.peek_time(),
            "upcoming": self.scheduler.debug_dump(10),
        }

    # ── Scenario files ───────────────────────────────────────────────

    @classmethod
    def from_toml(cls, filepath: str | Path, seed: int | None = None) -> "Battle":
        """Build a battle from a scenario file.

        Expected format::

            [battle]
            seed = 7

            [arena]
            width = 800
            height = 600

            [[teams]]
            name = "red"
            colour = "#cc3333"
            enemies = ["blue"]

            [[respawn_points]]
            team = "red"
            x = 60
            y = 300

            [[units]]
            team = "red"
            x = 150
            y = 200
            count = 3
            weapon = "spear"
            shield = true
            armour = { hp = 1, resist = ["ENTANGLE"] }
        """
        filepath = Path(filepath)
        if not filepath.exists():
            print(f"[SIM] scenario file not found: {filepath}")
            return cls(seed=seed)

        with open(filepath, "rb") as f:
            data = tomllib.load(f)

        meta = data.get("battle", {})
        arena = data.get("arena", {})
        if seed is None and "seed" in meta:
            seed = int(meta["seed"])
        battle = cls(width=arena.get("width"), height=arena.get("height"), seed=seed)

        team_rows = data.get("teams", [])
        for row in team_rows:
            battle.add_team(row["name"], row.get("colour", DEFAULT_COLOUR))
        for row in team_rows:
            for key, rel in (("enemies", ENEMY), ("allies", ALLY), ("neutral", NEUTRAL)):
                for other in row.get(key, []):
                    battle.set_relationship(row["name"], other, rel, mutual=False)

        for row in data.get("respawn_points", []):
            battle.add_respawn_point(float(row["x"]), float(row["y"]), row["team"],
                                     row.get("size"))
        for row in data.get("rally_points", []):
            battle.add_rally_point(float(row["x"]), float(row["y"]), row["team"],
                                   row.get("size"))

        count = 0
        for row in data.get("units", []):
            count += len(spawn_from_descriptor(battle.world, row))

        print(f"[SIM] Loaded {filepath.name}: {len(battle.teams)} teams, {count} units")
        return battle

    def __repr__(self) -> str:
        names = [i.name for _, i in self.world.query(Identity)]
        return f"Battle(t={self.clock.time:.0f}ms, entities={len(names)})"
