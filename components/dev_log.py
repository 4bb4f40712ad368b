"""components.dev_log — Structured decision / combat event log.

A ring-buffer resource that records timestamped stance changes, action
and motion picks, fallbacks, hits, parries, deaths and respawns.  The
headless runner prints its tail; tests read it to see *why* a unit did
what it did.

Usage:
    log = world.res(DevLog)
    log.record(eid, "stance", "→ CHARGE", t=clock.time, details={"target": 7})

Each entry is a dict:
    {"t": float, "eid": int, "name": str, "cat": str,
     "msg": str, "details": dict | None}
"""

from __future__ import annotations
from dataclasses import dataclass, field


@dataclass
class DevLog:
    """Ring-buffer of decision / combat events."""

    entries: list[dict] = field(default_factory=list)
    max_entries: int = 500

    # If non-empty, only these categories are kept.
    cat_filter: set[str] = field(default_factory=set)
    # If non-empty, only these entities are kept.
    eid_filter: set[int] = field(default_factory=set)

    def record(self, eid: int, cat: str, msg: str, *,
               name: str = "", t: float = 0.0,
               details: dict | None = None) -> None:
        if self.cat_filter and cat not in self.cat_filter:
            return
        if self.eid_filter and eid not in self.eid_filter:
            return
        self.entries.append({
            "t": t,
            "eid": eid,
            "name": name,
            "cat": cat,
            "msg": msg,
            "details": details,
        })
        if len(self.entries) > self.max_entries:
            del self.entries[:-self.max_entries]

    def clear(self):
        self.entries.clear()

    def recent(self, n: int = 50) -> list[dict]:
        """Return the *n* most recent entries (newest last)."""
        return self.entries[-n:]

    def for_eid(self, eid: int, n: int = 30) -> list[dict]:
        return [e for e in self.entries if e["eid"] == eid][-n:]

    def for_cat(self, cat: str, n: int = 50) -> list[dict]:
        return [e for e in self.entries if e["cat"] == cat][-n:]

    def format(self, entry: dict) -> str:
        """One-line rendering used by the headless runner."""
        who = entry["name"] or f"#{entry['eid']}"
        return f"{entry['t']:>8.0f}ms  {entry['cat']:<8} {who}: {entry['msg']}"
