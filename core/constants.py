"""core/constants.py — Shared constants used across the codebase.

Centralises magic strings so there's exactly one place to change them.

Unit System
-----------
The battlefield is measured in **pixels** (the host renderer draws 1:1)
and all timers in **milliseconds**, matching the frame ``delta`` the
host hands to ``tick_systems``:

    Distance / position     px
    Speed                   px/s
    Acceleration            px/s²
    Time                    ms      (rethink timers, wind-ups, cooldowns)
    Call durations          s       (as printed on the call card)
    Health                  HP      (one clean hit = 1 HP)
    Parry rate              —       (probability 0–1)
    Angles                  rad

Tunable numbers live in ``data/tuning.toml``; only fixed vocabularies
live here.
"""

# ── Team relationships ──────────────────────────────────────────────
ALLY = "ally"
ENEMY = "enemy"
NEUTRAL = "neutral"
UNKNOWN = "unknown"

RELATIONSHIPS = (ALLY, ENEMY, NEUTRAL, UNKNOWN)

# ── Unit statuses ───────────────────────────────────────────────────
STATUS_OK = "ok"
STATUS_TRAUMATIZED = "traumatized"   # severely injured, physical trauma
STATUS_ENTANGLED = "entangled"       # cannot move legs
STATUS_PARALYSED = "paralysed"       # cannot move at all
STATUS_DYING = "dying"               # counting down to their demise
STATUS_DEAD = "dead"                 # cannot do anything

STATUSES = (STATUS_OK, STATUS_TRAUMATIZED, STATUS_ENTANGLED,
            STATUS_PARALYSED, STATUS_DYING, STATUS_DEAD)

# ── Limb health ─────────────────────────────────────────────────────
LIMB_OK = "ok"
LIMB_RUINED = "ruined"
LIMB_MISSING = "missing"

# ── Landmark kinds ──────────────────────────────────────────────────
LANDMARK_RESPAWN = "respawn"
LANDMARK_RALLY = "rally"

# ── Presentation ────────────────────────────────────────────────────
DEFAULT_COLOUR = "#888888"      # units and teams without a colour
