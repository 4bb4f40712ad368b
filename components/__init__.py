"""components — ECS component dataclasses, organised by domain.

Submodules
----------
spatial        Position, Velocity, Facing, Collider, Mover
rendering      Identity, Appearance
rpg            Health, Limbs, Statuses
combat         Parry, Parryable, Weapon, Shield, Armour, Equipment
ai             Mind
social         TeamMember, Team, Teams
landmarks      Landmark, WaitingArea
resources      GameClock, Arena
dev_log        DevLog

All public names are re-exported here so callers can write
``from components import Position``.
"""

# ── Spatial ──────────────────────────────────────────────────────────
from components.spatial import Position, Velocity, Facing, Collider, Mover

# ── Rendering ────────────────────────────────────────────────────────
from components.rendering import Identity, Appearance

# ── RPG ──────────────────────────────────────────────────────────────
from components.rpg import Health, Limbs, Statuses

# ── Combat ───────────────────────────────────────────────────────────
from components.combat import Parry, Parryable, Weapon, Shield, Armour, Equipment

# ── AI ───────────────────────────────────────────────────────────────
from components.ai import Mind

# ── Social ───────────────────────────────────────────────────────────
from components.social import TeamMember, Team, Teams

# ── Landmarks ────────────────────────────────────────────────────────
from components.landmarks import Landmark, WaitingArea

# ── World resources / singletons ─────────────────────────────────────
from components.resources import GameClock, Arena
from components.dev_log import DevLog

__all__ = [
    # spatial
    "Position", "Velocity", "Facing", "Collider", "Mover",
    # rendering
    "Identity", "Appearance",
    # rpg
    "Health", "Limbs", "Statuses",
    # combat
    "Parry", "Parryable", "Weapon", "Shield", "Armour", "Equipment",
    # ai
    "Mind",
    # social
    "TeamMember", "Team", "Teams",
    # landmarks
    "Landmark", "WaitingArea",
    # resources
    "GameClock", "Arena", "DevLog",
]
