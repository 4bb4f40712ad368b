"""components.spatial — Position, movement, and collision shapes.

All coordinates and dimensions are in pixels; speeds in px/s.
"""

from __future__ import annotations
from dataclasses import dataclass


@dataclass
class Position:
    x: float = 0.0        # px
    y: float = 0.0        # px


@dataclass
class Velocity:
    x: float = 0.0        # px/s
    y: float = 0.0        # px/s


@dataclass
class Facing:
    """Which way an entity faces, in radians (0 = +x, π/2 = +y).

    Written by ``move_to`` and ``strike``; read by the thrust and shield
    tweens on the presentation side.
    """
    angle: float = 0.0


@dataclass
class Collider:
    """Circular body.

    ``solid`` bodies push each other apart.  A dead unit becomes a
    ``corpse``: non-solid, so the living can step over it.
    """
    radius: float = 20.0  # px
    solid: bool = True
    corpse: bool = False


@dataclass
class Mover:
    """Locomotion intent consumed by ``movement_system``.

    ``move_to`` sets ``ax/ay`` along the facing and flags
    ``trying_to_move``; ``stand_still`` clears both and lets drag
    bring the body to a halt.
    """
    move_speed: float = 150.0     # px/s
    acceleration: float = 800.0   # px/s²
    ax: float = 0.0               # px/s²
    ay: float = 0.0               # px/s²
    trying_to_move: bool = False
