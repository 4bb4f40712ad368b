"""components.rendering — Identity and visual state handed to the host."""

from __future__ import annotations
from dataclasses import dataclass

from core.constants import DEFAULT_COLOUR


@dataclass
class Identity:
    name: str = ""
    kind: str = "unit"      # unit | landmark


@dataclass
class Appearance:
    """Visual tags the core writes and never reads back.

    ``colour`` is a hex string (team colour, or the corpse colour while
    dead).  ``face`` is the stance's face tag (``smile``, ``angry_shout``,
    ``dead``, …).
    """
    colour: str = DEFAULT_COLOUR
    face: str | None = None
