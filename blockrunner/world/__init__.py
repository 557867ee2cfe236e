"""Grid world model for Blockrunner levels."""

from .tiles import AnimationHint, Direction, Tile, TILE_SYMBOLS
from .schemas import Pose
from .helpers import coord_key, parse_coord_key, render_ascii

__all__ = [
    "AnimationHint",
    "Direction",
    "Tile",
    "TILE_SYMBOLS",
    "Pose",
    "coord_key",
    "parse_coord_key",
    "render_ascii",
]
