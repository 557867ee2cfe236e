"""Tile, direction, and animation enums for the puzzle grid.

Coordinates are ``(x, y)`` with ``x`` the column and ``y`` the row, so ``y``
grows downward. The grid itself is stored row-major (``grid[y][x]``).
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple


class Tile(str, Enum):
    """What occupies a grid cell."""

    EMPTY = "EMPTY"
    WALL = "WALL"
    START = "START"
    END = "END"      # Flag
    STAR = "STAR"    # Collectible, non-blocking
    HOLE = "HOLE"    # Walkable hazard: entering ends the run
    KEY = "KEY"      # Collectible, opens every door
    DOOR = "DOOR"    # Blocking until a key is collected
    # Returned for coordinates outside the grid; never stored in a level
    OUT_OF_BOUNDS = "BOUNDS"

    @property
    def is_wall_like(self) -> bool:
        """Walls and the area outside the grid block every move."""
        return self in (Tile.WALL, Tile.OUT_OF_BOUNDS)

    @property
    def symbol(self) -> str:
        return TILE_SYMBOLS[self]

    @classmethod
    def from_symbol(cls, token: str) -> "Tile":
        """Resolve a compact symbol (``#``, ``W``) or tile name (``WALL``)."""
        if token in SYMBOL_TILES:
            return SYMBOL_TILES[token]
        try:
            tile = cls(token.upper())
        except ValueError:
            raise ValueError(f"Unknown tile symbol {token!r}") from None
        if tile is Tile.OUT_OF_BOUNDS:
            raise ValueError("OUT_OF_BOUNDS cannot appear inside a level grid")
        return tile


TILE_SYMBOLS: Dict[Tile, str] = {
    Tile.EMPTY: ".",
    Tile.WALL: "#",
    Tile.START: "S",
    Tile.END: "F",
    Tile.STAR: "*",
    Tile.HOLE: "O",
    Tile.KEY: "K",
    Tile.DOOR: "D",
    Tile.OUT_OF_BOUNDS: " ",
}

SYMBOL_TILES: Dict[str, Tile] = {
    symbol: tile for tile, symbol in TILE_SYMBOLS.items() if tile is not Tile.OUT_OF_BOUNDS
}
# Shorthand from the game's level table. ``ST`` only fits list rows.
SYMBOL_TILES.update({"W": Tile.WALL, "E": Tile.EMPTY, "ST": Tile.STAR})


class Direction(str, Enum):
    """Facing of the runner."""

    UP = "UP"
    RIGHT = "RIGHT"
    DOWN = "DOWN"
    LEFT = "LEFT"

    @property
    def offset(self) -> Tuple[int, int]:
        """(dx, dy) displacement of one step forward."""
        return _OFFSETS[self]

    def turned_right(self) -> "Direction":
        return _CLOCKWISE[(_CLOCKWISE.index(self) + 1) % 4]

    def turned_left(self) -> "Direction":
        return _CLOCKWISE[(_CLOCKWISE.index(self) + 3) % 4]

    @property
    def arrow(self) -> str:
        return _ARROWS[self]


_CLOCKWISE = (Direction.UP, Direction.RIGHT, Direction.DOWN, Direction.LEFT)

_OFFSETS: Dict[Direction, Tuple[int, int]] = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}

_ARROWS: Dict[Direction, str] = {
    Direction.UP: "^",
    Direction.RIGHT: ">",
    Direction.DOWN: "v",
    Direction.LEFT: "<",
}


class AnimationHint(str, Enum):
    """Transient hint for the presentation layer, reset every step."""

    IDLE = "IDLE"
    DENY = "DENY"
