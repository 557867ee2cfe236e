"""Utilities for grid coordinates and debug rendering."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Iterable, List, Optional, Tuple

from .schemas import Pose
from .tiles import Tile

if TYPE_CHECKING:  # pragma: no cover
    from ..schemas import Level


def coord_key(x: int, y: int) -> str:
    """Encode a cell as ``"x,y"``, the form used in step snapshots."""
    return f"{int(x)},{int(y)}"


_COORD_KEY = re.compile(r"(0|[1-9][0-9]*),(0|[1-9][0-9]*)")


def parse_coord_key(key: str) -> Tuple[int, int]:
    """Decode a ``"x,y"`` cell key back into integers.

    Raises:
        ValueError: If the key is not two non-negative integers without
            leading zeros, separated by a single comma
    """
    match = _COORD_KEY.fullmatch(key)
    if match is None:
        raise ValueError(f"Malformed coordinate key {key!r}; expected 'x,y'")
    return int(match.group(1)), int(match.group(2))


# Collected collectibles and opened doors are drawn with these instead of the
# static tile symbol.
_COLLECTED_SYMBOL = Tile.EMPTY.symbol
_OPENED_DOOR_SYMBOL = "/"


def render_ascii(
    level: "Level",
    pose: Optional[Pose] = None,
    *,
    collected_stars: Iterable[str] = (),
    collected_keys: Iterable[str] = (),
    opened_doors: Iterable[str] = (),
) -> str:
    """Render the level as text, overlaying run-local state.

    The runner is drawn as an arrow for its facing. Cell sets use the same
    ``"x,y"`` keys as ``StepResult`` so a snapshot can be passed straight in.
    """

    stars = set(collected_stars)
    keys = set(collected_keys)
    doors = set(opened_doors)

    lines: List[str] = []
    for y, row in enumerate(level.grid):
        chars: List[str] = []
        for x, tile in enumerate(row):
            key = coord_key(x, y)
            if pose is not None and (pose.x, pose.y) == (x, y):
                chars.append(pose.dir.arrow)
            elif tile is Tile.STAR and key in stars:
                chars.append(_COLLECTED_SYMBOL)
            elif tile is Tile.KEY and key in keys:
                chars.append(_COLLECTED_SYMBOL)
            elif tile is Tile.DOOR and key in doors:
                chars.append(_OPENED_DOOR_SYMBOL)
            else:
                chars.append(tile.symbol)
        lines.append("".join(chars))
    return "\n".join(lines)
