"""Pydantic schemas for the runner's position on the grid.

These mirror the plain enums in ``tiles.py`` and keep pose snapshots
serializable so they can cross the boundary to the presentation layer.
"""

from __future__ import annotations

from typing import Tuple

from pydantic import BaseModel, Field

from .tiles import AnimationHint, Direction


class Pose(BaseModel):
    """Grid coordinates, facing, and the transient animation hint."""

    x: int = Field(..., description="Column index")
    y: int = Field(..., description="Row index (grows downward)")
    dir: Direction = Field(Direction.RIGHT, description="Facing direction")
    animation: AnimationHint = Field(
        AnimationHint.IDLE,
        description="IDLE, or DENY when the last action was blocked",
    )

    @property
    def position(self) -> Tuple[int, int]:
        return (self.x, self.y)

    def ahead(self, distance: int = 1) -> Tuple[int, int]:
        """Cell ``distance`` steps in front of the runner."""
        dx, dy = self.dir.offset
        return (self.x + dx * distance, self.y + dy * distance)
