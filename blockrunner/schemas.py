"""
Pydantic schemas for Blockrunner programs, levels, and step snapshots.

All data crossing the engine boundary is defined here.

Design Philosophy:
- Programs, levels, and snapshots are plain data with no behaviour attached
  beyond read-only helpers
- Pydantic validation lets editor/level JSON flow straight into the engine
- The original game's camelCase keys (``type``, ``loopCount``, ``minStars``,
  ...) are accepted as aliases next to the snake_case field names
"""

from __future__ import annotations

from enum import Enum
from typing import Any, List, Optional, Set, Tuple
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from blockrunner.world import Pose, Tile


# ============================================================================
# Instruction Tree
# ============================================================================


class InstructionKind(str, Enum):
    """Discriminator for instruction blocks."""

    # Primitive actions
    MOVE_FORWARD = "MOVE_FORWARD"
    TURN_LEFT = "TURN_LEFT"
    TURN_RIGHT = "TURN_RIGHT"
    JUMP = "JUMP"
    # Control blocks (own a child sequence)
    LOOP = "LOOP"              # Fixed-repeat loop
    WHILE_PATH = "WHILE_PATH"  # While the path ahead is clear
    IF_STAR = "IF_STAR"        # If standing on an uncollected star
    IF_WALL = "IF_WALL"        # If facing a wall

    @property
    def is_control(self) -> bool:
        return self in CONTROL_KINDS


CONTROL_KINDS = frozenset(
    {
        InstructionKind.LOOP,
        InstructionKind.WHILE_PATH,
        InstructionKind.IF_STAR,
        InstructionKind.IF_WALL,
    }
)


class Instruction(BaseModel):
    """One block in a program tree.

    Control kinds own an ordered list of children; primitive kinds leave
    ``instructions`` as None. Every child belongs to exactly one parent list,
    so the tree is never aliased and never cyclic.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid4()), description="Stable block id")
    kind: InstructionKind = Field(..., alias="type", description="Block type")
    # Editor convention is 2-9; the engine treats a missing or zero count as 1
    loop_count: Optional[int] = Field(
        None, alias="loopCount", description="Iterations for LOOP blocks"
    )
    instructions: Optional[List[Instruction]] = Field(
        None, description="Nested blocks for control kinds"
    )

    @property
    def children(self) -> List[Instruction]:
        """Child sequence, empty for primitives and empty bodies."""
        return self.instructions or []


Instruction.model_rebuild()


# ============================================================================
# Level
# ============================================================================


class Level(BaseModel):
    """Immutable puzzle definition: grid, start pose, and win requirement.

    The grid is row-major (``grid[y][x]``). ``tile_at`` is the only way the
    engine reads it; coordinates outside the grid report
    ``Tile.OUT_OF_BOUNDS``. The engine judges reachability only as the
    program executes, never by analysing the grid up front.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int = Field(0, description="Level number")
    name: str = Field("", description="Display name")
    grid: List[List[Tile]] = Field(..., description="Rows of tiles")
    start: Pose = Field(..., description="Runner's starting pose")
    available_blocks: List[InstructionKind] = Field(
        default_factory=lambda: list(InstructionKind),
        alias="availableBlocks",
        description="Block kinds offered to the player",
    )
    min_stars: int = Field(
        0, ge=0, alias="minStars", description="Stars required for a flag arrival to win"
    )
    best_block_count: Optional[int] = Field(
        None, alias="bestBlockCount", description="Par score for blocks used"
    )
    tutorial_text: Optional[str] = Field(None, alias="tutorialText")

    @field_validator("grid", mode="before")
    @classmethod
    def _parse_grid(cls, value: Any) -> Any:
        # Rows may be compact strings ("#S.F#") or lists of symbols/names.
        if not isinstance(value, (list, tuple)):
            return value
        rows = []
        for row in value:
            tokens = list(row) if isinstance(row, str) else row
            rows.append([t if not isinstance(t, str) else Tile.from_symbol(t) for t in tokens])
        return rows

    @model_validator(mode="after")
    def _check_shape(self) -> Level:
        if not self.grid or not self.grid[0]:
            raise ValueError("Level grid must have at least one row and one column")
        width = len(self.grid[0])
        for y, row in enumerate(self.grid):
            if len(row) != width:
                raise ValueError(
                    f"Level grid must be rectangular: row {y} has {len(row)} tiles, expected {width}"
                )
        return self

    @property
    def rows(self) -> int:
        return len(self.grid)

    @property
    def cols(self) -> int:
        return len(self.grid[0])

    def tile_at(self, x: int, y: int) -> Tile:
        """Tile at ``(x, y)``, or ``Tile.OUT_OF_BOUNDS`` outside the grid."""
        if 0 <= y < self.rows and 0 <= x < self.cols:
            return self.grid[y][x]
        return Tile.OUT_OF_BOUNDS

    def cells_of(self, tile: Tile) -> List[Tuple[int, int]]:
        """All ``(x, y)`` cells holding ``tile``, in row-major order."""
        return [
            (x, y)
            for y, row in enumerate(self.grid)
            for x, cell in enumerate(row)
            if cell is tile
        ]


# ============================================================================
# Run Status and Snapshots
# ============================================================================


class RunStatus(str, Enum):
    """Lifecycle of a run.

    The engine only ever reports RUNNING, COMPLETED, or FAILED. ERROR is set
    by a host driver when something outside normal gameplay goes wrong.
    """

    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    ERROR = "ERROR"

    @property
    def is_terminal(self) -> bool:
        return self is not RunStatus.RUNNING


class StepResult(BaseModel):
    """Snapshot returned by every ``ExecutionEngine.step()`` call.

    This is everything the presentation layer needs: where to draw the
    runner, which block to highlight, which collectibles to hide, which doors
    to draw open, and what to show in the win/lose dialog.
    """

    pose: Pose = Field(..., description="Runner pose after the step")
    active_instruction_id: Optional[str] = Field(
        None, description="Block touched by this step, None when no block was"
    )
    status: RunStatus = Field(..., description="Run status after the step")
    collected_stars: Set[str] = Field(default_factory=set, description='"x,y" keys')
    collected_keys: Set[str] = Field(default_factory=set, description='"x,y" keys')
    opened_doors: Set[str] = Field(default_factory=set, description='"x,y" keys')
    message: Optional[str] = Field(None, description="Human-readable outcome note")

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal
