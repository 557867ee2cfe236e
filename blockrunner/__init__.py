"""
Blockrunner - stepwise interpreter for block-programmed grid puzzles.

Drive a runner around a tile grid with a tree of instruction blocks, one
discrete step at a time.

No global state. No rendering. No timers in the engine.
Each run is an independent ExecutionEngine; drivers decide the pacing.
"""

__version__ = "0.1.0"

# Main engine
from .engine import ExecutionEngine, Frame, StepLimitExceededError

# Reference driver
from .runner import Runner, RunTrace, run_program

# Core schemas
from .schemas import (
    Instruction,
    InstructionKind,
    Level,
    RunStatus,
    StepResult,
)

# Program helpers
from .program import (
    block,
    count_instructions,
    dump_program,
    find_instruction,
    iter_instructions,
    load_program,
    new_instruction,
)

# World model
from .world import (
    AnimationHint,
    Direction,
    Pose,
    Tile,
    coord_key,
    parse_coord_key,
    render_ascii,
)

# Level loader helpers
from .levels import LevelLoader, load_level

__all__ = [
    # Engine
    "ExecutionEngine",
    "Frame",
    "StepLimitExceededError",
    # Driver
    "Runner",
    "RunTrace",
    "run_program",
    # Schemas
    "Instruction",
    "InstructionKind",
    "Level",
    "RunStatus",
    "StepResult",
    # Program helpers
    "block",
    "count_instructions",
    "dump_program",
    "find_instruction",
    "iter_instructions",
    "load_program",
    "new_instruction",
    # World
    "AnimationHint",
    "Direction",
    "Pose",
    "Tile",
    "coord_key",
    "parse_coord_key",
    "render_ascii",
    # Levels
    "LevelLoader",
    "load_level",
]
