"""
Stepwise execution engine for block programs.

The engine walks an instruction tree one unit of work per ``step()`` call.
Instead of a generator, the suspended position in the program is an explicit
stack of frames: each frame is one open block body with a cursor, and LOOP
frames also carry their remaining iteration count. The bottom frame is the
program's top-level sequence.

Each ``step()`` call performs exactly one of:
- one primitive action (move, jump, turn), or
- one control decision (enter a loop, test a condition), or
- the final win/out-of-moves verdict once the stack is empty.

Closing a finished body (popping a frame, or rewinding a loop frame for its
next iteration) happens inside the same call as the next real unit of work,
so loop boundaries never show up as separate steps.

Usage:
    engine = ExecutionEngine(program, level)
    while True:
        result = engine.step()
        ...  # apply result to presentation state
        if result.is_terminal:
            break
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Set, Tuple

from .schemas import Instruction, InstructionKind, Level, RunStatus, StepResult
from .program import load_program
from .world import AnimationHint, Pose, Tile, coord_key


# =============================
# Module-level Exceptions
# =============================


class StepLimitExceededError(Exception):
    """Raised when a run does not finish within the allowed number of steps.

    A finite program with finite loop counts always terminates, but a
    WHILE_PATH block whose body never changes the path ahead (for example a
    body of four turns) spins forever. Drivers use a step limit to stop
    such programs.
    """

    def __init__(self, *, limit: int, results: List[StepResult]) -> None:
        self.limit = limit
        self.results = results
        message = (
            f"Program did not finish within {limit} steps.\n\n"
            "Remediation tips:\n"
            "  - Check WHILE_PATH blocks whose body never moves the runner\n"
            "  - Raise BLOCKRUNNER_MAX_STEPS for very long programs"
        )
        super().__init__(message)


@dataclass
class Frame:
    """One open block body being walked."""

    instructions: List[Instruction]
    index: int = 0
    # Remaining iterations, only set for LOOP bodies
    loop_count: Optional[int] = None


class ExecutionEngine:
    """Interpreter for one run of a program on one level.

    Holds all run-local state: the runner's pose, the frame stack, the
    collected stars and keys, the opened doors, and the status. Nothing is
    shared between instances, so separate runs can proceed side by side.
    The static level is never modified, so it can be replayed by building a
    fresh engine.
    """

    def __init__(
        self,
        program: List[Instruction],
        level: Level,
        start: Optional[Pose] = None,
    ) -> None:
        self.level = level
        self._pose = (start or level.start).model_copy()
        self._pose.animation = AnimationHint.IDLE
        self._stack: List[Frame] = [Frame(instructions=list(program))]
        self._collected_stars: Set[str] = set()
        self._collected_keys: Set[str] = set()
        self._opened_doors: Set[str] = set()
        self._status = RunStatus.RUNNING
        # One key opens every door, so resolve the door cells once
        self._door_keys = [coord_key(x, y) for x, y in level.cells_of(Tile.DOOR)]

    @classmethod
    def from_data(
        cls,
        program: Any,
        level: Any,
        start: Any = None,
    ) -> "ExecutionEngine":
        """Build an engine from plain JSON-style data (dicts and lists)."""
        return cls(
            load_program(program),
            level if isinstance(level, Level) else Level.model_validate(level),
            None if start is None else Pose.model_validate(start),
        )

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def status(self) -> RunStatus:
        return self._status

    @property
    def pose(self) -> Pose:
        return self._pose.model_copy()

    @property
    def stack_depth(self) -> int:
        return len(self._stack)

    @property
    def collected_stars(self) -> Set[str]:
        return set(self._collected_stars)

    @property
    def collected_keys(self) -> Set[str]:
        return set(self._collected_keys)

    @property
    def opened_doors(self) -> Set[str]:
        return set(self._opened_doors)

    def snapshot(self) -> StepResult:
        """Current state as a StepResult, without stepping."""
        return self._result(None)

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------

    def step(self) -> StepResult:
        """Execute one unit of work and return the resulting snapshot."""
        self._pose.animation = AnimationHint.IDLE

        if self._status.is_terminal:
            return self._result(None)

        # Close finished bodies until there is an instruction to run. Each pass
        # either pops a frame or rewinds a loop frame whose count just dropped,
        # so this always terminates.
        while True:
            if not self._stack:
                return self._evaluate_win(None)

            frame = self._stack[-1]
            if frame.index < len(frame.instructions):
                break

            if frame.loop_count is not None:
                frame.loop_count -= 1
                if frame.loop_count > 0:
                    frame.index = 0
                    continue
            self._stack.pop()

        instruction = frame.instructions[frame.index]
        frame.index += 1
        return self._dispatch(instruction, frame)

    def run(self, max_steps: int) -> List[StepResult]:
        """Step until the run ends and return every snapshot.

        Raises:
            StepLimitExceededError: If still RUNNING after ``max_steps`` steps
        """
        results: List[StepResult] = []
        for _ in range(max_steps):
            result = self.step()
            results.append(result)
            if result.is_terminal:
                return results
        raise StepLimitExceededError(limit=max_steps, results=results)

    def _dispatch(self, instruction: Instruction, frame: Frame) -> StepResult:
        kind = instruction.kind

        if kind is InstructionKind.MOVE_FORWARD:
            return self._move(instruction.id)
        if kind is InstructionKind.JUMP:
            return self._jump(instruction.id)
        if kind is InstructionKind.TURN_LEFT:
            self._pose.dir = self._pose.dir.turned_left()
            return self._result(instruction.id)
        if kind is InstructionKind.TURN_RIGHT:
            self._pose.dir = self._pose.dir.turned_right()
            return self._result(instruction.id)

        body = instruction.children

        if kind is InstructionKind.LOOP:
            if body:
                self._stack.append(
                    Frame(instructions=body, loop_count=instruction.loop_count or 1)
                )
        elif kind is InstructionKind.WHILE_PATH:
            # Rewind onto this block so the condition is tested again once the
            # body frame pops. When the path is blocked the cursor has already
            # moved past it.
            if self._is_path_clear() and body:
                frame.index -= 1
                self._stack.append(Frame(instructions=body))
        elif kind is InstructionKind.IF_STAR:
            if self._is_on_star() and body:
                self._stack.append(Frame(instructions=body))
        elif kind is InstructionKind.IF_WALL:
            if self._is_facing_wall() and body:
                self._stack.append(Frame(instructions=body))

        return self._result(instruction.id)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _move(self, instruction_id: str) -> StepResult:
        target = self._pose.ahead(1)
        tile = self.level.tile_at(*target)

        if tile.is_wall_like:
            return self._deny(instruction_id, "Bonk!")
        if tile is Tile.HOLE:
            self._place(target)
            self._status = RunStatus.FAILED
            return self._result(instruction_id, "Fell in a hole!")
        if tile is Tile.DOOR and not self._is_open(target):
            return self._deny(instruction_id, "Locked! Find a key.")

        self._place(target)
        self._collect()
        if tile is Tile.END:
            return self._evaluate_win(instruction_id)
        return self._result(instruction_id)

    def _jump(self, instruction_id: str) -> StepResult:
        middle = self._pose.ahead(1)
        target = self._pose.ahead(2)
        middle_tile = self.level.tile_at(*middle)
        target_tile = self.level.tile_at(*target)

        # The middle cell is only an obstacle check; its stars, keys, flag,
        # and holes are skipped.
        if middle_tile.is_wall_like:
            return self._deny(instruction_id, "Can't jump over walls!")
        if middle_tile is Tile.DOOR and not self._is_open(middle):
            return self._deny(instruction_id, "Can't jump over locked doors!")
        if target_tile.is_wall_like:
            return self._deny(instruction_id, "Can't jump into a wall!")

        self._place(target)
        self._collect()
        if target_tile is Tile.END:
            return self._evaluate_win(instruction_id)
        if target_tile is Tile.HOLE:
            self._status = RunStatus.FAILED
            return self._result(instruction_id, "Jumped into a hole!")
        return self._result(instruction_id)

    def _deny(self, instruction_id: str, message: str) -> StepResult:
        self._pose.animation = AnimationHint.DENY
        return self._result(instruction_id, message)

    def _place(self, cell: Tuple[int, int]) -> None:
        self._pose.x, self._pose.y = cell

    def _collect(self) -> None:
        x, y = self._pose.position
        tile = self.level.tile_at(x, y)
        key = coord_key(x, y)
        if tile is Tile.STAR:
            self._collected_stars.add(key)
        elif tile is Tile.KEY and key not in self._collected_keys:
            self._collected_keys.add(key)
            self._opened_doors.update(self._door_keys)

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------

    def _is_open(self, cell: Tuple[int, int]) -> bool:
        return coord_key(*cell) in self._opened_doors

    def _is_facing_wall(self) -> bool:
        return self.level.tile_at(*self._pose.ahead(1)).is_wall_like

    def _is_path_clear(self) -> bool:
        ahead = self._pose.ahead(1)
        tile = self.level.tile_at(*ahead)
        if tile.is_wall_like or tile is Tile.HOLE:
            return False
        return not (tile is Tile.DOOR and not self._is_open(ahead))

    def _is_on_star(self) -> bool:
        x, y = self._pose.position
        return self.level.tile_at(x, y) is Tile.STAR and coord_key(x, y) not in self._collected_stars

    # ------------------------------------------------------------------
    # Outcome
    # ------------------------------------------------------------------

    def _evaluate_win(self, instruction_id: Optional[str]) -> StepResult:
        x, y = self._pose.position
        if self.level.tile_at(x, y) is Tile.END:
            collected = len(self._collected_stars)
            required = self.level.min_stars
            if collected >= required:
                self._status = RunStatus.COMPLETED
                return self._result(instruction_id)
            self._status = RunStatus.FAILED
            return self._result(
                instruction_id,
                f"Need {required} stars! Only collected {collected}.",
            )
        if not self._stack:
            self._status = RunStatus.FAILED
            return self._result(instruction_id, "Out of moves!")
        return self._result(instruction_id)

    def _result(self, instruction_id: Optional[str], message: Optional[str] = None) -> StepResult:
        return StepResult(
            pose=self._pose.model_copy(),
            active_instruction_id=instruction_id,
            status=self._status,
            collected_stars=set(self._collected_stars),
            collected_keys=set(self._collected_keys),
            opened_doors=set(self._opened_doors),
            message=message,
        )
