"""
Reference driver for the execution engine.

Plays the role of the game loop: builds one ExecutionEngine per run and
calls ``step()`` on a fixed cadence until the run reaches a terminal status.

Coordinates each tick:
1. Step the engine (one primitive action or control decision)
2. Record the snapshot in the run trace
3. Print a human-readable line for the step (when verbose)
4. Invoke step listeners (presentation adapters, analysis hooks)
5. Stop on a terminal status, on ``stop()``, or at the step limit

The engine never raises for gameplay outcomes. Anything that goes wrong
outside gameplay (an exception from ``step()``, a program that exceeds the
step limit) is reported by the driver as a final ``RunStatus.ERROR``
snapshot instead of crashing the loop.
"""

import asyncio
from pathlib import Path
from typing import Callable, List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from .config import Config
from .engine import ExecutionEngine
from .logging_utils import log_denied, log_failure, log_info, log_step, log_success
from .program import count_instructions
from .schemas import Instruction, Level, RunStatus, StepResult
from .world import AnimationHint, Pose

StepListener = Callable[[int, StepResult], None]


class RunTrace(BaseModel):
    """Every snapshot produced by one run, plus its outcome."""

    run_id: UUID = Field(default_factory=uuid4)
    level_id: int = Field(0, description="Level.id the run was played on")
    level_name: str = ""
    block_count: int = Field(0, description="Blocks in the program, nested ones included")
    best_block_count: Optional[int] = Field(None, description="Level par score")
    status: RunStatus = RunStatus.RUNNING
    message: Optional[str] = None
    steps: List[StepResult] = Field(default_factory=list)

    @property
    def step_count(self) -> int:
        return len(self.steps)

    @property
    def final(self) -> Optional[StepResult]:
        return self.steps[-1] if self.steps else None

    @property
    def within_par(self) -> Optional[bool]:
        """Whether a completed run used no more blocks than the par score."""
        if self.status is not RunStatus.COMPLETED or self.best_block_count is None:
            return None
        return self.block_count <= self.best_block_count

    def save(self, path: Path | str) -> Path:
        """Write the trace as pretty-printed JSON."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2))
        return target

    @classmethod
    def load(cls, path: Path | str) -> "RunTrace":
        return cls.model_validate_json(Path(path).read_text())


class Runner:
    """
    Paced step loop around one ExecutionEngine.

    Fully decoupled from rendering: presentation layers subscribe through
    ``step_listeners``. Each Runner owns its own engine, so several runs
    (for example a batch of automated checks) can proceed side by side.
    """

    def __init__(
        self,
        program: List[Instruction],
        level: Level,
        *,
        start: Optional[Pose] = None,
        tick_interval: Optional[float] = None,
        max_steps: Optional[int] = None,
        step_listeners: Optional[List[StepListener]] = None,
        verbose: Optional[bool] = None,
    ):
        """Initialize the runner.

        Args:
            program: Top-level instruction sequence
            level: Level to run on
            start: Optional start pose (defaults to level.start)
            tick_interval: Seconds between steps (defaults to Config.TICK_MS)
            max_steps: Step limit before the run is reported as ERROR
                (defaults to Config.MAX_STEPS)
            step_listeners: Callables invoked after each step with
                (step_number, result)
            verbose: Print one line per step (defaults to Config.VERBOSE)
        """
        self.program = program
        self.level = level
        self.engine = ExecutionEngine(program, level, start)
        self.tick_interval = Config.tick_seconds() if tick_interval is None else tick_interval
        self.max_steps = Config.MAX_STEPS if max_steps is None else max_steps
        self.step_listeners = step_listeners or []
        self.verbose = Config.VERBOSE if verbose is None else verbose
        self._stopped = False

        self.trace = RunTrace(
            level_id=level.id,
            level_name=level.name,
            block_count=count_instructions(program),
            best_block_count=level.best_block_count,
        )

    def stop(self) -> None:
        """Abandon the run after the current step. The engine needs no cleanup."""
        self._stopped = True

    @property
    def stopped(self) -> bool:
        return self._stopped

    async def run(self) -> RunTrace:
        """Step the engine until the run ends, is stopped, or hits the step limit.

        Returns:
            The RunTrace; its status stays RUNNING if the run was stopped early
        """
        if self.verbose:
            log_info(
                f"Running {self.trace.block_count} blocks on level "
                f"{self.level.id} '{self.level.name}' (limit {self.max_steps} steps)"
            )

        for number in range(1, self.max_steps + 1):
            if self._stopped:
                if self.verbose:
                    log_info(f"Run stopped after {number - 1} steps")
                return self.trace

            result = self._run_step(number)
            self._record(number, result)

            if result.is_terminal:
                self._finish(result)
                return self.trace

            if self.tick_interval > 0:
                await asyncio.sleep(self.tick_interval)

        if self._stopped:
            return self.trace

        # Still RUNNING at the limit: report it the way the host reports errors
        result = self._error_result(f"Stopped after {self.max_steps} steps without finishing.")
        self._record(self.max_steps + 1, result)
        self._finish(result)
        return self.trace

    def _run_step(self, number: int) -> StepResult:
        try:
            return self.engine.step()
        except Exception as exc:
            # Malformed trees are not validated up front; surface whatever
            # they trigger as a host-reported error.
            return self._error_result(f"Step {number} raised {type(exc).__name__}: {exc}")

    def _error_result(self, message: str) -> StepResult:
        snapshot = self.engine.snapshot()
        return snapshot.model_copy(update={"status": RunStatus.ERROR, "message": message})

    def _record(self, number: int, result: StepResult) -> None:
        self.trace.steps.append(result)
        if self.verbose:
            self._print_step(number, result)

        # Listener failures are logged but don't stop the run.
        for listener in self.step_listeners:
            try:
                listener(number, result)
            except Exception as exc:
                print(f"  [Listener] Listener failed: {exc}")

    def _finish(self, result: StepResult) -> None:
        self.trace.status = result.status
        self.trace.message = result.message
        if not self.verbose:
            return
        if result.status is RunStatus.COMPLETED:
            par = self.trace.within_par
            suffix = ""
            if par is not None:
                suffix = f" ({self.trace.block_count} blocks, par {self.trace.best_block_count})"
            log_success(f"Level complete in {self.trace.step_count} steps!{suffix}")
        else:
            log_failure(f"{result.status.value}: {result.message or 'Try again!'}")

    def _print_step(self, number: int, result: StepResult) -> None:
        pose = result.pose
        line = (
            f"Step {number}: block={result.active_instruction_id or '-'} "
            f"pose=({pose.x},{pose.y},{pose.dir.value})"
        )
        if result.message:
            line += f" {result.message}"
        if pose.animation is AnimationHint.DENY:
            log_denied(line)
        else:
            log_step(line)


def run_program(
    program: List[Instruction],
    level: Level,
    *,
    max_steps: Optional[int] = None,
    verbose: bool = False,
) -> RunTrace:
    """Run a program to completion with no pacing and return its trace."""
    runner = Runner(program, level, tick_interval=0, max_steps=max_steps, verbose=verbose)
    return asyncio.run(runner.run())
