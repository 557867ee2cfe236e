"""Play a saved program on a level and print each step.

Example usage (level and program share a name under examples/):

    python -m examples.run_level 04_loop_de_loop
    python -m examples.run_level 11_locked_out --tick-ms 0 --render

Use ``--program`` to point at a program file with a different name, and
``--trace`` to save the full run trace as JSON.
"""

from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path

from blockrunner import LevelLoader, Runner, StepResult, load_program, render_ascii
from blockrunner.config import Config
from blockrunner.logging_utils import log_info

PROGRAMS_DIR = Path(__file__).parent / "programs"


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a block program on a level")
    parser.add_argument("level", help="Level name (file stem under the levels directory)")
    parser.add_argument(
        "--program",
        type=Path,
        default=None,
        help="Program JSON file (defaults to examples/programs/<level>.json)",
    )
    parser.add_argument(
        "--tick-ms",
        type=int,
        default=Config.TICK_MS,
        help="Milliseconds between steps",
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=Config.MAX_STEPS,
        help="Steps before the run is reported as an error",
    )
    parser.add_argument("--render", action="store_true", help="Draw the grid after every step")
    parser.add_argument("--trace", type=Path, default=None, help="Write the run trace to this path")
    return parser.parse_args()


async def main(args: argparse.Namespace) -> None:
    Config.validate()
    level = LevelLoader().load(args.level)
    program_path = args.program or PROGRAMS_DIR / f"{args.level}.json"
    program = load_program(json.loads(program_path.read_text()))

    log_info(f"Level {level.id}: {level.name}")
    if level.tutorial_text:
        log_info(level.tutorial_text)
    print(render_ascii(level, level.start))

    def draw(number: int, result: StepResult) -> None:
        print(
            render_ascii(
                level,
                result.pose,
                collected_stars=result.collected_stars,
                collected_keys=result.collected_keys,
                opened_doors=result.opened_doors,
            )
        )

    runner = Runner(
        program,
        level,
        tick_interval=args.tick_ms / 1000.0,
        max_steps=args.max_steps,
        step_listeners=[draw] if args.render else None,
        verbose=True,
    )
    trace = await runner.run()

    if args.trace:
        path = trace.save(args.trace)
        log_info(f"Trace written to {path}")


if __name__ == "__main__":
    asyncio.run(main(parse_args()))
