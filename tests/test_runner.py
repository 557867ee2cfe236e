"""Tests for the paced Runner driver and its run traces."""

from __future__ import annotations

import contextlib
import io

import pytest

from blockrunner.program import block
from blockrunner.runner import Runner, RunTrace, run_program
from blockrunner.schemas import Instruction, Level, RunStatus
from blockrunner.world import Pose


def _level(*rows: str, best_block_count=None) -> Level:
    return Level(
        id=9,
        name="Test Strip",
        grid=list(rows),
        start=Pose(x=1, y=1, dir="RIGHT"),
        best_block_count=best_block_count,
    )


def _spinner() -> list[Instruction]:
    return [block("WHILE_PATH", *(block("TURN_RIGHT") for _ in range(4)))]


@pytest.mark.asyncio
async def test_runner_completes_level():
    level = _level("#####", "#S.F#", "#####", best_block_count=2)
    program = [block("LOOP", block("MOVE_FORWARD"), loop_count=2)]

    trace = await Runner(program, level, tick_interval=0, verbose=False).run()

    assert trace.status is RunStatus.COMPLETED
    assert trace.message is None
    assert trace.step_count == 3
    assert trace.final.pose.position == (3, 1)
    assert trace.level_id == 9
    assert trace.block_count == 2
    assert trace.within_par is True


def test_within_par_needs_completion_and_par():
    level = _level("#####", "#S.F#", "#####", best_block_count=1)
    program = [block("MOVE_FORWARD"), block("MOVE_FORWARD")]
    trace = run_program(program, level)
    assert trace.status is RunStatus.COMPLETED
    assert trace.within_par is False

    failed = run_program([block("TURN_LEFT")], level)
    assert failed.status is RunStatus.FAILED
    assert failed.message == "Out of moves!"
    assert failed.within_par is None

    no_par = run_program(program, _level("#####", "#S.F#", "#####"))
    assert no_par.within_par is None


@pytest.mark.asyncio
async def test_listeners_see_every_step():
    level = _level("######", "#S..F#", "######")
    seen = []

    def listener(number, result):
        seen.append((number, result.pose.position, result.status))

    def broken(number, result):
        raise RuntimeError("renderer offline")

    runner = Runner(
        [block("WHILE_PATH", block("MOVE_FORWARD"))],
        level,
        tick_interval=0,
        step_listeners=[broken, listener],
        verbose=False,
    )
    buf = io.StringIO()
    with contextlib.redirect_stdout(buf):
        trace = await runner.run()

    assert trace.status is RunStatus.COMPLETED
    assert [number for number, _, _ in seen] == list(range(1, trace.step_count + 1))
    assert seen[-1] == (trace.step_count, (4, 1), RunStatus.COMPLETED)
    assert "[Listener] Listener failed: renderer offline" in buf.getvalue()


@pytest.mark.asyncio
async def test_step_limit_reports_error():
    level = _level("#####", "#S..#", "#####")

    trace = await Runner(_spinner(), level, tick_interval=0, max_steps=10, verbose=False).run()

    assert trace.status is RunStatus.ERROR
    assert trace.message == "Stopped after 10 steps without finishing."
    assert trace.step_count == 11
    assert all(step.status is RunStatus.RUNNING for step in trace.steps[:-1])
    assert trace.final.status is RunStatus.ERROR


@pytest.mark.asyncio
async def test_engine_exception_becomes_error_result(monkeypatch):
    level = _level("#####", "#S.F#", "#####")
    runner = Runner([block("MOVE_FORWARD")], level, tick_interval=0, verbose=False)

    def explode():
        raise RuntimeError("boom")

    monkeypatch.setattr(runner.engine, "step", explode)
    trace = await runner.run()

    assert trace.status is RunStatus.ERROR
    assert trace.message == "Step 1 raised RuntimeError: boom"
    assert trace.step_count == 1
    assert trace.final.pose.position == (1, 1)


@pytest.mark.asyncio
async def test_stop_abandons_run():
    level = _level("#####", "#S..#", "#####")
    runner = Runner(_spinner(), level, tick_interval=0.001, verbose=False)

    def stop_after_two(number, result):
        if number == 2:
            runner.stop()

    runner.step_listeners.append(stop_after_two)
    trace = await runner.run()

    assert runner.stopped
    assert trace.status is RunStatus.RUNNING
    assert trace.step_count == 2


@pytest.mark.asyncio
async def test_verbose_output_tags(monkeypatch):
    monkeypatch.setenv("BLOCKRUNNER_NO_COLOR", "1")
    level = _level("#####", "#S.F#", "#####")
    program = [
        Instruction(id="bump", kind="TURN_LEFT"),
        Instruction(id="wall", kind="MOVE_FORWARD"),
        Instruction(id="back", kind="TURN_RIGHT"),
        Instruction(id="go", kind="MOVE_FORWARD"),
        Instruction(id="finish", kind="MOVE_FORWARD"),
    ]

    buf = io.StringIO()
    with contextlib.redirect_stdout(buf):
        await Runner(program, level, tick_interval=0, verbose=True).run()
    out = buf.getvalue()

    assert "[i] Running 5 blocks on level 9 'Test Strip'" in out
    assert "[•] Step 1: block=bump pose=(1,1,UP)" in out
    assert "[~] Step 2: block=wall pose=(1,1,UP) Bonk!" in out
    assert "[•] Step 4: block=go pose=(2,1,RIGHT)" in out
    assert "[✓] Level complete in 5 steps!" in out
    assert "\033[" not in out


@pytest.mark.asyncio
async def test_verbose_failure_line(monkeypatch):
    monkeypatch.setenv("BLOCKRUNNER_NO_COLOR", "1")
    level = _level("#####", "#SOF#", "#####")

    buf = io.StringIO()
    with contextlib.redirect_stdout(buf):
        trace = await Runner([block("MOVE_FORWARD")], level, tick_interval=0, verbose=True).run()

    assert trace.status is RunStatus.FAILED
    assert "[!] FAILED: Fell in a hole!" in buf.getvalue()


def test_trace_save_and_load(tmp_path):
    level = _level("######", "#SK*F#", "######")
    trace = run_program([block("WHILE_PATH", block("MOVE_FORWARD"))], level)

    path = trace.save(tmp_path / "runs" / "trace.json")
    loaded = RunTrace.load(path)

    assert loaded.run_id == trace.run_id
    assert loaded.status is RunStatus.COMPLETED
    assert loaded.step_count == trace.step_count
    assert loaded.final.collected_stars == {"3,1"}
    assert loaded.final.collected_keys == {"2,1"}
    assert loaded == trace
