"""Unit tests for the core schema building blocks."""

import json

import pytest
from pydantic import ValidationError

from blockrunner.schemas import Instruction, InstructionKind, Level, RunStatus, StepResult
from blockrunner.world import Pose, Tile


def test_instruction_accepts_editor_aliases():
    instruction = Instruction.model_validate(
        {"id": "loop-1", "type": "LOOP", "loopCount": 3, "instructions": [{"type": "JUMP"}]}
    )
    assert instruction.kind is InstructionKind.LOOP
    assert instruction.loop_count == 3
    assert instruction.children[0].kind is InstructionKind.JUMP
    # Child ids default to fresh uuids
    assert instruction.children[0].id


def test_instruction_ids_are_unique_by_default():
    first = Instruction(kind="MOVE_FORWARD")
    second = Instruction(kind="MOVE_FORWARD")
    assert first.id != second.id
    assert first.children == []


def test_instruction_rejects_unknown_kind():
    with pytest.raises(ValidationError):
        Instruction.model_validate({"type": "FLY"})


def test_control_kinds():
    assert InstructionKind.WHILE_PATH.is_control
    assert InstructionKind.IF_WALL.is_control
    assert not InstructionKind.JUMP.is_control


def test_level_parses_compact_rows():
    level = Level.model_validate(
        {
            "id": 3,
            "name": "Star Catcher",
            "grid": ["#####", "#S*F#", "#####"],
            "start": {"x": 1, "y": 1, "dir": "RIGHT"},
            "minStars": 1,
            "availableBlocks": ["MOVE_FORWARD"],
            "bestBlockCount": 2,
        }
    )
    assert (level.rows, level.cols) == (3, 5)
    assert level.tile_at(2, 1) is Tile.STAR
    assert level.min_stars == 1
    assert level.best_block_count == 2
    assert level.available_blocks == [InstructionKind.MOVE_FORWARD]


def test_level_parses_tile_name_rows():
    level = Level(
        grid=[["WALL", "START", "END"], ["EMPTY", "HOLE", "KEY"]],
        start=Pose(x=1, y=0),
    )
    assert level.tile_at(2, 0) is Tile.END
    assert level.tile_at(2, 1) is Tile.KEY


def test_level_defaults_offer_every_block():
    level = Level(grid=["S"], start=Pose(x=0, y=0))
    assert set(level.available_blocks) == set(InstructionKind)
    assert level.min_stars == 0


def test_level_tile_at_out_of_bounds():
    level = Level(grid=["S.", ".F"], start=Pose(x=0, y=0))
    for x, y in [(-1, 0), (0, -1), (2, 0), (0, 2)]:
        assert level.tile_at(x, y) is Tile.OUT_OF_BOUNDS


def test_level_cells_of():
    level = Level(grid=["D.D", ".S.", "D.*"], start=Pose(x=1, y=1))
    assert level.cells_of(Tile.DOOR) == [(0, 0), (2, 0), (0, 2)]
    assert level.cells_of(Tile.STAR) == [(2, 2)]


@pytest.mark.parametrize(
    "grid",
    [
        [],
        [""],
        ["###", "##"],
        ["#?#"],
        [["WALL", "BOUNDS"]],
    ],
)
def test_level_rejects_bad_grids(grid):
    with pytest.raises(ValidationError):
        Level(grid=grid, start=Pose(x=0, y=0))


def test_level_rejects_negative_min_stars():
    with pytest.raises(ValidationError):
        Level(grid=["S"], start=Pose(x=0, y=0), min_stars=-1)


def test_level_is_frozen():
    level = Level(grid=["S"], start=Pose(x=0, y=0))
    with pytest.raises(ValidationError):
        level.min_stars = 3


def test_run_status_terminal():
    assert not RunStatus.RUNNING.is_terminal
    assert RunStatus.COMPLETED.is_terminal
    assert RunStatus.FAILED.is_terminal
    assert RunStatus.ERROR.is_terminal


def test_step_result_serializes_to_json():
    result = StepResult(
        pose=Pose(x=2, y=1, dir="LEFT"),
        active_instruction_id="abc",
        status=RunStatus.RUNNING,
        collected_stars={"2,1"},
        message="Bonk!",
    )
    data = json.loads(result.model_dump_json())
    assert data["pose"] == {"x": 2, "y": 1, "dir": "LEFT", "animation": "IDLE"}
    assert data["collected_stars"] == ["2,1"]
    assert data["opened_doors"] == []
    assert StepResult.model_validate(data) == result


def test_level_accepts_level_table_shorthand():
    level = Level(
        grid=[list("WWWWW"), ["W", "S", "ST", "F", "W"], "WWWWW"],
        start=Pose(x=1, y=1),
    )
    assert level.tile_at(0, 0) is Tile.WALL
    assert level.tile_at(2, 1) is Tile.STAR
    assert level.tile_at(3, 1) is Tile.END

    worked = Level(grid=["WWWWW", "WSEFW", "WWWWW"], start=Pose(x=1, y=1))
    assert worked.tile_at(2, 1) is Tile.EMPTY
