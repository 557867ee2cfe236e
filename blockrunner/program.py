"""Helpers for building and inspecting instruction trees.

The visual editor owns tree construction; these helpers cover the handful of
operations the editor and drivers share: creating blocks with editor
defaults, walking a tree, locating a block by id, and counting blocks for the
par score.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, List, Optional, Sequence, Tuple

from pydantic import TypeAdapter

from .schemas import Instruction, InstructionKind

DEFAULT_LOOP_COUNT = 2

_PROGRAM_ADAPTER = TypeAdapter(List[Instruction])


def new_instruction(kind: InstructionKind | str, *, loop_count: Optional[int] = None) -> Instruction:
    """Create a block the way the editor drops one from the palette.

    LOOP blocks start at two iterations, control blocks start with an empty
    body, and primitive blocks carry no body at all.
    """
    kind = InstructionKind(kind)
    if kind is InstructionKind.LOOP and loop_count is None:
        loop_count = DEFAULT_LOOP_COUNT
    return Instruction(
        kind=kind,
        loop_count=loop_count if kind is InstructionKind.LOOP else None,
        instructions=[] if kind.is_control else None,
    )


def block(kind: InstructionKind | str, *children: Instruction, loop_count: Optional[int] = None) -> Instruction:
    """Shorthand for writing programs in code and tests.

    ``block("LOOP", block("MOVE_FORWARD"), loop_count=3)``
    """
    instruction = new_instruction(kind, loop_count=loop_count)
    if children:
        if not instruction.kind.is_control:
            raise ValueError(f"{instruction.kind.value} blocks cannot have children")
        instruction.instructions = list(children)
    return instruction


def iter_instructions(program: Iterable[Instruction]) -> Iterator[Instruction]:
    """Yield every block depth-first, parents before their children."""
    for instruction in program:
        yield instruction
        if instruction.instructions:
            yield from iter_instructions(instruction.instructions)


def find_instruction(
    program: List[Instruction], instruction_id: str
) -> Optional[Tuple[Instruction, List[Instruction]]]:
    """Return ``(block, parent_list)`` for ``instruction_id``, or None."""
    for instruction in program:
        if instruction.id == instruction_id:
            return instruction, program
        if instruction.instructions:
            found = find_instruction(instruction.instructions, instruction_id)
            if found:
                return found
    return None


def count_instructions(program: Sequence[Instruction]) -> int:
    """Total number of blocks, nested ones included."""
    return sum(1 for _ in iter_instructions(program))


def load_program(data: Any) -> List[Instruction]:
    """Validate plain JSON-style data (a list of block dicts) into a program."""
    return _PROGRAM_ADAPTER.validate_python(data)


def dump_program(program: Sequence[Instruction]) -> List[dict]:
    """Inverse of ``load_program``, using the editor's camelCase keys."""
    return [instruction.model_dump(by_alias=True, exclude_none=True) for instruction in program]
