"""Ensure every opcode has a dedicated behavioral test."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

import pytest

from chip8 import Chip8
from chip8.instructions import VALID_OPCODES


class FixedRng:
    """Entropy source that always yields the same byte."""

    def __init__(self, value: int):
        self.value = value

    def getrandbits(self, bits: int) -> int:
        return self.value


def rom(*words: int) -> bytes:
    return b"".join(w.to_bytes(2, "big") for w in words)


def expect_v(x: int, value: int) -> Callable:
    def _check(m: Chip8):
        assert m.cpu.v[x] == value

    return _check


def expect_pc(value: int) -> Callable:
    def _check(m: Chip8):
        assert m.cpu.pc == value

    return _check


def expect_i(value: int) -> Callable:
    def _check(m: Chip8):
        assert m.cpu.i == value

    return _check


def expect_mem(addr: int, data: bytes) -> Callable:
    def _check(m: Chip8):
        assert m.memory.read_block(addr, len(data)) == data

    return _check


def expect_stack(addrs: list[int]) -> Callable:
    def _check(m: Chip8):
        assert m.cpu.stack == addrs

    return _check


def expect_timer(name: str, value: int) -> Callable:
    def _check(m: Chip8):
        assert getattr(m.timers, name) == value

    return _check


def expect_all(*checks: Callable) -> Callable:
    def _check(m: Chip8):
        for check in checks:
            check(m)

    return _check


def _draw_something(m: Chip8):
    m.display.draw_sprite(0, 0, b"\xFF\xFF")


def _check_blank(m: Chip8):
    assert not any(m.get_display())


def _check_zero_glyph(m: Chip8):
    rows = m.display.rows()
    assert rows[:5] == [
        "####" + "." * 60,
        "#..#" + "." * 60,
        "#..#" + "." * 60,
        "#..#" + "." * 60,
        "####" + "." * 60,
    ]


@dataclass
class InstructionCase:
    opcode: str
    program: list[int]
    checker: Callable
    setup: Optional[Callable] = None
    ticks: Optional[int] = None


INSTRUCTION_CASES = [
    InstructionCase("0000", [0x0000], expect_pc(0x202)),
    InstructionCase("00E0", [0x00E0], _check_blank, setup=_draw_something),
    InstructionCase(
        "00EE",
        [0x2206, 0x0000, 0x0000, 0x00EE],
        expect_all(expect_pc(0x202), expect_stack([])),
        ticks=2,
    ),
    InstructionCase("1NNN", [0x1208], expect_pc(0x208)),
    InstructionCase(
        "2NNN",
        [0x2300],
        expect_all(expect_pc(0x300), expect_stack([0x202])),
    ),
    InstructionCase("3XNN", [0x6105, 0x3105], expect_pc(0x206)),
    InstructionCase("4XNN", [0x6105, 0x4106], expect_pc(0x206)),
    InstructionCase("5XY0", [0x6107, 0x6207, 0x5120], expect_pc(0x208)),
    InstructionCase("6XNN", [0x6A2B], expect_v(0xA, 0x2B)),
    InstructionCase(
        "7XNN",
        [0x60FF, 0x7002],
        expect_all(expect_v(0, 0x01), expect_v(0xF, 0)),
    ),
    InstructionCase("8XY0", [0x6233, 0x8120], expect_v(1, 0x33)),
    InstructionCase("8XY1", [0x610C, 0x6203, 0x8121], expect_v(1, 0x0F)),
    InstructionCase("8XY2", [0x610C, 0x6206, 0x8122], expect_v(1, 0x04)),
    InstructionCase("8XY3", [0x610C, 0x6206, 0x8123], expect_v(1, 0x0A)),
    InstructionCase(
        "8XY4",
        [0x61FF, 0x6201, 0x8124],
        expect_all(expect_v(1, 0x00), expect_v(0xF, 1)),
    ),
    InstructionCase(
        "8XY5",
        [0x6101, 0x6202, 0x8125],
        expect_all(expect_v(1, 0xFF), expect_v(0xF, 0)),
    ),
    InstructionCase(
        "8XY6",
        [0x6103, 0x8106],
        expect_all(expect_v(1, 0x01), expect_v(0xF, 1)),
    ),
    InstructionCase(
        "8XY7",
        [0x6102, 0x6205, 0x8127],
        expect_all(expect_v(1, 0x03), expect_v(0xF, 1)),
    ),
    InstructionCase(
        "8XYE",
        [0x6181, 0x810E],
        expect_all(expect_v(1, 0x02), expect_v(0xF, 1)),
    ),
    InstructionCase("9XY0", [0x6101, 0x6202, 0x9120], expect_pc(0x208)),
    InstructionCase("ANNN", [0xA123], expect_i(0x123)),
    InstructionCase("BNNN", [0x6004, 0xB300], expect_pc(0x304)),
    InstructionCase(
        "CXNN",
        [0xC10F],
        expect_v(1, 0x0B),
        setup=lambda m: setattr(m, "rng", FixedRng(0xAB)),
    ),
    InstructionCase(
        "DXYN",
        [0xA000, 0x6000, 0x6100, 0xD015],
        expect_all(_check_zero_glyph, expect_v(0xF, 0)),
    ),
    InstructionCase(
        "EX9E",
        [0x6105, 0xE19E],
        expect_pc(0x206),
        setup=lambda m: m.keypress(5, True),
    ),
    InstructionCase("EXA1", [0x6105, 0xE1A1], expect_pc(0x206)),
    InstructionCase(
        "FX07",
        [0xF307],
        expect_v(3, 42),
        setup=lambda m: m.timers.set_delay(42),
    ),
    InstructionCase(
        "FX0A",
        [0xF20A],
        expect_all(expect_v(2, 9), expect_pc(0x202)),
        setup=lambda m: m.keypress(9, True),
    ),
    InstructionCase(
        "FX15",
        [0x6030, 0xF015],
        expect_timer("delay", 0x30),
    ),
    InstructionCase(
        "FX18",
        [0x6030, 0xF018],
        expect_timer("sound", 0x30),
    ),
    InstructionCase("FX1E", [0xA0FF, 0x6002, 0xF01E], expect_i(0x101)),
    InstructionCase("FX29", [0x600B, 0xF029], expect_i(55)),
    InstructionCase("FX33", [0x60EA, 0xA300, 0xF033], expect_mem(0x300, b"\x02\x03\x04")),
    InstructionCase(
        "FX55",
        [0x6001, 0x6102, 0x6203, 0xA300, 0xF255],
        expect_mem(0x300, b"\x01\x02\x03\x00"),
    ),
    InstructionCase(
        "FX65",
        [0xA300, 0xF165],
        expect_all(expect_v(0, 9), expect_v(1, 8), expect_v(2, 0)),
        setup=lambda m: m.memory.write_block(0x300, b"\x09\x08\x07"),
    ),
]


@pytest.mark.parametrize("case", INSTRUCTION_CASES, ids=lambda case: case.opcode)
def test_all_instructions_have_behavioral_tests(case: InstructionCase):
    m = Chip8()
    m.load(rom(*case.program))
    if case.setup:
        case.setup(m)
    ticks = case.ticks if case.ticks is not None else len(case.program)
    for _ in range(ticks):
        m.tick()
    case.checker(m)


def test_instruction_case_coverage_matches_valid_opcodes():
    covered = {case.opcode for case in INSTRUCTION_CASES}
    assert covered == VALID_OPCODES
