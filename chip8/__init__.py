"""CHIP-8 Interpreter Core Package."""

from .machine import Chip8, MachineState
from .runner import run_rom, RunOptions, RunResult, KeyEvent
from .display import SCREEN_WIDTH, SCREEN_HEIGHT
from .errors import (
    Chip8Error,
    StackOverflow,
    StackUnderflow,
    UnimplementedOpcode,
    OutOfRangeRomLoad,
    InvalidKeyIndex,
    MemoryAccessError,
)

__all__ = [
    "Chip8",
    "MachineState",
    "run_rom",
    "RunOptions",
    "RunResult",
    "KeyEvent",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "Chip8Error",
    "StackOverflow",
    "StackUnderflow",
    "UnimplementedOpcode",
    "OutOfRangeRomLoad",
    "InvalidKeyIndex",
    "MemoryAccessError",
]
