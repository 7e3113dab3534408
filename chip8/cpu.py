"""Register file for the CHIP-8 core."""

from .errors import StackOverflow, StackUnderflow
from .memory import PROGRAM_START

NUM_REGISTERS = 16
STACK_SIZE = 16
FLAG_REGISTER = 0xF


class CPU:
    """V0-VF, the index register, program counter and call stack."""

    def __init__(self, start_address: int = PROGRAM_START):
        self.start_address = start_address
        self.v: list[int] = [0] * NUM_REGISTERS
        self.i: int = 0
        self.pc: int = start_address
        self.stack: list[int] = []

    @property
    def sp(self) -> int:
        """Current call depth."""
        return len(self.stack)

    def set_v(self, x: int, value: int) -> None:
        """Set VX, wrapping to 8 bits."""
        self.v[x & 0xF] = value & 0xFF

    def set_flag(self, value: int) -> None:
        self.v[FLAG_REGISTER] = value & 0xFF

    def set_i(self, value: int) -> None:
        """Set I, wrapping to 16 bits."""
        self.i = value & 0xFFFF

    def push(self, addr: int) -> None:
        if len(self.stack) >= STACK_SIZE:
            raise StackOverflow(f"Call stack full ({STACK_SIZE} return addresses)")
        self.stack.append(addr & 0xFFFF)

    def pop(self) -> int:
        if not self.stack:
            raise StackUnderflow("Return with an empty call stack")
        return self.stack.pop()

    def get_state(self) -> dict:
        """Get current register state as dictionary."""
        return {
            "pc": self.pc,
            "i": self.i,
            "sp": self.sp,
            "v": list(self.v),
            "stack": list(self.stack),
        }

    def reset(self) -> None:
        """Reset registers to power-on values."""
        self.v = [0] * NUM_REGISTERS
        self.i = 0
        self.pc = self.start_address
        self.stack = []
