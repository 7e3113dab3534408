"""CHIP-8 machine aggregate: owns all state and drives the executor."""

import enum
import logging
import random
from typing import Callable, Optional, Protocol

from .cpu import CPU
from .display import Display
from .errors import Chip8Error
from .instructions import decode, execute_instruction
from .keypad import Keypad
from .memory import Memory
from .timers import Timers

logger = logging.getLogger(__name__)


class EntropySource(Protocol):
    """Anything that can supply random bits, e.g. ``random.Random``."""

    def getrandbits(self, k: int) -> int: ...


class MachineState(enum.Enum):
    """Run state as seen by an external scheduler."""
    RUNNING = "running"
    WAITING_FOR_KEY = "waiting_for_key"


class Chip8:
    """A single CHIP-8 interpreter instance.

    The caller owns pacing: ``tick()`` runs one instruction and
    ``tick_timer()`` decays the timers, conventionally at 60 Hz.

    Args:
        rng: Entropy source for RND; anything with ``getrandbits(8)``.
            Defaults to a private ``random.Random``.
        on_sound_end: Called when the sound timer reaches zero.
    """

    def __init__(
        self,
        rng: Optional[EntropySource] = None,
        on_sound_end: Optional[Callable[[], None]] = None,
    ):
        self.rng = rng if rng is not None else random.Random()
        self.memory = Memory()
        self.cpu = CPU()
        self.display = Display()
        self.keypad = Keypad()
        self.timers = Timers(on_sound_end=on_sound_end)
        self.ticks: int = 0
        self.waiting_register: Optional[int] = None
        self.last_opcode: Optional[int] = None

    @property
    def state(self) -> MachineState:
        if self.waiting_register is not None:
            return MachineState.WAITING_FOR_KEY
        return MachineState.RUNNING

    @property
    def is_waiting_for_key(self) -> bool:
        return self.waiting_register is not None

    def load(self, data: bytes) -> None:
        """Copy a ROM image into memory at 0x200."""
        self.memory.load_rom(data)
        self.waiting_register = None

    def keypress(self, index: int, pressed: bool) -> None:
        self.keypad.set(index, pressed)

    def get_display(self) -> tuple[bool, ...]:
        """Row-major 64x32 pixel states (index = x + 64 * y)."""
        return self.display.view()

    def tick_timer(self) -> None:
        self.timers.tick()

    def tick(self) -> None:
        """Fetch, decode and execute one instruction."""
        addr = self.cpu.pc
        word = None
        try:
            word = self.memory.read_word(addr)
            self.cpu.pc = (addr + 2) & 0xFFFF
            self.last_opcode = word
            new_pc = execute_instruction(decode(word), self)
        except Chip8Error as e:
            # Attach context to error
            e.tick = self.ticks
            e.addr = addr
            e.opcode = word
            raise
        if new_pc is not None:
            self.cpu.pc = new_pc
        self.ticks += 1

    def begin_key_wait(self, register: int) -> None:
        if self.waiting_register is None:
            logger.debug("Waiting for key into V%X", register)
        self.waiting_register = register

    def end_key_wait(self, key: int) -> None:
        if self.waiting_register is not None:
            logger.debug("Key %X pressed, storing into V%X", key, self.waiting_register)
        self.waiting_register = None

    def reset(self) -> None:
        """Return every component to power-on state, font included."""
        self.memory.reset()
        self.cpu.reset()
        self.display.clear()
        self.keypad.reset()
        self.timers.reset()
        self.ticks = 0
        self.waiting_register = None
        self.last_opcode = None
        logger.debug("Machine reset")

    def get_state(self) -> dict:
        """Snapshot of registers, timers and run state."""
        state = self.cpu.get_state()
        state.update({
            "delay_timer": self.timers.delay,
            "sound_timer": self.timers.sound,
            "state": self.state.value,
            "ticks": self.ticks,
        })
        return state
