"""Headless frame loop with tracing for the CHIP-8 core."""

import logging
import random
from dataclasses import dataclass, field
from typing import Optional

from .errors import Chip8Error, ErrorInfo
from .instructions import disassemble
from .machine import Chip8

logger = logging.getLogger(__name__)


@dataclass
class KeyEvent:
    """Press or release a key at the start of a frame."""
    frame: int
    key: int
    pressed: bool = True


@dataclass
class RunOptions:
    """Options for headless execution."""
    frames: int = 60
    ticks_per_frame: int = 10
    seed: Optional[int] = None
    key_events: list[KeyEvent] = field(default_factory=list)
    trace: bool = False
    trace_limit: int = 1000
    stop_when_waiting: bool = False


@dataclass
class TraceRow:
    """Single row of execution trace."""
    tick: int
    addr: int
    opcode: int
    instr_text: str = ""

    def to_dict(self) -> dict:
        return {
            "tick": self.tick,
            "addr": self.addr,
            "opcode": self.opcode,
            "instr_text": self.instr_text,
        }


@dataclass
class RunResult:
    """Result of a headless run."""
    status: str  # "ok" | "error"
    ticks_executed: int
    frames_executed: int
    final_state: dict
    display: list[str]
    sound_events: int
    trace: list[dict]
    error: Optional[ErrorInfo] = None

    def to_dict(self) -> dict:
        result = {
            "status": self.status,
            "ticks_executed": self.ticks_executed,
            "frames_executed": self.frames_executed,
            "final_state": self.final_state,
            "display": self.display,
            "sound_events": self.sound_events,
            "trace": self.trace,
        }
        if self.error:
            result["error"] = self.error.to_dict()
        return result


def run_rom(rom: bytes, options: Optional[RunOptions] = None) -> RunResult:
    """Run a ROM image for a fixed number of frames.

    Each frame applies that frame's key events, executes
    ``ticks_per_frame`` instructions and then ticks the timers once.

    Args:
        rom: Raw ROM bytes, loaded at 0x200
        options: Execution options

    Returns:
        RunResult with final state, display rows and trace
    """
    if options is None:
        options = RunOptions()

    sound_events = 0

    def _on_sound_end() -> None:
        nonlocal sound_events
        sound_events += 1

    machine = Chip8(rng=random.Random(options.seed), on_sound_end=_on_sound_end)
    trace_rows: list[dict] = []
    error_info: Optional[ErrorInfo] = None
    frames_executed = 0

    events_by_frame: dict[int, list[KeyEvent]] = {}
    for event in options.key_events:
        events_by_frame.setdefault(event.frame, []).append(event)

    try:
        machine.load(rom)
        while frames_executed < options.frames:
            for event in events_by_frame.get(frames_executed, []):
                machine.keypress(event.key, event.pressed)

            for _ in range(options.ticks_per_frame):
                addr = machine.cpu.pc
                machine.tick()
                if options.trace and len(trace_rows) < options.trace_limit:
                    row = TraceRow(
                        tick=machine.ticks,
                        addr=addr,
                        opcode=machine.last_opcode,
                        instr_text=disassemble(machine.last_opcode),
                    )
                    trace_rows.append(row.to_dict())
                if machine.is_waiting_for_key:
                    break

            machine.tick_timer()
            frames_executed += 1

            if options.stop_when_waiting and machine.is_waiting_for_key:
                break

    except Chip8Error as e:
        logger.warning("Run stopped: %s", e.message)
        error_info = e.to_error_info()

    return RunResult(
        status="ok" if error_info is None else "error",
        ticks_executed=machine.ticks,
        frames_executed=frames_executed,
        final_state=machine.get_state(),
        display=machine.display.rows(),
        sound_events=sound_events,
        trace=trace_rows,
        error=error_info,
    )
