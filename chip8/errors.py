"""Custom exceptions for the CHIP-8 core."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class ErrorInfo:
    """Structured error information for API responses."""
    type: str
    message: str
    tick: int
    addr: int
    opcode: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "message": self.message,
            "tick": self.tick,
            "addr": self.addr,
            "opcode": self.opcode,
        }


class Chip8Error(Exception):
    """Base exception for all CHIP-8 errors."""

    def __init__(
        self,
        message: str,
        tick: int = 0,
        addr: int = 0,
        opcode: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.tick = tick
        self.addr = addr
        self.opcode = opcode

    def to_error_info(self) -> ErrorInfo:
        return ErrorInfo(
            type=self.__class__.__name__,
            message=self.message,
            tick=self.tick,
            addr=self.addr,
            opcode=self.opcode,
        )


class StackOverflow(Chip8Error):
    """CALL with 16 return addresses already on the stack."""
    pass


class StackUnderflow(Chip8Error):
    """RET with an empty stack."""
    pass


class UnimplementedOpcode(Chip8Error):
    """No instruction pattern matches the fetched word."""
    pass


class MemoryAccessError(Chip8Error):
    """Memory address out of bounds."""
    pass


class OutOfRangeRomLoad(Chip8Error):
    """ROM does not fit between 0x200 and the end of memory."""
    pass


class InvalidKeyIndex(Chip8Error):
    """Key index outside 0x0-0xF."""
    pass
