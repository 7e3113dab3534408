"""Memory model for the CHIP-8 core."""

import logging

from .errors import MemoryAccessError, OutOfRangeRomLoad

logger = logging.getLogger(__name__)

MEMORY_SIZE = 4096
PROGRAM_START = 0x200
MAX_ROM_SIZE = MEMORY_SIZE - PROGRAM_START
FONT_GLYPH_SIZE = 5

# 16 glyphs (0-F), 5 rows each, burned in at address 0
FONTSET = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])


def font_address(digit: int) -> int:
    """Address of the font glyph for a hex digit."""
    return (digit & 0xF) * FONT_GLYPH_SIZE


class Memory:
    """Flat 4 KiB byte store with the font preloaded."""

    def __init__(self, size: int = MEMORY_SIZE):
        self.size = size
        self._data = bytearray(size)
        self._burn_font()

    def _burn_font(self) -> None:
        self._data[:len(FONTSET)] = FONTSET

    def _check_bounds(self, addr: int, length: int = 1) -> None:
        """Check if the address range is within valid memory."""
        if addr < 0 or addr + length > self.size:
            if length == 1:
                raise MemoryAccessError(f"Memory address out of range: {addr:#05x}")
            raise MemoryAccessError(
                f"Memory range out of bounds: {addr:#05x}+{length}"
            )

    def read(self, addr: int) -> int:
        """Read byte from memory address."""
        self._check_bounds(addr)
        return self._data[addr]

    def write(self, addr: int, value: int) -> None:
        """Write byte (masked to 8 bits) to memory address."""
        self._check_bounds(addr)
        self._data[addr] = value & 0xFF

    def read_word(self, addr: int) -> int:
        """Read a big-endian 16-bit word."""
        self._check_bounds(addr, 2)
        return (self._data[addr] << 8) | self._data[addr + 1]

    def read_block(self, addr: int, length: int) -> bytes:
        self._check_bounds(addr, length)
        return bytes(self._data[addr:addr + length])

    def write_block(self, addr: int, data: bytes) -> None:
        self._check_bounds(addr, len(data))
        self._data[addr:addr + len(data)] = bytes(b & 0xFF for b in data)

    def load_rom(self, data: bytes) -> None:
        """Copy ROM bytes into memory at the program start address."""
        if len(data) > MAX_ROM_SIZE:
            raise OutOfRangeRomLoad(
                f"ROM is {len(data)} bytes, at most {MAX_ROM_SIZE} fit",
                addr=PROGRAM_START,
            )
        self.write_block(PROGRAM_START, data)
        logger.debug("Loaded %d ROM bytes at %#05x", len(data), PROGRAM_START)

    def reset(self) -> None:
        """Zero memory and re-burn the font."""
        self._data = bytearray(self.size)
        self._burn_font()

    def snapshot(self) -> bytes:
        """Return a copy of the entire memory."""
        return bytes(self._data)
