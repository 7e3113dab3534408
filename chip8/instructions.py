"""Instruction decoding and execution for the CHIP-8 core."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional

from .errors import UnimplementedOpcode
from .memory import font_address

if TYPE_CHECKING:
    from .machine import Chip8


@dataclass(frozen=True)
class Opcode:
    """A 16-bit instruction split into its nibble fields."""
    raw: int

    @property
    def high(self) -> int:
        return (self.raw >> 12) & 0xF

    @property
    def x(self) -> int:
        return (self.raw >> 8) & 0xF

    @property
    def y(self) -> int:
        return (self.raw >> 4) & 0xF

    @property
    def n(self) -> int:
        return self.raw & 0xF

    @property
    def nn(self) -> int:
        return self.raw & 0xFF

    @property
    def nnn(self) -> int:
        return self.raw & 0xFFF


def decode(word: int) -> Opcode:
    """Decode a big-endian instruction word."""
    return Opcode(word & 0xFFFF)


# Groups selected by the high nibble alone
_BY_HIGH = {
    0x1: "1NNN",
    0x2: "2NNN",
    0x3: "3XNN",
    0x4: "4XNN",
    0x6: "6XNN",
    0x7: "7XNN",
    0xA: "ANNN",
    0xB: "BNNN",
    0xC: "CXNN",
    0xD: "DXYN",
}

# Groups that also need the low nibble
_BY_N = {
    0x5: {0x0: "5XY0"},
    0x8: {
        0x0: "8XY0",
        0x1: "8XY1",
        0x2: "8XY2",
        0x3: "8XY3",
        0x4: "8XY4",
        0x5: "8XY5",
        0x6: "8XY6",
        0x7: "8XY7",
        0xE: "8XYE",
    },
    0x9: {0x0: "9XY0"},
}

# Groups that need the low byte
_BY_NN = {
    0xE: {0x9E: "EX9E", 0xA1: "EXA1"},
    0xF: {
        0x07: "FX07",
        0x0A: "FX0A",
        0x15: "FX15",
        0x18: "FX18",
        0x1E: "FX1E",
        0x29: "FX29",
        0x33: "FX33",
        0x55: "FX55",
        0x65: "FX65",
    },
}

# 0x0 group matches the whole word
_SYSTEM = {0x000: "0000", 0x0E0: "00E0", 0x0EE: "00EE"}


def lookup(op: Opcode) -> str:
    """Return the instruction pattern name for an opcode."""
    if op.high == 0x0:
        key = _SYSTEM.get(op.nnn)
    elif op.high in _BY_HIGH:
        key = _BY_HIGH[op.high]
    elif op.high in _BY_N:
        key = _BY_N[op.high].get(op.n)
    else:
        key = _BY_NN[op.high].get(op.nn)
    if key is None:
        raise UnimplementedOpcode(f"Unimplemented opcode: {op.raw:#06x}", opcode=op.raw)
    return key


# Instruction executor type: returns a new PC, or None to fall through
InstructionExecutor = Callable[[Opcode, "Chip8"], Optional[int]]


def execute_nop(op: Opcode, m: "Chip8") -> Optional[int]:
    """0000: do nothing"""
    return None


def execute_cls(op: Opcode, m: "Chip8") -> Optional[int]:
    """00E0: clear the screen"""
    m.display.clear()
    return None


def execute_ret(op: Opcode, m: "Chip8") -> Optional[int]:
    """00EE: PC := pop()"""
    return m.cpu.pop()


def execute_jp(op: Opcode, m: "Chip8") -> Optional[int]:
    """1NNN: PC := NNN"""
    return op.nnn


def execute_call(op: Opcode, m: "Chip8") -> Optional[int]:
    """2NNN: push(PC); PC := NNN"""
    m.cpu.push(m.cpu.pc)
    return op.nnn


def _skip_if(m: "Chip8", condition: bool) -> Optional[int]:
    if condition:
        return m.cpu.pc + 2
    return None


def execute_se_imm(op: Opcode, m: "Chip8") -> Optional[int]:
    """3XNN: skip if VX == NN"""
    return _skip_if(m, m.cpu.v[op.x] == op.nn)


def execute_sne_imm(op: Opcode, m: "Chip8") -> Optional[int]:
    """4XNN: skip if VX != NN"""
    return _skip_if(m, m.cpu.v[op.x] != op.nn)


def execute_se_reg(op: Opcode, m: "Chip8") -> Optional[int]:
    """5XY0: skip if VX == VY"""
    return _skip_if(m, m.cpu.v[op.x] == m.cpu.v[op.y])


def execute_ld_imm(op: Opcode, m: "Chip8") -> Optional[int]:
    """6XNN: VX := NN"""
    m.cpu.set_v(op.x, op.nn)
    return None


def execute_add_imm(op: Opcode, m: "Chip8") -> Optional[int]:
    """7XNN: VX := VX + NN, no carry flag"""
    m.cpu.set_v(op.x, m.cpu.v[op.x] + op.nn)
    return None


def execute_ld_reg(op: Opcode, m: "Chip8") -> Optional[int]:
    """8XY0: VX := VY"""
    m.cpu.set_v(op.x, m.cpu.v[op.y])
    return None


def execute_or(op: Opcode, m: "Chip8") -> Optional[int]:
    """8XY1: VX := VX OR VY"""
    m.cpu.set_v(op.x, m.cpu.v[op.x] | m.cpu.v[op.y])
    return None


def execute_and(op: Opcode, m: "Chip8") -> Optional[int]:
    """8XY2: VX := VX AND VY"""
    m.cpu.set_v(op.x, m.cpu.v[op.x] & m.cpu.v[op.y])
    return None


def execute_xor(op: Opcode, m: "Chip8") -> Optional[int]:
    """8XY3: VX := VX XOR VY"""
    m.cpu.set_v(op.x, m.cpu.v[op.x] ^ m.cpu.v[op.y])
    return None


def execute_add_reg(op: Opcode, m: "Chip8") -> Optional[int]:
    """8XY4: VX := VX + VY, VF := carry"""
    total = m.cpu.v[op.x] + m.cpu.v[op.y]
    m.cpu.set_v(op.x, total)
    m.cpu.set_flag(1 if total > 0xFF else 0)
    return None


def execute_sub(op: Opcode, m: "Chip8") -> Optional[int]:
    """8XY5: VX := VX - VY, VF := NOT borrow"""
    vx, vy = m.cpu.v[op.x], m.cpu.v[op.y]
    m.cpu.set_v(op.x, vx - vy)
    m.cpu.set_flag(1 if vx >= vy else 0)
    return None


def execute_shr(op: Opcode, m: "Chip8") -> Optional[int]:
    """8XY6: VF := VX bit 0; VX := VX >> 1"""
    vx = m.cpu.v[op.x]
    m.cpu.set_v(op.x, vx >> 1)
    m.cpu.set_flag(vx & 0x01)
    return None


def execute_subn(op: Opcode, m: "Chip8") -> Optional[int]:
    """8XY7: VX := VY - VX, VF := NOT borrow"""
    vx, vy = m.cpu.v[op.x], m.cpu.v[op.y]
    m.cpu.set_v(op.x, vy - vx)
    m.cpu.set_flag(1 if vy >= vx else 0)
    return None


def execute_shl(op: Opcode, m: "Chip8") -> Optional[int]:
    """8XYE: VF := VX bit 7; VX := VX << 1"""
    vx = m.cpu.v[op.x]
    m.cpu.set_v(op.x, vx << 1)
    m.cpu.set_flag((vx >> 7) & 0x01)
    return None


def execute_sne_reg(op: Opcode, m: "Chip8") -> Optional[int]:
    """9XY0: skip if VX != VY"""
    return _skip_if(m, m.cpu.v[op.x] != m.cpu.v[op.y])


def execute_ld_i(op: Opcode, m: "Chip8") -> Optional[int]:
    """ANNN: I := NNN"""
    m.cpu.set_i(op.nnn)
    return None


def execute_jp_v0(op: Opcode, m: "Chip8") -> Optional[int]:
    """BNNN: PC := V0 + NNN"""
    return (m.cpu.v[0] + op.nnn) & 0xFFFF


def execute_rnd(op: Opcode, m: "Chip8") -> Optional[int]:
    """CXNN: VX := random byte AND NN"""
    m.cpu.set_v(op.x, m.rng.getrandbits(8) & op.nn)
    return None


def execute_drw(op: Opcode, m: "Chip8") -> Optional[int]:
    """DXYN: XOR an N-row sprite from MEM[I] at (VX, VY), VF := collision"""
    rows = m.memory.read_block(m.cpu.i, op.n)
    collision = m.display.draw_sprite(m.cpu.v[op.x], m.cpu.v[op.y], rows)
    m.cpu.set_flag(1 if collision else 0)
    return None


def execute_skp(op: Opcode, m: "Chip8") -> Optional[int]:
    """EX9E: skip if key VX is pressed"""
    return _skip_if(m, m.keypad.is_pressed(m.cpu.v[op.x]))


def execute_sknp(op: Opcode, m: "Chip8") -> Optional[int]:
    """EXA1: skip if key VX is not pressed"""
    return _skip_if(m, not m.keypad.is_pressed(m.cpu.v[op.x]))


def execute_ld_vx_dt(op: Opcode, m: "Chip8") -> Optional[int]:
    """FX07: VX := DT"""
    m.cpu.set_v(op.x, m.timers.delay)
    return None


def execute_ld_vx_k(op: Opcode, m: "Chip8") -> Optional[int]:
    """FX0A: wait for a key press, VX := lowest pressed key"""
    key = m.keypad.first_pressed()
    if key is None:
        m.begin_key_wait(op.x)
        return m.cpu.pc - 2
    m.cpu.set_v(op.x, key)
    m.end_key_wait(key)
    return None


def execute_ld_dt(op: Opcode, m: "Chip8") -> Optional[int]:
    """FX15: DT := VX"""
    m.timers.set_delay(m.cpu.v[op.x])
    return None


def execute_ld_st(op: Opcode, m: "Chip8") -> Optional[int]:
    """FX18: ST := VX"""
    m.timers.set_sound(m.cpu.v[op.x])
    return None


def execute_add_i(op: Opcode, m: "Chip8") -> Optional[int]:
    """FX1E: I := I + VX, wrapping at 16 bits"""
    m.cpu.set_i(m.cpu.i + m.cpu.v[op.x])
    return None


def execute_ld_f(op: Opcode, m: "Chip8") -> Optional[int]:
    """FX29: I := address of font glyph for VX"""
    m.cpu.set_i(font_address(m.cpu.v[op.x]))
    return None


def execute_ld_b(op: Opcode, m: "Chip8") -> Optional[int]:
    """FX33: MEM[I..I+2] := BCD digits of VX"""
    vx = m.cpu.v[op.x]
    m.memory.write_block(m.cpu.i, bytes([vx // 100, (vx // 10) % 10, vx % 10]))
    return None


def execute_ld_mem_regs(op: Opcode, m: "Chip8") -> Optional[int]:
    """FX55: MEM[I..I+X] := V0..VX"""
    m.memory.write_block(m.cpu.i, bytes(m.cpu.v[:op.x + 1]))
    return None


def execute_ld_regs_mem(op: Opcode, m: "Chip8") -> Optional[int]:
    """FX65: V0..VX := MEM[I..I+X]"""
    for idx, value in enumerate(m.memory.read_block(m.cpu.i, op.x + 1)):
        m.cpu.set_v(idx, value)
    return None


# Instruction dispatch table
INSTRUCTION_EXECUTORS: dict[str, InstructionExecutor] = {
    "0000": execute_nop,
    "00E0": execute_cls,
    "00EE": execute_ret,
    "1NNN": execute_jp,
    "2NNN": execute_call,
    "3XNN": execute_se_imm,
    "4XNN": execute_sne_imm,
    "5XY0": execute_se_reg,
    "6XNN": execute_ld_imm,
    "7XNN": execute_add_imm,
    "8XY0": execute_ld_reg,
    "8XY1": execute_or,
    "8XY2": execute_and,
    "8XY3": execute_xor,
    "8XY4": execute_add_reg,
    "8XY5": execute_sub,
    "8XY6": execute_shr,
    "8XY7": execute_subn,
    "8XYE": execute_shl,
    "9XY0": execute_sne_reg,
    "ANNN": execute_ld_i,
    "BNNN": execute_jp_v0,
    "CXNN": execute_rnd,
    "DXYN": execute_drw,
    "EX9E": execute_skp,
    "EXA1": execute_sknp,
    "FX07": execute_ld_vx_dt,
    "FX0A": execute_ld_vx_k,
    "FX15": execute_ld_dt,
    "FX18": execute_ld_st,
    "FX1E": execute_add_i,
    "FX29": execute_ld_f,
    "FX33": execute_ld_b,
    "FX55": execute_ld_mem_regs,
    "FX65": execute_ld_regs_mem,
}

VALID_OPCODES = frozenset(INSTRUCTION_EXECUTORS)

MNEMONICS: dict[str, str] = {
    "0000": "NOP",
    "00E0": "CLS",
    "00EE": "RET",
    "1NNN": "JP {nnn:#05x}",
    "2NNN": "CALL {nnn:#05x}",
    "3XNN": "SE V{x:X}, {nn:#04x}",
    "4XNN": "SNE V{x:X}, {nn:#04x}",
    "5XY0": "SE V{x:X}, V{y:X}",
    "6XNN": "LD V{x:X}, {nn:#04x}",
    "7XNN": "ADD V{x:X}, {nn:#04x}",
    "8XY0": "LD V{x:X}, V{y:X}",
    "8XY1": "OR V{x:X}, V{y:X}",
    "8XY2": "AND V{x:X}, V{y:X}",
    "8XY3": "XOR V{x:X}, V{y:X}",
    "8XY4": "ADD V{x:X}, V{y:X}",
    "8XY5": "SUB V{x:X}, V{y:X}",
    "8XY6": "SHR V{x:X}",
    "8XY7": "SUBN V{x:X}, V{y:X}",
    "8XYE": "SHL V{x:X}",
    "9XY0": "SNE V{x:X}, V{y:X}",
    "ANNN": "LD I, {nnn:#05x}",
    "BNNN": "JP V0, {nnn:#05x}",
    "CXNN": "RND V{x:X}, {nn:#04x}",
    "DXYN": "DRW V{x:X}, V{y:X}, {n}",
    "EX9E": "SKP V{x:X}",
    "EXA1": "SKNP V{x:X}",
    "FX07": "LD V{x:X}, DT",
    "FX0A": "LD V{x:X}, K",
    "FX15": "LD DT, V{x:X}",
    "FX18": "LD ST, V{x:X}",
    "FX1E": "ADD I, V{x:X}",
    "FX29": "LD F, V{x:X}",
    "FX33": "LD B, V{x:X}",
    "FX55": "LD [I], V{x:X}",
    "FX65": "LD V{x:X}, [I]",
}


def disassemble(word: int) -> str:
    """Render an instruction word as assembler text."""
    op = decode(word)
    try:
        key = lookup(op)
    except UnimplementedOpcode:
        return f"DW {op.raw:#06x}"
    return MNEMONICS[key].format(x=op.x, y=op.y, n=op.n, nn=op.nn, nnn=op.nnn)


def execute_instruction(op: Opcode, m: "Chip8") -> Optional[int]:
    """Execute a single decoded instruction.

    Returns:
        New PC value if the instruction transfers control, None otherwise
    """
    return INSTRUCTION_EXECUTORS[lookup(op)](op, m)
