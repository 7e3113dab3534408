"""Tests for the CPU module."""

import pytest
from chip8.cpu import CPU
from chip8.errors import StackOverflow, StackUnderflow


class TestCPU:
    """CPU module tests."""

    def test_default_initialization(self):
        """CPU starts at 0x200 with zeroed registers."""
        cpu = CPU()
        assert cpu.v == [0] * 16
        assert cpu.i == 0
        assert cpu.pc == 0x200
        assert cpu.sp == 0

    def test_set_v_wraps(self):
        cpu = CPU()
        cpu.set_v(3, 256 + 7)
        assert cpu.v[3] == 7
        cpu.set_v(3, -1)
        assert cpu.v[3] == 0xFF

    def test_set_i_wraps(self):
        cpu = CPU()
        cpu.set_i(0x10005)
        assert cpu.i == 5

    def test_push_pop(self):
        cpu = CPU()
        cpu.push(0x202)
        cpu.push(0x300)
        assert cpu.sp == 2
        assert cpu.pop() == 0x300
        assert cpu.pop() == 0x202
        assert cpu.sp == 0

    def test_stack_overflow(self):
        """Sixteen pushes fit, the seventeenth fails."""
        cpu = CPU()
        for addr in range(16):
            cpu.push(addr)
        with pytest.raises(StackOverflow):
            cpu.push(0x400)
        assert cpu.sp == 16

    def test_stack_underflow(self):
        cpu = CPU()
        with pytest.raises(StackUnderflow):
            cpu.pop()

    def test_get_state(self):
        """Get state returns correct dict."""
        cpu = CPU()
        cpu.v[0] = 10
        cpu.i = 0x300
        cpu.pc = 0x204
        cpu.push(0x202)
        state = cpu.get_state()
        assert state == {
            "pc": 0x204,
            "i": 0x300,
            "sp": 1,
            "v": [10] + [0] * 15,
            "stack": [0x202],
        }

    def test_reset(self):
        """Reset returns CPU to initial state."""
        cpu = CPU()
        cpu.v[5] = 100
        cpu.i = 50
        cpu.pc = 0x250
        cpu.push(0x202)
        cpu.reset()
        assert cpu.v == [0] * 16
        assert cpu.i == 0
        assert cpu.pc == 0x200
        assert cpu.stack == []
