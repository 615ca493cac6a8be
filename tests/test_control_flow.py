"""Tests for control flow instructions."""

import pytest
from chip8core import execute
from conftest import set_registers


class TestJump:
    """Test jump instructions."""

    def test_execute_jump(self, fresh_state):
        """1NNN - Jump to address."""
        state = execute(fresh_state, 0x1ABC)
        assert state.pc == 0xABC

    def test_jump_with_offset(self, fresh_state):
        """BNNN - Jump with V0 offset."""
        state = execute(fresh_state, 0x6010)  # V0 = 0x10
        state = execute(state, 0xB250)  # Jump to 0x250 + V0
        assert state.pc == 0x260

    def test_jump_with_offset_ignores_vx(self, fresh_state):
        """BNNN - Only V0 is added, whatever the second nibble."""
        state = set_registers(fresh_state, V0=0x10, V2=0x30)
        state = execute(state, 0xB250)
        assert state.pc == 0x260


class TestSkipInstructions:
    """Test all skip instruction variants."""

    def test_skip_if_equal_immediate_true(self, fresh_state):
        """3XKK - Should skip when VX == KK."""
        state = set_registers(fresh_state, V5=0x42)
        initial_pc = state.pc

        state = execute(state, 0x3542)  # Skip if V5 == 0x42
        assert state.pc == initial_pc + 2

    def test_skip_if_equal_immediate_false(self, fresh_state):
        """3XKK - Should not skip when VX != KK."""
        state = set_registers(fresh_state, V5=0x41)
        initial_pc = state.pc

        state = execute(state, 0x3542)
        assert state.pc == initial_pc

    def test_skip_if_not_equal_immediate_true(self, fresh_state):
        """4XKK - Should skip when VX != KK."""
        state = set_registers(fresh_state, V3=0x10)
        initial_pc = state.pc

        state = execute(state, 0x4320)  # Skip if V3 != 0x20
        assert state.pc == initial_pc + 2

    def test_skip_if_not_equal_immediate_false(self, fresh_state):
        """4XKK - Should not skip when VX == KK."""
        state = set_registers(fresh_state, V3=0x20)
        initial_pc = state.pc

        state = execute(state, 0x4320)
        assert state.pc == initial_pc

    def test_skip_if_equal_register_true(self, fresh_state):
        """5XY0 - Should skip when VX == VY."""
        state = set_registers(fresh_state, V1=0x55, V2=0x55)
        initial_pc = state.pc

        state = execute(state, 0x5120)  # Skip if V1 == V2
        assert state.pc == initial_pc + 2

    def test_skip_if_equal_register_false(self, fresh_state):
        """5XY0 - Should not skip when VX != VY."""
        state = set_registers(fresh_state, V1=0x55, V2=0x44)
        initial_pc = state.pc

        state = execute(state, 0x5120)
        assert state.pc == initial_pc

    def test_skip_if_not_equal_register_true(self, fresh_state):
        """9XY0 - Should skip when VX != VY."""
        state = set_registers(fresh_state, V7=0xAA, V8=0xBB)
        initial_pc = state.pc

        state = execute(state, 0x9780)  # Skip if V7 != V8
        assert state.pc == initial_pc + 2

    def test_skip_if_not_equal_register_false(self, fresh_state):
        """9XY0 - Should not skip when VX == VY."""
        state = set_registers(fresh_state, V7=0xCC, V8=0xCC)
        initial_pc = state.pc

        state = execute(state, 0x9780)
        assert state.pc == initial_pc

    def test_skip_with_zero_values(self, fresh_state):
        """Test skip instructions with zero values."""
        initial_pc = fresh_state.pc

        state = execute(fresh_state, 0x3000)  # Skip if V0 == 0
        assert state.pc == initial_pc + 2

    def test_skip_boundary_values(self, fresh_state):
        """Test skip instructions with boundary values."""
        state = set_registers(fresh_state, V0=0xFF)
        initial_pc = state.pc

        state = execute(state, 0x30FF)  # Skip if V0 == 255
        assert state.pc == initial_pc + 2


class TestKeySkips:
    """Test EX9E / EXA1."""

    @pytest.mark.parametrize("pressed,instruction,skips", [
        (True, 0xE09E, True),
        (False, 0xE09E, False),
        (True, 0xE0A1, False),
        (False, 0xE0A1, True),
    ])
    def test_key_skip_matrix(self, fresh_state, pressed, instruction, skips):
        state = set_registers(fresh_state, V0=0x5)
        state = state.replace(keypad=state.keypad.at[5].set(pressed))
        initial_pc = state.pc

        state = execute(state, instruction)

        assert state.pc == initial_pc + (2 if skips else 0)

    def test_key_skip_uses_low_nibble_of_vx(self, fresh_state):
        """Keys are addressed by VX & 0xF."""
        state = set_registers(fresh_state, V3=0x1A)
        state = state.replace(keypad=state.keypad.at[0xA].set(True))
        initial_pc = state.pc

        state = execute(state, 0xE39E)

        assert state.pc == initial_pc + 2
