"""Tests for ALU operations (8xxx)."""

import pytest
from chip8core import execute
from conftest import set_registers


class TestBasicALU:
    """Test basic ALU operations."""

    def test_alu_set_basic(self, fresh_state):
        """8XY0 - Set VX = VY."""
        state = set_registers(fresh_state, V1=0x42, V2=0x99)

        state = execute(state, 0x8120)  # V1 = V2

        assert state.V[1] == 0x99
        assert state.V[2] == 0x99

    def test_alu_or_basic(self, fresh_state):
        """8XY1 - OR operation."""
        state = set_registers(fresh_state, V1=0xF0, V2=0x0F)

        state = execute(state, 0x8121)  # V1 |= V2

        assert state.V[1] == 0xFF

    def test_alu_and_basic(self, fresh_state):
        """8XY2 - AND operation."""
        state = set_registers(fresh_state, V1=0xF0, V2=0xF1)

        state = execute(state, 0x8122)  # V1 &= V2

        assert state.V[1] == 0xF0

    def test_alu_xor_basic(self, fresh_state):
        """8XY3 - XOR operation."""
        state = set_registers(fresh_state, V1=0xFF, V2=0xF0)

        state = execute(state, 0x8123)  # V1 ^= V2

        assert state.V[1] == 0x0F

    def test_alu_xor_same(self, fresh_state):
        """8XY3 - XOR with same value should be 0."""
        state = set_registers(fresh_state, V3=0xAA, V4=0xAA)

        state = execute(state, 0x8343)  # V3 ^= V4

        assert state.V[3] == 0x00

    @pytest.mark.parametrize("instruction", [0x8120, 0x8121, 0x8122, 0x8123])
    def test_logic_operations_leave_vf(self, fresh_state, instruction):
        """8XY0-8XY3 never touch VF."""
        state = set_registers(fresh_state, V1=0x0F, V2=0xF0, VF=0x77)

        state = execute(state, instruction)

        assert state.V[15] == 0x77


class TestALUArithmetic:
    """Test arithmetic ALU operations."""

    def test_alu_add_no_carry(self, fresh_state):
        """8XY4 - Add without carry."""
        state = set_registers(fresh_state, V1=0x10, V2=0x20)

        state = execute(state, 0x8124)  # V1 += V2

        assert state.V[1] == 0x30
        assert state.V[15] == 0

    def test_alu_add_with_carry(self, fresh_state):
        """8XY4 - Add with carry."""
        state = set_registers(fresh_state, V1=0xFF, V2=0x01)

        state = execute(state, 0x8124)  # V1 += V2

        assert state.V[1] == 0x00  # 256 wraps to 0
        assert state.V[15] == 1  # Carry set

    def test_alu_add_exactly_255(self, fresh_state):
        """8XY4 - A sum of exactly 255 does not carry."""
        state = set_registers(fresh_state, V1=0xF0, V2=0x0F)

        state = execute(state, 0x8124)

        assert state.V[1] == 0xFF
        assert state.V[15] == 0

    @pytest.mark.parametrize("vx,vy", [(0, 0), (1, 254), (128, 128), (200, 100), (255, 255)])
    def test_alu_add_carry_property(self, fresh_state, vx, vy):
        """8XY4 - VF = 1 iff VX + VY > 255, sum stored mod 256."""
        state = set_registers(fresh_state, V3=vx, V4=vy)

        state = execute(state, 0x8344)

        assert state.V[3] == (vx + vy) % 256
        assert state.V[15] == int(vx + vy > 255)

    def test_alu_add_into_vf_keeps_carry(self, fresh_state):
        """8FY4 - The carry is written after the sum."""
        state = set_registers(fresh_state, VF=0xFF, V1=0x03)

        state = execute(state, 0x8F14)

        assert state.V[15] == 1

    def test_alu_sub_xy_no_borrow(self, fresh_state):
        """8XY5 - Subtract VX - VY, no borrow."""
        state = set_registers(fresh_state, V1=0x30, V2=0x10)

        state = execute(state, 0x8125)  # V1 -= V2

        assert state.V[1] == 0x20
        assert state.V[15] == 1  # VX > VY

    def test_alu_sub_xy_with_borrow(self, fresh_state):
        """8XY5 - Subtract VX - VY, with borrow."""
        state = set_registers(fresh_state, V3=0x10, V4=0x30)

        state = execute(state, 0x8345)  # V3 -= V4

        assert state.V[3] == 0xE0  # 16 - 48 = -32 → 224
        assert state.V[15] == 0

    def test_alu_sub_xy_equal_operands(self, fresh_state):
        """8XY5 - VF is 0 when VX == VY (strict comparison)."""
        state = set_registers(fresh_state, V1=0x42, V2=0x42)

        state = execute(state, 0x8125)

        assert state.V[1] == 0
        assert state.V[15] == 0

    def test_alu_sub_yx_no_borrow(self, fresh_state):
        """8XY7 - Subtract VY - VX, no borrow."""
        state = set_registers(fresh_state, V1=0x10, V2=0x30)

        state = execute(state, 0x8127)  # V1 = V2 - V1

        assert state.V[1] == 0x20  # 48 - 16 = 32
        assert state.V[15] == 1

    def test_alu_sub_yx_with_borrow(self, fresh_state):
        """8XY7 - VY < VX wraps and clears VF."""
        state = set_registers(fresh_state, V1=0x30, V2=0x10)

        state = execute(state, 0x8127)

        assert state.V[1] == 0xE0
        assert state.V[15] == 0

    def test_alu_sub_into_vf_keeps_result(self, fresh_state):
        """8FY5 - The difference is written after the flag."""
        state = set_registers(fresh_state, VF=0x30, V1=0x10)

        state = execute(state, 0x8F15)

        assert state.V[15] == 0x20


class TestALUShifts:
    """Test shift operations."""

    def test_shift_right_even(self, fresh_state):
        """8XY6 - Shift right, even number."""
        state = set_registers(fresh_state, V1=0x04, V2=0xFF)  # V2 ignored

        state = execute(state, 0x8126)  # V1 >>= 1

        assert state.V[1] == 0x02
        assert state.V[15] == 0  # LSB was 0

    def test_shift_right_odd(self, fresh_state):
        """8XY6 - Shift right, odd number."""
        state = set_registers(fresh_state, V3=0x05, V4=0xFF)

        state = execute(state, 0x8346)  # V3 >>= 1

        assert state.V[3] == 0x02
        assert state.V[15] == 1  # LSB was 1

    def test_shift_left_overflow(self, fresh_state):
        """8XYE - Shift left with the MSB shifted out."""
        state = set_registers(fresh_state, V3=0x81, V4=0xFF)  # 10000001

        state = execute(state, 0x834E)  # V3 <<= 1

        assert state.V[3] == 0x02  # 129 << 1 = 258 → 2
        assert state.V[15] == 1  # MSB was 1, flag is 1 not 0x80

    def test_shift_left_no_overflow(self, fresh_state):
        """8XYE - Shift left with a clear MSB."""
        state = set_registers(fresh_state, V3=0x41)

        state = execute(state, 0x834E)

        assert state.V[3] == 0x82
        assert state.V[15] == 0

    @pytest.mark.parametrize("value", [0x00, 0x01, 0x80, 0xFF, 0x5A])
    def test_shift_flags_are_shifted_out_bit(self, fresh_state, value):
        """8XY6/8XYE - VF holds the bit shifted out before the shift."""
        right = execute(set_registers(fresh_state, V2=value), 0x8226)
        left = execute(set_registers(fresh_state, V2=value), 0x822E)

        assert right.V[2] == value >> 1
        assert right.V[15] == value & 1
        assert left.V[2] == (value << 1) & 0xFF
        assert left.V[15] == value >> 7


class TestALUEdgeCases:
    """Test edge cases."""

    def test_alu_undefined_operations(self, fresh_state):
        """Undefined ALU operations leave registers alone when executed raw."""
        undefined_ops = [0x8, 0x9, 0xA, 0xB, 0xC, 0xD, 0xF]

        for op in undefined_ops:
            state = set_registers(fresh_state, V1=0x42, V2=0x99, VF=0x33)

            state = execute(state, 0x8120 | op)

            assert state.V[1] == 0x42
            assert state.V[2] == 0x99
            assert state.V[15] == 0x33
