"""CHIP-8 ALU operations (8XYN).

Each operation maps the register file to a new register file. The order
of the VX and VF writes matters when X is F: ``8XY4`` writes the carry
last, while the subtract and shift operations write the flag first and
let the result overwrite it.
"""

import jax
import jax.lax
import jax.numpy as jnp
from chip8core.state import EmulatorState
from chip8core.decode import DecodedInstruction
from chip8core.constants import VF


def _flag(condition: jnp.ndarray) -> jnp.ndarray:
    return jnp.astype(condition, jnp.uint8)


def alu_set(V: jnp.ndarray, x: int, y: int) -> jnp.ndarray:
    """8XY0 - Set: VX = VY."""
    return V.at[x].set(V[y])


def alu_or(V: jnp.ndarray, x: int, y: int) -> jnp.ndarray:
    """8XY1 - Binary OR: VX |= VY."""
    return V.at[x].set(V[x] | V[y])


def alu_and(V: jnp.ndarray, x: int, y: int) -> jnp.ndarray:
    """8XY2 - Binary AND: VX &= VY."""
    return V.at[x].set(V[x] & V[y])


def alu_xor(V: jnp.ndarray, x: int, y: int) -> jnp.ndarray:
    """8XY3 - Logical XOR: VX ^= VY."""
    return V.at[x].set(V[x] ^ V[y])


def alu_add(V: jnp.ndarray, x: int, y: int) -> jnp.ndarray:
    """8XY4 - Add: VX += VY, VF = carry."""
    total = jnp.astype(V[x], jnp.uint16) + jnp.astype(V[y], jnp.uint16)
    V = V.at[x].set(jnp.astype(total & 0xFF, jnp.uint8))
    return V.at[VF].set(_flag(total > 0xFF))


def alu_sub_xy(V: jnp.ndarray, x: int, y: int) -> jnp.ndarray:
    """8XY5 - Subtract: VF = VX > VY, then VX -= VY."""
    vx, vy = V[x], V[y]
    V = V.at[VF].set(_flag(vx > vy))
    return V.at[x].set(vx - vy)


def alu_shift_right(V: jnp.ndarray, x: int, y: int) -> jnp.ndarray:
    """8XY6 - Shift right: VF = LSB of VX, then VX >>= 1."""
    vx = V[x]
    V = V.at[VF].set(vx & 1)
    return V.at[x].set(vx >> 1)


def alu_sub_yx(V: jnp.ndarray, x: int, y: int) -> jnp.ndarray:
    """8XY7 - Subtract: VF = VY > VX, then VX = VY - VX."""
    vx, vy = V[x], V[y]
    V = V.at[VF].set(_flag(vy > vx))
    return V.at[x].set(vy - vx)


def alu_shift_left(V: jnp.ndarray, x: int, y: int) -> jnp.ndarray:
    """8XYE - Shift left: VF = MSB of VX, then VX <<= 1."""
    vx = V[x]
    V = V.at[VF].set((vx >> 7) & 1)
    return V.at[x].set((vx << 1) & 0xFF)


def alu_undefined(V: jnp.ndarray, x: int, y: int) -> jnp.ndarray:
    """Undefined ALU operation, rejected by fault detection."""
    return V


ALU_OPERATIONS = [
    alu_set, alu_or, alu_and, alu_xor, alu_add,
    alu_sub_xy, alu_shift_right, alu_sub_yx, alu_shift_left, alu_undefined,
]

# Maps N to a slot in ALU_OPERATIONS: 0-7 directly, E -> 8, rest undefined
ALU_INDEX = jnp.array([0, 1, 2, 3, 4, 5, 6, 7, 9, 9, 9, 9, 9, 9, 8, 9], dtype=jnp.int32)


def execute_alu_operation(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XYN - ALU operations dispatcher."""
    new_V = jax.lax.switch(
        ALU_INDEX[instruction.n],
        ALU_OPERATIONS,
        state.V, instruction.x, instruction.y
    )
    return state.replace(V=new_V)
