"""Fault detection for CHIP-8 instructions.

Faults are computed from the state *before* an instruction runs, so a
faulting step can be discarded wholesale and the caller sees the machine
exactly as it was.
"""

import jax.numpy as jnp
from chip8core.state import EmulatorState
from chip8core.decode import DecodedInstruction
from chip8core.constants import MEMORY_SIZE
from chip8core.errors import Fault
from chip8core.stack import is_empty, is_full

ALU_OPERATIONS = jnp.array([0x0, 0x1, 0x2, 0x3, 0x4, 0x5, 0x6, 0x7, 0xE], dtype=jnp.int32)
KEY_OPERATIONS = jnp.array([0x9E, 0xA1], dtype=jnp.int32)
MISC_OPERATIONS = jnp.array([0x07, 0x0A, 0x15, 0x18, 0x1E, 0x29, 0x33, 0x55, 0x65], dtype=jnp.int32)


def _is_member(value: jnp.ndarray, table: jnp.ndarray) -> jnp.ndarray:
    return jnp.any(value == table)


def fetch_out_of_bounds(state: EmulatorState) -> jnp.ndarray:
    """True when the instruction word at PC does not fit in memory."""
    return jnp.astype(state.pc, jnp.int32) + 1 >= MEMORY_SIZE


def is_unsupported(instruction: DecodedInstruction) -> jnp.ndarray:
    """True for bit patterns that map to no instruction."""
    raw = jnp.asarray(instruction.raw, dtype=jnp.int32)
    family = jnp.asarray(instruction.opcode, dtype=jnp.int32)
    n = jnp.asarray(instruction.n, dtype=jnp.int32)
    kk = jnp.asarray(instruction.kk, dtype=jnp.int32)

    return (
        ((family == 0x0) & (raw != 0x00E0) & (raw != 0x00EE))
        | (((family == 0x5) | (family == 0x9)) & (n != 0))
        | ((family == 0x8) & ~_is_member(n, ALU_OPERATIONS))
        | ((family == 0xE) & ~_is_member(kk, KEY_OPERATIONS))
        | ((family == 0xF) & ~_is_member(kk, MISC_OPERATIONS))
    )


def detect_fault(state: EmulatorState, instruction: DecodedInstruction) -> jnp.ndarray:
    """Fault code (int32) for executing ``instruction`` against ``state``."""
    raw = jnp.asarray(instruction.raw, dtype=jnp.int32)
    family = jnp.asarray(instruction.opcode, dtype=jnp.int32)
    x = jnp.asarray(instruction.x, dtype=jnp.int32)
    n = jnp.asarray(instruction.n, dtype=jnp.int32)
    kk = jnp.asarray(instruction.kk, dtype=jnp.int32)
    index = jnp.astype(state.I, jnp.int32)

    stack_overflow = (family == 0x2) & is_full(state.stack)
    stack_underflow = (raw == 0x00EE) & is_empty(state.stack)
    out_of_bounds = (
        ((family == 0xD) & (index + n > MEMORY_SIZE))
        | ((family == 0xF) & (kk == 0x33) & (index + 3 > MEMORY_SIZE))
        | ((family == 0xF) & ((kk == 0x55) | (kk == 0x65)) & (index + x + 1 > MEMORY_SIZE))
    )

    fault = jnp.select(
        [is_unsupported(instruction), stack_overflow, stack_underflow, out_of_bounds],
        [
            int(Fault.UNSUPPORTED_OPCODE),
            int(Fault.STACK_OVERFLOW),
            int(Fault.STACK_UNDERFLOW),
            int(Fault.MEMORY_OUT_OF_BOUNDS),
        ],
        int(Fault.NONE),
    )
    return jnp.astype(fault, jnp.int32)
