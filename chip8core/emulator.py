"""Main CHIP-8 emulator execution engine."""

from typing import Optional

import jax
import jax.lax
import jax.numpy as jnp
from flax.struct import PyTreeNode

from chip8core.state import EmulatorState
from chip8core.decode import DecodedInstruction, decode
from chip8core.constants import MAX_ROM_SIZE, MEMORY_SIZE, PROGRAM_START
from chip8core.errors import Fault, RomTooLarge, exception_for_fault
from chip8core.faults import detect_fault, fetch_out_of_bounds
from chip8core.instructions.system import execute_system_instruction
from chip8core.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset, execute_skip_if_key
)
from chip8core.instructions.alu import execute_alu_operation
from chip8core.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chip8core.instructions.display import execute_display
from chip8core.instructions.misc import execute_misc_instruction


class StepResult(PyTreeNode):
    """Outcome of executing one instruction.

    On a fault ``state`` is the unmodified input state.
    """
    state: EmulatorState
    fault: jnp.ndarray
    instruction: jnp.ndarray
    display_changed: jnp.ndarray

    @property
    def ok(self) -> bool:
        return int(self.fault) == Fault.NONE

    def raise_for_fault(self) -> EmulatorState:
        """Return the new state, or raise the matching ``Chip8Error``."""
        error = exception_for_fault(int(self.fault), int(self.state.pc), int(self.instruction))
        if error is not None:
            raise error
        return self.state


class RunResult(PyTreeNode):
    """Outcome of running several instructions, stopping at the first fault."""
    state: EmulatorState
    fault: jnp.ndarray
    steps: jnp.ndarray
    display_changed: jnp.ndarray

    @property
    def ok(self) -> bool:
        return int(self.fault) == Fault.NONE


def execute_decoded(state: EmulatorState, decoded_instruction: DecodedInstruction) -> EmulatorState:
    """Apply a decoded instruction. PC must already point past it."""
    return jax.lax.switch(
        decoded_instruction.opcode,
        [
            execute_system_instruction,
            execute_jump,
            execute_call,
            execute_skip_if_equal_immediate,
            execute_skip_if_not_equal_immediate,
            execute_skip_if_equal_register,
            execute_set,
            execute_add,
            execute_alu_operation,
            execute_skip_if_not_equal_register,
            execute_set_index,
            execute_jump_with_offset,
            execute_random,
            execute_display,
            execute_skip_if_key,
            execute_misc_instruction,
        ],
        state, decoded_instruction
    )


def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction without fault checks."""
    return execute_decoded(state, decode(jnp.asarray(instruction, dtype=jnp.uint16)))


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch next instruction from memory and advance PC past it."""
    instruction = _pack_u16(state.memory[state.pc], state.memory[state.pc + 1])
    return state.replace(pc=state.pc + 2), instruction


@jax.jit
def step(state: EmulatorState) -> StepResult:
    """Fetch, decode and execute one instruction.

    Faults never raise here: they come back as ``StepResult.fault`` with the
    state left exactly as it was.
    """
    fetched_state, instruction = fetch(state)
    decoded_instruction = decode(instruction)

    fault = jnp.where(
        fetch_out_of_bounds(state),
        int(Fault.MEMORY_OUT_OF_BOUNDS),
        detect_fault(state, decoded_instruction),
    )
    fault = jnp.astype(fault, jnp.int32)
    ok = fault == int(Fault.NONE)

    executed = execute_decoded(fetched_state, decoded_instruction)
    new_state = jax.tree.map(lambda new, old: jnp.where(ok, new, old), executed, state)

    draws = (decoded_instruction.opcode == 0xD) | (decoded_instruction.raw == 0x00E0)
    return StepResult(
        state=new_state,
        fault=fault,
        instruction=instruction,
        display_changed=ok & draws,
    )


@jax.jit
def run_n_steps(state: EmulatorState, n: int) -> RunResult:
    """Run up to ``n`` instructions, stopping at the first fault.

    ``n`` is traced, so hosts can vary it between calls without recompiling.
    """
    def cond(carry):
        steps, _, fault, _ = carry
        return (steps < n) & (fault == int(Fault.NONE))

    def body(carry):
        steps, state, _, display_changed = carry
        result = step(state)
        steps = steps + jnp.astype(result.fault == int(Fault.NONE), jnp.int32)
        return steps, result.state, result.fault, display_changed | result.display_changed

    init = (
        jnp.zeros((), dtype=jnp.int32),
        state,
        jnp.zeros((), dtype=jnp.int32),
        jnp.zeros((), dtype=jnp.bool_),
    )
    steps, state, fault, display_changed = jax.lax.while_loop(cond, body, init)
    return RunResult(state=state, fault=fault, steps=steps, display_changed=display_changed)


def load_rom_bytes(state: EmulatorState, rom_data: bytes, max_size: Optional[int] = MAX_ROM_SIZE) -> EmulatorState:
    """Copy ROM bytes into memory starting at 0x200."""
    limit = MAX_ROM_SIZE if max_size is None else min(max_size, MAX_ROM_SIZE)
    if len(rom_data) > limit:
        raise RomTooLarge(
            f"ROM is {len(rom_data)} bytes; at most {limit} bytes fit from 0x{PROGRAM_START:03X} "
            f"to 0x{MEMORY_SIZE - 1:03X}"
        )
    if not rom_data:
        return state
    rom_array = jnp.array(list(rom_data), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(rom_data)].set(rom_array)
    return state.replace(memory=new_memory)


def load_rom(state: EmulatorState, filename: str, max_size: Optional[int] = MAX_ROM_SIZE) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return load_rom_bytes(state, rom_data, max_size)
