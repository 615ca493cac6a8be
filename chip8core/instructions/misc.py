"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8core.state import EmulatorState
from chip8core.decode import DecodedInstruction
from chip8core.constants import FONT_START, FONT_GLYPH_SIZE, NUM_REGISTERS
from chip8core.instructions.system import no_op


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX1E - Add VX to I, keeping the low 16 bits. VF is untouched."""
    new_i = state.I + jnp.astype(state.V[instruction.x], jnp.uint16)
    return state.replace(I=jnp.astype(new_i, jnp.uint16))


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Wait for key press.

    With no key down the PC is rewound onto this instruction, so the next
    step polls the keypad again.
    """
    def key_pressed_action(state):
        pressed_key = jnp.argmax(state.keypad)
        return state.replace(V=state.V.at[instruction.x].set(jnp.astype(pressed_key, jnp.uint8)))

    def wait_action(state):
        return state.replace(pc=state.pc - 2)

    return jax.lax.cond(jnp.any(state.keypad), key_pressed_action, wait_action, state)


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to location of sprite for digit VX."""
    font_address = FONT_START + jnp.astype(state.V[instruction.x], jnp.uint16) * FONT_GLYPH_SIZE
    return state.replace(I=jnp.astype(font_address, jnp.uint16))


def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = state.V[instruction.x]

    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    indices = jnp.arange(3) + jnp.astype(state.I, jnp.int32)
    new_memory = state.memory.at[indices].set(digits)
    return state.replace(memory=new_memory)


def _register_window(state: EmulatorState, instruction: DecodedInstruction):
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    base_indices = jnp.astype(state.I, jnp.int32) + jnp.arange(NUM_REGISTERS)
    return register_mask, base_indices


def _advance_index(state: EmulatorState, instruction: DecodedInstruction) -> jnp.ndarray:
    return jnp.astype(state.I + jnp.astype(instruction.x, jnp.uint16) + 1, jnp.uint16)


def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX55 - Store V0 through VX in memory starting at I, then I += X + 1."""
    register_mask, base_indices = _register_window(state, instruction)
    current_memory_values = state.memory[base_indices]
    new_memory_values = jnp.where(register_mask, state.V, current_memory_values)
    new_memory = state.memory.at[base_indices].set(new_memory_values)
    return state.replace(memory=new_memory, I=_advance_index(state, instruction))


def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX65 - Load V0 through VX from memory starting at I, then I += X + 1."""
    register_mask, base_indices = _register_window(state, instruction)
    memory_values = state.memory[base_indices]
    new_V = jnp.where(register_mask, memory_values, state.V)
    return state.replace(V=new_V, I=_advance_index(state, instruction))


def execute_misc_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Dispatch misc instructions using arithmetic switch."""
    is_0x07 = instruction.kk == 0x07
    is_0x0A = instruction.kk == 0x0A
    is_0x15 = instruction.kk == 0x15
    is_0x18 = instruction.kk == 0x18
    is_0x1E = instruction.kk == 0x1E
    is_0x29 = instruction.kk == 0x29
    is_0x33 = instruction.kk == 0x33
    is_0x55 = instruction.kk == 0x55
    is_0x65 = instruction.kk == 0x65

    switch_index = (
        is_0x07 * 0 +
        is_0x0A * 1 +
        is_0x15 * 2 +
        is_0x18 * 3 +
        is_0x1E * 4 +
        is_0x29 * 5 +
        is_0x33 * 6 +
        is_0x55 * 7 +
        is_0x65 * 8 +
        (~(is_0x07 | is_0x0A | is_0x15 | is_0x18 | is_0x1E | is_0x29 | is_0x33 | is_0x55 | is_0x65)) * 9
    )

    return jax.lax.switch(
        switch_index,
        [
            execute_get_delay_timer,
            execute_wait_for_key,
            execute_set_delay_timer,
            execute_set_sound_timer,
            execute_add_to_index,
            execute_font_character,
            execute_bcd_conversion,
            execute_store_registers,
            execute_load_registers,
            no_op,
        ],
        state, instruction
    )
