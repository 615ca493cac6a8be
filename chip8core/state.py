"""CHIP-8 machine state structures."""

from typing import Optional, Union

import jax
import jax.numpy as jnp
from flax.struct import dataclass, field, PyTreeNode

from chip8core.constants import (
    FONT_DATA,
    FONT_START,
    MEMORY_SIZE,
    NUM_KEYS,
    NUM_REGISTERS,
    PROGRAM_START,
    SCREEN_HEIGHT,
    SCREEN_WIDTH,
    STACK_SIZE,
)


@dataclass(frozen=True)
class StackState:
    """Return address stack for subroutine calls."""
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))


class EmulatorState(PyTreeNode):
    """Complete CHIP-8 machine state.

    The display is stored row-major, indexed ``display[y, x]``. Every field
    keeps a fixed-width unsigned dtype so writes truncate explicitly.
    """
    rng: jax.random.PRNGKey
    seed_key: jax.random.PRNGKey
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.astype(PROGRAM_START, jnp.uint16))
    display: jnp.ndarray = field(default_factory=lambda: jnp.zeros((SCREEN_HEIGHT, SCREEN_WIDTH), dtype=jnp.bool_))
    display_dirty: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.bool_))
    stack: StackState = field(default_factory=lambda: StackState())
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    keypad: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_KEYS, dtype=jnp.bool_))
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))


def _as_key(rng: Union[int, jax.Array]) -> jax.Array:
    if isinstance(rng, int):
        return jax.random.PRNGKey(rng)
    return rng


def create_state(rng: Union[int, jax.Array] = jax.random.PRNGKey(0)) -> EmulatorState:
    """Create initial machine state with the font table loaded.

    ``rng`` is either a PRNG key or an integer seed; it is the only source
    of randomness used by ``CXKK``. The key is also kept as ``seed_key`` so
    :func:`reset` can replay the same random sequence.
    """
    key = _as_key(rng)
    state = EmulatorState(rng=key, seed_key=key)
    font = jnp.array(FONT_DATA, dtype=jnp.uint8)
    return state.replace(memory=state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(font))


def reset(state: EmulatorState, rng: Optional[Union[int, jax.Array]] = None) -> EmulatorState:
    """Return ``state`` restored to its power-on configuration.

    Without ``rng`` the machine is reseeded with the key it was created with.
    Memory is cleared back to the font table only; the caller reloads the ROM.
    """
    return create_state(state.seed_key if rng is None else rng)


def clear_display_dirty(state: EmulatorState) -> EmulatorState:
    """Acknowledge that the host has rendered the current display."""
    return state.replace(display_dirty=jnp.zeros((), dtype=jnp.bool_))
