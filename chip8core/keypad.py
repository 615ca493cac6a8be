"""CHIP-8 keypad snapshot helpers.

The keypad holds 16 logical keys (0x0-0xF). Mapping physical input to
these keys is left to the host.
"""

from typing import Sequence

import jax.numpy as jnp

from chip8core.state import EmulatorState
from chip8core.constants import NUM_KEYS


def _check_key(key: int):
    if not 0 <= key < NUM_KEYS:
        raise ValueError(f"Key must be in 0x0-0x{NUM_KEYS - 1:X}, got {key}")


def set_keypad(state: EmulatorState, keys: Sequence) -> EmulatorState:
    """Replace the keypad with a 16-slot pressed/released snapshot."""
    if isinstance(keys, (bytes, bytearray)):
        keys = list(keys)
    keypad = jnp.asarray(keys).astype(jnp.bool_)
    if keypad.shape != (NUM_KEYS,):
        raise ValueError(f"Keypad snapshot must have {NUM_KEYS} entries, got shape {keypad.shape}")
    return state.replace(keypad=keypad)


def press_key(state: EmulatorState, key: int) -> EmulatorState:
    """Mark a single key as pressed."""
    _check_key(key)
    return state.replace(keypad=state.keypad.at[key].set(True))


def release_key(state: EmulatorState, key: int) -> EmulatorState:
    """Mark a single key as released."""
    _check_key(key)
    return state.replace(keypad=state.keypad.at[key].set(False))


def release_all(state: EmulatorState) -> EmulatorState:
    return state.replace(keypad=jnp.zeros(NUM_KEYS, dtype=jnp.bool_))


def pressed_keys(state: EmulatorState) -> list[int]:
    """Indices of the keys currently pressed, lowest first."""
    return [key for key in range(NUM_KEYS) if bool(state.keypad[key])]
