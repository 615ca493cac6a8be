"""Test configuration and fixtures for CHIP-8 core tests."""

import pytest
import jax.numpy as jnp
from chip8core import create_state, load_rom_bytes


@pytest.fixture
def fresh_state():
    """Provide a fresh machine state for each test."""
    return create_state()


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def set_registers(state, **registers):
    """Helper to set registers by name, e.g. set_registers(state, V1=0x10, VF=1)."""
    V = state.V
    for name, value in registers.items():
        V = V.at[int(name[1:], 16)].set(value)
    return state.replace(V=V)


def assemble(*words):
    """Pack 16-bit instruction words into big-endian ROM bytes."""
    return b"".join(word.to_bytes(2, "big") for word in words)


def load_program(state, *words):
    """Load instruction words at 0x200."""
    return load_rom_bytes(state, assemble(*words))
