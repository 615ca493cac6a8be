"""CHIP-8 display operations."""

import jax.numpy as jnp
from chip8core.state import EmulatorState
from chip8core.decode import DecodedInstruction
from chip8core.constants import SCREEN_WIDTH, SCREEN_HEIGHT, SPRITE_WIDTH, VF

# Pre-computed row-major coordinate grids for display operations
yy, xx = jnp.meshgrid(jnp.arange(SCREEN_HEIGHT), jnp.arange(SCREEN_WIDTH), indexing='ij')


def sprite_mask(memory: jnp.ndarray, index: jnp.ndarray, sprite_x: jnp.ndarray,
                sprite_y: jnp.ndarray, height: jnp.ndarray) -> jnp.ndarray:
    """Screen-sized boolean mask of the set sprite bits, wrapping at both edges."""
    col_offset = (xx - jnp.astype(sprite_x, jnp.int32)) % SCREEN_WIDTH
    row_offset = (yy - jnp.astype(sprite_y, jnp.int32)) % SCREEN_HEIGHT
    in_sprite = (col_offset < SPRITE_WIDTH) & (row_offset < height)

    sprite_bytes = memory[jnp.astype(index, jnp.int32) + row_offset]
    shift = jnp.clip(SPRITE_WIDTH - 1 - col_offset, 0, SPRITE_WIDTH - 1)
    bits = (jnp.astype(sprite_bytes, jnp.int32) >> shift) & 1
    return (bits == 1) & in_sprite


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw N-row sprite from I at (VX, VY), VF = collision."""
    sprite = sprite_mask(
        state.memory,
        state.I,
        state.V[instruction.x] % SCREEN_WIDTH,
        state.V[instruction.y] % SCREEN_HEIGHT,
        jnp.astype(instruction.n, jnp.int32),
    )
    collision = jnp.any(state.display & sprite)

    return state.replace(
        display=state.display ^ sprite,
        display_dirty=jnp.ones((), dtype=jnp.bool_),
        V=state.V.at[VF].set(jnp.astype(collision, jnp.uint8))
    )
