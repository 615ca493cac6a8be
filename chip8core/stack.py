"""CHIP-8 stack operations."""

import jax.numpy as jnp
from chip8core.constants import STACK_SIZE
from chip8core.state import StackState


def is_full(stack: StackState) -> jnp.ndarray:
    """True when another push would overflow."""
    return stack.pointer >= STACK_SIZE


def is_empty(stack: StackState) -> jnp.ndarray:
    """True when a pop would underflow."""
    return stack.pointer == 0


def push(stack: StackState, address: jnp.ndarray) -> StackState:
    """Push address onto stack.

    Callers check :func:`is_full` first; a push onto a full stack is dropped.
    """
    new_data = stack.data.at[stack.pointer].set(jnp.astype(address, jnp.uint16))
    return stack.replace(data=new_data, pointer=stack.pointer + 1)


def pop(stack: StackState) -> tuple[StackState, jnp.ndarray]:
    """Pop address from stack."""
    new_pointer = stack.pointer - 1
    popped_address = stack.data[new_pointer]
    new_data = stack.data.at[new_pointer].set(0)
    return stack.replace(data=new_data, pointer=new_pointer), popped_address
