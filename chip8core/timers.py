"""CHIP-8 delay/sound timers and fixed-rate scheduling.

Timers decay at 60 Hz independently of how fast instructions execute, so
hosts drive :func:`decay_timers` from a :class:`FixedRateClock` fed with
wall-clock time instead of calling it once per step.
"""

import jax.numpy as jnp

from chip8core.state import EmulatorState
from chip8core.constants import TIMER_FREQUENCY


def _decrement(timer: jnp.ndarray) -> jnp.ndarray:
    return jnp.where(timer > 0, timer - 1, timer)


def decay_timers(state: EmulatorState) -> EmulatorState:
    """Decrement delay and sound timers by one, stopping at zero."""
    return state.replace(
        delay_timer=_decrement(state.delay_timer),
        sound_timer=_decrement(state.sound_timer),
    )


def should_beep(state: EmulatorState) -> bool:
    """Whether the sound timer is active."""
    return bool(state.sound_timer > 0)


class FixedRateClock:
    """Converts elapsed wall-clock time into a number of fixed-rate ticks.

    Fractions of a tick carry over between calls, so the long-run tick rate
    matches ``frequency`` no matter how irregularly ``advance`` is called.
    """

    def __init__(self, frequency: float = TIMER_FREQUENCY):
        if frequency <= 0:
            raise ValueError(f"Clock frequency must be positive, got {frequency}")
        self.frequency = frequency
        self._pending = 0.0

    def advance(self, elapsed: float) -> int:
        """Add ``elapsed`` seconds and return how many ticks are now due."""
        if elapsed < 0:
            raise ValueError(f"Elapsed time must not be negative, got {elapsed}")
        self._pending += elapsed * self.frequency
        ticks = int(self._pending)
        self._pending -= ticks
        return ticks

    def reset(self):
        self._pending = 0.0
