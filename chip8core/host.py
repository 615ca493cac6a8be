"""Reference host loop around the CHIP-8 core.

The host owns the machine state and decides how often to run it:
instructions execute at ``instruction_frequency`` while the delay and sound
timers decay on their own ``timer_frequency`` clock. It also applies the
fault policy the core leaves to its caller.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

import jax.numpy as jnp
import numpy as np

from chip8core.constants import INSTRUCTION_FREQUENCY, MAX_ROM_SIZE, MEMORY_SIZE, TIMER_FREQUENCY
from chip8core.emulator import load_rom_bytes, run_n_steps
from chip8core.errors import Fault
from chip8core.keypad import set_keypad
from chip8core.logging import EmulatorLogger
from chip8core.rendering import display_pixels
from chip8core.state import EmulatorState, clear_display_dirty, create_state
from chip8core.timers import FixedRateClock, decay_timers, should_beep

FAULT_POLICIES = ("halt", "skip", "reset")


@dataclass
class HostConfig:
    """Runtime settings for :class:`Chip8Host`.

    Attributes:
        instruction_frequency: Instructions executed per second (typically 500-1000)
        timer_frequency: Delay/sound timer decrements per second (60 on real hardware)
        seed: Seed of the PRNG key used by CXKK; reused on every reset
        fault_policy: What to do when a step faults: "halt", "skip" or "reset"
        max_rom_size: Largest ROM accepted, in bytes
    """
    instruction_frequency: int = INSTRUCTION_FREQUENCY
    timer_frequency: int = TIMER_FREQUENCY
    seed: int = 0
    fault_policy: str = "halt"
    max_rom_size: int = MAX_ROM_SIZE

    def __post_init__(self):
        if self.fault_policy not in FAULT_POLICIES:
            raise ValueError(
                f"Unknown fault policy '{self.fault_policy}'. Available: {list(FAULT_POLICIES)}"
            )
        if self.instruction_frequency <= 0 or self.timer_frequency <= 0:
            raise ValueError("Instruction and timer frequencies must be positive")

    @property
    def instructions_per_frame(self) -> int:
        """Instructions executed per timer tick."""
        return max(1, self.instruction_frequency // self.timer_frequency)


class Chip8Host:
    """Runs a ROM on the CHIP-8 core at a fixed instruction and timer rate."""

    def __init__(
        self,
        rom_data: bytes,
        config: Optional[HostConfig] = None,
        logger: Optional[EmulatorLogger] = None,
        rom_name: str = "<memory>",
    ):
        self.config = config or HostConfig()
        self.logger = logger or EmulatorLogger()
        self.rom_data = bytes(rom_data)
        self.instruction_clock = FixedRateClock(self.config.instruction_frequency)
        self.timer_clock = FixedRateClock(self.config.timer_frequency)
        self.instruction_count = 0
        self.frame_count = 0
        self.reset()
        self.logger.log_rom_loaded(rom_name, len(self.rom_data))

    @classmethod
    def from_file(cls, filename: str, config: Optional[HostConfig] = None,
                  logger: Optional[EmulatorLogger] = None) -> "Chip8Host":
        with open(filename, 'rb') as f:
            rom_data = f.read()
        return cls(rom_data, config=config, logger=logger, rom_name=filename)

    def reset(self):
        """Restart the program from power-on state with the ROM reloaded."""
        state = create_state(self.config.seed)
        self.state: EmulatorState = load_rom_bytes(state, self.rom_data, self.config.max_rom_size)
        self.halted = False
        self.last_fault = Fault.NONE
        self.instruction_clock.reset()
        self.timer_clock.reset()
        self.logger.log_reset(self.config.seed)

    def set_keys(self, keys: Sequence):
        """Supply the keypad snapshot used by the following instructions."""
        self.state = set_keypad(self.state, keys)

    def run_instructions(self, count: int) -> bool:
        """Execute up to ``count`` instructions, applying the fault policy.

        Returns whether any executed instruction changed the display.
        """
        display_changed = False
        remaining = count
        while remaining > 0 and not self.halted:
            result = run_n_steps(self.state, remaining)
            executed = int(result.steps)
            self.state = result.state
            self.instruction_count += executed
            remaining -= executed
            display_changed |= bool(result.display_changed)
            if not result.ok:
                self._handle_fault(Fault(int(result.fault)))
                remaining -= 1
        return display_changed

    def tick_timers(self, ticks: int = 1):
        for _ in range(ticks):
            self.state = decay_timers(self.state)

    def run_frame(self) -> bool:
        """Run one timer period worth of instructions, then tick the timers once."""
        display_changed = self.run_instructions(self.config.instructions_per_frame)
        if not self.halted:
            self.tick_timers(1)
            self.frame_count += 1
        return display_changed

    def advance(self, elapsed: float) -> bool:
        """Advance emulation by ``elapsed`` seconds of wall-clock time.

        Instructions and timer ticks are scheduled by separate clocks, so the
        timers keep their rate however often this is called.
        """
        instructions = self.instruction_clock.advance(elapsed)
        ticks = self.timer_clock.advance(elapsed)
        display_changed = self.run_instructions(instructions)
        if not self.halted:
            self.tick_timers(ticks)
            self.frame_count += ticks
        return display_changed

    def _current_word(self) -> int:
        pc = int(self.state.pc)
        if pc + 1 >= MEMORY_SIZE:
            return 0
        return (int(self.state.memory[pc]) << 8) | int(self.state.memory[pc + 1])

    def _handle_fault(self, fault: Fault):
        pc = int(self.state.pc)
        policy = self.config.fault_policy
        # Skipping cannot recover from a PC that has left memory
        if policy == "skip" and pc + 1 >= MEMORY_SIZE:
            policy = "halt"

        self.logger.log_fault(fault, pc, self._current_word(), policy)
        if policy == "halt":
            self.halted = True
        elif policy == "skip":
            self.state = self.state.replace(pc=jnp.astype(pc + 2, jnp.uint16))
        else:
            self.reset()
        self.last_fault = fault

    @property
    def display(self) -> np.ndarray:
        """Row-major (32, 64) array of 0/1 pixels."""
        return display_pixels(self.state)

    @property
    def display_dirty(self) -> bool:
        return bool(self.state.display_dirty)

    def acknowledge_frame(self):
        """Clear the dirty flag after the display has been rendered."""
        self.state = clear_display_dirty(self.state)

    @property
    def should_beep(self) -> bool:
        return should_beep(self.state)
