"""CHIP-8 virtual machine core."""

from chip8core.state import EmulatorState, StackState, create_state, reset, clear_display_dirty
from chip8core.emulator import (
    StepResult, RunResult, execute, execute_decoded, fetch, step, run_n_steps, load_rom, load_rom_bytes
)
from chip8core.decode import DecodedInstruction, decode
from chip8core.errors import (
    Fault, Chip8Error, UnsupportedOpcode, StackOverflow, StackUnderflow, MemoryOutOfBounds, RomTooLarge
)
from chip8core.timers import FixedRateClock, decay_timers, should_beep
from chip8core.keypad import set_keypad, press_key, release_key, release_all, pressed_keys
from chip8core.constants import *

__all__ = [
    "EmulatorState",
    "StackState",
    "create_state",
    "reset",
    "clear_display_dirty",
    "StepResult",
    "RunResult",
    "fetch",
    "execute",
    "execute_decoded",
    "step",
    "run_n_steps",
    "load_rom",
    "load_rom_bytes",
    "DecodedInstruction",
    "decode",
    "Fault",
    "Chip8Error",
    "UnsupportedOpcode",
    "StackOverflow",
    "StackUnderflow",
    "MemoryOutOfBounds",
    "RomTooLarge",
    "FixedRateClock",
    "decay_timers",
    "should_beep",
    "set_keypad",
    "press_key",
    "release_key",
    "release_all",
    "pressed_keys",
    "MEMORY_SIZE",
    "PROGRAM_START",
    "MAX_ROM_SIZE",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "STACK_SIZE",
    "NUM_KEYS",
    "VF",
]
