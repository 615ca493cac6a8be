"""CHIP-8 fault codes and exceptions.

The jitted core reports faults as integer ``Fault`` codes so that a step
can be traced and compiled. Hosts that prefer exceptions convert a code
with :func:`exception_for_fault`.
"""

from enum import IntEnum
from typing import Optional


class Fault(IntEnum):
    """Outcome of a single step."""
    NONE = 0
    UNSUPPORTED_OPCODE = 1
    STACK_OVERFLOW = 2
    STACK_UNDERFLOW = 3
    MEMORY_OUT_OF_BOUNDS = 4


class Chip8Error(Exception):
    """Base class for CHIP-8 machine errors."""

    fault = Fault.NONE

    def __init__(self, message: str, pc: Optional[int] = None, instruction: Optional[int] = None):
        super().__init__(message)
        self.pc = pc
        self.instruction = instruction


class UnsupportedOpcode(Chip8Error):
    """Instruction word does not map to any known instruction."""
    fault = Fault.UNSUPPORTED_OPCODE


class StackOverflow(Chip8Error):
    """Subroutine call with all stack slots in use."""
    fault = Fault.STACK_OVERFLOW


class StackUnderflow(Chip8Error):
    """Return with no pending subroutine call."""
    fault = Fault.STACK_UNDERFLOW


class MemoryOutOfBounds(Chip8Error):
    """Fetch or memory transfer outside the 4 KiB address space."""
    fault = Fault.MEMORY_OUT_OF_BOUNDS


class RomTooLarge(Chip8Error):
    """ROM does not fit between the program start and the end of memory."""


_FAULT_EXCEPTIONS = {
    Fault.UNSUPPORTED_OPCODE: UnsupportedOpcode,
    Fault.STACK_OVERFLOW: StackOverflow,
    Fault.STACK_UNDERFLOW: StackUnderflow,
    Fault.MEMORY_OUT_OF_BOUNDS: MemoryOutOfBounds,
}


def describe_fault(fault: int, pc: int, instruction: int) -> str:
    """Human readable description of a fault."""
    fault = Fault(fault)
    if fault == Fault.UNSUPPORTED_OPCODE:
        return f"Unsupported opcode 0x{instruction:04X} at 0x{pc:03X}"
    if fault == Fault.STACK_OVERFLOW:
        return f"Stack overflow calling 0x{instruction & 0xFFF:03X} from 0x{pc:03X}"
    if fault == Fault.STACK_UNDERFLOW:
        return f"Stack underflow returning from 0x{pc:03X}"
    if fault == Fault.MEMORY_OUT_OF_BOUNDS:
        return f"Memory access out of bounds by 0x{instruction:04X} at 0x{pc:03X}"
    return "No fault"


def exception_for_fault(fault: int, pc: int, instruction: int) -> Optional[Chip8Error]:
    """Build the exception matching a fault code, or None when there is no fault."""
    exception_class = _FAULT_EXCEPTIONS.get(Fault(fault))
    if exception_class is None:
        return None
    return exception_class(describe_fault(fault, pc, instruction), pc=pc, instruction=instruction)
