"""Exceptions raised by the host-facing API."""

from chip8vm.constants import (
    MODE_HALTED, FAULT_NONE, FAULT_UNKNOWN_INSTRUCTION, FAULT_MEMORY_BOUNDS,
    FAULT_STACK_OVERFLOW, FAULT_STACK_UNDERFLOW,
)


class Chip8Error(Exception):
    """Base class for all chip8vm errors."""


class ProgramTooLargeError(Chip8Error, ValueError):
    """A program image does not fit in memory above the program start."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"Program too big: expected at most {limit} bytes, got {size}")


class Chip8Fault(Chip8Error):
    """The machine halted on a fatal condition.

    Attributes:
        pc: Address of the instruction that faulted
        instruction: Raw 16-bit word that faulted (0 when the fetch itself failed)
    """
    reason = "Fault"

    def __init__(self, pc: int, instruction: int):
        self.pc = pc
        self.instruction = instruction
        super().__init__(f"{self.reason}: 0x{instruction:04X} at 0x{pc:03X}")


class UnknownInstructionError(Chip8Fault):
    reason = "Unknown instruction"


class MemoryBoundsError(Chip8Fault):
    reason = "Memory access out of bounds"


class StackOverflowError(Chip8Fault):
    reason = "Stack overflow"


class StackUnderflowError(Chip8Fault):
    reason = "Stack underflow"


FAULT_ERRORS = {
    FAULT_UNKNOWN_INSTRUCTION: UnknownInstructionError,
    FAULT_MEMORY_BOUNDS: MemoryBoundsError,
    FAULT_STACK_OVERFLOW: StackOverflowError,
    FAULT_STACK_UNDERFLOW: StackUnderflowError,
}


def fault_error(state):
    """Build the exception for a halted state, or None if it did not fault."""
    fault = int(state.fault)
    if int(state.mode) != MODE_HALTED or fault == FAULT_NONE:
        return None
    return FAULT_ERRORS[fault](pc=int(state.pc), instruction=int(state.fault_word))


def raise_for_fault(state):
    """Raise the matching Chip8Fault if the machine halted on a fault."""
    error = fault_error(state)
    if error is not None:
        raise error
    return state
