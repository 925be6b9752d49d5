"""CHIP-8 virtual machine package."""

from chip8vm.state import EmulatorState, StackState, create_state
from chip8vm.emulator import (
    execute, fetch, step, tick_timers, run_cycles, run_frame, run_checked,
    load_program, load_rom, press_key, release_key, set_keypad,
)
from chip8vm.decode import DecodedInstruction, Op, decode, classify
from chip8vm.errors import (
    Chip8Error, Chip8Fault, ProgramTooLargeError, UnknownInstructionError,
    MemoryBoundsError, StackOverflowError, StackUnderflowError, raise_for_fault,
)
from chip8vm.debug import disassemble, disassemble_program, format_state
from chip8vm.constants import *

__all__ = [
    "EmulatorState",
    "StackState",
    "create_state",
    "fetch",
    "execute",
    "step",
    "tick_timers",
    "run_cycles",
    "run_frame",
    "run_checked",
    "load_program",
    "load_rom",
    "press_key",
    "release_key",
    "set_keypad",
    "DecodedInstruction",
    "Op",
    "decode",
    "classify",
    "Chip8Error",
    "Chip8Fault",
    "ProgramTooLargeError",
    "UnknownInstructionError",
    "MemoryBoundsError",
    "StackOverflowError",
    "StackUnderflowError",
    "raise_for_fault",
    "disassemble",
    "disassemble_program",
    "format_state",
    "PROGRAM_START",
    "FONT_START",
    "MEMORY_SIZE",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "WRAP_SPRITES",
]
