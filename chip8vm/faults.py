"""Fault detection for the pure execution core.

Faults are checked against the pre-instruction state, before any handler
runs, so a faulting instruction has no partial effects. A faulted machine is
switched to ``MODE_HALTED``; the host turns that into an exception with
``chip8vm.errors.raise_for_fault``.
"""

import jax.numpy as jnp

from chip8vm.constants import (
    MEMORY_SIZE, STACK_SIZE, MODE_HALTED, FAULT_NONE, FAULT_UNKNOWN_INSTRUCTION,
    FAULT_MEMORY_BOUNDS, FAULT_STACK_OVERFLOW, FAULT_STACK_UNDERFLOW,
)
from chip8vm.decode import DecodedInstruction, Op
from chip8vm.state import EmulatorState


def memory_span(instruction: DecodedInstruction) -> jnp.ndarray:
    """Number of bytes an instruction touches starting at I."""
    op = instruction.op
    x = jnp.astype(instruction.x, jnp.int32)
    n = jnp.astype(instruction.n, jnp.int32)
    return jnp.select(
        [
            op == Op.DRAW.value,
            op == Op.STORE_BCD.value,
            (op == Op.REGISTER_DUMP.value) | (op == Op.REGISTER_LOAD.value),
        ],
        [n, jnp.full_like(n, 3), x + 1],
        jnp.zeros_like(n),
    )


def detect_fault(state: EmulatorState, instruction: DecodedInstruction) -> jnp.ndarray:
    """Return the FAULT_* code this instruction would raise, or FAULT_NONE."""
    op = instruction.op
    pointer = state.stack.pointer

    span = memory_span(instruction)
    memory_violation = (span > 0) & (jnp.astype(state.I, jnp.int32) + span > MEMORY_SIZE)

    code = jnp.select(
        [
            op == Op.UNKNOWN.value,
            (op == Op.CALL.value) & (pointer >= STACK_SIZE),
            (op == Op.RETURN.value) & (pointer <= 0),
            memory_violation,
        ],
        [
            FAULT_UNKNOWN_INSTRUCTION,
            FAULT_STACK_OVERFLOW,
            FAULT_STACK_UNDERFLOW,
            FAULT_MEMORY_BOUNDS,
        ],
        FAULT_NONE,
    )
    return jnp.astype(code, jnp.uint8)


def halt(state: EmulatorState, fault, instruction) -> EmulatorState:
    """Stop the machine, recording the fault and the offending word."""
    return state.replace(
        mode=jnp.asarray(MODE_HALTED, dtype=jnp.uint8),
        fault=jnp.asarray(fault, dtype=jnp.uint8),
        fault_word=jnp.asarray(instruction, dtype=jnp.uint16),
    )
