"""CHIP-8 system instructions (00E0, 00EE)."""

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.stack import pop


def no_op(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """No operation."""
    return state


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    return state.replace(display=jnp.zeros_like(state.display))


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00EE - Return from subroutine."""
    stack, address = pop(state.stack)
    return state.replace(stack=stack, pc=address)
