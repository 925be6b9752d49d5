"""CHIP-8 control flow instructions.

Handlers run after PC has already been advanced past the instruction, so a
taken skip adds one more instruction width and a call pushes the current PC.
"""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.stack import push


def execute_jump(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """1NNN - Jump to address NNN."""
    return state.replace(pc=jnp.astype(instruction.nnn, jnp.uint16))


def execute_call(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """2NNN - Call subroutine at NNN."""
    state = state.replace(stack=push(state.stack, state.pc))
    return execute_jump(state, instruction)


def make_skip_instruction(condition_fn):
    """Factory for skip instructions."""
    def skip_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        condition = condition_fn(state, instruction)
        return jax.lax.cond(
            condition,
            lambda s: s.replace(pc=s.pc + 2),
            lambda s: s,
            state
        )
    return skip_instruction


def _key_pressed(state: EmulatorState, instruction: DecodedInstruction):
    return state.keypad[state.V[instruction.x] & 0xF]


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == inst.nn
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != inst.nn
)

execute_skip_if_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == state.V[inst.y]
)

execute_skip_if_not_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != state.V[inst.y]
)

execute_skip_if_key_pressed = make_skip_instruction(_key_pressed)

execute_skip_if_key_not_pressed = make_skip_instruction(
    lambda state, inst: ~_key_pressed(state, inst)
)


def execute_jump_with_offset(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """BNNN - Jump to address NNN + V0.

    The target is not masked: a jump past the end of memory faults on the
    next fetch.
    """
    jump_address = instruction.nnn + jnp.astype(state.V[0], jnp.uint16)
    return state.replace(pc=jnp.astype(jump_address, jnp.uint16))
