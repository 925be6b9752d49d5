"""CHIP-8 immediate, index and random instructions."""

import jax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction


def execute_set(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """6XNN - Set VX = NN."""
    return state.replace(V=state.V.at[instruction.x].set(jnp.astype(instruction.nn, jnp.uint8)))


def execute_add(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """7XNN - Add NN to VX, wrapping at 8 bits. VF is not touched."""
    total = state.V[instruction.x] + jnp.astype(instruction.nn, jnp.uint8)
    return state.replace(V=state.V.at[instruction.x].set(total))


def execute_set_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """ANNN - Set I = NNN."""
    return state.replace(I=jnp.astype(instruction.nnn, jnp.uint16))


def execute_random(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """CXNN - Set VX = random & NN."""
    key, subkey = jax.random.split(state.rng)
    random_value = jnp.astype(jax.random.randint(subkey, shape=(), minval=0, maxval=256), jnp.uint8)
    masked = random_value & jnp.astype(instruction.nn, jnp.uint8)
    return state.replace(V=state.V.at[instruction.x].set(masked), rng=key)
