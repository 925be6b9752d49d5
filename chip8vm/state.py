"""CHIP-8 machine state structures."""

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode, field

from chip8vm.constants import (
    MEMORY_SIZE, PROGRAM_START, FONT_START, FONT_DATA, SCREEN_WIDTH, SCREEN_HEIGHT,
    STACK_SIZE, REGISTER_COUNT, KEY_COUNT, WRAP_SPRITES, MODE_RUNNING, FAULT_NONE,
)


@dataclass(frozen=True)
class StackState:
    """Return address stack for subroutine calls."""
    data: jnp.ndarray
    pointer: jnp.ndarray


class EmulatorState(PyTreeNode):
    """Complete CHIP-8 machine state.

    Every field is replaced, never mutated: instruction handlers return a new
    state built with ``replace``. ``display`` is indexed ``[x, y]``.

    ``mode`` is one of the ``MODE_*`` constants. While awaiting a key,
    ``wait_register`` names the register that receives it and ``pc`` still
    points at the FX0A word. A halted machine carries a ``FAULT_*`` code and
    the offending instruction word; further steps leave it untouched.
    """
    rng: jax.Array
    memory: jnp.ndarray
    pc: jnp.ndarray
    display: jnp.ndarray
    stack: StackState
    delay_timer: jnp.ndarray
    sound_timer: jnp.ndarray
    keypad: jnp.ndarray
    V: jnp.ndarray
    I: jnp.ndarray
    mode: jnp.ndarray
    wait_register: jnp.ndarray
    fault: jnp.ndarray
    fault_word: jnp.ndarray
    wrap_sprites: bool = field(pytree_node=False, default=WRAP_SPRITES)
    shift_uses_vy: bool = field(pytree_node=False, default=False)


def create_stack() -> StackState:
    """Create an empty call stack."""
    return StackState(
        data=jnp.zeros(STACK_SIZE, dtype=jnp.uint16),
        pointer=jnp.zeros((), dtype=jnp.int32),
    )


def create_state(
    rng: jax.Array = None,
    wrap_sprites: bool = WRAP_SPRITES,
    shift_uses_vy: bool = False,
) -> EmulatorState:
    """Create initial machine state with the font loaded and PC at 0x200."""
    if rng is None:
        rng = jax.random.PRNGKey(0)
    memory = jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8)
    memory = memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(jnp.array(FONT_DATA, dtype=jnp.uint8))
    return EmulatorState(
        rng=rng,
        memory=memory,
        pc=jnp.asarray(PROGRAM_START, dtype=jnp.uint16),
        display=jnp.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=jnp.bool_),
        stack=create_stack(),
        delay_timer=jnp.zeros((), dtype=jnp.uint8),
        sound_timer=jnp.zeros((), dtype=jnp.uint8),
        keypad=jnp.zeros(KEY_COUNT, dtype=jnp.bool_),
        V=jnp.zeros(REGISTER_COUNT, dtype=jnp.uint8),
        I=jnp.zeros((), dtype=jnp.uint16),
        mode=jnp.asarray(MODE_RUNNING, dtype=jnp.uint8),
        wait_register=jnp.zeros((), dtype=jnp.uint8),
        fault=jnp.asarray(FAULT_NONE, dtype=jnp.uint8),
        fault_word=jnp.zeros((), dtype=jnp.uint16),
        wrap_sprites=wrap_sprites,
        shift_uses_vy=shift_uses_vy,
    )
