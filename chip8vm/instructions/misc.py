"""CHIP-8 timer, keypad and index-memory instructions (FXNN)."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import (
    FONT_START, FONT_GLYPH_SIZE, ADDRESS_MASK, KEY_COUNT, REGISTER_COUNT,
    MODE_RUNNING, MODE_AWAITING_KEY,
)


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX1E - Add VX to I, wrapping inside the 12-bit address space. VF is not touched."""
    new_i = (state.I + jnp.astype(state.V[instruction.x], jnp.uint16)) & ADDRESS_MASK
    return state.replace(I=jnp.astype(new_i, jnp.uint16))


def pressed_key(keypad: jnp.ndarray) -> jnp.ndarray:
    """Index of the highest pressed key. Only meaningful when any key is down."""
    return jnp.astype(KEY_COUNT - 1 - jnp.argmax(keypad[::-1]), jnp.uint8)


def complete_key_wait(state: EmulatorState, register) -> EmulatorState:
    """Store the pressed key in ``register`` and resume normal execution."""
    return state.replace(
        V=state.V.at[register].set(pressed_key(state.keypad)),
        mode=jnp.asarray(MODE_RUNNING, dtype=jnp.uint8),
    )


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Wait for key press.

    With a key already down the wait completes immediately. Otherwise PC is
    rewound onto this instruction and the machine enters MODE_AWAITING_KEY;
    ``step`` then polls the keypad instead of fetching.
    """
    def wait_action(state):
        return state.replace(
            pc=state.pc - 2,
            mode=jnp.asarray(MODE_AWAITING_KEY, dtype=jnp.uint8),
            wait_register=jnp.astype(instruction.x, jnp.uint8),
        )

    return jax.lax.cond(
        jnp.any(state.keypad),
        lambda s: complete_key_wait(s, instruction.x),
        wait_action,
        state
    )


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to the glyph of the low nibble of VX."""
    digit = jnp.astype(state.V[instruction.x] & 0xF, jnp.uint16)
    return state.replace(I=jnp.astype(FONT_START + digit * FONT_GLYPH_SIZE, jnp.uint16))


def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = state.V[instruction.x]

    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    indices = jnp.arange(3) + state.I
    return state.replace(memory=state.memory.at[indices].set(digits))


def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX55 - Store V0 through VX in memory starting at I, then I += X + 1."""
    register_mask = jnp.arange(REGISTER_COUNT) <= instruction.x
    base_indices = jnp.astype(state.I, jnp.int32) + jnp.arange(REGISTER_COUNT)
    current_memory_values = state.memory.at[base_indices].get(mode="fill", fill_value=0)
    new_memory_values = jnp.where(register_mask, state.V, current_memory_values)
    new_memory = state.memory.at[base_indices].set(new_memory_values, mode="drop")
    return state.replace(memory=new_memory, I=jnp.astype(state.I + instruction.x + 1, jnp.uint16))


def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX65 - Load V0 through VX from memory starting at I, then I += X + 1."""
    register_mask = jnp.arange(REGISTER_COUNT) <= instruction.x
    base_indices = jnp.astype(state.I, jnp.int32) + jnp.arange(REGISTER_COUNT)
    memory_values = state.memory.at[base_indices].get(mode="fill", fill_value=0)
    new_V = jnp.where(register_mask, memory_values, state.V)
    return state.replace(V=new_V, I=jnp.astype(state.I + instruction.x + 1, jnp.uint16))
