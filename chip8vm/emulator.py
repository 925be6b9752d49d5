"""Main CHIP-8 emulator execution engine."""

from functools import partial

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import decode
from chip8vm.faults import detect_fault, halt
from chip8vm.errors import ProgramTooLargeError, raise_for_fault
from chip8vm.constants import (
    PROGRAM_START, MEMORY_SIZE, MAX_PROGRAM_SIZE, KEY_COUNT, MODE_RUNNING, FAULT_NONE, FAULT_MEMORY_BOUNDS,
    DEFAULT_INSTRUCTIONS_PER_FRAME,
)
from chip8vm.instructions.system import no_op, execute_clear_screen, execute_return
from chip8vm.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key_pressed, execute_skip_if_key_not_pressed,
)
from chip8vm.instructions.alu import (
    execute_alu_set, execute_alu_or, execute_alu_and, execute_alu_xor, execute_alu_add,
    execute_alu_sub_xy, execute_alu_shift_right, execute_alu_sub_yx, execute_alu_shift_left,
)
from chip8vm.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chip8vm.instructions.display import execute_display
from chip8vm.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers,
    complete_key_wait,
)

# Indexed by decode.Op; the trailing no_op sits at Op.UNKNOWN, which never
# reaches dispatch because detect_fault halts on it first.
INSTRUCTION_TABLE = [
    execute_clear_screen,
    execute_return,
    execute_jump,
    execute_call,
    execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate,
    execute_skip_if_equal_register,
    execute_set,
    execute_add,
    execute_alu_set,
    execute_alu_or,
    execute_alu_and,
    execute_alu_xor,
    execute_alu_add,
    execute_alu_sub_xy,
    execute_alu_shift_right,
    execute_alu_sub_yx,
    execute_alu_shift_left,
    execute_skip_if_not_equal_register,
    execute_set_index,
    execute_jump_with_offset,
    execute_random,
    execute_display,
    execute_skip_if_key_pressed,
    execute_skip_if_key_not_pressed,
    execute_get_delay_timer,
    execute_wait_for_key,
    execute_set_delay_timer,
    execute_set_sound_timer,
    execute_add_to_index,
    execute_font_character,
    execute_bcd_conversion,
    execute_store_registers,
    execute_load_registers,
    no_op,
]


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> jnp.ndarray:
    """Read the big-endian instruction word at PC without changing state.

    The caller must check ``PC + 1 < MEMORY_SIZE`` first; ``step`` does.
    """
    return _pack_u16(state.memory[state.pc], state.memory[state.pc + 1])


def _dispatch(state: EmulatorState, decoded_instruction) -> EmulatorState:
    state = state.replace(pc=state.pc + 2)
    return jax.lax.switch(decoded_instruction.op, INSTRUCTION_TABLE, state, decoded_instruction)


@jax.jit
def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction.

    PC is advanced by 2 before the handler runs. An undefined word or an
    out-of-range stack or memory access halts the machine instead, leaving
    every other field as it was before the instruction. A machine that is
    halted or awaiting a key is returned unchanged.
    """
    decoded_instruction = decode(instruction)
    fault = detect_fault(state, decoded_instruction)

    def run(state):
        return jax.lax.cond(
            fault != FAULT_NONE,
            lambda s: halt(s, fault, decoded_instruction.raw),
            lambda s: _dispatch(s, decoded_instruction),
            state
        )

    return jax.lax.cond(state.mode == MODE_RUNNING, run, lambda s: s, state)


def _step_running(state: EmulatorState) -> EmulatorState:
    out_of_bounds = jnp.astype(state.pc, jnp.int32) + 1 >= MEMORY_SIZE
    return jax.lax.cond(
        out_of_bounds,
        lambda s: halt(s, FAULT_MEMORY_BOUNDS, 0),
        lambda s: execute(s, fetch(s)),
        state
    )


def _step_awaiting_key(state: EmulatorState) -> EmulatorState:
    def resume(state):
        state = complete_key_wait(state, state.wait_register)
        return state.replace(pc=state.pc + 2)

    return jax.lax.cond(jnp.any(state.keypad), resume, lambda s: s, state)


def _step_halted(state: EmulatorState) -> EmulatorState:
    return state


@jax.jit
def step(state: EmulatorState) -> EmulatorState:
    """Advance the machine by one cycle.

    Running: fetch and execute the word at PC. Awaiting a key: poll the
    keypad, either staying put or storing the key and moving past FX0A.
    Halted: nothing happens.
    """
    return jax.lax.switch(
        state.mode,
        [_step_running, _step_awaiting_key, _step_halted],
        state
    )


@jax.jit
def tick_timers(state: EmulatorState) -> EmulatorState:
    """Decrement both timers once, stopping at zero. Call at 60 Hz."""
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, state.delay_timer),
        sound_timer=jnp.where(state.sound_timer > 0, state.sound_timer - 1, state.sound_timer),
    )


def run_instruction(state, _):
    state = step(state)
    return state, None


@partial(jax.jit, static_argnums=1)
def run_cycles(state: EmulatorState, n: int) -> EmulatorState:
    """Run ``n`` steps. A halted machine stays halted for the remaining ones."""
    state, _ = jax.lax.scan(run_instruction, state, length=n)
    return state


@partial(jax.jit, static_argnums=1)
def run_frame(state: EmulatorState, instructions_per_frame: int = DEFAULT_INSTRUCTIONS_PER_FRAME) -> EmulatorState:
    """Run one 60 Hz frame: a batch of steps followed by a single timer tick."""
    state, _ = jax.lax.scan(run_instruction, state, length=instructions_per_frame)
    return tick_timers(state)


def run_checked(state: EmulatorState, n: int = 1) -> EmulatorState:
    """Host-side stepping that raises a Chip8Fault as soon as the machine halts."""
    if n <= 0:
        raise ValueError(f"Cycle count must be positive, got {n}")
    for _ in range(n):
        state = raise_for_fault(step(state))
    return state


def load_program(state: EmulatorState, program: bytes) -> EmulatorState:
    """Copy a program image into memory starting at 0x200."""
    if len(program) > MAX_PROGRAM_SIZE:
        raise ProgramTooLargeError(len(program), MAX_PROGRAM_SIZE)
    if not program:
        return state
    program_array = jnp.array(list(program), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(program)].set(program_array)
    return state.replace(memory=new_memory)


def load_rom(state: EmulatorState, filename: str) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return load_program(state, rom_data)


def _check_key(key: int):
    if not 0 <= key < KEY_COUNT:
        raise ValueError(f"Key index must be in [0, {KEY_COUNT}), got {key}")


def press_key(state: EmulatorState, key: int) -> EmulatorState:
    """Mark keypad key ``key`` as held down."""
    _check_key(key)
    return state.replace(keypad=state.keypad.at[key].set(True))


def release_key(state: EmulatorState, key: int) -> EmulatorState:
    """Mark keypad key ``key`` as released."""
    _check_key(key)
    return state.replace(keypad=state.keypad.at[key].set(False))


def set_keypad(state: EmulatorState, keys) -> EmulatorState:
    """Replace the whole keypad with 16 booleans."""
    keypad = jnp.asarray(keys, dtype=jnp.bool_)
    if keypad.shape != (KEY_COUNT,):
        raise ValueError(f"Expected {KEY_COUNT} key states, got shape {keypad.shape}")
    return state.replace(keypad=keypad)
