"""Tests for control flow instructions."""

import jax.numpy as jnp
import pytest
from chip8vm import (
    execute, step, raise_for_fault, StackOverflowError, StackUnderflowError, MemoryBoundsError,
    PROGRAM_START, MODE_HALTED, MODE_RUNNING, FAULT_STACK_OVERFLOW, FAULT_STACK_UNDERFLOW,
    FAULT_MEMORY_BOUNDS,
)
from conftest import load_words, set_registers, with_pc


class TestJumps:
    """Test jump instructions."""

    @pytest.mark.parametrize("start", [0x200, 0x456, 0xEEE])
    def test_jump(self, fresh_state, start):
        """1NNN - PC = NNN regardless of prior PC."""
        state = execute(with_pc(fresh_state, start), 0x1ABC)
        assert state.pc == 0xABC

    def test_jump_to_zero(self, fresh_state):
        state = execute(fresh_state, 0x1000)
        assert state.pc == 0x000

    def test_jump_with_offset(self, fresh_state):
        """BNNN - Jump to NNN + V0."""
        state = set_registers(fresh_state, V0=0x10, V2=0x30)
        state = execute(state, 0xB250)
        assert state.pc == 0x260

    def test_jump_with_offset_past_memory(self, fresh_state):
        """BNNN - The target is not masked."""
        state = set_registers(fresh_state, V0=0xFF)
        state = execute(state, 0xBFFF)
        assert state.pc == 0xFFF + 0xFF


class TestSubroutines:
    """Test call and return."""

    def test_call(self, fresh_state):
        """2NNN - Push the return address and jump."""
        state = execute(fresh_state, 0x2300)

        assert state.pc == 0x300
        assert state.stack.pointer == 1
        assert state.stack.data[0] == PROGRAM_START + 2

    def test_call_and_return(self, fresh_state):
        """2NNN then 00EE restores PC past the call and the stack depth."""
        state = with_pc(fresh_state, 0x240)

        state = execute(state, 0x2400)
        assert state.pc == 0x400

        state = execute(state, 0x00EE)
        assert state.pc == 0x242
        assert state.stack.pointer == 0

    def test_nested_calls(self, fresh_state):
        state = execute(fresh_state, 0x2300)  # from 0x200
        state = execute(state, 0x2400)  # from 0x300
        assert state.stack.pointer == 2

        state = execute(state, 0x00EE)
        assert state.pc == 0x302
        state = execute(state, 0x00EE)
        assert state.pc == 0x202
        assert state.stack.pointer == 0

    def test_stack_holds_sixteen_calls(self, fresh_state):
        state = fresh_state
        for _ in range(16):
            state = execute(state, 0x2200)

        assert state.mode == MODE_RUNNING
        assert state.stack.pointer == 16

    def test_stack_overflow(self, fresh_state):
        state = fresh_state
        for _ in range(16):
            state = execute(state, 0x2200)

        state = execute(state, 0x2200)

        assert state.mode == MODE_HALTED
        assert state.fault == FAULT_STACK_OVERFLOW
        assert state.stack.pointer == 16
        with pytest.raises(StackOverflowError):
            raise_for_fault(state)

    def test_return_past_end_of_memory_faults(self, fresh_state):
        """A call from the last word returns to 0x1000, which cannot be fetched."""
        state = load_words(with_pc(fresh_state, 0xFFE), [0x2300], address=0xFFE)
        state = load_words(state, [0x00EE], address=0x300)

        state = step(state)
        assert state.stack.data[0] == 0x1000

        state = step(state)
        assert state.pc == 0x1000
        assert state.mode == MODE_RUNNING

        state = step(state)
        assert state.mode == MODE_HALTED
        assert state.fault == FAULT_MEMORY_BOUNDS
        assert state.pc == 0x1000
        with pytest.raises(MemoryBoundsError):
            raise_for_fault(state)

    def test_return_without_call(self, fresh_state):
        state = execute(fresh_state, 0x00EE)

        assert state.mode == MODE_HALTED
        assert state.fault == FAULT_STACK_UNDERFLOW
        assert state.pc == PROGRAM_START
        with pytest.raises(StackUnderflowError):
            raise_for_fault(state)


class TestSkipInstructions:
    """Test conditional skip instructions."""

    def test_skip_if_equal_immediate_true(self, fresh_state):
        """3XNN - Skip when VX == NN."""
        state = set_registers(fresh_state, V1=0x42)
        state = execute(state, 0x3142)
        assert state.pc == PROGRAM_START + 4

    def test_skip_if_equal_immediate_false(self, fresh_state):
        state = set_registers(fresh_state, V1=0x41)
        state = execute(state, 0x3142)
        assert state.pc == PROGRAM_START + 2

    def test_skip_if_not_equal_immediate_true(self, fresh_state):
        """4XNN - Skip when VX != NN."""
        state = set_registers(fresh_state, V1=0x41)
        state = execute(state, 0x4142)
        assert state.pc == PROGRAM_START + 4

    def test_skip_if_not_equal_immediate_false(self, fresh_state):
        state = set_registers(fresh_state, V1=0x42)
        state = execute(state, 0x4142)
        assert state.pc == PROGRAM_START + 2

    def test_skip_if_equal_register_true(self, fresh_state):
        """5XY0 - Skip when VX == VY."""
        state = set_registers(fresh_state, V1=0x55, V2=0x55)
        state = execute(state, 0x5120)
        assert state.pc == PROGRAM_START + 4

    def test_skip_if_equal_register_false(self, fresh_state):
        state = set_registers(fresh_state, V1=0x55, V2=0x44)
        state = execute(state, 0x5120)
        assert state.pc == PROGRAM_START + 2

    def test_skip_if_not_equal_register_true(self, fresh_state):
        """9XY0 - Skip when VX != VY."""
        state = set_registers(fresh_state, V7=0xAA, V8=0xBB)
        state = execute(state, 0x9780)
        assert state.pc == PROGRAM_START + 4

    def test_skip_if_not_equal_register_false(self, fresh_state):
        state = set_registers(fresh_state, V7=0xCC, V8=0xCC)
        state = execute(state, 0x9780)
        assert state.pc == PROGRAM_START + 2

    @pytest.mark.parametrize("instruction", [0x5121, 0x512F, 0x9781])
    def test_register_skips_require_zero_low_nibble(self, fresh_state, instruction):
        state = execute(fresh_state, instruction)
        assert state.mode == MODE_HALTED

    def test_skip_boundary_values(self, fresh_state):
        state = set_registers(fresh_state, V0=0xFF)
        state = execute(state, 0x30FF)
        assert state.pc == PROGRAM_START + 4


class TestKeySkips:
    """Test EX9E and EXA1."""

    def test_skip_if_key_pressed(self, fresh_state):
        state = set_registers(fresh_state, V2=0xA)
        state = state.replace(keypad=state.keypad.at[0xA].set(True))

        state = execute(state, 0xE29E)

        assert state.pc == PROGRAM_START + 4

    def test_no_skip_if_key_released(self, fresh_state):
        state = set_registers(fresh_state, V2=0xA)
        state = execute(state, 0xE29E)
        assert state.pc == PROGRAM_START + 2

    def test_skip_if_key_not_pressed(self, fresh_state):
        state = set_registers(fresh_state, V2=0x3)
        state = execute(state, 0xE2A1)
        assert state.pc == PROGRAM_START + 4

    def test_no_skip_if_key_not_pressed_while_held(self, fresh_state):
        state = set_registers(fresh_state, V2=0x3)
        state = state.replace(keypad=jnp.ones(16, dtype=jnp.bool_))
        state = execute(state, 0xE2A1)
        assert state.pc == PROGRAM_START + 2

    def test_key_index_uses_low_nibble(self, fresh_state):
        state = set_registers(fresh_state, V2=0x13)
        state = state.replace(keypad=state.keypad.at[0x3].set(True))
        state = execute(state, 0xE29E)
        assert state.pc == PROGRAM_START + 4

    @pytest.mark.parametrize("instruction", [0xE09F, 0xE0A2, 0xE000])
    def test_undefined_key_instructions(self, fresh_state, instruction):
        state = execute(fresh_state, instruction)
        assert state.mode == MODE_HALTED
