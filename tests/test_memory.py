"""Tests for immediate, index and random instructions."""

import jax
import pytest
from chip8vm import execute, create_state, PROGRAM_START
from conftest import set_registers


class TestImmediates:
    """Test 6XNN and 7XNN."""

    @pytest.mark.parametrize("x,nn", [(0, 0x0A), (5, 0x00), (0xE, 0xFF), (0xF, 0x7F)])
    def test_load_immediate(self, fresh_state, x, nn):
        """6XNN - VX = NN and PC moves one instruction."""
        state = execute(fresh_state, 0x6000 | (x << 8) | nn)
        assert state.V[x] == nn
        assert state.pc == PROGRAM_START + 2

    def test_add_basic(self, fresh_state):
        """7XNN - Add NN to VX."""
        state = set_registers(fresh_state, V1=0x10)
        state = execute(state, 0x7105)  # V1 += 5
        assert state.V[1] == 0x15

    def test_add_wraps_without_flag(self, fresh_state):
        """7XNN - Overflow wraps and VF is untouched."""
        state = set_registers(fresh_state, V1=0xFF, VF=0x00)
        state = execute(state, 0x7102)
        assert state.V[1] == 0x01
        assert state.V[15] == 0


class TestIndexRegister:
    """Test I register operations."""

    def test_set_index_basic(self, fresh_state):
        """ANNN - Set I register to NNN."""
        state = execute(fresh_state, 0xA123)
        assert state.I == 0x123

    def test_set_index_maximum(self, fresh_state):
        state = execute(fresh_state, 0xAFFF)
        assert state.I == 0xFFF

    def test_set_index_multiple_operations(self, fresh_state):
        state = execute(fresh_state, 0xA111)
        state = execute(state, 0xA222)
        assert state.I == 0x222


class TestRandom:
    """Test CXNN."""

    def test_random_zero_mask(self, fresh_state):
        state = set_registers(fresh_state, V3=0xFF)
        state = execute(state, 0xC300)
        assert state.V[3] == 0

    def test_random_respects_mask(self):
        for seed in range(8):
            state = create_state(jax.random.PRNGKey(seed))
            state = execute(state, 0xC30F)
            assert int(state.V[3]) & 0xF0 == 0

    def test_random_advances_key(self, fresh_state):
        state = execute(fresh_state, 0xC3FF)
        assert not (state.rng == fresh_state.rng).all()
