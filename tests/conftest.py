"""Test configuration and fixtures for CHIP-8 machine tests."""

import pytest
import jax.numpy as jnp
from chip8vm import create_state


@pytest.fixture
def fresh_state():
    """Provide a fresh machine state for each test."""
    return create_state()


@pytest.fixture
def clip_state():
    """Provide a fresh state that clips sprites at the screen edges."""
    return create_state(wrap_sprites=False)


@pytest.fixture
def shift_vy_state():
    """Provide a fresh state whose shifts read VY."""
    return create_state(shift_uses_vy=True)


def set_registers(state, **registers):
    """Helper to set registers by name, e.g. ``set_registers(state, V1=3, VF=1)``."""
    V = state.V
    for name, value in registers.items():
        V = V.at[int(name[1:], 16)].set(value)
    return state.replace(V=V)


def with_pc(state, pc):
    """Helper to move PC while keeping its dtype."""
    return state.replace(pc=jnp.asarray(pc, dtype=jnp.uint16))


def with_index(state, address):
    """Helper to set I while keeping its dtype."""
    return state.replace(I=jnp.asarray(address, dtype=jnp.uint16))


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def load_words(state, words, address=0x200):
    """Helper to place big-endian instruction words in memory."""
    program = []
    for word in words:
        program.extend([word >> 8, word & 0xFF])
    return setup_sprite_in_memory(state, address, program)
