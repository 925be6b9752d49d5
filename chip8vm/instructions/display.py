"""CHIP-8 display operations."""

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import SCREEN_WIDTH, SCREEN_HEIGHT, SPRITE_WIDTH, FLAG_REGISTER

# Pre-computed coordinate grids for display operations
xx, yy = jnp.meshgrid(jnp.arange(SCREEN_WIDTH), jnp.arange(SCREEN_HEIGHT), indexing='ij')

MAX_SPRITE_HEIGHT = 15


def sprite_mask(state: EmulatorState, instruction: DecodedInstruction) -> jnp.ndarray:
    """Boolean (64, 32) mask of the screen cells a DXYN sprite toggles.

    Cell (x, y) belongs to the sprite when its offset from (VX, VY) lands
    inside the 8 x N box. With wrapping the offset is taken modulo the screen
    size, so rows and columns past an edge reappear on the opposite side;
    without it they are clipped.
    """
    origin_x = jnp.astype(state.V[instruction.x], jnp.int32)
    origin_y = jnp.astype(state.V[instruction.y], jnp.int32)
    height = jnp.astype(instruction.n, jnp.int32)

    if state.wrap_sprites:
        col_offset = (xx - origin_x) % SCREEN_WIDTH
        row_offset = (yy - origin_y) % SCREEN_HEIGHT
    else:
        col_offset = xx - (origin_x % SCREEN_WIDTH)
        row_offset = yy - (origin_y % SCREEN_HEIGHT)

    in_sprite = (col_offset >= 0) & (col_offset < SPRITE_WIDTH) & (row_offset >= 0) & (row_offset < height)

    rows = jnp.astype(state.I, jnp.int32) + jnp.arange(MAX_SPRITE_HEIGHT)
    sprite_rows = state.memory.at[rows].get(mode="fill", fill_value=0)
    sprite_bytes = sprite_rows[jnp.clip(row_offset, 0, MAX_SPRITE_HEIGHT - 1)]
    bits = (sprite_bytes >> (7 - jnp.clip(col_offset, 0, SPRITE_WIDTH - 1))) & 1
    return (bits == 1) & in_sprite


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N.

    VF is 1 when any lit cell was turned off, 0 otherwise.
    """
    sprite = sprite_mask(state, instruction)
    collision = jnp.any(state.display & sprite)

    return state.replace(
        display=state.display ^ sprite,
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8))
    )
