"""CHIP-8 instruction decoding."""

from enum import IntEnum

import jax.numpy as jnp
from chex import dataclass


class Op(IntEnum):
    """Operation tags, in the order of ``OPCODE_TABLE``."""
    CLEAR_SCREEN = 0
    RETURN = 1
    JUMP = 2
    CALL = 3
    SKIP_EQ_IMMEDIATE = 4
    SKIP_NE_IMMEDIATE = 5
    SKIP_EQ_REGISTER = 6
    LOAD_IMMEDIATE = 7
    ADD_IMMEDIATE = 8
    ASSIGN = 9
    OR = 10
    AND = 11
    XOR = 12
    ADD = 13
    SUB = 14
    SHIFT_RIGHT = 15
    SUB_REVERSE = 16
    SHIFT_LEFT = 17
    SKIP_NE_REGISTER = 18
    SET_INDEX = 19
    JUMP_WITH_OFFSET = 20
    RANDOM = 21
    DRAW = 22
    SKIP_KEY_PRESSED = 23
    SKIP_KEY_NOT_PRESSED = 24
    GET_DELAY_TIMER = 25
    AWAIT_KEY = 26
    SET_DELAY_TIMER = 27
    SET_SOUND_TIMER = 28
    ADD_TO_INDEX = 29
    FONT_GLYPH = 30
    STORE_BCD = 31
    REGISTER_DUMP = 32
    REGISTER_LOAD = 33
    UNKNOWN = 34


# (mask, match, op): a word is op when word & mask == match. Patterns never overlap.
OPCODE_TABLE = (
    (0xFFFF, 0x00E0, Op.CLEAR_SCREEN),
    (0xFFFF, 0x00EE, Op.RETURN),
    (0xF000, 0x1000, Op.JUMP),
    (0xF000, 0x2000, Op.CALL),
    (0xF000, 0x3000, Op.SKIP_EQ_IMMEDIATE),
    (0xF000, 0x4000, Op.SKIP_NE_IMMEDIATE),
    (0xF00F, 0x5000, Op.SKIP_EQ_REGISTER),
    (0xF000, 0x6000, Op.LOAD_IMMEDIATE),
    (0xF000, 0x7000, Op.ADD_IMMEDIATE),
    (0xF00F, 0x8000, Op.ASSIGN),
    (0xF00F, 0x8001, Op.OR),
    (0xF00F, 0x8002, Op.AND),
    (0xF00F, 0x8003, Op.XOR),
    (0xF00F, 0x8004, Op.ADD),
    (0xF00F, 0x8005, Op.SUB),
    (0xF00F, 0x8006, Op.SHIFT_RIGHT),
    (0xF00F, 0x8007, Op.SUB_REVERSE),
    (0xF00F, 0x800E, Op.SHIFT_LEFT),
    (0xF00F, 0x9000, Op.SKIP_NE_REGISTER),
    (0xF000, 0xA000, Op.SET_INDEX),
    (0xF000, 0xB000, Op.JUMP_WITH_OFFSET),
    (0xF000, 0xC000, Op.RANDOM),
    (0xF000, 0xD000, Op.DRAW),
    (0xF0FF, 0xE09E, Op.SKIP_KEY_PRESSED),
    (0xF0FF, 0xE0A1, Op.SKIP_KEY_NOT_PRESSED),
    (0xF0FF, 0xF007, Op.GET_DELAY_TIMER),
    (0xF0FF, 0xF00A, Op.AWAIT_KEY),
    (0xF0FF, 0xF015, Op.SET_DELAY_TIMER),
    (0xF0FF, 0xF018, Op.SET_SOUND_TIMER),
    (0xF0FF, 0xF01E, Op.ADD_TO_INDEX),
    (0xF0FF, 0xF029, Op.FONT_GLYPH),
    (0xF0FF, 0xF033, Op.STORE_BCD),
    (0xF0FF, 0xF055, Op.REGISTER_DUMP),
    (0xF0FF, 0xF065, Op.REGISTER_LOAD),
)

_MASKS = jnp.array([mask for mask, _, _ in OPCODE_TABLE], dtype=jnp.uint16)
_MATCHES = jnp.array([match for _, match, _ in OPCODE_TABLE], dtype=jnp.uint16)


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    op: int      # Op tag
    kind: int    # Instruction family (word & 0xF000)
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)


def classify(instruction: int) -> Op:
    """Host-side lookup of the operation tag for a concrete word."""
    for mask, match, op in OPCODE_TABLE:
        if instruction & mask == match:
            return op
    return Op.UNKNOWN


def decode(instruction: int) -> DecodedInstruction:
    """Decode 16-bit instruction into its tag and operand fields."""
    raw = jnp.asarray(instruction, dtype=jnp.uint16)
    matches = (raw & _MASKS) == _MATCHES
    op = jnp.where(jnp.any(matches), jnp.argmax(matches), int(Op.UNKNOWN))
    return DecodedInstruction(
        raw=raw,
        op=op,
        kind=raw & 0xF000,
        x=(raw & 0x0F00) >> 8,
        y=(raw & 0x00F0) >> 4,
        n=raw & 0x000F,
        nn=raw & 0x00FF,
        nnn=raw & 0x0FFF
    )
