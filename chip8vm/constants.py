"""CHIP-8 machine constants and default configuration."""

MEMORY_SIZE = 4096
PROGRAM_START = 0x200
MAX_PROGRAM_SIZE = MEMORY_SIZE - PROGRAM_START

REGISTER_COUNT = 16
FLAG_REGISTER = 0xF
STACK_SIZE = 16
KEY_COUNT = 16

SCREEN_WIDTH = 64
SCREEN_HEIGHT = 32
SPRITE_WIDTH = 8

ADDRESS_MASK = 0xFFF

# Glyph g lives at FONT_START + g * FONT_GLYPH_SIZE
FONT_START = 0x000
FONT_GLYPH_SIZE = 5
FONT_DATA = [
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
]

# Sprite edge policy: True wraps pixels modulo the screen size, False clips them.
WRAP_SPRITES = True

TIMER_FREQUENCY = 60
DEFAULT_INSTRUCTIONS_PER_FRAME = 10

# Machine modes
MODE_RUNNING = 0
MODE_AWAITING_KEY = 1
MODE_HALTED = 2

# Fault codes recorded in a halted state
FAULT_NONE = 0
FAULT_UNKNOWN_INSTRUCTION = 1
FAULT_MEMORY_BOUNDS = 2
FAULT_STACK_OVERFLOW = 3
FAULT_STACK_UNDERFLOW = 4
