"""Human-readable views of instructions and machine state."""

from chip8vm.decode import Op, classify
from chip8vm.constants import MODE_RUNNING, MODE_AWAITING_KEY, MODE_HALTED, PROGRAM_START

_MNEMONICS = {
    Op.CLEAR_SCREEN: "CLS",
    Op.RETURN: "RET",
    Op.JUMP: "JP 0x{nnn:03X}",
    Op.CALL: "CALL 0x{nnn:03X}",
    Op.SKIP_EQ_IMMEDIATE: "SE V{x:X}, 0x{nn:02X}",
    Op.SKIP_NE_IMMEDIATE: "SNE V{x:X}, 0x{nn:02X}",
    Op.SKIP_EQ_REGISTER: "SE V{x:X}, V{y:X}",
    Op.LOAD_IMMEDIATE: "LD V{x:X}, 0x{nn:02X}",
    Op.ADD_IMMEDIATE: "ADD V{x:X}, 0x{nn:02X}",
    Op.ASSIGN: "LD V{x:X}, V{y:X}",
    Op.OR: "OR V{x:X}, V{y:X}",
    Op.AND: "AND V{x:X}, V{y:X}",
    Op.XOR: "XOR V{x:X}, V{y:X}",
    Op.ADD: "ADD V{x:X}, V{y:X}",
    Op.SUB: "SUB V{x:X}, V{y:X}",
    Op.SHIFT_RIGHT: "SHR V{x:X}, V{y:X}",
    Op.SUB_REVERSE: "SUBN V{x:X}, V{y:X}",
    Op.SHIFT_LEFT: "SHL V{x:X}, V{y:X}",
    Op.SKIP_NE_REGISTER: "SNE V{x:X}, V{y:X}",
    Op.SET_INDEX: "LD I, 0x{nnn:03X}",
    Op.JUMP_WITH_OFFSET: "JP V0, 0x{nnn:03X}",
    Op.RANDOM: "RND V{x:X}, 0x{nn:02X}",
    Op.DRAW: "DRW V{x:X}, V{y:X}, {n}",
    Op.SKIP_KEY_PRESSED: "SKP V{x:X}",
    Op.SKIP_KEY_NOT_PRESSED: "SKNP V{x:X}",
    Op.GET_DELAY_TIMER: "LD V{x:X}, DT",
    Op.AWAIT_KEY: "LD V{x:X}, K",
    Op.SET_DELAY_TIMER: "LD DT, V{x:X}",
    Op.SET_SOUND_TIMER: "LD ST, V{x:X}",
    Op.ADD_TO_INDEX: "ADD I, V{x:X}",
    Op.FONT_GLYPH: "LD F, V{x:X}",
    Op.STORE_BCD: "LD B, V{x:X}",
    Op.REGISTER_DUMP: "LD [I], V{x:X}",
    Op.REGISTER_LOAD: "LD V{x:X}, [I]",
    Op.UNKNOWN: "??? 0x{raw:04X}",
}

MODE_NAMES = {
    MODE_RUNNING: "running",
    MODE_AWAITING_KEY: "awaiting key",
    MODE_HALTED: "halted",
}


def disassemble(instruction: int) -> str:
    """Mnemonic for one instruction word, e.g. ``DRW V0, V1, 5``."""
    instruction = int(instruction) & 0xFFFF
    return _MNEMONICS[classify(instruction)].format(
        raw=instruction,
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=instruction & 0x000F,
        nn=instruction & 0x00FF,
        nnn=instruction & 0x0FFF,
    )


def disassemble_program(program: bytes, start: int = PROGRAM_START) -> list[str]:
    """List ``address: word  mnemonic`` lines for a program image.

    A trailing odd byte is shown as a raw byte.
    """
    lines = []
    for offset in range(0, len(program) - 1, 2):
        word = program[offset] << 8 | program[offset + 1]
        lines.append(f"0x{start + offset:03X}: {word:04X}  {disassemble(word)}")
    if len(program) % 2:
        lines.append(f"0x{start + len(program) - 1:03X}: {program[-1]:02X}")
    return lines


def format_state(state) -> str:
    """Register dump: V0..VF in four columns, then PC, SP and the rest."""
    V = [int(v) for v in state.V]
    lines = ["-" * 40]
    for row in range(4):
        lines.append("  ".join(f"V{reg:X}: 0x{V[reg]:02X}" for reg in range(row, 16, 4)))
    lines.append("-" * 40)
    lines.append(f"PC: 0x{int(state.pc):03X}")
    lines.append(f"SP: {int(state.stack.pointer)}")
    lines.append(f"I:  0x{int(state.I):03X}")
    lines.append(f"DT: {int(state.delay_timer)}  ST: {int(state.sound_timer)}")
    mode = MODE_NAMES.get(int(state.mode), "unknown")
    if int(state.mode) == MODE_AWAITING_KEY:
        mode += f" (V{int(state.wait_register):X})"
    lines.append(f"Mode: {mode}")
    return "\n".join(lines)
