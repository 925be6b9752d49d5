"""Command line driver: run a ROM in a window or headless, or disassemble it."""

import argparse
import sys
import time

import jax
import jax.numpy as jnp

from chip8vm.constants import (
    DEFAULT_INSTRUCTIONS_PER_FRAME, TIMER_FREQUENCY, KEY_COUNT, MODE_HALTED, MODE_AWAITING_KEY,
)
from chip8vm.debug import disassemble_program
from chip8vm.emulator import fetch, load_program, run_frame, step, tick_timers
from chip8vm.errors import Chip8Error, fault_error
from chip8vm.logging import EmulatorLogger, scan_with_progress
from chip8vm.rendering import COLOR_SCHEMES, color_scheme, display_to_rgb, save_screenshot
from chip8vm.state import create_state

# Host keys laid out like the COSMAC VIP hex keypad:
#   1 2 3 C        1 2 3 4
#   4 5 6 D   <-   Q W E R
#   7 8 9 E        A S D F
#   A 0 B F        Z X C V
KEYPAD_LAYOUT = {
    "1": 0x1, "2": 0x2, "3": 0x3, "4": 0xC,
    "q": 0x4, "w": 0x5, "e": 0x6, "r": 0xD,
    "a": 0x7, "s": 0x8, "d": 0x9, "f": 0xE,
    "z": 0xA, "x": 0x0, "c": 0xB, "v": 0xF,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chip8vm", description="CHIP-8 virtual machine")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run a ROM")
    run_parser.add_argument("rom", help="Path to the program image")
    run_parser.add_argument("--ipf", type=int, default=DEFAULT_INSTRUCTIONS_PER_FRAME,
                            help="Instructions executed per 60 Hz frame")
    run_parser.add_argument("--headless", action="store_true",
                            help="Run without a window for a fixed number of frames")
    run_parser.add_argument("--frames", type=int, default=600,
                            help="Frames to run in headless mode")
    run_parser.add_argument("--screenshot", default=None,
                            help="Save the final framebuffer to this image file (headless)")
    run_parser.add_argument("--scale", type=int, default=8, help="Pixel upscaling factor")
    run_parser.add_argument("--colors", default="classic", choices=sorted(COLOR_SCHEMES),
                            help="Color scheme")
    run_parser.add_argument("--clip-sprites", action="store_true",
                            help="Clip sprites at the screen edges instead of wrapping")
    run_parser.add_argument("--shift-vy", action="store_true",
                            help="8XY6/8XYE shift VY into VX instead of shifting VX")
    run_parser.add_argument("--seed", type=int, default=0, help="Seed for CXNN randomness")
    run_parser.add_argument("--no-progress", action="store_true",
                            help="Disable the headless progress bar")
    run_parser.add_argument("--trace", action="store_true",
                            help="Log every executed instruction (slow)")

    disasm_parser = subparsers.add_parser("disasm", help="Disassemble a ROM")
    disasm_parser.add_argument("rom", help="Path to the program image")

    return parser


def read_rom(filename: str) -> bytes:
    with open(filename, "rb") as f:
        return f.read()


def run_headless(state, frames: int, instructions_per_frame: int, progress: bool = True):
    """Run ``frames`` jitted frames, optionally with a live progress bar."""
    if frames <= 0:
        raise ValueError(f"Frame count must be positive, got {frames}")

    def frame_body(state, _):
        return run_frame(state, instructions_per_frame), None

    if progress:
        frame_body = scan_with_progress(frames)(frame_body)

    @jax.jit
    def run(state):
        state, _ = jax.lax.scan(frame_body, state, jnp.arange(frames))
        return state

    return run(state)


def run_traced_frame(state, instructions_per_frame: int, logger: EmulatorLogger):
    """Step one instruction at a time, logging each one, then tick the timers."""
    for _ in range(instructions_per_frame):
        if int(state.mode) == MODE_HALTED:
            break
        if int(state.mode) != MODE_AWAITING_KEY:
            logger.log_instruction(int(state.pc), int(fetch(state)))
        state = step(state)
    return tick_timers(state)


def run_window(state, args, logger: EmulatorLogger) -> int:
    """Interactive pygame loop: input, one frame of instructions, render."""
    import pygame

    key_map = {pygame.key.key_code(name): key for name, key in KEYPAD_LAYOUT.items()}
    on_color, off_color = color_scheme(args.colors)
    initial_state = state
    ipf = args.ipf

    pygame.init()
    screen = pygame.display.set_mode((64 * args.scale, 32 * args.scale))
    pygame.display.set_caption(f"chip8vm - {args.rom}")
    clock = pygame.time.Clock()

    keypad = [False] * KEY_COUNT
    running = True
    paused = False
    exit_code = 0

    logger.info("Controls: ESC=Quit, P=Pause, F5=Reset, F1=Dump state, +/-=Speed")

    try:
        while running:
            clock.tick(TIMER_FREQUENCY)

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_p:
                        paused = not paused
                        logger.info("Paused" if paused else "Resumed")
                    elif event.key == pygame.K_F5:
                        state = initial_state
                        keypad = [False] * KEY_COUNT
                        logger.info("Reset")
                    elif event.key == pygame.K_F1:
                        logger.log_state(state, level="INFO")
                    elif event.key == pygame.K_EQUALS:
                        ipf = min(100, ipf + 2)
                        logger.info(f"Speed: {ipf} instructions/frame")
                    elif event.key == pygame.K_MINUS:
                        ipf = max(1, ipf - 2)
                        logger.info(f"Speed: {ipf} instructions/frame")
                    elif event.key in key_map:
                        keypad[key_map[event.key]] = True
                elif event.type == pygame.KEYUP:
                    if event.key in key_map:
                        keypad[key_map[event.key]] = False

            if not paused:
                state = state.replace(keypad=jnp.array(keypad, dtype=jnp.bool_))
                if args.trace:
                    state = run_traced_frame(state, ipf, logger)
                else:
                    state = run_frame(state, ipf)

                error = fault_error(state)
                if error is not None:
                    logger.log_fault(error, state)
                    exit_code = 1
                    running = False

            frame = display_to_rgb(state.display, scale=args.scale, on_color=on_color, off_color=off_color)
            surface = pygame.surfarray.make_surface(frame.swapaxes(0, 1))
            screen.blit(surface, (0, 0))
            pygame.display.flip()
    finally:
        pygame.quit()

    return exit_code


def command_run(args, logger: EmulatorLogger) -> int:
    if args.ipf <= 0:
        raise ValueError(f"Instructions per frame must be positive, got {args.ipf}")

    program = read_rom(args.rom)
    state = create_state(
        jax.random.PRNGKey(args.seed),
        wrap_sprites=not args.clip_sprites,
        shift_uses_vy=args.shift_vy,
    )
    state = load_program(state, program)
    logger.log_rom_loaded(args.rom, len(program))

    if not args.headless:
        return run_window(state, args, logger)

    start = time.time()
    if args.trace:
        for _ in range(args.frames):
            state = run_traced_frame(state, args.ipf, logger)
    else:
        state = run_headless(state, args.frames, args.ipf, progress=not args.no_progress)
    jax.block_until_ready(state)
    elapsed = time.time() - start
    logger.info(f"Ran {args.frames} frames ({args.frames * args.ipf:,} cycles) in {elapsed:.2f}s")

    if args.screenshot:
        save_screenshot(state.display, args.screenshot, scale=args.scale, scheme=args.colors)
        logger.info(f"Screenshot saved: {args.screenshot}")

    error = fault_error(state)
    if error is not None:
        logger.log_fault(error, state)
        return 1
    logger.log_state(state, level="INFO")
    return 0


def command_disasm(args) -> int:
    for line in disassemble_program(read_rom(args.rom)):
        print(line)
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logger = EmulatorLogger(log_level="DEBUG" if getattr(args, "trace", False) else "INFO")

    try:
        if args.command == "disasm":
            return command_disasm(args)
        return command_run(args, logger)
    except (Chip8Error, ValueError, OSError) as e:
        logger.error(str(e))
        return 2


if __name__ == "__main__":
    sys.exit(main())
