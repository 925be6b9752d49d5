"""Console logging for the chip8vm drivers.

``EmulatorLogger`` prints levelled, timestamped lines for ROM loading, faults,
register dumps and per-instruction traces. ``scan_with_progress`` feeds a
tqdm bar from inside a jitted ``jax.lax.scan`` through io_callback.
"""

import time
import sys
from typing import Callable

import jax
from jax.experimental import io_callback

from tqdm import tqdm

from chip8vm.debug import disassemble, format_state

LEVELS = {"DEBUG": 0, "INFO": 1, "ERROR": 2}

COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "ERROR": "\033[31m",
}
RESET = "\033[0m"


class EmulatorLogger:
    """Console logger for the emulator driver loop."""

    def __init__(self, name: str = "chip8vm", log_level: str = "INFO", use_colors: bool = True):
        self.name = name
        self.log_level = log_level.upper()
        if self.log_level not in LEVELS:
            raise ValueError(f"Unknown log level '{log_level}'. Available: {list(LEVELS)}")
        self.use_colors = use_colors and hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
        self.start_time = time.time()
        self.instruction_count = 0

    def log(self, level: str, message: str):
        level = level.upper()
        if LEVELS[level] < LEVELS[self.log_level]:
            return
        level_str = f"[{level:>8s}]"
        if self.use_colors:
            level_str = f"{COLORS[level]}{level_str}{RESET}"
        print(f"[{time.time() - self.start_time:8.2f}s]{level_str}[{self.name}] {message}", flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def error(self, message: str):
        self.log("ERROR", message)

    def log_rom_loaded(self, filename: str, size: int):
        self.info(f"Loaded {filename} ({size} bytes)")

    def log_instruction(self, pc: int, instruction: int):
        """Trace one executed instruction at DEBUG level."""
        self.instruction_count += 1
        if LEVELS[self.log_level] <= LEVELS["DEBUG"]:
            self.debug(f"0x{pc:03X}: {instruction:04X}  {disassemble(instruction)}")

    def log_state(self, state, level: str = "DEBUG"):
        """Log the full register dump, one line per log record."""
        for line in format_state(state).splitlines():
            self.log(level, line)

    def log_fault(self, error: Exception, state):
        """Report a fatal fault together with the machine state."""
        self.error(str(error))
        self.log_state(state, level="ERROR")


def scan_with_progress(n: int, desc: str = None, **tqdm_kwargs) -> Callable:
    """Decorator adding a tqdm bar over ``n`` frames to a ``jax.lax.scan`` body.

    The scanned ``xs`` must be the iteration index, e.g. ``jnp.arange(n)``.
    The bar advances in chunks of ``chunk`` frames; the last iteration adds
    whatever is left over and closes it, so it always ends at ``n``.
    """
    if desc is None:
        desc = f"Running ({n:,} frames)"
    chunk = max(1, min(n // 20, 50))
    leftover = n % chunk
    bars = {}

    def _open():
        bars[0] = tqdm(total=n, desc=desc, unit="frame", **tqdm_kwargs)

    def _advance(frames):
        bars[0].update(int(frames))

    def _close():
        bars.pop(0).close()

    def _report(iter_num):
        jax.lax.cond(
            iter_num == 0,
            lambda: io_callback(_open, None, ordered=True),
            lambda: None,
        )
        jax.lax.cond(
            (iter_num + 1) % chunk == 0,
            lambda: io_callback(_advance, None, chunk, ordered=True),
            lambda: None,
        )
        jax.lax.cond(
            iter_num == n - 1,
            lambda: io_callback(_advance, None, leftover, ordered=True),
            lambda: None,
        )
        jax.lax.cond(
            iter_num == n - 1,
            lambda: io_callback(_close, None, ordered=True),
            lambda: None,
        )

    def decorator(func):
        def wrapper(carry, x):
            _report(x)
            return func(carry, x)
        return wrapper

    return decorator
