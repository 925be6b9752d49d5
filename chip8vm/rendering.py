"""Framebuffer rendering utilities for visualization."""

from typing import Tuple

import jax.numpy as jnp
import numpy as np
from PIL import Image

COLOR_SCHEMES = {
    "classic": ((0, 255, 0), (0, 0, 0)),  # Green on black
    "amber": ((255, 176, 0), (0, 0, 0)),  # Amber on black
    "white": ((255, 255, 255), (0, 0, 0)),  # White on black
    "blue": ((0, 255, 255), (0, 0, 64)),  # Cyan on dark blue
    "retro": ((255, 255, 0), (64, 0, 64)),  # Yellow on purple
}


def color_scheme(
    scheme: str = "classic",
) -> Tuple[Tuple[int, int, int], Tuple[int, int, int]]:
    """Get predefined color schemes for rendering.

    Args:
        scheme: Color scheme name (see ``COLOR_SCHEMES``)

    Returns:
        Tuple of (on_color, off_color) as RGB tuples
    """
    if scheme not in COLOR_SCHEMES:
        raise ValueError(
            f"Unknown color scheme '{scheme}'. Available: {list(COLOR_SCHEMES.keys())}"
        )

    return COLOR_SCHEMES[scheme]


def display_to_rgb(
    display: jnp.ndarray,
    scale: int = 8,
    on_color: Tuple[int, int, int] = (0, 255, 0),
    off_color: Tuple[int, int, int] = (0, 0, 0),
) -> np.ndarray:
    """Convert the boolean framebuffer to an RGB array with optional upscaling.

    Args:
        display: Boolean array of shape (64, 32) indexed [x, y]
        scale: Upscaling factor for better visibility (default: 8x)
        on_color: RGB color for lit cells
        off_color: RGB color for unlit cells

    Returns:
        RGB array of shape (32*scale, 64*scale, 3) with uint8 values
    """
    if scale < 1:
        raise ValueError(f"Scale must be at least 1, got {scale}")

    # (64 width, 32 height) -> image rows first: (32 height, 64 width)
    pixels = np.array(display, dtype=np.bool_).T
    height, width = pixels.shape

    rgb_frame = np.zeros((height, width, 3), dtype=np.uint8)
    rgb_frame[pixels] = on_color
    rgb_frame[~pixels] = off_color

    if scale > 1:
        rgb_frame = np.repeat(np.repeat(rgb_frame, scale, axis=0), scale, axis=1)

    return rgb_frame


def save_screenshot(display: jnp.ndarray, filename: str, scale: int = 8, scheme: str = "classic") -> None:
    """Write the framebuffer to an image file (format chosen from the extension)."""
    on_color, off_color = color_scheme(scheme)
    frame = display_to_rgb(display, scale=scale, on_color=on_color, off_color=off_color)
    Image.fromarray(frame).save(filename)
