"""CHIP-8 rendering utilities for visualization."""

import jax.numpy as jnp
import numpy as np
from typing import Tuple

from PIL import Image

from chipjax.constants import DEFAULT_SCALE


def display_to_rgb(
    display: jnp.ndarray,
    scale: int = DEFAULT_SCALE,
    on_color: Tuple[int, int, int] = (255, 255, 255),
    off_color: Tuple[int, int, int] = (0, 0, 0),
) -> np.ndarray:
    """Convert the CHIP-8 display buffer to an RGB array with optional upscaling.

    Args:
        display: Array of shape (32, 64) holding 0/1 per pixel, indexed [y, x]
        scale: Upscaling factor, each pixel becomes a scale x scale block
        on_color: RGB color for "on" pixels
        off_color: RGB color for "off" pixels

    Returns:
        RGB array of shape (32*scale, 64*scale, 3) with uint8 values
    """
    if scale < 1:
        raise ValueError(f"scale must be at least 1, got {scale}")
    pixels = np.asarray(display).astype(np.bool_)
    height, width = pixels.shape

    rgb_frame = np.zeros((height, width, 3), dtype=np.uint8)
    rgb_frame[pixels] = on_color
    rgb_frame[~pixels] = off_color

    if scale > 1:
        rgb_frame = np.repeat(np.repeat(rgb_frame, scale, axis=0), scale, axis=1)

    return rgb_frame


def create_color_scheme(
    scheme: str = "white",
) -> Tuple[Tuple[int, int, int], Tuple[int, int, int]]:
    """Get predefined color schemes for CHIP-8 rendering.

    Args:
        scheme: Color scheme name ("white", "classic", "amber", "blue", "retro")

    Returns:
        Tuple of (on_color, off_color) as RGB tuples
    """
    schemes = {
        "white": ((255, 255, 255), (0, 0, 0)),  # White on black
        "classic": ((0, 255, 0), (0, 0, 0)),  # Green on black
        "amber": ((255, 176, 0), (0, 0, 0)),  # Amber on black
        "blue": ((0, 255, 255), (0, 0, 64)),  # Cyan on dark blue
        "retro": ((255, 255, 0), (64, 0, 64)),  # Yellow on purple
    }

    if scheme not in schemes:
        raise ValueError(
            f"Unknown color scheme '{scheme}'. Available: {list(schemes.keys())}"
        )

    return schemes[scheme]


def display_to_ascii(display: jnp.ndarray, on: str = "#", off: str = ".") -> str:
    """Render the display as text, one line per row."""
    pixels = np.asarray(display).astype(np.bool_)
    return "\n".join("".join(on if p else off for p in row) for row in pixels)


def save_screenshot(
    display: jnp.ndarray, filename: str, scale: int = DEFAULT_SCALE, color_scheme: str = "white"
) -> None:
    """Save the display as an image file (format from the extension)."""
    on_color, off_color = create_color_scheme(color_scheme)
    Image.fromarray(display_to_rgb(display, scale, on_color, off_color)).save(filename)
