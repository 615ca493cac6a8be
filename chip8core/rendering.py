"""CHIP-8 display export and rendering utilities."""

from typing import Tuple

import cv2
import jax.numpy as jnp
import numpy as np
from PIL import Image

from chip8core.state import EmulatorState
from chip8core.constants import SCREEN_HEIGHT, SCREEN_WIDTH


def display_pixels(state: EmulatorState) -> np.ndarray:
    """Export the display as a row-major (32, 64) array of 0/1 bytes."""
    return np.asarray(state.display, dtype=np.uint8)


def _check_display(pixels: np.ndarray):
    if pixels.shape != (SCREEN_HEIGHT, SCREEN_WIDTH):
        raise ValueError(
            f"Expected display shape ({SCREEN_HEIGHT}, {SCREEN_WIDTH}), got {pixels.shape}"
        )


def chip8_display_to_rgb(
    display: jnp.ndarray,
    scale: int = 8,
    on_color: Tuple[int, int, int] = (255, 255, 255),
    off_color: Tuple[int, int, int] = (0, 0, 0),
) -> np.ndarray:
    """Convert CHIP-8 boolean display to RGB array with optional upscaling.

    Args:
        display: Boolean array of shape (32, 64), indexed [y, x]
        scale: Upscaling factor for better visibility (default: 8x)
        on_color: RGB color for "on" pixels (default: white)
        off_color: RGB color for "off" pixels (default: black)

    Returns:
        RGB array of shape (32*scale, 64*scale, 3) with uint8 values
    """
    pixels = np.array(display, dtype=np.bool_)
    _check_display(pixels)

    rgb_frame = np.zeros((*pixels.shape, 3), dtype=np.uint8)
    rgb_frame[pixels] = on_color
    rgb_frame[~pixels] = off_color

    # Nearest neighbour upscaling
    if scale > 1:
        rgb_frame = np.repeat(np.repeat(rgb_frame, scale, axis=0), scale, axis=1)

    return rgb_frame


def create_color_scheme(
    scheme: str = "classic",
) -> Tuple[Tuple[int, int, int], Tuple[int, int, int]]:
    """Get predefined color schemes for CHIP-8 rendering.

    Args:
        scheme: Color scheme name ("classic", "green", "amber", "blue", "retro")

    Returns:
        Tuple of (on_color, off_color) as RGB tuples
    """
    schemes = {
        "classic": ((255, 255, 255), (0, 0, 0)),  # White on black
        "green": ((0, 255, 0), (0, 0, 0)),
        "amber": ((255, 176, 0), (0, 0, 0)),
        "blue": ((0, 255, 255), (0, 0, 64)),  # Cyan on dark blue
        "retro": ((255, 255, 0), (64, 0, 64)),  # Yellow on purple
    }

    if scheme not in schemes:
        raise ValueError(
            f"Unknown color scheme '{scheme}'. Available: {list(schemes.keys())}"
        )

    return schemes[scheme]


def display_to_text(display: jnp.ndarray, on: str = "#", off: str = ".") -> str:
    """Render the display as lines of text, one line per row."""
    pixels = np.array(display, dtype=np.bool_)
    _check_display(pixels)
    return "\n".join("".join(on if pixel else off for pixel in row) for row in pixels)


def save_frame(
    display: jnp.ndarray,
    filename: str,
    scale: int = 8,
    color_scheme: str = "classic",
) -> None:
    """Save a single display frame as an image file."""
    on_color, off_color = create_color_scheme(color_scheme)
    rgb = chip8_display_to_rgb(display, scale, on_color, off_color)
    Image.fromarray(rgb).save(filename)


def create_video(
        frames: np.ndarray,
        filename: str,
        fps: float = 60.0,
        scale: int = 8,
        color_scheme: str = "classic",
        persistence: bool = True,
) -> None:
    """Save a sequence of CHIP-8 frames as an MP4 file.

    Args:
        frames: Array of shape (N, 32, 64) with one display per frame
        filename: Destination MP4 file
        fps: Video frame rate
        scale: Upscaling factor
        color_scheme: Color scheme for rendering
        persistence: Enable phosphor screen simulation (smooth fading)
    """
    frames = np.asarray(frames)
    if len(frames.shape) != 3 or frames.shape[1:] != (SCREEN_HEIGHT, SCREEN_WIDTH):
        raise ValueError(
            f"Expected frames shape (N, {SCREEN_HEIGHT}, {SCREEN_WIDTH}), got {frames.shape}"
        )

    height, width = SCREEN_HEIGHT * scale, SCREEN_WIDTH * scale
    on_color, off_color = np.array(create_color_scheme(color_scheme), dtype=np.float32)

    fourcc = cv2.VideoWriter_fourcc(*'mp4v')
    writer = cv2.VideoWriter(filename, fourcc, fps, (width, height))

    # Phosphor glow buffer
    glow = np.zeros((SCREEN_HEIGHT, SCREEN_WIDTH), dtype=np.float32)
    decay = 0.8

    try:
        for frame_display in frames:
            if persistence:
                glow = np.clip(glow * decay + frame_display.astype(np.float32), 0.0, 1.0)
                pixel_values = glow
            else:
                pixel_values = frame_display.astype(np.float32)

            frame = (off_color + pixel_values[..., None] * (on_color - off_color)).astype(np.uint8)
            if scale > 1:
                frame = np.repeat(np.repeat(frame, scale, axis=0), scale, axis=1)
            writer.write(cv2.cvtColor(frame, cv2.COLOR_RGB2BGR))
    finally:
        writer.release()
