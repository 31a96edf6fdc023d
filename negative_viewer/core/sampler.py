"""
Base-color sampling from a pixel buffer.
"""

import math

from .buffer import PixelBuffer
from .errors import CoordinateOutOfRange
from .params import BaseColor


def pixel_offset(x: int, y: int, width: int) -> int:
    """Byte offset of pixel (x, y) in a row-major RGBA buffer."""
    return (y * width + x) * 4


def sample_color(buffer: PixelBuffer, x: int, y: int) -> BaseColor:
    """
    Read the RGB triple at buffer-space (x, y), alpha ignored.

    Raises CoordinateOutOfRange if the point or its offset lies outside the
    buffer. Coordinates must already be in buffer space, see display_to_buffer.
    """
    width, height = buffer.width, buffer.height
    if not (0 <= x < width and 0 <= y < height):
        raise CoordinateOutOfRange(x, y, width, height)

    flat = buffer.flat()
    offset = pixel_offset(x, y, width)
    if offset < 0 or offset + 3 > flat.size:
        raise CoordinateOutOfRange(x, y, width, height)

    return BaseColor(int(flat[offset]), int(flat[offset + 1]), int(flat[offset + 2]))


def display_to_buffer(
    px: float,
    py: float,
    display_size: tuple[float, float],
    buffer_size: tuple[int, int],
) -> tuple[int, int]:
    """
    Convert a pointer position on the displayed image to buffer coordinates.

    display_size and buffer_size are (width, height). The result is floored
    and is not range-checked; sample_color does that.
    """
    disp_w, disp_h = display_size
    buf_w, buf_h = buffer_size
    if disp_w <= 0 or disp_h <= 0:
        raise ValueError(f"Invalid display size {display_size}")

    scale_x = buf_w / float(disp_w)
    scale_y = buf_h / float(disp_h)
    return int(math.floor(px * scale_x)), int(math.floor(py * scale_y))
