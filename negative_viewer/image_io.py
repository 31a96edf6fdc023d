# negative_viewer/image_io.py
"""
Decode and encode collaborators around the core.

Decoding goes through Pillow, JPEG export through OpenCV (8-bit sRGB, BGR
channel order on disk).
"""

import logging
import time
from pathlib import Path

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from .core.buffer import PixelBuffer
from .core.errors import ExportError, ImageLoadError

logger = logging.getLogger(__name__)

JPEG_QUALITY = 95


def load_image(filepath: str | Path) -> PixelBuffer:
    """
    Decode an image file (JPEG, PNG, TIFF, ...) into an RGBA PixelBuffer.

    Raises:
        ImageLoadError: If the file is missing or cannot be decoded
    """
    filepath = Path(filepath)

    if not filepath.exists():
        raise ImageLoadError(f"File not found: {filepath}")

    try:
        with Image.open(filepath) as img:
            rgba = img.convert("RGBA")
            arr = np.array(rgba, dtype=np.uint8)
    except (UnidentifiedImageError, OSError) as e:
        raise ImageLoadError(f"Failed to decode image {filepath}: {e}") from e

    logger.debug("Decoded %s: %dx%d", filepath, arr.shape[1], arr.shape[0])
    return PixelBuffer(arr)


def save_jpeg(buffer: PixelBuffer, path: str | Path, quality: int = JPEG_QUALITY) -> Path:
    """
    Save the RGB part of buffer as JPEG. Alpha is dropped.
    """
    path = Path(path)
    bgr = np.ascontiguousarray(buffer.rgb()[..., ::-1])  # RGB->BGR for OpenCV
    try:
        ok = cv2.imwrite(str(path), bgr, [cv2.IMWRITE_JPEG_QUALITY, int(quality)])
    except cv2.error as e:
        raise ExportError(f"Saving JPEG failed: {path}: {e}") from e
    if not ok:
        raise ExportError(f"Saving JPEG failed: {path}")

    logger.info("Exported %dx%d to %s", buffer.width, buffer.height, path)
    return path


def export_filename(prefix: str = "negative", now: float | None = None) -> str:
    """Timestamped download name, e.g. negative-1700000000000.jpg."""
    if now is None:
        now = time.time()
    return f"{prefix}-{int(now * 1000)}.jpg"
