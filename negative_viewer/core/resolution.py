"""
Preview / full-resolution originals for one loaded image.
"""

import logging

import cv2
import numpy as np

from .buffer import PixelBuffer
from .errors import NoImageLoaded
from .params import Parameters
from .pipeline import run_pipeline

logger = logging.getLogger(__name__)

PREVIEW_MAX_DIM = 800


def preview_ratio(width: int, height: int, max_dim: int = PREVIEW_MAX_DIM) -> float:
    """Downscale ratio so the longest edge fits max_dim, never upscaling."""
    long_edge = max(width, height)
    if long_edge <= 0:
        raise ValueError(f"Invalid image size {width}x{height}")
    return min(1.0, max_dim / float(long_edge))


def downscale(source: PixelBuffer, max_dim: int = PREVIEW_MAX_DIM) -> tuple[PixelBuffer, float]:
    """
    Area-averaged, aspect-preserving downscale of source.

    Returns the new buffer and the ratio applied to both axes.
    """
    W, H = source.width, source.height
    scale = preview_ratio(W, H, max_dim)
    if scale >= 1.0:
        logger.debug("Preview stays %dx%d (<= %dpx)", W, H, max_dim)
        return PixelBuffer(source.data.copy()), 1.0

    new_w = max(1, int(round(W * scale)))
    new_h = max(1, int(round(H * scale)))
    src = source.data
    if not src.flags.writeable or not src.flags.c_contiguous:
        src = np.ascontiguousarray(src).copy()
    small = cv2.resize(
        src,
        (new_w, new_h),
        interpolation=cv2.INTER_AREA,
    )
    logger.debug("Preview %dx%d (scale %.3f)", new_w, new_h, scale)
    return PixelBuffer(small), scale


class ResolutionManager:
    """
    Holds the two read-only originals of the loaded image.

    The preview original feeds every interactive render; the full-resolution
    original is only touched by export. Both are fixed at load time.
    """

    def __init__(self, max_dim: int = PREVIEW_MAX_DIM) -> None:
        self.max_dim = max_dim
        self.preview_orig: PixelBuffer | None = None
        self.full_orig: PixelBuffer | None = None
        self.preview_scale: float | None = None

    @property
    def loaded(self) -> bool:
        return self.preview_orig is not None and self.full_orig is not None

    def load(self, source: PixelBuffer) -> PixelBuffer:
        """
        Capture both originals from a decoded source and return the preview original.
        """
        full = source.frozen()
        preview, scale = downscale(source, self.max_dim)

        self.full_orig = full
        self.preview_orig = preview.frozen()
        self.preview_scale = scale

        logger.info(
            "Loaded %dx%d image, preview %dx%d",
            full.width, full.height, self.preview_orig.width, self.preview_orig.height,
        )
        return self.preview_orig

    def clear(self) -> None:
        self.preview_orig = None
        self.full_orig = None
        self.preview_scale = None

    def require_preview(self) -> PixelBuffer:
        if self.preview_orig is None:
            raise NoImageLoaded("No image loaded.")
        return self.preview_orig

    def require_full(self) -> PixelBuffer:
        if self.full_orig is None:
            raise NoImageLoaded("No image loaded, nothing to export.")
        return self.full_orig

    def render_preview(self, params: Parameters) -> PixelBuffer:
        return run_pipeline(self.require_preview(), params)

    def render_export(self, params: Parameters) -> PixelBuffer:
        full = self.require_full()
        logger.info("Rendering full resolution %dx%d", full.width, full.height)
        return run_pipeline(full, params)

    def preview_to_full(self, x: int, y: int) -> tuple[int, int]:
        """Map a preview-space pixel to the matching full-resolution pixel."""
        full = self.require_full()
        scale = self.preview_scale or 1.0
        W, H = full.width, full.height
        x_full = max(0, min(W - 1, int(x / scale)))
        y_full = max(0, min(H - 1, int(y / scale)))
        return x_full, y_full
