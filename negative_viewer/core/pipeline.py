"""
Whole-buffer pixel pipeline.

Reads only from the source buffer and writes a fresh (or caller-provided)
output buffer, so re-running with new parameters never compounds rounding
from an earlier run.
"""

import logging
import time

import numpy as np

from .buffer import PixelBuffer
from .errors import NoImageLoaded
from .params import Parameters
from .transform import to_uint8, transform_values

logger = logging.getLogger(__name__)


def run_pipeline_array(
    rgba: np.ndarray,
    params: Parameters,
    out: np.ndarray | None = None,
) -> np.ndarray:
    """
    Apply the channel transform to an H x W x 4 uint8 array.

    R, G and B are processed as independent float64 planes; alpha is copied.
    """
    src = np.asarray(rgba)
    if src.ndim != 3 or src.shape[2] != 4:
        raise ValueError(f"Expected H x W x 4 array, got {src.shape}")

    if out is None:
        out = np.empty(src.shape, dtype=np.uint8)
    else:
        if out.shape != src.shape or out.dtype != np.uint8:
            raise ValueError(f"Output must be uint8 with shape {src.shape}, got {out.dtype} {out.shape}")
        if np.shares_memory(out, src):
            raise ValueError("Output buffer must not overlap the source buffer")

    for c in range(3):
        plane = src[..., c].astype(np.float64)
        out[..., c] = to_uint8(transform_values(plane, c, params))
    out[..., 3] = src[..., 3]
    return out


def run_pipeline(
    source: PixelBuffer | None,
    params: Parameters,
    out: PixelBuffer | None = None,
) -> PixelBuffer:
    """
    Convert source with one parameter snapshot, returning a buffer of equal size.
    """
    if source is None:
        raise NoImageLoaded("No image loaded.")

    t0 = time.perf_counter()
    result = run_pipeline_array(source.data, params, None if out is None else out.data)
    dt = (time.perf_counter() - t0) * 1000.0
    logger.debug("Pipeline %dx%d in %.1f ms", source.width, source.height, dt)

    if out is not None:
        return out
    return PixelBuffer(result)
