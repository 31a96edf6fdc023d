"""
Per-channel negative -> positive transform.

Each stage works on a plain float or on a numpy array of channel values, so
the same formulas drive the single-value ``transform_channel`` and the
whole-plane pipeline. Values are allowed to leave 0..255 between stages;
clamping happens only when the pipeline writes the final uint8 result.

Stage order (fixed):

    1. mask removal + exposure   (negative domain, base color as white point)
    2. inversion
    3. shadow offset
    4. highlight gain
    5. midtone power curve
    6. brightness
    7. contrast around mid-gray
"""

import math

import numpy as np

from .params import Parameters

# Base channels at or below this are not used as divisors
BASE_EPSILON = 10
MID_GRAY = 128.0


def remove_mask(v, base: float, exposure: float):
    """Divide out the film-base cast and rescale to 255, scaled by exposure."""
    if base > BASE_EPSILON:
        return (v / base) * 255.0 * exposure
    return v


def invert(v):
    return 255.0 - v


def apply_shadow(v, shadow: float):
    return v + shadow


def apply_highlight(v, highlight: float):
    return v * (1.0 + highlight / 100.0)


def apply_midtone(v, mid: float):
    """
    Power-law remap of the normalized value. mid > 0 brightens, mid < 0 darkens.
    Negative inputs are floored to 0 first so the power stays real.

    At mid = -50 the exponent is +inf (everything below white goes to 0);
    below -50 it turns negative and values blow up towards +inf, which the
    final write clamps to 255.
    """
    if mid == 0:
        return v
    denom = 1.0 + mid / 50.0
    exponent = math.inf if denom == 0 else 1.0 / denom
    with np.errstate(divide="ignore", over="ignore", invalid="ignore"):
        return 255.0 * np.power(np.maximum(0.0, v / 255.0), exponent)


def apply_brightness(v, brightness: float):
    return v * brightness


def apply_contrast(v, contrast: float):
    return contrast * (v - MID_GRAY) + MID_GRAY


def transform_values(v, channel: int, params: Parameters):
    """Run all stages for one channel (0=R, 1=G, 2=B) over a float or array."""
    base, shadow, mid, highlight = params.channel(channel)

    v = remove_mask(v, base, params.exposure)
    v = invert(v)
    v = apply_shadow(v, shadow)
    v = apply_highlight(v, highlight)
    v = apply_midtone(v, mid)
    v = apply_brightness(v, params.brightness)
    v = apply_contrast(v, params.contrast)
    return v


def transform_channel(value: float, channel: int, params: Parameters) -> float:
    """
    Map one 8-bit channel value to its unclamped output.

    >>> from negative_viewer.core.params import Parameters, GlobalTone
    >>> p = Parameters(global_tone=GlobalTone(contrast=1.0))
    >>> round(transform_channel(200, 0, p), 2)
    21.25
    """
    return float(transform_values(float(value), channel, params))


def to_uint8(v: np.ndarray) -> np.ndarray:
    """Clamp to 0..255 and round half away from zero. NaN writes as 0."""
    v = np.nan_to_num(v, nan=0.0, posinf=255.0, neginf=0.0)
    return np.floor(np.clip(v, 0.0, 255.0) + 0.5).astype(np.uint8)
