"""
Core algorithms for film negative conversion.

This package contains:
- RGBA pixel buffers
- Base-color sampling
- The per-channel transform (mask removal, inversion, split tone, global tone)
- The whole-buffer pipeline
- Preview / full-resolution originals
- Parameter snapshots and the parameter store
"""

from .buffer import PixelBuffer
from .errors import (
    CoordinateOutOfRange,
    ExportError,
    ImageLoadError,
    InvalidParameter,
    NegativeViewerError,
    NoImageLoaded,
)
from .params import (
    BaseColor,
    ChannelTriple,
    GlobalTone,
    ParameterStore,
    Parameters,
    ToneParameters,
)
from .pipeline import run_pipeline, run_pipeline_array
from .resolution import PREVIEW_MAX_DIM, ResolutionManager
from .sampler import display_to_buffer, sample_color
from .transform import transform_channel

__all__ = [
    "BaseColor",
    "ChannelTriple",
    "CoordinateOutOfRange",
    "ExportError",
    "GlobalTone",
    "ImageLoadError",
    "InvalidParameter",
    "NegativeViewerError",
    "NoImageLoaded",
    "PREVIEW_MAX_DIM",
    "ParameterStore",
    "Parameters",
    "PixelBuffer",
    "ResolutionManager",
    "ToneParameters",
    "display_to_buffer",
    "run_pipeline",
    "run_pipeline_array",
    "sample_color",
    "transform_channel",
]
