"""
Film negative viewer: base-color sampling and a fixed negative -> positive
pixel pipeline with a fast preview and a full-resolution export.
"""

from .core import (
    BaseColor,
    ChannelTriple,
    GlobalTone,
    ParameterStore,
    Parameters,
    PixelBuffer,
    ToneParameters,
    run_pipeline,
    sample_color,
    transform_channel,
)
from .engine import Engine

__version__ = "1.0.0"

__all__ = [
    "BaseColor",
    "ChannelTriple",
    "Engine",
    "GlobalTone",
    "ParameterStore",
    "Parameters",
    "PixelBuffer",
    "ToneParameters",
    "run_pipeline",
    "sample_color",
    "transform_channel",
]
