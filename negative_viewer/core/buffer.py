"""
RGBA pixel buffers.

A buffer is an (H, W, 4) uint8 array, row-major, 4 bytes per pixel, which is
the same byte layout a canvas or QImage.Format_RGBA8888 uses.
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    data: np.ndarray

    def __post_init__(self):
        arr = self.data
        if arr.ndim != 3 or arr.shape[2] != 4:
            raise ValueError(f"PixelBuffer expects shape (H, W, 4), got {arr.shape}")
        if arr.dtype != np.uint8:
            raise ValueError(f"PixelBuffer expects uint8 data, got {arr.dtype}")

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    @property
    def shape(self) -> tuple[int, int]:
        """(H, W) like the numpy arrays it wraps."""
        return self.height, self.width

    @property
    def readonly(self) -> bool:
        return not self.data.flags.writeable

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "PixelBuffer":
        """
        Wrap an H x W x 3 or H x W x 4 uint8 array.

        RGB input gets an opaque alpha channel. The result always owns a
        fresh, C-contiguous copy of the pixels.
        """
        arr = np.asarray(arr)
        if arr.ndim != 3 or arr.shape[2] not in (3, 4):
            raise ValueError(f"Expected H x W x 3 or H x W x 4 array, got {arr.shape}")
        if arr.dtype != np.uint8:
            arr = np.clip(arr, 0, 255).astype(np.uint8)

        h, w = arr.shape[:2]
        out = np.empty((h, w, 4), dtype=np.uint8)
        out[..., :3] = arr[..., :3]
        if arr.shape[2] == 4:
            out[..., 3] = arr[..., 3]
        else:
            out[..., 3] = 255
        return cls(out)

    @classmethod
    def from_bytes(cls, raw: bytes, width: int, height: int) -> "PixelBuffer":
        """Build a buffer from a flat RGBA byte sequence."""
        expected = width * height * 4
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid buffer size {width}x{height}")
        if len(raw) != expected:
            raise ValueError(f"Expected {expected} bytes for {width}x{height}, got {len(raw)}")
        arr = np.frombuffer(bytes(raw), dtype=np.uint8).reshape(height, width, 4)
        return cls(arr.copy())

    @classmethod
    def blank(cls, width: int, height: int) -> "PixelBuffer":
        """Opaque black buffer."""
        arr = np.zeros((height, width, 4), dtype=np.uint8)
        arr[..., 3] = 255
        return cls(arr)

    def tobytes(self) -> bytes:
        return self.data.tobytes()

    def flat(self) -> np.ndarray:
        """Flat byte view, index (y * width + x) * 4 + channel."""
        return self.data.reshape(-1)

    def frozen(self) -> "PixelBuffer":
        """Read-only copy, used for originals so in-place writes raise."""
        arr = np.ascontiguousarray(self.data).copy()
        arr.flags.writeable = False
        return PixelBuffer(arr)

    def rgb(self) -> np.ndarray:
        """H x W x 3 view without alpha."""
        return self.data[..., :3]
