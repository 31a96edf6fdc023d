"""
PyQt6 presentation helpers (PixelBuffer <-> QImage).
"""

import numpy as np
from PyQt6.QtGui import QImage

from .core.buffer import PixelBuffer


def to_qimage(buffer: PixelBuffer) -> QImage:
    """
    buffer: H x W x 4, uint8, RGBA
    """
    arr = np.ascontiguousarray(buffer.data)
    h, w, ch = arr.shape
    assert ch == 4
    bytes_per_line = 4 * w
    qimg = QImage(arr.data, w, h, bytes_per_line, QImage.Format.Format_RGBA8888)
    # force a copy so the numpy array can be released
    return qimg.copy()


def from_qimage(qimg: QImage) -> PixelBuffer:
    """QImage (any format) -> RGBA PixelBuffer."""
    qimg = qimg.convertToFormat(QImage.Format.Format_RGBA8888)
    w = qimg.width()
    h = qimg.height()
    ptr = qimg.constBits()
    ptr.setsize(qimg.sizeInBytes())
    arr = np.frombuffer(ptr, np.uint8).reshape(h, qimg.bytesPerLine())
    arr = arr[:, : 4 * w].reshape(h, w, 4)
    return PixelBuffer(arr.copy())
