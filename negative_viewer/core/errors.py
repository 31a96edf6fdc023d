"""
Error types raised by the negative conversion core.
"""


class NegativeViewerError(Exception):
    """Base class for all errors raised by negative_viewer."""
    pass


class NoImageLoaded(NegativeViewerError):
    """Raised when sampling, rendering or export is requested before an image is loaded."""
    pass


class CoordinateOutOfRange(NegativeViewerError, IndexError):
    """Raised when a sampling coordinate falls outside the pixel buffer."""

    def __init__(self, x: int, y: int, width: int, height: int):
        super().__init__(f"Coordinate ({x}, {y}) outside buffer {width}x{height}")
        self.x = x
        self.y = y
        self.width = width
        self.height = height


class InvalidParameter(NegativeViewerError, ValueError):
    """Raised when a parameter snapshot fails validation."""
    pass


class ImageLoadError(NegativeViewerError):
    """Raised when an image file cannot be decoded into a pixel buffer."""
    pass


class ExportError(NegativeViewerError):
    """Raised when an exported buffer cannot be written."""
    pass
