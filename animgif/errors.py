"""
Exceptions raised while decoding GIF containers.
"""

from typing import Optional


class GifError(Exception):
    """Base class for every animgif error."""


class FormatError(GifError, ValueError):
    """
    The container is malformed.

    Attributes:
        frame_index: 0-based index of the offending sub-image, or None when the
            problem is not tied to a single image (header, trailer, ...)
    """

    def __init__(self, message: str, frame_index: Optional[int] = None):
        if frame_index is not None:
            message = f'Frame {frame_index}: {message}'
        super().__init__(message)
        self.frame_index = frame_index


class PixelIndexError(FormatError):
    """A raster references a palette entry that does not exist."""

    def __init__(self, frame_index: int, pixel_index: int, table_size: int):
        super().__init__(
            f'palette index {pixel_index} out of range for a {table_size}-color table',
            frame_index,
        )
        self.pixel_index = pixel_index
        self.table_size = table_size


class GifIOError(GifError, IOError):
    """The byte source ended early or could not be read."""
