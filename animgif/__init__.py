"""animgif package entrypoints."""

from .animation import GifAnimation
from .compositor import AnimationFrame, Compositor, composite
from .errors import FormatError, GifError, GifIOError, PixelIndexError
from .gif_decoder import GifDecoder, decode
from .player import PlaybackClock, frame_index_at
from .structures import (
    ColorTable,
    DecodedGif,
    DisposalMode,
    GraphicsControl,
    LogicalScreen,
    SubImage,
)

__all__ = [
    'AnimationFrame', 'ColorTable', 'Compositor', 'DecodedGif', 'DisposalMode',
    'FormatError', 'GifAnimation', 'GifDecoder', 'GifError', 'GifIOError',
    'GraphicsControl', 'LogicalScreen', 'PixelIndexError', 'PlaybackClock',
    'SubImage', 'composite', 'decode', 'frame_index_at',
]
