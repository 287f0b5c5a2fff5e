"""
GIF data model: color tables, graphics control, sub-images and interlace handling.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

RGB = Tuple[int, int, int]


class DisposalMode(Enum):
    """What happens to a frame's region before the next frame is drawn."""
    NONE = 0  # no disposal specified, leave in place
    DO_NOT_DISPOSE = 1
    RESTORE_TO_BACKGROUND = 2
    RESTORE_TO_PREVIOUS = 3

    @classmethod
    def from_packed(cls, value: int) -> 'DisposalMode':
        """Map the 3-bit wire value; reserved values 4-7 mean no disposal."""
        try:
            return cls(value)
        except ValueError:
            return cls.NONE


class ColorTable(object):
    """Immutable palette of up to 256 RGB colors."""

    __slots__ = ('_colors', '_array')

    def __init__(self, colors: Iterable[RGB]):
        self._colors = tuple((int(r), int(g), int(b)) for r, g, b in colors)
        if not 0 < len(self._colors) <= 256:
            raise ValueError(f'Color table must hold 1-256 colors, got {len(self._colors)}')
        array = np.array(self._colors, dtype=np.uint8).reshape(-1, 3)
        array.setflags(write=False)
        self._array = array

    @classmethod
    def from_bytes(cls, data: bytes) -> 'ColorTable':
        return cls(
            (data[i], data[i + 1], data[i + 2]) for i in range(0, len(data) - 2, 3)
        )

    @property
    def colors(self) -> Tuple[RGB, ...]:
        return self._colors

    @property
    def array(self) -> np.ndarray:
        """Read-only (N, 3) uint8 lookup array."""
        return self._array

    def __len__(self):
        return len(self._colors)

    def __getitem__(self, index: int) -> RGB:
        return self._colors[index]

    def __iter__(self):
        return iter(self._colors)

    def __eq__(self, other):
        if not isinstance(other, ColorTable):
            return NotImplemented
        return self._colors == other._colors

    def __hash__(self):
        return hash(self._colors)

    def __repr__(self):
        return f'ColorTable({len(self._colors)} colors)'


@dataclass(frozen=True)
class GraphicsControl:
    """Per sub-image metadata from the graphics control extension."""
    disposal_mode: DisposalMode = DisposalMode.NONE
    transparent_index: Optional[int] = None
    delay_centiseconds: int = 0
    user_input: bool = False


@dataclass(frozen=True)
class LogicalScreen:
    width: int
    height: int
    global_color_table: Optional[ColorTable] = None
    version: str = '89a'
    background_index: int = 0
    color_resolution: int = 8  # bits per primary
    pixel_aspect_ratio: int = 0  # raw byte, 0 = square

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height


@dataclass(frozen=True)
class SubImage:
    """
    One image block of the container, with its color table already resolved.

    The raster is row-major (de-interlaced), one palette index per byte.
    """
    index: int
    left: int
    top: int
    width: int
    height: int
    raster: bytes
    color_table: ColorTable
    graphics_control: GraphicsControl = field(default_factory=GraphicsControl)
    interlaced: bool = False
    has_local_color_table: bool = False

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def bottom(self) -> int:
        return self.top + self.height

    @property
    def disposal_mode(self) -> DisposalMode:
        return self.graphics_control.disposal_mode

    @property
    def transparent_index(self) -> Optional[int]:
        return self.graphics_control.transparent_index

    def indices(self) -> np.ndarray:
        """Raster as a (height, width) uint8 array."""
        return np.frombuffer(self.raster, dtype=np.uint8).reshape(self.height, self.width)


@dataclass(frozen=True)
class DecodedGif:
    """Decoder output: the logical screen and its ordered sub-images."""
    screen: LogicalScreen
    sub_images: Tuple[SubImage, ...]

    @property
    def global_color_table(self) -> Optional[ColorTable]:
        return self.screen.global_color_table

    @property
    def frame_count(self) -> int:
        return len(self.sub_images)

    def summary(self) -> List[dict]:
        """One dict per sub-image, used by the info command."""
        rows = []
        for sub in self.sub_images:
            gc = sub.graphics_control
            rows.append({
                "index": sub.index,
                "left": sub.left,
                "top": sub.top,
                "width": sub.width,
                "height": sub.height,
                "disposal": gc.disposal_mode.name,
                "transparent_index": gc.transparent_index,
                "delay_cs": gc.delay_centiseconds,
                "local_table": sub.has_local_color_table,
                "interlaced": sub.interlaced,
            })
        return rows


def deinterlace(indices: Sequence[int], width: int, height: int) -> bytes:
    """Reorder the rows of an interlaced raster (4 passes) into scanline order."""
    out = bytearray(width * height)
    i = 0
    for start, step in ((0, 8), (4, 8), (2, 4), (1, 2)):
        for y in range(start, height, step):
            out[y * width:(y + 1) * width] = indices[i:i + width]
            i += width
    return bytes(out)
