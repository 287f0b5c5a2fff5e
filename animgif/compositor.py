"""
Frame compositing: disposal, transparency and per-frame durations.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

import numpy as np

from .config import Config
from .structures import DecodedGif, DisposalMode, SubImage


@dataclass(frozen=True, eq=False)
class AnimationFrame:
    """
    One fully composited frame.

    Attributes:
        index: Position in the animation (0-based)
        rgba: Read-only array of shape (height, width, 4), dtype uint8
        duration_ms: How long the frame stays on screen
    """
    index: int
    rgba: np.ndarray
    duration_ms: int

    @property
    def width(self) -> int:
        return self.rgba.shape[1]

    @property
    def height(self) -> int:
        return self.rgba.shape[0]

    def tobytes(self) -> bytes:
        """Row-major RGBA bytes, 4 per pixel."""
        return self.rgba.tobytes()


@dataclass(frozen=True)
class _PendingDisposal:
    """Disposal requested by frame n, applied before frame n+1 is drawn."""
    mode: DisposalMode
    rect: Tuple[int, int, int, int]  # left, top, right, bottom
    snapshot: Optional[np.ndarray] = None


def _resolve_min_duration(min_duration_ms: Optional[int]) -> int:
    if min_duration_ms is None:
        return Config.MIN_FRAME_DURATION_MS
    if min_duration_ms <= 0:
        raise ValueError(f'min_duration_ms must be positive, got {min_duration_ms}')
    return min_duration_ms


def frame_duration_ms(delay_centiseconds: int, min_duration_ms: int = None) -> int:
    """Convert a GIF delay to milliseconds; a delay of 0 uses the minimum."""
    min_duration_ms = _resolve_min_duration(min_duration_ms)
    if delay_centiseconds <= 0:
        return min_duration_ms
    return delay_centiseconds * Config.CENTISECONDS_TO_MS


class Compositor(object):
    """
    Turns decoded sub-images into composited RGBA frames.

    Iterating starts a fresh pass over the animation with a new, fully
    transparent canvas, so the frame sequence can be replayed any number of
    times. The canvas is private to each pass; emitted frames are copies.
    """

    def __init__(self, decoded: DecodedGif, min_duration_ms: int = None):
        self._decoded = decoded
        self._min_duration_ms = _resolve_min_duration(min_duration_ms)

    @property
    def width(self) -> int:
        return self._decoded.screen.width

    @property
    def height(self) -> int:
        return self._decoded.screen.height

    def __len__(self):
        return len(self._decoded.sub_images)

    def __iter__(self) -> Iterator[AnimationFrame]:
        canvas = np.zeros((self.height, self.width, 4), dtype=np.uint8)
        pending: Optional[_PendingDisposal] = None

        for sub in self._decoded.sub_images:
            if pending is not None:
                self._dispose(canvas, pending)

            snapshot = None
            if sub.disposal_mode == DisposalMode.RESTORE_TO_PREVIOUS:
                snapshot = canvas.copy()

            self._draw(canvas, sub)

            rgba = canvas.copy()
            rgba.setflags(write=False)
            yield AnimationFrame(
                index=sub.index,
                rgba=rgba,
                duration_ms=frame_duration_ms(
                    sub.graphics_control.delay_centiseconds, self._min_duration_ms
                ),
            )

            pending = _PendingDisposal(
                mode=sub.disposal_mode,
                rect=(sub.left, sub.top, sub.right, sub.bottom),
                snapshot=snapshot,
            )

    def frames(self) -> List[AnimationFrame]:
        return list(self)

    @staticmethod
    def _dispose(canvas: np.ndarray, pending: _PendingDisposal) -> None:
        if pending.mode == DisposalMode.RESTORE_TO_BACKGROUND:
            left, top, right, bottom = pending.rect
            canvas[top:bottom, left:right] = 0
        elif pending.mode == DisposalMode.RESTORE_TO_PREVIOUS:
            canvas[...] = pending.snapshot
        # NONE and DO_NOT_DISPOSE keep the canvas as it is

    @staticmethod
    def _draw(canvas: np.ndarray, sub: SubImage) -> None:
        height, width = canvas.shape[:2]
        right = min(sub.right, width)
        bottom = min(sub.bottom, height)
        if right <= sub.left or bottom <= sub.top:
            return

        indices = sub.indices()[:bottom - sub.top, :right - sub.left]

        # Pad to 256 entries so the transparent index may lie past the table
        lut = np.zeros((256, 3), dtype=np.uint8)
        lut[:len(sub.color_table)] = sub.color_table.array

        if sub.transparent_index is None:
            opaque = np.ones(indices.shape, dtype=bool)
        else:
            opaque = indices != sub.transparent_index

        region = canvas[sub.top:bottom, sub.left:right]
        region[opaque, :3] = lut[indices[opaque]]
        region[opaque, 3] = 255


def composite(decoded: DecodedGif, min_duration_ms: int = None) -> List[AnimationFrame]:
    """Composite every frame of a decoded GIF."""
    return Compositor(decoded, min_duration_ms=min_duration_ms).frames()
