"""
GifAnimation: composited frames of a decoded GIF with playback and Pillow export.
"""

import os
from io import IOBase
from typing import Callable, Iterable, Iterator, List, Optional, Tuple, Union

import numpy as np
from PIL import Image

from .compositor import AnimationFrame, Compositor, frame_duration_ms
from .config import Config
from .gif_decoder import GifDecoder
from .player import frame_index_at
from .structures import DecodedGif, LogicalScreen, SubImage


class GifAnimation(object):
    """
    A decoded GIF ready for playback.

    Behaves like a read-only sequence of AnimationFrame. Frames are composited
    on first access and cached; frame n depends on every frame before it, so
    asking for frame n composites frames 0..n.
    """

    @property
    def screen(self) -> LogicalScreen:
        return self._decoded.screen

    @property
    def sub_images(self) -> Tuple[SubImage, ...]:
        return self._decoded.sub_images

    @property
    def decoded(self) -> DecodedGif:
        return self._decoded

    @property
    def width(self) -> int:
        """Logical screen width in pixels."""
        return self._decoded.screen.width

    @property
    def height(self) -> int:
        """Logical screen height in pixels."""
        return self._decoded.screen.height

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def total_frames(self) -> int:
        return len(self._decoded.sub_images)

    @property
    def durations(self) -> List[int]:
        """Per-frame durations in milliseconds."""
        return list(self._durations)

    @property
    def total_duration_ms(self) -> int:
        return sum(self._durations)

    def __init__(self, decoded: DecodedGif, min_duration_ms: int = None):
        """
        Initialize GifAnimation.

        Args:
            decoded: Decoder output
            min_duration_ms: Duration used for frames with a delay of 0
                (default: Config.MIN_FRAME_DURATION_MS)
        """
        self._decoded = decoded
        self._compositor = Compositor(decoded, min_duration_ms=min_duration_ms)
        self._frames: List[AnimationFrame] = []
        self._pass: Optional[Iterator[AnimationFrame]] = None

        # Durations only depend on metadata
        self._durations = tuple(
            frame_duration_ms(sub.graphics_control.delay_centiseconds, min_duration_ms)
            for sub in decoded.sub_images
        )

    @classmethod
    def from_file(cls, file_path: str, debug: bool = None, **kwargs) -> 'GifAnimation':
        return cls(GifDecoder.decode_file(file_path, debug=debug), **kwargs)

    @classmethod
    def from_bytes(cls, data: Union[bytes, bytearray], debug: bool = None, **kwargs) -> 'GifAnimation':
        return cls(GifDecoder.decode_bytes(data, debug=debug), **kwargs)

    @classmethod
    def from_stream(cls, fp: IOBase, debug: bool = None, **kwargs) -> 'GifAnimation':
        return cls(GifDecoder.decode_stream(fp, debug=debug), **kwargs)

    # ------------------------------------------------------------------------
    # Sequence protocol
    # ------------------------------------------------------------------------

    def _composite_up_to(self, index: int) -> None:
        if self._pass is None:
            self._pass = iter(self._compositor)
        while len(self._frames) <= index:
            self._frames.append(next(self._pass))

    def __len__(self):
        return self.total_frames

    def __getitem__(self, index: int) -> AnimationFrame:
        if index < 0:
            index += self.total_frames
        if not 0 <= index < self.total_frames:
            raise IndexError(f'Frame index out of range: {index}')
        self._composite_up_to(index)
        return self._frames[index]

    def __iter__(self) -> Iterator[AnimationFrame]:
        for index in range(self.total_frames):
            yield self[index]

    def frame_at(self, elapsed_ms: int) -> AnimationFrame:
        """Frame on screen after `elapsed_ms` of looping playback."""
        return self[frame_index_at(self._durations, elapsed_ms)]

    # ------------------------------------------------------------------------
    # Pillow export
    # ------------------------------------------------------------------------

    def get_frame_image(
        self,
        index: int,
        scale: Union[int, float] = 1,
        target_width: int = None,
        target_height: int = None,
    ) -> Image.Image:
        """
        Get Pillow Image of a frame.

        Args:
            index: Frame index (0-based)
            scale: Optional scale factor
            target_width: Optional target width
            target_height: Optional target height

        Returns:
            RGBA PIL Image
        """
        frame = self[index]
        img = Image.fromarray(np.ascontiguousarray(frame.rgba), 'RGBA')
        return self._resize(
            img, scale=scale, target_width=target_width, target_height=target_height
        )

    def _resize(
        self,
        img: Image.Image,
        scale: Union[int, float] = 1,
        target_width: int = None,
        target_height: int = None,
    ) -> Image.Image:
        if target_width is not None and target_height is not None:
            return img.resize((target_width, target_height), Image.NEAREST)
        elif target_width is not None:
            new_height = max(1, int(img.height * target_width / img.width))
            return img.resize((target_width, new_height), Image.NEAREST)
        elif target_height is not None:
            new_width = max(1, int(img.width * target_height / img.height))
            return img.resize((new_width, target_height), Image.NEAREST)
        elif scale != 1:
            new_width = max(1, int(img.width * scale))
            new_height = max(1, int(img.height * scale))
            return img.resize((new_width, new_height), Image.NEAREST)
        return img

    def save_to_webp(
        self,
        output_path: str,
        scale: Union[int, float] = 1,
        target_width: int = None,
        target_height: int = None,
    ) -> None:
        """
        Save the composited animation as a lossless animated WebP.

        Args:
            output_path: Path to save WebP file
            scale: Optional scale factor
            target_width: Optional target width
            target_height: Optional target height
        """
        images = [
            self.get_frame_image(
                i, scale=scale, target_width=target_width, target_height=target_height
            )
            for i in range(self.total_frames)
        ]
        images[0].save(
            output_path,
            format='WEBP',
            append_images=images[1:],
            duration=list(self._durations),
            save_all=True,
            loop=0,
            lossless=True,
        )

    def save_frames(
        self,
        output_dir: str = None,
        prefix: str = None,
        scale: Union[int, float] = 1,
        progress: Callable[[Iterable[int]], Iterable[int]] = None,
    ) -> List[str]:
        """
        Save every composited frame as a PNG.

        Args:
            output_dir: Target directory (default: Config.OUTPUT_DIR)
            prefix: File name prefix (default: Config.EXPORT_PREFIX)
            scale: Optional scale factor
            progress: Optional wrapper around the frame index range, e.g. tqdm

        Returns:
            Paths of the written files, in frame order
        """
        if output_dir is None:
            output_dir = Config.OUTPUT_DIR
        if prefix is None:
            prefix = Config.EXPORT_PREFIX
        os.makedirs(output_dir, exist_ok=True)

        indices: Iterable[int] = range(self.total_frames)
        if progress is not None:
            indices = progress(indices)

        paths = []
        for i in indices:
            path = os.path.join(output_dir, f'{prefix}_{i:03d}.png')
            self.get_frame_image(i, scale=scale).save(path, format='PNG')
            paths.append(path)
        return paths

    def to_bytes(self, index: int) -> bytes:
        """Raw RGBA bytes of a frame, as consumed by texture uploads."""
        return self[index].tobytes()
