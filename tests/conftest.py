"""Test configuration.

Synthetic GIFs are built byte by byte (gif_factory) so disposal,
transparency and timing are exact; Pillow writes the "real world" files.
"""

import pytest
from PIL import Image

from gif_factory import BLUE, GREEN, RED, GifBuilder


@pytest.fixture
def two_by_two_gif():
    """Single 2x2 frame, global {0: red, 1: blue}, raster [0,1,1,0], delay 5."""
    return (
        GifBuilder(2, 2, global_colors=[RED, BLUE])
        .control(delay=5)
        .image([0, 1, 1, 0], 2, 2)
        .build()
    )


@pytest.fixture
def three_frame_gif():
    """4x4 canvas: red background, a green 2x2 square, then a blue pixel."""
    return (
        GifBuilder(4, 4, global_colors=[RED, GREEN, BLUE, (0, 0, 0)])
        .control(delay=10)
        .image([0] * 16, 4, 4)
        .control(delay=20, disposal=1)
        .image([1] * 4, 2, 2, left=1, top=1)
        .control(delay=30)
        .image([2], 1, 1, left=3, top=3)
        .build()
    )


@pytest.fixture
def pillow_gif(tmp_path):
    """64x64 two-frame GIF written by Pillow (real LZW with code growth)."""
    path = tmp_path / "pillow.gif"
    palette = []
    for i in range(256):
        palette.extend([i, (i * 3) % 256, 255 - i])
    first = Image.new("P", (64, 64))
    first.putpalette(palette)
    first.putdata([(x * 7 + y * 13) % 256 for y in range(64) for x in range(64)])
    second = Image.new("P", (64, 64))
    second.putpalette(palette)
    second.putdata([(x * 5 + y * 3 + 17) % 256 for y in range(64) for x in range(64)])
    first.save(path, save_all=True, append_images=[second], duration=[100, 200], loop=0)
    return path


@pytest.fixture
def write_gif(tmp_path):
    """Write GIF bytes to a file and return its path."""
    def _write(data: bytes, name: str = "test.gif"):
        path = tmp_path / name
        path.write_bytes(data)
        return path
    return _write
