"""
GIF87a/89a block parser producing a DecodedGif.
"""

import io
from enum import Enum
from io import IOBase
from struct import unpack
from typing import List, Optional, Union

from .config import Config
from .errors import FormatError, GifIOError, PixelIndexError
from .lzw import lzw_decode
from .structures import (
    ColorTable,
    DecodedGif,
    DisposalMode,
    GraphicsControl,
    LogicalScreen,
    SubImage,
    deinterlace,
)


class BlockType(Enum):
    EXTENSION = 0x21
    IMAGE = 0x2C
    TRAILER = 0x3B


class ExtensionLabel(Enum):
    PLAIN_TEXT = 0x01
    GRAPHICS_CONTROL = 0xF9
    COMMENT = 0xFE
    APPLICATION = 0xFF


SIGNATURES = (b'GIF87a', b'GIF89a')


# ============================================================================
# STREAM HELPERS
# ============================================================================

def read_exact(fp: IOBase, size: int, what: str = 'data') -> bytes:
    """
    Read exactly `size` bytes.

    Raises:
        GifIOError: If the stream ends first
    """
    data = fp.read(size)
    if data is None or len(data) < size:
        got = 0 if not data else len(data)
        raise GifIOError(f'Unexpected end of file while reading {what} ({got}/{size} bytes)')
    return data


def read_sub_blocks(fp: IOBase) -> bytes:
    """Concatenate a chain of length-prefixed sub-blocks up to the zero terminator."""
    chunks = []
    while True:
        size = read_exact(fp, 1, 'sub-block size')[0]
        if size == 0:
            return b''.join(chunks)
        chunks.append(read_exact(fp, size, 'sub-block'))


def skip_sub_blocks(fp: IOBase) -> None:
    while True:
        size = read_exact(fp, 1, 'sub-block size')[0]
        if size == 0:
            return
        read_exact(fp, size, 'sub-block')


# ============================================================================
# DECODER
# ============================================================================

class GifDecoder(object):
    """
    Parses a GIF87a/89a container into a LogicalScreen and its SubImages.

    Graphics control extensions are paired with the image that follows them;
    every other extension is skipped. Color tables are resolved per image
    (local table first, then the global one) and every raster index is
    checked against the resolved table.
    """

    def __init__(self, fp: IOBase, debug: Optional[bool] = None):
        self._fp = fp
        self._debug = Config.DEBUG_MODE if debug is None else debug

    def _trace(self, message: str) -> None:
        if self._debug:
            print(f'  [gif] {message}')

    def decode(self) -> DecodedGif:
        screen = self._read_screen()

        sub_images: List[SubImage] = []
        pending_control: Optional[GraphicsControl] = None

        while True:
            introducer = read_exact(self._fp, 1, 'block introducer')[0]
            try:
                block_type = BlockType(introducer)
            except ValueError:
                raise FormatError(f'Unknown block introducer 0x{introducer:02X}') from None

            if block_type == BlockType.TRAILER:
                self._trace('trailer')
                break
            elif block_type == BlockType.EXTENSION:
                control = self._read_extension(len(sub_images))
                if control is not None:
                    pending_control = control
            else:
                sub_image = self._read_image(
                    screen, len(sub_images), pending_control or GraphicsControl()
                )
                sub_images.append(sub_image)
                # A graphics control block applies to the next image only
                pending_control = None

        if not sub_images:
            raise FormatError('GIF contains no images')

        return DecodedGif(screen=screen, sub_images=tuple(sub_images))

    def _read_screen(self) -> LogicalScreen:
        header = read_exact(self._fp, 6, 'header')
        if header not in SIGNATURES:
            raise FormatError(f'Not a GIF file (signature {header!r})')

        width, height, packed, background_index, aspect = unpack(
            '<HHBBB', read_exact(self._fp, 7, 'logical screen descriptor')
        )
        if width == 0 or height == 0:
            raise FormatError(f'Logical screen has zero area ({width}x{height})')

        global_table = None
        if packed & 0x80:
            size = 1 << ((packed & 0x07) + 1)
            global_table = ColorTable.from_bytes(
                read_exact(self._fp, size * 3, 'global color table')
            )

        self._trace(
            f'{header.decode("ascii")} screen {width}x{height} '
            f'global table: {len(global_table) if global_table else "none"}'
        )
        return LogicalScreen(
            width=width,
            height=height,
            global_color_table=global_table,
            version=header[3:].decode('ascii'),
            background_index=background_index,
            color_resolution=((packed & 0x70) >> 4) + 1,
            pixel_aspect_ratio=aspect,
        )

    def _read_extension(self, next_index: int) -> Optional[GraphicsControl]:
        """Read one extension block; return it if it is a graphics control block."""
        label = read_exact(self._fp, 1, 'extension label')[0]

        if label != ExtensionLabel.GRAPHICS_CONTROL.value:
            try:
                name = ExtensionLabel(label).name
            except ValueError:
                name = f'0x{label:02X}'
            self._trace(f'skip extension {name}')
            skip_sub_blocks(self._fp)
            return None

        block_size = read_exact(self._fp, 1, 'graphics control size')[0]
        if block_size != 4:
            raise FormatError(f'Bad graphics control block size {block_size}', next_index)
        packed, delay, transparent = unpack('<BHB', read_exact(self._fp, 4, 'graphics control'))
        # Some encoders pad the block; drain until the terminator
        skip_sub_blocks(self._fp)

        control = GraphicsControl(
            disposal_mode=DisposalMode.from_packed((packed >> 2) & 0x07),
            transparent_index=transparent if packed & 0x01 else None,
            delay_centiseconds=delay,
            user_input=bool(packed & 0x02),
        )
        self._trace(
            f'graphics control: {control.disposal_mode.name} '
            f'delay={delay}cs transparent={control.transparent_index}'
        )
        return control

    def _read_image(
        self, screen: LogicalScreen, index: int, control: GraphicsControl
    ) -> SubImage:
        left, top, width, height, packed = unpack(
            '<HHHHB', read_exact(self._fp, 9, 'image descriptor')
        )
        interlaced = bool(packed & 0x40)

        if width == 0 or height == 0:
            raise FormatError(f'Image has zero area ({width}x{height})', index)
        if left + width > screen.width or top + height > screen.height:
            raise FormatError(
                f'Image rectangle ({left},{top} {width}x{height}) exceeds '
                f'logical screen {screen.width}x{screen.height}',
                index,
            )

        local_table = None
        if packed & 0x80:
            size = 1 << ((packed & 0x07) + 1)
            local_table = ColorTable.from_bytes(
                read_exact(self._fp, size * 3, 'local color table')
            )

        min_code_size = read_exact(self._fp, 1, 'LZW minimum code size')[0]
        data = read_sub_blocks(self._fp)

        color_table = local_table if local_table is not None else screen.global_color_table
        if color_table is None:
            raise FormatError('No local or global color table', index)

        expected = width * height
        indices = lzw_decode(min_code_size, data, expected, frame_index=index)
        if len(indices) != expected:
            raise FormatError(
                f'Raster has {len(indices)} pixels, expected {width}x{height}={expected}',
                index,
            )
        if interlaced:
            indices = deinterlace(indices, width, height)

        self._check_indices(indices, color_table, control.transparent_index, index)

        self._trace(
            f'image {index}: ({left},{top}) {width}x{height} '
            f'{"local" if local_table else "global"} table, '
            f'{"interlaced" if interlaced else "progressive"}'
        )
        return SubImage(
            index=index,
            left=left,
            top=top,
            width=width,
            height=height,
            raster=indices,
            color_table=color_table,
            graphics_control=control,
            interlaced=interlaced,
            has_local_color_table=local_table is not None,
        )

    @staticmethod
    def _check_indices(
        indices: bytes, color_table: ColorTable, transparent_index: Optional[int], index: int
    ) -> None:
        table_size = len(color_table)
        if table_size >= 256:
            return
        for value in sorted(set(indices), reverse=True):
            if value < table_size:
                return
            if value != transparent_index:
                raise PixelIndexError(index, value, table_size)

    # ------------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------------

    @staticmethod
    def decode_file(file_path: str, debug: Optional[bool] = None) -> DecodedGif:
        with open(file_path, 'rb') as fp:
            return GifDecoder.decode_stream(fp, debug=debug)

    @staticmethod
    def decode_stream(fp: IOBase, debug: Optional[bool] = None) -> DecodedGif:
        return GifDecoder(fp, debug=debug).decode()

    @staticmethod
    def decode_bytes(data: Union[bytes, bytearray], debug: Optional[bool] = None) -> DecodedGif:
        return GifDecoder(io.BytesIO(bytes(data)), debug=debug).decode()


def decode(source: Union[bytes, bytearray, IOBase], debug: Optional[bool] = None) -> DecodedGif:
    """Decode GIF bytes or a binary file object."""
    if isinstance(source, (bytes, bytearray)):
        return GifDecoder.decode_bytes(source, debug=debug)
    return GifDecoder.decode_stream(source, debug=debug)
