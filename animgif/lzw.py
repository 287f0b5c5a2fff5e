"""
Variable-width LZW decompression as used by GIF image data.
"""

from typing import Optional

from .errors import FormatError

MAX_CODE_SIZE = 12
MAX_DICT_SIZE = 1 << MAX_CODE_SIZE


class _BitReader(object):
    """Reads little-endian, LSB-first codes from a byte string."""

    __slots__ = ('data', 'pos', 'bitbuf', 'bitcnt')

    def __init__(self, data: bytes):
        self.data = data
        self.pos = 0
        self.bitbuf = 0
        self.bitcnt = 0

    def read_bits(self, n: int) -> Optional[int]:
        while self.bitcnt < n:
            if self.pos >= len(self.data):
                return None
            self.bitbuf |= self.data[self.pos] << self.bitcnt
            self.pos += 1
            self.bitcnt += 8
        out = self.bitbuf & ((1 << n) - 1)
        self.bitbuf >>= n
        self.bitcnt -= n
        return out


def lzw_decode(
    min_code_size: int,
    data: bytes,
    expected_pixels: Optional[int] = None,
    frame_index: Optional[int] = None,
) -> bytes:
    """
    Decompress a GIF LZW stream into palette indices.

    Args:
        min_code_size: LZW minimum code size from the image block (2-8)
        data: Concatenated image data sub-blocks
        expected_pixels: Stop once this many indices were produced
        frame_index: Sub-image index, only used for error messages

    Returns:
        Palette indices, one byte per pixel. May be shorter than
        expected_pixels when the stream ends early.

    Raises:
        FormatError: On an invalid minimum code size or a corrupt code
    """
    if not 2 <= min_code_size <= 8:
        raise FormatError(f'invalid LZW minimum code size {min_code_size}', frame_index)

    clear_code = 1 << min_code_size
    end_code = clear_code + 1

    # Entries below clear_code are literals; clear and end are placeholders
    table = [bytes([i]) for i in range(clear_code)] + [b'', b'']
    code_size = min_code_size + 1
    next_code = end_code + 1
    prev = None

    bits = _BitReader(data)
    out = bytearray()

    while True:
        code = bits.read_bits(code_size)
        if code is None:
            break

        if code == clear_code:
            del table[end_code + 1:]
            code_size = min_code_size + 1
            next_code = end_code + 1
            prev = None
            continue
        if code == end_code:
            break

        if prev is None:
            if code >= clear_code:
                raise FormatError(f'LZW stream starts with non-literal code {code}', frame_index)
            entry = table[code]
        elif code < next_code:
            entry = table[code]
        elif code == next_code:
            # KwKwK
            entry = prev + prev[:1]
        else:
            raise FormatError(f'LZW code {code} beyond dictionary size {next_code}', frame_index)

        out.extend(entry)
        if expected_pixels is not None and len(out) >= expected_pixels:
            del out[expected_pixels:]
            break

        if prev is not None and next_code < MAX_DICT_SIZE:
            table.append(prev + entry[:1])
            next_code += 1
            if next_code == (1 << code_size) and code_size < MAX_CODE_SIZE:
                code_size += 1

        prev = entry

    return bytes(out)
