import io

import pytest

from animgif import (
    DisposalMode,
    FormatError,
    GifDecoder,
    GifIOError,
    PixelIndexError,
    decode,
)

from gif_factory import BLUE, GREEN, RED, WHITE, GifBuilder


def test_two_by_two_scenario(two_by_two_gif):
    decoded = GifDecoder.decode_bytes(two_by_two_gif)

    assert decoded.screen.size == (2, 2)
    assert decoded.screen.version == '89a'
    assert decoded.frame_count == 1
    sub = decoded.sub_images[0]
    assert (sub.left, sub.top, sub.width, sub.height) == (0, 0, 2, 2)
    assert sub.raster == bytes([0, 1, 1, 0])
    assert sub.color_table[0] == RED
    assert sub.color_table[1] == BLUE
    assert sub.graphics_control.delay_centiseconds == 5
    assert sub.graphics_control.disposal_mode == DisposalMode.NONE
    assert sub.transparent_index is None


def test_decode_accepts_stream_and_bytes(two_by_two_gif):
    assert decode(io.BytesIO(two_by_two_gif)) == decode(two_by_two_gif)


def test_decode_file(two_by_two_gif, write_gif):
    path = write_gif(two_by_two_gif)
    assert GifDecoder.decode_file(str(path)).frame_count == 1


def test_decoding_is_deterministic(three_frame_gif):
    first = GifDecoder.decode_bytes(three_frame_gif)
    second = GifDecoder.decode_bytes(three_frame_gif)
    assert first.sub_images == second.sub_images


def test_rectangles_within_screen(three_frame_gif):
    decoded = GifDecoder.decode_bytes(three_frame_gif)
    assert decoded.frame_count == 3
    for sub in decoded.sub_images:
        assert 0 <= sub.left and sub.right <= decoded.screen.width
        assert 0 <= sub.top and sub.bottom <= decoded.screen.height
    assert [s.index for s in decoded.sub_images] == [0, 1, 2]


def test_gif87a_header():
    data = GifBuilder(1, 1, global_colors=[RED], version=b'87a').image([0], 1, 1).build()
    assert GifDecoder.decode_bytes(data).screen.version == '87a'


def test_global_table_used_without_local():
    data = GifBuilder(2, 1, global_colors=[RED, GREEN]).image([1, 0], 2, 1).build()
    sub = GifDecoder.decode_bytes(data).sub_images[0]
    assert not sub.has_local_color_table
    assert sub.color_table.colors[:2] == (RED, GREEN)


def test_local_table_overrides_global():
    data = (
        GifBuilder(2, 1, global_colors=[RED, GREEN])
        .image([0, 1], 2, 1, local_colors=[BLUE, WHITE])
        .build()
    )
    sub = GifDecoder.decode_bytes(data).sub_images[0]
    assert sub.has_local_color_table
    assert sub.color_table[0] == BLUE
    assert sub.color_table[1] == WHITE


def test_missing_color_table_is_format_error():
    data = GifBuilder(1, 1).image([0], 1, 1).build()
    with pytest.raises(FormatError) as exc:
        GifDecoder.decode_bytes(data)
    assert exc.value.frame_index == 0


def test_control_block_applies_to_next_image_only():
    data = (
        GifBuilder(1, 1, global_colors=[RED, BLUE])
        .control(disposal=2, transparent=1, delay=7)
        .image([0], 1, 1)
        .image([1], 1, 1)
        .build()
    )
    first, second = GifDecoder.decode_bytes(data).sub_images
    assert first.disposal_mode == DisposalMode.RESTORE_TO_BACKGROUND
    assert first.transparent_index == 1
    assert first.graphics_control.delay_centiseconds == 7
    assert second.disposal_mode == DisposalMode.NONE
    assert second.transparent_index is None
    assert second.graphics_control.delay_centiseconds == 0


@pytest.mark.parametrize("wire, mode", [
    (0, DisposalMode.NONE),
    (1, DisposalMode.DO_NOT_DISPOSE),
    (2, DisposalMode.RESTORE_TO_BACKGROUND),
    (3, DisposalMode.RESTORE_TO_PREVIOUS),
    (5, DisposalMode.NONE),
    (7, DisposalMode.NONE),
])
def test_disposal_modes(wire, mode):
    data = GifBuilder(1, 1, global_colors=[RED]).control(disposal=wire).image([0], 1, 1).build()
    assert GifDecoder.decode_bytes(data).sub_images[0].disposal_mode == mode


def test_other_extensions_are_skipped():
    data = (
        GifBuilder(1, 1, global_colors=[RED, BLUE])
        .extension(0xFF, b'NETSCAPE2.0\x01\x00\x00')
        .extension(0xFE, b'a comment ' * 40)
        .control(delay=3)
        .extension(0x01, b'\x00' * 12 + b'text')
        .image([1], 1, 1)
        .extension(0x99, b'unknown')
        .build()
    )
    decoded = GifDecoder.decode_bytes(data)
    assert decoded.frame_count == 1
    assert decoded.sub_images[0].graphics_control.delay_centiseconds == 3


def test_interlaced_raster_is_reordered():
    width, height = 2, 10
    raster = [y % 4 for y in range(height) for _ in range(width)]
    data = (
        GifBuilder(width, height, global_colors=[RED, GREEN, BLUE, WHITE])
        .image(raster, width, height, interlace=True)
        .build()
    )
    sub = GifDecoder.decode_bytes(data).sub_images[0]
    assert sub.interlaced
    assert sub.raster == bytes(raster)


def test_pixel_index_out_of_range():
    data = (
        GifBuilder(2, 1, global_colors=[RED, BLUE])
        .image([0, 1], 2, 1)
        .image([0, 3], 2, 1)
        .build()
    )
    with pytest.raises(PixelIndexError) as exc:
        GifDecoder.decode_bytes(data)
    assert exc.value.frame_index == 1
    assert exc.value.pixel_index == 3
    assert 'Frame 1' in str(exc.value)
    assert isinstance(exc.value, FormatError)


def test_transparent_index_may_exceed_table():
    data = (
        GifBuilder(2, 1, global_colors=[RED, BLUE])
        .control(transparent=3)
        .image([0, 3], 2, 1)
        .build()
    )
    sub = GifDecoder.decode_bytes(data).sub_images[0]
    assert sub.raster == bytes([0, 3])


def test_bad_signature():
    data = b'PNG89a' + GifBuilder(1, 1, global_colors=[RED]).image([0], 1, 1).build()[6:]
    with pytest.raises(FormatError) as exc:
        GifDecoder.decode_bytes(data)
    assert exc.value.frame_index is None


def test_rectangle_outside_screen():
    data = GifBuilder(2, 2, global_colors=[RED]).image([0, 0], 2, 1, left=1, top=0).build()
    with pytest.raises(FormatError) as exc:
        GifDecoder.decode_bytes(data)
    assert exc.value.frame_index == 0
    assert 'exceeds' in str(exc.value)


def test_zero_sized_image():
    data = GifBuilder(2, 2, global_colors=[RED]).image([], 0, 2).build()
    with pytest.raises(FormatError):
        GifDecoder.decode_bytes(data)


def test_raster_shorter_than_declared():
    data = GifBuilder(2, 2, global_colors=[RED]).image([0, 0, 0], 2, 2).build()
    with pytest.raises(FormatError) as exc:
        GifDecoder.decode_bytes(data)
    assert 'expected 2x2=4' in str(exc.value)


def test_no_images():
    data = GifBuilder(1, 1, global_colors=[RED]).control(delay=1).build()
    with pytest.raises(FormatError):
        GifDecoder.decode_bytes(data)


def test_bad_graphics_control_size():
    data = GifBuilder(1, 1, global_colors=[RED]).control(block_size=5).image([0], 1, 1).build()
    with pytest.raises(FormatError):
        GifDecoder.decode_bytes(data)


def test_unknown_block_introducer():
    data = GifBuilder(1, 1, global_colors=[RED]).image([0], 1, 1).build(trailer=False) + b'\x42'
    with pytest.raises(FormatError):
        GifDecoder.decode_bytes(data)


@pytest.mark.parametrize("cut", [3, 10, 16, 25, -1])
def test_truncated_input_is_io_error(three_frame_gif, cut):
    with pytest.raises(GifIOError) as exc:
        GifDecoder.decode_bytes(three_frame_gif[:cut])
    assert isinstance(exc.value, IOError)


def test_empty_input_is_io_error():
    with pytest.raises(GifIOError):
        GifDecoder.decode_bytes(b'')


def test_debug_traces_blocks(two_by_two_gif, capsys):
    GifDecoder.decode_bytes(two_by_two_gif, debug=True)
    out = capsys.readouterr().out
    assert 'GIF89a screen 2x2' in out
    assert 'image 0' in out
    assert 'trailer' in out


def test_quiet_by_default(two_by_two_gif, capsys):
    GifDecoder.decode_bytes(two_by_two_gif)
    assert capsys.readouterr().out == ''


def test_pillow_written_file(pillow_gif):
    decoded = GifDecoder.decode_file(str(pillow_gif))
    assert decoded.screen.size == (64, 64)
    assert decoded.frame_count == 2
    assert [s.graphics_control.delay_centiseconds for s in decoded.sub_images] == [10, 20]
