import os

from animgif.cli import frames_table, main
from animgif import GifAnimation


def test_info(three_frame_gif, write_gif, capsys):
    path = write_gif(three_frame_gif)
    assert main(["info", str(path)]) == 0
    out = capsys.readouterr().out
    assert "GIF89a  4x4" in out
    assert "Frames:             3" in out
    assert "Total duration:     600 ms" in out
    assert "DO_NOT_DISPOSE" in out


def test_info_csv(three_frame_gif, write_gif, tmp_path, capsys):
    path = write_gif(three_frame_gif)
    out_dir = tmp_path / "csv"
    assert main(["info", str(path), "--csv", "--out", str(out_dir)]) == 0
    written = os.listdir(out_dir)
    assert len(written) == 1
    assert written[0].startswith("frames_") and written[0].endswith(".csv")
    assert "[OK] Exported:" in capsys.readouterr().out


def test_frames_table(three_frame_gif):
    df = frames_table(GifAnimation.from_bytes(three_frame_gif))
    assert list(df["Frame"]) == [0, 1, 2]
    assert list(df["Duration (ms)"]) == [100, 200, 300]
    assert list(df["Disposal"]) == ["NONE", "DO_NOT_DISPOSE", "NONE"]
    assert list(df["Left"]) == [0, 1, 3]


def test_export_png(three_frame_gif, write_gif, tmp_path):
    path = write_gif(three_frame_gif, "clip.gif")
    out_dir = tmp_path / "png"
    assert main(["export", str(path), "--out", str(out_dir)]) == 0
    assert sorted(os.listdir(out_dir)) == ["clip_000.png", "clip_001.png", "clip_002.png"]


def test_export_webp(three_frame_gif, write_gif, tmp_path):
    path = write_gif(three_frame_gif, "clip.gif")
    out_dir = tmp_path / "webp"
    assert main(["export", str(path), "--out", str(out_dir), "--webp", "--scale", "2"]) == 0
    assert os.listdir(out_dir) == ["clip.webp"]


def test_play(two_by_two_gif, write_gif, capsys):
    path = write_gif(two_by_two_gif)
    assert main(["play", str(path), "--seconds", "0.05"]) == 0
    assert "frame   0" in capsys.readouterr().out


def test_missing_file(tmp_path, capsys):
    assert main(["info", str(tmp_path / "nope.gif")]) == 2
    assert "[ERROR] File not found" in capsys.readouterr().out


def test_invalid_file(write_gif, capsys):
    path = write_gif(b"not a gif at all")
    assert main(["info", str(path)]) == 2
    assert "[ERROR] Decode failed" in capsys.readouterr().out


def test_debug_flag(two_by_two_gif, write_gif, capsys):
    path = write_gif(two_by_two_gif)
    assert main(["--debug", "info", str(path)]) == 0
    assert "[gif] trailer" in capsys.readouterr().out
