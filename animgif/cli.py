"""
animgif command line tool.

Commands:
- info:   print header, logical screen and a per-frame table (optional CSV)
- export: write composited frames as PNG files or one animated WebP
- play:   run the playback clock against wall time and report frame changes
"""

import argparse
import os
import sys
import time
from datetime import datetime
from typing import List, Optional

import pandas as pd
from tqdm import tqdm

from .animation import GifAnimation
from .config import Config
from .errors import GifError
from .player import PlaybackClock


# ============================================================================
# UTILITY FUNCTIONS
# ============================================================================

def append_timestamp(filename: str) -> str:
    """Append current timestamp to filename."""
    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    file_name, file_extension = os.path.splitext(filename)
    return f"{file_name}_{timestamp}{file_extension}"


def frames_table(animation: GifAnimation) -> pd.DataFrame:
    """
    Build the per-frame metadata table.

    Args:
        animation: Decoded animation

    Returns:
        DataFrame with one row per frame, columns named per Config.FIELD_MAPPINGS
    """
    rows = animation.decoded.summary()
    for row, duration in zip(rows, animation.durations):
        row["duration_ms"] = duration
    df = pd.DataFrame(rows, columns=list(Config.FIELD_MAPPINGS.keys()))
    return df.rename(columns=Config.FIELD_MAPPINGS)


def export_to_csv(df: pd.DataFrame, base_filename: str, output_dir: str = None) -> str:
    """Export DataFrame to a timestamped CSV and return its path."""
    if output_dir is None:
        output_dir = Config.OUTPUT_DIR
    os.makedirs(output_dir, exist_ok=True)
    filepath = os.path.join(output_dir, append_timestamp(base_filename))
    df.to_csv(filepath, index=False)
    print(f"[OK] Exported: {filepath}")
    return filepath


# ============================================================================
# COMMANDS
# ============================================================================

def cmd_info(animation: GifAnimation, args: argparse.Namespace) -> int:
    screen = animation.screen
    table = screen.global_color_table
    print("=" * 70)
    print(f"GIF{screen.version}  {screen.width}x{screen.height}")
    print("=" * 70)
    print(f"  Global color table: {len(table) if table is not None else 'none'}")
    print(f"  Background index:   {screen.background_index}")
    print(f"  Color resolution:   {screen.color_resolution} bits per primary")
    print(f"  Frames:             {animation.total_frames}")
    print(f"  Total duration:     {animation.total_duration_ms} ms")
    print()

    df = frames_table(animation)
    print(df.to_string(index=False))

    if args.csv:
        print()
        export_to_csv(df, Config.INFO_CSV_NAME, args.out)
    return 0


def cmd_export(animation: GifAnimation, args: argparse.Namespace) -> int:
    output_dir = args.out or Config.OUTPUT_DIR
    os.makedirs(output_dir, exist_ok=True)
    base_name = os.path.splitext(os.path.basename(args.gif))[0]

    if args.webp:
        out_path = os.path.join(output_dir, f"{base_name}.webp")
        animation.save_to_webp(out_path, scale=args.scale)
        print(f"[OK] {animation.total_frames} frames -> {out_path}")
        return 0

    paths = animation.save_frames(
        output_dir,
        prefix=base_name,
        scale=args.scale,
        progress=lambda indices: tqdm(indices, desc="Exporting frames"),
    )
    print(f"[OK] Exported {len(paths)} frames to {output_dir}")
    return 0


def cmd_play(animation: GifAnimation, args: argparse.Namespace) -> int:
    clock = PlaybackClock(animation.durations, start_ms=_now_ms())
    deadline = time.monotonic() + args.seconds
    shown = -1
    while time.monotonic() < deadline:
        index = clock.update(_now_ms())
        if index != shown:
            frame = animation[index]
            print(f"  frame {index:3d}  {frame.duration_ms:5d} ms")
            shown = index
        time.sleep(0.005)
    return 0


def _now_ms() -> int:
    return int(time.monotonic() * 1000)


COMMANDS = {
    "info": cmd_info,
    "export": cmd_export,
    "play": cmd_play,
}


# ============================================================================
# ENTRY POINT
# ============================================================================

def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="animgif", description="Decode and composite animated GIF files"
    )
    parser.add_argument("--debug", action="store_true", help="Trace every parsed block")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_info = sub.add_parser("info", help="Print header and per-frame metadata")
    p_info.add_argument("gif", help="Path to .gif")
    p_info.add_argument("--csv", action="store_true", help="Also write the frame table as CSV")
    p_info.add_argument("--out", default=None, help="Output directory for the CSV")

    p_export = sub.add_parser("export", help="Write composited frames")
    p_export.add_argument("gif", help="Path to .gif")
    p_export.add_argument("--out", default=None, help=f"Output directory (default: {Config.OUTPUT_DIR})")
    p_export.add_argument("--webp", action="store_true", help="Write one animated WebP instead of PNGs")
    p_export.add_argument("--scale", type=float, default=1, help="Nearest-neighbour scale factor")

    p_play = sub.add_parser("play", help="Run the playback clock and report frame changes")
    p_play.add_argument("gif", help="Path to .gif")
    p_play.add_argument("--seconds", type=float, default=3.0, help="How long to play")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    try:
        animation = GifAnimation.from_file(args.gif, debug=args.debug or None)
    except FileNotFoundError:
        print(f"[ERROR] File not found: {args.gif}")
        return 2
    except (GifError, OSError) as e:
        print(f"[ERROR] Decode failed: {e}")
        return 2

    return COMMANDS[args.cmd](animation, args)


if __name__ == "__main__":
    sys.exit(main())
