"""
Configuration constants for the GIF decoder and compositor.
"""


class Config:
    """Configuration constants for animgif."""

    # Frame timing
    CENTISECONDS_TO_MS = 10
    MIN_FRAME_DURATION_MS = 100  # used when a frame declares a delay of 0

    # Decoder tracing (prints one line per parsed block)
    DEBUG_MODE = False

    # Export
    OUTPUT_DIR = 'out'
    EXPORT_PREFIX = 'frame'
    INFO_CSV_NAME = 'frames.csv'

    # Column names for the frame info table
    FIELD_MAPPINGS = {
        "index": "Frame",
        "left": "Left",
        "top": "Top",
        "width": "Width",
        "height": "Height",
        "disposal": "Disposal",
        "transparent_index": "Transparent Index",
        "delay_cs": "Delay (cs)",
        "duration_ms": "Duration (ms)",
        "local_table": "Local Color Table",
        "interlaced": "Interlaced",
    }
