"""
Elapsed-time frame selection for looping playback.

The caller owns the clock: pass it monotonic milliseconds and it tells you
which frame should be on screen. Nothing here sleeps or reads wall time.
"""

from typing import Sequence


def frame_index_at(durations: Sequence[int], elapsed_ms: int) -> int:
    """
    Index of the frame shown after `elapsed_ms` of looping playback.

    Args:
        durations: Per-frame durations in milliseconds (all > 0)
        elapsed_ms: Time since playback started

    Returns:
        Frame index, wrapping modulo the total duration
    """
    if not durations:
        raise ValueError('Animation has no frames')
    total = sum(durations)
    remaining = max(0, int(elapsed_ms)) % total
    for index, duration in enumerate(durations):
        if remaining < duration:
            return index
        remaining -= duration
    return len(durations) - 1


class PlaybackClock(object):
    """
    Advances through frames as time passes.

    Whole frame durations are consumed from the time elapsed since the last
    frame change; the remainder carries over so playback does not drift.
    """

    def __init__(self, durations: Sequence[int], start_ms: int = 0):
        if not durations:
            raise ValueError('Animation has no frames')
        if any(d <= 0 for d in durations):
            raise ValueError('Frame durations must be positive')
        self._durations = tuple(durations)
        self._current_frame = 0
        self._last_update = start_ms

    @property
    def current_frame(self) -> int:
        return self._current_frame

    @property
    def last_update(self) -> int:
        """Time at which the current frame started showing."""
        return self._last_update

    @property
    def frame_count(self) -> int:
        return len(self._durations)

    def update(self, now_ms: int) -> int:
        """
        Move to the frame that should be visible at `now_ms`.

        Returns:
            The current frame index
        """
        elapsed = now_ms - self._last_update
        if elapsed <= 0:
            return self._current_frame

        # Skip whole loops at once after long pauses
        total = sum(self._durations)
        if self._current_frame == 0 and elapsed >= total:
            skipped = elapsed - elapsed % total
            elapsed -= skipped
            self._last_update += skipped

        while elapsed >= self._durations[self._current_frame]:
            elapsed -= self._durations[self._current_frame]
            self._current_frame = (self._current_frame + 1) % len(self._durations)
            self._last_update = now_ms - elapsed
        return self._current_frame

    def reset(self, now_ms: int = 0) -> None:
        self._current_frame = 0
        self._last_update = now_ms
