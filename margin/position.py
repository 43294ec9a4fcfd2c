"""Scroll offset <-> percentage conversion across document replacements."""

from __future__ import annotations

import math


def _non_negative(value: float) -> float:
    value = float(value)
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


def _clamp_percentage(value: float) -> float:
    return max(0.0, min(100.0, value))


def capture_percentage(offset: float, height: float) -> float:
    """Convert an absolute scroll offset into a percentage of `height`."""
    height = max(1.0, _non_negative(height))
    return _clamp_percentage(_non_negative(offset) * 100 / height)


def restore_offset(percentage: float, height: float) -> float:
    """Convert a percentage back into an absolute offset for `height`."""
    return _clamp_percentage(_non_negative(percentage)) * _non_negative(height) / 100


class PositionTracker:
    """Remembers the relative scroll position between render cycles.

    `capture` must run while the previous document is still displayed and
    `restore` only after the replacement document has finished loading.
    """

    def __init__(self) -> None:
        self.scroll_percentage = 0.0
        self.content_height = 1.0

    def capture(self, offset: float, height: float) -> float:
        self.content_height = max(1.0, _non_negative(height))
        self.scroll_percentage = capture_percentage(offset, self.content_height)
        return self.scroll_percentage

    def restore(self, height: float) -> float:
        self.content_height = max(1.0, _non_negative(height))
        return restore_offset(self.scroll_percentage, height)

    def reset(self) -> None:
        self.scroll_percentage = 0.0
        self.content_height = 1.0
