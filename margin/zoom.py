"""Display DPI to preview zoom percentage."""

from __future__ import annotations

import math

BASELINE_DPI = 96
ZOOM_STEP = 25


def zoom_percent_for_dpi(dpi: float, baseline: float = BASELINE_DPI) -> int:
    """Return the zoom percentage that compensates for `dpi`.

    The surface zoom only accepts discrete steps, so the scaled value is
    rounded up to the next multiple of 25.

    150% scaling (144 dpi) gives 225.
    """
    dpi = float(dpi)
    if not math.isfinite(dpi) or dpi <= 0:
        raise ValueError(f"Invalid display DPI: {dpi!r}")
    if dpi == baseline:
        return 100

    scale = dpi * ((dpi - baseline) / baseline + 1)
    return int(math.ceil(scale / ZOOM_STEP)) * ZOOM_STEP
