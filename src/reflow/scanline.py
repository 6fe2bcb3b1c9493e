from __future__ import annotations

import numpy as np

from .contracts import DEFAULT_BACKGROUND


def is_blank_row(raster: np.ndarray, y: int, background: int = DEFAULT_BACKGROUND) -> bool:
    """True iff every pixel on row `y` equals the background value."""
    return bool(np.all(raster[y] == background))


def _clamp(y: int, height: int) -> int:
    return max(0, min(y, height - 1))


def find_blank_row_toward_start(
    raster: np.ndarray,
    from_y: int,
    *,
    stop_y: int = 0,
    background: int = DEFAULT_BACKGROUND,
) -> int | None:
    """
    Scan rows clamp(from_y) .. stop_y (decreasing y, inclusive).

    Returns the signed distance (<= 0) from the start row to the first blank row,
    or None when no blank row is met. A span that is blank from end to end is
    also None: it offers no cut that would leave content on both sides.
    """

    height = int(raster.shape[0])
    if height == 0:
        return None
    start = _clamp(from_y, height)
    stop = max(0, stop_y)
    if stop > start:
        return None

    blank = np.all(raster[stop : start + 1] == background, axis=1)
    if blank.all():
        return None
    hits = np.flatnonzero(blank)
    if hits.size == 0:
        return None
    return int(stop + hits[-1]) - start


def find_blank_row_toward_end(
    raster: np.ndarray,
    from_y: int,
    *,
    stop_y: int | None = None,
    background: int = DEFAULT_BACKGROUND,
) -> int | None:
    """
    Scan rows clamp(from_y) .. stop_y (increasing y, inclusive; default last row).

    Returns the distance (>= 0) to the first blank row, or None. Same
    whole-span-blank rule as `find_blank_row_toward_start`.
    """

    height = int(raster.shape[0])
    if height == 0:
        return None
    start = _clamp(from_y, height)
    stop = height - 1 if stop_y is None else min(stop_y, height - 1)
    if stop < start:
        return None

    blank = np.all(raster[start : stop + 1] == background, axis=1)
    if blank.all():
        return None
    hits = np.flatnonzero(blank)
    if hits.size == 0:
        return None
    return int(hits[0])


def count_trailing_blank_rows(raster: np.ndarray, background: int = DEFAULT_BACKGROUND) -> int:
    height = int(raster.shape[0])
    if height == 0:
        return 0
    blank = np.all(raster == background, axis=1)
    content = np.flatnonzero(~blank)
    if content.size == 0:
        return height
    return height - 1 - int(content[-1])
