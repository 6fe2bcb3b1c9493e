from __future__ import annotations

import numpy as np

from .contracts import ContractViolation, DEFAULT_BACKGROUND


def new_canvas(width: int, height: int, background: int = DEFAULT_BACKGROUND) -> np.ndarray:
    return np.full((height, width), background, dtype=np.uint8)


def copy_into(canvas: np.ndarray, pixels: np.ndarray, y: int) -> int:
    """
    Byte-exact row copy of `pixels` into `canvas` starting at row `y`.

    Returns the canvas row just below the copied block.
    """

    if pixels.ndim != 2 or canvas.ndim != 2:
        raise ContractViolation("canvas copy expects 2-D grayscale rasters")
    if pixels.shape[1] != canvas.shape[1]:
        raise ContractViolation(
            f"fragment width {pixels.shape[1]} does not match canvas width {canvas.shape[1]}"
        )
    end = y + int(pixels.shape[0])
    if y < 0 or end > canvas.shape[0]:
        raise ContractViolation(f"rows [{y}, {end}) fall outside canvas height {canvas.shape[0]}")
    canvas[y:end] = pixels
    return end
