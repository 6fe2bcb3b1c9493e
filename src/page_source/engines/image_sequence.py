from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image

from ..contracts import RenderError

from .base import PageSource, fit_to_width


class ImageSequencePageSource(PageSource):
    """
    A directory of PNG files, one page per file, ordered by file name.
    """

    def __init__(self, directory: Path, *, render_width: int) -> None:
        if not directory.is_dir():
            raise RenderError(f"path does not point to a directory: {directory}")
        self.directory = directory
        self.render_width = render_width
        self._files = sorted(p for p in directory.iterdir() if p.suffix.lower() == ".png")
        if not self._files:
            raise RenderError(f"path contains no PNG files: {directory}")
        self.title = directory.name

    def backend_id(self) -> str:
        return "image_sequence"

    @property
    def page_count(self) -> int:
        return len(self._files)

    def render_page(self, page_num: int) -> np.ndarray:
        if page_num < 1 or page_num > len(self._files):
            raise RenderError(f"Page not found: {page_num} (1..{len(self._files)})", page_num=page_num)

        image_file = self._files[page_num - 1]
        try:
            with Image.open(image_file) as img:
                pil_img = fit_to_width(img, self.render_width)
        except OSError as e:
            raise RenderError(f"Error while reading {image_file.name}", page_num=page_num) from e

        return np.array(pil_img, dtype=np.uint8)
