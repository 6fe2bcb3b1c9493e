from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np
from PIL import Image


def fit_to_width(img: Image.Image, width: int) -> Image.Image:
    """Grayscale `img` scaled (aspect preserved) to exactly `width` pixels."""
    img = img.convert("L")
    if img.width == width:
        return img
    height = max(1, round(img.height * width / img.width))
    return img.resize((width, height), Image.Resampling.LANCZOS)


class PageSource(ABC):
    """
    Renders document pages to 8-bit grayscale rasters.

    Sources must:
    - Return a 2-D uint8 array of shape (height, width)
    - Keep the width fixed across the document
    - Raise RenderError for an invalid page number or a renderer failure
    """

    title: str | None = None
    author: str | None = None

    @abstractmethod
    def backend_id(self) -> str:
        raise NotImplementedError

    def backend_version(self) -> str | None:
        return None

    @property
    @abstractmethod
    def page_count(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def render_page(self, page_num: int) -> np.ndarray:
        """Render 1-indexed `page_num`."""
        raise NotImplementedError

    def close(self) -> None:
        return None

    def __enter__(self) -> PageSource:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
