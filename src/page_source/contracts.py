from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PageSourceName(str, Enum):
    """
    Page source backends.
    """

    PYPDFIUM2 = "pypdfium2"
    IMAGE_SEQUENCE = "image_sequence"


class RenderError(Exception):
    """
    Raised by a page source for an invalid page number or a renderer failure.

    The reflow engine propagates it unchanged and never retries.
    """

    def __init__(self, message: str, *, page_num: int | None = None) -> None:
        super().__init__(message)
        self.page_num = page_num


@dataclass(frozen=True, slots=True)
class PageSourceConfig:
    """
    Page source configuration.

    Every rendered page is scaled to exactly `render_width` pixels so the page
    width is fixed for the whole document.
    """

    engine: PageSourceName = PageSourceName.PYPDFIUM2
    render_width: int = 800
    password: str | None = None

    def __post_init__(self) -> None:
        if self.render_width <= 0:
            raise ValueError("render_width must be a positive integer")
