from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Sequence

import numpy as np

from page_source.engines.base import PageSource

from .contracts import DEFAULT_BACKGROUND, ConfigurationError, ContractViolation, Fragment, SourcePage
from .scanline import count_trailing_blank_rows, find_blank_row_toward_start

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _NeedPage:
    position: int  # next index into the page list


@dataclass(frozen=True, slots=True)
class _NeedFragment:
    page: SourcePage
    y: int


@dataclass(frozen=True, slots=True)
class _Exhausted:
    pass


_State = _NeedPage | _NeedFragment | _Exhausted


def _check_raster(pixels: np.ndarray, *, page_num: int) -> np.ndarray:
    if not isinstance(pixels, np.ndarray) or pixels.ndim != 2:
        raise ContractViolation(f"page {page_num}: expected a 2-D grayscale raster")
    if pixels.dtype != np.uint8:
        raise ContractViolation(f"page {page_num}: expected uint8 pixels, got {pixels.dtype}")
    if pixels.shape[0] == 0 or pixels.shape[1] == 0:
        raise ContractViolation(f"page {page_num}: empty raster {pixels.shape}")
    return pixels


def trim_trailing_background(pixels: np.ndarray, background: int = DEFAULT_BACKGROUND) -> np.ndarray:
    """
    Drop background rows at the bottom of a page.

    A page that is background from top to bottom is returned uncropped so that
    it still yields a non-empty fragment.
    """

    trailing = count_trailing_blank_rows(pixels, background)
    if trailing == 0 or trailing == pixels.shape[0]:
        return pixels
    return pixels[: pixels.shape[0] - trailing]


class PageFragmenter:
    """
    Lazy, restartable sequence of height-bounded, blank-aligned fragments.

    Only the page currently being cut is held; it is released as soon as the
    cursor moves past it.
    """

    def __init__(
        self,
        source: PageSource,
        page_numbers: Sequence[int],
        max_fragment_height: int,
        *,
        background_value: int = DEFAULT_BACKGROUND,
    ) -> None:
        if not page_numbers:
            raise ConfigurationError("No pages defined.")
        if max_fragment_height <= 0:
            raise ConfigurationError("max_fragment_height must be a positive integer")

        self._source = source
        self._pages = tuple(int(p) for p in page_numbers)
        self._max_height = int(max_fragment_height)
        self._background = int(background_value)

        self._state: _State = _NeedPage(position=0)
        self._fragment: Fragment | None = None
        self._page_index = -1

    @property
    def current(self) -> Fragment | None:
        return self._fragment

    @property
    def page_index(self) -> int:
        """Index into the page list of the page last rendered (-1 before the first)."""
        return self._page_index

    @property
    def page_num(self) -> int | None:
        if self._page_index < 0:
            return None
        return self._pages[self._page_index]

    @property
    def total_pages(self) -> int:
        return len(self._pages)

    @property
    def holds_page(self) -> bool:
        return isinstance(self._state, _NeedFragment)

    def reset(self) -> None:
        self._state = _NeedPage(position=0)
        self._fragment = None
        self._page_index = -1

    def advance(self) -> bool:
        self._fragment = None

        if isinstance(self._state, _NeedPage):
            if self._state.position >= len(self._pages):
                self._state = _Exhausted()
            else:
                self._state = self._load_page(self._state.position)

        if isinstance(self._state, _Exhausted):
            return False

        state = self._state
        assert isinstance(state, _NeedFragment)
        page = state.page
        fragment = self._cut(page, state.y)
        self._fragment = fragment

        if fragment.y_end >= page.height:
            self._state = _NeedPage(position=page.page_index + 1)
        else:
            self._state = _NeedFragment(page=page, y=fragment.y_end)
        return True

    def __iter__(self) -> Iterator[Fragment]:
        while self.advance():
            fragment = self._fragment
            assert fragment is not None
            yield fragment

    def _load_page(self, position: int) -> _NeedFragment:
        page_num = self._pages[position]
        self._page_index = position
        # Render errors propagate unchanged; nothing is retried here.
        pixels = _check_raster(self._source.render_page(page_num), page_num=page_num)
        trimmed = trim_trailing_background(pixels, self._background)
        if trimmed.shape[0] != pixels.shape[0]:
            logger.debug("page %d: trimmed %d trailing blank rows", page_num, pixels.shape[0] - trimmed.shape[0])
        page = SourcePage(page_index=position, page_num=page_num, pixels=trimmed)
        return _NeedFragment(page=page, y=0)

    def _cut(self, page: SourcePage, y: int) -> Fragment:
        page_end = page.height
        candidate_end = min(page_end, y + self._max_height)
        if candidate_end == page_end:
            return Fragment(page=page, y_start=y, y_end=page_end)

        # Rows y+1..candidate_end: a blank row r there becomes the first row of the
        # next fragment, so the current one keeps at least one row.
        offset = find_blank_row_toward_start(
            page.pixels, candidate_end, stop_y=y + 1, background=self._background
        )
        if offset is None:
            logger.debug("page %d: hard cut at row %d", page.page_num, candidate_end)
            return Fragment(page=page, y_start=y, y_end=candidate_end, hard_cut=True)
        return Fragment(page=page, y_start=y, y_end=candidate_end + offset)
