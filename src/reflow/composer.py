from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Sequence

import numpy as np

from page_source.engines.base import PageSource

from .canvas import copy_into, new_canvas
from .contracts import (
    DEFAULT_BACKGROUND,
    ContractViolation,
    ErrorKind,
    Fragment,
    OutputPage,
    Placement,
    ReflowConfig,
    ReflowFailure,
    StepResult,
    StepStatus,
)
from .fragmenter import PageFragmenter
from .scanline import find_blank_row_toward_start

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _Idle:
    pass


@dataclass(frozen=True, slots=True)
class _Carrying:
    leftover: Fragment


@dataclass(frozen=True, slots=True)
class _Finished:
    pass


@dataclass(frozen=True, slots=True)
class _Failed:
    failure: ReflowFailure


_State = _Idle | _Carrying | _Finished | _Failed


class _Canvas:
    """One output page under construction."""

    __slots__ = ("pixels", "fill_y", "placements")

    def __init__(self, width: int, height: int, background: int) -> None:
        self.pixels = new_canvas(width, height, background)
        self.fill_y = 0
        self.placements: list[Placement] = []

    @property
    def remaining(self) -> int:
        return self.pixels.shape[0] - self.fill_y

    def place(self, fragment: Fragment) -> None:
        canvas_y = self.fill_y
        self.fill_y = copy_into(self.pixels, fragment.pixels, canvas_y)
        self.placements.append(
            Placement(
                page_num=fragment.page.page_num,
                y_start=fragment.y_start,
                y_end=fragment.y_end,
                canvas_y=canvas_y,
                hard_cut=fragment.hard_cut,
            )
        )


class PageComposer:
    """
    Packs fragments into fixed-height output pages.

    Each `advance()` produces one page of exactly `target_height` rows. A
    fragment that does not fit is split on the nearest blank row above the page
    end; the tail is carried over to the next page.
    """

    def __init__(
        self,
        source: PageSource,
        page_numbers: Sequence[int],
        target_height: int,
        max_fragment_height: int | None = None,
        *,
        background_value: int = DEFAULT_BACKGROUND,
    ) -> None:
        self.config = ReflowConfig(
            target_height=int(target_height),
            page_numbers=tuple(int(p) for p in page_numbers),
            max_fragment_height=max_fragment_height,
            background_value=background_value,
        )
        self._fragments = PageFragmenter(
            source,
            self.config.page_numbers,
            self.config.fragment_limit,
            background_value=self.config.background_value,
        )
        self._state: _State = _Idle()
        self._current: OutputPage | None = None
        self._width: int | None = None
        self._produced = 0

    @classmethod
    def from_config(cls, source: PageSource, config: ReflowConfig) -> PageComposer:
        return cls(
            source,
            config.page_numbers,
            config.target_height,
            config.max_fragment_height,
            background_value=config.background_value,
        )

    @property
    def current(self) -> OutputPage | None:
        return self._current

    @property
    def processed_page_index(self) -> int:
        return self._fragments.page_index

    @property
    def processed_page_num(self) -> int | None:
        return self._fragments.page_num

    @property
    def total_pages(self) -> int:
        return self._fragments.total_pages

    @property
    def pages_produced(self) -> int:
        return self._produced

    @property
    def has_leftover(self) -> bool:
        return isinstance(self._state, _Carrying)

    @property
    def failure(self) -> ReflowFailure | None:
        if isinstance(self._state, _Failed):
            return self._state.failure
        return None

    def reset(self) -> None:
        self._fragments.reset()
        self._state = _Idle()
        self._current = None
        self._width = None
        self._produced = 0

    def advance(self) -> bool:
        """
        Build the next output page.

        Returns False once the document is exhausted. Page source errors and
        contract violations propagate; the partial canvas is dropped and the
        composer stays failed until `reset()`.
        """

        self._current = None
        if isinstance(self._state, (_Finished, _Failed)):
            return False

        try:
            page = self._compose()
        except ContractViolation as e:
            self._fail(ErrorKind.CONTRACT_VIOLATION, e)
            raise
        except Exception as e:
            self._fail(ErrorKind.RENDER_PROPAGATED, e)
            raise

        if page is None:
            return False
        self._current = page
        self._produced += 1
        return True

    def step(self) -> StepResult:
        """Pull-based variant of `advance()` that reports failures instead of raising."""
        try:
            produced = self.advance()
        except Exception:
            return StepResult(status=StepStatus.FAILED, failure=self.failure)
        if produced:
            return StepResult(status=StepStatus.PRODUCED, page=self._current)
        if self.failure is not None:
            return StepResult(status=StepStatus.FAILED, failure=self.failure)
        return StepResult(status=StepStatus.EXHAUSTED)

    def __iter__(self) -> Iterator[OutputPage]:
        while self.advance():
            page = self._current
            assert page is not None
            yield page

    def _fail(self, kind: ErrorKind, error: Exception) -> None:
        failure = ReflowFailure(
            kind=kind,
            message=str(error) or type(error).__name__,
            page_index=self._fragments.page_index if self._fragments.page_index >= 0 else None,
            page_num=self._fragments.page_num,
            exception=error,
        )
        logger.error("reflow failed at page %s: %s", failure.page_num, failure.message)
        self._state = _Failed(failure=failure)

    def _next_fragment(self) -> Fragment | None:
        if isinstance(self._state, _Carrying):
            fragment = self._state.leftover
            self._state = _Idle()
            return fragment
        if self._fragments.advance():
            return self._fragments.current
        self._state = _Finished()
        return None

    def _compose(self) -> OutputPage | None:
        target = self.config.target_height
        canvas: _Canvas | None = None

        while canvas is None or canvas.remaining > 0:
            fragment = self._next_fragment()
            if fragment is None:
                break

            if self._width is None:
                self._width = fragment.width
            if canvas is None:
                canvas = _Canvas(self._width, target, self.config.background_value)

            if fragment.height <= canvas.remaining:
                canvas.place(fragment)
                # Drop the reference before the next pull may render another page.
                del fragment
                continue

            self._overflow(canvas, fragment)
            break

        if canvas is None:
            return None
        return OutputPage(
            index=self._produced,
            pixels=canvas.pixels,
            fill_height=canvas.fill_y,
            placements=tuple(canvas.placements),
        )

    def _overflow(self, canvas: _Canvas, fragment: Fragment) -> None:
        split = canvas.remaining
        offset = find_blank_row_toward_start(
            fragment.pixels, split, stop_y=0, background=self.config.background_value
        )
        row = None if offset is None else split + offset

        if row is not None and row > 0:
            head, tail = fragment.split(row)
        elif row == 0 and canvas.fill_y > 0:
            # The fragment already starts on a blank row: break the page there.
            logger.debug("page %d rows [%d, %d) moved to next output page", fragment.page.page_num, fragment.y_start, fragment.y_end)
            self._state = _Carrying(leftover=fragment)
            return
        else:
            logger.debug("page %d: hard split at row %d", fragment.page.page_num, fragment.y_start + split)
            head, tail = fragment.split(split, hard_cut=True)

        canvas.place(head)
        self._state = _Carrying(leftover=tail)
