from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Sequence

from page_source.engines.base import PageSource

from .contracts import (
    ConfigurationError,
    ContractViolation,
    ErrorKind,
    OutputPage,
    Placement,
    ReflowConfig,
    ReflowFailure,
    StepResult,
    StepStatus,
)
from .fragmenter import _check_raster

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _Ready:
    position: int  # next index into the page list


@dataclass(frozen=True, slots=True)
class _Finished:
    pass


@dataclass(frozen=True, slots=True)
class _Failed:
    failure: ReflowFailure


_State = _Ready | _Finished | _Failed


class PassthroughComposer:
    """
    Emits every selected source page unchanged, one output page per source page.

    Shares the PageComposer surface so writers and jobs can drive either.
    """

    def __init__(self, source: PageSource, page_numbers: Sequence[int]) -> None:
        if not page_numbers:
            raise ConfigurationError("No pages defined.")
        if any(int(p) < 1 for p in page_numbers):
            raise ConfigurationError("page numbers must be >= 1")
        self._source = source
        self._pages = tuple(int(p) for p in page_numbers)
        self._state: _State = _Ready(position=0)
        self._page_index = -1
        self._current: OutputPage | None = None
        self._width: int | None = None
        self._produced = 0

    @classmethod
    def from_config(cls, source: PageSource, config: ReflowConfig) -> PassthroughComposer:
        return cls(source, config.page_numbers)

    @property
    def current(self) -> OutputPage | None:
        return self._current

    @property
    def processed_page_index(self) -> int:
        return self._page_index

    @property
    def processed_page_num(self) -> int | None:
        return self._pages[self._page_index] if self._page_index >= 0 else None

    @property
    def total_pages(self) -> int:
        return len(self._pages)

    @property
    def pages_produced(self) -> int:
        return self._produced

    @property
    def failure(self) -> ReflowFailure | None:
        if isinstance(self._state, _Failed):
            return self._state.failure
        return None

    def reset(self) -> None:
        self._state = _Ready(position=0)
        self._page_index = -1
        self._current = None
        self._width = None
        self._produced = 0

    def advance(self) -> bool:
        """
        Emit the next source page as an output page.

        Errors propagate; the composer then stays failed until `reset()`.
        """

        self._current = None
        state = self._state
        if not isinstance(state, _Ready):
            return False
        if state.position >= len(self._pages):
            self._state = _Finished()
            return False

        self._page_index = state.position
        try:
            page = self._render(state.position)
        except ContractViolation as e:
            self._fail(ErrorKind.CONTRACT_VIOLATION, e)
            raise
        except Exception as e:
            self._fail(ErrorKind.RENDER_PROPAGATED, e)
            raise

        self._state = _Ready(position=state.position + 1)
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
            page_index=self._page_index,
            page_num=self._pages[self._page_index],
            exception=error,
        )
        logger.error("passthrough failed at page %s: %s", failure.page_num, failure.message)
        self._state = _Failed(failure=failure)

    def _render(self, position: int) -> OutputPage:
        page_num = self._pages[position]
        pixels = _check_raster(self._source.render_page(page_num), page_num=page_num)
        if self._width is None:
            self._width = int(pixels.shape[1])
        elif pixels.shape[1] != self._width:
            raise ContractViolation(f"page {page_num}: width {pixels.shape[1]} differs from document width {self._width}")

        height = int(pixels.shape[0])
        logger.debug("passthrough page %d (%dx%d)", page_num, pixels.shape[1], height)
        return OutputPage(
            index=self._produced,
            pixels=pixels.copy(),
            fill_height=height,
            placements=(Placement(page_num=page_num, y_start=0, y_end=height, canvas_y=0, hard_cut=False),),
        )
