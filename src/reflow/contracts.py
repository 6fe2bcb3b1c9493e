from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import numpy as np


DEFAULT_BACKGROUND = 255


class ReflowError(Exception):
    """Base class for engine failures."""


class ConfigurationError(ReflowError, ValueError):
    """Invalid engine configuration; raised before any page source call."""


class ContractViolation(ReflowError, RuntimeError):
    """
    Caller or upstream-renderer defect (wrong raster shape/dtype, width mismatch).

    Never recoverable at runtime: page width is fixed document-wide by the renderer.
    """


class ErrorKind(str, Enum):
    CONFIGURATION = "configuration"
    RENDER_PROPAGATED = "render_propagated"
    CONTRACT_VIOLATION = "contract_violation"


class StepStatus(str, Enum):
    PRODUCED = "produced"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class SourcePage:
    page_index: int  # position in the configured page list, 0-based
    page_num: int  # 1-indexed document page number
    pixels: np.ndarray  # (height, width) uint8

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])


@dataclass(frozen=True, slots=True)
class Fragment:
    """
    Contiguous vertical slice [y_start, y_end) of one source page.

    `hard_cut` is True when `y_end` was placed without a blank row to justify it.
    """

    page: SourcePage
    y_start: int
    y_end: int
    hard_cut: bool = False

    @property
    def height(self) -> int:
        return self.y_end - self.y_start

    @property
    def width(self) -> int:
        return self.page.width

    @property
    def pixels(self) -> np.ndarray:
        return self.page.pixels[self.y_start : self.y_end]

    def split(self, at: int, *, hard_cut: bool = False) -> tuple[Fragment, Fragment]:
        """Split at fragment-relative row `at`; both halves must be non-empty."""
        if not (0 < at < self.height):
            raise ContractViolation(f"split row {at} outside (0, {self.height})")
        cut = self.y_start + at
        head = Fragment(page=self.page, y_start=self.y_start, y_end=cut, hard_cut=hard_cut)
        tail = Fragment(page=self.page, y_start=cut, y_end=self.y_end, hard_cut=self.hard_cut)
        return head, tail


@dataclass(frozen=True, slots=True)
class Placement:
    page_num: int
    y_start: int  # source rows [y_start, y_end)
    y_end: int
    canvas_y: int
    hard_cut: bool


@dataclass(frozen=True, slots=True)
class OutputPage:
    index: int  # 0-based position in the output sequence
    pixels: np.ndarray  # (target_height, width) uint8
    fill_height: int  # rows [fill_height, height) are background
    placements: tuple[Placement, ...] = ()

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])


@dataclass(frozen=True, slots=True)
class ReflowFailure:
    kind: ErrorKind
    message: str
    page_index: int | None = None
    page_num: int | None = None
    exception: BaseException | None = field(default=None, compare=False)


@dataclass(frozen=True, slots=True)
class StepResult:
    status: StepStatus
    page: OutputPage | None = None
    failure: ReflowFailure | None = None


@dataclass(frozen=True, slots=True)
class ReflowConfig:
    """
    Core pagination parameters.

    `max_fragment_height` defaults to `target_height` when left as None.
    """

    target_height: int
    page_numbers: tuple[int, ...]
    max_fragment_height: int | None = None
    background_value: int = DEFAULT_BACKGROUND

    def __post_init__(self) -> None:
        if not self.page_numbers:
            raise ConfigurationError("No pages defined.")
        if any(int(p) < 1 for p in self.page_numbers):
            raise ConfigurationError("page numbers must be >= 1")
        if self.target_height <= 0:
            raise ConfigurationError("target_height must be a positive integer")
        if self.max_fragment_height is not None and self.max_fragment_height <= 0:
            raise ConfigurationError("max_fragment_height must be a positive integer")
        if not (0 <= self.background_value <= 255):
            raise ConfigurationError("background_value must be within [0, 255]")

    @property
    def fragment_limit(self) -> int:
        if self.max_fragment_height is None:
            return self.target_height
        return self.max_fragment_height

    def to_dict(self) -> dict[str, Any]:
        return {
            "target_height": self.target_height,
            "max_fragment_height": self.fragment_limit,
            "background_value": self.background_value,
            "page_numbers": list(self.page_numbers),
        }
