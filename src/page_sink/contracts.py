from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path
from typing import Any


class OutputKind(str, Enum):
    PDF = "pdf"
    IMAGE_SEQUENCE = "image_sequence"


class ImageEncoding(str, Enum):
    PNG = "png"
    JPEG = "jpeg"


class ImageMode(str, Enum):
    """
    Pixel format of the written pages (grayscale only).
    """

    GRAY = "gray"  # 8-bit, PIL "L"
    BILEVEL = "bilevel"  # 1-bit, PIL "1"


ALLOWED_ROTATIONS = (0, 90, 180, 270)


@dataclass(frozen=True, slots=True)
class OutputConfig:
    """
    Sink configuration.

    `out_path` is a directory for image sequences and a file for PDFs; it must
    not exist yet. `rotate` is clockwise, in degrees.
    """

    out_path: Path
    kind: OutputKind = OutputKind.PDF
    encoding: ImageEncoding = ImageEncoding.PNG
    image_mode: ImageMode = ImageMode.GRAY
    rotate: int = 0
    jpeg_quality: int = 60

    def __post_init__(self) -> None:
        if not isinstance(self.out_path, Path):
            raise TypeError("out_path must be pathlib.Path")
        if self.rotate not in ALLOWED_ROTATIONS:
            raise ValueError(f"rotate must be one of {ALLOWED_ROTATIONS}")
        if not (1 <= self.jpeg_quality <= 95):
            raise ValueError("jpeg_quality must be within [1, 95]")


@dataclass(frozen=True, slots=True)
class JobProgress:
    pages_written: int
    processed_pages: int  # source pages started so far
    total_pages: int

    @property
    def percent(self) -> int:
        if self.total_pages <= 0:
            return 0
        return int(self.processed_pages * 100 / self.total_pages)


@dataclass(frozen=True, slots=True)
class ReflowJobError:
    code: str
    message: str
    detail: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class ReflowJobResult:
    """
    Machine-readable outcome of one reflow job.

    On failure, `ok` is False and `errors` names the failing page; pages
    already handed to the writer are counted in `pages_written`.
    """

    ok: bool
    cancelled: bool
    output_path: str
    pages_written: int
    total_pages: int
    errors: list[ReflowJobError]
    meta: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
