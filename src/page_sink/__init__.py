"""
Canvas sink (output pages -> image files or a multi-page PDF).

- Converts each output page (pixel mode, rotation, codec).
- Writes it through a PageWriter as soon as it is produced.
- Runs the composer on a worker thread with cooperative cancellation and
  pollable progress (ReflowJob).
"""

from .contracts import (
    ImageEncoding,
    ImageMode,
    JobProgress,
    OutputConfig,
    OutputKind,
    ReflowJobError,
    ReflowJobResult,
)
from .converter import PageImageConverter
from .job import ReflowJob
from .module import build_writer, run_reflow
from .writers import ImageSequenceWriter, PageWriter, PdfWriter

__all__ = [
    "ImageEncoding",
    "ImageMode",
    "ImageSequenceWriter",
    "JobProgress",
    "OutputConfig",
    "OutputKind",
    "PageImageConverter",
    "PageWriter",
    "PdfWriter",
    "ReflowJob",
    "ReflowJobError",
    "ReflowJobResult",
    "build_writer",
    "run_reflow",
]
