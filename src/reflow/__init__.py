"""
Reflow engine (re-pagination of fixed-width grayscale pages).

Input: 8-bit grayscale page rasters pulled one at a time from a page source.
Output: output pages of one fixed height, assembled from blank-row-aligned
slices of the source pages.

The engine is single-threaded and pull-based:
- PageFragmenter cuts one source page at a time into bounded fragments.
- PageComposer packs fragments into fixed-height canvases.
- At most one source page and one carried-over fragment are alive at once.
"""

from .composer import PageComposer
from .contracts import (
    ConfigurationError,
    ContractViolation,
    ErrorKind,
    Fragment,
    OutputPage,
    Placement,
    ReflowConfig,
    ReflowError,
    ReflowFailure,
    SourcePage,
    StepResult,
    StepStatus,
)
from .fragmenter import PageFragmenter
from .passthrough import PassthroughComposer
from .scanline import (
    count_trailing_blank_rows,
    find_blank_row_toward_end,
    find_blank_row_toward_start,
    is_blank_row,
)

__all__ = [
    "ConfigurationError",
    "ContractViolation",
    "ErrorKind",
    "Fragment",
    "OutputPage",
    "PageComposer",
    "PageFragmenter",
    "PassthroughComposer",
    "Placement",
    "ReflowConfig",
    "ReflowError",
    "ReflowFailure",
    "SourcePage",
    "StepResult",
    "StepStatus",
    "count_trailing_blank_rows",
    "find_blank_row_toward_end",
    "find_blank_row_toward_start",
    "is_blank_row",
]
