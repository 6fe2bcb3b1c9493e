from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from reflow.contracts import OutputPage

from ..converter import PageImageConverter


class PageWriter(ABC):
    """
    Canvas sink: receives finished output pages in order.

    Writers must:
    - Refuse to overwrite an existing `out_path` (FileExistsError from `open`)
    - Accept pages of any count, including zero
    - Leave serialization details (codec, container) to themselves
    """

    def __init__(self, out_path: Path, converter: PageImageConverter) -> None:
        self.out_path = out_path
        self.converter = converter
        self.pages_written = 0

    @abstractmethod
    def open(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def write_page(self, page: OutputPage) -> None:
        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        """Finalize the output (also used after a cancellation)."""
        raise NotImplementedError

    def abort(self) -> None:
        """Release resources after a failure without finalizing."""
        return None
