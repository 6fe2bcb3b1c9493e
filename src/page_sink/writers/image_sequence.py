from __future__ import annotations

import logging

from reflow.contracts import OutputPage

from .base import PageWriter

logger = logging.getLogger(__name__)


class ImageSequenceWriter(PageWriter):
    """
    One image file per output page: <out_path>/page_0001.png, page_0002.png, ...
    """

    def open(self) -> None:
        if self.out_path.exists():
            raise FileExistsError(f"Directory already exists: {self.out_path}")
        self.out_path.mkdir(parents=True)

    def write_page(self, page: OutputPage) -> None:
        out_file = self.out_path / f"page_{self.pages_written + 1:04d}{self.converter.extension}"
        img = self.converter.convert(page)
        with out_file.open("wb") as fp:
            self.converter.encode(img, fp)
        self.pages_written += 1
        logger.debug("wrote %s", out_file.name)

    def close(self) -> None:
        return None
