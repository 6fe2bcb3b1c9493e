from __future__ import annotations

from pathlib import Path

from .contracts import PageSourceConfig, PageSourceName, RenderError
from .engines import ImageSequencePageSource, PageSource, PdfPageSource


def guess_engine(input_path: Path) -> PageSourceName:
    if input_path.is_dir():
        return PageSourceName.IMAGE_SEQUENCE
    if input_path.suffix.lower() == ".pdf":
        return PageSourceName.PYPDFIUM2
    raise RenderError(f"Unsupported input (expected a .pdf file or a PNG directory): {input_path}")


def open_page_source(*, config: PageSourceConfig, input_path: Path) -> PageSource:
    """
    Open the page source selected by `config.engine` over `input_path`.
    """

    if not input_path.exists():
        raise RenderError(f"Input not found: {input_path}")

    if config.engine == PageSourceName.PYPDFIUM2:
        return PdfPageSource(input_path, render_width=config.render_width, password=config.password)
    if config.engine == PageSourceName.IMAGE_SEQUENCE:
        return ImageSequencePageSource(input_path, render_width=config.render_width)
    raise ValueError(f"Unsupported page source: {config.engine}")
