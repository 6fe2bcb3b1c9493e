from __future__ import annotations

from pathlib import Path

import numpy as np

from ..contracts import RenderError

from .base import PageSource, fit_to_width


class PdfPageSource(PageSource):
    def __init__(self, pdf_file: Path, *, render_width: int, password: str | None = None) -> None:
        pdfium = self._require_pdfium()
        self.pdf_file = pdf_file
        self.render_width = render_width
        try:
            self._doc = pdfium.PdfDocument(str(pdf_file), password=password)
        except Exception as e:
            raise RenderError(f"Error while opening PDF document: {pdf_file}") from e

        meta = self._doc.get_metadata_dict()
        self.title = meta.get("Title") or None
        self.author = meta.get("Author") or None

    def backend_id(self) -> str:
        return "pypdfium2"

    def backend_version(self) -> str | None:
        try:
            import pypdfium2 as pdfium  # type: ignore

            return getattr(pdfium, "__version__", None)
        except Exception:
            return None

    def _require_pdfium(self):
        try:
            import pypdfium2 as pdfium  # type: ignore

            return pdfium
        except ImportError as e:
            raise RuntimeError("Missing dependency: pypdfium2 is required for PDF rendering.") from e

    @property
    def page_count(self) -> int:
        return len(self._doc)

    def render_page(self, page_num: int) -> np.ndarray:
        page_count = len(self._doc)
        if page_num < 1 or page_num > page_count:
            raise RenderError(f"Page out of range: {page_num} (1..{page_count})", page_num=page_num)

        try:
            page = self._doc[page_num - 1]
        except Exception as e:
            raise RenderError(f"Error while loading page {page_num}", page_num=page_num) from e

        try:
            scale = self.render_width / page.get_width()  # PDF points -> pixels at the target width
            bitmap = page.render(scale=scale, grayscale=True)
            pil_img = fit_to_width(bitmap.to_pil(), self.render_width)
        except Exception as e:
            raise RenderError(f"Error while rendering page {page_num}", page_num=page_num) from e
        finally:
            page.close()

        return np.array(pil_img, dtype=np.uint8)

    def close(self) -> None:
        self._doc.close()
