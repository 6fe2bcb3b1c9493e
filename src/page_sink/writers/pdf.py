from __future__ import annotations

import io
import logging

from reflow.contracts import OutputPage

from ..contracts import ImageEncoding
from .base import PageWriter

logger = logging.getLogger(__name__)


class PdfWriter(PageWriter):
    """
    Multi-page PDF, one full-page image per output page (page size = image size in points).
    """

    _doc = None

    def _require_pdfium(self):
        try:
            import pypdfium2 as pdfium  # type: ignore

            return pdfium
        except ImportError as e:
            raise RuntimeError("Missing dependency: pypdfium2 is required for PDF output.") from e

    def open(self) -> None:
        if self.out_path.exists():
            raise FileExistsError(f"File already exists: {self.out_path}")
        pdfium = self._require_pdfium()
        self.out_path.parent.mkdir(parents=True, exist_ok=True)
        self._doc = pdfium.PdfDocument.new()

    def write_page(self, page: OutputPage) -> None:
        if self._doc is None:
            raise RuntimeError("PdfWriter.write_page() called before open()")
        pdfium = self._require_pdfium()
        img = self.converter.convert(page)

        image = pdfium.PdfImage.new(self._doc)
        if self.converter.encoding == ImageEncoding.JPEG:
            buf = io.BytesIO()
            self.converter.encode(img, buf)
            buf.seek(0)
            image.load_jpeg(buf, inline=True)
        else:
            # pdfium bitmaps have no 1-bit format.
            image.set_bitmap(pdfium.PdfBitmap.from_pil(img.convert("L")))

        width, height = img.size
        image.set_matrix(pdfium.PdfMatrix().scale(width, height))
        pdf_page = self._doc.new_page(width, height)
        pdf_page.insert_obj(image)
        pdf_page.gen_content()
        pdf_page.close()
        self.pages_written += 1
        logger.debug("added PDF page %d (%dx%d)", self.pages_written, width, height)

    def close(self) -> None:
        if self._doc is None:
            return
        self._doc.save(str(self.out_path))
        self._doc.close()
        self._doc = None

    def abort(self) -> None:
        if self._doc is not None:
            self._doc.close()
            self._doc = None
