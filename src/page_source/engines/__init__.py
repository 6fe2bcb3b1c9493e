from .base import PageSource
from .image_sequence import ImageSequencePageSource
from .pypdfium2_engine import PdfPageSource
