from .base import PageWriter
from .image_sequence import ImageSequenceWriter
from .pdf import PdfWriter
