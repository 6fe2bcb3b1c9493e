from __future__ import annotations

from typing import IO, Any

from PIL import Image

from reflow.contracts import OutputPage

from .contracts import ImageEncoding, ImageMode, OutputConfig

_PIL_MODES = {
    ImageMode.GRAY: "L",
    ImageMode.BILEVEL: "1",
}

# Clockwise rotation -> PIL transpose (PIL's ROTATE_* turn counter-clockwise).
_TRANSPOSE = {
    90: Image.Transpose.ROTATE_270,
    180: Image.Transpose.ROTATE_180,
    270: Image.Transpose.ROTATE_90,
}


class PageImageConverter:
    """
    Turns output page rasters into encoded images (pixel mode, rotation, codec).
    """

    def __init__(
        self,
        *,
        image_mode: ImageMode = ImageMode.GRAY,
        encoding: ImageEncoding = ImageEncoding.PNG,
        rotate: int = 0,
        jpeg_quality: int = 60,
    ) -> None:
        self.image_mode = image_mode
        self.encoding = encoding
        self.rotate = rotate
        self.jpeg_quality = jpeg_quality

    @classmethod
    def from_config(cls, config: OutputConfig) -> PageImageConverter:
        return cls(
            image_mode=config.image_mode,
            encoding=config.encoding,
            rotate=config.rotate,
            jpeg_quality=config.jpeg_quality,
        )

    @property
    def extension(self) -> str:
        return ".jpg" if self.encoding == ImageEncoding.JPEG else ".png"

    def convert(self, page: OutputPage) -> Image.Image:
        img = Image.fromarray(page.pixels)  # 2-D uint8 -> "L"
        mode = _PIL_MODES[self.image_mode]
        if img.mode != mode:
            img = img.convert(mode)
        if self.rotate:
            img = img.transpose(_TRANSPOSE[self.rotate])
        return img

    def save_kwargs(self) -> dict[str, Any]:
        if self.encoding == ImageEncoding.JPEG:
            return {"format": "JPEG", "quality": self.jpeg_quality}
        return {"format": "PNG"}

    def encode(self, img: Image.Image, fp: IO[bytes]) -> None:
        if self.encoding == ImageEncoding.JPEG and img.mode == "1":
            img = img.convert("L")
        img.save(fp, **self.save_kwargs())
