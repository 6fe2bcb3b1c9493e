from __future__ import annotations

import argparse
import logging
from pathlib import Path

from page_source import PageSourceConfig, PageSourceName, RenderError, guess_engine

from .artifacts import write_job_manifest_json
from .contracts import ImageEncoding, ImageMode, OutputConfig, OutputKind
from .module import run_reflow

_FORMATS = {
    "pdf": (OutputKind.PDF, ImageEncoding.PNG),
    "pdf-jpeg": (OutputKind.PDF, ImageEncoding.JPEG),
    "png": (OutputKind.IMAGE_SEQUENCE, ImageEncoding.PNG),
    "jpeg": (OutputKind.IMAGE_SEQUENCE, ImageEncoding.JPEG),
}


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="reflow-pages",
        description="Re-paginate a PDF (or a directory of PNG pages) into fixed-height grayscale pages.",
    )
    p.add_argument("input", type=Path, help="Input PDF file or directory of PNG pages.")
    p.add_argument("--out", required=True, type=Path, help="Output PDF file or image directory (must not exist).")
    p.add_argument("--target-height", type=int, default=800, help="Height of the output pages in pixels.")
    p.add_argument(
        "--max-fragment-height",
        type=int,
        default=None,
        help="Upper bound for a single source slice (default: target height).",
    )
    p.add_argument("--render-width", type=int, default=600, help="Fixed pixel width every source page is rendered at.")
    p.add_argument(
        "--pages",
        default=None,
        help='Optional page selection like "1,3-5". Default: all pages.',
    )
    p.add_argument("--background", type=int, default=255, help="Gray value treated as blank (0..255).")
    p.add_argument("--format", choices=sorted(_FORMATS), default="pdf", help="Output container/codec.")
    p.add_argument(
        "--image-mode",
        choices=[m.value for m in ImageMode],
        default=ImageMode.GRAY.value,
        help="Pixel format of the written pages.",
    )
    p.add_argument("--rotate", type=int, choices=[0, 90, 180, 270], default=0, help="Clockwise rotation of output pages.")
    p.add_argument("--jpeg-quality", type=int, default=60, help="JPEG quality (1..95).")
    p.add_argument("--password", default=None, help="Password for encrypted PDFs.")
    p.add_argument(
        "--passthrough",
        action="store_true",
        help="Write each source page unchanged instead of re-paginating.",
    )
    p.add_argument("--out-manifest", type=Path, default=None, help="Optional JSON manifest of the run.")
    p.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        engine = guess_engine(args.input)
    except RenderError as e:
        print(f"error: {e}")
        return 2

    kind, encoding = _FORMATS[args.format]
    try:
        source_config = PageSourceConfig(engine=engine, render_width=args.render_width, password=args.password)
        output_config = OutputConfig(
            out_path=args.out,
            kind=kind,
            encoding=encoding,
            image_mode=ImageMode(args.image_mode),
            rotate=args.rotate,
            jpeg_quality=args.jpeg_quality,
        )
    except ValueError as e:
        print(f"error: {e}")
        return 2

    result = run_reflow(
        input_path=args.input,
        source_config=source_config,
        output_config=output_config,
        target_height=args.target_height,
        max_fragment_height=args.max_fragment_height,
        page_selection=args.pages,
        background_value=args.background,
        passthrough=args.passthrough,
    )
    if args.out_manifest is not None:
        write_job_manifest_json(result=result, out_manifest=args.out_manifest)

    print(f"out={result.output_path} pages={result.pages_written} ok={result.ok}")
    for err in result.errors:
        print(f"error: {err.code}: {err.message}")

    if result.cancelled:
        return 1
    return 0 if result.ok else 2


if __name__ == "__main__":
    raise SystemExit(main())
