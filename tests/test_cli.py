from __future__ import annotations

import contextlib
import io
import json
import tempfile
import unittest
from pathlib import Path

import numpy as np
from PIL import Image

from page_sink.cli import build_arg_parser, main


def _write_pages(directory: Path, n: int, *, height: int = 300, width: int = 200) -> None:
    directory.mkdir()
    for i in range(1, n + 1):
        pixels = np.full((height, width), 40 * i, dtype=np.uint8)
        Image.fromarray(pixels).save(directory / f"scan_{i:02d}.png")


def _run(argv: list[str]) -> tuple[int, str]:
    out = io.StringIO()
    with contextlib.redirect_stdout(out):
        code = main(argv)
    return code, out.getvalue()


class TestCli(unittest.TestCase):
    def test_parser_defaults(self) -> None:
        args = build_arg_parser().parse_args(["in.pdf", "--out", "out.pdf"])
        self.assertEqual(args.target_height, 800)
        self.assertIsNone(args.max_fragment_height)
        self.assertEqual(args.format, "pdf")
        self.assertFalse(args.passthrough)

    def test_png_directory_to_png_pages(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            in_dir = Path(tmp) / "scans"
            out_dir = Path(tmp) / "out"
            manifest = Path(tmp) / "run.json"
            _write_pages(in_dir, 2)

            code, stdout = _run(
                [
                    str(in_dir),
                    "--out",
                    str(out_dir),
                    "--target-height",
                    "250",
                    "--render-width",
                    "200",
                    "--format",
                    "png",
                    "--out-manifest",
                    str(manifest),
                ]
            )

            self.assertEqual(code, 0)
            self.assertIn("pages=3 ok=True", stdout)
            files = sorted(out_dir.iterdir())
            self.assertEqual([f.name for f in files], ["page_0001.png", "page_0002.png", "page_0003.png"])
            with Image.open(files[0]) as img:
                self.assertEqual(img.size, (200, 250))

            payload = json.loads(manifest.read_text(encoding="utf-8"))
            self.assertTrue(payload["ok"])
            self.assertEqual(payload["meta"]["page_source"], "image_sequence")
            self.assertIsNone(payload["meta"]["page_source_version"])
            self.assertEqual(payload["meta"]["page_selection"], "all")

    def test_passthrough_with_page_selection(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            in_dir = Path(tmp) / "scans"
            out_dir = Path(tmp) / "out"
            _write_pages(in_dir, 3, height=120, width=80)

            code, _ = _run(
                [str(in_dir), "--out", str(out_dir), "--render-width", "80", "--format", "png", "--passthrough", "--pages", "2-3"]
            )

            self.assertEqual(code, 0)
            self.assertEqual(len(list(out_dir.iterdir())), 2)

    def test_missing_input(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            code, stdout = _run([str(Path(tmp) / "missing.pdf"), "--out", str(Path(tmp) / "out.pdf")])
        self.assertEqual(code, 2)
        self.assertIn("REFLOW_INPUT_ERROR", stdout)

    def test_bad_page_selection(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            in_dir = Path(tmp) / "scans"
            _write_pages(in_dir, 1, height=20, width=20)
            code, stdout = _run([str(in_dir), "--out", str(Path(tmp) / "out"), "--render-width", "20", "--pages", "4"])
        self.assertEqual(code, 2)
        self.assertIn("REFLOW_BAD_PAGE_SELECTION", stdout)

    def test_existing_output(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            in_dir = Path(tmp) / "scans"
            _write_pages(in_dir, 1, height=20, width=20)
            code, stdout = _run([str(in_dir), "--out", tmp, "--render-width", "20", "--format", "png"])
        self.assertEqual(code, 2)
        self.assertIn("REFLOW_OUTPUT_EXISTS", stdout)


if __name__ == "__main__":
    unittest.main()
