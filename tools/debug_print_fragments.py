#!/usr/bin/env python3
"""
debug_print_fragments.py

Purpose
- Inspect how source pages are cut before they are packed into output pages.
- Prints, per selected page, the blank bands found by the scanline search and
  the fragments the fragmenter would emit for a given height limit.

Usage examples
  python3 tools/debug_print_fragments.py book.pdf --max-height 800
  python3 tools/debug_print_fragments.py scans/ --pages 2-4 --render-width 600 --bands

Options
  --pages "1,3-5"       Page selection (default: all)
  --render-width 600    Fixed pixel width pages are rendered at
  --max-height 800      Fragment height limit
  --background 255      Gray value treated as blank
  --bands               Also list the runs of blank rows on each page
  --max-bands 40        Max bands printed per page
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional, Tuple

from page_source import PageSourceConfig, RenderError, guess_engine, open_page_source, parse_page_selection
from reflow.fragmenter import PageFragmenter
from reflow.scanline import find_blank_row_toward_end, is_blank_row


# ----------------------------
# Scanline helpers
# ----------------------------

def blank_bands(pixels, background: int) -> List[Tuple[int, int]]:
    """Runs of blank rows as half-open [start, end) intervals."""
    bands: List[Tuple[int, int]] = []
    height = pixels.shape[0]
    y = 0
    while y < height:
        offset = find_blank_row_toward_end(pixels, y, background=background)
        if offset is None:
            if y == 0 and is_blank_row(pixels, 0, background):
                bands.append((0, height))
            break
        start = y + offset
        end = start
        while end < height and is_blank_row(pixels, end, background):
            end += 1
        bands.append((start, end))
        y = end
    return bands


# ----------------------------
# Printing
# ----------------------------

def _print_bands(bands: List[Tuple[int, int]], max_bands: int) -> None:
    print(f"Blank bands ({len(bands)}):")
    for start, end in bands[:max_bands]:
        print(f"  [{start:5d}, {end:5d})  h={end - start}")
    if len(bands) > max_bands:
        print(f"  ... ({len(bands) - max_bands} more)")


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Terminal view of blank bands and fragment cuts.")
    ap.add_argument("input", type=str, help="PDF file or directory of PNG pages.")
    ap.add_argument("--pages", type=str, default=None, help='Page selection like "1,3-5".')
    ap.add_argument("--render-width", type=int, default=600, help="Fixed render width in pixels.")
    ap.add_argument("--max-height", type=int, default=800, help="Fragment height limit.")
    ap.add_argument("--background", type=int, default=255, help="Gray value treated as blank.")
    ap.add_argument("--bands", action="store_true", default=False, help="List runs of blank rows per page.")
    ap.add_argument("--max-bands", type=int, default=40, help="Max bands printed per page.")
    args = ap.parse_args(argv)

    input_path = Path(args.input)
    try:
        config = PageSourceConfig(engine=guess_engine(input_path), render_width=args.render_width)
        source = open_page_source(config=config, input_path=input_path)
    except RenderError as e:
        print(f"error: {e}")
        return 2

    with source:
        try:
            pages = parse_page_selection(args.pages, page_count=source.page_count)
        except ValueError as e:
            print(f"error: invalid page selection: {e}")
            return 2

        print(f"Input: {input_path}  Source: {source.backend_id()}  Pages: {len(pages)}")
        print(f"Render width: {args.render_width}  Max fragment height: {args.max_height}")

        fragmenter = PageFragmenter(source, pages, args.max_height, background_value=args.background)
        last_page: Optional[int] = None
        hard_cuts = 0
        for f in fragmenter:
            if f.page.page_num != last_page:
                last_page = f.page.page_num
                print(f"\n=== Page {last_page} ===  height={f.page.height} (after trim)")
                if args.bands:
                    _print_bands(blank_bands(f.page.pixels, args.background), args.max_bands)
                print("Fragments:")
            marker = "  HARD" if f.hard_cut else ""
            print(f"  [{f.y_start:5d}, {f.y_end:5d})  h={f.height}{marker}")
            hard_cuts += int(f.hard_cut)

    print(f"\nHard cuts: {hard_cuts}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
