from __future__ import annotations

import unittest

import numpy as np

from page_source.contracts import RenderError
from reflow.contracts import ConfigurationError, ContractViolation
from reflow.fragmenter import PageFragmenter, trim_trailing_background
from reflow.scanline import is_blank_row


def _content_page(height: int, width: int = 8, blank_rows: tuple[int, ...] = ()) -> np.ndarray:
    rows = (np.arange(height) % 200).astype(np.uint8)
    page = np.repeat(rows[:, None], width, axis=1)
    for y in blank_rows:
        page[y] = 255
    return page


def _text_page(height: int, *, line: int = 20, gap: int = 10, width: int = 8) -> np.ndarray:
    """Bands of `line` content rows separated by `gap` blank rows."""
    page = _content_page(height, width)
    for y in range(height):
        if y % (line + gap) >= line:
            page[y] = 255
    return page


class _FakeSource:
    def __init__(self, pages: dict[int, np.ndarray], fail_on: int | None = None) -> None:
        self.pages = pages
        self.fail_on = fail_on
        self.calls: list[int] = []

    def render_page(self, page_num: int) -> np.ndarray:
        self.calls.append(page_num)
        if page_num == self.fail_on:
            raise RenderError("renderer crashed", page_num=page_num)
        return self.pages[page_num]


def _spans(fragmenter: PageFragmenter) -> list[tuple[int, int, int]]:
    return [(f.page.page_num, f.y_start, f.y_end) for f in fragmenter]


class TestPageFragmenterScenarios(unittest.TestCase):
    def test_cuts_on_blank_row(self) -> None:
        src = _FakeSource({1: _content_page(1000, blank_rows=(550,))})
        frags = list(PageFragmenter(src, [1], 600))

        self.assertEqual([(f.y_start, f.y_end) for f in frags], [(0, 550), (550, 1000)])
        self.assertEqual([f.hard_cut for f in frags], [False, False])
        self.assertTrue(is_blank_row(frags[1].page.pixels, 550))

    def test_hard_cut_without_blank_rows(self) -> None:
        src = _FakeSource({1: _content_page(900)})
        frags = list(PageFragmenter(src, [1], 600))

        self.assertEqual([(f.y_start, f.y_end) for f in frags], [(0, 600), (600, 900)])
        self.assertEqual([f.hard_cut for f in frags], [True, False])

    def test_trailing_background_is_trimmed(self) -> None:
        page = _content_page(100, blank_rows=tuple(range(60, 100)))
        src = _FakeSource({1: page})
        self.assertEqual(_spans(PageFragmenter(src, [1], 200)), [(1, 0, 60)])

    def test_blank_page_is_kept_and_never_yields_empty_fragments(self) -> None:
        page = np.full((50, 8), 255, dtype=np.uint8)
        src = _FakeSource({1: page})
        frags = list(PageFragmenter(src, [1], 30))
        self.assertEqual([(f.y_start, f.y_end) for f in frags], [(0, 30), (30, 50)])
        self.assertTrue(all(f.height > 0 for f in frags))

    def test_trim_keeps_wholly_blank_page(self) -> None:
        page = np.full((7, 3), 255, dtype=np.uint8)
        self.assertEqual(trim_trailing_background(page).shape, (7, 3))


class TestPageFragmenterContract(unittest.TestCase):
    def setUp(self) -> None:
        self.src = _FakeSource(
            {
                1: _text_page(1000),
                2: _content_page(250),
                3: _text_page(333, line=45, gap=3),
            }
        )
        self.max_height = 120

    def test_heights_bounded_and_positive(self) -> None:
        for f in PageFragmenter(self.src, [1, 2, 3], self.max_height):
            self.assertGreater(f.height, 0)
            self.assertLessEqual(f.height, self.max_height)

    def test_cursor_strictly_increases_and_covers_each_page(self) -> None:
        fragmenter = PageFragmenter(self.src, [1, 2, 3], self.max_height)
        keys: list[tuple[int, int]] = []
        covered: dict[int, list[tuple[int, int]]] = {}
        for f in fragmenter:
            keys.append((f.page.page_index, f.y_start))
            covered.setdefault(f.page.page_num, []).append((f.y_start, f.y_end))

        self.assertEqual(keys, sorted(set(keys)))
        for spans in covered.values():
            self.assertEqual(spans[0][0], 0)
            for (_, end), (start, _) in zip(spans, spans[1:]):
                self.assertEqual(end, start)

    def test_blank_aligned_cuts_land_on_blank_rows(self) -> None:
        for f in PageFragmenter(self.src, [1, 2, 3], self.max_height):
            if f.hard_cut or f.y_end == f.page.height:
                continue
            self.assertTrue(is_blank_row(f.page.pixels, f.y_end), (f.page.page_num, f.y_end))

    def test_reset_replays_identically(self) -> None:
        fragmenter = PageFragmenter(self.src, [1, 2, 3], self.max_height)
        first = _spans(fragmenter)
        self.assertFalse(fragmenter.advance())
        fragmenter.reset()
        self.assertIsNone(fragmenter.current)
        self.assertEqual(_spans(fragmenter), first)

    def test_exhausted_stays_exhausted(self) -> None:
        fragmenter = PageFragmenter(self.src, [2], self.max_height)
        list(fragmenter)
        self.assertFalse(fragmenter.advance())
        self.assertFalse(fragmenter.advance())
        self.assertIsNone(fragmenter.current)

    def test_page_accessors(self) -> None:
        fragmenter = PageFragmenter(self.src, [3, 1], self.max_height)
        self.assertEqual(fragmenter.total_pages, 2)
        self.assertEqual(fragmenter.page_index, -1)
        self.assertIsNone(fragmenter.page_num)
        self.assertTrue(fragmenter.advance())
        self.assertEqual(fragmenter.page_index, 0)
        self.assertEqual(fragmenter.page_num, 3)


class TestPageFragmenterErrors(unittest.TestCase):
    def test_empty_page_list_raises_before_rendering(self) -> None:
        src = _FakeSource({})
        with self.assertRaises(ConfigurationError):
            PageFragmenter(src, [], 100)
        self.assertEqual(src.calls, [])

    def test_non_positive_height(self) -> None:
        with self.assertRaises(ConfigurationError):
            PageFragmenter(_FakeSource({}), [1], 0)

    def test_render_error_propagates_unchanged(self) -> None:
        src = _FakeSource({1: _content_page(10)}, fail_on=2)
        fragmenter = PageFragmenter(src, [1, 2], 100)
        self.assertTrue(fragmenter.advance())
        with self.assertRaises(RenderError) as ctx:
            fragmenter.advance()
        self.assertEqual(ctx.exception.page_num, 2)
        self.assertEqual(src.calls, [1, 2])

    def test_non_grayscale_raster_is_a_contract_violation(self) -> None:
        src = _FakeSource({1: np.zeros((4, 4, 3), dtype=np.uint8), 2: np.zeros((4, 4), dtype=np.float32)})
        with self.assertRaises(ContractViolation):
            PageFragmenter(src, [1], 10).advance()
        with self.assertRaises(ContractViolation):
            PageFragmenter(src, [2], 10).advance()


if __name__ == "__main__":
    unittest.main()
