from __future__ import annotations


def canonical_page_selection(selection: str | None) -> str:
    """
    Deterministic canonicalization for manifests (does NOT validate semantics).
    """
    if selection is None:
        return "all"
    s = "".join(selection.split())
    return s if s != "" else "all"


def _page_range(part: str) -> range:
    first, sep, last = part.partition("-")
    start = int(first)
    end = int(last) if sep else start
    if start < 1 or end < 1:
        raise ValueError("page numbers must be >= 1")
    if end < start:
        raise ValueError(f"invalid range: {part!r}")
    return range(start, end + 1)


def parse_page_selection(selection: str | None, *, page_count: int) -> list[int]:
    """
    Parse "1,3-5" into a sorted list of unique 1-indexed page numbers.
    None => all pages.
    """

    if selection is None or selection.strip() == "":
        return list(range(1, page_count + 1))

    pages: set[int] = set()
    for part in "".join(selection.split()).split(","):
        if part:
            pages.update(_page_range(part))

    ordered = sorted(pages)
    if ordered and ordered[-1] > page_count:
        raise ValueError(f"page selection out of bounds (1..{page_count})")
    return ordered
