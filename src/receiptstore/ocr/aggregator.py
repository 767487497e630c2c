from __future__ import annotations

from collections.abc import Sequence


def page_marker(page_number: int) -> str:
    return f"--- Page {page_number} ---"


def aggregate_pages(pages: Sequence[str]) -> str:
    if not pages:
        raise ValueError("At least one recognized page is required.")

    if len(pages) == 1:
        return pages[0]

    out = ""
    for index, page_text in enumerate(pages):
        if not page_text:
            continue
        if out:
            out += f"\n\n{page_marker(index + 1)}\n\n"
        out += page_text
    return out
