import pytest

from receiptstore.ocr.aggregator import aggregate_pages


def test_single_page_is_returned_verbatim() -> None:
    assert aggregate_pages(["ABC"]) == "ABC"
    assert aggregate_pages(["  padded\n"]) == "  padded\n"


def test_pages_are_joined_with_markers_in_order() -> None:
    text = aggregate_pages(["A", "B", "C"])

    assert text == "A\n\n--- Page 2 ---\n\nB\n\n--- Page 3 ---\n\nC"
    assert text.index("A") < text.index("--- Page 2 ---") < text.index("B")
    assert text.index("B") < text.index("--- Page 3 ---") < text.index("C")


def test_empty_interior_page_is_skipped_and_numbering_follows_capture_order() -> None:
    text = aggregate_pages(["A", "", "C"])

    assert text == "A\n\n--- Page 3 ---\n\nC"
    assert "Page 2" not in text


def test_empty_first_page_gets_no_marker_for_the_next_page() -> None:
    assert aggregate_pages(["", "B", "C"]) == "B\n\n--- Page 3 ---\n\nC"


def test_all_empty_pages_aggregate_to_empty_string() -> None:
    assert aggregate_pages(["", ""]) == ""
    assert aggregate_pages([""]) == ""


def test_no_pages_is_rejected() -> None:
    with pytest.raises(ValueError):
        aggregate_pages([])
