"""
Tests for row-level change detection.
"""
from src.domain.change_detection import find_changed_rows, is_data_equal
from src.domain.models import Cell, CellStyle, copy_rows


def row(*texts):
    return [Cell.text(t) if t is not None else Cell() for t in texts]


def matrix():
    return [
        row("R-S", "Red", "Small"),
        row("B-L", "Blue", "Large"),
        row("", None, None),
    ]


class TestFindChangedRows:
    """Diffing of attribute columns."""

    def test_reflexive(self):
        rows = matrix()
        assert find_changed_rows(rows, rows) == []
        assert find_changed_rows(rows, copy_rows(rows)) == []
        assert find_changed_rows([], []) == []

    def test_attribute_change_is_reported(self):
        old = matrix()
        new = copy_rows(old)
        new[1][1] = Cell.text("Red")
        assert find_changed_rows(old, new) == [1]

    def test_identifier_column_is_ignored(self):
        old = matrix()
        new = copy_rows(old)
        new[0][0] = Cell.text("SOMETHING-ELSE")
        assert find_changed_rows(old, new) == []

    def test_added_and_removed_rows(self):
        old = matrix()
        new = copy_rows(old) + [row("", "Red", "Small")]
        assert find_changed_rows(old, new) == [3]
        assert find_changed_rows(new, old) == [3]

    def test_shorter_row_is_changed(self):
        old = matrix()
        new = copy_rows(old)
        new[0] = new[0][:2]
        assert find_changed_rows(old, new) == [0]

    def test_value_vs_display_text_fallback(self):
        old = [[Cell(), Cell(display_text="Red")]]
        new = [[Cell(), Cell(value="Red")]]
        assert find_changed_rows(old, new) == []

    def test_whitespace_is_trimmed(self):
        old = [row("", "Red")]
        new = [row("", " Red ")]
        assert find_changed_rows(old, new) == []

    def test_indices_ascending(self):
        old = matrix()
        new = copy_rows(old)
        new[2][1] = Cell.text("Blue")
        new[0][2] = Cell.text("Large")
        assert find_changed_rows(old, new) == [0, 2]


class TestIsDataEqual:
    """Full equality short-circuit."""

    def test_equal_copies(self):
        rows = matrix()
        assert is_data_equal(rows, copy_rows(rows))

    def test_style_difference_counts(self):
        old = matrix()
        new = copy_rows(old)
        new[0][1].style = CellStyle(bold=True)
        assert not is_data_equal(old, new)
        assert find_changed_rows(old, new) == []

    def test_length_difference(self):
        assert not is_data_equal(matrix(), matrix()[:2])
