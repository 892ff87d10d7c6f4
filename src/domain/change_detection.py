"""
Row-level change detection between two canonical matrices.

The identifier column (index 0) is never compared: it is written by the
auto-SKU propagator only, so differences there are not attribute changes.
Callers must diff against a snapshot taken before any propagation pass.
"""
from typing import List, Optional, Sequence

from .models import Row, cell_at
from .sku_composer import cell_text


def _row_at(rows: Sequence[Row], index: int) -> Optional[Row]:
    return rows[index] if index < len(rows) else None


def find_changed_rows(old_rows: Sequence[Row], new_rows: Sequence[Row]) -> List[int]:
    """
    Return ascending indices of rows whose attribute cells differ.

    A row missing from either matrix, or with a different length, is
    always reported.
    """
    changed: List[int] = []

    for row_index in range(max(len(old_rows), len(new_rows))):
        old_row = _row_at(old_rows, row_index)
        new_row = _row_at(new_rows, row_index)

        if old_row is None or new_row is None or len(old_row) != len(new_row):
            changed.append(row_index)
            continue

        for col_index in range(1, len(new_row)):
            if cell_text(cell_at(old_row, col_index)) != cell_text(cell_at(new_row, col_index)):
                changed.append(row_index)
                break

    return changed


def is_data_equal(a: Sequence[Row], b: Sequence[Row]) -> bool:
    """
    Cell-by-cell equality (value, display text, style, checkbox flag),
    every column included.

    Used to short-circuit a display change that carried nothing new
    (e.g. a selection-only re-render), before any detection runs.
    """
    if len(a) != len(b):
        return False
    for row_a, row_b in zip(a, b):
        if row_a != row_b:
            return False
    return True
