"""
Auto-SKU propagation: keeps the identifier column in sync with attributes.

All functions mutate the matrix they are given. Callers must own it (or
intend to discard it); snapshots for diffing must be taken beforehand.
"""
import logging
from typing import List, Sequence

from .change_detection import find_changed_rows
from .models import Cell, ColumnDef, ColumnType, Row, SkuSettings, Specification
from .sku_composer import generate_row_sku


logger = logging.getLogger(__name__)


def column_headers(
    columns: Sequence[ColumnDef],
    specifications: Sequence[Specification],
) -> List[str]:
    """
    Header set for composition, one entry per non-identifier column.

    Spec columns resolve to the current name of their bound specification,
    so a renamed specification keeps contributing. Free columns yield ""
    and therefore never contribute, whatever their header says.
    """
    by_id = {spec.id: spec for spec in specifications}
    headers: List[str] = []
    for column in columns[1:]:
        if column.type != ColumnType.SPEC:
            headers.append("")
            continue
        spec = by_id.get(column.spec_id)
        if spec is None:
            logger.warning(
                f"Column '{column.header}' references unknown specification {column.spec_id}"
            )
            headers.append(column.header)
        else:
            headers.append(spec.name)
    return headers


def update_row_sku(
    rows: List[Row],
    row_index: int,
    headers: Sequence[str],
    specifications: Sequence[Specification],
    settings: SkuSettings,
) -> None:
    """
    Recompute the identifier of one row and write it into column 0.

    No-op for an out-of-range row or an empty header set. A row shorter
    than the header set is padded with empty cells first.
    """
    if row_index < 0 or row_index >= len(rows):
        return
    if not headers:
        return

    row = rows[row_index]
    while len(row) < len(headers) + 1:
        row.append(Cell())

    sku = generate_row_sku(row[1:len(headers) + 1], headers, specifications, settings)
    row[0] = Cell(value=sku, display_text=sku, style=row[0].style)


def process_auto_sku(
    old_rows: Sequence[Row],
    new_rows: List[Row],
    headers: Sequence[str],
    specifications: Sequence[Specification],
    settings: SkuSettings,
) -> List[int]:
    """
    Recompute identifiers for the rows that changed between two matrices.

    Mutates new_rows in place and returns the changed row indices.
    """
    changed = find_changed_rows(old_rows, new_rows)
    for row_index in changed:
        update_row_sku(new_rows, row_index, headers, specifications, settings)
    if changed:
        logger.debug(f"Recomputed SKU for rows {changed}")
    return changed


def process_auto_sku_for_all_rows(
    rows: List[Row],
    headers: Sequence[str],
    specifications: Sequence[Specification],
    settings: SkuSettings,
) -> None:
    """Recompute every identifier (bulk loads, settings or fragment changes)."""
    for row_index in range(len(rows)):
        update_row_sku(rows, row_index, headers, specifications, settings)
    logger.debug(f"Recomputed SKU for all {len(rows)} rows")


def _composition_inputs(specifications: Sequence[Specification]) -> dict:
    return {
        spec.id: (
            spec.name,
            spec.order,
            frozenset((v.display_value, v.sku_fragment) for v in spec.values),
        )
        for spec in specifications
    }


def sku_fragments_changed(
    previous: Sequence[Specification],
    current: Sequence[Specification],
) -> bool:
    """
    True when a specification edit can alter a composed SKU.

    Covers a changed fragment, label, name or order, and specifications or
    values being added or removed. Colour-only edits never count.
    """
    return _composition_inputs(previous) != _composition_inputs(current)
