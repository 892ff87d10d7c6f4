"""
Advisory validation for data sheets.

Findings are returned as data for display. Nothing here mutates a sheet
or blocks a write: invalid values are stored verbatim.
"""
from typing import Dict, List, Sequence

from .models import (
    ColumnDef,
    ColumnType,
    Row,
    Specification,
    ValidationError,
    ValidationKind,
    cell_at,
)
from .sku_composer import cell_text
from ..utils.error_formatting import ValidationMessages


stale_value_message = ValidationMessages.stale_value
duplicate_sku_message = ValidationMessages.duplicate_sku


def validate_spec_values(
    rows: Sequence[Row],
    columns: Sequence[ColumnDef],
    specifications: Sequence[Specification],
) -> List[ValidationError]:
    """
    Flag spec-column cells whose text is no longer an allowed value.

    Empty cells are valid (unset). Free and identifier columns are never
    checked. Errors come out in row-major scan order.
    """
    by_id = {spec.id: spec for spec in specifications}
    spec_columns = []
    for col_index, column in enumerate(columns):
        if column.type != ColumnType.SPEC:
            continue
        spec = by_id.get(column.spec_id)
        if spec is None:
            continue
        spec_columns.append((col_index, spec, set(spec.display_values())))

    errors: List[ValidationError] = []
    for row_index, row in enumerate(rows):
        for col_index, spec, allowed in spec_columns:
            value = cell_text(cell_at(row, col_index))
            if not value:
                continue
            if value not in allowed:
                errors.append(ValidationError(
                    row=row_index,
                    column=col_index,
                    message=stale_value_message(value, spec.name),
                    kind=ValidationKind.STALE_VALUE,
                ))
    return errors


def find_duplicate_skus(rows: Sequence[Row]) -> List[ValidationError]:
    """
    Flag every row sharing a non-empty identifier with another row.

    Groups are emitted in first-appearance order of the identifier, and
    rows in ascending order within each group.
    """
    groups: Dict[str, List[int]] = {}
    for row_index, row in enumerate(rows):
        sku = cell_text(cell_at(row, 0))
        if sku:
            groups.setdefault(sku, []).append(row_index)

    errors: List[ValidationError] = []
    for sku, members in groups.items():
        if len(members) < 2:
            continue
        message = duplicate_sku_message(sku, members)
        for row_index in members:
            errors.append(ValidationError(
                row=row_index,
                column=0,
                message=message,
                kind=ValidationKind.DUPLICATE_IDENTIFIER,
            ))
    return errors


def validate_sheet(
    rows: Sequence[Row],
    columns: Sequence[ColumnDef],
    specifications: Sequence[Specification],
) -> List[ValidationError]:
    """Stale-value findings first, then duplicate identifiers."""
    return validate_spec_values(rows, columns, specifications) + find_duplicate_skus(rows)


def duplicate_rows(rows: Sequence[Row]) -> set:
    """Indices of rows involved in a duplicate identifier."""
    return {error.row for error in find_duplicate_skus(rows)}
