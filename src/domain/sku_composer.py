"""
SKU composition from selected specification values.

A SKU is built by walking the specifications in ascending `order` and
collecting the fragment of the value selected for each one. Composition
iterates specifications, not columns, so the column layout of a row never
changes the result.
"""
from typing import Dict, List, Mapping, Sequence

from .models import Cell, SkuSettings, Specification


def cell_text(cell: Cell) -> str:
    """
    Text of a cell: value, falling back to display text, else empty.

    Booleans render as "true"/"false" and whole floats without the ".0"
    so that imported numeric cells compare equal to their typed text.
    """
    if cell is None:
        return ""
    raw = cell.value if cell.value is not None else cell.display_text
    if raw is None:
        return ""
    if isinstance(raw, bool):
        return "true" if raw else "false"
    if isinstance(raw, float) and raw.is_integer():
        return str(int(raw))
    return str(raw).strip()


def build_header_value_map(
    row_values: Sequence[Cell],
    column_headers: Sequence[str],
) -> Dict[str, str]:
    """Map header name -> trimmed cell text, skipping empty headers and empty cells."""
    result: Dict[str, str] = {}
    for index, header in enumerate(column_headers):
        if not header:
            continue
        value = cell_text(row_values[index]) if index < len(row_values) else ""
        if value:
            result[header] = value
    return result


def _join_fragments(fragments: List[str], settings: SkuSettings) -> str:
    # No fragments => empty SKU, prefix/suffix are not applied
    if not fragments:
        return ""
    return f"{settings.prefix}{settings.delimiter.join(fragments)}{settings.suffix}"


def generate_row_sku(
    row_values: Sequence[Cell],
    column_headers: Sequence[str],
    specifications: Sequence[Specification],
    settings: SkuSettings,
) -> str:
    """
    Generate the SKU for one data row.

    Args:
        row_values: Cells of the row, identifier cell excluded
        column_headers: Header name for each of those cells
        specifications: Specifications of the sheet
        settings: Delimiter / prefix / suffix

    Returns:
        Composed SKU, or "" when no fragment was contributed
    """
    header_values = build_header_value_map(row_values, column_headers)

    fragments: List[str] = []
    for spec in sorted(specifications, key=lambda s: s.order):
        selected = header_values.get(spec.name)
        if not selected:
            continue
        spec_value = spec.find_value(selected)
        if spec_value is not None and spec_value.sku_fragment:
            fragments.append(spec_value.sku_fragment)

    return _join_fragments(fragments, settings)


def generate_sku(
    selected_values: Mapping[str, str],
    specifications: Sequence[Specification],
    settings: SkuSettings,
) -> str:
    """
    Generate a SKU from a spec id -> selected display value mapping.

    Used where a selection is made outside of a grid row (e.g. a product
    form); same ordering and empty-result rules as generate_row_sku.
    """
    fragments: List[str] = []
    for spec in sorted(specifications, key=lambda s: s.order):
        selected = selected_values.get(spec.id)
        if selected is None:
            continue
        spec_value = spec.find_value(selected)
        if spec_value is not None and spec_value.sku_fragment:
            fragments.append(spec_value.sku_fragment)

    return _join_fragments(fragments, settings)
