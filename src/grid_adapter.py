"""
Grid adapter: canonical record model <-> display-grid model.

The display widget consumes and produces a matrix of DisplayCell (or None
for a blank cell). This module is the only translation point between that
format and the canonical Cell rows stored per sheet.

Display format
--------------
value            : cell value (value, falling back to display text)
read_only        : True on the identifier column
dropdown_options : allowed display values of the bound specification
dropdown_colors  : display value -> colour, when the specification has colours
value_color      : colour of the currently selected value, if any
checkbox         : strict boolean value rendered as a checkbox
class_name       : style token, e.g. "bg-[#fce4ec] text-[#dc2626] font-bold"

Round trip: from_display(to_display(rows)) keeps every value and style
flag of non-checkbox cells. Checkbox cells come back as strict booleans
without display text.
"""
import re
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence, Set

from .domain.models import (
    EMPTY_STYLE,
    Cell,
    CellStyle,
    CellValue,
    ColumnDef,
    ColumnType,
    Row,
    Specification,
    cell_at,
)


SKU_COLUMN_BG_COLOR = "#f1f5f9"
DUPLICATE_SKU_BG_COLOR = "#fef3c7"
HIGHLIGHT_COLORS = (SKU_COLUMN_BG_COLOR, DUPLICATE_SKU_BG_COLOR)

_BG_RE = re.compile(r"(?:^|\s)bg-\[([^\]\s]+)\]")
_FC_RE = re.compile(r"(?:^|\s)text-\[([^\]\s]+)\]")
_BOLD_RE = re.compile(r"(?:^|\s)font-bold(?=\s|$)")
_ITALIC_RE = re.compile(r"(?:^|\s)italic(?=\s|$)")
_ALIGN_RE = re.compile(r"(?:^|\s)text-(left|center|right)(?=\s|$)")


@dataclass
class DisplayCell:
    """Cell as exchanged with the display widget."""
    value: CellValue = None
    read_only: bool = False
    class_name: Optional[str] = None
    dropdown_options: Optional[List[str]] = None
    dropdown_colors: Optional[Dict[str, str]] = None
    value_color: Optional[str] = None
    checkbox: bool = False


DisplayMatrix = List[List[Optional[DisplayCell]]]


# ------------------------------------------------------------------
# Style token
# ------------------------------------------------------------------

def style_to_token(style: CellStyle) -> Optional[str]:
    """Serialize a style record to its token string (None when unstyled)."""
    parts = []
    if style.bg:
        parts.append(f"bg-[{style.bg}]")
    if style.fc:
        parts.append(f"text-[{style.fc}]")
    if style.bold:
        parts.append("font-bold")
    if style.italic:
        parts.append("italic")
    if style.align:
        parts.append(f"text-{style.align}")
    return " ".join(parts) or None


def token_to_style(token: Optional[str]) -> CellStyle:
    """Decompose a style token back into discrete flags; unknown parts are ignored."""
    if not token:
        return EMPTY_STYLE
    bg = _BG_RE.search(token)
    fc = _FC_RE.search(token)
    align = _ALIGN_RE.search(token)
    return CellStyle(
        bg=bg.group(1) if bg else None,
        fc=fc.group(1) if fc else None,
        bold=bool(_BOLD_RE.search(token)),
        italic=bool(_ITALIC_RE.search(token)),
        align=align.group(1) if align else None,
    )


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def coerce_checkbox(value: CellValue) -> bool:
    """true/false booleans, "true"/"TRUE" strings and None -> strict bool."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return False


def value_to_text(value: CellValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _column_role(columns: Sequence[ColumnDef], col_index: int) -> ColumnDef:
    if 0 <= col_index < len(columns):
        return columns[col_index]
    return ColumnDef(id=f"col-{col_index}", type=ColumnType.FREE, header="")


def _decorate_spec_cell(display: DisplayCell, spec: Specification) -> None:
    display.dropdown_options = spec.display_values()
    if spec.has_colors():
        colors = {v.display_value: v.color for v in spec.values if v.color}
        display.dropdown_colors = colors
        if display.value is not None:
            display.value_color = colors.get(value_to_text(display.value))


# ------------------------------------------------------------------
# Canonical -> display
# ------------------------------------------------------------------

def to_display(
    rows: Sequence[Row],
    columns: Sequence[ColumnDef],
    specifications: Sequence[Specification],
) -> DisplayMatrix:
    """
    Convert canonical rows into the display matrix.

    Every row is widened to at least the number of columns. Columns past
    the defined ones are treated as free columns.
    """
    specs = {spec.id: spec for spec in specifications}
    matrix: DisplayMatrix = []

    for row in rows:
        display_row: List[Optional[DisplayCell]] = []
        for col_index in range(max(len(row), len(columns))):
            cell = cell_at(row, col_index)
            column = _column_role(columns, col_index)
            spec = specs.get(column.spec_id) if column.type == ColumnType.SPEC else None

            if cell.is_empty() and column.type == ColumnType.FREE:
                display_row.append(None)
                continue
            if cell.is_empty() and column.type == ColumnType.SPEC and spec is None:
                display_row.append(None)
                continue

            value = cell.value if cell.value is not None else cell.display_text
            display = DisplayCell(value=value, class_name=style_to_token(cell.style))

            if cell.is_checkbox:
                display.checkbox = True
                display.value = coerce_checkbox(value)

            if column.type == ColumnType.SKU:
                display.read_only = True
            elif spec is not None:
                _decorate_spec_cell(display, spec)

            display_row.append(display)
        matrix.append(display_row)

    return matrix


# ------------------------------------------------------------------
# Display -> canonical
# ------------------------------------------------------------------

def from_display(matrix: Sequence[Sequence[Optional[DisplayCell]]]) -> List[Row]:
    """Convert a display matrix back into canonical rows."""
    rows: List[Row] = []
    for display_row in matrix:
        row: Row = []
        for display in display_row:
            if display is None:
                row.append(Cell())
                continue

            cell = Cell(style=token_to_style(display.class_name), is_checkbox=display.checkbox)
            if display.value is not None:
                cell.value = display.value
                if not display.checkbox:
                    cell.display_text = value_to_text(display.value)
            row.append(cell)
        rows.append(row)
    return rows


# ------------------------------------------------------------------
# Decorations
# ------------------------------------------------------------------

def apply_duplicate_highlighting(matrix: DisplayMatrix, duplicate_rows: Set[int]) -> DisplayMatrix:
    """
    Tint identifier cells: amber for duplicate rows, slate otherwise.

    Returns a new matrix; only column 0 cells are replaced.
    """
    result: DisplayMatrix = []
    for row_index, display_row in enumerate(matrix):
        new_row = list(display_row)
        if new_row:
            current = new_row[0] or DisplayCell()
            color = DUPLICATE_SKU_BG_COLOR if row_index in duplicate_rows else SKU_COLUMN_BG_COLOR
            style = replace(token_to_style(current.class_name), bg=color)
            new_row[0] = replace(current, read_only=True, class_name=style_to_token(style))
        result.append(new_row)
    return result


def strip_identifier_highlighting(rows: List[Row]) -> None:
    """Remove highlight tints from identifier cells so they are never stored."""
    for row in rows:
        if row and row[0].style.bg in HIGHLIGHT_COLORS:
            row[0].style = replace(row[0].style, bg=None)
