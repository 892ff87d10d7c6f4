"""
Header repair for legacy matrices that carry a header row in row 0.

A canonical header is [SKU, spec names sorted by order...]. Sheets that
already match are returned as the very same object so callers can detect
"nothing repaired" with an identity check.
"""
import dataclasses
import logging
from typing import List, Sequence

from .models import Cell, Row, Sheet, Specification, cell_at
from .sku_composer import cell_text


logger = logging.getLogger(__name__)

SKU_HEADER = "SKU"


def create_header_row(specifications: Sequence[Specification]) -> Row:
    """[SKU, spec1.name, spec2.name, ...] in specification order."""
    header = [Cell.text(SKU_HEADER)]
    for spec in sorted(specifications, key=lambda s: s.order):
        header.append(Cell.text(spec.name))
    return header


def has_valid_header(rows: Sequence[Row]) -> bool:
    """Row 0 exists and its first cell reads 'SKU' (case-insensitive)."""
    if not rows or not rows[0]:
        return False
    return cell_text(rows[0][0]).lower() == SKU_HEADER.lower()


def header_matches_specs(rows: Sequence[Row], specifications: Sequence[Specification]) -> bool:
    """True when row 0 is a header listing every spec name at its ordered position."""
    if not has_valid_header(rows):
        return False
    header = rows[0]
    for index, spec in enumerate(sorted(specifications, key=lambda s: s.order), start=1):
        if index >= len(header):
            return False
        if cell_text(cell_at(header, index)) != spec.name:
            return False
    return True


def repair_sheet_headers(sheet: Sheet, specifications: Sequence[Specification]) -> Sheet:
    """
    Return a sheet whose row 0 is the canonical header.

    - header already matches: the same sheet object, untouched
    - no header at all: a header row is inserted, data shifts down by one
    - stale header (SKU present, names/order drifted): row 0 is replaced
      in place, so data rows keep their indices

    The input sheet is never mutated.
    """
    if header_matches_specs(sheet.rows, specifications):
        return sheet

    header = create_header_row(specifications)
    if has_valid_header(sheet.rows):
        new_rows: List[Row] = [header] + list(sheet.rows[1:])
        logger.info(f"Replaced stale header row of sheet '{sheet.name}'")
    else:
        new_rows = [header] + list(sheet.rows)
        logger.info(f"Inserted missing header row into sheet '{sheet.name}'")

    return dataclasses.replace(sheet, rows=new_rows)


def repair_all_sheet_headers(
    sheets: Sequence[Sheet],
    specifications: Sequence[Specification],
) -> List[Sheet]:
    return [repair_sheet_headers(sheet, specifications) for sheet in sheets]


def needs_header_repair(sheets: Sequence[Sheet], specifications: Sequence[Specification]) -> bool:
    return any(not header_matches_specs(sheet.rows, specifications) for sheet in sheets)
