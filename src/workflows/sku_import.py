"""
Sheet Import Workflow

Bulk import of product rows from external CSV / Excel files with:
- Auto-mapping of file columns onto sheet columns
- Re-layout of every row to the sheet's column arity
- Preview with valid/discarded counts
- Advisory warnings for values unknown to their specification

Identifiers in the file are never trusted: the session recomputes every
SKU after the rows are loaded.
"""

import copy
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ..domain.models import Cell, ColumnDef, ColumnType, Row, Specification, cell_at
from ..domain.sku_composer import cell_text
from ..domain.validation import validate_spec_values
from ..persistence.csv_layer import CSVLayer
from ..persistence.excel_layer import ExcelLayer


logger = logging.getLogger(__name__)


# Accepted header aliases for the identifier column (case-insensitive)
SKU_ALIASES = ["sku", "code", "item_code", "product_code", "sku_code"]

CSV_SUFFIXES = {".csv", ".txt", ".tsv"}
EXCEL_SUFFIXES = {".xlsx", ".xlsm"}


@dataclass
class ImportRow:
    """Single data row from the import file, laid out to the sheet columns."""
    row_number: int  # 1-based line in the file (header = 1)
    cells: Row
    is_valid: bool = False
    warnings: List[str] = field(default_factory=list)


@dataclass
class ImportPreview:
    """Preview results from file parsing and mapping."""
    rows: List[ImportRow]
    total_rows: int
    valid_rows: int
    discarded_rows: int
    column_mapping: Dict[int, int] = field(default_factory=dict)  # file column -> sheet column
    unmapped_headers: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def valid_cells(self) -> List[Row]:
        """Rows ready to be loaded into the sheet."""
        return [row.cells for row in self.rows if row.is_valid]


class SheetImporter:
    """Maps external tabular files onto the columns of one sheet."""

    def __init__(self, columns: Sequence[ColumnDef], specifications: Sequence[Specification]):
        """
        Args:
            columns: Column definitions of the target sheet
            specifications: Specifications of the target sheet
        """
        self.columns = list(columns)
        self.specifications = list(specifications)
        self._spec_names = {spec.id: spec.name for spec in specifications}

    def _column_names(self, column: ColumnDef) -> List[str]:
        names = [column.header.strip().lower()]
        if column.type == ColumnType.SPEC and column.spec_id in self._spec_names:
            names.append(self._spec_names[column.spec_id].strip().lower())
        if column.type == ColumnType.SKU:
            names.extend(SKU_ALIASES)
        return [n for n in names if n]

    def auto_map_columns(self, file_headers: Sequence[str]) -> Dict[int, int]:
        """
        Auto-map file columns to sheet columns by header name.

        A file header matches a sheet column header, the name of the bound
        specification, or (identifier column only) one of SKU_ALIASES.
        Each sheet column is mapped at most once; the first file column wins.

        Returns:
            Dict mapping file column index -> sheet column index
        """
        mapping: Dict[int, int] = {}
        taken = set()

        for file_index, header in enumerate(file_headers):
            key = header.strip().lower()
            if not key:
                continue
            for col_index, column in enumerate(self.columns):
                if col_index in taken:
                    continue
                if key in self._column_names(column):
                    mapping[file_index] = col_index
                    taken.add(col_index)
                    break

        return mapping

    def build_preview(
        self,
        matrix: Sequence[Row],
        column_mapping: Optional[Dict[int, int]] = None,
    ) -> ImportPreview:
        """
        Lay out the data rows of a raw matrix (row 0 = header) to the sheet.

        Args:
            matrix: Raw rows as read from the file
            column_mapping: Optional manual mapping (file column -> sheet column)

        Returns:
            ImportPreview; rows whose mapped cells are all empty are discarded
        """
        if not matrix:
            return ImportPreview(rows=[], total_rows=0, valid_rows=0, discarded_rows=0,
                                 warnings=["File is empty"])

        headers = [cell_text(cell) for cell in matrix[0]]
        if column_mapping is None:
            column_mapping = self.auto_map_columns(headers)

        unmapped = [h for i, h in enumerate(headers) if h and i not in column_mapping]
        warnings: List[str] = []
        if not any(self.columns[c].type == ColumnType.SPEC for c in column_mapping.values()):
            warnings.append("No column of the file matches a specification column")

        import_rows: List[ImportRow] = []
        for row_number, raw_row in enumerate(matrix[1:], start=2):
            cells: Row = [Cell() for _ in self.columns]
            for file_index, col_index in column_mapping.items():
                cells[col_index] = copy.copy(cell_at(raw_row, file_index))

            import_row = ImportRow(row_number=row_number, cells=cells)
            import_row.is_valid = any(
                cell_text(cells[col_index]) for col_index in column_mapping.values()
            )
            import_rows.append(import_row)

        # Unknown values are kept verbatim; they only produce warnings
        valid = [r for r in import_rows if r.is_valid]
        for error in validate_spec_values([r.cells for r in valid], self.columns, self.specifications):
            import_row = valid[error.row]
            message = f"Row {import_row.row_number}: {error.message}"
            import_row.warnings.append(message)
            warnings.append(message)

        preview = ImportPreview(
            rows=import_rows,
            total_rows=len(import_rows),
            valid_rows=len(valid),
            discarded_rows=len(import_rows) - len(valid),
            column_mapping=column_mapping,
            unmapped_headers=unmapped,
            warnings=warnings,
        )
        logger.info(
            f"Import preview: {preview.valid_rows}/{preview.total_rows} rows valid, "
            f"{len(unmapped)} unmapped columns"
        )
        return preview

    def parse_file(self, path: Path, column_mapping: Optional[Dict[int, int]] = None) -> ImportPreview:
        """
        Read a CSV or Excel file (first worksheet) and build the preview.

        Raises:
            ValueError: Unsupported file type
            OSError: File cannot be read
        """
        path = Path(path)
        suffix = path.suffix.lower()

        if suffix in CSV_SUFFIXES:
            matrix = CSVLayer().read_matrix(path)
        elif suffix in EXCEL_SUFFIXES:
            worksheets = ExcelLayer().read_workbook(path)
            matrix = worksheets[0].rows if worksheets else []
        else:
            raise ValueError(f"Unsupported file type: {suffix or path.name}")

        return self.build_preview(matrix, column_mapping)
