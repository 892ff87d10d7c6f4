"""
Sheet session: the edit pipeline around the active sheet.

One edit runs to completion before the next one starts:

    display matrix -> from_display -> change detection (vs stored rows)
    -> SKU propagation -> store -> record pre-edit snapshot

Undo/redo, bulk imports and specification/settings changes go through
the same store path. The session owns the history of the active sheet;
any change of active sheet (through the session or the repository) and
any import clears it.
"""
import dataclasses
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..domain.auto_sku import (
    column_headers,
    process_auto_sku,
    process_auto_sku_for_all_rows,
    sku_fragments_changed,
)
from ..domain.change_detection import is_data_equal
from ..domain.header_repair import repair_sheet_headers
from ..domain.history import EditHistory
from ..domain.models import (
    Cell,
    ColumnDef,
    ColumnType,
    Row,
    Sheet,
    SkuSettings,
    Snapshot,
    Specification,
    ValidationError,
    cell_at,
    copy_rows,
)
from ..domain.sku_composer import cell_text
from ..domain.validation import duplicate_rows, validate_sheet
from ..grid_adapter import (
    DisplayMatrix,
    apply_duplicate_highlighting,
    from_display,
    strip_identifier_highlighting,
    to_display,
)
from ..persistence.csv_layer import CSVLayer
from ..persistence.excel_layer import ExcelLayer
from ..persistence.pdf_layer import PDFExportOptions, PDFLayer
from ..repositories import NotFoundError, SheetRepository, generate_id, sku_column
from ..utils.error_formatting import ErrorFormatter
from .sku_import import CSV_SUFFIXES, EXCEL_SUFFIXES, SheetImporter


logger = logging.getLogger(__name__)

DEFAULT_MAX_HISTORY = 100
PDF_SUFFIXES = (".pdf",)


def _identifiers(rows: Sequence[Row]) -> List[str]:
    return [cell_text(cell_at(row, 0)) for row in rows]


def spec_columns(specifications: Sequence[Specification]) -> List[ColumnDef]:
    """Identifier column plus one spec column per specification, in SKU order."""
    columns = [sku_column()]
    for spec in sorted(specifications, key=lambda s: s.order):
        columns.append(ColumnDef(id=generate_id(), type=ColumnType.SPEC, header=spec.name, spec_id=spec.id))
    return columns


class SheetSession:
    """
    Controller for the active sheet of a SheetRepository.

    Responsibilities:
    - Translating display edits into stored rows with fresh identifiers
    - Recording pre-edit snapshots and serving undo/redo
    - Bulk loads (import files, legacy matrices) and exports
    - Recomputing identifiers when specifications or settings change
    """

    def __init__(
        self,
        repository: SheetRepository,
        settings: SkuSettings = SkuSettings(),
        max_history: Optional[int] = DEFAULT_MAX_HISTORY,
    ):
        self.repository = repository
        self.settings = settings
        self._history_sheet_id = repository.active_id
        self.history = EditHistory(
            apply_snapshot=self._apply_snapshot,
            capture_live=self._capture_live,
            max_depth=max_history,
        )

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def sheet(self) -> Sheet:
        sheet = self.repository.active
        if sheet is None:
            raise NotFoundError("No active sheet")
        return sheet

    def _sync_history(self) -> None:
        """Drop the history when the active sheet changed behind the session."""
        active_id = self.repository.active_id
        if active_id != self._history_sheet_id:
            if self.history.snapshots:
                logger.info(f"Active sheet changed to {active_id}; edit history cleared")
            self.history.clear()
            self._history_sheet_id = active_id

    def _headers(self, sheet: Sheet, columns: Optional[Sequence[ColumnDef]] = None) -> List[str]:
        return column_headers(columns if columns is not None else sheet.columns, sheet.specifications)

    def display_matrix(self) -> DisplayMatrix:
        """Display rows of the active sheet, identifier cells tinted."""
        sheet = self.sheet
        matrix = to_display(sheet.rows, sheet.columns, sheet.specifications)
        return apply_duplicate_highlighting(matrix, duplicate_rows(sheet.rows))

    def validation_errors(self) -> List[ValidationError]:
        sheet = self.sheet
        return validate_sheet(sheet.rows, sheet.columns, sheet.specifications)

    # ------------------------------------------------------------------
    # Edit pipeline
    # ------------------------------------------------------------------

    def _commit(
        self,
        new_rows: List[Row],
        columns: Optional[List[ColumnDef]] = None,
        baseline: Optional[List[Row]] = None,
    ) -> List[int]:
        """
        Propagate identifiers into new_rows, store them and record the edit.

        baseline is what change detection compares against; it defaults to
        the stored rows.
        """
        self._sync_history()
        sheet = self.sheet
        pre_edit = Snapshot.capture(sheet.rows, sheet.columns)
        if columns is None:
            columns = sheet.columns

        changed = process_auto_sku(
            sheet.rows if baseline is None else baseline,
            new_rows,
            self._headers(sheet, columns),
            sheet.specifications,
            self.settings,
        )
        self.repository.set_columns(sheet.id, columns)
        self.repository.set_rows(sheet.id, new_rows)

        if changed and not self.history.record_edit(pre_edit):
            logger.debug("Snapshot restore stored without being recorded")
        return changed

    def handle_display_change(self, matrix: DisplayMatrix) -> List[int]:
        """
        Apply a display matrix emitted by the grid widget.

        Returns:
            Indices of rows whose identifier was recomputed ([] for a no-op)
        """
        new_rows = from_display(matrix)
        strip_identifier_highlighting(new_rows)

        # Stored rows in their display-normalised form (padded, checkboxes coerced)
        sheet = self.sheet
        baseline = from_display(to_display(sheet.rows, sheet.columns, sheet.specifications))
        strip_identifier_highlighting(baseline)
        if is_data_equal(new_rows, baseline):
            return []
        return self._commit(new_rows, baseline=baseline)

    def _capture_live(self) -> Snapshot:
        sheet = self.sheet
        return Snapshot.capture(sheet.rows, sheet.columns)

    def _apply_snapshot(self, snapshot: Snapshot) -> None:
        self._commit(copy_rows(snapshot.rows), list(snapshot.columns))

    def undo(self) -> bool:
        self._sync_history()
        return self.history.undo()

    def redo(self) -> bool:
        self._sync_history()
        return self.history.redo()

    @property
    def can_undo(self) -> bool:
        self._sync_history()
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        self._sync_history()
        return self.history.can_redo

    def add_row(self) -> int:
        """Append an empty row of the sheet's arity. Returns its index."""
        sheet = self.sheet
        rows = copy_rows(sheet.rows)
        rows.append([Cell() for _ in sheet.columns])
        self._commit(rows)
        return len(rows) - 1

    def delete_rows(self, indices: Iterable[int]) -> int:
        """Delete rows by index (out-of-range indices are ignored). Returns the count."""
        sheet = self.sheet
        doomed = {i for i in indices if 0 <= i < len(sheet.rows)}
        if not doomed:
            return 0
        rows = copy_rows([row for i, row in enumerate(sheet.rows) if i not in doomed])
        self._commit(rows)
        return len(doomed)

    def switch_sheet(self, sheet_id: str) -> None:
        """Activate another sheet; undo never crosses sheets."""
        self.repository.set_active(sheet_id)
        self.history.clear()
        self._history_sheet_id = sheet_id

    # ------------------------------------------------------------------
    # Bulk recomputation
    # ------------------------------------------------------------------

    def _recompute_all(self, sheet: Sheet, record: bool) -> bool:
        if record:
            self._sync_history()
        pre_edit = Snapshot.capture(sheet.rows, sheet.columns)
        rows = copy_rows(sheet.rows)
        process_auto_sku_for_all_rows(rows, self._headers(sheet), sheet.specifications, self.settings)

        identifiers_changed = _identifiers(rows) != _identifiers(pre_edit.rows)
        self.repository.set_rows(sheet.id, rows)
        if record and identifiers_changed:
            self.history.record_edit(pre_edit)
        return identifiers_changed

    def _unbind_missing_specs(self, sheet: Sheet) -> None:
        dangling = set(SheetRepository.check_bindings(sheet))
        if not dangling:
            return
        columns = [
            dataclasses.replace(c, type=ColumnType.FREE, spec_id=None) if c.id in dangling else c
            for c in sheet.columns
        ]
        self.repository.set_columns(sheet.id, columns)
        logger.info(f"Sheet '{sheet.name}': {len(dangling)} columns lost their specification, now free")

    def update_specifications(self, specifications: List[Specification]) -> bool:
        """
        Replace the specifications of the active sheet.

        Columns bound to a removed specification become free columns. When
        the change can alter composition, every identifier is recomputed.

        Returns:
            True if at least one identifier changed
        """
        sheet = self.sheet
        previous = sheet.specifications
        self.repository.set_specifications(sheet.id, specifications)
        self._unbind_missing_specs(sheet)

        if not sku_fragments_changed(previous, specifications):
            return False
        return self._recompute_all(sheet, record=True)

    def update_settings(self, settings: SkuSettings) -> bool:
        """
        Apply new delimiter / prefix / suffix to every sheet.

        Only the active sheet's change is recorded in history.
        """
        if settings == self.settings:
            return False
        self.settings = settings

        active_changed = False
        for sheet in self.repository.list():
            is_active = sheet.id == self.repository.active_id
            changed = self._recompute_all(sheet, record=is_active)
            active_changed = active_changed or (is_active and changed)
        logger.info(f"SKU settings changed: {settings}")
        return active_changed

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    def _load(self, sheet: Sheet, rows: List[Row]) -> None:
        process_auto_sku_for_all_rows(rows, self._headers(sheet), sheet.specifications, self.settings)
        self.repository.set_rows(sheet.id, rows)
        self.history.clear()
        self._history_sheet_id = self.repository.active_id

    def import_rows(self, rows: List[Row]) -> int:
        """
        Replace the active sheet's rows with a bulk load.

        Rows are widened to the sheet's arity; identifiers are recomputed.
        """
        sheet = self.sheet
        loaded = copy_rows(rows)
        for row in loaded:
            while len(row) < len(sheet.columns):
                row.append(Cell())
        self._load(sheet, loaded)
        logger.info(f"Loaded {len(loaded)} rows into sheet '{sheet.name}'")
        return len(loaded)

    def import_file(self, path: Path, column_mapping: Optional[Dict[int, int]] = None) -> Dict[str, Any]:
        """
        Import a CSV / Excel file into the active sheet.

        Returns:
            {
                "success": bool,
                "imported": int,
                "discarded": int,
                "warnings": [...],
                "errors": [...],
                "error": ErrorContext (only on failure)
            }
        """
        result: Dict[str, Any] = {
            "success": False,
            "imported": 0,
            "discarded": 0,
            "warnings": [],
            "errors": [],
        }
        path = Path(path)
        sheet = self.sheet

        try:
            importer = SheetImporter(sheet.columns, sheet.specifications)
            preview = importer.parse_file(path, column_mapping)
        except Exception as e:
            logger.exception(f"Import of {path.name} failed")
            error_ctx = ErrorFormatter.format_import_error(e, str(path))
            result["errors"].append(error_ctx.message)
            result["error"] = error_ctx
            return result

        result["warnings"] = list(preview.warnings)
        result["discarded"] = preview.discarded_rows
        result["imported"] = self.import_rows(preview.valid_cells())
        result["success"] = True
        return result

    def load_legacy_matrix(
        self,
        name: str,
        matrix: List[Row],
        specifications: List[Specification],
    ) -> Dict[str, Any]:
        """
        Create a sheet from a raw matrix whose row 0 should be a header.

        A missing or stale header is rebuilt from the specifications first,
        then file columns are mapped by header name.
        """
        legacy = Sheet(id=generate_id(), name=name, rows=matrix, specifications=specifications)
        repaired = repair_sheet_headers(legacy, specifications)

        sheet = self.repository.add_sheet(
            name=name,
            columns=spec_columns(specifications),
            specifications=specifications,
        )
        preview = SheetImporter(sheet.columns, specifications).build_preview(repaired.rows)
        self._load(sheet, preview.valid_cells())
        logger.info(f"Loaded legacy sheet '{name}' with {preview.valid_rows} rows")

        return {
            "success": True,
            "sheet_id": sheet.id,
            "header_repaired": repaired is not legacy,
            "imported": preview.valid_rows,
            "discarded": preview.discarded_rows,
            "warnings": list(preview.warnings),
        }

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def _export_sheet(self, sheet: Sheet) -> Sheet:
        """Copy of a sheet whose spec column headers show the current spec names."""
        names = {spec.id: spec.name for spec in sheet.specifications}
        columns = [
            dataclasses.replace(c, header=names[c.spec_id]) if c.spec_id in names else c
            for c in sheet.columns
        ]
        return dataclasses.replace(sheet, columns=columns)

    def export_csv(self, path: Path) -> Path:
        """Write the active sheet to CSV (header line first)."""
        sheet = self._export_sheet(self.sheet)
        CSVLayer().write_matrix(path, sheet.rows, header=[c.header for c in sheet.columns])
        return Path(path)

    def export_excel(self, path: Path) -> Path:
        """Write every sheet to one workbook."""
        ExcelLayer().write_workbook(path, [self._export_sheet(s) for s in self.repository.list()])
        return Path(path)

    def export_pdf(self, path: Path, options: Optional[PDFExportOptions] = None, all_sheets: bool = True) -> Path:
        """Write every sheet (or only the active one) to a PDF, one page per sheet."""
        sheets = self.repository.list() if all_sheets else [self.sheet]
        PDFLayer(options).write_sheets(path, [self._export_sheet(s) for s in sheets])
        return Path(path)

    def export(self, path: Path) -> Path:
        """Dispatch on the file suffix (.csv, .xlsx or .pdf)."""
        suffix = Path(path).suffix.lower()
        if suffix in CSV_SUFFIXES:
            return self.export_csv(path)
        if suffix in EXCEL_SUFFIXES:
            return self.export_excel(path)
        if suffix in PDF_SUFFIXES:
            return self.export_pdf(path)
        raise ValueError(f"Unsupported export type: {suffix or path}")
