"""
Excel (.xlsx) persistence layer, built on openpyxl.

One worksheet per sheet. Row 1 holds the column headers, data rows follow.
Cell styles map onto openpyxl fills, fonts and alignments.
"""
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from ..domain.models import EMPTY_STYLE, Cell, CellStyle, Row, Sheet
from .csv_layer import export_value


logger = logging.getLogger(__name__)

_INVALID_TITLE_CHARS = re.compile(r"[\[\]:*?/\\]")
MAX_TITLE_LENGTH = 31
PIXELS_PER_CHAR = 7


@dataclass
class ImportedSheet:
    """Raw worksheet content; rows[0] is the header row."""
    name: str
    rows: List[Row] = field(default_factory=list)


def _hex_to_argb(color: str) -> str:
    return color.lstrip("#").upper()


def _argb_to_hex(color) -> Optional[str]:
    """openpyxl Color -> '#rrggbb' (only explicit RGB colours are kept)."""
    if color is None or getattr(color, "type", None) != "rgb":
        return None
    rgb = color.rgb
    if not isinstance(rgb, str) or len(rgb) < 6:
        return None
    return f"#{rgb[-6:].lower()}"


def safe_sheet_title(name: str, index: int) -> str:
    title = _INVALID_TITLE_CHARS.sub("_", name).strip()[:MAX_TITLE_LENGTH]
    return title or f"Sheet{index + 1}"


class ExcelLayer:
    """Reads and writes sheets as .xlsx workbooks."""

    def _apply_style(self, target, style: CellStyle) -> None:
        if style.bg:
            argb = _hex_to_argb(style.bg)
            target.fill = PatternFill(start_color=argb, end_color=argb, fill_type="solid")
        if style.fc or style.bold or style.italic:
            target.font = Font(
                bold=style.bold,
                italic=style.italic,
                color=_hex_to_argb(style.fc) if style.fc else None,
            )
        if style.align:
            target.alignment = Alignment(horizontal=style.align)

    def _read_style(self, source) -> CellStyle:
        bg = None
        fill = source.fill
        if fill is not None and fill.fill_type == "solid":
            bg = _argb_to_hex(fill.fgColor)

        font = source.font
        fc = _argb_to_hex(font.color) if font is not None else None
        bold = bool(font.bold) if font is not None else False
        italic = bool(font.italic) if font is not None else False

        align = None
        if source.alignment is not None and source.alignment.horizontal in ("left", "center", "right"):
            align = source.alignment.horizontal

        style = CellStyle(bg=bg, fc=fc, bold=bold, italic=italic, align=align)
        return EMPTY_STYLE if style.is_empty() else style

    def write_workbook(self, path: Path, sheets: Sequence[Sheet]) -> None:
        """
        Write every sheet to its own worksheet.

        Raises:
            ValueError: No sheets given
            OSError: File cannot be written
        """
        if not sheets:
            raise ValueError("Nothing to export: no sheets")

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        workbook = Workbook()
        workbook.remove(workbook.active)

        for index, sheet in enumerate(sheets):
            worksheet = workbook.create_sheet(title=safe_sheet_title(sheet.name, index))
            worksheet.append([column.header for column in sheet.columns])

            for row_number, row in enumerate(sheet.rows, start=2):
                for col_number, cell in enumerate(row, start=1):
                    value = cell.value if cell.value is not None else cell.display_text
                    if isinstance(value, bool):
                        value = export_value(value)
                    target = worksheet.cell(row=row_number, column=col_number, value=value)
                    self._apply_style(target, cell.style)

            for col_number, column in enumerate(sheet.columns, start=1):
                if column.width:
                    letter = get_column_letter(col_number)
                    worksheet.column_dimensions[letter].width = column.width / PIXELS_PER_CHAR

        workbook.save(path)
        logger.info(f"Exported {len(sheets)} sheets to {path.name}")

    def read_workbook(self, path: Path) -> List[ImportedSheet]:
        """
        Read every worksheet. Values come back as stored (numbers stay numbers).

        Raises:
            OSError: File cannot be read
            openpyxl / zipfile errors for a corrupt workbook
        """
        path = Path(path)
        workbook = load_workbook(path, data_only=True)
        try:
            result = []
            for worksheet in workbook.worksheets:
                rows: List[Row] = []
                for source_row in worksheet.iter_rows():
                    row: Row = []
                    for source in source_row:
                        style = self._read_style(source)
                        if source.value is None:
                            row.append(Cell(style=style))
                            continue
                        value = source.value
                        if not isinstance(value, (str, int, float, bool)):
                            value = str(value)
                        row.append(Cell(value=value, display_text=export_value(value), style=style))
                    rows.append(row)
                result.append(ImportedSheet(name=worksheet.title, rows=rows))
        finally:
            workbook.close()

        logger.info(f"Read {len(result)} worksheets from {path.name}")
        return result
