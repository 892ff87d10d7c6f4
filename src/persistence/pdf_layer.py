"""
PDF export layer, built on reportlab.

One table per sheet, each sheet on its own page. The header row is shaded
and bold; cell fills, font colours, bold/italic and alignment follow the
stored cell styles. Export only, PDF files are never read back.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, LEGAL, LETTER, landscape, portrait
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..domain.models import CellStyle, Sheet
from .csv_layer import cell_export_text


logger = logging.getLogger(__name__)

PAGE_FORMATS = {"a4": A4, "letter": LETTER, "legal": LEGAL}
HEADER_BG = colors.Color(240 / 255.0, 240 / 255.0, 240 / 255.0)
GRID_COLOR = colors.Color(200 / 255.0, 200 / 255.0, 200 / 255.0)

_ALIGNMENTS = {"left": "LEFT", "center": "CENTRE", "right": "RIGHT"}


@dataclass(frozen=True)
class PDFExportOptions:
    orientation: str = "landscape"   # "landscape" | "portrait"
    page_format: str = "a4"          # "a4" | "letter" | "legal"
    margin_mm: float = 10
    font_size: int = 10
    include_sheet_name: bool = True


def hex_to_rgb(value: Optional[str]) -> Optional[Tuple[int, int, int]]:
    """'#rgb' or '#rrggbb' -> (r, g, b); None for anything else."""
    if not value:
        return None
    digits = value.strip().lstrip("#")
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    if len(digits) != 6:
        return None
    try:
        return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)
    except ValueError:
        return None


def _color(value: Optional[str]) -> Optional[colors.Color]:
    rgb = hex_to_rgb(value)
    if rgb is None:
        return None
    return colors.Color(rgb[0] / 255.0, rgb[1] / 255.0, rgb[2] / 255.0)


def font_name(style: CellStyle) -> str:
    if style.bold and style.italic:
        return "Helvetica-BoldOblique"
    if style.bold:
        return "Helvetica-Bold"
    if style.italic:
        return "Helvetica-Oblique"
    return "Helvetica"


def _cell_commands(style: CellStyle, position: Tuple[int, int]) -> List[tuple]:
    commands = []
    background = _color(style.bg)
    if background is not None:
        commands.append(("BACKGROUND", position, position, background))
    foreground = _color(style.fc)
    if foreground is not None:
        commands.append(("TEXTCOLOR", position, position, foreground))
    if style.bold or style.italic:
        commands.append(("FONTNAME", position, position, font_name(style)))
    if style.align:
        commands.append(("ALIGN", position, position, _ALIGNMENTS[style.align]))
    return commands


class PDFLayer:
    """Writes sheets as printable PDF tables."""

    def __init__(self, options: Optional[PDFExportOptions] = None):
        self.options = options or PDFExportOptions()

    def page_size(self) -> Tuple[float, float]:
        size = PAGE_FORMATS.get(self.options.page_format.lower())
        if size is None:
            raise ValueError(f"Unsupported page format: {self.options.page_format}")
        if self.options.orientation == "portrait":
            return portrait(size)
        return landscape(size)

    def _table(self, sheet: Sheet) -> Table:
        width = max([len(sheet.columns)] + [len(row) for row in sheet.rows])
        data = [[column.header for column in sheet.columns]]
        commands = [
            ("FONTNAME", (0, 0), (-1, -1), "Helvetica"),
            ("FONTSIZE", (0, 0), (-1, -1), self.options.font_size),
            ("GRID", (0, 0), (-1, -1), 0.5, GRID_COLOR),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("BACKGROUND", (0, 0), (-1, 0), HEADER_BG),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ]

        for row_number, row in enumerate(sheet.rows, start=1):
            data.append([cell_export_text(cell) for cell in row])
            for col_number, cell in enumerate(row):
                commands.extend(_cell_commands(cell.style, (col_number, row_number)))

        for record in data:
            record.extend([""] * (width - len(record)))

        table = Table(data, repeatRows=1)
        table.setStyle(TableStyle(commands))
        return table

    def write_sheets(self, path: Path, sheets: Sequence[Sheet]) -> None:
        """
        Write the given sheets to one PDF, a page break between sheets.

        Raises:
            ValueError: No sheets given, or an unknown page format
            OSError: File cannot be written
        """
        if not sheets:
            raise ValueError("Nothing to export: no sheets")

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        heading = getSampleStyleSheet()["Heading2"]
        story = []
        for index, sheet in enumerate(sheets):
            if index:
                story.append(PageBreak())
            if self.options.include_sheet_name:
                story.append(Paragraph(escape(sheet.name), heading))
                story.append(Spacer(1, 3 * mm))
            story.append(self._table(sheet))

        margin = self.options.margin_mm * mm
        document = SimpleDocTemplate(
            str(path),
            pagesize=self.page_size(),
            leftMargin=margin,
            rightMargin=margin,
            topMargin=margin,
            bottomMargin=margin,
            title=sheets[0].name if len(sheets) == 1 else "Sheets",
        )
        document.build(story)
        logger.info(f"Exported {len(sheets)} sheets to {path.name}")
