"""
The planning spreadsheet template.

A ``SpreadsheetTemplate`` wraps the bytes of an ``.xlsx`` whose first
worksheet follows the layout documented in ``writers/plan_sheet.py``.
Callers normally load the school's master template from disk; when none
is available ``build_default_template`` produces an equivalent layout
with openpyxl.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Optional, Tuple

import openpyxl
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from planning.errors import TemplateError

logger = logging.getLogger(__name__)

DEFAULT_SHEET_NAME = "Plantilla"

_HEADER_FONT = Font(name="Calibri", size=9, bold=True)
_HEADER_FILL = PatternFill(start_color="FFD9E1F2", end_color="FFD9E1F2", fill_type="solid")
_THIN = Side(style="thin")
_HEADER_BORDER = Border(left=_THIN, right=_THIN, top=_THIN, bottom=_THIN)

# (coordinate, label) pairs written next to the metadata value cells.
_METADATA_LABELS = [
    ("A1", "CURSO"),
    ("D1", "NIVEL / ETAPA"),
    ("K1", "GRUPO"),
    ("A3", "SITUACIÓN DE APRENDIZAJE"),
    ("A4", "JUSTIFICACIÓN"),
]

# Row 7 column headings, A..O.  O7 is merged across O7:S7.
_COLUMN_HEADINGS = [
    ("COMPETENCIAS CLAVE", 14),
    ("CE MISMA ÁREA", 30),
    ("CE RELACIONADA CON OTRA ÁREA", 26),
    ("SABERES BÁSICOS", 30),
    ("SABER ESPECÍFICO", 24),
    ("CRITERIOS DE EVALUACIÓN SA", 28),
    ("INDICADORES DE LOGRO", 30),
    ("", 4),
    ("%", 7),
    ("INSTRUMENTOS DE EVALUACIÓN", 18),
    ("TEMPORALIZACIÓN", 12),
    ("ACTIVIDADES", 40),
    ("RECURSOS", 18),
    ("ESPACIO", 10),
    ("DUA", 40),
]


class SpreadsheetTemplate:
    """
    Template bytes plus the name of the worksheet to fill.

    When *sheet_name* is ``None`` the first worksheet is used.
    """

    def __init__(self, data: bytes, sheet_name: Optional[str] = None) -> None:
        self.data = data
        self.sheet_name = sheet_name

    @classmethod
    def from_path(
        cls, path: str | Path, sheet_name: Optional[str] = None
    ) -> "SpreadsheetTemplate":
        path = Path(path)
        if not path.is_file():
            raise TemplateError(f"Template not found: {path}")
        return cls(path.read_bytes(), sheet_name)

    @classmethod
    def default(cls) -> "SpreadsheetTemplate":
        return cls(build_default_template(), DEFAULT_SHEET_NAME)

    def load(self) -> Tuple[Workbook, Worksheet]:
        """Open a fresh workbook copy and return it with the target sheet."""
        try:
            wb = openpyxl.load_workbook(io.BytesIO(self.data))
        except Exception as exc:
            raise TemplateError(f"Cannot read template workbook: {exc}") from exc

        if self.sheet_name is not None:
            if self.sheet_name not in wb.sheetnames:
                raise TemplateError(
                    f"Worksheet '{self.sheet_name}' not found in template. "
                    f"Available sheets: {wb.sheetnames}"
                )
            ws = wb[self.sheet_name]
            if not isinstance(ws, Worksheet):
                raise TemplateError(f"'{self.sheet_name}' is not a worksheet")
            return wb, ws

        if not wb.worksheets:
            raise TemplateError("The template has no worksheet")
        return wb, wb.worksheets[0]


def build_default_template() -> bytes:
    """Create the built-in planning layout and return it as .xlsx bytes."""
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = DEFAULT_SHEET_NAME

    for coordinate, label in _METADATA_LABELS:
        cell = ws[coordinate]
        cell.value = label
        cell.font = _HEADER_FONT

    ws.merge_cells("B3:S3")
    ws.merge_cells("B4:S4")
    ws["B4"].alignment = Alignment(wrap_text=True, vertical="top")
    ws.row_dimensions[4].height = 90

    for col, (heading, width) in enumerate(_COLUMN_HEADINGS, start=1):
        letter = get_column_letter(col)
        ws.column_dimensions[letter].width = width
        if not heading:
            continue
        cell = ws.cell(row=7, column=col, value=heading)
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL
        cell.border = _HEADER_BORDER
        cell.alignment = Alignment(wrap_text=True, vertical="center", horizontal="center")
    ws.merge_cells("O7:S7")
    ws.freeze_panes = "A8"

    buf = io.BytesIO()
    wb.save(buf)
    wb.close()
    logger.debug("Built default template: %d bytes", len(buf.getvalue()))
    return buf.getvalue()
