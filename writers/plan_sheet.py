"""
Plan-to-Table Mapper: writes a validated ``Plan`` into the template.

Template contract (coordinates are fixed, not computed):

    B1 curso   E1 nivel   F1 etapa   L1 grupo
    B3 título de la SA
    B4 justificación
    row 8+     one row per PlanRow, columns A..N (H left to the template)
    O8         DUA notes, written once

Columns A-F hold "block" values (competencies, criteria, knowledge blocks)
that usually span several sessions.  A value in those columns is only
written when it differs from the previous row's value in the same column,
which reads like a merged cell spanning the run.  Each column is compared
on its own: a row can start a new run in one column while continuing a
run in another.
"""

from __future__ import annotations

import io
import logging
from typing import List, Optional, Tuple, Union

from openpyxl.cell.cell import MergedCell
from openpyxl.styles import Alignment, Border, Font, Side
from openpyxl.workbook.child import INVALID_TITLE_REGEX
from openpyxl.worksheet.worksheet import Worksheet

from dto.plan import Plan, PlanRow
from planning.errors import TemplateError
from writers.template import SpreadsheetTemplate

logger = logging.getLogger(__name__)

SHEET_TITLE_MAX_CHARS = 31
FALLBACK_SHEET_TITLE = "SA"

METADATA_CELLS: List[Tuple[str, str]] = [
    ("academic_year", "B1"),
    ("level", "E1"),
    ("stage", "F1"),
    ("group", "L1"),
    ("unit_title", "B3"),
    ("justification", "B4"),
]

FIRST_DATA_ROW = 8

# Written only when the value starts a new run.
RUN_LENGTH_COLUMNS: List[Tuple[str, str]] = [
    ("key_competencies", "A"),
    ("same_area_criterion", "B"),
    ("related_area_criterion", "C"),
    ("foundational_knowledge", "D"),
    ("specific_knowledge", "E"),
    ("evaluation_criteria", "F"),
]

# Written on every row.
ROW_COLUMNS: List[Tuple[str, str]] = [
    ("achievement_indicators", "G"),
    ("percentage", "I"),
    ("evaluation_instruments", "J"),
    ("timing", "K"),
    ("activities", "L"),
    ("resources", "M"),
    ("space", "N"),
]

DUA_COLUMN = "O"

_CELL_ALIGNMENT = Alignment(wrap_text=True, vertical="top")
_CELL_FONT = Font(name="Calibri", size=9)
_THIN = Side(style="thin")
_CELL_BORDER = Border(left=_THIN, right=_THIN, top=_THIN, bottom=_THIN)

CellValue = Union[str, float]


def sheet_title_for(unit_title: str) -> str:
    """Sheet name for *unit_title*: invalid characters removed, max 31 chars."""
    title = INVALID_TITLE_REGEX.sub("", unit_title).strip()
    return title[:SHEET_TITLE_MAX_CHARS] or FALLBACK_SHEET_TITLE


def run_length_values(
    rows: List[PlanRow], field: str
) -> List[Optional[CellValue]]:
    """
    Values to write for a run-length column, one entry per row.

    ``None`` marks a row that continues the previous row's run.
    """
    out: List[Optional[CellValue]] = []
    previous: Optional[CellValue] = None
    for i, row in enumerate(rows):
        value = getattr(row, field)
        out.append(value if i == 0 or value != previous else None)
        previous = value
    return out


def render_plan(plan: Plan, template: SpreadsheetTemplate) -> bytes:
    """
    Fill *template* with *plan* and return the workbook as .xlsx bytes.

    Raises ``TemplateError`` if the template cannot be opened or the
    target cells are not writable.
    """
    wb, ws = template.load()

    ws.title = sheet_title_for(plan.metadata.unit_title)
    logger.info("  [Writer] Sheet '%s': %d row(s)", ws.title, len(plan.rows))

    for field, coordinate in METADATA_CELLS:
        _set_cell(ws, coordinate, getattr(plan.metadata, field))

    # Written before row 8 is styled so O8 takes the data-cell style.
    if plan.dua:
        _set_cell(ws, f"{DUA_COLUMN}{FIRST_DATA_ROW}", plan.dua)

    run_values = {
        column: run_length_values(plan.rows, field)
        for field, column in RUN_LENGTH_COLUMNS
    }

    for i, row in enumerate(plan.rows):
        row_num = FIRST_DATA_ROW + i

        for _, column in RUN_LENGTH_COLUMNS:
            value = run_values[column][i]
            if value is not None:
                _set_cell(ws, f"{column}{row_num}", value)

        for field, column in ROW_COLUMNS:
            _set_cell(ws, f"{column}{row_num}", getattr(row, field))

        _style_row(ws, row_num)

    buf = io.BytesIO()
    wb.save(buf)
    wb.close()
    return buf.getvalue()


def _set_cell(ws: Worksheet, coordinate: str, value: CellValue) -> None:
    cell = ws[coordinate]
    if isinstance(cell, MergedCell):
        raise TemplateError(
            f"Template cell {coordinate} is inside a merged range and cannot be written"
        )
    # Empty strings leave the template cell blank.
    cell.value = value if value != "" else None


def _style_row(ws: Worksheet, row_num: int) -> None:
    """Apply the uniform cell style to every non-empty cell of a row."""
    for cell in ws[row_num]:
        if isinstance(cell, MergedCell) or cell.value is None:
            continue
        cell.alignment = _CELL_ALIGNMENT
        cell.font = _CELL_FONT
        cell.border = _CELL_BORDER
