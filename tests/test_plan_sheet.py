import io

import openpyxl
import pytest

from dto.plan import Plan
from planning.errors import TemplateError
from tests.helpers import make_plan_dict, make_row
from writers.plan_sheet import (
    FIRST_DATA_ROW,
    render_plan,
    run_length_values,
    sheet_title_for,
)
from writers.template import SpreadsheetTemplate


def _render(template, **plan_kwargs):
    plan = Plan.model_validate(make_plan_dict(**plan_kwargs))
    data = render_plan(plan, template)
    wb = openpyxl.load_workbook(io.BytesIO(data))
    return wb.worksheets[0]


class TestMetadata:
    def test_header_cells(self, template):
        ws = _render(template)

        assert ws["B1"].value == "2025-2026"
        assert ws["E1"].value == "3º"
        assert ws["F1"].value == "PRIMARIA"
        assert ws["L1"].value == "A-B-C"
        assert ws["B3"].value == "SA4 Toma tu parte"
        assert ws["B4"].value == "Justificación de la unidad"

    def test_sheet_is_named_after_the_unit(self, template):
        ws = _render(template)

        assert ws.title == "SA4 Toma tu parte"

    def test_long_title_is_cut_to_31_chars(self, template):
        title = "SA9 " + "x" * 36

        ws = _render(template, title=title)

        assert len(title) == 40
        assert ws.title == title[:31]
        assert ws["B3"].value == title


class TestSheetTitle:
    @pytest.mark.parametrize(
        "title, expected",
        [
            ("SA1 [Repaso]: ¿sumas?", "SA1 Repaso ¿sumas"),
            ("", "SA"),
            ("///", "SA"),
            ("a" * 50, "a" * 31),
        ],
    )
    def test_titles(self, title, expected):
        assert sheet_title_for(title) == expected


class TestRunLength:
    def test_runs_are_written_once(self, template):
        rows = [make_row(competenciasClave="X") for _ in range(5)]
        rows.append(make_row(competenciasClave="Y"))

        ws = _render(template, rows=rows)

        column = [ws[f"A{FIRST_DATA_ROW + i}"].value for i in range(6)]
        assert column == ["X", None, None, None, None, "Y"]

    def test_columns_are_compared_independently(self, template):
        rows = [
            make_row(competenciasClave="X", ceMismaArea="1"),
            make_row(competenciasClave="X", ceMismaArea="2"),
            make_row(competenciasClave="Z", ceMismaArea="2"),
        ]

        ws = _render(template, rows=rows)

        assert [ws[f"A{r}"].value for r in (8, 9, 10)] == ["X", None, "Z"]
        assert [ws[f"B{r}"].value for r in (8, 9, 10)] == ["1", "2", None]

    def test_value_returning_after_a_break_is_written_again(self):
        rows = [
            Plan.model_validate(make_plan_dict(rows=[make_row(competenciasClave=v)])).rows[0]
            for v in ("X", "Y", "X")
        ]

        assert run_length_values(rows, "key_competencies") == ["X", "Y", "X"]

    def test_per_row_columns_are_always_written(self, template):
        rows = [make_row(temporizacion="Sesión", porcentaje=0.25) for _ in range(4)]

        ws = _render(template, rows=rows)

        for r in range(FIRST_DATA_ROW, FIRST_DATA_ROW + 4):
            assert ws[f"K{r}"].value == "Sesión"
            assert ws[f"I{r}"].value == pytest.approx(0.25)
            assert ws[f"G{r}"].value == "Resuelve sumas sencillas"
            assert ws[f"N{r}"].value == "Aula"

    def test_column_h_is_left_to_the_template(self, template):
        ws = _render(template)

        assert all(
            ws[f"H{r}"].value is None for r in range(FIRST_DATA_ROW, FIRST_DATA_ROW + 10)
        )

    def test_empty_strings_leave_cells_blank(self, template):
        ws = _render(template, rows=[make_row(ceRelacionada="", recursos="")])

        assert ws["C8"].value is None
        assert ws["M8"].value is None


class TestDua:
    def test_dua_is_written_once_at_o8(self, template):
        ws = _render(template)

        assert ws["O8"].value == "1. Feedback formativo"
        assert all(ws[f"O{r}"].value is None for r in range(9, 18))

    def test_empty_dua_leaves_o8_blank(self, template):
        ws = _render(template, dua="")

        assert ws["O8"].value is None


class TestStyling:
    def test_data_cells_share_one_style(self, template):
        ws = _render(template)

        for coordinate in ("A8", "G8", "I9", "N17", "O8"):
            cell = ws[coordinate]
            assert cell.font.name == "Calibri"
            assert cell.font.size == 9
            assert cell.alignment.wrap_text is True
            assert cell.alignment.vertical == "top"
            assert cell.border.left.style == "thin"
            assert cell.border.bottom.style == "thin"

    def test_suppressed_cells_are_not_styled(self, template):
        ws = _render(template)

        assert ws["A9"].value is None
        assert ws["A9"].border.left.style is None


class TestTemplateErrors:
    def test_unreadable_template(self):
        plan = Plan.model_validate(make_plan_dict())

        with pytest.raises(TemplateError):
            render_plan(plan, SpreadsheetTemplate(b"not a workbook"))

    def test_missing_worksheet(self, template):
        plan = Plan.model_validate(make_plan_dict())

        with pytest.raises(TemplateError, match="Hoja"):
            render_plan(plan, SpreadsheetTemplate(template.data, "Hoja"))

    def test_merged_target_cell(self):
        wb = openpyxl.Workbook()
        wb.active.merge_cells("A1:C1")
        buf = io.BytesIO()
        wb.save(buf)
        plan = Plan.model_validate(make_plan_dict())

        with pytest.raises(TemplateError, match="B1"):
            render_plan(plan, SpreadsheetTemplate(buf.getvalue()))

    def test_missing_template_file(self, tmp_path):
        with pytest.raises(TemplateError):
            SpreadsheetTemplate.from_path(tmp_path / "missing.xlsx")

    def test_each_render_starts_from_a_clean_copy(self, template):
        first = _render(template, rows=[make_row(competenciasClave="X")] * 12)
        second = _render(template, rows=[make_row(competenciasClave="Y")])

        assert first["A19"].value is None
        assert second["A8"].value == "Y"
        assert second["G9"].value is None
