import pytest

from dto.plan import Plan, PlanRow, has_valid_percentage_total
from tests.helpers import make_plan_dict, make_row


def _rows(percentages):
    return [PlanRow(percentage=p) for p in percentages]


class TestPercentageTotal:
    def test_ten_rows_summing_to_097_are_valid(self):
        rows = _rows([0.1] * 9 + [0.07])

        assert has_valid_percentage_total(rows)

    def test_total_of_080_is_invalid(self):
        assert not has_valid_percentage_total(_rows([0.08] * 10))

    @pytest.mark.parametrize("total, valid", [(0.95, True), (1.0, True), (0.949, False), (1.01, False)])
    def test_bounds_are_inclusive(self, total, valid):
        assert has_valid_percentage_total(_rows([total])) is valid

    def test_float_noise_at_the_upper_bound(self):
        # 0.1 * 10 accumulates to 0.9999999999999999
        assert has_valid_percentage_total(_rows([0.1] * 10))

    def test_plan_helpers(self):
        plan = Plan.model_validate(make_plan_dict())

        assert plan.percentage_total == pytest.approx(1.0)
        assert plan.has_valid_percentage_total()


class TestAliases:
    def test_wire_keys_map_to_fields(self):
        row = PlanRow.model_validate(make_row())

        assert row.key_competencies == "CCL\nSTEM"
        assert row.foundational_knowledge == "BLOQUE 1\nNúmeros"
        assert row.evaluation_instruments == "Observación y participación"

    def test_field_names_are_accepted(self):
        row = PlanRow(timing="Sesión 2", percentage=0.2)

        assert row.model_dump(by_alias=True)["temporizacion"] == "Sesión 2"

    def test_unknown_keys_are_ignored(self):
        plan = Plan.model_validate({**make_plan_dict(), "extra": 1})

        assert not hasattr(plan, "extra")

    def test_metadata_numbers_become_text(self):
        data = make_plan_dict()
        data["metadata"]["curso"] = 2025

        assert Plan.model_validate(data).metadata.academic_year == "2025"
