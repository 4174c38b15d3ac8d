"""
DTOs for an AI-generated teaching-unit plan.

The JSON the model is asked to produce uses Spanish keys (``curso``,
``tituloSA``, ``porcentaje`` ...).  Those keys are kept as aliases so the
same models parse the raw response and serialise back to the wire shape
with ``model_dump(by_alias=True)``.

    Plan
      ├─ metadata: PlanMetadata       (header cells of the sheet)
      ├─ rows: List[PlanRow]          (one per session, in order)
      └─ dua: str                     (universal-design notes)

Row fields are coerced leniently: the model output is untrusted free text,
so a missing or oddly-typed field never rejects the whole plan.
"""

from __future__ import annotations

from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Advisory range for the sum of row percentages.
PERCENTAGE_TOTAL_MIN = 0.95
PERCENTAGE_TOTAL_MAX = 1.0
_PERCENTAGE_TOLERANCE = 1e-9


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return "\n".join(_as_text(v) for v in value)
    return str(value)


def _as_fraction(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip().replace(",", ".")
    is_percent = text.endswith("%")
    try:
        number = float(text.rstrip("%").strip())
    except ValueError:
        return 0.0
    return number / 100 if is_percent else number


class GenerationContext(BaseModel):
    """Optional descriptive parameters merged verbatim into the prompt."""

    level: str = ""
    subject: str = ""
    group: str = ""


class PlanMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    academic_year: str = Field(default="", alias="curso")
    level: str = Field(default="", alias="nivel")
    stage: str = Field(default="", alias="etapa")
    group: str = Field(default="", alias="grupo")
    unit_title: str = Field(default="", alias="tituloSA")
    justification: str = Field(default="", alias="justificacion")

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return _as_text(value)


class PlanRow(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    key_competencies: str = Field(default="", alias="competenciasClave")
    same_area_criterion: str = Field(default="", alias="ceMismaArea")
    related_area_criterion: str = Field(default="", alias="ceRelacionada")
    foundational_knowledge: str = Field(default="", alias="sabereBasicos")
    specific_knowledge: str = Field(default="", alias="saberEspecifico")
    evaluation_criteria: str = Field(default="", alias="criteriosEvalSA")
    achievement_indicators: str = Field(default="", alias="indicadoresLogro")
    percentage: float = Field(default=0.0, alias="porcentaje")
    evaluation_instruments: str = Field(default="", alias="instrumentosEval")
    timing: str = Field(default="", alias="temporizacion")
    activities: str = Field(default="", alias="actividades")
    resources: str = Field(default="", alias="recursos")
    space: str = Field(default="", alias="espacio")

    @field_validator("percentage", mode="before")
    @classmethod
    def _coerce_percentage(cls, value: Any) -> float:
        return _as_fraction(value)

    @field_validator(
        "key_competencies",
        "same_area_criterion",
        "related_area_criterion",
        "foundational_knowledge",
        "specific_knowledge",
        "evaluation_criteria",
        "achievement_indicators",
        "evaluation_instruments",
        "timing",
        "activities",
        "resources",
        "space",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return _as_text(value)


class Plan(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    metadata: PlanMetadata
    rows: List[PlanRow]
    dua: str = ""

    @field_validator("dua", mode="before")
    @classmethod
    def _coerce_dua(cls, value: Any) -> str:
        return _as_text(value)

    @property
    def percentage_total(self) -> float:
        return sum(row.percentage for row in self.rows)

    def has_valid_percentage_total(self) -> bool:
        """True when the row percentages add up to the 95%-100% target."""
        return has_valid_percentage_total(self.rows)


def has_valid_percentage_total(rows: List[PlanRow]) -> bool:
    total = sum(row.percentage for row in rows)
    return (
        PERCENTAGE_TOTAL_MIN - _PERCENTAGE_TOLERANCE
        <= total
        <= PERCENTAGE_TOTAL_MAX + _PERCENTAGE_TOLERANCE
    )
