"""
Per-unit generation orchestrator.

For each requested unit, strictly in order:

    prompt → AI invoke → parse/validate → render spreadsheet

The first failing unit stops the batch.  Units completed before it are
kept in the ``BatchResult``; the failing unit and its exception are
reported alongside them.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from ai.response_parser import parse_plan_response
from ai.service import AIService
from dto.output import BatchResult, GenerationResult, ProcessingState
from dto.plan import GenerationContext, Plan
from planning.errors import PlanningError
from planning.naming import result_file_name
from prompts.planning import SYSTEM_PROMPT, get_unit_prompt
from writers.plan_sheet import render_plan
from writers.template import SpreadsheetTemplate

logger = logging.getLogger(__name__)

StateCallback = Callable[[ProcessingState], None]

# Share of the overall progress bar covered by the unit loop.
_UNITS_PROGRESS_START = 40
_UNITS_PROGRESS_SPAN = 45


class PlanningOrchestrator:
    """Runs prompt → AI → parse → render for every unit of a batch."""

    def __init__(
        self,
        service: AIService,
        template: SpreadsheetTemplate,
        on_state: Optional[StateCallback] = None,
    ) -> None:
        self._service = service
        self._template = template
        self._on_state = on_state

    def generate(
        self,
        book_text: str,
        justification_text: str,
        unit_names: List[str],
        api_key: str,
        *,
        context: Optional[GenerationContext] = None,
        model: Optional[str] = None,
    ) -> BatchResult:
        context = context or GenerationContext()
        batch = BatchResult()

        for i, unit_name in enumerate(unit_names):
            logger.info("=" * 60)
            logger.info("Generating unit %d/%d: %s", i + 1, len(unit_names), unit_name)
            try:
                result = self._generate_unit(
                    book_text,
                    justification_text,
                    unit_name,
                    api_key,
                    context=context,
                    model=model,
                    position=i,
                    total=len(unit_names),
                )
            except PlanningError as exc:
                logger.error("  [Orchestrator] Unit %s failed: %s", unit_name, exc)
                batch.failed_unit = unit_name
                batch.error = exc
                self._publish(
                    "error", 0, f"Error while generating {unit_name}", error=str(exc)
                )
                return batch

            batch.results.append(result)

        count = len(batch.results)
        self._publish(
            "done", 100, f"{count} plan{'s' if count != 1 else ''} generated"
        )
        return batch

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _generate_unit(
        self,
        book_text: str,
        justification_text: str,
        unit_name: str,
        api_key: str,
        *,
        context: GenerationContext,
        model: Optional[str],
        position: int,
        total: int,
    ) -> GenerationResult:
        self._publish(
            "calling_ai",
            self._unit_progress(position + 0.5, total),
            f"Generating plan for {unit_name} with {self._service.provider_name}...",
        )
        prompt = get_unit_prompt(book_text, justification_text, unit_name, context)
        raw = self._service.invoke(SYSTEM_PROMPT, prompt, api_key, model)
        logger.info("  [Orchestrator] Response: %d chars", len(raw))

        plan = parse_plan_response(raw)
        self._check_percentages(unit_name, plan)

        self._publish(
            "rendering",
            self._unit_progress(position + 0.8, total),
            f"Generating spreadsheet for {unit_name}...",
        )
        data = render_plan(plan, self._template)

        return GenerationResult(
            unit_name=unit_name,
            spreadsheet_bytes=data,
            file_name=result_file_name(unit_name, context.subject),
        )

    @staticmethod
    def _check_percentages(unit_name: str, plan: Plan) -> None:
        if not plan.has_valid_percentage_total():
            logger.warning(
                "  [Orchestrator] %s: row percentages add up to %.2f (expected 0.95-1.0)",
                unit_name,
                plan.percentage_total,
            )

    @staticmethod
    def _unit_progress(step: float, total: int) -> int:
        return _UNITS_PROGRESS_START + round(step / total * _UNITS_PROGRESS_SPAN)

    def _publish(
        self, status: str, progress: int, message: str, error: Optional[str] = None
    ) -> None:
        if self._on_state is not None:
            self._on_state(
                ProcessingState(
                    status=status, progress=progress, message=message, error=error
                )
            )
