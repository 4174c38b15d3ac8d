"""
Teaching-unit planner: main pipeline and CLI entry point.

Usage:
    python -m planning.pipeline <book> <justification> -u "SA3, SA4" [options]

Two phases per invocation:
  1. Extraction:  book and curriculum justification to bounded text
  2. Generation:  for each unit: prompt → AI → validated plan → .xlsx

The pipeline returns spreadsheet bytes; only the CLI writes files.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Callable, List, Optional

import dotenv

from ai.factory import SUPPORTED_PROVIDERS, get_planning_service
from ai.retry import RetryingService
from ai.service import AIService
from config.session import (
    SessionSettings,
    load_session,
    record_verification,
    save_session,
    update_session,
)
from config.settings import (
    BOOK_MAX_CHARS,
    DEFAULT_GROUP,
    DEFAULT_SESSION_FILE,
    ENV_API_KEY,
    ENV_PROVIDER,
    ENV_SESSION_FILE,
    JUSTIFICATION_MAX_CHARS,
)
from dto.document import ExtractionProgress, SourceDocument
from dto.output import BatchResult, ProcessingState
from dto.plan import GenerationContext
from extractors.document import extract_text
from planning.errors import PlanningError
from planning.naming import parse_unit_names
from planning.orchestrator import PlanningOrchestrator
from writers.template import SpreadsheetTemplate

logger = logging.getLogger(__name__)

StateCallback = Callable[[ProcessingState], None]


class PlanningPipeline:
    """
    Full pipeline: extract both documents once, then generate every unit
    in order with the same two texts.
    """

    def __init__(
        self,
        service: AIService,
        template: Optional[SpreadsheetTemplate] = None,
        on_state: Optional[StateCallback] = None,
    ) -> None:
        self._on_state = on_state
        self._orchestrator = PlanningOrchestrator(
            service, template or SpreadsheetTemplate.default(), on_state
        )

    def run(
        self,
        book: SourceDocument,
        justification: SourceDocument,
        unit_names: List[str],
        session: SessionSettings,
        context: Optional[GenerationContext] = None,
    ) -> BatchResult:
        try:
            self._publish("extracting", 5, "Extracting text from the textbook...")
            book_text = extract_text(
                book,
                BOOK_MAX_CHARS,
                self._progress_reporter("textbook", start=5, span=0.2),
            )

            self._publish("extracting", 30, "Extracting text from the curriculum justification...")
            justification_text = extract_text(
                justification,
                JUSTIFICATION_MAX_CHARS,
                self._progress_reporter("justification", start=30, span=0.1),
            )
        except PlanningError as exc:
            logger.error("Extraction failed: %s", exc)
            self._publish("error", 0, "Error while reading the documents", error=str(exc))
            return BatchResult(error=exc)

        return self._orchestrator.generate(
            book_text,
            justification_text,
            unit_names,
            session.api_key,
            context=context,
            model=session.model,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _progress_reporter(
        self, label: str, start: int, span: float
    ) -> Callable[[ExtractionProgress], None]:
        def report(event: ExtractionProgress) -> None:
            self._publish(
                "extracting",
                start + round(event.percentage * span),
                f"Extracting {label}: page {event.units_processed} of {event.units_total}...",
            )

        return report

    def _publish(
        self, status: str, progress: int, message: str, error: Optional[str] = None
    ) -> None:
        if self._on_state is not None:
            self._on_state(
                ProcessingState(
                    status=status, progress=progress, message=message, error=error
                )
            )


# -------------------------------------------------------------------
# CLI
# -------------------------------------------------------------------

def _log_state(state: ProcessingState) -> None:
    if state.status == "error":
        logger.error("[%3d%%] %s: %s", state.progress, state.message, state.error)
    else:
        logger.info("[%3d%%] %s", state.progress, state.message)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate LOMLOE teaching-unit plans (.xlsx) from a textbook "
        "and a curriculum justification document.",
    )
    parser.add_argument("book", help="Textbook file (.pdf, .docx or .txt)")
    parser.add_argument("justification", help="Curriculum justification file (.pdf, .docx or .txt)")
    parser.add_argument(
        "-u",
        "--units",
        required=True,
        help='Unit(s) to plan, comma separated (e.g. "SA4" or "SA3, SA4, SA5")',
    )
    parser.add_argument("--level", default="", help='Level, e.g. "3º"')
    parser.add_argument("--subject", default="", help='Subject, e.g. "Matemáticas"')
    parser.add_argument("--group", default=DEFAULT_GROUP, help="Group (default: %(default)s)")
    parser.add_argument(
        "--provider",
        choices=SUPPORTED_PROVIDERS,
        default=None,
        help=f"AI provider (default: session value or ${ENV_PROVIDER})",
    )
    parser.add_argument(
        "--api-key",
        default=None,
        help=f"API key (default: session value or ${ENV_API_KEY})",
    )
    parser.add_argument(
        "--template",
        default=None,
        help="Master .xlsx template (default: built-in layout)",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        default=".",
        help="Directory for the generated spreadsheets (default: current directory)",
    )
    parser.add_argument(
        "--session",
        default=None,
        help=f"Session settings file (default: ${ENV_SESSION_FILE} or {DEFAULT_SESSION_FILE})",
    )
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Verify the API key even if the session is already verified",
    )
    parser.add_argument(
        "--retries",
        type=int,
        default=0,
        help="Retry transient provider failures up to N extra times (default: 0)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    dotenv.load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )

    unit_names = parse_unit_names(args.units)
    if not unit_names:
        logger.error("No unit names given")
        return 1

    for path in (args.book, args.justification):
        if not os.path.isfile(path):
            logger.error("File not found: %s", path)
            return 1

    session_path = args.session or os.getenv(ENV_SESSION_FILE, DEFAULT_SESSION_FILE)
    session = load_session(session_path)
    overrides = {}
    provider = args.provider or os.getenv(ENV_PROVIDER)
    if provider:
        overrides["provider"] = provider
    api_key = args.api_key or os.getenv(ENV_API_KEY)
    if api_key:
        overrides["api_key"] = api_key
    session = update_session(session, **overrides)

    service = get_planning_service(session.provider)

    if args.verify or not session.is_verified:
        logger.info("Verifying API key with %s...", session.provider)
        verification = service.ping(session.api_key)
        session = record_verification(session, verification)
        save_session(session, session_path)
        if not verification.success:
            logger.error("API key verification failed: %s", verification.error)
            return 1
        logger.info("API key verified (model: %s)", verification.model or "default")

    if args.retries > 0:
        service = RetryingService(service, attempts=args.retries + 1)

    try:
        template = (
            SpreadsheetTemplate.from_path(args.template)
            if args.template
            else SpreadsheetTemplate.default()
        )
    except PlanningError as exc:
        logger.error("%s", exc)
        return 1

    pipeline = PlanningPipeline(service, template, on_state=_log_state)
    batch = pipeline.run(
        SourceDocument.from_path(args.book),
        SourceDocument.from_path(args.justification),
        unit_names,
        session,
        GenerationContext(level=args.level, subject=args.subject, group=args.group),
    )

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    for result in batch.results:
        out_path = output_dir / result.file_name
        out_path.write_bytes(result.spreadsheet_bytes)
        logger.info("Output written to %s", out_path)

    save_session(session, session_path)

    if not batch.ok:
        logger.error("Stopped at unit %s: %s", batch.failed_unit or "-", batch.error)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
