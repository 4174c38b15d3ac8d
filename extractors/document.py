"""
Document Extractor: turns an uploaded PDF / DOCX / TXT into bounded
plain text.

Extraction is exposed as an ``ExtractionJob``: an iterator that yields
``ExtractionProgress`` events while it works and holds the final text in
``job.text`` once exhausted.  A job runs once; iterating it again yields
nothing.  ``extract_text`` drains a job for callers that only want the
string (optionally forwarding each event to a callback).
"""

from __future__ import annotations

import io
import logging
import math
from typing import Callable, Iterator, List, Optional, get_args

from docx import Document as DocxDocument
from pypdf import PdfReader

from dto.document import DOCUMENT_KINDS, ExtractionProgress, SourceDocument
from planning.errors import ExtractionFailedError, UnsupportedFormatError

logger = logging.getLogger(__name__)

TRUNCATION_MARKER = "\n\n[...texto truncado por límite de contexto...]"

SUPPORTED_KINDS = get_args(DOCUMENT_KINDS)


def truncate_text(text: str, max_chars: int) -> str:
    """
    Bound *text* to *max_chars* characters, appending ``TRUNCATION_MARKER``
    when anything was cut.

    Applying it twice with the same ceiling returns the same string: the
    first *max_chars* characters of a truncated text are unchanged, so the
    second pass rebuilds the identical value.
    """
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + TRUNCATION_MARKER


def _percentage(done: int, total: int) -> int:
    if total <= 0:
        return 100
    # Round half up, not to even.
    return int(math.floor(done / total * 100 + 0.5))


class ExtractionJob:
    """
    One-shot extraction of a ``SourceDocument``.

    Iterate it to drive the extraction; each yielded item is an
    ``ExtractionProgress``.  After the iterator is exhausted ``text``
    holds the bounded result.
    """

    def __init__(self, doc: SourceDocument, max_chars: int) -> None:
        kind = doc.resolved_kind
        if kind not in SUPPORTED_KINDS:
            raise UnsupportedFormatError(doc.file_name, kind or None)

        self._doc = doc
        self._kind = kind
        self._max_chars = max_chars
        self._text: Optional[str] = None
        self._events = self._run()

    def __iter__(self) -> Iterator[ExtractionProgress]:
        return self

    def __next__(self) -> ExtractionProgress:
        return next(self._events)

    @property
    def text(self) -> str:
        if self._text is None:
            raise RuntimeError("Extraction has not finished yet")
        return self._text

    # ------------------------------------------------------------------
    # Per-format extraction
    # ------------------------------------------------------------------

    def _run(self) -> Iterator[ExtractionProgress]:
        logger.info("Extracting %s (%s, %d bytes)",
                    self._doc.file_name, self._kind, len(self._doc.data))

        parts: List[str] = []
        try:
            if self._kind == "pdf":
                yield from self._extract_pdf(parts)
            else:
                yield ExtractionProgress(units_processed=0, units_total=1, percentage=0)
                if self._kind == "docx":
                    parts.append(self._extract_docx())
                else:
                    parts.append(self._extract_txt())
                yield ExtractionProgress(units_processed=1, units_total=1, percentage=100)
        except ExtractionFailedError:
            raise
        except Exception as exc:
            logger.error("Extraction failed for %s: %s", self._doc.file_name, exc)
            raise ExtractionFailedError(self._doc.file_name, str(exc)) from exc

        full_text = "\n\n".join(parts)
        self._text = truncate_text(full_text, self._max_chars)
        if len(full_text) > self._max_chars:
            logger.warning(
                "  %s truncated: %d -> %d chars",
                self._doc.file_name, len(full_text), self._max_chars,
            )
        logger.info("  -> %d chars extracted from %s", len(self._text), self._doc.file_name)

    def _extract_pdf(self, parts: List[str]) -> Iterator[ExtractionProgress]:
        # Encrypted files without an empty user password fail on first page access.
        reader = PdfReader(io.BytesIO(self._doc.data))
        total = len(reader.pages)
        for i, page in enumerate(reader.pages, start=1):
            parts.append(page.extract_text() or "")
            yield ExtractionProgress(
                units_processed=i,
                units_total=total,
                percentage=_percentage(i, total),
            )

    def _extract_docx(self) -> str:
        document = DocxDocument(io.BytesIO(self._doc.data))
        paragraphs = [p.text for p in document.paragraphs]
        for table in document.tables:
            for row in table.rows:
                for cell in row.cells:
                    paragraphs.extend(p.text for p in cell.paragraphs)
        return "\n\n".join(p for p in paragraphs if p.strip())

    def _extract_txt(self) -> str:
        try:
            return self._doc.data.decode("utf-8-sig")
        except UnicodeDecodeError:
            logger.warning("  %s is not UTF-8, decoding as cp1252", self._doc.file_name)
            return self._doc.data.decode("cp1252", errors="replace")


def extract_text(
    doc: SourceDocument,
    max_chars: int,
    on_progress: Optional[Callable[[ExtractionProgress], None]] = None,
) -> str:
    """Extract *doc* to bounded text, reporting progress to *on_progress*."""
    job = ExtractionJob(doc, max_chars)
    for event in job:
        if on_progress is not None:
            on_progress(event)
    return job.text
