"""
Top-level output DTOs handed back to the caller.

    BatchResult
      ├─ results: List[GenerationResult]   (one per completed unit, in order)
      ├─ failed_unit: Optional[str]
      └─ error: Optional[PlanningError]    (the exception that stopped the batch)

The pipeline never writes these to disk; persisting ``spreadsheet_bytes``
is the caller's job.
"""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict

from planning.errors import PlanningError


class GenerationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    unit_name: str
    spreadsheet_bytes: bytes
    file_name: str


class BatchResult(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    results: List[GenerationResult] = []
    failed_unit: Optional[str] = None
    error: Optional[PlanningError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


PROCESSING_STATUSES = Literal[
    "idle", "extracting", "calling_ai", "rendering", "done", "error"
]


class ProcessingState(BaseModel):
    """Snapshot of the pipeline's progress, suitable for a progress bar."""

    status: PROCESSING_STATUSES = "idle"
    progress: int = 0  # 0-100
    message: str = ""
    error: Optional[str] = None
