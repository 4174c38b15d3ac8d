from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel


DOCUMENT_KINDS = Literal["pdf", "docx", "txt"]


class SourceDocument(BaseModel):
    """An uploaded document, held in memory until it is extracted."""

    file_name: str
    data: bytes
    kind: Optional[DOCUMENT_KINDS] = None  # detected from the extension when absent

    @classmethod
    def from_path(cls, path: str | Path) -> "SourceDocument":
        path = Path(path)
        return cls(file_name=path.name, data=path.read_bytes())

    @property
    def resolved_kind(self) -> str:
        if self.kind:
            return self.kind
        return Path(self.file_name).suffix.lower().lstrip(".")


class ExtractionProgress(BaseModel):
    units_processed: int
    units_total: int
    percentage: int
