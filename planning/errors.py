"""
Exception hierarchy for the planning pipeline.

Every failure that can stop a unit derives from ``PlanningError`` so the
orchestrator can report it uniformly:

    PlanningError
      ├─ UnsupportedFormatError   (document kind not pdf/docx/txt)
      ├─ ExtractionFailedError    (corrupt / encrypted / undecodable file)
      ├─ ProviderError            (transport, auth, quota, empty answer)
      ├─ InvalidAiResponseError   (truncated, malformed or wrong-shaped JSON)
      └─ TemplateError            (unreadable template / missing sheet)
"""

from __future__ import annotations

from typing import Optional


class PlanningError(Exception):
    """Base class for every error raised by the planning pipeline."""


class UnsupportedFormatError(PlanningError):
    def __init__(self, file_name: str, extension: Optional[str] = None):
        self.file_name = file_name
        self.extension = extension
        super().__init__(
            f"Unsupported file format: {extension or '(none)'} ({file_name})"
        )


class ExtractionFailedError(PlanningError):
    def __init__(self, file_name: str, reason: str = ""):
        self.file_name = file_name
        self.reason = reason
        message = f"Could not read {file_name}. Is it corrupt or password protected?"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class ProviderError(PlanningError):
    """
    A provider call failed.

    *code* is the HTTP status when the SDK exposes one (``401``, ``429``,
    ...), otherwise a short symbolic code such as ``"connection"`` or
    ``"empty_response"``.
    """

    def __init__(self, code: object, message: str, provider: str = ""):
        self.code = code
        self.message = message
        self.provider = provider
        prefix = f"[{provider}] " if provider else ""
        super().__init__(f"{prefix}{code}: {message}")


class InvalidAiResponseError(PlanningError):
    TRUNCATED = "truncated"
    MALFORMED = "malformed"
    SCHEMA_VIOLATION = "schema_violation"

    def __init__(self, kind: str, message: str, snippet: str = ""):
        self.kind = kind
        self.snippet = snippet
        if snippet:
            message = f'{message}\n\nStart of the response: "{snippet}..."'
        super().__init__(message)


class TemplateError(PlanningError):
    """The spreadsheet template cannot be used."""
