"""
Per-user session settings: API key, provider, verification state and the
model that passed verification.

The settings are an explicit object passed to the pipeline.  They are
loaded from / saved to a small JSON file only at session boundaries (CLI
start and end); nothing else reads or writes the file.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ValidationError

from ai.service import VerificationResult
from config.settings import DEFAULT_PROVIDER

logger = logging.getLogger(__name__)


class SessionSettings(BaseModel):
    teacher_name: str = ""
    api_key: str = ""
    provider: str = DEFAULT_PROVIDER
    is_verified: bool = False
    model: Optional[str] = None  # model that answered during verification


def load_session(path: str | Path) -> SessionSettings:
    """Read settings from *path*; a missing or unreadable file gives defaults."""
    path = Path(path)
    if not path.is_file():
        return SessionSettings()
    try:
        return SessionSettings.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as exc:
        logger.warning("Ignoring unreadable session file %s: %s", path, exc)
        return SessionSettings()


def save_session(settings: SessionSettings, path: str | Path) -> None:
    Path(path).write_text(settings.model_dump_json(indent=2), encoding="utf-8")


def update_session(settings: SessionSettings, **changes) -> SessionSettings:
    """
    Return a copy of *settings* with *changes* applied.

    Changing the API key or the provider invalidates the verification and
    forgets the verified model.
    """
    updated = settings.model_copy(update=changes)
    key_changed = "api_key" in changes and changes["api_key"] != settings.api_key
    provider_changed = "provider" in changes and changes["provider"] != settings.provider
    if key_changed or provider_changed:
        updated = updated.model_copy(update={"is_verified": False, "model": None})
    return updated


def record_verification(
    settings: SessionSettings, result: VerificationResult
) -> SessionSettings:
    return settings.model_copy(
        update={
            "is_verified": result.success,
            "model": result.model if result.success else None,
        }
    )
