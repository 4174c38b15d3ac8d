from __future__ import annotations

import re
from typing import List

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9áéíóúñÁÉÍÓÚÑ\s]")

DEFAULT_SUBJECT = "Asignatura"


def sanitize_name(value: str) -> str:
    """Drop every character except letters, digits, Spanish accents and spaces."""
    return _UNSAFE_CHARS.sub("", value).strip()


def result_file_name(unit_name: str, subject: str = "") -> str:
    subject = sanitize_name(subject) or DEFAULT_SUBJECT
    return f"Planificación_{sanitize_name(unit_name)}_{subject}.xlsx"


def parse_unit_names(raw: str) -> List[str]:
    """Split a comma-separated unit list ("SA3, SA4") into names."""
    return [name.strip() for name in raw.split(",") if name.strip()]
