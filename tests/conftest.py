import json

import pytest

from dto.document import SourceDocument
from writers.template import SpreadsheetTemplate
from tests.helpers import build_docx, build_pdf, make_plan_dict


@pytest.fixture(autouse=True)
def block_dotenv(monkeypatch):
    """Keep a developer's .env out of the tests."""
    monkeypatch.setattr("dotenv.load_dotenv", lambda *_args, **_kwargs: False)


@pytest.fixture(autouse=True)
def isolate_planner_env(monkeypatch):
    for key in ("PLANNER_AI_PROVIDER", "PLANNER_API_KEY", "PLANNER_SESSION_FILE"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def pdf_document() -> SourceDocument:
    return SourceDocument(
        file_name="libro.pdf", data=build_pdf(["Page one text", "Page two text"])
    )


@pytest.fixture
def docx_document() -> SourceDocument:
    return SourceDocument(
        file_name="justificacion.docx",
        data=build_docx(["Primer parrafo", "Segundo parrafo"]),
    )


@pytest.fixture
def txt_document() -> SourceDocument:
    return SourceDocument(file_name="notas.txt", data="Texto plano del libro".encode())


@pytest.fixture
def plan_json() -> str:
    return json.dumps(make_plan_dict(), ensure_ascii=False)


@pytest.fixture(scope="session")
def template() -> SpreadsheetTemplate:
    return SpreadsheetTemplate.default()
