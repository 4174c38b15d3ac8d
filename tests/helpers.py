"""
Test helpers: in-memory documents, sample plans and a scripted AIService
so no test touches a real provider.
"""

import io
from typing import List, Optional, Sequence, Union

from docx import Document
from pypdf import PdfWriter

from ai.service import AIService
from planning.errors import ProviderError


# --- Documents ---


def build_pdf(page_texts: Sequence[str]) -> bytes:
    """Build a minimal text PDF (Helvetica, one line per page)."""
    page_ids = [4 + 2 * i for i in range(len(page_texts))]
    kids = " ".join(f"{pid} 0 R" for pid in page_ids)
    objects: List[bytes] = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        f"<< /Type /Pages /Kids [{kids}] /Count {len(page_texts)} >>".encode(),
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    for pid, text in zip(page_ids, page_texts):
        objects.append(
            (
                "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
                "/Resources << /Font << /F1 3 0 R >> >> "
                f"/Contents {pid + 1} 0 R >>"
            ).encode()
        )
        stream = f"BT /F1 12 Tf 72 720 Td ({text}) Tj ET".encode("latin-1")
        objects.append(
            f"<< /Length {len(stream)} >>\nstream\n".encode() + stream + b"\nendstream"
        )

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for num, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += f"{num} 0 obj\n".encode() + body + b"\nendobj\n"
    xref_pos = len(out)
    out += f"xref\n0 {len(objects) + 1}\n".encode()
    out += b"0000000000 65535 f \n"
    for off in offsets:
        out += f"{off:010d} 00000 n \n".encode()
    out += (
        f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\n"
        f"startxref\n{xref_pos}\n%%EOF\n"
    ).encode()
    return bytes(out)


def encrypt_pdf(data: bytes, password: str) -> bytes:
    writer = PdfWriter(clone_from=io.BytesIO(data))
    writer.encrypt(password, algorithm="RC4-128")
    buf = io.BytesIO()
    writer.write(buf)
    return buf.getvalue()


def build_docx(paragraphs: Sequence[str]) -> bytes:
    document = Document()
    for text in paragraphs:
        document.add_paragraph(text)
    buf = io.BytesIO()
    document.save(buf)
    return buf.getvalue()


# --- Plans ---


def make_row(**overrides) -> dict:
    row = {
        "competenciasClave": "CCL\nSTEM",
        "ceMismaArea": "1. Comprender textos",
        "ceRelacionada": "",
        "sabereBasicos": "BLOQUE 1\nNúmeros",
        "saberEspecifico": "Sumas",
        "criteriosEvalSA": "1.1. Resolver sumas",
        "indicadoresLogro": "Resuelve sumas sencillas",
        "porcentaje": 0.1,
        "instrumentosEval": "Observación y participación",
        "temporizacion": "Sesión 1",
        "actividades": "Juego de sumas",
        "recursos": "Libro págs. 10 a 12",
        "espacio": "Aula",
    }
    row.update(overrides)
    return row


def make_plan_dict(
    rows: Optional[List[dict]] = None,
    title: str = "SA4 Toma tu parte",
    dua: str = "1. Feedback formativo",
) -> dict:
    if rows is None:
        rows = [
            make_row(temporizacion=f"Sesión {i + 1}", porcentaje=0.1)
            for i in range(10)
        ]
    return {
        "metadata": {
            "curso": "2025-2026",
            "nivel": "3º",
            "etapa": "PRIMARIA",
            "grupo": "A-B-C",
            "tituloSA": title,
            "justificacion": "Justificación de la unidad",
        },
        "rows": rows,
        "dua": dua,
    }


# --- AI service ---


Reply = Union[str, Exception]


class ScriptedService(AIService):
    """
    AIService that replays scripted replies.

    ``replies`` is consumed one per ``invoke``; an Exception entry is
    raised instead of returned.  ``probes`` maps model → bool / Exception
    for ``ping``; unlisted models fail with a 404.
    """

    provider_name = "scripted"

    def __init__(
        self,
        replies: Sequence[Reply] = (),
        probes: Optional[dict] = None,
        candidate_models: Sequence[str] = ("model-a", "model-b"),
    ):
        self._replies = list(replies)
        self._probes = probes or {}
        self.candidate_models = tuple(candidate_models)
        self.calls: List[dict] = []
        self.probed: List[str] = []

    def invoke(self, system_instructions, user_prompt, api_key, model=None):
        self.calls.append(
            {
                "system": system_instructions,
                "prompt": user_prompt,
                "api_key": api_key,
                "model": model,
            }
        )
        reply = self._replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def _probe(self, api_key, model):
        self.probed.append(model)
        outcome = self._probes.get(model, ProviderError(404, "model not found"))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome
