"""
Prompts for teaching-unit plan generation.

``SYSTEM_PROMPT`` is fixed and provider-independent; it defines the JSON
contract the response parser and the sheet writer rely on.
``get_unit_prompt`` builds the per-unit user prompt that embeds the two
extracted documents.
"""

from __future__ import annotations

from typing import Optional

from config.settings import PROMPT_SECTION_MAX_CHARS
from dto.plan import GenerationContext


SYSTEM_PROMPT = """Eres un experto en planificación educativa de la Comunidad Valenciana, España, bajo la normativa LOMLOE.

Tu tarea es generar una planificación completa para una Situación de Aprendizaje (SA) a partir de:
1. El contenido del libro de texto del maestro
2. La justificación curricular proporcionada por la editorial

DEBES devolver un JSON con la siguiente estructura exacta:

{
  "metadata": {
    "curso": "2025-2026",
    "nivel": "3º",
    "etapa": "PRIMARIA",
    "grupo": "A-B-C",
    "tituloSA": "SA4 Título de la situación de aprendizaje",
    "justificacion": "Texto justificativo de la situación de aprendizaje..."
  },
  "rows": [
    {
      "competenciasClave": "CCL\\nSTEM\\nCD\\nCPSAA",
      "ceMismaArea": "1. Competencia específica del área...",
      "ceRelacionada": "Competencia específica de otra área relacionada (vacío si no aplica)",
      "sabereBasicos": "BLOQUE 1\\nNombre del bloque\\nSaberes básicos del bloque...",
      "saberEspecifico": "Saber específico de esta sesión",
      "criteriosEvalSA": "1.1. Criterio de evaluación...",
      "indicadoresLogro": "Indicador de logro observable...",
      "porcentaje": 0.04,
      "instrumentosEval": "Observación y participación",
      "temporizacion": "Sesión 1",
      "actividades": "Descripción detallada de las actividades...",
      "recursos": "Libro págs. 64 a 66",
      "espacio": "Aula"
    }
  ],
  "dua": "1. Feedback formativo para destacar los logros...\\n2. Diferentes medios de representación..."
}

SIGNIFICADO DE LOS CAMPOS DE CADA FILA:
- competenciasClave: competencias clave trabajadas, una abreviatura por línea.
- ceMismaArea: competencia específica del área de la unidad.
- ceRelacionada: competencia específica de otra área relacionada, o vacío.
- sabereBasicos: bloque de saberes básicos (número, nombre y contenidos).
- saberEspecifico: saber concreto que se trabaja en la fila.
- criteriosEvalSA: criterio de evaluación de la SA.
- indicadoresLogro: indicador de logro observable y evaluable.
- porcentaje: peso de la fila en la calificación, en tanto por uno.
- instrumentosEval: instrumento con el que se evalúa.
- temporizacion: sesión en la que se realiza.
- actividades: actividades de la sesión.
- recursos: materiales y páginas del libro.
- espacio: lugar donde se desarrolla (Aula, Patio, Biblioteca...).

Cuando varias filas consecutivas comparten competencias, criterio o bloque de saberes, repite exactamente el mismo texto en cada una.

REGLAS ESTRICTAS:
- Cada fila del array "rows" corresponde a una sesión o sub-bloque de la planificación, en orden temporal.
- Los porcentajes deben ser decimales (ej: 0.04 = 4%, 0.06 = 6%). El total debe sumar entre 0.95 y 1.0.
- Genera entre 8 y 20 filas dependiendo de la complejidad de la unidad.
- Las competencias clave deben seguir las abreviaturas LOMLOE: CCL, CP, STEM, CD, CPSAA, CC, CE, CCEC.
- La temporalización debe seguir el formato "Sesión 1", "Sesión 2", etc.
- Los instrumentos de evaluación pueden ser: Observación y participación, Trabajo en el cuaderno, Trabajo cooperativo, Trabajo en ficha, Evaluación ficha SA, Rúbrica.
- El DUA (Diseño Universal para el Aprendizaje) debe incluir principios de accesibilidad educativa.
- Basa TODA la planificación en el contenido real de los documentos proporcionados. No inventes contenidos que no estén en los documentos.
- El JSON debe ser válido y parseable. No incluyas markdown, solo JSON puro."""


def get_unit_prompt(
    book_text: str,
    justification_text: str,
    unit_name: str,
    context: Optional[GenerationContext] = None,
) -> str:
    """
    Build the user prompt for a single unit.

    Each document section is cut to ``PROMPT_SECTION_MAX_CHARS`` even if
    the extraction ceiling was larger.
    """
    lines = [f'Genera la planificación LOMLOE para la unidad "{unit_name}".']

    if context is not None:
        if context.level:
            lines.append(f"Nivel: {context.level}")
        if context.subject:
            lines.append(f"Asignatura: {context.subject}")
        if context.group:
            lines.append(f"Grupo: {context.group}")

    prompt = "\n".join(lines)
    prompt += (
        "\n\n=== CONTENIDO DEL LIBRO DE TEXTO ===\n"
        f"{book_text[:PROMPT_SECTION_MAX_CHARS]}"
    )
    prompt += (
        "\n\n=== JUSTIFICACIÓN CURRICULAR DE LA EDITORIAL ===\n"
        f"{justification_text[:PROMPT_SECTION_MAX_CHARS]}"
    )
    prompt += (
        "\n\nResponde SOLO con el JSON. Sin markdown, sin explicaciones, "
        "solo el JSON puro."
    )
    return prompt
