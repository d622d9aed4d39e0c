"""
Rendering helpers for the Gradio pages
"""
from html import escape
from typing import List, Optional

from .config import GOOD_SCORE, PASSING_SCORE, MAX_SCORE
from .models import ClinicalCase, EvaluationResult, StudentInfo
from .timer import format_remaining, is_urgent

MISSING = "—"

ORDERS_PLACEHOLDER = """GUÍA DE RESPUESTA SUGERIDA:

1. IMPRESIÓN DIAGNÓSTICA:
   - Diagnóstico principal y diferenciales.

2. PLAN DE MANEJO:
   - Ayudas diagnósticas (Laboratorios/Imágenes).
   - Tratamiento farmacológico (Medicamento, Dosis, Vía, Frecuencia, Duración).
   - Tratamiento no farmacológico.

3. EDUCACIÓN Y SIGNOS DE ALARMA:
   - Recomendaciones específicas según Res. 3280.
   - Signos por los cuales consultar a urgencias.

4. DEFINICIÓN DE CONDUCTA:
   - Ambulatorio, Observación o Remisión."""


def _or_missing(value: Optional[str]) -> str:
    return value if value and value.strip() else MISSING


def score_tier(score: float) -> str:
    if score >= GOOD_SCORE:
        return "good"
    if score >= PASSING_SCORE:
        return "middling"
    return "poor"


def format_score(score: float) -> str:
    return f"{score:.1f}/{MAX_SCORE:.1f}"


def render_timer(seconds: int) -> str:
    css = "timer urgent" if is_urgent(seconds) else "timer"
    return f'<div class="{css}">{format_remaining(seconds)}</div>'


def render_header(student: Optional[StudentInfo], status: str = "") -> str:
    parts = []
    if student:
        parts.append(f"**{student.name}** · CC: {student.id_number}")
    if status:
        parts.append(f"`{status}`")
    return " | ".join(parts)


def render_error(message: str) -> str:
    return f"⚠️ {message}" if message else ""


def render_case_markdown(case: ClinicalCase) -> str:
    """Case sheet shown next to the order entry."""
    p = case.patient_info
    v = case.vitals
    chips = [
        f"**{p.name}**",
        f"**Edad:** {p.age}",
        f"**Sexo:** {p.gender}",
        f"**Ocupación:** {p.occupation}",
        f"**Aseguradora:** {p.insurance_type}"
    ]
    if p.residence:
        chips.append(f"**Residencia:** {p.residence}")

    return f"""## {case.title}

{" · ".join(chips)}

### Motivo de Consulta
*"{case.chief_complaint}"*

### Enfermedad Actual
{case.history_of_present_illness}

### Antecedentes Personales
{case.past_medical_history}

### Antecedentes Familiares
{_or_missing(case.family_history)}

### Signos Vitales

| TA | FC | FR | T° | SatO2 | Peso | Talla | IMC |
|----|----|----|----|-------|------|-------|-----|
| {_or_missing(v.bp)} | {_or_missing(v.hr)} | {_or_missing(v.rr)} | {_or_missing(v.temp)} | {_or_missing(v.o2)} | {_or_missing(v.weight)} | {_or_missing(v.height)} | {_or_missing(v.bmi)} |

### Examen Físico
{case.physical_exam}

### Paraclínicos
{_or_missing(case.labs_and_images)}

> **Contexto RIAS:** {_or_missing(case.context_hints)}
"""


def _render_list(items: List[str], marker: str) -> str:
    if not items:
        return "<p><em>Sin elementos.</em></p>"
    rows = "".join(f"<li><span>{marker}</span> {escape(item)}</li>" for item in items)
    return f"<ul>{rows}</ul>"


def render_feedback(result: EvaluationResult) -> str:
    tier = score_tier(result.score)
    return f"""<div class="score-card {tier}">
  <span class="score-label">Calificación Global</span>
  <div class="score-value">{format_score(result.score)}</div>
  <p>{escape(result.clinical_summary)}</p>
</div>
<div class="feedback-grid">
  <div class="feedback-box positive">
    <h3>Aspectos Positivos</h3>
    {_render_list(result.positive_aspects, "•")}
  </div>
  <div class="feedback-box improve">
    <h3>Oportunidades de Mejora</h3>
    {_render_list(result.areas_for_improvement, "•")}
  </div>
</div>
<div class="feedback-box recommendations">
  <h3>Recomendaciones Académicas (Res. 3280/2018)</h3>
  {_render_list(result.recommendations, "→")}
</div>"""
