"""
PDF report export for a finished simulation
"""
import io
import os
import re
import tempfile
import time
import logging
from datetime import datetime
from typing import List, NamedTuple, Optional

from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from .config import APP_TITLE, REPORT_TITLE, PASSING_SCORE, MAX_SCORE
from .models import ClinicalCase, EvaluationResult, StudentInfo

logger = logging.getLogger(__name__)

MARGIN = 20 * mm
LEADING_FACTOR = 1.2
BLOCK_PADDING = 2

FONT_REGULAR = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
FONT_MONO = "Courier"

MISSING_VALUE = "N/D"


class ReportDocument(NamedTuple):
    content: bytes
    page_count: int
    footers: List[str]


def footer_text(page: int, total: int) -> str:
    return f"Página {page} de {total} - {APP_TITLE}"


def report_filename(student: StudentInfo, timestamp_ms: Optional[int] = None) -> str:
    """Reporte_Caso_<idNumber>_<epochMillis>.pdf"""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    safe_id = re.sub(r"[^\w-]", "_", student.id_number.strip())
    return f"Reporte_Caso_{safe_id}_{timestamp_ms}.pdf"


class NumberedCanvas(canvas.Canvas):
    """Defers page output so every footer can show the final page count."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states = []
        self.footers = []

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total = len(self._saved_page_states)
        for page, state in enumerate(self._saved_page_states, 1):
            self.__dict__.update(state)
            self.draw_footer(page, total)
            super().showPage()
        super().save()

    def draw_footer(self, page: int, total: int):
        text = footer_text(page, total)
        self.setFont(FONT_REGULAR, 8)
        self.setFillColor(HexColor("#969696"))
        self.drawString(MARGIN, 10 * mm, text)
        self.footers.append(text)


class ReportWriter:
    """Top-down text layout with page breaks checked before every block."""

    def __init__(self, buffer):
        self.page_width, self.page_height = A4
        self.max_line_width = self.page_width - 2 * MARGIN
        self.canvas = NumberedCanvas(buffer, pagesize=A4, invariant=1)
        self.canvas.setTitle(REPORT_TITLE)
        self.y = self.page_height - MARGIN

    @property
    def top(self) -> float:
        return self.page_height - MARGIN

    def new_page(self):
        self.canvas.showPage()
        self.y = self.top

    def check_page_break(self, height_needed: float) -> bool:
        if self.y - height_needed < MARGIN:
            self.new_page()
            return True
        return False

    def wrap(self, text: str, font: str, font_size: float, width: float) -> List[str]:
        lines = []
        for raw_line in (text or "").split("\n"):
            lines.extend(simpleSplit(raw_line, font, font_size, width) or [""])
        return lines

    def add_text(self, text: str, font_size: float = 10, bold: bool = False,
                 color: str = "#000000", indent: float = 0, font: Optional[str] = None):
        font = font or (FONT_BOLD if bold else FONT_REGULAR)
        lines = self.wrap(text, font, font_size, self.max_line_width - indent)
        leading = font_size * LEADING_FACTOR
        block_height = len(lines) * leading + BLOCK_PADDING

        if block_height <= self.top - MARGIN:
            self.check_page_break(block_height)
            self._draw_lines(lines, font, font_size, color, indent, leading)
            self.y -= BLOCK_PADDING
            return

        # Taller than a full page: break line by line
        for line in lines:
            self.check_page_break(leading)
            self._draw_lines([line], font, font_size, color, indent, leading)
        self.y -= BLOCK_PADDING

    def _draw_lines(self, lines, font, font_size, color, indent, leading):
        c = self.canvas
        c.setFont(font, font_size)
        c.setFillColor(HexColor(color))
        for line in lines:
            c.drawString(MARGIN + indent, self.y - font_size, line)
            self.y -= leading

    def add_space(self, height: float):
        self.y -= height

    def add_separator(self):
        self.check_page_break(10 * mm / 2)
        c = self.canvas
        c.setStrokeColor(HexColor("#c8c8c8"))
        c.line(MARGIN, self.y, self.page_width - MARGIN, self.y)
        self.y -= 10 * mm / 2

    def finish(self) -> NumberedCanvas:
        self.canvas.showPage()
        self.canvas.save()
        return self.canvas


def _value(text: Optional[str]) -> str:
    return text.strip() if text and text.strip() else MISSING_VALUE


def vitals_line(clinical_case: ClinicalCase) -> str:
    v = clinical_case.vitals
    return (f"TA: {_value(v.bp)} | FC: {_value(v.hr)} | FR: {_value(v.rr)} | "
            f"T: {_value(v.temp)} | SatO2: {_value(v.o2)} | Peso: {_value(v.weight)} | "
            f"Talla: {_value(v.height)} | IMC: {_value(v.bmi)}")


def build_report(clinical_case: ClinicalCase, student: StudentInfo, orders: str,
                 result: EvaluationResult, generated_at: Optional[datetime] = None) -> ReportDocument:
    """Render the simulation report as a PDF in memory."""
    generated_at = generated_at or datetime.now()
    buffer = io.BytesIO()
    w = ReportWriter(buffer)
    patient = clinical_case.patient_info

    # --- HEADER ---
    w.add_text(REPORT_TITLE, 16, True, "#0369a1")
    w.add_space(2)
    w.add_text(f"Fecha de Generación: {generated_at.strftime('%d/%m/%Y %H:%M:%S')}", 10, False, "#64748b")
    w.add_separator()

    # --- STUDENT INFO ---
    w.add_text("INFORMACIÓN DEL ESTUDIANTE", 12, True, "#333333")
    w.add_text(f"Nombre: {student.name}")
    w.add_text(f"Cédula: {student.id_number}")
    w.add_text(f"Tema Asignado: {clinical_case.topic}", 10, True, "#0ea5e9")
    w.add_space(5)

    # --- CASE DETAILS ---
    w.add_text("DETALLES DEL CASO CLÍNICO", 12, True, "#333333")
    w.add_text(f"Título: {clinical_case.title}", 10, True)
    w.add_text(f"Paciente: {patient.name}, {patient.age}, {patient.gender}.")
    w.add_text(f"Ocupación: {patient.occupation} | Régimen: {patient.insurance_type}")
    if patient.residence:
        w.add_text(f"Residencia: {patient.residence}")
    w.add_space(2)

    w.add_text("Motivo de Consulta:", 10, True)
    w.add_text(clinical_case.chief_complaint, 10, False, "#475569")
    w.add_space(2)

    w.add_text("Enfermedad Actual:", 10, True)
    w.add_text(clinical_case.history_of_present_illness, 10, False, "#475569")
    w.add_space(2)

    w.add_text("Antecedentes:", 10, True)
    w.add_text(f"Personales: {clinical_case.past_medical_history}", 9)
    w.add_text(f"Familiares: {_value(clinical_case.family_history)}", 9)
    w.add_space(2)

    w.add_text("Signos Vitales y Físico:", 10, True)
    w.add_text(vitals_line(clinical_case), 9)
    w.add_text(clinical_case.physical_exam, 9, False, "#475569")
    w.add_space(2)

    w.add_text("Paraclínicos:", 10, True)
    w.add_text(_value(clinical_case.labs_and_images), 9, False, "#475569")
    w.add_separator()

    # --- STUDENT ANSWER ---
    w.add_text("RESPUESTA DEL ESTUDIANTE (ÓRDENES MÉDICAS)", 12, True, "#333333")
    w.add_text(orders or "", 9, False, "#1e293b", font=FONT_MONO)
    w.add_separator()

    # --- EVALUATION ---
    w.add_text("EVALUACIÓN Y RETROALIMENTACIÓN", 12, True, "#333333")
    score_color = "#16a34a" if result.score >= PASSING_SCORE else "#dc2626"
    w.add_text(f"CALIFICACIÓN FINAL: {result.score:.1f} / {MAX_SCORE:.1f}", 14, True, score_color)
    w.add_space(2)

    w.add_text("Resumen de Manejo Ideal:", 10, True)
    w.add_text(result.clinical_summary, 10, False, "#475569")
    w.add_space(4)

    w.add_text("Aspectos Positivos:", 10, True, "#15803d")
    for item in result.positive_aspects:
        w.add_text(f"• {item}", 9, False, "#1e293b", 5)
    w.add_space(2)

    w.add_text("Oportunidades de Mejora:", 10, True, "#c2410c")
    for item in result.areas_for_improvement:
        w.add_text(f"• {item}", 9, False, "#1e293b", 5)
    w.add_space(2)

    w.add_text("Recomendaciones (Res. 3280):", 10, True, "#1d4ed8")
    for item in result.recommendations:
        w.add_text(f"-> {item}", 9, False, "#1e293b", 5)

    finished = w.finish()
    return ReportDocument(buffer.getvalue(), len(finished.footers), list(finished.footers))


def export_report(clinical_case: ClinicalCase, student: StudentInfo, orders: str,
                  result: EvaluationResult, output_dir: Optional[str] = None) -> str:
    """
    Write the report to disk and return its path.

    Without output_dir the file goes into a fresh temporary directory that the
    caller owns and should remove once the file has been served.
    """
    if output_dir is None:
        output_dir = tempfile.mkdtemp(prefix="simulador_reporte_")
    else:
        os.makedirs(output_dir, exist_ok=True)
    filepath = os.path.join(output_dir, report_filename(student))
    document = build_report(clinical_case, student, orders, result)
    with open(filepath, 'wb') as f:
        f.write(document.content)
    logger.info("Exported %d-page report to %s", document.page_count, filepath)
    return filepath
