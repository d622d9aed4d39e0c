"""Tests for the PDF report exporter"""
import os
import re
from datetime import datetime

from simulador.models import Vitals
from simulador.report import (
    build_report, export_report, report_filename, footer_text, vitals_line, ReportWriter
)

GENERATED_AT = datetime(2024, 5, 17, 10, 30, 0)


class TestBuildReport:

    def test_short_report_is_one_page(self, clinical_case, student, evaluation):
        doc = build_report(clinical_case, student, "Hospitalizar", evaluation, GENERATED_AT)
        assert doc.content.startswith(b"%PDF")
        assert doc.page_count == 1
        assert doc.footers == [footer_text(1, 1)]

    def test_footers_use_final_page_count(self, clinical_case, student, evaluation):
        orders = "\n".join(f"{i}. Orden médica número {i} con indicaciones detalladas" for i in range(250))
        doc = build_report(clinical_case, student, orders, evaluation, GENERATED_AT)

        assert doc.page_count > 1
        assert doc.footers == [footer_text(i, doc.page_count) for i in range(1, doc.page_count + 1)]

    def test_long_feedback_lists_paginate(self, clinical_case, student, evaluation):
        long_result = evaluation.model_copy(update={
            "recommendations": ["Recomendación extensa " * 20] * 60
        })
        doc = build_report(clinical_case, student, "Hospitalizar", long_result, GENERATED_AT)
        assert doc.page_count > 1
        assert doc.footers[-1] == footer_text(doc.page_count, doc.page_count)

    def test_same_session_gives_same_document(self, clinical_case, student, evaluation):
        first = build_report(clinical_case, student, "Hospitalizar", evaluation, GENERATED_AT)
        second = build_report(clinical_case, student, "Hospitalizar", evaluation, GENERATED_AT)
        assert first.content == second.content

    def test_empty_orders_and_lists(self, clinical_case, student, evaluation):
        empty = evaluation.model_copy(update={
            "positive_aspects": [], "areas_for_improvement": [], "recommendations": []
        })
        doc = build_report(clinical_case, student, "", empty, GENERATED_AT)
        assert doc.page_count == 1


class TestPagination:

    def test_block_that_does_not_fit_starts_new_page(self, tmp_path):
        with open(tmp_path / "out.pdf", "wb") as f:
            writer = ReportWriter(f)
            writer.y = 60
            writer.add_text("Primera línea\nSegunda línea\nTercera línea", 12)
            assert writer.y < writer.top
            assert writer.y > writer.top - 60
            canvas = writer.finish()
        assert canvas.footers == [footer_text(1, 2), footer_text(2, 2)]

    def test_wrap_respects_width(self, tmp_path):
        with open(tmp_path / "out.pdf", "wb") as f:
            writer = ReportWriter(f)
            lines = writer.wrap("palabra " * 200, "Helvetica", 10, writer.max_line_width)
            writer.finish()
        assert len(lines) > 1


class TestHelpers:

    def test_filename_pattern(self, student):
        assert report_filename(student, 1700000000000) == "Reporte_Caso_123456789_1700000000000.pdf"

    def test_filename_sanitizes_id(self, student):
        odd = student.model_copy(update={"id_number": "12/34 56"})
        assert report_filename(odd, 1) == "Reporte_Caso_12_34_56_1.pdf"

    def test_vitals_line_marks_missing(self, clinical_case):
        partial = clinical_case.model_copy(update={"vitals": Vitals(bp="120/80")})
        line = vitals_line(partial)
        assert "TA: 120/80" in line
        assert "SatO2: N/D" in line

    def test_export_writes_file(self, clinical_case, student, evaluation, tmp_path):
        path = export_report(clinical_case, student, "Hospitalizar", evaluation, output_dir=str(tmp_path / "reports"))
        assert os.path.exists(path)
        assert re.fullmatch(r"Reporte_Caso_123456789_\d{13}\.pdf", os.path.basename(path))
        with open(path, "rb") as f:
            assert f.read(4) == b"%PDF"
