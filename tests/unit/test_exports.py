"""Unit tests for report exports"""

import csv
import io
import json
from datetime import date

import pytest

from accident_analytics.core import exports
from accident_analytics.core.exports import (
    export_csv,
    export_filename,
    export_json,
    export_pdf,
    format_number,
    render_export,
)
from accident_analytics.models.report import AnalysisReport


@pytest.fixture
def report(report_payload):
    return AnalysisReport.model_validate(report_payload)


@pytest.mark.unit
class TestFilenames:
    def test_safe_case_id(self):
        assert export_filename("c-1a2b", "pdf", on=date(2025, 10, 18)) == "ForensicReport_c-1a2b_2025-10-18.pdf"

    def test_unsafe_characters_replaced(self):
        assert export_filename("CASE 2025/77.x", "csv", on=date(2025, 1, 2)) == "ForensicReport_CASE-2025-77-x_2025-01-02.csv"


@pytest.mark.unit
class TestFormatNumber:
    @pytest.mark.parametrize("value, expected", [(90.0, "90"), (22.5, "22.5"), (7, "7"), (0.45, "0.45")])
    def test_format(self, value, expected):
        assert format_number(value) == expected


@pytest.mark.unit
class TestJsonExport:
    def test_reparses_to_equal_report(self, report):
        assert AnalysisReport.model_validate(json.loads(export_json(report))) == report

    def test_idempotent(self, report):
        once = export_json(report)
        twice = export_json(AnalysisReport.model_validate(json.loads(once)))

        assert once == twice


@pytest.mark.unit
class TestCsvExport:
    def test_rows(self, report):
        rows = list(csv.reader(io.StringIO(export_csv(report))))

        assert rows == [
            ["Section", "Key", "Value"],
            ["Executive Summary", "Summary", report.executive_summary],
            ["Liability", "Defendant Fault", "90%"],
            ["Liability", "Rationale", report.liability.rationale],
        ]

    def test_quotes_are_doubled(self, report):
        text = export_csv(report)

        assert '""steady red""' in text


@pytest.mark.unit
class TestPdfExport:
    def test_produces_pdf(self, report):
        content = export_pdf(report, "c-101")

        assert content.startswith(b"%PDF-")

    def test_every_page_has_numbered_footer(self, report, report_payload, monkeypatch):
        footers = []
        original = exports.NumberedCanvas._draw_footer

        def record(canvas, page_count):
            footers.append((canvas.getPageNumber(), page_count))
            original(canvas, page_count)

        monkeypatch.setattr(exports.NumberedCanvas, "_draw_footer", record)
        report_payload["executiveSummary"] = "Long narrative. " * 600
        long_report = AnalysisReport.model_validate(report_payload)

        export_pdf(long_report, "c-101")

        page_count = footers[0][1]
        assert page_count > 1
        assert footers == [(page, page_count) for page in range(1, page_count + 1)]


@pytest.mark.unit
class TestRenderExport:
    @pytest.mark.parametrize("fmt, media_type", [("json", "application/json"), ("csv", "text/csv"), ("pdf", "application/pdf")])
    def test_media_types(self, report, fmt, media_type):
        content, returned_type, filename = render_export(report, "c-101", fmt)

        assert returned_type == media_type
        assert filename.startswith("ForensicReport_c-101_")
        assert filename.endswith(f".{fmt}")
        assert content

    def test_unknown_format(self, report):
        with pytest.raises(ValueError):
            render_export(report, "c-101", "svg")
