"""
Report Exports

Renders an AnalysisReport to the downloadable artifacts: JSON (verbatim
report), CSV (summary rows) and a paginated PDF built with reportlab.
"""

import csv
import io
import re
from datetime import date
from typing import List, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from reportlab.platypus import HRFlowable, Paragraph, SimpleDocTemplate, Spacer

from accident_analytics.models.report import AnalysisReport

EXPORT_FORMATS = ("json", "csv", "pdf")

MEDIA_TYPES = {
    "json": "application/json",
    "csv": "text/csv",
    "pdf": "application/pdf",
}

FOOTER_TEXT = "Generated by AccidentAnalytics v2.0 - Admissible Forensic Evidence"

_UNSAFE_ID_CHARS = re.compile(r"[^a-zA-Z0-9\-_]")


def export_filename(case_id: str, extension: str, on: Optional[date] = None) -> str:
    """ForensicReport_<safe case id>_<YYYY-MM-DD>.<ext>"""
    safe_id = _UNSAFE_ID_CHARS.sub("-", case_id)
    stamp = (on or date.today()).isoformat()
    return f"ForensicReport_{safe_id}_{stamp}.{extension}"


def format_number(value: float) -> str:
    """Integral floats render without a trailing .0"""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def export_json(report: AnalysisReport) -> str:
    return report.to_json()


def export_csv(report: AnalysisReport) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(["Section", "Key", "Value"])
    writer.writerow(["Executive Summary", "Summary", report.executive_summary])
    writer.writerow(["Liability", "Defendant Fault", f"{format_number(report.liability.defendant_percentage)}%"])
    writer.writerow(["Liability", "Rationale", report.liability.rationale])
    return buffer.getvalue().rstrip("\n")


class NumberedCanvas(canvas.Canvas):
    """Canvas that defers page output so each footer knows the page count"""

    def __init__(self, *args, **kwargs):
        canvas.Canvas.__init__(self, *args, **kwargs)
        self._saved_page_states = []

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        page_count = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self._draw_footer(page_count)
            canvas.Canvas.showPage(self)
        canvas.Canvas.save(self)

    def _draw_footer(self, page_count: int):
        self.saveState()
        self.setFont("Helvetica", 8)
        self.setFillColor(colors.grey)
        self.drawString(20 * mm, 10 * mm, f"Page {self._pageNumber} of {page_count} - {FOOTER_TEXT}")
        self.restoreState()


def _pdf_story(report: AnalysisReport, case_id: str, generated_on: date) -> List:
    styles = getSampleStyleSheet()
    title = ParagraphStyle(
        "ReportTitle", parent=styles["Title"], fontSize=18, alignment=0,
        textColor=colors.HexColor("#003264"), spaceAfter=8,
    )
    heading = ParagraphStyle("ReportHeading", parent=styles["Heading2"], fontSize=12, spaceBefore=10, spaceAfter=2)
    body = ParagraphStyle("ReportBody", parent=styles["Normal"], fontSize=10, leading=14)
    strong = ParagraphStyle("ReportStrong", parent=body, fontName="Helvetica-Bold")

    def text(value: str, style=body):
        story.append(Paragraph(escape(value), style))

    def section(name: str):
        story.append(Paragraph(escape(name.upper()), heading))
        story.append(HRFlowable(width="100%", thickness=0.5, color=colors.grey, spaceAfter=4))

    jurisdiction = report.official_docs.jurisdiction if report.official_docs else "N/A"

    story: List = []
    text("ACCIDENT ANALYTICS - FORENSIC REPORT", title)
    text(f"Case Ref: {case_id}")
    text(f"Date Generated: {generated_on.isoformat()}")
    text(f"Jurisdiction: {jurisdiction or 'N/A'}")
    story.append(Spacer(1, 5 * mm))

    section("Executive Summary")
    text(report.executive_summary)

    liability = report.liability
    section("Liability Determination")
    text(f"Defendant Liability: {format_number(liability.defendant_percentage)}%", strong)
    text(f"Plaintiff Liability: {format_number(liability.plaintiff_percentage)}%", strong)
    text("Rationale:", strong)
    text(liability.rationale)
    text(f"Statute Cited: {liability.code_cited}", strong)

    physics = report.physics
    section("Physics Reconstruction")
    text(f"Vehicle A Speed: {format_number(physics.vehicle_a_speed)} mph")
    text(f"Vehicle B Speed: {format_number(physics.vehicle_b_speed)} mph")
    text(f"Impact Angle: {format_number(physics.impact_angle)} degrees")
    text(f"Methodology: {physics.method} (Confidence: {format_number(physics.confidence)}%)")

    if report.human_impact:
        impact = report.human_impact
        section("Human Impact & Biomechanics")
        text(f"Delta-V: {format_number(impact.delta_v)} mph")
        text(f"PDOF: {impact.principal_direction}")
        text(f"Seatbelt Status: {impact.seatbelt_status}")
        text(f"Predicted AIS Score: {format_number(impact.ais_score)}")

    if report.driver_behavior:
        behavior = report.driver_behavior
        section("Driver Behavior Analysis")
        text(f"Risk Percentile: {format_number(behavior.risk_percentile)}th")
        text(f"Detected Actions: {', '.join(behavior.detected_actions)}")
        text(f"Court Recommendation: {behavior.court_recommendation}")

    if report.environmental:
        environment = report.environmental
        section("Environmental Conditions")
        text(f"Weather: {environment.weather_condition}")
        text(f"Road Surface: {environment.road_surface_condition}")
        text(f"Friction Coefficient: {format_number(environment.road_friction_coefficient)}")
        text(f"Notes: {environment.notes}")

    return story


def export_pdf(report: AnalysisReport, case_id: str, generated_on: Optional[date] = None) -> bytes:
    buffer = io.BytesIO()
    document = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=20 * mm,
        rightMargin=20 * mm,
        topMargin=20 * mm,
        bottomMargin=20 * mm,
        title=f"Forensic Report {case_id}",
        author="AccidentAnalytics",
    )
    document.build(_pdf_story(report, case_id, generated_on or date.today()), canvasmaker=NumberedCanvas)
    return buffer.getvalue()


def render_export(report: AnalysisReport, case_id: str, export_format: str):
    """Returns (content, media_type, filename)"""
    if export_format not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format: {export_format}")

    if export_format == "json":
        content = export_json(report)
    elif export_format == "csv":
        content = export_csv(report)
    else:
        content = export_pdf(report, case_id)

    return content, MEDIA_TYPES[export_format], export_filename(case_id, export_format)
