"""Report export — PDF rendering of a validation report."""

import io
import logging
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from tar_validator.services.tar_validation_service import ValidationResult

logger = logging.getLogger(__name__)

HEADER_STYLE = [
    ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
    ("FONTSIZE", (0, 0), (-1, -1), 9),
    ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
]


def _money(value) -> str:
    return f"${float(value or 0):,.2f}"


class ReportExportService:
    """Renders validation results for download."""

    def generate_validation_pdf(self, result: ValidationResult) -> bytes:
        report = result.report
        if report is None:
            raise ValueError("No validation report to export")

        buf = io.BytesIO()
        doc = SimpleDocTemplate(buf, pagesize=letter, topMargin=0.5 * inch)
        styles = getSampleStyleSheet()
        elements = []

        elements.append(Paragraph("TAR Per Diem Validation Report", styles["Title"]))
        elements.append(Spacer(1, 12))

        status = "APPROVED" if result.is_valid else "NEEDS REVIEW"
        info = [
            f"<b>Traveler:</b> {escape(str(report.traveler))}",
            f"<b>Authorization Number:</b> {escape(str(report.authorization_number))}",
            f"<b>Generated:</b> {escape(report.timestamp)}",
            f"<b>Status:</b> {status}",
        ]
        for line in info:
            elements.append(Paragraph(line, styles["Normal"]))
        elements.append(Spacer(1, 12))

        # Cost summary
        elements.append(Paragraph("<b>Cost Analysis</b>", styles["Heading2"]))
        cost_data = [
            ["Metric", "Value"],
            ["Expected Cost", _money(result.expected_cost)],
            ["Claimed Cost", _money(result.claimed_cost)],
            ["Variance", _money(result.variance)],
            ["Variance %", f"{report.variance_percent:.2f}%"],
            ["Within Buffer", "Yes" if report.is_within_buffer else "No"],
            ["Within Deviation", "Yes" if report.is_within_deviation else "No"],
        ]
        table = Table(cost_data, colWidths=[3 * inch, 3 * inch])
        table.setStyle(TableStyle(HEADER_STYLE + [
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#1F3A93")),
            ("ALIGN", (1, 1), (1, -1), "RIGHT"),
        ]))
        elements.append(table)
        elements.append(Spacer(1, 12))

        # Per-stop breakdown
        if result.breakdown:
            elements.append(Paragraph("<b>Per Diem Breakdown</b>", styles["Heading2"]))
            rows = [["Location", "Date", "M&IE", "Lodging", "Daily Total"]]
            for item in result.breakdown:
                rows.append([
                    item["location"],
                    item["date"],
                    _money(item["mie"]),
                    _money(item["lodging"]),
                    _money(item["total"]),
                ])
            table = Table(rows, colWidths=[2 * inch, 1.2 * inch, 1 * inch, 1 * inch, 1.1 * inch])
            table.setStyle(TableStyle(HEADER_STYLE + [
                ("BACKGROUND", (0, 0), (-1, 0), colors.grey),
                ("ALIGN", (2, 1), (-1, -1), "RIGHT"),
            ]))
            elements.append(table)
            elements.append(Spacer(1, 12))

        if report.recommendations or result.warnings:
            elements.append(Paragraph("<b>Recommendations</b>", styles["Heading2"]))
            for rec in report.recommendations:
                elements.append(Paragraph(f"- {escape(rec)}", styles["Normal"]))
            for warning in result.warnings:
                elements.append(Paragraph(f"- {escape(warning)}", styles["Normal"]))

        doc.build(elements)
        logger.debug(f"Rendered validation PDF for {report.traveler}")
        return buf.getvalue()


report_export_service = ReportExportService()
