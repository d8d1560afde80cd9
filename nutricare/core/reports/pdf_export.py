"""
Nutrition Report PDF Export

Renders an assembled NutritionReport to a printable PDF: title block,
then one heading and one text block per section, in report order.
"""
import os
from typing import Optional
from xml.sax.saxutils import escape

from reportlab.lib.colors import HexColor
from reportlab.lib.enums import TA_CENTER, TA_LEFT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import KeepTogether, Paragraph, SimpleDocTemplate, Spacer

from nutricare.core.reports.formatting import format_date, format_datetime
from nutricare.core.reports.nutrition_report import NutritionReport
from nutricare.utils import ReportGenerationError, get_logger

logger = get_logger(__name__)


class NutritionReportPdfRenderer:
    """Writes NutritionReport PDFs into an output directory."""

    def __init__(self, output_dir: str = "reports"):
        """Initialize renderer with output directory."""
        self.output_dir = output_dir
        os.makedirs(output_dir, exist_ok=True)

        self._styles = getSampleStyleSheet()
        self._create_custom_styles()
        logger.info(f"NutritionReportPdfRenderer initialized, output: {output_dir}")

    def _create_custom_styles(self):
        """Create custom paragraph styles."""
        if 'ReportTitle' not in self._styles:
            self._styles.add(ParagraphStyle(
                name='ReportTitle',
                parent=self._styles['Title'],
                fontSize=22,
                spaceAfter=18,
                textColor=HexColor("#166534"),
                alignment=TA_CENTER,
                fontName='Helvetica-Bold'
            ))

        if 'SectionHeader' not in self._styles:
            self._styles.add(ParagraphStyle(
                name='SectionHeader',
                parent=self._styles['Heading2'],
                fontSize=14,
                spaceBefore=18,
                spaceAfter=8,
                textColor=HexColor("#1F2937"),
                fontName='Helvetica-Bold'
            ))

        if 'SectionBody' not in self._styles:
            self._styles.add(ParagraphStyle(
                name='SectionBody',
                parent=self._styles['Normal'],
                fontSize=10,
                leading=14,
                alignment=TA_LEFT
            ))

        if 'Caption' not in self._styles:
            self._styles.add(ParagraphStyle(
                name='Caption',
                parent=self._styles['Normal'],
                fontSize=9,
                textColor=HexColor("#6B7280"),
                alignment=TA_CENTER,
                spaceAfter=6
            ))

    def render(self, report: NutritionReport, filename: Optional[str] = None) -> str:
        """
        Render the report and return the PDF path.

        Raises:
            ReportGenerationError: the document could not be built.
        """
        if filename is None:
            stamp = report.report_date.strftime('%Y%m%d-%H%M%S')
            filename = f"NR-{report.patient_id}-{stamp}.pdf"
        filepath = os.path.join(self.output_dir, filename)

        doc = SimpleDocTemplate(
            filepath,
            pagesize=A4,
            rightMargin=0.75*inch,
            leftMargin=0.75*inch,
            topMargin=0.75*inch,
            bottomMargin=0.75*inch,
            title=f"Relatório Nutricional - {report.patient_name}",
        )

        story = [
            Paragraph("Relatório Nutricional", self._styles['ReportTitle']),
            Paragraph(
                f"Paciente: <b>{escape(report.patient_name)}</b> | "
                f"Emitido em: {format_date(report.report_date)} "
                f"({format_datetime(report.report_date)})",
                self._styles['Caption']
            ),
            Spacer(1, 16),
        ]

        for section in report.sections:
            story.append(KeepTogether([
                Paragraph(escape(section.title), self._styles['SectionHeader']),
                Paragraph(self._to_markup(section.content), self._styles['SectionBody']),
            ]))

        try:
            doc.build(story)
        except Exception as e:
            logger.error(f"PDF build failed for patient {report.patient_id}: {e}")
            raise ReportGenerationError(
                f"Failed to render nutrition report PDF: {e}",
                report_type="nutrition_report",
            ) from e

        logger.info(f"Nutrition report PDF written: {filepath}")
        return filepath

    @staticmethod
    def _to_markup(content: str) -> str:
        """Escape section text and keep its line structure."""
        return escape(content.strip()).replace("\n", "<br/>")
