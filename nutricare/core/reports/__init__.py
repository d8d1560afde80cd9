"""
Report Generation Module

Human-readable patient nutrition report:
- NutritionReportAssembler: ordered titled sections from fetched records
- NutritionReportPdfRenderer: printable PDF of an assembled report
"""
from .nutrition_report import (
    NutritionReportAssembler,
    NutritionReport,
    ReportSection,
    LAB_RESULTS_LIMIT,
    CONSULTATIONS_LIMIT,
)
from .pdf_export import NutritionReportPdfRenderer

__all__ = [
    "NutritionReportAssembler",
    "NutritionReport",
    "ReportSection",
    "LAB_RESULTS_LIMIT",
    "CONSULTATIONS_LIMIT",
    "NutritionReportPdfRenderer",
]
