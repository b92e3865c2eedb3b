"""Export functionality for Freelance Tracker."""

from freelance_tracker.export_import.base import Exporter, detail_rows, summary_rows
from freelance_tracker.export_import.excel_format import ExcelExporter
from freelance_tracker.export_import.json_format import JSONExporter

EXPORTERS = {
    "xlsx": ExcelExporter,
    "json": JSONExporter,
}

__all__ = [
    "EXPORTERS",
    "ExcelExporter",
    "Exporter",
    "JSONExporter",
    "detail_rows",
    "summary_rows",
]
