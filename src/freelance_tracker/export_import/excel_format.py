"""Excel export of income reports."""

from typing import Any

import openpyxl  # type: ignore[import-untyped]
from openpyxl.styles import Alignment, Font, PatternFill  # type: ignore[import-untyped]
from openpyxl.utils import get_column_letter  # type: ignore[import-untyped]

from freelance_tracker.core.aggregation import Statistics
from freelance_tracker.export_import.base import (
    DETAIL_HEADERS,
    SUMMARY_HEADERS,
    Exporter,
    detail_rows,
    summary_rows,
)


class ExcelExporter(Exporter):
    """Export income statistics to an Excel workbook."""

    DETAIL_SHEET = "Detail"
    SUMMARY_SHEET = "Summary"

    def get_file_extension(self) -> str:
        """Get Excel file extension.

        Returns:
            '.xlsx'
        """
        return ".xlsx"

    def export_statistics(self, stats: Statistics, **kwargs: Any) -> None:
        """Write a workbook with a detail sheet and a summary sheet.

        Args:
            stats: Aggregated statistics to export
            **kwargs: Additional options
                - date_format (str): strftime format for the date column
                  (default: '%d/%m/%Y')
        """
        self.ensure_output_path()
        date_format = kwargs.get("date_format", "%d/%m/%Y")

        wb = openpyxl.Workbook()
        wb.remove(wb.active)

        detail = [
            {**row, "Date": row["Date"].strftime(date_format)} for row in detail_rows(stats)
        ]
        self._write_sheet(wb, self.DETAIL_SHEET, DETAIL_HEADERS, detail)
        self._write_sheet(wb, self.SUMMARY_SHEET, SUMMARY_HEADERS, summary_rows(stats))

        wb.save(self.output_path)

    def _write_sheet(
        self, wb: Any, title: str, headers: list[str], rows: list[dict[str, Any]]
    ) -> None:
        """Append a sheet with a styled header row and one row per record."""
        ws = wb.create_sheet(title)

        header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
        header_font = Font(bold=True, color="FFFFFF")

        for col, header in enumerate(headers, start=1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.fill = header_fill
            cell.font = header_font
            cell.alignment = Alignment(horizontal="center", vertical="center")

        for row_index, row in enumerate(rows, start=2):
            for col, header in enumerate(headers, start=1):
                ws.cell(row_index, col, row[header])

        for col in range(1, len(headers) + 1):
            ws.column_dimensions[get_column_letter(col)].width = 18
