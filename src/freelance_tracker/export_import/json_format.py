"""JSON export of income reports."""

import json
from datetime import datetime
from typing import Any

from freelance_tracker.core.aggregation import Statistics
from freelance_tracker.export_import.base import Exporter, detail_rows, summary_rows


class JSONExporter(Exporter):
    """Export income statistics to a JSON document."""

    def get_file_extension(self) -> str:
        """Get JSON file extension.

        Returns:
            '.json'
        """
        return ".json"

    def export_statistics(self, stats: Statistics, **kwargs: Any) -> None:
        """Export detail and summary datasets to a JSON file.

        Args:
            stats: Aggregated statistics to export
            **kwargs: Additional options
                - indent (int): JSON indentation level (default: 2)
                - include_metadata (bool): Include export metadata (default: True)
        """
        self.ensure_output_path()

        export_data: dict[str, Any] = {
            "detail": [
                {**row, "Date": row["Date"].isoformat()} for row in detail_rows(stats)
            ],
            "summary": summary_rows(stats),
        }

        if kwargs.get("include_metadata", True):
            export_data["metadata"] = {
                "export_date": datetime.now().isoformat(),
                "window": {
                    "start": stats.window.start.isoformat(),
                    "end": stats.window.end.isoformat(),
                },
                "total_hours": stats.total_hours,
                "total_income": stats.total_income,
                "format_version": "1.0",
            }

        indent = kwargs.get("indent", 2)
        with open(self.output_path, "w", encoding="utf-8") as f:
            json.dump(export_data, f, indent=indent, ensure_ascii=False)
