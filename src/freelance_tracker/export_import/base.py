"""Base class and shared datasets for exports."""

from abc import ABC, abstractmethod
from datetime import date
from pathlib import Path
from typing import Any, Optional

from freelance_tracker.core.aggregation import Statistics

DETAIL_HEADERS = ["Date", "Project", "Hours", "Rate/hour", "Income"]
SUMMARY_HEADERS = ["Project", "Total hours", "Rate/hour", "Total income"]


def detail_rows(stats: Statistics) -> list[dict[str, Any]]:
    """One row per priced time entry: date, project name, hours, rate, income."""
    return [
        {
            "Date": line.date,
            "Project": line.project_name,
            "Hours": line.hours,
            "Rate/hour": line.hourly_rate,
            "Income": line.income,
        }
        for line in stats.entries
    ]


def summary_rows(stats: Statistics) -> list[dict[str, Any]]:
    """One row per project: name, total hours, rate, total income."""
    return [
        {
            "Project": rollup.project_name,
            "Total hours": rollup.hours,
            "Rate/hour": rollup.hourly_rate,
            "Total income": rollup.income,
        }
        for rollup in stats.projects
    ]


def default_report_name(today: Optional[date] = None, extension: str = ".xlsx") -> str:
    """File name like ``income-report-10-2026.xlsx`` for the current month."""
    today = today or date.today()
    return f"income-report-{today.strftime('%m-%Y')}{extension}"


class Exporter(ABC):
    """Base class for all exporters."""

    def __init__(self, output_path: Path):
        """Initialize exporter.

        Args:
            output_path: Path where exported data will be written
        """
        self.output_path = Path(output_path)

    @abstractmethod
    def export_statistics(self, stats: Statistics, **kwargs: Any) -> None:
        """Write the detail and summary datasets of the statistics.

        Args:
            stats: Aggregated statistics to export
            **kwargs: Format-specific options
        """
        pass

    @abstractmethod
    def get_file_extension(self) -> str:
        """Get the file extension for this format (e.g., '.json', '.xlsx').

        Returns:
            File extension including the dot
        """
        pass

    def ensure_output_path(self) -> None:
        """Ensure the output path's parent directory exists."""
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
