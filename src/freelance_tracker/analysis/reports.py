"""Console reports for statistics, tasks and time entries."""

from typing import Optional

from rich.console import Console  # type: ignore[import-not-found]
from rich.table import Table  # type: ignore[import-not-found]
from rich.text import Text  # type: ignore[import-not-found]

from freelance_tracker.core.aggregation import Statistics, top_projects
from freelance_tracker.core.reconciliation import TaskWithActuals
from freelance_tracker.core.tracker import EntryListing


def format_hours(hours: float) -> str:
    """Hours with two decimals, e.g. ``7.25h``."""
    return f"{hours:.2f}h"


def format_money(amount: float, currency: str = "VND") -> str:
    """Amount rounded to a whole unit with thousands separators."""
    return f"{round(amount):,} {currency}"


def format_diff(diff: float) -> Text:
    """Signed variance colored red when over budget and green when under."""
    if diff > 0:
        return Text(f"+{diff:.2f}h", style="red")
    if diff < 0:
        return Text(f"{diff:.2f}h", style="green")
    return Text("0.00h", style="dim")


class ReportGenerator:
    """Render statistics and task reports on a rich console."""

    def __init__(self, console: Optional[Console] = None, currency: str = "VND"):
        """Initialize report generator.

        Args:
            console: Rich console for output. Creates default if None.
            currency: Currency label for income figures
        """
        self.console = console or Console()
        self.currency = currency

    def dashboard_report(self, stats: Statistics, top_limit: int = 5, title: str = "Dashboard") -> None:
        """Totals, top projects and the daily series of a window.

        Args:
            stats: Statistics to display
            top_limit: Number of projects in the top list
            title: Report heading
        """
        window = stats.window
        self.console.print(f"\n[bold cyan]{title} - {window.start} to {window.end}[/bold cyan]\n")

        overview = Table(show_header=False, box=None, padding=(0, 2))
        overview.add_column(style="dim")
        overview.add_column(style="bold")
        overview.add_row("Projects:", str(stats.total_projects))
        overview.add_row("Active projects:", str(stats.active_projects))
        overview.add_row("Total hours:", format_hours(stats.total_hours))
        overview.add_row("Total income:", format_money(stats.total_income, self.currency))
        self.console.print(overview)
        self.console.print()

        leaders = top_projects(stats, top_limit)
        if leaders:
            project_table = Table(title=f"Top {top_limit} Projects")
            project_table.add_column("Project", style="cyan")
            project_table.add_column("Hours", style="magenta", justify="right")
            project_table.add_column("Income", style="green", justify="right")
            for rollup in leaders:
                project_table.add_row(
                    rollup.project_name,
                    format_hours(rollup.hours),
                    format_money(rollup.income, self.currency),
                )
            self.console.print(project_table)
            self.console.print()

        max_hours = max((bucket.hours for bucket in stats.daily), default=0.0)
        daily_table = Table(title="Daily Hours")
        daily_table.add_column("Date", style="cyan")
        daily_table.add_column("Hours", style="magenta", justify="right")
        daily_table.add_column("Income", style="green", justify="right")
        daily_table.add_column("Bar", style="blue")
        for bucket in stats.daily:
            pct = (bucket.hours / max_hours) * 100 if max_hours > 0 else 0
            daily_table.add_row(
                bucket.date.strftime("%d/%m"),
                format_hours(bucket.hours),
                format_money(bucket.income, self.currency),
                self._create_bar(pct),
            )
        self.console.print(daily_table)

    def income_report(self, stats: Statistics, title: str = "Income") -> None:
        """Per-project income table with totals."""
        window = stats.window
        self.console.print(f"\n[bold cyan]{title} - {window.start} to {window.end}[/bold cyan]\n")

        if not stats.projects:
            self.console.print("[yellow]No time entries found for this period[/yellow]")
            return

        table = Table()
        table.add_column("Project", style="cyan")
        table.add_column("Hours", style="magenta", justify="right")
        table.add_column("Rate/hour", justify="right")
        table.add_column("Income", style="green", justify="right")

        for rollup in sorted(stats.projects, key=lambda r: r.income, reverse=True):
            table.add_row(
                rollup.project_name,
                format_hours(rollup.hours),
                format_money(rollup.hourly_rate, self.currency),
                format_money(rollup.income, self.currency),
            )
        table.add_section()
        table.add_row(
            "[bold]Total[/bold]",
            format_hours(stats.total_hours),
            "",
            format_money(stats.total_income, self.currency),
        )
        self.console.print(table)

    def task_report(self, tasks: list[TaskWithActuals], title: str = "Tasks") -> None:
        """Estimated versus actual hours for each task."""
        if not tasks:
            self.console.print("[yellow]No tasks found[/yellow]")
            return

        table = Table(title=title)
        table.add_column("Task", style="bold")
        table.add_column("Status", style="cyan")
        table.add_column("Estimated", justify="right")
        table.add_column("Actual", style="magenta", justify="right")
        table.add_column("Diff", justify="right")
        table.add_column("Due", style="dim")
        table.add_column("Tags", style="blue")
        table.add_column("ID", style="dim")

        for item in tasks:
            task = item.task
            table.add_row(
                task.name,
                task.status.value,
                format_hours(task.estimated_hours),
                format_hours(item.actual_hours),
                format_diff(item.hours_diff),
                task.due_at.strftime("%Y-%m-%d %H:%M") if task.due_at else "-",
                ", ".join(task.tags) or "-",
                task.id[:8],
            )
        self.console.print(table)

    def entries_report(self, listings: list[EntryListing], title: str = "Time Entries") -> None:
        """Recent time entries with project and task names."""
        if not listings:
            self.console.print("[yellow]No time entries found[/yellow]")
            return

        table = Table(title=title)
        table.add_column("Date", style="cyan")
        table.add_column("Project", style="blue")
        table.add_column("Task", style="bold")
        table.add_column("Hours", style="magenta", justify="right")

        for listing in listings:
            table.add_row(
                listing.entry.start_time.strftime("%d/%m/%Y %H:%M"),
                listing.project_name or "N/A",
                listing.task_name or "N/A",
                format_hours(listing.entry.hours),
            )
        self.console.print(table)

    def _create_bar(self, percentage: float, width: int = 25) -> Text:
        """Create a visual bar for percentage display.

        Args:
            percentage: Percentage value (0-100)
            width: Width of the bar in characters

        Returns:
            Rich Text object with colored bar
        """
        filled = int((percentage / 100) * width)
        empty = width - filled

        bar = Text()
        bar.append("█" * filled, style="blue")
        bar.append("░" * empty, style="dim")

        return bar
