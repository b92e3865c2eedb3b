"""Statistics aggregation over projects and time entries.

``compute_statistics`` is a pure function: it trusts the caller to have
restricted the entries to one owner and the wanted period, and it never
rounds. Presentation code decides how many decimals to show.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional

from freelance_tracker.core.exceptions import ValidationError
from freelance_tracker.core.models import Project, TimeEntry, to_local_naive
from freelance_tracker.core.repository import Repository

# Named dashboard ranges and their length in days
RANGE_DAYS = {
    "week": 7,
    "month": 30,
    "quarter": 90,
}


@dataclass(frozen=True)
class DateWindow:
    """Inclusive range of calendar days."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValidationError(f"Window end {self.end} is before start {self.start}")

    @classmethod
    def last_days(cls, days: int, today: Optional[date] = None) -> "DateWindow":
        """Window of ``days`` calendar days ending today.

        Raises:
            ValidationError: If days is less than 1
        """
        if days < 1:
            raise ValidationError("A date window must span at least one day")
        today = today or date.today()
        return cls(today - timedelta(days=days - 1), today)

    @classmethod
    def for_range(cls, range_name: str, today: Optional[date] = None) -> "DateWindow":
        """Window for a named dashboard range (week, month, quarter)."""
        if range_name not in RANGE_DAYS:
            raise ValidationError(
                f"Unknown range '{range_name}'. Choose from: {', '.join(RANGE_DAYS)}"
            )
        return cls.last_days(RANGE_DAYS[range_name], today)

    @classmethod
    def between(cls, start: date, end: date) -> "DateWindow":
        return cls(start, end)

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    @property
    def start_datetime(self) -> datetime:
        return datetime.combine(self.start, time.min)

    @property
    def end_datetime(self) -> datetime:
        return datetime.combine(self.end, time.max)

    def dates(self) -> list[date]:
        return [self.start + timedelta(days=offset) for offset in range(self.days)]


@dataclass
class ProjectRollup:
    """Hours and income summed for one project."""

    project_id: str
    project_name: str
    hourly_rate: float
    hours: float = 0.0
    income: float = 0.0


@dataclass
class DayBucket:
    """Hours and income summed for one calendar day."""

    date: date
    hours: float = 0.0
    income: float = 0.0

    @property
    def key(self) -> str:
        return self.date.isoformat()


@dataclass(frozen=True)
class EntryIncome:
    """One time entry priced at its project's current rate."""

    entry_id: str
    date: date
    project_id: str
    project_name: str
    hours: float
    hourly_rate: float
    income: float


@dataclass
class Statistics:
    """Aggregated hours and income for a set of time entries.

    Attributes:
        window: Days covered by ``daily``
        total_hours: Hours over every entry with a known project
        total_income: Income over every entry with a known project
        total_projects: Number of projects supplied
        active_projects: Number of supplied projects that are active
        projects: Per-project rollups in first-seen order
        daily: One bucket per day of the window, ascending
        entries: Per-entry income lines for detail views and exports
    """

    window: DateWindow
    total_hours: float = 0.0
    total_income: float = 0.0
    total_projects: int = 0
    active_projects: int = 0
    projects: list[ProjectRollup] = field(default_factory=list)
    daily: list[DayBucket] = field(default_factory=list)
    entries: list[EntryIncome] = field(default_factory=list)


def local_date(moment: datetime) -> date:
    """Calendar date of a timestamp in local time."""
    return to_local_naive(moment).date()


def compute_statistics(
    projects: Iterable[Project],
    time_entries: Iterable[TimeEntry],
    window: DateWindow,
) -> Statistics:
    """Aggregate time entries into totals, per-project and per-day rollups.

    Income is ``hours * hourly_rate`` using the rate the project has now, so
    a rate change is reflected in historical figures on the next run. Entries
    whose project is unknown are skipped. Entries outside the window still
    count in totals and project rollups but not in the daily series.

    Args:
        projects: Projects available for lookup
        time_entries: Entries already filtered by owner and period
        window: Days to produce buckets for

    Returns:
        Unrounded statistics
    """
    project_list = list(projects)
    projects_by_id = {project.id: project for project in project_list}

    stats = Statistics(
        window=window,
        total_projects=len(project_list),
        active_projects=sum(1 for project in project_list if project.is_active),
    )

    buckets = {day: DayBucket(day) for day in window.dates()}
    rollups: dict[str, ProjectRollup] = {}

    for entry in time_entries:
        project = projects_by_id.get(entry.project_id)
        if project is None:
            continue

        hours = entry.hours or 0.0
        rate = project.hourly_rate or 0.0
        income = hours * rate
        day = local_date(entry.start_time)

        stats.total_hours += hours
        stats.total_income += income

        rollup = rollups.get(project.id)
        if rollup is None:
            rollup = ProjectRollup(project.id, project.name, rate)
            rollups[project.id] = rollup
        rollup.hours += hours
        rollup.income += income

        bucket = buckets.get(day)
        if bucket is not None:
            bucket.hours += hours
            bucket.income += income

        stats.entries.append(
            EntryIncome(
                entry_id=entry.id,
                date=day,
                project_id=project.id,
                project_name=project.name,
                hours=hours,
                hourly_rate=rate,
                income=income,
            )
        )

    stats.projects = list(rollups.values())
    stats.daily = sorted(buckets.values(), key=lambda b: b.date)
    return stats


def top_projects(stats: Statistics, limit: int = 5) -> list[ProjectRollup]:
    """Project rollups with the most hours first, truncated to ``limit``."""
    return sorted(stats.projects, key=lambda r: r.hours, reverse=True)[:limit]


async def gather_statistics(
    repository: Repository,
    owner_id: str,
    window: DateWindow,
    project_id: Optional[str] = None,
) -> Statistics:
    """Load the owner's projects and window entries, then aggregate.

    Both reads run concurrently; aggregation starts only once both have
    completed, and a failed read fails the whole call.

    Args:
        repository: Source of records
        owner_id: Owner whose data is aggregated
        window: Period to aggregate
        project_id: Restrict entries to a single project

    Returns:
        Statistics for the window
    """
    projects, entries = await asyncio.gather(
        repository.list_projects(owner_id),
        repository.list_time_entries(
            owner_id,
            start=window.start_datetime,
            end=window.end_datetime,
            project_id=project_id,
        ),
    )
    return compute_statistics(projects, entries, window)
