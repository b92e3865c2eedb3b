"""Main CLI application."""

import asyncio
import signal
import sys
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, Awaitable, Optional, Sequence, TypeVar

import click
from rich.console import Console
from rich.table import Table

from freelance_tracker import __version__
from freelance_tracker.analysis.reports import ReportGenerator, format_hours, format_money
from freelance_tracker.automation.notifier import Notifier
from freelance_tracker.cli.config_commands import config
from freelance_tracker.core.aggregation import DateWindow, gather_statistics
from freelance_tracker.core.config import ConfigManager
from freelance_tracker.core.deadlines import DeadlineMonitor
from freelance_tracker.core.exceptions import FreelanceTrackerError, ValidationError
from freelance_tracker.core.models import (
    OPEN_TASK_STATUSES,
    Project,
    ProjectStatus,
    Task,
    TaskStatus,
    to_local_naive,
)
from freelance_tracker.core.reconciliation import filter_by_tags, reconcile_project_tasks
from freelance_tracker.core.repository import Repository
from freelance_tracker.core.storage import StorageManager
from freelance_tracker.core.timer import StampPolicy, TimerSession
from freelance_tracker.core.tracker import TimeTracker
from freelance_tracker.export_import import EXPORTERS
from freelance_tracker.export_import.base import default_report_name
from freelance_tracker.logging_setup import setup_logging

console = Console()
error_console = Console(stderr=True)

R = TypeVar("R")


@dataclass
class AppContext:
    """Objects shared by every command of one invocation."""

    config: ConfigManager
    repository: Repository
    owner_id: str


def get_app(ctx: click.Context) -> AppContext:
    """Build the application context from the global options."""
    config_mgr = ConfigManager(ctx.obj.get("config_path"))
    data_dir = ctx.obj.get("data_dir")
    try:
        storage = StorageManager(Path(data_dir) if data_dir else config_mgr.data_dir)
    except FreelanceTrackerError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    owner_id = ctx.obj.get("owner") or config_mgr.get("general.owner_id", "local-user")
    return AppContext(config_mgr, Repository.from_storage(storage), owner_id)


def run(coro: Awaitable[R]) -> R:
    """Run a coroutine, turning application errors into a message and exit code 1."""
    try:
        return asyncio.run(coro)  # type: ignore[arg-type]
    except FreelanceTrackerError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


def resolve_id(records: Sequence[Any], ident: str, kind: str) -> Any:
    """Find a record by full id or by a unique id prefix.

    Raises:
        ValidationError: If nothing or more than one record matches
    """
    for record in records:
        if record.id == ident:
            return record
    matches = [record for record in records if record.id.startswith(ident)]
    if not matches:
        raise ValidationError(f"No {kind} matches '{ident}'")
    if len(matches) > 1:
        raise ValidationError(f"'{ident}' matches several {kind}s, use a longer id")
    return matches[0]


def parse_date(value: Optional[str], option: str) -> Optional[date]:
    """Parse a YYYY-MM-DD option value."""
    if value is None:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise click.BadParameter(f"Invalid date '{value}'. Use YYYY-MM-DD", param_hint=option)


def resolve_window(start: Optional[str], end: Optional[str]) -> DateWindow:
    """Explicit --start/--end window, defaulting to the current month."""
    today = date.today()
    start_date = parse_date(start, "--start") or today.replace(day=1)
    end_date = parse_date(end, "--end") or today
    return DateWindow.between(start_date, end_date)


@click.group()
@click.version_option(version=__version__)
@click.option("--data-dir", help="Custom data directory", type=click.Path())
@click.option("--config", "config_path", help="Path to config file", type=click.Path())
@click.option("--owner", help="Owner id (defaults to general.owner_id)")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Override advanced.log_level",
)
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.pass_context
def cli(
    ctx: click.Context,
    data_dir: Optional[str],
    config_path: Optional[str],
    owner: Optional[str],
    log_level: Optional[str],
    no_color: bool,
) -> None:
    """Freelance Tracker - time and income tracking for freelancers.

    Manage projects and tasks, track worked hours and see what they earn.
    """
    ctx.ensure_object(dict)
    ctx.obj["data_dir"] = data_dir
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    ctx.obj["owner"] = owner

    if log_level is None:
        log_level = ConfigManager(ctx.obj["config_path"]).get("advanced.log_level", "WARNING")
    setup_logging(log_level)

    if no_color:
        console.no_color = True


cli.add_command(config)


# Projects


@cli.group()
def project() -> None:
    """Manage projects."""
    pass


@project.command("add")
@click.argument("name")
@click.option("-r", "--rate", type=float, default=0.0, help="Hourly rate")
@click.option("-d", "--description", help="Project description")
@click.pass_context
def project_add(ctx: click.Context, name: str, rate: float, description: Optional[str]) -> None:
    """Create a project.

    Example:
        freelance-tracker project add "Website redesign" --rate 250000
    """
    app = get_app(ctx)

    if rate < 0:
        error_console.print("[red]Error:[/red] Hourly rate must not be negative")
        sys.exit(1)

    new_project = Project(
        owner_id=app.owner_id, name=name, hourly_rate=rate, description=description
    )
    run(app.repository.add_project(new_project))

    console.print(f"[green]✓[/green] Created project: {name}")
    console.print(f"  ID: {new_project.id}")
    console.print(f"  Rate: {format_money(rate, app.config.get('general.currency', 'VND'))}/h")


@project.command("list")
@click.option("--active", "active_only", is_flag=True, help="Only active projects")
@click.pass_context
def project_list(ctx: click.Context, active_only: bool) -> None:
    """List projects."""
    app = get_app(ctx)
    projects = run(app.repository.list_projects(app.owner_id, active_only=active_only))

    if not projects:
        console.print("[yellow]No projects found[/yellow]")
        return

    currency = app.config.get("general.currency", "VND")
    table = Table(title="Projects")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Rate/hour", justify="right")
    table.add_column("Status", style="cyan")
    for item in projects:
        table.add_row(
            item.id[:8], item.name, format_money(item.hourly_rate, currency), item.status.value
        )
    console.print(table)


@project.command("update")
@click.argument("project_id")
@click.option("--name", help="New name")
@click.option("-r", "--rate", type=float, help="New hourly rate")
@click.option(
    "--status",
    type=click.Choice([s.value for s in ProjectStatus]),
    help="New status",
)
@click.option("-d", "--description", help="New description")
@click.pass_context
def project_update(
    ctx: click.Context,
    project_id: str,
    name: Optional[str],
    rate: Optional[float],
    status: Optional[str],
    description: Optional[str],
) -> None:
    """Update a project. A new rate also reprices past entries.

    Example:
        freelance-tracker project update 3f2a --rate 300000
    """
    app = get_app(ctx)

    changes: dict[str, Any] = {}
    if name is not None:
        changes["name"] = name
    if rate is not None:
        changes["hourly_rate"] = rate
    if status is not None:
        changes["status"] = ProjectStatus(status)
    if description is not None:
        changes["description"] = description

    if not changes:
        error_console.print("[yellow]Nothing to update[/yellow]")
        return

    async def _update() -> Project:
        projects = await app.repository.list_projects(app.owner_id)
        target = resolve_id(projects, project_id, "project")
        return await app.repository.update_project(app.owner_id, target.id, **changes)

    updated = run(_update())
    console.print(f"[green]✓[/green] Updated project: {updated.name}")


@project.command("remove")
@click.argument("project_id")
@click.confirmation_option(prompt="Delete this project? Its time entries will no longer count.")
@click.pass_context
def project_remove(ctx: click.Context, project_id: str) -> None:
    """Delete a project."""
    app = get_app(ctx)

    async def _remove() -> Project:
        projects = await app.repository.list_projects(app.owner_id)
        target = resolve_id(projects, project_id, "project")
        await app.repository.remove_project(app.owner_id, target.id)
        return target

    removed = run(_remove())
    console.print(f"[green]✓[/green] Deleted project: {removed.name}")


# Tasks


@cli.group()
def task() -> None:
    """Manage tasks."""
    pass


@task.command("add")
@click.argument("name")
@click.option("-p", "--project", "project_id", required=True, help="Project id")
@click.option("-e", "--estimate", type=float, required=True, help="Estimated hours")
@click.option("--due", help="Due date and time (YYYY-MM-DD or YYYY-MM-DDTHH:MM)")
@click.option("-t", "--tag", "tags", multiple=True, help="Tag (repeatable)")
@click.option("-d", "--description", help="Task description")
@click.pass_context
def task_add(
    ctx: click.Context,
    name: str,
    project_id: str,
    estimate: float,
    due: Optional[str],
    tags: tuple[str, ...],
    description: Optional[str],
) -> None:
    """Create a task in a project.

    Example:
        freelance-tracker task add "Landing page" -p 3f2a -e 12 --due 2026-11-01 -t design
    """
    app = get_app(ctx)

    if estimate <= 0:
        error_console.print("[red]Error:[/red] Estimated hours must be positive")
        sys.exit(1)

    due_at = None
    if due:
        try:
            due_at = to_local_naive(datetime.fromisoformat(due))
        except ValueError:
            error_console.print(f"[red]Error:[/red] Invalid due date '{due}'")
            sys.exit(1)

    async def _add() -> Task:
        projects = await app.repository.list_projects(app.owner_id, active_only=True)
        target = resolve_id(projects, project_id, "active project")
        new_task = Task(
            owner_id=app.owner_id,
            project_id=target.id,
            name=name,
            estimated_hours=estimate,
            due_at=due_at,
            tags=list(tags),
            description=description,
        )
        await app.repository.add_task(new_task)
        return new_task

    created = run(_add())
    console.print(f"[green]✓[/green] Created task: {name}")
    console.print(f"  ID: {created.id}")
    console.print(f"  Estimate: {format_hours(estimate)}")


@task.command("list")
@click.option("-p", "--project", "project_id", required=True, help="Project id")
@click.option("-t", "--tag", "tags", multiple=True, help="Only tasks with one of these tags")
@click.pass_context
def task_list(ctx: click.Context, project_id: str, tags: tuple[str, ...]) -> None:
    """List a project's tasks with estimated, actual and diff hours."""
    app = get_app(ctx)

    async def _list() -> tuple[Project, list[Any]]:
        projects = await app.repository.list_projects(app.owner_id)
        target = resolve_id(projects, project_id, "project")
        reconciled = await reconcile_project_tasks(app.repository, app.owner_id, target.id)
        return target, reconciled

    target, reconciled = run(_list())
    wanted = {t.id for t in filter_by_tags([item.task for item in reconciled], tags)}
    shown = [item for item in reconciled if item.task.id in wanted]

    ReportGenerator(console).task_report(shown, title=f"Tasks - {target.name}")


@task.command("status")
@click.argument("task_id")
@click.argument("status", type=click.Choice([s.value for s in TaskStatus]))
@click.pass_context
def task_status(ctx: click.Context, task_id: str, status: str) -> None:
    """Change a task's status.

    Example:
        freelance-tracker task status 9c1e inProgress
    """
    app = get_app(ctx)

    async def _set() -> Task:
        tasks = await app.repository.list_tasks(app.owner_id)
        target = resolve_id(tasks, task_id, "task")
        return await app.repository.set_task_status(app.owner_id, target.id, TaskStatus(status))

    updated = run(_set())
    console.print(f"[green]✓[/green] {updated.name}: {updated.status.value}")


@task.command("remove")
@click.argument("task_id")
@click.confirmation_option(prompt="Delete this task?")
@click.pass_context
def task_remove(ctx: click.Context, task_id: str) -> None:
    """Delete a task."""
    app = get_app(ctx)

    async def _remove() -> Task:
        tasks = await app.repository.list_tasks(app.owner_id)
        target = resolve_id(tasks, task_id, "task")
        await app.repository.remove_task(app.owner_id, target.id)
        return target

    removed = run(_remove())
    console.print(f"[green]✓[/green] Deleted task: {removed.name}")


# Time tracking


async def _select_open_task(app: AppContext, project_id: str, task_id: str) -> tuple[Project, Task]:
    """Resolve an active project and one of its pending or in-progress tasks."""
    projects = await app.repository.list_projects(app.owner_id, active_only=True)
    target_project = resolve_id(projects, project_id, "active project")
    tasks = await app.repository.list_tasks(
        app.owner_id,
        project_id=target_project.id,
        statuses=OPEN_TASK_STATUSES,
    )
    target_task = resolve_id(tasks, task_id, "open task")
    return target_project, target_task


@cli.command()
@click.argument("hours", type=float)
@click.option("-p", "--project", "project_id", required=True, help="Project id")
@click.option("-t", "--task", "task_id", required=True, help="Task id")
@click.option("--date", "on_date", help="Date the work was done (YYYY-MM-DD), default now")
@click.pass_context
def log(
    ctx: click.Context, hours: float, project_id: str, task_id: str, on_date: Optional[str]
) -> None:
    """Log worked hours manually.

    Example:
        freelance-tracker log 2.5 -p 3f2a -t 9c1e
    """
    app = get_app(ctx)
    day = parse_date(on_date, "--date")

    async def _log() -> Any:
        target_project, target_task = await _select_open_task(app, project_id, task_id)
        tracker = TimeTracker(app.repository, app.owner_id)
        start_time = datetime.combine(day, datetime.now().time()) if day else None
        entry = await tracker.log_time(target_project.id, target_task.id, hours, start_time)
        return target_task, entry

    target_task, entry = run(_log())
    console.print(f"[green]✓[/green] Logged {format_hours(entry.hours)} on {target_task.name}")


@cli.command()
@click.option("-n", "--limit", type=int, default=20, help="Number of entries to show")
@click.pass_context
def entries(ctx: click.Context, limit: int) -> None:
    """Show recent time entries."""
    app = get_app(ctx)
    tracker = TimeTracker(app.repository, app.owner_id)
    listings = run(tracker.recent_entries(limit=limit))
    ReportGenerator(console).entries_report(listings)


async def _run_timer(session: TimerSession, duration: Optional[float], discard: bool) -> Any:
    """Run a session until Ctrl+C (or ``duration`` seconds), then stop or discard it."""
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, stop_event.set)
        handles_sigint = True
    except (NotImplementedError, RuntimeError):
        handles_sigint = False

    session.start()
    try:
        if duration is None:
            await stop_event.wait()
        else:
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=duration)
            except asyncio.TimeoutError:
                pass
    except asyncio.CancelledError:
        session.cancel()
        raise
    finally:
        if handles_sigint:
            loop.remove_signal_handler(signal.SIGINT)

    if discard:
        session.cancel()
        return None
    return await session.stop()


@cli.command()
@click.option("-p", "--project", "project_id", required=True, help="Project id")
@click.option("-t", "--task", "task_id", required=True, help="Task id")
@click.option("--discard", is_flag=True, help="Discard the session instead of saving it")
@click.option("--duration", type=float, help="Stop automatically after this many seconds")
@click.pass_context
def track(
    ctx: click.Context,
    project_id: str,
    task_id: str,
    discard: bool,
    duration: Optional[float],
) -> None:
    """Track time live. Press Ctrl+C to stop and save.

    Example:
        freelance-tracker track -p 3f2a -t 9c1e
    """
    app = get_app(ctx)
    tracker = TimeTracker(app.repository, app.owner_id)
    session = TimerSession(
        tracker,
        stamp_policy=StampPolicy(app.config.get("timer.stamp_entry_at", "start")),
        tick_seconds=app.config.get("timer.tick_seconds", 1),
    )
    notifier = Notifier(
        enabled=app.config.get("notifications.enabled", True),
        backend=app.config.get("notifications.backend", "auto"),
    )

    async def _track() -> Any:
        target_project, target_task = await _select_open_task(app, project_id, task_id)
        session.select(target_project.id, target_task.id)
        console.print(f"[green]▶[/green]  Tracking: {target_task.name} ({target_project.name})")
        console.print("  Press Ctrl+C to stop")
        notifier.notify_status(target_task.name, "Started")
        return target_task, await _run_timer(session, duration, discard)

    target_task, entry = run(_track())

    if entry is None:
        console.print(f"[yellow]⏹[/yellow]  Discarded session for {target_task.name}")
        return
    console.print(f"[green]✓[/green] Saved {format_hours(entry.hours)} on {target_task.name}")
    notifier.notify_status(target_task.name, "Stopped")


# Statistics


@cli.command()
@click.option(
    "-r",
    "--range",
    "range_name",
    type=click.Choice(["week", "month", "quarter"]),
    help="Period: last 7, 30 or 90 days (default from dashboard.default_range)",
)
@click.pass_context
def dashboard(ctx: click.Context, range_name: Optional[str]) -> None:
    """Show totals, top projects and daily hours.

    Example:
        freelance-tracker dashboard --range week
    """
    app = get_app(ctx)
    range_name = range_name or app.config.get("dashboard.default_range", "month")

    async def _stats() -> Any:
        window = DateWindow.for_range(range_name)
        return await gather_statistics(app.repository, app.owner_id, window)

    stats = run(_stats())
    report = ReportGenerator(console, currency=app.config.get("general.currency", "VND"))
    report.dashboard_report(stats, top_limit=app.config.get("dashboard.top_projects", 5))


@cli.command()
@click.option("--start", help="First day (YYYY-MM-DD), default first day of this month")
@click.option("--end", help="Last day (YYYY-MM-DD), default today")
@click.option("-p", "--project", "project_id", help="Only this project")
@click.pass_context
def income(
    ctx: click.Context, start: Optional[str], end: Optional[str], project_id: Optional[str]
) -> None:
    """Show income per project for a period.

    Example:
        freelance-tracker income --start 2026-10-01 --end 2026-10-31
    """
    app = get_app(ctx)

    async def _stats() -> Any:
        window = resolve_window(start, end)
        target_id = None
        if project_id:
            projects = await app.repository.list_projects(app.owner_id)
            target_id = resolve_id(projects, project_id, "project").id
        return await gather_statistics(app.repository, app.owner_id, window, target_id)

    stats = run(_stats())
    ReportGenerator(console, currency=app.config.get("general.currency", "VND")).income_report(
        stats
    )


@cli.command()
@click.option("--start", help="First day (YYYY-MM-DD), default first day of this month")
@click.option("--end", help="Last day (YYYY-MM-DD), default today")
@click.option("-p", "--project", "project_id", help="Only this project")
@click.option(
    "-f", "--format", "fmt", type=click.Choice(sorted(EXPORTERS)), default="xlsx", show_default=True
)
@click.option("-o", "--output", type=click.Path(), help="Output file")
@click.pass_context
def export(
    ctx: click.Context,
    start: Optional[str],
    end: Optional[str],
    project_id: Optional[str],
    fmt: str,
    output: Optional[str],
) -> None:
    """Export detail and summary income tables.

    Example:
        freelance-tracker export --start 2026-10-01 --end 2026-10-31 -o october.xlsx
    """
    app = get_app(ctx)

    async def _stats() -> Any:
        window = resolve_window(start, end)
        target_id = None
        if project_id:
            projects = await app.repository.list_projects(app.owner_id)
            target_id = resolve_id(projects, project_id, "project").id
        return await gather_statistics(app.repository, app.owner_id, window, target_id)

    stats = run(_stats())

    exporter_cls = EXPORTERS[fmt]
    if output:
        output_path = Path(output)
    else:
        extension = exporter_cls(Path(".")).get_file_extension()
        output_path = Path(app.config.get("export.directory", ".")).expanduser() / (
            default_report_name(extension=extension)
        )

    exporter_cls(output_path).export_statistics(
        stats, date_format=app.config.get("general.date_format", "%d/%m/%Y")
    )
    console.print(f"[green]✓[/green] Exported {len(stats.entries)} entries to {output_path}")


# Deadlines


@cli.group()
def deadlines() -> None:
    """Warn about in-progress tasks that are due soon."""
    pass


def _make_monitor(app: AppContext) -> DeadlineMonitor:
    return DeadlineMonitor(
        notifier=Notifier(
            enabled=app.config.get("notifications.enabled", True),
            backend=app.config.get("notifications.backend", "auto"),
        ),
        window_hours=app.config.get("deadlines.window_hours", 24),
        interval_seconds=app.config.get("deadlines.interval_seconds", 3600),
        deduplicate=app.config.get("deadlines.deduplicate", False),
        task_source=lambda: app.repository.list_in_progress_tasks(app.owner_id),
    )


@deadlines.command("check")
@click.pass_context
def deadlines_check(ctx: click.Context) -> None:
    """Scan once and list tasks due soon."""
    app = get_app(ctx)
    monitor = _make_monitor(app)
    warnings = run(monitor.scan_once())

    if not warnings:
        console.print("[green]No deadlines in the next "
                      f"{monitor.window_hours} hours[/green]")
        return
    for warning in warnings:
        console.print(
            f"[yellow]⚠[/yellow]  {warning.task_name} is due in {warning.hours_remaining} hour(s) "
            f"({warning.due_at.strftime('%Y-%m-%d %H:%M')})"
        )


@deadlines.command("watch")
@click.option("--duration", type=float, help="Stop watching after this many seconds")
@click.pass_context
def deadlines_watch(ctx: click.Context, duration: Optional[float]) -> None:
    """Scan now and then repeatedly until Ctrl+C."""
    app = get_app(ctx)
    monitor = _make_monitor(app)

    async def _watch() -> None:
        stop_event = asyncio.Event()
        loop = asyncio.get_running_loop()
        try:
            loop.add_signal_handler(signal.SIGINT, stop_event.set)
            handles_sigint = True
        except (NotImplementedError, RuntimeError):
            handles_sigint = False

        await monitor.scan_once()
        monitor.start()
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=duration)
        except asyncio.TimeoutError:
            pass
        finally:
            monitor.stop()
            if handles_sigint:
                loop.remove_signal_handler(signal.SIGINT)

    console.print(
        f"Watching deadlines every {monitor.interval_seconds}s. Press Ctrl+C to stop"
    )
    run(_watch())


# Server


@cli.command()
@click.option("--host", help="Bind address (default api.host)")
@click.option("--port", type=int, help="Port (default api.port)")
@click.option("--reload", is_flag=True, help="Auto-reload for development")
@click.pass_context
def serve(ctx: click.Context, host: Optional[str], port: Optional[int], reload: bool) -> None:
    """Run the REST API server."""
    from freelance_tracker.api.server import run_server

    config_mgr = ConfigManager(ctx.obj.get("config_path"))
    host = host or config_mgr.get("api.host", "localhost")
    port = port or config_mgr.get("api.port", 8000)
    console.print(f"[green]▶[/green]  Serving on http://{host}:{port} (docs at /docs)")
    run_server(host=host, port=port, reload=reload, config=config_mgr)


if __name__ == "__main__":
    cli(obj={})
