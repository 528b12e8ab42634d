"""Utility functions for the scheduler CLI."""
import logging
import typing as t

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from scheduling_server.models import ClassReport, EducatorReportRow, Session, StoreState, WorkshopReportRow

console = Console()
err_console = Console(stderr=True)


def configure_logging(verbose: bool) -> None:
    """Route log records through rich; DEBUG when verbose, WARNING otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def fail(message: str) -> t.NoReturn:
    """Print an error and exit with status 1."""
    err_console.print(f"[red]Error:[/red] {escape(message)}", soft_wrap=True)
    raise SystemExit(1)


def sessions_table(sessions: list[Session], state: StoreState, today: str) -> Table:
    """Create a table of sessions with resolved names; past sessions are dimmed."""
    workshops = {w.id: w.name for w in state.workshops}
    educators = {e.id: e.name for e in state.educators}
    classes = {c.id: c.name for c in state.classes}

    table = Table(title="📅 Sessions", show_header=True, header_style="bold magenta")
    table.add_column("Id", style="dim")
    table.add_column("Date", style="yellow")
    table.add_column("Time", style="yellow")
    table.add_column("Workshop", style="white")
    table.add_column("Educator", style="cyan")
    table.add_column("Class", style="green")
    table.add_column("Notes", style="dim")

    for session in sessions:
        table.add_row(
            str(session.id),
            session.date,
            f"{session.start_time} → {session.end_time}",
            workshops.get(session.workshop_id, "?"),
            educators.get(session.educator_id, "?"),
            classes.get(session.class_id, "?"),
            session.notes,
            style="dim" if session.date < today else None,
        )
    return table


def educator_report_table(rows: list[EducatorReportRow]) -> Table:
    table = Table(title="👩‍🏫 Hours by educator", header_style="bold magenta")
    table.add_column("Educator")
    table.add_column("Hours", justify="right", style="bold green")
    table.add_column("Sessions", justify="right")
    table.add_column("Workshops", justify="right")
    table.add_column("Latest sessions", style="dim")
    for row in rows:
        latest = "\n".join(f"{r.date} {r.time_range} {r.workshop}" for r in row.recent_sessions)
        table.add_row(row.educator, f"{row.hours:.1f}", str(row.session_count), str(row.workshop_count), latest)
    return table


def workshop_report_table(rows: list[WorkshopReportRow]) -> Table:
    table = Table(title="🛠 Workshop statistics", header_style="bold magenta")
    table.add_column("Workshop")
    table.add_column("Hours load", justify="right")
    table.add_column("Sessions", justify="right", style="bold green")
    table.add_column("Hours taught", justify="right")
    table.add_column("Educators", justify="right")
    table.add_column("Classes", justify="right")
    for row in rows:
        table.add_row(
            row.workshop, f"{row.hours_load:g}", str(row.session_count),
            f"{row.hours:.1f}", str(row.educator_count), str(row.class_count),
        )
    return table


def class_report_table(report: ClassReport) -> Table:
    caption = (
        f"{report.hours:.1f} h · {report.workshop_count} workshop(s) · "
        f"{report.educator_count} educator(s) · {report.day_count} day(s)"
    )
    table = Table(title=f"🎒 {report.class_name}", caption=caption, header_style="bold magenta")
    table.add_column("Date", style="yellow")
    table.add_column("Time", style="yellow")
    table.add_column("Workshop")
    table.add_column("Educator", style="cyan")
    for entry in report.itinerary:
        table.add_row(entry.date, entry.time_range, entry.workshop, entry.educator)
    return table
