# -*- coding: utf-8 -*-
from dataclasses import replace
from pathlib import Path
import typing as t

import click
from rich.panel import Panel
from rich.text import Text

from scheduler_cli.utils import (
    class_report_table,
    configure_logging,
    console,
    educator_report_table,
    fail,
    sessions_table,
    workshop_report_table,
)
from scheduling_server.errors import SchedulingError
from scheduling_server.models import EntityKind, Period, Session, SessionFilters, SessionTemplate
from scheduling_server.workspace import DATA_FILE, SchedulingWorkspace

PERIOD_CHOICE = click.Choice([p.value for p in Period])
KIND_CHOICE = click.Choice([EntityKind.WORKSHOPS.value, EntityKind.EDUCATORS.value, EntityKind.CLASSES.value])


def _workspace(ctx: click.Context) -> SchedulingWorkspace:
    return ctx.obj


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--data-file",
    type=click.Path(dir_okay=False),
    default=DATA_FILE,
    show_default=True,
    help="JSON file holding workshops, educators, classes and sessions.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.pass_context
def main(ctx: click.Context, data_file: str, verbose: bool) -> None:
    """Schedule workshop sessions without double-booking educators."""
    configure_logging(verbose)
    ctx.obj = SchedulingWorkspace.from_file(data_file)


@main.command("add-workshop")
@click.argument("name")
@click.option("--hours", "hours_load", type=float, required=True, help="Workload in hours (> 0).")
@click.option("--description", default="", help="Description (optional).")
@click.pass_context
def add_workshop(ctx: click.Context, name: str, hours_load: float, description: str) -> None:
    """Create a workshop."""
    _add(ctx, EntityKind.WORKSHOPS, {"name": name, "hours_load": hours_load, "description": description})


@main.command("add-educator")
@click.argument("name")
@click.option("--email", default="", help="E-mail (optional).")
@click.option("--phone", default="", help="Phone (optional).")
@click.pass_context
def add_educator(ctx: click.Context, name: str, email: str, phone: str) -> None:
    """Create an educator."""
    _add(ctx, EntityKind.EDUCATORS, {"name": name, "email": email, "phone": phone})


@main.command("add-class")
@click.argument("name")
@click.option("--period", default="", help="Period, e.g. morning (optional).")
@click.option("--notes", default="", help="Notes (optional).")
@click.pass_context
def add_class(ctx: click.Context, name: str, period: str, notes: str) -> None:
    """Create a class."""
    _add(ctx, EntityKind.CLASSES, {"name": name, "period": period, "notes": notes})


def _add(ctx: click.Context, kind: EntityKind, fields: dict[str, t.Any]) -> None:
    try:
        record_id = _workspace(ctx).add_entity(kind, fields)
    except SchedulingError as e:
        fail(str(e))
    console.print(f"[green]✓[/green] Added to {kind.value} with id [bold]{record_id}[/bold]")


@main.command("delete")
@click.argument("kind", type=KIND_CHOICE)
@click.argument("record_id", type=int)
@click.pass_context
def delete(ctx: click.Context, kind: str, record_id: int) -> None:
    """Delete a workshop, educator or class that no session uses."""
    try:
        _workspace(ctx).delete_entity(kind, record_id)
    except SchedulingError as e:
        fail(str(e))
    console.print(f"[green]✓[/green] Deleted {record_id} from {kind}")


@main.command("schedule")
@click.option("--workshop", "workshop_id", type=int, required=True)
@click.option("--educator", "educator_id", type=int, required=True)
@click.option("--class", "class_id", type=int, required=True)
@click.option("--start", "start_time", required=True, help="Start time, HH:MM.")
@click.option("--end", "end_time", required=True, help="End time, HH:MM.")
@click.option("--date", "dates", multiple=True, required=True, help="YYYY-MM-DD; repeat for several dates.")
@click.option("--notes", default="", help="Notes (optional).")
@click.pass_context
def schedule(
        ctx: click.Context,
        workshop_id: int,
        educator_id: int,
        class_id: int,
        start_time: str,
        end_time: str,
        dates: tuple[str, ...],
        notes: str,
) -> None:
    """Schedule a session on each given date, all or nothing."""
    template = SessionTemplate(workshop_id, educator_id, class_id, start_time, end_time, notes)
    try:
        outcome = _workspace(ctx).create_sessions(template, list(dates))
    except SchedulingError as e:
        fail(str(e))

    if outcome.conflicting_dates:
        fail(f"Schedule conflict for the educator on: {', '.join(outcome.conflicting_dates)}. Nothing was scheduled.")
    if not outcome.accepted:
        fail("No valid date provided.")
    console.print(f"[bold green]✅ Scheduled {len(outcome.created_sessions)} session(s)[/bold green]")
    for session in outcome.created_sessions:
        console.print(f"   ✓ {session.id}: {session.date} {session.start_time}-{session.end_time}")


@main.command("sessions")
@click.option("--workshop", "workshop_id", type=int, default=None)
@click.option("--educator", "educator_id", type=int, default=None)
@click.option("--class", "class_id", type=int, default=None)
@click.option("--period", type=PERIOD_CHOICE, default=Period.ALL.value, show_default=True)
@click.pass_context
def sessions(
        ctx: click.Context,
        workshop_id: t.Optional[int],
        educator_id: t.Optional[int],
        class_id: t.Optional[int],
        period: str,
) -> None:
    """List sessions in chronological order."""
    workspace = _workspace(ctx)
    found = workspace.list_sessions(SessionFilters(workshop_id, educator_id, class_id, Period(period)))
    if not found:
        console.print("📅 No sessions found.")
        return
    console.print(sessions_table(found, workspace.state(), workspace.today().isoformat()))
    console.print(f"Total: {len(found)} session(s)")


@main.command("reschedule")
@click.argument("session_id", type=int)
@click.option("--date", default=None, help="New date, YYYY-MM-DD.")
@click.option("--start", "start_time", default=None, help="New start time, HH:MM.")
@click.option("--end", "end_time", default=None, help="New end time, HH:MM.")
@click.option("--educator", "educator_id", type=int, default=None, help="New educator id.")
@click.pass_context
def reschedule(
        ctx: click.Context,
        session_id: int,
        date: t.Optional[str],
        start_time: t.Optional[str],
        end_time: t.Optional[str],
        educator_id: t.Optional[int],
) -> None:
    """Change the date, time or educator of a session."""
    workspace = _workspace(ctx)
    try:
        current: Session = workspace.store.require(EntityKind.SESSIONS, session_id)
        edited = replace(
            current,
            date=date or current.date,
            start_time=start_time or current.start_time,
            end_time=end_time or current.end_time,
            educator_id=educator_id or current.educator_id,
        )
        accepted = workspace.update_session(edited)
    except SchedulingError as e:
        fail(str(e))

    if not accepted:
        fail(f"Schedule conflict for the educator on {edited.date}. The session was not changed.")
    console.print(f"[green]✓[/green] Session {session_id} now on {edited.date} {edited.start_time}-{edited.end_time}")


@main.command("cancel")
@click.argument("session_id", type=int)
@click.pass_context
def cancel(ctx: click.Context, session_id: int) -> None:
    """Delete a session."""
    _workspace(ctx).delete_session(session_id)
    console.print(f"[green]✓[/green] Session {session_id} deleted")


@main.group("report")
def report() -> None:
    """Educator, workshop and class reports."""


@report.command("educators")
@click.option("--period", type=PERIOD_CHOICE, default=Period.ALL.value, show_default=True)
@click.pass_context
def report_educators(ctx: click.Context, period: str) -> None:
    """Scheduled hours per educator."""
    rows = _workspace(ctx).educator_report(period)
    if not rows:
        console.print("No sessions in this period.")
        return
    console.print(educator_report_table(rows))


@report.command("workshops")
@click.option("--period", type=PERIOD_CHOICE, default=Period.ALL.value, show_default=True)
@click.pass_context
def report_workshops(ctx: click.Context, period: str) -> None:
    """Sessions and hours per workshop."""
    rows = _workspace(ctx).workshop_report(period)
    if not rows:
        console.print("No sessions in this period.")
        return
    console.print(workshop_report_table(rows))


@report.command("class")
@click.argument("class_id", type=int)
@click.option("--period", type=PERIOD_CHOICE, default=Period.ALL.value, show_default=True)
@click.pass_context
def report_class(ctx: click.Context, class_id: int, period: str) -> None:
    """Itinerary of one class."""
    try:
        result = _workspace(ctx).class_report(class_id, period)
    except SchedulingError as e:
        fail(str(e))
    if result is None:
        console.print("No sessions found for this class in the selected period.")
        return
    console.print(class_report_table(result))


@main.command("dashboard")
@click.pass_context
def dashboard(ctx: click.Context) -> None:
    """Record counts and the next sessions."""
    workspace = _workspace(ctx)
    summary = workspace.dashboard()

    stats_text = Text()
    for label, value in (
            ("Workshops", summary.workshops),
            ("Educators", summary.educators),
            ("Classes", summary.classes),
            ("Sessions", summary.sessions),
    ):
        stats_text.append(f"{label}: ", style="white")
        stats_text.append(f"{value}", style="bold green")
        stats_text.append("\n")
    console.print(Panel(stats_text, title="📊 Statistics", border_style="green"))

    if summary.upcoming:
        console.print(sessions_table(summary.upcoming, workspace.state(), workspace.today().isoformat()))


@main.command("export")
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help="Destination file; defaults to a dated backup name in the current directory.",
)
@click.pass_context
def export(ctx: click.Context, output: t.Optional[str]) -> None:
    """Write the full state to a JSON file."""
    filename, text = _workspace(ctx).export_data()
    target = Path(output or filename)
    target.write_text(text, encoding="utf-8")
    console.print(f"[green]✓[/green] Data exported to {target}")


@main.command("import")
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.confirmation_option(prompt="Importing replaces all current data. Continue?")
@click.pass_context
def import_(ctx: click.Context, source: str) -> None:
    """Replace the full state with a previously exported JSON file."""
    try:
        _workspace(ctx).import_data(Path(source).read_text(encoding="utf-8"))
    except SchedulingError as e:
        fail(f"Error importing data: {e}")
    console.print("[green]✓[/green] Data imported")


@main.command("clear")
@click.confirmation_option(prompt="Remove ALL data? This cannot be undone.")
@click.pass_context
def clear(ctx: click.Context) -> None:
    """Remove every workshop, educator, class and session."""
    _workspace(ctx).clear()
    console.print("All data removed.")


if __name__ == "__main__":
    main()
