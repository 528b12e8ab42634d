# -*- coding: utf-8 -*-
import typing as t

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from scheduling_server.errors import SchedulingError
from scheduling_server.models import (
    CalendarEvent,
    ClassReport,
    Educator,
    EducatorReportRow,
    EntityKind,
    Period,
    SchoolClass,
    Session,
    SessionFilters,
    SessionTemplate,
    Workshop,
    WorkshopReportRow,
)
from scheduling_server.scheduler import BatchOutcome
from scheduling_server.workspace import DATA_FILE, SchedulingWorkspace

mcp = FastMCP("WorkshopScheduler")

_workspace: t.Optional[SchedulingWorkspace] = None


def get_workspace() -> SchedulingWorkspace:
    """Returns the workspace backing the tools, loading it from disk on first use."""
    global _workspace
    if _workspace is None:
        _workspace = SchedulingWorkspace.from_file(DATA_FILE)
    return _workspace


def set_workspace(workspace: t.Optional[SchedulingWorkspace]) -> None:
    """Swaps the workspace backing the tools (None reloads from disk on next use)."""
    global _workspace
    _workspace = workspace


def _call(func: t.Callable[..., t.Any], *args: t.Any) -> t.Any:
    try:
        return func(*args)
    except SchedulingError as e:
        raise ToolError(str(e)) from e


@mcp.tool()
def list_sessions(
        workshop_id: int = 0,
        educator_id: int = 0,
        class_id: int = 0,
        period: Period = Period.ALL,
) -> list[Session]:
    """Lists sessions ordered by date and start time.

    :param workshop_id: Only sessions of this workshop (0 for any).
    :param educator_id: Only sessions of this educator (0 for any).
    :param class_id: Only sessions of this class (0 for any).
    :param period: One of all, future, past, week, month.
    :return: The matching sessions.
    """
    filters = SessionFilters(workshop_id or None, educator_id or None, class_id or None, Period(period))
    return get_workspace().list_sessions(filters)


@mcp.tool()
def create_sessions(
        workshop_id: int,
        educator_id: int,
        class_id: int,
        start_time: str,
        end_time: str,
        dates: list[str],
        notes: str = "",
) -> BatchOutcome:
    """Schedules one session per date, all or nothing.

    If the educator is already busy on any of the dates nothing is created
    and ``conflicting_dates`` lists the clashing days.

    :param workshop_id: Workshop taught in the sessions.
    :param educator_id: Educator teaching the sessions.
    :param class_id: Class attending the sessions.
    :param start_time: Start time, 24h HH:MM.
    :param end_time: End time, 24h HH:MM.
    :param dates: Dates in YYYY-MM-DD format; blank entries are ignored.
    :param notes: Notes copied to every session (optional).
    :return: The created sessions, or the conflicting dates.
    """
    template = SessionTemplate(workshop_id, educator_id, class_id, start_time, end_time, notes)
    return _call(get_workspace().create_sessions, template, dates)


@mcp.tool()
def update_session(session: Session) -> bool:
    """Replaces a session unless the new time slot double-books its educator.

    :param session: The edited session; its id selects the stored one.
    :return: True if saved, False if it conflicts with another session.
    """
    return _call(get_workspace().update_session, session)


@mcp.tool()
def delete_session(session_id: int) -> None:
    """Deletes a session.

    :param session_id: Id of the session.
    """
    get_workspace().delete_session(session_id)


@mcp.tool()
def add_workshop(name: str, hours_load: float, description: str = "") -> int:
    """Creates a workshop and returns its id."""
    fields = {"name": name, "hours_load": hours_load, "description": description}
    return _call(get_workspace().add_entity, EntityKind.WORKSHOPS, fields)


@mcp.tool()
def add_educator(name: str, email: str = "", phone: str = "") -> int:
    """Creates an educator and returns its id."""
    return _call(get_workspace().add_entity, EntityKind.EDUCATORS, {"name": name, "email": email, "phone": phone})


@mcp.tool()
def add_class(name: str, period: str = "", notes: str = "") -> int:
    """Creates a class and returns its id."""
    return _call(get_workspace().add_entity, EntityKind.CLASSES, {"name": name, "period": period, "notes": notes})


@mcp.tool()
def can_delete_entity(kind: EntityKind, record_id: int) -> bool:
    """Tells whether a workshop, educator or class can be deleted (no session references it)."""
    return _call(get_workspace().can_delete_entity, kind, record_id)


@mcp.tool()
def delete_entity(kind: EntityKind, record_id: int) -> None:
    """Deletes a workshop, educator or class. Refused while sessions reference it."""
    _call(get_workspace().delete_entity, kind, record_id)


@mcp.tool()
def list_calendar_events(period: Period = Period.ALL) -> list[CalendarEvent]:
    """Lists sessions as calendar events titled "<workshop> - <class>"."""
    return get_workspace().calendar_events(SessionFilters(period=Period(period)))


@mcp.tool()
def educator_report(period: Period = Period.ALL) -> list[EducatorReportRow]:
    """Scheduled hours per educator, busiest first."""
    return get_workspace().educator_report(period)


@mcp.tool()
def workshop_report(period: Period = Period.ALL) -> list[WorkshopReportRow]:
    """Sessions and scheduled hours per workshop, most sessions first."""
    return get_workspace().workshop_report(period)


@mcp.tool()
def class_report(class_id: int, period: Period = Period.ALL) -> t.Optional[ClassReport]:
    """Itinerary of one class; null when it has no sessions in the period."""
    return _call(get_workspace().class_report, class_id, period)


def _lookup_names(
        records: t.Iterable[t.Union[Workshop, Educator, SchoolClass]]
) -> dict[int, str]:
    return {record.id: record.name for record in records}


def _clip(text: str, width: int) -> str:
    return text[:width - 1] if len(text) > width - 1 else text


def format_sessions(sessions: list[Session], workspace: SchedulingWorkspace) -> str:
    """Formats sessions as a clean table.

    :param sessions: Sessions to show, in display order.
    :param workspace: Used to resolve workshop, educator and class names.
    :return: Formatted table string.
    """
    if not sessions:
        return "📅 No sessions found."

    state = workspace.state()
    workshops = _lookup_names(state.workshops)
    educators = _lookup_names(state.educators)
    classes = _lookup_names(state.classes)
    today = workspace.today().isoformat()

    lines = []
    lines.append("📅 SESSIONS")
    lines.append("=" * 100)
    lines.append(f"{'#':<4} {'Date':<12} {'Time':<13} {'Workshop':<25} {'Educator':<22} {'Class':<20}")
    lines.append("-" * 100)

    for idx, session in enumerate(sessions, 1):
        marker = " " if session.date >= today else "✓"
        lines.append(
            f"{idx:<4} {session.date:<12} {session.start_time + '-' + session.end_time:<13} "
            f"{_clip(workshops.get(session.workshop_id, '?'), 25):<25} "
            f"{_clip(educators.get(session.educator_id, '?'), 22):<22} "
            f"{_clip(classes.get(session.class_id, '?'), 20):<19}{marker}"
        )

    lines.append("=" * 100)
    lines.append(f"Total: {len(sessions)} session(s)")
    return "\n".join(lines)


def format_educator_report(rows: list[EducatorReportRow]) -> str:
    """Formats the educator report as a table."""
    if not rows:
        return "👩‍🏫 No sessions in this period."

    lines = []
    lines.append("👩‍🏫 HOURS BY EDUCATOR")
    lines.append("=" * 80)
    lines.append(f"{'Educator':<35} {'Hours':>8} {'Sessions':>10} {'Workshops':>10}")
    lines.append("-" * 80)
    for row in rows:
        lines.append(
            f"{_clip(row.educator, 35):<35} {row.hours:>8.1f} {row.session_count:>10} {row.workshop_count:>10}"
        )
        for recent in row.recent_sessions:
            lines.append(f"    {recent.date} {recent.time_range} {recent.workshop}")
    lines.append("=" * 80)
    return "\n".join(lines)


def format_workshop_report(rows: list[WorkshopReportRow]) -> str:
    """Formats the workshop report as a table."""
    if not rows:
        return "🛠 No sessions in this period."

    lines = []
    lines.append("🛠 WORKSHOP STATISTICS")
    lines.append("=" * 90)
    lines.append(f"{'Workshop':<30} {'Load':>7} {'Sessions':>9} {'Hours':>7} {'Educators':>10} {'Classes':>8}")
    lines.append("-" * 90)
    for row in rows:
        lines.append(
            f"{_clip(row.workshop, 30):<30} {row.hours_load:>7g} {row.session_count:>9} "
            f"{row.hours:>7.1f} {row.educator_count:>10} {row.class_count:>8}"
        )
    lines.append("=" * 90)
    return "\n".join(lines)


def format_class_report(report: t.Optional[ClassReport]) -> str:
    """Formats a class itinerary with its summary counts."""
    if report is None:
        return "🎒 No sessions found for this class in the selected period."

    lines = []
    lines.append(f"🎒 ITINERARY: {report.class_name}")
    lines.append("=" * 80)
    lines.append(
        f"Hours: {report.hours:.1f}  Workshops: {report.workshop_count}  "
        f"Educators: {report.educator_count}  Days: {report.day_count}"
    )
    lines.append("-" * 80)
    for entry in report.itinerary:
        lines.append(f"{entry.date:<12} {entry.time_range:<15} {_clip(entry.workshop, 25):<25} {entry.educator}")
    lines.append("=" * 80)
    return "\n".join(lines)


@mcp.tool()
def show_sessions(period: Period = Period.ALL) -> str:
    """Displays sessions of a period as a formatted table.

    Sessions are numbered in chronological order; past sessions are marked
    with a check mark.

    :param period: One of all, future, past, week, month.
    :return: Formatted table, or a message if there are no sessions.
    """
    workspace = get_workspace()
    return format_sessions(workspace.list_sessions(SessionFilters(period=Period(period))), workspace)


@mcp.tool()
def show_reports(period: Period = Period.ALL) -> str:
    """Displays the educator and workshop reports for a period."""
    workspace = get_workspace()
    return "\n\n".join([
        format_educator_report(workspace.educator_report(period)),
        format_workshop_report(workspace.workshop_report(period)),
    ])


@mcp.tool()
def export_data() -> str:
    """Returns the full state as a JSON document."""
    return get_workspace().export_data()[1]


if __name__ == "__main__":
    mcp.run()
