# -*- coding: utf-8 -*-
"""
Read-only views over the session collection.

All functions here are pure: they take the records they need plus an
explicit ``today`` and return new lists, so they can be recomputed on
demand from any store snapshot.
"""
from __future__ import annotations

import calendar
import typing as t
from datetime import date, timedelta

from .models import CalendarDay, CalendarEvent, Period, SchoolClass, Session, SessionFilters, Workshop
from .timeslots import combine, parse_date

UNRESOLVED = "?"


def session_sort_key(session: Session) -> tuple[str, str]:
    """Orders sessions by day, then by start time."""
    return session.date, session.start_time


def period_bounds(period: t.Union[Period, str], today: date) -> tuple[t.Optional[date], t.Optional[date]]:
    """Returns the inclusive ``(first, last)`` days of a period; None means unbounded.

    Weeks start on Sunday. ``future`` includes today, ``past`` ends yesterday.
    """
    period = Period(period)
    if period is Period.FUTURE:
        return today, None
    if period is Period.PAST:
        return None, today - timedelta(days=1)
    if period is Period.WEEK:
        first = today - timedelta(days=(today.weekday() + 1) % 7)
        return first, first + timedelta(days=6)
    if period is Period.MONTH:
        last_day = calendar.monthrange(today.year, today.month)[1]
        return today.replace(day=1), today.replace(day=last_day)
    return None, None


def in_period(session: Session, period: t.Union[Period, str], today: date) -> bool:
    first, last = period_bounds(period, today)
    if first is None and last is None:
        return True
    day = parse_date(session.date)
    if day is None:
        return False
    if first is not None and day < first:
        return False
    if last is not None and day > last:
        return False
    return True


def filter_by_period(
        sessions: t.Iterable[Session],
        period: t.Union[Period, str],
        today: t.Optional[date] = None,
) -> list[Session]:
    today = today or date.today()
    return [session for session in sessions if in_period(session, period, today)]


def filter_sessions(
        sessions: t.Iterable[Session],
        filters: t.Optional[SessionFilters] = None,
        today: t.Optional[date] = None,
) -> list[Session]:
    """Applies foreign-key and period filters and sorts by ``(date, start_time)``.

    :param sessions: Sessions to filter.
    :param filters: Filters to apply; empty (None or 0) foreign keys are ignored.
    :param today: Reference day for the period; defaults to the local current date.
    :return: Matching sessions, ascending.
    """
    filters = filters or SessionFilters()
    today = today or date.today()
    result = []
    for session in sessions:
        if filters.workshop_id and session.workshop_id != filters.workshop_id:
            continue
        if filters.educator_id and session.educator_id != filters.educator_id:
            continue
        if filters.class_id and session.class_id != filters.class_id:
            continue
        if not in_period(session, filters.period, today):
            continue
        result.append(session)
    return sorted(result, key=session_sort_key)


def to_calendar_events(
        sessions: t.Iterable[Session],
        workshops: t.Iterable[Workshop],
        classes: t.Iterable[SchoolClass],
) -> list[CalendarEvent]:
    """Maps sessions to calendar events titled "<workshop> - <class>".

    Sessions whose date or times cannot be parsed are left out.
    """
    workshop_names = {workshop.id: workshop.name for workshop in workshops}
    class_names = {school_class.id: school_class.name for school_class in classes}
    events = []
    for session in sessions:
        start = combine(session.date, session.start_time)
        end = combine(session.date, session.end_time)
        if start is None or end is None:
            continue
        title = (
            f"{workshop_names.get(session.workshop_id, UNRESOLVED)} - "
            f"{class_names.get(session.class_id, UNRESOLVED)}"
        )
        events.append(CalendarEvent(id=session.id, title=title, start=start, end=end, ref=session))
    return events


def build_month_grid(
        year: int,
        month: int,
        sessions: t.Iterable[Session],
        today: t.Optional[date] = None,
) -> list[list[t.Optional[CalendarDay]]]:
    """Lays a month out as Sunday-first weeks.

    Days outside the month are None. Each day holds its sessions ordered by
    start time.
    """
    today = today or date.today()
    by_day: dict[str, list[Session]] = {}
    for session in sessions:
        by_day.setdefault(session.date, []).append(session)

    weeks = []
    # Day numbers outside the month are 0.
    for week in calendar.Calendar(firstweekday=calendar.SUNDAY).monthdayscalendar(year, month):
        cells: list[t.Optional[CalendarDay]] = []
        for day_number in week:
            if not day_number:
                cells.append(None)
                continue
            day = date(year, month, day_number)
            key = day.isoformat()
            cells.append(CalendarDay(
                date=key,
                is_today=day == today,
                sessions=sorted(by_day.get(key, []), key=session_sort_key),
            ))
        weeks.append(cells)
    return weeks


def upcoming_sessions(
        sessions: t.Iterable[Session],
        today: t.Optional[date] = None,
        limit: int = 5,
) -> list[Session]:
    """The next ``limit`` sessions dated today or later."""
    return filter_sessions(sessions, SessionFilters(period=Period.FUTURE), today)[:limit]
