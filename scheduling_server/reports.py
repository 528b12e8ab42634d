# -*- coding: utf-8 -*-
"""
Report aggregations over a period-filtered session set.

Durations only count sessions whose start is before their end.
"""
from __future__ import annotations

import typing as t
from datetime import date

from .models import (
    ClassReport,
    DashboardSummary,
    EducatorReportRow,
    ItineraryEntry,
    Period,
    RecentSession,
    StoreState,
    WorkshopReportRow,
)
from .queries import UNRESOLVED, filter_by_period, session_sort_key, upcoming_sessions
from .timeslots import duration_minutes

RECENT_SESSIONS_LIMIT = 3


def _time_range(start_time: str, end_time: str, separator: str = "-") -> str:
    return f"{start_time}{separator}{end_time}"


def educator_report(
        state: StoreState,
        period: t.Union[Period, str] = Period.ALL,
        today: t.Optional[date] = None,
) -> list[EducatorReportRow]:
    """Scheduled time per educator, busiest first. Educators without sessions are left out."""
    sessions = filter_by_period(state.sessions, period, today)
    workshop_names = {workshop.id: workshop.name for workshop in state.workshops}
    rows = []
    for educator in state.educators:
        own = [session for session in sessions if session.educator_id == educator.id]
        if not own:
            continue
        own.sort(key=session_sort_key, reverse=True)
        rows.append(EducatorReportRow(
            educator=educator.name,
            total_minutes=sum(duration_minutes(s.start_time, s.end_time) for s in own),
            session_count=len(own),
            workshop_count=len({s.workshop_id for s in own}),
            recent_sessions=[
                RecentSession(
                    date=s.date,
                    workshop=workshop_names.get(s.workshop_id, UNRESOLVED),
                    time_range=_time_range(s.start_time, s.end_time),
                )
                for s in own[:RECENT_SESSIONS_LIMIT]
            ],
        ))
    rows.sort(key=lambda row: row.total_minutes, reverse=True)
    return rows


def workshop_report(
        state: StoreState,
        period: t.Union[Period, str] = Period.ALL,
        today: t.Optional[date] = None,
) -> list[WorkshopReportRow]:
    """Sessions and scheduled time per workshop, most sessions first."""
    sessions = filter_by_period(state.sessions, period, today)
    rows = []
    for workshop in state.workshops:
        own = [session for session in sessions if session.workshop_id == workshop.id]
        if not own:
            continue
        rows.append(WorkshopReportRow(
            workshop=workshop.name,
            hours_load=workshop.hours_load,
            session_count=len(own),
            total_minutes=sum(duration_minutes(s.start_time, s.end_time) for s in own),
            educator_count=len({s.educator_id for s in own}),
            class_count=len({s.class_id for s in own}),
        ))
    rows.sort(key=lambda row: row.session_count, reverse=True)
    return rows


def class_report(
        state: StoreState,
        class_id: int,
        period: t.Union[Period, str] = Period.ALL,
        today: t.Optional[date] = None,
) -> t.Optional[ClassReport]:
    """Chronological itinerary of one class, or None if it has no sessions in the period."""
    sessions = sorted(
        (s for s in filter_by_period(state.sessions, period, today) if s.class_id == class_id),
        key=session_sort_key,
    )
    if not sessions:
        return None

    workshop_names = {workshop.id: workshop.name for workshop in state.workshops}
    educator_names = {educator.id: educator.name for educator in state.educators}
    class_name = next((c.name for c in state.classes if c.id == class_id), "Unknown")
    return ClassReport(
        class_name=class_name,
        total_minutes=sum(duration_minutes(s.start_time, s.end_time) for s in sessions),
        workshop_count=len({s.workshop_id for s in sessions}),
        educator_count=len({s.educator_id for s in sessions}),
        day_count=len({s.date for s in sessions}),
        itinerary=[
            ItineraryEntry(
                date=s.date,
                time_range=_time_range(s.start_time, s.end_time, " - "),
                workshop=workshop_names.get(s.workshop_id, UNRESOLVED),
                educator=educator_names.get(s.educator_id, UNRESOLVED),
            )
            for s in sessions
        ],
    )


def dashboard_summary(state: StoreState, today: t.Optional[date] = None, limit: int = 5) -> DashboardSummary:
    return DashboardSummary(
        workshops=len(state.workshops),
        educators=len(state.educators),
        classes=len(state.classes),
        sessions=len(state.sessions),
        upcoming=upcoming_sessions(state.sessions, today, limit),
    )
