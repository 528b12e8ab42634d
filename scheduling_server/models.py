"""
Data models for the workshop scheduling server.

This module contains the dataclasses used to represent workshops, educators,
classes and the sessions that bind them together in time, plus the derived
view records (calendar events, report rows) built on top of them.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import typing as t
from datetime import datetime


WorkshopId = t.NewType("WorkshopId", int)
EducatorId = t.NewType("EducatorId", int)
ClassId = t.NewType("ClassId", int)
SessionId = t.NewType("SessionId", int)


class Period(str, Enum):
    """Time windows a session listing or report can be restricted to."""
    ALL = "all"
    FUTURE = "future"
    PAST = "past"
    WEEK = "week"
    MONTH = "month"


class EntityKind(str, Enum):
    """The four collections held by the entity store."""
    WORKSHOPS = "workshops"
    EDUCATORS = "educators"
    CLASSES = "classes"
    SESSIONS = "sessions"


@dataclass
class Workshop:
    """A workshop with its declared workload in hours."""
    id: WorkshopId
    name: str
    hours_load: float
    description: str = ""


@dataclass
class Educator:
    """An educator whose time is the scarce resource being scheduled."""
    id: EducatorId
    name: str
    email: str = ""
    phone: str = ""


@dataclass
class SchoolClass:
    """A class (cohort) attending workshops."""
    id: ClassId
    name: str
    period: str = ""
    notes: str = ""


@dataclass
class Session:
    """A scheduled workshop session on one calendar day."""
    id: SessionId
    workshop_id: WorkshopId
    educator_id: EducatorId
    class_id: ClassId
    date: str        # "YYYY-MM-DD"
    start_time: str  # "HH:MM" 24h
    end_time: str    # "HH:MM" 24h
    notes: str = ""


@dataclass
class SessionTemplate:
    """Everything a session needs except its id and date."""
    workshop_id: WorkshopId
    educator_id: EducatorId
    class_id: ClassId
    start_time: str
    end_time: str
    notes: str = ""


@dataclass
class SessionFilters:
    """Optional foreign-key filters plus a period window."""
    workshop_id: t.Optional[WorkshopId] = None
    educator_id: t.Optional[EducatorId] = None
    class_id: t.Optional[ClassId] = None
    period: Period = Period.ALL


Record = t.Union[Workshop, Educator, SchoolClass, Session]

RECORD_TYPES: dict[EntityKind, type] = {
    EntityKind.WORKSHOPS: Workshop,
    EntityKind.EDUCATORS: Educator,
    EntityKind.CLASSES: SchoolClass,
    EntityKind.SESSIONS: Session,
}


@dataclass
class StoreState:
    """Point-in-time copy of all four collections."""
    workshops: list[Workshop] = field(default_factory=list)
    educators: list[Educator] = field(default_factory=list)
    classes: list[SchoolClass] = field(default_factory=list)
    sessions: list[Session] = field(default_factory=list)


@dataclass
class CalendarEvent:
    """A session mapped onto a calendar, with concrete start and end instants."""
    id: SessionId
    title: str
    start: datetime
    end: datetime
    ref: Session


@dataclass
class RecentSession:
    """Short description of a session, as listed in the educator report."""
    date: str
    workshop: str
    time_range: str


@dataclass
class EducatorReportRow:
    """Scheduled time and workshop spread for one educator."""
    educator: str
    total_minutes: int
    session_count: int
    workshop_count: int
    recent_sessions: list[RecentSession] = field(default_factory=list)

    @property
    def hours(self) -> float:
        return round(self.total_minutes / 60, 1)


@dataclass
class WorkshopReportRow:
    """Declared workload versus scheduled time for one workshop."""
    workshop: str
    hours_load: float
    session_count: int
    total_minutes: int
    educator_count: int
    class_count: int

    @property
    def hours(self) -> float:
        return round(self.total_minutes / 60, 1)


@dataclass
class ItineraryEntry:
    """One line of a class itinerary."""
    date: str
    time_range: str
    workshop: str
    educator: str


@dataclass
class ClassReport:
    """Chronological itinerary and summary counts for one class."""
    class_name: str
    total_minutes: int
    workshop_count: int
    educator_count: int
    day_count: int
    itinerary: list[ItineraryEntry] = field(default_factory=list)

    @property
    def hours(self) -> float:
        return round(self.total_minutes / 60, 1)


@dataclass
class CalendarDay:
    """A single day cell of a month grid."""
    date: str
    is_today: bool
    sessions: list[Session] = field(default_factory=list)


@dataclass
class DashboardSummary:
    """Record counts and the next few sessions."""
    workshops: int
    educators: int
    classes: int
    sessions: int
    upcoming: list[Session] = field(default_factory=list)
