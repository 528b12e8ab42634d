"""
Shared Pydantic models for REST API serialization.

This module contains Pydantic equivalents of the dataclass models of the
scheduling server, ensuring consistent JSON serialization across services.
Fields are exposed in camelCase (``workshopId``, ``startTime``...), the same
names the persisted document uses; snake_case is accepted on input too.
"""
from __future__ import annotations

import typing as t
from dataclasses import asdict
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def from_dataclass(cls, obj: t.Any) -> "ApiModel":
        data = asdict(obj)
        # Derived values such as report hours are properties, not dataclass fields.
        for name in cls.model_fields:
            if name not in data and hasattr(obj, name):
                data[name] = getattr(obj, name)
        return cls.model_validate(data)


# Entities
class Workshop(ApiModel):
    """A workshop with its declared workload in hours."""
    id: int
    name: str
    hours_load: float
    description: str = ""


class Educator(ApiModel):
    """An educator."""
    id: int
    name: str
    email: str = ""
    phone: str = ""


class SchoolClass(ApiModel):
    """A class (cohort)."""
    id: int
    name: str
    period: str = ""
    notes: str = ""


class Session(ApiModel):
    """A scheduled workshop session."""
    id: int
    workshop_id: int
    educator_id: int
    class_id: int
    date: str           # "YYYY-MM-DD"
    start_time: str     # "HH:MM" 24h
    end_time: str       # "HH:MM" 24h
    notes: str = ""


class CalendarEvent(ApiModel):
    """A session placed on the calendar."""
    id: int
    title: str
    start: datetime
    end: datetime
    ref: Session


# Reports
class RecentSession(ApiModel):
    date: str
    workshop: str
    time_range: str


class EducatorReportRow(ApiModel):
    """Scheduled time for one educator."""
    educator: str
    hours: float
    total_minutes: int
    session_count: int
    workshop_count: int
    recent_sessions: list[RecentSession] = Field(default_factory=list)


class WorkshopReportRow(ApiModel):
    """Declared workload versus scheduled time for one workshop."""
    workshop: str
    hours_load: float
    hours: float
    total_minutes: int
    session_count: int
    educator_count: int
    class_count: int


class ItineraryEntry(ApiModel):
    date: str
    time_range: str
    workshop: str
    educator: str


class ClassReport(ApiModel):
    """Itinerary and summary counts for one class."""
    class_name: str
    hours: float
    total_minutes: int
    workshop_count: int
    educator_count: int
    day_count: int
    itinerary: list[ItineraryEntry] = Field(default_factory=list)


class DashboardResponse(ApiModel):
    """Record counts and the next sessions."""
    workshops: int
    educators: int
    classes: int
    sessions: int
    upcoming: list[Session] = Field(default_factory=list)


# Request/Response Models for API endpoints
class CreateWorkshopRequest(ApiModel):
    """Request model for creating or updating a workshop."""
    name: str
    hours_load: float
    description: str = ""


class CreateEducatorRequest(ApiModel):
    """Request model for creating or updating an educator."""
    name: str
    email: str = ""
    phone: str = ""


class CreateClassRequest(ApiModel):
    """Request model for creating or updating a class."""
    name: str
    period: str = ""
    notes: str = ""


class CreateSessionsRequest(ApiModel):
    """Request model for scheduling one session per date."""
    workshop_id: int
    educator_id: int
    class_id: int
    start_time: str
    end_time: str
    dates: list[str]
    notes: str = ""


class CreateSessionsResponse(ApiModel):
    """Outcome of a batch creation."""
    accepted: bool
    created_sessions: list[Session] = Field(default_factory=list)
    conflicting_dates: list[str] = Field(default_factory=list)
    reason: t.Optional[str] = None


class UpdateSessionRequest(ApiModel):
    """Request model for editing a session."""
    workshop_id: int
    educator_id: int
    class_id: int
    date: str
    start_time: str
    end_time: str
    notes: str = ""


class UpdateSessionResponse(ApiModel):
    """Outcome of a session edit."""
    accepted: bool
    session: t.Optional[Session] = None


class CanDeleteResponse(ApiModel):
    can_delete: bool

