# -*- coding: utf-8 -*-
"""
The application root: one store, one scheduler, one save hook.

Every presentation surface (MCP tools, REST service, CLI) talks to a
:class:`SchedulingWorkspace`. After each successful mutation the workspace
hands a snapshot of the state to its ``save`` callable. A failing save is
logged and the in-memory change is kept.
"""
from __future__ import annotations

import logging
import os
import typing as t
from datetime import date

from .errors import PersistenceError, ReferenceInUseError, ValidationError
from .integrity import can_delete, referencing_sessions
from .models import (
    CalendarEvent,
    ClassReport,
    DashboardSummary,
    EducatorReportRow,
    EntityKind,
    Period,
    RECORD_TYPES,
    Record,
    Session,
    SessionFilters,
    SessionTemplate,
    StoreState,
    WorkshopReportRow,
)
from .persistence import JsonFileBackend, export_document, export_filename, import_document
from .queries import build_month_grid, filter_sessions, to_calendar_events
from .reports import class_report, dashboard_summary, educator_report, workshop_report
from .scheduler import BatchOutcome, SessionScheduler
from .store import EntityStore

logger = logging.getLogger(__name__)

DATA_FILE = os.getenv("WORKSHOP_SCHEDULER_DATA_FILE", "workshop_scheduler_data.json")
CHECK_WITHIN_BATCH = os.getenv("WORKSHOP_SCHEDULER_CHECK_WITHIN_BATCH", "").lower() in ("1", "true", "yes")

SaveHook = t.Callable[[StoreState], None]


def _require_name(fields: t.Mapping[str, t.Any], label: str) -> None:
    name = fields.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(f"Please provide the {label} name.")


def _validate_workshop(fields: t.Mapping[str, t.Any]) -> None:
    _require_name(fields, "workshop")
    hours_load = fields.get("hours_load")
    # NaN fails the comparison and is rejected too.
    if isinstance(hours_load, bool) or not isinstance(hours_load, (int, float)) or not hours_load > 0:
        raise ValidationError("The workshop hours load must be a number greater than 0.")


VALIDATORS: dict[EntityKind, t.Callable[[t.Mapping[str, t.Any]], None]] = {
    EntityKind.WORKSHOPS: _validate_workshop,
    EntityKind.EDUCATORS: lambda fields: _require_name(fields, "educator"),
    EntityKind.CLASSES: lambda fields: _require_name(fields, "class"),
}


class SchedulingWorkspace:
    """Owns the entity store and exposes every operation the front ends need."""

    def __init__(
            self,
            state: t.Optional[StoreState] = None,
            save: t.Optional[SaveHook] = None,
            check_within_batch: bool = CHECK_WITHIN_BATCH,
            today: t.Optional[t.Callable[[], date]] = None,
    ) -> None:
        """
        :param state: Initial state; empty when omitted.
        :param save: Called with a snapshot after every successful mutation.
        :param check_within_batch: Passed on to the SessionScheduler.
        :param today: Clock used for period filters; ``date.today`` when omitted.
        """
        self.store = EntityStore(state)
        self.scheduler = SessionScheduler(self.store, check_within_batch=check_within_batch)
        self._save = save
        self._today = today or date.today

    @classmethod
    def from_file(cls, path: t.Union[str, os.PathLike] = DATA_FILE, **kwargs: t.Any) -> "SchedulingWorkspace":
        """Loads the state from a JSON file and saves back to it after each mutation.

        A file that cannot be read is logged and the workspace starts empty.
        """
        backend = JsonFileBackend(path)
        try:
            state = backend.load()
        except PersistenceError:
            logger.exception("Error loading state from %s; starting empty", backend.path)
            state = None
        return cls(state=state, save=backend.save, **kwargs)

    def today(self) -> date:
        return self._today()

    def _persist(self) -> None:
        if self._save is None:
            return
        try:
            self._save(self.store.snapshot())
        except Exception:
            logger.exception("Error saving state; in-memory changes are kept")

    def state(self) -> StoreState:
        return self.store.snapshot()

    # --- Workshops, educators, classes ---

    def add_entity(self, kind: t.Union[EntityKind, str], fields: t.Mapping[str, t.Any]) -> int:
        kind = EntityKind(kind)
        if kind is EntityKind.SESSIONS:
            raise ValidationError("Sessions are created with create_sessions.")
        VALIDATORS[kind](fields)
        record_id = self.store.add(kind, fields)
        self._persist()
        return record_id

    def update_entity(self, kind: t.Union[EntityKind, str], record: Record) -> None:
        kind = EntityKind(kind)
        if kind is EntityKind.SESSIONS:
            raise ValidationError("Sessions are updated with update_session.")
        if not isinstance(record, RECORD_TYPES[kind]):
            raise ValidationError(f"Expected a {RECORD_TYPES[kind].__name__} record for {kind.value}.")
        fields = {name: value for name, value in vars(record).items() if name != "id"}
        VALIDATORS[kind](fields)
        self.store.update(kind, record)
        self._persist()

    def can_delete_entity(self, kind: t.Union[EntityKind, str], record_id: int) -> bool:
        return can_delete(kind, record_id, self.store.get(EntityKind.SESSIONS))

    def delete_entity(self, kind: t.Union[EntityKind, str], record_id: int) -> None:
        """Removes a workshop, educator or class that no session references.

        :raises ReferenceInUseError: If sessions still reference the record.
        """
        kind = EntityKind(kind)
        in_use = referencing_sessions(kind, record_id, self.store.get(EntityKind.SESSIONS))
        if in_use:
            raise ReferenceInUseError(kind.value, record_id, len(in_use))
        self.store.remove(kind, record_id)
        self._persist()

    # --- Sessions ---

    def list_sessions(self, filters: t.Optional[SessionFilters] = None) -> list[Session]:
        return filter_sessions(self.store.get(EntityKind.SESSIONS), filters, self.today())

    def create_sessions(self, template: SessionTemplate, dates: t.Sequence[str]) -> BatchOutcome:
        outcome = self.scheduler.create_sessions(template, dates)
        if outcome.accepted:
            self._persist()
        return outcome

    def update_session(self, session: Session) -> bool:
        accepted = self.scheduler.update_session(session)
        if accepted:
            self._persist()
        return accepted

    def delete_session(self, session_id: int) -> None:
        if self.scheduler.delete_session(session_id):
            self._persist()

    # --- Views ---

    def calendar_events(self, filters: t.Optional[SessionFilters] = None) -> list[CalendarEvent]:
        return to_calendar_events(
            self.list_sessions(filters),
            self.store.get(EntityKind.WORKSHOPS),
            self.store.get(EntityKind.CLASSES),
        )

    def month_grid(self, year: int, month: int, filters: t.Optional[SessionFilters] = None):
        return build_month_grid(year, month, self.list_sessions(filters), self.today())

    def educator_report(self, period: t.Union[Period, str] = Period.ALL) -> list[EducatorReportRow]:
        return educator_report(self.state(), period, self.today())

    def workshop_report(self, period: t.Union[Period, str] = Period.ALL) -> list[WorkshopReportRow]:
        return workshop_report(self.state(), period, self.today())

    def class_report(self, class_id: int, period: t.Union[Period, str] = Period.ALL) -> t.Optional[ClassReport]:
        if not class_id:
            raise ValidationError("Select a class to generate the report.")
        return class_report(self.state(), class_id, period, self.today())

    def dashboard(self, limit: int = 5) -> DashboardSummary:
        return dashboard_summary(self.state(), self.today(), limit)

    # --- Data management ---

    def export_data(self) -> tuple[str, str]:
        """Returns ``(filename, json_text)`` for a download of the full state."""
        return export_filename(self.today()), export_document(self.state())

    def import_data(self, text: t.Union[str, bytes]) -> None:
        """Replaces the whole state with an imported document.

        :raises DocumentError: If the document is malformed; the current state is untouched.
        """
        self.store.replace(import_document(text))
        logger.info("Imported data replaced the current state")
        self._persist()

    def clear(self) -> None:
        self.store.clear()
        logger.info("All data removed")
        self._persist()
