# -*- coding: utf-8 -*-
"""
Session scheduling: batch creation, edits and removal.

Every write goes through the same gate: validate the request, run the
conflict detector, then mutate the store in a single step or not at all.
"""
from __future__ import annotations

import logging
import typing as t
from dataclasses import dataclass, field, replace

from .conflicts import find_conflicts
from .errors import ValidationError
from .models import EntityKind, Session, SessionId, SessionTemplate
from .store import EntityStore
from .timeslots import is_valid_time, parse_date

logger = logging.getLogger(__name__)

REASON_CONFLICT = "conflict"
REASON_NO_DATES = "no_dates"


@dataclass
class BatchOutcome:
    """Result of a batch creation.

    ``reason`` is None when the batch was committed, ``"conflict"`` when at
    least one date collided (``conflicting_dates`` lists them) and
    ``"no_dates"`` when no usable date was given.
    """
    created_sessions: list[Session] = field(default_factory=list)
    conflicting_dates: list[str] = field(default_factory=list)
    reason: t.Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.reason is None


def _is_blank(value: t.Optional[str]) -> bool:
    return value is None or not str(value).strip()


class SessionScheduler:
    """Creates, edits and removes sessions while keeping educators single-booked."""

    def __init__(self, store: EntityStore, check_within_batch: bool = False) -> None:
        """
        :param store: The entity store to read from and write to.
        :param check_within_batch: Also check batch candidates against each
            other, not only against sessions that existed before the batch.
        """
        self._store = store
        self.check_within_batch = check_within_batch

    def _validate_slot(self, slot: t.Union[SessionTemplate, Session]) -> None:
        missing = [
            name for name in ("workshop_id", "educator_id", "class_id", "start_time", "end_time")
            if not getattr(slot, name)
        ]
        if missing:
            raise ValidationError(f"Missing required field(s): {', '.join(missing)}.")
        for name in ("start_time", "end_time"):
            if not is_valid_time(getattr(slot, name)):
                raise ValidationError(f"{name} must be a 24h HH:MM time, got {getattr(slot, name)!r}.")
        if slot.start_time >= slot.end_time:
            raise ValidationError("The end time must be later than the start time.")
        references = (
            (EntityKind.WORKSHOPS, slot.workshop_id),
            (EntityKind.EDUCATORS, slot.educator_id),
            (EntityKind.CLASSES, slot.class_id),
        )
        for kind, record_id in references:
            if self._store.find(kind, record_id) is None:
                raise ValidationError(f"Unknown id {record_id} in {kind.value}.")

    def create_sessions(self, template: SessionTemplate, dates: t.Sequence[str]) -> BatchOutcome:
        """Schedules ``template`` on every non-blank date, all or nothing.

        Blank dates are skipped. Each date is checked against the sessions
        stored before the batch started (and against earlier candidates of
        the same batch when ``check_within_batch`` is set). If any date
        collides nothing is stored.

        :param template: Workshop, educator, class and time range shared by all dates.
        :param dates: Candidate "YYYY-MM-DD" dates; blank entries are ignored.
        :return: A BatchOutcome describing what was created or why nothing was.
        """
        self._validate_slot(template)
        valid_dates = [d.strip() for d in dates if not _is_blank(d)]
        for day in valid_dates:
            if parse_date(day) is None:
                raise ValidationError(f"Invalid date {day!r}; expected YYYY-MM-DD.")

        existing = self._store.get(EntityKind.SESSIONS)
        conflicting_dates: list[str] = []
        candidates: list[Session] = []
        for day in valid_dates:
            candidate = Session(
                id=SessionId(self._store.new_id()),
                workshop_id=template.workshop_id,
                educator_id=template.educator_id,
                class_id=template.class_id,
                date=day,
                start_time=template.start_time,
                end_time=template.end_time,
                notes=template.notes,
            )
            against = existing + candidates if self.check_within_batch else existing
            if find_conflicts(candidate, against):
                conflicting_dates.append(day)
            else:
                candidates.append(candidate)

        if conflicting_dates:
            logger.warning(
                "Rejected batch for educator %s: conflicts on %s",
                template.educator_id, ", ".join(conflicting_dates),
            )
            return BatchOutcome(conflicting_dates=conflicting_dates, reason=REASON_CONFLICT)
        if not candidates:
            return BatchOutcome(reason=REASON_NO_DATES)

        self._store.extend(EntityKind.SESSIONS, candidates)
        logger.info("Scheduled %d session(s) for educator %s", len(candidates), template.educator_id)
        return BatchOutcome(created_sessions=candidates)

    def update_session(self, session: Session) -> bool:
        """Replaces a stored session unless the new time range double-books its educator.

        :param session: The edited session; its id selects the stored one.
        :return: True if stored, False if rejected because of a conflict.
        """
        self._store.require(EntityKind.SESSIONS, session.id)
        self._validate_slot(session)
        if _is_blank(session.date) or parse_date(session.date) is None:
            raise ValidationError(f"Invalid date {session.date!r}; expected YYYY-MM-DD.")

        if find_conflicts(session, self._store.get(EntityKind.SESSIONS), exclude_session_id=session.id):
            return False
        self._store.update(EntityKind.SESSIONS, replace(session))
        logger.info("Updated session %s", session.id)
        return True

    def delete_session(self, session_id: int) -> bool:
        """Removes a session. Removing an id that is not stored does nothing.

        :return: True if a session was removed.
        """
        if self._store.find(EntityKind.SESSIONS, session_id) is None:
            logger.debug("Session %s already absent", session_id)
            return False
        self._store.remove(EntityKind.SESSIONS, session_id)
        return True
