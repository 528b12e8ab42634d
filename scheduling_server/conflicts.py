# -*- coding: utf-8 -*-
"""
Conflict detection for educator time.

An educator cannot be in two sessions at once. Two sessions conflict when
they share an educator and a date and their half-open ``[start, end)``
time ranges overlap. Touching ranges (one ends exactly when the other
starts) do not conflict. Workshops and classes are never checked.

Times are compared as strings, which is valid because they are fixed-width
zero-padded "HH:MM".
"""
from __future__ import annotations

import logging
import typing as t

from .models import Session

logger = logging.getLogger(__name__)


class Slot(t.Protocol):
    """Anything carrying an educator, a date and a time range."""
    educator_id: int
    date: str
    start_time: str
    end_time: str


def intervals_overlap(start_a: str, end_a: str, start_b: str, end_b: str) -> bool:
    """True when ``[start_a, end_a)`` and ``[start_b, end_b)`` share at least one instant."""
    return start_a < end_b and end_a > start_b


def find_conflicts(
        candidate: Slot,
        existing_sessions: t.Iterable[Session],
        exclude_session_id: t.Optional[int] = None,
) -> list[Session]:
    """Returns the existing sessions that would double-book the candidate's educator.

    :param candidate: The proposed session (or anything shaped like one).
    :param existing_sessions: Sessions already scheduled.
    :param exclude_session_id: Id to ignore, so an edited session does not clash with itself.
    :return: Conflicting sessions, in input order.
    """
    conflicts = []
    for session in existing_sessions:
        if exclude_session_id is not None and session.id == exclude_session_id:
            continue
        if session.educator_id != candidate.educator_id or session.date != candidate.date:
            continue
        if intervals_overlap(candidate.start_time, candidate.end_time, session.start_time, session.end_time):
            conflicts.append(session)

    if conflicts:
        logger.warning(
            "Found %d conflict(s) for educator %s on %s between %s-%s",
            len(conflicts), candidate.educator_id, candidate.date,
            candidate.start_time, candidate.end_time,
        )
    return conflicts


def has_conflict(
        candidate: Slot,
        existing_sessions: t.Iterable[Session],
        exclude_session_id: t.Optional[int] = None,
) -> bool:
    """Simplified boolean form of :func:`find_conflicts`."""
    return len(find_conflicts(candidate, existing_sessions, exclude_session_id)) > 0
