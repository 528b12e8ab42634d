# -*- coding: utf-8 -*-
"""Tests for batch session creation, edits and removal."""
from dataclasses import replace

import pytest

from scheduling_server.errors import RecordNotFoundError, ValidationError
from scheduling_server.models import EntityKind, SessionTemplate
from scheduling_server.scheduler import REASON_CONFLICT, REASON_NO_DATES, SessionScheduler


def _template(seeded, start: str = "09:00", end: str = "10:00", educator: int = 0) -> SessionTemplate:
    return SessionTemplate(
        workshop_id=seeded.workshop,
        educator_id=educator or seeded.educator,
        class_id=seeded.school_class,
        start_time=start,
        end_time=end,
        notes="Bring laptops",
    )


def test_batch_creates_one_session_per_date(workspace, seeded) -> None:
    outcome = workspace.create_sessions(_template(seeded), ["2024-01-10", "2024-01-11"])

    assert outcome.accepted
    assert outcome.conflicting_dates == []
    assert [s.date for s in outcome.created_sessions] == ["2024-01-10", "2024-01-11"]
    stored = workspace.store.get(EntityKind.SESSIONS)
    assert [s.id for s in stored] == [s.id for s in outcome.created_sessions]
    assert all(s.notes == "Bring laptops" for s in stored)


def test_batch_is_all_or_nothing(workspace, seeded) -> None:
    """One colliding date rejects the whole batch, including the free dates."""
    workspace.create_sessions(_template(seeded, "09:30", "10:30"), ["2024-01-11"])

    outcome = workspace.create_sessions(_template(seeded), ["2024-01-10", "2024-01-11"])

    assert not outcome.accepted
    assert outcome.reason == REASON_CONFLICT
    assert outcome.created_sessions == []
    assert outcome.conflicting_dates == ["2024-01-11"]
    assert [s.date for s in workspace.store.get(EntityKind.SESSIONS)] == ["2024-01-11"]


def test_batch_skips_blank_dates(workspace, seeded) -> None:
    outcome = workspace.create_sessions(_template(seeded), ["", "2024-01-12", "   "])

    assert outcome.accepted
    assert [s.date for s in outcome.created_sessions] == ["2024-01-12"]


def test_batch_without_dates_is_rejected(workspace, seeded) -> None:
    outcome = workspace.create_sessions(_template(seeded), ["", ""])

    assert not outcome.accepted
    assert outcome.reason == REASON_NO_DATES
    assert outcome.conflicting_dates == []
    assert workspace.store.get(EntityKind.SESSIONS) == []


def test_other_educator_same_slot_is_accepted(workspace, seeded) -> None:
    workspace.create_sessions(_template(seeded), ["2024-01-10"])

    outcome = workspace.create_sessions(_template(seeded, educator=seeded.other_educator), ["2024-01-10"])

    assert outcome.accepted


def test_duplicate_dates_are_checked_against_pre_batch_sessions_only(workspace, seeded) -> None:
    """Candidates of one batch are not compared with each other by default."""
    outcome = workspace.create_sessions(_template(seeded), ["2024-01-10", "2024-01-10"])

    assert outcome.accepted
    assert len(outcome.created_sessions) == 2


def test_check_within_batch_rejects_duplicate_dates(workspace, seeded) -> None:
    scheduler = SessionScheduler(workspace.store, check_within_batch=True)

    outcome = scheduler.create_sessions(_template(seeded), ["2024-01-10", "2024-01-11", "2024-01-10"])

    assert outcome.reason == REASON_CONFLICT
    assert outcome.conflicting_dates == ["2024-01-10"]
    assert workspace.store.get(EntityKind.SESSIONS) == []


@pytest.mark.parametrize(
    ("start", "end"),
    [("10:00", "10:00"), ("11:00", "10:00"), ("9:00", "10:00"), ("09:00", "24:00"), ("", "10:00")],
)
def test_invalid_time_range_is_a_validation_error(workspace, seeded, start: str, end: str) -> None:
    with pytest.raises(ValidationError):
        workspace.create_sessions(_template(seeded, start, end), ["2024-01-10"])
    assert workspace.store.get(EntityKind.SESSIONS) == []


def test_unknown_reference_is_a_validation_error(workspace, seeded) -> None:
    template = replace(_template(seeded), class_id=123456)

    with pytest.raises(ValidationError, match="classes"):
        workspace.create_sessions(template, ["2024-01-10"])


def test_malformed_date_is_a_validation_error(workspace, seeded) -> None:
    with pytest.raises(ValidationError):
        workspace.create_sessions(_template(seeded), ["2024-01-10", "2024-02-30"])
    assert workspace.store.get(EntityKind.SESSIONS) == []


def test_update_to_same_slot_succeeds(workspace, seeded) -> None:
    """A session never conflicts with its own previous state."""
    session = workspace.create_sessions(_template(seeded), ["2024-01-10"]).created_sessions[0]

    assert workspace.update_session(replace(session))
    assert workspace.update_session(replace(session, start_time="09:30", end_time="10:30"))
    assert workspace.store.require(EntityKind.SESSIONS, session.id).start_time == "09:30"


def test_conflicting_update_leaves_session_unchanged(workspace, seeded) -> None:
    morning = workspace.create_sessions(_template(seeded, "09:00", "10:00"), ["2024-01-10"]).created_sessions[0]
    workspace.create_sessions(_template(seeded, "11:00", "12:00"), ["2024-01-10"])

    accepted = workspace.update_session(replace(morning, end_time="11:30"))

    assert not accepted
    assert workspace.store.require(EntityKind.SESSIONS, morning.id).end_time == "10:00"


def test_update_can_move_session_to_another_educator(workspace, seeded) -> None:
    session = workspace.create_sessions(_template(seeded), ["2024-01-10"]).created_sessions[0]

    assert workspace.update_session(replace(session, educator_id=seeded.other_educator))
    assert workspace.store.require(EntityKind.SESSIONS, session.id).educator_id == seeded.other_educator


def test_update_unknown_session_raises(workspace, seeded) -> None:
    session = workspace.create_sessions(_template(seeded), ["2024-01-10"]).created_sessions[0]

    with pytest.raises(RecordNotFoundError):
        workspace.update_session(replace(session, id=1))


def test_delete_session_frees_the_slot(workspace, seeded) -> None:
    session = workspace.create_sessions(_template(seeded), ["2024-01-10"]).created_sessions[0]

    workspace.delete_session(session.id)
    workspace.delete_session(session.id)

    assert workspace.store.get(EntityKind.SESSIONS) == []
    assert workspace.create_sessions(_template(seeded), ["2024-01-10"]).accepted


def test_created_ids_are_unique_and_increasing(workspace, seeded) -> None:
    dates = [f"2024-02-{day:02d}" for day in range(1, 29)]

    created = workspace.create_sessions(_template(seeded), dates).created_sessions

    ids = [s.id for s in created]
    assert ids == sorted(ids)
    assert len(set(ids)) == len(ids)
    assert min(ids) > seeded.other_class
