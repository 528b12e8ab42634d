# -*- coding: utf-8 -*-
"""Tests for the JSON document, export/import and the file backend."""
import json
from datetime import date

import pytest

from scheduling_server.errors import DocumentError, PersistenceError
from scheduling_server.models import EntityKind, SessionTemplate, StoreState
from scheduling_server.persistence import (
    JsonFileBackend,
    export_document,
    export_filename,
    import_document,
    load_document,
)
from scheduling_server.workspace import SchedulingWorkspace

DOCUMENT = {
    "workshops": [{"id": 1, "name": "Robotics", "hoursLoad": 20, "description": "Lego kits"}],
    "educators": [{"id": 2, "name": "Ana Souza", "email": "ana@example.org", "phone": None}],
    "classes": [{"id": 3, "name": "5th grade A", "period": "morning"}],
    "sessions": [
        {
            "id": 4, "workshopId": 1, "educatorId": 2, "classId": 3,
            "date": "2024-01-10", "startTime": "09:00", "endTime": "10:00", "notes": "",
        },
    ],
}


def test_import_reads_camel_case_records() -> None:
    state = import_document(json.dumps(DOCUMENT))

    assert state.workshops[0].hours_load == 20
    assert state.educators[0].phone == ""
    assert state.classes[0].notes == ""
    session = state.sessions[0]
    assert (session.workshop_id, session.educator_id, session.class_id) == (1, 2, 3)
    assert (session.start_time, session.end_time) == ("09:00", "10:00")


def test_export_uses_camel_case_and_survives_reimport() -> None:
    state = import_document(json.dumps(DOCUMENT))

    text = export_document(state)

    exported = json.loads(text)
    assert exported["sessions"][0]["startTime"] == "09:00"
    assert "hoursLoad" in exported["workshops"][0]
    assert import_document(text) == state


def test_export_keeps_non_ascii_text() -> None:
    document = dict(DOCUMENT, educators=[{"id": 2, "name": "João Conceição"}])

    assert "João Conceição" in export_document(import_document(json.dumps(document)))


@pytest.mark.parametrize(
    "text",
    [
        "{not json",
        "[]",
        json.dumps({"workshops": [], "educators": [], "classes": []}),
        json.dumps(dict(DOCUMENT, sessions={})),
        json.dumps(dict(DOCUMENT, workshops=[{"id": 1, "name": "Robotics"}])),
        json.dumps(dict(DOCUMENT, educators=[{"id": 2, "name": "A"}, {"id": 2, "name": "B"}])),
    ],
    ids=["invalid-json", "not-an-object", "missing-collection", "not-an-array", "bad-record", "duplicate-id"],
)
def test_import_rejects_malformed_documents(text: str) -> None:
    with pytest.raises(DocumentError):
        import_document(text)


def test_failed_import_leaves_state_untouched(workspace, seeded) -> None:
    before = workspace.state()

    with pytest.raises(DocumentError):
        workspace.import_data('{"workshops": []}')

    assert workspace.state() == before


def test_import_replaces_everything(workspace, seeded) -> None:
    workspace.import_data(json.dumps(DOCUMENT))

    state = workspace.state()
    assert [w.name for w in state.workshops] == ["Robotics"]
    assert [e.id for e in state.educators] == [2]
    assert len(state.sessions) == 1
    assert workspace.store.new_id() > 4


def test_load_skips_bad_records_and_missing_collections() -> None:
    text = json.dumps({
        "workshops": [{"id": 1, "name": "Robotics", "hoursLoad": 20}, {"name": "No id"}],
        "educators": "oops",
        "sessions": [DOCUMENT["sessions"][0], DOCUMENT["sessions"][0]],
    })

    state = load_document(text)

    assert [w.id for w in state.workshops] == [1]
    assert state.educators == []
    assert state.classes == []
    assert [s.id for s in state.sessions] == [4]


def test_load_of_garbage_starts_empty() -> None:
    assert load_document("not json at all").sessions == []
    assert load_document("42").workshops == []


def test_export_filename_carries_the_date() -> None:
    assert export_filename(date(2024, 1, 10)) == "workshop-scheduler-backup-2024-01-10.json"


def test_workspace_export(workspace, seeded) -> None:
    filename, text = workspace.export_data()

    assert filename == "workshop-scheduler-backup-2024-01-10.json"
    assert [w["name"] for w in json.loads(text)["workshops"]] == ["Robotics", "Painting"]


def test_backend_missing_file_is_empty_state(tmp_path) -> None:
    state = JsonFileBackend(tmp_path / "missing.json").load()

    assert (state.workshops, state.educators, state.classes, state.sessions) == ([], [], [], [])


def test_backend_save_then_load(tmp_path) -> None:
    backend = JsonFileBackend(tmp_path / "nested" / "data.json")
    state = import_document(json.dumps(DOCUMENT))

    backend.save(state)

    assert backend.load() == state
    assert list((tmp_path / "nested").iterdir()) == [tmp_path / "nested" / "data.json"]


def test_backend_save_error_is_persistence_error(tmp_path) -> None:
    target = tmp_path / "data.json"
    target.mkdir()

    with pytest.raises(PersistenceError):
        JsonFileBackend(target).save(import_document(json.dumps(DOCUMENT)))


def test_workspace_saves_after_every_mutation(tmp_path) -> None:
    path = tmp_path / "data.json"
    workspace = SchedulingWorkspace.from_file(path)
    workshop = workspace.add_entity(EntityKind.WORKSHOPS, {"name": "Robotics", "hours_load": 20})
    educator = workspace.add_entity(EntityKind.EDUCATORS, {"name": "Ana"})
    school_class = workspace.add_entity(EntityKind.CLASSES, {"name": "5A"})
    workspace.create_sessions(SessionTemplate(workshop, educator, school_class, "09:00", "10:00"), ["2024-01-10"])

    reloaded = SchedulingWorkspace.from_file(path)

    assert reloaded.state() == workspace.state()


def test_failed_save_keeps_the_in_memory_change(caplog) -> None:
    def broken_save(state):
        raise PersistenceError("disk full")

    workspace = SchedulingWorkspace(save=broken_save)

    record_id = workspace.add_entity(EntityKind.EDUCATORS, {"name": "Ana"})

    assert workspace.store.find(EntityKind.EDUCATORS, record_id) is not None
    assert "Error saving state" in caplog.text


def test_unreadable_data_file_starts_empty(tmp_path, caplog) -> None:
    unreadable = tmp_path / "data.json"
    unreadable.mkdir()

    workspace = SchedulingWorkspace.from_file(unreadable)

    assert workspace.state() == StoreState()
    assert "Error loading state" in caplog.text
    workspace.add_entity(EntityKind.EDUCATORS, {"name": "Ana"})
    assert [e.name for e in workspace.store.get(EntityKind.EDUCATORS)] == ["Ana"]


def test_any_save_hook_error_keeps_the_change(caplog) -> None:
    def remote_save(state):
        raise RuntimeError("remote store unavailable")

    workspace = SchedulingWorkspace(save=remote_save)

    record_id = workspace.add_entity(EntityKind.CLASSES, {"name": "5A"})

    assert workspace.store.find(EntityKind.CLASSES, record_id) is not None
    assert "remote store unavailable" in caplog.text


def test_deleting_absent_session_does_not_save() -> None:
    saved = []
    workspace = SchedulingWorkspace(state=StoreState(), save=saved.append)
    workshop = workspace.add_entity(EntityKind.WORKSHOPS, {"name": "Robotics", "hours_load": 20})
    educator = workspace.add_entity(EntityKind.EDUCATORS, {"name": "Ana"})
    school_class = workspace.add_entity(EntityKind.CLASSES, {"name": "5A"})
    session = workspace.create_sessions(
        SessionTemplate(workshop, educator, school_class, "09:00", "10:00"), ["2024-01-10"],
    ).created_sessions[0]
    saves_before = len(saved)

    workspace.delete_session(session.id + 1)
    assert len(saved) == saves_before

    workspace.delete_session(session.id)
    assert len(saved) == saves_before + 1
    assert saved[-1].sessions == []


def test_undecodable_data_file_is_persistence_error(tmp_path) -> None:
    target = tmp_path / "data.json"
    target.write_bytes(b"\xff\xfe not utf-8")

    with pytest.raises(PersistenceError):
        JsonFileBackend(target).load()
    assert SchedulingWorkspace.from_file(target).state() == StoreState()
