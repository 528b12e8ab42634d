# -*- coding: utf-8 -*-
"""
The persisted document and the JSON file backend.

The whole state is stored as one JSON object with four arrays
(``workshops``, ``educators``, ``classes``, ``sessions``) whose records use
camelCase field names (``hoursLoad``, ``workshopId``, ``startTime``...).
The same document is used for export and import.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
import typing as t
from dataclasses import asdict
from datetime import date
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from .errors import DocumentError, PersistenceError
from .models import Educator, SchoolClass, Session, StoreState, Workshop

logger = logging.getLogger(__name__)

EXPORT_PREFIX = "workshop-scheduler-backup"


class _Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: t.Any) -> t.Any:
        # Optional text fields may be stored as null; fall back to the defaults.
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class WorkshopRecord(_Record):
    id: int
    name: str
    hours_load: float
    description: str = ""


class EducatorRecord(_Record):
    id: int
    name: str
    email: str = ""
    phone: str = ""


class ClassRecord(_Record):
    id: int
    name: str
    period: str = ""
    notes: str = ""


class SessionRecord(_Record):
    id: int
    workshop_id: int
    educator_id: int
    class_id: int
    date: str
    start_time: str
    end_time: str
    notes: str = ""


# collection name -> (document record model, core dataclass)
COLLECTIONS: dict[str, tuple[type[_Record], type]] = {
    "workshops": (WorkshopRecord, Workshop),
    "educators": (EducatorRecord, Educator),
    "classes": (ClassRecord, SchoolClass),
    "sessions": (SessionRecord, Session),
}


class StateDocument(BaseModel):
    """The persisted/exported document."""
    workshops: list[WorkshopRecord] = Field(default_factory=list)
    educators: list[EducatorRecord] = Field(default_factory=list)
    classes: list[ClassRecord] = Field(default_factory=list)
    sessions: list[SessionRecord] = Field(default_factory=list)

    @classmethod
    def from_state(cls, state: StoreState) -> "StateDocument":
        return cls(**{
            name: [model.model_validate(asdict(record)) for record in getattr(state, name)]
            for name, (model, _) in COLLECTIONS.items()
        })

    def to_state(self) -> StoreState:
        return StoreState(**{
            name: [core(**record.model_dump()) for record in getattr(self, name)]
            for name, (_, core) in COLLECTIONS.items()
        })


def _check_unique_ids(document: StateDocument) -> None:
    for name in COLLECTIONS:
        ids = [record.id for record in getattr(document, name)]
        if len(ids) != len(set(ids)):
            raise DocumentError(f"Duplicate ids in '{name}'.")


def export_document(state: StoreState) -> str:
    """Serializes the state with stable, human-readable formatting."""
    document = StateDocument.from_state(state)
    return json.dumps(document.model_dump(by_alias=True), indent=2, ensure_ascii=False)


def export_filename(today: t.Optional[date] = None) -> str:
    """Name of the export file for the given day, e.g. ``workshop-scheduler-backup-2024-01-10.json``."""
    today = today or date.today()
    return f"{EXPORT_PREFIX}-{today.isoformat()}.json"


def import_document(text: t.Union[str, bytes]) -> StoreState:
    """Parses an imported document, rejecting anything that is not fully well-formed.

    :param text: JSON text of the document.
    :return: The state described by the document.
    :raises DocumentError: If the JSON is invalid, a collection is missing or
        not an array, or a record does not validate.
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DocumentError(f"The file is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise DocumentError("Invalid data structure: expected a JSON object.")
    for name in COLLECTIONS:
        if not isinstance(data.get(name), list):
            raise DocumentError(f"Invalid data structure: '{name}' must be present and be an array.")
    try:
        document = StateDocument.model_validate(data)
    except PydanticValidationError as exc:
        raise DocumentError(f"Invalid record: {exc.errors()[0]['loc']} {exc.errors()[0]['msg']}") from exc
    _check_unique_ids(document)
    return document.to_state()


def load_document(text: t.Union[str, bytes]) -> StoreState:
    """Parses a stored document leniently.

    Missing or non-array collections become empty and records that do not
    validate are skipped, so a damaged file never prevents start-up.
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.exception("Stored state is not valid JSON; starting empty")
        return StoreState()
    if not isinstance(data, dict):
        logger.warning("Stored state is not a JSON object; starting empty")
        return StoreState()

    collections: dict[str, list[t.Any]] = {}
    for name, (model, core) in COLLECTIONS.items():
        raw = data.get(name)
        if not isinstance(raw, list):
            if raw is not None:
                logger.warning("Stored '%s' is not an array; using an empty list", name)
            collections[name] = []
            continue
        records = []
        seen: set[int] = set()
        for item in raw:
            try:
                record = model.model_validate(item)
            except PydanticValidationError:
                logger.warning("Skipping malformed record in '%s': %r", name, item)
                continue
            if record.id in seen:
                logger.warning("Skipping duplicate id %s in '%s'", record.id, name)
                continue
            seen.add(record.id)
            records.append(core(**record.model_dump()))
        collections[name] = records
    return StoreState(**collections)


class JsonFileBackend:
    """Keeps the state in a single JSON file, rewritten wholesale on every save."""

    def __init__(self, path: t.Union[str, Path]) -> None:
        self.path = Path(path)

    def load(self) -> StoreState:
        if not self.path.exists():
            logger.info("No saved data at %s, using initial state", self.path)
            return StoreState()
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise PersistenceError(f"Error reading {self.path}: {exc}") from exc
        return load_document(text)

    def save(self, state: StoreState) -> None:
        text = export_document(state)
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise PersistenceError(f"Error writing {self.path}: {exc}") from exc
