# -*- coding: utf-8 -*-
"""
In-memory entity store for workshops, educators, classes and sessions.

The store is plain data: four ordered collections keyed by id, with
insert/update/remove operations. Rules about what may be inserted or removed
live in the scheduler and the integrity guard; saving the state somewhere
durable is the job of :mod:`scheduling_server.workspace`.
"""
from __future__ import annotations

import copy
import random
import time
import typing as t

from .errors import RecordNotFoundError, ValidationError
from .models import RECORD_TYPES, EntityKind, Record, StoreState


class IdGenerator:
    """Hands out process-unique, strictly increasing integer ids.

    Each id is the current time in milliseconds plus a random tie-breaker,
    bumped past the last id handed out (or observed) when the clock has not
    moved far enough.
    """

    def __init__(
            self,
            clock: t.Callable[[], float] = time.time,
            rng: t.Optional[random.Random] = None,
    ) -> None:
        self._clock = clock
        self._rng = rng or random.Random()
        self._last = 0

    def observe(self, existing_id: int) -> None:
        """Makes sure later ids are greater than ``existing_id``."""
        if existing_id > self._last:
            self._last = existing_id

    def __call__(self) -> int:
        candidate = int(self._clock() * 1000) + self._rng.randrange(10000)
        if candidate <= self._last:
            candidate = self._last + 1
        self._last = candidate
        return candidate


class EntityStore:
    """Holds the four collections and mutates them by id."""

    def __init__(
            self,
            state: t.Optional[StoreState] = None,
            id_generator: t.Optional[IdGenerator] = None,
    ) -> None:
        self._new_id = id_generator or IdGenerator()
        self._collections: dict[EntityKind, list[Record]] = {kind: [] for kind in EntityKind}
        if state is not None:
            self.replace(state)

    def new_id(self) -> int:
        """Returns a fresh id without inserting anything."""
        return self._new_id()

    def get(self, kind: t.Union[EntityKind, str]) -> list[Record]:
        """Returns the records of one collection, in insertion order."""
        return list(self._collections[EntityKind(kind)])

    def find(self, kind: t.Union[EntityKind, str], record_id: int) -> t.Optional[Record]:
        for record in self._collections[EntityKind(kind)]:
            if record.id == record_id:
                return record
        return None

    def require(self, kind: t.Union[EntityKind, str], record_id: int) -> Record:
        record = self.find(kind, record_id)
        if record is None:
            raise RecordNotFoundError(EntityKind(kind).value, record_id)
        return record

    def add(self, kind: t.Union[EntityKind, str], fields: t.Mapping[str, t.Any]) -> int:
        """Creates a record from ``fields`` under a fresh id and returns the id.

        :param kind: Collection to insert into.
        :param fields: Record fields, without ``id``.
        :return: The id assigned to the new record.
        """
        kind = EntityKind(kind)
        if "id" in fields:
            raise ValidationError("Ids are assigned by the store; do not pass 'id'.")
        record_id = self.new_id()
        try:
            record = RECORD_TYPES[kind](id=record_id, **fields)
        except TypeError as exc:
            raise ValidationError(f"Invalid fields for {kind.value}: {exc}") from exc
        self._collections[kind].append(record)
        return record_id

    def update(self, kind: t.Union[EntityKind, str], record: Record) -> None:
        """Replaces the stored record that has the same id, keeping its position."""
        kind = EntityKind(kind)
        records = self._collections[kind]
        for index, existing in enumerate(records):
            if existing.id == record.id:
                records[index] = record
                return
        raise RecordNotFoundError(kind.value, record.id)

    def remove(self, kind: t.Union[EntityKind, str], record_id: int) -> None:
        kind = EntityKind(kind)
        records = self._collections[kind]
        for index, existing in enumerate(records):
            if existing.id == record_id:
                del records[index]
                return
        raise RecordNotFoundError(kind.value, record_id)

    def extend(self, kind: t.Union[EntityKind, str], records: t.Iterable[Record]) -> None:
        """Appends several records in one step; nothing is appended if any id is taken."""
        kind = EntityKind(kind)
        records = list(records)
        taken = {existing.id for existing in self._collections[kind]}
        for record in records:
            if record.id in taken:
                raise ValidationError(f"Duplicate id {record.id} in {kind.value}.")
            taken.add(record.id)
        self._collections[kind].extend(records)
        for record in records:
            self._new_id.observe(record.id)

    def replace(self, state: StoreState) -> None:
        """Swaps in a whole new state (no merge)."""
        collections = {
            EntityKind.WORKSHOPS: list(state.workshops),
            EntityKind.EDUCATORS: list(state.educators),
            EntityKind.CLASSES: list(state.classes),
            EntityKind.SESSIONS: list(state.sessions),
        }
        for kind, records in collections.items():
            ids = [record.id for record in records]
            if len(ids) != len(set(ids)):
                raise ValidationError(f"Duplicate ids in {kind.value}.")
        self._collections = collections
        for records in collections.values():
            for record in records:
                self._new_id.observe(record.id)

    def clear(self) -> None:
        self._collections = {kind: [] for kind in EntityKind}

    def snapshot(self) -> StoreState:
        """Returns a deep copy of the current state."""
        return StoreState(
            workshops=copy.deepcopy(self._collections[EntityKind.WORKSHOPS]),
            educators=copy.deepcopy(self._collections[EntityKind.EDUCATORS]),
            classes=copy.deepcopy(self._collections[EntityKind.CLASSES]),
            sessions=copy.deepcopy(self._collections[EntityKind.SESSIONS]),
        )
