# -*- coding: utf-8 -*-
"""Referential integrity checks for deleting workshops, educators and classes."""
from __future__ import annotations

import typing as t

from .errors import ValidationError
from .models import EntityKind, Session

FOREIGN_KEYS: dict[EntityKind, str] = {
    EntityKind.WORKSHOPS: "workshop_id",
    EntityKind.EDUCATORS: "educator_id",
    EntityKind.CLASSES: "class_id",
}


def referencing_sessions(
        kind: t.Union[EntityKind, str],
        record_id: int,
        sessions: t.Iterable[Session],
) -> list[Session]:
    """Returns the sessions whose foreign key for ``kind`` equals ``record_id``."""
    kind = EntityKind(kind)
    if kind not in FOREIGN_KEYS:
        raise ValidationError(f"Sessions do not reference {kind.value}.")
    attribute = FOREIGN_KEYS[kind]
    return [session for session in sessions if getattr(session, attribute) == record_id]


def can_delete(kind: t.Union[EntityKind, str], record_id: int, sessions: t.Iterable[Session]) -> bool:
    """True iff no session references the record."""
    return not referencing_sessions(kind, record_id, sessions)
