# -*- coding: utf-8 -*-
"""Shared fixtures: a workspace pinned to Wednesday 2024-01-10 with a few records."""
from dataclasses import dataclass
from datetime import date

import pytest

from scheduling_server.models import EntityKind
from scheduling_server.workspace import SchedulingWorkspace

TODAY = date(2024, 1, 10)


@dataclass
class Seed:
    """Ids of the records created by the ``seeded`` fixture."""
    workshop: int
    other_workshop: int
    educator: int
    other_educator: int
    school_class: int
    other_class: int


@pytest.fixture
def workspace() -> SchedulingWorkspace:
    """An in-memory workspace without a save hook."""
    return SchedulingWorkspace(today=lambda: TODAY)


@pytest.fixture
def seeded(workspace: SchedulingWorkspace) -> Seed:
    """Two workshops, two educators and two classes in ``workspace``."""
    return Seed(
        workshop=workspace.add_entity(EntityKind.WORKSHOPS, {"name": "Robotics", "hours_load": 20}),
        other_workshop=workspace.add_entity(EntityKind.WORKSHOPS, {"name": "Painting", "hours_load": 8}),
        educator=workspace.add_entity(EntityKind.EDUCATORS, {"name": "Ana Souza"}),
        other_educator=workspace.add_entity(EntityKind.EDUCATORS, {"name": "Bruno Lima"}),
        school_class=workspace.add_entity(EntityKind.CLASSES, {"name": "5th grade A"}),
        other_class=workspace.add_entity(EntityKind.CLASSES, {"name": "6th grade B"}),
    )
