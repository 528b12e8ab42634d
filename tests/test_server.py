# -*- coding: utf-8 -*-
"""Tests for the MCP tools and their text formatters."""
import typing as t
from dataclasses import replace

import pytest
from fastmcp.exceptions import ToolError

from scheduling_server import server
from scheduling_server.models import ClassReport, EntityKind, ItineraryEntry, SessionTemplate


async def get_tool_functions() -> dict[str, t.Callable[..., t.Any]]:
    """Return the plain functions behind the MCP tools, keyed by tool name."""
    tools = await server.mcp.get_tools()
    return {name: tool.fn for name, tool in tools.items()}


@pytest.fixture
def tools_workspace(workspace):
    server.set_workspace(workspace)
    yield workspace
    server.set_workspace(None)


@pytest.mark.asyncio
async def test_tools_schedule_and_list(tools_workspace) -> None:
    tools = await get_tool_functions()
    workshop = tools["add_workshop"]("Robotics", 20)
    educator = tools["add_educator"]("Ana Souza")
    school_class = tools["add_class"]("5th grade A", period="morning")

    outcome = tools["create_sessions"](workshop, educator, school_class, "09:00", "10:00", ["2024-01-12", "2024-01-10"])
    clash = tools["create_sessions"](workshop, educator, school_class, "09:30", "11:00", ["2024-01-10"])

    assert outcome.accepted
    assert clash.conflicting_dates == ["2024-01-10"]
    assert [s.date for s in tools["list_sessions"]()] == ["2024-01-10", "2024-01-12"]
    assert [s.date for s in tools["list_sessions"](period="past")] == []
    assert not tools["can_delete_entity"](EntityKind.EDUCATORS, educator)


@pytest.mark.asyncio
async def test_tools_update_and_delete(tools_workspace, seeded) -> None:
    tools = await get_tool_functions()
    template = SessionTemplate(seeded.workshop, seeded.educator, seeded.school_class, "09:00", "10:00")
    session = tools_workspace.create_sessions(template, ["2024-01-10"]).created_sessions[0]

    assert tools["update_session"](replace(session, start_time="08:00"))
    tools["delete_session"](session.id)

    assert tools["list_sessions"]() == []
    tools["delete_entity"](EntityKind.EDUCATORS, seeded.educator)
    assert tools_workspace.store.find(EntityKind.EDUCATORS, seeded.educator) is None


@pytest.mark.asyncio
async def test_tool_errors_become_tool_errors(tools_workspace) -> None:
    tools = await get_tool_functions()
    with pytest.raises(ToolError, match="hours load"):
        tools["add_workshop"]("Robotics", 0)
    with pytest.raises(ToolError):
        tools["delete_entity"](EntityKind.CLASSES, 1)


@pytest.mark.asyncio
async def test_tools_start_empty_when_data_file_is_unreadable(tmp_path, monkeypatch) -> None:
    unreadable = tmp_path / "data.json"
    unreadable.mkdir()
    monkeypatch.setattr(server, "DATA_FILE", str(unreadable))
    server.set_workspace(None)
    tools = await get_tool_functions()

    try:
        assert tools["list_sessions"]() == []
        assert server.format_sessions([], server.get_workspace()) == "📅 No sessions found."
    finally:
        server.set_workspace(None)


def test_format_sessions(workspace, seeded) -> None:
    template = SessionTemplate(seeded.workshop, seeded.educator, seeded.school_class, "09:00", "10:00")
    workspace.create_sessions(template, ["2024-01-09", "2024-01-11"])

    text = server.format_sessions(workspace.list_sessions(), workspace)

    lines = text.splitlines()
    assert lines[0] == "📅 SESSIONS"
    assert "Robotics" in lines[4] and "Ana Souza" in lines[4] and lines[4].endswith("✓")
    assert "2024-01-11" in lines[5] and not lines[5].endswith("✓")
    assert lines[-1] == "Total: 2 session(s)"


def test_format_sessions_empty(workspace) -> None:
    assert server.format_sessions([], workspace) == "📅 No sessions found."


def test_format_reports(workspace, seeded) -> None:
    template = SessionTemplate(seeded.workshop, seeded.educator, seeded.school_class, "09:00", "10:30")
    workspace.create_sessions(template, ["2024-01-10"])

    educators = server.format_educator_report(workspace.educator_report())
    workshops = server.format_workshop_report(workspace.workshop_report())

    assert "Ana Souza" in educators and "1.5" in educators
    assert "2024-01-10 09:00-10:30 Robotics" in educators
    assert "Robotics" in workshops and "Painting" not in workshops
    assert server.format_educator_report([]) == "👩‍🏫 No sessions in this period."


def test_format_class_report() -> None:
    report = ClassReport(
        class_name="5th grade A",
        total_minutes=90,
        workshop_count=1,
        educator_count=1,
        day_count=1,
        itinerary=[ItineraryEntry("2024-01-10", "09:00 - 10:30", "Robotics", "Ana Souza")],
    )

    text = server.format_class_report(report)

    assert text.splitlines()[0] == "🎒 ITINERARY: 5th grade A"
    assert "Hours: 1.5" in text
    assert "09:00 - 10:30" in text
    assert server.format_class_report(None).startswith("🎒 No sessions found")
