"""
FastAPI service for workshop scheduling.

This service exposes the scheduling core (scheduling_server) as REST API
endpoints: CRUD for workshops, educators and classes, conflict-checked
session scheduling, filtered listings, reports and data import/export.
"""
from __future__ import annotations

import json
import os
import typing as t
from contextlib import asynccontextmanager

from fastapi import Body, FastAPI, HTTPException, Path, Query, Request, Response, status

from scheduling_server.errors import (
    DocumentError,
    RecordNotFoundError,
    ReferenceInUseError,
    SchedulingError,
    ValidationError,
)
from scheduling_server.models import (
    Educator as EducatorRecord,
    EntityKind,
    Period,
    SchoolClass as SchoolClassRecord,
    Session as SessionRecord,
    SessionFilters,
    SessionTemplate,
    Workshop as WorkshopRecord,
)
from scheduling_server.workspace import DATA_FILE, SchedulingWorkspace
from services.shared.models import (
    CalendarEvent,
    CanDeleteResponse,
    ClassReport,
    CreateClassRequest,
    CreateEducatorRequest,
    CreateSessionsRequest,
    CreateSessionsResponse,
    CreateWorkshopRequest,
    DashboardResponse,
    Educator,
    EducatorReportRow,
    SchoolClass,
    Session,
    UpdateSessionRequest,
    UpdateSessionResponse,
    Workshop,
    WorkshopReportRow,
)

SCHEDULING_SERVICE_PORT = int(os.getenv("SCHEDULING_SERVICE_PORT", "8004"))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the persisted state on startup unless a workspace was provided."""
    if getattr(app.state, "workspace", None) is None:
        app.state.workspace = SchedulingWorkspace.from_file(DATA_FILE)
    yield


app = FastAPI(
    title="Workshop Scheduling Service",
    description="REST API for workshops, educators, classes and conflict-free session scheduling",
    version="1.0.0",
    lifespan=lifespan,
)


def _workspace(request: Request) -> SchedulingWorkspace:
    return request.app.state.workspace


def _http_error(e: SchedulingError) -> HTTPException:
    """Maps scheduling errors onto HTTP status codes."""
    if isinstance(e, RecordNotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, ReferenceInUseError):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, DocumentError):
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, ValidationError):
        return HTTPException(status_code=400, detail=str(e))
    return HTTPException(status_code=500, detail=f"Error processing request: {str(e)}")


def _filters(
        workshop_id: t.Optional[int],
        educator_id: t.Optional[int],
        class_id: t.Optional[int],
        period: Period,
) -> SessionFilters:
    return SessionFilters(workshop_id=workshop_id, educator_id=educator_id, class_id=class_id, period=period)


@app.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "healthy", "service": "scheduling-service"}


# --- Workshops, educators, classes ---

def _add(request: Request, kind: EntityKind, fields: dict[str, t.Any]):
    workspace = _workspace(request)
    try:
        record_id = workspace.add_entity(kind, fields)
    except SchedulingError as e:
        raise _http_error(e)
    return workspace.store.require(kind, record_id)


def _update(request: Request, kind: EntityKind, record: t.Any):
    workspace = _workspace(request)
    try:
        workspace.update_entity(kind, record)
    except SchedulingError as e:
        raise _http_error(e)
    return workspace.store.require(kind, record.id)


def _delete(request: Request, kind: EntityKind, record_id: int) -> Response:
    try:
        _workspace(request).delete_entity(kind, record_id)
    except SchedulingError as e:
        raise _http_error(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.get("/workshops", response_model=list[Workshop])
async def list_workshops(request: Request) -> list[Workshop]:
    return [Workshop.from_dataclass(w) for w in _workspace(request).store.get(EntityKind.WORKSHOPS)]


@app.post("/workshops", response_model=Workshop, status_code=201)
async def create_workshop(request: Request, body: CreateWorkshopRequest) -> Workshop:
    return Workshop.from_dataclass(_add(request, EntityKind.WORKSHOPS, body.model_dump()))


@app.put("/workshops/{workshop_id}", response_model=Workshop)
async def update_workshop(request: Request, workshop_id: int, body: CreateWorkshopRequest) -> Workshop:
    record = WorkshopRecord(id=workshop_id, **body.model_dump())
    return Workshop.from_dataclass(_update(request, EntityKind.WORKSHOPS, record))


@app.delete("/workshops/{workshop_id}", status_code=204)
async def delete_workshop(request: Request, workshop_id: int) -> Response:
    """Delete a workshop. Refused with 409 while sessions reference it."""
    return _delete(request, EntityKind.WORKSHOPS, workshop_id)


@app.get("/educators", response_model=list[Educator])
async def list_educators(request: Request) -> list[Educator]:
    return [Educator.from_dataclass(e) for e in _workspace(request).store.get(EntityKind.EDUCATORS)]


@app.post("/educators", response_model=Educator, status_code=201)
async def create_educator(request: Request, body: CreateEducatorRequest) -> Educator:
    return Educator.from_dataclass(_add(request, EntityKind.EDUCATORS, body.model_dump()))


@app.put("/educators/{educator_id}", response_model=Educator)
async def update_educator(request: Request, educator_id: int, body: CreateEducatorRequest) -> Educator:
    record = EducatorRecord(id=educator_id, **body.model_dump())
    return Educator.from_dataclass(_update(request, EntityKind.EDUCATORS, record))


@app.delete("/educators/{educator_id}", status_code=204)
async def delete_educator(request: Request, educator_id: int) -> Response:
    """Delete an educator. Refused with 409 while sessions reference them."""
    return _delete(request, EntityKind.EDUCATORS, educator_id)


@app.get("/classes", response_model=list[SchoolClass])
async def list_classes(request: Request) -> list[SchoolClass]:
    return [SchoolClass.from_dataclass(c) for c in _workspace(request).store.get(EntityKind.CLASSES)]


@app.post("/classes", response_model=SchoolClass, status_code=201)
async def create_class(request: Request, body: CreateClassRequest) -> SchoolClass:
    return SchoolClass.from_dataclass(_add(request, EntityKind.CLASSES, body.model_dump()))


@app.put("/classes/{class_id}", response_model=SchoolClass)
async def update_class(request: Request, class_id: int, body: CreateClassRequest) -> SchoolClass:
    record = SchoolClassRecord(id=class_id, **body.model_dump())
    return SchoolClass.from_dataclass(_update(request, EntityKind.CLASSES, record))


@app.delete("/classes/{class_id}", status_code=204)
async def delete_class(request: Request, class_id: int) -> Response:
    """Delete a class. Refused with 409 while sessions reference it."""
    return _delete(request, EntityKind.CLASSES, class_id)


@app.get("/{kind}/{record_id}/can-delete", response_model=CanDeleteResponse)
async def can_delete_entity(request: Request, kind: EntityKind, record_id: int) -> CanDeleteResponse:
    """Tell whether a workshop, educator or class is free of session references."""
    if kind is EntityKind.SESSIONS:
        raise HTTPException(status_code=400, detail="Sessions can always be deleted.")
    return CanDeleteResponse(can_delete=_workspace(request).can_delete_entity(kind, record_id))


# --- Sessions ---

@app.get("/sessions", response_model=list[Session])
async def list_sessions(
        request: Request,
        workshop_id: t.Optional[int] = Query(None, alias="workshopId"),
        educator_id: t.Optional[int] = Query(None, alias="educatorId"),
        class_id: t.Optional[int] = Query(None, alias="classId"),
        period: Period = Period.ALL,
) -> list[Session]:
    """
    List sessions ordered by date and start time.

    Foreign-key filters are exact matches; period is one of
    all, future, past, week, month.
    """
    sessions = _workspace(request).list_sessions(_filters(workshop_id, educator_id, class_id, period))
    return [Session.from_dataclass(s) for s in sessions]


@app.post("/sessions", response_model=CreateSessionsResponse, status_code=201)
async def create_sessions(
        request: Request,
        body: CreateSessionsRequest,
        response: Response,
) -> CreateSessionsResponse:
    """
    Schedule one session per date, all or nothing.

    Responds 201 when every date was scheduled, 409 with the conflicting
    dates when the educator is busy on any of them, and 400 when no date
    was given.
    """
    template = SessionTemplate(
        workshop_id=body.workshop_id,
        educator_id=body.educator_id,
        class_id=body.class_id,
        start_time=body.start_time,
        end_time=body.end_time,
        notes=body.notes,
    )
    try:
        outcome = _workspace(request).create_sessions(template, body.dates)
    except SchedulingError as e:
        raise _http_error(e)

    if outcome.conflicting_dates:
        response.status_code = status.HTTP_409_CONFLICT
    elif not outcome.accepted:
        response.status_code = status.HTTP_400_BAD_REQUEST
    return CreateSessionsResponse.from_dataclass(outcome)


@app.put("/sessions/{session_id}", response_model=UpdateSessionResponse)
async def update_session(
        request: Request,
        session_id: int,
        body: UpdateSessionRequest,
        response: Response,
) -> UpdateSessionResponse:
    """
    Edit a session. Responds 409 when the new slot double-books the educator.
    """
    workspace = _workspace(request)
    record = SessionRecord(id=session_id, **body.model_dump())
    try:
        accepted = workspace.update_session(record)
    except SchedulingError as e:
        raise _http_error(e)

    if not accepted:
        response.status_code = status.HTTP_409_CONFLICT
        return UpdateSessionResponse(accepted=False)
    stored = workspace.store.require(EntityKind.SESSIONS, session_id)
    return UpdateSessionResponse(accepted=True, session=Session.from_dataclass(stored))


@app.delete("/sessions/{session_id}", status_code=204)
async def delete_session(request: Request, session_id: int) -> Response:
    _workspace(request).delete_session(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.get("/calendar-events", response_model=list[CalendarEvent])
async def list_calendar_events(
        request: Request,
        workshop_id: t.Optional[int] = Query(None, alias="workshopId"),
        educator_id: t.Optional[int] = Query(None, alias="educatorId"),
        class_id: t.Optional[int] = Query(None, alias="classId"),
        period: Period = Period.ALL,
) -> list[CalendarEvent]:
    """List sessions as calendar events with start and end instants."""
    events = _workspace(request).calendar_events(_filters(workshop_id, educator_id, class_id, period))
    return [CalendarEvent.from_dataclass(e) for e in events]


@app.get("/calendar/{year}/{month}")
async def month_calendar(
        request: Request,
        year: int = Path(..., ge=1, le=9999),
        month: int = Path(..., ge=1, le=12),
):
    """Sunday-first weeks of a month; days outside the month are null."""
    return _workspace(request).month_grid(year, month)


# --- Reports ---

@app.get("/reports/educators", response_model=list[EducatorReportRow])
async def educators_report(request: Request, period: Period = Period.ALL) -> list[EducatorReportRow]:
    return [EducatorReportRow.from_dataclass(r) for r in _workspace(request).educator_report(period)]


@app.get("/reports/workshops", response_model=list[WorkshopReportRow])
async def workshops_report(request: Request, period: Period = Period.ALL) -> list[WorkshopReportRow]:
    return [WorkshopReportRow.from_dataclass(r) for r in _workspace(request).workshop_report(period)]


@app.get("/reports/classes/{class_id}", response_model=t.Optional[ClassReport])
async def classes_report(request: Request, class_id: int, period: Period = Period.ALL) -> t.Optional[ClassReport]:
    """Itinerary of one class; null when it has no sessions in the period."""
    try:
        report = _workspace(request).class_report(class_id, period)
    except SchedulingError as e:
        raise _http_error(e)
    return ClassReport.from_dataclass(report) if report is not None else None


@app.get("/dashboard", response_model=DashboardResponse)
async def dashboard(request: Request, limit: int = 5) -> DashboardResponse:
    return DashboardResponse.from_dataclass(_workspace(request).dashboard(limit))


# --- Data management ---

@app.get("/data/export")
async def export_data(request: Request) -> Response:
    """Download the full state as a JSON document named after the current date."""
    filename, text = _workspace(request).export_data()
    return Response(
        content=text,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.post("/data/import", status_code=204)
async def import_data(request: Request, document: t.Any = Body(...)) -> Response:
    """Replace the whole state with an imported document (no merge)."""
    try:
        _workspace(request).import_data(json.dumps(document))
    except SchedulingError as e:
        raise _http_error(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.post("/data/clear", status_code=204)
async def clear_data(request: Request) -> Response:
    """Remove every workshop, educator, class and session."""
    _workspace(request).clear()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=SCHEDULING_SERVICE_PORT)
