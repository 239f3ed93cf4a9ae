"""
Seating chart API routes - requires authentication
"""

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from app.api.ws import get_session_registry, websocket_manager
from app.schemas.common import CandidateParams
from app.schemas.guest import RsvpChange
from app.schemas.seating import (
    AssignGuestRequest,
    RepositionRequest,
    SwitchEventRequest,
    TableCreate,
)
from app.services.export_service import ExportService, summary_lines
from app.services.rsvp_sync_service import RsvpSeatingSync
from app.services.seating_session import SeatingSession, SessionRegistry
from app.utils.responses import success_response, not_found_error
from app.utils.security import verify_api_token

router = APIRouter(dependencies=[Depends(verify_api_token)])


async def event_session(registry: SessionRegistry, tenant_id: str, event_name: str) -> SeatingSession:
    """Tenant session with ``event_name`` selected"""
    session = registry.get(tenant_id)
    if event_name not in {e.name for e in session.events}:
        not_found_error("Event")
    if session.selected_event != event_name:
        await session.select_event(event_name)
    return session


async def broadcast_arrangement(session: SeatingSession):
    await websocket_manager.broadcast(
        session.tenant_id, {"type": "arrangement", "arrangement": session.snapshot()}
    )


def table_data(table) -> dict:
    return table.model_dump(by_alias=True, mode="json")


@router.get("/{tenant_id}/events")
async def list_events(
    tenant_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Events that can be seated, with the currently selected one"""
    session = registry.get(tenant_id)
    return success_response(
        message="Events retrieved",
        data={
            "events": [e.model_dump() for e in session.events],
            "selected_event": session.selected_event,
        },
    )


@router.get("/{tenant_id}/events/{event_name}")
async def get_arrangement(
    tenant_id: str,
    event_name: str,
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Tables, seats and statistics of an event"""
    session = await event_session(registry, tenant_id, event_name)
    return success_response(message="Seating arrangement retrieved", data=session.snapshot())


@router.post("/{tenant_id}/events/{event_name}/select")
async def select_event(
    tenant_id: str,
    event_name: str,
    request: SwitchEventRequest,
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Switch the editor to another event, optionally saving the current one first"""
    session = registry.get(tenant_id)
    if event_name not in {e.name for e in session.events}:
        not_found_error("Event")
    await session.select_event(event_name, save_current=request.save_current)
    return success_response(message=f"Switched to {event_name}", data=session.snapshot())


@router.post("/{tenant_id}/events/{event_name}/tables")
async def add_table(
    tenant_id: str,
    event_name: str,
    table_in: TableCreate,
    registry: SessionRegistry = Depends(get_session_registry),
):
    session = await event_session(registry, tenant_id, event_name)
    table = session.add_table(table_in)
    await broadcast_arrangement(session)
    return success_response(message="Table created", data=table_data(table), status_code=201)


@router.delete("/{tenant_id}/events/{event_name}/tables/{table_id}")
async def remove_table(
    tenant_id: str,
    event_name: str,
    table_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
):
    session = await event_session(registry, tenant_id, event_name)
    table = session.remove_table(table_id)
    await broadcast_arrangement(session)
    return success_response(
        message="Table deleted",
        data={"deleted_table_id": table.id, "unassigned_guest_ids": [g.id for g in table.guests]},
    )


@router.patch("/{tenant_id}/events/{event_name}/tables/{table_id}/position")
async def reposition_table(
    tenant_id: str,
    event_name: str,
    table_id: str,
    position: RepositionRequest,
    registry: SessionRegistry = Depends(get_session_registry),
):
    session = await event_session(registry, tenant_id, event_name)
    table = session.reposition_table(table_id, position.x, position.y)
    await broadcast_arrangement(session)
    return success_response(message="Table moved", data=table_data(table))


@router.post("/{tenant_id}/events/{event_name}/tables/{table_id}/rotate")
async def rotate_table(
    tenant_id: str,
    event_name: str,
    table_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
):
    session = await event_session(registry, tenant_id, event_name)
    table = session.rotate_table(table_id)
    await broadcast_arrangement(session)
    return success_response(
        message="Table rotated",
        data={**table_data(table), "seats": [s.model_dump() for s in session.seats(table_id)]},
    )


@router.get("/{tenant_id}/events/{event_name}/tables/{table_id}/seats")
async def get_seats(
    tenant_id: str,
    event_name: str,
    table_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
):
    session = await event_session(registry, tenant_id, event_name)
    return success_response(
        message="Seats computed",
        data=[s.model_dump() for s in session.seats(table_id)],
    )


@router.post("/{tenant_id}/events/{event_name}/assignments")
async def assign_guest(
    tenant_id: str,
    event_name: str,
    request: AssignGuestRequest,
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Seat a guest; a full table leaves the guest unassigned"""
    session = await event_session(registry, tenant_id, event_name)
    seated = session.assign_guest(request.guest_id, request.table_id)
    await broadcast_arrangement(session)
    return success_response(
        message="Guest seated" if seated else "Table is full, guest left unassigned",
        data={"guest_id": request.guest_id, "table_id": request.table_id, "seated": seated},
    )


@router.delete("/{tenant_id}/events/{event_name}/tables/{table_id}/guests/{guest_id}")
async def remove_guest(
    tenant_id: str,
    event_name: str,
    table_id: str,
    guest_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
):
    session = await event_session(registry, tenant_id, event_name)
    removed = session.remove_guest(guest_id, table_id)
    await broadcast_arrangement(session)
    return success_response(
        message="Guest removed from table" if removed else "Guest was not at this table",
        data={"guest_id": guest_id, "table_id": table_id, "removed": removed},
    )


@router.get("/{tenant_id}/events/{event_name}/guests")
async def list_candidates(
    tenant_id: str,
    event_name: str,
    params: CandidateParams = Depends(),
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Guests attending the event, filtered like the guest panel"""
    session = await event_session(registry, tenant_id, event_name)
    seated_ids = session.store.seated_guest_ids()
    draggable = session.draggable_guest_ids()
    guests = session.candidates(**params.model_dump())
    return success_response(
        message="Guests retrieved successfully",
        data={
            "guests": [
                {
                    "id": g.id,
                    "name": g.display_name,
                    "group_id": g.group_id,
                    "seated": g.id in seated_ids,
                    "draggable": g.id in draggable,
                }
                for g in guests
            ],
            "categories": session.categories(),
        },
    )


@router.post("/{tenant_id}/events/{event_name}/save")
async def save_arrangement(
    tenant_id: str,
    event_name: str,
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Save the current tables now and report the outcome"""
    session = await event_session(registry, tenant_id, event_name)
    session.save_now()
    await session.saver.flush(event_name)
    error = session.saver.last_error.get(event_name)
    return success_response(
        message="Seating arrangement saved" if error is None else f"Save failed: {error}",
        data={
            "status": session.saver.status(event_name).value,
            "version": session.saver.version(event_name),
        },
    )


@router.get("/{tenant_id}/events/{event_name}/summary")
async def table_summary(
    tenant_id: str,
    event_name: str,
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Occupancy and seated names per table, as rows and as text lines"""
    session = await event_session(registry, tenant_id, event_name)
    return success_response(
        message="Seating summary",
        data={"tables": session.table_summary(), "lines": summary_lines(session.store.tables)},
    )


@router.get("/{tenant_id}/events/{event_name}/export/summary.xlsx")
async def export_summary(
    tenant_id: str,
    event_name: str,
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Download the per-table guest summary"""
    session = await event_session(registry, tenant_id, event_name)
    content = ExportService.to_excel(session.store.tables, event_name)
    return Response(
        content=content,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename=seating_{event_name}.xlsx"},
    )


@router.post("/{tenant_id}/rsvp")
async def sync_rsvp(
    tenant_id: str,
    change: RsvpChange,
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Seat or unseat a guest after their RSVP changed"""
    session = registry.get(tenant_id)
    await session.saver.flush()
    result = RsvpSeatingSync(tenant_id, session.arrangements, session.directory).handle_rsvp_change(change)
    session.reload_directory()
    await session.reload()
    await broadcast_arrangement(session)
    return success_response(message="RSVP synchronised with seating", data={"tables": result})


@router.get("/{tenant_id}/stats")
async def seating_stats(
    tenant_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
):
    session = registry.get(tenant_id)
    await session.saver.flush()
    sync = RsvpSeatingSync(tenant_id, session.arrangements, session.directory)
    return success_response(message="Seating statistics", data=sync.seating_stats())


@router.get("/{tenant_id}/validation")
async def validate_assignments(
    tenant_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
):
    session = registry.get(tenant_id)
    await session.saver.flush()
    sync = RsvpSeatingSync(tenant_id, session.arrangements, session.directory)
    return success_response(message="Seating validation", data=sync.validate_assignments())


@router.post("/{tenant_id}/cleanup-declined")
async def cleanup_declined(
    tenant_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Unseat every declined guest who still holds a table"""
    session = registry.get(tenant_id)
    await session.saver.flush()
    removed = RsvpSeatingSync(tenant_id, session.arrangements, session.directory).cleanup_declined()
    session.reload_directory()
    await session.reload()
    await broadcast_arrangement(session)
    return success_response(
        message=f"Removed {len(removed)} declined guests from seating",
        data={"removed_guest_ids": removed},
    )
