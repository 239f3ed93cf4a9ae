"""
Seating editor session: the single owner of a tenant's editing state.

A session holds the guest directory snapshot, the selected event, the
assignment store for that event, the drag controller and the save queue.
Every mutation goes through here so that it is followed by exactly one
scheduled save.
"""

import logging
from typing import Callable, Dict, List, Optional

from app.core.exceptions import NoEventSelectedError, TableGeometryError
from app.schemas.event import EventInfo, Group
from app.schemas.guest import Guest
from app.schemas.seating import Seat, SeatingArrangement, Table, TableCreate
from app.services.assignment_store import SeatingAssignmentStore
from app.services.attendance import (
    EventAttendanceFilter,
    all_categories,
    filter_candidates,
    unassigned_guests,
)
from app.services.drag_controller import DragInteractionController, DropOutcome
from app.services.export_service import build_table_summary
from app.services.geometry import compute_seats
from app.services.repositories import ArrangementRepo, DirectoryRepo
from app.services.save_coordinator import SaveCoordinator, StatusCallback

logger = logging.getLogger(__name__)


class SeatingSession:
    """Editing state of one tenant"""

    def __init__(
        self,
        tenant_id: str,
        arrangements: Optional[ArrangementRepo] = None,
        directory: Optional[DirectoryRepo] = None,
        debounce_seconds: float = None,
        on_status: Optional[StatusCallback] = None,
    ):
        self.tenant_id = tenant_id
        self.arrangements = arrangements or ArrangementRepo()
        self.directory = directory or DirectoryRepo(self.arrangements.store)
        self.saver = SaveCoordinator(tenant_id, self.arrangements, debounce_seconds, on_status)

        self.guests: Dict[str, Guest] = {}
        self.events: List[EventInfo] = []
        self.groups: Dict[str, Group] = {}
        self.attendance = EventAttendanceFilter(self.groups)
        self.selected_event: Optional[str] = None
        self.arrangement: Optional[SeatingArrangement] = None
        self.store = SeatingAssignmentStore([], self.guests)
        self.drag = DragInteractionController(self.draggable_guest_ids, self.assign_guest)

    def open(self) -> None:
        """Load the directory and select the first event"""
        self.reload_directory()
        if self.events:
            self._load_event(self.events[0].name)

    def reload_directory(self) -> None:
        self.guests.clear()
        self.guests.update({g.id: g for g in self.directory.list_guests(self.tenant_id)})
        self.events, groups = self.directory.get_couple(self.tenant_id)
        self.groups.clear()
        self.groups.update(groups)
        logger.info(f"Loaded {len(self.guests)} guests, {len(self.events)} events for tenant {self.tenant_id}")

    def _load_event(self, event_name: str) -> None:
        self.arrangement = self.arrangements.load(self.tenant_id, event_name)
        self.saver.track(event_name, self.arrangement.version, self.arrangement.created_at)
        self.store = SeatingAssignmentStore(self.arrangement.tables, self.guests)
        self.selected_event = event_name
        self.drag.end_drag()

    async def select_event(self, event_name: str, save_current: bool = False) -> None:
        """Switch the active event, optionally saving the outgoing one first"""
        if self.selected_event:
            if save_current:
                self.saver.schedule(self.selected_event, self.store.snapshot())
            await self.saver.flush(self.selected_event)
        self._load_event(event_name)

    async def reload(self) -> None:
        """Discard local edits and reload the event from storage"""
        if self.selected_event:
            await self.saver.flush(self.selected_event)
            self._load_event(self.selected_event)

    def _require_event(self) -> str:
        if not self.selected_event:
            raise NoEventSelectedError("No event selected")
        return self.selected_event

    def _changed(self) -> None:
        self.saver.schedule(self._require_event(), self.store.snapshot())

    # Mutations

    def add_table(self, table_in: TableCreate) -> Table:
        self._require_event()
        table = self.store.add_table(table_in)
        self._changed()
        return table

    def remove_table(self, table_id: str) -> Table:
        self._require_event()
        table = self.store.remove_table(table_id)
        self._changed()
        return table

    def assign_guest(self, guest_id: str, table_id: str) -> bool:
        self._require_event()
        seated = self.store.assign_guest(guest_id, table_id)
        self._changed()
        return seated

    def remove_guest(self, guest_id: str, table_id: str) -> bool:
        self._require_event()
        removed = self.store.remove_guest(guest_id, table_id)
        self._changed()
        return removed

    def reposition_table(self, table_id: str, x: float, y: float) -> Table:
        self._require_event()
        table = self.store.reposition_table(table_id, x, y)
        self._changed()
        return table

    def rotate_table(self, table_id: str) -> Table:
        self._require_event()
        table = self.store.rotate_table(table_id)
        self._changed()
        return table

    def save_now(self) -> None:
        """Queue an explicit save of the current tables"""
        self._changed()

    # Drag and drop

    def start_drag(self, guest_id: str) -> None:
        self.drag.start_drag(guest_id)

    def drop(self, table_id: Optional[str], transport_guest_id: Optional[str] = None) -> DropOutcome:
        return self.drag.drop(table_id, transport_guest_id)

    def end_drag(self) -> None:
        self.drag.end_drag()

    # Views

    def attending_guests(self) -> List[Guest]:
        return self.attendance.eligible_guests(self.guests.values(), self.selected_event)

    def unassigned(self) -> List[Guest]:
        return unassigned_guests(self.attending_guests(), self.store.seated_guest_ids())

    def draggable_guest_ids(self) -> set:
        return {g.id for g in self.unassigned()}

    def candidates(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        unassigned_only: bool = False,
    ) -> List[Guest]:
        return filter_candidates(
            self.attending_guests(),
            self.store.seated_guest_ids(),
            search=search,
            category=category,
            unassigned_only=unassigned_only,
        )

    def categories(self) -> List[str]:
        return all_categories(self.attending_guests())

    def seats(self, table_id: str) -> List[Seat]:
        return compute_seats(self.store.get_table(table_id))

    def stats(self) -> Dict[str, int]:
        return {
            "total_tables": len(self.store.tables),
            "seated_guests": sum(len(t.guests) for t in self.store.tables),
            "unassigned_guests": len(self.unassigned()),
            "attending_guests": len(self.attending_guests()),
        }

    def _render_seats(self, table: Table) -> List[Seat]:
        try:
            return compute_seats(table)
        except TableGeometryError as e:
            logger.warning(f"Cannot place seats on table {table.id}: {e}")
            return []

    def table_summary(self) -> List[Dict]:
        return build_table_summary(self.store.tables)

    def snapshot(self) -> Dict:
        """Everything the canvas needs to render the selected event"""
        return {
            "event": self.selected_event,
            "version": self.saver.version(self.selected_event) if self.selected_event else 0,
            "save_status": self.saver.status(self.selected_event).value if self.selected_event else "idle",
            "tables": [
                {
                    **t.model_dump(by_alias=True, mode="json"),
                    "seats": [s.model_dump() for s in self._render_seats(t)],
                }
                for t in self.store.tables
            ],
            "stats": self.stats(),
        }


class SessionRegistry:
    """One seating session per tenant, created on first use"""

    def __init__(self, factory: Optional[Callable[[str], SeatingSession]] = None):
        self._factory = factory or SeatingSession
        self._sessions: Dict[str, SeatingSession] = {}

    def get(self, tenant_id: str) -> SeatingSession:
        session = self._sessions.get(tenant_id)
        if session is None:
            session = self._factory(tenant_id)
            session.open()
            self._sessions[tenant_id] = session
        return session

    async def close_all(self) -> None:
        for session in self._sessions.values():
            await session.saver.close()
        self._sessions.clear()
