"""
Repository layer for seating arrangements and the tenant's guest directory.

Both repositories sit on top of a document store (SQLAlchemy or Firestore,
see ``document_store``) so the seating core never talks to a database
client directly.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from app.core.exceptions import ArrangementConflictError
from app.schemas.event import EventInfo, Group
from app.schemas.guest import Guest
from app.schemas.seating import (
    RectangleTable,
    RoundTable,
    SeatingArrangement,
    SquareTable,
    Table,
    TableAdapter,
    utcnow,
)
from app.services.document_store import get_document_store

logger = logging.getLogger(__name__)

SHAPE_FIELDS = {
    "round": ("radius",),
    "rectangle": ("width", "height", "rotation"),
    "square": ("size",),
}


def couple_path(tenant_id: str) -> str:
    return f"couples/{tenant_id}"


def arrangement_path(tenant_id: str, event_name: str) -> str:
    return f"couples/{tenant_id}/seating-arrangements/{event_name}"


def guest_path(tenant_id: str, guest_id: str) -> str:
    return f"couples/{tenant_id}/guests/{guest_id}"


def default_tables() -> List[Table]:
    """Starter tables for an event that has no saved arrangement yet"""
    return [
        RectangleTable(id="1", name="Head Table", capacity=10, x=400, y=100, width=140, height=60, rotation=0),
        RoundTable(id="2", name="Family Table", capacity=12, x=200, y=250, radius=70),
        SquareTable(id="3", name="Friends Table", capacity=6, x=600, y=250, size=90),
    ]


def sanitize_guest(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Seated guest record with every field present and nothing undefined"""
    first = str(raw.get("firstName") or "")
    last = str(raw.get("lastName") or "")
    group_id = raw.get("groupId")
    tags = raw.get("tags")
    rsvp = raw.get("rsvp") if isinstance(raw.get("rsvp"), dict) else {}
    return {
        "id": str(raw["id"]),
        "name": str(raw.get("name") or f"{first} {last}".strip() or "Unknown Guest"),
        "firstName": first,
        "lastName": last,
        "groupId": str(group_id) if group_id else None,
        "tags": list(tags) if isinstance(tags, list) else [],
        "rsvp": {"status": str(rsvp.get("status") or "pending")},
    }


def as_number(value: Any) -> Optional[float]:
    """Finite number from a stored value, or None for anything else"""
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def sanitize_table(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Table document with safe defaults and only the fields of its shape.

    The document store rejects undefined values, so every required scalar
    gets a fallback and optional shape fields are written only when set.
    Values that are not numbers, sizes that are not positive and capacities
    below 1 fall back to their defaults.
    """
    shape = raw.get("shape") if raw.get("shape") in SHAPE_FIELDS else "round"
    capacity = as_number(raw.get("capacity"))
    clean = {
        "id": str(raw.get("id") or f"table-{int(utcnow().timestamp() * 1000)}"),
        "name": str(raw.get("name") or "Unnamed Table"),
        "capacity": int(capacity) if capacity is not None and capacity >= 1 else 8,
        "guests": [sanitize_guest(g) for g in raw.get("guests") or [] if isinstance(g, dict) and g.get("id")],
        "x": as_number(raw.get("x")) or 0,
        "y": as_number(raw.get("y")) or 0,
        "shape": shape,
    }
    for field in SHAPE_FIELDS[shape]:
        value = as_number(raw.get(field))
        if value is None:
            continue
        if field == "rotation" or value > 0:
            clean[field] = value
    return clean


def table_to_document(table: Table) -> Dict[str, Any]:
    return sanitize_table(table.model_dump(by_alias=True, mode="json"))


def table_from_document(raw: Dict[str, Any]) -> Table:
    return TableAdapter.validate_python(sanitize_table(raw))


class ArrangementRepo:
    """Load and save one seating arrangement per event and tenant"""

    def __init__(self, store=None):
        self.store = store if store is not None else get_document_store()

    def exists(self, tenant_id: str, event_name: str) -> bool:
        return self.store.get(arrangement_path(tenant_id, event_name)) is not None

    def load(self, tenant_id: str, event_name: str) -> SeatingArrangement:
        """Saved arrangement, or the seed default (not persisted until saved)"""
        data = self.store.get(arrangement_path(tenant_id, event_name))
        if data is None:
            logger.info(f"No seating arrangement for event {event_name}, using default tables")
            return SeatingArrangement(event_id=event_name, event_name=event_name, tables=default_tables())

        tables = [table_from_document(t) for t in data.get("tables") or [] if isinstance(t, dict)]
        now = utcnow()
        return SeatingArrangement(
            event_id=data.get("eventId") or event_name,
            event_name=data.get("eventName") or event_name,
            tables=tables,
            created_at=data.get("createdAt") or now,
            updated_at=data.get("updatedAt") or now,
            version=int(data.get("version") or 0),
        )

    def save(
        self,
        tenant_id: str,
        event_name: str,
        tables: List[Table],
        created_at: Optional[datetime] = None,
        expected_version: Optional[int] = None,
    ) -> SeatingArrangement:
        """Replace the stored arrangement with the given tables.

        With ``expected_version`` the write is refused when someone else saved
        since that version was read.
        """
        path = arrangement_path(tenant_id, event_name)
        previous = self.store.get(path)
        stored_version = int((previous or {}).get("version") or 0)

        if expected_version is not None and stored_version != expected_version:
            raise ArrangementConflictError(event_name, expected_version, stored_version)

        now = utcnow()
        if created_at is None:
            created_at = (previous or {}).get("createdAt") or now
        if isinstance(created_at, datetime):
            created_at = created_at.isoformat()

        clean_tables = [table_to_document(t) for t in tables]
        document = {
            "eventId": event_name,
            "eventName": event_name,
            "tables": clean_tables,
            "createdAt": created_at,
            "updatedAt": now.isoformat(),
            "version": stored_version + 1,
        }
        self.store.set(path, document)
        logger.info(f"Seating arrangement saved for event: {event_name} (version {stored_version + 1})")

        DirectoryRepo(self.store).sync_table_assignments(
            tenant_id,
            event_name,
            seated_map((previous or {}).get("tables") or []),
            seated_map(clean_tables),
        )

        return SeatingArrangement(
            event_id=event_name,
            event_name=event_name,
            tables=[TableAdapter.validate_python(t) for t in clean_tables],
            created_at=created_at,
            updated_at=now,
            version=stored_version + 1,
        )


def seated_map(tables: List[Dict[str, Any]]) -> Dict[str, str]:
    """guest id -> table id for a list of table documents"""
    mapping = {}
    for table in tables:
        if not isinstance(table, dict):
            continue
        for guest in table.get("guests") or []:
            if isinstance(guest, dict) and guest.get("id"):
                mapping[str(guest["id"])] = str(table.get("id"))
    return mapping


class DirectoryRepo:
    """Read access to the tenant's guests, events and groups.

    The only field written back is the derived ``tableAssignment`` of a guest.
    """

    def __init__(self, store=None):
        self.store = store if store is not None else get_document_store()

    def list_guests(self, tenant_id: str) -> List[Guest]:
        guests = []
        for doc_id, data in self.store.list(f"couples/{tenant_id}/guests"):
            data = dict(data or {})
            data["id"] = doc_id
            data["tags"] = data.get("tags") or data.get("categories") or []
            data["rsvp"] = data.get("rsvp") or {"status": "pending"}
            guests.append(Guest.model_validate(data))
        return guests

    def get_guest(self, tenant_id: str, guest_id: str) -> Optional[Guest]:
        data = self.store.get(guest_path(tenant_id, guest_id))
        if data is None:
            return None
        data["id"] = guest_id
        data["rsvp"] = data.get("rsvp") or {"status": "pending"}
        return Guest.model_validate(data)

    def get_couple(self, tenant_id: str) -> Tuple[List[EventInfo], Dict[str, Group]]:
        """Events and groups stored on the couple document"""
        data = self.store.get(couple_path(tenant_id)) or {}
        events = [EventInfo.model_validate(e) for e in data.get("events") or [] if isinstance(e, dict) and e.get("name")]
        groups = {}
        for group_id, raw in (data.get("groups") or {}).items():
            raw = raw or {}
            groups[group_id] = Group(
                id=group_id,
                name=raw.get("name") or "Unnamed Group",
                events=raw.get("events") or [],
                description=raw.get("description"),
            )
        return events, groups

    def set_table_assignment(self, tenant_id: str, guest_id: str, assignment: Optional[str]) -> None:
        path = guest_path(tenant_id, guest_id)
        if self.store.get(path) is None:
            return
        self.store.update(path, {"tableAssignment": assignment})

    def sync_table_assignments(
        self,
        tenant_id: str,
        event_name: str,
        before: Dict[str, str],
        after: Dict[str, str],
    ) -> None:
        """Write ``{event}:{table}`` on guests seated in this event; clear it for guests who left.

        A guest holds a single ``tableAssignment``. Values that belong to another
        event are left alone, whether the guest was seated here or left.
        """
        prefix = f"{event_name}:"
        for guest_id in after.keys() | before.keys():
            path = guest_path(tenant_id, guest_id)
            data = self.store.get(path)
            if data is None:
                continue
            current = data.get("tableAssignment")
            if current and not str(current).startswith(prefix):
                continue
            wanted = f"{prefix}{after[guest_id]}" if guest_id in after else None
            if current != wanted:
                self.store.update(path, {"tableAssignment": wanted})
