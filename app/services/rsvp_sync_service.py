"""
Keeps seating arrangements in step with RSVP answers
"""

import logging
from typing import Dict, List, Optional

from app.schemas.guest import Guest, RsvpChange, is_accepted, is_declined
from app.schemas.seating import Table
from app.services.assignment_store import SeatingAssignmentStore
from app.services.attendance import guest_categories, tag_label
from app.services.repositories import ArrangementRepo, DirectoryRepo

logger = logging.getLogger(__name__)


def find_suitable_table(guest: Guest, tables: List[Table], party_size: Optional[int] = None) -> Optional[Table]:
    """Table with room for the party, preferring one that seats the guest's group or a shared tag.

    Without such a match the table with the most free seats wins; the first
    one listed on a tie.
    """
    required = party_size or 1
    available = [t for t in tables if t.free_seats >= required]
    if not available:
        return None

    categories = set(guest_categories(guest))
    if guest.group_id or categories:
        for table in available:
            for seated in table.guests:
                if guest.group_id and seated.group_id == guest.group_id:
                    return table
                seated_tags = {tag_label(t) for t in seated.tags}
                if categories & seated_tags:
                    return table

    best = available[0]
    for table in available[1:]:
        if table.free_seats > best.free_seats:
            best = table
    return best


class RsvpSeatingSync:
    """Seats accepted guests and unseats declined ones for one tenant"""

    def __init__(
        self,
        tenant_id: str,
        arrangements: Optional[ArrangementRepo] = None,
        directory: Optional[DirectoryRepo] = None,
    ):
        self.tenant_id = tenant_id
        self.arrangements = arrangements or ArrangementRepo()
        self.directory = directory or DirectoryRepo(self.arrangements.store)

    def handle_rsvp_change(self, change: RsvpChange) -> Dict[str, Optional[str]]:
        """Apply an RSVP change; returns event name -> table id the guest now sits at"""
        guest = self.directory.get_guest(self.tenant_id, change.guest_id)
        if guest is None:
            logger.warning(f"Guest {change.guest_id} not found")
            return {}

        event_names = change.event_names or self._guest_events(guest)
        result: Dict[str, Optional[str]] = {}

        if is_accepted(change.new_status) and not is_accepted(change.old_status):
            for event_name in event_names:
                result[event_name] = self._seat(guest, event_name, change.party_size)
        elif is_declined(change.new_status) and not is_declined(change.old_status):
            for event_name in event_names:
                self._unseat(guest.id, event_name)
                result[event_name] = None
            self.directory.set_table_assignment(self.tenant_id, guest.id, None)

        logger.info(f"RSVP-Seating sync completed for guest {guest.id}: {change.old_status} -> {change.new_status}")
        return result

    def _guest_events(self, guest: Guest) -> List[str]:
        events, groups = self.directory.get_couple(self.tenant_id)
        group = groups.get(guest.group_id) if guest.group_id else None
        if group is not None:
            return list(group.events)
        return [e.name for e in events]

    def _seat(self, guest: Guest, event_name: str, party_size: Optional[int]) -> Optional[str]:
        if not self.arrangements.exists(self.tenant_id, event_name):
            logger.info(f"No seating arrangement exists for event {event_name}")
            return None

        arrangement = self.arrangements.load(self.tenant_id, event_name)
        current = next((t for t in arrangement.tables if t.has_guest(guest.id)), None)
        if current is not None:
            return current.id

        table = find_suitable_table(guest, arrangement.tables, party_size)
        if table is None:
            logger.info(f"No suitable table found for guest {guest.id} in event {event_name} - manual assignment required")
            return None

        store = SeatingAssignmentStore(arrangement.tables, {guest.id: guest})
        store.assign_guest(guest.id, table.id)
        self.arrangements.save(
            self.tenant_id,
            event_name,
            store.snapshot(),
            created_at=arrangement.created_at,
            expected_version=arrangement.version,
        )
        logger.info(f"Assigned guest {guest.id} to table {table.name} for event {event_name}")
        return table.id

    def _unseat(self, guest_id: str, event_name: str) -> None:
        if not self.arrangements.exists(self.tenant_id, event_name):
            return
        arrangement = self.arrangements.load(self.tenant_id, event_name)
        store = SeatingAssignmentStore(arrangement.tables)
        table = store.table_for_guest(guest_id)
        if table is None:
            return
        store.remove_guest(guest_id, table.id)
        self.arrangements.save(
            self.tenant_id,
            event_name,
            store.snapshot(),
            created_at=arrangement.created_at,
            expected_version=arrangement.version,
        )
        logger.info(f"Removed guest {guest_id} from seating for event {event_name}")

    def remove_guest_everywhere(self, guest_id: str) -> None:
        events, _ = self.directory.get_couple(self.tenant_id)
        for event in events:
            self._unseat(guest_id, event.name)
        self.directory.set_table_assignment(self.tenant_id, guest_id, None)

    def seating_stats(self) -> Dict[str, int]:
        """Seat totals over every saved arrangement of the tenant"""
        total = assigned = 0
        events, _ = self.directory.get_couple(self.tenant_id)
        for event in events:
            if not self.arrangements.exists(self.tenant_id, event.name):
                continue
            for table in self.arrangements.load(self.tenant_id, event.name).tables:
                total += table.capacity
                assigned += len(table.guests)

        return {
            "total_seats": total,
            "assigned_seats": assigned,
            "available_seats": total - assigned,
            "completion_rate": round(assigned / total * 100) if total else 0,
        }

    def validate_assignments(self) -> Dict:
        """Declined guests still holding a table, accepted guests without one"""
        conflicts = []
        for guest in self.directory.list_guests(self.tenant_id):
            if is_declined(guest.rsvp.status) and guest.table_assignment:
                conflicts.append({"guest_id": guest.id, "issue": "declined_but_seated"})
            elif is_accepted(guest.rsvp.status) and not guest.table_assignment:
                conflicts.append({"guest_id": guest.id, "issue": "accepted_but_unseated"})
        return {"valid": not conflicts, "conflicts": conflicts}

    def cleanup_declined(self) -> List[str]:
        removed = []
        for conflict in self.validate_assignments()["conflicts"]:
            if conflict["issue"] == "declined_but_seated":
                self.remove_guest_everywhere(conflict["guest_id"])
                removed.append(conflict["guest_id"])
        return removed
