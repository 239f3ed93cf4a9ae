"""
Event attendance filtering for the guest panel
"""

from typing import Any, Iterable, List, Mapping, Optional, Set

from app.schemas.event import Group
from app.schemas.guest import Guest, is_accepted


def guest_categories(guest: Guest) -> List[str]:
    """Tag labels of a guest; tags may be plain strings or tag objects"""
    labels = []
    for tag in guest.tags or []:
        label = tag_label(tag)
        if label:
            labels.append(label)
    return labels


def tag_label(tag: Any) -> Optional[str]:
    if isinstance(tag, str):
        return tag
    if isinstance(tag, dict):
        return tag.get("name") or tag.get("title") or "Uncategorized"
    return None


class EventAttendanceFilter:
    """Decides which guests may be seated for an event.

    A guest is eligible only when all of these hold:
    their group is invited to the event, their RSVP is accepted, and they
    answered yes for this specific event.
    """

    def __init__(self, groups: Mapping[str, Group]):
        self.groups = groups

    def is_invited(self, guest: Guest, event_name: str) -> bool:
        group = self.groups.get(guest.group_id) if guest.group_id else None
        return group is not None and event_name in group.events

    def is_eligible(self, guest: Guest, event_name: str) -> bool:
        if not self.is_invited(guest, event_name):
            return False
        if not is_accepted(guest.rsvp.status):
            return False
        return guest.rsvp.events.get(event_name) is True

    def eligible_guests(self, guests: Iterable[Guest], event_name: Optional[str]) -> List[Guest]:
        """Guests attending the event; everyone when no event is selected"""
        if not event_name:
            return list(guests)
        return [g for g in guests if self.is_eligible(g, event_name)]


def unassigned_guests(attending: Iterable[Guest], seated_ids: Set[str]) -> List[Guest]:
    return [g for g in attending if g.id not in seated_ids]


def filter_candidates(
    attending: Iterable[Guest],
    seated_ids: Set[str],
    search: Optional[str] = None,
    category: Optional[str] = None,
    unassigned_only: bool = False,
) -> List[Guest]:
    """Guest panel list: name search, tag category and unassigned-only toggle"""
    term = (search or "").lower()
    results = []
    for guest in attending:
        name = guest.first_name or guest.name or ""
        if term and term not in name.lower():
            continue
        if category and category not in guest_categories(guest):
            continue
        if unassigned_only and guest.id in seated_ids:
            continue
        results.append(guest)
    return results


def all_categories(attending: Iterable[Guest]) -> List[str]:
    seen = []
    for guest in attending:
        for label in guest_categories(guest):
            if label not in seen:
                seen.append(label)
    return seen
