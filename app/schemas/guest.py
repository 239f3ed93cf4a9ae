"""
Guest-related Pydantic schemas
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

ACCEPTED_STATUSES = ("accepted", "Confirmé")
DECLINED_STATUSES = ("declined", "Refusé")


def is_accepted(status: Optional[str]) -> bool:
    return status in ACCEPTED_STATUSES


def is_declined(status: Optional[str]) -> bool:
    return status in DECLINED_STATUSES


class RsvpStatus(BaseModel):
    """RSVP status as carried on a seated guest snapshot"""
    status: str = "pending"


class Rsvp(RsvpStatus):
    """Full RSVP record with per-event answers"""
    events: Dict[str, bool] = Field(default_factory=dict)


class Guest(BaseModel):
    """Guest record as read from the guest directory"""
    id: str
    name: str = ""
    first_name: str = Field("", alias="firstName")
    last_name: str = Field("", alias="lastName")
    group_id: Optional[str] = Field(None, alias="groupId")
    tags: List[Any] = Field(default_factory=list)
    rsvp: Rsvp = Field(default_factory=Rsvp)
    table_assignment: Optional[str] = Field(None, alias="tableAssignment")

    class Config:
        populate_by_name = True

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        full = f"{self.first_name} {self.last_name}".strip()
        return full or "Unknown Guest"


class SeatedGuest(BaseModel):
    """Snapshot of a guest stored inside a table's guest list"""
    id: str
    name: str = "Unknown Guest"
    first_name: str = Field("", alias="firstName")
    last_name: str = Field("", alias="lastName")
    group_id: Optional[str] = Field(None, alias="groupId")
    tags: List[Any] = Field(default_factory=list)
    rsvp: RsvpStatus = Field(default_factory=RsvpStatus)

    class Config:
        populate_by_name = True

    @classmethod
    def from_guest(cls, guest: Guest) -> "SeatedGuest":
        return cls(
            id=guest.id,
            name=guest.display_name,
            first_name=guest.first_name or "",
            last_name=guest.last_name or "",
            group_id=guest.group_id or None,
            tags=list(guest.tags or []),
            rsvp=RsvpStatus(status=guest.rsvp.status),
        )


class RsvpChange(BaseModel):
    """A guest's RSVP moving from one status to another"""
    guest_id: str
    old_status: Optional[str] = None
    new_status: str
    party_size: Optional[int] = None
    event_names: Optional[List[str]] = None
