"""
Pydantic schemas package
"""

from .common import *
from .event import *
from .guest import *
from .seating import *

__all__ = [
    "StandardResponse",
    "ErrorResponse",
    "CandidateParams",
    "EventInfo",
    "Group",
    "Guest",
    "Rsvp",
    "RsvpStatus",
    "RsvpChange",
    "SeatedGuest",
    "RoundTable",
    "RectangleTable",
    "SquareTable",
    "Table",
    "TableAdapter",
    "Seat",
    "SeatingArrangement",
    "TableCreate",
    "AssignGuestRequest",
    "RepositionRequest",
    "SwitchEventRequest",
]
