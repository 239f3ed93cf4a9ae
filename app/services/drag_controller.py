"""
Drag and drop state machine for seating guests from the guest panel
"""

import logging
from enum import Enum
from typing import Callable, Optional, Set

from app.core.exceptions import DragRejectedError

logger = logging.getLogger(__name__)


class DragState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


class DropOutcome(str, Enum):
    SEATED = "seated"
    TABLE_FULL = "table_full"
    CANCELLED = "cancelled"


class DragInteractionController:
    """Turns drag gestures into guest assignments.

    ``draggable`` returns the ids of guests that may be picked up (eligible
    for the event and not yet seated). ``assign`` seats a guest and returns
    whether there was room.
    """

    def __init__(
        self,
        draggable: Callable[[], Set[str]],
        assign: Callable[[str, str], bool],
    ):
        self._draggable = draggable
        self._assign = assign
        self.state = DragState.IDLE
        self.dragged_guest: Optional[str] = None

    def start_drag(self, guest_id: str) -> None:
        if guest_id not in self._draggable():
            raise DragRejectedError(f"Guest '{guest_id}' cannot be dragged")
        self.state = DragState.DRAGGING
        self.dragged_guest = guest_id
        logger.debug(f"Drag start for guest {guest_id}")

    def end_drag(self) -> None:
        """Drag ended; a drop may still arrive after this"""
        self.state = DragState.IDLE
        self.dragged_guest = None

    def cancel(self) -> DropOutcome:
        self.end_drag()
        return DropOutcome.CANCELLED

    def drop(self, table_id: Optional[str], transport_guest_id: Optional[str] = None) -> DropOutcome:
        """Drop the dragged guest on a table (``None`` means outside any table).

        The guest comes from the tracked drag first. When drag-end already
        cleared it, the id carried with the drop event is used instead; the
        two events are not ordered, so this fallback is intentional.
        """
        guest_id = self.dragged_guest or transport_guest_id
        if table_id is None or guest_id is None:
            return self.cancel()

        try:
            seated = self._assign(guest_id, table_id)
        finally:
            self.end_drag()

        logger.debug(f"Dropped guest {guest_id} on table {table_id}: seated={seated}")
        return DropOutcome.SEATED if seated else DropOutcome.TABLE_FULL
