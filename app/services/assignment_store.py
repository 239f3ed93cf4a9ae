"""
In-memory source of truth for one event's tables and guest assignments
"""

import logging
import time
from typing import List, Mapping, Optional

from app.core.config import settings
from app.core.exceptions import GuestNotFoundError, TableNotFoundError, TableValidationError
from app.schemas.guest import Guest, SeatedGuest
from app.schemas.seating import (
    RectangleTable,
    RoundTable,
    SquareTable,
    Table,
    TableCreate,
)
from app.services.geometry import check_perimeter, default_table_size

logger = logging.getLogger(__name__)

class SeatingAssignmentStore:
    """Owns the table sequence of the active event.

    A guest id appears in at most one table and no table holds more guests
    than its capacity. Both hold after every operation of this class.
    """

    def __init__(self, tables: List[Table], guests: Optional[Mapping[str, Guest]] = None):
        self._tables: List[Table] = [t.model_copy(deep=True) for t in tables]
        self._guests: Mapping[str, Guest] = guests if guests is not None else {}
        self._id_counter = 0

    @property
    def tables(self) -> List[Table]:
        return self._tables

    def get_table(self, table_id: str) -> Table:
        for table in self._tables:
            if table.id == table_id:
                return table
        raise TableNotFoundError(table_id)

    def seated_guest_ids(self) -> set:
        return {g.id for table in self._tables for g in table.guests}

    def table_for_guest(self, guest_id: str) -> Optional[Table]:
        for table in self._tables:
            if table.has_guest(guest_id):
                return table
        return None

    def snapshot(self) -> List[Table]:
        """Deep copy of the tables, safe to hand to the persistence layer"""
        return [t.model_copy(deep=True) for t in self._tables]

    def _next_table_id(self) -> str:
        self._id_counter += 1
        return f"table-{int(time.time() * 1000)}-{self._id_counter}"

    def add_table(self, table_in: TableCreate) -> Table:
        """Add a table, offset from the previous ones so they don't stack exactly"""
        name = (table_in.name or "").strip()
        if not name:
            raise TableValidationError("Table name is required")
        if table_in.capacity < 1:
            raise TableValidationError("Table capacity must be at least 1")

        size = default_table_size(table_in.capacity, table_in.shape)
        n = len(self._tables)
        common = {
            "id": self._next_table_id(),
            "name": name,
            "capacity": table_in.capacity,
            "x": 300 + 50 * n,
            "y": 200 + 50 * n,
        }

        if table_in.shape == "round":
            table = RoundTable(radius=table_in.radius or size["radius"], **common)
        elif table_in.shape == "rectangle":
            table = RectangleTable(
                width=table_in.width or size["width"],
                height=table_in.height or size["height"],
                rotation=0,
                **common,
            )
            check_perimeter(table.width, table.height, table.capacity, settings.CORNER_CLEAR)
        else:
            table = SquareTable(size=table_in.size or size["size"], **common)
            check_perimeter(table.size, table.size, table.capacity, settings.CORNER_CLEAR)

        self._tables.append(table)
        logger.info(f"Added {table.shape} table {table.name} ({table.id}) with {table.capacity} seats")
        return table

    def remove_table(self, table_id: str) -> Table:
        """Delete a table; its guests simply become unassigned"""
        table = self.get_table(table_id)
        self._tables = [t for t in self._tables if t.id != table_id]
        logger.info(f"Removed table {table.id}, unassigned {len(table.guests)} guests")
        return table

    def _resolve_guest(self, guest_id: str) -> SeatedGuest:
        seated = self.table_for_guest(guest_id)
        if seated is not None:
            return next(g for g in seated.guests if g.id == guest_id)
        guest = self._guests.get(guest_id)
        if guest is None:
            raise GuestNotFoundError(guest_id)
        return SeatedGuest.from_guest(guest)

    def assign_guest(self, guest_id: str, table_id: str) -> bool:
        """Seat a guest at a table, taking them off any other table first.

        Returns False when the target table is full; the guest then ends up
        unassigned and nobody already at the target table is moved.
        """
        target = self.get_table(table_id)
        guest = self._resolve_guest(guest_id)

        for table in self._tables:
            table.guests = [g for g in table.guests if g.id != guest_id]

        if len(target.guests) >= target.capacity:
            logger.warning(f"Table {target.id} is full ({target.capacity}), guest {guest_id} left unassigned")
            return False

        target.guests.append(guest)
        return True

    def remove_guest(self, guest_id: str, table_id: str) -> bool:
        table = self.get_table(table_id)
        before = len(table.guests)
        table.guests = [g for g in table.guests if g.id != guest_id]
        return len(table.guests) < before

    def reposition_table(self, table_id: str, x: float, y: float) -> Table:
        table = self.get_table(table_id)
        table.x = x
        table.y = y
        return table

    def rotate_table(self, table_id: str) -> Table:
        """Rotate a rectangle by 45°, cycling 0 → 45 → 90 → 135 → 0"""
        table = self.get_table(table_id)
        if isinstance(table, RectangleTable):
            table.rotation = (table.rotation + 45) % 180
        return table
