"""
Domain exceptions for the seating engine
"""


class SeatingError(Exception):
    """Base class for seating engine errors"""


class TableValidationError(SeatingError):
    """Raised when a new table is missing a name or has no seats"""


class TableNotFoundError(SeatingError):
    def __init__(self, table_id: str):
        super().__init__(f"Table '{table_id}' not found")
        self.table_id = table_id


class GuestNotFoundError(SeatingError):
    def __init__(self, guest_id: str):
        super().__init__(f"Guest '{guest_id}' not found")
        self.guest_id = guest_id


class TableGeometryError(SeatingError):
    """Raised when a table is too small to walk seats around its perimeter"""


class ArrangementConflictError(SeatingError):
    """Raised when the stored arrangement changed since it was loaded"""

    def __init__(self, event_name: str, expected_version: int, stored_version: int):
        super().__init__(
            f"Arrangement for '{event_name}' is at version {stored_version}, expected {expected_version}"
        )
        self.event_name = event_name
        self.expected_version = expected_version
        self.stored_version = stored_version


class DragRejectedError(SeatingError):
    """Raised when a drag starts on a guest that cannot be dragged"""


class NoEventSelectedError(SeatingError):
    """Raised when a seating operation runs before any event is selected"""
