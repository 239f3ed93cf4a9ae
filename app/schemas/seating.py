"""
Seating arrangement schemas

Tables are a tagged union over their shape so that shape-specific fields
(radius, width/height, size, rotation) only exist on the shape they apply to.
"""

from datetime import datetime, timezone
from typing import Annotated, List, Literal, Optional, Union
from pydantic import BaseModel, Field, TypeAdapter, field_validator

from app.schemas.guest import SeatedGuest

TableShape = Literal["round", "rectangle", "square"]
ROTATION_STEPS = (0, 45, 90, 135)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TableBase(BaseModel):
    id: str
    name: str
    capacity: int = Field(8, ge=1)
    x: float = 0
    y: float = 0
    guests: List[SeatedGuest] = Field(default_factory=list)

    class Config:
        populate_by_name = True

    @property
    def free_seats(self) -> int:
        return self.capacity - len(self.guests)

    def has_guest(self, guest_id: str) -> bool:
        return any(g.id == guest_id for g in self.guests)


class RoundTable(TableBase):
    shape: Literal["round"] = "round"
    radius: float = 70


class RectangleTable(TableBase):
    shape: Literal["rectangle"] = "rectangle"
    width: float = 200
    height: float = 80
    rotation: int = 0

    @field_validator("rotation", mode="before")
    @classmethod
    def snap_rotation(cls, value):
        if value is None:
            return 0
        # Stored values outside the 45° steps snap down onto the cycle
        return (int(float(value)) // 45 * 45) % 180


class SquareTable(TableBase):
    shape: Literal["square"] = "square"
    size: float = 100


Table = Annotated[Union[RoundTable, RectangleTable, SquareTable], Field(discriminator="shape")]
TableAdapter = TypeAdapter(Table)


class Seat(BaseModel):
    """A seat position local to the table origin; derived, never stored"""
    x: float
    y: float
    occupied: bool = False


class SeatingArrangement(BaseModel):
    """All tables of one event"""
    event_id: str = Field(alias="eventId")
    event_name: str = Field(alias="eventName")
    tables: List[Table] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=utcnow, alias="updatedAt")
    version: int = 0

    class Config:
        populate_by_name = True


class TableCreate(BaseModel):
    """Request to add a table; size defaults from capacity when omitted"""
    name: str
    capacity: int = 8
    shape: TableShape = "round"
    radius: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    size: Optional[float] = None


class AssignGuestRequest(BaseModel):
    guest_id: str
    table_id: str


class RepositionRequest(BaseModel):
    x: float
    y: float


class SwitchEventRequest(BaseModel):
    save_current: bool = False
