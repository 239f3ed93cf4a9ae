"""
Seat geometry for seating chart tables

Seat coordinates are a pure projection of a table's shape, size, capacity and
rotation. They are recomputed on every request and never persisted. All
points are local to the table origin (the table's centre).
"""

import math
from typing import Dict, List, Tuple

from app.core.config import settings
from app.core.exceptions import TableGeometryError
from app.schemas.seating import RectangleTable, RoundTable, Seat, SquareTable, Table

Point = Tuple[float, float]


def rotate_point(x: float, y: float, angle_degrees: float) -> Point:
    """Rotate a point around the origin"""
    angle = math.radians(angle_degrees)
    cos, sin = math.cos(angle), math.sin(angle)
    return x * cos - y * sin, x * sin + y * cos


def circle_seats(count: int, table_radius: float, seat_gap: float) -> List[Point]:
    """Seats on a circle around a round table, starting at the top, clockwise"""
    r = table_radius + seat_gap
    points = []
    for i in range(count):
        angle = (i / count) * 2 * math.pi - math.pi / 2
        points.append((r * math.cos(angle), r * math.sin(angle)))
    return points


def check_perimeter(width: float, height: float, count: int, corner_clear: float) -> None:
    """Raise when the rectangle leaves no room to walk seats along its edges"""
    top = width - 2 * corner_clear
    side = height - 2 * corner_clear
    if top <= 0 or side <= 0:
        raise TableGeometryError(
            f"Table of {width:g}x{height:g} is too small for a corner clearance of {corner_clear:g}"
        )
    if count < 1:
        raise TableGeometryError("Table needs at least one seat")


def rect_seats(
    count: int,
    width: float,
    height: float,
    offset: float,
    corner_clear: float,
) -> List[Point]:
    """Seats spread evenly along a centred rectangle's perimeter.

    The walk starts on the top edge, goes down the right edge, back along the
    bottom edge and up the left edge. Each corner keeps ``corner_clear`` free
    on both sides and every seat sits ``offset`` outside its edge.
    """
    check_perimeter(width, height, count, corner_clear)

    left, top = -width / 2, -height / 2
    top_len = width - 2 * corner_clear
    side_len = height - 2 * corner_clear
    usable = 2 * (width + height) - 8 * corner_clear
    step = usable / count

    points = []
    d = corner_clear + step / 2
    for _ in range(count):
        t = d
        if t <= top_len:
            points.append((left + corner_clear + t, top - offset))
        else:
            t -= top_len
            if t <= side_len:
                points.append((left + width + offset, top + corner_clear + t))
            else:
                t -= side_len
                if t <= top_len:
                    points.append((left + width - corner_clear - t, top + height + offset))
                else:
                    t -= top_len
                    points.append((left - offset, top + height - corner_clear - t))
        d += step
    return points


def table_dimensions(table: Table) -> Tuple[float, float]:
    """Width and height of a rectangular or square table"""
    if isinstance(table, SquareTable):
        return table.size, table.size
    return table.width, table.height


def compute_seats(
    table: Table,
    seat_gap: float = None,
    edge_offset: float = None,
    corner_clear: float = None,
) -> List[Seat]:
    """Compute the ordered seats around a table.

    Occupancy is positional: the first ``len(table.guests)`` seats are marked
    occupied, no guest is pinned to a particular seat.
    """
    seat_gap = settings.SEAT_GAP if seat_gap is None else seat_gap
    edge_offset = settings.EDGE_OFFSET if edge_offset is None else edge_offset
    corner_clear = settings.CORNER_CLEAR if corner_clear is None else corner_clear

    if isinstance(table, RoundTable):
        points = circle_seats(table.capacity, table.radius, seat_gap)
    else:
        width, height = table_dimensions(table)
        points = rect_seats(table.capacity, width, height, edge_offset, corner_clear)
        if isinstance(table, RectangleTable) and table.rotation:
            points = [rotate_point(x, y, table.rotation) for x, y in points]

    occupied = len(table.guests)
    return [Seat(x=x, y=y, occupied=i < occupied) for i, (x, y) in enumerate(points)]


def default_table_size(capacity: int, shape: str) -> Dict[str, float]:
    """Table size scaled from its capacity"""
    base = max(50, min(150, 40 + capacity * 8))

    if shape == "round":
        return {"radius": round(base / 2)}
    if shape == "rectangle":
        return {"width": round(base * 1.4), "height": round(base * 0.6)}
    if shape == "square":
        return {"size": round(base)}
    return {"radius": 50}
