"""
Tests for seat geometry
"""

import math

import pytest

from app.core.exceptions import TableGeometryError
from app.schemas.guest import SeatedGuest
from app.schemas.seating import RectangleTable, RoundTable, SquareTable
from app.services.geometry import (
    circle_seats,
    compute_seats,
    default_table_size,
    rect_seats,
    rotate_point,
)

def test_round_table_seats_on_circle():
    """Every seat of a round table sits radius + gap from the centre"""
    table = RoundTable(id="t1", name="Round", capacity=7, radius=60)
    seats = compute_seats(table, seat_gap=20)

    assert len(seats) == 7
    for seat in seats:
        assert math.hypot(seat.x, seat.y) == pytest.approx(80)

def test_round_table_first_seat_at_top_then_clockwise():
    points = circle_seats(4, 50, 20)

    assert points[0] == pytest.approx((0, -70))
    assert points[1] == pytest.approx((70, 0))
    assert points[2] == pytest.approx((0, 70))
    assert points[3] == pytest.approx((-70, 0))

def test_rectangle_seats_match_perimeter_walk():
    """Six seats around a 200x80 table, corner clearance 12, offset 18"""
    points = rect_seats(6, 200, 80, offset=18, corner_clear=12)

    expected = [
        (-37.333, -58),
        (40, -58),
        (118, 1.333),
        (37.333, 58),
        (-40, 58),
        (-118, -1.333),
    ]
    assert len(points) == 6
    for point, want in zip(points, expected):
        assert point == pytest.approx(want, abs=0.01)

def test_rectangle_seats_sit_outside_an_edge():
    table = RectangleTable(id="t1", name="Long", capacity=10, width=240, height=90)
    seats = compute_seats(table, edge_offset=18, corner_clear=12)

    assert len(seats) == 10
    for seat in seats:
        on_long_edge = abs(abs(seat.y) - (45 + 18)) < 1e-6 and abs(seat.x) <= 120
        on_short_edge = abs(abs(seat.x) - (120 + 18)) < 1e-6 and abs(seat.y) <= 45
        assert on_long_edge or on_short_edge

def test_square_table_uses_size_for_both_sides():
    table = SquareTable(id="t1", name="Square", capacity=4, size=100)
    seats = compute_seats(table, edge_offset=18, corner_clear=12)

    # One seat per edge, each shifted the same way along the walk
    assert [(round(s.x, 6), round(s.y, 6)) for s in seats] == [
        (12, -68),
        (68, 12),
        (-12, 68),
        (-68, -12),
    ]

def test_rotation_turns_rectangle_seats():
    flat = RectangleTable(id="t1", name="Head", capacity=6, width=200, height=80)
    turned = flat.model_copy(update={"rotation": 90})

    flat_seats = compute_seats(flat, edge_offset=18, corner_clear=12)
    turned_seats = compute_seats(turned, edge_offset=18, corner_clear=12)

    for a, b in zip(flat_seats, turned_seats):
        assert (b.x, b.y) == pytest.approx(rotate_point(a.x, a.y, 90))
        # Rotating keeps the distance from the centre
        assert math.hypot(a.x, a.y) == pytest.approx(math.hypot(b.x, b.y))

def test_zero_rotation_leaves_seats_untouched():
    table = RectangleTable(id="t1", name="Head", capacity=6, width=200, height=80, rotation=0)
    seats = compute_seats(table, edge_offset=18, corner_clear=12)

    assert (seats[0].x, seats[0].y) == pytest.approx((-37.333, -58), abs=0.01)

def test_occupied_seats_follow_guest_count():
    table = RoundTable(
        id="t1",
        name="Round",
        capacity=5,
        guests=[SeatedGuest(id="g1", name="Alice"), SeatedGuest(id="g2", name="Bob")],
    )
    seats = compute_seats(table)

    assert [s.occupied for s in seats] == [True, True, False, False, False]

def test_seat_count_always_equals_capacity():
    for capacity in (1, 2, 3, 8, 13):
        assert len(compute_seats(RoundTable(id="r", name="R", capacity=capacity))) == capacity
        assert len(compute_seats(RectangleTable(id="q", name="Q", capacity=capacity))) == capacity
        assert len(compute_seats(SquareTable(id="s", name="S", capacity=capacity))) == capacity

def test_too_small_rectangle_raises():
    """A table narrower than twice the corner clearance has no edge to walk"""
    table = RectangleTable(id="t1", name="Tiny", capacity=4, width=20, height=80)

    with pytest.raises(TableGeometryError):
        compute_seats(table, corner_clear=12)

    with pytest.raises(TableGeometryError):
        compute_seats(SquareTable(id="t2", name="Tiny", capacity=4, size=24), corner_clear=12)

def test_default_table_size_scales_with_capacity():
    assert default_table_size(8, "round") == {"radius": 52}
    assert default_table_size(8, "rectangle") == {"width": 146, "height": 62}
    assert default_table_size(8, "square") == {"size": 104}

    # Clamped between 50 and 150
    assert default_table_size(1, "round") == {"radius": 25}
    assert default_table_size(40, "round") == {"radius": 75}
