"""
Tests for keeping seating in step with RSVP answers
"""

import pytest

from app.schemas.guest import Guest, RsvpChange, SeatedGuest
from app.schemas.seating import RoundTable
from app.services.repositories import default_tables
from app.services.rsvp_sync_service import RsvpSeatingSync, find_suitable_table

def seated(guest_id, group_id=None, tags=None):
    return SeatedGuest(id=guest_id, name=guest_id, group_id=group_id, tags=tags or [])

@pytest.fixture
def sync(arrangements, directory, wedding, tenant_id):
    return RsvpSeatingSync(tenant_id, arrangements, directory)

def test_find_table_prefers_own_group():
    tables = [
        RoundTable(id="a", name="A", capacity=10),
        RoundTable(id="b", name="B", capacity=4, guests=[seated("x", group_id="family")]),
    ]
    guest = Guest(id="g1", group_id="family")

    assert find_suitable_table(guest, tables).id == "b"

def test_find_table_matches_shared_tag():
    tables = [
        RoundTable(id="a", name="A", capacity=10),
        RoundTable(id="b", name="B", capacity=4, guests=[seated("x", tags=[{"name": "College"}])]),
    ]
    guest = Guest(id="g1", tags=["College"])

    assert find_suitable_table(guest, tables).id == "b"

def test_find_table_falls_back_to_most_free_seats():
    tables = [
        RoundTable(id="a", name="A", capacity=6, guests=[seated("x")]),
        RoundTable(id="b", name="B", capacity=8, guests=[seated("y")]),
        RoundTable(id="c", name="C", capacity=8, guests=[seated("z")]),
    ]

    assert find_suitable_table(Guest(id="g1"), tables).id == "b"

def test_find_table_respects_party_size():
    tables = [
        RoundTable(id="a", name="A", capacity=2, guests=[seated("x", group_id="family")]),
        RoundTable(id="b", name="B", capacity=4),
    ]
    guest = Guest(id="g1", group_id="family")

    assert find_suitable_table(guest, tables, party_size=2).id == "b"
    assert find_suitable_table(guest, tables, party_size=5) is None

def test_accepting_seats_guest_in_existing_arrangements(sync, arrangements, directory, tenant_id):
    tables = default_tables()
    tables[2].guests.append(seated("g-bob", group_id="family"))
    arrangements.save(tenant_id, "Ceremony", tables)

    result = sync.handle_rsvp_change(RsvpChange(guest_id="g-alice", old_status="pending", new_status="accepted"))

    # Family is invited to both events but only the ceremony has a saved arrangement
    assert result == {"Ceremony": "3", "Dinner": None}
    stored = arrangements.load(tenant_id, "Ceremony")
    assert [g.id for g in stored.tables[2].guests] == ["g-bob", "g-alice"]
    assert stored.version == 2
    assert directory.get_guest(tenant_id, "g-alice").table_assignment == "Ceremony:3"

def test_accepting_again_keeps_current_table(sync, arrangements, tenant_id):
    tables = default_tables()
    tables[1].guests.append(seated("g-alice", group_id="family"))
    arrangements.save(tenant_id, "Ceremony", tables)

    result = sync.handle_rsvp_change(
        RsvpChange(guest_id="g-alice", old_status="declined", new_status="Confirmé", event_names=["Ceremony"])
    )

    assert result == {"Ceremony": "2"}
    assert arrangements.load(tenant_id, "Ceremony").version == 1

def test_declining_unseats_guest(sync, arrangements, directory, tenant_id):
    tables = default_tables()
    tables[0].guests.append(seated("g-alice", group_id="family"))
    arrangements.save(tenant_id, "Ceremony", tables)
    arrangements.save(tenant_id, "Dinner", tables)

    result = sync.handle_rsvp_change(RsvpChange(guest_id="g-alice", old_status="accepted", new_status="Refusé"))

    assert result == {"Ceremony": None, "Dinner": None}
    for event_name in ("Ceremony", "Dinner"):
        assert arrangements.load(tenant_id, event_name).tables[0].guests == []
    assert directory.get_guest(tenant_id, "g-alice").table_assignment is None

def test_unknown_guest_is_ignored(sync):
    assert sync.handle_rsvp_change(RsvpChange(guest_id="nobody", new_status="accepted")) == {}

def test_seating_stats(sync, arrangements, tenant_id):
    tables = default_tables()
    tables[0].guests.append(seated("g-alice"))
    tables[0].guests.append(seated("g-bob"))
    arrangements.save(tenant_id, "Ceremony", tables)

    # 10 + 12 + 6 seats, Dinner has no saved arrangement
    assert sync.seating_stats() == {
        "total_seats": 28,
        "assigned_seats": 2,
        "available_seats": 26,
        "completion_rate": 7,
    }

def test_validate_and_cleanup_declined(sync, arrangements, directory, tenant_id):
    tables = default_tables()
    tables[0].guests.append(seated("g-erin", group_id="family"))
    tables[0].guests.append(seated("g-alice", group_id="family"))
    arrangements.save(tenant_id, "Ceremony", tables)

    report = sync.validate_assignments()

    assert report["valid"] is False
    issues = {c["guest_id"]: c["issue"] for c in report["conflicts"]}
    assert issues == {
        "g-erin": "declined_but_seated",
        "g-bob": "accepted_but_unseated",
        "g-carol": "accepted_but_unseated",
    }

    assert sync.cleanup_declined() == ["g-erin"]
    assert [g.id for g in arrangements.load(tenant_id, "Ceremony").tables[0].guests] == ["g-alice"]
    assert directory.get_guest(tenant_id, "g-erin").table_assignment is None
