"""
Tests for the seating editor session
"""

import pytest

from app.core.exceptions import DragRejectedError, NoEventSelectedError
from app.schemas.seating import TableCreate
from app.services.drag_controller import DropOutcome
from app.services.repositories import ArrangementRepo, arrangement_path, default_tables
from app.services.save_coordinator import SaveStatus
from app.services.seating_session import SeatingSession, SessionRegistry

@pytest.fixture
def session(arrangements, wedding, tenant_id, fast_saves):
    session = SeatingSession(tenant_id, arrangements, debounce_seconds=0)
    session.open()
    return session

async def test_open_selects_first_event_with_default_tables(session):
    assert session.selected_event == "Ceremony"
    assert [t.id for t in session.store.tables] == ["1", "2", "3"]
    assert session.saver.version("Ceremony") == 0

async def test_attending_guests_follow_selected_event(session):
    assert {g.id for g in session.attending_guests()} == {"g-alice", "g-bob"}

    await session.select_event("Dinner")

    assert {g.id for g in session.attending_guests()} == {"g-alice", "g-bob", "g-carol"}

async def test_assignment_is_saved_and_synced(session, arrangements, directory, tenant_id):
    assert session.assign_guest("g-alice", "2") is True
    await session.saver.flush()

    stored = arrangements.load(tenant_id, "Ceremony")
    assert [g.id for g in stored.tables[1].guests] == ["g-alice"]
    assert stored.version == 1
    assert directory.get_guest(tenant_id, "g-alice").table_assignment == "Ceremony:2"

async def test_mutations_coalesce_into_latest_snapshot(session, arrangements, tenant_id):
    session.assign_guest("g-alice", "2")
    session.assign_guest("g-bob", "2")
    session.reposition_table("2", 10, 20)
    session.rotate_table("1")
    await session.saver.flush()

    stored = arrangements.load(tenant_id, "Ceremony")
    assert stored.version == 1
    assert [g.id for g in stored.tables[1].guests] == ["g-alice", "g-bob"]
    assert (stored.tables[1].x, stored.tables[1].y) == (10, 20)
    assert stored.tables[0].rotation == 45

async def test_switching_event_saves_current_first(session, arrangements, tenant_id):
    session.assign_guest("g-alice", "3")

    await session.select_event("Dinner", save_current=True)

    assert session.selected_event == "Dinner"
    assert arrangements.load(tenant_id, "Ceremony").tables[2].guests[0].id == "g-alice"
    # Dinner has its own tables
    assert session.store.seated_guest_ids() == set()

    await session.select_event("Ceremony")
    assert session.store.seated_guest_ids() == {"g-alice"}

async def test_explicit_save_of_untouched_default(session, arrangements, tenant_id):
    assert not arrangements.exists(tenant_id, "Ceremony")

    session.save_now()
    await session.saver.flush()

    assert arrangements.exists(tenant_id, "Ceremony")
    assert session.saver.status("Ceremony") == SaveStatus.SAVED

async def test_drag_and_drop(session):
    assert session.draggable_guest_ids() == {"g-alice", "g-bob"}

    session.start_drag("g-bob")
    assert session.drop("3") == DropOutcome.SEATED
    assert session.store.table_for_guest("g-bob").id == "3"
    assert session.draggable_guest_ids() == {"g-alice"}

    # Not attending the ceremony
    with pytest.raises(DragRejectedError):
        session.start_drag("g-carol")

    await session.saver.flush()

async def test_drop_on_full_table(session):
    table = session.add_table(TableCreate(name="Duo", capacity=1))
    session.assign_guest("g-alice", table.id)

    session.start_drag("g-bob")
    assert session.drop(table.id) == DropOutcome.TABLE_FULL
    assert session.store.table_for_guest("g-bob") is None

    await session.saver.flush()

async def test_stats_and_candidates(session):
    session.assign_guest("g-alice", "1")

    assert session.stats() == {
        "total_tables": 3,
        "seated_guests": 1,
        "unassigned_guests": 1,
        "attending_guests": 2,
    }
    assert [g.id for g in session.candidates(unassigned_only=True)] == ["g-bob"]
    assert session.categories() == ["Bride side"]
    assert session.table_summary()[0]["guests"] == ["Alice Test"]

    await session.saver.flush()

async def test_snapshot_renders_seats_for_every_table(session):
    session.assign_guest("g-alice", "2")
    snapshot = session.snapshot()

    assert snapshot["event"] == "Ceremony"
    assert [len(t["seats"]) for t in snapshot["tables"]] == [10, 12, 6]
    assert snapshot["tables"][1]["seats"][0]["occupied"] is True
    assert snapshot["tables"][1]["guests"][0]["firstName"] == "Alice"

    await session.saver.flush()

async def test_snapshot_skips_seats_of_degenerate_table(document_store, wedding, tenant_id, fast_saves):
    document_store.set(arrangement_path(tenant_id, "Ceremony"), {
        "tables": [{"id": "x", "name": "Sliver", "shape": "rectangle", "capacity": 4, "width": 10, "height": 80}],
        "version": 3,
    })
    session = SeatingSession(tenant_id, ArrangementRepo(document_store), debounce_seconds=0)
    session.open()

    snapshot = session.snapshot()

    assert snapshot["version"] == 3
    assert snapshot["tables"][0]["seats"] == []

async def test_concurrent_writer_causes_conflict(session, document_store, tenant_id):
    ArrangementRepo(document_store).save(tenant_id, "Ceremony", default_tables())

    session.assign_guest("g-alice", "2")
    await session.saver.flush()

    assert session.saver.status("Ceremony") == SaveStatus.CONFLICT

    # Reloading picks up the other writer's version
    await session.reload()
    assert session.saver.version("Ceremony") == 1
    assert session.store.seated_guest_ids() == set()

async def test_mutation_without_event_raises(arrangements):
    session = SeatingSession("empty-couple", arrangements, debounce_seconds=0)
    session.open()

    assert session.selected_event is None
    with pytest.raises(NoEventSelectedError):
        session.add_table(TableCreate(name="Lonely"))

async def test_registry_opens_one_session_per_tenant(arrangements, wedding, tenant_id):
    registry = SessionRegistry(factory=lambda t: SeatingSession(t, arrangements, debounce_seconds=0))

    first = registry.get(tenant_id)
    assert registry.get(tenant_id) is first
    assert first.selected_event == "Ceremony"

    await registry.close_all()
    assert registry.get(tenant_id) is not first
