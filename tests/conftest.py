"""
Shared test fixtures
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("USE_FIREBASE", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.core.db import Base
from app.services.document_store import SqlDocumentStore
from app.services.repositories import ArrangementRepo, DirectoryRepo

TENANT = "couple-1"

@pytest.fixture
def document_store():
    """Document store on a fresh in-memory database"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield SqlDocumentStore(TestingSessionLocal)
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def arrangements(document_store):
    return ArrangementRepo(document_store)

@pytest.fixture
def directory(document_store):
    return DirectoryRepo(document_store)

def make_guest(first, group, status="accepted", events=None, tags=None):
    return {
        "firstName": first,
        "lastName": "Test",
        "groupId": group,
        "tags": tags or [],
        "rsvp": {"status": status, "events": events or {}},
    }

@pytest.fixture
def wedding(document_store):
    """Couple with two events, two groups and a handful of guests"""
    document_store.set(f"couples/{TENANT}", {
        "events": [
            {"name": "Ceremony", "date": "2026-06-13"},
            {"name": "Dinner", "date": "2026-06-13"},
        ],
        "groups": {
            "family": {"name": "Family", "events": ["Ceremony", "Dinner"]},
            "friends": {"name": "Friends", "events": ["Dinner"]},
        },
    })
    guests = {
        "g-alice": make_guest("Alice", "family", events={"Ceremony": True, "Dinner": True}, tags=["Bride side"]),
        "g-bob": make_guest("Bob", "family", events={"Ceremony": True, "Dinner": True}),
        "g-carol": make_guest("Carol", "friends", events={"Dinner": True}, tags=[{"name": "College"}]),
        "g-dave": make_guest("Dave", "friends", status="pending", events={"Dinner": True}),
        "g-erin": make_guest("Erin", "family", status="declined", events={"Ceremony": False}),
    }
    for guest_id, data in guests.items():
        document_store.set(f"couples/{TENANT}/guests/{guest_id}", data)
    return guests

@pytest.fixture
def fast_saves(monkeypatch):
    monkeypatch.setattr(settings, "SAVE_DEBOUNCE_SECONDS", 0.0)
    monkeypatch.setattr(settings, "SAVED_STATUS_RESET_SECONDS", 0.05)
    monkeypatch.setattr(settings, "ERROR_STATUS_RESET_SECONDS", 0.05)

@pytest.fixture
def client(document_store, wedding, fast_saves):
    """API client whose sessions use the test document store"""
    from main import app
    from app.api.ws import get_session_registry
    from app.services.seating_session import SeatingSession, SessionRegistry

    registry = SessionRegistry(
        factory=lambda tenant_id: SeatingSession(tenant_id, ArrangementRepo(document_store), debounce_seconds=0)
    )
    app.dependency_overrides[get_session_registry] = lambda: registry
    with TestClient(app) as test_client:
        test_client.headers.update({"Authorization": f"Bearer {settings.API_TOKEN}"})
        yield test_client
    app.dependency_overrides.clear()

@pytest.fixture
def tenant_id():
    return TENANT
