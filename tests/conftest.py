"""
Shared fixtures: in-memory SQLite database, API client with get_db overridden,
bearer tokens for seeded staff profiles and a small room/guest catalog.
"""

import os
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

# Add the project root to PYTHONPATH for imports
sys.path.insert(0, str(Path(__file__).parent.parent))
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database.connection import Base, get_db
from main import app
from models import Guest, Profile, ProfileRole, Room, RoomType
from schemas.bookings import BookingWrite
from utils.auth import create_access_token
from utils.dependencies import get_today_provider


# Fixed hotel-local "today" for every test
TODAY = date(2024, 1, 1)

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today_provider] = lambda: (lambda: TODAY)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# ========== STAFF ==========

@pytest.fixture
def admin(db_session):
    profile = Profile(name="Maria Admin", email="admin@seabreeze.ph", role=ProfileRole.ADMIN)
    db_session.add(profile)
    db_session.commit()
    return profile


@pytest.fixture
def assistant(db_session):
    profile = Profile(name="Jun Assistant", email="frontdesk@seabreeze.ph", role=ProfileRole.ASSISTANT)
    db_session.add(profile)
    db_session.commit()
    return profile


@pytest.fixture
def auth_headers(admin):
    return {"Authorization": f"Bearer {create_access_token(admin.email)}"}


@pytest.fixture
def assistant_headers(assistant):
    return {"Authorization": f"Bearer {create_access_token(assistant.email)}"}


# ========== CATALOG ==========

@pytest.fixture
def room_type(db_session):
    room_type = RoomType(name="Standard", description="Queen bed", base_price=Decimal("1500.00"))
    db_session.add(room_type)
    db_session.commit()
    return room_type


@pytest.fixture
def rooms(db_session, room_type):
    created = [Room(room_number=number, room_type_id=room_type.id) for number in ("101", "102", "103")]
    db_session.add_all(created)
    db_session.commit()
    return created


@pytest.fixture
def guests(db_session):
    created = [
        Guest(name="Alice Santos", email="alice@example.com", phone="0917 000 0001"),
        Guest(name="Ben Cruz", email="ben@example.com"),
    ]
    db_session.add_all(created)
    db_session.commit()
    return created


def booking_body(guest_id, *segments, extras=None, discount=0, note=None, total_price=None):
    """
    JSON body for POST/PUT /bookings.
    segments: (room_id, check_in, check_out, price[, discount])
    """
    rooms = []
    for segment in segments:
        room_id, check_in, check_out, price = segment[:4]
        rooms.append({
            "roomId": room_id,
            "check_in_date": str(check_in),
            "check_out_date": str(check_out),
            "price": price,
            "discount": segment[4] if len(segment) > 4 else 0,
        })
    body = {
        "guestId": guest_id,
        "booking_rooms": rooms,
        "booking_extras": extras or [],
        "discount": discount,
    }
    if note is not None:
        body["note"] = note
    if total_price is not None:
        body["total_price"] = total_price
    return body


@pytest.fixture
def make_payload():
    """Same body as booking_body, parsed into the request schema for service tests"""
    def _make(guest_id, *segments, **kwargs):
        return BookingWrite.model_validate(booking_body(guest_id, *segments, **kwargs))
    return _make


@pytest.fixture
def body():
    return booking_body
