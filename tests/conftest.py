import os
from typing import Generator

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_hostel.db")
os.environ.setdefault("RATE_LIMITING_ENABLED", "false")
os.environ.setdefault("LOG_DIR", "./logs")

from hostel.config import reset_settings_cache  # noqa: E402

reset_settings_cache()

from hostel.auth import get_password_hash  # noqa: E402
from hostel.database import Base, SessionLocal, engine  # noqa: E402
from hostel.dependencies import get_reservation_service  # noqa: E402
from hostel.models import Bed, Facility, Guest, Room, RoomPhoto  # noqa: E402
from services.guests.app import app as guests_app  # noqa: E402
from services.reservations.app import app as reservations_app  # noqa: E402


@pytest.fixture(autouse=True, scope="function")
def _create_test_database() -> Generator[None, None, None]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session() -> Generator:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def service(db_session):
    return get_reservation_service(db_session)


def make_room(db_session, room_type: str, price: int, beds: int, facilities=()) -> Room:
    room = Room(type=room_type, price=price)
    room.beds = [Bed(label=f"bed-{number}") for number in range(1, beds + 1)]
    room.photos = [RoomPhoto(photo_url=f"/photos/{room_type}.jpg", photo_description=room_type)]
    room.facilities = [Facility(name=name) for name in facilities]
    db_session.add(room)
    db_session.commit()
    db_session.refresh(room)
    return room


@pytest.fixture()
def rooms(db_session) -> dict[str, Room]:
    """Two dorms of the same type (3 and 2 beds) and a private double."""

    return {
        "dorm_a": make_room(db_session, "Mixed Dorm", 350, 3, facilities=("Locker",)),
        "dorm_b": make_room(db_session, "Mixed Dorm", 350, 2),
        "private": make_room(db_session, "Private Double", 1200, 2, facilities=("Private bathroom",)),
    }


@pytest.fixture()
def guests(db_session) -> dict[str, Guest]:
    created = {}
    for username in ("alice", "bob"):
        guest = Guest(
            name=username.title(),
            username=username,
            email=f"{username}@example.com",
            hashed_password=get_password_hash("Passw0rd!"),
        )
        db_session.add(guest)
        created[username] = guest
    db_session.commit()
    return created


@pytest.fixture()
def guests_client() -> Generator[TestClient, None, None]:
    with TestClient(guests_app) as client:
        yield client


@pytest.fixture()
def reservations_client() -> Generator[TestClient, None, None]:
    with TestClient(reservations_app) as client:
        yield client
