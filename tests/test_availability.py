from datetime import date

from hostel.availability import AvailabilityEngine, group_by_type
from hostel.repository import SqlReservationRepository
from hostel.schemas import RoomSelection


def engine_for(db_session) -> AvailabilityEngine:
    return AvailabilityEngine(SqlReservationRepository(db_session))


def test_all_beds_free_without_reservations(db_session, rooms):
    available = engine_for(db_session).find_available_rooms(date(2024, 3, 1), date(2024, 3, 5))

    assert [entry.room.id for entry in available] == sorted(room.id for room in rooms.values())
    assert [entry.available for entry in available] == [3, 2, 2]


def test_free_beds_sorted_ascending(db_session, rooms):
    room = engine_for(db_session).find_available_beds(date(2024, 3, 1), date(2024, 3, 5), rooms["dorm_a"].id)

    ids = [bed.id for bed in room.beds]
    assert ids == sorted(ids)
    assert len(ids) == 3


def test_unknown_room_returns_none(db_session, rooms):
    assert engine_for(db_session).find_available_beds(date(2024, 3, 1), date(2024, 3, 5), 999) is None


def test_fully_booked_room_has_empty_bed_list(db_session, rooms, guests, service):
    private = rooms["private"]
    service.make_reservation(date(2024, 3, 1), date(2024, 3, 5), guests["alice"].id, [RoomSelection(id=private.id, guests=2)])

    room = engine_for(db_session).find_available_beds(date(2024, 3, 2), date(2024, 3, 3), private.id)

    assert room is not None
    assert room.beds == []


def test_checkout_day_frees_the_bed(db_session, rooms, guests, service):
    private = rooms["private"]
    service.make_reservation(date(2024, 3, 1), date(2024, 3, 5), guests["alice"].id, [RoomSelection(id=private.id, guests=2)])
    engine = engine_for(db_session)

    assert engine.find_available_beds(date(2024, 3, 5), date(2024, 3, 7), private.id).available == 2
    assert engine.find_available_beds(date(2024, 2, 27), date(2024, 3, 1), private.id).available == 2
    assert engine.find_available_beds(date(2024, 3, 4), date(2024, 3, 6), private.id).available == 0


def test_partial_occupancy_leaves_highest_beds(db_session, rooms, guests, service):
    dorm = rooms["dorm_a"]
    service.make_reservation(date(2024, 3, 1), date(2024, 3, 5), guests["alice"].id, [RoomSelection(id=dorm.id, guests=2)])

    room = engine_for(db_session).find_available_beds(date(2024, 3, 3), date(2024, 3, 4), dorm.id)

    assert [bed.id for bed in room.beds] == [max(bed.id for bed in dorm.beds)]


def test_group_by_type(db_session, rooms, guests, service):
    service.make_reservation(
        date(2024, 3, 1), date(2024, 3, 5), guests["alice"].id, [RoomSelection(id=rooms["dorm_b"].id, guests=1)]
    )

    grouped = group_by_type(engine_for(db_session).find_available_rooms(date(2024, 3, 1), date(2024, 3, 5)))

    assert [entry.type for entry in grouped] == ["Mixed Dorm", "Private Double"]
    dorms = grouped[0]
    assert dorms.price == 350
    assert dorms.facilities == ["Locker"]
    assert dorms.photos[0].photo_url == "/photos/Mixed Dorm.jpg"
    assert [(entry.id, entry.available) for entry in dorms.availability] == [
        (rooms["dorm_a"].id, 3),
        (rooms["dorm_b"].id, 1),
    ]
    assert [(entry.id, entry.available) for entry in grouped[1].availability] == [(rooms["private"].id, 2)]
