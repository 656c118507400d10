from datetime import date

from hostel.availability import group_by_type
from scripts.seed_rooms import ROOMS, seed_rooms


def test_seed_rooms_loads_searchable_inventory(db_session, service):
    created = seed_rooms(db_session)

    assert len(created) == len(ROOMS)
    result = service.find_available_rooms(date(2024, 6, 1), date(2024, 6, 3), guests=4)
    assert [entry.type for entry in result.rooms] == ["Mixed Dorm", "Female Dorm", "Private Double"]
    assert [room.available for room in result.rooms[0].availability] == [6, 6]
    assert result.rooms[1].facilities == ["Locker", "Air conditioning", "Hair dryer"]


def test_seed_rooms_reuses_facilities(db_session, service):
    seed_rooms(db_session)
    seed_rooms(db_session)

    rooms = service.availability.find_available_rooms(date(2024, 6, 1), date(2024, 6, 3))
    grouped = group_by_type(rooms)
    assert len(grouped[0].availability) == 4
