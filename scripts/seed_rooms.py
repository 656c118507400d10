#!/usr/bin/env python3
"""Script to create the tables and load a small set of rooms and beds."""
from sqlalchemy.orm import Session

from hostel.database import Base, SessionLocal, engine
from hostel.models import Bed, Facility, Room, RoomPhoto

ROOMS = [
    {"type": "Mixed Dorm", "price": 350, "beds": 6, "facilities": ["Locker", "Air conditioning"]},
    {"type": "Mixed Dorm", "price": 350, "beds": 6, "facilities": ["Locker", "Air conditioning"]},
    {"type": "Female Dorm", "price": 400, "beds": 4, "facilities": ["Locker", "Air conditioning", "Hair dryer"]},
    {"type": "Private Double", "price": 1200, "beds": 2, "facilities": ["Air conditioning", "Private bathroom"]},
]


def seed_rooms(db: Session) -> list[Room]:
    facilities: dict[str, Facility] = {facility.name: facility for facility in db.query(Facility).all()}
    rooms = []
    for entry in ROOMS:
        for name in entry["facilities"]:
            if name not in facilities:
                facilities[name] = Facility(name=name)
        room = Room(type=entry["type"], price=entry["price"])
        room.beds = [Bed(label=f"{entry['type'][0]}{number}") for number in range(1, entry["beds"] + 1)]
        room.photos = [RoomPhoto(photo_url=f"/static/rooms/{entry['type'].lower().replace(' ', '-')}.jpg", photo_description=entry["type"])]
        room.facilities = [facilities[name] for name in entry["facilities"]]
        db.add(room)
        rooms.append(room)
    db.commit()
    return rooms


if __name__ == "__main__":
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as session:
        created = seed_rooms(session)
        print(f"Seeded {len(created)} rooms with {sum(len(room.beds) for room in created)} beds.")
