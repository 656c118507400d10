"""Free-bed computation for a stay window.

A bed is free when no reserved-bed row holding it overlaps the half-open
window ``[check_in, check_out)``. Availability is always read from the
datastore and never cached.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from .models import Bed, Room
from .repository import ReservationRepository
from .schemas import RoomAvailabilityCount, RoomPhotoRead, RoomTypeAvailability


@dataclass
class RoomAvailability:
    room: Room
    beds: List[Bed] = field(default_factory=list)

    @property
    def available(self) -> int:
        return len(self.beds)


class AvailabilityEngine:
    def __init__(self, repository: ReservationRepository) -> None:
        self.repository = repository

    def find_available_rooms(self, check_in: date, check_out: date) -> List[RoomAvailability]:
        rooms = self.repository.list_rooms()
        taken = self.repository.reserved_bed_ids(check_in, check_out)
        return [
            RoomAvailability(room=room, beds=sorted((bed for bed in room.beds if bed.id not in taken), key=_bed_key))
            for room in rooms
        ]

    def find_available_beds(
        self, check_in: date, check_out: date, room_id: int, lock: bool = False
    ) -> Optional[RoomAvailability]:
        room = self.repository.get_room(room_id)
        if room is None:
            return None
        beds = self.repository.room_beds(room_id, lock=lock)
        taken = self.repository.reserved_bed_ids(check_in, check_out, room_ids=[room_id])
        free = sorted((bed for bed in beds if bed.id not in taken), key=_bed_key)
        return RoomAvailability(room=room, beds=free)


def _bed_key(bed: Bed) -> int:
    return bed.id


def group_by_type(rooms: List[RoomAvailability]) -> List[RoomTypeAvailability]:
    """Collapse per-room availability into one entry per room type, in first-seen order."""

    grouped: Dict[str, RoomTypeAvailability] = {}
    for entry in rooms:
        room = entry.room
        if room.type not in grouped:
            grouped[room.type] = RoomTypeAvailability(
                type=room.type,
                price=room.price,
                photos=[RoomPhotoRead.model_validate(photo) for photo in room.photos],
                facilities=[facility.name for facility in room.facilities],
                availability=[],
            )
        grouped[room.type].availability.append(RoomAvailabilityCount(id=room.id, available=entry.available))
    return list(grouped.values())
