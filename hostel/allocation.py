"""Bed allocation: validate a guest's room selections and pick the beds to hold."""
from __future__ import annotations

import logging
from collections import Counter
from datetime import date
from typing import Dict, List, Sequence

from .availability import AvailabilityEngine, RoomAvailability
from .exceptions import InvalidReservation
from .models import Bed
from .schemas import RoomSelection

logger = logging.getLogger(__name__)


def has_duplicate_rooms(selections: Sequence[RoomSelection]) -> bool:
    counts = Counter(selection.id for selection in selections)
    return any(count > 1 for count in counts.values())


def has_enough_beds(availability: RoomAvailability, selection: RoomSelection) -> bool:
    return selection.guests <= availability.available


def pick_beds(free_beds: Sequence[Bed], count: int) -> List[Bed]:
    """Lowest bed ids first, so the same free list always yields the same beds."""

    return sorted(free_beds, key=lambda bed: bed.id)[:count]


class BedAllocator:
    def __init__(self, availability: AvailabilityEngine) -> None:
        self.availability = availability

    def allocate(
        self, check_in: date, check_out: date, selections: Sequence[RoomSelection]
    ) -> Dict[int, List[Bed]]:
        """Return the beds to hold per room id.

        Checks run in a fixed order and the first failure wins: an empty
        selection, a room selected twice, a room that does not exist, then a
        room without enough free beds. Every room is checked before any bed is
        picked.
        """
        if not selections:
            raise InvalidReservation("Invalid Reservation. Select at least one room.")
        if has_duplicate_rooms(selections):
            raise InvalidReservation("Invalid Reservation. Can not reserve one room multiple times.")

        # Rooms are locked in ascending id order so concurrent requests can not deadlock.
        free: Dict[int, RoomAvailability] = {}
        for selection in sorted(selections, key=lambda selection: selection.id):
            room = self.availability.find_available_beds(check_in, check_out, selection.id, lock=True)
            if room is None:
                raise InvalidReservation(f"Invalid Reservation. Room {selection.id} does not exist.")
            free[selection.id] = room

        short = [selection.id for selection in selections if not has_enough_beds(free[selection.id], selection)]
        if short:
            logger.info("Not enough beds in rooms %s for %s to %s", short, check_in, check_out)
            raise InvalidReservation("Invalid Reservation. Some rooms do not have enough beds.")

        return {selection.id: pick_beds(free[selection.id].beds, selection.guests) for selection in selections}
