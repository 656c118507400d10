"""Reservation lifecycle: search, reserve, retrieve, check in and check out."""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Dict, List, Optional, Sequence

from .allocation import BedAllocator
from .availability import AvailabilityEngine, group_by_type
from .dates import nights, same_day, validate_stay
from .exceptions import InvalidOperation, InvalidReservation, NotFound, StorageConflict, Unauthorized
from .models import Bed, Reservation, Room
from .repository import ReservationRepository
from .schemas import (
    ReservationDetail,
    ReservedRoom,
    RoomPhotoRead,
    RoomSearchResult,
    RoomSelection,
)

logger = logging.getLogger(__name__)


def _reserved_room(room: Room, beds: List[Bed]) -> ReservedRoom:
    return ReservedRoom(
        id=room.id,
        type=room.type,
        price=room.price,
        available=len(beds),
        photos=[RoomPhotoRead.model_validate(photo) for photo in room.photos],
        facilities=[facility.name for facility in room.facilities],
    )


def to_detail(reservation: Reservation) -> ReservationDetail:
    """Guest-facing view of a reservation; each room's beds collapse to a count."""

    beds_by_room: Dict[int, List[Bed]] = {}
    for bed in reservation.beds:
        beds_by_room.setdefault(bed.room_id, []).append(bed)
    return ReservationDetail(
        id=reservation.id,
        check_in=reservation.check_in,
        check_out=reservation.check_out,
        special_requests=reservation.special_requests or "",
        rooms=[_reserved_room(beds[0].room, beds) for _, beds in sorted(beds_by_room.items())],
        is_paid=reservation.transaction is not None,
    )


class ReservationService:
    def __init__(
        self,
        repository: ReservationRepository,
        availability: AvailabilityEngine,
        allocator: BedAllocator,
    ) -> None:
        self.repository = repository
        self.availability = availability
        self.allocator = allocator

    def find_available_rooms(self, check_in: date, check_out: date, guests: int) -> RoomSearchResult:
        validate_stay(check_in, check_out)
        if guests < 1:
            raise InvalidReservation("Invalid search. At least one guest is required.")
        rooms = self.availability.find_available_rooms(check_in, check_out)
        logger.debug("Availability search %s to %s for %d guests over %d rooms", check_in, check_out, guests, len(rooms))
        return RoomSearchResult(rooms=group_by_type(rooms))

    def make_reservation(
        self,
        check_in: date,
        check_out: date,
        guest_id: int,
        selections: Sequence[RoomSelection],
        special_requests: str = "",
    ) -> ReservationDetail:
        validate_stay(check_in, check_out)
        try:
            assignment = self.allocator.allocate(check_in, check_out, selections)
            beds = [bed for room_beds in assignment.values() for bed in room_beds]
            reservation = self.repository.create_reservation(
                check_in, check_out, guest_id, beds, special_requests
            )
        except StorageConflict as exc:
            raise InvalidReservation("Invalid Reservation. Some rooms do not have enough beds.") from exc
        logger.info(
            "Reservation %s created for guest %s: %d beds in rooms %s, %d nights from %s",
            reservation.id,
            guest_id,
            len(beds),
            sorted(assignment),
            nights(check_in, check_out),
            check_in,
        )
        return self.get_reservation_details(reservation.id, guest_id)

    def _owned_reservation(self, reservation_id: str, guest_id: int, action: str) -> Reservation:
        reservation = self.repository.get_reservation(reservation_id)
        if reservation is None:
            raise NotFound("Reservation not found.")
        if reservation.guest_id != guest_id:
            raise Unauthorized(f"Can not get reservation {action} that is not your own.")
        return reservation

    def get_reservation_details(self, reservation_id: str, guest_id: int) -> ReservationDetail:
        return to_detail(self._owned_reservation(reservation_id, guest_id, "details"))

    def get_reservation_payment_status(self, reservation_id: str, guest_id: int) -> bool:
        reservation = self._owned_reservation(reservation_id, guest_id, "payment status")
        return reservation.transaction is not None

    def list_guest_reservations(self, guest_id: int) -> List[ReservationDetail]:
        return [to_detail(reservation) for reservation in self.repository.list_reservations(guest_id)]

    def get_arrival(self, guest_id: int, day: date) -> ReservationDetail:
        reservation = self.repository.find_guest_reservation(guest_id, day)
        if reservation is None:
            raise NotFound("No reservation starts on that day.")
        return to_detail(reservation)

    def check_in(self, reservation_id: str, when: Optional[datetime] = None) -> Reservation:
        when = when or datetime.now()
        reservation = self.repository.get_reservation(reservation_id)
        if reservation is None:
            raise NotFound("Reservation not found.")
        if not same_day(when, reservation.check_in):
            raise InvalidOperation("Can not check in today.")
        if reservation.check_in_time is not None:
            raise InvalidOperation("Already checked in.")
        logger.info("Reservation %s checked in at %s", reservation_id, when.isoformat())
        return self.repository.record_check_in(reservation, when)

    def check_out(self, reservation_id: str, when: Optional[datetime] = None) -> Reservation:
        when = when or datetime.now()
        reservation = self.repository.get_reservation(reservation_id)
        if reservation is None:
            raise NotFound("Reservation not found.")
        if not same_day(when, reservation.check_out):
            raise InvalidOperation("Can not check out today.")
        if reservation.check_in_time is None:
            raise InvalidOperation("You are not checked in.")
        if reservation.check_out_time is not None:
            raise InvalidOperation("Already checked out.")
        logger.info("Reservation %s checked out at %s", reservation_id, when.isoformat())
        return self.repository.record_check_out(reservation, when)
