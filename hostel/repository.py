"""Reservation store: the storage interface the core depends on and its SQLAlchemy implementation."""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable, List, Optional, Protocol, Set

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session, joinedload, selectinload

from .exceptions import StorageConflict
from .models import Bed, Reservation, ReservedBed, Room

logger = logging.getLogger(__name__)

# PostgreSQL serialization_failure and deadlock_detected.
CONCURRENCY_SQLSTATES = {"40001", "40P01"}


def is_concurrency_loss(exc: OperationalError) -> bool:
    orig = exc.orig
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    return sqlstate in CONCURRENCY_SQLSTATES


class ReservationRepository(Protocol):
    """Storage capability required by the availability engine and the lifecycle service."""

    def list_rooms(self) -> List[Room]: ...

    def get_room(self, room_id: int) -> Optional[Room]: ...

    def room_beds(self, room_id: int, lock: bool = False) -> List[Bed]: ...

    def reserved_bed_ids(
        self, check_in: date, check_out: date, room_ids: Optional[Iterable[int]] = None
    ) -> Set[int]: ...

    def create_reservation(
        self,
        check_in: date,
        check_out: date,
        guest_id: int,
        beds: List[Bed],
        special_requests: str,
    ) -> Reservation: ...

    def get_reservation(self, reservation_id: str) -> Optional[Reservation]: ...

    def list_reservations(self, guest_id: int) -> List[Reservation]: ...

    def find_guest_reservation(self, guest_id: int, check_in: date) -> Optional[Reservation]: ...

    def record_check_in(self, reservation: Reservation, when: datetime) -> Reservation: ...

    def record_check_out(self, reservation: Reservation, when: datetime) -> Reservation: ...


class SqlReservationRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def list_rooms(self) -> List[Room]:
        return (
            self.db.query(Room)
            .options(selectinload(Room.beds), selectinload(Room.photos), selectinload(Room.facilities))
            .order_by(Room.id)
            .all()
        )

    def get_room(self, room_id: int) -> Optional[Room]:
        return self.db.query(Room).filter(Room.id == room_id).first()

    def room_beds(self, room_id: int, lock: bool = False) -> List[Bed]:
        query = self.db.query(Bed).filter(Bed.room_id == room_id).order_by(Bed.id)
        if lock:
            # SQLite ignores FOR UPDATE.
            query = query.with_for_update()
        try:
            return query.all()
        except OperationalError as exc:
            if not is_concurrency_loss(exc):
                raise
            self.db.rollback()
            logger.warning("Locking beds of room %s lost a concurrent race: %s", room_id, exc.orig)
            raise StorageConflict("The room's beds are being reserved by another request.") from exc

    def reserved_bed_ids(
        self, check_in: date, check_out: date, room_ids: Optional[Iterable[int]] = None
    ) -> Set[int]:
        query = self.db.query(ReservedBed.bed_id).filter(
            ReservedBed.check_in < check_out,
            ReservedBed.check_out > check_in,
        )
        if room_ids is not None:
            query = query.join(Bed, Bed.id == ReservedBed.bed_id).filter(Bed.room_id.in_(list(room_ids)))
        return {bed_id for (bed_id,) in query.all()}

    def create_reservation(
        self,
        check_in: date,
        check_out: date,
        guest_id: int,
        beds: List[Bed],
        special_requests: str,
    ) -> Reservation:
        reservation = Reservation(
            guest_id=guest_id,
            check_in=check_in,
            check_out=check_out,
            special_requests=special_requests,
        )
        reservation.reserved_beds = [
            ReservedBed(bed_id=bed.id, check_in=check_in, check_out=check_out) for bed in beds
        ]
        self.db.add(reservation)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning(
                "Reservation insert rejected for guest %s (%s to %s): %s",
                guest_id,
                check_in,
                check_out,
                exc.orig,
            )
            raise StorageConflict("One or more beds were reserved by another request.") from exc
        except OperationalError as exc:
            if not is_concurrency_loss(exc):
                raise
            self.db.rollback()
            logger.warning("Reservation commit for guest %s lost a concurrent race: %s", guest_id, exc.orig)
            raise StorageConflict("The reservation conflicted with a concurrent request.") from exc
        self.db.refresh(reservation)
        return reservation

    def _reservation_query(self):
        return self.db.query(Reservation).options(
            selectinload(Reservation.beds).joinedload(Bed.room),
            joinedload(Reservation.transaction),
        )

    def get_reservation(self, reservation_id: str) -> Optional[Reservation]:
        return self._reservation_query().filter(Reservation.id == reservation_id).first()

    def list_reservations(self, guest_id: int) -> List[Reservation]:
        return (
            self._reservation_query()
            .filter(Reservation.guest_id == guest_id)
            .order_by(Reservation.check_in, Reservation.created_at)
            .all()
        )

    def find_guest_reservation(self, guest_id: int, check_in: date) -> Optional[Reservation]:
        return (
            self._reservation_query()
            .filter(Reservation.guest_id == guest_id, Reservation.check_in == check_in)
            .first()
        )

    def record_check_in(self, reservation: Reservation, when: datetime) -> Reservation:
        reservation.check_in_time = when
        self.db.commit()
        self.db.refresh(reservation)
        return reservation

    def record_check_out(self, reservation: Reservation, when: datetime) -> Reservation:
        reservation.check_out_time = when
        self.db.commit()
        self.db.refresh(reservation)
        return reservation
