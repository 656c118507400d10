"""SQLAlchemy models for rooms, beds, guests and reservations."""
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import (
    DDL,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    event,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .database import Base

room_facilities = Table(
    "room_facilities",
    Base.metadata,
    Column("room_id", ForeignKey("rooms.id", ondelete="CASCADE"), primary_key=True),
    Column("facility_id", ForeignKey("facilities.id", ondelete="CASCADE"), primary_key=True),
)


def _new_reservation_id() -> str:
    return str(uuid.uuid4())


class Guest(Base):
    __tablename__ = "guests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100))
    username: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True)
    hashed_password: Mapped[str] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    reservations: Mapped[List["Reservation"]] = relationship(back_populates="guest")


class Room(Base):
    __tablename__ = "rooms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    type: Mapped[str] = mapped_column(String(100), index=True)
    price: Mapped[int] = mapped_column(Integer)

    beds: Mapped[List["Bed"]] = relationship(back_populates="room", order_by="Bed.id")
    photos: Mapped[List["RoomPhoto"]] = relationship(back_populates="room", order_by="RoomPhoto.id")
    facilities: Mapped[List["Facility"]] = relationship(secondary=room_facilities, order_by="Facility.id")


class Bed(Base):
    __tablename__ = "beds"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    room_id: Mapped[int] = mapped_column(ForeignKey("rooms.id", ondelete="CASCADE"), index=True)
    label: Mapped[Optional[str]] = mapped_column(String(50), default=None)

    room: Mapped[Room] = relationship(back_populates="beds")


class RoomPhoto(Base):
    __tablename__ = "room_photos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    room_id: Mapped[int] = mapped_column(ForeignKey("rooms.id", ondelete="CASCADE"), index=True)
    photo_url: Mapped[str] = mapped_column(String(500))
    photo_description: Mapped[str] = mapped_column(String(255), default="")

    room: Mapped[Room] = relationship(back_populates="photos")


class Facility(Base):
    __tablename__ = "facilities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True)


class Reservation(Base):
    __tablename__ = "reservations"
    __table_args__ = (CheckConstraint("check_out > check_in", name="reservations_dates_ordered"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_reservation_id)
    guest_id: Mapped[int] = mapped_column(ForeignKey("guests.id", ondelete="CASCADE"), index=True)
    check_in: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    check_out: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    special_requests: Mapped[str] = mapped_column(Text, default="")
    check_in_time: Mapped[Optional[datetime]] = mapped_column(DateTime, default=None)
    check_out_time: Mapped[Optional[datetime]] = mapped_column(DateTime, default=None)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    guest: Mapped[Guest] = relationship(back_populates="reservations")
    reserved_beds: Mapped[List["ReservedBed"]] = relationship(
        back_populates="reservation", cascade="all, delete-orphan"
    )
    beds: Mapped[List[Bed]] = relationship(secondary="reserved_beds", order_by="Bed.id", viewonly=True)
    transaction: Mapped[Optional["Transaction"]] = relationship(back_populates="reservation", uselist=False)


class ReservedBed(Base):
    """A bed held by a reservation.

    The stay dates are copied from the reservation so the database can reject
    two rows holding the same bed over overlapping nights.
    """

    __tablename__ = "reserved_beds"
    __table_args__ = (CheckConstraint("check_out > check_in", name="reserved_beds_dates_ordered"),)

    reservation_id: Mapped[str] = mapped_column(
        ForeignKey("reservations.id", ondelete="CASCADE"), primary_key=True
    )
    bed_id: Mapped[int] = mapped_column(ForeignKey("beds.id", ondelete="CASCADE"), primary_key=True, index=True)
    check_in: Mapped[date] = mapped_column(Date, nullable=False)
    check_out: Mapped[date] = mapped_column(Date, nullable=False)

    reservation: Mapped[Reservation] = relationship(back_populates="reserved_beds")
    bed: Mapped[Bed] = relationship()


class Transaction(Base):
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    reservation_id: Mapped[str] = mapped_column(
        ForeignKey("reservations.id", ondelete="CASCADE"), unique=True, index=True
    )
    amount: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    reservation: Mapped[Reservation] = relationship(back_populates="transaction")


# Same-day turnover is allowed: the ranges are half-open, so a stay ending on
# day D does not collide with one starting on D.
event.listen(
    ReservedBed.__table__,
    "after_create",
    DDL(
        "CREATE TRIGGER reserved_beds_no_overlap "
        "BEFORE INSERT ON reserved_beds "
        "WHEN EXISTS ("
        "SELECT 1 FROM reserved_beds "
        "WHERE bed_id = NEW.bed_id "
        "AND check_in < NEW.check_out "
        "AND NEW.check_in < check_out"
        ") "
        "BEGIN SELECT RAISE(ABORT, 'bed already reserved for overlapping dates'); END"
    ).execute_if(dialect="sqlite"),
)
event.listen(
    ReservedBed.__table__,
    "after_create",
    DDL("CREATE EXTENSION IF NOT EXISTS btree_gist").execute_if(dialect="postgresql"),
)
event.listen(
    ReservedBed.__table__,
    "after_create",
    DDL(
        "ALTER TABLE reserved_beds ADD CONSTRAINT reserved_beds_no_overlap "
        "EXCLUDE USING gist (bed_id WITH =, daterange(check_in, check_out, '[)') WITH &&)"
    ).execute_if(dialect="postgresql"),
)
