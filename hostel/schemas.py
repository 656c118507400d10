"""Pydantic schemas shared by the guests and reservations services."""
from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator
from pydantic.alias_generators import to_camel


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class GuestBase(BaseModel):
    name: str = Field(..., max_length=100)
    username: str = Field(..., max_length=50)
    email: EmailStr


class GuestCreate(GuestBase):
    password: str = Field(..., min_length=8)


class GuestRead(GuestBase):
    id: int
    created_at: datetime

    model_config = {"from_attributes": True}


class RoomPhotoRead(BaseModel):
    photo_url: str
    photo_description: str

    model_config = {"from_attributes": True}


class RoomAvailabilityCount(BaseModel):
    id: int
    available: int


class RoomTypeAvailability(BaseModel):
    type: str
    price: int
    photos: List[RoomPhotoRead] = []
    facilities: List[str] = []
    availability: List[RoomAvailabilityCount]


class RoomSearchResult(BaseModel):
    rooms: List[RoomTypeAvailability]


class RoomSelection(BaseModel):
    id: int
    guests: int = Field(..., ge=1)


class ReservationCreate(BaseModel):
    check_in: date
    check_out: date
    rooms: List[RoomSelection] = Field(..., min_length=1)
    special_requests: str = Field(default="", max_length=2000)

    @model_validator(mode="after")
    def check_out_after_check_in(self) -> "ReservationCreate":
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReservedRoom(CamelModel):
    id: int
    type: str
    price: int
    available: int
    photos: List[RoomPhotoRead] = []
    facilities: List[str] = []


class ReservationDetail(CamelModel):
    id: str
    check_in: date
    check_out: date
    special_requests: str
    rooms: List[ReservedRoom]
    is_paid: bool


class PaymentStatus(CamelModel):
    is_paid: bool


class ReservationRead(BaseModel):
    id: str
    guest_id: int
    check_in: date
    check_out: date
    special_requests: str
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None

    model_config = {"from_attributes": True}


class FrontDeskEvent(BaseModel):
    at: Optional[datetime] = None
