"""Calendar helpers shared by availability, allocation and the lifecycle service."""
from datetime import date, datetime
from typing import Union

from .exceptions import InvalidReservation

DateLike = Union[date, datetime]


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def same_day(first: DateLike, second: DateLike) -> bool:
    return _as_date(first) == _as_date(second)


def overlaps(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Return True when the half-open ranges [a_start, a_end) and [b_start, b_end) share a night."""

    return a_start < b_end and b_start < a_end


def nights(check_in: date, check_out: date) -> int:
    return (check_out - check_in).days


def validate_stay(check_in: date, check_out: date) -> None:
    if check_out <= check_in:
        raise InvalidReservation("Invalid Reservation. Check-out must be after check-in.")
