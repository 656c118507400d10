"""Error kinds raised by the reservation core."""
from fastapi import status


class ReservationError(Exception):
    """Base class for request-scoped reservation failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidReservation(ReservationError):
    """The requested reservation can not be made (duplicate rooms, not enough beds, bad dates)."""


class InvalidOperation(ReservationError):
    """A check-in or check-out was attempted out of order or on the wrong day."""


class NotFound(ReservationError):
    status_code = status.HTTP_404_NOT_FOUND


class Unauthorized(ReservationError):
    status_code = status.HTTP_403_FORBIDDEN


class StorageConflict(ReservationError):
    """The datastore refused a write because a bed was taken concurrently."""

    status_code = status.HTTP_409_CONFLICT
