"""Reusable FastAPI dependencies for auth, database access and service wiring."""
from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader, OAuth2PasswordBearer
from sqlalchemy.orm import Session

from .allocation import BedAllocator
from .auth import decode_token
from .availability import AvailabilityEngine
from .config import get_settings
from .database import get_db
from .models import Guest
from .repository import SqlReservationRepository
from .reservations import ReservationService

settings = get_settings()
oauth_scheme = OAuth2PasswordBearer(tokenUrl="/guests/login")
service_api_key_header = APIKeyHeader(name="X-Service-Key", auto_error=False)


def get_current_guest(token: str = Depends(oauth_scheme), db: Session = Depends(get_db)) -> Guest:
    payload = decode_token(token)
    username: str | None = payload.get("sub")
    if username is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing subject in token")
    guest = db.query(Guest).filter(Guest.username == username).first()
    if not guest:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Guest not found")
    return guest


def require_service_key(api_key: str = Security(service_api_key_header)) -> None:
    if not api_key or api_key != settings.service_api_key:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid service key")


def get_reservation_service(db: Session = Depends(get_db)) -> ReservationService:
    repository = SqlReservationRepository(db)
    availability = AvailabilityEngine(repository)
    return ReservationService(repository, availability, BedAllocator(availability))
