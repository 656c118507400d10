from contextlib import asynccontextmanager
from datetime import date
from typing import List

from fastapi import Body, Depends, FastAPI, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from hostel.config import get_settings
from hostel.database import Base, engine
from hostel.dependencies import get_current_guest, get_reservation_service, require_service_key
from hostel.logging_middleware import add_audit_middleware, add_reservation_error_handler
from hostel.models import Guest, Reservation
from hostel.rate_limit import FRONT_DESK_LIMIT, READ_LIMIT, RESERVE_LIMIT, SEARCH_LIMIT, apply_rate_limiter, limiter
from hostel.reservations import ReservationService
from hostel.schemas import (
    FrontDeskEvent,
    PaymentStatus,
    ReservationCreate,
    ReservationDetail,
    ReservationRead,
    RoomSearchResult,
)

settings = get_settings()


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.run_db_migrations:
        Base.metadata.create_all(bind=engine)
    yield


def create_app() -> FastAPI:
    fastapi_app = FastAPI(title="Reservations Service", version="0.1.0", lifespan=lifespan)
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    apply_rate_limiter(fastapi_app)
    add_audit_middleware(fastapi_app, "reservations")
    add_reservation_error_handler(fastapi_app, "reservations")
    Instrumentator().instrument(fastapi_app).expose(fastapi_app, include_in_schema=False)
    return fastapi_app


app = create_app()


@app.get("/health", tags=["health"])
def health() -> dict[str, str]:
    return {"status": "ok", "service": "reservations"}


@app.get("/rooms/availability", response_model=RoomSearchResult)
@limiter.limit(SEARCH_LIMIT)
def search_rooms(
    request: Request,
    check_in: date = Query(...),
    check_out: date = Query(...),
    guests: int = Query(1, ge=1),
    service: ReservationService = Depends(get_reservation_service),
) -> RoomSearchResult:
    return service.find_available_rooms(check_in, check_out, guests)


@app.post("/reservations", response_model=ReservationDetail, status_code=status.HTTP_201_CREATED)
@limiter.limit(RESERVE_LIMIT)
def make_reservation(
    request: Request,
    reservation_in: ReservationCreate,
    current_guest: Guest = Depends(get_current_guest),
    service: ReservationService = Depends(get_reservation_service),
) -> ReservationDetail:
    return service.make_reservation(
        reservation_in.check_in,
        reservation_in.check_out,
        current_guest.id,
        reservation_in.rooms,
        reservation_in.special_requests,
    )


@app.get("/reservations", response_model=List[ReservationDetail])
@limiter.limit(READ_LIMIT)
def list_my_reservations(
    request: Request,
    current_guest: Guest = Depends(get_current_guest),
    service: ReservationService = Depends(get_reservation_service),
) -> List[ReservationDetail]:
    return service.list_guest_reservations(current_guest.id)


@app.get("/reservations/arrival", response_model=ReservationDetail)
@limiter.limit(READ_LIMIT)
def arrival(
    request: Request,
    day: date = Query(...),
    current_guest: Guest = Depends(get_current_guest),
    service: ReservationService = Depends(get_reservation_service),
) -> ReservationDetail:
    return service.get_arrival(current_guest.id, day)


@app.get("/reservations/{reservation_id}", response_model=ReservationDetail)
@limiter.limit(READ_LIMIT)
def reservation_details(
    request: Request,
    reservation_id: str,
    current_guest: Guest = Depends(get_current_guest),
    service: ReservationService = Depends(get_reservation_service),
) -> ReservationDetail:
    return service.get_reservation_details(reservation_id, current_guest.id)


@app.get("/reservations/{reservation_id}/payment", response_model=PaymentStatus)
@limiter.limit(READ_LIMIT)
def payment_status(
    request: Request,
    reservation_id: str,
    current_guest: Guest = Depends(get_current_guest),
    service: ReservationService = Depends(get_reservation_service),
) -> PaymentStatus:
    return PaymentStatus(is_paid=service.get_reservation_payment_status(reservation_id, current_guest.id))


@app.post(
    "/reservations/{reservation_id}/check-in",
    response_model=ReservationRead,
    dependencies=[Depends(require_service_key)],
)
@limiter.limit(FRONT_DESK_LIMIT)
def check_in(
    request: Request,
    reservation_id: str,
    event: FrontDeskEvent = Body(default_factory=FrontDeskEvent),
    service: ReservationService = Depends(get_reservation_service),
) -> Reservation:
    return service.check_in(reservation_id, event.at)


@app.post(
    "/reservations/{reservation_id}/check-out",
    response_model=ReservationRead,
    dependencies=[Depends(require_service_key)],
)
@limiter.limit(FRONT_DESK_LIMIT)
def check_out(
    request: Request,
    reservation_id: str,
    event: FrontDeskEvent = Body(default_factory=FrontDeskEvent),
    service: ReservationService = Depends(get_reservation_service),
) -> Reservation:
    return service.check_out(reservation_id, event.at)
