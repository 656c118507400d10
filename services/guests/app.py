from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from hostel import auth
from hostel.config import get_settings
from hostel.database import Base, engine, get_db
from hostel.dependencies import get_current_guest
from hostel.logging_middleware import add_audit_middleware
from hostel.models import Guest
from hostel.rate_limit import apply_rate_limiter, limiter
from hostel.schemas import GuestCreate, GuestRead, Token

settings = get_settings()


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.run_db_migrations:
        Base.metadata.create_all(bind=engine)
    yield


def create_app() -> FastAPI:
    fastapi_app = FastAPI(title="Guests Service", version="0.1.0", lifespan=lifespan)
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    apply_rate_limiter(fastapi_app)
    add_audit_middleware(fastapi_app, "guests")
    return fastapi_app


app = create_app()


@app.get("/health", tags=["health"])
def health() -> dict[str, str]:
    return {"status": "ok", "service": "guests"}


@app.post("/guests/register", response_model=GuestRead, status_code=status.HTTP_201_CREATED)
@limiter.limit("5/minute")
def register_guest(request: Request, guest_in: GuestCreate, db: Session = Depends(get_db)) -> Guest:
    if db.query(Guest).filter((Guest.username == guest_in.username) | (Guest.email == guest_in.email)).first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username or email already exists")

    guest = Guest(
        name=guest_in.name,
        username=guest_in.username,
        email=guest_in.email,
        hashed_password=auth.get_password_hash(guest_in.password),
    )
    db.add(guest)
    db.commit()
    db.refresh(guest)
    return guest


@app.post("/guests/login", response_model=Token)
@limiter.limit("10/minute")
def login(request: Request, form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)) -> Token:
    guest = auth.authenticate_guest(db, form_data.username, form_data.password)
    if not guest:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect username or password")

    access_token = auth.create_access_token({"sub": guest.username, "guest_id": guest.id})
    return Token(access_token=access_token)


@app.get("/guests/me", response_model=GuestRead)
@limiter.limit("30/minute")
def read_me(request: Request, current_guest: Guest = Depends(get_current_guest)) -> Guest:
    return current_guest
