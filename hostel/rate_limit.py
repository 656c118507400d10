"""Shared rate limiting utilities using SlowAPI."""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from .config import get_settings

settings = get_settings()

SEARCH_LIMIT = "60/minute"
RESERVE_LIMIT = "10/minute"
READ_LIMIT = "30/minute"
FRONT_DESK_LIMIT = "120/minute"


def guest_or_address(request: Request) -> str:
    """Key signed-in guests by bearer token and anonymous callers by address."""

    authorization = request.headers.get("Authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token:
        return f"token:{token[-32:]}"
    return get_remote_address(request)


limiter = Limiter(key_func=guest_or_address, default_limits=[settings.default_rate_limit], enabled=settings.rate_limiting_enabled)


def rate_limit_handler(_: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(status_code=429, content={"detail": f"Rate limit exceeded: {exc.detail}"})


def apply_rate_limiter(app: FastAPI) -> None:
    """Attach the limiter middleware and exception handler to an app."""

    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
