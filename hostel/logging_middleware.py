"""HTTP audit logging and error translation shared by services."""
from __future__ import annotations

import logging
from pathlib import Path
from time import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import get_settings
from .exceptions import ReservationError

settings = get_settings()


def _build_logger(service_name: str) -> logging.Logger:
    logger = logging.getLogger(f"audit.{service_name}")
    if logger.handlers:
        return logger

    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    logger.setLevel(logging.INFO)
    handler = logging.FileHandler(log_dir / f"{service_name}.log")
    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return logger


def add_audit_middleware(app: FastAPI, service_name: str) -> None:
    logger = _build_logger(service_name)

    @app.middleware("http")
    async def audit_logger(request: Request, call_next):  # type: ignore[override]
        start = time()
        response = await call_next(request)
        duration_ms = (time() - start) * 1000
        client_ip: Optional[str] = None
        if request.client:
            client_ip = request.client.host
        logger.info(
            "%s %s | status=%s | client=%s | duration=%.2fms",
            request.method,
            request.url.path,
            response.status_code,
            client_ip or "unknown",
            duration_ms,
        )
        return response


def add_reservation_error_handler(app: FastAPI, service_name: str) -> None:
    """Turn reservation errors into ``{"detail": ...}`` responses with their status code."""

    logger = _build_logger(service_name)

    async def handle_reservation_error(request: Request, exc: ReservationError) -> JSONResponse:
        logger.info(
            "%s %s | rejected=%s | %s",
            request.method,
            request.url.path,
            type(exc).__name__,
            exc.message,
        )
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    app.add_exception_handler(ReservationError, handle_reservation_error)
