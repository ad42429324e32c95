"""
backend/trainerhub/main.py

Purpose:
    FastAPI application bootstrap: logging, JSON store lifecycle, middleware
    and router wiring, and exception translation for store failures.

Dependencies:
    - trainerhub.database
    - trainerhub.routers
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from trainerhub.config import settings
from trainerhub.database import (
    CorruptDataError,
    DuplicateIdError,
    UnknownCollectionError,
    connect_db,
)
from trainerhub.middleware.logging import StructuredLoggingMiddleware, setup_logging

logger = logging.getLogger("trainerhub")


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    app.state.db = connect_db()
    logger.info("TrainerHub backend started")
    yield
    logger.info("TrainerHub backend stopped")


app = FastAPI(
    title="TrainerHub",
    description="Accounts, friends, teams and turn-based battles on a JSON file store",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# Structured logging
app.add_middleware(StructuredLoggingMiddleware)

# Routers
from trainerhub.routers.auth import router as auth_router
from trainerhub.routers.user import router as user_router
from trainerhub.routers.friends import router as friends_router
from trainerhub.routers.battles import router as battles_router

app.include_router(auth_router)
app.include_router(user_router)
app.include_router(friends_router)
app.include_router(battles_router)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Return clean validation errors without leaking internal field paths."""
    errors = []
    for err in exc.errors():
        loc = err.get("loc", ())
        # Strip the "body" / "query" prefix for cleaner messages
        field = ".".join(str(l) for l in loc[1:]) if len(loc) > 1 else str(loc[-1]) if loc else "unknown"
        errors.append({"field": field, "message": err.get("msg", "Invalid value.")})
    return JSONResponse(status_code=422, content={"detail": "Validation error.", "errors": errors})


@app.exception_handler(DuplicateIdError)
async def duplicate_id_handler(request: Request, exc: DuplicateIdError):
    logger.warning("Duplicate id on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=409, content={"detail": "Duplicate entry."})


@app.exception_handler(CorruptDataError)
async def corrupt_data_handler(request: Request, exc: CorruptDataError):
    logger.error("Corrupt collection on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "An internal error occurred."})


@app.exception_handler(UnknownCollectionError)
async def unknown_collection_handler(request: Request, exc: UnknownCollectionError):
    logger.error("Unknown collection on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "An internal error occurred."})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all: log the real error, return a safe generic message."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "An internal error occurred."})


@app.get("/health")
async def health(request: Request):
    """Health check -- every registered collection must load."""
    store = request.app.state.db
    collections: dict[str, str] = {}
    for name in store.files:
        try:
            await store.read(name)
            collections[name] = "ok"
        except CorruptDataError:
            collections[name] = "corrupt"
    healthy = all(state == "ok" for state in collections.values())
    return {"status": "healthy" if healthy else "degraded", "collections": collections}
