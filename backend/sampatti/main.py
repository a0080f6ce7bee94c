from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import sampatti.models  # noqa: F401  registers SQLModel tables

from sampatti.config import get_settings
from sampatti.db import create_db_and_tables
from sampatti.errors import AccessError
from sampatti.routers import auth, health, holdings, nominees, users
from sampatti.services.advisory import AdvisoryReporter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()

    # Best-effort write failures land here instead of failing the request
    if getattr(app.state, "advisory_reporter", None) is None:
        app.state.advisory_reporter = AdvisoryReporter()

    logger.info("Sampatti backend started")
    yield


app = FastAPI(
    title="Sampatti",
    description="Personal wealth records with nominee emergency access",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(AccessError)
async def access_error_handler(request: Request, exc: AccessError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Access error on %s: %r", request.url.path, exc)
    else:
        logger.debug("Access error on %s: %r", request.url.path, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "kind": exc.kind.value},
    )


settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        f"https://{settings.domain}",
        "http://localhost:3000",
        "http://localhost:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(health.router)
app.include_router(users.router)
app.include_router(nominees.router)
app.include_router(holdings.router)
