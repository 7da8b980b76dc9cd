from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from decimal import Decimal

import pytest_asyncio
import structlog
from fastapi import APIRouter, FastAPI, HTTPException, Query
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel, Field, field_validator

from error_translator.config import Settings
from error_translator.exceptions import ConflictError, DomainError, ForbiddenError, NotFoundError
from error_translator.handlers import register_exception_handlers
from error_translator.main import app
from error_translator.middleware import RequestIDMiddleware

# Cached loggers keep the processor chain they were first used with, which
# would hide events from structlog.testing.capture_logs().
structlog.configure(cache_logger_on_first_use=False)


class UserIn(BaseModel):
    email: str = Field(min_length=3)
    name: str

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must be not blank")
        return value


class Price(BaseModel):
    amount: Decimal = Field(gt=0)


# Routes that raise one exception type each, so tests can hit every bucket over HTTP.
probe = APIRouter(prefix="/probe")


@probe.get("/items/{item_id}")
async def get_item(item_id: int, q: str, limit: int = Query(10, ge=1, le=100)) -> dict[str, object]:
    return {"item_id": item_id, "q": q, "limit": limit}


@probe.post("/users", status_code=201)
async def create_user(payload: UserIn) -> UserIn:
    return payload


@probe.get("/forbidden")
async def forbidden() -> None:
    raise ForbiddenError("Only the owner can edit this deal")


@probe.get("/permission")
async def permission() -> None:
    raise PermissionError(13, "Permission denied", "/srv/reports/q3.csv")


@probe.get("/missing")
async def missing() -> None:
    raise NotFoundError("User", 7)


@probe.get("/conflict")
async def conflict() -> None:
    raise ConflictError("Email exists, Please try again!")


@probe.get("/domain")
async def domain() -> None:
    raise DomainError("Checkout date must follow check-in date")


@probe.get("/model")
async def model() -> None:
    Price(amount=Decimal("-1"))


@probe.get("/boom")
async def boom() -> None:
    raise RuntimeError("Connection timeout, please try again")


@probe.get("/unauthorized")
async def unauthorized() -> None:
    raise HTTPException(status_code=401, detail="Token expired", headers={"WWW-Authenticate": "Bearer"})


@probe.get("/not-modified")
async def not_modified() -> None:
    raise HTTPException(status_code=304, headers={"ETag": '"v1"'})


@probe.get("/unavailable")
async def unavailable() -> None:
    raise HTTPException(status_code=503, detail="Maintenance window")


def make_probe_app(settings: Settings) -> FastAPI:
    probe_app = FastAPI()
    probe_app.add_middleware(RequestIDMiddleware)
    register_exception_handlers(probe_app, settings)
    probe_app.include_router(probe)
    return probe_app


@asynccontextmanager
async def _client_for(target: FastAPI) -> AsyncIterator[AsyncClient]:
    # ServerErrorMiddleware re-raises after sending the 500 body; keep it inside the app.
    transport = ASGITransport(app=target, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def client() -> AsyncIterator[AsyncClient]:
    """Client for the probe app with production defaults (internal errors hidden)."""
    async with _client_for(make_probe_app(Settings(expose_internal_errors=False))) as client:
        yield client


@pytest_asyncio.fixture
async def exposing_client() -> AsyncIterator[AsyncClient]:
    """Client for the probe app with expose_internal_errors turned on."""
    async with _client_for(make_probe_app(Settings(expose_internal_errors=True))) as client:
        yield client


@pytest_asyncio.fixture
async def app_client() -> AsyncIterator[AsyncClient]:
    """Client for the real application module."""
    async with _client_for(app) as client:
        yield client
