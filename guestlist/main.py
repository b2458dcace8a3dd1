import asyncio
import logging
from contextlib import asynccontextmanager

import sentry_sdk
from alembic import command
from alembic.config import Config
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from guestlist.carpool.router import router as carpool_router
from guestlist.config.logging import setup_logging
from guestlist.config.settings import settings
from guestlist.errors import (
    AlreadyJoinedError,
    CapacityFullError,
    ConflictError,
    GuestlistError,
    NotFoundError,
    SelfJoinForbiddenError,
    StoreUnavailableError,
    ValidationFailedError,
)
from guestlist.guests.routers import router as guests_router
from guestlist.routers.healthz.router import router as healthz_router
from guestlist.transport.router import router as transport_router

setup_logging()
logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: dict[type[GuestlistError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ValidationFailedError: 422,
    ConflictError: status.HTTP_409_CONFLICT,
    CapacityFullError: status.HTTP_409_CONFLICT,
    AlreadyJoinedError: status.HTTP_409_CONFLICT,
    SelfJoinForbiddenError: status.HTTP_403_FORBIDDEN,
    StoreUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


async def run_migrations():
    alembic_cfg = Config("alembic.ini")
    await asyncio.to_thread(command.upgrade, alembic_cfg, "head")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.RUN_MIGRATIONS_ON_STARTUP:
        await run_migrations()
    yield


if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        profiles_sample_rate=settings.SENTRY_PROFILES_SAMPLE_RATE,
        integrations=[
            StarletteIntegration(transaction_style="endpoint"),
            FastApiIntegration(transaction_style="endpoint"),
        ],
        send_default_pii=False,
    )

app = FastAPI(
    title="Guestlist API",
    description="Guest RSVPs, shared transport seats and carpools",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,  # type: ignore[arg-type]
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(GuestlistError)
async def guestlist_error_handler(request: Request, exc: GuestlistError) -> JSONResponse:
    status_code = ERROR_STATUS_CODES.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc), "code": exc.code})


app.include_router(healthz_router, prefix="/healthz", tags=["Healthz"])
app.include_router(guests_router)
app.include_router(transport_router)
app.include_router(carpool_router)


@app.get("/", tags=["Root"])
async def root():
    return {"message": "Welcome to the Guestlist API"}
