from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text

from guestlist.config.database import async_session_manager

router = APIRouter()

VERSION = "0.1.0"


class HealthCheckResponse(BaseModel):
    status: str
    version: str = VERSION


@router.get("/", response_model=HealthCheckResponse)
async def health_check() -> HealthCheckResponse:
    """
    Liveness check, does not touch the database.
    """
    return HealthCheckResponse(status="healthy")


@router.get("/db", response_model=HealthCheckResponse)
async def database_check() -> HealthCheckResponse:
    """
    Readiness check. An unreachable database answers 503.
    """
    async with async_session_manager(auto_commit=False) as session:
        await session.execute(text("SELECT 1"))
    return HealthCheckResponse(status="healthy")
