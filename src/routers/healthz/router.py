import logging

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text

from src.config.database import async_session_manager
from src.exceptions import StoreFailure

logger = logging.getLogger(__name__)

router = APIRouter()

API_VERSION = "0.1.0"


class HealthCheckResponse(BaseModel):
    status: str
    database: str
    version: str = API_VERSION


@router.get("/", response_model=HealthCheckResponse)
async def health_check() -> HealthCheckResponse:
    """
    Health check endpoint to verify the API and its database are reachable.
    """
    try:
        async with async_session_manager(auto_commit=False) as session:
            await session.execute(text("SELECT 1"))
    except StoreFailure:
        logger.exception("Database health check failed")
        return HealthCheckResponse(status="degraded", database="unavailable")
    return HealthCheckResponse(status="healthy", database="ok")
