"""Health check endpoint."""

from fastapi import APIRouter
from pydantic import BaseModel

from gbr_reserve.core.config import settings

router = APIRouter(prefix="/api", tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    environment: str
    tax_year: int


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Report liveness and the tax year used when requests name none."""
    return HealthResponse(
        status="ok",
        environment=settings.environment,
        tax_year=settings.tax_year,
    )
