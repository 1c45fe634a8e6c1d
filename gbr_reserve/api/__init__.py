"""API module exports."""

from gbr_reserve.api.deps import get_diagnostics, resolve_tax_year_config
from gbr_reserve.api.health import router as health_router
from gbr_reserve.api.reserves import router as reserves_router
from gbr_reserve.api.tax import router as tax_router

__all__ = [
    "get_diagnostics",
    "health_router",
    "reserves_router",
    "resolve_tax_year_config",
    "tax_router",
]
