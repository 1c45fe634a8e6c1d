"""FastAPI dependencies for tax year resolution and calculation diagnostics."""

from fastapi import HTTPException

from gbr_reserve.core.config import settings
from gbr_reserve.engine.diagnostics import Diagnostics
from gbr_reserve.tax.year_config import TaxYearConfig, get_tax_year_config


def resolve_tax_year_config(year: int | None) -> TaxYearConfig:
    """Look up the constants for a requested tax year.

    Args:
        year: Tax year from the request, or None for the configured default.

    Returns:
        TaxYearConfig for the year.

    Raises:
        HTTPException: 422 if the year has no constant table.
    """
    try:
        return get_tax_year_config(settings.tax_year if year is None else year)
    except ValueError as exc:
        raise HTTPException(
            status_code=422,
            detail=str(exc),
        ) from exc


def get_diagnostics() -> Diagnostics:
    """Fresh diagnostics sink per request, tracing when DEBUG is set."""
    return Diagnostics(debug=settings.debug)
