"""Tax year-specific configurations and jurisdictions."""

from gbr_reserve.tax.states import FederalState
from gbr_reserve.tax.year_config import (
    DEFAULT_TAX_YEAR,
    TAX_YEAR_2024,
    TAX_YEAR_2025,
    TAX_YEAR_CONFIGS,
    BracketZone,
    TaxYearConfig,
    get_tax_year_config,
)

__all__ = [
    "BracketZone",
    "FederalState",
    "TaxYearConfig",
    "DEFAULT_TAX_YEAR",
    "TAX_YEAR_2024",
    "TAX_YEAR_2025",
    "TAX_YEAR_CONFIGS",
    "get_tax_year_config",
]
