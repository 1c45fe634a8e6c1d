"""Tax calculation endpoints.

Expose the income tax calculators to the UI and export services. Amounts
are returned as decimal strings; formatting stays with the caller.
"""

from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator

from gbr_reserve.api.deps import get_diagnostics, resolve_tax_year_config
from gbr_reserve.engine.calculator import (
    classify_income_zone,
    compute_differential_tax,
    compute_total_tax,
)
from gbr_reserve.engine.diagnostics import CalculationWarning, Diagnostics
from gbr_reserve.engine.models import TaxBreakdown, coerce_amount
from gbr_reserve.tax.states import FederalState
from gbr_reserve.tax.year_config import TAX_YEAR_CONFIGS

router = APIRouter(prefix="/api/tax", tags=["tax"])


def format_amount(value: Decimal) -> str:
    """Plain decimal notation, never scientific."""
    return format(value, "f")


# =============================================================================
# Request / Response Models
# =============================================================================


class TaxProfileRequest(BaseModel):
    """Filing attributes shared by the tax endpoints."""

    is_joint: bool = False
    is_church_member: bool = False
    federal_state: FederalState = FederalState.NORDRHEIN_WESTFALEN
    tax_year: int | None = None


class TotalTaxRequest(TaxProfileRequest):
    income: Decimal = Field(default=Decimal("0"))

    @field_validator("income", mode="before")
    @classmethod
    def normalize_income(cls, v: object) -> Decimal:
        return coerce_amount(v)


class DifferentialTaxRequest(TaxProfileRequest):
    base_income: Decimal = Field(default=Decimal("0"))
    increment: Decimal = Field(default=Decimal("0"))

    @field_validator("base_income", mode="before")
    @classmethod
    def normalize_base_income(cls, v: object) -> Decimal:
        return coerce_amount(v)

    @field_validator("increment", mode="before")
    @classmethod
    def normalize_increment(cls, v: object) -> Decimal:
        return coerce_amount(v, allow_negative=True)


class TaxBreakdownResponse(BaseModel):
    income_tax: str
    solidarity_surcharge: str
    church_tax: str
    total_tax: str
    effective_rate: str

    @classmethod
    def from_breakdown(cls, breakdown: TaxBreakdown) -> "TaxBreakdownResponse":
        return cls(
            income_tax=format_amount(breakdown.income_tax),
            solidarity_surcharge=format_amount(breakdown.solidarity_surcharge),
            church_tax=format_amount(breakdown.church_tax),
            total_tax=format_amount(breakdown.total_tax),
            effective_rate=format_amount(breakdown.effective_rate),
        )


class WarningResponse(BaseModel):
    code: str
    message: str
    context: dict[str, str]

    @classmethod
    def from_warning(cls, warning: CalculationWarning) -> "WarningResponse":
        return cls(code=warning.code, message=warning.message, context=warning.context)


class TotalTaxResponse(BaseModel):
    tax_year: int
    zone: int
    breakdown: TaxBreakdownResponse


class DifferentialTaxResponse(BaseModel):
    tax_year: int
    base_tax: str
    total_tax: str
    additional_tax: str
    marginal_rate: str
    rate_capped: bool
    base: TaxBreakdownResponse
    combined: TaxBreakdownResponse
    additional: TaxBreakdownResponse
    warnings: list[WarningResponse]


class TaxYearsResponse(BaseModel):
    years: list[int]
    default: int


# =============================================================================
# Endpoints
# =============================================================================


@router.get("/years", response_model=TaxYearsResponse)
async def list_tax_years() -> TaxYearsResponse:
    """List tax years with a constant table."""
    default = resolve_tax_year_config(None).tax_year
    return TaxYearsResponse(years=sorted(TAX_YEAR_CONFIGS), default=default)


@router.post("/total", response_model=TotalTaxResponse)
async def total_tax(request: TotalTaxRequest) -> TotalTaxResponse:
    """Income tax plus surcharges for one income."""
    config = resolve_tax_year_config(request.tax_year)
    breakdown = compute_total_tax(
        request.income,
        is_joint=request.is_joint,
        is_church_member=request.is_church_member,
        federal_state=request.federal_state,
        config=config,
    )
    return TotalTaxResponse(
        tax_year=config.tax_year,
        zone=classify_income_zone(request.income, config, request.is_joint),
        breakdown=TaxBreakdownResponse.from_breakdown(breakdown),
    )


@router.post("/differential", response_model=DifferentialTaxResponse)
async def differential_tax(
    request: DifferentialTaxRequest,
    diagnostics: Annotated[Diagnostics, Depends(get_diagnostics)],
) -> DifferentialTaxResponse:
    """Tax attributable to an increment on top of a base income."""
    config = resolve_tax_year_config(request.tax_year)
    result = compute_differential_tax(
        request.base_income,
        request.increment,
        is_joint=request.is_joint,
        is_church_member=request.is_church_member,
        federal_state=request.federal_state,
        config=config,
        diagnostics=diagnostics,
    )
    return DifferentialTaxResponse(
        tax_year=config.tax_year,
        base_tax=format_amount(result.base_tax),
        total_tax=format_amount(result.total_tax),
        additional_tax=format_amount(result.additional_tax),
        marginal_rate=format_amount(result.marginal_rate),
        rate_capped=result.rate_capped,
        base=TaxBreakdownResponse.from_breakdown(result.base),
        combined=TaxBreakdownResponse.from_breakdown(result.combined),
        additional=TaxBreakdownResponse.from_breakdown(result.additional),
        warnings=[WarningResponse.from_warning(w) for w in diagnostics.warnings],
    )
