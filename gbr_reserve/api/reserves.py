"""Reserve calculation endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from gbr_reserve.api.deps import get_diagnostics, resolve_tax_year_config
from gbr_reserve.api.tax import (
    TaxBreakdownResponse,
    WarningResponse,
    format_amount,
)
from gbr_reserve.core.config import settings
from gbr_reserve.core.logging import get_logger
from gbr_reserve.engine.diagnostics import Diagnostics
from gbr_reserve.engine.models import (
    AggregateReserveResult,
    PartnerReserveResult,
    PartnershipProfile,
    PartnerTaxProfile,
)
from gbr_reserve.engine.reserves import ReserveStrategy, compute_reserves
from gbr_reserve.engine.schedule import PrepaymentSchedule, build_prepayment_schedule
from gbr_reserve.tax.year_config import TaxYearConfig

logger = get_logger(__name__)

router = APIRouter(prefix="/api/reserves", tags=["reserves"])


class ReserveRequest(BaseModel):
    """Partners, partnership and the strategy to apply."""

    partners: list[PartnerTaxProfile] = Field(min_length=1)
    partnership: PartnershipProfile
    strategy: ReserveStrategy = ReserveStrategy.INDIVIDUAL
    tax_year: int | None = None


class ScheduleRequest(ReserveRequest):
    year: int | None = Field(
        default=None,
        ge=1,
        le=9999,
        description="Calendar year of the due dates (default: tax year)",
    )


class PartnerReserveResponse(BaseModel):
    partner_id: str
    partner_name: str
    share: str
    monthly_profit: str
    annual_profit: str
    base_tax_amount: str
    total_tax_amount: str
    additional_tax_amount: str
    marginal_rate: str
    effective_tax_rate: str
    reserve_amount: str
    safety_amount: str
    total_reserve_amount: str
    base_zone: int
    combined_zone: int
    tax_details: TaxBreakdownResponse


class ReserveResponse(BaseModel):
    tax_year: int
    strategy: str
    total_reserve_amount: str
    total_reserve_percentage: str
    weighted_average_tax_rate: str
    annual_tax_burden: str
    trade_tax: str
    partner_reserves: list[PartnerReserveResponse]
    warnings: list[WarningResponse]


class PaymentResponse(BaseModel):
    tax_type: str
    quarter: int
    due_date: str
    amount: str


class ScheduleResponse(BaseModel):
    year: int
    annual_income_tax: str
    annual_trade_tax: str
    total: str
    payments: list[PaymentResponse]
    reserves: ReserveResponse


def _partner_response(result: PartnerReserveResult) -> PartnerReserveResponse:
    return PartnerReserveResponse(
        partner_id=result.partner_id,
        partner_name=result.partner_name,
        share=format_amount(result.share),
        monthly_profit=format_amount(result.monthly_profit),
        annual_profit=format_amount(result.annual_profit),
        base_tax_amount=format_amount(result.base_tax_amount),
        total_tax_amount=format_amount(result.total_tax_amount),
        additional_tax_amount=format_amount(result.additional_tax_amount),
        marginal_rate=format_amount(result.marginal_rate),
        effective_tax_rate=format_amount(result.effective_tax_rate),
        reserve_amount=format_amount(result.reserve_amount),
        safety_amount=format_amount(result.safety_amount),
        total_reserve_amount=format_amount(result.total_reserve_amount),
        base_zone=result.base_zone,
        combined_zone=result.combined_zone,
        tax_details=TaxBreakdownResponse.from_breakdown(result.tax_details),
    )


def _reserve_response(
    result: AggregateReserveResult, config: TaxYearConfig
) -> ReserveResponse:
    return ReserveResponse(
        tax_year=config.tax_year,
        strategy=result.strategy,
        total_reserve_amount=format_amount(result.total_reserve_amount),
        total_reserve_percentage=format_amount(result.total_reserve_percentage),
        weighted_average_tax_rate=format_amount(result.weighted_average_tax_rate),
        annual_tax_burden=format_amount(result.annual_tax_burden),
        trade_tax=format_amount(result.trade_tax),
        partner_reserves=[_partner_response(r) for r in result.partner_reserves],
        warnings=[WarningResponse.from_warning(w) for w in result.warnings],
    )


def _schedule_response(
    schedule: PrepaymentSchedule, reserves: ReserveResponse
) -> ScheduleResponse:
    return ScheduleResponse(
        year=schedule.year,
        annual_income_tax=format_amount(schedule.annual_income_tax),
        annual_trade_tax=format_amount(schedule.annual_trade_tax),
        total=format_amount(schedule.total),
        payments=[
            PaymentResponse(
                tax_type=payment.tax_type.value,
                quarter=payment.quarter,
                due_date=payment.due_date.isoformat(),
                amount=format_amount(payment.amount),
            )
            for payment in schedule.payments
        ],
        reserves=reserves,
    )


def _run(
    request: ReserveRequest, diagnostics: Diagnostics
) -> tuple[AggregateReserveResult, TaxYearConfig]:
    config = resolve_tax_year_config(request.tax_year)
    partnership = request.partnership
    if "safety_margin" not in partnership.model_fields_set:
        partnership = partnership.model_copy(
            update={"safety_margin": settings.default_safety_margin}
        )
    result = compute_reserves(
        request.partners,
        partnership,
        strategy=request.strategy,
        config=config,
        diagnostics=diagnostics,
    )
    return result, config


@router.post("", response_model=ReserveResponse)
async def calculate_reserves(
    request: ReserveRequest,
    diagnostics: Annotated[Diagnostics, Depends(get_diagnostics)],
) -> ReserveResponse:
    """Monthly reserves for every partner under the selected strategy."""
    result, config = _run(request, diagnostics)
    return _reserve_response(result, config)


@router.post("/schedule", response_model=ScheduleResponse)
async def calculate_schedule(
    request: ScheduleRequest,
    diagnostics: Annotated[Diagnostics, Depends(get_diagnostics)],
) -> ScheduleResponse:
    """Reserves plus the quarterly prepayments they imply."""
    result, config = _run(request, diagnostics)
    year = request.year if request.year is not None else config.tax_year
    schedule = build_prepayment_schedule(result, year)
    logger.info(
        "prepayment_schedule_built",
        year=year,
        payments=len(schedule.payments),
        total=schedule.total,
    )
    return _schedule_response(schedule, _reserve_response(result, config))
