"""Input profiles and result structures for the tax reserve engine.

This module defines:
- PartnerTaxProfile / PartnershipProfile: validated, immutable inputs
- TaxBreakdown / DifferentialTaxResult: results of the tax calculators
- PartnerReserveResult / AggregateReserveResult: results of the reserve
  strategies, shared by both strategies so callers can switch freely

All monetary fields use Decimal. Inputs never carry NaN: non-finite or
missing numbers are normalized to zero on the way in, since interactive
callers routinely send half-edited values.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gbr_reserve.engine.diagnostics import CalculationWarning
from gbr_reserve.tax.states import FederalState

ZERO = Decimal("0")


def coerce_amount(value: object, *, allow_negative: bool = False) -> Decimal:
    """Convert a raw numeric input into a finite Decimal.

    Args:
        value: Number, numeric string, Decimal or None.
        allow_negative: Keep negative values instead of clamping them to zero.

    Returns:
        The value as Decimal; zero for None, NaN, infinities and garbage.

    Example:
        >>> coerce_amount(float("nan"))
        Decimal('0')
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, float) and not math.isfinite(value):
        return ZERO
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return ZERO
    if not amount.is_finite():
        return ZERO
    if amount < ZERO and not allow_negative:
        return ZERO
    return amount


class PartnershipType(str, Enum):
    """Partnership type, decides whether trade tax applies."""

    FREELANCE = "freelance"
    COMMERCIAL = "commercial"


# =============================================================================
# Input Profiles
# =============================================================================


class PartnerTaxProfile(BaseModel):
    """Tax-relevant data of one partner.

    Shares across all partners should sum to 100. The engine does not fix
    imbalanced shares inside the strategies; ``compute_reserves`` normalizes
    them once before dispatching.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()), description="Partner identifier"
    )
    name: str = Field(default="", description="Display name")
    base_income: Decimal = Field(
        default=ZERO, description="Yearly taxable income without partnership profit"
    )
    share: Decimal = Field(
        default=Decimal("100"), description="Profit share in percent (0-100)"
    )
    is_church_member: bool = Field(default=False, description="Church tax liable")
    federal_state: FederalState = Field(
        default=FederalState.NORDRHEIN_WESTFALEN,
        description="State of residence (church tax jurisdiction)",
    )
    is_joint_assessment: bool = Field(
        default=False, description="Assessed jointly with a spouse (splitting)"
    )

    @field_validator("base_income", "share", mode="before")
    @classmethod
    def normalize_amount(cls, v: object) -> Decimal:
        """Map NaN, infinities, None and negatives to zero."""
        return coerce_amount(v)

    @property
    def display_name(self) -> str:
        """Name for reports, falling back to a short id."""
        return self.name.strip() or f"Partner {self.id[:4]}"


class PartnershipProfile(BaseModel):
    """Profit and settings of the partnership (GbR) as a whole."""

    model_config = ConfigDict(frozen=True)

    monthly_profit: Decimal = Field(default=ZERO, description="Monthly profit")
    partnership_type: PartnershipType = Field(
        default=PartnershipType.FREELANCE, description="Freelance or commercial"
    )
    trade_tax_multiplier: Decimal | None = Field(
        default=None,
        description="Municipal trade tax multiplier in percent (commercial only)",
    )
    safety_margin: Decimal = Field(
        default=Decimal("0.05"),
        description="Multiplicative buffer on the reserve, typically 0-0.20",
    )

    @field_validator("monthly_profit", "safety_margin", mode="before")
    @classmethod
    def normalize_amount(cls, v: object) -> Decimal:
        """Map NaN, infinities, None and negatives to zero."""
        return coerce_amount(v)

    @field_validator("trade_tax_multiplier", mode="before")
    @classmethod
    def normalize_multiplier(cls, v: object) -> Decimal | None:
        """Keep an absent multiplier absent, sanitize a provided one."""
        if v is None:
            return None
        return coerce_amount(v)

    @property
    def annual_profit(self) -> Decimal:
        """Yearly profit of the partnership."""
        return self.monthly_profit * 12


# =============================================================================
# Tax Calculator Results
# =============================================================================


@dataclass(frozen=True)
class TaxBreakdown:
    """Income tax and surcharges for one income.

    Attributes:
        income_tax: Income tax (Einkommensteuer).
        solidarity_surcharge: Solidarity surcharge (Solidaritätszuschlag).
        church_tax: Church tax (Kirchensteuer).
        total_tax: Sum of the three components.
        effective_rate: Total tax divided by the income it was computed on.
    """

    income_tax: Decimal
    solidarity_surcharge: Decimal
    church_tax: Decimal
    total_tax: Decimal
    effective_rate: Decimal


@dataclass(frozen=True)
class DifferentialTaxResult:
    """Tax attributable to incremental (partnership) income.

    Attributes:
        base: Tax on the base income alone.
        combined: Tax on base income plus increment.
        additional: Component-wise difference ``combined - base``; its
            ``effective_rate`` is the uncapped rate on the increment.
        marginal_rate: Additional total tax per unit of increment, capped at
            the configured ceiling.
        rate_capped: Whether the ceiling was applied.
    """

    base: TaxBreakdown
    combined: TaxBreakdown
    additional: TaxBreakdown
    marginal_rate: Decimal
    rate_capped: bool = False

    @property
    def base_tax(self) -> Decimal:
        return self.base.total_tax

    @property
    def total_tax(self) -> Decimal:
        return self.combined.total_tax

    @property
    def additional_tax(self) -> Decimal:
        return self.additional.total_tax


# =============================================================================
# Reserve Results
# =============================================================================


@dataclass(frozen=True)
class PartnerReserveResult:
    """Reserve for one partner.

    Attributes:
        partner_id: Partner identifier.
        partner_name: Display name.
        share: Normalized profit share in percent.
        monthly_profit: Partner's monthly share of the partnership profit.
        annual_profit: Partner's yearly share of the partnership profit.
        base_tax_amount: Total tax on base income alone.
        total_tax_amount: Total tax on base income plus annual profit share.
        additional_tax_amount: Difference of the two.
        marginal_rate: Rate applied to the monthly profit, before the margin.
        effective_tax_rate: Rate including the safety margin.
        reserve_amount: Monthly reserve before the safety margin.
        safety_amount: Safety margin on top of ``reserve_amount``.
        total_reserve_amount: Monthly reserve including the safety margin.
        tax_details: Component-wise additional tax.
        base_zone: Bracket zone of the base income (1-based).
        combined_zone: Bracket zone of base income plus annual profit share.
    """

    partner_id: str
    partner_name: str
    share: Decimal
    monthly_profit: Decimal
    annual_profit: Decimal
    base_tax_amount: Decimal
    total_tax_amount: Decimal
    additional_tax_amount: Decimal
    marginal_rate: Decimal
    effective_tax_rate: Decimal
    reserve_amount: Decimal
    safety_amount: Decimal
    total_reserve_amount: Decimal
    tax_details: TaxBreakdown
    base_zone: int
    combined_zone: int


@dataclass(frozen=True)
class AggregateReserveResult:
    """Reserve totals for the whole partnership.

    Attributes:
        strategy: Strategy that produced the result.
        total_reserve_amount: Sum of partner reserves including margins (monthly).
        total_reserve_percentage: Total reserve as fraction of monthly profit.
        weighted_average_tax_rate: Overall rate on the partnership profit.
        annual_tax_burden: Monthly total reserve times twelve.
        trade_tax: Yearly trade tax included in the calculation.
        partner_reserves: One result per partner, in input order.
        warnings: Diagnostics raised while calculating.
    """

    strategy: str
    total_reserve_amount: Decimal
    total_reserve_percentage: Decimal
    weighted_average_tax_rate: Decimal
    annual_tax_burden: Decimal
    trade_tax: Decimal
    partner_reserves: tuple[PartnerReserveResult, ...]
    warnings: tuple[CalculationWarning, ...] = field(default_factory=tuple)
