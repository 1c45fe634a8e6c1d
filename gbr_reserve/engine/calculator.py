"""Income tax calculation functions.

This module provides pure functions for computing German income tax values:
- Bracket tax per the piecewise §32a EStG formula
- Joint assessment via the splitting method
- Solidarity surcharge with its phase-in band
- Church tax by federal state
- Differential (marginal) tax on incremental partnership income

All monetary values use Decimal. Amounts are rounded down to whole euros
where the statute rounds; the solidarity surcharge inside its phase-in band is
left unrounded. The tax table is always passed in as a ``TaxYearConfig``.
"""

from __future__ import annotations

from decimal import ROUND_FLOOR, Decimal

from gbr_reserve.engine.diagnostics import Diagnostics
from gbr_reserve.engine.models import (
    DifferentialTaxResult,
    TaxBreakdown,
    coerce_amount,
)
from gbr_reserve.tax.states import FederalState
from gbr_reserve.tax.year_config import TaxYearConfig, get_tax_year_config

ZERO = Decimal("0")
TWO = Decimal("2")


def floor_euro(amount: Decimal) -> Decimal:
    """Round down to whole euros."""
    return amount.to_integral_value(rounding=ROUND_FLOOR)


def _resolve(config: TaxYearConfig | None) -> TaxYearConfig:
    return config if config is not None else get_tax_year_config()


# =============================================================================
# Bracket Tax
# =============================================================================


def classify_income_zone(
    income: object, config: TaxYearConfig | None = None, is_joint: bool = False
) -> int:
    """Return the 1-based bracket zone an income falls into.

    An income exactly on a zone boundary belongs to the lower zone. Joint
    assessment taxes half the income, so the half is classified.

    Example:
        >>> classify_income_zone(Decimal("12096"), TAX_YEAR_2025)
        1
        >>> classify_income_zone(Decimal("30000"), TAX_YEAR_2025, is_joint=True)
        2
    """
    config = _resolve(config)
    amount = coerce_amount(income)
    if is_joint:
        amount = amount / TWO
    rounded = floor_euro(amount)
    for number, zone in enumerate(config.zones, start=1):
        if zone.upper_bound is None or rounded <= zone.upper_bound:
            return number
    return len(config.zones)


def compute_bracket_tax(income: object, config: TaxYearConfig | None = None) -> Decimal:
    """Calculate income tax for an individual per the bracket formula.

    Args:
        income: Annual taxable income. Floored to whole euros first;
            NaN and negative values count as zero.
        config: Tax year constants (defaults to the current tax year).

    Returns:
        Income tax in whole euros, never negative.

    Example:
        >>> compute_bracket_tax(Decimal("70000"), TAX_YEAR_2025)
        Decimal('18488')
    """
    config = _resolve(config)
    rounded = floor_euro(coerce_amount(income))
    zone = config.zones[classify_income_zone(rounded, config) - 1]
    return max(ZERO, floor_euro(zone.evaluate(rounded)))


def compute_joint_tax(income: object, config: TaxYearConfig | None = None) -> Decimal:
    """Calculate income tax for a jointly assessed couple (splitting method).

    Halve the income, tax the half, double the result.
    """
    half_income = coerce_amount(income) / TWO
    return compute_bracket_tax(half_income, config) * TWO


def compute_income_tax(
    income: object, is_joint: bool = False, config: TaxYearConfig | None = None
) -> Decimal:
    """Calculate income tax on the path matching the filing status."""
    if is_joint:
        return compute_joint_tax(income, config)
    return compute_bracket_tax(income, config)


# =============================================================================
# Surcharges
# =============================================================================


def compute_solidarity_surcharge(
    income_tax: object, is_joint: bool = False, config: TaxYearConfig | None = None
) -> Decimal:
    """Calculate the solidarity surcharge on an income tax amount.

    Below the exemption limit nothing is due. Inside the phase-in band the
    surcharge is the smaller of the full rate and the phase-in rate applied
    to the excess over the limit, which avoids a cliff at the limit.

    Args:
        income_tax: Income tax already computed on the matching filing path.
        is_joint: Use the joint assessment limits.
        config: Tax year constants.

    Returns:
        Solidarity surcharge; whole euros above the band, unrounded inside it.

    Example:
        >>> compute_solidarity_surcharge(Decimal("20000"), False, TAX_YEAR_2025)
        Decimal('10.00')
    """
    config = _resolve(config)
    tax = coerce_amount(income_tax)
    threshold = config.solidarity_threshold(is_joint)

    if tax <= threshold:
        return ZERO

    full_amount = tax * config.solidarity_rate

    if tax <= config.solidarity_phase_in_end(is_joint):
        reduced_amount = config.solidarity_phase_in_rate * (tax - threshold)
        return min(full_amount, reduced_amount)

    return floor_euro(full_amount)


def compute_church_tax(
    income_tax: object,
    is_church_member: bool,
    federal_state: FederalState | str = FederalState.NORDRHEIN_WESTFALEN,
    config: TaxYearConfig | None = None,
) -> Decimal:
    """Calculate church tax on an income tax amount.

    8% in Baden-Württemberg and Bayern, 9% elsewhere. Jurisdictions missing
    from the table use the default rate.
    """
    if not is_church_member:
        return ZERO
    config = _resolve(config)
    rate = config.church_tax_rate(federal_state)
    return floor_euro(coerce_amount(income_tax) * rate)


# =============================================================================
# Total and Differential Tax
# =============================================================================


def compute_total_tax(
    income: object,
    is_joint: bool = False,
    is_church_member: bool = False,
    federal_state: FederalState | str = FederalState.NORDRHEIN_WESTFALEN,
    config: TaxYearConfig | None = None,
) -> TaxBreakdown:
    """Calculate income tax plus surcharges for one income.

    Income tax, solidarity surcharge and church tax all follow the same
    filing-status path.

    Returns:
        TaxBreakdown with components, total, and effective rate.
    """
    config = _resolve(config)
    amount = coerce_amount(income)

    income_tax = compute_income_tax(amount, is_joint, config)
    solidarity = compute_solidarity_surcharge(income_tax, is_joint, config)
    church = compute_church_tax(income_tax, is_church_member, federal_state, config)
    total = income_tax + solidarity + church

    return TaxBreakdown(
        income_tax=income_tax,
        solidarity_surcharge=solidarity,
        church_tax=church,
        total_tax=total,
        effective_rate=total / amount if amount > ZERO else ZERO,
    )


def compute_differential_tax(
    base_income: object,
    increment: object,
    is_joint: bool = False,
    is_church_member: bool = False,
    federal_state: FederalState | str = FederalState.NORDRHEIN_WESTFALEN,
    config: TaxYearConfig | None = None,
    diagnostics: Diagnostics | None = None,
) -> DifferentialTaxResult:
    """Calculate the tax attributable to incremental income.

    Compares total tax on the base income with total tax on base income plus
    increment. The marginal rate is the additional total tax per euro of
    increment, zero when there is no positive increment.

    A rate above ``config.marginal_rate_ceiling`` is clamped and reported
    through diagnostics. The statutory top rate with surcharges stays well
    below the ceiling, so hitting it points at a broken tax table rather than
    a real liability.

    Args:
        base_income: Annual income without the increment.
        increment: Annual incremental (partnership) income.
        is_joint: Joint assessment (splitting).
        is_church_member: Church tax liable.
        federal_state: Church tax jurisdiction.
        config: Tax year constants.
        diagnostics: Sink for warnings and debug traces.

    Returns:
        DifferentialTaxResult with base, combined and additional breakdowns.

    Example:
        >>> result = compute_differential_tax(Decimal("40000"), Decimal("0"))
        >>> result.additional_tax
        Decimal('0')
    """
    config = _resolve(config)
    diagnostics = diagnostics or Diagnostics()
    base_amount = coerce_amount(base_income)
    increment_amount = coerce_amount(increment, allow_negative=True)
    combined_amount = max(ZERO, base_amount + increment_amount)

    base = compute_total_tax(
        base_amount, is_joint, is_church_member, federal_state, config
    )
    combined = compute_total_tax(
        combined_amount, is_joint, is_church_member, federal_state, config
    )

    additional_total = combined.total_tax - base.total_tax
    uncapped_rate = (
        additional_total / increment_amount if increment_amount > ZERO else ZERO
    )
    additional = TaxBreakdown(
        income_tax=combined.income_tax - base.income_tax,
        solidarity_surcharge=combined.solidarity_surcharge - base.solidarity_surcharge,
        church_tax=combined.church_tax - base.church_tax,
        total_tax=additional_total,
        effective_rate=uncapped_rate,
    )

    diagnostics.trace(
        "differential_tax",
        base_income=base_amount,
        increment=increment_amount,
        joint=is_joint,
        base_tax=base.total_tax,
        total_tax=combined.total_tax,
        additional_tax=additional_total,
        rate=uncapped_rate,
    )

    if increment_amount > ZERO and additional_total < ZERO:
        diagnostics.warn(
            "non_monotonic_tax",
            "Additional income lowered the total tax; check the tax table",
            base_income=base_amount,
            increment=increment_amount,
            additional_tax=additional_total,
        )

    marginal_rate = uncapped_rate
    rate_capped = False
    if uncapped_rate > config.marginal_rate_ceiling:
        diagnostics.warn(
            "marginal_rate_capped",
            "Marginal rate exceeds the sanity ceiling and was capped",
            rate=uncapped_rate,
            ceiling=config.marginal_rate_ceiling,
        )
        marginal_rate = config.marginal_rate_ceiling
        rate_capped = True

    return DifferentialTaxResult(
        base=base,
        combined=combined,
        additional=additional,
        marginal_rate=marginal_rate,
        rate_capped=rate_capped,
    )
