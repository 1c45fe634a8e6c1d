"""Reserve strategies for partnership profits.

Two strategies turn the differential tax of each partner into a monthly
reserve:

- INDIVIDUAL: every partner reserves at their own marginal rate. Partners
  with different base incomes end up with different rates.
- EQUITABLE: incremental tax of all partners (plus trade tax for commercial
  partnerships) is pooled into one collective rate applied to every share.

Both share the differential tax calculator and return the same
``AggregateReserveResult`` shape. Shares are normalized once in
``compute_reserves``; the strategy functions expect normalized shares.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from decimal import Decimal
from enum import Enum

from gbr_reserve.core.logging import get_logger, strategy_ctx
from gbr_reserve.engine.calculator import (
    classify_income_zone,
    compute_differential_tax,
)
from gbr_reserve.engine.diagnostics import Diagnostics
from gbr_reserve.engine.models import (
    AggregateReserveResult,
    DifferentialTaxResult,
    PartnershipProfile,
    PartnershipType,
    PartnerReserveResult,
    PartnerTaxProfile,
    coerce_amount,
)
from gbr_reserve.tax.year_config import TaxYearConfig, get_tax_year_config

logger = get_logger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")
MONTHS_PER_YEAR = 12
SHARE_TOLERANCE = Decimal("0.01")


class ReserveStrategy(str, Enum):
    """How the partnership's tax burden is distributed across partners."""

    INDIVIDUAL = "individual"
    EQUITABLE = "equitable"


# =============================================================================
# Shares
# =============================================================================


def normalize_shares(
    partners: Sequence[PartnerTaxProfile],
) -> list[PartnerTaxProfile]:
    """Rescale profit shares so they sum to 100.

    Shares within 0.01 of 100 in total are returned untouched. A zero total
    cannot be rescaled and is returned unchanged as well.

    Args:
        partners: Partner profiles in display order.

    Returns:
        New list of profiles; rescaled profiles are copies.

    Example:
        >>> shares = [p.share for p in normalize_shares([a_30, b_30])]
        >>> shares
        [Decimal('50'), Decimal('50')]
    """
    total = sum((partner.share for partner in partners), ZERO)
    if total == ZERO or abs(total - HUNDRED) <= SHARE_TOLERANCE:
        return list(partners)

    return [
        partner.model_copy(update={"share": partner.share / total * HUNDRED})
        for partner in partners
    ]


def distribute_equal_shares(
    count: int, *, remainder_to_last: bool = False
) -> list[Decimal]:
    """Split 100 percent into ``count`` whole-number shares.

    Args:
        count: Number of partners.
        remainder_to_last: Give the remainder of the integer division to the
            last partner (the one just added) instead of the first. After a
            partner is removed the first partner takes it.

    Returns:
        Shares summing to 100, e.g. 34/33/33 or 33/33/34 for three partners.
    """
    if count <= 0:
        return []
    base, remainder = divmod(100, count)
    shares = [Decimal(base)] * count
    shares[-1 if remainder_to_last else 0] += remainder
    return shares


# =============================================================================
# Trade Tax
# =============================================================================


def compute_trade_tax(
    annual_profit: object,
    multiplier: object = None,
    config: TaxYearConfig | None = None,
) -> Decimal:
    """Calculate simplified yearly trade tax for a commercial partnership.

    ``max(0, profit - allowance) * base rate * multiplier / 100``

    Args:
        annual_profit: Yearly partnership profit.
        multiplier: Municipal multiplier in percent; the configured default
            (400) when omitted.
        config: Tax year constants.

    Returns:
        Yearly trade tax, unrounded.
    """
    config = config if config is not None else get_tax_year_config()
    rate = (
        config.default_trade_tax_multiplier
        if multiplier is None
        else coerce_amount(multiplier)
    )
    taxable = max(ZERO, coerce_amount(annual_profit) - config.trade_tax_allowance)
    return taxable * config.trade_tax_base_rate * rate / HUNDRED


# =============================================================================
# Strategies
# =============================================================================


def _partner_profit(
    partner: PartnerTaxProfile, partnership: PartnershipProfile
) -> tuple[Decimal, Decimal]:
    monthly = partnership.monthly_profit * partner.share / HUNDRED
    return monthly, monthly * MONTHS_PER_YEAR


def _differential(
    partner: PartnerTaxProfile,
    annual_profit: Decimal,
    config: TaxYearConfig,
    diagnostics: Diagnostics,
) -> DifferentialTaxResult:
    return compute_differential_tax(
        partner.base_income,
        annual_profit,
        is_joint=partner.is_joint_assessment,
        is_church_member=partner.is_church_member,
        federal_state=partner.federal_state,
        config=config,
        diagnostics=diagnostics,
    )


def _partner_result(
    partner: PartnerTaxProfile,
    monthly_profit: Decimal,
    annual_profit: Decimal,
    differential: DifferentialTaxResult,
    rate: Decimal,
    safety_margin: Decimal,
    config: TaxYearConfig,
) -> PartnerReserveResult:
    reserve = monthly_profit * rate
    safety = reserve * safety_margin
    return PartnerReserveResult(
        partner_id=partner.id,
        partner_name=partner.display_name,
        share=partner.share,
        monthly_profit=monthly_profit,
        annual_profit=annual_profit,
        base_tax_amount=differential.base_tax,
        total_tax_amount=differential.total_tax,
        additional_tax_amount=differential.additional_tax,
        marginal_rate=rate,
        effective_tax_rate=rate * (1 + safety_margin),
        reserve_amount=reserve,
        safety_amount=safety,
        total_reserve_amount=reserve + safety,
        tax_details=differential.additional,
        base_zone=classify_income_zone(
            partner.base_income, config, partner.is_joint_assessment
        ),
        combined_zone=classify_income_zone(
            partner.base_income + annual_profit, config, partner.is_joint_assessment
        ),
    )


def _aggregate(
    strategy: ReserveStrategy,
    partnership: PartnershipProfile,
    partner_reserves: list[PartnerReserveResult],
    weighted_rate: Decimal,
    trade_tax: Decimal,
    diagnostics: Diagnostics,
) -> AggregateReserveResult:
    total = sum((r.total_reserve_amount for r in partner_reserves), ZERO)
    monthly_profit = partnership.monthly_profit
    return AggregateReserveResult(
        strategy=strategy.value,
        total_reserve_amount=total,
        total_reserve_percentage=total / monthly_profit
        if monthly_profit > ZERO
        else ZERO,
        weighted_average_tax_rate=weighted_rate,
        annual_tax_burden=total * MONTHS_PER_YEAR,
        trade_tax=trade_tax,
        partner_reserves=tuple(partner_reserves),
        warnings=diagnostics.warnings,
    )


def compute_individual_reserves(
    partners: Sequence[PartnerTaxProfile],
    partnership: PartnershipProfile,
    config: TaxYearConfig | None = None,
    diagnostics: Diagnostics | None = None,
) -> AggregateReserveResult:
    """Reserve for every partner at their own marginal rate.

    Each partner's annual profit share is stacked on their base income and
    the resulting differential rate is applied to their monthly share. Rates
    are never equalized: a partner starting in a low bracket can face a
    steeper rate than one starting higher.

    Trade tax is not part of this strategy.

    Args:
        partners: Partner profiles with normalized shares.
        partnership: Partnership profit and settings.
        config: Tax year constants.
        diagnostics: Sink for warnings and traces.

    Returns:
        AggregateReserveResult; ``weighted_average_tax_rate`` is the total
        additional tax divided by the total annual profit share.
    """
    config = config if config is not None else get_tax_year_config()
    diagnostics = diagnostics or Diagnostics()

    reserves: list[PartnerReserveResult] = []
    total_additional = ZERO
    total_income = ZERO

    for partner in partners:
        monthly, annual = _partner_profit(partner, partnership)
        differential = _differential(partner, annual, config, diagnostics)
        total_additional += differential.additional_tax
        total_income += annual
        reserves.append(
            _partner_result(
                partner,
                monthly,
                annual,
                differential,
                differential.marginal_rate,
                partnership.safety_margin,
                config,
            )
        )

    weighted_rate = total_additional / total_income if total_income > ZERO else ZERO
    return _aggregate(
        ReserveStrategy.INDIVIDUAL,
        partnership,
        reserves,
        weighted_rate,
        ZERO,
        diagnostics,
    )


def compute_equitable_reserves(
    partners: Sequence[PartnerTaxProfile],
    partnership: PartnershipProfile,
    config: TaxYearConfig | None = None,
    diagnostics: Diagnostics | None = None,
) -> AggregateReserveResult:
    """Reserve for every partner at one collective rate.

    The collective rate is the pooled additional tax of all partners,
    plus trade tax for commercial partnerships, divided by the pooled annual
    profit shares. Trade tax only enters the numerator and is not attributed
    to any partner.

    Args:
        partners: Partner profiles with normalized shares.
        partnership: Partnership profit and settings.
        config: Tax year constants.
        diagnostics: Sink for warnings and traces.

    Returns:
        AggregateReserveResult where every partner reports the same rate.
    """
    config = config if config is not None else get_tax_year_config()
    diagnostics = diagnostics or Diagnostics()

    rows: list[tuple[PartnerTaxProfile, Decimal, Decimal, DifferentialTaxResult]] = []
    total_additional = ZERO
    total_income = ZERO

    for partner in partners:
        monthly, annual = _partner_profit(partner, partnership)
        differential = _differential(partner, annual, config, diagnostics)
        total_additional += differential.additional_tax
        total_income += annual
        rows.append((partner, monthly, annual, differential))

    trade_tax = ZERO
    if partnership.partnership_type == PartnershipType.COMMERCIAL:
        trade_tax = compute_trade_tax(
            partnership.annual_profit, partnership.trade_tax_multiplier, config
        )

    collective_rate = (
        (total_additional + trade_tax) / total_income
        if total_income > ZERO
        else ZERO
    )
    diagnostics.trace(
        "collective_rate",
        additional_tax=total_additional,
        trade_tax=trade_tax,
        income=total_income,
        rate=collective_rate,
    )
    if collective_rate > config.marginal_rate_ceiling:
        diagnostics.warn(
            "collective_rate_capped",
            "Collective rate exceeds the sanity ceiling and was capped",
            rate=collective_rate,
            ceiling=config.marginal_rate_ceiling,
        )
        collective_rate = config.marginal_rate_ceiling

    reserves = [
        _partner_result(
            partner,
            monthly,
            annual,
            differential,
            collective_rate,
            partnership.safety_margin,
            config,
        )
        for partner, monthly, annual, differential in rows
    ]
    return _aggregate(
        ReserveStrategy.EQUITABLE,
        partnership,
        reserves,
        collective_rate,
        trade_tax,
        diagnostics,
    )


StrategyFn = Callable[
    [Sequence[PartnerTaxProfile], PartnershipProfile, TaxYearConfig, Diagnostics],
    AggregateReserveResult,
]

STRATEGIES: dict[ReserveStrategy, StrategyFn] = {
    ReserveStrategy.INDIVIDUAL: compute_individual_reserves,
    ReserveStrategy.EQUITABLE: compute_equitable_reserves,
}


def compute_reserves(
    partners: Sequence[PartnerTaxProfile],
    partnership: PartnershipProfile,
    strategy: ReserveStrategy | str = ReserveStrategy.INDIVIDUAL,
    config: TaxYearConfig | None = None,
    diagnostics: Diagnostics | None = None,
) -> AggregateReserveResult:
    """Normalize shares and run the selected reserve strategy.

    This is the single entry point callers should use; share normalization
    happens here and nowhere else.

    Raises:
        ValueError: If ``strategy`` is not a known strategy name.
    """
    selected = ReserveStrategy(strategy)
    config = config if config is not None else get_tax_year_config()
    diagnostics = diagnostics or Diagnostics()

    token = strategy_ctx.set(selected.value)
    try:
        result = STRATEGIES[selected](
            normalize_shares(partners), partnership, config, diagnostics
        )
        logger.info(
            "reserves_calculated",
            tax_year=config.tax_year,
            partners=len(result.partner_reserves),
            total_reserve=result.total_reserve_amount,
            warnings=len(result.warnings),
        )
        return result
    finally:
        strategy_ctx.reset(token)
