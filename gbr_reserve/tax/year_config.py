"""Tax year-specific constants and thresholds.

This module centralizes the law-defined values of a tax year (the §32a EStG
bracket formula, solidarity surcharge limits, church tax rates and the
simplified trade tax parameters) so that the calculation engine never
hardcodes them. A different year, or a what-if table, is supported by
supplying a different ``TaxYearConfig``.

Example:
    >>> from gbr_reserve.tax.year_config import get_tax_year_config
    >>> config = get_tax_year_config(2025)
    >>> print(f"Basic allowance: {config.basic_allowance}")
    Basic allowance: 12096
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from gbr_reserve.tax.states import FederalState

ZERO = Decimal("0")
BRACKET_STEP = Decimal("10000")


@dataclass(frozen=True)
class BracketZone:
    """One zone of the piecewise income tax formula.

    Zones with a ``floor`` are progressive: they evaluate
    ``(quadratic * y + linear) * y + constant`` with
    ``y = (income - floor) / 10000``. Zones without a floor are proportional
    and evaluate ``linear * income + constant``. A zone with all coefficients
    at zero is the basic allowance.

    Attributes:
        upper_bound: Highest income (inclusive) taxed in this zone, None for
            the open-ended top zone.
        linear: Linear coefficient.
        quadratic: Quadratic coefficient (progressive zones only).
        constant: Constant term, negative for proportional zones.
        floor: Income the normalized offset ``y`` is measured from.
    """

    upper_bound: Decimal | None
    linear: Decimal = ZERO
    quadratic: Decimal = ZERO
    constant: Decimal = ZERO
    floor: Decimal | None = None

    def evaluate(self, income: Decimal) -> Decimal:
        """Evaluate the zone formula for a whole-euro income (unrounded)."""
        if self.floor is None:
            return self.linear * income + self.constant
        y = (income - self.floor) / BRACKET_STEP
        return (self.quadratic * y + self.linear) * y + self.constant


def _default_church_tax_rates() -> dict[FederalState, Decimal]:
    rates = {state: Decimal("0.09") for state in FederalState}
    rates[FederalState.BADEN_WUERTTEMBERG] = Decimal("0.08")
    rates[FederalState.BAYERN] = Decimal("0.08")
    return rates


@dataclass(frozen=True)
class TaxYearConfig:
    """Tax year-specific constants and thresholds.

    All monetary values are Decimal for precision in tax calculations.
    This dataclass is frozen to prevent accidental modification.

    Attributes:
        tax_year: The tax year these values apply to.
        zones: Bracket zones in ascending order; the last one is open-ended.
        solidarity_rate: Full solidarity surcharge rate (5.5%).
        solidarity_phase_in_rate: Rate applied to the excess over the
            exemption limit inside the phase-in band.
        solidarity_threshold_single: Income tax exemption limit (individual).
        solidarity_threshold_joint: Income tax exemption limit (joint).
        solidarity_phase_in_end_single: Upper end of the phase-in band (individual).
        solidarity_phase_in_end_joint: Upper end of the phase-in band (joint).
        church_tax_rates: Church tax rate per federal state.
        default_church_tax_rate: Rate for jurisdictions missing from the table.
        trade_tax_allowance: Trade tax allowance for partnerships.
        trade_tax_base_rate: Trade tax base rate (Steuermesszahl).
        default_trade_tax_multiplier: Municipal multiplier (percent) used when
            a commercial partnership does not provide one.
        marginal_rate_ceiling: Sanity ceiling for computed marginal rates.
    """

    tax_year: int
    zones: tuple[BracketZone, ...]

    # Solidarity surcharge
    solidarity_threshold_single: Decimal
    solidarity_threshold_joint: Decimal
    solidarity_phase_in_end_single: Decimal
    solidarity_phase_in_end_joint: Decimal
    solidarity_rate: Decimal = Decimal("0.055")
    solidarity_phase_in_rate: Decimal = Decimal("0.20")

    # Church tax
    church_tax_rates: dict[FederalState, Decimal] = field(
        default_factory=_default_church_tax_rates
    )
    default_church_tax_rate: Decimal = Decimal("0.09")

    # Trade tax (simplified, partnerships)
    trade_tax_allowance: Decimal = Decimal("24500")
    trade_tax_base_rate: Decimal = Decimal("0.035")
    default_trade_tax_multiplier: Decimal = Decimal("400")

    marginal_rate_ceiling: Decimal = Decimal("0.55")

    def __post_init__(self) -> None:
        if not self.zones:
            raise ValueError("A tax year needs at least one bracket zone")
        if self.zones[-1].upper_bound is not None:
            raise ValueError("The last bracket zone must be open-ended")
        bounds = [zone.upper_bound for zone in self.zones[:-1]]
        if any(bound is None for bound in bounds) or bounds != sorted(bounds):
            raise ValueError("Bracket zone upper bounds must be ascending")

    @property
    def basic_allowance(self) -> Decimal:
        """Tax-free basic allowance (upper bound of the first zone)."""
        return self.zones[0].upper_bound or ZERO

    def solidarity_threshold(self, is_joint: bool) -> Decimal:
        """Exemption limit for the given filing status."""
        if is_joint:
            return self.solidarity_threshold_joint
        return self.solidarity_threshold_single

    def solidarity_phase_in_end(self, is_joint: bool) -> Decimal:
        """Upper end of the phase-in band for the given filing status."""
        if is_joint:
            return self.solidarity_phase_in_end_joint
        return self.solidarity_phase_in_end_single

    def church_tax_rate(self, federal_state: FederalState | str) -> Decimal:
        """Church tax rate for a jurisdiction, falling back to the default."""
        try:
            state = FederalState(federal_state)
        except ValueError:
            return self.default_church_tax_rate
        return self.church_tax_rates.get(state, self.default_church_tax_rate)


# 2024 Configuration - §32a EStG as amended in December 2024 (retroactive)
TAX_YEAR_2024 = TaxYearConfig(
    tax_year=2024,
    zones=(
        BracketZone(upper_bound=Decimal("11784")),
        BracketZone(
            upper_bound=Decimal("17005"),
            floor=Decimal("11784"),
            quadratic=Decimal("954.80"),
            linear=Decimal("1400"),
        ),
        BracketZone(
            upper_bound=Decimal("66760"),
            floor=Decimal("17005"),
            quadratic=Decimal("181.19"),
            linear=Decimal("2397"),
            constant=Decimal("991.21"),
        ),
        BracketZone(
            upper_bound=Decimal("277825"),
            linear=Decimal("0.42"),
            constant=Decimal("-10636.31"),
        ),
        BracketZone(
            upper_bound=None,
            linear=Decimal("0.45"),
            constant=Decimal("-18971.06"),
        ),
    ),
    solidarity_threshold_single=Decimal("18130"),
    solidarity_threshold_joint=Decimal("36260"),
    # Band ends where 20% of the excess reaches the full 5.5% amount
    solidarity_phase_in_end_single=Decimal("25007"),
    solidarity_phase_in_end_joint=Decimal("50014"),
)

# 2025 Configuration - §32a EStG (Steuerfortentwicklungsgesetz)
TAX_YEAR_2025 = TaxYearConfig(
    tax_year=2025,
    zones=(
        BracketZone(upper_bound=Decimal("12096")),
        BracketZone(
            upper_bound=Decimal("17443"),
            floor=Decimal("12096"),
            quadratic=Decimal("932.30"),
            linear=Decimal("1400"),
        ),
        BracketZone(
            upper_bound=Decimal("68480"),
            floor=Decimal("17443"),
            quadratic=Decimal("176.64"),
            linear=Decimal("2397"),
            constant=Decimal("1015.13"),
        ),
        BracketZone(
            upper_bound=Decimal("277825"),
            linear=Decimal("0.42"),
            constant=Decimal("-10911.92"),
        ),
        BracketZone(
            upper_bound=None,
            linear=Decimal("0.45"),
            constant=Decimal("-19246.67"),
        ),
    ),
    solidarity_threshold_single=Decimal("19950"),
    solidarity_threshold_joint=Decimal("39900"),
    solidarity_phase_in_end_single=Decimal("27517"),
    solidarity_phase_in_end_joint=Decimal("55034"),
)

DEFAULT_TAX_YEAR = 2025

# Registry of available tax year configurations
TAX_YEAR_CONFIGS: dict[int, TaxYearConfig] = {
    2024: TAX_YEAR_2024,
    2025: TAX_YEAR_2025,
}


def get_tax_year_config(year: int = DEFAULT_TAX_YEAR) -> TaxYearConfig:
    """Get configuration for a specific tax year.

    Args:
        year: The tax year (e.g., 2025).

    Returns:
        TaxYearConfig for the specified year.

    Raises:
        ValueError: If no configuration exists for the requested year.

    Example:
        >>> config = get_tax_year_config(2024)
        >>> print(config.solidarity_threshold_single)
        18130
    """
    if year not in TAX_YEAR_CONFIGS:
        available = sorted(TAX_YEAR_CONFIGS.keys())
        raise ValueError(
            f"No tax configuration for year {year}. Available years: {available}"
        )
    return TAX_YEAR_CONFIGS[year]
