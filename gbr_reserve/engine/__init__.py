"""Tax reserve calculation engine."""

from gbr_reserve.engine.calculator import (
    classify_income_zone,
    compute_bracket_tax,
    compute_church_tax,
    compute_differential_tax,
    compute_income_tax,
    compute_joint_tax,
    compute_solidarity_surcharge,
    compute_total_tax,
)
from gbr_reserve.engine.diagnostics import CalculationWarning, Diagnostics
from gbr_reserve.engine.models import (
    AggregateReserveResult,
    DifferentialTaxResult,
    PartnerReserveResult,
    PartnershipProfile,
    PartnershipType,
    PartnerTaxProfile,
    TaxBreakdown,
)
from gbr_reserve.engine.reserves import (
    ReserveStrategy,
    compute_equitable_reserves,
    compute_individual_reserves,
    compute_reserves,
    compute_trade_tax,
    distribute_equal_shares,
    normalize_shares,
)
from gbr_reserve.engine.schedule import (
    PrepaymentSchedule,
    TaxPayment,
    TaxType,
    build_prepayment_schedule,
)

__all__ = [
    "AggregateReserveResult",
    "CalculationWarning",
    "Diagnostics",
    "DifferentialTaxResult",
    "PartnerReserveResult",
    "PartnerTaxProfile",
    "PartnershipProfile",
    "PartnershipType",
    "PrepaymentSchedule",
    "ReserveStrategy",
    "TaxBreakdown",
    "TaxPayment",
    "TaxType",
    "build_prepayment_schedule",
    "classify_income_zone",
    "compute_bracket_tax",
    "compute_church_tax",
    "compute_differential_tax",
    "compute_equitable_reserves",
    "compute_income_tax",
    "compute_individual_reserves",
    "compute_joint_tax",
    "compute_reserves",
    "compute_solidarity_surcharge",
    "compute_total_tax",
    "compute_trade_tax",
    "distribute_equal_shares",
    "normalize_shares",
]
