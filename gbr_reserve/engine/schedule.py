"""Quarterly tax prepayment schedule derived from a reserve result."""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from gbr_reserve.engine.models import AggregateReserveResult

ZERO = Decimal("0")
QUARTERS = 4


class TaxType(str, Enum):
    INCOME_TAX = "income_tax"
    TRADE_TAX = "trade_tax"


# (month, day) per quarter
DUE_DATES: dict[TaxType, tuple[tuple[int, int], ...]] = {
    TaxType.INCOME_TAX: ((3, 10), (6, 10), (9, 10), (12, 10)),
    TaxType.TRADE_TAX: ((2, 15), (5, 15), (8, 15), (11, 15)),
}


@dataclass(frozen=True)
class TaxPayment:
    """One quarterly prepayment."""

    tax_type: TaxType
    year: int
    quarter: int
    due_date: datetime.date
    amount: Decimal


@dataclass(frozen=True)
class PrepaymentSchedule:
    """Prepayments of one year, ordered by due date."""

    year: int
    annual_income_tax: Decimal
    annual_trade_tax: Decimal
    payments: tuple[TaxPayment, ...]

    @property
    def total(self) -> Decimal:
        return sum((payment.amount for payment in self.payments), ZERO)

    def for_quarter(self, quarter: int) -> tuple[TaxPayment, ...]:
        return tuple(p for p in self.payments if p.quarter == quarter)


def quarterly_amount(annual: Decimal) -> Decimal:
    """A quarter of the annual amount, rounded half-up to whole euros."""
    return (annual / QUARTERS).quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def build_prepayment_schedule(
    result: AggregateReserveResult, year: int
) -> PrepaymentSchedule:
    """Split the yearly tax estimate of a reserve result into prepayments.

    The income tax estimate is the partners' combined additional tax; trade
    tax is taken from the result as is (zero for freelance partnerships and
    for the individual strategy). Each is paid in four equal instalments.

    Args:
        result: Output of a reserve strategy.
        year: Calendar year of the due dates.

    Returns:
        Schedule with eight payments sorted by due date.
    """
    annual_income_tax = sum(
        (r.additional_tax_amount for r in result.partner_reserves), ZERO
    )
    annual_by_type = {
        TaxType.INCOME_TAX: max(ZERO, annual_income_tax),
        TaxType.TRADE_TAX: max(ZERO, result.trade_tax),
    }

    payments = [
        TaxPayment(
            tax_type=tax_type,
            year=year,
            quarter=quarter,
            due_date=datetime.date(year, month, day),
            amount=quarterly_amount(annual_by_type[tax_type]),
        )
        for tax_type, dates in DUE_DATES.items()
        for quarter, (month, day) in enumerate(dates, start=1)
    ]
    payments.sort(key=lambda payment: payment.due_date)

    return PrepaymentSchedule(
        year=year,
        annual_income_tax=annual_by_type[TaxType.INCOME_TAX],
        annual_trade_tax=annual_by_type[TaxType.TRADE_TAX],
        payments=tuple(payments),
    )
