"""Tests for the quarterly prepayment schedule."""

import datetime
from decimal import Decimal

from gbr_reserve.engine.models import (
    PartnershipProfile,
    PartnershipType,
    PartnerTaxProfile,
)
from gbr_reserve.engine.reserves import ReserveStrategy, compute_reserves
from gbr_reserve.engine.schedule import (
    TaxType,
    build_prepayment_schedule,
    quarterly_amount,
)
from gbr_reserve.tax.year_config import TAX_YEAR_2025


def _commercial_result(two_partners: list[PartnerTaxProfile]):
    partnership = PartnershipProfile(
        monthly_profit=Decimal("5000"),
        partnership_type=PartnershipType.COMMERCIAL,
    )
    return compute_reserves(
        two_partners, partnership, ReserveStrategy.EQUITABLE, TAX_YEAR_2025
    )


class TestQuarterlyAmount:
    def test_rounds_half_up(self) -> None:
        assert quarterly_amount(Decimal("10")) == Decimal("3")
        assert quarterly_amount(Decimal("14")) == Decimal("4")
        assert quarterly_amount(Decimal("4970")) == Decimal("1243")


class TestBuildPrepaymentSchedule:
    """Tests for schedule construction."""

    def test_eight_payments_in_due_date_order(
        self, two_partners: list[PartnerTaxProfile]
    ) -> None:
        schedule = build_prepayment_schedule(_commercial_result(two_partners), 2025)

        assert len(schedule.payments) == 8
        dates = [payment.due_date for payment in schedule.payments]
        assert dates == sorted(dates)
        assert dates[0] == datetime.date(2025, 2, 15)
        assert dates[-1] == datetime.date(2025, 12, 10)

    def test_statutory_due_dates(self, two_partners: list[PartnerTaxProfile]) -> None:
        schedule = build_prepayment_schedule(_commercial_result(two_partners), 2026)

        income = [p for p in schedule.payments if p.tax_type == TaxType.INCOME_TAX]
        trade = [p for p in schedule.payments if p.tax_type == TaxType.TRADE_TAX]

        assert [(p.due_date.month, p.due_date.day) for p in income] == [
            (3, 10),
            (6, 10),
            (9, 10),
            (12, 10),
        ]
        assert [(p.due_date.month, p.due_date.day) for p in trade] == [
            (2, 15),
            (5, 15),
            (8, 15),
            (11, 15),
        ]
        assert {p.due_date.year for p in schedule.payments} == {2026}

    def test_amounts(self, two_partners: list[PartnerTaxProfile]) -> None:
        schedule = build_prepayment_schedule(_commercial_result(two_partners), 2025)

        assert schedule.annual_income_tax == Decimal("20855")
        assert schedule.annual_trade_tax == Decimal("4970")
        assert {p.amount for p in schedule.for_quarter(1)} == {
            Decimal("5214"),
            Decimal("1243"),
        }
        assert schedule.total == 4 * Decimal("5214") + 4 * Decimal("1243")

    def test_freelance_has_zero_trade_tax_payments(
        self,
        two_partners: list[PartnerTaxProfile],
        partnership: PartnershipProfile,
    ) -> None:
        result = compute_reserves(two_partners, partnership, config=TAX_YEAR_2025)
        schedule = build_prepayment_schedule(result, 2025)

        trade = [p for p in schedule.payments if p.tax_type == TaxType.TRADE_TAX]
        assert all(p.amount == 0 for p in trade)
        assert len(schedule.for_quarter(4)) == 2
